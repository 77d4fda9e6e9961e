import logging
from datetime import datetime
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.http import HttpResponse

from confeccao.inventory.ledger import fabrics
from confeccao.inventory.views import filtered_fabrics
from confeccao.production.models import ProductionOrder, STATUS_CHOICES
from confeccao.production.serializers import ProductionOrderSerializer
from confeccao.workforce.models import Seamstress
from . import aggregates, insights, printing

logger = logging.getLogger('confeccao.reports')


def parse_date_param(request, name):
    value = request.query_params.get(name, None)
    if not value:
        return None
    return datetime.strptime(value, '%Y-%m-%d').date()


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Stage counts, finished pieces, seamstress ranking and production charts"""
    orders = ProductionOrder.objects.all()
    seamstresses = Seamstress.objects.all().order_by('name')
    return Response(aggregates.dashboard(orders, seamstresses))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def orders_report(request):
    """
    Filtered order list with totals.

    Query params: date_from, date_to (YYYY-MM-DD, inclusive), reference
    (code or description), status, fabric, seamstress (id).
    """
    try:
        date_from = parse_date_param(request, 'date_from')
        date_to = parse_date_param(request, 'date_to')
    except ValueError:
        return Response({'error': 'Dates must use the format YYYY-MM-DD'}, status=status.HTTP_400_BAD_REQUEST)

    order_status = request.query_params.get('status', None)
    if order_status and order_status not in dict(STATUS_CHOICES):
        return Response({'error': f'Unknown status {order_status}'}, status=status.HTTP_400_BAD_REQUEST)

    filtered = aggregates.filter_orders(
        ProductionOrder.objects.all().order_by('-created_at'),
        date_from=date_from,
        date_to=date_to,
        reference=request.query_params.get('reference', '').strip(),
        status=order_status,
        fabric=request.query_params.get('fabric', None),
        seamstress_id=request.query_params.get('seamstress', None),
    )
    data = aggregates.report_totals(filtered)
    data['orders'] = ProductionOrderSerializer(filtered, many=True).data
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def production_insights(request):
    """AI-written summary of the production floor"""
    snapshot = insights.build_snapshot(
        ProductionOrder.objects.all().order_by('-created_at'),
        Seamstress.objects.all().order_by('name'),
    )
    summary = insights.summarize(snapshot)
    logger.info(f"User {request.user.username} requested production insights (available={summary.available})")
    return Response({'available': summary.available, 'text': summary.text})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def print_planned_orders(request):
    """Printable cutting sheet of every planned order"""
    html = printing.render_planned_orders(ProductionOrder.objects.all(), fabrics.select_all())
    if html is None:
        return Response({'error': 'There are no planned orders to print.'}, status=status.HTTP_404_NOT_FOUND)
    return HttpResponse(html, content_type='text/html; charset=utf-8')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def print_fabric_stock(request):
    """Printable fabric stock report, same filters as the fabric list"""
    html = printing.render_fabric_stock(filtered_fabrics(request))
    return HttpResponse(html, content_type='text/html; charset=utf-8')
