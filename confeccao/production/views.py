import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import DatabaseError
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404

from confeccao.core.utils import create_audit_log
from . import services
from .lifecycle import LifecycleError, IllegalTransition, SplitNotFound, piece_count
from .models import ProductionOrder, STATUS_CHOICES
from .serializers import (
    ProductionOrderSerializer, ProductionOrderWriteSerializer,
    CutConfirmationSerializer, DistributionSerializer,
)

logger = logging.getLogger('confeccao.production')


def lifecycle_error_response(error):
    if isinstance(error, SplitNotFound):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, IllegalTransition):
        return Response({'error': str(error)}, status=status.HTTP_409_CONFLICT)
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


def database_error_response(action, order_id, error):
    logger.error(f"Error while trying to {action} order {order_id}: {str(error)}", exc_info=True)
    return Response({'error': f'Error while trying to {action} the order'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def audit_order(request, action, order, changes):
    create_audit_log(
        request=request,
        action=action,
        model_name='ProductionOrder',
        object_id=str(order.pk),
        object_name=order.reference_code,
        object_reference=f'#{order.pk}',
        changes=changes
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (by stage, with search) or plan a new one"""
    if request.method == 'GET':
        queryset = ProductionOrder.objects.all()
        stage = request.query_params.get('status', None)
        if stage:
            queryset = queryset.filter(status=stage)
        search = request.query_params.get('search', '').strip()
        if search:
            queryset = queryset.filter(
                Q(reference_code__icontains=search) |
                Q(description__icontains=search) |
                Q(id__icontains=search)
            )
        serializer = ProductionOrderSerializer(queryset.order_by('-created_at'), many=True)
        return Response(serializer.data)

    serializer = ProductionOrderWriteSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        order = services.create_order(serializer.order_fields())
    except DatabaseError as e:
        return database_error_response('save', serializer.validated_data.get('id', 'new'), e)

    logger.info(f"User {request.user.username} planned order #{order.id}")
    audit_order(request, 'create', order, {
        'reference_code': order.reference_code,
        'fabric': order.fabric,
        'estimated_pieces': sum(item['estimated_pieces'] for item in order.items),
    })
    return Response(ProductionOrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, edit (until the cut is confirmed) or delete an order"""
    order = get_object_or_404(ProductionOrder, pk=pk)

    if request.method == 'GET':
        return Response(ProductionOrderSerializer(order).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductionOrderWriteSerializer(order, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        fields = serializer.order_fields()
        fields.pop('id', None)
        try:
            updated = services.edit_order(order, fields)
        except LifecycleError as e:
            return lifecycle_error_response(e)
        except DatabaseError as e:
            return database_error_response('save', pk, e)
        audit_order(request, 'update', updated, {
            field: str(value) for field, value in fields.items() if field not in ('lines', 'pieces_per_roll')
        })
        return Response(ProductionOrderSerializer(updated).data)

    try:
        services.delete_order(order)
    except DatabaseError as e:
        return database_error_response('delete', pk, e)
    audit_order(request, 'delete', order, {'status': order.status, 'reference_code': order.reference_code})
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_next_id(request):
    """Order number the next planned order will get"""
    return Response({'next_id': services.suggest_order_id()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_stage_counts(request):
    """Number of orders in each stage"""
    counts = {code: 0 for code, _ in STATUS_CHOICES}
    for row in ProductionOrder.objects.order_by().values('status').annotate(total=Count('id')):
        counts[row['status']] = row['total']
    return Response(counts)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_move_to_cutting(request, pk):
    """Send a planned order to the cutting room and take its rolls out of fabric stock"""
    order = get_object_or_404(ProductionOrder, pk=pk)
    try:
        result = services.move_to_cutting(order)
    except LifecycleError as e:
        return lifecycle_error_response(e)
    except DatabaseError as e:
        return database_error_response('move to cutting', pk, e)

    for deduction in result.deductions:
        create_audit_log(
            request=request,
            action='stock_cut',
            model_name='Fabric',
            object_id=str(deduction.fabric_id),
            object_name=f'{deduction.fabric_name} - {deduction.color}',
            object_reference=f'#{order.pk}',
            changes={
                'rolls_used': str(deduction.rolls_used),
                'stock_rolls': {'old': str(deduction.stock_before), 'new': str(deduction.stock_after)},
            }
        )
    audit_order(request, 'order_cutting', result.order, {
        'status': {'old': order.status, 'new': result.order.status},
        'unmatched_colors': result.unmatched_colors,
    })

    data = dict(ProductionOrderSerializer(result.order).data)
    data['stock_deductions'] = [
        {
            'fabric_id': d.fabric_id,
            'fabric': d.fabric_name,
            'color': d.color,
            'rolls_used': d.rolls_used,
            'stock_rolls': d.stock_after,
        }
        for d in result.deductions
    ]
    data['unmatched_colors'] = result.unmatched_colors
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_confirm_cut(request, pk):
    """Record the actual cut per color and size"""
    order = get_object_or_404(ProductionOrder, pk=pk)
    serializer = CutConfirmationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    items = [dict(entry) for entry in serializer.validated_data.get('items', [])]
    try:
        updated = services.confirm_cut(order, items)
    except LifecycleError as e:
        return lifecycle_error_response(e)
    except DatabaseError as e:
        return database_error_response('confirm the cut of', pk, e)

    audit_order(request, 'order_cut_confirm', updated, {
        'estimated_pieces': sum(item['estimated_pieces'] for item in updated.items),
        'actual_pieces': piece_count(updated.items),
    })
    return Response(ProductionOrderSerializer(updated).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_distribute(request, pk):
    """Hand pieces from the cutting room to a seamstress"""
    order = get_object_or_404(ProductionOrder, pk=pk)
    serializer = DistributionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    try:
        updated, split = services.distribute(
            order,
            data['seamstress'],
            data['mode'],
            sizes=data.get('sizes'),
            items=[dict(entry) for entry in data.get('items', [])],
        )
    except LifecycleError as e:
        return lifecycle_error_response(e)
    except DatabaseError as e:
        return database_error_response('distribute', pk, e)

    audit_order(request, 'order_distribute', updated, {
        'split_id': split['id'],
        'seamstress': split['seamstress_name'],
        'mode': data['mode'],
        'pieces': piece_count(split['items']),
    })
    return Response(ProductionOrderSerializer(updated).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_finish_split(request, pk, split_id):
    """Mark a seamstress packet as sewn; finishes the order once nothing is left"""
    order = get_object_or_404(ProductionOrder, pk=pk)
    try:
        updated = services.finish_split(order, split_id)
    except LifecycleError as e:
        return lifecycle_error_response(e)
    except DatabaseError as e:
        return database_error_response('finish a packet of', pk, e)

    audit_order(request, 'split_finish', updated, {'split_id': split_id, 'order_status': updated.status})
    if updated.status != order.status:
        audit_order(request, 'order_finish', updated, {'finished_at': updated.finished_at.isoformat()})
    return Response(ProductionOrderSerializer(updated).data)
