import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import DatabaseError
from django.shortcuts import get_object_or_404
from django.utils import timezone

from confeccao.core.utils import create_audit_log
from .filters import FabricFilter
from .ledger import fabrics, record_stock_entry, StockInputError
from .models import Fabric
from .serializers import FabricSerializer, StockEntrySerializer

logger = logging.getLogger('confeccao.inventory')


def filtered_fabrics(request):
    """Fabrics after the name / color / min_stock query filters"""
    filterset = FabricFilter(request.query_params, queryset=Fabric.objects.all().order_by('name', 'color'))
    return filterset.qs


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def fabric_list_create(request):
    """List fabric stock (filterable) or register a new fabric"""
    if request.method == 'GET':
        serializer = FabricSerializer(filtered_fabrics(request), many=True)
        return Response(serializer.data)

    serializer = FabricSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        fabric = fabrics.insert(serializer.validated_data).record
    except DatabaseError as e:
        logger.error(f"Error saving fabric: {str(e)}", exc_info=True)
        return Response({'error': 'Error saving fabric'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"User {request.user.username} registered fabric {fabric.name}/{fabric.color} with {fabric.stock_rolls} rolls")
    create_audit_log(
        request=request,
        action='create',
        model_name='Fabric',
        object_id=str(fabric.id),
        object_name=str(fabric),
        changes={'stock_rolls': str(fabric.stock_rolls)}
    )
    return Response(FabricSerializer(fabric).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def fabric_detail(request, pk):
    """Retrieve or edit a fabric record"""
    fabric = get_object_or_404(Fabric, pk=pk)

    if request.method == 'GET':
        return Response(FabricSerializer(fabric).data)

    serializer = FabricSerializer(fabric, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    payload = dict(serializer.validated_data, updated_at=timezone.now())
    try:
        updated = fabrics.update(pk, payload).record
    except DatabaseError as e:
        logger.error(f"Error saving fabric {pk}: {str(e)}", exc_info=True)
        return Response({'error': 'Error saving fabric'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    changes = {
        field: {'old': str(getattr(fabric, field)), 'new': str(getattr(updated, field))}
        for field in serializer.validated_data
        if getattr(fabric, field) != getattr(updated, field)
    }
    if changes:
        create_audit_log(
            request=request,
            action='update',
            model_name='Fabric',
            object_id=str(pk),
            object_name=str(updated),
            changes=changes
        )
    return Response(FabricSerializer(updated).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def fabric_add_stock(request, pk):
    """Manual stock entry: add rolls to a fabric"""
    fabric = get_object_or_404(Fabric, pk=pk)
    serializer = StockEntrySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        updated = record_stock_entry(fabric, serializer.validated_data['amount'])
    except StockInputError as e:
        return Response({'amount': [str(e)]}, status=status.HTTP_400_BAD_REQUEST)
    except DatabaseError as e:
        logger.error(f"Error adding stock to fabric {pk}: {str(e)}", exc_info=True)
        return Response({'error': 'Error updating stock'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    create_audit_log(
        request=request,
        action='stock_add',
        model_name='Fabric',
        object_id=str(pk),
        object_name=str(updated),
        changes={
            'stock_rolls': {'old': str(fabric.stock_rolls), 'new': str(updated.stock_rolls)},
            'amount': serializer.validated_data['amount'],
        }
    )
    data = dict(FabricSerializer(updated).data)
    data['message'] = f"Stock updated. New balance: {updated.stock_rolls} rolls."
    return Response(data)
