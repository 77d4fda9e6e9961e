import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import DatabaseError
from django.shortcuts import get_object_or_404

from confeccao.core.store import TableStore
from confeccao.core.utils import create_audit_log
from .models import Seamstress
from .serializers import SeamstressSerializer

logger = logging.getLogger('confeccao.workforce')

seamstresses = TableStore(Seamstress)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def seamstress_list_create(request):
    """List all seamstresses or register a new one"""
    if request.method == 'GET':
        filters = {}
        active = request.query_params.get('active', None)
        if active is not None:
            filters['active'] = active.lower() in ('true', '1', 'yes')
        serializer = SeamstressSerializer(seamstresses.select_all(ordering=['name'], **filters), many=True)
        return Response(serializer.data)

    serializer = SeamstressSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        seamstress = seamstresses.insert(serializer.validated_data).record
    except DatabaseError as e:
        logger.error(f"Error saving seamstress: {str(e)}", exc_info=True)
        return Response({'error': 'Error saving seamstress'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"User {request.user.username} registered seamstress {seamstress.name}")
    create_audit_log(
        request=request,
        action='create',
        model_name='Seamstress',
        object_id=str(seamstress.id),
        object_name=seamstress.name,
        changes=serializer.data
    )
    return Response(SeamstressSerializer(seamstress).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def seamstress_detail(request, pk):
    """Retrieve or update a seamstress. There is no delete: set active=false instead."""
    seamstress = get_object_or_404(Seamstress, pk=pk)

    if request.method == 'GET':
        return Response(SeamstressSerializer(seamstress).data)

    serializer = SeamstressSerializer(seamstress, data=request.data, partial=request.method == 'PATCH')
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        updated = seamstresses.update(pk, serializer.validated_data).record
    except DatabaseError as e:
        logger.error(f"Error saving seamstress {pk}: {str(e)}", exc_info=True)
        return Response({'error': 'Error saving seamstress'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    changes = {
        field: {'old': getattr(seamstress, field), 'new': getattr(updated, field)}
        for field in serializer.validated_data
        if getattr(seamstress, field) != getattr(updated, field)
    }
    if changes:
        create_audit_log(
            request=request,
            action='update',
            model_name='Seamstress',
            object_id=str(pk),
            object_name=updated.name,
            changes=changes
        )
    return Response(SeamstressSerializer(updated).data)
