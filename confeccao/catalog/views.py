import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db import DatabaseError
from django.http import Http404

from confeccao.core.store import TableStore
from confeccao.core.utils import create_audit_log
from .models import ProductReference
from .serializers import ProductReferenceSerializer

logger = logging.getLogger('confeccao.catalog')

products = TableStore(ProductReference)


def dropped_fields_warning(dropped_fields):
    labels = ', '.join(
        f"'{ProductReference._meta.get_field(name).verbose_name}'" for name in dropped_fields
    )
    return f"Product saved, but {labels} was not stored because the column does not exist in the database."


def get_product_or_404(pk):
    try:
        return products.get(pk)
    except ProductReference.DoesNotExist:
        raise Http404(f"Product {pk} not found")


def product_response(result, status_code=status.HTTP_200_OK):
    data = dict(ProductReferenceSerializer(result.record).data)
    if result.dropped_fields:
        data['warning'] = dropped_fields_warning(result.dropped_fields)
    return Response(data, status=status_code)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List all product references or create a new one"""
    if request.method == 'GET':
        queryset = products.select_all(ordering=['code'])
        search = request.query_params.get('search', '').strip().lower()
        if search:
            queryset = [
                p for p in queryset
                if search in p.code.lower() or search in p.description.lower()
            ]
        serializer = ProductReferenceSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = ProductReferenceSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        result = products.insert(serializer.validated_data)
    except DatabaseError as e:
        logger.error(f"Error saving product: {str(e)}", exc_info=True)
        return Response({'error': f'Error saving product: {str(e)}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    product = result.record
    logger.info(f"User {request.user.username} created product {product.code}")
    create_audit_log(
        request=request,
        action='create',
        model_name='ProductReference',
        object_id=str(product.id),
        object_name=product.code,
        changes={'code': product.code, 'dropped_fields': result.dropped_fields}
    )
    return product_response(result, status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product reference"""
    product = get_product_or_404(pk)

    if request.method == 'GET':
        serializer = ProductReferenceSerializer(product)
        return Response(serializer.data)

    if request.method in ('PUT', 'PATCH'):
        serializer = ProductReferenceSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        old_data = {
            'code': product.code,
            'description': product.description,
            'default_fabric': product.default_fabric,
        }
        try:
            result = products.update(pk, serializer.validated_data)
        except DatabaseError as e:
            logger.error(f"Error saving product {pk}: {str(e)}", exc_info=True)
            return Response({'error': f'Error saving product: {str(e)}'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        updated = result.record
        changes = {
            k: {'old': old_data[k], 'new': getattr(updated, k)}
            for k in old_data if old_data[k] != getattr(updated, k)
        }
        if changes or result.dropped_fields:
            changes['dropped_fields'] = result.dropped_fields
            create_audit_log(
                request=request,
                action='update',
                model_name='ProductReference',
                object_id=str(pk),
                object_name=updated.code,
                changes=changes
            )
        return product_response(result)

    # DELETE - orders keep their own copy of code/description
    try:
        products.delete(pk)
    except DatabaseError as e:
        logger.error(f"Error deleting product {pk}: {str(e)}", exc_info=True)
        return Response({'error': 'Error deleting product'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    create_audit_log(
        request=request,
        action='delete',
        model_name='ProductReference',
        object_id=str(pk),
        object_name=product.code,
        changes={'code': product.code, 'description': product.description}
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def fabric_names(request):
    """Distinct default fabric names across the catalog, sorted"""
    names = {p.default_fabric.strip() for p in products.select_all() if p.default_fabric and p.default_fabric.strip()}
    return Response(sorted(names))
