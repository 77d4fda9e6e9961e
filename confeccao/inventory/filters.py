import django_filters
from .models import Fabric


class FabricFilter(django_filters.FilterSet):
    """Fabric list / stock report filters"""
    name = django_filters.CharFilter(field_name='name', lookup_expr='icontains')
    color = django_filters.CharFilter(field_name='color', lookup_expr='icontains')
    min_stock = django_filters.NumberFilter(field_name='stock_rolls', lookup_expr='gte')

    class Meta:
        model = Fabric
        fields = ['name', 'color', 'min_stock']
