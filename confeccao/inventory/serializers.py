import re
from rest_framework import serializers
from .models import Fabric

HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}){1,2}$')


class FabricSerializer(serializers.ModelSerializer):
    class Meta:
        model = Fabric
        fields = ['id', 'name', 'color', 'color_hex', 'stock_rolls', 'notes', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        return value.strip()

    def validate_color(self, value):
        return value.strip()

    def validate_color_hex(self, value):
        if not HEX_COLOR_RE.match(value):
            raise serializers.ValidationError("Color must be a hex value such as #0000FF")
        return value

    def validate(self, attrs):
        name = attrs.get('name', getattr(self.instance, 'name', ''))
        color = attrs.get('color', getattr(self.instance, 'color', ''))
        queryset = Fabric.objects.filter(name__iexact=name, color__iexact=color)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A fabric with this name and color already exists")
        return attrs


class StockEntrySerializer(serializers.Serializer):
    """Manual stock entry; the amount is parsed by the ledger so '2,5' is accepted"""
    amount = serializers.CharField()
