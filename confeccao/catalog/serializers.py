import re
from rest_framework import serializers
from .models import ProductReference

HEX_COLOR_RE = re.compile(r'^#(?:[0-9a-fA-F]{3}){1,2}$')


class ProductColorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    hex = serializers.CharField(max_length=7, default='#000000')

    def validate_name(self, value):
        return value.strip()

    def validate_hex(self, value):
        if not HEX_COLOR_RE.match(value):
            raise serializers.ValidationError("Color must be a hex value such as #0000FF")
        return value


class ProductReferenceSerializer(serializers.ModelSerializer):
    default_colors = ProductColorSerializer(many=True, required=False)
    estimated_pieces_per_roll = serializers.IntegerField(min_value=1, required=False, allow_null=True)

    class Meta:
        model = ProductReference
        fields = ['id', 'code', 'description', 'default_fabric', 'default_colors', 'default_grid', 'estimated_pieces_per_roll']

    def validate_code(self, value):
        code = value.strip().upper()
        queryset = ProductReference.objects.filter(code=code)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A product with this code already exists")
        return code

    def validate_default_colors(self, value):
        return [dict(color) for color in value]
