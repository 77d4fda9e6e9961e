from django.utils import timezone
from rest_framework import serializers

from confeccao.catalog.models import GRID_CHOICES, ProductReference
from confeccao.catalog.serializers import HEX_COLOR_RE
from confeccao.reports.aggregates import is_split_late, split_deadline, split_pieces
from confeccao.workforce.models import Seamstress
from . import lifecycle
from .models import ProductionOrder


class OrderLineSerializer(serializers.Serializer):
    """One color line of the order form"""
    color = serializers.CharField(max_length=100)
    color_hex = serializers.CharField(max_length=7, required=False, allow_blank=True, default=lifecycle.DEFAULT_COLOR_HEX)
    rolls_used = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, default=0)
    pieces_per_size = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    def validate_color(self, value):
        return value.strip()

    def validate_color_hex(self, value):
        if value and not HEX_COLOR_RE.match(value):
            raise serializers.ValidationError("Color must be a hex value such as #0000FF")
        return value


class ProductionOrderWriteSerializer(serializers.Serializer):
    """Create / edit payload; reference defaults fill whatever the caller leaves out"""
    id = serializers.CharField(max_length=20, required=False)
    reference = serializers.PrimaryKeyRelatedField(queryset=ProductReference.objects.all(), required=False, allow_null=True)
    reference_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    fabric = serializers.CharField(max_length=200, required=False, allow_blank=True)
    grid_type = serializers.ChoiceField(choices=GRID_CHOICES, required=False)
    sizes = serializers.ListField(child=serializers.CharField(max_length=10), required=False)
    items = OrderLineSerializer(many=True, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    created_at = serializers.DateTimeField(required=False)

    def validate_id(self, value):
        value = value.strip()
        if self.instance is not None:
            if value != self.instance.pk:
                raise serializers.ValidationError("The order number cannot be changed")
            return value
        if ProductionOrder.objects.filter(pk=value).exists():
            raise serializers.ValidationError(f"Order #{value} already exists")
        return value

    def validate_sizes(self, value):
        return lifecycle.sort_sizes({size.strip().upper() for size in value if size.strip()})

    def validate(self, attrs):
        reference = attrs.get('reference')
        if self.instance is None:
            if reference is not None:
                attrs.setdefault('reference_code', reference.code)
                attrs.setdefault('description', reference.description)
                if not attrs.get('fabric'):
                    attrs['fabric'] = reference.default_fabric
                attrs.setdefault('grid_type', reference.default_grid)
            attrs.setdefault('grid_type', 'STANDARD')
            errors = {}
            if not attrs.get('reference_code'):
                errors['reference_code'] = ["Select a product reference or enter a reference code"]
            if not attrs.get('fabric'):
                errors['fabric'] = ["Enter the fabric"]
            if not attrs.get('items'):
                errors['items'] = ["Add at least one color"]
            if errors:
                raise serializers.ValidationError(errors)
        elif reference is not None:
            attrs.setdefault('reference_code', reference.code)
            attrs.setdefault('description', reference.description)

        grid_type = attrs.get('grid_type') or getattr(self.instance, 'grid_type', 'STANDARD')
        if grid_type == 'CUSTOM' and 'sizes' not in attrs and (self.instance is None or 'grid_type' in attrs):
            raise serializers.ValidationError({'sizes': ["Select the sizes of a custom grid"]})
        if 'sizes' in attrs and grid_type == 'CUSTOM' and not attrs['sizes']:
            raise serializers.ValidationError({'sizes': ["Select at least one size"]})
        return attrs

    def order_fields(self):
        """validated_data in the shape the lifecycle expects"""
        data = dict(self.validated_data)
        fields = {}
        for name in ('id', 'reference_code', 'description', 'fabric', 'grid_type', 'sizes', 'notes', 'created_at'):
            if name in data:
                fields[name] = data[name]
        reference = data.get('reference', getattr(self.instance, 'reference', None))
        if 'reference' in data:
            fields['reference_id'] = reference.pk if reference else None
        if 'items' in data:
            fields['lines'] = [dict(line) for line in data['items']]
            fields['pieces_per_roll'] = reference.estimated_pieces_per_roll if reference else None
        return fields


class ProductionOrderSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    splits = serializers.SerializerMethodField()
    sizes = serializers.SerializerMethodField()
    total_estimated = serializers.SerializerMethodField()
    total_cut = serializers.SerializerMethodField()
    cutting_stock = serializers.SerializerMethodField()
    total_rolls = serializers.SerializerMethodField()
    cut_confirmed = serializers.SerializerMethodField()

    class Meta:
        model = ProductionOrder
        fields = [
            'id', 'reference', 'reference_code', 'description', 'fabric', 'grid_type', 'sizes', 'notes',
            'items', 'active_cutting_items', 'splits', 'status', 'status_display', 'cut_confirmed',
            'total_estimated', 'total_cut', 'cutting_stock', 'total_rolls',
            'created_at', 'updated_at', 'finished_at',
        ]
        read_only_fields = fields

    def get_splits(self, obj):
        now = timezone.now()
        splits = []
        for split in obj.splits or []:
            deadline = split_deadline(split)
            splits.append(dict(
                split,
                pieces=split_pieces(split),
                deadline=deadline.isoformat() if deadline else None,
                is_late=is_split_late(split, now),
            ))
        return splits

    def get_sizes(self, obj):
        return lifecycle.order_sizes({'grid_type': obj.grid_type, 'items': obj.items})

    def get_total_estimated(self, obj):
        return sum(int(item.get('estimated_pieces') or 0) for item in obj.items or [])

    def get_total_cut(self, obj):
        return lifecycle.piece_count(obj.items)

    def get_cutting_stock(self, obj):
        return lifecycle.piece_count(obj.active_cutting_items)

    def get_total_rolls(self, obj):
        return float(lifecycle.rolls_count(obj.items))

    def get_cut_confirmed(self, obj):
        return lifecycle.is_cut_confirmed({'active_cutting_items': obj.active_cutting_items})


class SizeCountSerializer(serializers.Serializer):
    color = serializers.CharField(max_length=100)
    sizes = serializers.DictField(child=serializers.IntegerField(min_value=0))


class CutConfirmationSerializer(serializers.Serializer):
    """Actual cut per color; colors left out keep their estimated sizes"""
    items = SizeCountSerializer(many=True, required=False)


class DistributionSerializer(serializers.Serializer):
    seamstress = serializers.PrimaryKeyRelatedField(queryset=Seamstress.objects.all())
    mode = serializers.ChoiceField(choices=lifecycle.DISTRIBUTION_MODES, default=lifecycle.FULL)
    sizes = serializers.ListField(child=serializers.CharField(max_length=10), required=False)
    items = SizeCountSerializer(many=True, required=False)

    def validate_sizes(self, value):
        return lifecycle.sort_sizes({size.strip().upper() for size in value if size.strip()})

    def validate(self, attrs):
        if attrs['mode'] == lifecycle.BY_SIZE and not attrs.get('sizes'):
            raise serializers.ValidationError({'sizes': ["Select at least one size"]})
        if attrs['mode'] == lifecycle.CUSTOM and not attrs.get('items'):
            raise serializers.ValidationError({'items': ["List the pieces to send"]})
        return attrs
