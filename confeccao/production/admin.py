from django.contrib import admin
from .models import ProductionOrder


@admin.register(ProductionOrder)
class ProductionOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'reference_code', 'description', 'fabric', 'grid_type', 'status', 'created_at', 'finished_at']
    list_filter = ['status', 'grid_type', 'fabric']
    search_fields = ['id', 'reference_code', 'description']
    readonly_fields = ['status', 'items', 'active_cutting_items', 'splits', 'updated_at', 'finished_at']
    ordering = ['-created_at']
