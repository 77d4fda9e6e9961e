from django.contrib import admin
from .models import ProductReference


@admin.register(ProductReference)
class ProductReferenceAdmin(admin.ModelAdmin):
    list_display = ['code', 'description', 'default_fabric', 'default_grid', 'estimated_pieces_per_roll']
    list_filter = ['default_grid']
    search_fields = ['code', 'description', 'default_fabric']
    ordering = ['code']
