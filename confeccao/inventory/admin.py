from django.contrib import admin
from .models import Fabric


@admin.register(Fabric)
class FabricAdmin(admin.ModelAdmin):
    list_display = ['name', 'color', 'stock_rolls', 'notes', 'updated_at']
    list_filter = ['name', 'updated_at']
    search_fields = ['name', 'color', 'notes']
    ordering = ['name', 'color']
    readonly_fields = ['created_at', 'updated_at']
