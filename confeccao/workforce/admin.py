from django.contrib import admin
from .models import Seamstress


@admin.register(Seamstress)
class SeamstressAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'specialty', 'city', 'active']
    list_filter = ['active', 'city']
    search_fields = ['name', 'phone', 'specialty']
    ordering = ['name']

    def has_delete_permission(self, request, obj=None):
        # Seamstresses are deactivated, never deleted
        return False
