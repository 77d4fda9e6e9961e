from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'first_name', 'last_name', 'phone', 'is_active', 'is_staff']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Contato', {'fields': ('phone',)}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'object_reference', 'object_name', 'user']
    list_filter = ['action', 'model_name']
    search_fields = ['object_reference', 'object_name', 'object_id']
    readonly_fields = [field.name for field in AuditLog._meta.fields]
    date_hierarchy = 'created_at'
