"""
URL configuration for the confeccao project.

Every app exposes its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Kavin's Confecção - Admin"
admin.site.site_title = "Kavin's Confecção"
admin.site.index_title = "Gestão de Produção"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('confeccao.core.urls')),
    path('api/v1/', include('confeccao.catalog.urls')),
    path('api/v1/', include('confeccao.workforce.urls')),
    path('api/v1/', include('confeccao.inventory.urls')),
    path('api/v1/', include('confeccao.production.urls')),
    path('api/v1/', include('confeccao.reports.urls')),
]
