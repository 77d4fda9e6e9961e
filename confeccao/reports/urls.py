from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard, name='reports-dashboard'),
    path('reports/orders/', views.orders_report, name='reports-orders'),
    path('reports/insights/', views.production_insights, name='reports-insights'),
    path('reports/print/planned-orders/', views.print_planned_orders, name='print-planned-orders'),
    path('reports/print/fabric-stock/', views.print_fabric_stock, name='print-fabric-stock'),
]
