from django.urls import path
from .views import fabric_list_create, fabric_detail, fabric_add_stock

urlpatterns = [
    path('fabrics/', fabric_list_create, name='fabric-list-create'),
    path('fabrics/<int:pk>/', fabric_detail, name='fabric-detail'),
    path('fabrics/<int:pk>/add-stock/', fabric_add_stock, name='fabric-add-stock'),
]
