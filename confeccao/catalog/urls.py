from django.urls import path
from .views import product_list_create, product_detail, fabric_names

urlpatterns = [
    path('products/', product_list_create, name='product-list-create'),
    path('products/<int:pk>/', product_detail, name='product-detail'),
    path('products/fabric-names/', fabric_names, name='product-fabric-names'),
]
