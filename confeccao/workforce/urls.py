from django.urls import path
from .views import seamstress_list_create, seamstress_detail

urlpatterns = [
    path('seamstresses/', seamstress_list_create, name='seamstress-list-create'),
    path('seamstresses/<int:pk>/', seamstress_detail, name='seamstress-detail'),
]
