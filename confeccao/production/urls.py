from django.urls import path
from . import views

urlpatterns = [
    path('orders/', views.order_list_create, name='order-list-create'),
    path('orders/next-id/', views.order_next_id, name='order-next-id'),
    path('orders/stage-counts/', views.order_stage_counts, name='order-stage-counts'),
    path('orders/<str:pk>/', views.order_detail, name='order-detail'),
    path('orders/<str:pk>/move-to-cutting/', views.order_move_to_cutting, name='order-move-to-cutting'),
    path('orders/<str:pk>/confirm-cut/', views.order_confirm_cut, name='order-confirm-cut'),
    path('orders/<str:pk>/distribute/', views.order_distribute, name='order-distribute'),
    path('orders/<str:pk>/splits/<str:split_id>/finish/', views.order_finish_split, name='order-finish-split'),
]
