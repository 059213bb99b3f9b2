from django.urls import path
from .views import (
    cart_list_create, cart_detail, cart_items, cart_item_detail, cart_hold, cart_unhold, cart_checkout,
    sale_list_create, sale_detail, sale_payments, sale_cancel, sale_return,
)

urlpatterns = [
    # Cart endpoints
    path('sales/carts/', cart_list_create, name='cart-list-create'),
    path('sales/carts/<int:pk>/', cart_detail, name='cart-detail'),
    path('sales/carts/<int:pk>/items/', cart_items, name='cart-items'),
    path('sales/carts/<int:pk>/items/<int:item_id>/', cart_item_detail, name='cart-item-detail'),
    path('sales/carts/<int:pk>/hold/', cart_hold, name='cart-hold'),
    path('sales/carts/<int:pk>/unhold/', cart_unhold, name='cart-unhold'),
    path('sales/carts/<int:pk>/checkout/', cart_checkout, name='cart-checkout'),

    # Sale endpoints
    path('sales/', sale_list_create, name='sale-list-create'),
    path('sales/<int:pk>/', sale_detail, name='sale-detail'),
    path('sales/<int:pk>/payments/', sale_payments, name='sale-payments'),
    path('sales/<int:pk>/cancel/', sale_cancel, name='sale-cancel'),
    path('sales/<int:pk>/return/', sale_return, name='sale-return'),
]
