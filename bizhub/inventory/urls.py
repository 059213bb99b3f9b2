from django.urls import path
from .views import (
    product_list_create, product_detail, product_batch_upsert, product_adjust_stock,
    product_adjustments, product_expiring, category_list, shelf_list,
)

urlpatterns = [
    # Product endpoints
    path('inventory/products/', product_list_create, name='product-list-create'),
    path('inventory/products/batch-upsert/', product_batch_upsert, name='product-batch-upsert'),
    path('inventory/products/expiring/', product_expiring, name='product-expiring'),
    path('inventory/products/<int:pk>/', product_detail, name='product-detail'),
    path('inventory/products/<int:pk>/adjust-stock/', product_adjust_stock, name='product-adjust-stock'),
    path('inventory/products/<int:pk>/adjustments/', product_adjustments, name='product-adjustments'),

    # Grouping endpoints
    path('inventory/categories/', category_list, name='category-list'),
    path('inventory/shelves/', shelf_list, name='shelf-list'),
]
