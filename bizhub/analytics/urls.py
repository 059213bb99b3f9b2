from django.urls import path
from .views import inventory_analytics, sales_summary, top_products, dashboard

urlpatterns = [
    path('analytics/inventory/', inventory_analytics, name='analytics-inventory'),
    path('analytics/sales-summary/', sales_summary, name='analytics-sales-summary'),
    path('analytics/top-products/', top_products, name='analytics-top-products'),
    path('analytics/dashboard/', dashboard, name='analytics-dashboard'),
]
