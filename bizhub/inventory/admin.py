from django.contrib import admin
from .models import Product, StockAdjustment


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'owner', 'category', 'price', 'cost', 'quantity', 'shelf', 'expiry_date']
    list_filter = ['category', 'shelf', 'expiry_date']
    search_fields = ['name', 'sku', 'supplier', 'owner__username']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['product', 'adjustment_type', 'reason', 'quantity', 'quantity_before', 'quantity_after', 'reference', 'created_at']
    list_filter = ['adjustment_type', 'reason', 'created_at']
    search_fields = ['product__name', 'product__sku', 'reference']
    ordering = ['-created_at']
    readonly_fields = ['created_at']
