from django.contrib import admin
from .models import Cart, CartItem, Sale, SaleItem, Payment


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ['cart_number', 'owner', 'customer_name', 'status', 'payment_method', 'created_at']
    list_filter = ['status', 'payment_method']
    search_fields = ['cart_number', 'customer_name', 'customer_phone']
    inlines = [CartItemInline]


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ['product', 'product_name', 'product_sku', 'quantity', 'cost_price', 'selling_price', 'discount', 'tax', 'total_price']


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'owner', 'customer_name', 'grand_total', 'profit', 'payment_status', 'status', 'sale_date']
    list_filter = ['status', 'payment_status', 'payment_method', 'sale_date']
    search_fields = ['invoice_number', 'customer_name', 'customer_phone']
    ordering = ['-sale_date']
    inlines = [SaleItemInline, PaymentInline]
