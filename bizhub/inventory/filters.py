import django_filters
from datetime import timedelta
from django.conf import settings
from django.db.models import Q, F
from django.utils import timezone
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Query-string filters for the owner's product list"""
    search = django_filters.CharFilter(method='filter_search')
    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    shelf = django_filters.CharFilter(field_name='shelf', lookup_expr='iexact')
    supplier = django_filters.CharFilter(field_name='supplier', lookup_expr='icontains')
    low_stock = django_filters.BooleanFilter(method='filter_low_stock')
    out_of_stock = django_filters.BooleanFilter(method='filter_out_of_stock')
    in_stock = django_filters.BooleanFilter(method='filter_in_stock')
    expiring = django_filters.BooleanFilter(method='filter_expiring')
    expired = django_filters.BooleanFilter(method='filter_expired')
    ordering = django_filters.OrderingFilter(
        fields=(
            ('name', 'name'),
            ('price', 'price'),
            ('quantity', 'quantity'),
            ('expiry_date', 'expiry_date'),
            ('created_at', 'created_at'),
            ('updated_at', 'updated_at'),
        )
    )

    class Meta:
        model = Product
        fields = ['search', 'category', 'shelf', 'supplier', 'low_stock', 'out_of_stock',
                  'in_stock', 'expiring', 'expired']

    def filter_search(self, queryset, name, value):
        """Match name, SKU, description or supplier"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(sku__icontains=value) |
            Q(description__icontains=value) |
            Q(supplier__icontains=value)
        )

    def filter_low_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__lte=F('low_stock_threshold'))
        return queryset

    def filter_out_of_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__lte=0)
        return queryset

    def filter_in_stock(self, queryset, name, value):
        if value:
            return queryset.filter(quantity__gt=0)
        return queryset

    def filter_expiring(self, queryset, name, value):
        if value:
            today = timezone.localdate()
            horizon = today + timedelta(days=settings.BIZHUB_EXPIRY_WARNING_DAYS)
            return queryset.filter(expiry_date__gte=today, expiry_date__lte=horizon)
        return queryset

    def filter_expired(self, queryset, name, value):
        if value:
            return queryset.filter(expiry_date__lt=timezone.localdate())
        return queryset
