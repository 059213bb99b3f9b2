"""
Derived analytics over an owner's products and sales

Results are plain dicts of floats/ints/strings so they can be cached and
returned as JSON directly.
"""
import logging
from collections import Counter
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Avg, Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import TruncDate

from bizhub.core.cache_utils import cached_for_owner
from bizhub.inventory.models import Product
from bizhub.sales.models import Sale, SaleItem

logger = logging.getLogger(__name__)

VALUE_RANGES = [
    ('0-500', Decimal('0'), Decimal('500')),
    ('500-1000', Decimal('500'), Decimal('1000')),
    ('1000-5000', Decimal('1000'), Decimal('5000')),
    ('5000-10000', Decimal('5000'), Decimal('10000')),
    ('10000+', Decimal('10000'), None),
]

PRODUCT_FIELDS = ['id', 'name', 'category', 'shelf', 'price', 'cost', 'quantity', 'expiry_date', 'low_stock_threshold']


def short_name(name, length=15):
    return f"{name[:length]}..." if len(name) > length else name


def percentage(part, whole):
    if not whole:
        return '0.0'
    return f"{part / whole * 100:.1f}"


def build_inventory_analytics(products, today, expiry_warning_days=15):
    """
    Inventory breakdowns from a list of product dicts (keys as in PRODUCT_FIELDS).

    Kept free of ORM access so it can be reused on any product listing.
    """
    total = len(products)
    zero = Decimal('0')

    categories = Counter((p['category'] or 'Uncategorized') for p in products)
    category_data = [
        {'name': name, 'count': count, 'percentage': percentage(count, total)}
        for name, count in categories.most_common()
    ]

    in_stock = sorted((p for p in products if p['quantity'] > 0), key=lambda p: p['quantity'], reverse=True)
    stock_data = [
        {'name': short_name(p['name']), 'quantity': p['quantity'], 'value': float(p['price'] * p['quantity'])}
        for p in in_stock[:10]
    ]

    priced = [p for p in products if p['price'] and p['cost']]
    profit_rows = []
    for p in priced:
        unit_profit = p['price'] - p['cost']
        profit_rows.append({
            'name': short_name(p['name']),
            'profit': float(unit_profit * p['quantity']),
            'profit_margin': percentage(unit_profit, p['price']),
            'total_value': float(p['price'] * p['quantity']),
        })
    profit_data = sorted(profit_rows, key=lambda row: row['profit'], reverse=True)[:10]

    value_data = []
    for label, low, high in VALUE_RANGES:
        count = sum(
            1 for p in products
            if p['price'] * p['quantity'] >= low and (high is None or p['price'] * p['quantity'] < high)
        )
        if count:
            value_data.append({'range': label, 'count': count})

    expiry_counts = Counter()
    expiring_items = 0
    for p in products:
        if not p['expiry_date']:
            expiry_counts['No expiry'] += 1
            continue
        days = (p['expiry_date'] - today).days
        if 0 <= days <= expiry_warning_days:
            expiring_items += 1
        if days < 0:
            expiry_counts['Expired'] += 1
        elif days <= 7:
            expiry_counts['Expiring in 7 days'] += 1
        elif days <= 30:
            expiry_counts['Expiring in 30 days'] += 1
        elif days <= 90:
            expiry_counts['Expiring in 90 days'] += 1
    expiry_data = [
        {'name': name, 'count': expiry_counts[name]}
        for name in ('Expired', 'Expiring in 7 days', 'Expiring in 30 days', 'Expiring in 90 days', 'No expiry')
    ]

    shelves = Counter((p['shelf'] or 'Default') for p in products)
    shelf_data = [{'name': name, 'count': count} for name, count in shelves.most_common(8)]

    summary = {
        'total_products': total,
        'total_value': float(sum((p['price'] * p['quantity'] for p in products), zero)),
        'total_profit': float(sum(((p['price'] - p['cost']) * p['quantity'] for p in products), zero)),
        'total_stock': sum(p['quantity'] for p in products),
        'low_stock_items': sum(1 for p in products if p['quantity'] <= p['low_stock_threshold']),
        'expiring_items': expiring_items,
        'categories': len(categories),
    }

    return {
        'category_data': category_data,
        'stock_data': stock_data,
        'profit_data': profit_data,
        'value_data': value_data,
        'expiry_data': expiry_data,
        'shelf_data': shelf_data,
        'summary': summary,
    }


@cached_for_owner("inventory_analytics")
def get_inventory_analytics(owner, today):
    products = list(Product.objects.filter(owner=owner).values(*PRODUCT_FIELDS))
    return build_inventory_analytics(products, today, settings.BIZHUB_EXPIRY_WARNING_DAYS)


def completed_sales(owner, date_from, date_to):
    return Sale.objects.filter(
        owner=owner,
        status='completed',
        sale_date__date__gte=date_from,
        sale_date__date__lte=date_to,
    )


@cached_for_owner("sales_summary")
def get_sales_summary(owner, date_from, date_to):
    sales = completed_sales(owner, date_from, date_to)
    totals = sales.aggregate(
        revenue=Sum('grand_total'),
        profit=Sum('profit'),
        count=Count('id'),
        avg=Avg('grand_total'),
    )
    items_sold = SaleItem.objects.filter(sale__in=sales).aggregate(total=Sum('quantity'))['total'] or 0

    revenue = totals['revenue'] or Decimal('0')
    profit = totals['profit'] or Decimal('0')

    daily = (
        sales.annotate(date=TruncDate('sale_date'))
        .values('date')
        .annotate(revenue=Sum('grand_total'), profit=Sum('profit'), count=Count('id'))
        .order_by('date')
    )

    return {
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'summary': {
            'total_revenue': float(revenue),
            'total_sales': totals['count'],
            'total_profit': float(profit),
            'total_items_sold': items_sold,
            'avg_order_value': float(totals['avg'] or 0),
            'profit_margin': float(round(profit / revenue * 100, 2)) if revenue else 0.0,
        },
        'daily_breakdown': [
            {
                'date': row['date'].isoformat(),
                'revenue': float(row['revenue'] or 0),
                'profit': float(row['profit'] or 0),
                'count': row['count'],
            }
            for row in daily
        ],
    }


@cached_for_owner("top_products")
def get_top_products(owner, date_from, date_to, limit=10):
    line_profit = ExpressionWrapper(
        F('total_price') - F('cost_price') * F('quantity'),
        output_field=DecimalField(max_digits=16, decimal_places=2)
    )
    rows = (
        SaleItem.objects.filter(sale__in=completed_sales(owner, date_from, date_to))
        .values('product_id', 'product_sku')
        .annotate(
            total_quantity=Sum('quantity'),
            total_revenue=Sum('total_price'),
            total_profit=Sum(line_profit),
            order_count=Count('sale', distinct=True),
        )
        .order_by('-total_revenue')[:limit]
    )
    rows = list(rows)
    names = dict(
        SaleItem.objects.filter(product_sku__in=[row['product_sku'] for row in rows], sale__owner=owner)
        .order_by('id')
        .values_list('product_sku', 'product_name')
    )
    return [
        {
            'product_id': row['product_id'],
            'product_name': names.get(row['product_sku'], row['product_sku']),
            'product_sku': row['product_sku'],
            'total_quantity': row['total_quantity'] or 0,
            'total_revenue': float(row['total_revenue'] or 0),
            'total_profit': float(row['total_profit'] or 0),
            'order_count': row['order_count'],
        }
        for row in rows
    ]


@cached_for_owner("dashboard_kpis")
def get_dashboard(owner, today):
    month_start = today.replace(day=1)

    def period_totals(date_from):
        totals = completed_sales(owner, date_from, today).aggregate(
            revenue=Sum('grand_total'), profit=Sum('profit'), count=Count('id')
        )
        return {
            'revenue': float(totals['revenue'] or 0),
            'profit': float(totals['profit'] or 0),
            'sales': totals['count'],
        }

    stock_value = ExpressionWrapper(F('price') * F('quantity'), output_field=DecimalField(max_digits=16, decimal_places=2))
    products = Product.objects.filter(owner=owner)
    inventory_value = products.filter(quantity__gt=0).aggregate(total=Sum(stock_value))['total'] or 0
    horizon = today + timedelta(days=settings.BIZHUB_EXPIRY_WARNING_DAYS)

    open_sales = Sale.objects.filter(owner=owner, status='completed').exclude(payment_status='paid')
    return {
        'today': period_totals(today),
        'month': period_totals(month_start),
        'inventory': {
            'total_products': products.count(),
            'inventory_value': float(inventory_value),
            'low_stock_items': products.filter(quantity__lte=F('low_stock_threshold')).count(),
            'out_of_stock_items': products.filter(quantity__lte=0).count(),
            'expiring_items': products.filter(expiry_date__gte=today, expiry_date__lte=horizon).count(),
        },
        'payments': {
            'pending_count': open_sales.count(),
            'pending_amount': float(open_sales.aggregate(total=Sum('amount_due'))['total'] or 0),
        },
    }
