"""
Test suite for analytics
Tests: inventory breakdowns, sales reports, top products, dashboard and cache invalidation
"""
from datetime import date, timedelta
from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from bizhub.analytics.services import build_inventory_analytics, get_inventory_analytics
from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient

ANALYTICS_URL = '/api/v1/analytics/'


def product_row(name, quantity, price='10.00', cost='5.00', category='General', shelf='A', expiry_date=None,
                low_stock_threshold=10):
    return {
        'id': 1, 'name': name, 'category': category, 'shelf': shelf, 'price': Decimal(price),
        'cost': Decimal(cost), 'quantity': quantity, 'expiry_date': expiry_date,
        'low_stock_threshold': low_stock_threshold,
    }


class InventoryBreakdownTests(TestCase):
    def test_empty_inventory(self):
        result = build_inventory_analytics([], date(2024, 1, 1))
        self.assertEqual(result['summary']['total_products'], 0)
        self.assertEqual(result['category_data'], [])
        self.assertEqual(result['value_data'], [])

    def test_breakdowns(self):
        today = date(2024, 1, 1)
        products = [
            product_row('A very long product name', 100, price='20.00', cost='15.00', category='Tea'),
            product_row('Milk', 2, category='Dairy', expiry_date=today + timedelta(days=3)),
            product_row('Old cheese', 0, category='Dairy', expiry_date=today - timedelta(days=2)),
        ]
        result = build_inventory_analytics(products, today, expiry_warning_days=15)

        self.assertEqual(result['category_data'][0], {'name': 'Dairy', 'count': 2, 'percentage': '66.7'})
        self.assertEqual(result['stock_data'][0]['name'], 'A very long pro...')
        self.assertEqual(len(result['stock_data']), 2)
        self.assertEqual(result['summary']['total_value'], 2020.0)
        self.assertEqual(result['summary']['low_stock_items'], 2)
        self.assertEqual(result['summary']['expiring_items'], 1)
        self.assertEqual(result['value_data'], [{'range': '0-500', 'count': 2}, {'range': '1000-5000', 'count': 1}])
        expiry = {row['name']: row['count'] for row in result['expiry_data']}
        self.assertEqual(expiry['Expired'], 1)
        self.assertEqual(expiry['Expiring in 7 days'], 1)
        self.assertEqual(expiry['No expiry'], 1)


class AnalyticsAPITests(TestCase):
    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.tea = TestDataFactory.create_product(self.user, name='Tea', price=Decimal('150.00'), cost=Decimal('100.00'), quantity=10)
        self.rice = TestDataFactory.create_product(self.user, name='Rice', price=Decimal('50.00'), cost=Decimal('40.00'), quantity=20)

    def test_inventory(self):
        TestDataFactory.create_product(self.other, quantity=99)
        response = self.client.get(f'{ANALYTICS_URL}inventory/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_products'], 2)
        self.assertEqual(response.data['summary']['total_stock'], 30)

    def test_sale_invalidates_cached_inventory(self):
        today = timezone.localdate()
        self.assertEqual(get_inventory_analytics(self.user, today)['summary']['total_stock'], 30)
        TestDataFactory.create_sale(self.user, self.tea, quantity=4)
        self.assertEqual(get_inventory_analytics(self.user, today)['summary']['total_stock'], 26)

    def test_sales_summary_and_top_products(self):
        TestDataFactory.create_sale(self.user, self.tea, quantity=2)
        TestDataFactory.create_sale(self.user, self.rice, quantity=1)
        cancelled = TestDataFactory.create_sale(self.user, self.rice, quantity=5)
        self.client.post(f'/api/v1/sales/{cancelled.id}/cancel/')

        response = self.client.get(f'{ANALYTICS_URL}sales-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['total_sales'], 2)
        self.assertEqual(summary['total_revenue'], 350.0)
        self.assertEqual(summary['total_profit'], 110.0)
        self.assertEqual(summary['total_items_sold'], 3)
        self.assertEqual(len(response.data['daily_breakdown']), 1)

        response = self.client.get(f'{ANALYTICS_URL}top-products/?limit=1')
        self.assertEqual(len(response.data['results']), 1)
        self.assertEqual(response.data['results'][0]['product_name'], 'Tea')
        self.assertEqual(response.data['results'][0]['total_profit'], 100.0)

    def test_bad_period(self):
        response = self.client.get(f'{ANALYTICS_URL}sales-summary/?date_from=2024-13-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(f'{ANALYTICS_URL}sales-summary/?date_from=2024-02-01&date_to=2024-01-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_dashboard(self):
        TestDataFactory.create_sale(self.user, self.tea, quantity=1, amount_paid=Decimal('50'))
        response = self.client.get(f'{ANALYTICS_URL}dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['today']['sales'], 1)
        self.assertEqual(response.data['today']['revenue'], 150.0)
        self.assertEqual(response.data['payments']['pending_count'], 1)
        self.assertEqual(response.data['payments']['pending_amount'], 100.0)
        self.assertEqual(response.data['inventory']['total_products'], 2)
