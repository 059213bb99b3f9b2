"""
Test suite for the inventory module
Tests: product CRUD contract, per-owner SKUs, stock ledger, batch upsert, expiry and filters
"""
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from bizhub.core.exceptions import InsufficientStockError
from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.inventory.batch import batch_upsert_products, consolidate_items
from bizhub.inventory.models import Product, StockAdjustment
from bizhub.inventory.serializers import ProductSerializer
from bizhub.inventory.stock import add_stock, remove_stock

PRODUCTS_URL = '/api/v1/inventory/products/'


class ProductModelTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()

    def test_derived_values(self):
        product = TestDataFactory.create_product(self.user, price=Decimal('150.00'), cost=Decimal('100.00'), quantity=4)
        self.assertEqual(product.stock_value, Decimal('600.00'))
        self.assertEqual(product.potential_profit, Decimal('200.00'))
        self.assertTrue(product.is_low_stock)

    def test_expiry_flags(self):
        today = timezone.localdate()
        expired = TestDataFactory.create_product(self.user, expiry_date=today - timedelta(days=1))
        soon = TestDataFactory.create_product(self.user, expiry_date=today + timedelta(days=5))
        later = TestDataFactory.create_product(self.user, expiry_date=today + timedelta(days=60))
        self.assertTrue(expired.is_expired)
        self.assertTrue(soon.is_about_to_expire)
        self.assertFalse(later.is_about_to_expire)
        self.assertEqual(later.days_until_expiry, 60)


class StockMovementTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.product = TestDataFactory.create_product(self.user, quantity=5)

    def test_remove_stock_writes_ledger_row(self):
        with transaction.atomic():
            adjustment = remove_stock(self.product, 3, reason='damaged', user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 2)
        self.assertEqual(adjustment.quantity_before, 5)
        self.assertEqual(adjustment.quantity_after, 2)
        self.assertEqual(adjustment.adjustment_type, 'out')

    def test_remove_more_than_available_fails(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            with transaction.atomic():
                remove_stock(self.product, 6)
        self.assertEqual(ctx.exception.details['shortages'][0]['available'], 5)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)
        self.assertFalse(StockAdjustment.objects.filter(product=self.product).exists())

    def test_allow_negative(self):
        with transaction.atomic():
            remove_stock(self.product, 7, allow_negative=True)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, -2)

    def test_add_stock(self):
        with transaction.atomic():
            adjustment = add_stock(self.product, 10)
        self.assertEqual(adjustment.quantity_after, 15)
        self.assertEqual(adjustment.reason, 'restock')


class ProductAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def product_payload(self, **overrides):
        payload = {
            'name': 'Green Tea',
            'sku': 'TEA-001',
            'price': '150.00',
            'cost': '100.00',
            'quantity': 20,
            'category': 'Beverages',
            'shelf': 'A1',
        }
        payload.update(overrides)
        return payload

    def test_create_product(self):
        response = self.client.post(PRODUCTS_URL, self.product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sku'], 'TEA-001')
        self.assertEqual(response.data['price'], '150.00')
        self.assertEqual(response['Location'], f"{PRODUCTS_URL}{response.data['id']}/")
        self.assertEqual(Product.objects.get(pk=response.data['id']).owner, self.user)

    def test_blank_category_and_shelf_get_defaults(self):
        response = self.client.post(PRODUCTS_URL, self.product_payload(category='', shelf=' '), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category'], 'Uncategorized')
        self.assertEqual(response.data['shelf'], 'Default')

    def test_create_requires_positive_price_and_cost(self):
        response = self.client.post(PRODUCTS_URL, self.product_payload(price='0'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data)

        payload = self.product_payload()
        del payload['cost']
        response = self.client.post(PRODUCTS_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('cost', response.data)

    def test_duplicate_sku_is_per_owner(self):
        TestDataFactory.create_product(self.user, sku='TEA-001')
        response = self.client.post(PRODUCTS_URL, self.product_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

        TestDataFactory.create_product(self.other, sku='TEA-002')
        response = self.client.post(PRODUCTS_URL, self.product_payload(sku='TEA-002'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_list_only_own_products(self):
        TestDataFactory.create_product(self.user)
        TestDataFactory.create_product(self.other)
        response = self.client.get(PRODUCTS_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

    def test_foreign_product_is_not_found(self):
        product = TestDataFactory.create_product(self.other)
        self.assertEqual(self.client.get(f'{PRODUCTS_URL}{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.delete(f'{PRODUCTS_URL}{product.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(Product.objects.filter(pk=product.id).exists())

    def test_patch_and_delete(self):
        product = TestDataFactory.create_product(self.user, name='Old')
        response = self.client.patch(f'{PRODUCTS_URL}{product.id}/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New')

        response = self.client.delete(f'{PRODUCTS_URL}{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(f'{PRODUCTS_URL}{product.id}/').status_code, status.HTTP_404_NOT_FOUND)

    def test_put_rechecks_sku_excluding_itself(self):
        product = TestDataFactory.create_product(self.user, sku='TEA-001', quantity=20)
        TestDataFactory.create_product(self.user, sku='TEA-002')

        response = self.client.put(f'{PRODUCTS_URL}{product.id}/', self.product_payload(name='Renamed'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Renamed')

        response = self.client.put(f'{PRODUCTS_URL}{product.id}/', self.product_payload(sku='TEA-002'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_quantity_edit_is_recorded_as_correction(self):
        product = TestDataFactory.create_product(self.user, quantity=5)
        response = self.client.patch(f'{PRODUCTS_URL}{product.id}/', {'quantity': 50}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 50)

        response = self.client.patch(f'{PRODUCTS_URL}{product.id}/', {'quantity': 8}, format='json')
        self.assertEqual(response.data['quantity'], 8)

        ledger = list(StockAdjustment.objects.filter(product=product).order_by('id'))
        self.assertEqual([(row.adjustment_type, row.reason, row.quantity) for row in ledger],
                         [('in', 'correction', 45), ('out', 'correction', 42)])
        self.assertEqual((ledger[1].quantity_before, ledger[1].quantity_after), (50, 8))

    def test_price_edit_does_not_write_stale_quantity(self):
        product = TestDataFactory.create_product(self.user, quantity=5)
        stale = Product.objects.get(pk=product.pk)
        TestDataFactory.create_sale(self.user, product, quantity=5)

        serializer = ProductSerializer(stale, data={'price': '120.00'}, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        product.refresh_from_db()
        self.assertEqual(product.quantity, 0)
        self.assertEqual(product.price, Decimal('120.00'))

    def test_price_only_patch_leaves_ledger_alone(self):
        product = TestDataFactory.create_product(self.user, quantity=5)
        response = self.client.patch(f'{PRODUCTS_URL}{product.id}/', {'price': '99.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 5)
        self.assertFalse(StockAdjustment.objects.filter(product=product).exists())

    def test_filters(self):
        TestDataFactory.create_product(self.user, name='Apple Juice', category='Beverages', quantity=0)
        TestDataFactory.create_product(self.user, name='Rice', category='Grocery', quantity=50)
        response = self.client.get(f'{PRODUCTS_URL}?search=apple')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'{PRODUCTS_URL}?out_of_stock=true')
        self.assertEqual(response.data['results'][0]['name'], 'Apple Juice')
        response = self.client.get(f'{PRODUCTS_URL}?category=grocery')
        self.assertEqual(response.data['count'], 1)
        response = self.client.get(f'{PRODUCTS_URL}?ordering=-quantity')
        self.assertEqual(response.data['results'][0]['name'], 'Rice')

    def test_adjust_stock(self):
        product = TestDataFactory.create_product(self.user, quantity=5)
        url = f'{PRODUCTS_URL}{product.id}/adjust-stock/'
        response = self.client.post(url, {'adjustment_type': 'out', 'quantity': 2, 'reason': 'damaged'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product']['quantity'], 3)

        response = self.client.post(url, {'adjustment_type': 'out', 'quantity': 9}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'insufficient_stock')

        history = self.client.get(f'{PRODUCTS_URL}{product.id}/adjustments/')
        self.assertEqual(history.data['count'], 1)

    def test_expiring(self):
        today = timezone.localdate()
        TestDataFactory.create_product(self.user, name='Milk', expiry_date=today + timedelta(days=3))
        TestDataFactory.create_product(self.user, name='Honey', expiry_date=today + timedelta(days=200))
        TestDataFactory.create_product(self.user, name='Stale', expiry_date=today - timedelta(days=1))
        response = self.client.get(f'{PRODUCTS_URL}expiring/?days=7')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['name'], 'Milk')

        self.assertEqual(self.client.get(f'{PRODUCTS_URL}expiring/?days=x').status_code, status.HTTP_400_BAD_REQUEST)

    def test_categories(self):
        TestDataFactory.create_product(self.user, category='Beverages', quantity=2, price=Decimal('10.00'))
        TestDataFactory.create_product(self.user, category='Beverages', quantity=3, price=Decimal('10.00'))
        response = self.client.get('/api/v1/inventory/categories/')
        self.assertEqual(response.data, [
            {'name': 'Beverages', 'product_count': 2, 'total_quantity': 5, 'total_value': 50.0},
        ])


class BatchUpsertTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)

    def test_consolidate_sums_repeated_skus(self):
        rows = consolidate_items([
            {'sku': 'A', 'name': 'Alpha', 'quantity': 2},
            {'sku': 'A', 'quantity': '3', 'price': '10'},
            {'sku': '', 'name': 'ignored'},
        ])
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['quantity'], 5)
        self.assertEqual(rows[0]['price'], '10')

    def test_creates_and_restocks(self):
        existing = TestDataFactory.create_product(self.user, sku='B', quantity=4)
        result = batch_upsert_products(self.user, [
            {'sku': 'A', 'name': 'Alpha', 'price': '25.00', 'cost': '20.00', 'quantity': 6},
            {'sku': 'B', 'quantity': 3},
        ], user=self.user)

        self.assertTrue(result['success'])
        self.assertEqual(result['created'], 1)
        self.assertEqual(result['updated'], 1)
        updated = next(row for row in result['results'] if row['action'] == 'updated')
        self.assertEqual(updated['previous_quantity'], 4)
        self.assertEqual(updated['new_quantity'], 7)
        existing.refresh_from_db()
        self.assertEqual(existing.quantity, 7)
        self.assertEqual(Product.objects.get(owner=self.user, sku='A').quantity, 6)

    def test_bad_rows_are_reported_without_undoing_good_ones(self):
        result = batch_upsert_products(self.user, [
            {'sku': 'A', 'name': 'Alpha', 'price': '25.00', 'quantity': 1},
            {'sku': 'C', 'name': 'No price', 'quantity': 1},
            {'sku': 'D', 'name': 'Delta', 'price': '5', 'quantity': 'many'},
        ], user=self.user)
        self.assertFalse(result['success'])
        self.assertEqual(result['created'], 1)
        self.assertEqual({error['sku'] for error in result['errors']}, {'C', 'D'})

    def test_out_of_range_values_are_row_errors(self):
        response = self.client.post(f'{PRODUCTS_URL}batch-upsert/', {'items': [
            {'sku': 'A1', 'name': 'Alpha', 'price': '25.00', 'quantity': 1},
            {'sku': 'B1', 'name': 'Beta', 'price': '1e20', 'quantity': 1},
            {'sku': 'C1', 'name': 'Gamma', 'price': '10', 'gst_percentage': '180', 'quantity': 1},
            {'sku': 'D1', 'name': 'Delta', 'price': 'NaN', 'quantity': 1},
        ]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual({error['sku'] for error in response.data['errors']}, {'B1', 'C1', 'D1'})
        self.assertEqual(list(Product.objects.filter(owner=self.user).values_list('sku', flat=True)), ['A1'])

    def test_endpoint_requires_items(self):
        response = self.client.post(f'{PRODUCTS_URL}batch-upsert/', {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(f'{PRODUCTS_URL}batch-upsert/', {
            'items': [{'sku': 'A', 'name': 'Alpha', 'price': '25.00', 'quantity': 2}]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 1)
