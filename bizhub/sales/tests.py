"""
Test suite for the sales module
Tests: money calculations, atomic sales, overselling, carts, checkout, payments, cancel/return
"""
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from rest_framework import status

from bizhub.core.exceptions import InsufficientStockError, InvalidStateTransition
from bizhub.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from bizhub.inventory.models import StockAdjustment
from bizhub.sales.calculations import compute_totals, line_total, payment_status_for
from bizhub.sales.models import Cart, Sale
from bizhub.sales.services import record_sale, reverse_sale

SALES_URL = '/api/v1/sales/'
CARTS_URL = '/api/v1/sales/carts/'


class CalculationTests(TestCase):
    def test_line_total(self):
        self.assertEqual(line_total(Decimal('150.00'), 3, Decimal('10.00'), Decimal('5.50')), Decimal('445.50'))

    def test_totals(self):
        totals = compute_totals([
            {'selling_price': Decimal('150.00'), 'quantity': 2, 'cost_price': Decimal('100.00'),
             'discount': Decimal('0'), 'tax': Decimal('0')},
            {'selling_price': Decimal('50.00'), 'quantity': 1, 'cost_price': Decimal('30.00'),
             'discount': Decimal('10.00'), 'tax': Decimal('0')},
        ])
        self.assertEqual(totals['subtotal'], Decimal('350.00'))
        self.assertEqual(totals['grand_total'], Decimal('340.00'))
        self.assertEqual(totals['total_cost'], Decimal('230.00'))
        self.assertEqual(totals['profit'], Decimal('110.00'))
        self.assertEqual(totals['profit_margin'], Decimal('32.35'))
        self.assertEqual(totals['payment_status'], 'paid')
        self.assertEqual(totals['amount_due'], Decimal('0.00'))

    def test_partial_payment(self):
        totals = compute_totals(
            [{'selling_price': Decimal('100.00'), 'quantity': 1, 'cost_price': Decimal('50.00')}],
            amount_paid=Decimal('40')
        )
        self.assertEqual(totals['amount_due'], Decimal('60.00'))
        self.assertEqual(totals['payment_status'], 'partial')

    def test_payment_status(self):
        self.assertEqual(payment_status_for(0, Decimal('10')), 'pending')
        self.assertEqual(payment_status_for(Decimal('5'), Decimal('10')), 'partial')
        self.assertEqual(payment_status_for(Decimal('10'), Decimal('10')), 'paid')


class RecordSaleTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.tea = TestDataFactory.create_product(self.user, price=Decimal('150.00'), cost=Decimal('100.00'), quantity=10)
        self.rice = TestDataFactory.create_product(self.user, price=Decimal('50.00'), cost=Decimal('40.00'), quantity=1)

    def test_sale_takes_stock_and_writes_ledger(self):
        sale = record_sale(self.user, [{'product': self.tea, 'quantity': 3}], user=self.user)
        self.tea.refresh_from_db()
        self.assertEqual(self.tea.quantity, 7)
        self.assertEqual(sale.grand_total, Decimal('450.00'))
        self.assertEqual(sale.profit, Decimal('150.00'))
        self.assertEqual(sale.customer_name, 'Walk-in Customer')
        self.assertRegex(sale.invoice_number, r'^INV-\d{8}-0001$')
        adjustment = StockAdjustment.objects.get(product=self.tea)
        self.assertEqual((adjustment.reason, adjustment.reference), ('sale', sale.invoice_number))

    def test_invoice_numbers_increment(self):
        first = record_sale(self.user, [{'product': self.tea, 'quantity': 1}])
        second = record_sale(self.user, [{'product': self.tea, 'quantity': 1}])
        self.assertTrue(first.invoice_number.endswith('-0001'))
        self.assertTrue(second.invoice_number.endswith('-0002'))

    def test_invoice_number_claimed_concurrently_is_regenerated(self):
        taken = record_sale(self.user, [{'product': self.tea, 'quantity': 1}])
        with mock.patch('bizhub.sales.services.generate_invoice_number',
                        side_effect=[taken.invoice_number, 'INV-20240101-0099']):
            sale = record_sale(self.user, [{'product': self.tea, 'quantity': 1}])
        self.assertEqual(sale.invoice_number, 'INV-20240101-0099')
        self.assertEqual(Sale.objects.filter(owner=self.user).count(), 2)
        self.tea.refresh_from_db()
        self.assertEqual(self.tea.quantity, 8)

    def test_shortage_rolls_back_whole_sale(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            record_sale(self.user, [
                {'product': self.tea, 'quantity': 2},
                {'product': self.rice, 'quantity': 5},
            ])
        shortages = ctx.exception.details['shortages']
        self.assertEqual(len(shortages), 1)
        self.assertEqual(shortages[0]['product_id'], self.rice.id)
        self.assertEqual(shortages[0]['available'], 1)

        self.tea.refresh_from_db()
        self.assertEqual(self.tea.quantity, 10)
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(StockAdjustment.objects.count(), 0)

    def test_repeated_product_lines_are_checked_together(self):
        with self.assertRaises(InsufficientStockError):
            record_sale(self.user, [
                {'product': self.rice, 'quantity': 1},
                {'product': self.rice, 'quantity': 1},
            ])

    def test_backorder_allows_negative_stock(self):
        sale = record_sale(self.user, [{'product': self.rice, 'quantity': 3}], allow_backorder=True)
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.quantity, -2)
        self.assertTrue(sale.allow_backorder)

    @override_settings(BIZHUB_ALLOW_BACKORDERS=True)
    def test_backorder_setting(self):
        record_sale(self.user, [{'product': self.rice, 'quantity': 2}])
        self.rice.refresh_from_db()
        self.assertEqual(self.rice.quantity, -1)

    def test_cancel_restocks_once(self):
        sale = record_sale(self.user, [{'product': self.tea, 'quantity': 4}], amount_paid=Decimal('0'))
        sale = reverse_sale(sale, 'cancelled')
        self.tea.refresh_from_db()
        self.assertEqual(self.tea.quantity, 10)
        self.assertEqual(sale.status, 'cancelled')
        self.assertEqual(sale.payment_status, 'pending')

        with self.assertRaises(InvalidStateTransition):
            reverse_sale(sale, 'returned')
        self.tea.refresh_from_db()
        self.assertEqual(self.tea.quantity, 10)

    def test_return_marks_refunded(self):
        sale = record_sale(self.user, [{'product': self.tea, 'quantity': 1}])
        sale = reverse_sale(sale, 'returned')
        self.assertEqual(sale.payment_status, 'refunded')
        self.assertTrue(StockAdjustment.objects.filter(product=self.tea, reason='sale_return').exists())


class SaleAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('150.00'), cost=Decimal('100.00'), quantity=5)

    def test_create_sale(self):
        response = self.client.post(SALES_URL, {
            'items': [{'product_id': self.product.id, 'quantity': 2}],
            'customer': {'name': 'Asha', 'phone': '9999999999'},
            'payment_method': 'upi',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sale']['grand_total'], '300.00')
        self.assertEqual(response.data['sale']['customer']['name'], 'Asha')
        self.assertEqual(response.data['summary']['item_count'], 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 3)

    def test_oversell_returns_conflict(self):
        response = self.client.post(SALES_URL, {
            'items': [{'product_id': self.product.id, 'quantity': 6}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertEqual(response.data['shortages'][0]['requested'], 6)
        self.assertEqual(Sale.objects.count(), 0)

    def test_duplicate_invoice_number_rejected(self):
        payload = {'items': [{'product_id': self.product.id, 'quantity': 1}], 'invoice_number': 'SHOP-001'}
        self.assertEqual(self.client.post(SALES_URL, payload, format='json').status_code, status.HTTP_201_CREATED)

        response = self.client.post(SALES_URL, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'duplicate_invoice_number')
        self.assertEqual(Sale.objects.filter(owner=self.user).count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 4)

    def test_sale_lines_keep_product_snapshot_after_delete(self):
        sale = TestDataFactory.create_sale(self.user, self.product, quantity=1)
        name, sku = self.product.name, self.product.sku
        self.assertEqual(self.client.delete(f'/api/v1/inventory/products/{self.product.id}/').status_code,
                         status.HTTP_204_NO_CONTENT)

        response = self.client.get(f'{SALES_URL}{sale.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        line = response.data['items'][0]
        self.assertIsNone(line['product'])
        self.assertEqual((line['product_name'], line['product_sku']), (name, sku))

    def test_foreign_product_rejected(self):
        foreign = TestDataFactory.create_product(self.other)
        response = self.client.post(SALES_URL, {
            'items': [{'product_id': foreign.id, 'quantity': 1}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Product not found', response.data['error'])

    def test_empty_items_rejected(self):
        response = self.client.post(SALES_URL, {'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_summary(self):
        TestDataFactory.create_sale(self.user, self.product, quantity=1)
        TestDataFactory.create_sale(self.other, TestDataFactory.create_product(self.other), quantity=1)
        response = self.client.get(SALES_URL)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['sales']), 1)
        self.assertEqual(response.data['summary']['total_sales'], 1)
        self.assertEqual(response.data['summary']['total_revenue'], 150.0)

    def test_foreign_sale_not_found(self):
        sale = TestDataFactory.create_sale(self.other, TestDataFactory.create_product(self.other))
        self.assertEqual(self.client.get(f'{SALES_URL}{sale.id}/').status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self.client.post(f'{SALES_URL}{sale.id}/cancel/').status_code, status.HTTP_404_NOT_FOUND)

    def test_payments(self):
        sale = TestDataFactory.create_sale(self.user, self.product, quantity=2, amount_paid=Decimal('0'))
        self.assertEqual(sale.payment_status, 'pending')

        url = f'{SALES_URL}{sale.id}/payments/'
        response = self.client.post(url, {'amount': '100.00', 'payment_method': 'cash'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sale']['payment_status'], 'partial')
        self.assertEqual(response.data['sale']['amount_due'], '200.00')

        response = self.client.post(url, {'amount': '500.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'overpayment')

        response = self.client.post(url, {'amount': '200.00'}, format='json')
        self.assertEqual(response.data['sale']['payment_status'], 'paid')

    def test_cancel_and_return_endpoints(self):
        sale = TestDataFactory.create_sale(self.user, self.product, quantity=2)
        response = self.client.post(f'{SALES_URL}{sale.id}/return/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'returned')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 5)

        response = self.client.post(f'{SALES_URL}{sale.id}/cancel/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)


class CartAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient().authenticate_user(self.user)
        self.product = TestDataFactory.create_product(self.user, price=Decimal('150.00'), cost=Decimal('100.00'), quantity=5)

    def create_cart(self):
        response = self.client.post(CARTS_URL, {'customer_name': 'Asha'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data

    def test_add_items_merges_lines(self):
        cart = self.create_cart()
        url = f"{CARTS_URL}{cart['id']}/items/"
        self.client.post(url, {'product': self.product.id, 'quantity': 2}, format='json')
        response = self.client.post(url, {'product': self.product.id, 'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['quantity'], 3)
        self.assertEqual(response.data['totals']['grand_total'], '450.00')
        self.assertTrue(response.data['can_checkout'])

    def test_add_more_than_stock(self):
        cart = self.create_cart()
        response = self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': self.product.id, 'quantity': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_update_item_above_stock(self):
        cart = self.create_cart()
        response = self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': self.product.id, 'quantity': 2}, format='json')
        item_id = response.data['items'][0]['id']

        response = self.client.patch(f"{CARTS_URL}{cart['id']}/items/{item_id}/", {'quantity': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'insufficient_stock')
        self.assertEqual(Cart.objects.get(pk=cart['id']).items.get().quantity, 2)

        response = self.client.patch(f"{CARTS_URL}{cart['id']}/items/{item_id}/", {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 5)

    def test_add_foreign_product(self):
        cart = self.create_cart()
        foreign = TestDataFactory.create_product(self.other)
        response = self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': foreign.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_hold_blocks_changes(self):
        cart = self.create_cart()
        self.assertEqual(self.client.post(f"{CARTS_URL}{cart['id']}/hold/").status_code, status.HTTP_200_OK)
        response = self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.post(f"{CARTS_URL}{cart['id']}/unhold/").status_code, status.HTTP_200_OK)

    def test_checkout(self):
        cart = self.create_cart()
        self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': self.product.id, 'quantity': 2}, format='json')
        response = self.client.post(f"{CARTS_URL}{cart['id']}/checkout/", {'payment_method': 'card'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['sale']['customer']['name'], 'Asha')
        self.assertEqual(response.data['sale']['payment_method'], 'card')
        self.assertEqual(Cart.objects.get(pk=cart['id']).status, 'completed')
        self.product.refresh_from_db()
        self.assertEqual(self.product.quantity, 3)

        response = self.client.post(f"{CARTS_URL}{cart['id']}/checkout/", {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.delete(f"{CARTS_URL}{cart['id']}/").status_code, status.HTTP_400_BAD_REQUEST)

    def test_checkout_after_stock_dropped(self):
        cart = self.create_cart()
        self.client.post(f"{CARTS_URL}{cart['id']}/items/", {'product': self.product.id, 'quantity': 4}, format='json')
        TestDataFactory.create_sale(self.user, self.product, quantity=3)

        response = self.client.post(f"{CARTS_URL}{cart['id']}/checkout/", {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Cart.objects.get(pk=cart['id']).status, 'active')

    def test_empty_cart_checkout(self):
        cart = self.create_cart()
        response = self.client.post(f"{CARTS_URL}{cart['id']}/checkout/", {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'empty_cart')

    def test_foreign_cart_not_found(self):
        cart = TestDataFactory.create_cart(self.other)
        self.assertEqual(self.client.get(f'{CARTS_URL}{cart.id}/').status_code, status.HTTP_404_NOT_FOUND)
