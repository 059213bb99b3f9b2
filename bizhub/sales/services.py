"""
Sale recording, reversal and payment logic shared by the cart checkout and direct sale endpoints
"""
import logging
import uuid
from collections import OrderedDict

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import Count, Sum
from django.utils import timezone

from bizhub.core.exceptions import BusinessRuleError, InsufficientStockError, InvalidStateTransition
from bizhub.inventory.stock import add_stock, remove_stock, shortage_for
from .calculations import ZERO, money, line_total, compute_totals, amount_due, payment_status_for
from .models import Cart, CartItem, Sale, SaleItem, Payment

logger = logging.getLogger(__name__)

# Attempts at a fresh invoice number when a concurrent sale took the same one
INVOICE_NUMBER_ATTEMPTS = 5


def generate_invoice_number(owner):
    """INV-YYYYMMDD-NNNN where NNNN counts the owner's sales recorded today"""
    today = timezone.localdate()
    prefix = f"INV-{today.strftime('%Y%m%d')}-"
    sequence = Sale.objects.filter(owner=owner, created_at__date=today).count() + 1
    invoice_number = f"{prefix}{sequence:04d}"
    while Sale.objects.filter(owner=owner, invoice_number=invoice_number).exists():
        sequence += 1
        invoice_number = f"{prefix}{sequence:04d}"
    return invoice_number


def build_lines(items):
    """
    Normalise requested items into priced lines.
    Each item is a dict with product (a Product), quantity and optional selling_price, discount, tax.
    """
    lines = []
    for item in items:
        product = item['product']
        selling_price = item.get('selling_price')
        if selling_price is None:
            selling_price = product.price
        line = {
            'product': product,
            'quantity': item['quantity'],
            'selling_price': money(selling_price),
            'discount': money(item.get('discount')),
            'tax': money(item.get('tax')),
            'cost_price': money(product.cost),
        }
        line['total_price'] = line_total(line['selling_price'], line['quantity'], line['discount'], line['tax'])
        lines.append(line)
    return lines


def requested_quantities(lines):
    """Total quantity requested per product, keeping first-seen order"""
    requested = OrderedDict()
    for line in lines:
        product = line['product']
        if product.pk in requested:
            requested[product.pk] = (product, requested[product.pk][1] + line['quantity'])
        else:
            requested[product.pk] = (product, line['quantity'])
    return list(requested.values())


def _create_sale(owner, invoice_number, **fields):
    """
    Insert the sale row under a savepoint.

    A generated invoice number that a concurrent sale claimed first is
    regenerated; a client-supplied number that already exists is rejected.
    """
    for _ in range(INVOICE_NUMBER_ATTEMPTS):
        number = invoice_number or generate_invoice_number(owner)
        if invoice_number and Sale.objects.filter(owner=owner, invoice_number=number).exists():
            raise BusinessRuleError("Invoice number already exists", code='duplicate_invoice_number')
        try:
            with transaction.atomic():
                return Sale.objects.create(owner=owner, invoice_number=number, **fields)
        except IntegrityError:
            if not Sale.objects.filter(owner=owner, invoice_number=number).exists():
                raise
            if invoice_number:
                raise BusinessRuleError("Invoice number already exists", code='duplicate_invoice_number')
            logger.info(f"Invoice number {number} taken by a concurrent sale for {owner.username}, retrying")
    raise BusinessRuleError("Could not allocate an invoice number, please retry", code='invoice_number_conflict')


def record_sale(owner, items, customer=None, amount_paid=None, payment_method='cash', sale_date=None,
                notes='', invoice_number=None, allow_backorder=None, cart=None, user=None):
    """
    Record a sale and take its stock in one transaction.

    Either the sale, its lines, every stock decrement and the ledger rows are
    all committed, or nothing is. Raises InsufficientStockError listing every
    short product unless backorders are allowed.
    """
    if not items:
        raise BusinessRuleError("At least one item is required", code='empty_sale')
    if allow_backorder is None:
        allow_backorder = settings.BIZHUB_ALLOW_BACKORDERS
    customer = customer or {}

    lines = build_lines(items)
    totals = compute_totals(lines, amount_paid)
    requested = requested_quantities(lines)

    with transaction.atomic():
        if not allow_backorder:
            shortages = [s for s in (shortage_for(product, quantity) for product, quantity in requested) if s]
            if shortages:
                raise InsufficientStockError(
                    f"Insufficient stock for {len(shortages)} product(s)",
                    shortages=shortages
                )

        sale = _create_sale(
            owner,
            invoice_number,
            cart=cart,
            customer_name=customer.get('name') or 'Walk-in Customer',
            customer_phone=customer.get('phone') or '',
            customer_email=customer.get('email') or '',
            customer_address=customer.get('address') or '',
            customer_gstin=customer.get('gstin') or '',
            payment_method=payment_method or 'cash',
            sale_date=sale_date or timezone.now(),
            notes=notes or '',
            allow_backorder=allow_backorder,
            **totals
        )
        invoice_number = sale.invoice_number
        SaleItem.objects.bulk_create([
            SaleItem(
                sale=sale,
                product=line['product'],
                product_name=line['product'].name,
                product_sku=line['product'].sku,
                unit=line['product'].unit,
                quantity=line['quantity'],
                cost_price=line['cost_price'],
                selling_price=line['selling_price'],
                discount=line['discount'],
                tax=line['tax'],
                total_price=line['total_price'],
            )
            for line in lines
        ])

        # Conditional decrements; a concurrent sale that got there first rolls this one back
        for product, quantity in requested:
            remove_stock(product, quantity, reason='sale', user=user, reference=invoice_number,
                         allow_negative=allow_backorder)

    logger.info(f"Sale {sale.invoice_number} recorded for {owner.username}: {len(lines)} line(s), total {sale.grand_total}")
    return sale


def reverse_sale(sale, new_status, user=None):
    """Cancel or return a completed sale, putting every sold unit back into stock"""
    verb = 'cancelled' if new_status == 'cancelled' else 'returned'
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        if sale.status != 'completed':
            raise InvalidStateTransition(
                f"Only completed sales can be {verb}; this sale is {sale.status}",
                current_status=sale.status
            )

        reason = 'sale_cancel' if new_status == 'cancelled' else 'sale_return'
        for item in sale.items.select_related('product'):
            if item.product is not None:
                add_stock(item.product, item.quantity, reason=reason, user=user, reference=sale.invoice_number)

        sale.status = new_status
        if new_status == 'returned' or sale.amount_paid > ZERO:
            sale.payment_status = 'refunded'
        sale.save(update_fields=['status', 'payment_status', 'updated_at'])

    logger.info(f"Sale {sale.invoice_number} {verb}")
    return sale


def add_payment(sale, amount, payment_method='cash', reference='', notes='', user=None):
    """Record a payment and recompute amount paid/due and payment status"""
    amount = money(amount)
    with transaction.atomic():
        sale = Sale.objects.select_for_update().get(pk=sale.pk)
        if sale.status != 'completed':
            raise InvalidStateTransition(
                f"Payments can only be added to completed sales; this sale is {sale.status}",
                current_status=sale.status
            )
        if amount <= ZERO:
            raise BusinessRuleError("Payment amount must be positive", code='invalid_amount')
        if amount > sale.amount_due:
            raise BusinessRuleError(
                "Payment exceeds the amount due",
                code='overpayment',
                amount_due=str(sale.amount_due)
            )

        payment = Payment.objects.create(
            sale=sale,
            amount=amount,
            payment_method=payment_method or sale.payment_method,
            reference=reference or '',
            notes=notes or '',
            created_by=user,
        )
        sale.amount_paid = money(sale.amount_paid + amount)
        sale.amount_due = amount_due(sale.grand_total, sale.amount_paid)
        sale.payment_status = payment_status_for(sale.amount_paid, sale.grand_total)
        sale.save(update_fields=['amount_paid', 'amount_due', 'payment_status', 'updated_at'])
    return sale, payment


def sales_summary(owner):
    """Headline numbers over the owner's completed sales, overall and for today"""
    completed = Sale.objects.filter(owner=owner, status='completed')
    today = completed.filter(sale_date__date=timezone.localdate())

    overall = completed.aggregate(count=Count('id'), revenue=Sum('grand_total'), profit=Sum('profit'))
    today_totals = today.aggregate(count=Count('id'), revenue=Sum('grand_total'), profit=Sum('profit'))
    pending_amount = completed.exclude(payment_status='paid').aggregate(total=Sum('amount_due'))['total']

    return {
        'total_sales': overall['count'],
        'today_sales': today_totals['count'],
        'total_revenue': float(overall['revenue'] or 0),
        'today_revenue': float(today_totals['revenue'] or 0),
        'total_profit': float(overall['profit'] or 0),
        'today_profit': float(today_totals['profit'] or 0),
        'pending_payments': completed.filter(payment_status='pending').count(),
        'pending_amount': float(pending_amount or 0),
    }


# Cart helpers

def generate_cart_number():
    cart_number = f"CART-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while Cart.objects.filter(cart_number=cart_number).exists():
        cart_number = f"CART-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return cart_number


def ensure_cart_active(cart):
    if cart.status != 'active':
        raise BusinessRuleError(f"Cart is {cart.status}; only active carts can be changed", code='cart_not_active')


def ensure_stock_for_line(product, quantity):
    """Reject a cart line asking for more than the product's live stock"""
    product.refresh_from_db(fields=['quantity'])
    if quantity > product.quantity:
        raise InsufficientStockError(
            f"Only {max(product.quantity, 0)} unit(s) of {product.name} in stock",
            shortages=[{
                'product_id': product.pk,
                'product_name': product.name,
                'sku': product.sku,
                'requested': quantity,
                'available': max(product.quantity, 0),
            }]
        )


def add_item_to_cart(cart, product, quantity, selling_price=None, discount=None, tax=None):
    """Add a product to a cart, merging with an existing line for the same product"""
    ensure_cart_active(cart)
    with transaction.atomic():
        item = CartItem.objects.select_for_update().filter(cart=cart, product=product).first()
        new_quantity = quantity + (item.quantity if item else 0)
        ensure_stock_for_line(product, new_quantity)

        if item is None:
            item = CartItem(cart=cart, product=product)
        item.quantity = new_quantity
        if selling_price is not None:
            item.selling_price = selling_price
        if discount is not None:
            item.discount = discount
        if tax is not None:
            item.tax = tax
        item.save()
    return item


def update_cart_item(item, quantity=None, selling_price=None, discount=None, tax=None):
    ensure_cart_active(item.cart)
    if quantity is not None:
        ensure_stock_for_line(item.product, quantity)
        item.quantity = quantity
    if selling_price is not None:
        item.selling_price = selling_price
    if discount is not None:
        item.discount = discount
    if tax is not None:
        item.tax = tax
    item.save()
    return item


def checkout_cart(cart, amount_paid=None, payment_method=None, sale_date=None, notes=None,
                  allow_backorder=None, user=None):
    """Turn an active cart into a sale; the cart is completed only when the sale commits"""
    ensure_cart_active(cart)
    cart_items = list(cart.items.select_related('product'))
    if not cart_items:
        raise BusinessRuleError("Cart is empty", code='empty_cart')

    items = [
        {
            'product': item.product,
            'quantity': item.quantity,
            'selling_price': item.selling_price,
            'discount': item.discount,
            'tax': item.tax,
        }
        for item in cart_items
    ]
    customer = {
        'name': cart.customer_name,
        'phone': cart.customer_phone,
        'email': cart.customer_email,
        'address': cart.customer_address,
        'gstin': cart.customer_gstin,
    }

    with transaction.atomic():
        sale = record_sale(
            cart.owner,
            items,
            customer=customer,
            amount_paid=amount_paid,
            payment_method=payment_method or cart.payment_method,
            sale_date=sale_date,
            notes=cart.notes if notes is None else notes,
            allow_backorder=allow_backorder,
            cart=cart,
            user=user,
        )
        cart.status = 'completed'
        cart.save(update_fields=['status', 'updated_at'])
    return sale
