"""
Batch upsert of products (e.g. rows parsed from a purchase invoice or CSV sheet)

Rows sharing a SKU are merged first (quantities summed). Each SKU is then
created, or restocked with its fields refreshed, inside its own savepoint so
one bad row does not undo the others.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.db import transaction, DatabaseError

from bizhub.core.cache_signals import suspend_cache_signals
from bizhub.core.cache_utils import bump_owner_cache_version
from bizhub.core.utils import parse_date, parse_decimal
from .models import Product
from .serializers import ProductSerializer
from .stock import add_stock

logger = logging.getLogger(__name__)

# Overwritten on existing products only when the incoming value is present
TEXT_FIELDS = ['name', 'supplier', 'supplier_contact', 'gstin', 'hsn_code', 'purchase_invoice_number']
DATE_FIELDS = ['expiry_date', 'purchase_invoice_date']
# Only written when the product is first created
INSERT_ONLY_FIELDS = ['description', 'category', 'shelf', 'unit']
# Largest values the columns can store
DECIMAL_LIMITS = {
    'price': Decimal('9999999999.99'),
    'cost': Decimal('9999999999.99'),
    'gst_percentage': Decimal('100'),
}
MAX_QUANTITY = 2147483647


class BatchRowError(Exception):
    pass


def consolidate_items(items):
    """Merge rows that repeat a SKU, summing quantities; later rows fill missing fields"""
    merged = {}
    order = []
    for raw in items:
        if not isinstance(raw, dict):
            continue
        sku = str(raw.get('sku') or '').strip()
        if not sku:
            continue
        row = dict(raw)
        row['sku'] = sku
        row['quantity'] = _parse_quantity(row.get('quantity'))
        if sku not in merged:
            merged[sku] = row
            order.append(sku)
            continue
        existing = merged[sku]
        existing_quantity = existing['quantity']
        for key, value in row.items():
            if value not in (None, '') and existing.get(key) in (None, ''):
                existing[key] = value
        if existing_quantity is None or row['quantity'] is None:
            existing['quantity'] = None
        else:
            existing['quantity'] = existing_quantity + row['quantity']
    return [merged[sku] for sku in order]


def _parse_quantity(value):
    if value in (None, ''):
        return 0
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return int(number)


def _positive(value):
    number = parse_decimal(value)
    if number is not None and number > 0:
        return number
    return None


def _row_fields(row):
    """Fields from a row that are valid to write onto a product"""
    fields = {}
    for key in TEXT_FIELDS:
        value = str(row.get(key) or '').strip()
        if value:
            fields[key] = value
    for key in DATE_FIELDS:
        value = parse_date(row.get(key))
        if value:
            fields[key] = value
    for key in ('price', 'cost', 'gst_percentage'):
        value = _positive(row.get(key))
        if value is not None:
            # Anything that rounds past the column limit is rejected
            if value >= DECIMAL_LIMITS[key] + Decimal('0.005'):
                raise BatchRowError(f"{key} must not exceed {DECIMAL_LIMITS[key]}")
            value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
            fields[key] = value
    return fields


def _upsert_row(owner, row, user):
    quantity = row['quantity']
    if quantity is None or quantity < 0:
        raise BatchRowError("Quantity must be a non-negative integer")
    if quantity > MAX_QUANTITY:
        raise BatchRowError(f"Quantity must not exceed {MAX_QUANTITY}")

    fields = _row_fields(row)
    product = Product.objects.select_for_update().filter(owner=owner, sku=row['sku']).first()

    if product is None:
        if 'name' not in fields:
            raise BatchRowError("Name is required for new products")
        if 'price' not in fields:
            raise BatchRowError("Price must be a positive number for new products")
        for key in INSERT_ONLY_FIELDS:
            value = str(row.get(key) or '').strip()
            if value:
                fields[key] = value
        product = Product.objects.create(owner=owner, sku=row['sku'], quantity=0, **fields)
        if quantity:
            add_stock(product, quantity, reason='restock', user=user,
                      reference=fields.get('purchase_invoice_number', ''), notes='Batch upsert')
        return {
            'sku': product.sku,
            'action': 'created',
            'product': ProductSerializer(product).data,
        }

    previous_quantity = product.quantity
    if fields:
        for key, value in fields.items():
            setattr(product, key, value)
        product.save(update_fields=list(fields.keys()) + ['updated_at'])
    if quantity:
        add_stock(product, quantity, reason='restock', user=user,
                  reference=fields.get('purchase_invoice_number', ''), notes='Batch upsert')
    product.refresh_from_db()
    return {
        'sku': product.sku,
        'action': 'updated',
        'product': ProductSerializer(product).data,
        'previous_quantity': previous_quantity,
        'added_quantity': quantity,
        'new_quantity': product.quantity,
    }


def batch_upsert_products(owner, items, user=None):
    """
    Create or restock products from a list of row dicts.

    Returns a summary dict: success, created, updated, total, errors, results.
    """
    rows = consolidate_items(items)
    results = []
    errors = []

    with suspend_cache_signals():
        for row in rows:
            try:
                with transaction.atomic():
                    results.append(_upsert_row(owner, row, user))
            except (BatchRowError, DatabaseError) as e:
                logger.info(f"Batch upsert rejected SKU {row['sku']}: {e}")
                errors.append({'sku': row['sku'], 'name': row.get('name') or '', 'message': str(e)})
    bump_owner_cache_version(owner.pk)

    created = sum(1 for result in results if result['action'] == 'created')
    updated = sum(1 for result in results if result['action'] == 'updated')
    logger.info(f"Batch upsert for {owner.username}: {created} created, {updated} updated, {len(errors)} errors")
    return {
        'success': not errors,
        'created': created,
        'updated': updated,
        'total': len(rows),
        'errors': errors,
        'results': results,
    }
