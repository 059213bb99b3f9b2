"""
Atomic stock movements

Every change to Product.quantity goes through this module: a single
UPDATE with an F() expression followed by one StockAdjustment ledger row.
Callers must already be inside transaction.atomic().
"""
import logging

from django.db.models import F
from django.utils import timezone

from bizhub.core.exceptions import InsufficientStockError
from .models import Product, StockAdjustment

logger = logging.getLogger(__name__)


def _current_quantity(product_id):
    return Product.objects.filter(pk=product_id).values_list('quantity', flat=True).first()


def shortage_for(product, requested):
    """Return the shortage description for a product, or None when stock covers the request"""
    available = _current_quantity(product.pk)
    if available is None or available < requested:
        return {
            'product_id': product.pk,
            'product_name': product.name,
            'sku': product.sku,
            'requested': requested,
            'available': available or 0,
        }
    return None


def remove_stock(product, quantity, reason='sale', user=None, reference='', notes='', allow_negative=False):
    """
    Take quantity units out of a product's stock.

    The decrement is conditional on enough stock being present unless
    allow_negative is set, so two concurrent requests cannot both take the last unit.
    Raises InsufficientStockError when the stock does not cover the request.
    """
    queryset = Product.objects.filter(pk=product.pk)
    if not allow_negative:
        queryset = queryset.filter(quantity__gte=quantity)

    updated = queryset.update(quantity=F('quantity') - quantity, updated_at=timezone.now())
    if not updated:
        shortage = shortage_for(product, quantity) or {
            'product_id': product.pk, 'product_name': product.name, 'sku': product.sku,
            'requested': quantity, 'available': 0,
        }
        raise InsufficientStockError(
            f"Insufficient stock for {product.name}",
            shortages=[shortage]
        )

    new_quantity = _current_quantity(product.pk)
    if new_quantity < 0:
        logger.warning(f"Stock for {product.sku} went negative ({new_quantity}) on backorder {reference}")

    product.quantity = new_quantity
    return StockAdjustment.objects.create(
        product=product,
        adjustment_type='out',
        reason=reason,
        quantity=quantity,
        quantity_before=new_quantity + quantity,
        quantity_after=new_quantity,
        reference=reference or '',
        notes=notes or '',
        created_by=user,
    )


def add_stock(product, quantity, reason='restock', user=None, reference='', notes=''):
    """Put quantity units back into (or onto) a product's stock"""
    Product.objects.filter(pk=product.pk).update(quantity=F('quantity') + quantity, updated_at=timezone.now())
    new_quantity = _current_quantity(product.pk)

    product.quantity = new_quantity
    return StockAdjustment.objects.create(
        product=product,
        adjustment_type='in',
        reason=reason,
        quantity=quantity,
        quantity_before=new_quantity - quantity,
        quantity_after=new_quantity,
        reference=reference or '',
        notes=notes or '',
        created_by=user,
    )
