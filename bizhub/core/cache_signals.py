"""
Cache invalidation signals
Bump the owner's cache version whenever stock, sales or payments change
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from contextlib import contextmanager
import logging
import threading

from .cache_utils import bump_owner_cache_version

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()

WATCHED_MODELS = ('Product', 'StockAdjustment', 'Sale', 'SaleItem', 'Payment')


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend cache invalidation signals for bulk operations.
    The caller must bump the owner's cache version after the block.
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def resolve_owner_id(instance):
    """Find the owning user id for any of the watched models"""
    if hasattr(instance, 'owner_id'):
        return instance.owner_id
    if hasattr(instance, 'sale_id'):
        sale = getattr(instance, 'sale', None)
        return sale.owner_id if sale else None
    if hasattr(instance, 'product_id'):
        product = getattr(instance, 'product', None)
        return product.owner_id if product else None
    return None


def invalidate_owner_cache(owner_id):
    bump_owner_cache_version(owner_id)
    # Bump again once committed so a reader racing the transaction cannot pin stale data
    transaction.on_commit(lambda: bump_owner_cache_version(owner_id))


@receiver([post_save, post_delete])
def invalidate_owner_analytics(sender, instance, **kwargs):
    """Invalidate derived analytics when products, stock, sales or payments change"""
    if is_suspended() or sender.__name__ not in WATCHED_MODELS:
        return
    if sender._meta.app_label not in ('inventory', 'sales'):
        return
    try:
        invalidate_owner_cache(resolve_owner_id(instance))
    except Exception as e:
        logger.warning(f"Error invalidating cache for {sender.__name__}: {e}")
