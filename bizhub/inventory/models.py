from django.conf import settings
from django.db import models
from django.utils import timezone
from decimal import Decimal


def default_low_stock_threshold():
    return settings.BIZHUB_LOW_STOCK_THRESHOLD


class Product(models.Model):
    """A trading product owned by one user, with its live stock quantity"""
    owner = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='products')
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, default='Uncategorized')
    price = models.DecimalField(max_digits=12, decimal_places=2, help_text="Selling price per unit")
    cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'), help_text="Purchase cost per unit")
    quantity = models.IntegerField(default=0, help_text="Units in stock; negative only after a backorder sale")
    unit = models.CharField(max_length=20, default='pcs')
    shelf = models.CharField(max_length=100, default='Default')
    expiry_date = models.DateField(null=True, blank=True)
    supplier = models.CharField(max_length=255, blank=True)
    supplier_contact = models.CharField(max_length=100, blank=True)
    gstin = models.CharField(max_length=20, blank=True)
    hsn_code = models.CharField(max_length=20, blank=True)
    gst_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    purchase_invoice_number = models.CharField(max_length=100, blank=True)
    purchase_invoice_date = models.DateField(null=True, blank=True)
    low_stock_threshold = models.IntegerField(default=default_low_stock_threshold)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['owner', 'sku'], name='uniq_product_owner_sku'),
        ]
        indexes = [
            models.Index(fields=['owner', 'category'], name='idx_product_owner_category'),
            models.Index(fields=['owner', 'expiry_date'], name='idx_product_owner_expiry'),
            models.Index(fields=['owner', 'quantity'], name='idx_product_owner_quantity'),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def stock_value(self):
        return (self.price or Decimal('0')) * self.quantity

    @property
    def potential_profit(self):
        return ((self.price or Decimal('0')) - (self.cost or Decimal('0'))) * self.quantity

    @property
    def days_until_expiry(self):
        if not self.expiry_date:
            return None
        return (self.expiry_date - timezone.localdate()).days

    @property
    def is_expired(self):
        days = self.days_until_expiry
        return days is not None and days < 0

    @property
    def is_about_to_expire(self):
        days = self.days_until_expiry
        return days is not None and 0 <= days <= settings.BIZHUB_EXPIRY_WARNING_DAYS

    @property
    def is_low_stock(self):
        return self.quantity <= self.low_stock_threshold


class StockAdjustment(models.Model):
    """Ledger of every stock movement (in/out) on a product"""
    ADJUSTMENT_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    REASON_CHOICES = [
        ('sale', 'Sale'),
        ('sale_cancel', 'Sale Cancelled'),
        ('sale_return', 'Sale Returned'),
        ('restock', 'Restock'),
        ('correction', 'Correction'),
        ('damaged', 'Damaged'),
        ('expired', 'Expired'),
        ('other', 'Other'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='adjustments')
    adjustment_type = models.CharField(max_length=10, choices=ADJUSTMENT_TYPE_CHOICES)
    reason = models.CharField(max_length=20, choices=REASON_CHOICES)
    quantity = models.PositiveIntegerField()
    quantity_before = models.IntegerField()
    quantity_after = models.IntegerField()
    reference = models.CharField(max_length=100, blank=True, help_text="Invoice number or other document reference")
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, related_name='stock_adjustments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_adjustments'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['product', '-created_at'], name='idx_adjustment_product'),
            models.Index(fields=['reference'], name='idx_adjustment_reference'),
        ]

    def __str__(self):
        return f"{self.adjustment_type} {self.quantity} x {self.product_id} ({self.reason})"
