from django.db import models
from django.utils import timezone
from decimal import Decimal


PAYMENT_METHOD_CHOICES = [
    ('cash', 'Cash'),
    ('card', 'Card'),
    ('upi', 'UPI'),
    ('bank_transfer', 'Bank Transfer'),
    ('credit', 'Credit'),
    ('cheque', 'Cheque'),
    ('other', 'Other'),
]


class Cart(models.Model):
    """Shopping cart built up at the counter before a sale"""
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('held', 'Held'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    cart_number = models.CharField(max_length=100, unique=True)
    owner = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='carts')
    customer_name = models.CharField(max_length=255, default='Walk-in Customer')
    customer_phone = models.CharField(max_length=20, blank=True)
    customer_email = models.EmailField(blank=True)
    customer_address = models.TextField(blank=True)
    customer_gstin = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'carts'
        ordering = ['-created_at']

    def __str__(self):
        return self.cart_number


class CartItem(models.Model):
    """One product line in a cart; stock is checked, never reserved"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('inventory.Product', on_delete=models.CASCADE, related_name='cart_items')
    quantity = models.PositiveIntegerField(default=1)
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, help_text="Overrides the product price when set")
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'cart_items'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(fields=['cart', 'product'], name='uniq_cart_item_product'),
        ]

    @property
    def unit_price(self):
        if self.selling_price is not None:
            return self.selling_price
        return self.product.price


class Sale(models.Model):
    """A completed sale (invoice) with line snapshots and stored totals"""
    PAYMENT_STATUS_CHOICES = [
        ('paid', 'Paid'),
        ('partial', 'Partial'),
        ('pending', 'Pending'),
        ('refunded', 'Refunded'),
    ]

    STATUS_CHOICES = [
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
        ('returned', 'Returned'),
    ]

    invoice_number = models.CharField(max_length=100)
    owner = models.ForeignKey('core.User', on_delete=models.CASCADE, related_name='sales')
    cart = models.OneToOneField(Cart, on_delete=models.SET_NULL, null=True, blank=True, related_name='sale')
    customer_name = models.CharField(max_length=255, default='Walk-in Customer')
    customer_phone = models.CharField(max_length=20, blank=True)
    customer_email = models.EmailField(blank=True)
    customer_address = models.TextField(blank=True)
    customer_gstin = models.CharField(max_length=20, blank=True)
    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_discount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_tax = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    grand_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    profit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    profit_margin = models.DecimalField(max_digits=7, decimal_places=2, default=Decimal('0.00'))
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default='paid')
    amount_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    amount_due = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    sale_date = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    allow_backorder = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales'
        ordering = ['-sale_date', '-id']
        constraints = [
            models.UniqueConstraint(fields=['owner', 'invoice_number'], name='uniq_sale_owner_invoice'),
        ]
        indexes = [
            models.Index(fields=['owner', '-sale_date'], name='idx_sale_owner_date'),
            models.Index(fields=['owner', 'status'], name='idx_sale_owner_status'),
            models.Index(fields=['owner', 'payment_status'], name='idx_sale_owner_payment'),
        ]

    def __str__(self):
        return self.invoice_number


class SaleItem(models.Model):
    """Sold line; product name/SKU/cost are snapshots taken at sale time"""
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('inventory.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items')
    product_name = models.CharField(max_length=255)
    product_sku = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField()
    unit = models.CharField(max_length=20, default='pcs')
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    selling_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_price = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']

    def __str__(self):
        return f"{self.product_name} x{self.quantity}"


class Payment(models.Model):
    """Payment received against a sale after it was recorded"""
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey('core.User', on_delete=models.SET_NULL, null=True, related_name='payments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.amount} for {self.sale_id}"
