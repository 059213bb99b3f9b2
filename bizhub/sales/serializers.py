from rest_framework import serializers
from .calculations import line_total, compute_totals
from .models import Cart, CartItem, Sale, SaleItem, Payment, PAYMENT_METHOD_CHOICES


class CartItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    unit = serializers.CharField(source='product.unit', read_only=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    available_quantity = serializers.IntegerField(source='product.quantity', read_only=True)
    stock_ok = serializers.SerializerMethodField()
    line_total = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'unit', 'quantity', 'selling_price', 'unit_price',
                  'discount', 'tax', 'line_total', 'available_quantity', 'stock_ok', 'created_at']

    def get_stock_ok(self, obj):
        return obj.quantity <= obj.product.quantity

    def get_line_total(self, obj):
        return str(line_total(obj.unit_price, obj.quantity, obj.discount, obj.tax))


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    totals = serializers.SerializerMethodField()
    can_checkout = serializers.SerializerMethodField()

    class Meta:
        model = Cart
        fields = ['id', 'cart_number', 'customer_name', 'customer_phone', 'customer_email', 'customer_address',
                  'customer_gstin', 'status', 'payment_method', 'notes', 'items', 'totals', 'can_checkout',
                  'created_at', 'updated_at']
        read_only_fields = ['cart_number', 'status', 'created_at', 'updated_at']

    def get_totals(self, obj):
        lines = [
            {
                'selling_price': item.unit_price,
                'quantity': item.quantity,
                'discount': item.discount,
                'tax': item.tax,
                'cost_price': item.product.cost,
            }
            for item in obj.items.all()
        ]
        totals = compute_totals(lines)
        return {
            'item_count': len(lines),
            'subtotal': str(totals['subtotal']),
            'total_discount': str(totals['total_discount']),
            'total_tax': str(totals['total_tax']),
            'grand_total': str(totals['grand_total']),
        }

    def get_can_checkout(self, obj):
        items = list(obj.items.all())
        return obj.status == 'active' and bool(items) and all(item.quantity <= item.product.quantity for item in items)

    def validate_customer_name(self, value):
        return value.strip() or 'Walk-in Customer'


class CartItemWriteSerializer(serializers.Serializer):
    """Input for adding a product to a cart"""
    product = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    selling_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, required=False)
    selling_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)


class CheckoutSerializer(serializers.Serializer):
    amount_paid = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHOD_CHOICES, required=False)
    sale_date = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    allow_backorder = serializers.BooleanField(required=False, allow_null=True, default=None)


class CustomerSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, default='Walk-in Customer')
    phone = serializers.CharField(required=False, allow_blank=True, default='')
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    gstin = serializers.CharField(required=False, allow_blank=True, default='')


class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    selling_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)


class SaleCreateSerializer(CheckoutSerializer):
    """Input for a direct sale"""
    items = SaleItemInputSerializer(many=True, allow_empty=False)
    customer = CustomerSerializer(required=False)
    invoice_number = serializers.CharField(required=False, allow_blank=True, max_length=100)


class SaleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'product_name', 'product_sku', 'quantity', 'unit', 'cost_price', 'selling_price',
                  'discount', 'tax', 'total_price']


class PaymentSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)

    class Meta:
        model = Payment
        fields = ['id', 'sale', 'amount', 'payment_method', 'reference', 'notes', 'created_by', 'created_at']
        read_only_fields = ['sale', 'created_by', 'created_at']


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)
    customer = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = ['id', 'invoice_number', 'cart', 'customer', 'items', 'subtotal', 'total_discount', 'total_tax',
                  'grand_total', 'total_cost', 'profit', 'profit_margin', 'payment_method', 'payment_status',
                  'amount_paid', 'amount_due', 'payments', 'sale_date', 'notes', 'status', 'allow_backorder',
                  'created_at', 'updated_at']
        read_only_fields = fields

    def get_customer(self, obj):
        return {
            'name': obj.customer_name,
            'phone': obj.customer_phone,
            'email': obj.customer_email,
            'address': obj.customer_address,
            'gstin': obj.customer_gstin,
        }


class SaleListSerializer(SaleSerializer):
    item_count = serializers.IntegerField(source='items.count', read_only=True)

    class Meta(SaleSerializer.Meta):
        fields = ['id', 'invoice_number', 'customer', 'item_count', 'grand_total', 'profit', 'profit_margin',
                  'payment_method', 'payment_status', 'amount_paid', 'amount_due', 'sale_date', 'status']
        read_only_fields = fields
