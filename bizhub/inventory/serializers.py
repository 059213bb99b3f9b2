from decimal import Decimal
from rest_framework import serializers
from .models import Product, StockAdjustment


class ProductSerializer(serializers.ModelSerializer):
    stock_value = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)
    potential_profit = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)
    days_until_expiry = serializers.IntegerField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    is_about_to_expire = serializers.BooleanField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'owner', 'name', 'sku', 'description', 'category', 'price', 'cost', 'quantity', 'unit',
            'shelf', 'expiry_date', 'supplier', 'supplier_contact', 'gstin', 'hsn_code', 'gst_percentage',
            'purchase_invoice_number', 'purchase_invoice_date', 'low_stock_threshold',
            'stock_value', 'potential_profit', 'days_until_expiry', 'is_expired', 'is_about_to_expire',
            'is_low_stock', 'created_at', 'updated_at',
        ]
        read_only_fields = ['owner', 'created_at', 'updated_at']
        extra_kwargs = {
            'cost': {'required': True},
            'quantity': {'required': True},
            'category': {'required': False, 'allow_blank': True},
            'shelf': {'required': False, 'allow_blank': True},
        }
        # SKU uniqueness is checked per owner in validate_sku
        validators = []

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Name is required")
        return value

    def validate_sku(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("SKU is required")
        request = self.context.get('request')
        if request is not None:
            queryset = Product.objects.filter(owner=request.user, sku=value)
            if self.instance is not None:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError("A product with this SKU already exists")
        return value

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be a positive number")
        return value

    def validate_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Cost must be a non-negative number")
        return value

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Quantity must be a non-negative integer")
        return value

    def validate_gst_percentage(self, value):
        if value < 0 or value > Decimal('100'):
            raise serializers.ValidationError("GST percentage must be between 0 and 100")
        return value

    def validate_category(self, value):
        return value.strip() or 'Uncategorized'

    def validate_shelf(self, value):
        return value.strip() or 'Default'

    def update(self, instance, validated_data):
        # Stock only moves through inventory.stock, so quantity is never written here
        validated_data.pop('quantity', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=list(validated_data.keys()) + ['updated_at'])
        return instance


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_sku = serializers.CharField(source='product.sku', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True)

    class Meta:
        model = StockAdjustment
        fields = ['id', 'product', 'product_name', 'product_sku', 'adjustment_type', 'reason', 'quantity',
                  'quantity_before', 'quantity_after', 'reference', 'notes', 'created_by',
                  'created_by_username', 'created_at']
        read_only_fields = fields


class StockAdjustRequestSerializer(serializers.Serializer):
    """Input for a manual stock adjustment"""
    adjustment_type = serializers.ChoiceField(choices=StockAdjustment.ADJUSTMENT_TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(
        choices=['restock', 'correction', 'damaged', 'expired', 'other'],
        default='correction'
    )
    reference = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
