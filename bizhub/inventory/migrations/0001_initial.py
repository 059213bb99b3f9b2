# Generated manually

import bizhub.inventory.models
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('sku', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(default='Uncategorized', max_length=100)),
                ('price', models.DecimalField(decimal_places=2, help_text='Selling price per unit', max_digits=12)),
                ('cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Purchase cost per unit', max_digits=12)),
                ('quantity', models.IntegerField(default=0, help_text='Units in stock; negative only after a backorder sale')),
                ('unit', models.CharField(default='pcs', max_length=20)),
                ('shelf', models.CharField(default='Default', max_length=100)),
                ('expiry_date', models.DateField(blank=True, null=True)),
                ('supplier', models.CharField(blank=True, max_length=255)),
                ('supplier_contact', models.CharField(blank=True, max_length=100)),
                ('gstin', models.CharField(blank=True, max_length=20)),
                ('hsn_code', models.CharField(blank=True, max_length=20)),
                ('gst_percentage', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('purchase_invoice_number', models.CharField(blank=True, max_length=100)),
                ('purchase_invoice_date', models.DateField(blank=True, null=True)),
                ('low_stock_threshold', models.IntegerField(default=bizhub.inventory.models.default_low_stock_threshold)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['owner', 'category'], name='idx_product_owner_category'),
                    models.Index(fields=['owner', 'expiry_date'], name='idx_product_owner_expiry'),
                    models.Index(fields=['owner', 'quantity'], name='idx_product_owner_quantity'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('owner', 'sku'), name='uniq_product_owner_sku'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockAdjustment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('adjustment_type', models.CharField(choices=[('in', 'Stock In'), ('out', 'Stock Out')], max_length=10)),
                ('reason', models.CharField(choices=[('sale', 'Sale'), ('sale_cancel', 'Sale Cancelled'), ('sale_return', 'Sale Returned'), ('restock', 'Restock'), ('correction', 'Correction'), ('damaged', 'Damaged'), ('expired', 'Expired'), ('other', 'Other')], max_length=20)),
                ('quantity', models.PositiveIntegerField()),
                ('quantity_before', models.IntegerField()),
                ('quantity_after', models.IntegerField()),
                ('reference', models.CharField(blank=True, help_text='Invoice number or other document reference', max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stock_adjustments', to=settings.AUTH_USER_MODEL)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='adjustments', to='inventory.product')),
            ],
            options={
                'db_table': 'stock_adjustments',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['product', '-created_at'], name='idx_adjustment_product'),
                    models.Index(fields=['reference'], name='idx_adjustment_reference'),
                ],
            },
        ),
    ]
