import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Sum, F, DecimalField, ExpressionWrapper
from django.shortcuts import get_object_or_404
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.pagination import paginate_queryset
from bizhub.core.utils import create_audit_log
from .batch import batch_upsert_products
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer, StockAdjustmentSerializer, StockAdjustRequestSerializer
from .stock import add_stock, remove_stock

logger = logging.getLogger(__name__)

TRACKED_FIELDS = ['name', 'sku', 'description', 'category', 'price', 'cost', 'quantity', 'unit', 'shelf',
                  'expiry_date', 'supplier', 'supplier_contact', 'gstin', 'hsn_code', 'gst_percentage',
                  'purchase_invoice_number', 'purchase_invoice_date', 'low_stock_threshold']


def owner_products(request):
    return Product.objects.filter(owner=request.user)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List the user's products or create a new product"""
    if request.method == 'GET':
        filterset = ProductFilter(request.query_params, queryset=owner_products(request))
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs
        if not request.query_params.get('ordering'):
            queryset = queryset.order_by('-created_at', '-id')
        return Response(paginate_queryset(request, queryset, ProductSerializer))

    serializer = ProductSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    product = serializer.save(owner=request.user)

    create_audit_log(
        request=request,
        action='create',
        model_name='Product',
        object_id=str(product.id),
        object_name=product.name,
        object_reference=product.sku,
        changes={'name': product.name, 'sku': product.sku, 'price': str(product.price), 'quantity': product.quantity}
    )
    logger.info(f"Product {product.sku} created by {request.user.username}")

    location = reverse('product-detail', kwargs={'pk': product.pk})
    return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED, headers={'Location': location})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete one of the user's products"""
    product = get_object_or_404(Product, pk=pk, owner=request.user)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)

    if request.method in ('PUT', 'PATCH'):
        with transaction.atomic():
            product = Product.objects.select_for_update().get(pk=product.pk)
            old_values = {field: getattr(product, field) for field in TRACKED_FIELDS}
            serializer = ProductSerializer(
                product, data=request.data, partial=request.method == 'PATCH', context={'request': request}
            )
            serializer.is_valid(raise_exception=True)
            target_quantity = serializer.validated_data.get('quantity')
            product = serializer.save()

            # A new quantity becomes a correction movement with its ledger row
            difference = 0 if target_quantity is None else target_quantity - product.quantity
            if difference > 0:
                add_stock(product, difference, reason='correction', user=request.user, notes='Product edit')
            elif difference < 0:
                remove_stock(product, -difference, reason='correction', user=request.user, notes='Product edit')

        changes = {}
        for field in TRACKED_FIELDS:
            new_value = getattr(product, field)
            if old_values[field] != new_value:
                changes[field] = {'old': str(old_values[field]), 'new': str(new_value)}

        if changes:
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                object_reference=product.sku,
                changes=changes
            )
        return Response(ProductSerializer(product).data)

    # DELETE
    product_id = product.id
    product_name = product.name
    product_sku = product.sku
    product.delete()
    create_audit_log(
        request=request,
        action='delete',
        model_name='Product',
        object_id=str(product_id),
        object_name=product_name,
        object_reference=product_sku,
        changes={'name': product_name, 'sku': product_sku}
    )
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_batch_upsert(request):
    """Create or restock many products at once, keyed by SKU"""
    items = request.data.get('items') if isinstance(request.data, dict) else None
    if not isinstance(items, list) or not items:
        return Response({'error': 'Items must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)

    result = batch_upsert_products(request.user, items, user=request.user)
    return Response(result, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def product_adjust_stock(request, pk):
    """Manually move stock in or out of a product"""
    product = get_object_or_404(Product, pk=pk, owner=request.user)
    serializer = StockAdjustRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        if data['adjustment_type'] == 'in':
            adjustment = add_stock(product, data['quantity'], reason=data['reason'], user=request.user,
                                   reference=data['reference'], notes=data['notes'])
        else:
            adjustment = remove_stock(product, data['quantity'], reason=data['reason'], user=request.user,
                                      reference=data['reference'], notes=data['notes'])

    create_audit_log(
        request=request,
        action='stock_adjust',
        model_name='StockAdjustment',
        object_id=str(adjustment.id),
        object_name=product.name,
        object_reference=product.sku,
        changes={
            'adjustment_type': adjustment.adjustment_type,
            'quantity': adjustment.quantity,
            'reason': adjustment.reason,
            'new_stock_quantity': adjustment.quantity_after,
        }
    )

    product.refresh_from_db()
    return Response({
        'product': ProductSerializer(product).data,
        'adjustment': StockAdjustmentSerializer(adjustment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_adjustments(request, pk):
    """Stock ledger of one product"""
    product = get_object_or_404(Product, pk=pk, owner=request.user)
    adjustments = product.adjustments.select_related('product', 'created_by')
    return Response(paginate_queryset(request, adjustments, StockAdjustmentSerializer))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_expiring(request):
    """Products expiring between today and ?days= (default warning window)"""
    try:
        days = int(request.query_params.get('days', settings.BIZHUB_EXPIRY_WARNING_DAYS))
    except (TypeError, ValueError):
        return Response({'error': 'days must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    if days < 0:
        return Response({'error': 'days must not be negative'}, status=status.HTTP_400_BAD_REQUEST)

    today = timezone.localdate()
    products = owner_products(request).filter(
        expiry_date__gte=today,
        expiry_date__lte=today + timedelta(days=days)
    ).order_by('expiry_date', 'name')
    return Response({
        'days': days,
        'count': products.count(),
        'results': ProductSerializer(products, many=True).data,
    })


def _grouped_counts(request, field):
    stock_value = ExpressionWrapper(F('price') * F('quantity'), output_field=DecimalField(max_digits=16, decimal_places=2))
    rows = (
        owner_products(request)
        .values(field)
        .annotate(product_count=Count('id'), total_quantity=Sum('quantity'), total_value=Sum(stock_value))
        .order_by(field)
    )
    return [
        {
            'name': row[field],
            'product_count': row['product_count'],
            'total_quantity': row['total_quantity'] or 0,
            'total_value': float(row['total_value'] or 0),
        }
        for row in rows
    ]


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def category_list(request):
    """Distinct categories of the user's products"""
    return Response(_grouped_counts(request, 'category'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def shelf_list(request):
    """Distinct shelves of the user's products"""
    return Response(_grouped_counts(request, 'shelf'))
