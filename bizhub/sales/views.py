import logging
from datetime import datetime, time, timedelta

from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.utils import create_audit_log, parse_date, parse_positive_int
from bizhub.inventory.models import Product
from .models import Cart, CartItem, Sale
from .serializers import (
    CartSerializer, CartItemSerializer, CartItemWriteSerializer, CartItemUpdateSerializer, CheckoutSerializer,
    SaleCreateSerializer, SaleSerializer, SaleListSerializer, PaymentSerializer,
)
from .services import (
    generate_cart_number, add_item_to_cart, update_cart_item, ensure_cart_active, checkout_cart,
    record_sale, reverse_sale, add_payment, sales_summary,
)

logger = logging.getLogger(__name__)


def owner_cart(request, pk):
    return get_object_or_404(Cart.objects.prefetch_related('items__product'), pk=pk, owner=request.user)


def cart_response(cart, status_code=status.HTTP_200_OK):
    cart = Cart.objects.prefetch_related('items__product').get(pk=cart.pk)
    return Response(CartSerializer(cart).data, status=status_code)


# Cart views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def cart_list_create(request):
    """List the user's carts or open a new one"""
    if request.method == 'GET':
        carts = Cart.objects.filter(owner=request.user).prefetch_related('items__product')
        status_filter = request.query_params.get('status')
        if status_filter:
            carts = carts.filter(status=status_filter)
        return Response(CartSerializer(carts, many=True).data)

    serializer = CartSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    cart = serializer.save(owner=request.user, cart_number=generate_cart_number())
    return cart_response(cart, status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_detail(request, pk):
    """Retrieve, update the customer/payment details of, or delete a cart"""
    cart = owner_cart(request, pk)

    if request.method == 'GET':
        return Response(CartSerializer(cart).data)

    if request.method == 'PATCH':
        ensure_cart_active(cart)
        serializer = CartSerializer(cart, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return cart_response(cart)

    # DELETE - carts never reserve stock, so nothing to restore
    if cart.status == 'completed':
        return Response({'error': 'Completed carts cannot be deleted'}, status=status.HTTP_400_BAD_REQUEST)
    cart.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_items(request, pk):
    """Add a product to a cart, checked against live stock"""
    cart = owner_cart(request, pk)
    serializer = CartItemWriteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    product = Product.objects.filter(pk=data['product'], owner=request.user).first()
    if product is None:
        return Response({'error': f"Product not found: {data['product']}"}, status=status.HTTP_400_BAD_REQUEST)

    item = add_item_to_cart(
        cart, product, data['quantity'],
        selling_price=data.get('selling_price'),
        discount=data.get('discount'),
        tax=data.get('tax'),
    )
    create_audit_log(
        request=request,
        action='cart_add',
        model_name='CartItem',
        object_id=str(item.id),
        object_name=product.name,
        object_reference=cart.cart_number,
        changes={'product': product.sku, 'quantity_added': data['quantity'], 'line_quantity': item.quantity}
    )
    return cart_response(cart, status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cart_item_detail(request, pk, item_id):
    """Change or remove one cart line"""
    cart = owner_cart(request, pk)
    item = get_object_or_404(CartItem.objects.select_related('product', 'cart'), pk=item_id, cart=cart)

    if request.method == 'DELETE':
        ensure_cart_active(cart)
        create_audit_log(
            request=request,
            action='cart_remove',
            model_name='CartItem',
            object_id=str(item.id),
            object_name=item.product.name,
            object_reference=cart.cart_number,
            changes={'product': item.product.sku, 'quantity': item.quantity}
        )
        item.delete()
        return cart_response(cart)

    serializer = CartItemUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    old_quantity = item.quantity
    item = update_cart_item(item, **serializer.validated_data)
    create_audit_log(
        request=request,
        action='cart_update',
        model_name='CartItem',
        object_id=str(item.id),
        object_name=item.product.name,
        object_reference=cart.cart_number,
        changes={'quantity': {'old': old_quantity, 'new': item.quantity}}
    )
    return Response(CartItemSerializer(item).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_hold(request, pk):
    """Park an active cart"""
    cart = owner_cart(request, pk)
    if cart.status != 'active':
        return Response({'error': f'Only active carts can be held; this cart is {cart.status}'}, status=status.HTTP_400_BAD_REQUEST)
    cart.status = 'held'
    cart.save(update_fields=['status', 'updated_at'])
    return Response(CartSerializer(cart).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_unhold(request, pk):
    """Resume a held cart"""
    cart = owner_cart(request, pk)
    if cart.status != 'held':
        return Response({'error': f'Only held carts can be resumed; this cart is {cart.status}'}, status=status.HTTP_400_BAD_REQUEST)
    cart.status = 'active'
    cart.save(update_fields=['status', 'updated_at'])
    return Response(CartSerializer(cart).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_checkout(request, pk):
    """Checkout a cart - record the sale and take its stock atomically"""
    cart = owner_cart(request, pk)
    serializer = CheckoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    sale = checkout_cart(
        cart,
        amount_paid=data.get('amount_paid'),
        payment_method=data.get('payment_method'),
        sale_date=data.get('sale_date'),
        notes=data.get('notes'),
        allow_backorder=data.get('allow_backorder'),
        user=request.user,
    )
    create_audit_log(
        request=request,
        action='cart_checkout',
        model_name='Cart',
        object_id=str(cart.id),
        object_name=f"Cart {cart.cart_number}",
        object_reference=sale.invoice_number,
        changes={'cart_number': cart.cart_number, 'invoice_number': sale.invoice_number, 'grand_total': str(sale.grand_total)}
    )
    return Response({
        'message': 'Sale recorded successfully',
        'sale': SaleSerializer(sale).data,
        'summary': sale_summary_payload(sale),
    }, status=status.HTTP_201_CREATED)


def sale_summary_payload(sale):
    return {
        'invoice_number': sale.invoice_number,
        'item_count': sale.items.count(),
        'grand_total': str(sale.grand_total),
        'profit': str(sale.profit),
        'profit_margin': str(sale.profit_margin),
    }


# Sale views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def sale_list_create(request):
    """List the user's sales with a summary, or record a direct sale"""
    if request.method == 'GET':
        sales = Sale.objects.filter(owner=request.user).prefetch_related('items')

        start_date = parse_date(request.query_params.get('start_date'))
        end_date = parse_date(request.query_params.get('end_date'))
        if start_date:
            start = timezone.make_aware(datetime.combine(start_date, time.min))
            sales = sales.filter(sale_date__gte=start)
        if end_date:
            end = timezone.make_aware(datetime.combine(end_date + timedelta(days=1), time.min))
            sales = sales.filter(sale_date__lt=end)

        status_filter = request.query_params.get('status')
        if status_filter:
            sales = sales.filter(status=status_filter)
        payment_status = request.query_params.get('payment_status')
        if payment_status:
            sales = sales.filter(payment_status=payment_status)

        search = (request.query_params.get('search') or '').strip()
        if search:
            sales = sales.filter(
                Q(invoice_number__icontains=search) |
                Q(customer_name__icontains=search) |
                Q(customer_phone__icontains=search)
            )

        limit = parse_positive_int(request.query_params.get('limit'), 50, maximum=500)
        sales = sales.order_by('-sale_date', '-id')[:limit]
        return Response({
            'sales': SaleListSerializer(sales, many=True).data,
            'summary': sales_summary(request.user),
        })

    serializer = SaleCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    product_ids = {item['product_id'] for item in data['items']}
    products = {p.pk: p for p in Product.objects.filter(owner=request.user, pk__in=product_ids)}
    missing = sorted(product_ids - set(products))
    if missing:
        return Response(
            {'error': f"Product not found: {', '.join(str(pk) for pk in missing)}"},
            status=status.HTTP_400_BAD_REQUEST
        )

    items = [
        {
            'product': products[item['product_id']],
            'quantity': item['quantity'],
            'selling_price': item.get('selling_price'),
            'discount': item.get('discount'),
            'tax': item.get('tax'),
        }
        for item in data['items']
    ]
    sale = record_sale(
        request.user,
        items,
        customer=data.get('customer'),
        amount_paid=data.get('amount_paid'),
        payment_method=data.get('payment_method', 'cash'),
        sale_date=data.get('sale_date'),
        notes=data.get('notes', ''),
        invoice_number=data.get('invoice_number') or None,
        allow_backorder=data.get('allow_backorder'),
        user=request.user,
    )
    create_audit_log(
        request=request,
        action='sale_create',
        model_name='Sale',
        object_id=str(sale.id),
        object_name=f"Sale {sale.invoice_number}",
        object_reference=sale.invoice_number,
        changes={
            'items': [f"{item.product_sku} x{item.quantity}" for item in sale.items.all()],
            'grand_total': str(sale.grand_total),
            'payment_status': sale.payment_status,
        }
    )
    return Response({
        'message': 'Sale recorded successfully',
        'sale': SaleSerializer(sale).data,
        'summary': sale_summary_payload(sale),
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sale_detail(request, pk):
    """Retrieve one of the user's sales with its lines and payments"""
    sale = get_object_or_404(Sale.objects.prefetch_related('items', 'payments'), pk=pk, owner=request.user)
    return Response(SaleSerializer(sale).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sale_payments(request, pk):
    """Record a payment against a sale"""
    sale = get_object_or_404(Sale, pk=pk, owner=request.user)
    serializer = PaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    old_paid = sale.amount_paid
    old_status = sale.payment_status
    sale, payment = add_payment(
        sale,
        data['amount'],
        payment_method=data.get('payment_method'),
        reference=data.get('reference', ''),
        notes=data.get('notes', ''),
        user=request.user,
    )
    create_audit_log(
        request=request,
        action='payment_add',
        model_name='Payment',
        object_id=str(payment.id),
        object_name=f"Payment for Sale {sale.invoice_number}",
        object_reference=sale.invoice_number,
        changes={
            'amount': str(payment.amount),
            'payment_method': payment.payment_method,
            'payment_status': {'old': old_status, 'new': sale.payment_status},
            'amount_paid': {'old': str(old_paid), 'new': str(sale.amount_paid)},
            'amount_due': str(sale.amount_due),
        }
    )
    return Response({
        'payment': PaymentSerializer(payment).data,
        'sale': SaleSerializer(sale).data,
    }, status=status.HTTP_201_CREATED)


def _reverse(request, pk, new_status, action):
    sale = get_object_or_404(Sale, pk=pk, owner=request.user)
    sale = reverse_sale(sale, new_status, user=request.user)
    create_audit_log(
        request=request,
        action=action,
        model_name='Sale',
        object_id=str(sale.id),
        object_name=f"Sale {sale.invoice_number}",
        object_reference=sale.invoice_number,
        changes={
            'status': new_status,
            'payment_status': sale.payment_status,
            'items_restocked': [f"{item.product_sku} x{item.quantity}" for item in sale.items.all()],
        }
    )
    return Response(SaleSerializer(sale).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sale_cancel(request, pk):
    """Cancel a completed sale and restock its items"""
    return _reverse(request, pk, 'cancelled', 'sale_cancel')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def sale_return(request, pk):
    """Take back a completed sale, restock its items and mark it refunded"""
    return _reverse(request, pk, 'returned', 'sale_return')
