from datetime import timedelta
import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from bizhub.core.utils import parse_date, parse_positive_int
from .services import get_inventory_analytics, get_sales_summary, get_top_products, get_dashboard

logger = logging.getLogger('bizhub.analytics')


def resolve_period(request):
    """Read ?date_from=&date_to= (YYYY-MM-DD), defaulting to the last 30 days"""
    today = timezone.localdate()
    raw_from = request.query_params.get('date_from')
    raw_to = request.query_params.get('date_to')

    date_from = parse_date(raw_from) if raw_from else today - timedelta(days=30)
    date_to = parse_date(raw_to) if raw_to else today
    if date_from is None or date_to is None:
        return None, None, Response({'error': 'Dates must be in YYYY-MM-DD format'}, status=status.HTTP_400_BAD_REQUEST)
    if date_from > date_to:
        return None, None, Response({'error': 'date_from must not be after date_to'}, status=status.HTTP_400_BAD_REQUEST)
    return date_from, date_to, None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_analytics(request):
    """Category, stock, profit, value, expiry and shelf breakdowns of the user's inventory"""
    return Response(get_inventory_analytics(request.user, timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_summary(request):
    """Sales summary report"""
    date_from, date_to, error = resolve_period(request)
    if error:
        return error
    logger.debug(f"Sales summary for {request.user.username}: {date_from} to {date_to}")
    return Response(get_sales_summary(request.user, date_from, date_to))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_products(request):
    """Best-selling products by revenue"""
    date_from, date_to, error = resolve_period(request)
    if error:
        return error
    limit = parse_positive_int(request.query_params.get('limit'), 10, maximum=100)
    return Response({
        'period': {'from': date_from.isoformat(), 'to': date_to.isoformat()},
        'results': get_top_products(request.user, date_from, date_to, limit=limit),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Headline KPIs for today, this month, inventory and outstanding payments"""
    return Response(get_dashboard(request.user, timezone.localdate()))
