"""
Order operations and grouped analytics.

Regular users only ever see their own orders; ADMIN principals see all of
them. Status updates accept any target status from any current status.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from backend.api.fields import parse_id
from backend.core.cache_utils import ORDER_ANALYTICS_CACHE_TTL, cached_query
from backend.core.utils import create_audit_log

from .filters import OrderFilter
from .models import Order, OrderStatus
from .serializers import OrderCreateSerializer
from .signals import ORDER_ANALYTICS_PREFIX

logger = logging.getLogger('backend.orders')

DEFAULT_DAYS = 30
MAX_DAYS = 3650
DEFAULT_USER_LIMIT = 10


def _scope_to_principal(queryset, principal):
    if principal.is_admin:
        return queryset
    return queryset.filter(user_id=principal.user_id)


def _money(value):
    return float(value or Decimal('0.00'))


def create_order(data, principal, request=None):
    """Insert an order owned by the caller"""
    data = dict(data)
    if isinstance(data.get('amount'), float):
        data['amount'] = round(data['amount'], 2)

    serializer = OrderCreateSerializer(data=data)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)

    with transaction.atomic():
        order = serializer.save(user_id=principal.user_id)

    logger.info(f"User id={principal.user_id} created order {order.order_no} ({order.amount})")
    create_audit_log(request=request, action='create', model_name='Order', object_id=order.pk,
                     user=principal.user_id, object_reference=order.order_no,
                     changes={'status': order.status, 'amount': str(order.amount)})
    return Order.objects.select_related('user').get(pk=order.pk)


def list_orders(principal, filters=None):
    """All orders for admins, own orders otherwise, newest first"""
    queryset = _scope_to_principal(Order.objects.select_related('user'), principal)

    if filters:
        order_filter = OrderFilter(filters, queryset=queryset)
        if not order_filter.is_valid():
            raise ValidationError(order_filter.errors)
        queryset = order_filter.qs

    return queryset.order_by('-created_at', '-id')


def update_order_status(order_id, status, principal, request=None):
    """Set a new status; only the owner or an admin may do so"""
    pk = parse_id(order_id, 'Order')
    if status not in OrderStatus.values:
        raise ValidationError({'status': [f'"{status}" is not a valid choice.']})

    with transaction.atomic():
        order = Order.objects.select_for_update().select_related('user').filter(pk=pk).first()
        if order is None:
            raise NotFound('Order not found')

        if not principal.is_admin and order.user_id != principal.user_id:
            logger.warning(f"User id={principal.user_id} tried to update order {order.order_no} owned by user id={order.user_id}")
            raise PermissionDenied('Not allowed')

        previous_status = order.status
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Order {order.order_no} status {previous_status} -> {status} by user id={principal.user_id}")
    create_audit_log(request=request, action='status_change', model_name='Order', object_id=order.pk,
                     user=principal.user_id, object_reference=order.order_no,
                     changes={'status': {'from': previous_status, 'to': status}})
    return order


def order_stats(principal):
    """Count and revenue over the orders visible to the principal"""
    user_id = None if principal.is_admin else principal.user_id
    return _order_stats(user_id)


@cached_query(cache_ttl=ORDER_ANALYTICS_CACHE_TTL, key_prefix=ORDER_ANALYTICS_PREFIX)
def _order_stats(user_id):
    queryset = Order.objects.all()
    if user_id is not None:
        queryset = queryset.filter(user_id=user_id)
    totals = queryset.aggregate(total_orders=Count('id'), total_revenue=Sum('amount'))
    return {
        'total_orders': totals['total_orders'],
        'total_revenue': _money(totals['total_revenue']),
    }


def orders_by_date(days=DEFAULT_DAYS):
    if days is None:
        days = DEFAULT_DAYS
    if days < 1:
        raise ValidationError({'days': ['Ensure this value is greater than or equal to 1.']})
    if days > MAX_DAYS:
        raise ValidationError({'days': [f'Ensure this value is less than or equal to {MAX_DAYS}.']})
    return _orders_by_date(days)


@cached_query(cache_ttl=ORDER_ANALYTICS_CACHE_TTL, key_prefix=ORDER_ANALYTICS_PREFIX)
def _orders_by_date(days):
    """Orders of the last ``days`` days bucketed by calendar day (UTC), oldest first"""
    start = timezone.now() - timedelta(days=days)
    rows = Order.objects.filter(
        created_at__gte=start
    ).annotate(
        day=TruncDate('created_at')
    ).values('day').annotate(
        count=Count('id'),
        revenue=Sum('amount')
    ).order_by('day')

    return [
        {'date': row['day'].isoformat(), 'count': row['count'], 'revenue': _money(row['revenue'])}
        for row in rows
    ]


@cached_query(cache_ttl=ORDER_ANALYTICS_CACHE_TTL, key_prefix=ORDER_ANALYTICS_PREFIX)
def orders_by_status():
    """One bucket per status, in enum order, empty statuses included"""
    rows = {
        row['status']: row
        for row in Order.objects.values('status').annotate(
            count=Count('id'),
            revenue=Sum('amount')
        ).order_by()
    }

    buckets = []
    for status in OrderStatus.values:
        row = rows.get(status, {})
        buckets.append({
            'status': status,
            'count': row.get('count', 0),
            'revenue': _money(row.get('revenue')),
        })
    return buckets


def orders_by_user(limit=DEFAULT_USER_LIMIT):
    if limit is None:
        limit = DEFAULT_USER_LIMIT
    if limit < 1:
        raise ValidationError({'limit': ['Ensure this value is greater than or equal to 1.']})
    return _orders_by_user(limit)


@cached_query(cache_ttl=ORDER_ANALYTICS_CACHE_TTL, key_prefix=ORDER_ANALYTICS_PREFIX)
def _orders_by_user(limit):
    """Top ``limit`` users by order count"""
    rows = Order.objects.values(
        'user_id',
        'user__name'
    ).annotate(
        count=Count('id'),
        revenue=Sum('amount')
    ).order_by('-count', 'user_id')[:limit]

    return [
        {
            'user_id': str(row['user_id']),
            'user_name': row['user__name'] or 'Unknown',
            'count': row['count'],
            'revenue': _money(row['revenue']),
        }
        for row in rows
    ]
