"""
Campaign order dashboard.

Every widget works on the orders created inside the selected range, except
the trend comparison, which also reads the period of equal length right
before it. Money is returned as float.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Max, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from backend.campaigns.models import CampaignOrder, CampaignStatus
from backend.campaigns.signals import DASHBOARD_PREFIX
from backend.core.cache_utils import DASHBOARD_CACHE_TTL, cached_query

logger = logging.getLogger('backend.reports')

RANGE_DAYS = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
    'all': None,
}
DEFAULT_RANGE = '30d'
SPARKLINE_DAYS = 7
TOP_CLIENTS_LIMIT = 5
RECENT_ORDERS_LIMIT = 5
# Chart window used when the whole history is selected
ALL_RANGE_CHART_DAYS = 30


def _money(value):
    return float(value or Decimal('0.00'))


def _percent(part, whole):
    return (part / whole) * 100 if whole else 0.0


def _trend(current, previous):
    if not previous:
        return 0.0
    return round(((current - previous) / previous) * 100, 1)


def range_days(date_range):
    if date_range is None:
        date_range = DEFAULT_RANGE
    if date_range not in RANGE_DAYS:
        raise ValidationError({'range': [f'"{date_range}" is not a valid choice.']})
    return RANGE_DAYS[date_range]


def orders_in_range(date_range, now=None):
    """Campaign orders created inside the range"""
    days = range_days(date_range)
    queryset = CampaignOrder.objects.all()
    if days is None:
        return queryset
    now = now or timezone.now()
    return queryset.filter(created_at__gte=now - timedelta(days=days))


def _daily_buckets(queryset, start_date, days):
    """Zero-filled {date, count, revenue} for each calendar day from start_date"""
    rows = {
        row['day']: row
        for row in queryset.filter(
            created_at__date__gte=start_date
        ).annotate(
            day=TruncDate('created_at')
        ).values('day').annotate(
            count=Count('id'),
            revenue=Sum('total_amount')
        ).order_by('day')
    }

    buckets = []
    for offset in range(days):
        day = start_date + timedelta(days=offset)
        row = rows.get(day, {})
        buckets.append({
            'date': day.isoformat(),
            'count': row.get('count', 0),
            'revenue': _money(row.get('revenue')),
        })
    return buckets


def kpis(queryset, date_range, now):
    totals = queryset.aggregate(
        total_orders=Count('id'),
        total_revenue=Sum('total_amount'),
        completed=Count('id', filter=Q(status=CampaignStatus.COMPLETED)),
    )
    total_orders = totals['total_orders']
    total_revenue = _money(totals['total_revenue'])

    revenue_trend = orders_trend = 0.0
    days = range_days(date_range)
    if days is not None:
        previous = CampaignOrder.objects.filter(
            created_at__gte=now - timedelta(days=days * 2),
            created_at__lt=now - timedelta(days=days),
        ).aggregate(count=Count('id'), revenue=Sum('total_amount'))
        revenue_trend = _trend(total_revenue, _money(previous['revenue']))
        orders_trend = _trend(total_orders, previous['count'])

    sparkline = _daily_buckets(queryset, now.date() - timedelta(days=SPARKLINE_DAYS - 1), SPARKLINE_DAYS)

    return {
        'total_orders': total_orders,
        'total_revenue': total_revenue,
        'avg_order_value': total_revenue / total_orders if total_orders else 0.0,
        'completed_orders': totals['completed'],
        'completion_rate': _percent(totals['completed'], total_orders),
        'revenue_trend': revenue_trend,
        'orders_trend': orders_trend,
        'revenue_sparkline': [bucket['revenue'] for bucket in sparkline],
        'orders_sparkline': [bucket['count'] for bucket in sparkline],
    }


def status_breakdown(queryset):
    """Count per status present in the range, in status order"""
    total = queryset.count()
    counts = dict(queryset.values_list('status').annotate(count=Count('id')).order_by())
    return [
        {
            'status': status,
            'label': label,
            'count': counts[status],
            'percentage': round(_percent(counts[status], total), 1),
        }
        for status, label in CampaignStatus.choices
        if counts.get(status)
    ]


def service_revenue(queryset):
    """Revenue per service, cancelled orders excluded, highest first"""
    rows = queryset.exclude(
        status=CampaignStatus.CANCELLED
    ).values(
        'service_name'
    ).annotate(
        any_service_id=Max('service_id'),
        revenue=Sum('total_amount'),
        order_count=Count('id')
    ).order_by('-revenue', 'service_name')

    result = [
        {
            'service_id': str(row['any_service_id']) if row['any_service_id'] is not None else None,
            'name': row['service_name'],
            'revenue': _money(row['revenue']),
            'order_count': row['order_count'],
        }
        for row in rows
    ]
    max_revenue = max([item['revenue'] for item in result] + [1])
    for item in result:
        item['percentage'] = _percent(item['revenue'], max_revenue)
    return result


def top_clients(queryset, limit=TOP_CLIENTS_LIMIT):
    """Companies by revenue, cancelled orders excluded"""
    rows = queryset.exclude(
        status=CampaignStatus.CANCELLED
    ).values(
        'company_name'
    ).annotate(
        any_client_name=Max('client_name'),
        total_revenue=Sum('total_amount'),
        order_count=Count('id')
    ).order_by('-total_revenue', 'company_name')[:limit]

    return [
        {
            'company_name': row['company_name'],
            'client_name': row['any_client_name'],
            'total_revenue': _money(row['total_revenue']),
            'order_count': row['order_count'],
        }
        for row in rows
    ]


def representatives(queryset):
    """Representatives ranked by revenue"""
    rows = queryset.exclude(
        representative_name=''
    ).values(
        'representative_name'
    ).annotate(
        total_revenue=Sum('total_amount'),
        order_count=Count('id'),
        completed_orders=Count('id', filter=Q(status=CampaignStatus.COMPLETED))
    ).order_by('-total_revenue', 'representative_name')

    result = [
        {
            'name': row['representative_name'],
            'total_revenue': _money(row['total_revenue']),
            'order_count': row['order_count'],
            'completed_orders': row['completed_orders'],
        }
        for row in rows
    ]
    max_revenue = max([item['total_revenue'] for item in result] + [1])
    for rank, item in enumerate(result, start=1):
        item['percentage'] = _percent(item['total_revenue'], max_revenue)
        item['completion_rate'] = _percent(item['completed_orders'], item['order_count'])
        item['rank'] = rank
    return result


def daily_trend(queryset, date_range, now):
    """Zero-filled daily revenue and order counts across the range"""
    days = range_days(date_range) or ALL_RANGE_CHART_DAYS
    return _daily_buckets(queryset, (now - timedelta(days=days)).date(), days + 1)


def campaign_dashboard(date_range=DEFAULT_RANGE):
    range_days(date_range)
    return _campaign_dashboard(date_range or DEFAULT_RANGE)


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix=DASHBOARD_PREFIX)
def _campaign_dashboard(date_range):
    now = timezone.now()
    queryset = orders_in_range(date_range, now=now)
    logger.debug(f"Building campaign dashboard for range {date_range}")
    return {
        'range': date_range,
        'kpis': kpis(queryset, date_range, now),
        'status_breakdown': status_breakdown(queryset),
        'service_revenue': service_revenue(queryset),
        'top_clients': top_clients(queryset),
        'representatives': representatives(queryset),
        'daily_trend': daily_trend(CampaignOrder.objects.all(), date_range, now),
    }


def recent_orders(date_range=DEFAULT_RANGE, limit=RECENT_ORDERS_LIMIT):
    if limit is None:
        limit = RECENT_ORDERS_LIMIT
    if limit < 1:
        raise ValidationError({'limit': ['Ensure this value is greater than or equal to 1.']})
    return orders_in_range(date_range).select_related('created_by').order_by('-created_at', '-id')[:limit]
