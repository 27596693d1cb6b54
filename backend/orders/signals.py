"""
Cache invalidation signals
Any order write drops the cached order analytics
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from backend.core.cache_utils import invalidate_cache_prefix

from .models import Order

ORDER_ANALYTICS_PREFIX = 'order_analytics'


@receiver([post_save, post_delete], sender=Order)
def invalidate_order_analytics(sender, instance, **kwargs):
    invalidate_cache_prefix(ORDER_ANALYTICS_PREFIX)
