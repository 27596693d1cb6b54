"""
Cache invalidation signals
Any campaign order write drops the cached dashboard
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from backend.core.cache_utils import invalidate_cache_prefix

from .models import CampaignOrder

DASHBOARD_PREFIX = 'campaign_dashboard'


@receiver([post_save, post_delete], sender=CampaignOrder)
def invalidate_dashboard(sender, instance, **kwargs):
    invalidate_cache_prefix(DASHBOARD_PREFIX)
