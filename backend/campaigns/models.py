from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from backend.catalog.models import Service, Package
from backend.core.models import User


class CampaignStatus(models.TextChoices):
    CREATED = 'CREATED', 'Created'
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'
    ON_HOLD = 'ON_HOLD', 'On Hold'


class CampaignOrder(models.Model):
    """Order placed through the two-step wizard.

    The service and package names, the tier and the activity list are copied
    at submission so later catalog edits or deletes do not rewrite history.
    """
    order_number = models.CharField(max_length=100, unique=True)

    # Client & company details
    company_name = models.CharField(max_length=200, db_index=True)
    website_url = models.URLField(max_length=500)
    client_name = models.CharField(max_length=200)
    client_email = models.EmailField()
    client_phone = models.CharField(max_length=15)
    billing_address = models.TextField()
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    country = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=20)
    representative_name = models.CharField(max_length=200, db_index=True)
    representative_email = models.EmailField()

    # Service selection
    service = models.ForeignKey(Service, on_delete=models.SET_NULL, null=True, blank=True, related_name='campaign_orders')
    package = models.ForeignKey(Package, on_delete=models.SET_NULL, null=True, blank=True, related_name='campaign_orders')
    comments = models.TextField(blank=True)
    campaign_start_date = models.DateField()
    campaign_duration = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(36)],
        help_text='Duration in months',
    )
    monthly_charges = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('1.00'))])

    # Snapshot
    service_name = models.CharField(max_length=200)
    package_name = models.CharField(max_length=200)
    package_tier = models.CharField(max_length=20)
    activities = models.JSONField(default=list, blank=True)

    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    status = models.CharField(max_length=20, choices=CampaignStatus.choices, default=CampaignStatus.CREATED, db_index=True)
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='campaign_orders')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'campaign_orders'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['created_by', '-created_at'], name='idx_campaign_owner_created'),
        ]
