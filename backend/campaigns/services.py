"""
Campaign order wizard.

Step 1 only validates the client details and reports every problem at once.
Step 2 validates both steps together and stores the order.
"""
import logging
import uuid

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from backend.api.errors import flatten_validation_errors
from backend.api.fields import parse_id
from backend.core.utils import create_audit_log

from .models import CampaignOrder, CampaignStatus
from .serializers import ClientDetailsSerializer, CampaignOrderCreateSerializer

logger = logging.getLogger('backend.campaigns')


def generate_order_number():
    order_number = f"CMP-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    while CampaignOrder.objects.filter(order_number=order_number).exists():
        order_number = f"CMP-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
    return order_number


def validate_client_details(data):
    """Returns {valid, errors}; never raises for bad input"""
    serializer = ClientDetailsSerializer(data=data)
    if serializer.is_valid():
        return {'valid': True, 'errors': []}
    return {'valid': False, 'errors': flatten_validation_errors(serializer.errors)}


def create_campaign_order(data, principal, request=None):
    data = dict(data)
    if isinstance(data.get('monthly_charges'), float):
        data['monthly_charges'] = round(data['monthly_charges'], 2)
    if data.get('campaign_start_date') == '':
        # An empty date input counts as missing, not as a malformed date
        data['campaign_start_date'] = None

    serializer = CampaignOrderCreateSerializer(data=data)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)

    with transaction.atomic():
        order = serializer.save(order_number=generate_order_number(), created_by_id=principal.user_id)

    logger.info(
        f"User id={principal.user_id} created campaign order {order.order_number} "
        f"for {order.company_name} ({order.monthly_charges} x {order.campaign_duration} = {order.total_amount})"
    )
    create_audit_log(request=request, action='create', model_name='CampaignOrder', object_id=order.pk,
                     user=principal.user_id, object_reference=order.order_number,
                     changes={'package': order.package_name, 'total_amount': str(order.total_amount)})
    return order


def list_campaign_orders(principal, limit=None):
    """All campaign orders for admins, own orders otherwise, newest first"""
    queryset = CampaignOrder.objects.select_related('created_by')
    if not principal.is_admin:
        queryset = queryset.filter(created_by_id=principal.user_id)
    queryset = queryset.order_by('-created_at', '-id')

    if limit is not None:
        if limit < 1:
            raise ValidationError({'limit': ['Ensure this value is greater than or equal to 1.']})
        queryset = queryset[:limit]
    return queryset


def update_campaign_order_status(order_id, status, principal, request=None):
    pk = parse_id(order_id, 'Campaign order')
    if status not in CampaignStatus.values:
        raise ValidationError({'status': [f'"{status}" is not a valid choice.']})

    with transaction.atomic():
        order = CampaignOrder.objects.select_for_update().filter(pk=pk).first()
        if order is None:
            raise NotFound('Campaign order not found')
        previous_status = order.status
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Campaign order {order.order_number} status {previous_status} -> {status} by user id={principal.user_id}")
    create_audit_log(request=request, action='status_change', model_name='CampaignOrder', object_id=order.pk,
                     user=principal.user_id, object_reference=order.order_number,
                     changes={'status': {'from': previous_status, 'to': status}})
    return order
