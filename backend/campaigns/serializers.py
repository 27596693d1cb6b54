from decimal import Decimal

from rest_framework import serializers

from backend.catalog.models import Service, Package

from .models import CampaignOrder, CampaignStatus


def _messages(message, **extra):
    """Same message whether the value is missing, null or blank"""
    return {'required': message, 'null': message, 'blank': message, **extra}


class ClientDetailsSerializer(serializers.Serializer):
    """Wizard step 1: client & company details"""
    company_name = serializers.CharField(max_length=200, error_messages=_messages('Company name is required'))
    website_url = serializers.URLField(
        max_length=500,
        error_messages=_messages('Website URL is required', invalid='Please enter a valid URL'),
    )
    client_name = serializers.CharField(max_length=200, error_messages=_messages('Client name is required'))
    client_email = serializers.EmailField(
        error_messages=_messages('Client email is required', invalid='Please enter a valid email'),
    )
    client_phone = serializers.CharField(
        min_length=10, max_length=15,
        error_messages=_messages(
            'Phone number is required',
            min_length='Phone number must be at least 10 digits',
            max_length='Phone number must not exceed 15 digits',
        ),
    )
    billing_address = serializers.CharField(error_messages=_messages('Billing address is required'))
    city = serializers.CharField(max_length=100, error_messages=_messages('City is required'))
    state = serializers.CharField(max_length=100, error_messages=_messages('State is required'))
    country = serializers.CharField(max_length=100, error_messages=_messages('Country is required'))
    zip_code = serializers.CharField(max_length=20, error_messages=_messages('Zip code is required'))
    representative_name = serializers.CharField(max_length=200, error_messages=_messages('Representative name is required'))
    representative_email = serializers.EmailField(
        error_messages=_messages('Representative email is required', invalid='Please enter a valid email'),
    )


class ServiceSelectionSerializer(serializers.Serializer):
    """Wizard step 2: service, package and campaign terms"""
    service = serializers.PrimaryKeyRelatedField(
        queryset=Service.objects.all(),
        error_messages=_messages('Please select a service', does_not_exist='Please select a service',
                                 incorrect_type='Please select a service'),
    )
    package = serializers.PrimaryKeyRelatedField(
        queryset=Package.objects.select_related('service'),
        error_messages=_messages('Please select a package', does_not_exist='Please select a package',
                                 incorrect_type='Please select a package'),
    )
    comments = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')
    campaign_start_date = serializers.DateField(
        error_messages=_messages('Campaign start date is required', invalid='Please enter a valid date'),
    )
    campaign_duration = serializers.IntegerField(
        min_value=1, max_value=36,
        error_messages=_messages(
            'Please enter campaign duration',
            invalid='Please enter campaign duration',
            min_value='Duration must be at least 1 month',
            max_value='Duration cannot exceed 36 months',
        ),
    )
    monthly_charges = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('1.00'),
        error_messages=_messages(
            'Please enter monthly charges',
            invalid='Please enter monthly charges',
            min_value='Monthly charges must be greater than 0',
        ),
    )

    def validate_comments(self, value):
        return value or ''

    def validate(self, attrs):
        service = attrs.get('service')
        package = attrs.get('package')
        if service and package and package.service_id != service.pk:
            raise serializers.ValidationError({'package': 'Selected package does not belong to the selected service'})
        return attrs


class CampaignOrderCreateSerializer(ClientDetailsSerializer, ServiceSelectionSerializer):
    """Both wizard steps validated together, then stored with a catalog snapshot"""

    def create(self, validated_data):
        service = validated_data['service']
        package = validated_data['package']
        total_amount = validated_data['monthly_charges'] * validated_data['campaign_duration']

        return CampaignOrder.objects.create(
            **validated_data,
            service_name=service.name,
            package_name=package.name,
            package_tier=package.tier,
            activities=[
                {'id': str(activity.pk), 'name': activity.name, 'description': activity.description}
                for activity in package.activities.all()
            ],
            total_amount=total_amount,
            status=CampaignStatus.CREATED,
        )
