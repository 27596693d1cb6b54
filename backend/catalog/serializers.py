from decimal import Decimal

from rest_framework import serializers

from .models import Service, Package, Activity


class ServiceSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=200, error_messages={'blank': 'Service name is required'})
    description = serializers.CharField(error_messages={'blank': 'Description is required'})
    icon = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = Service
        fields = ['name', 'description', 'icon']

    def validate_icon(self, value):
        return value or ''


class PackageSerializer(serializers.ModelSerializer):
    service = serializers.PrimaryKeyRelatedField(
        queryset=Service.objects.all(),
        error_messages={'does_not_exist': 'Please select a service', 'incorrect_type': 'Please select a service'},
    )
    name = serializers.CharField(max_length=200, error_messages={'blank': 'Package name is required'})
    tier = serializers.ChoiceField(choices=Package.TIER_CHOICES, error_messages={'invalid_choice': 'Please select a tier'})
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('1.00'),
        error_messages={'min_value': 'Price must be greater than 0'},
    )
    description = serializers.CharField(error_messages={'blank': 'Description is required'})

    class Meta:
        model = Package
        fields = ['service', 'name', 'tier', 'price', 'description']


class ActivitySerializer(serializers.ModelSerializer):
    package = serializers.PrimaryKeyRelatedField(
        queryset=Package.objects.all(),
        error_messages={'does_not_exist': 'Please select a package', 'incorrect_type': 'Please select a package'},
    )
    name = serializers.CharField(max_length=200, error_messages={'blank': 'Activity name is required'})
    description = serializers.CharField(error_messages={'blank': 'Description is required'})

    class Meta:
        model = Activity
        fields = ['package', 'name', 'description']
