import django_filters

from .models import Order, OrderStatus


class OrderFilter(django_filters.FilterSet):
    """Optional filters accepted by the orders query"""
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    created_from = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_to = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')

    class Meta:
        model = Order
        fields = ['status', 'created_from', 'created_to']
