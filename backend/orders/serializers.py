from rest_framework import serializers

from .models import Order, OrderStatus


class OrderCreateSerializer(serializers.ModelSerializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, default=OrderStatus.PENDING)

    class Meta:
        model = Order
        fields = ['order_no', 'amount', 'status']

    def validate_order_no(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Order number is required')
        return value
