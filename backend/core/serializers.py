from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import User, Role


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    role = serializers.ChoiceField(choices=Role.choices, required=False, allow_null=True)

    class Meta:
        model = User
        fields = ['name', 'email', 'password', 'role']

    def validate_email(self, value):
        value = User.objects.normalize_email(value).lower()
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('A user with this email already exists.')
        return value

    def create(self, validated_data):
        role = validated_data.pop('role', None) or Role.USER
        password = validated_data.pop('password')
        # Ensure user is active by default
        return User.objects.create_user(password=password, role=role, is_active=True, **validated_data)

