"""Authentication and user management operations"""
import logging

from django.db import transaction
from rest_framework.exceptions import AuthenticationFailed, NotFound, ValidationError

from .models import User
from .serializers import UserCreateSerializer
from .utils import create_audit_log

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'


def authenticate_credentials(email, password, request=None):
    """Return the active user matching the credentials or raise AuthenticationFailed.

    Every failure (unknown email, inactive account, wrong password) raises the
    same error so callers cannot tell which part was wrong.
    """
    email = (email or '').strip()
    user = User.objects.filter(email__iexact=email).first() if email else None

    if user is None:
        # Run the hasher once so response timing does not reveal which emails exist
        User().set_password(password or '')
        logger.warning(f"Failed login for unknown email {email!r}")
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    if not user.is_active:
        logger.warning(f"Failed login for inactive user id={user.pk}")
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    if not user.check_password(password or ''):
        logger.warning(f"Failed login (bad password) for user id={user.pk}")
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    logger.info(f"User id={user.pk} logged in")
    create_audit_log(request=request, action='login', model_name='User', object_id=user.pk,
                     user=user, object_reference=user.email)
    return user


def get_user(user_id):
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound('User not found')


def list_users():
    return User.objects.all().order_by('id')


def create_user(data, principal, request=None):
    """Create a user from GraphQL input (name, email, password, role)"""
    serializer = UserCreateSerializer(data=data)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)

    with transaction.atomic():
        user = serializer.save()

    logger.info(f"User id={principal.user_id} created user id={user.pk} with role {user.role}")
    create_audit_log(request=request, action='create', model_name='User', object_id=user.pk,
                     user=principal.user_id, object_reference=user.email,
                     changes={'role': user.role})
    return user
