"""
Principal and permission table for the GraphQL root fields.

Every root field is looked up in FIELD_PERMISSIONS:
    PUBLIC         - anyone, including anonymous callers
    AUTHENTICATED  - any logged-in principal, whatever the role
    {roles}        - a logged-in principal whose role is in the set
Fields with no entry require a logged-in principal and nothing else.
"""
from dataclasses import dataclass

from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from .models import Role

PUBLIC = 'public'
AUTHENTICATED = 'authenticated'
ADMIN_ONLY = frozenset({Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    """Authenticated caller decoded from the access token"""
    user_id: int
    role: str

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def owns(self, obj, field='user_id'):
        return getattr(obj, field, None) == self.user_id


FIELD_PERMISSIONS = {
    # introspection
    '__schema': PUBLIC,
    '__type': PUBLIC,
    '__typename': PUBLIC,
    # auth
    'login': PUBLIC,
    'logout': PUBLIC,
    'me': AUTHENTICATED,
    # users
    'users': ADMIN_ONLY,
    'createUser': ADMIN_ONLY,
    # orders
    'orders': AUTHENTICATED,
    'createOrder': AUTHENTICATED,
    'updateOrderStatus': AUTHENTICATED,
    'orderStats': AUTHENTICATED,
    'ordersByDate': ADMIN_ONLY,
    'ordersByStatus': ADMIN_ONLY,
    'ordersByUser': ADMIN_ONLY,
    # catalog
    'services': AUTHENTICATED,
    'service': AUTHENTICATED,
    'packages': AUTHENTICATED,
    'package': AUTHENTICATED,
    'activities': AUTHENTICATED,
    'createService': ADMIN_ONLY,
    'updateService': ADMIN_ONLY,
    'deleteService': ADMIN_ONLY,
    'createPackage': ADMIN_ONLY,
    'updatePackage': ADMIN_ONLY,
    'deletePackage': ADMIN_ONLY,
    'createActivity': ADMIN_ONLY,
    'updateActivity': ADMIN_ONLY,
    'deleteActivity': ADMIN_ONLY,
    # order wizard
    'validateClientDetails': AUTHENTICATED,
    'createCampaignOrder': AUTHENTICATED,
    'campaignOrders': AUTHENTICATED,
    'updateCampaignOrderStatus': ADMIN_ONLY,
    # dashboard
    'campaignDashboard': ADMIN_ONLY,
}


def required_roles(field_name):
    return FIELD_PERMISSIONS.get(field_name, AUTHENTICATED)


def check_field_permission(principal, field_name):
    """Raise if the principal may not resolve the given root field"""
    requirement = required_roles(field_name)
    if requirement == PUBLIC:
        return
    if principal is None:
        raise NotAuthenticated('Authentication required')
    if requirement == AUTHENTICATED:
        return
    if principal.role not in requirement:
        raise PermissionDenied('Forbidden resource')
