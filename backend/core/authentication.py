"""
Cookie based JWT authentication.

The access token lives in an HTTP-only cookie; the Authorization header is
still accepted so scripts and tests can call the API without a cookie jar.
A bad or expired token makes the request anonymous instead of failing it,
so a stale cookie never blocks the login mutation.
"""
import logging

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .permissions import Principal

logger = logging.getLogger(__name__)


class CookieJWTAuthentication(JWTAuthentication):

    def authenticate(self, request):
        raw_token = request.COOKIES.get(settings.AUTH_COOKIE_NAME)
        if raw_token is None:
            header = self.get_header(request)
            if header is None:
                return None
            raw_token = self.get_raw_token(header)
            if raw_token is None:
                return None

        try:
            validated_token = self.get_validated_token(raw_token)
            return self.get_user(validated_token), validated_token
        except (InvalidToken, TokenError, AuthenticationFailed) as e:
            logger.info(f"Ignoring unusable access token: {e}")
            return None


def issue_access_token(user):
    """Signed access token carrying the user id and role claims"""
    token = AccessToken.for_user(user)
    token['role'] = user.role
    return str(token)


def principal_from_request(request):
    """Build the Principal for an authenticated DRF request, None otherwise"""
    user = getattr(request, 'user', None)
    token = getattr(request, 'auth', None)
    if user is None or not user.is_authenticated or token is None:
        return None
    return Principal(user_id=user.pk, role=token.get('role', user.role))


def set_auth_cookie(response, token):
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=settings.AUTH_COOKIE_MAX_AGE,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )


def clear_auth_cookie(response):
    response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite=settings.AUTH_COOKIE_SAMESITE)
