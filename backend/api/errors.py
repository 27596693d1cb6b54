"""
Translate resolver exceptions into GraphQL error payloads.

Domain code raises DRF exceptions; each maps to an ``extensions.code``.
Anything else is logged with its traceback and reported without details
unless DEBUG is on.
"""
import logging

from django.conf import settings
from rest_framework.exceptions import (
    APIException, AuthenticationFailed, NotAuthenticated, NotFound, PermissionDenied,
    MethodNotAllowed, Throttled, ValidationError,
)
from rest_framework.views import exception_handler

from .fields import to_camel

logger = logging.getLogger(__name__)

ERROR_CODES = [
    (NotAuthenticated, 'UNAUTHENTICATED'),
    (AuthenticationFailed, 'UNAUTHENTICATED'),
    (PermissionDenied, 'FORBIDDEN'),
    (NotFound, 'NOT_FOUND'),
    (ValidationError, 'BAD_USER_INPUT'),
    (Throttled, 'TOO_MANY_REQUESTS'),
    (MethodNotAllowed, 'METHOD_NOT_ALLOWED'),
]


def error_code_for(exc):
    for exc_class, code in ERROR_CODES:
        if isinstance(exc, exc_class):
            return code
    return 'BAD_REQUEST'


def flatten_validation_errors(detail, prefix=''):
    """Turn serializer errors into a flat list of {field, message} dicts"""
    if isinstance(detail, dict):
        errors = []
        for key, value in detail.items():
            name = '' if key == 'non_field_errors' else to_camel(str(key))
            field = f'{prefix}.{name}' if prefix and name else (prefix or name)
            errors.extend(flatten_validation_errors(value, field))
        return errors
    if isinstance(detail, list):
        errors = []
        for item in detail:
            errors.extend(flatten_validation_errors(item, prefix))
        return errors
    return [{'field': prefix or None, 'message': str(detail)}]


def _api_exception_payload(exc):
    code = error_code_for(exc)
    if isinstance(exc, ValidationError):
        fields = flatten_validation_errors(exc.detail)
        message = '; '.join(
            f"{item['field']}: {item['message']}" if item['field'] else item['message']
            for item in fields
        ) or 'Invalid input'
        return message, {'code': code, 'fields': fields}
    return str(exc.detail), {'code': code}


def format_error(error):
    """Format a GraphQLError raised during parsing, validation or execution"""
    formatted = error.formatted
    original = error.original_error

    if original is None:
        formatted.setdefault('extensions', {}).setdefault('code', 'GRAPHQL_VALIDATION_FAILED')
        return formatted

    if isinstance(original, APIException):
        message, extensions = _api_exception_payload(original)
        formatted['message'] = message
        formatted['extensions'] = extensions
        return formatted

    logger.error(
        f"Unhandled error resolving {'.'.join(str(p) for p in (error.path or []))}: {original}",
        exc_info=(type(original), original, original.__traceback__),
    )
    formatted['message'] = str(original) if settings.DEBUG else 'Internal server error'
    formatted['extensions'] = {'code': 'INTERNAL_SERVER_ERROR'}
    return formatted


def request_error(message, code='BAD_REQUEST'):
    """GraphQL-shaped body for errors raised before execution starts"""
    return {'errors': [{'message': message, 'extensions': {'code': code}}]}


def graphql_exception_handler(exc, context):
    """DRF exception handler that keeps the GraphQL response shape.

    Covers what fails before execution: unparseable bodies, throttling and
    disallowed HTTP methods.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None
    detail = exc.detail if isinstance(exc, APIException) else str(exc)
    message = detail if isinstance(detail, str) else 'Bad request'
    response.data = request_error(str(message), error_code_for(exc))
    return response
