import json
import logging

from graphql import GraphQLError, OperationType, execute, get_operation_ast, parse, validate
from rest_framework import status
from rest_framework.decorators import (
    api_view, authentication_classes, permission_classes, renderer_classes, throttle_classes,
)
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle

from backend.core.authentication import CookieJWTAuthentication

from .context import GraphQLContext
from .errors import format_error, request_error
from .middleware import permission_middleware
from .schema import schema

logger = logging.getLogger('backend.api')


class GraphQLRateThrottle(SimpleRateThrottle):
    """Requests per client IP, authenticated or not"""
    scope = 'graphql'

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }


def _load_json(value, name):
    if value in (None, ''):
        return None
    if isinstance(value, dict):
        return value
    try:
        loaded = json.loads(value)
    except (TypeError, ValueError):
        raise ParseError(f'{name} must be a JSON object')
    if loaded is not None and not isinstance(loaded, dict):
        raise ParseError(f'{name} must be a JSON object')
    return loaded


def _graphql_params(request):
    """query, variables and operationName from the query string (GET) or the JSON body (POST)"""
    if request.method == 'GET':
        source = request.query_params
    else:
        source = request.data
        if not hasattr(source, 'get'):
            raise ParseError('Request body must be a JSON object')

    query = source.get('query')
    if not query or not isinstance(query, str):
        raise ParseError('Must provide query string.')
    variables = _load_json(source.get('variables'), 'variables')
    operation_name = source.get('operationName') or None
    return query, variables, operation_name


@api_view(['GET', 'POST'])
@authentication_classes([CookieJWTAuthentication])
@permission_classes([AllowAny])
@throttle_classes([GraphQLRateThrottle])
@renderer_classes([JSONRenderer])
def graphql_view(request):
    """Single GraphQL endpoint. Auth and role checks happen per root field."""
    query, variables, operation_name = _graphql_params(request)

    try:
        document = parse(query)
    except GraphQLError as e:
        return Response({'errors': [format_error(e)]}, status=status.HTTP_400_BAD_REQUEST)

    validation_errors = validate(schema, document)
    if validation_errors:
        return Response({'errors': [format_error(e) for e in validation_errors]}, status=status.HTTP_400_BAD_REQUEST)

    if request.method == 'GET':
        operation = get_operation_ast(document, operation_name)
        if operation is not None and operation.operation != OperationType.QUERY:
            return Response(
                request_error('Can only perform a mutation operation from a POST request.', 'METHOD_NOT_ALLOWED'),
                status=status.HTTP_405_METHOD_NOT_ALLOWED,
                headers={'Allow': 'POST'},
            )

    context = GraphQLContext(request)
    result = execute(
        schema,
        document,
        variable_values=variables,
        operation_name=operation_name,
        context_value=context,
        middleware=[permission_middleware],
    )

    payload = {'data': result.data}
    http_status = status.HTTP_200_OK
    if result.errors:
        payload['errors'] = [format_error(e) for e in result.errors]
        # Variable coercion and operation selection fail before any resolver runs
        if result.data is None and all(e.path is None for e in result.errors):
            http_status = status.HTTP_400_BAD_REQUEST
            payload.pop('data')

    logger.debug(f"GraphQL {operation_name or 'anonymous'} operation by {context.principal or 'anonymous'}: {http_status}")
    return context.apply_cookies(Response(payload, status=http_status))
