"""
Helpers for declaring graphql-core fields over Django models.

GraphQL names are camelCase while model attributes are snake_case, so object
fields get explicit resolvers and input fields use ``out_name``.
"""
import re
from decimal import Decimal

from graphql import GraphQLField, GraphQLInputField
from rest_framework.exceptions import NotFound

_CAMEL_RE = re.compile(r'_([a-z0-9])')

# Largest value a BigAutoField primary or foreign key can hold
MAX_ID = 2 ** 63 - 1


def to_camel(name):
    """company_name -> companyName"""
    return _CAMEL_RE.sub(lambda m: m.group(1).upper(), name)


def _read(obj, attr):
    if isinstance(obj, dict):
        return obj.get(attr)
    return getattr(obj, attr, None)


def attr_field(type_, attr, description=None):
    """Field that reads ``attr`` from a model instance or dict"""
    return GraphQLField(type_, resolve=lambda obj, info: _read(obj, attr), description=description)


def float_field(type_, attr, description=None):
    """Decimal column exposed as Float"""
    def resolve(obj, info):
        value = _read(obj, attr)
        if value is None:
            return None
        return float(value) if isinstance(value, (Decimal, int)) else value
    return GraphQLField(type_, resolve=resolve, description=description)


def datetime_field(type_, attr, description=None):
    """Date/datetime column exposed as an ISO-8601 string"""
    def resolve(obj, info):
        value = _read(obj, attr)
        return value.isoformat() if value is not None else None
    return GraphQLField(type_, resolve=resolve, description=description)


def input_field(type_, attr=None, default_value=None, description=None):
    """Input field whose coerced value lands under the snake_case ``attr``"""
    kwargs = {'out_name': attr, 'description': description}
    if default_value is not None:
        kwargs['default_value'] = default_value
    return GraphQLInputField(type_, **kwargs)


def parse_id(value, label='Object'):
    """GraphQL IDs arrive as strings; reject anything that is not a primary key"""
    try:
        pk = int(value)
    except (TypeError, ValueError):
        raise NotFound(f'{label} not found')
    if pk < 1 or pk > MAX_ID:
        raise NotFound(f'{label} not found')
    return pk
