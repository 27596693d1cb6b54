"""The GraphQL schema, composed from each app's root fields"""
from graphql import GraphQLObjectType, GraphQLSchema

from backend.campaigns import schema as campaigns
from backend.catalog import schema as catalog
from backend.core import schema as core
from backend.orders import schema as orders
from backend.reports import schema as reports

APPS = [core, orders, catalog, campaigns, reports]


def _root_fields(attr):
    fields = {}
    for module in APPS:
        for name, field in getattr(module, attr).items():
            if name in fields:
                raise ValueError(f"Root field {name} declared twice")
            fields[name] = field
    return fields


Query = GraphQLObjectType('Query', lambda: _root_fields('QUERY_FIELDS'))
Mutation = GraphQLObjectType('Mutation', lambda: _root_fields('MUTATION_FIELDS'))

schema = GraphQLSchema(query=Query, mutation=Mutation)
