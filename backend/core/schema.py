"""GraphQL types and root fields for authentication and users"""
from graphql import (
    GraphQLArgument, GraphQLBoolean, GraphQLEnumType, GraphQLEnumValue, GraphQLField,
    GraphQLID, GraphQLInputObjectType, GraphQLList, GraphQLNonNull, GraphQLObjectType,
    GraphQLString,
)

from backend.api.fields import attr_field, datetime_field, input_field

from . import services
from .models import Role

RoleEnum = GraphQLEnumType(
    'Role',
    {value: GraphQLEnumValue(value, description=label) for value, label in Role.choices},
)

UserType = GraphQLObjectType('User', lambda: {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
    'name': attr_field(GraphQLNonNull(GraphQLString), 'name'),
    'email': attr_field(GraphQLNonNull(GraphQLString), 'email'),
    'role': attr_field(GraphQLNonNull(RoleEnum), 'role'),
    'isActive': attr_field(GraphQLNonNull(GraphQLBoolean), 'is_active'),
    'createdAt': datetime_field(GraphQLString, 'created_at'),
})

LoginInput = GraphQLInputObjectType('LoginInput', {
    'email': input_field(GraphQLNonNull(GraphQLString), 'email'),
    'password': input_field(GraphQLNonNull(GraphQLString), 'password'),
})

CreateUserInput = GraphQLInputObjectType('CreateUserInput', {
    'name': input_field(GraphQLNonNull(GraphQLString), 'name'),
    'email': input_field(GraphQLNonNull(GraphQLString), 'email'),
    'password': input_field(GraphQLNonNull(GraphQLString), 'password'),
    'role': input_field(RoleEnum, 'role'),
})


def resolve_login(root, info, input):
    context = info.context
    user = services.authenticate_credentials(input['email'], input['password'], request=context.request)
    context.start_session(user)
    return user


def resolve_logout(root, info):
    info.context.end_session()
    return True


def resolve_me(root, info):
    return services.get_user(info.context.principal.user_id)


def resolve_users(root, info):
    return services.list_users()


def resolve_create_user(root, info, input):
    return services.create_user(input, info.context.principal, request=info.context.request)


QUERY_FIELDS = {
    'me': GraphQLField(
        GraphQLNonNull(UserType), resolve=resolve_me,
        description='The authenticated user',
    ),
    'users': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(UserType))), resolve=resolve_users,
    ),
}

MUTATION_FIELDS = {
    'login': GraphQLField(
        GraphQLNonNull(UserType),
        args={'input': GraphQLArgument(GraphQLNonNull(LoginInput))},
        resolve=resolve_login,
        description='Check credentials and set the HTTP-only auth cookie',
    ),
    'logout': GraphQLField(
        GraphQLNonNull(GraphQLBoolean), resolve=resolve_logout,
        description='Clear the auth cookie',
    ),
    'createUser': GraphQLField(
        GraphQLNonNull(UserType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreateUserInput))},
        resolve=resolve_create_user,
    ),
}
