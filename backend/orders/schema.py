"""GraphQL types and root fields for orders and order analytics"""
from graphql import (
    GraphQLArgument, GraphQLEnumType, GraphQLEnumValue, GraphQLField, GraphQLFloat,
    GraphQLID, GraphQLInputObjectType, GraphQLInt, GraphQLList, GraphQLNonNull,
    GraphQLObjectType, GraphQLString,
)

from backend.api.fields import attr_field, datetime_field, float_field, input_field
from backend.core.schema import UserType

from . import services
from .models import OrderStatus

OrderStatusEnum = GraphQLEnumType(
    'OrderStatus',
    {value: GraphQLEnumValue(value, description=label) for value, label in OrderStatus.choices},
)

OrderType = GraphQLObjectType('Order', lambda: {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
    'orderNo': attr_field(GraphQLNonNull(GraphQLString), 'order_no'),
    'status': attr_field(GraphQLNonNull(OrderStatusEnum), 'status'),
    'amount': float_field(GraphQLNonNull(GraphQLFloat), 'amount'),
    'user': attr_field(GraphQLNonNull(UserType), 'user'),
    'createdAt': datetime_field(GraphQLNonNull(GraphQLString), 'created_at'),
})

OrderStatsType = GraphQLObjectType('OrderStats', {
    'totalOrders': attr_field(GraphQLNonNull(GraphQLInt), 'total_orders'),
    'totalRevenue': attr_field(GraphQLNonNull(GraphQLFloat), 'total_revenue'),
})

DateStatsType = GraphQLObjectType('DateStats', {
    'date': attr_field(GraphQLNonNull(GraphQLString), 'date'),
    'count': attr_field(GraphQLNonNull(GraphQLInt), 'count'),
    'revenue': attr_field(GraphQLNonNull(GraphQLFloat), 'revenue'),
})

StatusStatsType = GraphQLObjectType('StatusStats', {
    'status': attr_field(GraphQLNonNull(GraphQLString), 'status'),
    'count': attr_field(GraphQLNonNull(GraphQLInt), 'count'),
    'revenue': attr_field(GraphQLNonNull(GraphQLFloat), 'revenue'),
})

UserStatsType = GraphQLObjectType('UserStats', {
    'userId': attr_field(GraphQLNonNull(GraphQLString), 'user_id'),
    'userName': attr_field(GraphQLNonNull(GraphQLString), 'user_name'),
    'count': attr_field(GraphQLNonNull(GraphQLInt), 'count'),
    'revenue': attr_field(GraphQLNonNull(GraphQLFloat), 'revenue'),
})

CreateOrderInput = GraphQLInputObjectType('CreateOrderInput', {
    'orderNo': input_field(GraphQLNonNull(GraphQLString), 'order_no'),
    'amount': input_field(GraphQLNonNull(GraphQLFloat), 'amount'),
    'status': input_field(OrderStatusEnum, 'status', default_value=OrderStatus.PENDING.value),
})

UpdateOrderInput = GraphQLInputObjectType('UpdateOrderInput', {
    'id': input_field(GraphQLNonNull(GraphQLID), 'id'),
    'status': input_field(GraphQLNonNull(OrderStatusEnum), 'status'),
})


def resolve_orders(root, info, status=None, created_from=None, created_to=None):
    filters = {
        key: value
        for key, value in (('status', status), ('created_from', created_from), ('created_to', created_to))
        if value
    }
    return services.list_orders(info.context.principal, filters)


def resolve_create_order(root, info, input):
    return services.create_order(input, info.context.principal, request=info.context.request)


def resolve_update_order_status(root, info, input):
    return services.update_order_status(
        input['id'], input['status'], info.context.principal, request=info.context.request,
    )


def resolve_order_stats(root, info):
    return services.order_stats(info.context.principal)


def resolve_orders_by_date(root, info, days):
    return services.orders_by_date(days)


def resolve_orders_by_status(root, info):
    return services.orders_by_status()


def resolve_orders_by_user(root, info, limit):
    return services.orders_by_user(limit)


QUERY_FIELDS = {
    'orders': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(OrderType))),
        args={
            'status': GraphQLArgument(OrderStatusEnum),
            'createdFrom': GraphQLArgument(GraphQLString, out_name='created_from', description='ISO-8601 datetime'),
            'createdTo': GraphQLArgument(GraphQLString, out_name='created_to', description='ISO-8601 datetime'),
        },
        resolve=resolve_orders,
        description="All orders for admins, the caller's own orders otherwise",
    ),
    'orderStats': GraphQLField(GraphQLNonNull(OrderStatsType), resolve=resolve_order_stats),
    'ordersByDate': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(DateStatsType))),
        args={'days': GraphQLArgument(GraphQLInt, default_value=services.DEFAULT_DAYS)},
        resolve=resolve_orders_by_date,
        description='Orders grouped by date',
    ),
    'ordersByStatus': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(StatusStatsType))),
        resolve=resolve_orders_by_status,
        description='Orders grouped by status',
    ),
    'ordersByUser': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(UserStatsType))),
        args={'limit': GraphQLArgument(GraphQLInt, default_value=services.DEFAULT_USER_LIMIT)},
        resolve=resolve_orders_by_user,
        description='Orders grouped by user',
    ),
}

MUTATION_FIELDS = {
    'createOrder': GraphQLField(
        GraphQLNonNull(OrderType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreateOrderInput))},
        resolve=resolve_create_order,
    ),
    'updateOrderStatus': GraphQLField(
        GraphQLNonNull(OrderType),
        args={'input': GraphQLArgument(GraphQLNonNull(UpdateOrderInput))},
        resolve=resolve_update_order_status,
    ),
}
