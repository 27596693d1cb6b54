"""GraphQL types and root fields for the campaign order dashboard"""
from graphql import (
    GraphQLArgument, GraphQLEnumType, GraphQLEnumValue, GraphQLField, GraphQLFloat,
    GraphQLID, GraphQLInt, GraphQLList, GraphQLNonNull, GraphQLObjectType, GraphQLString,
)

from backend.api.fields import attr_field
from backend.campaigns.schema import CampaignOrderType

from . import services

DashboardRangeEnum = GraphQLEnumType('DashboardRange', {
    'LAST_7_DAYS': GraphQLEnumValue('7d'),
    'LAST_30_DAYS': GraphQLEnumValue('30d'),
    'LAST_90_DAYS': GraphQLEnumValue('90d'),
    'ALL_TIME': GraphQLEnumValue('all'),
})


def _list_of(type_):
    return GraphQLNonNull(GraphQLList(GraphQLNonNull(type_)))


def _nested(type_, key):
    return attr_field(GraphQLNonNull(type_), key)


DashboardKpisType = GraphQLObjectType('DashboardKpis', {
    'totalOrders': _nested(GraphQLInt, 'total_orders'),
    'totalRevenue': _nested(GraphQLFloat, 'total_revenue'),
    'avgOrderValue': _nested(GraphQLFloat, 'avg_order_value'),
    'completedOrders': _nested(GraphQLInt, 'completed_orders'),
    'completionRate': _nested(GraphQLFloat, 'completion_rate'),
    'revenueTrend': attr_field(GraphQLNonNull(GraphQLFloat), 'revenue_trend',
                               description='% change against the previous period of equal length'),
    'ordersTrend': attr_field(GraphQLNonNull(GraphQLFloat), 'orders_trend',
                              description='% change against the previous period of equal length'),
    'revenueSparkline': attr_field(_list_of(GraphQLFloat), 'revenue_sparkline', description='Last 7 days, oldest first'),
    'ordersSparkline': attr_field(_list_of(GraphQLInt), 'orders_sparkline', description='Last 7 days, oldest first'),
})

StatusBucketType = GraphQLObjectType('CampaignStatusBucket', {
    'status': _nested(GraphQLString, 'status'),
    'label': _nested(GraphQLString, 'label'),
    'count': _nested(GraphQLInt, 'count'),
    'percentage': _nested(GraphQLFloat, 'percentage'),
})

ServiceRevenueType = GraphQLObjectType('ServiceRevenue', {
    'serviceId': attr_field(GraphQLID, 'service_id'),
    'name': _nested(GraphQLString, 'name'),
    'revenue': _nested(GraphQLFloat, 'revenue'),
    'orderCount': _nested(GraphQLInt, 'order_count'),
    'percentage': attr_field(GraphQLNonNull(GraphQLFloat), 'percentage', description='Share of the top service'),
})

TopClientType = GraphQLObjectType('TopClient', {
    'companyName': _nested(GraphQLString, 'company_name'),
    'clientName': _nested(GraphQLString, 'client_name'),
    'totalRevenue': _nested(GraphQLFloat, 'total_revenue'),
    'orderCount': _nested(GraphQLInt, 'order_count'),
})

RepresentativeType = GraphQLObjectType('RepresentativePerformance', {
    'name': _nested(GraphQLString, 'name'),
    'totalRevenue': _nested(GraphQLFloat, 'total_revenue'),
    'orderCount': _nested(GraphQLInt, 'order_count'),
    'completedOrders': _nested(GraphQLInt, 'completed_orders'),
    'percentage': attr_field(GraphQLNonNull(GraphQLFloat), 'percentage', description='Share of the top representative'),
    'completionRate': _nested(GraphQLFloat, 'completion_rate'),
    'rank': _nested(GraphQLInt, 'rank'),
})

DailyTrendType = GraphQLObjectType('DailyTrend', {
    'date': _nested(GraphQLString, 'date'),
    'count': _nested(GraphQLInt, 'count'),
    'revenue': _nested(GraphQLFloat, 'revenue'),
})


def resolve_recent_orders(dashboard, info, limit):
    return services.recent_orders(dashboard['range'], limit)


CampaignDashboardType = GraphQLObjectType('CampaignDashboard', {
    'range': _nested(DashboardRangeEnum, 'range'),
    'kpis': _nested(DashboardKpisType, 'kpis'),
    'statusBreakdown': attr_field(_list_of(StatusBucketType), 'status_breakdown'),
    'serviceRevenue': attr_field(_list_of(ServiceRevenueType), 'service_revenue'),
    'topClients': attr_field(_list_of(TopClientType), 'top_clients'),
    'representatives': attr_field(_list_of(RepresentativeType), 'representatives'),
    'dailyTrend': attr_field(_list_of(DailyTrendType), 'daily_trend'),
    'recentOrders': GraphQLField(
        _list_of(CampaignOrderType),
        args={'limit': GraphQLArgument(GraphQLInt, default_value=services.RECENT_ORDERS_LIMIT)},
        resolve=resolve_recent_orders,
    ),
})


def resolve_campaign_dashboard(root, info, range):
    return services.campaign_dashboard(range)


QUERY_FIELDS = {
    'campaignDashboard': GraphQLField(
        GraphQLNonNull(CampaignDashboardType),
        args={'range': GraphQLArgument(DashboardRangeEnum, default_value='30d')},
        resolve=resolve_campaign_dashboard,
    ),
}

MUTATION_FIELDS = {}
