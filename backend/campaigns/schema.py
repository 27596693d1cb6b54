"""GraphQL types and root fields for the campaign order wizard"""
from graphql import (
    GraphQLArgument, GraphQLBoolean, GraphQLEnumType, GraphQLEnumValue, GraphQLField,
    GraphQLFloat, GraphQLID, GraphQLInputObjectType, GraphQLInt, GraphQLList, GraphQLNonNull,
    GraphQLObjectType, GraphQLString,
)

from backend.api.fields import attr_field, datetime_field, float_field, input_field, to_camel
from backend.core.schema import UserType

from . import services
from .models import CampaignStatus

CLIENT_DETAIL_FIELDS = [
    'company_name', 'website_url', 'client_name', 'client_email', 'client_phone',
    'billing_address', 'city', 'state', 'country', 'zip_code',
    'representative_name', 'representative_email',
]

CampaignStatusEnum = GraphQLEnumType(
    'CampaignStatus',
    {value: GraphQLEnumValue(value, description=label) for value, label in CampaignStatus.choices},
)

FieldErrorType = GraphQLObjectType('FieldError', {
    'field': attr_field(GraphQLString, 'field'),
    'message': attr_field(GraphQLNonNull(GraphQLString), 'message'),
})

ValidationResultType = GraphQLObjectType('ValidationResult', {
    'valid': attr_field(GraphQLNonNull(GraphQLBoolean), 'valid'),
    'errors': attr_field(GraphQLNonNull(GraphQLList(GraphQLNonNull(FieldErrorType))), 'errors'),
})

CampaignActivityType = GraphQLObjectType('CampaignActivity', {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'id'),
    'name': attr_field(GraphQLNonNull(GraphQLString), 'name'),
    'description': attr_field(GraphQLString, 'description'),
})


def _campaign_order_fields():
    fields = {to_camel(name): attr_field(GraphQLNonNull(GraphQLString), name) for name in CLIENT_DETAIL_FIELDS}
    fields.update({
        'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
        'orderNumber': attr_field(GraphQLNonNull(GraphQLString), 'order_number'),
        'serviceId': attr_field(GraphQLID, 'service_id'),
        'packageId': attr_field(GraphQLID, 'package_id'),
        'serviceName': attr_field(GraphQLNonNull(GraphQLString), 'service_name'),
        'packageName': attr_field(GraphQLNonNull(GraphQLString), 'package_name'),
        'packageTier': attr_field(GraphQLNonNull(GraphQLString), 'package_tier'),
        'activities': attr_field(GraphQLNonNull(GraphQLList(GraphQLNonNull(CampaignActivityType))), 'activities'),
        'comments': attr_field(GraphQLString, 'comments'),
        'campaignStartDate': datetime_field(GraphQLNonNull(GraphQLString), 'campaign_start_date'),
        'campaignDuration': attr_field(GraphQLNonNull(GraphQLInt), 'campaign_duration'),
        'monthlyCharges': float_field(GraphQLNonNull(GraphQLFloat), 'monthly_charges'),
        'totalAmount': float_field(GraphQLNonNull(GraphQLFloat), 'total_amount'),
        'status': attr_field(GraphQLNonNull(CampaignStatusEnum), 'status'),
        'createdBy': attr_field(UserType, 'created_by'),
        'createdAt': datetime_field(GraphQLNonNull(GraphQLString), 'created_at'),
    })
    return fields


CampaignOrderType = GraphQLObjectType('CampaignOrder', _campaign_order_fields)


# Input fields stay nullable so missing values come back as field errors
# instead of GraphQL variable coercion failures.
def _client_detail_inputs():
    return {to_camel(name): input_field(GraphQLString, name) for name in CLIENT_DETAIL_FIELDS}


ClientDetailsInput = GraphQLInputObjectType('ClientDetailsInput', _client_detail_inputs)

CreateCampaignOrderInput = GraphQLInputObjectType('CreateCampaignOrderInput', lambda: {
    **_client_detail_inputs(),
    'serviceId': input_field(GraphQLID, 'service'),
    'packageId': input_field(GraphQLID, 'package'),
    'comments': input_field(GraphQLString, 'comments'),
    'campaignStartDate': input_field(GraphQLString, 'campaign_start_date', description='YYYY-MM-DD'),
    'campaignDuration': input_field(GraphQLInt, 'campaign_duration', description='Months, 1 to 36'),
    'monthlyCharges': input_field(GraphQLFloat, 'monthly_charges'),
})

UpdateCampaignOrderStatusInput = GraphQLInputObjectType('UpdateCampaignOrderStatusInput', {
    'id': input_field(GraphQLNonNull(GraphQLID), 'id'),
    'status': input_field(GraphQLNonNull(CampaignStatusEnum), 'status'),
})


def resolve_validate_client_details(root, info, input):
    return services.validate_client_details(input)


def resolve_create_campaign_order(root, info, input):
    return services.create_campaign_order(input, info.context.principal, request=info.context.request)


def resolve_campaign_orders(root, info, limit=None):
    return services.list_campaign_orders(info.context.principal, limit)


def resolve_update_campaign_order_status(root, info, input):
    return services.update_campaign_order_status(
        input['id'], input['status'], info.context.principal, request=info.context.request,
    )


QUERY_FIELDS = {
    'validateClientDetails': GraphQLField(
        GraphQLNonNull(ValidationResultType),
        args={'input': GraphQLArgument(GraphQLNonNull(ClientDetailsInput))},
        resolve=resolve_validate_client_details,
        description='Check wizard step 1 without storing anything',
    ),
    'campaignOrders': GraphQLField(
        GraphQLNonNull(GraphQLList(GraphQLNonNull(CampaignOrderType))),
        args={'limit': GraphQLArgument(GraphQLInt)},
        resolve=resolve_campaign_orders,
        description="All campaign orders for admins, the caller's own otherwise",
    ),
}

MUTATION_FIELDS = {
    'createCampaignOrder': GraphQLField(
        GraphQLNonNull(CampaignOrderType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreateCampaignOrderInput))},
        resolve=resolve_create_campaign_order,
    ),
    'updateCampaignOrderStatus': GraphQLField(
        GraphQLNonNull(CampaignOrderType),
        args={'input': GraphQLArgument(GraphQLNonNull(UpdateCampaignOrderStatusInput))},
        resolve=resolve_update_campaign_order_status,
    ),
}
