"""GraphQL types and root fields for the service/package/activity catalog"""
from graphql import (
    GraphQLArgument, GraphQLBoolean, GraphQLEnumType, GraphQLEnumValue, GraphQLField,
    GraphQLFloat, GraphQLID, GraphQLInputObjectType, GraphQLList, GraphQLNonNull,
    GraphQLObjectType, GraphQLString,
)

from backend.api.fields import attr_field, datetime_field, float_field, input_field

from . import services
from .models import Package

PackageTierEnum = GraphQLEnumType(
    'PackageTier',
    {value: GraphQLEnumValue(value) for value, _ in Package.TIER_CHOICES},
)


def _list_of(type_):
    return GraphQLNonNull(GraphQLList(GraphQLNonNull(type_)))


ServiceType = GraphQLObjectType('Service', lambda: {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
    'name': attr_field(GraphQLNonNull(GraphQLString), 'name'),
    'description': attr_field(GraphQLNonNull(GraphQLString), 'description'),
    'icon': attr_field(GraphQLString, 'icon'),
    'packages': GraphQLField(_list_of(PackageType), resolve=lambda service, info: service.packages.all()),
    'createdAt': datetime_field(GraphQLNonNull(GraphQLString), 'created_at'),
})

PackageType = GraphQLObjectType('Package', lambda: {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
    'serviceId': attr_field(GraphQLNonNull(GraphQLID), 'service_id'),
    'service': attr_field(GraphQLNonNull(ServiceType), 'service'),
    'name': attr_field(GraphQLNonNull(GraphQLString), 'name'),
    'tier': attr_field(GraphQLNonNull(PackageTierEnum), 'tier'),
    'price': float_field(GraphQLNonNull(GraphQLFloat), 'price'),
    'description': attr_field(GraphQLNonNull(GraphQLString), 'description'),
    'activities': GraphQLField(_list_of(ActivityType), resolve=lambda package, info: package.activities.all()),
    'createdAt': datetime_field(GraphQLNonNull(GraphQLString), 'created_at'),
})

ActivityType = GraphQLObjectType('Activity', lambda: {
    'id': attr_field(GraphQLNonNull(GraphQLID), 'pk'),
    'packageId': attr_field(GraphQLNonNull(GraphQLID), 'package_id'),
    'name': attr_field(GraphQLNonNull(GraphQLString), 'name'),
    'description': attr_field(GraphQLNonNull(GraphQLString), 'description'),
    'createdAt': datetime_field(GraphQLNonNull(GraphQLString), 'created_at'),
})


def _service_input(name, required):
    wrap = GraphQLNonNull if required else (lambda t: t)
    return GraphQLInputObjectType(name, {
        'name': input_field(wrap(GraphQLString), 'name'),
        'description': input_field(wrap(GraphQLString), 'description'),
        'icon': input_field(GraphQLString, 'icon'),
    })


def _package_input(name, required):
    wrap = GraphQLNonNull if required else (lambda t: t)
    return GraphQLInputObjectType(name, {
        'serviceId': input_field(wrap(GraphQLID), 'service'),
        'name': input_field(wrap(GraphQLString), 'name'),
        'tier': input_field(wrap(PackageTierEnum), 'tier'),
        'price': input_field(wrap(GraphQLFloat), 'price'),
        'description': input_field(wrap(GraphQLString), 'description'),
    })


def _activity_input(name, required):
    wrap = GraphQLNonNull if required else (lambda t: t)
    return GraphQLInputObjectType(name, {
        'packageId': input_field(wrap(GraphQLID), 'package'),
        'name': input_field(wrap(GraphQLString), 'name'),
        'description': input_field(wrap(GraphQLString), 'description'),
    })


CreateServiceInput = _service_input('CreateServiceInput', required=True)
UpdateServiceInput = _service_input('UpdateServiceInput', required=False)
CreatePackageInput = _package_input('CreatePackageInput', required=True)
UpdatePackageInput = _package_input('UpdatePackageInput', required=False)
CreateActivityInput = _activity_input('CreateActivityInput', required=True)
UpdateActivityInput = _activity_input('UpdateActivityInput', required=False)


def _principal(info):
    return info.context.principal


def _request(info):
    return info.context.request


QUERY_FIELDS = {
    'services': GraphQLField(
        _list_of(ServiceType),
        resolve=lambda root, info: services.list_services(),
    ),
    'service': GraphQLField(
        GraphQLNonNull(ServiceType),
        args={'id': GraphQLArgument(GraphQLNonNull(GraphQLID))},
        resolve=lambda root, info, id: services.get_service(id),
    ),
    'packages': GraphQLField(
        _list_of(PackageType),
        args={'serviceId': GraphQLArgument(GraphQLID, out_name='service_id')},
        resolve=lambda root, info, service_id=None: services.list_packages(service_id),
        description='All packages, or those of one service',
    ),
    'package': GraphQLField(
        GraphQLNonNull(PackageType),
        args={'id': GraphQLArgument(GraphQLNonNull(GraphQLID))},
        resolve=lambda root, info, id: services.get_package(id),
    ),
    'activities': GraphQLField(
        _list_of(ActivityType),
        args={'packageId': GraphQLArgument(GraphQLID, out_name='package_id')},
        resolve=lambda root, info, package_id=None: services.list_activities(package_id),
        description='All activities, or those of one package',
    ),
}

MUTATION_FIELDS = {
    'createService': GraphQLField(
        GraphQLNonNull(ServiceType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreateServiceInput))},
        resolve=lambda root, info, input: services.create_service(input, _principal(info)),
    ),
    'updateService': GraphQLField(
        GraphQLNonNull(ServiceType),
        args={
            'id': GraphQLArgument(GraphQLNonNull(GraphQLID)),
            'input': GraphQLArgument(GraphQLNonNull(UpdateServiceInput)),
        },
        resolve=lambda root, info, id, input: services.update_service(id, input, _principal(info)),
    ),
    'deleteService': GraphQLField(
        GraphQLNonNull(GraphQLBoolean),
        args={'id': GraphQLArgument(GraphQLNonNull(GraphQLID))},
        resolve=lambda root, info, id: services.delete_service(id, _principal(info), _request(info)),
        description='Delete a service together with its packages and their activities',
    ),
    'createPackage': GraphQLField(
        GraphQLNonNull(PackageType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreatePackageInput))},
        resolve=lambda root, info, input: services.create_package(input, _principal(info)),
    ),
    'updatePackage': GraphQLField(
        GraphQLNonNull(PackageType),
        args={
            'id': GraphQLArgument(GraphQLNonNull(GraphQLID)),
            'input': GraphQLArgument(GraphQLNonNull(UpdatePackageInput)),
        },
        resolve=lambda root, info, id, input: services.update_package(id, input, _principal(info)),
    ),
    'deletePackage': GraphQLField(
        GraphQLNonNull(GraphQLBoolean),
        args={'id': GraphQLArgument(GraphQLNonNull(GraphQLID))},
        resolve=lambda root, info, id: services.delete_package(id, _principal(info), _request(info)),
        description='Delete a package together with its activities',
    ),
    'createActivity': GraphQLField(
        GraphQLNonNull(ActivityType),
        args={'input': GraphQLArgument(GraphQLNonNull(CreateActivityInput))},
        resolve=lambda root, info, input: services.create_activity(input, _principal(info)),
    ),
    'updateActivity': GraphQLField(
        GraphQLNonNull(ActivityType),
        args={
            'id': GraphQLArgument(GraphQLNonNull(GraphQLID)),
            'input': GraphQLArgument(GraphQLNonNull(UpdateActivityInput)),
        },
        resolve=lambda root, info, id, input: services.update_activity(id, input, _principal(info)),
    ),
    'deleteActivity': GraphQLField(
        GraphQLNonNull(GraphQLBoolean),
        args={'id': GraphQLArgument(GraphQLNonNull(GraphQLID))},
        resolve=lambda root, info, id: services.delete_activity(id, _principal(info), _request(info)),
    ),
}
