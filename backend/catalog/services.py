"""
Catalog CRUD: services, their packages and the packages' activities.

Deletes cascade down the hierarchy through the foreign keys: removing a
service removes its packages and every activity of those packages.
"""
import logging

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from backend.api.fields import parse_id
from backend.core.utils import create_audit_log

from .models import Service, Package, Activity
from .serializers import ServiceSerializer, PackageSerializer, ActivitySerializer

logger = logging.getLogger('backend.catalog')


def _get(model, object_id, label):
    pk = parse_id(object_id, label)
    try:
        return model.objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(f'{label} not found')


def _normalize(data):
    data = {key: value for key, value in data.items()}
    if isinstance(data.get('price'), float):
        data['price'] = round(data['price'], 2)
    return data


def _save(serializer_class, data, instance=None):
    serializer = serializer_class(instance, data=_normalize(data), partial=instance is not None)
    if not serializer.is_valid():
        raise ValidationError(serializer.errors)
    with transaction.atomic():
        return serializer.save()


# Reads

def list_services():
    return Service.objects.all()


def get_service(service_id):
    return _get(Service, service_id, 'Service')


def list_packages(service_id=None):
    queryset = Package.objects.select_related('service')
    if service_id is not None:
        queryset = queryset.filter(service_id=parse_id(service_id, 'Service'))
    return queryset


def get_package(package_id):
    return _get(Package, package_id, 'Package')


def list_activities(package_id=None):
    queryset = Activity.objects.select_related('package')
    if package_id is not None:
        queryset = queryset.filter(package_id=parse_id(package_id, 'Package'))
    return queryset


# Services

def create_service(data, principal):
    service = _save(ServiceSerializer, data)
    logger.info(f"User id={principal.user_id} created service {service.pk} ({service.name})")
    return service


def update_service(service_id, data, principal):
    service = _save(ServiceSerializer, data, instance=get_service(service_id))
    logger.info(f"User id={principal.user_id} updated service {service.pk}")
    return service


def delete_service(service_id, principal, request=None):
    service = get_service(service_id)
    with transaction.atomic():
        packages = Package.objects.filter(service=service)
        changes = {
            'packages': packages.count(),
            'activities': Activity.objects.filter(package__in=packages).count(),
        }
        service.delete()
    logger.info(f"User id={principal.user_id} deleted service {service_id} with {changes['packages']} packages and {changes['activities']} activities")
    create_audit_log(request=request, action='delete', model_name='Service', object_id=service_id,
                     user=principal.user_id, object_reference=service.name, changes=changes)
    return True


# Packages

def create_package(data, principal):
    package = _save(PackageSerializer, data)
    logger.info(f"User id={principal.user_id} created package {package.pk} under service {package.service_id}")
    return package


def update_package(package_id, data, principal):
    package = _save(PackageSerializer, data, instance=get_package(package_id))
    logger.info(f"User id={principal.user_id} updated package {package.pk}")
    return package


def delete_package(package_id, principal, request=None):
    package = get_package(package_id)
    with transaction.atomic():
        changes = {'activities': package.activities.count()}
        package.delete()
    logger.info(f"User id={principal.user_id} deleted package {package_id} with {changes['activities']} activities")
    create_audit_log(request=request, action='delete', model_name='Package', object_id=package_id,
                     user=principal.user_id, object_reference=package.name, changes=changes)
    return True


# Activities

def create_activity(data, principal):
    activity = _save(ActivitySerializer, data)
    logger.info(f"User id={principal.user_id} created activity {activity.pk} under package {activity.package_id}")
    return activity


def update_activity(activity_id, data, principal):
    activity = _save(ActivitySerializer, data, instance=_get(Activity, activity_id, 'Activity'))
    logger.info(f"User id={principal.user_id} updated activity {activity.pk}")
    return activity


def delete_activity(activity_id, principal, request=None):
    activity = _get(Activity, activity_id, 'Activity')
    with transaction.atomic():
        activity.delete()
    logger.info(f"User id={principal.user_id} deleted activity {activity_id}")
    create_audit_log(request=request, action='delete', model_name='Activity', object_id=activity_id,
                     user=principal.user_id, object_reference=activity.name)
    return True
