"""
Test suite for Catalog module
Tests: service/package/activity CRUD, validation messages, cascading deletes, seed command
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command

from backend.catalog.models import Service, Package, Activity
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, GraphQLTestCase

SERVICES = '{ services { id name packages { id name activities { id } } } }'

PACKAGES = '''
query Packages($serviceId: ID) { packages(serviceId: $serviceId) { id serviceId name tier price } }
'''

CREATE_SERVICE = '''
mutation CreateService($input: CreateServiceInput!) { createService(input: $input) { id name description icon } }
'''

UPDATE_SERVICE = '''
mutation UpdateService($id: ID!, $input: UpdateServiceInput!) { updateService(id: $id, input: $input) { id name description } }
'''

DELETE_SERVICE = 'mutation DeleteService($id: ID!) { deleteService(id: $id) }'

CREATE_PACKAGE = '''
mutation CreatePackage($input: CreatePackageInput!) { createPackage(input: $input) { id serviceId name tier price } }
'''

DELETE_PACKAGE = 'mutation DeletePackage($id: ID!) { deletePackage(id: $id) }'

CREATE_ACTIVITY = '''
mutation CreateActivity($input: CreateActivityInput!) { createActivity(input: $input) { id packageId name } }
'''


class CatalogTestCase(GraphQLTestCase):

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()


class CatalogReadTests(CatalogTestCase):
    """Test catalog queries"""

    def setUp(self):
        super().setUp()
        self.service = TestDataFactory.create_service(name='SEO')
        self.package = TestDataFactory.create_package(service=self.service, name='SEO Basic')
        self.activity = TestDataFactory.create_activity(package=self.package)
        self.other_package = TestDataFactory.create_package(name='Other')

    def test_any_authenticated_user_can_read(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql(SERVICES)
        self.assertNoErrors(response)
        services = response.json_body['data']['services']
        self.assertEqual(len(services), 2)
        seo = next(s for s in services if s['name'] == 'SEO')
        self.assertEqual(seo['packages'][0]['activities'], [{'id': str(self.activity.pk)}])

    def test_anonymous_cannot_read(self):
        response = self.client.graphql(SERVICES)
        self.assertErrorCode(response, 'UNAUTHENTICATED')

    def test_packages_filtered_by_service(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql(PACKAGES, {'serviceId': str(self.service.pk)})
        self.assertNoErrors(response)
        packages = response.json_body['data']['packages']
        self.assertEqual([p['id'] for p in packages], [str(self.package.pk)])
        self.assertEqual(packages[0]['serviceId'], str(self.service.pk))
        self.assertEqual(packages[0]['price'], 500.0)

    def test_missing_service(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql('{ service(id: "424242") { id } }')
        self.assertErrorCode(response, 'NOT_FOUND')

    def test_out_of_range_parent_ids(self):
        self.client.authenticate_user(self.user)
        huge = '9' * 20
        response = self.client.graphql(PACKAGES, {'serviceId': huge})
        self.assertErrorCode(response, 'NOT_FOUND')
        response = self.client.graphql('query A($p: ID) { activities(packageId: $p) { id } }', {'p': huge})
        self.assertErrorCode(response, 'NOT_FOUND')
        response = self.client.graphql(PACKAGES, {'serviceId': str(2 ** 63 - 1)})
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['packages'], [])


class CatalogWriteTests(CatalogTestCase):
    """Test catalog mutations"""

    def test_writes_are_admin_only(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql(CREATE_SERVICE, {'input': {'name': 'PPC', 'description': 'Ads'}})
        self.assertErrorCode(response, 'FORBIDDEN')
        self.assertFalse(Service.objects.filter(name='PPC').exists())

    def test_create_service(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_SERVICE, {'input': {'name': 'PPC', 'description': 'Paid ads'}})
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['createService']['icon'], '')
        self.assertTrue(Service.objects.filter(name='PPC').exists())

    def test_create_service_blank_name(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_SERVICE, {'input': {'name': '', 'description': 'Paid ads'}})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = response.json_body['errors'][0]['extensions']['fields']
        self.assertIn({'field': 'name', 'message': 'Service name is required'}, fields)

    def test_update_service_is_partial(self):
        service = TestDataFactory.create_service(name='Old', description='Keep me')
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(UPDATE_SERVICE, {'id': str(service.pk), 'input': {'name': 'New'}})
        self.assertNoErrors(response)
        service.refresh_from_db()
        self.assertEqual(service.name, 'New')
        self.assertEqual(service.description, 'Keep me')

    def test_create_package(self):
        service = TestDataFactory.create_service()
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_PACKAGE, {'input': {
            'serviceId': str(service.pk), 'name': 'Gold', 'tier': 'Premium', 'price': 1999.5, 'description': 'Top tier',
        }})
        self.assertNoErrors(response)
        package = Package.objects.get(name='Gold')
        self.assertEqual(package.service, service)
        self.assertEqual(package.price, Decimal('1999.50'))

    def test_create_package_rejects_low_price_and_missing_service(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_PACKAGE, {'input': {
            'serviceId': '999999', 'name': 'Free', 'tier': 'Basic', 'price': 0, 'description': 'Nothing',
        }})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = response.json_body['errors'][0]['extensions']['fields']
        self.assertIn({'field': 'price', 'message': 'Price must be greater than 0'}, fields)
        self.assertIn({'field': 'service', 'message': 'Please select a service'}, fields)

    def test_create_activity(self):
        package = TestDataFactory.create_package()
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_ACTIVITY, {'input': {
            'packageId': str(package.pk), 'name': 'Audit', 'description': 'Site audit',
        }})
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['createActivity']['packageId'], str(package.pk))


class CatalogCascadeTests(CatalogTestCase):
    """Deleting a parent removes everything below it"""

    def setUp(self):
        super().setUp()
        self.service = TestDataFactory.create_service()
        self.packages = [TestDataFactory.create_package(service=self.service) for _ in range(2)]
        for package in self.packages:
            TestDataFactory.create_activity(package=package)
            TestDataFactory.create_activity(package=package)
        self.unrelated = TestDataFactory.create_activity()
        self.client.authenticate_user(self.admin)

    def test_delete_service_cascades(self):
        response = self.client.graphql(DELETE_SERVICE, {'id': str(self.service.pk)})
        self.assertNoErrors(response)
        self.assertTrue(response.json_body['data']['deleteService'])

        self.assertFalse(Service.objects.filter(pk=self.service.pk).exists())
        self.assertFalse(Package.objects.filter(pk__in=[p.pk for p in self.packages]).exists())
        self.assertFalse(Activity.objects.filter(package_id__in=[p.pk for p in self.packages]).exists())
        self.assertTrue(Activity.objects.filter(pk=self.unrelated.pk).exists())

        log = AuditLog.objects.get(action='delete', model_name='Service')
        self.assertEqual(log.changes, {'packages': 2, 'activities': 4})

    def test_delete_package_cascades(self):
        package = self.packages[0]
        response = self.client.graphql(DELETE_PACKAGE, {'id': str(package.pk)})
        self.assertNoErrors(response)
        self.assertFalse(Activity.objects.filter(package_id=package.pk).exists())
        self.assertEqual(Activity.objects.filter(package=self.packages[1]).count(), 2)

        log = AuditLog.objects.get(action='delete', model_name='Package')
        self.assertEqual(log.changes, {'activities': 2})


    def test_delete_missing_service(self):
        response = self.client.graphql(DELETE_SERVICE, {'id': '999999'})
        self.assertErrorCode(response, 'NOT_FOUND')


class SeedCatalogCommandTests(GraphQLTestCase):
    """Test the seed_catalog management command"""

    def test_seed_loads_fixture(self):
        call_command('seed_catalog', stdout=StringIO())
        self.assertGreater(Service.objects.count(), 0)
        self.assertGreater(Package.objects.count(), 0)
        self.assertGreater(Activity.objects.count(), 0)

    def test_seed_is_idempotent(self):
        call_command('seed_catalog', stdout=StringIO())
        counts = (Service.objects.count(), Package.objects.count(), Activity.objects.count())
        call_command('seed_catalog', stdout=StringIO())
        self.assertEqual((Service.objects.count(), Package.objects.count(), Activity.objects.count()), counts)
