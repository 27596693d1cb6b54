"""
Test utilities and factories for creating test data
"""
from datetime import date
from decimal import Decimal
import json
import random
import string
import uuid

from django.conf import settings
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from backend.campaigns.models import CampaignOrder, CampaignStatus
from backend.catalog.models import Service, Package, Activity
from backend.core.authentication import issue_access_token
from backend.core.models import Role, User
from backend.orders.models import Order, OrderStatus

GRAPHQL_URL = '/graphql/'


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(name=None, email=None, password='testpass123', role=Role.USER, is_active=True):
        """Create a test user"""
        if not name:
            name = f'Test User {TestDataFactory.random_string(6)}'
        if not email:
            email = f'user_{TestDataFactory.random_string(8).lower()}@test.com'
        return User.objects.create_user(
            email=email,
            password=password,
            name=name,
            role=role,
            is_active=is_active
        )

    @staticmethod
    def create_admin(**kwargs):
        kwargs.setdefault('role', Role.ADMIN)
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_order(user, order_no=None, amount=None, status=OrderStatus.PENDING, created_at=None):
        """Create a test order, optionally backdated"""
        if not order_no:
            order_no = f'ORD-{TestDataFactory.random_string(8).upper()}'
        if amount is None:
            amount = Decimal('100.00')
        order = Order.objects.create(
            order_no=order_no,
            amount=amount,
            status=status,
            user=user
        )
        if created_at is not None:
            # auto_now_add ignores values passed to create()
            Order.objects.filter(pk=order.pk).update(created_at=created_at)
            order.refresh_from_db()
        return order

    @staticmethod
    def create_service(name=None, description=None, icon=''):
        """Create a test catalog service"""
        if not name:
            name = f'Service_{TestDataFactory.random_string(6)}'
        return Service.objects.create(
            name=name,
            description=description or f'Test service {name}',
            icon=icon
        )

    @staticmethod
    def create_package(service=None, name=None, tier='Basic', price=None):
        """Create a test package"""
        if not service:
            service = TestDataFactory.create_service()
        if not name:
            name = f'Package_{TestDataFactory.random_string(6)}'
        return Package.objects.create(
            service=service,
            name=name,
            tier=tier,
            price=price if price is not None else Decimal('500.00'),
            description=f'Test package {name}'
        )

    @staticmethod
    def create_activity(package=None, name=None):
        """Create a test activity"""
        if not package:
            package = TestDataFactory.create_package()
        if not name:
            name = f'Activity_{TestDataFactory.random_string(6)}'
        return Activity.objects.create(
            package=package,
            name=name,
            description=f'Test activity {name}'
        )

    @staticmethod
    def client_details(**overrides):
        """Valid wizard step 1 input, camelCase as the API receives it"""
        details = {
            'companyName': 'Acme Corp',
            'websiteUrl': 'https://acme.example.com',
            'clientName': 'Jane Client',
            'clientEmail': 'jane@acme.example.com',
            'clientPhone': '5551234567',
            'billingAddress': '1 Main Street',
            'city': 'Springfield',
            'state': 'IL',
            'country': 'USA',
            'zipCode': '62701',
            'representativeName': 'Rita Rep',
            'representativeEmail': 'rita@agency.example.com',
        }
        details.update(overrides)
        return details

    @staticmethod
    def create_campaign_order(user=None, package=None, status=CampaignStatus.CREATED, monthly_charges=None,
                              duration=3, company_name='Acme Corp', representative_name='Rita Rep',
                              created_at=None):
        """Create a test campaign order directly, bypassing the wizard"""
        if not package:
            package = TestDataFactory.create_package()
        if monthly_charges is None:
            monthly_charges = Decimal('1000.00')
        monthly_charges = Decimal(str(monthly_charges))

        order_number = f"CMP-{timezone.now().strftime('%Y%m%d')}-{str(uuid.uuid4())[:8].upper()}"
        order = CampaignOrder.objects.create(
            order_number=order_number,
            company_name=company_name,
            website_url='https://client.example.com',
            client_name=f'{company_name} Contact',
            client_email='contact@client.example.com',
            client_phone='5551234567',
            billing_address='1 Main Street',
            city='Springfield',
            state='IL',
            country='USA',
            zip_code='62701',
            representative_name=representative_name,
            representative_email='rep@agency.example.com',
            service=package.service,
            package=package,
            campaign_start_date=date.today(),
            campaign_duration=duration,
            monthly_charges=monthly_charges,
            service_name=package.service.name,
            package_name=package.name,
            package_tier=package.tier,
            activities=[],
            total_amount=monthly_charges * duration,
            status=status,
            created_by=user
        )
        if created_at is not None:
            CampaignOrder.objects.filter(pk=order.pk).update(created_at=created_at)
            order.refresh_from_db()
        return order


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication and GraphQL helpers"""

    def authenticate_user(self, user):
        """Authenticate the client with a user through the auth cookie"""
        self.cookies[settings.AUTH_COOKIE_NAME] = issue_access_token(user)
        return self

    def logout(self):
        """Remove authentication"""
        self.cookies.pop(settings.AUTH_COOKIE_NAME, None)
        self.credentials()

    def graphql(self, query, variables=None, **extra):
        """POST a GraphQL operation and return the decoded JSON body"""
        body = {'query': query}
        if variables is not None:
            body['variables'] = variables
        response = self.post(GRAPHQL_URL, data=json.dumps(body), content_type='application/json', **extra)
        response.json_body = json.loads(response.content)
        return response


class GraphQLTestCase(TestCase):
    """Base test case with a fresh cache and an unauthenticated client"""

    def setUp(self):
        cache.clear()
        self.client = AuthenticatedAPIClient()

    def assertNoErrors(self, response):
        self.assertNotIn('errors', response.json_body, response.json_body.get('errors'))

    def assertErrorCode(self, response, code):
        errors = response.json_body.get('errors') or []
        self.assertTrue(errors, 'Expected GraphQL errors')
        self.assertEqual(errors[0]['extensions']['code'], code, errors)
