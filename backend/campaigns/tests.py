"""
Test suite for the campaign order wizard
Tests: step 1 validation, order creation with snapshot and total, listing scope, status updates
"""
from decimal import Decimal

from backend.campaigns.models import CampaignOrder, CampaignStatus
from backend.core.test_utils import TestDataFactory, GraphQLTestCase

VALIDATE = '''
query Validate($input: ClientDetailsInput!) {
  validateClientDetails(input: $input) { valid errors { field message } }
}
'''

CREATE = '''
mutation Create($input: CreateCampaignOrderInput!) {
  createCampaignOrder(input: $input) {
    id orderNumber status serviceName packageName packageTier
    activities { id name }
    campaignDuration monthlyCharges totalAmount campaignStartDate
    createdBy { id }
  }
}
'''

LIST = '''
query List($limit: Int) { campaignOrders(limit: $limit) { id companyName } }
'''

UPDATE_STATUS = '''
mutation Update($input: UpdateCampaignOrderStatusInput!) {
  updateCampaignOrderStatus(input: $input) { id status }
}
'''


class ClientDetailsValidationTests(GraphQLTestCase):
    """Test wizard step 1"""

    def setUp(self):
        super().setUp()
        self.client.authenticate_user(TestDataFactory.create_user())

    def errors_for(self, **overrides):
        response = self.client.graphql(VALIDATE, {'input': TestDataFactory.client_details(**overrides)})
        self.assertNoErrors(response)
        return response.json_body['data']['validateClientDetails']

    def test_valid_details(self):
        self.assertEqual(self.errors_for(), {'valid': True, 'errors': []})

    def test_invalid_url_and_email(self):
        result = self.errors_for(websiteUrl='not a url', clientEmail='nope')
        self.assertFalse(result['valid'])
        self.assertIn({'field': 'websiteUrl', 'message': 'Please enter a valid URL'}, result['errors'])
        self.assertIn({'field': 'clientEmail', 'message': 'Please enter a valid email'}, result['errors'])

    def test_phone_length(self):
        short = self.errors_for(clientPhone='12345')
        self.assertIn({'field': 'clientPhone', 'message': 'Phone number must be at least 10 digits'}, short['errors'])
        long = self.errors_for(clientPhone='1' * 16)
        self.assertIn({'field': 'clientPhone', 'message': 'Phone number must not exceed 15 digits'}, long['errors'])

    def test_missing_and_blank_fields(self):
        details = TestDataFactory.client_details(city='')
        del details['companyName']
        response = self.client.graphql(VALIDATE, {'input': details})
        result = response.json_body['data']['validateClientDetails']
        self.assertFalse(result['valid'])
        self.assertIn({'field': 'companyName', 'message': 'Company name is required'}, result['errors'])
        self.assertIn({'field': 'city', 'message': 'City is required'}, result['errors'])

    def test_nothing_is_stored(self):
        self.errors_for()
        self.assertEqual(CampaignOrder.objects.count(), 0)


class CreateCampaignOrderTests(GraphQLTestCase):
    """Test wizard step 2"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user()
        self.service = TestDataFactory.create_service(name='SEO')
        self.package = TestDataFactory.create_package(service=self.service, name='SEO Growth', tier='Standard')
        self.activities = [
            TestDataFactory.create_activity(package=self.package, name='Keyword research'),
            TestDataFactory.create_activity(package=self.package, name='Link building'),
        ]
        self.client.authenticate_user(self.user)

    def order_input(self, **overrides):
        data = TestDataFactory.client_details()
        data.update({
            'serviceId': str(self.service.pk),
            'packageId': str(self.package.pk),
            'campaignStartDate': '2026-01-15',
            'campaignDuration': 6,
            'monthlyCharges': 1250.5,
            'comments': 'Focus on local search',
        })
        data.update(overrides)
        return data

    def test_create_order_computes_total_and_snapshot(self):
        response = self.client.graphql(CREATE, {'input': self.order_input()})
        self.assertNoErrors(response)
        order = response.json_body['data']['createCampaignOrder']

        self.assertEqual(order['status'], 'CREATED')
        self.assertRegex(order['orderNumber'], r'^CMP-\d{8}-[0-9A-F]{8}$')
        self.assertEqual(order['totalAmount'], 7503.0)
        self.assertEqual(order['serviceName'], 'SEO')
        self.assertEqual(order['packageName'], 'SEO Growth')
        self.assertEqual(order['packageTier'], 'Standard')
        self.assertEqual([a['name'] for a in order['activities']], ['Keyword research', 'Link building'])
        self.assertEqual(order['campaignStartDate'], '2026-01-15')
        self.assertEqual(order['createdBy']['id'], str(self.user.pk))

        stored = CampaignOrder.objects.get(pk=order['id'])
        self.assertEqual(stored.total_amount, stored.monthly_charges * stored.campaign_duration)
        self.assertEqual(stored.total_amount, Decimal('7503.00'))

    def test_snapshot_survives_catalog_delete(self):
        response = self.client.graphql(CREATE, {'input': self.order_input()})
        order_id = response.json_body['data']['createCampaignOrder']['id']
        self.service.delete()

        stored = CampaignOrder.objects.get(pk=order_id)
        self.assertIsNone(stored.package_id)
        self.assertEqual(stored.package_name, 'SEO Growth')
        self.assertEqual(len(stored.activities), 2)

    def test_package_must_belong_to_service(self):
        other_package = TestDataFactory.create_package(name='Unrelated')
        response = self.client.graphql(CREATE, {'input': self.order_input(packageId=str(other_package.pk))})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = [f['field'] for f in response.json_body['errors'][0]['extensions']['fields']]
        self.assertIn('package', fields)
        self.assertEqual(CampaignOrder.objects.count(), 0)

    def test_duration_bounds(self):
        response = self.client.graphql(CREATE, {'input': self.order_input(campaignDuration=37)})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        self.assertIn(
            {'field': 'campaignDuration', 'message': 'Duration cannot exceed 36 months'},
            response.json_body['errors'][0]['extensions']['fields'],
        )
        response = self.client.graphql(CREATE, {'input': self.order_input(campaignDuration=0)})
        self.assertIn(
            {'field': 'campaignDuration', 'message': 'Duration must be at least 1 month'},
            response.json_body['errors'][0]['extensions']['fields'],
        )

    def test_monthly_charges_minimum(self):
        response = self.client.graphql(CREATE, {'input': self.order_input(monthlyCharges=0.5)})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        self.assertIn(
            {'field': 'monthlyCharges', 'message': 'Monthly charges must be greater than 0'},
            response.json_body['errors'][0]['extensions']['fields'],
        )

    def test_client_details_are_validated_too(self):
        response = self.client.graphql(CREATE, {'input': self.order_input(representativeEmail='bad')})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        self.assertIn(
            {'field': 'representativeEmail', 'message': 'Please enter a valid email'},
            response.json_body['errors'][0]['extensions']['fields'],
        )

    def test_comments_optional(self):
        data = self.order_input()
        del data['comments']
        response = self.client.graphql(CREATE, {'input': data})
        self.assertNoErrors(response)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.graphql(CREATE, {'input': self.order_input()})
        self.assertErrorCode(response, 'UNAUTHENTICATED')


class CampaignOrderListingTests(GraphQLTestCase):
    """Test campaignOrders scoping and updateCampaignOrderStatus"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.alice = TestDataFactory.create_user()
        self.bob = TestDataFactory.create_user()
        self.alice_order = TestDataFactory.create_campaign_order(user=self.alice, company_name='Alice Co')
        self.bob_order = TestDataFactory.create_campaign_order(user=self.bob, company_name='Bob Co')

    def test_user_sees_own_orders(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(LIST)
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['campaignOrders'], [{'id': str(self.alice_order.pk), 'companyName': 'Alice Co'}])

    def test_admin_sees_all_with_limit(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(LIST)
        self.assertEqual(len(response.json_body['data']['campaignOrders']), 2)
        response = self.client.graphql(LIST, {'limit': 1})
        self.assertEqual(response.json_body['data']['campaignOrders'][0]['id'], str(self.bob_order.pk))

    def test_status_update_admin_only(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(self.alice_order.pk), 'status': 'COMPLETED'}})
        self.assertErrorCode(response, 'FORBIDDEN')

        self.client.authenticate_user(self.admin)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(self.alice_order.pk), 'status': 'COMPLETED'}})
        self.assertNoErrors(response)
        self.alice_order.refresh_from_db()
        self.assertEqual(self.alice_order.status, CampaignStatus.COMPLETED)

    def test_status_update_missing_order(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': '999999', 'status': 'ON_HOLD'}})
        self.assertErrorCode(response, 'NOT_FOUND')
