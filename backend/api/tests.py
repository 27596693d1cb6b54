"""
Test suite for the GraphQL endpoint
Tests: request parsing, HTTP status codes, GET restrictions, error formatting
"""
import json
from io import StringIO
from unittest import mock

from django.conf import settings
from django.core.management import call_command
from django.test import override_settings
from graphql import GraphQLError
from rest_framework.exceptions import ValidationError

from backend.api.errors import flatten_validation_errors, format_error
from backend.api.fields import to_camel
from backend.api.views import GraphQLRateThrottle
from backend.core.test_utils import GRAPHQL_URL, TestDataFactory, GraphQLTestCase


class GraphQLEndpointTests(GraphQLTestCase):
    """Test HTTP handling of the endpoint"""

    def test_missing_query_is_bad_request(self):
        response = self.client.post(GRAPHQL_URL, data=json.dumps({}), content_type='application/json')
        self.assertEqual(response.status_code, 400)
        body = json.loads(response.content)
        self.assertEqual(body['errors'][0]['message'], 'Must provide query string.')

    def test_malformed_json_is_bad_request(self):
        response = self.client.post(GRAPHQL_URL, data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        body = json.loads(response.content)
        self.assertEqual(body['errors'][0]['extensions']['code'], 'BAD_REQUEST')

    def test_syntax_error_is_bad_request(self):
        response = self.client.graphql('{ me { id ')
        self.assertEqual(response.status_code, 400)
        self.assertIn('Syntax Error', response.json_body['errors'][0]['message'])

    def test_unknown_field_is_bad_request(self):
        response = self.client.graphql('{ doesNotExist }')
        self.assertEqual(response.status_code, 400)
        self.assertErrorCode(response, 'GRAPHQL_VALIDATION_FAILED')

    def test_introspection_is_public(self):
        response = self.client.graphql('{ __schema { queryType { name } } }')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json_body['data']['__schema']['queryType']['name'], 'Query')

    def test_query_over_get(self):
        self.client.authenticate_user(TestDataFactory.create_user(email='get@test.com'))
        response = self.client.get(GRAPHQL_URL, {'query': '{ me { email } }'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content)['data']['me']['email'], 'get@test.com')

    def test_mutation_over_get_refused(self):
        response = self.client.get(GRAPHQL_URL, {'query': 'mutation { logout }'})
        self.assertEqual(response.status_code, 405)
        body = json.loads(response.content)
        self.assertEqual(body['errors'][0]['extensions']['code'], 'METHOD_NOT_ALLOWED')

    def test_put_not_allowed(self):
        response = self.client.put(GRAPHQL_URL, data=json.dumps({'query': '{ me { id } }'}), content_type='application/json')
        self.assertEqual(response.status_code, 405)

    def test_bad_variables_are_bad_request(self):
        response = self.client.post(
            GRAPHQL_URL,
            data=json.dumps({'query': 'query Q($d: Int) { ordersByDate(days: $d) { date } }', 'variables': '[1]'}),
            content_type='application/json',
        )
        self.assertEqual(response.status_code, 400)

    def test_variable_coercion_failure(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.graphql('query Q($d: Int) { ordersByDate(days: $d) { date } }', {'d': 'seven'})
        self.assertEqual(response.status_code, 400)
        self.assertNotIn('data', response.json_body)

    def test_path_without_trailing_slash(self):
        response = self.client.post('/graphql', data=json.dumps({'query': '{ __typename }'}), content_type='application/json')
        self.assertEqual(response.status_code, 200)

    @override_settings(DEBUG=False)
    def test_unexpected_errors_are_masked(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        with mock.patch('backend.core.services.get_user', side_effect=RuntimeError('database exploded')):
            response = self.client.graphql('{ me { id } }')
        self.assertEqual(response.status_code, 200)
        self.assertErrorCode(response, 'INTERNAL_SERVER_ERROR')
        self.assertEqual(response.json_body['errors'][0]['message'], 'Internal server error')

    def test_rest_framework_settings_only_configure_the_endpoint(self):
        # Orders apply their FilterSet themselves; no DRF filter backend is involved
        self.assertNotIn('DEFAULT_FILTER_BACKENDS', settings.REST_FRAMEWORK)
        self.assertEqual(settings.REST_FRAMEWORK['EXCEPTION_HANDLER'], 'backend.api.errors.graphql_exception_handler')



class GraphQLThrottleTests(GraphQLTestCase):
    """Requests over the per-IP rate are refused"""

    def test_requests_over_rate_are_throttled(self):
        query = '{ __typename }'
        with mock.patch.object(GraphQLRateThrottle, 'rate', '2/min'):
            for _ in range(2):
                self.assertEqual(self.client.graphql(query).status_code, 200)
            response = self.client.graphql(query)

        self.assertEqual(response.status_code, 429)
        self.assertErrorCode(response, 'TOO_MANY_REQUESTS')
        self.assertIn('Retry-After', response)

    def test_limit_is_per_client_ip(self):
        query = '{ __typename }'
        with mock.patch.object(GraphQLRateThrottle, 'rate', '1/min'):
            self.assertEqual(self.client.graphql(query).status_code, 200)
            self.assertEqual(self.client.graphql(query).status_code, 429)
            other = self.client.graphql(query, REMOTE_ADDR='10.0.0.2')
        self.assertEqual(other.status_code, 200)


class ErrorFormattingTests(GraphQLTestCase):
    """Test error helpers"""

    def test_flatten_validation_errors(self):
        detail = {
            'client_email': ['Please enter a valid email'],
            'non_field_errors': ['Something general'],
        }
        self.assertEqual(flatten_validation_errors(detail), [
            {'field': 'clientEmail', 'message': 'Please enter a valid email'},
            {'field': None, 'message': 'Something general'},
        ])

    def test_validation_error_extension(self):
        error = GraphQLError('x', original_error=ValidationError({'order_no': ['required']}))
        formatted = format_error(error)
        self.assertEqual(formatted['extensions']['code'], 'BAD_USER_INPUT')
        self.assertEqual(formatted['extensions']['fields'], [{'field': 'orderNo', 'message': 'required'}])

    def test_to_camel(self):
        self.assertEqual(to_camel('representative_email'), 'representativeEmail')
        self.assertEqual(to_camel('id'), 'id')


class ExportSchemaCommandTests(GraphQLTestCase):

    def test_prints_sdl(self):
        out = StringIO()
        call_command('export_schema', stdout=out)
        sdl = out.getvalue()
        self.assertIn('type Query', sdl)
        self.assertIn('createCampaignOrder', sdl)
        self.assertIn('campaignDashboard(range: DashboardRange = LAST_30_DAYS)', sdl)
