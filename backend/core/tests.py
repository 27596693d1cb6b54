"""
Test suite for authentication and user management
Tests: login/logout cookie handling, generic login errors, role guard, me, users, createUser
"""
from io import StringIO

from django.conf import settings
from django.core.management import call_command
from django.core.management.base import CommandError

from backend.core.models import AuditLog, Role, User
from backend.core.permissions import (
    ADMIN_ONLY, AUTHENTICATED, PUBLIC, Principal, check_field_permission, required_roles,
)
from backend.core.test_utils import TestDataFactory, GraphQLTestCase
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

LOGIN = '''
mutation Login($input: LoginInput!) {
  login(input: $input) { id email name role }
}
'''

LOGOUT = 'mutation { logout }'

ME = '{ me { id email role } }'

USERS = '{ users { id email role isActive } }'

CREATE_USER = '''
mutation CreateUser($input: CreateUserInput!) {
  createUser(input: $input) { id name email role isActive }
}
'''


class LoginTests(GraphQLTestCase):
    """Test the login and logout mutations"""

    def setUp(self):
        super().setUp()
        self.user = TestDataFactory.create_user(name='Alice', email='alice@test.com', password='secret-pass-1')

    def login(self, email, password):
        return self.client.graphql(LOGIN, {'input': {'email': email, 'password': password}})

    def test_login_success_sets_cookie(self):
        """Successful login returns the user and sets the auth cookie"""
        response = self.login('alice@test.com', 'secret-pass-1')
        self.assertEqual(response.status_code, 200)
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['login']['email'], 'alice@test.com')
        self.assertEqual(response.json_body['data']['login']['role'], 'USER')

        cookie = response.cookies[settings.AUTH_COOKIE_NAME]
        self.assertTrue(cookie.value)
        self.assertTrue(cookie['httponly'])
        self.assertEqual(cookie['samesite'], 'Strict')
        self.assertEqual(cookie['max-age'], 24 * 60 * 60)

    def test_login_email_is_case_insensitive(self):
        response = self.login('ALICE@test.com', 'secret-pass-1')
        self.assertNoErrors(response)

    def test_login_writes_audit_log(self):
        self.login('alice@test.com', 'secret-pass-1')
        self.assertTrue(AuditLog.objects.filter(action='login', user=self.user).exists())

    def test_wrong_password_generic_error(self):
        response = self.login('alice@test.com', 'wrong-password')
        self.assertErrorCode(response, 'UNAUTHENTICATED')
        self.assertEqual(response.json_body['errors'][0]['message'], 'Invalid credentials')
        self.assertNotIn(settings.AUTH_COOKIE_NAME, response.cookies)

    def test_unknown_email_generic_error(self):
        response = self.login('nobody@test.com', 'secret-pass-1')
        self.assertErrorCode(response, 'UNAUTHENTICATED')
        self.assertEqual(response.json_body['errors'][0]['message'], 'Invalid credentials')

    def test_inactive_user_generic_error(self):
        self.user.is_active = False
        self.user.save()
        response = self.login('alice@test.com', 'secret-pass-1')
        self.assertErrorCode(response, 'UNAUTHENTICATED')
        self.assertEqual(response.json_body['errors'][0]['message'], 'Invalid credentials')

    def test_cookie_authenticates_following_requests(self):
        """The cookie set by login is enough for later requests"""
        self.login('alice@test.com', 'secret-pass-1')
        response = self.client.graphql(ME)
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['me']['id'], str(self.user.pk))

    def test_logout_clears_cookie(self):
        self.login('alice@test.com', 'secret-pass-1')
        response = self.client.graphql(LOGOUT)
        self.assertNoErrors(response)
        self.assertTrue(response.json_body['data']['logout'])
        self.assertEqual(response.cookies[settings.AUTH_COOKIE_NAME].value, '')

        response = self.client.graphql(ME)
        self.assertErrorCode(response, 'UNAUTHENTICATED')

    def test_invalid_token_is_anonymous(self):
        """A garbage cookie does not block public fields"""
        self.client.cookies[settings.AUTH_COOKIE_NAME] = 'not-a-jwt'
        response = self.login('alice@test.com', 'secret-pass-1')
        self.assertNoErrors(response)

    def test_bearer_header_fallback(self):
        from backend.core.authentication import issue_access_token
        response = self.client.graphql(ME, HTTP_AUTHORIZATION=f'Bearer {issue_access_token(self.user)}')
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['me']['email'], 'alice@test.com')


class UserManagementTests(GraphQLTestCase):
    """Test users and createUser"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin(email='admin@test.com')
        self.user = TestDataFactory.create_user(email='user@test.com')

    def test_users_requires_authentication(self):
        response = self.client.graphql(USERS)
        self.assertErrorCode(response, 'UNAUTHENTICATED')

    def test_users_forbidden_for_regular_user(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql(USERS)
        self.assertErrorCode(response, 'FORBIDDEN')

    def test_users_forbidden_for_staff(self):
        staff = TestDataFactory.create_user(role=Role.STAFF)
        self.client.authenticate_user(staff)
        response = self.client.graphql(USERS)
        self.assertErrorCode(response, 'FORBIDDEN')

    def test_users_ordered_by_id(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(USERS)
        self.assertNoErrors(response)
        ids = [int(u['id']) for u in response.json_body['data']['users']]
        self.assertEqual(ids, sorted(ids))
        self.assertEqual(len(ids), 2)

    def test_create_user_defaults_to_user_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_USER, {'input': {
            'name': 'Bob', 'email': 'Bob@Test.com', 'password': 'long-enough-1',
        }})
        self.assertNoErrors(response)
        created = response.json_body['data']['createUser']
        self.assertEqual(created['role'], 'USER')
        self.assertEqual(created['email'], 'bob@test.com')
        self.assertTrue(created['isActive'])

        user = User.objects.get(email='bob@test.com')
        self.assertTrue(user.check_password('long-enough-1'))
        self.assertNotEqual(user.password, 'long-enough-1')

    def test_create_user_with_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_USER, {'input': {
            'name': 'Sam', 'email': 'sam@test.com', 'password': 'long-enough-1', 'role': 'STAFF',
        }})
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['createUser']['role'], 'STAFF')

    def test_create_user_duplicate_email(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_USER, {'input': {
            'name': 'Dup', 'email': 'USER@test.com', 'password': 'long-enough-1',
        }})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = [f['field'] for f in response.json_body['errors'][0]['extensions']['fields']]
        self.assertIn('email', fields)

    def test_create_user_short_password(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(CREATE_USER, {'input': {
            'name': 'Short', 'email': 'short@test.com', 'password': 'short',
        }})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = [f['field'] for f in response.json_body['errors'][0]['extensions']['fields']]
        self.assertIn('password', fields)
        self.assertFalse(User.objects.filter(email='short@test.com').exists())

    def test_create_user_forbidden_for_regular_user(self):
        self.client.authenticate_user(self.user)
        response = self.client.graphql(CREATE_USER, {'input': {
            'name': 'X', 'email': 'x@test.com', 'password': 'long-enough-1',
        }})
        self.assertErrorCode(response, 'FORBIDDEN')
        self.assertFalse(User.objects.filter(email='x@test.com').exists())


class PermissionTableTests(GraphQLTestCase):
    """Test the root field permission table directly"""

    def test_public_fields_allow_anonymous(self):
        check_field_permission(None, 'login')
        check_field_permission(None, '__schema')

    def test_undeclared_field_defaults_to_authenticated(self):
        self.assertEqual(required_roles('somethingNew'), AUTHENTICATED)
        with self.assertRaises(NotAuthenticated):
            check_field_permission(None, 'somethingNew')
        check_field_permission(Principal(user_id=1, role=Role.STAFF), 'somethingNew')

    def test_admin_only_field(self):
        self.assertEqual(required_roles('ordersByDate'), ADMIN_ONLY)
        with self.assertRaises(PermissionDenied):
            check_field_permission(Principal(user_id=1, role=Role.USER), 'ordersByDate')
        check_field_permission(Principal(user_id=1, role=Role.ADMIN), 'ordersByDate')

    def test_logout_is_public(self):
        self.assertEqual(required_roles('logout'), PUBLIC)


class CreateAdminCommandTests(GraphQLTestCase):
    """Test the create_admin management command"""

    def test_creates_admin(self):
        out = StringIO()
        call_command('create_admin', email='Boss@Test.com', name='Boss', password='long-enough-1', stdout=out)
        user = User.objects.get(email='boss@test.com')
        self.assertEqual(user.role, Role.ADMIN)
        self.assertTrue(user.check_password('long-enough-1'))
        self.assertIn('Created ADMIN user', out.getvalue())

    def test_promotes_existing_user(self):
        user = TestDataFactory.create_user(email='staff@test.com', role=Role.STAFF)
        call_command('create_admin', email='staff@test.com', password='long-enough-1', stdout=StringIO())
        user.refresh_from_db()
        self.assertEqual(user.role, Role.ADMIN)
        self.assertEqual(User.objects.filter(email='staff@test.com').count(), 1)

    def test_rejects_short_password(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', email='short@test.com', password='abc', stdout=StringIO())
        self.assertFalse(User.objects.filter(email='short@test.com').exists())
