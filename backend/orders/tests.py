"""
Test suite for Orders module
Tests: ownership scoping, status updates, stats, grouped analytics and their cache
"""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, GraphQLTestCase
from backend.orders import services
from backend.orders.models import Order, OrderStatus

ORDERS = '''
query Orders($status: OrderStatus) {
  orders(status: $status) { id orderNo status amount user { id } createdAt }
}
'''

ORDERS_CREATED_BETWEEN = '''
query Orders($from: String, $to: String) {
  orders(createdFrom: $from, createdTo: $to) { id }
}
'''

CREATE_ORDER = '''
mutation CreateOrder($input: CreateOrderInput!) {
  createOrder(input: $input) { id orderNo status amount user { id email } }
}
'''

UPDATE_STATUS = '''
mutation UpdateStatus($input: UpdateOrderInput!) {
  updateOrderStatus(input: $input) { id status }
}
'''

ORDER_STATS = '{ orderStats { totalOrders totalRevenue } }'

ORDERS_BY_DATE = '''
query ByDate($days: Int) { ordersByDate(days: $days) { date count revenue } }
'''

ORDERS_BY_STATUS = '{ ordersByStatus { status count revenue } }'

ORDERS_BY_USER = '''
query ByUser($limit: Int) { ordersByUser(limit: $limit) { userId userName count revenue } }
'''


class OrderTestCase(GraphQLTestCase):

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin(name='Admin')
        self.alice = TestDataFactory.create_user(name='Alice')
        self.bob = TestDataFactory.create_user(name='Bob')


class OrderQueryTests(OrderTestCase):
    """Test the orders query scoping"""

    def test_regular_user_sees_only_own_orders(self):
        own = TestDataFactory.create_order(self.alice)
        TestDataFactory.create_order(self.bob)

        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDERS)
        self.assertNoErrors(response)
        orders = response.json_body['data']['orders']
        self.assertEqual([o['id'] for o in orders], [str(own.pk)])
        self.assertTrue(all(o['user']['id'] == str(self.alice.pk) for o in orders))

    def test_admin_sees_all_orders_newest_first(self):
        older = TestDataFactory.create_order(self.alice, created_at=timezone.now() - timedelta(days=2))
        newer = TestDataFactory.create_order(self.bob)

        self.client.authenticate_user(self.admin)
        response = self.client.graphql(ORDERS)
        self.assertNoErrors(response)
        ids = [o['id'] for o in response.json_body['data']['orders']]
        self.assertEqual(ids, [str(newer.pk), str(older.pk)])

    def test_status_filter(self):
        TestDataFactory.create_order(self.alice, status=OrderStatus.PENDING)
        shipped = TestDataFactory.create_order(self.alice, status=OrderStatus.SHIPPED)

        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDERS, {'status': 'SHIPPED'})
        self.assertNoErrors(response)
        self.assertEqual([o['id'] for o in response.json_body['data']['orders']], [str(shipped.pk)])

    def test_created_date_window(self):
        now = timezone.now()
        TestDataFactory.create_order(self.alice, created_at=now - timedelta(days=10))
        inside = TestDataFactory.create_order(self.alice, created_at=now - timedelta(days=5))
        TestDataFactory.create_order(self.alice)

        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDERS_CREATED_BETWEEN, {
            'from': (now - timedelta(days=7)).isoformat(),
            'to': (now - timedelta(days=3)).isoformat(),
        })
        self.assertNoErrors(response)
        self.assertEqual([o['id'] for o in response.json_body['data']['orders']], [str(inside.pk)])

    def test_created_from_only(self):
        now = timezone.now()
        TestDataFactory.create_order(self.alice, created_at=now - timedelta(days=10))
        recent = TestDataFactory.create_order(self.alice)

        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDERS_CREATED_BETWEEN, {'from': (now - timedelta(days=1)).isoformat()})
        self.assertNoErrors(response)
        self.assertEqual([o['id'] for o in response.json_body['data']['orders']], [str(recent.pk)])

    def test_malformed_created_date(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDERS_CREATED_BETWEEN, {'from': 'last tuesday'})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        fields = [f['field'] for f in response.json_body['errors'][0]['extensions']['fields']]
        self.assertEqual(fields, ['createdFrom'])


    def test_orders_requires_authentication(self):
        response = self.client.graphql(ORDERS)
        self.assertErrorCode(response, 'UNAUTHENTICATED')


class OrderMutationTests(OrderTestCase):
    """Test createOrder and updateOrderStatus"""

    def test_create_order_owned_by_caller(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(CREATE_ORDER, {'input': {'orderNo': 'ORD-1', 'amount': 49.99}})
        self.assertNoErrors(response)
        created = response.json_body['data']['createOrder']
        self.assertEqual(created['status'], 'PENDING')
        self.assertEqual(created['amount'], 49.99)
        self.assertEqual(created['user']['id'], str(self.alice.pk))

        order = Order.objects.get(order_no='ORD-1')
        self.assertEqual(order.user, self.alice)
        self.assertEqual(order.amount, Decimal('49.99'))
        self.assertTrue(AuditLog.objects.filter(model_name='Order', object_id=str(order.pk), action='create').exists())

    def test_create_order_duplicate_number(self):
        TestDataFactory.create_order(self.bob, order_no='ORD-DUP')
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(CREATE_ORDER, {'input': {'orderNo': 'ORD-DUP', 'amount': 10}})
        self.assertErrorCode(response, 'BAD_USER_INPUT')

    def test_create_order_negative_amount(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(CREATE_ORDER, {'input': {'orderNo': 'ORD-NEG', 'amount': -5}})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        self.assertFalse(Order.objects.filter(order_no='ORD-NEG').exists())

    def test_owner_can_update_status(self):
        order = TestDataFactory.create_order(self.alice)
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(order.pk), 'status': 'CONFIRMED'}})
        self.assertNoErrors(response)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.CONFIRMED)

    def test_non_owner_cannot_update_status(self):
        order = TestDataFactory.create_order(self.alice)
        self.client.authenticate_user(self.bob)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(order.pk), 'status': 'CANCELLED'}})
        self.assertErrorCode(response, 'FORBIDDEN')
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)

    def test_admin_can_update_any_order(self):
        order = TestDataFactory.create_order(self.alice)
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(order.pk), 'status': 'SHIPPED'}})
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['updateOrderStatus']['status'], 'SHIPPED')

    def test_any_transition_allowed(self):
        """Status changes are not constrained by the current status"""
        order = TestDataFactory.create_order(self.alice, status=OrderStatus.CANCELLED)
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': str(order.pk), 'status': 'PENDING'}})
        self.assertNoErrors(response)

    def test_update_missing_order(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(UPDATE_STATUS, {'input': {'id': '999999', 'status': 'SHIPPED'}})
        self.assertErrorCode(response, 'NOT_FOUND')


class OrderStatsTests(OrderTestCase):
    """Test orderStats scoping"""

    def setUp(self):
        super().setUp()
        TestDataFactory.create_order(self.alice, amount=Decimal('100.00'))
        TestDataFactory.create_order(self.alice, amount=Decimal('50.50'))
        TestDataFactory.create_order(self.bob, amount=Decimal('25.00'))

    def test_stats_for_regular_user(self):
        self.client.authenticate_user(self.alice)
        response = self.client.graphql(ORDER_STATS)
        self.assertNoErrors(response)
        self.assertEqual(response.json_body['data']['orderStats'], {'totalOrders': 2, 'totalRevenue': 150.5})

    def test_stats_for_admin(self):
        self.client.authenticate_user(self.admin)
        response = self.client.graphql(ORDER_STATS)
        self.assertEqual(response.json_body['data']['orderStats'], {'totalOrders': 3, 'totalRevenue': 175.5})

    def test_stats_empty(self):
        self.client.authenticate_user(self.admin)
        Order.objects.all().delete()
        response = self.client.graphql(ORDER_STATS)
        self.assertEqual(response.json_body['data']['orderStats'], {'totalOrders': 0, 'totalRevenue': 0.0})


class OrderAnalyticsTests(OrderTestCase):
    """Test ordersByDate, ordersByStatus and ordersByUser"""

    def setUp(self):
        super().setUp()
        self.client.authenticate_user(self.admin)

    def test_analytics_admin_only(self):
        self.client.authenticate_user(self.alice)
        for query in (ORDERS_BY_DATE, ORDERS_BY_STATUS, ORDERS_BY_USER):
            response = self.client.graphql(query)
            self.assertErrorCode(response, 'FORBIDDEN')

    def test_orders_by_date_window(self):
        now = timezone.now()
        TestDataFactory.create_order(self.alice, amount=Decimal('10.00'))
        TestDataFactory.create_order(self.alice, amount=Decimal('20.00'), created_at=now - timedelta(days=3))
        TestDataFactory.create_order(self.bob, amount=Decimal('40.00'), created_at=now - timedelta(days=10))

        response = self.client.graphql(ORDERS_BY_DATE, {'days': 7})
        self.assertNoErrors(response)
        buckets = response.json_body['data']['ordersByDate']
        cutoff = (now - timedelta(days=7)).date().isoformat()
        self.assertEqual(len(buckets), 2)
        self.assertTrue(all(b['date'] >= cutoff for b in buckets))
        self.assertEqual([b['date'] for b in buckets], sorted(b['date'] for b in buckets))
        self.assertEqual(sum(b['revenue'] for b in buckets), 30.0)

    def test_orders_by_date_default_window(self):
        TestDataFactory.create_order(self.alice, created_at=timezone.now() - timedelta(days=20))
        TestDataFactory.create_order(self.alice, created_at=timezone.now() - timedelta(days=45))
        response = self.client.graphql(ORDERS_BY_DATE)
        self.assertEqual(sum(b['count'] for b in response.json_body['data']['ordersByDate']), 1)

    def test_orders_by_date_rejects_non_positive_days(self):
        response = self.client.graphql(ORDERS_BY_DATE, {'days': 0})
        self.assertErrorCode(response, 'BAD_USER_INPUT')

    def test_orders_by_date_rejects_days_beyond_history(self):
        response = self.client.graphql(ORDERS_BY_DATE, {'days': 1000000})
        self.assertErrorCode(response, 'BAD_USER_INPUT')
        self.assertEqual(response.json_body['errors'][0]['extensions']['fields'][0]['field'], 'days')

        response = self.client.graphql(ORDERS_BY_DATE, {'days': services.MAX_DAYS})
        self.assertNoErrors(response)


    def test_orders_by_status_includes_empty_buckets(self):
        TestDataFactory.create_order(self.alice, status=OrderStatus.SHIPPED, amount=Decimal('30.00'))
        TestDataFactory.create_order(self.bob, status=OrderStatus.SHIPPED, amount=Decimal('20.00'))

        response = self.client.graphql(ORDERS_BY_STATUS)
        self.assertNoErrors(response)
        buckets = response.json_body['data']['ordersByStatus']
        self.assertEqual([b['status'] for b in buckets], ['PENDING', 'CONFIRMED', 'SHIPPED', 'CANCELLED'])
        by_status = {b['status']: b for b in buckets}
        self.assertEqual(by_status['SHIPPED']['count'], 2)
        self.assertEqual(by_status['SHIPPED']['revenue'], 50.0)
        self.assertEqual(by_status['PENDING']['count'], 0)
        self.assertEqual(by_status['PENDING']['revenue'], 0.0)

    def test_orders_by_user_sorted_and_limited(self):
        for _ in range(3):
            TestDataFactory.create_order(self.bob)
        TestDataFactory.create_order(self.alice)
        TestDataFactory.create_order(self.admin)

        response = self.client.graphql(ORDERS_BY_USER, {'limit': 2})
        self.assertNoErrors(response)
        rows = response.json_body['data']['ordersByUser']
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0], {'userId': str(self.bob.pk), 'userName': 'Bob', 'count': 3, 'revenue': 300.0})
        # Ties on count break on user id
        self.assertEqual(rows[1]['userId'], str(min(self.alice.pk, self.admin.pk)))

    def test_orders_by_user_rejects_non_positive_limit(self):
        response = self.client.graphql(ORDERS_BY_USER, {'limit': 0})
        self.assertErrorCode(response, 'BAD_USER_INPUT')

    def test_analytics_cache_invalidated_on_write(self):
        TestDataFactory.create_order(self.alice, status=OrderStatus.PENDING)
        first = self.client.graphql(ORDERS_BY_STATUS).json_body['data']['ordersByStatus']
        self.assertEqual(first[0]['count'], 1)

        TestDataFactory.create_order(self.bob, status=OrderStatus.PENDING)
        second = self.client.graphql(ORDERS_BY_STATUS).json_body['data']['ordersByStatus']
        self.assertEqual(second[0]['count'], 2)
