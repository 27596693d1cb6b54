"""
Test suite for Reports module
Tests: campaign dashboard KPIs, trends, breakdowns, rankings, range filter and caching
"""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone
from rest_framework.exceptions import ValidationError

from backend.campaigns.models import CampaignStatus
from backend.core.test_utils import TestDataFactory, GraphQLTestCase
from backend.reports import services

DASHBOARD = '''
query Dashboard($range: DashboardRange) {
  campaignDashboard(range: $range) {
    range
    kpis {
      totalOrders totalRevenue avgOrderValue completedOrders completionRate
      revenueTrend ordersTrend revenueSparkline ordersSparkline
    }
    statusBreakdown { status count percentage }
    serviceRevenue { name revenue orderCount percentage }
    topClients { companyName totalRevenue orderCount }
    representatives { name totalRevenue orderCount completedOrders percentage completionRate rank }
    dailyTrend { date count revenue }
    recentOrders(limit: 2) { id }
  }
}
'''


class CampaignDashboardTests(GraphQLTestCase):
    """Test the campaignDashboard query"""

    def setUp(self):
        super().setUp()
        self.admin = TestDataFactory.create_admin()
        self.client.authenticate_user(self.admin)

        seo = TestDataFactory.create_service(name='SEO')
        ppc = TestDataFactory.create_service(name='PPC')
        self.seo_package = TestDataFactory.create_package(service=seo)
        self.ppc_package = TestDataFactory.create_package(service=ppc)

        create = TestDataFactory.create_campaign_order
        create(package=self.seo_package, monthly_charges=1000, duration=3, status=CampaignStatus.COMPLETED,
               company_name='Acme', representative_name='Rita')
        create(package=self.ppc_package, monthly_charges=500, duration=2, status=CampaignStatus.CREATED,
               company_name='Acme', representative_name='Rita')
        create(package=self.seo_package, monthly_charges=1000, duration=1, status=CampaignStatus.CANCELLED,
               company_name='Beta', representative_name='Sam')
        self.latest = create(package=self.ppc_package, monthly_charges=2500, duration=1, status=CampaignStatus.COMPLETED,
                             company_name='Gamma', representative_name='Sam')
        # Falls in the 30 days before the default range
        create(package=self.seo_package, monthly_charges=1000, duration=1, status=CampaignStatus.COMPLETED,
               company_name='Delta', representative_name='Rita', created_at=timezone.now() - timedelta(days=45))

    def dashboard(self, date_range=None):
        variables = {'range': date_range} if date_range else None
        response = self.client.graphql(DASHBOARD, variables)
        self.assertNoErrors(response)
        return response.json_body['data']['campaignDashboard']

    def test_admin_only(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.graphql(DASHBOARD)
        self.assertErrorCode(response, 'FORBIDDEN')

    def test_kpis_default_range(self):
        data = self.dashboard()
        self.assertEqual(data['range'], 'LAST_30_DAYS')
        kpis = data['kpis']
        self.assertEqual(kpis['totalOrders'], 4)
        self.assertEqual(kpis['totalRevenue'], 7500.0)
        self.assertEqual(kpis['avgOrderValue'], 1875.0)
        self.assertEqual(kpis['completedOrders'], 2)
        self.assertEqual(kpis['completionRate'], 50.0)
        self.assertEqual(kpis['revenueTrend'], 650.0)
        self.assertEqual(kpis['ordersTrend'], 300.0)

    def test_sparklines_cover_last_seven_days(self):
        kpis = self.dashboard()['kpis']
        self.assertEqual(len(kpis['revenueSparkline']), 7)
        self.assertEqual(kpis['ordersSparkline'], [0, 0, 0, 0, 0, 0, 4])
        self.assertEqual(kpis['revenueSparkline'][-1], 7500.0)

    def test_trend_zero_without_previous_period(self):
        kpis = self.dashboard('LAST_7_DAYS')['kpis']
        self.assertEqual(kpis['totalOrders'], 4)
        self.assertEqual(kpis['revenueTrend'], 0.0)
        self.assertEqual(kpis['ordersTrend'], 0.0)

    def test_all_range_includes_everything_without_trend(self):
        data = self.dashboard('ALL_TIME')
        self.assertEqual(data['kpis']['totalOrders'], 5)
        self.assertEqual(data['kpis']['revenueTrend'], 0.0)
        self.assertEqual(len(data['dailyTrend']), services.ALL_RANGE_CHART_DAYS + 1)

    def test_status_breakdown(self):
        breakdown = self.dashboard()['statusBreakdown']
        self.assertEqual(breakdown, [
            {'status': 'CREATED', 'count': 1, 'percentage': 25.0},
            {'status': 'COMPLETED', 'count': 2, 'percentage': 50.0},
            {'status': 'CANCELLED', 'count': 1, 'percentage': 25.0},
        ])

    def test_service_revenue_excludes_cancelled(self):
        rows = self.dashboard()['serviceRevenue']
        self.assertEqual([r['name'] for r in rows], ['PPC', 'SEO'])
        self.assertEqual(rows[0]['revenue'], 3500.0)
        self.assertEqual(rows[0]['percentage'], 100.0)
        self.assertEqual(rows[1]['revenue'], 3000.0)
        self.assertEqual(rows[1]['orderCount'], 1)
        self.assertAlmostEqual(rows[1]['percentage'], 3000 / 3500 * 100)

    def test_top_clients_excludes_cancelled(self):
        clients = self.dashboard()['topClients']
        self.assertEqual(clients, [
            {'companyName': 'Acme', 'totalRevenue': 4000.0, 'orderCount': 2},
            {'companyName': 'Gamma', 'totalRevenue': 2500.0, 'orderCount': 1},
        ])

    def test_top_clients_limited_to_five(self):
        for i in range(6):
            TestDataFactory.create_campaign_order(package=self.seo_package, company_name=f'Client {i}')
        self.assertEqual(len(self.dashboard()['topClients']), 5)

    def test_representatives_ranked(self):
        reps = self.dashboard()['representatives']
        self.assertEqual([(r['name'], r['rank']) for r in reps], [('Rita', 1), ('Sam', 2)])
        self.assertEqual(reps[0]['totalRevenue'], 4000.0)
        self.assertEqual(reps[0]['percentage'], 100.0)
        self.assertEqual(reps[1]['totalRevenue'], 3500.0)
        self.assertEqual(reps[1]['percentage'], 87.5)
        self.assertEqual(reps[1]['completedOrders'], 1)
        self.assertEqual(reps[1]['completionRate'], 50.0)

    def test_daily_trend_zero_filled(self):
        trend = self.dashboard('LAST_7_DAYS')['dailyTrend']
        self.assertEqual(len(trend), 8)
        self.assertEqual(trend[-1]['date'], timezone.now().date().isoformat())
        self.assertEqual(trend[-1]['count'], 4)
        self.assertEqual(sum(day['count'] for day in trend[:-1]), 0)

    def test_recent_orders(self):
        recent = self.dashboard()['recentOrders']
        self.assertEqual(len(recent), 2)
        self.assertEqual(recent[0]['id'], str(self.latest.pk))

    def test_cache_invalidated_by_new_order(self):
        self.assertEqual(self.dashboard()['kpis']['totalOrders'], 4)
        TestDataFactory.create_campaign_order(package=self.seo_package, monthly_charges=Decimal('100.00'), duration=1)
        self.assertEqual(self.dashboard()['kpis']['totalOrders'], 5)

    def test_empty_dashboard(self):
        from backend.campaigns.models import CampaignOrder
        CampaignOrder.objects.all().delete()
        data = self.dashboard()
        self.assertEqual(data['kpis']['totalOrders'], 0)
        self.assertEqual(data['kpis']['avgOrderValue'], 0.0)
        self.assertEqual(data['kpis']['completionRate'], 0.0)
        self.assertEqual(data['statusBreakdown'], [])
        self.assertEqual(data['serviceRevenue'], [])
        self.assertEqual(data['representatives'], [])


class RangeTests(GraphQLTestCase):
    """Test range parsing"""

    def test_known_ranges(self):
        self.assertEqual(services.range_days('7d'), 7)
        self.assertEqual(services.range_days('90d'), 90)
        self.assertIsNone(services.range_days('all'))
        self.assertEqual(services.range_days(None), 30)

    def test_unknown_range(self):
        with self.assertRaises(ValidationError):
            services.range_days('1y')
