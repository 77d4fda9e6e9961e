"""
Test suite for the reports module
Tests: dashboard metrics, report filters and totals, split deadlines,
AI insights adapter, printable documents
"""
from datetime import timedelta
from unittest.mock import patch, MagicMock

import requests
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status

from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from confeccao.production import lifecycle, services
from confeccao.production.models import ProductionOrder
from confeccao.reports import aggregates, insights


def sewn_order(seamstress, order_id, finish=True, now=None, fabric='Viscose'):
    """Order cut at 40 pieces with P and M (20 pieces) sent to ``seamstress``"""
    order = TestDataFactory.create_order(order_id=order_id, fabric=fabric, created_at=now)
    order = services.move_to_cutting(order, now=now).order
    order = services.confirm_cut(order, now=now)
    order, split = services.distribute(order, seamstress, lifecycle.BY_SIZE, sizes=['P', 'M'], now=now)
    if finish:
        order = services.finish_split(order, split['id'], now=now)
    return order


class SplitDeadlineTests(SimpleTestCase):
    """Test the 15 day split deadline"""

    def test_late_split(self):
        now = timezone.now()
        split = {'status': lifecycle.SEWING, 'created_at': (now - timedelta(days=16)).isoformat()}
        self.assertTrue(aggregates.is_split_late(split, now))
        self.assertEqual(aggregates.split_deadline(split), now - timedelta(days=1))

    def test_split_within_deadline(self):
        now = timezone.now()
        split = {'status': lifecycle.SEWING, 'created_at': (now - timedelta(days=14)).isoformat()}
        self.assertFalse(aggregates.is_split_late(split, now))

    def test_finished_split_is_never_late(self):
        now = timezone.now()
        split = {'status': lifecycle.FINISHED, 'created_at': (now - timedelta(days=40)).isoformat()}
        self.assertFalse(aggregates.is_split_late(split, now))

    @override_settings(SPLIT_DEADLINE_DAYS=5)
    def test_configurable_deadline(self):
        now = timezone.now()
        split = {'status': lifecycle.SEWING, 'created_at': (now - timedelta(days=6)).isoformat()}
        self.assertTrue(aggregates.is_split_late(split, now))


class DashboardTests(TestCase):
    """Test dashboard aggregation"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.ana = TestDataFactory.create_seamstress(name='Ana')
        self.bia = TestDataFactory.create_seamstress(name='Bia')
        self.carla = TestDataFactory.create_seamstress(name='Carla')
        self.dora = TestDataFactory.create_seamstress(name='Dora', active=False)
        sewn_order(self.ana, '1')
        sewn_order(self.bia, '2', finish=False)
        TestDataFactory.create_order(order_id='3')

    def test_dashboard_endpoint(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data
        self.assertEqual(data['total_orders'], 3)
        self.assertEqual(data['status_counts'], {'PLANNED': 1, 'CUTTING': 0, 'SEWING': 2, 'FINISHED': 0})
        self.assertEqual(data['sewing_packets'], 1)
        self.assertEqual(data['active_seamstresses'], 1)
        self.assertEqual(data['total_pieces_produced'], 20)
        self.assertEqual(data['month_pieces_produced'], 20)

    def test_ranking_and_idle(self):
        data = aggregates.dashboard(ProductionOrder.objects.all(), [self.ana, self.bia, self.carla, self.dora])
        ranking = data['seamstress_ranking']
        self.assertEqual(ranking[0]['name'], 'Ana')
        self.assertEqual(ranking[0]['produced'], 20)
        bia = next(entry for entry in ranking if entry['name'] == 'Bia')
        self.assertEqual(bia['active_packets'], 1)
        self.assertFalse(bia['is_idle'])
        self.assertEqual(sorted(e['name'] for e in data['idle_seamstresses']), ['Ana', 'Carla'])
        self.assertEqual([e['name'] for e in data['busy_seamstresses']], ['Bia'])

    def test_series(self):
        data = aggregates.dashboard(ProductionOrder.objects.all(), [self.ana])
        self.assertEqual(len(data['weekly']), 7)
        self.assertEqual(len(data['monthly']), 6)
        self.assertEqual(data['weekly'][-1]['pieces'], 20)
        self.assertEqual(data['weekly'][-1]['date'], timezone.localdate().isoformat())
        self.assertEqual(data['monthly'][-1]['pieces'], 20)

    def test_month_total_within_all_time_total(self):
        sewn_order(self.carla, '4', now=timezone.now() - timedelta(days=62))
        data = aggregates.dashboard(ProductionOrder.objects.all(), [self.ana, self.carla])
        self.assertEqual(data['total_pieces_produced'], 40)
        self.assertEqual(data['month_pieces_produced'], 20)
        self.assertLessEqual(data['month_pieces_produced'], data['total_pieces_produced'])
        self.assertEqual(sum(entry['pieces'] for entry in data['monthly']), 40)


class OrdersReportTests(TestCase):
    """Test report filters and totals"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.ana = TestDataFactory.create_seamstress(name='Ana')
        self.bia = TestDataFactory.create_seamstress(name='Bia')
        sewn_order(self.ana, '1')
        sewn_order(self.bia, '2', finish=False, fabric='Linho')
        TestDataFactory.create_order(order_id='3', created_at=timezone.now() - timedelta(days=30))

    def test_totals(self):
        response = self.client.get('/api/v1/reports/orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_orders'], 3)
        self.assertEqual(response.data['total_cut'], 80)
        self.assertEqual(response.data['total_sewn'], 20)
        self.assertEqual(float(response.data['total_rolls']), 6.0)
        self.assertEqual(len(response.data['orders']), 3)

    def test_filters(self):
        response = self.client.get(f'/api/v1/reports/orders/?seamstress={self.bia.id}')
        self.assertEqual([o['id'] for o in response.data['orders']], ['2'])
        response = self.client.get('/api/v1/reports/orders/?fabric=Linho')
        self.assertEqual(response.data['total_orders'], 1)
        response = self.client.get('/api/v1/reports/orders/?status=PLANNED')
        self.assertEqual([o['id'] for o in response.data['orders']], ['3'])
        response = self.client.get('/api/v1/reports/orders/?reference=vestido')
        self.assertEqual(response.data['total_orders'], 3)

    def test_date_range_is_inclusive(self):
        today = timezone.localdate().isoformat()
        response = self.client.get(f'/api/v1/reports/orders/?date_from={today}&date_to={today}')
        self.assertEqual(sorted(o['id'] for o in response.data['orders']), ['1', '2'])

    def test_same_filters_same_result(self):
        url = f'/api/v1/reports/orders/?reference=ref&seamstress={self.ana.id}'
        first = self.client.get(url).data
        second = self.client.get(url).data
        for key in ('total_orders', 'total_cut', 'total_sewn', 'total_rolls'):
            self.assertEqual(first[key], second[key])
        self.assertEqual([o['id'] for o in first['orders']], [o['id'] for o in second['orders']])

    def test_invalid_filters(self):
        response = self.client.get('/api/v1/reports/orders/?date_from=18/10/2026')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/reports/orders/?status=DONE')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class InsightsTests(TestCase):
    """Test the AI summary adapter"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.ana = TestDataFactory.create_seamstress(name='Ana', specialty='Vestidos')
        sewn_order(self.ana, '1', finish=False)

    def test_snapshot(self):
        snapshot = insights.build_snapshot(ProductionOrder.objects.all(), [self.ana])
        order = snapshot['orders'][0]
        self.assertEqual(order['ref'], 'REF001')
        self.assertEqual(order['status'], 'SEWING')
        self.assertEqual(order['total_items'], 1)
        self.assertEqual(order['cutting_stock'], 20)
        self.assertEqual(order['distributions'], [{'seamstress': 'Ana', 'status': 'SEWING', 'pieces': 20}])
        self.assertEqual(snapshot['seamstresses'], [{'name': 'Ana', 'specialty': 'Vestidos'}])

    @override_settings(GEMINI_API_KEY='')
    def test_unavailable_without_key(self):
        with patch('confeccao.reports.insights.requests.post') as post:
            response = self.client.post('/api/v1/reports/insights/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['available'])
        self.assertEqual(response.data['text'], insights.UNAVAILABLE_TEXT)
        post.assert_not_called()

    @override_settings(GEMINI_API_KEY='test-key', GEMINI_MODEL='gemini-2.5-flash')
    def test_generated_report(self):
        provider_response = MagicMock()
        provider_response.json.return_value = {
            'candidates': [{'content': {'parts': [{'text': '**Gargalo:** corte parado.'}]}}]
        }
        with patch('confeccao.reports.insights.requests.post', return_value=provider_response) as post:
            response = self.client.post('/api/v1/reports/insights/')
        self.assertTrue(response.data['available'])
        self.assertEqual(response.data['text'], '**Gargalo:** corte parado.')
        args, kwargs = post.call_args
        self.assertTrue(args[0].endswith('/gemini-2.5-flash:generateContent'))
        self.assertEqual(kwargs['params'], {'key': 'test-key'})
        prompt = kwargs['json']['contents'][0]['parts'][0]['text']
        self.assertIn("Kavin's", prompt)
        self.assertIn('"ref": "REF001"', prompt)

    @override_settings(GEMINI_API_KEY='test-key')
    def test_provider_failure(self):
        with patch('confeccao.reports.insights.requests.post', side_effect=requests.exceptions.ConnectionError('down')):
            response = self.client.post('/api/v1/reports/insights/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['available'])
        self.assertEqual(response.data['text'], insights.FAILURE_TEXT)

    @override_settings(GEMINI_API_KEY='test-key')
    def test_empty_provider_answer(self):
        provider_response = MagicMock()
        provider_response.json.return_value = {'candidates': []}
        with patch('confeccao.reports.insights.requests.post', return_value=provider_response):
            summary = insights.summarize({'orders': [], 'seamstresses': []})
        self.assertTrue(summary.available)
        self.assertEqual(summary.text, insights.EMPTY_TEXT)


class PrintTests(TestCase):
    """Test printable documents"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_no_planned_orders(self):
        response = self.client.get('/api/v1/reports/print/planned-orders/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_planned_orders_sheet(self):
        TestDataFactory.create_fabric(name='Viscose', color='azul', notes='V-102')
        TestDataFactory.create_order(order_id='10')
        TestDataFactory.create_order(order_id='2', lines=[{'color': 'Verde', 'rolls_used': 3, 'pieces_per_size': 5}])
        TestDataFactory.create_order(order_id='11', status=lifecycle.CUTTING)
        response = self.client.get('/api/v1/reports/print/planned-orders/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/html; charset=utf-8')
        html = response.content.decode()
        self.assertLess(html.index('#2<'), html.index('#10<'))
        self.assertNotIn('#11<', html)
        self.assertIn('Cód: V-102', html)
        self.assertIn('Cód: -', html)
        self.assertIn('P, M, G, GG', html)

    def test_fabric_stock_report(self):
        TestDataFactory.create_fabric(name='Viscose', color='Azul', color_hex='#0000FF', stock_rolls='13')
        TestDataFactory.create_fabric(name='Linho', color='Cru', color_hex='#EEEEEE', stock_rolls='2')
        response = self.client.get('/api/v1/reports/print/fabric-stock/?name=visc')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        html = response.content.decode()
        self.assertIn('Viscose', html)
        self.assertIn('background-color: #0000FF', html)
        self.assertNotIn('Linho', html)
