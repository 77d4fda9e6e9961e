"""
Test suite for the inventory module
Tests: fabric CRUD and filters, manual stock entries, cut deduction arithmetic
"""
from decimal import Decimal
from types import SimpleNamespace

from django.test import TestCase, SimpleTestCase
from rest_framework import status

from confeccao.core.models import AuditLog
from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from confeccao.inventory import ledger
from confeccao.inventory.models import Fabric


def fabric(pk, name, color, stock):
    return SimpleNamespace(pk=pk, name=name, color=color, stock_rolls=Decimal(stock))


class LedgerArithmeticTests(SimpleTestCase):
    """Test stock parsing and arithmetic without the database"""

    def test_parse_roll_amount(self):
        self.assertEqual(ledger.parse_roll_amount('2,5'), Decimal('2.5'))
        self.assertEqual(ledger.parse_roll_amount('3'), Decimal('3'))
        self.assertEqual(ledger.parse_roll_amount(1.25), Decimal('1.25'))

    def test_parse_roll_amount_rejects(self):
        for raw in ('0', '-1', 'abc', '', None, 'nan', 'inf'):
            with self.assertRaises(ledger.StockInputError, msg=raw):
                ledger.parse_roll_amount(raw)

    def test_stock_after_entry_rounds(self):
        self.assertEqual(ledger.stock_after_entry(Decimal('15.00'), Decimal('2.555')), Decimal('17.56'))

    def test_stock_after_cut_clamps_at_zero(self):
        self.assertEqual(ledger.stock_after_cut(Decimal('15'), 2), Decimal('13.00'))
        self.assertEqual(ledger.stock_after_cut(Decimal('1.5'), 2), Decimal('0.00'))

    def test_find_fabric_case_insensitive(self):
        fabrics = [fabric(1, 'Viscose', 'Azul', '15'), fabric(2, 'Linho', 'Azul', '3')]
        self.assertEqual(ledger.find_fabric(fabrics, 'VISCOSE', 'azul').pk, 1)
        self.assertIsNone(ledger.find_fabric(fabrics, 'Viscose', 'Azul Bebê'))
        self.assertIsNone(ledger.find_fabric(fabrics, 'Viscose ', 'Azul'))

    def test_plan_cut_deductions(self):
        fabrics = [fabric(1, 'Viscose', 'Azul', '15'), fabric(2, 'Viscose', 'Preto', '1')]
        items = [
            {'color': 'Azul', 'rolls_used': 2},
            {'color': 'Preto', 'rolls_used': 2},
            {'color': 'Verde', 'rolls_used': 1},
        ]
        plan = ledger.plan_cut_deductions('viscose', items, fabrics)
        self.assertEqual(plan.unmatched_colors, ['Verde'])
        azul, preto = plan.deductions
        self.assertEqual((azul.stock_before, azul.stock_after), (Decimal('15.00'), Decimal('13.00')))
        self.assertFalse(azul.clamped)
        self.assertEqual(preto.stock_after, Decimal('0.00'))
        self.assertTrue(preto.clamped)

    def test_plan_cut_deductions_same_color_twice(self):
        fabrics = [fabric(1, 'Viscose', 'Azul', '5')]
        items = [{'color': 'Azul', 'rolls_used': 2}, {'color': 'azul', 'rolls_used': '1.5'}]
        plan = ledger.plan_cut_deductions('Viscose', items, fabrics)
        self.assertEqual([d.stock_after for d in plan.deductions], [Decimal('3.00'), Decimal('1.50')])


class FabricAPITests(TestCase):
    """Test fabric endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_fabric(self):
        data = {'name': 'Viscose', 'color': 'Azul', 'color_hex': '#0000FF', 'stock_rolls': '15.00', 'notes': 'V-102'}
        response = self.client.post('/api/v1/fabrics/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['stock_rolls']), Decimal('15.00'))

    def test_duplicate_fabric_rejected(self):
        TestDataFactory.create_fabric(name='Viscose', color='Azul')
        data = {'name': 'viscose', 'color': 'AZUL', 'color_hex': '#0000FF', 'stock_rolls': '1'}
        response = self.client.post('/api/v1/fabrics/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_stock_rejected(self):
        data = {'name': 'Linho', 'color': 'Cru', 'color_hex': '#EEEEEE', 'stock_rolls': '-1'}
        response = self.client.post('/api/v1/fabrics/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_fabric(name='Viscose', color='Azul', stock_rolls='15')
        TestDataFactory.create_fabric(name='Viscose', color='Preto', stock_rolls='2')
        TestDataFactory.create_fabric(name='Linho', color='Azul Marinho', stock_rolls='8')

        response = self.client.get('/api/v1/fabrics/?name=visc')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/fabrics/?color=azul')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/fabrics/?min_stock=5')
        self.assertEqual(sorted(f['color'] for f in response.data), ['Azul', 'Azul Marinho'])

    def test_edit_fabric(self):
        record = TestDataFactory.create_fabric()
        response = self.client.patch(f'/api/v1/fabrics/{record.id}/', {'notes': 'Cód 55'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Fabric.objects.get(pk=record.pk).notes, 'Cód 55')

    def test_add_stock_with_comma(self):
        record = TestDataFactory.create_fabric(stock_rolls='15.00')
        response = self.client.post(f'/api/v1/fabrics/{record.id}/add-stock/', {'amount': '2,5'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.stock_rolls, Decimal('17.50'))
        self.assertIn('17.50', response.data['message'])
        self.assertTrue(AuditLog.objects.filter(action='stock_add', object_id=str(record.id)).exists())

    def test_add_stock_rejects_invalid_amount(self):
        record = TestDataFactory.create_fabric(stock_rolls='15.00')
        for amount in ('0', '-3', 'dois'):
            response = self.client.post(f'/api/v1/fabrics/{record.id}/add-stock/', {'amount': amount}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        record.refresh_from_db()
        self.assertEqual(record.stock_rolls, Decimal('15.00'))
        self.assertFalse(AuditLog.objects.filter(action='stock_add').exists())

    def test_add_stock_unknown_fabric(self):
        response = self.client.post('/api/v1/fabrics/9999/add-stock/', {'amount': '1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_not_exposed(self):
        record = TestDataFactory.create_fabric()
        response = self.client.delete(f'/api/v1/fabrics/{record.id}/')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
