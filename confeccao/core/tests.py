"""
Test suite for the core module
Tests: table store writes and the missing-column fallback, audit logs, authentication
"""
from unittest.mock import patch

from django.db import OperationalError, ProgrammingError
from django.db.models.query import QuerySet
from django.test import TestCase, SimpleTestCase
from rest_framework import status

from confeccao.catalog.models import ProductReference
from confeccao.core.models import AuditLog
from confeccao.core.store import TableStore, WriteResult, is_undefined_column_error
from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient, products_table_without_yield_column
from confeccao.core.utils import create_audit_log
from confeccao.workforce.models import Seamstress


class UndefinedColumnError(Exception):
    pgcode = '42703'


class UndefinedColumnDetectionTests(SimpleTestCase):
    """Test recognition of missing-column database errors"""

    def test_sqlite_messages(self):
        self.assertTrue(is_undefined_column_error(OperationalError('no such column: estimated_pieces_per_roll')))
        self.assertTrue(is_undefined_column_error(OperationalError('table products has no column named estimated_pieces_per_roll')))

    def test_postgres_message(self):
        self.assertTrue(is_undefined_column_error(ProgrammingError('column "estimated_pieces_per_roll" of relation "products" does not exist')))

    def test_sqlstate_code(self):
        error = ProgrammingError('undefined column')
        error.__cause__ = UndefinedColumnError('undefined column')
        self.assertTrue(is_undefined_column_error(error))

    def test_other_errors(self):
        self.assertFalse(is_undefined_column_error(OperationalError('database is locked')))
        self.assertFalse(is_undefined_column_error(ProgrammingError('relation "orders" does not exist')))


class TableStoreTests(TestCase):
    """Test TableStore CRUD pass-through"""

    def setUp(self):
        self.store = TableStore(ProductReference)

    def test_optional_columns_from_model(self):
        self.assertEqual(self.store.optional_columns, ('estimated_pieces_per_roll',))
        self.assertEqual(TableStore(Seamstress).optional_columns, ())
        self.assertEqual(self.store.table, 'products')

    def test_insert_update_delete(self):
        result = self.store.insert({'code': 'REF100', 'description': 'Blusa', 'estimated_pieces_per_roll': 12})
        self.assertIsInstance(result, WriteResult)
        self.assertEqual(result.dropped_fields, [])
        product = result.record

        updated = self.store.update(product.pk, {'description': 'Blusa Manga Longa'})
        self.assertEqual(updated.record.description, 'Blusa Manga Longa')
        self.assertEqual(updated.record.estimated_pieces_per_roll, 12)

        self.store.delete(product.pk)
        self.assertFalse(self.store.exists(product.pk))

    def test_update_missing_row(self):
        with self.assertRaises(ProductReference.DoesNotExist):
            self.store.update(9999, {'description': 'x'})

    def test_delete_missing_row(self):
        with self.assertRaises(ProductReference.DoesNotExist):
            self.store.delete(9999)

    def test_select_all_ordering_and_filters(self):
        self.store.insert({'code': 'B2', 'description': 'Saia', 'default_grid': 'PLUS'})
        self.store.insert({'code': 'A1', 'description': 'Blusa'})
        codes = [p.code for p in self.store.select_all(ordering=['code'])]
        self.assertEqual(codes, ['A1', 'B2'])
        plus = self.store.select_all(default_grid='PLUS')
        self.assertEqual([p.code for p in plus], ['B2'])

    def test_insert_retries_without_missing_optional_column(self):
        with products_table_without_yield_column():
            result = self.store.insert({'code': 'REF200', 'description': 'Vestido', 'estimated_pieces_per_roll': 20})
        self.assertEqual(result.dropped_fields, ['estimated_pieces_per_roll'])
        self.assertEqual(result.record.code, 'REF200')
        self.assertIsNone(result.record.estimated_pieces_per_roll)
        self.assertTrue(ProductReference.objects.filter(code='REF200').exists())

    def test_update_retries_without_missing_optional_column(self):
        product = self.store.insert({'code': 'REF300', 'description': 'Vestido'}).record
        with products_table_without_yield_column():
            result = self.store.update(product.pk, {'description': 'Vestido Midi', 'estimated_pieces_per_roll': 25})
        self.assertEqual(result.dropped_fields, ['estimated_pieces_per_roll'])
        self.assertEqual(ProductReference.objects.get(pk=product.pk).description, 'Vestido Midi')
        self.assertIsNone(ProductReference.objects.get(pk=product.pk).estimated_pieces_per_roll)

    def test_required_column_error_is_not_retried(self):
        with patch.object(QuerySet, 'create', side_effect=OperationalError('no such column: name')):
            with self.assertRaises(OperationalError):
                TableStore(Seamstress).insert({'name': 'Ana'})

    def test_error_for_existing_optional_column_is_not_retried(self):
        # the message does not name the optional column and the live table still has it
        with patch.object(QuerySet, 'create', side_effect=OperationalError('no such column: legacy_code')):
            with self.assertRaises(OperationalError):
                self.store.insert({'code': 'REF400', 'description': 'Calça'})

    def test_live_columns(self):
        self.assertIn('estimated_pieces_per_roll', self.store.live_columns())


class AuditLogTests(TestCase):
    """Test audit logging helper and endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_audit_log_with_user(self):
        log = create_audit_log(user=self.user, action='stock_add', model_name='Fabric', object_id=1,
                               object_name='Viscose - Azul', changes={'amount': '2'})
        self.assertIsNotNone(log)
        self.assertEqual(log.object_id, '1')
        self.assertEqual(log.user, self.user)

    def test_create_audit_log_missing_fields(self):
        self.assertIsNone(create_audit_log(user=self.user, action='create'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_audit_log_list_filters(self):
        create_audit_log(user=self.user, action='create', model_name='Seamstress', object_id='1')
        create_audit_log(user=self.user, action='order_distribute', model_name='ProductionOrder',
                         object_id='7', object_reference='#7')
        response = self.client.get('/api/v1/audit-logs/?action=order_distribute')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['object_reference'], '#7')

    def test_audit_log_order_history(self):
        create_audit_log(user=self.user, action='order_cutting', model_name='ProductionOrder',
                         object_id='7', object_reference='#7')
        create_audit_log(user=self.user, action='stock_cut', model_name='Fabric',
                         object_id='3', object_reference='#7')
        create_audit_log(user=self.user, action='order_cutting', model_name='ProductionOrder',
                         object_id='8', object_reference='#8')
        response = self.client.get('/api/v1/audit-logs/', {'reference': '#7'})
        self.assertEqual(sorted(entry['action'] for entry in response.data), ['order_cutting', 'stock_cut'])
        self.assertEqual(response.data[0]['username'], self.user.username)

    def test_audit_log_invalid_date(self):
        response = self.client.get('/api/v1/audit-logs/?date_from=ontem')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_staff_sees_own_entries(self):
        operator = TestDataFactory.create_user()
        create_audit_log(user=self.user, action='create', model_name='Fabric', object_id='1')
        create_audit_log(user=operator, action='create', model_name='Fabric', object_id='2')
        client = AuthenticatedAPIClient().authenticate_user(operator)
        response = client.get('/api/v1/audit-logs/')
        self.assertEqual([entry['object_id'] for entry in response.data], ['2'])

    def test_audit_log_detail_hidden_from_other_users(self):
        other = TestDataFactory.create_user()
        log = create_audit_log(user=other, action='create', model_name='Fabric', object_id='3')
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get(f'/api/v1/audit-logs/{log.pk}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuthenticationTests(TestCase):
    """Test JWT login and the current user endpoint"""

    def test_login_and_me(self):
        TestDataFactory.create_user(username='gerente', password='segredo123')
        client = AuthenticatedAPIClient()
        response = client.post('/api/v1/auth/login/', {'username': 'gerente', 'password': 'segredo123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = client.get('/api/v1/auth/me/')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['username'], 'gerente')

    def test_requires_authentication(self):
        response = AuthenticatedAPIClient().get('/api/v1/orders/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_own_profile(self):
        user = TestDataFactory.create_user(username='cortador')
        client = AuthenticatedAPIClient().authenticate_user(user)
        response = client.patch('/api/v1/auth/me/', {'first_name': 'Rita', 'phone': '11988887777', 'is_staff': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['display_name'], 'Rita')
        user.refresh_from_db()
        self.assertEqual(user.phone, '11988887777')
        self.assertFalse(user.is_staff)
