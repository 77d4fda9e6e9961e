"""
Test suite for the catalog module
Tests: product reference CRUD, code normalisation, missing estimate column fallback
"""
from django.test import TestCase
from rest_framework import status

from confeccao.catalog.models import ProductReference
from confeccao.core.models import AuditLog
from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient, products_table_without_yield_column
from confeccao.production.models import ProductionOrder


class ProductReferenceAPITests(TestCase):
    """Test product reference endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        data = {
            'code': ' ref010 ',
            'description': 'Vestido Longo',
            'default_fabric': 'Viscose',
            'default_colors': [{'name': 'Azul', 'hex': '#0000FF'}],
            'default_grid': 'STANDARD',
            'estimated_pieces_per_roll': 20,
        }
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'REF010')
        self.assertEqual(response.data['estimated_pieces_per_roll'], 20)
        self.assertNotIn('warning', response.data)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='ProductReference').exists())

    def test_duplicate_code_rejected(self):
        TestDataFactory.create_product(code='REF011')
        response = self.client.post('/api/v1/products/', {'code': 'ref011', 'description': 'Outro'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('code', response.data)

    def test_invalid_color_hex_rejected(self):
        data = {'code': 'REF012', 'description': 'Saia', 'default_colors': [{'name': 'Azul', 'hex': 'blue'}]}
        response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_search(self):
        TestDataFactory.create_product(code='REF020', description='Blusa Ciganinha')
        TestDataFactory.create_product(code='REF021', description='Saia Midi')
        response = self.client.get('/api/v1/products/?search=ciganinha')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['code'] for p in response.data], ['REF020'])

    def test_update_product(self):
        product = TestDataFactory.create_product(code='REF030')
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'description': 'Macacão'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['description'], 'Macacão')
        self.assertTrue(AuditLog.objects.filter(action='update', object_id=str(product.id)).exists())

    def test_delete_product_keeps_orders(self):
        product = TestDataFactory.create_product(code='REF040')
        order = TestDataFactory.create_order(reference=product)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        order = ProductionOrder.objects.get(pk=order.pk)
        self.assertIsNone(order.reference_id)
        self.assertEqual(order.reference_code, 'REF040')

    def test_product_not_found(self):
        response = self.client.get('/api/v1/products/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_fabric_names(self):
        TestDataFactory.create_product(code='REF050', default_fabric='Viscose')
        TestDataFactory.create_product(code='REF051', default_fabric='Linho')
        TestDataFactory.create_product(code='REF052', default_fabric='Viscose')
        TestDataFactory.create_product(code='REF053', default_fabric='')
        response = self.client.get('/api/v1/products/fabric-names/')
        self.assertEqual(response.data, ['Linho', 'Viscose'])


class MissingEstimateColumnTests(TestCase):
    """Products still save when the database lacks the pieces-per-roll column"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_warns_and_saves(self):
        data = {'code': 'REF060', 'description': 'Vestido', 'estimated_pieces_per_roll': 20}
        with products_table_without_yield_column():
            response = self.client.post('/api/v1/products/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('Estimativa Peças/Rolo', response.data['warning'])
        self.assertIsNone(response.data['estimated_pieces_per_roll'])
        self.assertTrue(ProductReference.objects.filter(code='REF060').exists())

    def test_update_warns_and_saves(self):
        product = TestDataFactory.create_product(code='REF061')
        data = {'description': 'Vestido Curto', 'estimated_pieces_per_roll': 30}
        with products_table_without_yield_column():
            response = self.client.patch(f'/api/v1/products/{product.id}/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('warning', response.data)
        self.assertEqual(ProductReference.objects.get(pk=product.pk).description, 'Vestido Curto')
