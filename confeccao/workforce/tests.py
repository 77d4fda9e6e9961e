"""
Test suite for the workforce module
Tests: seamstress registration, editing, deactivation
"""
from django.test import TestCase
from rest_framework import status

from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from confeccao.workforce.models import Seamstress


class SeamstressAPITests(TestCase):
    """Test seamstress endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_seamstress(self):
        data = {'name': ' Ana ', 'phone': '11988887777', 'specialty': 'Vestidos', 'city': 'Pinhalzinho'}
        response = self.client.post('/api/v1/seamstresses/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Ana')
        self.assertTrue(response.data['active'])

    def test_blank_name_rejected(self):
        response = self.client.post('/api/v1/seamstresses/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_active_filter(self):
        TestDataFactory.create_seamstress(name='Ana')
        TestDataFactory.create_seamstress(name='Bia', active=False)
        response = self.client.get('/api/v1/seamstresses/?active=true')
        self.assertEqual([s['name'] for s in response.data], ['Ana'])
        response = self.client.get('/api/v1/seamstresses/')
        self.assertEqual(len(response.data), 2)

    def test_deactivate(self):
        seamstress = TestDataFactory.create_seamstress(name='Carla')
        response = self.client.patch(f'/api/v1/seamstresses/{seamstress.id}/', {'active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Seamstress.objects.get(pk=seamstress.pk).active)

    def test_delete_not_allowed(self):
        seamstress = TestDataFactory.create_seamstress()
        response = self.client.delete(f'/api/v1/seamstresses/{seamstress.id}/')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
        self.assertTrue(Seamstress.objects.filter(pk=seamstress.pk).exists())
