"""
Test utilities and factories for creating test data
"""
from contextlib import contextmanager
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import OperationalError
from django.db.models.query import QuerySet
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from confeccao.catalog.models import ProductReference
from confeccao.inventory.models import Fabric
from confeccao.production import lifecycle
from confeccao.production.models import ProductionOrder
from confeccao.workforce.models import Seamstress
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_product(code=None, description=None, default_fabric='Viscose', colors=None,
                       default_grid='STANDARD', estimated_pieces_per_roll=None):
        """Create a test product reference"""
        if not code:
            code = f'REF{TestDataFactory.random_string(4).upper()}'
        return ProductReference.objects.create(
            code=code,
            description=description or f'Vestido {code}',
            default_fabric=default_fabric,
            default_colors=colors if colors is not None else [{'name': 'Azul', 'hex': '#0000FF'}],
            default_grid=default_grid,
            estimated_pieces_per_roll=estimated_pieces_per_roll
        )

    @staticmethod
    def create_seamstress(name=None, active=True, specialty='Vestidos'):
        """Create a test seamstress"""
        if not name:
            name = f'Costureira {TestDataFactory.random_string(4)}'
        return Seamstress.objects.create(
            name=name,
            phone='11999990000',
            specialty=specialty,
            active=active
        )

    @staticmethod
    def create_fabric(name='Viscose', color='Azul', stock_rolls='15.00', color_hex='#0000FF', notes=''):
        """Create a test fabric stock record"""
        return Fabric.objects.create(
            name=name,
            color=color,
            color_hex=color_hex,
            stock_rolls=Decimal(str(stock_rolls)),
            notes=notes
        )

    @staticmethod
    def create_order(order_id=None, reference=None, fabric='Viscose', grid_type='STANDARD', lines=None,
                     sizes=None, pieces_per_roll=None, status=lifecycle.PLANNED, created_at=None):
        """
        Create a test production order the way the service plans one.
        Default: one color 'Azul', 2 rolls, 10 pieces per size on the P/M/G/GG grid.
        """
        if order_id is None:
            order_id = lifecycle.next_order_id(ProductionOrder.objects.values_list('id', flat=True))
        if lines is None:
            lines = [{'color': 'Azul', 'color_hex': '#0000FF', 'rolls_used': 2, 'pieces_per_size': 10}]
        snapshot = lifecycle.new_order(order_id, {
            'reference_id': reference.pk if reference else None,
            'reference_code': reference.code if reference else 'REF001',
            'description': reference.description if reference else 'Vestido Longo',
            'fabric': fabric,
            'grid_type': grid_type,
            'sizes': sizes,
            'lines': lines,
            'pieces_per_roll': pieces_per_roll,
            'created_at': created_at or timezone.now(),
        })
        snapshot['status'] = status
        return ProductionOrder.objects.create(**snapshot)


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()


def products_table_without_yield_column():
    """Patch ORM writes so the products table behaves as if it lacked estimated_pieces_per_roll"""
    original_create = QuerySet.create
    original_update = QuerySet.update

    def create(queryset, **kwargs):
        if queryset.model is ProductReference:
            raise OperationalError('table products has no column named estimated_pieces_per_roll')
        return original_create(queryset, **kwargs)

    def update(queryset, **kwargs):
        if queryset.model is ProductReference and 'estimated_pieces_per_roll' in kwargs:
            raise OperationalError('no such column: estimated_pieces_per_roll')
        return original_update(queryset, **kwargs)

    # patch.multiple reserves the ``create`` keyword, so patch each attribute
    @contextmanager
    def patched():
        with patch.object(QuerySet, 'create', create), patch.object(QuerySet, 'update', update):
            yield

    return patched()
