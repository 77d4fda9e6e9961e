"""
Test suite for the production module
Tests: lifecycle transitions, distribution rules, completion detection,
order endpoints and fabric deduction on cutting
"""
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status

from confeccao.core.models import AuditLog
from confeccao.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from confeccao.production import lifecycle
from confeccao.production.lifecycle import (
    transition, IllegalTransition, DistributionError, SplitNotFound, LifecycleError,
    PLANNED, CUTTING, SEWING, FINISHED,
)
from confeccao.production.models import ProductionOrder

ANA = {'id': 1, 'name': 'Ana'}
BIA = {'id': 2, 'name': 'Bia'}
FULL_CUT = {'P': 10, 'M': 10, 'G': 10, 'GG': 10}


def azul_order():
    """One color Azul, STANDARD grid, 2 rolls at 20 pieces per roll"""
    return lifecycle.new_order('1', {
        'reference_code': 'REF001',
        'description': 'Vestido Longo',
        'fabric': 'Viscose',
        'grid_type': 'STANDARD',
        'lines': [{'color': 'Azul', 'color_hex': '#0000FF', 'rolls_used': 2}],
        'pieces_per_roll': 20,
    })


def confirmed_order(sizes=None):
    order = transition(azul_order(), lifecycle.MOVE_TO_CUTTING)
    return transition(order, lifecycle.CONFIRM_CUT, {'items': [{'color': 'Azul', 'sizes': sizes or FULL_CUT}]})


class SizeAndEstimateTests(SimpleTestCase):
    """Test grid sizes, estimates and order ids"""

    def test_sort_sizes(self):
        self.assertEqual(lifecycle.sort_sizes(['GG', 'UNI', 'P', 'XX', 'G1', 'AA', 'PP']),
                         ['PP', 'P', 'GG', 'G1', 'UNI', 'AA', 'XX'])

    def test_grid_sizes(self):
        self.assertEqual(lifecycle.grid_sizes('STANDARD'), ['P', 'M', 'G', 'GG'])
        self.assertEqual(lifecycle.grid_sizes('PLUS'), ['G1', 'G2', 'G3'])
        self.assertEqual(lifecycle.grid_sizes('CUSTOM', ['UNI', 'M']), ['M', 'UNI'])

    def test_estimate_from_yield(self):
        order = azul_order()
        item = order['items'][0]
        self.assertEqual(item['pieces_per_size_est'], 10)
        self.assertEqual(item['estimated_pieces'], 40)
        self.assertEqual(item['sizes'], FULL_CUT)
        self.assertEqual(item['actual_pieces'], 0)
        self.assertEqual(order['status'], PLANNED)
        self.assertEqual(order['active_cutting_items'], [])

    def test_estimate_floors(self):
        self.assertEqual(lifecycle.estimate_pieces_per_size('1.5', 15, 4), 5)
        self.assertEqual(lifecycle.estimate_pieces_per_size(2, None, 4), 0)

    def test_default_color_hex(self):
        items = lifecycle.build_items([{'color': 'Cru', 'rolls_used': 1, 'pieces_per_size': 3}], ['UNI'])
        self.assertEqual(items[0]['color_hex'], '#ccc')
        self.assertEqual(items[0]['sizes'], {'UNI': 3})

    def test_next_order_id(self):
        self.assertEqual(lifecycle.next_order_id([]), '1')
        self.assertEqual(lifecycle.next_order_id(['1', '9', '10', 'A7']), '11')
        self.assertEqual(lifecycle.next_order_id(['A7']), '1')


class LifecycleTransitionTests(SimpleTestCase):
    """Test the order transition table"""

    def test_move_to_cutting(self):
        order = azul_order()
        moved = transition(order, lifecycle.MOVE_TO_CUTTING)
        self.assertEqual(moved['status'], CUTTING)
        self.assertEqual(order['status'], PLANNED)

    def test_move_to_cutting_only_from_planned(self):
        order = transition(azul_order(), lifecycle.MOVE_TO_CUTTING)
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.MOVE_TO_CUTTING)

    def test_unknown_event(self):
        with self.assertRaises(IllegalTransition):
            transition(azul_order(), 'reopen')

    def test_confirm_cut(self):
        order = confirmed_order({'P': 9, 'M': 11, 'G': 10, 'GG': 10})
        self.assertEqual(order['status'], CUTTING)
        self.assertEqual(order['items'][0]['actual_pieces'], 40)
        self.assertEqual(order['active_cutting_items'], order['items'])
        self.assertIsNot(order['active_cutting_items'][0], order['items'][0])

    def test_confirm_cut_defaults_to_estimates(self):
        order = transition(transition(azul_order(), lifecycle.MOVE_TO_CUTTING), lifecycle.CONFIRM_CUT)
        self.assertEqual(order['items'][0]['sizes'], FULL_CUT)
        self.assertEqual(order['items'][0]['actual_pieces'], 40)

    def test_confirm_cut_unknown_color(self):
        order = transition(azul_order(), lifecycle.MOVE_TO_CUTTING)
        with self.assertRaises(LifecycleError):
            transition(order, lifecycle.CONFIRM_CUT, {'items': [{'color': 'Verde', 'sizes': {'P': 1}}]})

    def test_confirm_cut_not_in_planned(self):
        with self.assertRaises(IllegalTransition):
            transition(azul_order(), lifecycle.CONFIRM_CUT)

    def test_distribute_by_size_to_ana(self):
        order = confirmed_order()
        sent = transition(order, lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P', 'M']})

        active = sent['active_cutting_items'][0]
        self.assertEqual(active['sizes'], {'P': 0, 'M': 0, 'G': 10, 'GG': 10})
        self.assertEqual(active['actual_pieces'], 20)
        self.assertEqual(sent['items'][0]['actual_pieces'], 40)

        self.assertEqual(len(sent['splits']), 1)
        split = sent['splits'][0]
        self.assertEqual(split['status'], SEWING)
        self.assertEqual(split['seamstress_name'], 'Ana')
        self.assertEqual(split['items'][0]['actual_pieces'], 20)
        self.assertEqual(split['items'][0]['sizes'], {'P': 10, 'M': 10})
        self.assertEqual(split['items'][0]['color_hex'], '#0000FF')
        self.assertEqual(sent['status'], SEWING)

    def test_distribute_before_confirmation(self):
        order = transition(azul_order(), lifecycle.MOVE_TO_CUTTING)
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.FULL})

    def test_distribute_custom_quantities(self):
        order = confirmed_order()
        sent = transition(order, lifecycle.DISTRIBUTE, {
            'seamstress': ANA, 'mode': lifecycle.CUSTOM,
            'items': [{'color': 'Azul', 'sizes': {'P': 4, 'GG': 10}}],
        })
        self.assertEqual(sent['active_cutting_items'][0]['sizes'], {'P': 6, 'M': 10, 'G': 10, 'GG': 0})
        self.assertEqual(sent['splits'][0]['items'][0]['actual_pieces'], 14)

    def test_distribute_more_than_available(self):
        order = confirmed_order()
        with self.assertRaises(DistributionError):
            transition(order, lifecycle.DISTRIBUTE, {
                'seamstress': ANA, 'mode': lifecycle.CUSTOM,
                'items': [{'color': 'Azul', 'sizes': {'P': 11}}],
            })

    def test_distribute_unknown_color(self):
        with self.assertRaises(DistributionError):
            transition(confirmed_order(), lifecycle.DISTRIBUTE, {
                'seamstress': ANA, 'mode': lifecycle.CUSTOM,
                'items': [{'color': 'Verde', 'sizes': {'P': 1}}],
            })

    def test_distribute_nothing(self):
        order = confirmed_order()
        order = transition(order, lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P']})
        with self.assertRaises(DistributionError):
            transition(order, lifecycle.DISTRIBUTE, {'seamstress': BIA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P']})

    def test_finishing_only_split_keeps_sewing(self):
        order = transition(confirmed_order(), lifecycle.DISTRIBUTE,
                           {'seamstress': ANA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P', 'M']})
        split_id = order['splits'][0]['id']
        finished = transition(order, lifecycle.FINISH_SPLIT, {'split_id': split_id})
        self.assertEqual(finished['splits'][0]['status'], FINISHED)
        self.assertIsNotNone(finished['splits'][0]['finished_at'])
        self.assertEqual(finished['status'], SEWING)
        self.assertIsNone(finished['finished_at'])
        self.assertFalse(lifecycle.is_complete(finished))

    def test_order_finishes_when_everything_is_sewn(self):
        order = transition(confirmed_order(), lifecycle.DISTRIBUTE,
                           {'seamstress': ANA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P', 'M']})
        order = transition(order, lifecycle.DISTRIBUTE, {'seamstress': BIA, 'mode': lifecycle.FULL})
        self.assertEqual(lifecycle.piece_count(order['active_cutting_items']), 0)

        first, second = (split['id'] for split in order['splits'])
        order = transition(order, lifecycle.FINISH_SPLIT, {'split_id': second})
        self.assertEqual(order['status'], SEWING)
        order = transition(order, lifecycle.FINISH_SPLIT, {'split_id': first})
        self.assertEqual(order['status'], FINISHED)
        self.assertIsNotNone(order['finished_at'])
        self.assertTrue(lifecycle.is_complete(order))

    def test_finish_split_twice(self):
        order = transition(confirmed_order(), lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.BY_SIZE, 'sizes': ['P']})
        split_id = order['splits'][0]['id']
        order = transition(order, lifecycle.FINISH_SPLIT, {'split_id': split_id})
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.FINISH_SPLIT, {'split_id': split_id})

    def test_finish_unknown_split(self):
        order = transition(confirmed_order(), lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.FULL})
        with self.assertRaises(SplitNotFound):
            transition(order, lifecycle.FINISH_SPLIT, {'split_id': 'nope'})

    def test_transition_stamps_updated_at(self):
        now = timezone.now() + timedelta(hours=1)
        moved = transition(azul_order(), lifecycle.MOVE_TO_CUTTING, now=now)
        self.assertEqual(moved['updated_at'], now)

    def test_edit_planned_recalculates_sizes(self):
        edited = transition(azul_order(), lifecycle.EDIT, {
            'lines': [{'color': 'Azul', 'color_hex': '#0000FF', 'rolls_used': 4}],
            'pieces_per_roll': 20,
        })
        self.assertEqual(edited['items'][0]['sizes'], {'P': 20, 'M': 20, 'G': 20, 'GG': 20})
        self.assertEqual(edited['items'][0]['rolls_used'], 4.0)

    def test_edit_cutting_order_before_confirmation(self):
        order = transition(azul_order(), lifecycle.MOVE_TO_CUTTING)
        edited = transition(order, lifecycle.EDIT, {'notes': 'Urgente'})
        self.assertEqual(edited['notes'], 'Urgente')
        self.assertEqual(edited['status'], CUTTING)

    def test_edit_after_confirmation_rejected(self):
        order = confirmed_order()
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.EDIT, {
                'lines': [{'color': 'Verde', 'rolls_used': 1, 'pieces_per_size': 5}],
            })
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.EDIT, {'notes': 'Urgente'})

    def test_build_items_keeps_confirmed_sizes(self):
        confirmed = confirmed_order({'P': 9, 'M': 11, 'G': 10, 'GG': 10})['items']
        items = lifecycle.build_items(
            [{'color': 'Azul', 'rolls_used': 3, 'pieces_per_size': 15}],
            ['P', 'M', 'G', 'GG'],
            confirmed_items=confirmed,
        )
        self.assertEqual(items[0]['sizes'], {'P': 9, 'M': 11, 'G': 10, 'GG': 10})
        self.assertEqual(items[0]['actual_pieces'], 40)
        self.assertEqual(items[0]['rolls_used'], 3.0)

    def test_edit_not_allowed_while_sewing(self):
        order = transition(confirmed_order(), lifecycle.DISTRIBUTE, {'seamstress': ANA, 'mode': lifecycle.FULL})
        with self.assertRaises(IllegalTransition):
            transition(order, lifecycle.EDIT, {'notes': 'x'})


class OrderAPITests(TestCase):
    """Test production order endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.product = TestDataFactory.create_product(code='REF001', description='Vestido Longo',
                                                      default_fabric='Viscose', estimated_pieces_per_roll=20)
        self.ana = TestDataFactory.create_seamstress(name='Ana')

    def create_order(self, **extra):
        data = {
            'reference': self.product.id,
            'items': [{'color': 'Azul', 'color_hex': '#0000FF', 'rolls_used': '2'}],
        }
        data.update(extra)
        return self.client.post('/api/v1/orders/', data, format='json')

    def test_create_order_from_reference(self):
        response = self.create_order()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['id'], '1')
        self.assertEqual(response.data['status'], PLANNED)
        self.assertEqual(response.data['status_display'], 'Planejado')
        self.assertEqual(response.data['fabric'], 'Viscose')
        self.assertEqual(response.data['reference_code'], 'REF001')
        self.assertEqual(response.data['total_estimated'], 40)
        self.assertEqual(response.data['items'][0]['sizes'], FULL_CUT)
        self.assertEqual(response.data['sizes'], ['P', 'M', 'G', 'GG'])

    def test_sequential_and_explicit_ids(self):
        self.create_order(id='7')
        response = self.create_order()
        self.assertEqual(response.data['id'], '8')
        response = self.create_order(id='7')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get('/api/v1/orders/next-id/').data, {'next_id': '9'})

    def test_custom_grid_requires_sizes(self):
        response = self.create_order(grid_type='CUSTOM')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.create_order(grid_type='CUSTOM', sizes=['uni'])
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['items'][0]['sizes'], {'UNI': 40})

    def test_create_requires_items(self):
        response = self.create_order(items=[])
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_by_stage_and_search(self):
        TestDataFactory.create_order(order_id='1', status=PLANNED)
        TestDataFactory.create_order(order_id='2', status=CUTTING)
        response = self.client.get('/api/v1/orders/?status=CUTTING')
        self.assertEqual([o['id'] for o in response.data], ['2'])
        response = self.client.get('/api/v1/orders/?search=vestido')
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/orders/?search=2')
        self.assertEqual([o['id'] for o in response.data], ['2'])

    def test_stage_counts(self):
        TestDataFactory.create_order(order_id='1', status=PLANNED)
        TestDataFactory.create_order(order_id='2', status=PLANNED)
        TestDataFactory.create_order(order_id='3', status=SEWING)
        response = self.client.get('/api/v1/orders/stage-counts/')
        self.assertEqual(response.data, {PLANNED: 2, CUTTING: 0, SEWING: 1, FINISHED: 0})

    def test_move_to_cutting_deducts_fabric(self):
        fabric = TestDataFactory.create_fabric(name='viscose', color='AZUL', stock_rolls='15')
        order_id = self.create_order().data['id']
        response = self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], CUTTING)
        self.assertEqual(response.data['unmatched_colors'], [])
        fabric.refresh_from_db()
        self.assertEqual(fabric.stock_rolls, Decimal('13.00'))
        self.assertTrue(AuditLog.objects.filter(action='stock_cut', object_id=str(fabric.id)).exists())

    def test_move_to_cutting_without_fabric_record(self):
        order_id = self.create_order().data['id']
        response = self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['unmatched_colors'], ['Azul'])

    def test_move_to_cutting_clamps_stock(self):
        fabric = TestDataFactory.create_fabric(stock_rolls='1.5')
        order_id = self.create_order().data['id']
        self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        fabric.refresh_from_db()
        self.assertEqual(fabric.stock_rolls, Decimal('0.00'))

    def test_move_to_cutting_twice(self):
        fabric = TestDataFactory.create_fabric(stock_rolls='15')
        order_id = self.create_order().data['id']
        self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        response = self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        fabric.refresh_from_db()
        self.assertEqual(fabric.stock_rolls, Decimal('13.00'))

    def test_full_flow(self):
        order_id = self.create_order().data['id']
        self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')

        response = self.client.post(f'/api/v1/orders/{order_id}/confirm-cut/',
                                    {'items': [{'color': 'Azul', 'sizes': FULL_CUT}]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_cut'], 40)
        self.assertEqual(response.data['cutting_stock'], 40)
        self.assertTrue(response.data['cut_confirmed'])

        response = self.client.post(f'/api/v1/orders/{order_id}/distribute/',
                                    {'seamstress': self.ana.id, 'mode': 'BY_SIZE', 'sizes': ['P', 'M']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], SEWING)
        self.assertEqual(response.data['cutting_stock'], 20)
        split = response.data['splits'][0]
        self.assertEqual(split['pieces'], 20)
        self.assertFalse(split['is_late'])
        self.assertIsNotNone(split['deadline'])

        response = self.client.post(f"/api/v1/orders/{order_id}/splits/{split['id']}/finish/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], SEWING)

        response = self.client.post(f'/api/v1/orders/{order_id}/distribute/',
                                    {'seamstress': self.ana.id, 'mode': 'FULL'}, format='json')
        second = response.data['splits'][1]
        response = self.client.post(f"/api/v1/orders/{order_id}/splits/{second['id']}/finish/")
        self.assertEqual(response.data['status'], FINISHED)
        self.assertIsNotNone(response.data['finished_at'])
        self.assertTrue(AuditLog.objects.filter(action='order_finish', object_id=order_id).exists())

    def test_distribute_to_inactive_seamstress(self):
        inactive = TestDataFactory.create_seamstress(name='Bia', active=False)
        order = TestDataFactory.create_order(status=CUTTING)
        order.active_cutting_items = [dict(order.items[0], actual_pieces=40)]
        order.save()
        response = self.client.post(f'/api/v1/orders/{order.id}/distribute/',
                                    {'seamstress': inactive.id, 'mode': 'FULL'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(ProductionOrder.objects.get(pk=order.pk).splits, [])

    def test_distribute_too_many_pieces(self):
        order = TestDataFactory.create_order(status=CUTTING)
        order.active_cutting_items = [dict(order.items[0], actual_pieces=40)]
        order.save()
        response = self.client.post(f'/api/v1/orders/{order.id}/distribute/', {
            'seamstress': self.ana.id, 'mode': 'CUSTOM',
            'items': [{'color': 'Azul', 'sizes': {'P': 50}}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_distribute_by_size_normalises_sizes(self):
        order_id = self.create_order().data['id']
        self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        self.client.post(f'/api/v1/orders/{order_id}/confirm-cut/',
                         {'items': [{'color': 'Azul', 'sizes': FULL_CUT}]}, format='json')
        response = self.client.post(f'/api/v1/orders/{order_id}/distribute/',
                                    {'seamstress': self.ana.id, 'mode': 'BY_SIZE', 'sizes': ['p', ' m ']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['splits'][0]['pieces'], 20)
        self.assertEqual(response.data['cutting_stock'], 20)

    def test_finish_unknown_split(self):
        order = TestDataFactory.create_order(status=SEWING)
        response = self.client.post(f'/api/v1/orders/{order.id}/splits/missing/finish/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_edit_planned_order(self):
        order_id = self.create_order().data['id']
        response = self.client.patch(f'/api/v1/orders/{order_id}/', {
            'notes': 'Prioridade',
            'items': [{'color': 'Azul', 'color_hex': '#0000FF', 'rolls_used': '4'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['notes'], 'Prioridade')
        self.assertEqual(response.data['total_estimated'], 80)

    def test_edit_reference_refreshes_code_and_description(self):
        order_id = self.create_order().data['id']
        other = TestDataFactory.create_product(code='REF002', description='Blusa Curta')
        response = self.client.patch(f'/api/v1/orders/{order_id}/', {'reference': other.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['reference'], other.id)
        self.assertEqual(response.data['reference_code'], 'REF002')
        self.assertEqual(response.data['description'], 'Blusa Curta')

        response = self.client.patch(f'/api/v1/orders/{order_id}/',
                                     {'reference': self.product.id, 'description': 'Vestido Especial'}, format='json')
        self.assertEqual(response.data['reference_code'], 'REF001')
        self.assertEqual(response.data['description'], 'Vestido Especial')

    def test_edit_sewing_order_rejected(self):
        order = TestDataFactory.create_order(status=SEWING)
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'notes': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_edit_confirmed_order_rejected(self):
        order_id = self.create_order().data['id']
        self.client.post(f'/api/v1/orders/{order_id}/move-to-cutting/')
        self.client.post(f'/api/v1/orders/{order_id}/confirm-cut/', {}, format='json')
        response = self.client.patch(f'/api/v1/orders/{order_id}/', {
            'items': [{'color': 'Verde', 'color_hex': '#00FF00', 'rolls_used': '1'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        order = ProductionOrder.objects.get(pk=order_id)
        self.assertEqual([item['color'] for item in order.items], ['Azul'])
        self.assertEqual([item['color'] for item in order.active_cutting_items], ['Azul'])

    def test_order_id_is_immutable(self):
        order_id = self.create_order().data['id']
        response = self.client.patch(f'/api/v1/orders/{order_id}/', {'id': '99'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_at_any_stage(self):
        order = TestDataFactory.create_order(status=SEWING)
        response = self.client.delete(f'/api/v1/orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ProductionOrder.objects.filter(pk=order.pk).exists())
