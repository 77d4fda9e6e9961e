"""
Order operations: run a lifecycle transition, then persist it.

Writes go through TableStore one row at a time. A move to cutting updates
each matched fabric first and the order last; there is no transaction
around the sequence, so fabric updates already written stay written if the
order update fails.
"""
import logging
from typing import List, NamedTuple

from django.db import DatabaseError
from django.utils import timezone

from confeccao.core.store import TableStore
from confeccao.inventory import ledger
from . import lifecycle
from .models import ProductionOrder

logger = logging.getLogger('confeccao.production')

orders = TableStore(ProductionOrder)

SNAPSHOT_FIELDS = [
    'id', 'reference_id', 'reference_code', 'description', 'fabric', 'grid_type', 'notes',
    'items', 'active_cutting_items', 'splits', 'status', 'created_at', 'updated_at', 'finished_at',
]


class CuttingResult(NamedTuple):
    order: ProductionOrder
    deductions: List[ledger.CutDeduction]
    unmatched_colors: List[str]


def snapshot(order):
    return {field: getattr(order, field) for field in SNAPSHOT_FIELDS}


def changed_fields(before, after):
    return {
        field: value for field, value in after.items()
        if field != 'id' and before.get(field) != value
    }


def save_transition(before, after):
    """Persist whatever the transition changed and return the stored order"""
    changes = changed_fields(before, after)
    return orders.update(before['id'], changes).record


def suggest_order_id():
    return lifecycle.next_order_id(ProductionOrder.objects.values_list('id', flat=True))


def create_order(fields, now=None):
    """
    Plan a new order. ``fields`` carries the form data resolved by the
    serializer: reference_id, reference_code, description, fabric,
    grid_type, sizes, lines, pieces_per_roll, notes, created_at and an
    optional explicit id.
    """
    now = now or timezone.now()
    order_id = fields.get('id') or suggest_order_id()
    planned = lifecycle.new_order(order_id, fields, now=now)
    order = orders.insert(planned).record
    logger.info(f"Order #{order.id} planned: {order.reference_code} in {order.fabric}, {len(order.items)} colors")
    return order


def edit_order(order, fields, now=None):
    before = snapshot(order)
    after = lifecycle.transition(before, lifecycle.EDIT, fields, now=now)
    return save_transition(before, after)


def move_to_cutting(order, now=None):
    """
    PLANNED -> CUTTING. Deducts the rolls of every item from the fabric with
    the same (name, color); colors without a fabric record are skipped.
    """
    now = now or timezone.now()
    before = snapshot(order)
    after = lifecycle.transition(before, lifecycle.MOVE_TO_CUTTING, now=now)

    plan = ledger.plan_cut_deductions(order.fabric, order.items, ledger.fabrics.select_all())
    ledger.apply_cut_deductions(plan, now=now)
    try:
        updated = save_transition(before, after)
    except DatabaseError:
        if plan.deductions:
            logger.error(
                f"Order #{order.id} not moved to cutting after {len(plan.deductions)} fabric deductions were written",
                exc_info=True
            )
        raise
    logger.info(f"Order #{order.id} moved to cutting; {len(plan.deductions)} fabric deductions")
    return CuttingResult(updated, plan.deductions, plan.unmatched_colors)


def confirm_cut(order, items=None, now=None):
    before = snapshot(order)
    after = lifecycle.transition(before, lifecycle.CONFIRM_CUT, {'items': items or []}, now=now)
    updated = save_transition(before, after)
    logger.info(f"Cut confirmed for order #{order.id}: {lifecycle.piece_count(updated.items)} pieces")
    return updated


def distribute(order, seamstress, mode, sizes=None, items=None, now=None):
    if not seamstress.active:
        raise lifecycle.DistributionError(f"Seamstress {seamstress.name} is inactive.")
    before = snapshot(order)
    payload = {
        'seamstress': {'id': seamstress.pk, 'name': seamstress.name},
        'mode': mode,
        'sizes': sizes,
        'items': items,
    }
    after = lifecycle.transition(before, lifecycle.DISTRIBUTE, payload, now=now)
    updated = save_transition(before, after)
    split = updated.splits[-1]
    logger.info(
        f"Order #{order.id}: {lifecycle.piece_count(split['items'])} pieces sent to {seamstress.name} (split {split['id']})"
    )
    return updated, split


def finish_split(order, split_id, now=None):
    before = snapshot(order)
    after = lifecycle.transition(before, lifecycle.FINISH_SPLIT, {'split_id': split_id}, now=now)
    updated = save_transition(before, after)
    if updated.status == lifecycle.FINISHED:
        logger.info(f"Order #{order.id} finished")
    return updated


def delete_order(order):
    orders.delete(order.pk)
    logger.info(f"Order #{order.pk} deleted in status {order.status}")
