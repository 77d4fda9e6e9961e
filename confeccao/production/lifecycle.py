"""
Production order lifecycle.

    PLANNED --move_to_cutting--> CUTTING --confirm_cut--> CUTTING
    CUTTING --distribute--> SEWING --distribute--> SEWING
    SEWING --finish_split--> SEWING | FINISHED

Orders are handled here as plain dict snapshots (see
``confeccao.production.services.snapshot``). ``transition`` never mutates
its input and never touches the database: fabric stock and persistence are
the job of the services module.
"""
import copy
import math
import uuid
from decimal import Decimal

from django.utils import timezone

from confeccao.inventory.ledger import round_rolls, to_rolls
from .models import PLANNED, CUTTING, SEWING, FINISHED

SIZE_ORDER = ['PP', 'P', 'M', 'G', 'GG', 'XG', 'G1', 'G2', 'G3', 'G4', 'UNI']

GRID_SIZES = {
    'STANDARD': ['P', 'M', 'G', 'GG'],
    'PLUS': ['G1', 'G2', 'G3'],
}

DEFAULT_COLOR_HEX = '#ccc'

FULL = 'FULL'
BY_SIZE = 'BY_SIZE'
CUSTOM = 'CUSTOM'
DISTRIBUTION_MODES = [FULL, BY_SIZE, CUSTOM]

MOVE_TO_CUTTING = 'move_to_cutting'
CONFIRM_CUT = 'confirm_cut'
DISTRIBUTE = 'distribute'
FINISH_SPLIT = 'finish_split'
EDIT = 'edit'

EDITABLE_FIELDS = ['reference_id', 'reference_code', 'description', 'fabric', 'grid_type', 'notes', 'created_at']


class LifecycleError(Exception):
    """An order operation was rejected"""


class IllegalTransition(LifecycleError):
    """The event is not allowed in the order's current status"""


class DistributionError(LifecycleError):
    """A distribution asks for pieces the cutting room does not have"""


class SplitNotFound(LifecycleError):
    pass


# Sizes and items

def size_sort_key(size):
    if size in SIZE_ORDER:
        return (SIZE_ORDER.index(size), '')
    return (len(SIZE_ORDER), size)


def sort_sizes(sizes):
    return sorted(sizes, key=size_sort_key)


def grid_sizes(grid_type, selected=None):
    """Sizes produced by a grid; CUSTOM grids use the caller's selection."""
    if grid_type in GRID_SIZES:
        return list(GRID_SIZES[grid_type])
    return sort_sizes(set(selected or []))


def order_sizes(order):
    """Sizes of an existing order, inferred from its first item like the order form does."""
    items = order.get('items') or []
    if order.get('grid_type') in GRID_SIZES or not items:
        return grid_sizes(order.get('grid_type'))
    return sort_sizes(items[0].get('sizes', {}).keys())


def sum_sizes(sizes):
    return sum(int(quantity or 0) for quantity in sizes.values())


def piece_count(items):
    return sum(int(item.get('actual_pieces') or 0) for item in items or [])


def rolls_count(items):
    return sum((to_rolls(item.get('rolls_used')) for item in items or []), Decimal('0'))


def estimate_pieces_per_size(rolls_used, pieces_per_roll, size_count):
    """floor(rolls x pieces per roll / number of sizes); 0 without a yield estimate"""
    if not pieces_per_roll or not size_count:
        return 0
    return math.floor(to_rolls(rolls_used) * int(pieces_per_roll) / size_count)


def build_items(lines, sizes, pieces_per_roll=None, confirmed_items=None):
    """
    Turn order form lines ({color, color_hex, rolls_used, pieces_per_size})
    into order items with an estimated size breakdown.

    Colors present in ``confirmed_items`` keep their confirmed sizes and
    actual pieces; everything else is recalculated from the estimate.
    """
    confirmed = {item['color']: item for item in confirmed_items or []}
    items = []
    for line in lines:
        color = line['color'].strip()
        rolls_used = round_rolls(to_rolls(line.get('rolls_used')))
        per_size = line.get('pieces_per_size')
        if per_size is None:
            per_size = estimate_pieces_per_size(rolls_used, pieces_per_roll, len(sizes))
        per_size = int(per_size)
        item = {
            'color': color,
            'color_hex': line.get('color_hex') or DEFAULT_COLOR_HEX,
            'rolls_used': float(rolls_used),
            'pieces_per_size_est': per_size,
            'estimated_pieces': per_size * len(sizes),
            'actual_pieces': 0,
            'sizes': {size: per_size for size in sizes},
        }
        previous = confirmed.get(color)
        if previous is not None:
            item['sizes'] = dict(previous['sizes'])
            item['actual_pieces'] = previous['actual_pieces']
        items.append(item)
    return items


def lines_from_items(items):
    return [
        {
            'color': item['color'],
            'color_hex': item.get('color_hex'),
            'rolls_used': item.get('rolls_used'),
            'pieces_per_size': item.get('pieces_per_size_est'),
        }
        for item in items
    ]


def is_cut_confirmed(order):
    return bool(order.get('active_cutting_items'))


def is_complete(order):
    """
    An order is finished once the cutting room is empty and every packet
    sent out has come back finished. An order that never sent a packet is
    not complete.
    """
    splits = order.get('splits') or []
    if not splits:
        return False
    cutting_empty = all(int(item.get('actual_pieces') or 0) == 0 for item in order.get('active_cutting_items') or [])
    return cutting_empty and all(split.get('status') == FINISHED for split in splits)


def next_order_id(existing_ids):
    """Sequential numeric id: highest numeric id + 1, or '1' for the first order."""
    numeric = [int(value) for value in existing_ids if str(value).isdigit()]
    return str(max(numeric) + 1) if numeric else '1'


def new_order(order_id, fields, now=None):
    """Snapshot of a freshly planned order"""
    now = now or timezone.now()
    sizes = grid_sizes(fields.get('grid_type'), fields.get('sizes'))
    return {
        'id': order_id,
        'reference_id': fields.get('reference_id'),
        'reference_code': fields.get('reference_code', ''),
        'description': fields.get('description', ''),
        'fabric': fields.get('fabric', ''),
        'grid_type': fields.get('grid_type', 'STANDARD'),
        'notes': fields.get('notes', ''),
        'items': build_items(fields.get('lines', []), sizes, fields.get('pieces_per_roll')),
        'active_cutting_items': [],
        'splits': [],
        'status': PLANNED,
        'created_at': fields.get('created_at') or now,
        'updated_at': now,
        'finished_at': None,
    }


# Distribution

def _sent_sizes(active_item, sizes):
    return {
        size: int(active_item['sizes'].get(size) or 0)
        for size in sort_sizes(sizes)
        if int(active_item['sizes'].get(size) or 0) > 0
    }


def distribution_request(active_items, mode, sizes=None, items=None):
    """
    Resolve a distribution into {color: {size: quantity}}.

    FULL sends everything left in the cutting room, BY_SIZE sends every
    remaining piece of the chosen sizes across all colors, CUSTOM sends the
    explicit [{color, sizes}] quantities.
    """
    request = {}
    if mode == FULL:
        for item in active_items:
            request[item['color']] = _sent_sizes(item, item['sizes'].keys())
    elif mode == BY_SIZE:
        if not sizes:
            raise DistributionError('Select at least one size to distribute.')
        for item in active_items:
            request[item['color']] = _sent_sizes(item, sizes)
    elif mode == CUSTOM:
        available = {item['color']: item for item in active_items}
        for entry in items or []:
            color = entry['color']
            if color not in available:
                raise DistributionError(f"Color '{color}' is not in the cutting room.")
            sent = request.setdefault(color, {})
            for size, quantity in entry.get('sizes', {}).items():
                quantity = int(quantity or 0)
                if quantity < 0:
                    raise DistributionError(f"Negative quantity for {color} {size}.")
                sent[size] = sent.get(size, 0) + quantity
    else:
        raise DistributionError(f"Unknown distribution mode '{mode}'.")

    active = {item['color']: item for item in active_items}
    for color, sent in request.items():
        for size, quantity in sent.items():
            in_stock = int(active[color]['sizes'].get(size) or 0)
            if quantity > in_stock:
                raise DistributionError(
                    f"Cannot send {quantity} pieces of {color} {size}: only {in_stock} in the cutting room."
                )

    return {
        color: {size: quantity for size, quantity in sent.items() if quantity > 0}
        for color, sent in request.items()
        if sum(sent.values()) > 0
    }


# Transition handlers. Each receives a private copy of the order.

def _move_to_cutting(order, payload, now):
    order['status'] = CUTTING


def _confirm_cut(order, payload, now):
    counts = {entry['color']: entry['sizes'] for entry in payload.get('items') or []}
    known = {item['color'] for item in order['items']}
    unknown = sorted(set(counts) - known)
    if unknown:
        raise LifecycleError(f"Colors not in this order: {', '.join(unknown)}")

    finalized = []
    for item in order['items']:
        sizes = counts.get(item['color'], item['sizes'])
        sizes = {size: max(0, int(quantity or 0)) for size, quantity in sizes.items()}
        finalized.append(dict(item, sizes=sizes, actual_pieces=sum_sizes(sizes)))
    order['items'] = finalized
    order['active_cutting_items'] = copy.deepcopy(finalized)


def _distribute(order, payload, now):
    if order['status'] == CUTTING and not is_cut_confirmed(order):
        raise IllegalTransition('Confirm the cut before distributing pieces.')
    seamstress = payload['seamstress']
    request = distribution_request(
        order['active_cutting_items'],
        payload.get('mode', FULL),
        sizes=payload.get('sizes'),
        items=payload.get('items'),
    )
    if not request:
        raise DistributionError('Nothing to distribute: no pieces selected.')

    hex_by_color = {item['color']: item.get('color_hex') for item in order['items']}
    split_items = []
    for item in order['active_cutting_items']:
        sent = request.get(item['color'])
        if not sent:
            continue
        remaining = {
            size: max(0, int(quantity or 0) - sent.get(size, 0))
            for size, quantity in item['sizes'].items()
        }
        item['sizes'] = remaining
        item['actual_pieces'] = sum_sizes(remaining)

        total = sum(sent.values())
        split_items.append({
            'color': item['color'],
            'color_hex': hex_by_color.get(item['color']) or item.get('color_hex'),
            'rolls_used': 0,
            'pieces_per_size_est': 0,
            'estimated_pieces': total,
            'actual_pieces': total,
            'sizes': sent,
        })

    order['splits'].append({
        'id': payload.get('split_id') or str(uuid.uuid4()),
        'seamstress_id': seamstress['id'],
        'seamstress_name': seamstress['name'],
        'status': SEWING,
        'items': split_items,
        'created_at': now.isoformat(),
        'finished_at': None,
    })
    order['status'] = SEWING


def _finish_split(order, payload, now):
    split_id = str(payload.get('split_id'))
    split = next((s for s in order['splits'] if str(s.get('id')) == split_id), None)
    if split is None:
        raise SplitNotFound(f"Split {split_id} not found in order {order['id']}")
    if split.get('status') == FINISHED:
        raise IllegalTransition(f"Split {split_id} is already finished.")
    split['status'] = FINISHED
    split['finished_at'] = now.isoformat()

    if is_complete(order):
        order['status'] = FINISHED
        order['finished_at'] = now
    else:
        order['status'] = SEWING


def _edit(order, payload, now):
    if is_cut_confirmed(order):
        raise IllegalTransition('The cut of this order is already confirmed; it can no longer be edited.')
    for field in EDITABLE_FIELDS:
        if field in payload:
            order[field] = payload[field]

    lines = payload.get('lines')
    if lines is None and ('grid_type' in payload or 'sizes' in payload or 'pieces_per_roll' in payload):
        lines = lines_from_items(order['items'])
    if lines is not None:
        sizes = grid_sizes(order['grid_type'], payload.get('sizes') or order_sizes(order))
        order['items'] = build_items(lines, sizes, payload.get('pieces_per_roll'))


TRANSITIONS = {
    MOVE_TO_CUTTING: ({PLANNED}, _move_to_cutting),
    CONFIRM_CUT: ({CUTTING}, _confirm_cut),
    DISTRIBUTE: ({CUTTING, SEWING}, _distribute),
    FINISH_SPLIT: ({SEWING}, _finish_split),
    EDIT: ({PLANNED, CUTTING}, _edit),
}


def transition(order, event, payload=None, now=None):
    """
    Apply one lifecycle event to an order snapshot and return the new snapshot.

    Raises IllegalTransition when the event is not allowed from the order's
    current status, DistributionError / LifecycleError when the payload is
    rejected. ``updated_at`` is stamped on every successful transition.
    """
    if event not in TRANSITIONS:
        raise IllegalTransition(f"Unknown event '{event}'")
    allowed, handler = TRANSITIONS[event]
    if order['status'] not in allowed:
        raise IllegalTransition(f"Cannot {event.replace('_', ' ')} an order in status {order['status']}")
    now = now or timezone.now()
    updated = copy.deepcopy(order)
    handler(updated, payload or {}, now)
    updated['updated_at'] = now
    return updated
