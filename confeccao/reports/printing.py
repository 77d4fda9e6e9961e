"""
Printable documents: the cutting sheet of planned orders and the fabric
stock report. Both are self-contained HTML rendered from templates.
"""
from django.template.loader import render_to_string
from django.utils import timezone

from confeccao.inventory.ledger import find_fabric
from confeccao.production.lifecycle import GRID_SIZES, sort_sizes
from confeccao.production.models import PLANNED


def order_sort_key(order):
    """Numeric ids in numeric order, anything else after them alphabetically"""
    if str(order.id).isdigit():
        return (0, int(order.id), '')
    return (1, 0, str(order.id))


def grid_label(order):
    if order.grid_type in GRID_SIZES:
        return ', '.join(GRID_SIZES[order.grid_type])
    if order.items:
        return ', '.join(sort_sizes(order.items[0].get('sizes', {}).keys()))
    return ''


def planned_orders(orders):
    return sorted((o for o in orders if o.status == PLANNED), key=order_sort_key)


def cutting_sheet_rows(order, fabric_list):
    rows = []
    for item in order.items or []:
        fabric = find_fabric(fabric_list, order.fabric, item.get('color'))
        rows.append({
            'color': item.get('color'),
            'fabric_code': fabric.notes if fabric is not None and fabric.notes else '-',
            'rolls_used': item.get('rolls_used'),
        })
    return rows


def render_planned_orders(orders, fabric_list, now=None):
    """Cutting sheet for every planned order, or None when there is nothing to print"""
    planned = planned_orders(orders)
    if not planned:
        return None
    fabric_list = list(fabric_list)
    context = {
        'generated_at': timezone.localtime(now or timezone.now()),
        'orders': [
            {
                'order': order,
                'grid': grid_label(order),
                'rows': cutting_sheet_rows(order, fabric_list),
            }
            for order in planned
        ],
    }
    return render_to_string('reports/planned_orders.html', context)


def render_fabric_stock(fabric_list, now=None):
    context = {
        'generated_at': timezone.localtime(now or timezone.now()),
        'fabrics': list(fabric_list),
    }
    return render_to_string('reports/fabric_stock.html', context)
