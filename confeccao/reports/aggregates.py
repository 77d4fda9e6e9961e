"""
Read-only production figures.

Everything here is recomputed from the order and seamstress rows on each
request; nothing is cached or stored. Dates are bucketed by local calendar
day / month (settings.TIME_ZONE).
"""
import datetime as dt
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from confeccao.production.lifecycle import piece_count, rolls_count
from confeccao.production.models import STATUS_CHOICES, SEWING, FINISHED

MONTH_LABELS = ['jan', 'fev', 'mar', 'abr', 'mai', 'jun', 'jul', 'ago', 'set', 'out', 'nov', 'dez']


def deadline_days():
    return int(getattr(settings, 'SPLIT_DEADLINE_DAYS', 15))


def parse_timestamp(value):
    """Datetime for a model field or an ISO string stored inside a split"""
    if not value:
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    else:
        parsed = parse_datetime(str(value))
        if parsed is None:
            return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt.timezone.utc)
    return parsed


def local_date(value):
    parsed = parse_timestamp(value)
    return timezone.localtime(parsed).date() if parsed else None


def split_pieces(split):
    return piece_count(split.get('items'))


def split_deadline(split):
    created = parse_timestamp(split.get('created_at'))
    return created + timedelta(days=deadline_days()) if created else None


def is_split_late(split, now=None):
    """A packet is late once the deadline has passed and it is still being sewn"""
    if split.get('status') == FINISHED:
        return False
    deadline = split_deadline(split)
    return deadline is not None and (now or timezone.now()) > deadline


def iter_splits(orders):
    for order in orders:
        for split in order.splits or []:
            yield split


def finished_splits(orders):
    return [split for split in iter_splits(orders) if split.get('status') == FINISHED]


def shift_month(year, month, offset):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


# Dashboard

def seamstress_ranking(orders, seamstresses):
    """Seamstresses by finished pieces, highest first"""
    produced = {}
    packets = {}
    for split in iter_splits(orders):
        key = str(split.get('seamstress_id'))
        if split.get('status') == FINISHED:
            produced[key] = produced.get(key, 0) + split_pieces(split)
        elif split.get('status') == SEWING:
            packets[key] = packets.get(key, 0) + 1

    ranking = []
    for seamstress in seamstresses:
        key = str(seamstress.pk)
        active_packets = packets.get(key, 0)
        ranking.append({
            'id': seamstress.pk,
            'name': seamstress.name,
            'specialty': seamstress.specialty,
            'active': seamstress.active,
            'produced': produced.get(key, 0),
            'active_packets': active_packets,
            'is_idle': seamstress.active and active_packets == 0,
        })
    return sorted(ranking, key=lambda entry: entry['produced'], reverse=True)


def weekly_series(orders, today):
    finished = finished_splits(orders)
    series = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        pieces = sum(split_pieces(s) for s in finished if local_date(s.get('finished_at')) == day)
        series.append({'name': day.strftime('%d/%m'), 'date': day.isoformat(), 'pieces': pieces})
    return series


def monthly_series(orders, today):
    finished = finished_splits(orders)
    series = []
    for offset in range(-5, 1):
        year, month = shift_month(today.year, today.month, offset)
        pieces = 0
        for split in finished:
            day = local_date(split.get('finished_at'))
            if day and day.year == year and day.month == month:
                pieces += split_pieces(split)
        series.append({'name': MONTH_LABELS[month - 1], 'month': f'{year}-{month:02d}', 'pieces': pieces})
    return series


def dashboard(orders, seamstresses, now=None):
    orders = list(orders)
    today = timezone.localtime(now or timezone.now()).date()

    status_counts = {code: 0 for code, _ in STATUS_CHOICES}
    for order in orders:
        status_counts[order.status] = status_counts.get(order.status, 0) + 1

    sewing = [split for split in iter_splits(orders) if split.get('status') == SEWING]

    total_pieces = 0
    month_pieces = 0
    for split in finished_splits(orders):
        pieces = split_pieces(split)
        total_pieces += pieces
        day = local_date(split.get('finished_at'))
        if day and day.year == today.year and day.month == today.month:
            month_pieces += pieces

    ranking = seamstress_ranking(orders, seamstresses)
    return {
        'total_orders': len(orders),
        'status_counts': status_counts,
        'planned_orders': status_counts.get('PLANNED', 0),
        'cutting_orders': status_counts.get('CUTTING', 0),
        'sewing_packets': len(sewing),
        'active_seamstresses': len({str(split.get('seamstress_id')) for split in sewing}),
        'total_pieces_produced': total_pieces,
        'month_pieces_produced': month_pieces,
        'seamstress_ranking': ranking,
        'idle_seamstresses': [entry for entry in ranking if entry['is_idle']],
        'busy_seamstresses': [entry for entry in ranking if not entry['is_idle'] and entry['active_packets'] > 0],
        'weekly': weekly_series(orders, today),
        'monthly': monthly_series(orders, today),
    }


# Reports

def filter_orders(orders, date_from=None, date_to=None, reference=None, status=None, fabric=None, seamstress_id=None):
    """
    Orders matching every given filter. Dates compare the local creation day
    and both ends are inclusive; ``reference`` matches code or description.
    """
    filtered = list(orders)
    if date_from:
        filtered = [o for o in filtered if local_date(o.created_at) >= date_from]
    if date_to:
        filtered = [o for o in filtered if local_date(o.created_at) <= date_to]
    if reference:
        term = reference.casefold()
        filtered = [
            o for o in filtered
            if term in (o.reference_code or '').casefold() or term in (o.description or '').casefold()
        ]
    if status:
        filtered = [o for o in filtered if o.status == status]
    if fabric:
        filtered = [o for o in filtered if o.fabric == fabric]
    if seamstress_id:
        filtered = [
            o for o in filtered
            if any(str(split.get('seamstress_id')) == str(seamstress_id) for split in o.splits or [])
        ]
    return filtered


def report_totals(orders):
    total_cut = 0
    total_sewn = 0
    total_rolls = Decimal('0')
    for order in orders:
        total_cut += piece_count(order.items)
        total_rolls += rolls_count(order.items)
        total_sewn += sum(split_pieces(s) for s in order.splits or [] if s.get('status') == FINISHED)
    return {
        'total_orders': len(orders),
        'total_cut': total_cut,
        'total_sewn': total_sewn,
        'total_rolls': total_rolls,
    }
