"""
Fabric stock ledger.

Two things move fabric stock:

* a manual entry, which adds a positive number of rolls;
* cutting, which takes the rolls used by each order item from the fabric
  with the same (name, color).

Matching is exact equality after case-folding; there is no other
normalisation. Quantities are rounded to two decimal places and a cut never
takes stock below zero. Colors without a matching fabric are skipped.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, NamedTuple, Optional

from django.utils import timezone

from confeccao.core.store import TableStore
from .models import Fabric

logger = logging.getLogger('confeccao.inventory')

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')

fabrics = TableStore(Fabric)


class StockInputError(ValueError):
    """Rejected manual stock entry (not a number, or not positive)"""


class CutDeduction(NamedTuple):
    fabric_id: int
    fabric_name: str
    color: str
    rolls_used: Decimal
    stock_before: Decimal
    stock_after: Decimal

    @property
    def clamped(self):
        return self.stock_before - self.rolls_used < ZERO


class CutPlan(NamedTuple):
    deductions: List[CutDeduction]
    unmatched_colors: List[str]


def round_rolls(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_rolls(value) -> Decimal:
    """Best-effort conversion of a stored rolls value; invalid input counts as zero."""
    if value is None or value == '':
        return ZERO
    try:
        return Decimal(str(value).replace(',', '.'))
    except InvalidOperation:
        return ZERO


def parse_roll_amount(raw) -> Decimal:
    """Parse a manual stock entry. Accepts '2,5' as well as '2.5'."""
    if raw is None:
        raise StockInputError('Enter the number of rolls received.')
    try:
        amount = Decimal(str(raw).strip().replace(',', '.'))
    except InvalidOperation:
        raise StockInputError('Enter a valid number greater than zero.')
    if not amount.is_finite() or amount <= 0:
        raise StockInputError('Enter a valid number greater than zero.')
    return amount


def same_fabric(fabric, name, color):
    return (
        (fabric.name or '').casefold() == (name or '').casefold()
        and (fabric.color or '').casefold() == (color or '').casefold()
    )


def find_fabric(fabric_list, name, color) -> Optional[Fabric]:
    for fabric in fabric_list:
        if same_fabric(fabric, name, color):
            return fabric
    return None


def stock_after_entry(current, amount) -> Decimal:
    return round_rolls(to_rolls(current) + amount)


def stock_after_cut(current, rolls_used) -> Decimal:
    return max(ZERO, round_rolls(to_rolls(current) - to_rolls(rolls_used)))


def plan_cut_deductions(fabric_name, items, fabric_list) -> CutPlan:
    """
    Work out the stock change for every order item without writing anything.

    Items of the same color deduct cumulatively from the same fabric record.
    """
    running = {}
    deductions = []
    unmatched = []
    for item in items:
        color = item.get('color', '')
        fabric = find_fabric(fabric_list, fabric_name, color)
        if fabric is None:
            unmatched.append(color)
            continue
        rolls_used = to_rolls(item.get('rolls_used'))
        before = running.get(fabric.pk, round_rolls(to_rolls(fabric.stock_rolls)))
        after = stock_after_cut(before, rolls_used)
        running[fabric.pk] = after
        deductions.append(CutDeduction(fabric.pk, fabric.name, fabric.color, rolls_used, before, after))
    return CutPlan(deductions, unmatched)


def record_stock_entry(fabric, raw_amount, now=None) -> Fabric:
    """Manual entry: add rolls to a fabric. Invalid input is rejected before any write."""
    amount = parse_roll_amount(raw_amount)
    new_stock = stock_after_entry(fabric.stock_rolls, amount)
    updated = fabrics.update(fabric.pk, {
        'stock_rolls': new_stock,
        'updated_at': now or timezone.now(),
    }).record
    logger.info(f"Stock entry for {fabric.name}/{fabric.color}: +{amount} rolls, new balance {new_stock}")
    return updated


def apply_cut_deductions(plan, now=None) -> List[Fabric]:
    """
    Write every deduction of a cut plan, one fabric row at a time.

    There is no wrapping transaction: if a later write fails, earlier ones
    stay applied.
    """
    now = now or timezone.now()
    updated = []
    for deduction in plan.deductions:
        if deduction.clamped:
            logger.warning(
                f"Cut of {deduction.rolls_used} rolls exceeds stock of {deduction.fabric_name}/{deduction.color} "
                f"({deduction.stock_before}); stock set to zero"
            )
        updated.append(fabrics.update(deduction.fabric_id, {
            'stock_rolls': deduction.stock_after,
            'updated_at': now,
        }).record)
    for color in plan.unmatched_colors:
        logger.warning(f"No fabric stock record for color '{color}'; deduction skipped")
    return updated
