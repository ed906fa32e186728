from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from .models import SalesRecord, SalesTotals

ZERO = Decimal("0")


def discount_from_sums(total_sum: Optional[Decimal], final_sum: Optional[Decimal]) -> Decimal:
    """Discount as the difference of the two column sums, floored at zero.

    Per-record differences are never summed, so inconsistent rows cannot
    cancel out the set-wide figure.
    """
    return max(ZERO, (total_sum or ZERO) - (final_sum or ZERO))


def aggregate(records: Iterable[SalesRecord]) -> SalesTotals:
    """Units, amount and discount totals over every record given."""
    units = 0
    total_sum = ZERO
    final_sum = ZERO
    for record in records:
        units += record.quantity or 0
        total_sum += record.total_amount or ZERO
        final_sum += record.final_amount or ZERO
    return SalesTotals(
        total_units=units,
        total_amount=final_sum,
        total_discount=discount_from_sums(total_sum, final_sum),
    )
