from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

CENT = Decimal("0.01")


def money(value: Optional[Union[Decimal, float, int, str]]) -> Decimal:
    """Quantize to cents; a missing aggregate (SQL NULL) counts as zero."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
