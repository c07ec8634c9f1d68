"""Half-up rounding shared by feed normalization and window stats."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int) -> Decimal:
    """Round the scaled binary value half up: ``1.005`` (really 1.00499...) gives ``1.00``."""
    scaled = Decimal(value * 10**places).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return scaled.scaleb(-places)
