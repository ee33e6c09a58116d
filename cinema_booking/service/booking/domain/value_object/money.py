from decimal import ROUND_HALF_UP, Decimal


CENT = Decimal('0.01')


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Round to cents, half-up (floats go through str to avoid binary artefacts)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
