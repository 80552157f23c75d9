"""Fixed-point money helpers.

All monetary values are ``Decimal`` amounts with two decimal places, rounded
half-up. Floats are converted through their string form so ``0.1`` stays
``0.10`` instead of dragging binary noise into sums.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

MoneyInput = Decimal | int | float | str


def to_money(value: MoneyInput | None) -> Decimal:
    """Coerce a value to a two-place Decimal (None counts as zero)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"Invalid monetary amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[MoneyInput | None]) -> Decimal:
    """Sum amounts, rounding each term before adding."""
    total = ZERO
    for value in values:
        total += to_money(value)
    return total


def percentage_of(amount: MoneyInput, percentage: MoneyInput) -> Decimal:
    """Return ``percentage`` percent of ``amount``."""
    return to_money(to_money(amount) * Decimal(str(percentage)) / HUNDRED)


def format_money(value: MoneyInput, currency: str = "BRL") -> str:
    """Render an amount for log lines and receipt descriptions."""
    return f"{currency} {to_money(value):,.2f}"
