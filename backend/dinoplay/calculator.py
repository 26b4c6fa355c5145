# Overview: Pure settlement math; turns end-of-shift counters into a financial breakdown.

"""
Settlement Calculator

RULES:
- Arcade coupons offset billable tokens before pricing; arcade sales floor at 0
- VR coupons are recorded for reporting only and never reduce VR sales
- Net profit is what was sold (arcade + VR + products); the cash float and
  Nequi deposits are working capital / informational figures
- Negative counts or amounts are rejected, derived values are floored at 0

No I/O, no clock: identical inputs always give identical outputs.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from babel.numbers import format_currency


ARCADE_PRICE = 3500
VR_PRICE = 6000
PROMO_GAMES_FOR_COUPON = 6

CURRENCY = "COP"


class CalculationError(ValueError):
    """Raised when a settlement input is out of range."""
    pass


@dataclass(frozen=True)
class SettlementBreakdown:
    tokens_consumed: int
    arcade_sales: int
    vr_sales: int
    product_sales: int
    nequi_deposits: int
    total_sold: int
    net_profit: int

    def to_dict(self) -> dict:
        return asdict(self)


def _require_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value is None:
            raise CalculationError(f"{name} is required")
        if isinstance(value, bool) or not isinstance(value, int):
            raise CalculationError(f"{name} must be an integer")
        if value < 0:
            raise CalculationError(f"{name} cannot be negative")


def calculate_settlement(
    *,
    initial_tokens: int,
    final_tokens: int,
    vr_uses: int,
    arcade_coupons: int,
    vr_coupons: int,
    base_money: int = 0,
    nequi_deposits: int = 0,
    product_sales: int = 0,
    arcade_price: int = ARCADE_PRICE,
    vr_price: int = VR_PRICE,
) -> SettlementBreakdown:
    """
    Compute the settlement breakdown for one shift.

    ``base_money`` and ``vr_coupons`` are validated but do not enter any
    revenue figure. ``final_tokens`` above ``initial_tokens`` means no
    consumption rather than negative consumption.
    """
    _require_non_negative(
        initial_tokens=initial_tokens,
        final_tokens=final_tokens,
        vr_uses=vr_uses,
        arcade_coupons=arcade_coupons,
        vr_coupons=vr_coupons,
        base_money=base_money,
        nequi_deposits=nequi_deposits,
        product_sales=product_sales,
        arcade_price=arcade_price,
        vr_price=vr_price,
    )

    tokens_consumed = max(0, initial_tokens - final_tokens)
    arcade_sales = max(0, (tokens_consumed - arcade_coupons) * arcade_price)
    vr_sales = vr_uses * vr_price

    total_sold = arcade_sales + vr_sales + product_sales

    return SettlementBreakdown(
        tokens_consumed=tokens_consumed,
        arcade_sales=arcade_sales,
        vr_sales=vr_sales,
        product_sales=product_sales,
        nequi_deposits=nequi_deposits,
        total_sold=total_sold,
        net_profit=max(0, total_sold),
    )


def product_sales_total(entries: Iterable) -> int:
    """Sum of ``sold_quantity * unit_price`` over product entries."""
    return sum(entry.sold_quantity * entry.unit_price for entry in entries)


def format_cop(amount: int, locale: str = "es_CO") -> str:
    """Render an amount as Colombian pesos without decimals."""
    return format_currency(amount, CURRENCY, format="¤ #,##0", locale=locale, currency_digits=False)
