# Overview: Service-layer operations for daily configuration; encapsulates business logic and database work.

"""
Daily Configuration Service

One config per venue date: starting cash float, token stock, hours and the
ad-hoc product catalog. Saving a config replaces its product list
wholesale (delete all, insert new); products are never patched one by one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from ..extensions import db
from ..models import DailyConfig, CustomProduct
from ..models.daily_config import DEFAULT_OPENING_HOUR, DEFAULT_CLOSING_HOUR
from ..validation import MAX_COUNT, MAX_MONEY, is_hour_of_day


logger = logging.getLogger(__name__)


class DailyConfigError(ValueError):
    """Raised for invalid daily configuration input."""
    pass


@dataclass(frozen=True)
class ProductSpec:
    product_name: str
    quantity: int
    unit_price: int


def get_config(config_date: date) -> DailyConfig | None:
    """Config for a venue date, or None when the admin has not set one."""
    return db.session.query(DailyConfig).filter_by(config_date=config_date).first()


def get_products(config_id: int) -> list[CustomProduct]:
    return db.session.query(CustomProduct).filter_by(config_id=config_id).order_by(CustomProduct.id).all()


def _validate_products(products: list[ProductSpec]) -> list[ProductSpec]:
    cleaned = []
    for p in products:
        name = (p.product_name or "").strip()
        # Rows left blank in the editor are dropped
        if not name:
            continue
        if p.quantity < 0 or p.quantity > MAX_COUNT:
            raise DailyConfigError(f"Invalid quantity for '{name}'")
        if p.unit_price < 0 or p.unit_price > MAX_MONEY:
            raise DailyConfigError(f"Invalid unit price for '{name}'")
        cleaned.append(ProductSpec(product_name=name, quantity=p.quantity, unit_price=p.unit_price))
    return cleaned


def _hour(name: str, value: str | None, default: str) -> str:
    if value is None or value == "":
        return default
    if not is_hour_of_day(value):
        raise DailyConfigError(f"{name} must be formatted as HH:MM")
    return value.strip()


def save_config(
    *,
    config_date: date,
    base_money: int,
    initial_tokens: int,
    opening_hour: str | None = None,
    closing_hour: str | None = None,
    products: list[ProductSpec] | None = None,
    created_by: int | None = None,
) -> tuple[DailyConfig, bool]:
    """
    Create or update the config for a date and replace its product list.

    Returns (config, created).
    """
    if base_money < 0:
        raise DailyConfigError("base_money cannot be negative")
    if initial_tokens < 0:
        raise DailyConfigError("initial_tokens cannot be negative")

    opening_hour = _hour("opening_hour", opening_hour, DEFAULT_OPENING_HOUR)
    closing_hour = _hour("closing_hour", closing_hour, DEFAULT_CLOSING_HOUR)
    cleaned = _validate_products(products or [])

    config = get_config(config_date)
    created = config is None

    if created:
        config = DailyConfig(config_date=config_date, created_by=created_by)
        db.session.add(config)

    config.base_money = base_money
    config.initial_tokens = initial_tokens
    config.opening_hour = opening_hour
    config.closing_hour = closing_hour

    # delete-orphan cascade removes every previous row
    config.products = [
        CustomProduct(
            product_name=spec.product_name,
            quantity=spec.quantity,
            unit_price=spec.unit_price,
        )
        for spec in cleaned
    ]

    db.session.commit()

    logger.info(
        "%s daily config for %s with %d product(s)",
        "Created" if created else "Updated",
        config_date.isoformat(),
        len(cleaned),
    )
    return config, created
