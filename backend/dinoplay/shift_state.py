# Overview: In-shift counter rules for ad-hoc product sales and the informational VR tally.

"""
Shift counters

Both counters live outside the database while a shift is running and only
reach storage at settlement time (product snapshots) or never (VR tally).

PRODUCT SALES:
- sold_quantity starts at 0 and never exceeds initial_quantity
- Each sale is two-phase: propose_sale(index) -> confirm_sale()
- Snapshots use final_quantity = initial_quantity - sold_quantity

VR TALLY:
- Non-negative, one step per press, floored at 0
- Stored under a key that embeds the venue calendar date, so a new day
  starts from 0; keys for other dates are pruned
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, MutableMapping

from .calculator import product_sales_total
from .time_utils import venue_today


VR_COUNTER_PREFIX = "dino_vr_counter_"


class ShiftStateError(ValueError):
    """Raised for invalid counter operations."""
    pass


@dataclass
class ProductEntry:
    product_name: str
    initial_quantity: int
    unit_price: int
    sold_quantity: int = 0

    @property
    def remaining(self) -> int:
        return self.initial_quantity - self.sold_quantity

    @property
    def out_of_stock(self) -> bool:
        return self.remaining <= 0

    def to_dict(self) -> dict:
        return {
            "product_name": self.product_name,
            "initial_quantity": self.initial_quantity,
            "sold_quantity": self.sold_quantity,
            "remaining": self.remaining,
            "unit_price": self.unit_price,
        }


class ProductTally:
    """Per-product sale counters for one shift."""

    def __init__(self, entries: Iterable[ProductEntry]):
        self.entries: list[ProductEntry] = list(entries)
        self.pending_index: int | None = None

    @classmethod
    def from_products(cls, products) -> "ProductTally":
        """Build from the day's CustomProduct rows."""
        return cls(
            ProductEntry(
                product_name=p.product_name,
                initial_quantity=p.quantity,
                unit_price=p.unit_price,
            )
            for p in products
        )

    def _entry(self, index: int) -> ProductEntry:
        if index < 0 or index >= len(self.entries):
            raise ShiftStateError(f"Unknown product index {index}")
        return self.entries[index]

    def propose_sale(self, index: int) -> bool:
        """Phase one. Returns False (and proposes nothing) when out of stock."""
        entry = self._entry(index)
        if entry.sold_quantity >= entry.initial_quantity:
            return False
        self.pending_index = index
        return True

    def confirm_sale(self) -> ProductEntry | None:
        """Phase two: apply one sale to the pending product."""
        if self.pending_index is None:
            return None
        entry = self._entry(self.pending_index)
        self.pending_index = None
        if entry.sold_quantity >= entry.initial_quantity:
            return None
        entry.sold_quantity += 1
        return entry

    def cancel_sale(self) -> None:
        self.pending_index = None

    def record_sold(self, index: int, quantity: int) -> ProductEntry:
        """Apply a count of sales that were already confirmed elsewhere."""
        entry = self._entry(index)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ShiftStateError("sold_quantity must be an integer")
        if quantity < 0:
            raise ShiftStateError("sold_quantity cannot be negative")
        if quantity > entry.initial_quantity:
            raise ShiftStateError(
                f"Cannot sell {quantity} of '{entry.product_name}': only {entry.initial_quantity} in stock"
            )
        entry.sold_quantity = quantity
        return entry

    def index_of(self, product_name: str) -> int:
        for i, entry in enumerate(self.entries):
            if entry.product_name == product_name:
                return i
        raise ShiftStateError(f"Product '{product_name}' is not configured for today")

    @property
    def sales_total(self) -> int:
        return product_sales_total(self.entries)

    def snapshots(self) -> list[dict]:
        """Rows for SettlementProduct; blank-named entries are skipped."""
        return [
            {
                "product_name": e.product_name,
                "initial_quantity": e.initial_quantity,
                "final_quantity": e.initial_quantity - e.sold_quantity,
                "unit_price": e.unit_price,
            }
            for e in self.entries
            if e.product_name.strip()
        ]

    def to_list(self) -> list[dict]:
        return [e.to_dict() for e in self.entries]


# =============================================================================
# VR TALLY
# =============================================================================

def vr_counter_key(day: str, owner: str | int | None = None) -> str:
    if owner is None:
        return f"{VR_COUNTER_PREFIX}{day}"
    return f"{VR_COUNTER_PREFIX}{owner}_{day}"


class VrCounter:
    """Informational VR session tally backed by a date-keyed mapping."""

    def __init__(self, cache: MutableMapping[str, int], *, owner: str | int | None = None, day: str | None = None):
        self.cache = cache
        self.owner = owner
        self.day = day or venue_today()
        self.key = vr_counter_key(self.day, owner)

    @property
    def value(self) -> int:
        return max(0, int(self.cache.get(self.key, 0)))

    def set(self, value: int) -> int:
        value = max(0, value)
        self.cache[self.key] = value
        return value

    def increment(self) -> int:
        return self.set(self.value + 1)

    def decrement(self) -> int:
        return self.set(self.value - 1)

    def prune(self) -> int:
        """Drop this owner's tallies for any other date. Returns count removed."""
        prefix = vr_counter_key("", self.owner)
        stale = [k for k in list(self.cache) if k.startswith(prefix) and k != self.key
                 and k[len(prefix):].count("_") == 0]
        for k in stale:
            del self.cache[k]
        return len(stale)


class VrCounterStore:
    """Process-local mapping shared by request handlers."""

    def __init__(self):
        self._data: dict[str, int] = {}
        self._lock = threading.Lock()

    def counter(self, owner: str | int, day: str | None = None) -> VrCounter:
        return VrCounter(self._data, owner=owner, day=day)

    def __len__(self) -> int:
        return len(self._data)

    def prune(self, day: str) -> int:
        """Drop every owner's tallies for dates other than ``day``."""
        stale = [k for k in self._data if k.rsplit("_", 1)[-1] != day]
        for k in stale:
            del self._data[k]
        return len(stale)

    def update(self, owner: str | int, op: str, day: str | None = None) -> int:
        with self._lock:
            counter = self.counter(owner, day)
            self.prune(counter.day)
            if op == "increment":
                return counter.increment()
            if op == "decrement":
                return counter.decrement()
            if op == "read":
                return counter.value
            raise ShiftStateError(f"Unknown VR counter operation '{op}'")
