"""
Shift counter tests: two-phase product sales and the VR tally.
"""

import pytest

from dinoplay.shift_state import (
    ProductEntry,
    ProductTally,
    ShiftStateError,
    VrCounter,
    VrCounterStore,
    vr_counter_key,
)


def _tally():
    return ProductTally([
        ProductEntry("Gaseosa", 5, 3000),
        ProductEntry("Papas", 3, 2500),
    ])


def _sell(tally, index):
    if not tally.propose_sale(index):
        return None
    return tally.confirm_sale()


class TestProductTally:

    def test_sold_out_after_five(self):
        tally = _tally()
        for _ in range(5):
            assert _sell(tally, 0) is not None

        entry = tally.entries[0]
        assert entry.sold_quantity == 5
        assert entry.out_of_stock

        assert tally.propose_sale(0) is False
        assert _sell(tally, 0) is None
        assert entry.sold_quantity == 5

    def test_cancel_applies_nothing(self):
        tally = _tally()
        assert tally.propose_sale(1)
        tally.cancel_sale()

        assert tally.confirm_sale() is None
        assert tally.entries[1].sold_quantity == 0

    def test_confirm_without_proposal(self):
        assert _tally().confirm_sale() is None

    def test_unknown_index(self):
        with pytest.raises(ShiftStateError):
            _tally().propose_sale(7)

    def test_sales_total(self):
        tally = _tally()
        _sell(tally, 0)
        _sell(tally, 0)
        _sell(tally, 1)
        assert tally.sales_total == 8500

    def test_record_sold_bounds(self):
        tally = _tally()
        tally.record_sold(1, 3)
        assert tally.entries[1].remaining == 0

        with pytest.raises(ShiftStateError):
            tally.record_sold(1, 4)
        with pytest.raises(ShiftStateError):
            tally.record_sold(1, -1)

    def test_index_of(self):
        tally = _tally()
        assert tally.index_of("Papas") == 1
        with pytest.raises(ShiftStateError):
            tally.index_of("Helado")

    def test_snapshots_skip_blank_names(self):
        tally = ProductTally([
            ProductEntry("Gaseosa", 5, 3000, sold_quantity=2),
            ProductEntry("   ", 4, 1000),
        ])
        assert tally.snapshots() == [{
            "product_name": "Gaseosa",
            "initial_quantity": 5,
            "final_quantity": 3,
            "unit_price": 3000,
        }]


class TestVrCounter:

    def test_floor_at_zero(self):
        counter = VrCounter({}, day="2026-10-19")
        assert counter.decrement() == 0
        assert counter.increment() == 1
        assert counter.increment() == 2
        assert counter.decrement() == 1

    def test_key_embeds_date(self):
        cache = {}
        VrCounter(cache, day="2026-10-19").increment()
        assert cache == {vr_counter_key("2026-10-19"): 1}

    def test_new_day_starts_at_zero(self):
        cache = {}
        VrCounter(cache, day="2026-10-18").set(7)
        assert VrCounter(cache, day="2026-10-19").value == 0

    def test_prune_removes_other_dates_only_for_owner(self):
        cache = {
            vr_counter_key("2026-10-17", owner=1): 3,
            vr_counter_key("2026-10-18", owner=1): 5,
            vr_counter_key("2026-10-18", owner=2): 4,
        }
        counter = VrCounter(cache, owner=1, day="2026-10-19")

        assert counter.prune() == 2
        assert cache == {vr_counter_key("2026-10-18", owner=2): 4}


class TestVrCounterStore:

    def test_owners_are_independent(self):
        store = VrCounterStore()
        store.update(1, "increment", day="2026-10-19")
        store.update(1, "increment", day="2026-10-19")
        store.update(2, "increment", day="2026-10-19")

        assert store.update(1, "read", day="2026-10-19") == 2
        assert store.update(2, "read", day="2026-10-19") == 1

    def test_update_drops_every_owners_stale_days(self):
        store = VrCounterStore()
        store.update(1, "increment", day="2026-10-18")
        store.update(2, "increment", day="2026-10-18")
        store.update(3, "increment", day="2026-10-18")

        store.update(1, "read", day="2026-10-19")

        assert len(store) == 0
        assert store.update(2, "read", day="2026-10-19") == 0

    def test_prune_keeps_current_day(self):
        store = VrCounterStore()
        store.update(1, "increment", day="2026-10-19")
        store.update(2, "increment", day="2026-10-19")

        assert store.prune("2026-10-19") == 0
        assert len(store) == 2

    def test_unknown_operation(self):
        with pytest.raises(ShiftStateError):
            VrCounterStore().update(1, "reset", day="2026-10-19")
