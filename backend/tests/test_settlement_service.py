"""
Settlement and daily configuration service tests.

Verifies:
- Daily config product lists are replaced wholesale
- A settlement stores derived money, product snapshots and the checklist
- One settlement per worker and date (pre-check and unique constraint)
- Deleting a settlement removes its checklist and snapshots
"""

from datetime import date, datetime, timezone

import pytest

from dinoplay.models import Checklist, CustomProduct, Settlement, SettlementProduct
from dinoplay.services import daily_config_service, reporting_service, settlement_service, worker_service
from dinoplay.services.daily_config_service import DailyConfigError, ProductSpec
from dinoplay.services.settlement_service import (
    ChecklistInput,
    SettlementConflictError,
    SettlementError,
    ShiftInput,
)
from dinoplay.shift_state import ShiftStateError

from conftest import TEST_ROUNDS


SHIFT_DATE = date(2026, 10, 19)


def _config(**overrides):
    values = dict(
        config_date=SHIFT_DATE,
        base_money=60000,
        initial_tokens=100,
        products=[ProductSpec("Gaseosa", 5, 3000), ProductSpec("Papas", 3, 2500)],
    )
    values.update(overrides)
    config, _ = daily_config_service.save_config(**values)
    return config


def _shift(**overrides):
    values = dict(
        final_tokens=20,
        vr_uses=3,
        arcade_coupons=2,
        vr_coupons=1,
        nequi_deposits=20000,
        closing_notes="Todo en orden",
        sold={0: 2},
        checklist=ChecklistInput(True, True, True, True),
    )
    values.update(overrides)
    return ShiftInput(**values)


# =============================================================================
# DAILY CONFIG
# =============================================================================


class TestDailyConfig:

    def test_create_then_update(self, db_session):
        config, created = daily_config_service.save_config(
            config_date=SHIFT_DATE, base_money=50000, initial_tokens=80,
        )
        assert created
        assert config.opening_hour == "09:00"
        assert config.closing_hour == "21:00"

        again, created = daily_config_service.save_config(
            config_date=SHIFT_DATE, base_money=70000, initial_tokens=90, opening_hour="10:00",
        )
        assert not created
        assert again.id == config.id
        assert again.base_money == 70000
        assert again.opening_hour == "10:00"

    def test_products_replaced_wholesale(self, db_session):
        config = _config()
        assert [p.product_name for p in daily_config_service.get_products(config.id)] == ["Gaseosa", "Papas"]

        _config(products=[ProductSpec("Helado", 4, 4000)])

        products = daily_config_service.get_products(config.id)
        assert [(p.product_name, p.quantity, p.unit_price) for p in products] == [("Helado", 4, 4000)]
        assert db_session.query(CustomProduct).count() == 1

    def test_blank_product_rows_dropped(self, db_session):
        config = _config(products=[ProductSpec("  ", 2, 1000), ProductSpec(" Chicle ", 10, 500)])
        assert [p.product_name for p in config.products] == ["Chicle"]

    def test_rejects_negative_values(self, db_session):
        with pytest.raises(DailyConfigError):
            _config(base_money=-1)
        with pytest.raises(DailyConfigError):
            _config(products=[ProductSpec("Gaseosa", -2, 3000)])

    def test_rejects_malformed_hours(self, db_session):
        with pytest.raises(DailyConfigError):
            _config(opening_hour="99:99")
        with pytest.raises(DailyConfigError):
            _config(closing_hour="not-an-hour-at-all")
        assert daily_config_service.get_config(SHIFT_DATE) is None

    def test_hours_are_trimmed(self, db_session):
        config = _config(opening_hour=" 08:30 ")
        assert config.opening_hour == "08:30"

    def test_missing_date_is_none(self, db_session):
        assert daily_config_service.get_config(date(2030, 1, 1)) is None


# =============================================================================
# SETTLEMENTS
# =============================================================================


class TestCreateSettlement:

    def test_saves_derived_money_and_snapshots(self, db_session, worker):
        config = _config()
        saved_at = datetime(2026, 10, 20, 2, 15, tzinfo=timezone.utc)

        settlement = settlement_service.create_settlement(
            worker_id=worker.id, config=config, shift=_shift(), now=saved_at,
        )

        assert settlement.settlement_date == SHIFT_DATE
        assert settlement.arcade_sales == 273000
        assert settlement.vr_sales == 18000
        assert settlement.product_sales == 6000
        assert settlement.gross_total == 297000
        assert settlement.net_profit == 297000
        assert settlement.base_money == 60000
        assert settlement.nequi_deposits == 20000

        snapshots = {p.product_name: p for p in settlement.products}
        assert snapshots["Gaseosa"].final_quantity == 3
        assert snapshots["Gaseosa"].sold_quantity == 2
        assert snapshots["Papas"].final_quantity == 3

        assert settlement.checklist.sign_collected is True
        assert settlement.checklist.completed_at == datetime(2026, 10, 20, 2, 15)

    def test_second_settlement_same_day_rejected(self, db_session, worker):
        config = _config()
        settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())

        with pytest.raises(SettlementConflictError):
            settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())

        assert db_session.query(Settlement).count() == 1

    def test_unique_constraint_catches_race(self, db_session, worker, monkeypatch):
        config = _config()
        settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())

        # Both submissions pass the pre-check
        monkeypatch.setattr(settlement_service, "has_settlement", lambda *args: False)

        with pytest.raises(SettlementConflictError):
            settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())

        assert db_session.query(Settlement).count() == 1

    def test_other_worker_same_day_allowed(self, db_session, worker, other_worker):
        config = _config()
        settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())
        settlement_service.create_settlement(worker_id=other_worker.id, config=config, shift=_shift())

        assert len(settlement_service.list_for_date(SHIFT_DATE)) == 2

    def test_requires_final_tokens(self, db_session, worker):
        with pytest.raises(SettlementError):
            settlement_service.create_settlement(
                worker_id=worker.id, config=_config(), shift=_shift(final_tokens=None),
            )

    def test_requires_complete_checklist(self, db_session, worker):
        with pytest.raises(SettlementError):
            settlement_service.create_settlement(
                worker_id=worker.id,
                config=_config(),
                shift=_shift(checklist=ChecklistInput(True, True, True, False)),
            )
        assert db_session.query(Settlement).count() == 0

    def test_oversold_product_rejected(self, db_session, worker):
        with pytest.raises(ShiftStateError):
            settlement_service.create_settlement(
                worker_id=worker.id, config=_config(), shift=_shift(sold={"Papas": 4}),
            )

    def test_preview_without_final_tokens(self, db_session):
        breakdown, tally = settlement_service.preview(_config(), _shift(final_tokens=None, sold={1: 1}))

        assert breakdown.tokens_consumed == 0
        assert breakdown.product_sales == 2500
        assert tally.entries[1].sold_quantity == 1


class TestBrowseAndDelete:

    def test_delete_cascades(self, db_session, worker):
        settlement = settlement_service.create_settlement(worker_id=worker.id, config=_config(), shift=_shift())

        assert settlement_service.delete_settlement(settlement.id)
        assert db_session.query(Settlement).count() == 0
        assert db_session.query(SettlementProduct).count() == 0
        assert db_session.query(Checklist).count() == 0

        assert not settlement_service.delete_settlement(settlement.id)

    def test_dates_with_settlements(self, db_session, worker):
        settlement_service.create_settlement(worker_id=worker.id, config=_config(), shift=_shift())
        settlement_service.create_settlement(
            worker_id=worker.id, config=_config(config_date=date(2026, 10, 17)), shift=_shift(),
        )

        assert settlement_service.dates_with_settlements() == [date(2026, 10, 17), SHIFT_DATE]
        assert [s.settlement_date for s in settlement_service.list_recent(10)] == [SHIFT_DATE, date(2026, 10, 17)]


class TestAnalytics:

    def test_window_totals_and_rows(self, db_session, worker, other_worker):
        config = _config()
        settlement_service.create_settlement(worker_id=worker.id, config=config, shift=_shift())
        settlement_service.create_settlement(worker_id=other_worker.id, config=config, shift=_shift(sold={}))
        settlement_service.create_settlement(
            worker_id=worker.id, config=_config(config_date=date(2026, 8, 1)), shift=_shift(),
        )

        report = reporting_service.analytics(30, today=SHIFT_DATE)

        assert report["start"] == "2026-09-19"
        assert report["totals"]["settlement_count"] == 2
        assert report["totals"]["net_profit"] == 297000 + 291000
        assert report["totals"]["product_sales"] == 6000
        assert len(report["rows"]) == 1
        assert report["rows"][0]["settlements"] == 2
        assert report["rows"][0]["date"] == "2026-10-19"

    def test_rejects_bad_window(self, db_session):
        with pytest.raises(reporting_service.ReportError):
            reporting_service.analytics(0, today=SHIFT_DATE)


# =============================================================================
# WORKERS
# =============================================================================


class TestWorkers:

    def test_create_and_list(self, db_session):
        worker = worker_service.create_worker(
            full_name="Camila Rojas", email="Camila@DinoPlay.test", password="Dinos2026", rounds=TEST_ROUNDS,
        )
        assert worker.email == "camila@dinoplay.test"
        assert worker.role == "worker"
        assert [w.id for w in worker_service.list_workers()] == [worker.id]

    @pytest.mark.parametrize("field", ["full_name", "email", "password"])
    def test_required_fields(self, db_session, field):
        values = dict(full_name="Camila Rojas", email="camila@dinoplay.test", password="Dinos2026")
        values[field] = ""
        with pytest.raises(worker_service.WorkerError):
            worker_service.create_worker(rounds=TEST_ROUNDS, **values)

    def test_duplicate_email(self, db_session, worker):
        with pytest.raises(worker_service.WorkerError):
            worker_service.create_worker(
                full_name="Otra", email=worker.email, password="Dinos2026", rounds=TEST_ROUNDS,
            )

    def test_toggle_active(self, db_session, worker):
        assert worker_service.set_active(worker.id).is_active is False
        assert worker_service.set_active(worker.id).is_active is True
        assert worker_service.set_active(worker.id, False).is_active is False

    def test_admin_is_not_a_worker(self, db_session, admin):
        with pytest.raises(worker_service.WorkerError):
            worker_service.set_active(admin.id, False)

    def test_names_by_id(self, db_session, worker, other_worker):
        assert worker_service.names_by_id([worker.id, other_worker.id]) == {
            worker.id: "Ana Torres",
            other_worker.id: "Luis Pardo",
        }
