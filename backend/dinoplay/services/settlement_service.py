# Overview: Service-layer operations for settlements; encapsulates business logic and database work.

"""
Settlement Service

One settlement per (worker, venue date). The pre-insert lookup gives a
clear error in the normal case and the uq_settlements_worker_date
constraint catches the double-submit case; both surface as
SettlementConflictError.

A settlement is written together with its checklist and product snapshots
in a single commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError

from ..calculator import SettlementBreakdown, calculate_settlement
from ..extensions import db
from ..models import Checklist, DailyConfig, Settlement, SettlementProduct
from ..shift_state import ProductTally
from dinoplay.time_utils import to_storage, venue_now


logger = logging.getLogger(__name__)


class SettlementError(ValueError):
    """Raised for invalid settlement input."""
    pass


class SettlementConflictError(SettlementError):
    """Raised when the worker already settled this date."""
    pass


@dataclass
class ChecklistInput:
    machines_disconnected: bool = False
    machines_cleaned: bool = False
    floor_swept: bool = False
    sign_collected: bool = False

    @property
    def complete(self) -> bool:
        return all((
            self.machines_disconnected,
            self.machines_cleaned,
            self.floor_swept,
            self.sign_collected,
        ))


@dataclass
class ShiftInput:
    """Counters a worker enters at close."""
    final_tokens: int | None
    vr_uses: int = 0
    arcade_coupons: int = 0
    vr_coupons: int = 0
    nequi_deposits: int = 0
    closing_notes: str | None = None
    opening_notes: str | None = None
    sold: dict[int | str, int] = field(default_factory=dict)
    checklist: ChecklistInput = field(default_factory=ChecklistInput)


def get_worker_settlement(worker_id: int, settlement_date: date) -> Settlement | None:
    return db.session.query(Settlement).filter_by(
        worker_id=worker_id,
        settlement_date=settlement_date,
    ).first()


def has_settlement(worker_id: int, settlement_date: date) -> bool:
    return get_worker_settlement(worker_id, settlement_date) is not None


def build_tally(config: DailyConfig, sold: dict[int | str, int] | None = None) -> ProductTally:
    """
    Product counters for the config's catalog with sold counts applied.

    ``sold`` is keyed by catalog index or by product name.
    """
    tally = ProductTally.from_products(config.products)
    for key, quantity in (sold or {}).items():
        index = key if isinstance(key, int) else tally.index_of(key)
        tally.record_sold(index, quantity)
    return tally


def preview(config: DailyConfig, shift: ShiftInput) -> tuple[SettlementBreakdown, ProductTally]:
    """
    Breakdown for the current form state.

    A missing final token count previews as "nothing consumed yet".
    """
    tally = build_tally(config, shift.sold)
    final_tokens = shift.final_tokens if shift.final_tokens is not None else config.initial_tokens
    breakdown = calculate_settlement(
        initial_tokens=config.initial_tokens,
        final_tokens=final_tokens,
        vr_uses=shift.vr_uses,
        arcade_coupons=shift.arcade_coupons,
        vr_coupons=shift.vr_coupons,
        base_money=config.base_money,
        nequi_deposits=shift.nequi_deposits,
        product_sales=tally.sales_total,
    )
    return breakdown, tally


def create_settlement(
    *,
    worker_id: int,
    config: DailyConfig,
    shift: ShiftInput,
    now: datetime | None = None,
) -> Settlement:
    """
    Persist the worker's settlement for the config's date.

    Raises:
        SettlementError: final tokens missing, checklist incomplete,
            product oversold or other invalid counters
        SettlementConflictError: a settlement already exists for this worker/date
    """
    settlement_date = config.config_date

    if shift.final_tokens is None:
        raise SettlementError("final_tokens is required")
    if not shift.checklist.complete:
        raise SettlementError("Closing checklist must be complete before saving")

    if has_settlement(worker_id, settlement_date):
        raise SettlementConflictError("A settlement for this worker and date already exists")

    breakdown, tally = preview(config, shift)

    settlement = Settlement(
        settlement_date=settlement_date,
        worker_id=worker_id,
        initial_tokens=config.initial_tokens,
        final_tokens=shift.final_tokens,
        vr_uses=shift.vr_uses,
        arcade_coupons=shift.arcade_coupons,
        vr_coupons=shift.vr_coupons,
        base_money=config.base_money,
        arcade_sales=breakdown.arcade_sales,
        vr_sales=breakdown.vr_sales,
        product_sales=breakdown.product_sales,
        gross_total=breakdown.total_sold,
        net_profit=breakdown.net_profit,
        nequi_deposits=shift.nequi_deposits,
        opening_notes=shift.opening_notes or "",
        closing_notes=shift.closing_notes or "",
    )
    settlement.checklist = Checklist(
        machines_disconnected=shift.checklist.machines_disconnected,
        machines_cleaned=shift.checklist.machines_cleaned,
        floor_swept=shift.checklist.floor_swept,
        sign_collected=shift.checklist.sign_collected,
        completed_at=to_storage(venue_now(now)),
    )
    settlement.products = [SettlementProduct(**row) for row in tally.snapshots()]

    db.session.add(settlement)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Duplicate settlement rejected for worker %s on %s", worker_id, settlement_date)
        raise SettlementConflictError("A settlement for this worker and date already exists") from exc

    logger.info(
        "Saved settlement %s for worker %s on %s (net %s)",
        settlement.id, worker_id, settlement_date.isoformat(), settlement.net_profit,
    )
    return settlement


def list_recent(limit: int = 50) -> list[Settlement]:
    return (
        db.session.query(Settlement)
        .order_by(Settlement.settlement_date.desc(), Settlement.id.desc())
        .limit(limit)
        .all()
    )


def list_for_date(settlement_date: date) -> list[Settlement]:
    return (
        db.session.query(Settlement)
        .filter_by(settlement_date=settlement_date)
        .order_by(Settlement.id)
        .all()
    )


def list_between(start: date, end: date | None = None) -> list[Settlement]:
    query = db.session.query(Settlement).filter(Settlement.settlement_date >= start)
    if end is not None:
        query = query.filter(Settlement.settlement_date <= end)
    return query.order_by(Settlement.settlement_date.asc(), Settlement.id.asc()).all()


def dates_with_settlements() -> list[date]:
    rows = (
        db.session.query(Settlement.settlement_date)
        .distinct()
        .order_by(Settlement.settlement_date.asc())
        .all()
    )
    return [row.settlement_date for row in rows]


def get_settlement(settlement_id: int) -> Settlement | None:
    return db.session.get(Settlement, settlement_id)


def delete_settlement(settlement_id: int) -> bool:
    """Delete a settlement with its checklist and product snapshots."""
    settlement = get_settlement(settlement_id)
    if not settlement:
        return False

    db.session.delete(settlement)
    db.session.commit()
    logger.info("Deleted settlement %s", settlement_id)
    return True
