from __future__ import annotations

from ..extensions import db
from dinoplay.time_utils import to_utc_z


class Settlement(db.Model):
    """
    End-of-shift settlement for one worker on one venue date.

    IMMUTABLE: Derived money fields are computed once at save time and
    stored; they are never recomputed on read. Admins may delete a row,
    which removes its checklist and product snapshots with it.
    """
    __tablename__ = "settlements"
    __table_args__ = (
        db.UniqueConstraint("worker_id", "settlement_date", name="uq_settlements_worker_date"),
        db.Index("ix_settlements_date", "settlement_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    settlement_date = db.Column(db.Date, nullable=False)
    worker_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    # Shift counters
    initial_tokens = db.Column(db.Integer, nullable=False, default=0)
    final_tokens = db.Column(db.Integer, nullable=False, default=0)
    vr_uses = db.Column(db.Integer, nullable=False, default=0)
    arcade_coupons = db.Column(db.Integer, nullable=False, default=0)
    vr_coupons = db.Column(db.Integer, nullable=False, default=0)

    # Money (pesos); base_money copied from the day's config
    base_money = db.Column(db.Integer, nullable=False, default=0)
    arcade_sales = db.Column(db.Integer, nullable=False, default=0)
    vr_sales = db.Column(db.Integer, nullable=False, default=0)
    product_sales = db.Column(db.Integer, nullable=False, default=0)
    gross_total = db.Column(db.Integer, nullable=False, default=0)
    net_profit = db.Column(db.Integer, nullable=False, default=0)

    # Informational only
    nequi_deposits = db.Column(db.Integer, nullable=False, default=0)

    opening_notes = db.Column(db.Text, nullable=True)
    closing_notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    worker = db.relationship("User", backref=db.backref("settlements", lazy=True))
    products = db.relationship(
        "SettlementProduct",
        backref=db.backref("settlement", lazy=True),
        cascade="all, delete-orphan",
        order_by="SettlementProduct.id",
        lazy=True,
    )
    checklist = db.relationship(
        "Checklist",
        uselist=False,
        backref=db.backref("settlement", lazy=True),
        cascade="all, delete-orphan",
    )

    def to_dict(self, detail: bool = False) -> dict:
        data = {
            "id": self.id,
            "settlement_date": self.settlement_date.isoformat(),
            "worker_id": self.worker_id,
            "initial_tokens": self.initial_tokens,
            "final_tokens": self.final_tokens,
            "vr_uses": self.vr_uses,
            "arcade_coupons": self.arcade_coupons,
            "vr_coupons": self.vr_coupons,
            "base_money": self.base_money,
            "arcade_sales": self.arcade_sales,
            "vr_sales": self.vr_sales,
            "product_sales": self.product_sales,
            "gross_total": self.gross_total,
            "net_profit": self.net_profit,
            "nequi_deposits": self.nequi_deposits,
            "opening_notes": self.opening_notes,
            "closing_notes": self.closing_notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if detail:
            data["products"] = [p.to_dict() for p in self.products]
            data["checklist"] = self.checklist.to_dict() if self.checklist else None
        return data


class SettlementProduct(db.Model):
    """Snapshot of one ad-hoc product's stock movement during a settled shift."""
    __tablename__ = "settlement_products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    settlement_id = db.Column(db.Integer, db.ForeignKey("settlements.id", ondelete="CASCADE"), nullable=False, index=True)

    product_name = db.Column(db.String(128), nullable=False)
    initial_quantity = db.Column(db.Integer, nullable=False, default=0)
    final_quantity = db.Column(db.Integer, nullable=False, default=0)
    unit_price = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def sold_quantity(self) -> int:
        return self.initial_quantity - self.final_quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "settlement_id": self.settlement_id,
            "product_name": self.product_name,
            "initial_quantity": self.initial_quantity,
            "final_quantity": self.final_quantity,
            "sold_quantity": self.sold_quantity,
            "unit_price": self.unit_price,
        }


class Checklist(db.Model):
    """
    Closing checklist, one per settlement.

    sign_collected is stored alongside the other three flags; all four must
    be true for a settlement to be accepted.
    """
    __tablename__ = "checklists"
    __table_args__ = (
        db.UniqueConstraint("settlement_id", name="uq_checklists_settlement"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    settlement_id = db.Column(db.Integer, db.ForeignKey("settlements.id", ondelete="CASCADE"), nullable=False, index=True)

    machines_disconnected = db.Column(db.Boolean, nullable=False, default=False)
    machines_cleaned = db.Column(db.Boolean, nullable=False, default=False)
    floor_swept = db.Column(db.Boolean, nullable=False, default=False)
    sign_collected = db.Column(db.Boolean, nullable=False, default=False)

    # UTC instant the checklist was completed
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "settlement_id": self.settlement_id,
            "machines_disconnected": self.machines_disconnected,
            "machines_cleaned": self.machines_cleaned,
            "floor_swept": self.floor_swept,
            "sign_collected": self.sign_collected,
            "completed_at": to_utc_z(self.completed_at) if self.completed_at else None,
        }
