from __future__ import annotations

from ..extensions import db
from dinoplay.time_utils import to_utc_z


DEFAULT_OPENING_HOUR = "09:00"
DEFAULT_CLOSING_HOUR = "21:00"


class DailyConfig(db.Model):
    """
    Day parameters set by an administrator: cash float, token stock, hours.

    At most one row per venue calendar date.
    """
    __tablename__ = "daily_configs"
    __table_args__ = (
        db.UniqueConstraint("config_date", name="uq_daily_configs_date"),
        db.CheckConstraint("base_money >= 0", name="ck_daily_configs_base_money"),
        db.CheckConstraint("initial_tokens >= 0", name="ck_daily_configs_initial_tokens"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    config_date = db.Column(db.Date, nullable=False, index=True)

    # Pesos
    base_money = db.Column(db.Integer, nullable=False, default=0)
    initial_tokens = db.Column(db.Integer, nullable=False, default=0)

    # "HH:MM"
    opening_hour = db.Column(db.String(5), nullable=True, default=DEFAULT_OPENING_HOUR)
    closing_hour = db.Column(db.String(5), nullable=True, default=DEFAULT_CLOSING_HOUR)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    products = db.relationship(
        "CustomProduct",
        backref=db.backref("config", lazy=True),
        cascade="all, delete-orphan",
        order_by="CustomProduct.id",
        lazy=True,
    )

    def to_dict(self, include_products: bool = True) -> dict:
        data = {
            "id": self.id,
            "config_date": self.config_date.isoformat(),
            "base_money": self.base_money,
            "initial_tokens": self.initial_tokens,
            "opening_hour": self.opening_hour or DEFAULT_OPENING_HOUR,
            "closing_hour": self.closing_hour or DEFAULT_CLOSING_HOUR,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_products:
            data["products"] = [p.to_dict() for p in self.products]
        return data


class CustomProduct(db.Model):
    """Ad-hoc product stocked for one day; replaced wholesale on every config save."""
    __tablename__ = "custom_products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_custom_products_quantity"),
        db.CheckConstraint("unit_price >= 0", name="ck_custom_products_unit_price"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    config_id = db.Column(db.Integer, db.ForeignKey("daily_configs.id", ondelete="CASCADE"), nullable=False, index=True)

    product_name = db.Column(db.String(128), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    unit_price = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "config_id": self.config_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
        }
