# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/dinoplay/routes/admin.py
"""
Admin routes.

Provides endpoints for:
- Daily configuration (cash float, tokens, hours, product catalog)
- Settlement browsing, detail, history by date and deletion
- Worker accounts (list, create, activate/deactivate)
- Analytics over the trailing window

All endpoints require an authenticated admin.
"""

from flask import Blueprint, request, jsonify, g, current_app

from .. import validation
from ..decorators import require_auth, require_role
from ..extensions import db
from ..models.auth import ROLE_ADMIN
from ..models.daily_config import DEFAULT_OPENING_HOUR, DEFAULT_CLOSING_HOUR
from ..services import daily_config_service, reporting_service, settlement_service, worker_service
from ..services.auth_service import PasswordValidationError
from ..services.daily_config_service import ProductSpec
from ..services.worker_service import WorkerError
from ..validation import ValidationError
from dinoplay.time_utils import parse_venue_date, venue_today_date

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _date_arg(name: str = "date"):
    raw = request.args.get(name)
    if raw is None:
        return venue_today_date()
    return parse_venue_date(raw)


def _with_worker_names(settlements) -> list[dict]:
    names = worker_service.names_by_id(s.worker_id for s in settlements)
    result = []
    for s in settlements:
        d = s.to_dict()
        d["worker_name"] = names.get(s.worker_id, "Desconocido")
        result.append(d)
    return result


# =============================================================================
# DAILY CONFIGURATION
# =============================================================================

@admin_bp.get("/daily-config")
@require_auth
@require_role(ROLE_ADMIN)
def get_daily_config():
    """
    Config for a date (defaults to today at the venue).

    Query params:
    - date: YYYY-MM-DD
    """
    try:
        config_date = _date_arg()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    config = daily_config_service.get_config(config_date)
    return jsonify({
        "date": config_date.isoformat(),
        "config": config.to_dict() if config else None,
    }), 200


@admin_bp.put("/daily-config")
@require_auth
@require_role(ROLE_ADMIN)
def save_daily_config():
    """
    Create or update the config for a date; the product list is replaced.

    Request body:
    {
        "config_date": "2026-10-19",
        "base_money": 60000,
        "initial_tokens": 100,
        "opening_hour": "09:00",
        "closing_hour": "21:00",
        "products": [{"product_name": "Gaseosa", "quantity": 5, "unit_price": 3000}]
    }
    """
    try:
        data = validation.json_object(request.get_json(silent=True))

        raw_date = data.get("config_date")
        config_date = parse_venue_date(raw_date) if raw_date else venue_today_date()

        raw_products = data.get("products") or []
        if not isinstance(raw_products, list):
            return jsonify({"error": "products must be a list"}), 400
        products = []
        for item in raw_products:
            if not isinstance(item, dict):
                return jsonify({"error": "each product must be an object"}), 400
            products.append(ProductSpec(
                product_name=str(item.get("product_name") or ""),
                quantity=validation.non_negative_int(item, "quantity"),
                unit_price=validation.money(item, "unit_price"),
            ))

        config, created = daily_config_service.save_config(
            config_date=config_date,
            base_money=validation.money(data, "base_money"),
            initial_tokens=validation.non_negative_int(data, "initial_tokens"),
            opening_hour=validation.hour_of_day(data, "opening_hour", DEFAULT_OPENING_HOUR),
            closing_hour=validation.hour_of_day(data, "closing_hour", DEFAULT_CLOSING_HOUR),
            products=products,
            created_by=g.current_user.id,
        )

        return jsonify({"config": config.to_dict(), "created": created}), 201 if created else 200

    except ValueError as e:
        db.session.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to save daily config")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# SETTLEMENTS
# =============================================================================

@admin_bp.get("/settlements")
@require_auth
@require_role(ROLE_ADMIN)
def list_settlements():
    """Latest settlements first, with worker names."""
    limit = request.args.get("limit", current_app.config["SETTLEMENT_LIST_LIMIT"], type=int)
    limit = max(1, min(limit, 500))

    settlements = settlement_service.list_recent(limit)
    rows = _with_worker_names(settlements)
    return jsonify({"settlements": rows, "count": len(rows)}), 200


@admin_bp.get("/settlements/<int:settlement_id>")
@require_auth
@require_role(ROLE_ADMIN)
def get_settlement(settlement_id: int):
    settlement = settlement_service.get_settlement(settlement_id)
    if not settlement:
        return jsonify({"error": "Settlement not found"}), 404

    data = settlement.to_dict(detail=True)
    data["worker_name"] = worker_service.names_by_id([settlement.worker_id]).get(settlement.worker_id, "Desconocido")
    return jsonify({"settlement": data}), 200


@admin_bp.delete("/settlements/<int:settlement_id>")
@require_auth
@require_role(ROLE_ADMIN)
def delete_settlement(settlement_id: int):
    try:
        if not settlement_service.delete_settlement(settlement_id):
            return jsonify({"error": "Settlement not found"}), 404
        return jsonify({"message": "Settlement deleted"}), 200
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to delete settlement")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.get("/history/dates")
@require_auth
@require_role(ROLE_ADMIN)
def history_dates():
    """Venue dates that have at least one settlement (calendar highlights)."""
    dates = settlement_service.dates_with_settlements()
    return jsonify({"dates": [d.isoformat() for d in dates]}), 200


@admin_bp.get("/history")
@require_auth
@require_role(ROLE_ADMIN)
def history_for_date():
    """
    Settlements with products and checklist for one venue date.

    Query params:
    - date: YYYY-MM-DD (defaults to today at the venue)
    """
    try:
        selected = _date_arg()
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    settlements = settlement_service.list_for_date(selected)
    names = worker_service.names_by_id(s.worker_id for s in settlements)

    rows = []
    for s in settlements:
        d = s.to_dict(detail=True)
        d["worker_name"] = names.get(s.worker_id, "Desconocido")
        rows.append(d)

    return jsonify({"date": selected.isoformat(), "settlements": rows}), 200


# =============================================================================
# WORKERS
# =============================================================================

@admin_bp.get("/workers")
@require_auth
@require_role(ROLE_ADMIN)
def list_workers():
    workers = worker_service.list_workers()
    return jsonify({"workers": [w.to_dict() for w in workers], "count": len(workers)}), 200


@admin_bp.post("/workers")
@require_auth
@require_role(ROLE_ADMIN)
def create_worker():
    """
    Create a worker account.

    Request body:
    - full_name: str (required)
    - email: str (required)
    - password: str (required)
    - phone: str (optional)
    """
    try:
        data = validation.json_object(request.get_json(silent=True))
        worker = worker_service.create_worker(
            full_name=validation.string(data, "full_name"),
            email=validation.string(data, "email"),
            password=validation.string(data, "password"),
            phone=validation.string(data, "phone") or None,
        )
        return jsonify({"worker": worker.to_dict()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PasswordValidationError as e:
        return jsonify({"error": str(e)}), 400
    except WorkerError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create worker")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.patch("/workers/<int:user_id>/active")
@require_auth
@require_role(ROLE_ADMIN)
def set_worker_active(user_id: int):
    """
    Activate/deactivate a worker.

    Request body (optional):
    - is_active: bool; omitted flips the current state
    """
    try:
        data = validation.json_object(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    is_active = data.get("is_active")
    if is_active is not None and not isinstance(is_active, bool):
        return jsonify({"error": "is_active must be true or false"}), 400

    try:
        worker = worker_service.set_active(user_id, is_active)
        return jsonify({"worker": worker.to_dict()}), 200
    except WorkerError as e:
        return jsonify({"error": str(e)}), 404


# =============================================================================
# ANALYTICS
# =============================================================================

@admin_bp.get("/analytics")
@require_auth
@require_role(ROLE_ADMIN)
def analytics():
    days = request.args.get("days", current_app.config["ANALYTICS_WINDOW_DAYS"], type=int)
    try:
        return jsonify(reporting_service.analytics(days)), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
