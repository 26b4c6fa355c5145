# Overview: Flask API routes for the worker's end-of-shift flow; parses input and returns JSON responses.

"""
Worker Shift API Routes

DESIGN:
- Everything is keyed by the venue's calendar day (time_utils.venue_today)
- No config for today is an empty state (config: null), not an error
- One settlement per worker per day; a second save returns 409
- The VR tally is informational and never stored in the database
"""

from flask import Blueprint, request, jsonify, g, current_app

from .. import validation
from ..calculator import PROMO_GAMES_FOR_COUPON, CalculationError
from ..decorators import require_auth, require_role
from ..extensions import db
from ..models.auth import ROLE_ADMIN, ROLE_WORKER
from ..services import daily_config_service, settlement_service
from ..services.settlement_service import (
    ChecklistInput,
    SettlementConflictError,
    SettlementError,
    ShiftInput,
)
from ..shift_state import ShiftStateError
from ..validation import ValidationError
from dinoplay.time_utils import venue_today, venue_today_date


shift_bp = Blueprint("shift", __name__, url_prefix="/api/shift")


def _parse_sold(raw) -> dict:
    if raw is None:
        return {}
    if not isinstance(raw, list):
        raise ValidationError("products must be a list")

    sold: dict = {}
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("each product must be an object")
        quantity = validation.non_negative_int(item, "sold_quantity")
        if item.get("index") is not None:
            key = validation.coerce_int("index", item["index"])
        elif item.get("product_name"):
            key = str(item["product_name"])
        else:
            raise ValidationError("each product needs an index or product_name")
        sold[key] = quantity
    return sold


def _parse_shift(data: dict) -> ShiftInput:
    final_tokens = data.get("final_tokens")
    has_nequi = validation.boolean(data, "has_nequi", default=True)
    checklist = data.get("checklist") or {}
    if not isinstance(checklist, dict):
        raise ValidationError("checklist must be an object")

    return ShiftInput(
        final_tokens=None if final_tokens in (None, "") else validation.non_negative_int(data, "final_tokens"),
        vr_uses=validation.non_negative_int(data, "vr_uses"),
        arcade_coupons=validation.non_negative_int(data, "arcade_coupons"),
        vr_coupons=validation.non_negative_int(data, "vr_coupons"),
        nequi_deposits=validation.money(data, "nequi_deposits") if has_nequi else 0,
        closing_notes=validation.text(data, "closing_notes", max_length=4000),
        opening_notes=validation.text(data, "opening_notes", max_length=4000),
        sold=_parse_sold(data.get("products")),
        checklist=ChecklistInput(
            machines_disconnected=validation.boolean(checklist, "machines_disconnected"),
            machines_cleaned=validation.boolean(checklist, "machines_cleaned"),
            floor_swept=validation.boolean(checklist, "floor_swept"),
            sign_collected=validation.boolean(checklist, "sign_collected"),
        ),
    )


def _vr_store():
    return current_app.extensions["vr_counters"]


@shift_bp.get("/today")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def today_route():
    """
    Day info for the worker dashboard.

    Response:
    {
        "date": "2026-10-19",
        "config": {...} | null,
        "products": [{product_name, initial_quantity, sold_quantity, remaining, unit_price}],
        "has_settlement": false,
        "promo_games_per_coupon": 6
    }
    """
    today = venue_today_date()
    config = daily_config_service.get_config(today)
    settlement = settlement_service.get_worker_settlement(g.current_user.id, today)

    products = []
    if config:
        products = settlement_service.build_tally(config).to_list()

    return jsonify({
        "date": today.isoformat(),
        "config": config.to_dict(include_products=False) if config else None,
        "products": products,
        "has_settlement": settlement is not None,
        "settlement": settlement.to_dict() if settlement else None,
        "promo_games_per_coupon": PROMO_GAMES_FOR_COUPON,
    }), 200


@shift_bp.post("/preview")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def preview_route():
    """
    Live breakdown for the closing form.

    Request body matches POST /settlement; final_tokens may be omitted.
    """
    config = daily_config_service.get_config(venue_today_date())
    if not config:
        return jsonify({"error": "No configuration for today"}), 404

    try:
        shift = _parse_shift(validation.json_object(request.get_json(silent=True)))
        breakdown, tally = settlement_service.preview(config, shift)
    except (ValidationError, ShiftStateError, CalculationError) as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({
        "breakdown": breakdown.to_dict(),
        "products": tally.to_list(),
        "checklist_complete": shift.checklist.complete,
        "can_save": shift.checklist.complete and shift.final_tokens is not None,
    }), 200


@shift_bp.post("/settlement")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def create_settlement_route():
    """
    Save today's settlement.

    Request body:
    {
        "final_tokens": 20,
        "vr_uses": 3,
        "arcade_coupons": 2,
        "vr_coupons": 1,
        "has_nequi": true,
        "nequi_deposits": 20000,
        "closing_notes": "...",
        "products": [{"index": 0, "sold_quantity": 2}],
        "checklist": {
            "machines_disconnected": true,
            "machines_cleaned": true,
            "floor_swept": true,
            "sign_collected": true
        }
    }

    Returns 409 if the worker already settled today.
    """
    try:
        config = daily_config_service.get_config(venue_today_date())
        if not config:
            return jsonify({"error": "No configuration for today"}), 404

        shift = _parse_shift(validation.json_object(request.get_json(silent=True)))
        settlement = settlement_service.create_settlement(
            worker_id=g.current_user.id,
            config=config,
            shift=shift,
        )
        return jsonify({"settlement": settlement.to_dict(detail=True)}), 201

    except SettlementConflictError as e:
        return jsonify({"error": str(e)}), 409
    except (SettlementError, ValidationError, ShiftStateError, CalculationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to save settlement")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# VR COUNTER (informational)
# =============================================================================

def _vr_response(op: str):
    day = venue_today()
    value = _vr_store().update(g.current_user.id, op, day=day)
    return jsonify({"date": day, "count": value}), 200


@shift_bp.get("/vr-counter")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def vr_counter_route():
    return _vr_response("read")


@shift_bp.post("/vr-counter/increment")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def vr_counter_increment_route():
    return _vr_response("increment")


@shift_bp.post("/vr-counter/decrement")
@require_auth
@require_role(ROLE_WORKER, ROLE_ADMIN)
def vr_counter_decrement_route():
    return _vr_response("decrement")
