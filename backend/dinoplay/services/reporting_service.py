# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date, datetime, timedelta

from ..models import Settlement
from . import settlement_service
from dinoplay.time_utils import format_for_display, venue_today_date


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _sum(settlements: list[Settlement], attr: str) -> int:
    return sum(getattr(s, attr) or 0 for s in settlements)


def analytics(days: int = 30, *, today: date | None = None, now: datetime | None = None) -> dict:
    """
    Totals and per-day chart rows for the trailing window of venue dates.

    The window is anchored on the venue's "today", so it includes the
    settlement saved at 23:00 Bogota time even when UTC has rolled over.
    """
    if days < 1 or days > 366:
        raise ReportError("days must be between 1 and 366")

    end = today or venue_today_date(now)
    start = end - timedelta(days=days)
    settlements = settlement_service.list_between(start, end)

    total_arcade = _sum(settlements, "arcade_sales")
    total_vr = _sum(settlements, "vr_sales")
    total_products = _sum(settlements, "product_sales")

    by_day: dict[date, dict] = {}
    for s in settlements:
        row = by_day.setdefault(s.settlement_date, {
            "date": s.settlement_date.isoformat(),
            "label": format_for_display(s.settlement_date, {"day": "2-digit", "month": "short"}),
            "arcade": 0,
            "vr": 0,
            "products": 0,
            "net_profit": 0,
            "settlements": 0,
        })
        row["arcade"] += s.arcade_sales
        row["vr"] += s.vr_sales
        row["products"] += s.product_sales
        row["net_profit"] += s.net_profit
        row["settlements"] += 1

    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "days": days,
        "totals": {
            "net_profit": _sum(settlements, "net_profit"),
            "gross_total": _sum(settlements, "gross_total"),
            "arcade_sales": total_arcade,
            "vr_sales": total_vr,
            "product_sales": total_products,
            "nequi_deposits": _sum(settlements, "nequi_deposits"),
            "settlement_count": len(settlements),
        },
        "rows": [by_day[d] for d in sorted(by_day)],
    }
