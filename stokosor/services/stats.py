from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Sequence

from ..schemas.item import ItemOut

TWOPLACES = Decimal("0.01")
DEFAULT_EXPIRING_DAYS = 30


def _to_decimal(value: float | None) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def _quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP) if value else Decimal("0.00")


def _parse_day(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def expiring_items(
    items: Iterable[ItemOut],
    *,
    today: date | None = None,
    within_days: int = DEFAULT_EXPIRING_DAYS,
) -> list[Dict[str, Any]]:
    """Items whose expiration date is at most ``within_days`` away.

    Already expired items are included with a negative ``days_until``. Sorted
    soonest first.
    """

    today = today or date.today()
    upcoming: list[Dict[str, Any]] = []
    for item in items:
        expires = _parse_day(item.expiration_date)
        if expires is None:
            continue
        days_until = (expires - today).days
        if days_until > within_days:
            continue
        upcoming.append(
            {
                "id": item.id,
                "name": item.name,
                "expiration_date": item.expiration_date,
                "days_until": days_until,
            }
        )
    upcoming.sort(key=lambda entry: (entry["days_until"], entry["name"]))
    return upcoming


def inventory_stats(
    *,
    places: Sequence[Any],
    zones: Sequence[Any],
    containers: Sequence[Any],
    items: Sequence[ItemOut],
    today: date | None = None,
    expiring_within_days: int = DEFAULT_EXPIRING_DAYS,
) -> Dict[str, Any]:
    """Dashboard figures: counts, estimated value, per-category split and
    upcoming expirations."""

    total_value = Decimal("0")
    items_with_value = 0
    by_category: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "value": Decimal("0")})
    for item in items:
        value = _to_decimal(item.estimated_value)
        if item.estimated_value:
            items_with_value += 1
        total_value += value
        bucket = by_category[getattr(item.category, "value", item.category)]
        bucket["count"] += 1
        bucket["value"] += value

    categories = [
        {"category": key, "count": bucket["count"], "value": _quantize_currency(bucket["value"])}
        for key, bucket in by_category.items()
    ]
    categories.sort(key=lambda entry: (-entry["count"], entry["category"]))

    return {
        "totals": {
            "places": len(places),
            "zones": len(zones),
            "containers": len(containers),
            "items": len(items),
            "estimated_value": _quantize_currency(total_value),
            "items_with_value": items_with_value,
        },
        "categories": categories,
        "expiring_soon": expiring_items(items, today=today, within_days=expiring_within_days),
    }
