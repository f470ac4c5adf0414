from __future__ import annotations
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from bakery.models.order import Order


def iso_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix. Naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def now_iso() -> str:
    return iso_utc(datetime.now(timezone.utc))


def iso_date(d: Optional[date]) -> Optional[str]:
    if d is None:
        return None
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def order_json(o: Order) -> Dict[str, Any]:
    return {
        'id': o.id,
        'order_id': o.order_id,
        'customer_name': o.customer_name,
        'contact_number': o.contact_number,
        'item': o.item,
        'quantity': o.quantity,
        'order_date': iso_date(o.order_date),
        'status': o.status,
        'created_at': iso_utc(o.created_at),
        'updated_at': iso_utc(o.updated_at),
    }


__all__ = ['order_json', 'iso_utc', 'iso_date', 'now_iso']
