from __future__ import annotations
"""Request validation helpers for order payloads.

Every helper either returns the cleaned value or aborts with 400 and a fixed
message, before any store access happens.
"""
from datetime import date
from typing import Any, Iterable, Mapping, Sequence
from flask import abort

QUANTITY_MESSAGE = 'Quantity must be a number greater than 0'
# orders.id and orders.quantity are signed 32-bit INT columns
MAX_INT = 2 ** 31 - 1
MAX_QUANTITY = MAX_INT
ORDER_DATE_MESSAGE = 'order_date must be a date in YYYY-MM-DD format'


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(data: Mapping[str, Any], fields: Sequence[str]) -> None:
    if any(_blank(data.get(f)) for f in fields):
        abort(400, description=f"Missing required fields: {', '.join(fields)}")


def validate_status(new_status: Any, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    allowed = tuple(allowed)
    if not isinstance(new_status, str) or new_status not in allowed:
        choices = ' or '.join(f"'{s}'" for s in allowed)
        abort(400, description=f"Invalid {field_name}. Must be {choices}")
    return new_status


def parse_quantity(value: Any) -> int:
    if isinstance(value, bool):
        abort(400, description=QUANTITY_MESSAGE)
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float) and value.is_integer():
        qty = int(value)
    elif isinstance(value, str):
        try:
            qty = int(value.strip())
        except ValueError:
            abort(400, description=QUANTITY_MESSAGE)
    else:
        abort(400, description=QUANTITY_MESSAGE)
    if qty < 1 or qty > MAX_QUANTITY:
        abort(400, description=QUANTITY_MESSAGE)
    return qty


def parse_order_pk(raw: Any) -> int:
    """Path ids that cannot name a row are reported as a missing order."""
    try:
        pk = int(raw)
    except (TypeError, ValueError):
        abort(404, description='Order not found')
    if pk < 1 or pk > MAX_INT:
        abort(404, description='Order not found')
    return pk


def parse_order_date(value: Any) -> date:
    if isinstance(value, str):
        # a full ISO timestamp is accepted; only its date part is kept
        day = value.strip().partition('T')[0]
        try:
            return date.fromisoformat(day)
        except ValueError:
            pass
    abort(400, description=ORDER_DATE_MESSAGE)


__all__ = ['require_fields', 'validate_status', 'parse_quantity', 'parse_order_date', 'parse_order_pk',
           'QUANTITY_MESSAGE', 'MAX_QUANTITY', 'MAX_INT']
