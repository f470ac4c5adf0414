from __future__ import annotations
from datetime import datetime, timezone
from flask import Blueprint, request, abort, current_app
from bakery import get_store
from bakery.models.order import Order
from bakery.store.orders import DuplicateOrderError, StoreError
from bakery.utils.serialization import order_json
from bakery.utils.validation import require_fields, validate_status, parse_quantity, parse_order_date, parse_order_pk

orders_bp = Blueprint('orders', __name__)

REQUIRED_FIELDS = ('order_id', 'customer_name', 'item', 'quantity')


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(value) -> str:
    return value if isinstance(value, str) else str(value)


@orders_bp.get('/orders')
def list_orders():
    store = get_store()
    try:
        rows = store.list_orders()
    except StoreError as e:
        abort(500, description=f'Database error: {e}')
    return [order_json(o) for o in rows]


@orders_bp.post('/orders')
def create_order():
    store = get_store()
    data = _payload()
    require_fields(data, REQUIRED_FIELDS)
    quantity = parse_quantity(data['quantity'])
    order_date = data.get('order_date')
    if order_date in (None, ''):
        order_date = datetime.now(timezone.utc).date()
    else:
        order_date = parse_order_date(order_date)
    status = data.get('status') or Order.STATUS_PENDING
    validate_status(status, Order.ALL_STATUSES, 'status')
    contact_number = data.get('contact_number')
    fields = {
        'order_id': _text(data['order_id']),
        'customer_name': _text(data['customer_name']),
        'contact_number': _text(contact_number) if contact_number else '',
        'item': _text(data['item']),
        'quantity': quantity,
        'order_date': order_date,
        'status': status,
    }
    try:
        new_id = store.create_order(**fields)
    except DuplicateOrderError:
        abort(409, description='Order ID already exists')
    except StoreError as e:
        abort(500, description=f'Failed to create order: {e}')
    # Re-read the persisted row; fall back to the bare id if that round trip fails
    try:
        o = store.get_order(new_id)
    except StoreError:
        o = None
    if o is None:
        current_app.logger.warning('created order %s but could not re-read it', new_id)
        return {'message': 'Order created successfully', 'orderId': new_id}
    return {'message': 'Order created successfully', 'order': order_json(o)}


@orders_bp.put('/orders/<order_id>')
def update_order_status(order_id: str):
    store = get_store()
    data = _payload()
    status = validate_status(data.get('status'), Order.ALL_STATUSES, 'status')
    order_id = parse_order_pk(order_id)
    try:
        matched = store.update_status(order_id, status)
    except StoreError as e:
        abort(500, description=f'Failed to update order: {e}')
    if not matched:
        abort(404, description='Order not found')
    return {'message': 'Order status updated successfully'}


@orders_bp.delete('/orders/<order_id>')
def delete_order(order_id: str):
    store = get_store()
    order_id = parse_order_pk(order_id)
    try:
        o = store.get_order(order_id)
    except StoreError as e:
        abort(500, description=f'Database error: {e}')
    if o is None:
        abort(404, description='Order not found')
    deleted = order_json(o)
    # Not atomic with the read above; a concurrent delete just leaves nothing to remove
    try:
        store.delete_order(order_id)
    except StoreError as e:
        abort(500, description=f'Failed to delete order: {e}')
    return {'message': 'Order deleted successfully', 'deletedOrder': deleted}
