"""Test helpers for building order payloads and substitute stores.

Substitute stores stand in for OrderStore through create_app(store=...), which is
how the failure paths (store down, re-read failing) are reached without a real
outage.
"""
from typing import Any, Dict, Optional
from bakery.store.orders import OrderStore, StoreError

TEST_CONFIG = {
    'TESTING': True,
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    'DB_SEED_SAMPLE_DATA': False,
    'DB_RETRY_DELAY': 0,
    'CORS_ORIGINS': ['http://localhost:3000'],
}

def order_payload(order_id: str = 'ORD100', **overrides) -> Dict[str, Any]:
    """A valid create body; keyword overrides replace or add fields (None removes a field)."""
    body = {
        'order_id': order_id,
        'customer_name': 'Jane Baker',
        'contact_number': '555-0100',
        'item': 'Croissant',
        'quantity': 3,
        'order_date': '2024-02-01',
        'status': 'Pending',
    }
    for key, val in overrides.items():
        if val is None:
            body.pop(key, None)
        else:
            body[key] = val
    return body


def create_order(client, order_id: str = 'ORD100', **overrides) -> Dict[str, Any]:
    """POST an order and return the persisted row from the response."""
    resp = client.post('/api/orders', json=order_payload(order_id, **overrides))
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()['order']


def list_orders(client):
    resp = client.get('/api/orders')
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


class DownStore:
    """Every statement fails as if the database were unreachable."""

    def __init__(self, message: str = "Can't connect to MySQL server on 'localhost'"):
        self.message = message
        self.manager = None

    def _fail(self, *a, **k):
        raise StoreError(self.message)

    ping = list_orders = get_order = create_order = update_status = delete_order = _fail

    def remove(self):
        pass


class RereadFailingStore(OrderStore):
    """Real inserts, but reading a single row back always fails."""

    def get_order(self, pk: int) -> Optional[Any]:
        raise StoreError('Lost connection to MySQL server during query')


__all__ = ['order_payload', 'create_order', 'list_orders', 'DownStore', 'RereadFailingStore']
