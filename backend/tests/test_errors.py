from datetime import datetime, timezone
from bakery import create_app
from bakery.store.bootstrap import bootstrap
from bakery.store.connection import make_engine
from tests.test_utils_seed import TEST_CONFIG, DownStore, RereadFailingStore, order_payload


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def test_banner(client):
    resp = client.get('/')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['message'] == 'Bakery Order Management API'
    assert body['status'] == 'Running'
    _parse_ts(body['timestamp'])


def test_health_ok(client):
    resp = client.get('/api/health')
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['status'] == 'OK' and body['database'] == 'Connected'
    assert abs((datetime.now(timezone.utc) - _parse_ts(body['timestamp'])).total_seconds()) < 60


def test_health_reports_store_down():
    app = create_app(dict(TEST_CONFIG), store=DownStore('connection refused'))
    resp = app.test_client().get('/api/health')
    assert resp.status_code == 500
    assert resp.get_json() == {'status': 'ERROR', 'database': 'Disconnected', 'error': 'connection refused'}


def test_store_failures_map_to_500():
    client = create_app(dict(TEST_CONFIG), store=DownStore('boom')).test_client()
    lst = client.get('/api/orders')
    assert lst.status_code == 500 and lst.get_json() == {'error': 'Database error: boom'}
    created = client.post('/api/orders', json=order_payload('ORD700'))
    assert created.status_code == 500 and created.get_json() == {'error': 'Failed to create order: boom'}
    upd = client.put('/api/orders/1', json={'status': 'Completed'})
    assert upd.status_code == 500 and upd.get_json() == {'error': 'Failed to update order: boom'}
    dele = client.delete('/api/orders/1')
    assert dele.status_code == 500 and dele.get_json() == {'error': 'Database error: boom'}


def test_validation_runs_before_store_access():
    client = create_app(dict(TEST_CONFIG), store=DownStore()).test_client()
    assert client.post('/api/orders', json=order_payload('ORD701', quantity=0)).status_code == 400
    assert client.put('/api/orders/1', json={'status': 'Nope'}).status_code == 400


def test_create_falls_back_to_id_when_reread_fails():
    engine = make_engine('sqlite+pysqlite:///:memory:')
    bootstrap(engine, seed=False)
    store = RereadFailingStore(engine)
    client = create_app(dict(TEST_CONFIG), store=store).test_client()
    resp = client.post('/api/orders', json=order_payload('ORD702'))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['message'] == 'Order created successfully'
    assert isinstance(body['orderId'], int) and 'order' not in body
    engine.dispose()


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    assert resp.status_code == 404
    assert resp.get_json() == {'error': 'Endpoint not found'}


def test_wrong_method_returns_error_json(client):
    resp = client.patch('/api/orders')
    assert resp.status_code == 405
    assert 'error' in resp.get_json()


def test_internal_error_shape(app_instance, monkeypatch):
    import bakery.routes.orders as orders_mod

    class BoomStore:
        def list_orders(self):
            raise RuntimeError('explode')

    monkeypatch.setattr(orders_mod, 'get_store', lambda: BoomStore())
    resp = app_instance.test_client().get('/api/orders')
    assert resp.status_code == 500
    assert resp.get_json() == {'error': 'Internal server error'}


def test_cors_allows_configured_origin(client):
    resp = client.get('/api/health', headers={'Origin': 'http://localhost:3000'})
    assert resp.headers.get('Access-Control-Allow-Origin') == 'http://localhost:3000'
    assert resp.headers.get('Access-Control-Allow-Credentials') == 'true'
    other = client.get('/api/health', headers={'Origin': 'http://evil.example'})
    assert 'Access-Control-Allow-Origin' not in other.headers
