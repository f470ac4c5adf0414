import os, sys, pytest
# Ensure backend directory is on path so 'bakery' can be imported without installing
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from sqlalchemy import delete
from bakery import create_app, get_store
from bakery.models.order import Order
from tests.test_utils_seed import TEST_CONFIG


@pytest.fixture(scope='session')
def app_instance():
    app = create_app(dict(TEST_CONFIG))
    # Connect synchronously so the table exists before the first request
    with app.app_context():
        assert get_store().manager.connect() is True
    yield app


@pytest.fixture(autouse=True)
def clean_orders(app_instance):
    with app_instance.app_context():
        store = get_store()
        store.session.execute(delete(Order))
        store.session.commit()
    yield


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def store(app_instance):
    with app_instance.app_context():
        yield get_store()
