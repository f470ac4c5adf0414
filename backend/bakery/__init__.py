from functools import partial
from flask import Flask, current_app
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, NotFound
from dotenv import load_dotenv
from typing import Optional, Dict, Any

from bakery.config.settings import Settings
from bakery.store.bootstrap import bootstrap
from bakery.store.connection import ConnectionManager, make_engine
from bakery.store.orders import OrderStore, StoreError
from bakery.utils.serialization import now_iso

load_dotenv()

STORE_KEY = 'order_store'


def create_app(config: Optional[Dict[str, Any]] = None, store: Optional[OrderStore] = None):
    app = Flask(__name__)

    settings = Settings.from_env()
    app.config['DATABASE_URL'] = settings.sqlalchemy_url()
    app.config['CORS_ORIGINS'] = settings.cors_origins
    app.config['DB_RETRY_DELAY'] = settings.retry_delay
    app.config['DB_SEED_SAMPLE_DATA'] = settings.seed_sample_data
    app.config['PORT'] = settings.port

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    # Store handle: one engine + connection manager per app, swappable for tests
    if store is None:
        engine = make_engine(app.config['DATABASE_URL'])
        manager = ConnectionManager(
            engine,
            retry_delay=float(app.config['DB_RETRY_DELAY']),
            on_connect=partial(bootstrap, seed=bool(app.config['DB_SEED_SAMPLE_DATA'])),
        )
        store = OrderStore.from_manager(manager)
    app.extensions[STORE_KEY] = store

    @app.teardown_appcontext
    def remove_session(exc=None):
        store.remove()

    from .routes.orders import orders_bp
    app.register_blueprint(orders_bp, url_prefix='/api')

    @app.route('/')
    def banner():
        return {
            'message': 'Bakery Order Management API',
            'status': 'Running',
            'timestamp': now_iso(),
        }

    @app.route('/api/health')
    def health():
        try:
            get_store().ping()
        except StoreError as e:
            return {'status': 'ERROR', 'database': 'Disconnected', 'error': str(e)}, 500
        return {'status': 'OK', 'database': 'Connected', 'timestamp': now_iso()}

    # Unified error handler producing {"error": "..."} bodies
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            detail = e.description
            if isinstance(e, NotFound) and e.description == NotFound.description:
                detail = 'Endpoint not found'
            return {'error': detail}, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {'error': 'Internal server error'}, 500

    return app


def get_store() -> OrderStore:
    return current_app.extensions[STORE_KEY]
