"""WSGI entry point: ``bakery.wsgi:app`` for any WSGI server."""

from bakery import create_app, get_store
from bakery.config.settings import Settings
from bakery.__main__ import configure_logging

configure_logging(Settings.from_env().log_level)
app = create_app()
with app.app_context():
    get_store().manager.start()
