"""Run the order service with Flask's built-in server.

Usage:
    python -m bakery            # listens on $PORT (default 5000)
    python -m bakery --port 8080
"""
from __future__ import annotations
import argparse
import logging
import os

from bakery import create_app, get_store
from bakery.config.settings import Settings


def configure_logging(level: str = 'INFO'):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description='Bakery order management API')
    parser.add_argument('--host', default=os.getenv('HOST', '0.0.0.0'))
    parser.add_argument('--port', type=int, default=None, help='defaults to $PORT or 5000')
    args = parser.parse_args(argv)

    configure_logging(Settings.from_env().log_level)
    app = create_app()
    port = args.port or int(app.config['PORT'])
    with app.app_context():
        get_store().manager.start()
    app.logger.info('Server running on port %s', port)
    app.logger.info('Environment: %s', os.getenv('FLASK_ENV') or 'development')
    app.run(host=args.host, port=port, threaded=True)


if __name__ == '__main__':
    main()
