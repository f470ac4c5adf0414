from __future__ import annotations
"""Idempotent schema bootstrap for the ``orders`` table.

Runs after every successful connect: create the table if it is missing, then seed
a few sample orders when the table is empty. The seed insert skips rows whose
``order_id`` already exists, so running it twice never fails.
"""
from datetime import date
import logging

from sqlalchemy import func, insert, select
from sqlalchemy.engine import Connection, Engine

from bakery.models.order import Base, Order

logger = logging.getLogger(__name__)

SAMPLE_ORDERS = [
    {'order_id': 'ORD001', 'customer_name': 'John Smith', 'contact_number': '123-456-7890',
     'item': 'Cake', 'quantity': 2, 'order_date': date(2024, 1, 15), 'status': Order.STATUS_COMPLETED},
    {'order_id': 'ORD002', 'customer_name': 'Emma Johnson', 'contact_number': '123-456-7891',
     'item': 'Bread', 'quantity': 5, 'order_date': date(2024, 1, 16), 'status': Order.STATUS_PENDING},
    {'order_id': 'ORD003', 'customer_name': 'Michael Brown', 'contact_number': '123-456-7892',
     'item': 'Muffin', 'quantity': 12, 'order_date': date(2024, 1, 16), 'status': Order.STATUS_PENDING},
]


def insert_ignore(dialect_name: str):
    """Build an INSERT on ``orders`` that skips unique-key conflicts for the given dialect."""
    table = Order.__table__
    if dialect_name == 'postgresql':
        from sqlalchemy.dialects.postgresql import insert as pg_insert
        return pg_insert(table).on_conflict_do_nothing(index_elements=['order_id'])
    if dialect_name == 'sqlite':
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert
        return sqlite_insert(table).on_conflict_do_nothing(index_elements=['order_id'])
    if dialect_name in ('mysql', 'mariadb'):
        return insert(table).prefix_with('IGNORE')
    raise ValueError(f'unsupported dialect for seeding: {dialect_name}')


def ensure_schema(conn: Connection) -> None:
    Base.metadata.create_all(conn, tables=[Order.__table__], checkfirst=True)


def seed_if_empty(conn: Connection) -> int:
    """Insert SAMPLE_ORDERS when ``orders`` has no rows. Returns the number of rows written."""
    count = conn.execute(select(func.count()).select_from(Order.__table__)).scalar_one()
    if count:
        return 0
    rows = [dict(r) for r in SAMPLE_ORDERS]
    result = conn.execute(insert_ignore(conn.dialect.name), rows)
    # some drivers report -1 for executemany
    if result.rowcount is None or result.rowcount < 0:
        return len(rows)
    return result.rowcount


def bootstrap(engine: Engine, seed: bool = True) -> int:
    with engine.begin() as conn:
        ensure_schema(conn)
        logger.info('Orders table ready')
        if not seed:
            return 0
        inserted = seed_if_empty(conn)
    if inserted:
        logger.info('Sample data inserted (%d rows)', inserted)
    return inserted


__all__ = ['bootstrap', 'ensure_schema', 'seed_if_empty', 'insert_ignore', 'SAMPLE_ORDERS']
