from __future__ import annotations
from contextlib import contextmanager
from typing import List, Optional
import logging

from sqlalchemy import delete, select, text, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker

from bakery.models.order import Order, utcnow
from bakery.store.connection import ConnectionManager, describe_error

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A statement against the order store failed; ``str()`` is the driver's message."""


class DuplicateOrderError(StoreError):
    pass


class OrderStore:
    """Store handle held by the app and used by every request handler.

    Each method is one round trip. Failures are rolled back, reported to the
    connection manager (which reconnects on connection loss) and re-raised as
    StoreError.
    """

    def __init__(self, engine: Engine, manager: Optional[ConnectionManager] = None):
        self.engine = engine
        self.manager = manager
        self.session = scoped_session(sessionmaker(bind=engine, expire_on_commit=False, autoflush=False))

    @classmethod
    def from_manager(cls, manager: ConnectionManager) -> 'OrderStore':
        return cls(manager.engine, manager)

    def remove(self):
        self.session.remove()

    def _rollback(self):
        try:
            self.session.rollback()
        except SQLAlchemyError as e:
            logger.debug('rollback failed: %s', describe_error(e))

    def _failed(self, exc: SQLAlchemyError):
        self._rollback()
        if self.manager is not None:
            self.manager.report_error(exc)

    @contextmanager
    def _statement(self, label: str):
        try:
            yield self.session
        except SQLAlchemyError as e:
            self._failed(e)
            logger.error('%s failed: %s', label, describe_error(e))
            raise StoreError(describe_error(e)) from e

    def ping(self) -> None:
        with self._statement('health check') as s:
            s.execute(text('SELECT 1 AS health')).scalar_one()

    def list_orders(self) -> List[Order]:
        stmt = select(Order).order_by(Order.order_date.desc(), Order.created_at.desc(), Order.id.desc())
        with self._statement('list orders') as s:
            return list(s.execute(stmt).scalars().all())

    def get_order(self, pk: int) -> Optional[Order]:
        stmt = select(Order).where(Order.id == pk).execution_options(populate_existing=True)
        with self._statement('select order') as s:
            return s.execute(stmt).scalar_one_or_none()

    def create_order(self, **fields) -> int:
        """Insert a new order and return its surrogate id."""
        o = Order(**fields)
        try:
            with self._statement('insert order') as s:
                s.add(o)
                s.commit()
        except StoreError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateOrderError(str(e)) from e.__cause__
            raise
        return o.id

    def update_status(self, pk: int, status: str) -> int:
        """Set status and refresh updated_at; returns the number of rows matched."""
        stmt = (
            update(Order)
            .where(Order.id == pk)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        with self._statement('update order') as s:
            result = s.execute(stmt)
            s.commit()
        return result.rowcount

    def delete_order(self, pk: int) -> int:
        stmt = delete(Order).where(Order.id == pk).execution_options(synchronize_session=False)
        with self._statement('delete order') as s:
            result = s.execute(stmt)
            s.commit()
        return result.rowcount


__all__ = ['OrderStore', 'StoreError', 'DuplicateOrderError']
