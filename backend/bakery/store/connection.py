from __future__ import annotations
"""Connection manager for the order store.

Keeps one SQLAlchemy engine and tracks whether the database is reachable:

    DISCONNECTED -> CONNECTING -> CONNECTED
         ^                            |
         +------ connection lost -----+

Connect attempts that fail because the server is unreachable are retried after a
fixed delay, forever. Anything else raised while connecting or bootstrapping is
fatal and ends the process (see ``on_fatal``).
"""
from enum import Enum
from typing import Callable, Optional
import logging
import os
import threading

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.pool import StaticPool

from bakery.config.settings import DEFAULT_RETRY_DELAY

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'


def describe_error(exc: BaseException) -> str:
    """Driver-level message for a SQLAlchemy error (no SQL text, no URL)."""
    orig = getattr(exc, 'orig', None)
    return str(orig if orig is not None else exc)


def is_connection_lost(exc: BaseException) -> bool:
    return isinstance(exc, DBAPIError) and bool(exc.connection_invalidated)


def is_unreachable(exc: BaseException) -> bool:
    """True for errors that mean 'try again later' while establishing a connection."""
    return is_connection_lost(exc) or isinstance(exc, (OperationalError, InterfaceError))


def make_engine(url) -> Engine:
    if str(url).endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        return create_engine(
            url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=False, future=True, pool_pre_ping=True)


def _exit_process(exc: BaseException) -> None:
    logging.shutdown()
    os._exit(1)


class ConnectionManager:
    def __init__(
        self,
        engine: Engine,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        on_connect: Optional[Callable[[Engine], object]] = None,
        on_fatal: Optional[Callable[[BaseException], None]] = None,
        wait: Optional[Callable[[float], object]] = None,
    ):
        self.engine = engine
        self.retry_delay = retry_delay
        self.on_connect = on_connect
        self.on_fatal = on_fatal or _exit_process
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self.last_error: Optional[str] = None
        self._stop = threading.Event()
        self._wait = wait or self._stop.wait
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def _set_state(self, state: ConnectionState):
        if state is not self.state:
            logger.debug('store state %s -> %s', self.state.value, state.value)
        self.state = state

    def _retry_later(self, exc: BaseException):
        self.last_error = describe_error(exc)
        self._set_state(ConnectionState.DISCONNECTED)
        logger.error('Database connection failed: %s', self.last_error)
        logger.info('Retrying connection in %s seconds...', self.retry_delay)
        self._wait(self.retry_delay)

    def connect(self) -> bool:
        """Block until connected and bootstrapped. Returns False only if stopped first."""
        while not self._stop.is_set():
            self._set_state(ConnectionState.CONNECTING)
            self.attempts += 1
            try:
                with self.engine.connect() as conn:
                    conn.execute(text('SELECT 1'))
            except Exception as e:
                if not is_unreachable(e):
                    self._set_state(ConnectionState.DISCONNECTED)
                    raise
                self._retry_later(e)
                continue
            self._set_state(ConnectionState.CONNECTED)
            self.last_error = None
            logger.info('Connected to database: %s', self.engine.url.database or self.engine.url.get_backend_name())
            if self.on_connect is not None:
                try:
                    self.on_connect(self.engine)
                except Exception as e:
                    if not is_unreachable(e):
                        raise
                    self._retry_later(e)
                    continue
            return True
        return False

    def _run(self):
        try:
            self.connect()
        except Exception as e:
            logger.critical('Fatal database error: %s', describe_error(e), exc_info=True)
            self.on_fatal(e)

    def start(self) -> threading.Thread:
        """Run connect() on a background thread; a no-op while a retry loop is already running."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return self._thread
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name='store-connect', daemon=True)
            self._thread.start()
            return self._thread

    def report_error(self, exc: BaseException) -> bool:
        """Feed a failed statement back to the manager. Returns True if it triggered a reconnect.

        A pool reconnect that fails surfaces as a plain OperationalError rather
        than an invalidated connection, so any unreachable-class error counts.
        """
        if not is_unreachable(exc):
            return False
        logger.warning('Database connection lost, reconnecting: %s', describe_error(exc))
        self._set_state(ConnectionState.DISCONNECTED)
        self.start()
        return True

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self.engine.dispose()
        self._set_state(ConnectionState.DISCONNECTED)


__all__ = [
    'ConnectionManager', 'ConnectionState', 'make_engine',
    'describe_error', 'is_connection_lost', 'is_unreachable'
]
