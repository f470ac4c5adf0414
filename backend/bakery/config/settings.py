from __future__ import annotations
"""Environment-driven settings for the order service.

Each database setting accepts a few variable names so the service runs unchanged
on hosts that export their own MySQL naming (``MYSQLHOST`` etc.). The first
variable that is set wins.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import os

from sqlalchemy.engine import URL

DEFAULT_PORT = 5000
DEFAULT_RETRY_DELAY = 5.0
DEFAULT_CORS_ORIGINS = ['http://localhost:3000']

_DB_VARS = {
    'host': ('DB_HOST', 'MYSQLHOST', 'MYSQL_HOST'),
    'user': ('DB_USER', 'MYSQLUSER', 'MYSQL_USER'),
    'password': ('DB_PASSWORD', 'MYSQLPASSWORD', 'MYSQL_PASSWORD'),
    'database': ('DB_NAME', 'MYSQLDATABASE', 'MYSQL_DATABASE'),
    'port': ('DB_PORT', 'MYSQLPORT', 'MYSQL_PORT'),
}


def first_env(names: Sequence[str], default: Optional[str] = None) -> Optional[str]:
    for name in names:
        val = os.getenv(name)
        if val not in (None, ''):
            return val
    return default


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() not in ('0', 'false', 'no', 'off')


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [o.strip() for o in raw.split(',') if o.strip()]


@dataclass
class Settings:
    db_host: str = 'localhost'
    db_user: str = 'root'
    db_password: str = ''
    db_name: str = 'bakery'
    db_port: int = 3306
    database_url: Optional[str] = None
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    retry_delay: float = DEFAULT_RETRY_DELAY
    seed_sample_data: bool = True
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Settings':
        try:
            db_port = int(first_env(_DB_VARS['port'], '3306'))
            port = int(os.getenv('PORT') or DEFAULT_PORT)
            retry_delay = float(os.getenv('DB_RETRY_DELAY') or DEFAULT_RETRY_DELAY)
        except ValueError as e:
            raise ValueError(f'invalid numeric setting: {e}') from e
        return cls(
            db_host=first_env(_DB_VARS['host'], 'localhost'),
            db_user=first_env(_DB_VARS['user'], 'root'),
            db_password=first_env(_DB_VARS['password'], ''),
            db_name=first_env(_DB_VARS['database'], 'bakery'),
            db_port=db_port,
            database_url=os.getenv('DATABASE_URL') or None,
            port=port,
            cors_origins=_parse_origins(os.getenv('CORS_ORIGINS')),
            retry_delay=retry_delay,
            seed_sample_data=_parse_bool(os.getenv('DB_SEED_SAMPLE_DATA'), True),
            log_level=(os.getenv('LOG_LEVEL') or 'INFO').upper(),
        )

    def sqlalchemy_url(self):
        """Return the store URL; the password stays masked when the URL is rendered."""
        if self.database_url:
            return self.database_url
        return URL.create(
            'mysql+pymysql',
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


__all__ = ['Settings', 'first_env', 'DEFAULT_PORT', 'DEFAULT_RETRY_DELAY']
