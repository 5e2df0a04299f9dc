"""
SQLite-specific strategy implementation.

SQLite binds named parameters written as ``:name`` (also ``@name`` and
``$name``). Connections run in autocommit mode (``isolation_level = None``)
outside of a `Transaction`, and get ISO date/datetime converters registered.
"""
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

from sequel.sql import standardize_named_placeholders
from sequel.strategy.base import DatabaseStrategy, register_strategy
from sequel.types import register_sqlite_types

if TYPE_CHECKING:
    from sequel.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for SQLite."""
        return f'sqlite:///{options.database}'

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        return {
            'connect_args': {
                'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
            }
        }

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings for SQLite.
        """
        register_sqlite_types()
        conn.execute('PRAGMA foreign_keys = ON')
        self.enable_autocommit(conn)
        logger.debug('Configured SQLite connection (foreign keys on, autocommit)')

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = None

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for SQLite.
        """
        raw_conn.isolation_level = 'DEFERRED'

    def standardize_sql(self, sql: str) -> str:
        """Convert ``%(name)s`` placeholders to SQLite's ``:name``.
        """
        return standardize_named_placeholders(sql, dialect='sqlite')
