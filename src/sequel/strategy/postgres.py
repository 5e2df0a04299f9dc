"""
PostgreSQL-specific strategy implementation.

psycopg binds named parameters written as ``%(name)s`` natively, so SQL is
passed through unchanged. Prepared commands ask psycopg for a server-side
prepared statement, which it creates on the first run and reuses for every
later run of the same cursor.
"""
import logging
from typing import TYPE_CHECKING, Any

from sequel.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from sequel.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> str:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query_parts = []
        if options.timeout:
            query_parts.append(f'connect_timeout={options.timeout}')
        if options.appname:
            query_parts.append(f'application_name={options.appname}')

        url = (f'postgresql+psycopg://{options.username}:{options.password}'
               f'@{options.hostname}:{options.port}/{options.database}')

        if query_parts:
            url += '?' + '&'.join(query_parts)

        return url

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']

    def configure_connection(self, conn: Any) -> None:
        """Configure connection settings for PostgreSQL.
        """
        self.enable_autocommit(conn)

    def enable_autocommit(self, raw_conn: Any) -> None:
        """Enable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = True

    def disable_autocommit(self, raw_conn: Any) -> None:
        """Disable auto-commit mode for PostgreSQL.
        """
        raw_conn.autocommit = False

    def execute(self, cursor: Any, sql: str, params: dict[str, Any] | None,
                prepare: bool = False) -> None:
        """Run SQL through psycopg, requesting server-side preparation.
        """
        cursor.execute(sql, params, prepare=True if prepare else None)
