"""
Transaction handling and auto-commit management for database operations.
"""
import logging
import threading
from typing import Any

from sequel.command import PreparedCommandMixin
from sequel.utils import get_dialect_name, get_raw_connection

logger = logging.getLogger(__name__)

__all__ = [
    'Transaction',
    'disable_auto_commit',
    'enable_auto_commit',
]

_local = threading.local()


def _set_auto_commit(connection: Any, enable: bool) -> None:
    from sequel.strategy import get_db_strategy
    strategy = get_db_strategy(connection)
    raw_conn = get_raw_connection(connection)
    if enable:
        strategy.enable_autocommit(raw_conn)
    else:
        strategy.disable_autocommit(raw_conn)


def _track_transaction(connection: Any, active: bool) -> None:
    from sequel.connection import ConnectionWrapper
    if isinstance(connection, ConnectionWrapper):
        connection.in_transaction = active


def enable_auto_commit(connection: Any) -> None:
    """Enable auto-commit mode for a wrapped or raw connection.
    """
    _set_auto_commit(connection, enable=True)


def disable_auto_commit(connection: Any) -> None:
    """Disable auto-commit mode for a wrapped or raw connection.
    """
    _set_auto_commit(connection, enable=False)


class Transaction(PreparedCommandMixin):
    """Context manager for running multiple commands in a transaction.

    This implementation uses thread-local storage to track transaction state,
    making it safe to use in multi-threaded environments. Each thread can have
    its own transaction for the same connection, but nested transactions within
    the same thread are not supported.

    Every query verb accepts the transaction in place of a connection, and
    prepared commands built on it run inside it.

    Examples
        with Transaction(cn) as tx:
            tx.execute('delete from t where Key = %(Key)s', {'Key': 'A'})
            tx.execute('update t set Value = %(Value)s', {'Value': 1})
    """

    def __init__(self, cn: Any) -> None:
        self.connection = cn

        if not hasattr(_local, 'active_transactions'):
            _local.active_transactions = {}

        if id(cn) in _local.active_transactions:
            raise RuntimeError('Nested transactions are not supported')

    @property
    def dialect(self) -> str:
        """Dialect name of the underlying connection."""
        return get_dialect_name(self.connection)

    @property
    def dbapi_connection(self) -> Any:
        """Raw DBAPI connection the transaction runs on."""
        return get_raw_connection(self.connection)

    def __enter__(self):
        _local.active_transactions[id(self.connection)] = True
        _track_transaction(self.connection, True)

        disable_auto_commit(self.connection)
        logger.debug(f'Started transaction for connection {id(self.connection)}')

        return self

    def __exit__(self, exc_type: type | None, value: Exception | None, traceback: Any | None) -> None:
        try:
            raw_conn = self.dbapi_connection

            if exc_type is not None:
                raw_conn.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                raw_conn.commit()
                logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            _local.active_transactions.pop(id(self.connection), None)
            enable_auto_commit(self.connection)

            _track_transaction(self.connection, False)

            logger.debug(f'Transaction cleanup complete for connection {id(self.connection)}')
