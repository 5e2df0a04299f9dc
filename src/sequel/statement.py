"""
Statement handle over a DBAPI cursor.

A `Statement` owns one cursor for its whole life and carries a list of named
parameters whose values can be changed between runs. It is the only place
that talks to the driver: prepared commands declare parameters, prepare once,
then run the statement as a non-query, a reader or a scalar fetch as often as
they like.

Implements the execution half of Python DB-API 2.0 (PEP-249); the driver's
own exceptions propagate unchanged.
"""
import logging
import time
from functools import wraps
from typing import Any, Self

from sequel.exceptions import InvalidOperationError, ValidationError
from sequel.sql import named_placeholders
from sequel.strategy import get_strategy
from sequel.types import TypeConverter
from sequel.utils import ensure_commit, get_dialect_name, get_raw_connection

logger = logging.getLogger(__name__)

__all__ = [
    'Parameter',
    'Reader',
    'Statement',
]


def dumpsql(func):
    """Decorator for logging SQL queries and parameters."""
    @wraps(func)
    def wrapper(self, operation: str, params: dict[str, Any] | None) -> Any:
        start = time.time()
        logger.debug(f'SQL:\n{operation}\nparams: {params}')
        try:
            result = func(self, operation, params)
            if hasattr(self.dbapi_cursor, 'statusmessage'):
                logger.debug(f'Query result: {self.dbapi_cursor.statusmessage}')
            return result
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{operation}\nparams: {params}')
            raise
        finally:
            elapsed = time.time() - start
            if hasattr(self.connection, 'addcall'):
                self.connection.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Parameter:
    """A named placeholder with a settable value."""

    __slots__ = ('name', 'value')

    def __init__(self, name: str, value: Any = None) -> None:
        self.name = name
        self.value = value

    def __repr__(self) -> str:
        return f'Parameter({self.name!r}, {self.value!r})'


class Reader:
    """Forward-only view of the rows produced by a statement run.

    Call `advance` before reading the first row; it returns False once the
    rows are exhausted.
    """

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        self._names = [desc[0] for desc in (cursor.description or [])]
        self._row: Any = None
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def field_count(self) -> int:
        """Number of columns in the result."""
        return len(self._names)

    def column_name(self, index: int) -> str:
        """Name of the column at ``index``."""
        return self._names[index]

    def value(self, index: int) -> Any:
        """Raw value of the column at ``index`` in the current row (None for NULL)."""
        if self._row is None:
            raise InvalidOperationError('No current row; call advance() first')
        return self._row[index]

    def advance(self) -> bool:
        """Move to the next row."""
        if self.closed or not self._names:
            return False
        self._row = self._cursor.fetchone()
        return self._row is not None

    def close(self) -> None:
        self._row = None
        self.closed = True


class Statement:
    """Named-parameter statement bound to one connection.

    Args:
        connection: ConnectionWrapper or raw DBAPI connection
        sql: SQL text with named placeholders (``%(name)s`` or the driver's own style)
        transaction: Transaction the statement runs in, if any
    """

    def __init__(self, connection: Any, sql: str, transaction: Any = None) -> None:
        self.connection = connection
        self.transaction = transaction
        self.sql = sql
        self.strategy = get_strategy(get_dialect_name(connection))
        self.dbapi_cursor = self.strategy.create_cursor(get_raw_connection(connection))
        self.parameters: dict[str, Parameter] = {}
        self.prepared = False
        self.closed = False
        self._operation = sql

        options = getattr(connection, 'options', None)
        self.use_prepare = getattr(options, 'prepare_statements', True)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def add_parameter(self, name: str) -> Parameter:
        """Declare a named placeholder and return it."""
        if self.prepared:
            raise InvalidOperationError('Parameters cannot be added after the statement is prepared')
        if name in self.parameters:
            raise ValidationError(f'Parameter {name!r} declared twice')
        parameter = Parameter(name)
        self.parameters[name] = parameter
        return parameter

    def prepare(self) -> None:
        """Fix the statement text for the dialect.

        Server-side preparation, where the driver offers it, happens on the
        first run.
        """
        self._check_open()
        self._operation = self.strategy.standardize_sql(self.sql)
        unbound = [name for name in named_placeholders(self._operation)
                   if name not in self.parameters]
        if unbound:
            logger.debug(f'Placeholders without declared parameters: {unbound}')
        self.prepared = True

    def _check_open(self) -> None:
        if self.closed:
            raise InvalidOperationError('Statement has been closed')

    def _bound_values(self) -> dict[str, Any] | None:
        if not self.parameters:
            return None
        return TypeConverter.convert_params({name: p.value for name, p in self.parameters.items()})

    @dumpsql
    def _execute(self, operation: str, params: dict[str, Any] | None) -> None:
        self.strategy.execute(self.dbapi_cursor, operation, params, prepare=self.use_prepare)

    def _run(self) -> None:
        self._check_open()
        if not self.prepared:
            self.prepare()
        self._execute(self._operation, self._bound_values())

    def _commit_if_needed(self) -> None:
        from sequel.connection import ConnectionWrapper
        if self.transaction is None and isinstance(self.connection, ConnectionWrapper) \
           and not self.connection.in_transaction:
            ensure_commit(self.connection.dbapi_connection)

    def execute_nonquery(self) -> int:
        """Run the statement and return the number of affected rows."""
        self._run()
        rowcount = self.dbapi_cursor.rowcount
        self._commit_if_needed()
        return rowcount

    def execute_reader(self) -> Reader:
        """Run the statement and return a reader over its rows."""
        self._run()
        return Reader(self.dbapi_cursor)

    def execute_scalar(self) -> Any:
        """Run the statement and return the first column of the first row.

        Returns None when there is no row.
        """
        self._run()
        if not self.dbapi_cursor.description:
            return None
        row = self.dbapi_cursor.fetchone()
        if row is None:
            return None
        return row[0]

    def close(self) -> None:
        """Release the cursor."""
        if self.closed:
            return
        self.closed = True
        self.dbapi_cursor.close()
        logger.debug('Statement closed')
