"""
Prepared commands and the query verbs built on them.

A `PreparedCommand` owns one `Statement` and the bindings worked out when it
was created. The parameter object given at creation fixes the set of named
placeholders; every later `run(values)` only changes their values. What a run
returns is decided by the run strategy the command was built with:

- `NonQuery`: affected row count
- `RowQuery`: one materialized item per row
- `ScalarQuery`: first column of the first row, coerced

The one-shot verbs (`execute`, `query`, `query_scalar`, ...) create a command,
run it once and close it. Each has a ``prepare_for_*`` counterpart that hands
the open command back to the caller for repeated runs::

    with prepare_for_execute(cn, 'insert into t values (%(Key)s, %(Value)s)',
                             {'Key': 'A', 'Value': 1}) as insert:
        insert.run()
        insert.run({'Key': 'B', 'Value': 2})
"""
import logging
from typing import Any, Generic, Self, TypeVar

from sequel.binding import assign_parameters, bind_parameters
from sequel.coercion import coerce_value, normalize_null
from sequel.exceptions import InvalidOperationError, ValidationError
from sequel.materialize import ColumnMaterializer, ConstructorMaterializer
from sequel.materialize import Materializer, PropertyMaterializer
from sequel.materialize import RowMaterializer
from sequel.statement import Statement

from libb import attrdict

logger = logging.getLogger(__name__)

R = TypeVar('R')
T = TypeVar('T')

__all__ = [
    'NonQuery',
    'PreparedCommand',
    'PreparedCommandMixin',
    'RowQuery',
    'ScalarQuery',
    'execute',
    'prepare_for_execute',
    'prepare_for_query',
    'prepare_for_query_anonymous',
    'prepare_for_query_rows',
    'prepare_for_query_scalar',
    'prepare_for_query_scalar_or_none',
    'prepare_for_query_sequence',
    'query',
    'query_anonymous',
    'query_rows',
    'query_scalar',
    'query_scalar_or_none',
    'query_sequence',
]


class NonQuery:
    """Run as a non-query and return the affected row count."""

    def __call__(self, statement: Statement) -> int:
        return statement.execute_nonquery()


class RowQuery(Generic[T]):
    """Run as a reader and materialize every row."""

    def __init__(self, materializer: Materializer[T]) -> None:
        self.materializer = materializer

    def __call__(self, statement: Statement) -> list[T]:
        items: list[T] = []
        with statement.execute_reader() as reader:
            while reader.advance():
                items.append(self.materializer.create_item(reader))
        logger.debug(f'Materialized {len(items)} rows')
        return items


class ScalarQuery(Generic[T]):
    """Fetch a single value and coerce it to ``target``.

    With ``nullable`` set, NULL and an empty result give None whatever the
    target; otherwise a NULL coerced to a value type is an error.
    """

    def __init__(self, target: Any = object, nullable: bool = False) -> None:
        self.target = target
        self.nullable = nullable

    def __call__(self, statement: Statement) -> T | None:
        value = normalize_null(statement.execute_scalar())
        if value is None and self.nullable:
            return None
        return coerce_value(value, self.target)


def _resolve_connection(cn: Any) -> tuple[Any, Any]:
    """Split a connection-or-transaction into (connection, transaction)."""
    from sequel.transaction import Transaction
    if isinstance(cn, Transaction):
        return cn.connection, cn
    return cn, None


def _check_command_args(cn: Any, sql: Any) -> None:
    if cn is None:
        raise ValidationError('A connection or transaction is required')
    if sql is None:
        raise ValidationError('SQL text is required')
    if not isinstance(sql, str):
        raise ValidationError(f'SQL text must be a string, got {type(sql).__name__}')


def _check_target(target: Any, name: str = 'target') -> None:
    if target is None:
        raise ValidationError(f'{name} is required')


class PreparedCommand(Generic[R]):
    """A statement prepared once and run any number of times.

    Args:
        cn: ConnectionWrapper, Transaction or raw DBAPI connection
        sql: SQL with named placeholders
        parameters: object whose readable members become the placeholders,
            with their current values as the initial binding (None for a
            statement without parameters)
        strategy: run strategy deciding what `run` returns
    """

    def __init__(self, cn: Any, sql: str, parameters: Any, strategy: Any) -> None:
        _check_command_args(cn, sql)
        connection, transaction = _resolve_connection(cn)
        self.strategy = strategy
        self.closed = False
        self.statement = Statement(connection, sql, transaction)
        try:
            self.bindings = bind_parameters(self.statement, parameters)
            assign_parameters(self.bindings, parameters)
            self.statement.prepare()
        except Exception:
            self.statement.close()
            raise

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def run(self, values: Any = None) -> R:
        """Run the statement, first rebinding parameters from ``values`` when given.

        ``values`` must expose every member the command was prepared with;
        leaving it out reruns with the values of the previous run.
        """
        if self.closed:
            raise InvalidOperationError('Prepared command has been closed')
        assign_parameters(self.bindings, values)
        return self.strategy(self.statement)

    def close(self) -> None:
        """Release the statement. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self.statement.close()


def prepare_for_execute(cn: Any, sql: str, parameters: Any = None) -> PreparedCommand[int]:
    """Prepare a statement that returns its affected row count."""
    return PreparedCommand(cn, sql, parameters, NonQuery())


def prepare_for_query(cn: Any, sql: str, target: type[T],
                      parameters: Any = None) -> PreparedCommand[list[T]]:
    """Prepare a query whose rows become ``target()`` instances with matching attributes set."""
    _check_target(target)
    return PreparedCommand(cn, sql, parameters, RowQuery(PropertyMaterializer(target)))


def prepare_for_query_anonymous(cn: Any, sql: str, template: type[T] | T,
                                parameters: Any = None) -> PreparedCommand[list[T]]:
    """Prepare a query whose rows are passed by column name to the constructor of ``template``.

    ``template`` is a type or an instance of the type to build.
    """
    _check_target(template, 'template')
    return PreparedCommand(cn, sql, parameters, RowQuery(ConstructorMaterializer(template)))


def prepare_for_query_sequence(cn: Any, sql: str, target: Any = object,
                               parameters: Any = None) -> PreparedCommand[list[Any]]:
    """Prepare a query returning its first column as a list."""
    _check_target(target)
    return PreparedCommand(cn, sql, parameters, RowQuery(ColumnMaterializer(target)))


def prepare_for_query_scalar(cn: Any, sql: str, target: Any = object,
                             parameters: Any = None) -> PreparedCommand[Any]:
    """Prepare a query returning one value coerced to ``target``."""
    _check_target(target)
    return PreparedCommand(cn, sql, parameters, ScalarQuery(target))


def prepare_for_query_scalar_or_none(cn: Any, sql: str, target: Any = object,
                                     parameters: Any = None) -> PreparedCommand[Any]:
    """Prepare a query returning one value, or None for NULL or no row."""
    _check_target(target)
    return PreparedCommand(cn, sql, parameters, ScalarQuery(target, nullable=True))


def prepare_for_query_rows(cn: Any, sql: str,
                           parameters: Any = None) -> PreparedCommand[list[attrdict]]:
    """Prepare a query returning each row as an attrdict."""
    return PreparedCommand(cn, sql, parameters, RowQuery(RowMaterializer()))


def execute(cn: Any, sql: str, parameters: Any = None) -> int:
    """Execute a statement once and return the affected row count.
    """
    with prepare_for_execute(cn, sql, parameters) as command:
        return command.run()


def query(cn: Any, sql: str, target: type[T], parameters: Any = None) -> list[T]:
    """Run a query once and return its rows as ``target`` instances.

    ``target`` is instantiated without arguments and every column whose name
    matches a writable attribute is assigned. Fails if no column matches.
    """
    with prepare_for_query(cn, sql, target, parameters) as command:
        return command.run()


def query_anonymous(cn: Any, sql: str, template: type[T] | T,
                    parameters: Any = None) -> list[T]:
    """Run a query once and build each row through the constructor of ``template``.

    Suits immutable types such as namedtuples and frozen dataclasses.
    Constructor parameters without a matching column get their default.
    """
    with prepare_for_query_anonymous(cn, sql, template, parameters) as command:
        return command.run()


def query_sequence(cn: Any, sql: str, target: Any = object,
                   parameters: Any = None) -> list[Any]:
    """Run a query once and return its first column, coerced to ``target``.
    """
    with prepare_for_query_sequence(cn, sql, target, parameters) as command:
        return command.run()


def query_scalar(cn: Any, sql: str, target: Any = object, parameters: Any = None) -> Any:
    """Run a query once and return the first column of the first row.

    A NULL or an empty result gives None for reference targets and raises
    TypeConversionError for value targets such as int.
    """
    with prepare_for_query_scalar(cn, sql, target, parameters) as command:
        return command.run()


def query_scalar_or_none(cn: Any, sql: str, target: Any = object,
                         parameters: Any = None) -> Any | None:
    """Like `query_scalar` but returns None for NULL or no row."""
    with prepare_for_query_scalar_or_none(cn, sql, target, parameters) as command:
        return command.run()


def query_rows(cn: Any, sql: str, parameters: Any = None) -> list[attrdict]:
    """Run a query once and return each row as an attrdict."""
    with prepare_for_query_rows(cn, sql, parameters) as command:
        return command.run()


class PreparedCommandMixin:
    """Query verbs as methods, for classes that can stand in for a connection.
    """

    def execute(self, sql: str, parameters: Any = None) -> int:
        return execute(self, sql, parameters)

    def query(self, sql: str, target: type[T], parameters: Any = None) -> list[T]:
        return query(self, sql, target, parameters)

    def query_anonymous(self, sql: str, template: type[T] | T,
                        parameters: Any = None) -> list[T]:
        return query_anonymous(self, sql, template, parameters)

    def query_sequence(self, sql: str, target: Any = object,
                       parameters: Any = None) -> list[Any]:
        return query_sequence(self, sql, target, parameters)

    def query_scalar(self, sql: str, target: Any = object, parameters: Any = None) -> Any:
        return query_scalar(self, sql, target, parameters)

    def query_scalar_or_none(self, sql: str, target: Any = object,
                             parameters: Any = None) -> Any | None:
        return query_scalar_or_none(self, sql, target, parameters)

    def query_rows(self, sql: str, parameters: Any = None) -> list[attrdict]:
        return query_rows(self, sql, parameters)

    def prepare_for_execute(self, sql: str, parameters: Any = None) -> PreparedCommand[int]:
        return prepare_for_execute(self, sql, parameters)

    def prepare_for_query(self, sql: str, target: type[T],
                          parameters: Any = None) -> PreparedCommand[list[T]]:
        return prepare_for_query(self, sql, target, parameters)

    def prepare_for_query_anonymous(self, sql: str, template: type[T] | T,
                                    parameters: Any = None) -> PreparedCommand[list[T]]:
        return prepare_for_query_anonymous(self, sql, template, parameters)

    def prepare_for_query_sequence(self, sql: str, target: Any = object,
                                   parameters: Any = None) -> PreparedCommand[list[Any]]:
        return prepare_for_query_sequence(self, sql, target, parameters)

    def prepare_for_query_scalar(self, sql: str, target: Any = object,
                                 parameters: Any = None) -> PreparedCommand[Any]:
        return prepare_for_query_scalar(self, sql, target, parameters)

    def prepare_for_query_scalar_or_none(self, sql: str, target: Any = object,
                                         parameters: Any = None) -> PreparedCommand[Any]:
        return prepare_for_query_scalar_or_none(self, sql, target, parameters)

    def prepare_for_query_rows(self, sql: str,
                               parameters: Any = None) -> PreparedCommand[list[attrdict]]:
        return prepare_for_query_rows(self, sql, parameters)
