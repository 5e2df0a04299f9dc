"""
Named-parameter commands over PostgreSQL and SQLite.

Parameters come from the readable members of any object (a dict, a
dataclass, a namedtuple or a plain instance) and rows come back as instances
of a class, as a single column or as one scalar. All query verbs can be
called either as:
- Module functions: sequel.query(cn, sql, Target, params)
- ConnectionWrapper or Transaction methods: cn.query(sql, Target, params)

Every verb has a ``prepare_for_*`` form returning a `PreparedCommand` that
can be run repeatedly with new parameter values.
"""
__version__ = '0.1.0'

from sequel.coercion import coerce_value
from sequel.command import PreparedCommand, execute, prepare_for_execute
from sequel.command import prepare_for_query, prepare_for_query_anonymous
from sequel.command import prepare_for_query_rows, prepare_for_query_scalar
from sequel.command import prepare_for_query_scalar_or_none
from sequel.command import prepare_for_query_sequence, query, query_anonymous
from sequel.command import query_rows, query_scalar, query_scalar_or_none
from sequel.command import query_sequence
from sequel.connection import ConnectionWrapper, connect
from sequel.exceptions import DatabaseError, DbConnectionError, IntegrityError
from sequel.exceptions import InvalidOperationError, MissingMemberError
from sequel.exceptions import OperationalError, ProgrammingError
from sequel.exceptions import TypeConversionError, UniqueViolation
from sequel.exceptions import ValidationError, ValueFormatError
from sequel.options import DatabaseOptions
from sequel.transaction import Transaction
from sequel.transaction import Transaction as transaction

__all__ = [
    'ConnectionWrapper',
    'DatabaseError',
    'DatabaseOptions',
    'DbConnectionError',
    'IntegrityError',
    'InvalidOperationError',
    'MissingMemberError',
    'OperationalError',
    'PreparedCommand',
    'ProgrammingError',
    'Transaction',
    'TypeConversionError',
    'UniqueViolation',
    'ValidationError',
    'ValueFormatError',
    'coerce_value',
    'connect',
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
    'transaction',
]
