"""
Dialect strategies and the lookups that pick one for a connection.

Importing this package registers the PostgreSQL and SQLite strategies.
"""
from functools import lru_cache

from sequel.strategy.base import DatabaseStrategy as DatabaseStrategy
from sequel.strategy.base import get_available_dialects as get_available_dialects
from sequel.strategy.base import get_strategy_class as get_strategy_class
from sequel.strategy.base import is_supported_dialect as is_supported_dialect
from sequel.strategy.base import register_strategy as register_strategy
from sequel.strategy.postgres import PostgresStrategy as PostgresStrategy
from sequel.strategy.sqlite import SQLiteStrategy as SQLiteStrategy
from sequel.utils import get_dialect_name


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Shared strategy instance for a dialect name."""
    return get_strategy_class(dialect)()


def get_db_strategy(cn) -> DatabaseStrategy:
    """Strategy for whatever dialect ``cn`` speaks."""
    return get_strategy(get_dialect_name(cn))
