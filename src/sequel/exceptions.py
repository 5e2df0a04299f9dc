"""
Database-specific exception classes.
"""
import sqlite3

import psycopg


class DatabaseError(Exception):
    """Base class for all sequel errors.
    """


class ValidationError(DatabaseError, ValueError):
    """Invalid argument supplied to a command or facade function.
    """


class InvalidOperationError(DatabaseError, RuntimeError):
    """Operation not valid in the current state of a prepared command.
    """


class MissingMemberError(DatabaseError, AttributeError):
    """Parameter object lacks a member bound when the command was prepared.
    """


class TypeConversionError(DatabaseError, TypeError):
    """Error converting a database value to the requested Python type.
    """


class ValueFormatError(TypeConversionError, ValueError):
    """String value could not be parsed as the requested Python type.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    )
