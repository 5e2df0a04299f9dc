"""
Coercion of raw column values into requested Python types.

Drivers return whatever the column holds. Scalar and single-column queries ask
for a specific type instead, so each cell goes through `coerce_value`:

    cell → normalize NULL → nullable check → generic conversion → value

``Optional[T]`` (or ``T | None``) marks a nullable request. NULL converts to
None for nullable requests and for reference-like types (``str``, ``bytes``,
``object``), and fails for value types such as ``int`` or ``datetime.date``.
"""
import datetime
import numbers
import types
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Union, get_args, get_origin

import dateutil.parser
import pandas as pd
from sequel.exceptions import TypeConversionError, ValueFormatError

__all__ = [
    'VALUE_TYPES',
    'coerce_value',
    'is_null',
    'is_value_type',
    'normalize_null',
    'unwrap_optional',
]

VALUE_TYPES = (
    bool, int, float, complex, Decimal,
    datetime.date, datetime.datetime, datetime.time, datetime.timedelta,
    Enum,
)

_NONE_TYPE = type(None)


def is_null(value: Any) -> bool:
    """Check whether a cell holds the database NULL marker.

    >>> is_null(None), is_null(pd.NA), is_null(0), is_null('')
    (True, True, False, False)
    """
    return value is None or value is pd.NA or value is pd.NaT


def normalize_null(value: Any) -> Any:
    """Replace any NULL marker with None."""
    return None if is_null(value) else value


def unwrap_optional(target: Any) -> tuple[Any, bool]:
    """Split ``Optional[T]`` into ``(T, True)``; other targets give ``(target, False)``.

    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(str)
    (<class 'str'>, False)
    """
    if get_origin(target) not in {Union, types.UnionType}:
        return target, False

    args = get_args(target)
    remaining = tuple(arg for arg in args if arg is not _NONE_TYPE)
    nullable = len(remaining) != len(args)
    if len(remaining) == 1:
        return remaining[0], nullable
    return Union[remaining], nullable


def is_value_type(target: Any) -> bool:
    """Check whether NULL is rejected for a non-nullable request of this type.
    """
    return isinstance(target, type) and issubclass(target, VALUE_TYPES)


def _is_instance(value: Any, target: type) -> bool:
    """isinstance without the bool-is-int and datetime-is-date surprises."""
    if not isinstance(value, target):
        return False
    if isinstance(value, bool) and target is not bool and issubclass(target, int) and not issubclass(target, Enum):
        return False
    if isinstance(value, datetime.datetime) and target is datetime.date:
        return False
    return True


def _invalid_cast(value: Any, target: Any) -> TypeConversionError:
    name = getattr(target, '__name__', repr(target))
    return TypeConversionError(f'Invalid cast from {type(value).__name__} to {name}')


def _format_error(value: Any, target: Any) -> ValueFormatError:
    name = getattr(target, '__name__', repr(target))
    return ValueFormatError(f'Input string {value!r} was not in a correct format for {name}')


def _to_int(value: Any) -> int:
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real | Decimal):
        try:
            return int(round(value))
        except (OverflowError, ValueError) as err:
            raise _invalid_cast(value, int) from err
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as err:
            raise _format_error(value, int) from err
    raise _invalid_cast(value, int)


def _to_float(value: Any) -> float:
    if isinstance(value, numbers.Real | Decimal):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as err:
            raise _format_error(value, float) from err
    raise _invalid_cast(value, float)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, numbers.Integral):
        return Decimal(int(value))
    if isinstance(value, numbers.Real):
        return Decimal(str(float(value)))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as err:
            raise _format_error(value, Decimal) from err
    raise _invalid_cast(value, Decimal)


def _to_complex(value: Any) -> complex:
    if isinstance(value, numbers.Number):
        return complex(value)
    if isinstance(value, str):
        try:
            return complex(value.strip())
        except ValueError as err:
            raise _format_error(value, complex) from err
    raise _invalid_cast(value, complex)


def _to_bool(value: Any) -> bool:
    if isinstance(value, numbers.Number | Decimal):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text == 'true':
            return True
        if text == 'false':
            return False
        raise _format_error(value, bool)
    raise _invalid_cast(value, bool)


def _to_str(value: Any) -> str:
    if isinstance(value, bytes | bytearray | memoryview):
        try:
            return bytes(value).decode()
        except UnicodeDecodeError as err:
            raise _invalid_cast(value, str) from err
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    return str(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode()
    if isinstance(value, bytearray | memoryview):
        return bytes(value)
    raise _invalid_cast(value, bytes)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time())
    if isinstance(value, str):
        try:
            return dateutil.parser.isoparse(value.strip())
        except ValueError as err:
            raise _format_error(value, datetime.datetime) from err
    raise _invalid_cast(value, datetime.datetime)


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, str):
        try:
            return dateutil.parser.isoparse(value.strip()).date()
        except ValueError as err:
            raise _format_error(value, datetime.date) from err
    raise _invalid_cast(value, datetime.date)


def _to_time(value: Any) -> datetime.time:
    if isinstance(value, datetime.datetime):
        return value.time()
    if isinstance(value, str):
        try:
            return datetime.time.fromisoformat(value.strip())
        except ValueError as err:
            raise _format_error(value, datetime.time) from err
    raise _invalid_cast(value, datetime.time)


_CONVERTERS: dict[type, Callable[[Any], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    complex: _to_complex,
    str: _to_str,
    bytes: _to_bytes,
    datetime.datetime: _to_datetime,
    datetime.date: _to_date,
    datetime.time: _to_time,
}


def _convert(value: Any, target: Any) -> Any:
    """Convert a non-NULL value to a concrete (non-optional) target."""
    if target is Any or target is object:
        return value

    if get_origin(target) in {Union, types.UnionType}:
        for arg in get_args(target):
            try:
                return _convert(value, arg)
            except TypeConversionError:
                continue
        raise _invalid_cast(value, target)

    if not isinstance(target, type):
        raise _invalid_cast(value, target)

    if _is_instance(value, target):
        return value

    if issubclass(target, Enum):
        try:
            return target(value)
        except ValueError as err:
            raise _format_error(value, target) from err

    converter = _CONVERTERS.get(target)
    if converter is None:
        raise _invalid_cast(value, target)
    return converter(value)


def coerce_value(value: Any, target: Any = object) -> Any:
    """Coerce a raw cell value to the requested type.

    >>> coerce_value(42, int)
    42
    >>> coerce_value('42', int)
    42
    >>> coerce_value(None, int | None) is None
    True
    >>> coerce_value(None, str) is None
    True
    >>> coerce_value(None, int)
    Traceback (most recent call last):
    ...
    sequel.exceptions.TypeConversionError: Null object cannot be converted to int
    """
    value = normalize_null(value)
    concrete, nullable = unwrap_optional(target)

    if value is None:
        if nullable or not is_value_type(concrete):
            return None
        name = getattr(concrete, '__name__', repr(concrete))
        raise TypeConversionError(f'Null object cannot be converted to {name}')

    return _convert(value, concrete)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
