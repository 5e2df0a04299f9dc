"""
Unit tests for scalar coercion of column values.
"""
import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd
import pytest
from sequel.coercion import coerce_value, is_null, is_value_type
from sequel.coercion import normalize_null, unwrap_optional
from sequel.exceptions import TypeConversionError, ValueFormatError


class Color(Enum):
    RED = 1
    GREEN = 2


def test_null_markers_normalize_to_none():
    """Every NULL marker a driver or pandas can hand back becomes None"""
    for marker in (None, pd.NA, pd.NaT):
        assert is_null(marker)
        assert normalize_null(marker) is None

    for value in (0, '', False, b'', 0.0):
        assert not is_null(value)
        assert normalize_null(value) == value


def test_unwrap_optional():
    assert unwrap_optional(Optional[int]) == (int, True)
    assert unwrap_optional(int | None) == (int, True)
    assert unwrap_optional(int) == (int, False)
    assert unwrap_optional(object) == (object, False)


def test_value_types():
    for target in (int, float, bool, Decimal, complex, datetime.date,
                   datetime.datetime, datetime.time, datetime.timedelta, Color):
        assert is_value_type(target), target

    for target in (str, bytes, object, list):
        assert not is_value_type(target), target


class TestNull:
    """NULL coerces to None, never to a type-specific zero value"""

    @pytest.mark.parametrize('target', [int, float, bool, Decimal, datetime.date, Color])
    def test_null_to_value_type_fails(self, target):
        with pytest.raises(TypeConversionError, match='Null object cannot be converted'):
            coerce_value(None, target)

    @pytest.mark.parametrize('target', [int | None, Optional[float], Optional[datetime.date]])
    def test_null_to_nullable_is_none(self, target):
        assert coerce_value(None, target) is None

    @pytest.mark.parametrize('target', [str, bytes, object])
    def test_null_to_reference_type_is_none(self, target):
        assert coerce_value(None, target) is None

    def test_pandas_null_markers(self):
        assert coerce_value(pd.NA, int | None) is None
        assert coerce_value(pd.NaT, str) is None
        with pytest.raises(TypeConversionError):
            coerce_value(pd.NaT, datetime.datetime)


class TestConversion:

    def test_identity_when_already_target_type(self):
        today = datetime.date.today()
        assert coerce_value(today, datetime.date) is today
        assert coerce_value('Magic', str) == 'Magic'
        assert coerce_value(42, object) == 42

    def test_numeric_widening_and_narrowing(self):
        assert coerce_value(42, float) == 42.0
        assert isinstance(coerce_value(42, float), float)
        assert coerce_value(3.7, int) == 4
        assert coerce_value(Decimal('12.5'), float) == 12.5
        assert coerce_value(7, Decimal) == Decimal(7)
        assert coerce_value(3, complex) == complex(3, 0)

    def test_numpy_values(self):
        assert coerce_value(np.int64(5), int) == 5
        assert type(coerce_value(np.int64(5), int)) is int
        assert coerce_value(np.float64(1.5), float) == 1.5

    def test_bool_is_not_an_int_result(self):
        result = coerce_value(True, int)
        assert result == 1
        assert type(result) is int

    def test_int_to_bool(self):
        assert coerce_value(1, bool) is True
        assert coerce_value(0, bool) is False

    def test_string_parsing(self):
        assert coerce_value('42', int) == 42
        assert coerce_value(' 2.5 ', float) == 2.5
        assert coerce_value('true', bool) is True
        assert coerce_value('False', bool) is False
        assert coerce_value('10.25', Decimal) == Decimal('10.25')
        assert coerce_value('2024-01-15', datetime.date) == datetime.date(2024, 1, 15)
        assert coerce_value('2024-01-15T10:30:00', datetime.datetime) == datetime.datetime(2024, 1, 15, 10, 30)
        assert coerce_value('10:30:00', datetime.time) == datetime.time(10, 30)

    def test_unparsable_string_is_format_error(self):
        with pytest.raises(ValueFormatError):
            coerce_value('forty-two', int)
        with pytest.raises(ValueFormatError):
            coerce_value('not a date', datetime.date)
        with pytest.raises(ValueFormatError):
            coerce_value('maybe', bool)

    def test_format_error_is_a_conversion_error(self):
        with pytest.raises(TypeConversionError):
            coerce_value('x', float)
        with pytest.raises(ValueError):
            coerce_value('x', float)

    def test_invalid_cast(self):
        with pytest.raises(TypeConversionError, match='Invalid cast'):
            coerce_value(datetime.date(2024, 1, 1), int)
        with pytest.raises(TypeConversionError):
            coerce_value(42, bytes)

    def test_to_string(self):
        assert coerce_value(42, str) == '42'
        assert coerce_value(b'abc', str) == 'abc'
        assert coerce_value(datetime.date(2024, 1, 15), str) == '2024-01-15'

    def test_datetime_and_date(self):
        moment = datetime.datetime(2024, 1, 15, 10, 30)
        assert coerce_value(moment, datetime.date) == datetime.date(2024, 1, 15)
        assert type(coerce_value(moment, datetime.date)) is datetime.date
        assert coerce_value(datetime.date(2024, 1, 15), datetime.datetime) == datetime.datetime(2024, 1, 15)

    def test_enum(self):
        assert coerce_value(2, Color) is Color.GREEN
        with pytest.raises(ValueFormatError):
            coerce_value(9, Color)

    def test_nullable_with_value(self):
        assert coerce_value('5', int | None) == 5

    def test_union_tries_each_member(self):
        assert coerce_value('7', int | float) == 7
        assert coerce_value('7.5', int | float) == 7.5
