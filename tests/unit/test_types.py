"""
Unit tests for parameter value conversion and SQLite adapters.
"""
import datetime
import math

import numpy as np
import pandas as pd
import pytest
from sequel.types import TypeConverter, adapt_date_iso, adapt_datetime_iso
from sequel.types import convert_date, convert_datetime


class TestConvertValue:

    @pytest.mark.parametrize('value', [None, math.nan, math.inf, pd.NA, pd.NaT,
                                       np.float64('nan'), np.datetime64('NaT')])
    def test_missing_values_become_none(self, value):
        assert TypeConverter.convert_value(value) is None

    def test_numpy_scalars(self):
        assert TypeConverter.convert_value(np.int64(5)) == 5
        assert type(TypeConverter.convert_value(np.int64(5))) is int
        assert type(TypeConverter.convert_value(np.float32(1.5))) is float
        assert TypeConverter.convert_value(np.bool_(True)) is True

    def test_timestamps(self):
        expected = datetime.datetime(2024, 1, 15, 10, 30)
        assert TypeConverter.convert_value(pd.Timestamp(expected)) == expected
        assert TypeConverter.convert_value(np.datetime64('2024-01-15T10:30')) == expected

    def test_plain_values_unchanged(self):
        for value in ('text', 42, 1.5, b'raw', datetime.date(2024, 1, 15)):
            assert TypeConverter.convert_value(value) == value


class TestConvertParams:

    def test_dict(self):
        assert TypeConverter.convert_params({'a': np.int64(1), 'b': math.nan}) == {'a': 1, 'b': None}

    def test_sequences_keep_type(self):
        assert TypeConverter.convert_params((np.int64(1), 'x')) == (1, 'x')
        assert TypeConverter.convert_params([pd.NA]) == [None]

    def test_none(self):
        assert TypeConverter.convert_params(None) is None


def test_sqlite_date_round_trip():
    day = datetime.date(2024, 1, 15)
    assert convert_date(adapt_date_iso(day).encode()) == day


def test_sqlite_datetime_round_trip():
    moment = datetime.datetime(2024, 1, 15, 10, 30, 5)
    assert adapt_datetime_iso(moment) == '2024-01-15 10:30:05'
    assert convert_datetime(adapt_datetime_iso(moment).encode()) == moment
