"""
Unit tests for connection utility functions.
"""
import pytest
from sequel.utils import ensure_commit, get_dialect_name, get_raw_connection


class TestGetDialectName:

    def test_raw_connections(self, create_simple_mock_connection):
        assert get_dialect_name(create_simple_mock_connection('postgresql')) == 'postgresql'
        assert get_dialect_name(create_simple_mock_connection('sqlite')) == 'sqlite'

    def test_unknown(self, create_simple_mock_connection):
        with pytest.raises(AttributeError):
            get_dialect_name(create_simple_mock_connection('unknown'))

    def test_string_dialect(self, fake_conn):
        assert get_dialect_name(fake_conn) == 'sqlite'

    def test_sqlalchemy_dialect(self, mocker):
        sa_connection = mocker.MagicMock()
        sa_connection.dialect.name = 'PostgreSQL'
        assert get_dialect_name(sa_connection) == 'postgresql'


class TestGetRawConnection:

    def test_wrapper(self, mocker):
        raw = object()
        wrapper = mocker.Mock(spec=['dbapi_connection'])
        wrapper.dbapi_connection = raw
        assert get_raw_connection(wrapper) is raw

    def test_driver_connection(self, mocker):
        raw = object()
        proxy = mocker.Mock(spec=['driver_connection'])
        proxy.driver_connection = raw
        assert get_raw_connection(proxy) is raw

    def test_raw(self, fake_conn):
        assert get_raw_connection(fake_conn) is fake_conn


def test_ensure_commit(mocker):
    connection = mocker.Mock(spec=['commit'])
    ensure_commit(connection)
    connection.commit.assert_called_once_with()


def test_ensure_commit_failure_is_logged(mocker, caplog):
    connection = mocker.Mock(spec=['commit'])
    connection.commit.side_effect = RuntimeError('no transaction')
    with caplog.at_level('DEBUG', logger='sequel.utils'):
        ensure_commit(connection)
    assert 'Could not commit' in caplog.text
