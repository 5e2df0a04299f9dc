import sqlite3
import threading

import pytest
import sequel as db


def test_sqlite_transaction_commit(sqlite_file_db):
    """Test that SQLite transactions commit properly"""
    conn, _ = sqlite_file_db

    with db.transaction(conn) as tx:
        tx.execute('INSERT INTO test_table (Key, Value) VALUES (%(Key)s, %(Value)s)',
                   {'Key': 'David', 'Value': 40})
        tx.execute('UPDATE test_table SET Value = %(Value)s WHERE Key = %(Key)s',
                   {'Key': 'Bob', 'Value': 25})

    assert db.query_scalar(conn, "SELECT Value FROM test_table WHERE Key = 'Bob'", int) == 25
    assert db.query_scalar(conn, "SELECT COUNT(*) FROM test_table WHERE Key = 'David'", int) == 1


def test_sqlite_transaction_rollback(sqlite_file_db):
    """Test that SQLite transactions roll back on error"""
    conn, _ = sqlite_file_db

    with pytest.raises(db.IntegrityError):
        with db.transaction(conn) as tx:
            tx.execute("UPDATE test_table SET Value = 999 WHERE Key = 'Bob'")
            tx.execute("INSERT INTO test_table (Key, Value) VALUES ('Alice', 100)")

    assert db.query_scalar(conn, "SELECT Value FROM test_table WHERE Key = 'Bob'", int) == 20


def test_prepared_command_inside_transaction(sqlite_file_db):
    """Writes of a prepared command are undone when the block raises"""
    conn, _ = sqlite_file_db

    with pytest.raises(RuntimeError, match='abort'):
        with db.transaction(conn) as tx:
            with tx.prepare_for_execute('INSERT INTO test_table (Key, Value) VALUES (:Key, :Value)',
                                        {'Key': 'C', 'Value': 3}) as insert:
                insert.run()
                insert.run({'Key': 'D', 'Value': 4})
            assert tx.query_scalar('SELECT COUNT(*) FROM test_table', int) == 4
            raise RuntimeError('abort')

    assert db.query_sequence(conn, 'SELECT Key FROM test_table ORDER BY Key') == ['Alice', 'Bob']


def test_transaction_isolation(sqlite_file_db):
    """Uncommitted writes are invisible to a second connection"""
    conn, db_path = sqlite_file_db

    conn2 = db.connect({
        'drivername': 'sqlite',
        'database': db_path
    })
    try:
        with db.transaction(conn) as tx:
            tx.execute("UPDATE test_table SET Value = 15 WHERE Key = 'Alice'")
            assert db.query_scalar(conn2, "SELECT Value FROM test_table WHERE Key = 'Alice'") == 10

        assert db.query_scalar(conn2, "SELECT Value FROM test_table WHERE Key = 'Alice'") == 15
    finally:
        conn2.close()


def test_autocommit_restored(sqlite_file_db):
    conn, _ = sqlite_file_db

    with db.transaction(conn):
        assert conn.in_transaction
        assert conn.dbapi_connection.isolation_level == 'DEFERRED'

    assert not conn.in_transaction
    assert conn.dbapi_connection.isolation_level is None


def test_nested_transactions_rejected(sqlite_file_db):
    conn, _ = sqlite_file_db

    with db.transaction(conn):
        with pytest.raises(RuntimeError, match='Nested'):
            db.transaction(conn)


def test_transactions_per_thread(sqlite_file_db):
    """Transaction tracking is thread-local"""
    conn, _ = sqlite_file_db
    errors = []

    def start_transaction():
        try:
            db.transaction(conn)
        except RuntimeError as err:
            errors.append(err)

    with db.transaction(conn):
        thread = threading.Thread(target=start_transaction)
        thread.start()
        thread.join()

    assert errors == []


def test_raw_connection_transaction(tmp_path):
    path = str(tmp_path / 'raw.db')
    conn = sqlite3.connect(path)
    try:
        db.execute(conn, 'CREATE TABLE t (Key TEXT)')
        with db.transaction(conn) as tx:
            tx.execute('INSERT INTO t VALUES (%(Key)s)', {'Key': 'A'})

        other = sqlite3.connect(path)
        try:
            assert db.query_sequence(other, 'SELECT Key FROM t') == ['A']
        finally:
            other.close()
    finally:
        conn.close()
