"""
Unit tests for SQL tokenization and named placeholder handling.
"""
import pytest
from sequel.sql import TokenType, named_placeholders
from sequel.sql import standardize_named_placeholders, tokenize_sql


class TestTokenize:

    def test_preserves_text(self):
        sql = "select * from t where a = %(a)s and b = 'x' and c = :c and d = ?"
        assert ''.join(t.text for t in tokenize_sql(sql)) == sql

    def test_token_types(self):
        tokens = tokenize_sql("select %(a)s, :b, 'lit', %s")
        types = [t.type for t in tokens if t.type != TokenType.SQL_TEXT]
        assert types == [TokenType.NAMED_PH, TokenType.NATIVE_NAMED_PH,
                         TokenType.STRING_LITERAL, TokenType.POSITIONAL_PH]

    def test_cast_is_not_a_placeholder(self):
        tokens = tokenize_sql('select value::text from t')
        assert all(t.type == TokenType.SQL_TEXT for t in tokens)

    def test_quoted_placeholders_are_literals(self):
        tokens = tokenize_sql("select ':a', '%(b)s', 'it''s'")
        assert [t.type for t in tokens if t.type != TokenType.SQL_TEXT] == [TokenType.STRING_LITERAL] * 3


class TestNamedPlaceholders:

    def test_order_of_appearance(self):
        assert named_placeholders('update t set b = %(b)s where a = %(a)s') == ['b', 'a']

    def test_distinct(self):
        assert named_placeholders('select %(a)s, %(a)s, :a') == ['a']

    def test_native_styles(self):
        assert named_placeholders('select :a, @b, $c') == ['a', 'b', 'c']

    @pytest.mark.parametrize('sql', [None, '', 'select 1', "select ':a'", 'select %s', 'select x::int'])
    def test_none_found(self, sql):
        assert named_placeholders(sql) == []


class TestStandardize:

    def test_sqlite_rewrites_pyformat(self):
        sql = 'insert into t (Key, Value) values (%(Key)s, %(Value)s)'
        assert standardize_named_placeholders(sql, 'sqlite') == 'insert into t (Key, Value) values (:Key, :Value)'

    def test_sqlite_keeps_native(self):
        sql = 'select * from t where Key = :Key'
        assert standardize_named_placeholders(sql, 'sqlite') == sql

    def test_sqlite_keeps_literals(self):
        sql = "select '%(Key)s' as label, %(Key)s"
        assert standardize_named_placeholders(sql, 'sqlite') == "select '%(Key)s' as label, :Key"

    def test_postgres_unchanged(self):
        sql = 'select * from t where Key = %(Key)s'
        assert standardize_named_placeholders(sql, 'postgresql') == sql
