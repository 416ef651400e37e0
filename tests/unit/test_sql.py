"""
Unit tests for literal rendering and placeholder expansion.
"""
import numpy as np
import pandas as pd
import pytest
from drizzledb.exceptions import ParamCountMismatch, UnsupportedParameterKind
from drizzledb.sql import escape_value, expand_placeholders, has_placeholders
from drizzledb.sql import quote_identifier, unquote_identifier
from drizzledb.types import ParameterType
from pymysql.converters import escape_string


class TestEscapeValue:
    """Rendering one value as a SQL literal"""

    def test_none_renders_null_for_every_kind(self):
        for kind in (None, ParameterType.STR, ParameterType.INT, ParameterType.BOOL):
            assert escape_value(None, kind, escape_string) == 'NULL'

    def test_null_kind_ignores_value(self):
        assert escape_value('abc', ParameterType.NULL, escape_string) == 'NULL'

    def test_int_and_bool_kinds_render_integers(self):
        assert escape_value(42, ParameterType.INT, escape_string) == '42'
        assert escape_value('17', ParameterType.INT, escape_string) == '17'
        assert escape_value(True, ParameterType.BOOL, escape_string) == '1'
        assert escape_value(False, ParameterType.BOOL, escape_string) == '0'

    def test_strings_are_quoted_and_escaped(self):
        assert escape_value("O'Brien", ParameterType.STR, escape_string) == "'O\\'Brien'"
        assert escape_value('a\\b', None, escape_string) == "'a\\\\b'"
        assert escape_value('nul\x00byte', ParameterType.LOB, escape_string) == "'nul\\0byte'"

    def test_undeclared_numbers_are_quoted(self):
        assert escape_value(3.5, None, escape_string) == "'3.5'"
        assert escape_value(7, ParameterType.STR, escape_string) == "'7'"

    def test_bool_in_string_path(self):
        assert escape_value(True, ParameterType.STR, escape_string) == "'1'"

    def test_bytes_render_as_hex(self):
        assert escape_value(b'\x00\xffab', ParameterType.LOB, escape_string) == "X'00ff6162'"

    def test_numpy_and_pandas_scalars(self):
        assert escape_value(np.int64(5), ParameterType.INT, escape_string) == '5'
        assert escape_value(float('nan'), ParameterType.STR, escape_string) == 'NULL'
        assert escape_value(pd.NaT, None, escape_string) == 'NULL'

    def test_unsupported_kind_reports_kind_and_position(self):
        with pytest.raises(UnsupportedParameterKind) as exc_info:
            escape_value(1, ParameterType.STMT, escape_string, position=2)
        assert exc_info.value.kind == ParameterType.STMT
        assert exc_info.value.position == 2


class TestExpandPlaceholders:
    """Splicing literals into a template"""

    def test_no_params_returns_template_verbatim(self):
        sql = 'SELECT ? FROM t'
        assert expand_placeholders(sql, [], escape_string) == sql

    def test_insert_scenario(self):
        sql = expand_placeholders(
            'INSERT INTO t (a,b) VALUES (?, ?)',
            [(42, ParameterType.INT), ("O'Brien", ParameterType.STR)],
            escape_string)
        assert sql == "INSERT INTO t (a,b) VALUES (42, 'O\\'Brien')"

    @pytest.mark.parametrize('count', [1, 2, 5])
    def test_matching_counts_leave_no_placeholders(self, count):
        template = 'SELECT ' + ', '.join(['?'] * count)
        params = [(i, ParameterType.INT) for i in range(count)]
        assert '?' not in expand_placeholders(template, params, escape_string)

    @pytest.mark.parametrize(('placeholders', 'params'), [(2, 1), (1, 2), (3, 1)])
    def test_mismatched_counts_fail(self, placeholders, params):
        template = 'SELECT ' + ', '.join(['?'] * placeholders)
        with pytest.raises(ParamCountMismatch) as exc_info:
            expand_placeholders(template, [(1, None)] * params, escape_string)
        assert exc_info.value.placeholders == placeholders
        assert exc_info.value.params == params

    def test_question_mark_inside_value_is_not_rescanned(self):
        sql = expand_placeholders('SELECT ?, ?', [('why?', None), (1, ParameterType.INT)],
                                  escape_string)
        assert sql == "SELECT 'why?', 1"


def test_has_placeholders():
    assert has_placeholders('SELECT * FROM t WHERE a = ?')
    assert not has_placeholders('SELECT 1')
    assert not has_placeholders(None)


def test_quote_identifier():
    assert quote_identifier('users') == '`users`'
    assert quote_identifier('db.users') == '`db`.`users`'
    assert quote_identifier('we`ird') == '`we``ird`'
    assert quote_identifier('users', '"') == '"users"'


@pytest.mark.parametrize(('identifier', 'expected'), [
    ('`users`', 'users'),
    ('"users"', 'users'),
    ('[users]', 'users'),
    ('users', 'users'),
    ('`', '`'),
    ('', ''),
])
def test_unquote_identifier(identifier, expected):
    assert unquote_identifier(identifier) == expected
