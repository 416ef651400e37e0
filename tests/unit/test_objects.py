"""
Unit tests for portable schema objects.
"""
import pytest
from drizzledb.schema import Column, ForeignKeyConstraint, Index, Table
from drizzledb.types import Type


class TestColumn:

    def test_type_by_name_and_defaults(self):
        column = Column('id', 'INTEGER')
        assert column.type is Type.get_type('integer')
        assert (column.precision, column.scale) == (10, 0)
        assert column.notnull is True

    def test_unknown_type(self):
        with pytest.raises(ValueError, match='Unknown column type'):
            Column('shape', 'geometry')

    def test_quoted_name(self, platform):
        column = Column('`select`', 'string')
        assert column.name == 'select'
        assert column.is_quoted
        assert column.get_quoted_name(platform) == '`select`'

    def test_to_dict_merges_platform_options(self):
        field = Column('a', 'string', platform_options={'collation': 'utf8_bin'}).to_dict()
        assert field['collation'] == 'utf8_bin'
        assert field['type'].name == 'string'


class TestIndex:

    def test_primary_is_unique(self):
        index = Index('primary', ['id'], is_primary=True)
        assert index.is_unique
        assert not index.is_simple

    def test_spans_columns_and_flags(self):
        index = Index('idx', ['A', 'b'], flags=['FULLTEXT'])
        assert index.spans_columns(['a'])
        assert index.spans_columns(['a', 'B'])
        assert not index.spans_columns(['b'])
        assert index.has_flag('fulltext')

    def test_equality_ignores_case(self):
        assert Index('IDX', ['A']) == Index('idx', ['a'])
        assert Index('idx', ['a']) != Index('idx', ['a'], is_unique=True)


def test_foreign_key_none_option_is_absent():
    fk = ForeignKeyConstraint(['a'], 'other', ['id'], options={'on_delete': None, 'on_update': 'CASCADE'})
    assert not fk.has_option('on_delete')
    assert fk.on_update == 'CASCADE'


class TestTable:

    def test_columns_are_case_insensitive(self):
        table = Table('users')
        table.add_column('Email', 'string')
        assert table.has_column('email')
        assert table.get_column('`EMAIL`').name == 'Email'
        with pytest.raises(KeyError):
            table.get_column('missing')

    def test_primary_key_forces_not_null(self):
        table = Table('users')
        table.add_column('id', 'integer', notnull=False)
        table.set_primary_key(['id'])
        assert table.get_column('id').notnull
        assert table.has_primary_key()
        with pytest.raises(ValueError):
            table.set_primary_key(['id'])

    def test_generated_names(self):
        table = Table('Users')
        table.add_column('a', 'integer')
        assert table.add_index(['a']).name == 'idx_users_a'
        assert table.add_unique_index(['a']).name == 'uniq_users_a'
        fk = table.add_foreign_key_constraint(Table('groups'), ['a'], ['id'])
        assert fk.name == 'fk_users_a'
        assert fk.foreign_table_name == 'groups'

    def test_options(self):
        table = Table('t', options={'engine': 'InnoDB'})
        table.add_option('comment', 'x')
        assert table.has_option('comment')
        assert table.get_option('engine') == 'InnoDB'
        assert table.get_option('charset') is None
