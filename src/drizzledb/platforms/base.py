"""
Base platform interface for SQL rendering.

Defines the abstract base class that all engine platforms inherit from. A
platform is a stateless set of rendering functions: it turns portable
schema objects and type descriptors into one engine's SQL text and never
performs I/O.

Engine specific platforms override the pieces their dialect spells
differently; everything rendered the same way across engines lives here.
"""
import logging
from enum import Enum
from typing import Any

from drizzledb.exceptions import InvalidArgumentKind, OperationNotSupported
from drizzledb.exceptions import UnknownDatabaseType
from drizzledb.schema.objects import Column, ForeignKeyConstraint, Index, Table
from drizzledb.schema.objects import TableDiff
from drizzledb.sql import quote_identifier as sql_quote_identifier
from drizzledb.sql import quote_single_identifier
from drizzledb.types import Type
from pymysql.converters import escape_string

logger = logging.getLogger(__name__)

# Registry of platform name -> platform class
# Defined here to avoid circular imports (concrete platforms import from base)
_PLATFORM_REGISTRY: dict[str, type['AbstractPlatform']] = {}

# Portable types whose default value renders as a bare number
_INTEGER_TYPES = {'integer', 'bigint', 'smallint'}

_REFERENTIAL_ACTIONS = {'CASCADE', 'SET NULL', 'NO ACTION', 'RESTRICT', 'SET DEFAULT'}


def register_platform(name: str):
    """Decorator to register a platform class under a name.

    Usage:
        @register_platform('drizzle')
        class DrizzlePlatform(AbstractPlatform):
            ...
    """
    def decorator(cls: type['AbstractPlatform']) -> type['AbstractPlatform']:
        _PLATFORM_REGISTRY[name] = cls
        return cls
    return decorator


class IsolationLevel(Enum):
    READ_UNCOMMITTED = 'READ UNCOMMITTED'
    READ_COMMITTED = 'READ COMMITTED'
    REPEATABLE_READ = 'REPEATABLE READ'
    SERIALIZABLE = 'SERIALIZABLE'


def quote_string_literal(value: str) -> str:
    """Single-quote text for inlining into DDL or a catalog query.

    Quotes, backslashes and control bytes are escaped the way the server's
    default SQL mode reads them.
    """
    return "'" + escape_string(str(value)) + "'"


class AbstractPlatform:
    """Base class for engine platforms.

    Subclasses must provide the type declaration methods named by the
    portable types (get_integer_type_declaration_sql and friends) and
    initialize_type_mappings().
    """

    identifier_quote = '"'
    reserved_keywords: frozenset[str] = frozenset()

    def __init__(self) -> None:
        self._type_mapping: dict[str, str] | None = None

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}()'

    def get_name(self) -> str:
        raise NotImplementedError

    def _not_supported(self, operation: str) -> OperationNotSupported:
        return OperationNotSupported(operation, self.get_name())

    # Identifiers

    def get_identifier_quote_character(self) -> str:
        return self.identifier_quote

    def quote_identifier(self, identifier: str) -> str:
        """Quote a possibly dotted identifier with the platform quote character."""
        return sql_quote_identifier(identifier, self.get_identifier_quote_character())

    def quote_single_identifier(self, identifier: str) -> str:
        return quote_single_identifier(identifier, self.get_identifier_quote_character())

    def get_reserved_keywords(self) -> frozenset[str]:
        """Upper-cased words that must be quoted to be used as identifiers."""
        return self.reserved_keywords

    def is_reserved_keyword(self, word: str) -> bool:
        return word.upper() in self.get_reserved_keywords()

    def quote_identifier_if_reserved(self, identifier: str) -> str:
        """Quote only the parts of a dotted identifier that are reserved words.

        Example
            platform.quote_identifier_if_reserved('shop.order')  # shop.`order`
        """
        return '.'.join(self.quote_single_identifier(part) if self.is_reserved_keyword(part) else part
                        for part in identifier.split('.'))

    # Type mapping

    def initialize_type_mappings(self) -> dict[str, str]:
        """Native type name -> portable type name."""
        raise NotImplementedError

    def _mapping(self) -> dict[str, str]:
        if self._type_mapping is None:
            self._type_mapping = dict(self.initialize_type_mappings())
        return self._type_mapping

    def get_portable_type_mapping(self, db_type: str) -> str:
        """Portable type name for a native type name.

        Raises
            UnknownDatabaseType: If the native type has no mapping
        """
        db_type = db_type.lower()
        try:
            return self._mapping()[db_type]
        except KeyError:
            raise UnknownDatabaseType(db_type, self.get_name()) from None

    def has_type_mapping(self, db_type: str) -> bool:
        return db_type.lower() in self._mapping()

    def register_type_mapping(self, db_type: str, portable_type: str) -> None:
        """Map a native type to a registered portable type."""
        if not Type.has_type(portable_type):
            raise ValueError(f'Unknown column type {portable_type!r} requested')
        self._mapping()[db_type.lower()] = portable_type.lower()
        logger.debug(f'{self.get_name()}: mapped native type {db_type} to {portable_type}')

    # Type declarations

    def get_varchar_default_length(self) -> int:
        return 255

    def get_varchar_max_length(self) -> int:
        return 4000

    def get_varchar_type_declaration_sql_snippet(self, length: int | None, fixed: bool) -> str:
        raise NotImplementedError

    def get_varchar_type_declaration_sql(self, field: dict[str, Any]) -> str:
        """Character column; lengths beyond the varchar limit become a clob."""
        length = field.get('length')
        if length is None:
            length = self.get_varchar_default_length()
        fixed = bool(field.get('fixed'))
        if length > self.get_varchar_max_length():
            return self.get_clob_type_declaration_sql(field)
        return self.get_varchar_type_declaration_sql_snippet(length, fixed)

    def get_guid_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return self.get_varchar_type_declaration_sql({**field, 'length': 36, 'fixed': True})

    def get_decimal_type_declaration_sql(self, field: dict[str, Any]) -> str:
        precision = field.get('precision') or 10
        scale = field.get('scale') or 0
        return f'NUMERIC({precision}, {scale})'

    def get_float_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'DOUBLE PRECISION'

    def get_datetime_tz_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return self.get_datetime_type_declaration_sql(field)

    # Column declarations

    def get_current_timestamp_sql(self) -> str:
        return 'CURRENT_TIMESTAMP'

    def get_unique_field_declaration_sql(self) -> str:
        return 'UNIQUE'

    def get_column_charset_declaration_sql(self, charset: str) -> str:
        return ''

    def get_collation_field_declaration(self, collation: str) -> str:
        return f'COLLATE {collation}'

    def supports_inline_column_comments(self) -> bool:
        return False

    def supports_identity_columns(self) -> bool:
        return False

    def prefers_identity_columns(self) -> bool:
        return False

    def supports_views(self) -> bool:
        return True

    def supports_foreign_key_constraints(self) -> bool:
        return True

    def convert_booleans(self, item: Any) -> Any:
        """Render booleans for inlining; containers are converted element-wise."""
        if isinstance(item, dict):
            return {key: self.convert_booleans(value) for key, value in item.items()}
        if isinstance(item, list | tuple):
            return [self.convert_booleans(value) for value in item]
        if item is None:
            return None
        return int(bool(item))

    def get_default_value_declaration_sql(self, field: dict[str, Any]) -> str:
        """DEFAULT clause for a column field mapping, empty when there is none."""
        default = '' if field.get('notnull') else ' DEFAULT NULL'
        value = field.get('default')
        if value is None:
            return default

        type_name = str(field.get('type') or '')
        if type_name in _INTEGER_TYPES:
            return f' DEFAULT {value}'
        if type_name in {'datetime', 'datetimetz'} and value == self.get_current_timestamp_sql():
            return f' DEFAULT {self.get_current_timestamp_sql()}'
        if type_name == 'boolean':
            return f' DEFAULT {self.convert_booleans(value)}'
        return f' DEFAULT {quote_string_literal(value)}'

    def get_column_comment(self, column: Column) -> str:
        """Column comment with the portable type hint appended where one is needed."""
        comment = column.comment or ''
        if column.type.requires_comment_hint:
            comment += f'(DC2Type:{column.type.name})'
        return comment

    def get_column_declaration_sql(self, name: str, field: dict[str, Any]) -> str:
        """One column of a CREATE TABLE or ALTER TABLE statement."""
        if field.get('column_definition'):
            column_def = field['column_definition']
        else:
            default = self.get_default_value_declaration_sql(field)
            charset = ''
            if field.get('charset'):
                charset_sql = self.get_column_charset_declaration_sql(field['charset'])
                charset = f' {charset_sql}' if charset_sql else ''
            collation = ''
            if field.get('collation'):
                collation = f" {self.get_collation_field_declaration(field['collation'])}"
            notnull = ' NOT NULL' if field.get('notnull') else ''
            unique = f' {self.get_unique_field_declaration_sql()}' if field.get('unique') else ''
            check = f" {field['check']}" if field.get('check') else ''
            type_decl = field['type'].get_sql_declaration(field, self)
            column_def = type_decl + charset + default + notnull + unique + check + collation

        if self.supports_inline_column_comments() and field.get('comment'):
            column_def += f" COMMENT {quote_string_literal(field['comment'])}"

        return f'{name} {column_def}'

    def get_column_declaration_list_sql(self, fields: dict[str, dict[str, Any]]) -> str:
        return ', '.join(self.get_column_declaration_sql(name, field)
                         for name, field in fields.items())

    # Indexes and constraints

    def get_index_field_declaration_list_sql(self, columns: list[str]) -> str:
        return ', '.join(columns)

    def get_create_index_sql_flags(self, index: Index) -> str:
        return 'UNIQUE ' if index.is_unique else ''

    def get_unique_constraint_declaration_sql(self, name: str, index: Index) -> str:
        columns = index.get_quoted_columns(self)
        if not columns:
            raise InvalidArgumentKind("Incomplete definition. 'columns' required.")
        return f'CONSTRAINT {name} UNIQUE ({self.get_index_field_declaration_list_sql(columns)})'

    def get_index_declaration_sql(self, name: str, index: Index) -> str:
        columns = index.get_quoted_columns(self)
        if not columns:
            raise InvalidArgumentKind("Incomplete definition. 'columns' required.")
        flags = self.get_create_index_sql_flags(index)
        return f'{flags}INDEX {name} ({self.get_index_field_declaration_list_sql(columns)})'

    def _table_name(self, table: Table | str, operation: str) -> str:
        if isinstance(table, Table):
            return table.get_quoted_name(self)
        if isinstance(table, str):
            return table
        raise InvalidArgumentKind(f'{operation} expects table to be a string or Table, got {type(table).__name__}')

    def get_create_index_sql(self, index: Index, table: Table | str) -> str:
        table = self._table_name(table, 'get_create_index_sql()')
        if index.is_primary:
            return self.get_create_primary_key_sql(index, table)
        columns = self.get_index_field_declaration_list_sql(index.get_quoted_columns(self))
        flags = self.get_create_index_sql_flags(index)
        return f'CREATE {flags}INDEX {index.get_quoted_name(self)} ON {table} ({columns})'

    def get_create_primary_key_sql(self, index: Index, table: Table | str) -> str:
        table = self._table_name(table, 'get_create_primary_key_sql()')
        columns = self.get_index_field_declaration_list_sql(index.get_quoted_columns(self))
        return f'ALTER TABLE {table} ADD PRIMARY KEY ({columns})'

    def get_drop_index_sql(self, index: Index | str, table: Table | str | None = None) -> str:
        if isinstance(index, Index):
            index = index.get_quoted_name(self)
        elif not isinstance(index, str):
            raise InvalidArgumentKind(f'get_drop_index_sql() expects index to be a string or Index, got {type(index).__name__}')
        return f'DROP INDEX {index}'

    def get_drop_constraint_sql(self, constraint: Index | ForeignKeyConstraint | str,
                                table: Table | str) -> str:
        if not isinstance(constraint, str):
            constraint = constraint.get_quoted_name(self)
        table = self._table_name(table, 'get_drop_constraint_sql()')
        return f'ALTER TABLE {table} DROP CONSTRAINT {constraint}'

    def get_foreign_key_referential_action_sql(self, action: str) -> str:
        upper = action.upper()
        if upper not in _REFERENTIAL_ACTIONS:
            raise InvalidArgumentKind(f'Invalid foreign key action: {upper}')
        return upper

    def get_advanced_foreign_key_options_sql(self, fk: ForeignKeyConstraint) -> str:
        query = ''
        if fk.has_option('on_update'):
            query += f" ON UPDATE {self.get_foreign_key_referential_action_sql(fk.on_update)}"
        if fk.has_option('on_delete'):
            query += f" ON DELETE {self.get_foreign_key_referential_action_sql(fk.on_delete)}"
        return query

    def get_foreign_key_base_declaration_sql(self, fk: ForeignKeyConstraint) -> str:
        sql = ''
        if fk.name:
            sql += f'CONSTRAINT {fk.get_quoted_name(self)} '
        if not fk.local_columns:
            raise InvalidArgumentKind("Incomplete definition. 'local' required.")
        if not fk.foreign_columns:
            raise InvalidArgumentKind("Incomplete definition. 'foreign' required.")
        if not fk.foreign_table_name:
            raise InvalidArgumentKind("Incomplete definition. 'foreign_table' required.")
        local = ', '.join(fk.get_quoted_local_columns(self))
        foreign = ', '.join(fk.get_quoted_foreign_columns(self))
        return sql + f'FOREIGN KEY ({local}) REFERENCES {fk.get_quoted_foreign_table_name(self)} ({foreign})'

    def get_foreign_key_declaration_sql(self, fk: ForeignKeyConstraint) -> str:
        return self.get_foreign_key_base_declaration_sql(fk) + self.get_advanced_foreign_key_options_sql(fk)

    def get_create_foreign_key_sql(self, fk: ForeignKeyConstraint, table: Table | str) -> str:
        table = self._table_name(table, 'get_create_foreign_key_sql()')
        return f'ALTER TABLE {table} ADD {self.get_foreign_key_declaration_sql(fk)}'

    def get_drop_foreign_key_sql(self, fk: ForeignKeyConstraint | str, table: Table | str) -> str:
        if isinstance(fk, ForeignKeyConstraint):
            fk = fk.get_quoted_name(self)
        elif not isinstance(fk, str):
            raise InvalidArgumentKind(f'get_drop_foreign_key_sql() expects a string or ForeignKeyConstraint, got {type(fk).__name__}')
        table = self._table_name(table, 'get_drop_foreign_key_sql()')
        return f'ALTER TABLE {table} DROP CONSTRAINT {fk}'

    # Tables

    def _create_table_sql(self, table_name: str, columns: dict[str, dict[str, Any]],
                          options: dict[str, Any]) -> list[str]:
        raise NotImplementedError

    def get_create_table_sql(self, table: Table) -> list[str]:
        """Statements creating table, its indexes and its foreign keys."""
        if not isinstance(table, Table):
            raise InvalidArgumentKind(f'get_create_table_sql() expects a Table, got {type(table).__name__}')
        table_name = table.get_quoted_name(self)
        if not table.get_columns():
            raise InvalidArgumentKind(f'No columns specified for table {table_name}')

        options = dict(table.options)
        options['unique_constraints'] = dict(options.get('unique_constraints') or {})
        options['indexes'] = {}
        options['primary'] = []
        options['foreign_keys'] = table.get_foreign_keys()

        for index in table.get_indexes():
            if index.is_primary:
                options['primary'] = index.get_quoted_columns(self)
            else:
                options['indexes'][index.get_quoted_name(self)] = index

        primary = {c.lower() for c in table.get_primary_key_columns()}
        columns = {}
        for column in table.get_columns():
            field = column.to_dict()
            field['name'] = column.get_quoted_name(self)
            field['primary'] = column.name.lower() in primary
            if self.supports_inline_column_comments():
                field['comment'] = self.get_column_comment(column)
            columns[field['name']] = field

        return self._create_table_sql(table_name, columns, options)

    def get_drop_table_sql(self, table: Table | str) -> str:
        return f"DROP TABLE {self._table_name(table, 'get_drop_table_sql()')}"

    def get_drop_temporary_table_sql(self, table: Table | str) -> str:
        return self.get_drop_table_sql(table)

    def get_alter_table_sql(self, diff: TableDiff) -> list[str]:
        raise self._not_supported('alter table')

    def get_pre_alter_table_index_foreign_key_sql(self, diff: TableDiff) -> list[str]:
        """Drops that must run before the ALTER TABLE statement."""
        table = diff.name
        sql = []
        if self.supports_foreign_key_constraints():
            for fk in diff.removed_foreign_keys + diff.changed_foreign_keys:
                sql.append(self.get_drop_foreign_key_sql(fk, table))
        for index in list(diff.removed_indexes.values()) + list(diff.changed_indexes.values()):
            sql.append(self.get_drop_index_sql(index, table))
        return sql

    def get_post_alter_table_index_foreign_key_sql(self, diff: TableDiff) -> list[str]:
        """Creates that must run after the ALTER TABLE statement."""
        table = diff.new_name or diff.name
        sql = []
        if self.supports_foreign_key_constraints():
            for fk in diff.added_foreign_keys + diff.changed_foreign_keys:
                sql.append(self.get_create_foreign_key_sql(fk, table))
        for index in list(diff.added_indexes.values()) + list(diff.changed_indexes.values()):
            sql.append(self.get_create_index_sql(index, table))
        return sql

    # Transactions

    def _transaction_isolation_level_sql(self, level: IsolationLevel | str) -> str:
        if isinstance(level, IsolationLevel):
            return level.value
        try:
            return IsolationLevel[str(level).upper().replace(' ', '_')].value
        except KeyError:
            raise InvalidArgumentKind(f'Invalid isolation level {level!r}') from None

    def get_set_transaction_isolation_sql(self, level: IsolationLevel | str) -> str:
        raise self._not_supported('set transaction isolation')

    def get_default_transaction_isolation_level(self) -> IsolationLevel:
        return IsolationLevel.READ_COMMITTED

    # Catalog queries

    def get_list_databases_sql(self) -> str:
        raise self._not_supported('list databases')

    def get_list_tables_sql(self) -> str:
        raise self._not_supported('list tables')

    def get_list_table_columns_sql(self, table: str, database: str | None = None) -> str:
        raise self._not_supported('list table columns')

    def get_list_table_indexes_sql(self, table: str, database: str | None = None) -> str:
        raise self._not_supported('list table indexes')

    def get_list_table_foreign_keys_sql(self, table: str, database: str | None = None) -> str:
        raise self._not_supported('list table foreign keys')

    def get_list_views_sql(self, database: str | None) -> str:
        raise self._not_supported('list views')

    def get_list_sequences_sql(self, database: str | None) -> str:
        raise self._not_supported('list sequences')

    def get_list_users_sql(self) -> str:
        raise self._not_supported('list users')

    def get_create_database_sql(self, name: str) -> str:
        raise self._not_supported('create database')

    def get_drop_database_sql(self, name: str) -> str:
        raise self._not_supported('drop database')

    def get_create_view_sql(self, name: str, sql: str) -> str:
        return f'CREATE VIEW {name} AS {sql}'

    def get_drop_view_sql(self, name: str) -> str:
        return f'DROP VIEW {name}'
