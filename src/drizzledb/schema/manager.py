"""
Catalog introspection.

The schema manager runs the platform's catalog queries through the
connection and turns the raw rows into portable schema objects:

    Platform catalog SQL → Connection.fetch_all → normalize_row → portable objects

Row keys are lower-cased once, at the boundary, before any field is read.
Engine specific managers override the `_portable_*` row converters.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from drizzledb.cache import Cache, cacheable_catalog
from drizzledb.exceptions import CatalogReadFailed, MissingDatabaseContext
from drizzledb.schema.objects import Column, ForeignKeyConstraint, Index, Table
from drizzledb.schema.objects import TableDiff, View
from drizzledb.sql import unquote_identifier

if TYPE_CHECKING:
    from drizzledb.connection import Connection
    from drizzledb.platforms.base import AbstractPlatform

logger = logging.getLogger(__name__)


def normalize_row(row: dict[Any, Any]) -> dict[Any, Any]:
    """Lower-case every string key of a catalog row."""
    return {key.lower() if isinstance(key, str) else key: value for key, value in row.items()}


def _as_flag(value: Any) -> bool:
    """Truthiness of a catalog flag that may arrive as text ('0', '1')."""
    if isinstance(value, str):
        return value.strip() not in {'', '0'}
    return bool(value)


class SchemaManager:
    """Reads and changes the catalog of the connection's database.
    """

    def __init__(self, connection: 'Connection') -> None:
        self.connection = connection

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.connection!r})'

    @property
    def platform(self) -> 'AbstractPlatform':
        return self.connection.platform

    @property
    def cache_scope(self) -> str:
        return self.connection.cache_scope

    @contextmanager
    def _catalog_read(self, sql: str) -> Iterator[None]:
        """Wrap failures of a catalog read, letting a missing database through."""
        try:
            yield
        except MissingDatabaseContext:
            raise
        except Exception as exc:
            logger.error(f'Catalog read failed: {exc}\nSQL:\n{sql}')
            raise CatalogReadFailed(sql, exc) from exc

    def _fetch_rows(self, sql: str) -> list[dict[str, Any]]:
        logger.debug(f'Reading catalog:\n{sql}')
        return [normalize_row(row) for row in self.connection.fetch_all(sql)]

    def _read(self, sql: str, convert) -> Any:
        with self._catalog_read(sql):
            return convert(self._fetch_rows(sql))

    # Listings

    def list_databases(self) -> list[str]:
        sql = self.platform.get_list_databases_sql()
        return self._read(sql, lambda rows: [self._portable_database(row) for row in rows])

    def list_table_names(self) -> list[str]:
        sql = self.platform.get_list_tables_sql()
        return self._read(sql, lambda rows: [self._portable_table(row) for row in rows])

    def list_tables(self) -> list[Table]:
        return [self.list_table_details(name) for name in self.list_table_names()]

    def list_table_details(self, table: str) -> Table:
        """Columns, indexes and foreign keys of table as one Table."""
        columns = self.list_table_columns(table)
        foreign_keys = []
        if self.platform.supports_foreign_key_constraints():
            foreign_keys = self.list_table_foreign_keys(table)
        indexes = self.list_table_indexes(table)
        return Table(table, list(columns.values()), list(indexes.values()), foreign_keys)

    @cacheable_catalog('catalog_columns', ttl=300)
    def list_table_columns(self, table: str, database: str | None = None) -> dict[str, Column]:
        """Columns of table keyed by lower-cased name, in catalog order.

        Raises
            MissingDatabaseContext: If no database is given or selected
            CatalogReadFailed: If the catalog query fails
        """
        database = database or self.connection.database
        sql = self.platform.get_list_table_columns_sql(table, database)

        def convert(rows):
            columns = {}
            for row in rows:
                column = self._portable_column(row)
                columns[column.name.lower()] = column
            return columns

        return self._read(sql, convert)

    @cacheable_catalog('catalog_indexes', ttl=300)
    def list_table_indexes(self, table: str) -> dict[str, Index]:
        """Indexes of table keyed by lower-cased name, the primary key under 'primary'."""
        sql = self.platform.get_list_table_indexes_sql(table, self.connection.database)
        return self._read(sql, lambda rows: self._portable_index_list(rows, table))

    @cacheable_catalog('catalog_foreign_keys', ttl=300)
    def list_table_foreign_keys(self, table: str, database: str | None = None) -> list[ForeignKeyConstraint]:
        database = database or self.connection.database
        sql = self.platform.get_list_table_foreign_keys_sql(table, database)
        return self._read(sql, lambda rows: [self._portable_foreign_key(row) for row in rows])

    def list_views(self) -> dict[str, View]:
        sql = self.platform.get_list_views_sql(self.connection.database)

        def convert(rows):
            views = {}
            for row in rows:
                view = self._portable_view(row)
                views[view.name.lower()] = view
            return views

        return self._read(sql, convert)

    def list_sequences(self, database: str | None = None) -> list[Any]:
        sql = self.platform.get_list_sequences_sql(database or self.connection.database)
        return self._read(sql, lambda rows: [self._portable_sequence(row) for row in rows])

    def list_users(self) -> list[dict[str, Any]]:
        sql = self.platform.get_list_users_sql()
        return self._read(sql, lambda rows: [self._portable_user(row) for row in rows])

    # Row converters

    def _portable_database(self, row: dict[str, Any]) -> str:
        return row['database']

    def _portable_table(self, row: dict[str, Any]) -> str:
        return next(iter(row.values()))

    def _portable_sequence(self, row: dict[str, Any]) -> Any:
        return list(row.values())[-1]

    def _portable_user(self, row: dict[str, Any]) -> dict[str, Any]:
        return {'user': row['user'], 'password': row.get('password')}

    def _portable_view(self, row: dict[str, Any]) -> View:
        return View(row['table_name'], row['view_definition'])

    def _portable_column(self, row: dict[str, Any]) -> Column:
        raise NotImplementedError

    def _portable_foreign_key(self, row: dict[str, Any]) -> ForeignKeyConstraint:
        raise NotImplementedError

    def _portable_index_list(self, rows: list[dict[str, Any]], table: str | None = None) -> dict[str, Index]:
        """Group index rows into one Index per name.

        Rows must carry key_name, column_name, non_unique and primary; the
        column order follows seq_in_index when present.
        """
        grouped: dict[str, dict[str, Any]] = {}
        for position, row in enumerate(rows):
            index_name = row['key_name']
            key = 'primary' if row['primary'] else index_name.lower()
            if key not in grouped:
                grouped[key] = {
                    'name': index_name,
                    'unique': not _as_flag(row.get('non_unique')),
                    'primary': row['primary'],
                    'flags': row.get('flags') or [],
                    'columns': [],
                    }
            sequence = row.get('seq_in_index')
            order = int(sequence) if sequence is not None else position
            grouped[key]['columns'].append((order, position, row['column_name']))

        indexes = {}
        for key, data in grouped.items():
            columns = [name for _, _, name in sorted(data['columns'])]
            indexes[key] = Index(data['name'], columns, data['unique'], data['primary'], data['flags'])
        return indexes

    @staticmethod
    def extract_type_from_comment(comment: str | None, current_type: str) -> str:
        """Portable type named by a (DC2Type:name) marker, else current_type."""
        if comment:
            start = comment.find('(DC2Type:')
            if start != -1:
                end = comment.find(')', start)
                if end != -1:
                    name = comment[start + len('(DC2Type:'):end]
                    if name and all(c.isalnum() or c == '_' for c in name):
                        return name
        return current_type

    @staticmethod
    def remove_type_from_comment(comment: str | None, type_name: str) -> str | None:
        if comment is None:
            return None
        return comment.replace(f'(DC2Type:{type_name})', '')

    # DDL

    def _execute_all(self, statements: list[str] | str) -> None:
        if isinstance(statements, str):
            statements = [statements]
        for sql in statements:
            self.connection.execute(sql)

    def _evict(self, table: Table | str) -> None:
        name = table.name if isinstance(table, Table) else table
        Cache.get_instance().clear_for_table(unquote_identifier(name))

    def create_table(self, table: Table) -> None:
        self._execute_all(self.platform.get_create_table_sql(table))
        self._evict(table)

    def drop_table(self, table: Table | str) -> None:
        self._execute_all(self.platform.get_drop_table_sql(table))
        self._evict(table)

    def alter_table(self, diff: TableDiff) -> None:
        self._execute_all(self.platform.get_alter_table_sql(diff))
        self._evict(diff.name)
        if diff.new_name:
            self._evict(diff.new_name)

    def create_index(self, index: Index, table: Table | str) -> None:
        self._execute_all(self.platform.get_create_index_sql(index, table))
        self._evict(table)

    def drop_index(self, index: Index | str, table: Table | str) -> None:
        self._execute_all(self.platform.get_drop_index_sql(index, table))
        self._evict(table)

    def create_foreign_key(self, fk: ForeignKeyConstraint, table: Table | str) -> None:
        self._execute_all(self.platform.get_create_foreign_key_sql(fk, table))
        self._evict(table)

    def drop_foreign_key(self, fk: ForeignKeyConstraint | str, table: Table | str) -> None:
        self._execute_all(self.platform.get_drop_foreign_key_sql(fk, table))
        self._evict(table)

    def create_database(self, name: str) -> None:
        self._execute_all(self.platform.get_create_database_sql(name))

    def drop_database(self, name: str) -> None:
        self._execute_all(self.platform.get_drop_database_sql(name))
        Cache.get_instance().clear_all()

    def create_view(self, view: View) -> None:
        self._execute_all(self.platform.get_create_view_sql(view.name, view.sql))

    def drop_view(self, name: str) -> None:
        self._execute_all(self.platform.get_drop_view_sql(name))
