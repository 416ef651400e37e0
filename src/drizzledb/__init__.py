"""
Drizzle database adapter.

All query operations can be called either as:
- Module functions: db.select(cn, sql, *args)
- Connection methods: cn.select(sql, *args)

The module functions are thin facades over the Connection.
"""
__version__ = '0.1.0'

from typing import Any

from drizzledb.cache import Cache
from drizzledb.connection import Connection, connect
from drizzledb.exceptions import CatalogReadFailed, ColumnIndexOutOfRange
from drizzledb.exceptions import ConnectionFailure, DatabaseError
from drizzledb.exceptions import DbConnectionError, IntegrityError
from drizzledb.exceptions import InvalidArgumentKind, InvalidStatementState
from drizzledb.exceptions import MissingDatabaseContext, OperationalError
from drizzledb.exceptions import OperationNotSupported, ParamCountMismatch
from drizzledb.exceptions import ProgrammingError, QueryError, SchemaError
from drizzledb.exceptions import StatementExecutionFailed, UnknownDatabaseType
from drizzledb.exceptions import UnsupportedFetchMode, UnsupportedParameterKind
from drizzledb.exceptions import is_transient_error
from drizzledb.options import DriverOptions, iterdict_data_loader
from drizzledb.options import pandas_data_loader
from drizzledb.platforms import DrizzlePlatform, get_platform
from drizzledb.schema import Column, ColumnDiff, DrizzleSchemaManager
from drizzledb.schema import ForeignKeyConstraint, Index, SchemaManager, Table
from drizzledb.schema import TableDiff, View
from drizzledb.statement import Statement
from drizzledb.transaction import Transaction as transaction
from drizzledb.types import FetchMode, ParameterType, Type


def execute(cn: Connection, sql: str, *args: Any) -> int:
    """Execute a SQL statement and return affected row count.
    """
    return cn.execute(sql, *args)


delete = execute
insert = execute
update = execute


def select(cn: Connection, sql: str, *args: Any, **kwargs: Any) -> Any:
    """Execute a SELECT query through the connection's data loader.
    """
    return cn.select(sql, *args, **kwargs)


def select_column(cn: Connection, sql: str, *args: Any) -> list[Any]:
    """Execute a query and return the first column as a list.
    """
    return cn.fetch_column(sql, *args)


def select_scalar(cn: Connection, sql: str, *args: Any) -> Any:
    """Execute a query and return the first value of the first row.
    """
    return cn.query(sql, *args).fetch_column()


def quote(cn: Connection, value: Any) -> Any:
    """Render a value for inlining into SQL.
    """
    return cn.quote(value)


def last_insert_id(cn: Connection) -> int | None:
    return cn.last_insert_id()


def list_tables(cn: Connection) -> list[str]:
    """Names of the tables in the current database.
    """
    return cn.schema_manager.list_table_names()


def list_columns(cn: Connection, table: str, bypass_cache: bool = False) -> dict[str, Column]:
    """Normalized columns of a table keyed by lower-cased name.
    """
    return cn.schema_manager.list_table_columns(table, bypass_cache=bypass_cache)


def clear_cache() -> None:
    """Clear all cached catalog data.
    """
    Cache.get_instance().clear_all()


__all__ = [
    'Cache',
    'CatalogReadFailed',
    'Column',
    'ColumnDiff',
    'ColumnIndexOutOfRange',
    'Connection',
    'ConnectionFailure',
    'DatabaseError',
    'DbConnectionError',
    'DriverOptions',
    'DrizzlePlatform',
    'DrizzleSchemaManager',
    'FetchMode',
    'ForeignKeyConstraint',
    'Index',
    'IntegrityError',
    'InvalidArgumentKind',
    'InvalidStatementState',
    'MissingDatabaseContext',
    'OperationNotSupported',
    'OperationalError',
    'ParamCountMismatch',
    'ParameterType',
    'ProgrammingError',
    'QueryError',
    'SchemaError',
    'SchemaManager',
    'Statement',
    'StatementExecutionFailed',
    'Table',
    'TableDiff',
    'Type',
    'UnknownDatabaseType',
    'UnsupportedFetchMode',
    'UnsupportedParameterKind',
    'View',
    'clear_cache',
    'connect',
    'delete',
    'execute',
    'get_platform',
    'insert',
    'is_transient_error',
    'iterdict_data_loader',
    'last_insert_id',
    'list_columns',
    'list_tables',
    'pandas_data_loader',
    'quote',
    'select',
    'select_column',
    'select_scalar',
    'transaction',
    'update',
]
