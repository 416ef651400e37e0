"""
Drizzle adapter exception classes.
"""
import re

import pymysql

# MySQL-protocol error codes that describe a transient condition
TRANSIENT_ERROR_CODES = {
    1040,  # too many connections
    1205,  # lock wait timeout exceeded
    1213,  # deadlock found when trying to get lock
    2003,  # can't connect to server
    2006,  # server has gone away
    2013,  # lost connection during query
    2055,  # lost connection at handshake
}

TRANSIENT_PATTERNS = [
    r'connection.*(closed|reset|refused|lost|broken)',
    r'server has gone away',
    r'broken pipe',
    r'timed? ?out',
    r'deadlock',
    r'too many connections',
]

_TRANSIENT_REGEX = re.compile('|'.join(TRANSIENT_PATTERNS), re.IGNORECASE)


class DatabaseError(Exception):
    """Base class for all drizzledb errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining the transport connection.
    """


class QueryError(DatabaseError):
    """Error assembling or executing a statement.
    """


class ParamCountMismatch(QueryError):
    """Placeholder count and bound parameter count differ.
    """

    def __init__(self, sql: str, placeholders: int, params: int) -> None:
        self.sql = sql
        self.placeholders = placeholders
        self.params = params
        super().__init__(
            f'Parameter count mismatch: SQL needs {placeholders} '
            f'but {params} were provided: {sql}')


class UnsupportedParameterKind(QueryError):
    """A bound parameter declares a kind that cannot be rendered as a literal.
    """

    def __init__(self, kind, position: int | None = None) -> None:
        self.kind = kind
        self.position = position
        where = f' (placeholder {position})' if position is not None else ''
        super().__init__(f'Parameter kind {kind!r} is unsupported{where}')


class UnsupportedFetchMode(QueryError):
    """Requested fetch convention is not one of BOTH, ASSOC or NUM.
    """

    def __init__(self, mode) -> None:
        self.mode = mode
        super().__init__(f'Fetch mode {mode!r} is not supported')


class ColumnIndexOutOfRange(QueryError):
    """fetch_column() asked for a column the row does not have.
    """

    def __init__(self, index: int, column_count: int) -> None:
        self.index = index
        self.column_count = column_count
        super().__init__(
            f'Column index {index} out of range for row with {column_count} columns')


class StatementExecutionFailed(QueryError):
    """The engine rejected a statement.

    Carries the literal SQL that was submitted together with the engine's
    error message and code.
    """

    def __init__(self, sql: str, engine_error: str, engine_error_code: int | None = None) -> None:
        self.sql = sql
        self.engine_error = engine_error
        self.engine_error_code = engine_error_code
        super().__init__(f'{sql}: {engine_error}')


class InvalidStatementState(QueryError):
    """Operation is not legal in the statement's current state.
    """


class SchemaError(DatabaseError):
    """Error rendering DDL or reading the catalog.
    """


class MissingDatabaseContext(SchemaError):
    """A catalog query needs a current database and none is bound.
    """

    def __init__(self, operation: str = 'catalog query') -> None:
        self.operation = operation
        super().__init__(f'{operation} requires a current database')


class InvalidArgumentKind(SchemaError):
    """Argument is neither a supported schema object nor a plain name.
    """


class CatalogReadFailed(SchemaError):
    """Introspection query failed.
    """

    def __init__(self, query: str, cause: BaseException) -> None:
        self.query = query
        self.cause = cause
        super().__init__(f'Catalog read failed: {cause}\nSQL: {query}')


class UnknownDatabaseType(SchemaError):
    """Catalog reported a native type with no portable mapping.
    """

    def __init__(self, db_type: str, platform: str) -> None:
        self.db_type = db_type
        self.platform = platform
        super().__init__(
            f'Unknown database type {db_type} requested, {platform} may not support it')


class OperationNotSupported(DatabaseError):
    """The platform has no rendering for the requested operation.
    """

    def __init__(self, operation: str, platform: str) -> None:
        self.operation = operation
        self.platform = platform
        super().__init__(f'Operation {operation!r} is not supported by platform {platform!r}')


def is_transient_error(exc: BaseException) -> bool:
    """Check if an exception represents a condition that may clear on its own.

    This only classifies; nothing in this package retries. Engine error codes
    are consulted first (lost connection, deadlock, lock wait timeout), then
    the message text.

    :param exc: The exception to check.
    :returns: True if the error is likely transient.
    """
    code = getattr(exc, 'engine_error_code', None)
    if code is None and isinstance(exc, pymysql.Error) and exc.args:
        code = exc.args[0] if isinstance(exc.args[0], int) else None
    if code in TRANSIENT_ERROR_CODES:
        return True
    return bool(_TRANSIENT_REGEX.search(str(exc)))


DbConnectionError = (
    pymysql.OperationalError,
    pymysql.InterfaceError,
    ConnectionFailure,
    )

ProgrammingError = (
    pymysql.ProgrammingError,
    QueryError,
    )

IntegrityError = (
    pymysql.IntegrityError,
    )

OperationalError = (
    pymysql.OperationalError,
    StatementExecutionFailed,
    )
