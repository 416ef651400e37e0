"""
Network transport to a Drizzle server.

Drizzle speaks the MySQL wire protocol, so the transport is a thin layer over
a PyMySQL connection that exposes exactly what the statement layer needs:

- query(sql) returning a fully buffered result or raising
- escape_string() for literal rendering
- last error code / message reporting
- cursor style access to the buffered result (columns, rows, counts)

Results are always buffered client side (PyMySQL's default cursor reads the
whole result set before returning), so column metadata and row counts are
stable for the life of the result and fetching never touches the network.
"""
import logging
from collections.abc import Sequence
from typing import Any

import pymysql
import pymysql.cursors

logger = logging.getLogger(__name__)


class ResultColumn:
    """Metadata for one result column."""

    __slots__ = ('name', 'type_code', 'display_size', 'internal_size',
                 'precision', 'scale', 'nullable')

    def __init__(self, name: str, type_code: Any = None, display_size: int | None = None,
                 internal_size: int | None = None, precision: int | None = None,
                 scale: int | None = None, nullable: bool | None = None) -> None:
        self.name = name
        self.type_code = type_code
        self.display_size = display_size
        self.internal_size = internal_size
        self.precision = precision
        self.scale = scale
        self.nullable = nullable

    @classmethod
    def from_description(cls, item: Sequence) -> 'ResultColumn':
        """Build from one DB-API cursor.description entry."""
        return cls(*item[:7])

    def __repr__(self) -> str:
        return f'ResultColumn(name={self.name!r}, type_code={self.type_code!r})'


class BufferedResult:
    """Materialized result of one statement.

    Rows and columns are consumed forward only through row_next() and
    column_next(); neither can be rewound.
    """

    def __init__(self, columns: Sequence[ResultColumn] | None = None,
                 rows: Sequence[Sequence[Any]] | None = None,
                 affected_rows: int = 0, insert_id: int | None = None) -> None:
        self.columns = list(columns or [])
        self._rows = list(rows or [])
        self._affected_rows = affected_rows
        self.insert_id = insert_id
        self._row_pos = 0
        self._column_pos = 0

    @classmethod
    def from_cursor(cls, cursor: Any) -> 'BufferedResult':
        """Drain a DB-API cursor into a buffered result."""
        description = cursor.description or []
        rows = cursor.fetchall() if description else []
        return cls(
            columns=[ResultColumn.from_description(d) for d in description],
            rows=rows,
            affected_rows=cursor.rowcount,
            insert_id=cursor.lastrowid,
            )

    def affected_rows(self) -> int:
        """Rows affected by DML, or rows returned by a SELECT."""
        return self._affected_rows

    def column_count(self) -> int:
        return len(self.columns)

    def column_next(self) -> ResultColumn | None:
        """Next column's metadata, None once all columns were read."""
        if self._column_pos >= len(self.columns):
            return None
        column = self.columns[self._column_pos]
        self._column_pos += 1
        return column

    def row_next(self) -> tuple | None:
        """Next row as a tuple, None at end of result."""
        if self._row_pos >= len(self._rows):
            return None
        row = tuple(self._rows[self._row_pos])
        self._row_pos += 1
        return row

    def free(self) -> None:
        """Release buffered rows."""
        self._rows = []
        self._row_pos = 0


class Transport:
    """PyMySQL backed connection to one Drizzle server.

    Not safe for concurrent use; callers serialize access (the Connection
    holds a lock around every submission).
    """

    def __init__(self, host: str, port: int, database: str | None,
                 username: str | None, password: str | None,
                 charset: str = 'utf8mb4', connect_timeout: int = 10) -> None:
        self.host = host
        self.port = int(port)
        self.database = database
        self._error_code: int | None = None
        self._error_message: str = ''
        logger.debug(f'Connecting to drizzle://{host}:{self.port}/{database or ""}')
        self.raw = pymysql.connect(
            host=host,
            port=self.port,
            user=username,
            password=password or '',
            database=database,
            charset=charset,
            connect_timeout=connect_timeout,
            autocommit=True,
            cursorclass=pymysql.cursors.Cursor,
            )

    def query(self, sql: str) -> BufferedResult:
        """Submit literal SQL and return the buffered result.

        Raises the driver's pymysql.Error after recording its code and
        message for error_code() / error_message().
        """
        cursor = self.raw.cursor()
        try:
            cursor.execute(sql)
            result = BufferedResult.from_cursor(cursor)
        except pymysql.Error as exc:
            self._record_error(exc)
            raise
        finally:
            cursor.close()
        self._error_code = None
        self._error_message = ''
        return result

    def _record_error(self, exc: pymysql.Error) -> None:
        if len(exc.args) >= 2 and isinstance(exc.args[0], int):
            self._error_code, self._error_message = exc.args[0], str(exc.args[1])
        else:
            self._error_code, self._error_message = None, str(exc)

    def escape_string(self, value: str) -> str:
        """Escape text for use inside a single-quoted literal."""
        return self.raw.escape_string(value)

    def error_code(self) -> int | None:
        """Engine error code of the last failed query, None if it succeeded."""
        return self._error_code

    def error_message(self) -> str:
        """Engine error message of the last failed query."""
        return self._error_message

    @property
    def closed(self) -> bool:
        return not self.raw.open

    def close(self) -> None:
        if self.raw.open:
            self.raw.close()
            logger.debug(f'Closed transport to {self.host}:{self.port}')
