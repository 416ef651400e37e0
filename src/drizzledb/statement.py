"""
Prepared statement emulation for the Drizzle text protocol.

A Statement owns one SQL template with `?` placeholders. Parameters are
either bound ahead of time (bind_value / bind_param) or passed to
execute(); at execute time the template is expanded into literal SQL,
submitted through the connection's transport, and the fully buffered
result is exposed through several fetch conventions.
"""
import logging
import time
from collections.abc import Callable, Iterator, Sequence
from enum import Enum
from functools import wraps
from typing import TYPE_CHECKING, Any

import pymysql
from drizzledb.exceptions import ColumnIndexOutOfRange, InvalidStatementState
from drizzledb.exceptions import StatementExecutionFailed, UnsupportedFetchMode
from drizzledb.sql import expand_placeholders
from drizzledb.types import FetchMode, ParameterType

if TYPE_CHECKING:
    from drizzledb.connection import Connection
    from drizzledb.transport import BufferedResult

logger = logging.getLogger(__name__)


class StatementState(Enum):
    CREATED = 'created'
    EXECUTED = 'executed'
    CLOSED = 'closed'


def dumpsql(func):
    """Decorator for logging statement execution and timing."""
    @wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.sql}\nargs: {args}')
        try:
            result = func(self, *args, **kwargs)
            logger.debug(f'Query result: {self.row_count()} rows')
            return result
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.sql}\nargs: {args}')
            raise
        finally:
            elapsed = time.time() - start
            self.connection.addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class Statement:
    """Statement executor bound to one connection.

    Lifecycle: CREATED -> EXECUTED -> CLOSED. Parameters may be (re)bound in
    CREATED or CLOSED; a failed execute leaves the statement in CREATED.
    """

    default_fetch_mode = FetchMode.BOTH

    def __init__(self, connection: 'Connection', sql: str) -> None:
        self.connection = connection
        self.sql = sql
        self.state = StatementState.CREATED
        self._bound: dict[int | str, tuple[Callable[[], Any], ParameterType | None]] = {}
        self._result: 'BufferedResult | None' = None
        self._column_names: list[str] | None = None
        self._fetch_mode = self.default_fetch_mode

    def __iter__(self) -> Iterator:
        return iter(self.fetch_all(self._fetch_mode))

    def __repr__(self) -> str:
        return f'Statement({self.sql!r}, state={self.state.value})'

    @property
    def result(self) -> 'BufferedResult | None':
        """The buffered result of the last execute, None when closed."""
        return self._result

    def _check_bindable(self) -> None:
        if self.state is StatementState.EXECUTED:
            raise InvalidStatementState('Close the cursor before binding new parameters')

    def bind_value(self, param: int | str, value: Any,
                   kind: ParameterType | None = None) -> None:
        """Bind a fixed value to a placeholder.

        Args:
            param: 1-based placeholder position or parameter name
            value: Value to bind
            kind: Declared parameter kind, string when omitted
        """
        self._check_bindable()
        self._bound[param] = (lambda: value, kind)

    def bind_param(self, param: int | str, accessor: Callable[[], Any],
                   kind: ParameterType | None = None) -> None:
        """Bind a placeholder to a value read at execute time.

        The accessor is called once per execute, so changes the caller makes
        between binding and executing are observed.

        Args:
            param: 1-based placeholder position or parameter name
            accessor: Zero argument callable returning the current value
            kind: Declared parameter kind, string when omitted
        """
        self._check_bindable()
        if not callable(accessor):
            raise TypeError('bind_param() expects a callable accessor, use bind_value() for values')
        self._bound[param] = (accessor, kind)

    def _bound_params(self) -> list[tuple[Any, ParameterType | None]]:
        """Resolve bound parameters to positional (value, kind) pairs."""
        positions = sorted(k for k in self._bound if isinstance(k, int))
        names = [k for k in self._bound if not isinstance(k, int)]
        return [(self._bound[k][0](), self._bound[k][1]) for k in positions + names]

    @dumpsql
    def execute(self, params: Sequence[Any] | None = None) -> bool:
        """Expand the template, submit it and buffer the result.

        Args:
            params: Positional values overriding bound parameters for this call

        Raises
            ParamCountMismatch: If placeholder and parameter counts differ
            UnsupportedParameterKind: If a bound kind cannot be rendered
            StatementExecutionFailed: If the engine rejects the statement
        """
        if params is not None:
            effective = [(value, None) for value in params]
        else:
            effective = self._bound_params()

        self._free_result()
        self.state = StatementState.CREATED

        transport = self.connection.transport
        with self.connection.lock:
            sql = expand_placeholders(self.sql, effective, transport.escape_string)
            try:
                result = transport.query(sql)
            except pymysql.Error as exc:
                raise StatementExecutionFailed(
                    sql, transport.error_message() or str(exc), transport.error_code()) from exc

        self._result = result
        self.state = StatementState.EXECUTED
        return True

    def _require_result(self) -> 'BufferedResult':
        if self.state is not StatementState.EXECUTED or self._result is None:
            raise InvalidStatementState(f'Statement has not been executed: {self.sql}')
        return self._result

    def row_count(self) -> int:
        """Rows affected by DML or returned by a SELECT."""
        return self._require_result().affected_rows()

    def column_count(self) -> int:
        """Number of columns in the buffered result."""
        return self._require_result().column_count()

    def set_fetch_mode(self, mode: FetchMode = FetchMode.BOTH) -> None:
        """Set the convention used by fetch calls that pass no mode."""
        self._fetch_mode = mode

    def _columns(self, result: 'BufferedResult') -> list[str]:
        if self._column_names is None:
            names = []
            while (column := result.column_next()) is not None:
                names.append(column.name)
            self._column_names = names
        return self._column_names

    def fetch(self, mode: FetchMode | None = None) -> dict | tuple | None:
        """Advance the cursor by one row.

        Returns
            dict for BOTH / ASSOC, tuple for NUM, None once the cursor is exhausted
        """
        mode = mode or self._fetch_mode
        if mode not in {FetchMode.BOTH, FetchMode.ASSOC, FetchMode.NUM}:
            raise UnsupportedFetchMode(mode)

        result = self._require_result()
        if mode in {FetchMode.BOTH, FetchMode.ASSOC}:
            names = self._columns(result)

        row = result.row_next()
        if row is None:
            return None

        if mode is FetchMode.NUM:
            return row
        if mode is FetchMode.ASSOC:
            return dict(zip(names, row))

        both: dict[int | str, Any] = {}
        for index, value in enumerate(row):
            both[index] = value
            both[names[index]] = value
        return both

    def fetch_all(self, mode: FetchMode | None = None) -> list:
        """Drain the remaining rows; empty once the cursor is exhausted."""
        rows = []
        while (row := self.fetch(mode)) is not None:
            rows.append(row)
        return rows

    def fetch_column(self, index: int = 0) -> Any:
        """Value at index of the next row, None once the cursor is exhausted."""
        row = self.fetch(FetchMode.NUM)
        if row is None:
            return None
        if not 0 <= index < len(row):
            raise ColumnIndexOutOfRange(index, len(row))
        return row[index]

    def _free_result(self) -> None:
        if self._result is not None:
            self._result.free()
        self._result = None
        self._column_names = None

    def close_cursor(self) -> None:
        """Release the buffered result; the statement may be rebound and re-executed."""
        self._free_result()
        self.state = StatementState.CLOSED

    def error_code(self) -> int | None:
        return self.connection.error_code()

    def error_info(self) -> str:
        return self.connection.error_info()
