"""
Literal rendering and positional placeholder expansion.

The engine's text protocol has no server-side parameter binding, so every
statement is sent as literal SQL:

    Template + Params → Convert values → Render literals → Splice at each ?

Main entry points:
- `expand_placeholders(template, params, escaper)` - Build the literal SQL
- `escape_value(value, kind, escaper)` - Render one value as a SQL literal
- `quote_identifier(identifier)` - Quote table/column names
- `has_placeholders(sql)` - Check if SQL has placeholders
"""
import logging
from collections.abc import Callable, Sequence
from typing import Any

from drizzledb.exceptions import ParamCountMismatch, UnsupportedParameterKind
from drizzledb.types import ParameterType, TypeConverter

logger = logging.getLogger(__name__)

PLACEHOLDER = '?'

# Kinds rendered as unquoted integers
_INTEGER_KINDS = {ParameterType.BOOL, ParameterType.INT}

# Kinds rendered as quoted, escaped strings (None means undeclared)
_STRING_KINDS = {None, ParameterType.STR, ParameterType.LOB}


def _to_text(value: Any) -> str:
    """Text form of a value headed for a quoted string literal."""
    if isinstance(value, bool):
        return '1' if value else '0'
    return str(value)


def escape_value(value: Any, kind: ParameterType | None,
                 escaper: Callable[[str], str], position: int | None = None) -> str:
    """Render a single parameter as literal SQL text.

    Parameters
        value: Raw parameter value
        kind: Declared parameter kind, None when undeclared
        escaper: Engine string escaper (backslash escaping of quotes,
                 backslashes and NUL bytes)
        position: 1-based placeholder position, reported on failure

    Returns
        Literal SQL text

    Raises
        UnsupportedParameterKind: If kind cannot be rendered as a literal
    """
    value = TypeConverter.convert_value(value)

    if value is None or kind == ParameterType.NULL:
        return 'NULL'

    if kind in _INTEGER_KINDS:
        return str(int(value))

    if kind in _STRING_KINDS:
        if isinstance(value, bytes | bytearray | memoryview):
            return f"X'{bytes(value).hex()}'"
        return "'" + escaper(_to_text(value)) + "'"

    raise UnsupportedParameterKind(kind, position)


def expand_placeholders(template: str, params: Sequence[tuple[Any, ParameterType | None]],
                        escaper: Callable[[str], str]) -> str:
    """Replace each positional placeholder with a rendered literal.

    The template is scanned left to right; every `?` consumes exactly one
    parameter in order. A template with no parameters is returned verbatim.

    Parameters
        template: SQL text containing `?` placeholders
        params: Ordered (value, kind) pairs
        escaper: Engine string escaper

    Returns
        Literal SQL ready for submission

    Raises
        ParamCountMismatch: If placeholders and params differ in number
    """
    if not params:
        return template

    parts = template.split(PLACEHOLDER)
    placeholders = len(parts) - 1
    if placeholders != len(params):
        raise ParamCountMismatch(template, placeholders, len(params))

    chunks = [parts[0]]
    for position, ((value, kind), tail) in enumerate(zip(params, parts[1:]), start=1):
        chunks.append(escape_value(value, kind, escaper, position))
        chunks.append(tail)

    return ''.join(chunks)


def has_placeholders(sql: str | None) -> bool:
    """Check if SQL has positional placeholders.

    Parameters
        sql: SQL query string

    Returns
        True if SQL contains at least one `?`
    """
    if not sql:
        return False
    return PLACEHOLDER in sql


def quote_single_identifier(identifier: str, quote: str = '`') -> str:
    """Quote one identifier part, doubling embedded quote characters."""
    return quote + identifier.replace(quote, quote * 2) + quote


def quote_identifier(identifier: str, quote: str = '`') -> str:
    """Safely quote database identifiers.

    Dotted names (`schema.table`) are quoted part by part.

    Parameters
        identifier: Table or column name
        quote: Identifier quote character of the engine

    Returns
        Quoted identifier
    """
    return '.'.join(quote_single_identifier(part, quote) for part in identifier.split('.'))


def unquote_identifier(identifier: str) -> str:
    """Strip one level of identifier quoting (`name`, "name" or [name]).

    Parameters
        identifier: Possibly quoted table or column name

    Returns
        The bare name
    """
    if identifier and len(identifier) > 1 and identifier[0] in '`"[':
        return identifier[1:-1]
    return identifier
