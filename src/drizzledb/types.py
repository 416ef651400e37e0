"""
Consolidated type handling for the Drizzle adapter.

This module provides:
- ParameterType: declared kind of a bound statement parameter
- FetchMode: row shape returned by Statement.fetch()
- TypeConverter: convert NumPy / Pandas scalars to plain Python values
- Type: portable (engine independent) column types and their registry
"""
import datetime
import logging
import math
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from drizzledb.platforms.base import AbstractPlatform

logger = logging.getLogger(__name__)


class ParameterType(Enum):
    """Declared kind of a bound parameter.

    STMT is accepted at bind time but cannot be rendered as a literal.
    """
    NULL = 'null'
    INT = 'int'
    STR = 'str'
    LOB = 'lob'
    BOOL = 'bool'
    STMT = 'stmt'


class FetchMode(Enum):
    """Row convention for fetch operations.

    BOTH keys every value by column position and column name, ASSOC by
    column name only, NUM by position only.
    """
    BOTH = 'both'
    ASSOC = 'assoc'
    NUM = 'num'


# Type Converter - NumPy / Pandas scalars -> Python values

NUMPY_FLOAT_TYPES = (np.floating,)
NUMPY_INT_TYPES = (np.integer, np.unsignedinteger)


def _convert_numpy_value(val: Any) -> Any:
    """Convert NumPy value to Python type."""
    if isinstance(val, np.floating) and np.isnan(val):
        return None

    if isinstance(val, np.datetime64):
        if np.isnat(val):
            return None
        return pd.Timestamp(val).to_pydatetime()

    if isinstance(val, np.bool_):
        return bool(val)

    return val.item()


class TypeConverter:
    """Universal type conversion for statement parameters.

    Values that arrive from DataFrames keep their NumPy / Pandas types; the
    escaper only understands builtin scalars.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a builtin Python scalar."""
        if value is None:
            return None

        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None

        if value is pd.NaT or value is pd.NA:
            return None

        if isinstance(value, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_, np.datetime64)):
            return _convert_numpy_value(value)

        if isinstance(value, pd.Timestamp):
            return value.to_pydatetime()

        return value

    @staticmethod
    def convert_params(params: Any) -> Any:
        """Convert a collection of parameters."""
        if params is None:
            return None

        if isinstance(params, dict):
            return {k: TypeConverter.convert_value(v) for k, v in params.items()}

        if isinstance(params, list | tuple):
            return type(params)(TypeConverter.convert_value(v) for v in params)

        return TypeConverter.convert_value(params)


# Portable types - engine independent column types

class Type:
    """Portable column type.

    A type knows its portable name and asks the platform for the native
    declaration. Types whose native declaration is shared with another type
    set requires_comment_hint so the portable name can be recovered from the
    column comment during introspection.
    """

    _registry: dict[str, 'Type'] = {}

    name: str = ''
    python_type: type | None = None
    requires_comment_hint: bool = False

    def get_sql_declaration(self, field: dict[str, Any], platform: 'AbstractPlatform') -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'Type({self.name!r})'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Type):
            return self.name == other.name
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.name)

    @classmethod
    def get_type(cls, name: str) -> 'Type':
        """Return the registered type instance for a portable name."""
        try:
            return cls._registry[name.lower()]
        except KeyError:
            raise ValueError(f'Unknown column type {name!r} requested') from None

    @classmethod
    def has_type(cls, name: str) -> bool:
        return name.lower() in cls._registry

    @classmethod
    def add_type(cls, type_: 'Type') -> None:
        if type_.name in cls._registry:
            raise ValueError(f'Type {type_.name!r} already exists')
        cls._registry[type_.name] = type_
        logger.debug(f'Registered portable type {type_.name}')

    @classmethod
    def get_types_map(cls) -> dict[str, 'Type']:
        return dict(cls._registry)


def create_simple_type(name: str, declaration: str,
                       python_type: type | None = None,
                       requires_comment_hint: bool = False) -> Type:
    """Factory for portable types that delegate to one platform method.

    Args:
        name: Portable type name
        declaration: Name of the AbstractPlatform method rendering the type
        python_type: Python type values of this column come back as
        requires_comment_hint: Whether the column comment must carry the type name

    Returns
        A Type instance
    """
    class SimpleType(Type):
        def get_sql_declaration(self, field, platform):
            return getattr(platform, declaration)(field)

    SimpleType.__name__ = f'{name.title().replace("_", "")}Type'
    type_ = SimpleType()
    type_.name = name
    type_.python_type = python_type
    type_.requires_comment_hint = requires_comment_hint
    return type_


for _type in (
    create_simple_type('integer', 'get_integer_type_declaration_sql', int),
    create_simple_type('smallint', 'get_smallint_type_declaration_sql', int),
    create_simple_type('bigint', 'get_bigint_type_declaration_sql', int),
    create_simple_type('string', 'get_varchar_type_declaration_sql', str),
    create_simple_type('text', 'get_clob_type_declaration_sql', str),
    create_simple_type('boolean', 'get_boolean_type_declaration_sql', bool),
    create_simple_type('decimal', 'get_decimal_type_declaration_sql', float),
    create_simple_type('float', 'get_float_declaration_sql', float),
    create_simple_type('date', 'get_date_type_declaration_sql', datetime.date),
    create_simple_type('datetime', 'get_datetime_type_declaration_sql', datetime.datetime),
    create_simple_type('datetimetz', 'get_datetime_tz_type_declaration_sql', datetime.datetime),
    create_simple_type('time', 'get_time_type_declaration_sql', datetime.time),
    create_simple_type('blob', 'get_blob_type_declaration_sql', bytes),
    create_simple_type('guid', 'get_guid_type_declaration_sql', str),
    create_simple_type('array', 'get_clob_type_declaration_sql', list, requires_comment_hint=True),
    create_simple_type('object', 'get_clob_type_declaration_sql', object, requires_comment_hint=True),
    create_simple_type('json_array', 'get_clob_type_declaration_sql', list, requires_comment_hint=True),
):
    Type.add_type(_type)
