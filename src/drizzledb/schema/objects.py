"""
Portable schema objects.

Engine independent descriptions of tables, columns, indexes, foreign keys
and views. Catalog readers produce them; platforms render DDL from them.

A name written inside the platform quote character (`name`) is stored
unquoted and flagged, so DDL renders it quoted again.
"""
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from drizzledb.types import Type

if TYPE_CHECKING:
    from drizzledb.platforms.base import AbstractPlatform

logger = logging.getLogger(__name__)

QUOTE_CHARS = ('`', '"', '[')


def _split_quoted(name: str) -> tuple[str, bool]:
    """Strip one level of identifier quoting, reporting whether it was there."""
    if name and name[0] in QUOTE_CHARS and len(name) > 1:
        return name[1:-1], True
    return name, False


def quote_name(name: str, platform: 'AbstractPlatform') -> str:
    """Render name for platform, quoting it only when it was given quoted."""
    name, quoted = _split_quoted(name)
    return platform.quote_identifier(name) if quoted else name


class _Asset:
    """Named schema object with optional identifier quoting."""

    _name: str = ''
    _quoted: bool = False

    def _set_name(self, name: str) -> None:
        self._name, self._quoted = _split_quoted(name or '')

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_quoted(self) -> bool:
        return self._quoted

    def get_quoted_name(self, platform: 'AbstractPlatform') -> str:
        """Name as it must appear in SQL rendered by platform."""
        if self._quoted:
            return platform.quote_identifier(self._name)
        return self._name


class Column(_Asset):
    """Portable column description.
    """

    def __init__(self, name: str, type_: Type | str, length: int | None = None,
                 precision: int | None = 10, scale: int | None = 0,
                 unsigned: bool = False, fixed: bool = False, notnull: bool = True,
                 default: Any = None, autoincrement: bool = False,
                 comment: str | None = None, column_definition: str | None = None,
                 platform_options: dict[str, Any] | None = None,
                 custom_schema_options: dict[str, Any] | None = None) -> None:
        self._set_name(name)
        self.type = type_ if isinstance(type_, Type) else Type.get_type(type_)
        self.length = length
        self.precision = precision if isinstance(precision, int) else _to_int(precision, 10)
        self.scale = scale if isinstance(scale, int) else _to_int(scale, 0)
        self.unsigned = unsigned
        self.fixed = fixed
        self.notnull = notnull
        self.default = default
        self.autoincrement = autoincrement
        self.comment = comment
        self.column_definition = column_definition
        self.platform_options = dict(platform_options or {})
        self.custom_schema_options = dict(custom_schema_options or {})

    def __repr__(self) -> str:
        return f'Column({self.name!r}, {self.type.name!r}, notnull={self.notnull})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Column):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict[str, Any]:
        """Field mapping consumed by the platform's declaration renderers."""
        return {
            'name': self.name,
            'type': self.type,
            'default': self.default,
            'notnull': self.notnull,
            'length': self.length,
            'precision': self.precision,
            'scale': self.scale,
            'fixed': self.fixed,
            'unsigned': self.unsigned,
            'autoincrement': self.autoincrement,
            'column_definition': self.column_definition,
            'comment': self.comment,
            **self.platform_options,
            **self.custom_schema_options,
            }


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Index(_Asset):
    """Portable index description; a primary index is always unique.
    """

    def __init__(self, name: str, columns: list[str], is_unique: bool = False,
                 is_primary: bool = False, flags: list[str] | None = None,
                 options: dict[str, Any] | None = None) -> None:
        self._set_name(name)
        self.columns = list(columns)
        self.is_primary = is_primary
        self.is_unique = is_unique or is_primary
        self.flags = [flag.lower() for flag in flags or []]
        self.options = dict(options or {})

    def __repr__(self) -> str:
        return f'Index({self.name!r}, {self.columns!r}, unique={self.is_unique}, primary={self.is_primary})'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Index):
            return NotImplemented
        return (self.name.lower() == other.name.lower()
                and [c.lower() for c in self.columns] == [c.lower() for c in other.columns]
                and self.is_unique == other.is_unique
                and self.is_primary == other.is_primary)

    @property
    def is_simple(self) -> bool:
        return not self.is_unique and not self.is_primary

    def get_quoted_columns(self, platform: 'AbstractPlatform') -> list[str]:
        return [quote_name(name, platform) for name in self.columns]

    def has_flag(self, flag: str) -> bool:
        return flag.lower() in self.flags

    def spans_columns(self, columns: list[str]) -> bool:
        """Whether the leading index columns are exactly columns, in order."""
        wanted = [c.lower() for c in columns]
        return [c.lower() for c in self.columns[:len(wanted)]] == wanted


class ForeignKeyConstraint(_Asset):
    """Portable foreign key description.

    Options understood by the platforms: on_update, on_delete, match.
    An option set to None is treated as absent.
    """

    def __init__(self, local_columns: list[str], foreign_table_name: str,
                 foreign_columns: list[str], name: str | None = None,
                 options: dict[str, Any] | None = None) -> None:
        self._set_name(name or '')
        self.local_columns = list(local_columns)
        self.foreign_table_name = foreign_table_name
        self.foreign_columns = list(foreign_columns)
        self.options = dict(options or {})

    def __repr__(self) -> str:
        return (f'ForeignKeyConstraint({self.local_columns!r} -> '
                f'{self.foreign_table_name}{self.foreign_columns!r}, name={self.name!r})')

    def has_option(self, name: str) -> bool:
        return self.options.get(name) is not None

    def get_option(self, name: str) -> Any:
        return self.options.get(name)

    @property
    def on_update(self) -> str | None:
        return self.get_option('on_update')

    @property
    def on_delete(self) -> str | None:
        return self.get_option('on_delete')

    def get_quoted_local_columns(self, platform: 'AbstractPlatform') -> list[str]:
        return [quote_name(name, platform) for name in self.local_columns]

    def get_quoted_foreign_columns(self, platform: 'AbstractPlatform') -> list[str]:
        return [quote_name(name, platform) for name in self.foreign_columns]

    def get_quoted_foreign_table_name(self, platform: 'AbstractPlatform') -> str:
        return quote_name(self.foreign_table_name, platform)


@dataclass
class View:
    """Named view and its defining SELECT."""
    name: str
    sql: str


class Table(_Asset):
    """Portable table description.

    Columns, indexes and foreign keys are keyed by lower-cased name and keep
    insertion order.

    Table options understood by the platforms: temporary, comment, charset,
    collate, engine, unique_constraints.
    """

    def __init__(self, name: str, columns: list[Column] | None = None,
                 indexes: list[Index] | None = None,
                 foreign_keys: list[ForeignKeyConstraint] | None = None,
                 options: dict[str, Any] | None = None) -> None:
        self._set_name(name)
        self._columns: dict[str, Column] = {}
        self._indexes: dict[str, Index] = {}
        self._foreign_keys: dict[str, ForeignKeyConstraint] = {}
        self.options = dict(options or {})
        for column in columns or []:
            self._columns[column.name.lower()] = column
        for index in indexes or []:
            self._add_index(index)
        for fk in foreign_keys or []:
            self._add_foreign_key(fk)

    def __repr__(self) -> str:
        return f'Table({self.name!r}, columns={list(self._columns)!r})'

    def add_column(self, name: str, type_name: str, **options: Any) -> Column:
        column = Column(name, type_name, **options)
        self._columns[column.name.lower()] = column
        return column

    def has_column(self, name: str) -> bool:
        return _split_quoted(name)[0].lower() in self._columns

    def get_column(self, name: str) -> Column:
        try:
            return self._columns[_split_quoted(name)[0].lower()]
        except KeyError:
            raise KeyError(f'There is no column {name!r} on table {self.name!r}') from None

    def get_columns(self) -> list[Column]:
        return list(self._columns.values())

    def _generate_index_name(self, prefix: str, columns: list[str]) -> str:
        return '_'.join([prefix, self.name, *columns]).lower()

    def _add_index(self, index: Index) -> None:
        key = 'primary' if index.is_primary else index.name.lower()
        if index.is_primary and 'primary' in self._indexes:
            raise ValueError(f'Table {self.name!r} already has a primary key')
        self._indexes[key] = index

    def set_primary_key(self, columns: list[str], name: str = 'primary') -> Index:
        index = Index(name, columns, is_unique=True, is_primary=True)
        self._add_index(index)
        for column in columns:
            self.get_column(column).notnull = True
        return index

    def add_index(self, columns: list[str], name: str | None = None,
                  flags: list[str] | None = None) -> Index:
        index = Index(name or self._generate_index_name('idx', columns), columns, flags=flags)
        self._add_index(index)
        return index

    def add_unique_index(self, columns: list[str], name: str | None = None) -> Index:
        index = Index(name or self._generate_index_name('uniq', columns), columns, is_unique=True)
        self._add_index(index)
        return index

    def has_index(self, name: str) -> bool:
        return _split_quoted(name)[0].lower() in self._indexes

    def get_index(self, name: str) -> Index:
        try:
            return self._indexes[_split_quoted(name)[0].lower()]
        except KeyError:
            raise KeyError(f'Index {name!r} does not exist on table {self.name!r}') from None

    def get_indexes(self) -> list[Index]:
        return list(self._indexes.values())

    def has_primary_key(self) -> bool:
        return 'primary' in self._indexes

    def get_primary_key(self) -> Index | None:
        return self._indexes.get('primary')

    def get_primary_key_columns(self) -> list[str]:
        primary = self.get_primary_key()
        return list(primary.columns) if primary else []

    def _add_foreign_key(self, fk: ForeignKeyConstraint) -> None:
        name = fk.name or self._generate_index_name('fk', fk.local_columns)
        if not fk.name:
            fk._set_name(name)
        self._foreign_keys[name.lower()] = fk

    def add_foreign_key_constraint(self, foreign_table: 'Table | str', local_columns: list[str],
                                   foreign_columns: list[str], options: dict[str, Any] | None = None,
                                   name: str | None = None) -> ForeignKeyConstraint:
        foreign_name = foreign_table.name if isinstance(foreign_table, Table) else foreign_table
        fk = ForeignKeyConstraint(local_columns, foreign_name, foreign_columns, name, options)
        self._add_foreign_key(fk)
        return fk

    def get_foreign_keys(self) -> list[ForeignKeyConstraint]:
        return list(self._foreign_keys.values())

    def add_option(self, name: str, value: Any) -> None:
        self.options[name] = value

    def has_option(self, name: str) -> bool:
        return name in self.options

    def get_option(self, name: str) -> Any:
        return self.options.get(name)


@dataclass
class ColumnDiff:
    """A changed column: its name before the change and its new definition."""
    old_column_name: str
    column: Column
    changed_properties: list[str] = field(default_factory=list)
    from_column: Column | None = None

    def has_changed(self, prop: str) -> bool:
        return prop in self.changed_properties


@dataclass
class TableDiff:
    """Difference between two versions of one table, consumed by ALTER TABLE rendering.

    renamed_columns maps the old column name to the column's new definition.
    """
    name: str
    new_name: str | None = None
    added_columns: dict[str, Column] = field(default_factory=dict)
    changed_columns: dict[str, ColumnDiff] = field(default_factory=dict)
    removed_columns: dict[str, Column] = field(default_factory=dict)
    renamed_columns: dict[str, Column] = field(default_factory=dict)
    added_indexes: dict[str, Index] = field(default_factory=dict)
    changed_indexes: dict[str, Index] = field(default_factory=dict)
    removed_indexes: dict[str, Index] = field(default_factory=dict)
    added_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    changed_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
    removed_foreign_keys: list[ForeignKeyConstraint] = field(default_factory=list)
