"""
Portable schema objects and catalog introspection.
"""
from drizzledb.schema.drizzle import DrizzleSchemaManager as DrizzleSchemaManager
from drizzledb.schema.manager import SchemaManager as SchemaManager
from drizzledb.schema.manager import normalize_row as normalize_row
from drizzledb.schema.objects import Column as Column
from drizzledb.schema.objects import ColumnDiff as ColumnDiff
from drizzledb.schema.objects import ForeignKeyConstraint as ForeignKeyConstraint
from drizzledb.schema.objects import Index as Index
from drizzledb.schema.objects import Table as Table
from drizzledb.schema.objects import TableDiff as TableDiff
from drizzledb.schema.objects import View as View
