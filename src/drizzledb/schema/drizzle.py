"""
Drizzle catalog row normalization.
"""
import logging
from typing import Any

from drizzledb.schema.manager import SchemaManager
from drizzledb.schema.objects import Column, ForeignKeyConstraint, Index

logger = logging.getLogger(__name__)

# Native types whose scale and precision are read from the catalog
_NUMERIC_TYPES = {'float', 'double', 'real', 'numeric', 'decimal'}

PRIMARY_KEY_NAME = 'PRIMARY'


def _referential_rule(rule: str | None) -> str | None:
    """RESTRICT is the implicit rule, so it is reported as absent."""
    if rule is None or rule == 'RESTRICT':
        return None
    return rule


def _split_columns(value: str) -> list[str]:
    return value.replace('`', '').split(',')


class DrizzleSchemaManager(SchemaManager):
    """Schema manager for Drizzle's DATA_DICTIONARY catalog.
    """

    def _portable_column(self, row: dict[str, Any]) -> Column:
        """Column from one row of the column listing query.

        The native type is mapped through the platform; a (DC2Type:name)
        marker in the comment overrides the mapping and is removed from it.
        """
        db_type = str(row['type']).lower()

        type_name = self.platform.get_portable_type_mapping(db_type)
        comment = row.get('comment')
        type_name = self.extract_type_from_comment(comment, type_name)
        comment = self.remove_type_from_comment(comment, type_name) or None

        fixed = db_type == 'char'
        scale = precision = None
        if db_type in _NUMERIC_TYPES:
            scale = row.get('scale')
            precision = row.get('precision')

        try:
            length = int(row.get('length') or 0)
        except (TypeError, ValueError):
            length = 0

        return Column(
            row.get('field') or '',
            type_name,
            length=length or None,
            precision=precision,
            scale=scale,
            unsigned=False,
            fixed=fixed,
            notnull=str(row.get('null')) != '1',
            default=row.get('default'),
            autoincrement=row.get('auto_increment') == 'YES',
            comment=comment,
            )

    def _portable_index_list(self, rows: list[dict[str, Any]], table: str | None = None) -> dict[str, Index]:
        flagged = [{**row, 'primary': row['key_name'] == PRIMARY_KEY_NAME} for row in rows]
        return super()._portable_index_list(flagged, table)

    def _portable_foreign_key(self, row: dict[str, Any]) -> ForeignKeyConstraint:
        return ForeignKeyConstraint(
            _split_columns(row['constraint_columns']),
            row['referenced_table_name'],
            _split_columns(row['referenced_table_columns']),
            row['constraint_name'],
            {
                'on_update': _referential_rule(row.get('update_rule')),
                'on_delete': _referential_rule(row.get('delete_rule')),
            },
            )
