"""
Drizzle SQL dialect.
"""
import logging
from typing import Any

from drizzledb.exceptions import InvalidArgumentKind, MissingDatabaseContext
from drizzledb.platforms.base import AbstractPlatform, IsolationLevel
from drizzledb.platforms.base import quote_string_literal, register_platform
from drizzledb.schema.objects import ForeignKeyConstraint, Index, Table, TableDiff
from more_itertools import collapse

logger = logging.getLogger(__name__)

TYPE_MAPPING = {
    'integer': 'integer',
    'bigint': 'bigint',
    'date': 'date',
    'datetime': 'datetime',
    'timestamp': 'datetime',
    'time': 'time',
    'char': 'string',
    'varchar': 'string',
    'text': 'text',
    'boolean': 'boolean',
    'double': 'float',
    'decimal': 'decimal',
    'blob': 'blob',
    }

# Upper length bound of each text tier, smallest first
CLOB_TIERS = (
    (255, 'TINYTEXT'),
    (65532, 'TEXT'),
    (16777215, 'MEDIUMTEXT'),
    )

# Words the server refuses as bare identifiers
RESERVED_KEYWORDS = frozenset((
    'ACCESSIBLE', 'ADD', 'ALL', 'ALTER', 'ANALYZE', 'AND', 'AS', 'ASC',
    'ASENSITIVE', 'BEFORE', 'BETWEEN', 'BIGINT', 'BINARY', 'BLOB', 'BOTH', 'BY',
    'CALL', 'CASCADE', 'CASE', 'CHANGE', 'CHAR', 'CHARACTER', 'CHECK', 'COLLATE',
    'COLUMN', 'CONDITION', 'CONNECTION', 'CONSTRAINT', 'CONTINUE', 'CONVERT',
    'CREATE', 'CROSS', 'CURRENT_DATE', 'CURRENT_TIME', 'CURRENT_TIMESTAMP',
    'CURRENT_USER', 'CURSOR', 'DATABASE', 'DATABASES', 'DAY_HOUR',
    'DAY_MICROSECOND', 'DAY_MINUTE', 'DAY_SECOND', 'DEC', 'DECIMAL', 'DECLARE',
    'DEFAULT', 'DELAYED', 'DELETE', 'DESC', 'DESCRIBE', 'DETERMINISTIC',
    'DISTINCT', 'DISTINCTROW', 'DIV', 'DOUBLE', 'DROP', 'DUAL', 'EACH', 'ELSE',
    'ELSEIF', 'ENCLOSED', 'ESCAPED', 'EXISTS', 'EXIT', 'EXPLAIN', 'FALSE', 'FETCH',
    'FLOAT', 'FLOAT4', 'FLOAT8', 'FOR', 'FORCE', 'FOREIGN', 'FROM', 'FULLTEXT',
    'GOTO', 'GRANT', 'GROUP', 'HAVING', 'HIGH_PRIORITY', 'HOUR_MICROSECOND',
    'HOUR_MINUTE', 'HOUR_SECOND', 'IF', 'IGNORE', 'IN', 'INDEX', 'INFILE', 'INNER',
    'INOUT', 'INSENSITIVE', 'INSERT', 'INT', 'INT1', 'INT2', 'INT3', 'INT4',
    'INT8', 'INTEGER', 'INTERVAL', 'INTO', 'IS', 'ITERATE', 'JOIN', 'KEY', 'KEYS',
    'KILL', 'LABEL', 'LEADING', 'LEAVE', 'LEFT', 'LIKE', 'LIMIT', 'LINEAR',
    'LINES', 'LOAD', 'LOCALTIME', 'LOCALTIMESTAMP', 'LOCK', 'LONG', 'LONGBLOB',
    'LONGTEXT', 'LOOP', 'LOW_PRIORITY', 'MASTER_SSL_VERIFY_SERVER_CERT', 'MATCH',
    'MEDIUMBLOB', 'MEDIUMINT', 'MEDIUMTEXT', 'MIDDLEINT', 'MINUTE_MICROSECOND',
    'MINUTE_SECOND', 'MOD', 'MODIFIES', 'NATURAL', 'NOT', 'NO_WRITE_TO_BINLOG',
    'NULL', 'NUMERIC', 'ON', 'OPTIMIZE', 'OPTION', 'OPTIONALLY', 'OR', 'ORDER',
    'OUT', 'OUTER', 'OUTFILE', 'PRECISION', 'PRIMARY', 'PROCEDURE', 'PURGE',
    'RAID0', 'RANGE', 'READ', 'READS', 'READ_WRITE', 'REAL', 'REFERENCES',
    'REGEXP', 'RELEASE', 'RENAME', 'REPEAT', 'REPLACE', 'REQUIRE', 'RESTRICT',
    'RETURN', 'REVOKE', 'RIGHT', 'RLIKE', 'SCHEMA', 'SCHEMAS', 'SECOND_MICROSECOND',
    'SELECT', 'SENSITIVE', 'SEPARATOR', 'SET', 'SHOW', 'SMALLINT', 'SONAME',
    'SPATIAL', 'SPECIFIC', 'SQL', 'SQLEXCEPTION', 'SQLSTATE', 'SQLWARNING',
    'SQL_BIG_RESULT', 'SQL_CALC_FOUND_ROWS', 'SQL_SMALL_RESULT', 'SSL', 'STARTING',
    'STRAIGHT_JOIN', 'TABLE', 'TERMINATED', 'THEN', 'TINYBLOB', 'TINYINT',
    'TINYTEXT', 'TO', 'TRAILING', 'TRIGGER', 'TRUE', 'UNDO', 'UNION', 'UNIQUE',
    'UNLOCK', 'UNSIGNED', 'UPDATE', 'USAGE', 'USE', 'USING', 'UTC_DATE',
    'UTC_TIME', 'UTC_TIMESTAMP', 'VALUES', 'VARBINARY', 'VARCHAR', 'VARCHARACTER',
    'VARYING', 'WHEN', 'WHERE', 'WHILE', 'WITH', 'WRITE', 'X509', 'XOR',
    'YEAR_MONTH', 'ZEROFILL',
    ))


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


@register_platform('drizzle')
class DrizzlePlatform(AbstractPlatform):
    """Renders SQL for Drizzle.
    """

    identifier_quote = '`'
    reserved_keywords = RESERVED_KEYWORDS

    def get_name(self) -> str:
        return 'drizzle'

    def initialize_type_mappings(self) -> dict[str, str]:
        return TYPE_MAPPING

    # Expressions

    def get_regexp_expression(self) -> str:
        return 'RLIKE'

    def get_guid_expression(self) -> str:
        return 'UUID()'

    def get_locate_expression(self, string: str, substring: str,
                              start_pos: int | str | None = None) -> str:
        if not start_pos:
            return f'LOCATE({substring}, {string})'
        return f'LOCATE({substring}, {string}, {start_pos})'

    def get_concat_expression(self, *args: Any) -> str:
        return f"CONCAT({', '.join(str(arg) for arg in collapse(args))})"

    def get_date_diff_expression(self, date1: str, date2: str) -> str:
        return f'DATEDIFF({date1}, {date2})'

    def get_date_add_days_expression(self, date: str, days: int | str) -> str:
        return f'DATE_ADD({date}, INTERVAL {days} DAY)'

    def get_date_sub_days_expression(self, date: str, days: int | str) -> str:
        return f'DATE_SUB({date}, INTERVAL {days} DAY)'

    def get_date_add_month_expression(self, date: str, months: int | str) -> str:
        return f'DATE_ADD({date}, INTERVAL {months} MONTH)'

    def get_date_sub_month_expression(self, date: str, months: int | str) -> str:
        return f'DATE_SUB({date}, INTERVAL {months} MONTH)'

    def get_read_lock_sql(self) -> str:
        return 'LOCK IN SHARE MODE'

    def convert_booleans(self, item: Any) -> Any:
        """Render booleans as TRUE / FALSE; containers are converted element-wise."""
        if isinstance(item, dict):
            return {key: self.convert_booleans(value) for key, value in item.items()}
        if isinstance(item, list | tuple):
            return [self.convert_booleans(value) for value in item]
        if item is None:
            return None
        return 'TRUE' if item else 'FALSE'

    # Catalog queries

    def get_list_databases_sql(self) -> str:
        return 'SHOW DATABASES'

    def get_show_databases_sql(self) -> str:
        return 'SHOW DATABASES'

    def get_list_tables_sql(self) -> str:
        return 'SHOW TABLES'

    def get_list_table_constraints_sql(self, table: str) -> str:
        return f'SHOW INDEX FROM {table}'

    def get_list_table_columns_sql(self, table: str, database: str | None = None) -> str:
        if not database:
            raise MissingDatabaseContext('Listing table columns')
        return (
            "SELECT COLUMN_NAME AS Field, DATA_TYPE AS Type, IS_NULLABLE AS `Null`, "
            "COLUMN_DEFAULT AS `Default`,IS_AUTO_INCREMENT as 'auto_increment',"
            "IF(DATA_TYPE='VARCHAR' OR DATA_TYPE='CHAR',CHARACTER_MAXIMUM_LENGTH,NULL) as length,"
            "NUMERIC_SCALE as scale, NUMERIC_PRECISION as `precision`, COLUMN_COMMENT as comment "
            f"FROM DATA_DICTIONARY.COLUMNS WHERE TABLE_SCHEMA = {quote_string_literal(database)} "
            f"AND TABLE_NAME = {quote_string_literal(table)}"
            )

    def get_list_table_indexes_sql(self, table: str, database: str | None = None) -> str:
        if not database:
            raise MissingDatabaseContext('Listing table indexes')
        return (
            "SELECT DATA_DICTIONARY.INDEXES.TABLE_NAME as `Table`, "
            "IF(DATA_DICTIONARY.INDEXES.IS_UNIQUE='YES',0,1) AS Non_Unique,"
            "DATA_DICTIONARY.INDEXES.INDEX_NAME AS Key_name,SEQUENCE_IN_INDEX AS Seq_in_index, "
            "COLUMN_NAME AS Column_Name,'A' AS Collation,"
            "DATA_DICTIONARY.INDEXES.IS_NULLABLE as `Null`,INDEX_TYPE as Index_Type "
            "FROM DATA_DICTIONARY.INDEXES,DATA_DICTIONARY.INDEX_PARTS "
            "WHERE DATA_DICTIONARY.INDEXES.INDEX_NAME=DATA_DICTIONARY.INDEX_PARTS.INDEX_NAME "
            "AND DATA_DICTIONARY.INDEXES.TABLE_NAME=DATA_DICTIONARY.INDEX_PARTS.TABLE_NAME "
            "AND DATA_DICTIONARY.INDEXES.TABLE_SCHEMA=DATA_DICTIONARY.INDEX_PARTS.TABLE_SCHEMA "
            f"AND DATA_DICTIONARY.INDEXES.TABLE_NAME = {quote_string_literal(table)} "
            f"AND DATA_DICTIONARY.INDEXES.TABLE_SCHEMA = {quote_string_literal(database)}"
            )

    def get_list_table_foreign_keys_sql(self, table: str, database: str | None = None) -> str:
        sql = (
            "SELECT DISTINCT CONSTRAINT_NAME,CONSTRAINT_COLUMNS,REFERENCED_TABLE_NAME,"
            "REFERENCED_TABLE_COLUMNS,UPDATE_RULE,DELETE_RULE "
            f"FROM DATA_DICTIONARY.FOREIGN_KEYS WHERE CONSTRAINT_TABLE = {quote_string_literal(table)}"
            )
        if database:
            sql += f' AND CONSTRAINT_SCHEMA = {quote_string_literal(database)}'
        return sql

    def get_list_views_sql(self, database: str | None) -> str:
        if not database:
            raise MissingDatabaseContext('Listing views')
        return f'SELECT * FROM information_schema.VIEWS WHERE TABLE_SCHEMA = {quote_string_literal(database)}'

    def get_create_database_sql(self, name: str) -> str:
        return f'CREATE DATABASE {name}'

    def get_drop_database_sql(self, name: str) -> str:
        return f'DROP DATABASE {name}'

    # Type declarations

    def get_varchar_max_length(self) -> int:
        return 65535

    def get_varchar_type_declaration_sql_snippet(self, length: int | None, fixed: bool) -> str:
        if fixed:
            return f'CHAR({length})' if length else 'CHAR(255)'
        return f'VARCHAR({length})' if length else 'VARCHAR(255)'

    def get_clob_type_declaration_sql(self, field: dict[str, Any]) -> str:
        """Smallest text type holding the declared length, LONGTEXT when unknown."""
        length = field.get('length')
        if length and _is_numeric(length):
            for limit, keyword in CLOB_TIERS:
                if float(length) <= limit:
                    return keyword
        return 'LONGTEXT'

    def get_blob_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'LONGBLOB'

    def get_datetime_type_declaration_sql(self, field: dict[str, Any]) -> str:
        if field.get('version'):
            return 'TIMESTAMP'
        return 'DATETIME'

    def get_date_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'DATE'

    def get_time_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'TIME'

    def get_boolean_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'BOOLEAN'

    def _common_integer_type_declaration_sql(self, field: dict[str, Any]) -> str:
        unsigned = ' UNSIGNED' if field.get('unsigned') else ''
        autoinc = ' AUTO_INCREMENT' if field.get('autoincrement') else ''
        return unsigned + autoinc

    def get_integer_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'INT' + self._common_integer_type_declaration_sql(field)

    def get_bigint_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'BIGINT' + self._common_integer_type_declaration_sql(field)

    def get_smallint_type_declaration_sql(self, field: dict[str, Any]) -> str:
        return 'SMALLINT' + self._common_integer_type_declaration_sql(field)

    def get_collation_field_declaration(self, collation: str) -> str:
        return f'COLLATE {collation}'

    def prefers_identity_columns(self) -> bool:
        return True

    def supports_identity_columns(self) -> bool:
        return True

    def supports_inline_column_comments(self) -> bool:
        return True

    def supports_views(self) -> bool:
        return False

    # DDL

    def _create_table_sql(self, table_name: str, columns: dict[str, dict[str, Any]],
                          options: dict[str, Any]) -> list[str]:
        query_fields = self.get_column_declaration_list_sql(columns)

        for name, definition in (options.get('unique_constraints') or {}).items():
            query_fields += ', ' + self.get_unique_constraint_declaration_sql(name, definition)

        for name, definition in (options.get('indexes') or {}).items():
            query_fields += ', ' + self.get_index_declaration_sql(name, definition)

        if options.get('primary'):
            key_columns = list(dict.fromkeys(options['primary']))
            query_fields += f", PRIMARY KEY({', '.join(key_columns)})"

        query = 'CREATE '
        if options.get('temporary'):
            query += 'TEMPORARY '
        query += f'TABLE {table_name} ({query_fields})'

        option_strings = []
        if options.get('comment') is not None:
            option_strings.append(f"COMMENT = {quote_string_literal(options['comment'])}")
        if options.get('charset'):
            charset = f"DEFAULT CHARACTER SET {options['charset']}"
            if options.get('collate'):
                charset += f" COLLATE {options['collate']}"
            option_strings.append(charset)
        option_strings.append(f"ENGINE = {options.get('engine') or 'InnoDB'}")

        query += ' ' + ' '.join(option_strings)

        sql = [query]
        for fk in options.get('foreign_keys') or []:
            sql.append(self.get_create_foreign_key_sql(fk, table_name))
        return sql

    def _column_field(self, column) -> dict[str, Any]:
        field = column.to_dict()
        field['comment'] = self.get_column_comment(column)
        return field

    def get_alter_table_sql(self, diff: TableDiff) -> list[str]:
        """ALTER TABLE for diff, bracketed by index and foreign key changes.

        Clause order: rename, added, removed, changed, renamed columns.
        """
        parts = []
        if diff.new_name:
            parts.append(f'RENAME TO {diff.new_name}')

        for column in diff.added_columns.values():
            parts.append('ADD ' + self.get_column_declaration_sql(
                column.get_quoted_name(self), self._column_field(column)))

        for column in diff.removed_columns.values():
            parts.append(f'DROP {column.get_quoted_name(self)}')

        for column_diff in diff.changed_columns.values():
            column = column_diff.column
            parts.append(f'CHANGE {column_diff.old_column_name} ' + self.get_column_declaration_sql(
                column.get_quoted_name(self), self._column_field(column)))

        for old_name, column in diff.renamed_columns.items():
            parts.append(f'CHANGE {old_name} ' + self.get_column_declaration_sql(
                column.get_quoted_name(self), self._column_field(column)))

        sql = []
        if parts:
            sql.append(f"ALTER TABLE {diff.name} {', '.join(parts)}")

        return (self.get_pre_alter_table_index_foreign_key_sql(diff)
                + sql
                + self.get_post_alter_table_index_foreign_key_sql(diff))

    def get_advanced_foreign_key_options_sql(self, fk: ForeignKeyConstraint) -> str:
        query = ''
        if fk.has_option('match'):
            query += f" MATCH {fk.get_option('match')}"
        return query + super().get_advanced_foreign_key_options_sql(fk)

    def get_drop_index_sql(self, index: Index | str, table: Table | str | None = None) -> str:
        """DROP INDEX, or DROP PRIMARY KEY for the primary index.

        The primary key cannot be named in a statement, so both a primary
        Index and the name 'primary' (any case) drop the primary key.
        """
        if isinstance(index, Index):
            index_name = index.get_quoted_name(self)
            is_primary = index.is_primary
        elif isinstance(index, str):
            index_name = index
            is_primary = index.strip('`').lower() == 'primary'
        else:
            raise InvalidArgumentKind(
                f'get_drop_index_sql() expects index to be a string or Index, got {type(index).__name__}')

        table = self._table_name(table, 'get_drop_index_sql()')

        if is_primary:
            return self.get_drop_primary_key_sql(table)
        return f'DROP INDEX {index_name} ON {table}'

    def get_drop_primary_key_sql(self, table: str) -> str:
        return f'ALTER TABLE {table} DROP PRIMARY KEY'

    def get_drop_temporary_table_sql(self, table: Table | str) -> str:
        return f"DROP TEMPORARY TABLE {self._table_name(table, 'get_drop_temporary_table_sql()')}"

    def get_set_transaction_isolation_sql(self, level: IsolationLevel | str) -> str:
        return f'SET SESSION TRANSACTION ISOLATION LEVEL {self._transaction_isolation_level_sql(level)}'
