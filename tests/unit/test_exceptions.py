"""
Unit tests for exception classes and error classification.
"""
import pymysql
import pytest
from drizzledb.exceptions import CatalogReadFailed, DatabaseError
from drizzledb.exceptions import MissingDatabaseContext, OperationalError
from drizzledb.exceptions import ParamCountMismatch, ProgrammingError, SchemaError
from drizzledb.exceptions import StatementExecutionFailed, is_transient_error


def test_hierarchy():
    assert issubclass(MissingDatabaseContext, SchemaError)
    assert issubclass(SchemaError, DatabaseError)
    assert isinstance(ParamCountMismatch('SELECT ?', 1, 0), ProgrammingError)
    assert isinstance(StatementExecutionFailed('x', 'y'), OperationalError)


def test_messages_carry_context():
    exc = StatementExecutionFailed("SELEC 'x'", 'syntax error', 1064)
    assert str(exc) == "SELEC 'x': syntax error"
    cause = ValueError('bad row')
    failed = CatalogReadFailed('SHOW TABLES', cause)
    assert failed.cause is cause
    assert 'SHOW TABLES' in str(failed)


@pytest.mark.parametrize(('exc', 'expected'), [
    (StatementExecutionFailed('x', 'Deadlock found', 1213), True),
    (StatementExecutionFailed('x', 'syntax error', 1064), False),
    (pymysql.err.OperationalError(2006, 'MySQL server has gone away'), True),
    (pymysql.err.OperationalError(1045, 'Access denied'), False),
    (ConnectionError('connection reset by peer'), True),
    (ValueError('bad value'), False),
])
def test_is_transient_error(exc, expected):
    assert is_transient_error(exc) is expected
