"""
Unit tests for the transaction context manager.
"""
import logging

import pytest
from drizzledb import transaction


def test_commit_on_success(connection, transport):
    with transaction(connection) as tx:
        tx.execute('DELETE FROM t WHERE id = ?', 1)
        tx.execute('UPDATE t SET a = 1')
    assert transport.queries == [
        'START TRANSACTION',
        "DELETE FROM t WHERE id = '1'",
        'UPDATE t SET a = 1',
        'COMMIT',
        ]
    assert not connection.in_transaction


def test_rollback_on_error(connection, transport, caplog):
    with caplog.at_level(logging.WARNING, logger='drizzledb.transaction'):
        with pytest.raises(ValueError):
            with transaction(connection) as tx:
                tx.execute('DELETE FROM t')
                raise ValueError('boom')
    assert transport.queries[-1] == 'ROLLBACK'
    assert 'Rolling back' in caplog.text


def test_nested_transactions_are_rejected(connection):
    with transaction(connection):
        with pytest.raises(RuntimeError, match='Nested'):
            transaction(connection)
    with transaction(connection):
        pass


def test_failed_begin_releases_connection(connection, transport):
    transport.add_error('START TRANSACTION', 2006, 'server has gone away')
    with pytest.raises(Exception):
        with transaction(connection):
            pass
    transport.add_result('START TRANSACTION')
    with transaction(connection):
        pass


def test_query_and_select_delegate(connection, transport):
    transport.add_result('SELECT', ['id'], [(1,), (2,)])
    with transaction(connection) as tx:
        assert tx.query('SELECT id FROM t').fetch_column() == 1
        assert tx.select('SELECT id FROM t') == [{'id': 1}, {'id': 2}]
