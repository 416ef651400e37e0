"""
Fake transport and connection fixtures.

The fake transport stands in for the network: it records every literal SQL
statement it receives and answers with scripted buffered results.

Usage:
    def test_select(connection, transport):
        transport.add_result('SELECT', ['id'], [(1,)])
        assert connection.fetch_column('SELECT id FROM t') == [1]
        assert transport.queries == ['SELECT id FROM t']
"""
import pymysql
import pytest
from drizzledb.connection import Connection
from drizzledb.drivers import get_driver
from drizzledb.options import DriverOptions
from drizzledb.platforms import get_platform
from drizzledb.transport import BufferedResult, ResultColumn
from pymysql.converters import escape_string


def make_result(columns=(), rows=(), affected_rows=None, insert_id=None):
    """Build a buffered result; affected_rows defaults to the row count."""
    return BufferedResult(
        columns=[ResultColumn(name) for name in columns],
        rows=[tuple(row) for row in rows],
        affected_rows=len(rows) if affected_rows is None else affected_rows,
        insert_id=insert_id,
        )


class FakeTransport:
    """In-memory transport answering queries by SQL prefix.

    The most recently added response whose prefix matches wins; unmatched
    statements get an empty result affecting zero rows.
    """

    def __init__(self):
        self.queries = []
        self.closed = False
        self._responses = []
        self._error_code = None
        self._error_message = ''

    def add_result(self, prefix, columns=(), rows=(), affected_rows=None):
        self._responses.append((prefix, lambda: make_result(columns, rows, affected_rows)))

    def add_error(self, prefix, code=1064, message='You have an error in your SQL syntax'):
        self._responses.append((prefix, pymysql.err.ProgrammingError(code, message)))

    def query(self, sql):
        self.queries.append(sql)
        for prefix, response in reversed(self._responses):
            if sql.startswith(prefix):
                if isinstance(response, Exception):
                    self._error_code, self._error_message = response.args
                    raise response
                self._error_code, self._error_message = None, ''
                return response()
        self._error_code, self._error_message = None, ''
        return make_result()

    def escape_string(self, value):
        return escape_string(value)

    def error_code(self):
        return self._error_code

    def error_message(self):
        return self._error_message

    def close(self):
        self.closed = True


@pytest.fixture
def transport():
    """Fresh fake transport."""
    return FakeTransport()


@pytest.fixture
def options():
    return DriverOptions(hostname='localhost', username='tester', password='secret',
                         database='testdb')


@pytest.fixture
def connection(transport, options):
    """Connection to 'testdb' backed by the fake transport."""
    return Connection(transport, options, get_driver('drizzle'))


@pytest.fixture
def connection_without_database(transport):
    """Connection opened without naming a database."""
    options = DriverOptions(hostname='localhost', username='tester')
    return Connection(transport, options, get_driver('drizzle'))


@pytest.fixture
def platform():
    return get_platform('drizzle')
