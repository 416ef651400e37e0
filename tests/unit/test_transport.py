"""
Unit tests for the PyMySQL transport and buffered results.
"""
import pymysql
import pytest
from drizzledb.transport import BufferedResult, ResultColumn, Transport


@pytest.fixture
def raw(mocker):
    """Mocked PyMySQL connection returned by pymysql.connect."""
    raw = mocker.MagicMock()
    raw.open = True
    mocker.patch('drizzledb.transport.pymysql.connect', return_value=raw)
    return raw


@pytest.fixture
def live(raw):
    return Transport('db.example.com', '4427', 'shop', 'tester', None)


def test_connect_arguments(raw, mocker):
    connect = mocker.patch('drizzledb.transport.pymysql.connect', return_value=raw)
    Transport('db.example.com', 4427, 'shop', 'tester', None, charset='utf8', connect_timeout=3)
    kwargs = connect.call_args.kwargs
    assert kwargs['host'] == 'db.example.com'
    assert kwargs['port'] == 4427
    assert kwargs['user'] == 'tester'
    assert kwargs['password'] == ''
    assert kwargs['database'] == 'shop'
    assert kwargs['charset'] == 'utf8'
    assert kwargs['connect_timeout'] == 3
    assert kwargs['autocommit'] is True


def test_query_buffers_the_cursor(live, raw):
    cursor = raw.cursor.return_value
    cursor.description = [('id', 3, None, 11, 11, 0, False), ('name', 253, None, 80, 80, 0, True)]
    cursor.fetchall.return_value = ((1, 'ann'), (2, 'bob'))
    cursor.rowcount = 2
    cursor.lastrowid = 0

    result = live.query('SELECT id, name FROM people')

    cursor.execute.assert_called_once_with('SELECT id, name FROM people')
    cursor.close.assert_called_once()
    assert [c.name for c in result.columns] == ['id', 'name']
    assert result.columns[1].nullable is True
    assert result.affected_rows() == 2
    assert result.row_next() == (1, 'ann')
    assert live.error_code() is None


def test_statement_without_result_set(live, raw):
    cursor = raw.cursor.return_value
    cursor.description = None
    cursor.rowcount = 4
    cursor.lastrowid = 9
    result = live.query('DELETE FROM people')
    cursor.fetchall.assert_not_called()
    assert result.column_count() == 0
    assert result.affected_rows() == 4
    assert result.insert_id == 9


def test_query_error_is_recorded_and_reraised(live, raw):
    cursor = raw.cursor.return_value
    cursor.execute.side_effect = pymysql.err.ProgrammingError(1064, 'syntax error')
    with pytest.raises(pymysql.err.ProgrammingError):
        live.query('SELEC 1')
    cursor.close.assert_called_once()
    assert live.error_code() == 1064
    assert live.error_message() == 'syntax error'


def test_escape_and_close(live, raw):
    raw.escape_string.return_value = "it\\'s"
    assert live.escape_string("it's") == "it\\'s"
    assert not live.closed
    live.close()
    raw.close.assert_called_once()
    raw.open = False
    assert live.closed
    live.close()
    raw.close.assert_called_once()


class TestBufferedResult:

    def test_forward_only_cursors(self):
        result = BufferedResult([ResultColumn('a'), ResultColumn('b')], [[1, 2]], affected_rows=1)
        assert result.column_next().name == 'a'
        assert result.column_next().name == 'b'
        assert result.column_next() is None
        assert result.row_next() == (1, 2)
        assert result.row_next() is None

    def test_free_releases_rows(self):
        result = BufferedResult([ResultColumn('a')], [(1,), (2,)], affected_rows=2)
        result.free()
        assert result.row_next() is None
        assert result.affected_rows() == 2
