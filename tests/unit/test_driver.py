"""
Unit tests for the driver registry and the Drizzle driver.
"""
import pymysql
import pytest
from drizzledb.drivers import DrizzleDriver, get_available_drivers, get_driver
from drizzledb.drivers import get_driver_class, is_supported_driver
from drizzledb.exceptions import ConnectionFailure
from drizzledb.options import DriverOptions
from drizzledb.platforms import DrizzlePlatform
from drizzledb.schema import DrizzleSchemaManager
from tests.fixtures.mocks import FakeTransport


def test_registry():
    assert get_available_drivers() == ['drizzle']
    assert is_supported_driver('Drizzle')
    assert not is_supported_driver(None)
    assert get_driver_class('drizzle') is DrizzleDriver
    assert get_driver('DRIZZLE') is get_driver('drizzle')
    with pytest.raises(ValueError, match='Unsupported driver'):
        get_driver('postgres')


def test_driver_facts(connection):
    driver = get_driver('drizzle')
    assert driver.get_name() == 'drizzle'
    assert isinstance(driver.get_database_platform(), DrizzlePlatform)
    assert isinstance(driver.get_schema_manager(connection), DrizzleSchemaManager)


class TestConnect:

    def test_short_parameter_names(self, mocker):
        transport_cls = mocker.patch('drizzledb.drivers.drizzle.Transport', return_value=FakeTransport())
        cn = get_driver('drizzle').connect({'host': 'db', 'port': 4427, 'dbname': 'shop'},
                                           username='tester', password='secret')
        transport_cls.assert_called_once_with('db', 4427, 'shop', 'tester', 'secret',
                                              charset='utf8mb4', connect_timeout=10)
        assert cn.options.database == 'shop'

    def test_options_object_with_overrides(self, mocker):
        mocker.patch('drizzledb.drivers.drizzle.Transport', return_value=FakeTransport())
        options = DriverOptions(hostname='db', username='tester')
        cn = get_driver('drizzle').connect(options, password='other')
        assert cn.options.password == 'other'

    def test_failure_is_wrapped(self, mocker, caplog):
        mocker.patch('drizzledb.drivers.drizzle.Transport',
                     side_effect=pymysql.err.OperationalError(2003, "Can't connect"))
        with pytest.raises(ConnectionFailure, match="Can't connect"):
            get_driver('drizzle').connect({'host': 'db', 'user': 'tester', 'password': 'secret'})
        assert 'secret' not in caplog.text


class TestGetDatabase:

    def test_named_database(self, connection, transport):
        assert get_driver('drizzle').get_database(connection) == 'testdb'
        assert transport.queries == []

    def test_server_database(self, connection_without_database, transport):
        transport.add_result('SELECT DATABASE()', ['DATABASE()'], [(None,)])
        assert get_driver('drizzle').get_database(connection_without_database) is None
