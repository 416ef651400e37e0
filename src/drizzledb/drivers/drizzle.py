"""
Drizzle driver: opens PyMySQL transports and wires the Drizzle platform
and schema manager to the resulting connection.
"""
import logging
from typing import Any

import pymysql
from drizzledb.connection import Connection
from drizzledb.drivers.base import Driver, register_driver
from drizzledb.exceptions import ConnectionFailure
from drizzledb.options import DriverOptions
from drizzledb.platforms import get_platform
from drizzledb.platforms.drizzle import DrizzlePlatform
from drizzledb.schema.drizzle import DrizzleSchemaManager
from drizzledb.transport import Transport

logger = logging.getLogger(__name__)

# Short parameter names accepted alongside the option field names
_PARAM_ALIASES = {
    'host': 'hostname',
    'dbname': 'database',
    'user': 'username',
    }


def _normalize_params(params: dict[str, Any]) -> dict[str, Any]:
    normalized = {}
    for key, value in params.items():
        normalized[_PARAM_ALIASES.get(key, key)] = value
    return normalized


@register_driver('drizzle')
class DrizzleDriver(Driver):
    """Driver for Drizzle servers reached over the MySQL protocol.
    """

    def connect(self, params: dict[str, Any] | DriverOptions,
                username: str | None = None, password: str | None = None) -> Connection:
        """Open a connection.

        Args:
            params: DriverOptions, or a mapping with host, port, dbname
            username: Login name, overrides params
            password: Login password, overrides params

        Returns
            Connected Connection

        Raises
            ConnectionFailure: If the server cannot be reached or rejects the login
        """
        overrides = {}
        if username is not None:
            overrides['username'] = username
        if password is not None:
            overrides['password'] = password

        if isinstance(params, DriverOptions):
            options = params
            for key, value in overrides.items():
                setattr(options, key, value)
        else:
            options = DriverOptions.from_dict(
                {'driver': self.get_name(), **_normalize_params(params)}, **overrides)

        try:
            transport = Transport(
                options.hostname,
                options.port,
                options.database,
                options.username,
                options.password,
                charset=options.charset,
                connect_timeout=options.connect_timeout,
                )
        except pymysql.Error as exc:
            logger.error(f'Connection to {options} failed: {exc}')
            raise ConnectionFailure(f'Could not connect to {options}: {exc}') from exc

        logger.debug(f'Connected to {options}')
        return Connection(transport, options, self)

    def get_database_platform(self) -> DrizzlePlatform:
        return get_platform(self.get_name())

    def get_schema_manager(self, conn: Connection) -> DrizzleSchemaManager:
        return DrizzleSchemaManager(conn)

    def get_name(self) -> str:
        return 'drizzle'

    def get_database(self, conn: Connection) -> str | None:
        """Database named at connect time, else the server's current database."""
        if conn.options.database:
            return conn.options.database
        return conn.query('SELECT DATABASE()').fetch_column()
