"""
Base driver interface.

A driver is the factory that turns connection parameters into a connected
Connection and knows which platform and schema manager go with it.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from drizzledb.connection import Connection
    from drizzledb.platforms.base import AbstractPlatform
    from drizzledb.schema.manager import SchemaManager

# Registry of driver name -> driver class
# Defined here to avoid circular imports (concrete drivers import from base)
_DRIVER_REGISTRY: dict[str, type['Driver']] = {}


def register_driver(name: str):
    """Decorator to register a driver class under a name.

    Usage:
        @register_driver('drizzle')
        class DrizzleDriver(Driver):
            ...
    """
    def decorator(cls: type['Driver']) -> type['Driver']:
        _DRIVER_REGISTRY[name] = cls
        return cls
    return decorator


class Driver(ABC):
    """Base class for engine drivers.
    """

    @abstractmethod
    def connect(self, params: dict[str, Any], username: str | None = None,
                password: str | None = None) -> 'Connection':
        """Open a connection.

        Args:
            params: Mapping with host, port and dbname (or hostname/database)
            username: Login name, overrides params
            password: Login password, overrides params
        """

    @abstractmethod
    def get_database_platform(self) -> 'AbstractPlatform':
        """Platform used to render SQL for this engine."""

    @abstractmethod
    def get_schema_manager(self, conn: 'Connection') -> 'SchemaManager':
        """Catalog reader bound to conn."""

    @abstractmethod
    def get_name(self) -> str:
        """Fixed name identifying the engine."""

    @abstractmethod
    def get_database(self, conn: 'Connection') -> str | None:
        """Current database of conn."""

