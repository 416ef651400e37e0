"""
Driver factory.
"""
from functools import lru_cache

from drizzledb.drivers.base import _DRIVER_REGISTRY
from drizzledb.drivers.base import Driver as Driver
from drizzledb.drivers.base import register_driver as register_driver
from drizzledb.drivers.drizzle import DrizzleDriver as DrizzleDriver


def _validate_driver(name: str) -> None:
    """Raise ValueError if name is not registered."""
    if name not in _DRIVER_REGISTRY:
        available = list(_DRIVER_REGISTRY.keys())
        raise ValueError(f'Unsupported driver: {name}. Available: {available}')


@lru_cache(maxsize=8)
def _get_driver(name: str) -> Driver:
    """Get cached driver instance for a name."""
    _validate_driver(name)
    return _DRIVER_REGISTRY[name]()


def get_driver(name: str) -> Driver:
    """Get driver instance for a driver name."""
    return _get_driver(name.lower())


def get_available_drivers() -> list[str]:
    """Return list of registered driver names."""
    return list(_DRIVER_REGISTRY.keys())


def is_supported_driver(name: str | None) -> bool:
    """Check if a driver is supported."""
    return bool(name) and name.lower() in _DRIVER_REGISTRY


def get_driver_class(name: str) -> type[Driver]:
    """Get the driver class for a name without instantiating."""
    _validate_driver(name)
    return _DRIVER_REGISTRY[name]
