"""
Platform factory for engine SQL rendering.
"""
from functools import lru_cache

from drizzledb.platforms.base import _PLATFORM_REGISTRY
from drizzledb.platforms.base import AbstractPlatform as AbstractPlatform
from drizzledb.platforms.base import IsolationLevel as IsolationLevel
from drizzledb.platforms.base import register_platform as register_platform
from drizzledb.platforms.drizzle import DrizzlePlatform as DrizzlePlatform


def _validate_platform(name: str) -> None:
    """Raise ValueError if name is not registered."""
    if name not in _PLATFORM_REGISTRY:
        available = list(_PLATFORM_REGISTRY.keys())
        raise ValueError(f'Unsupported platform: {name}. Available: {available}')


@lru_cache(maxsize=8)
def _get_platform(name: str) -> AbstractPlatform:
    """Get cached platform instance for a name."""
    _validate_platform(name)
    return _PLATFORM_REGISTRY[name]()


def get_platform(name: str) -> AbstractPlatform:
    """Get platform instance for a platform name.
    """
    return _get_platform(name.lower())


def get_available_platforms() -> list[str]:
    """Return list of registered platform names."""
    return list(_PLATFORM_REGISTRY.keys())


def is_supported_platform(name: str) -> bool:
    """Check if a platform is supported."""
    return name.lower() in _PLATFORM_REGISTRY
