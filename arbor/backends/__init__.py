"""
Backend interfaces for branch structure generation.

This module provides a unified interface over the generation methods:
- lsystem: parametric grammar rewriting + turtle interpretation
- random_tree: fixed-depth random branching fallback

Use get_available_backends() to discover backend names at runtime.
"""

from typing import Dict, List, Optional, Type

from .base import GenerationBackend, BackendConfig, BackendResult
from .lsystem_backend import LSystemBackend, LSystemConfig
from .random_tree_backend import RandomTreeBackend, RandomTreeConfig

_BACKEND_REGISTRY: Dict[str, Type[GenerationBackend]] = {
    "lsystem": LSystemBackend,
    "random_tree": RandomTreeBackend,
}

_CONFIG_REGISTRY: Dict[str, Type[BackendConfig]] = {
    "lsystem": LSystemConfig,
    "random_tree": RandomTreeConfig,
}


def get_available_backends() -> List[str]:
    """
    Get list of available backend names.

    Returns
    -------
    List[str]
        Names of registered backends
    """
    return list(_BACKEND_REGISTRY.keys())


def get_backend(name: str) -> Optional[Type[GenerationBackend]]:
    """
    Get a backend class by name.

    Parameters
    ----------
    name : str
        Backend name (e.g., "lsystem", "random_tree")

    Returns
    -------
    Type[GenerationBackend] or None
        Backend class if registered, None otherwise
    """
    return _BACKEND_REGISTRY.get(name)


def get_backend_config(name: str) -> Optional[Type[BackendConfig]]:
    """Get a backend config class by name (None if unknown)."""
    return _CONFIG_REGISTRY.get(name)


__all__ = [
    "GenerationBackend",
    "BackendConfig",
    "BackendResult",
    "LSystemBackend",
    "LSystemConfig",
    "RandomTreeBackend",
    "RandomTreeConfig",
    "get_available_backends",
    "get_backend",
    "get_backend_config",
]
