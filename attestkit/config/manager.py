"""
Configuration provider for attestkit.

A ``ConfigProvider`` resolves the environment configuration once and hands
the same immutable ``ResolvedConfig`` to every caller. Construct one at
process start and pass it to consumers, or use the process default through
``get_config()``.
"""

import asyncio
from enum import Enum
import logging
import os
from typing import Any, Mapping, Optional

from .base import ConfigError, load_env_file
from .schema import ResolvedConfig
from .sources import ConfigSource, select_source

logger = logging.getLogger(__name__)


class ResolutionState(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    FAILED = "failed"


class ConfigProvider:
    """
    Resolves the configuration exactly once and memoizes the outcome.

    Concurrent callers of :meth:`get` before resolution finishes all await
    the same pending task. Success and failure are both final: later calls
    return the same object or raise the same exception without touching the
    source again.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None, **source_kwargs: Any):
        """
        Initialize the provider.

        Args:
            environ: Environment mapping to read, defaults to ``os.environ``
            **source_kwargs: Passed to the selected source (e.g. an aiohttp ``session``)
        """
        self._environ = environ if environ is not None else os.environ
        self._source_kwargs = source_kwargs
        self._pending: Optional[asyncio.Task] = None
        self._config: Optional[ResolvedConfig] = None
        self._error: Optional[Exception] = None

    @property
    def state(self) -> ResolutionState:
        if self._config is not None:
            return ResolutionState.RESOLVED
        if self._error is not None:
            return ResolutionState.FAILED
        if self._pending is not None:
            return ResolutionState.RESOLVING
        return ResolutionState.UNRESOLVED

    @property
    def config(self) -> ResolvedConfig:
        """
        The resolved configuration, for synchronous readers after startup.

        Raises:
            ConfigError: If resolution has not completed
        """
        if self._config is not None:
            return self._config
        if self._error is not None:
            raise self._error.with_traceback(None)
        raise ConfigError(f"Configuration is not resolved yet (state: {self.state.value})")

    async def get(self) -> ResolvedConfig:
        """Resolve the configuration on first use and return it."""
        if self._config is not None:
            return self._config
        if self._error is not None:
            raise self._error.with_traceback(None)
        if self._pending is None:
            self._pending = asyncio.get_running_loop().create_task(self._resolve())
        return await asyncio.shield(self._pending)

    def select_source(self) -> ConfigSource:
        return select_source(self._environ, **self._source_kwargs)

    async def _resolve(self) -> ResolvedConfig:
        try:
            source = self.select_source()
            logger.info(f"Resolving environment config from source: {source.name}")
            config = await source.load()
        except Exception as e:
            self._error = e
            logger.error(f"Failed to resolve environment config: {e}")
            raise
        self._config = config
        logger.info(f"Environment config resolved for app {config.app_id} ({config.node_env})")
        return config

    def __repr__(self) -> str:
        return f"ConfigProvider(state={self.state.value})"


# Global configuration provider instance
_provider: Optional[ConfigProvider] = None


def get_provider() -> ConfigProvider:
    """
    Get the process default provider, loading ``.env`` on first use.

    Returns:
        ConfigProvider reading ``os.environ``
    """
    global _provider

    if _provider is None:
        load_env_file()
        _provider = ConfigProvider()

    return _provider


async def get_config() -> ResolvedConfig:
    """Resolve (once) and return the process default configuration."""
    return await get_provider().get()


def reset_provider() -> None:
    """Drop the process default provider so the next access resolves again."""
    global _provider
    _provider = None
