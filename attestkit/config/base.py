"""
Base definitions for attestkit environment configuration.

Holds the configuration error hierarchy shared by every resolver, plus the
logging and ``.env`` bootstrap helpers.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


class MissingRequiredField(ConfigError):
    """Raised when a required field has no value in its source."""

    def __init__(self, name: str):
        super().__init__(f"Expected environment variable {name}")
        self.name = name


class CoercionError(ConfigError):
    """Raised when a raw value cannot be converted to its semantic type."""

    def __init__(self, message: str, name: Optional[str] = None, raw: Optional[str] = None):
        super().__init__(message)
        self.name = name
        self.raw = raw


class RemoteConfigError(ConfigError):
    """Raised when the remote configuration endpoint fails or is unreachable."""

    def __init__(self, url: str, reason: Optional[str] = None):
        message = f"Environment config retrieval from {url} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url
        self.reason = reason


class UnsupportedSource(ConfigError):
    """Raised when ENV_SOURCE names a source that cannot be used."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class UnselectedSource(UnsupportedSource):
    """Raised when no ENV_SOURCE is configured at all."""

    def __init__(self):
        super().__init__("No environment source configured! Aborting.")


class UnknownContractBinding(ConfigError):
    """Raised when no address is configured for a contract on a network."""

    def __init__(self, contract: str, network: str):
        super().__init__(f"Couldn't find contract obj for {contract}, {network}")
        self.contract = contract
        self.network = network


class UnknownProvider(ConfigError):
    """Raised when no provider endpoint is configured for a network."""

    def __init__(self, network: str):
        super().__init__(f"No provider configured for network {network}")
        self.network = network


def configure_logging(level: Optional[str] = None) -> None:
    """
    Setup logging configuration.

    Args:
        level: Level name such as ``"debug"``; unknown or empty names fall back to INFO
    """
    resolved = getattr(logging, (level or "INFO").upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)


def load_env_file(path: Optional[Union[str, Path]] = None) -> bool:
    """
    Load variables from a ``.env`` file into the process environment.

    Variables already present in the environment are left untouched.

    Returns:
        True if a file was found and loaded
    """
    loaded = load_dotenv(dotenv_path=path)
    if loaded:
        logger.debug(f"Loaded environment file {path or '.env'}")
    return loaded
