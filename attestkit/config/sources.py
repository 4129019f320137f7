"""
Configuration sources.

Each source builds a ``ResolvedConfig`` from one place:

- ``env``: the local process environment
- ``http``: a JSON document served by a remote endpoint, with local overrides
- ``db``: reserved, always fails
"""

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .base import ConfigError, RemoteConfigError, UnselectedSource, UnsupportedSource
from .coercion import SemanticType
from .fields import UNSPECIFIED, resolve_field
from .schema import ResolvedConfig, flatten_document, resolve_values

logger = logging.getLogger(__name__)

SOURCE_SELECTOR = "ENV_SOURCE"
HTTP_REQUEST_FIELD = "ENV_SOURCE_HTTP"
HTTP_TIMEOUT_FIELD = "ENV_SOURCE_HTTP_TIMEOUT"
DEFAULT_HTTP_TIMEOUT = 30.0


def resolve_env_values(environ: Mapping[str, str], silent: bool = True, defaults: bool = True) -> Dict[str, Any]:
    """
    Resolve every configuration field against the local environment.

    With ``silent`` set, absent required fields come back as ``UNSPECIFIED``
    instead of raising. Without ``defaults`` an absent optional field is None.
    """
    return resolve_values(environ, silent=silent, defaults=defaults)


def apply_local_overrides(document: Mapping[str, Any], environ: Mapping[str, str]) -> ResolvedConfig:
    """
    Overlay locally set fields onto a remotely sourced configuration document.

    Remote values are the base. Local fields are resolved silently and
    without defaults; a local value wins unless it resolved to
    ``UNSPECIFIED`` or to no value at all. Field defaults apply afterwards,
    only where neither side set the field.

    Args:
        document: Nested configuration document from the remote source
        environ: Local process environment

    Returns:
        The merged, strictly resolved configuration

    Raises:
        MissingRequiredField: If a required field is set on neither side
    """
    merged = flatten_document(document)
    # Raw strings go into the merge; the strict pass below coerces them once.
    overrides = {
        name: environ[name]
        for name, value in resolve_env_values(environ, silent=True, defaults=False).items()
        if value is not UNSPECIFIED and value is not None
    }
    if overrides:
        logger.info(f"Applying {len(overrides)} local overrides: {sorted(overrides)}")
    merged.update(overrides)
    return ResolvedConfig.from_values(resolve_values(merged, silent=False))


class ConfigSource(ABC):
    """Base class for configuration sources."""

    name: str = ""

    def __init__(self, environ: Mapping[str, str]):
        self.environ = environ

    @abstractmethod
    async def load(self) -> ResolvedConfig:
        """Build the resolved configuration from this source."""
        pass


class EnvSource(ConfigSource):
    """Configuration read directly from the local process environment."""

    name = "env"

    async def load(self) -> ResolvedConfig:
        return ResolvedConfig.from_values(resolve_env_values(self.environ, silent=False))


class HttpSource(ConfigSource):
    """
    Configuration fetched from a remote endpoint.

    The request is described by the JSON field ``ENV_SOURCE_HTTP``::

        {"method": "GET", "url": "https://...", "headers": {...}, "data": {...}}

    and the endpoint must answer ``{"success": true, "env": {...}}``.
    """

    name = "http"

    def __init__(self, environ: Mapping[str, str], session: Optional[aiohttp.ClientSession] = None):
        super().__init__(environ)
        self._session = session

    def request_descriptor(self) -> Dict[str, Any]:
        conf = resolve_field(self.environ, HTTP_REQUEST_FIELD, SemanticType.JSON)
        if not isinstance(conf, Mapping) or not conf.get("url"):
            raise ConfigError(f"{HTTP_REQUEST_FIELD} must be a JSON object with a url")
        return {
            "method": (conf.get("method") or "GET").upper(),
            "url": conf["url"],
            "headers": conf.get("headers"),
            "data": conf.get("data"),
        }

    def timeout(self) -> aiohttp.ClientTimeout:
        total = resolve_field(
            self.environ, HTTP_TIMEOUT_FIELD, SemanticType.FLOAT, required=False, default=DEFAULT_HTTP_TIMEOUT
        )
        return aiohttp.ClientTimeout(total=total)

    async def fetch_document(self) -> Dict[str, Any]:
        """
        Issue the configured request and return the embedded configuration document.

        Raises:
            RemoteConfigError: On transport errors, non-JSON bodies or an unsuccessful reply
        """
        descriptor = self.request_descriptor()
        url = descriptor["url"]
        kwargs: Dict[str, Any] = {"headers": descriptor["headers"], "timeout": self.timeout()}
        data = descriptor["data"]
        if isinstance(data, (dict, list)):
            kwargs["json"] = data
        elif data is not None:
            kwargs["data"] = data

        logger.info(f"Fetching environment config from {url}")
        try:
            if self._session is not None:
                body = await self._request(self._session, descriptor["method"], url, kwargs)
            else:
                async with aiohttp.ClientSession() as session:
                    body = await self._request(session, descriptor["method"], url, kwargs)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteConfigError(url, str(e) or type(e).__name__)

        if not isinstance(body, Mapping) or body.get("success") is not True:
            raise RemoteConfigError(url)
        document = body.get("env")
        if not isinstance(document, Mapping):
            raise RemoteConfigError(url, "response has no env document")
        return dict(document)

    @staticmethod
    async def _request(session: aiohttp.ClientSession, method: str, url: str, kwargs: Dict[str, Any]) -> Any:
        async with session.request(method, url, **kwargs) as response:
            try:
                return await response.json(content_type=None)
            except ValueError:
                logger.error(f"Environment config response from {url} is not JSON (HTTP {response.status})")
                return None

    async def load(self) -> ResolvedConfig:
        document = await self.fetch_document()
        return apply_local_overrides(document, self.environ)


class DbSource(ConfigSource):
    """Placeholder for database-backed configuration."""

    name = "db"

    async def load(self) -> ResolvedConfig:
        raise UnsupportedSource("Environment config from database not yet supported", source=self.name)


SOURCES = {
    EnvSource.name: EnvSource,
    HttpSource.name: HttpSource,
    DbSource.name: DbSource,
}


def select_source(environ: Mapping[str, str], **kwargs: Any) -> ConfigSource:
    """
    Pick the configuration source named by ``ENV_SOURCE``.

    Raises:
        UnselectedSource: If ``ENV_SOURCE`` is unset or empty
        UnsupportedSource: If it names an unknown source
    """
    selector = environ.get(SOURCE_SELECTOR)
    if not selector:
        raise UnselectedSource()
    if selector not in SOURCES:
        raise UnsupportedSource(f"Unknown environment source {selector!r}, expected one of {sorted(SOURCES)}", source=selector)
    if selector == HttpSource.name:
        return HttpSource(environ, **kwargs)
    return SOURCES[selector](environ)
