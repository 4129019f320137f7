"""
Environment configuration for attestkit.

The configuration is resolved once per process from the source named by
``ENV_SOURCE`` (``env``, ``http`` or ``db``) and shared by every consumer.

Example:
    from attestkit.config import ConfigProvider, contract_address_for, provider_for

    provider = ConfigProvider()
    config = await provider.get()

    # Access identity settings
    app_id = config.app_id

    # Access network lookups
    rpc_url = provider_for(config, "mainnet")
    registry = contract_address_for(config, "AccountRegistryLogic", "rinkeby")
"""

from .base import (
    CoercionError,
    ConfigError,
    MissingRequiredField,
    RemoteConfigError,
    UnknownContractBinding,
    UnknownProvider,
    UnselectedSource,
    UnsupportedSource,
    configure_logging,
)
from .coercion import SemanticType, coerce
from .fields import UNSPECIFIED, FieldSpec, resolve_field, resolve_field_silent, resolve_fields
from .manager import ConfigProvider, ResolutionState, get_config, get_provider, reset_provider
from .networks import (
    Network,
    contract_address_for,
    contract_binding_for,
    get_contract_address,
    get_provider_url,
    provider_for,
)
from .schema import ResolvedConfig
from .sources import DbSource, EnvSource, HttpSource, apply_local_overrides, resolve_env_values, select_source

__all__ = [
    "CoercionError",
    "ConfigError",
    "MissingRequiredField",
    "RemoteConfigError",
    "UnknownContractBinding",
    "UnknownProvider",
    "UnselectedSource",
    "UnsupportedSource",
    "configure_logging",
    "SemanticType",
    "coerce",
    "UNSPECIFIED",
    "FieldSpec",
    "resolve_field",
    "resolve_field_silent",
    "resolve_fields",
    "ConfigProvider",
    "ResolutionState",
    "get_config",
    "get_provider",
    "reset_provider",
    "Network",
    "contract_address_for",
    "contract_binding_for",
    "get_contract_address",
    "get_provider_url",
    "provider_for",
    "ResolvedConfig",
    "DbSource",
    "EnvSource",
    "HttpSource",
    "apply_local_overrides",
    "resolve_env_values",
    "select_source",
]
