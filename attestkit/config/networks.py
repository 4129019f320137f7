"""
Network-specific lookups on top of the resolved configuration.

Both contract and provider maps may carry a universal ``"all"`` entry. When
present it applies to every network and wins over any network-specific entry.
"""

from enum import Enum
from typing import Any, Mapping, Optional, Union

from .base import UnknownContractBinding, UnknownProvider
from .manager import ConfigProvider, get_provider
from .schema import ResolvedConfig


class Network(str, Enum):
    MAINNET = "mainnet"
    RINKEBY = "rinkeby"
    LOCAL = "local"
    KOVAN = "kovan"
    SOKOL = "sokol"
    ROPSTEN = "ropsten"
    ALL = "all"


UNIVERSAL = Network.ALL.value

NetworkName = Union[Network, str]


def _network_key(network: NetworkName) -> str:
    return network.value if isinstance(network, Network) else str(network)


def _pick(entries: Optional[Mapping[str, Any]], network: str) -> Any:
    if not isinstance(entries, Mapping):
        return None
    universal = entries.get(UNIVERSAL)
    if universal:
        return universal
    return entries.get(network)


def contract_binding_for(config: ResolvedConfig, contract: str, network: NetworkName = Network.MAINNET) -> Mapping[str, Any]:
    """
    Get the contract entry (``{"address": ...}``) for a network.

    Args:
        config: Resolved configuration
        contract: Contract name as it appears in ``CONTRACTS``
        network: Network name

    Raises:
        UnknownContractBinding: If neither a universal nor a network entry exists
    """
    network = _network_key(network)
    binding = _pick((config.contracts or {}).get(contract), network)
    if not binding:
        raise UnknownContractBinding(contract, network)
    return binding


def contract_address_for(config: ResolvedConfig, contract: str, network: NetworkName = Network.MAINNET) -> str:
    """Get the deployed address of a contract on a network."""
    binding = contract_binding_for(config, contract, network)
    address = binding.get("address") if isinstance(binding, Mapping) else None
    if not address:
        raise UnknownContractBinding(contract, _network_key(network))
    return address


def provider_for(config: ResolvedConfig, network: NetworkName = Network.MAINNET) -> str:
    """
    Get the provider endpoint URL for a network.

    Raises:
        UnknownProvider: If neither a universal nor a network entry exists
    """
    network = _network_key(network)
    url = _pick(config.providers, network)
    if not url:
        raise UnknownProvider(network)
    return url


async def get_contract_address(
    contract: str, network: NetworkName = Network.MAINNET, provider: Optional[ConfigProvider] = None
) -> str:
    """Resolve the configuration if needed, then look up a contract address."""
    config = await (provider or get_provider()).get()
    return contract_address_for(config, contract, network)


async def get_provider_url(network: NetworkName = Network.MAINNET, provider: Optional[ConfigProvider] = None) -> str:
    """Resolve the configuration if needed, then look up a provider endpoint."""
    config = await (provider or get_provider()).get()
    return provider_for(config, network)
