"""
Tests for contract and provider lookups.
"""

import json

import pytest

from attestkit.config import (
    ConfigProvider,
    Network,
    UnknownContractBinding,
    UnknownProvider,
    contract_address_for,
    contract_binding_for,
    get_contract_address,
    get_provider_url,
    provider_for,
)
from attestkit.config.schema import ResolvedConfig, resolve_values


@pytest.fixture
def config(base_environ):
    return ResolvedConfig.from_values(resolve_values(base_environ))


class TestContractLookup:
    def test_universal_entry_wins(self, config):
        assert contract_address_for(config, "AttestationLogic", "rinkeby") == "0x3333333333333333333333333333333333333333"
        assert contract_address_for(config, "AttestationLogic", "kovan") == "0x3333333333333333333333333333333333333333"

    def test_network_entry(self, config):
        assert contract_address_for(config, "AccountRegistryLogic", Network.RINKEBY) == "0x2222222222222222222222222222222222222222"

    def test_defaults_to_mainnet(self, config):
        assert contract_address_for(config, "AccountRegistryLogic") == "0x1111111111111111111111111111111111111111"

    def test_binding_object(self, config):
        assert dict(contract_binding_for(config, "AccountRegistryLogic", "mainnet")) == {
            "address": "0x1111111111111111111111111111111111111111"
        }

    def test_unknown_network(self, config):
        with pytest.raises(UnknownContractBinding) as exc_info:
            contract_address_for(config, "AccountRegistryLogic", "kovan")
        assert exc_info.value.contract == "AccountRegistryLogic"
        assert exc_info.value.network == "kovan"

    def test_unknown_contract(self, config):
        with pytest.raises(UnknownContractBinding):
            contract_address_for(config, "TokenEscrowMarketplace", "mainnet")


    def test_malformed_contract_entry(self, base_environ):
        base_environ["CONTRACTS"] = json.dumps({"AttestationLogic": "0xabc"})
        config = ResolvedConfig.from_values(resolve_values(base_environ))
        with pytest.raises(UnknownContractBinding):
            contract_address_for(config, "AttestationLogic", "mainnet")


class TestProviderLookup:
    def test_network_entry(self, config):
        assert provider_for(config, "rinkeby") == "https://rinkeby.infura.io/v3/key"

    def test_universal_entry_wins(self, base_environ):
        base_environ["PROVIDERS"] = json.dumps({"all": "https://any", "mainnet": "https://main"})
        config = ResolvedConfig.from_values(resolve_values(base_environ))
        assert provider_for(config, Network.MAINNET) == "https://any"
        assert provider_for(config, "sokol") == "https://any"

    def test_unknown_network(self, config):
        with pytest.raises(UnknownProvider) as exc_info:
            provider_for(config, Network.ROPSTEN)
        assert exc_info.value.network == "ropsten"


class TestAsyncLookups:
    @pytest.mark.asyncio
    async def test_contract_address_through_provider(self, base_environ):
        provider = ConfigProvider(base_environ)
        address = await get_contract_address("AccountRegistryLogic", "rinkeby", provider=provider)
        assert address == "0x2222222222222222222222222222222222222222"

    @pytest.mark.asyncio
    async def test_provider_url_through_provider(self, base_environ):
        provider = ConfigProvider(base_environ)
        assert await get_provider_url(provider=provider) == "https://mainnet.infura.io/v3/key"

    @pytest.mark.asyncio
    async def test_lookup_failure_reaches_caller(self, base_environ):
        provider = ConfigProvider(base_environ)
        with pytest.raises(UnknownProvider):
            await get_provider_url("local", provider=provider)
