"""Unit tests for network classification."""

import pytest

from x402_cashback.errors import UnsupportedNetworkError
from x402_cashback.networks import NetworkFamily, classify, require_family, to_caip2


@pytest.mark.unit
class TestClassify:
    @pytest.mark.parametrize("network", ["base-sepolia", "base", "avalanche-fuji", "eip155:84532"])
    def test_evm_networks(self, network):
        assert classify(network) is NetworkFamily.EVM

    @pytest.mark.parametrize(
        "network", ["solana-devnet", "solana", "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"]
    )
    def test_svm_networks(self, network):
        assert classify(network) is NetworkFamily.SVM

    @pytest.mark.parametrize("network", ["", "ethereum-classic", "eip155:999999", "BASE-SEPOLIA"])
    def test_unknown_networks_are_unsupported(self, network):
        assert classify(network) is NetworkFamily.UNSUPPORTED

    def test_require_family_fails_fast(self):
        with pytest.raises(UnsupportedNetworkError, match="Invalid network: dogechain"):
            require_family("dogechain")


@pytest.mark.unit
def test_to_caip2():
    assert to_caip2("base-sepolia") == "eip155:84532"
    assert to_caip2("solana-devnet") == "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"
    assert to_caip2("eip155:8453") == "eip155:8453"
