"""Network classification for x402 payment requirements.

Networks are accepted either by their x402 v1 name (``base-sepolia``) or by
their CAIP-2 identifier (``eip155:84532``).
"""

from enum import Enum

from x402_cashback.errors import UnsupportedNetworkError


class NetworkFamily(str, Enum):
    EVM = "evm"
    SVM = "svm"
    UNSUPPORTED = "unsupported"


# v1 name -> CAIP-2
EVM_NETWORKS: dict[str, str] = {
    "base": "eip155:8453",
    "base-sepolia": "eip155:84532",
    "avalanche": "eip155:43114",
    "avalanche-fuji": "eip155:43113",
    "iotex": "eip155:4689",
    "sei": "eip155:1329",
    "sei-testnet": "eip155:1328",
    "polygon": "eip155:137",
    "polygon-amoy": "eip155:80002",
    "peaq": "eip155:3338",
}

SVM_NETWORKS: dict[str, str] = {
    "solana": "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp",
    "solana-devnet": "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1",
}

SUPPORTED_EVM_NETWORKS = frozenset(EVM_NETWORKS) | frozenset(EVM_NETWORKS.values())
SUPPORTED_SVM_NETWORKS = frozenset(SVM_NETWORKS) | frozenset(SVM_NETWORKS.values())

# Networks advertised by /supported
DEFAULT_EVM_NETWORK = "base-sepolia"
DEFAULT_SVM_NETWORK = "solana-devnet"


def classify(network: str) -> NetworkFamily:
    """Classify a network identifier into its family.

    Args:
        network: x402 v1 network name or CAIP-2 identifier.

    Returns:
        The network family, or ``NetworkFamily.UNSUPPORTED``.
    """
    if network in SUPPORTED_EVM_NETWORKS:
        return NetworkFamily.EVM
    if network in SUPPORTED_SVM_NETWORKS:
        return NetworkFamily.SVM
    return NetworkFamily.UNSUPPORTED


def require_family(network: str) -> NetworkFamily:
    """Classify a network, failing fast when it is not supported.

    Raises:
        UnsupportedNetworkError: If the network is in neither allow-list.
    """
    family = classify(network)
    if family is NetworkFamily.UNSUPPORTED:
        raise UnsupportedNetworkError(network)
    return family


def to_caip2(network: str) -> str:
    """Return the CAIP-2 identifier for a supported network."""
    family = require_family(network)
    table = EVM_NETWORKS if family is NetworkFamily.EVM else SVM_NETWORKS
    return table.get(network, network)
