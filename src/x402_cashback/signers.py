"""Client and signer construction per network family.

Handles are built fresh for every request and bound to exactly one
network. Nothing here talks to a chain; the x402 facilitator signers are
created later from these handles.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from eth_account import Account
from solders.keypair import Keypair

from x402_cashback.config import Config
from x402_cashback.errors import ConfigurationError
from x402_cashback.logging_utils import get_logger
from x402_cashback.networks import NetworkFamily, require_family

logger = get_logger(__name__)


@dataclass(frozen=True)
class ConnectedClient:
    """Read/simulate-only EVM client. Holds no key."""

    network: str
    rpc_url: str


@dataclass(frozen=True)
class EvmSigner:
    """EVM signer bound to one network and one private key."""

    network: str
    rpc_url: str
    private_key: str = field(repr=False)
    address: str = ""


@dataclass(frozen=True)
class SvmSigner:
    """Solana signer bound to one network and one keypair."""

    network: str
    keypair: Keypair = field(repr=False)
    rpc_url: Optional[str] = None

    @property
    def address(self) -> str:
        return str(self.keypair.pubkey())


Signer = Union[EvmSigner, SvmSigner]
VerifierClient = Union[ConnectedClient, SvmSigner]


class SignerFactory:
    """Builds verification clients and settlement signers from configuration."""

    def __init__(self, config: Config):
        self.config = config

    def make_verifier_client(self, network: str) -> VerifierClient:
        """Build the client used to verify a payment on ``network``.

        EVM verification only reads chain state, so it gets a keyless
        ``ConnectedClient``. SVM verification signs and simulates the
        transaction, so it needs an ``SvmSigner``.

        Raises:
            UnsupportedNetworkError: If the network is not supported.
            ConfigurationError: If SVM verification is requested without a key.
        """
        family = require_family(network)
        if family is NetworkFamily.EVM:
            logger.debug(f"Connected client for {network}")
            return ConnectedClient(network=network, rpc_url=self.config.evm_rpc_url)
        return self._svm_signer(network)

    def make_settlement_signer(self, network: str) -> Signer:
        """Build the signer that settles a payment on ``network``.

        Raises:
            UnsupportedNetworkError: If the network is not supported.
            ConfigurationError: If the key for the network family is missing.
        """
        family = require_family(network)
        if family is NetworkFamily.EVM:
            return self._evm_signer(network)
        return self._svm_signer(network)

    def svm_fee_payer(self, network: str) -> str:
        """Address that pays Solana fees when settling on ``network``."""
        return self._svm_signer(network).address

    def _evm_signer(self, network: str) -> EvmSigner:
        key = self.config.evm_private_key.strip()
        if not key:
            raise ConfigurationError(f"EVM_PRIVATE_KEY is required to sign on {network}")
        account = Account.from_key(key)
        logger.debug(f"EVM signer {account.address} for {network}")
        return EvmSigner(
            network=network,
            rpc_url=self.config.evm_rpc_url,
            private_key=key,
            address=account.address,
        )

    def _svm_signer(self, network: str) -> SvmSigner:
        key = self.config.svm_private_key.strip()
        if not key:
            raise ConfigurationError(f"SVM_PRIVATE_KEY is required to sign on {network}")
        keypair = Keypair.from_base58_string(key)
        logger.debug(f"SVM signer {keypair.pubkey()} for {network}")
        return SvmSigner(
            network=network,
            keypair=keypair,
            rpc_url=self.config.svm_rpc_url or None,
        )
