"""Cashback disbursement after a settled payment.

The payer of an EVM "exact" payment receives a fixed amount of the
configured ERC-20 token from the merchant wallet. Solana cashback is not
implemented yet and is skipped.
"""

from decimal import Decimal
from typing import Any, Optional

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from x402_cashback.config import Config
from x402_cashback.errors import CashbackError, ConfigurationError
from x402_cashback.logging_utils import get_logger
from x402_cashback.models import CashbackRecord
from x402_cashback.networks import NetworkFamily, classify

logger = get_logger(__name__)

# Fixed payout per settlement, in whole token units. CASHBACK_PERCENT is
# reported alongside it but does not scale it.
CASHBACK_AMOUNT = 1

DEFAULT_TOKEN_DECIMALS = 18

# Minimal ERC-20 ABI
ERC20_ABI = [
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
]


def extract_payer(payload: Any) -> Optional[str]:
    """Return ``authorization.from`` of an EVM exact payload, if there is one."""
    inner = getattr(payload, "payload", None)
    if not isinstance(inner, dict):
        return None
    authorization = inner.get("authorization")
    if not isinstance(authorization, dict):
        return None
    return authorization.get("from") or None


def scale_amount(amount: int, decimals: int) -> int:
    """Convert whole token units into the token's smallest unit."""
    return int(Decimal(amount) * (Decimal(10) ** decimals))


class EvmTokenTransfer:
    """Sends ERC-20 transfers from the merchant wallet."""

    def __init__(self, rpc_url: str, private_key: str):
        self.rpc_url = rpc_url
        self._private_key = private_key

    def _connect(self) -> AsyncWeb3:
        return AsyncWeb3(AsyncHTTPProvider(self.rpc_url))

    @staticmethod
    async def read_decimals(token) -> int:
        try:
            return int(await token.functions.decimals().call())
        except Exception as e:
            logger.warning(
                f"Could not read token decimals, assuming {DEFAULT_TOKEN_DECIMALS}: {e}"
            )
            return DEFAULT_TOKEN_DECIMALS

    async def send(self, to: str, token_address: str, amount: int) -> str:
        """Transfer ``amount`` whole tokens to ``to`` and wait for confirmation.

        Args:
            to: Recipient EVM address.
            token_address: ERC-20 contract address.
            amount: Amount in whole token units.

        Returns:
            The 0x-prefixed transaction hash.

        Raises:
            CashbackError: If the transfer is reverted.
        """
        logger.info(f"Send EVM cashback: {amount} of {token_address} to {to}")

        w3 = self._connect()
        account = Account.from_key(self._private_key)
        token = w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)

        decimals = await self.read_decimals(token)
        value = scale_amount(amount, decimals)
        logger.info(f"Cashback amount in base units: {value} ({decimals} decimals)")

        nonce = await w3.eth.get_transaction_count(account.address)
        tx = await token.functions.transfer(Web3.to_checksum_address(to), value).build_transaction(
            {"from": account.address, "nonce": nonce}
        )

        signed = account.sign_transaction(tx)
        tx_hash = Web3.to_hex(await w3.eth.send_raw_transaction(signed.raw_transaction))
        logger.info(f"Broadcasting cashback tx: {tx_hash}")

        receipt = await w3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise CashbackError(f"Cashback transfer reverted: {tx_hash}")

        logger.info(f"Sent {amount} tokens to {to} (tx: {tx_hash})")
        return tx_hash


class CashbackDisburser:
    """Computes and pays the cashback for a settled payment."""

    def __init__(self, config: Config, transfer: Optional[EvmTokenTransfer] = None):
        self.config = config
        self._transfer = transfer

    @property
    def transfer(self) -> EvmTokenTransfer:
        if self._transfer is None:
            self._transfer = EvmTokenTransfer(self.config.evm_rpc_url, self.config.evm_private_key)
        return self._transfer

    async def disburse(self, network: str, payload: Any) -> CashbackRecord:
        """Pay cashback for a payment that has already settled.

        Failures are reported on the returned record, never raised: the
        settlement they follow has already succeeded.

        Args:
            network: Network of the settled payment.
            payload: The parsed x402 payment payload.

        Returns:
            CashbackRecord with the transfer hash, or ``None`` when skipped or failed.
        """
        record = CashbackRecord(amount=CASHBACK_AMOUNT, percent=self.config.cashback_percent)
        payer = extract_payer(payload)

        logger.info(f"Cashback eligible: {record.amount} ({record.percent}%), payer: {payer}")

        if not payer or record.amount <= 0:
            return record

        family = classify(network)
        if family is NetworkFamily.SVM:
            logger.info("Solana cashback not implemented yet, skipping")
            return record
        if family is not NetworkFamily.EVM:
            return record

        try:
            token_address = self.config.evm_cashback_token.strip()
            if not token_address:
                raise ConfigurationError("EVM_CASHBACK_TOKEN is not configured")
            record.tx_hash = await self.transfer.send(payer, token_address, record.amount)
        except Exception as e:
            logger.error(f"Cashback to {payer} failed after settlement: {e}", exc_info=True)
            record.error = str(e)

        return record
