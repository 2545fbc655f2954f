import os

import pytest
from solders.keypair import Keypair

# Generate valid dummy keys
dummy_svm_key = str(Keypair())
dummy_evm_key = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"

# Set dummy environment variables for testing
# This must run before x402_cashback.server is imported by any test
os.environ.setdefault("EVM_PRIVATE_KEY", dummy_evm_key)
os.environ.setdefault("SVM_PRIVATE_KEY", dummy_svm_key)
os.environ.setdefault("EVM_CASHBACK_TOKEN", "0x036CbD53842c5426634e7929541eC2318f3dCF7e")
os.environ.setdefault("LOG_FORMAT", "text")

from x402_cashback.config import Config

PAYER = "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"
PAY_TO = "0x2B5AD5c4795c026514f8317c7a215E218DcCD6cF"
USDC_BASE_SEPOLIA = "0x036CbD53842c5426634e7929541eC2318f3dCF7e"


def make_requirements(network: str = "base-sepolia") -> dict:
    return {
        "scheme": "exact",
        "network": network,
        "maxAmountRequired": "10000",
        "resource": "https://merchant.example/premium",
        "description": "Premium content",
        "mimeType": "application/json",
        "payTo": PAY_TO,
        "maxTimeoutSeconds": 60,
        "asset": USDC_BASE_SEPOLIA,
        "extra": {"name": "USDC", "version": "2"},
    }


def make_payload(network: str = "base-sepolia", payer: str | None = PAYER) -> dict:
    inner: dict = {"signature": "0x" + "ab" * 65}
    if payer is not None:
        inner["authorization"] = {
            "from": payer,
            "to": PAY_TO,
            "value": "10000",
            "validAfter": "0",
            "validBefore": "9999999999",
            "nonce": "0x" + "00" * 32,
        }
    else:
        inner["transaction"] = "AQAB"
    return {
        "x402Version": 1,
        "scheme": "exact",
        "network": network,
        "payload": inner,
    }


def make_body(network: str = "base-sepolia", payer: str | None = PAYER) -> dict:
    return {
        "paymentPayload": make_payload(network, payer),
        "paymentRequirements": make_requirements(network),
    }


@pytest.fixture
def config() -> Config:
    """Configuration with both keys and a cashback token."""
    return Config(
        evm_private_key=dummy_evm_key,
        svm_private_key=dummy_svm_key,
        evm_rpc_url="https://sepolia.base.org",
        evm_cashback_token=USDC_BASE_SEPOLIA,
        cashback_percent=2,
    )
