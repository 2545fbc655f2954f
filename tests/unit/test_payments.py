"""Unit tests for x402 request parsing and facilitator assembly."""

from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError
from x402 import x402Facilitator
from x402.schemas import PaymentRequirementsV1

from tests.conftest import PAYER, make_body
from x402_cashback.payments import X402PaymentBackend, parse_payment
from x402_cashback.signers import SignerFactory


@pytest.mark.unit
class TestParsePayment:
    def test_v1_body(self):
        payload, requirements = parse_payment(make_body())
        assert payload.x402_version == 1
        assert payload.payload["authorization"]["from"] == PAYER
        assert isinstance(requirements, PaymentRequirementsV1)
        assert requirements.network == "base-sepolia"

    def test_missing_requirements(self):
        body = make_body()
        del body["paymentRequirements"]
        with pytest.raises(ValidationError):
            parse_payment(body)

    def test_non_object_body(self):
        with pytest.raises(ValidationError):
            parse_payment(["not", "a", "body"])


@pytest.mark.unit
class TestFacilitatorAssembly:
    @patch("x402_cashback.payments.register_exact_evm_facilitator")
    @patch("x402_cashback.payments.FacilitatorWeb3Signer")
    def test_connected_client_uses_throwaway_key(self, web3_signer, register, config):
        client = SignerFactory(config).make_verifier_client("base-sepolia")
        X402PaymentBackend()._build_facilitator(client)

        kwargs = web3_signer.call_args.kwargs
        assert kwargs["private_key"] != config.evm_private_key
        assert kwargs["rpc_url"] == config.evm_rpc_url
        assert register.call_args.kwargs["networks"] == "eip155:84532"

    @patch("x402_cashback.payments.register_exact_evm_facilitator")
    @patch("x402_cashback.payments.FacilitatorWeb3Signer")
    def test_evm_signer_uses_merchant_key(self, web3_signer, register, config):
        signer = SignerFactory(config).make_settlement_signer("base-sepolia")
        X402PaymentBackend()._build_facilitator(signer)

        assert web3_signer.call_args.kwargs["private_key"] == signer.private_key
        assert register.call_args.kwargs["networks"] == "eip155:84532"

    @patch("x402_cashback.payments.register_exact_svm_facilitator")
    @patch("x402_cashback.payments.FacilitatorKeypairSigner")
    def test_svm_signer(self, keypair_signer, register, config):
        signer = SignerFactory(config).make_settlement_signer("solana-devnet")
        X402PaymentBackend()._build_facilitator(signer)

        keypair_signer.assert_called_once_with(signer.keypair)
        assert register.call_args.kwargs["networks"] == "solana:EtWTRABZaYq6iMfeYKouRu166VU2xqa1"

    def test_unknown_handle(self):
        with pytest.raises(TypeError):
            X402PaymentBackend()._build_facilitator(MagicMock(network="base-sepolia"))


@pytest.mark.unit
class TestRealRegistration:
    """Facilitator assembly against the installed x402 SDK, nothing patched."""

    def test_evm_verifier_client(self, config):
        client = SignerFactory(config).make_verifier_client("base-sepolia")
        assert isinstance(X402PaymentBackend()._build_facilitator(client), x402Facilitator)

    def test_evm_settlement_signer(self, config):
        signer = SignerFactory(config).make_settlement_signer("base-sepolia")
        assert isinstance(X402PaymentBackend()._build_facilitator(signer), x402Facilitator)
