"""x402 verification and settlement.

The facilitator never re-implements payment checks. It parses the request
with the x402 SDK schemas and hands the payment to an ``x402Facilitator``
built for the single network of the request.

Based on: https://github.com/coinbase/x402/blob/main/examples/python/facilitator/basic/main.py
"""

from typing import Any, Protocol, Union

from eth_account import Account
from x402 import x402Facilitator
from x402.mechanisms.evm import FacilitatorWeb3Signer
from x402.mechanisms.evm.exact import register_exact_evm_facilitator
from x402.mechanisms.svm import FacilitatorKeypairSigner
from x402.mechanisms.svm.exact import register_exact_svm_facilitator
from x402.schemas import (
    PaymentPayload,
    PaymentPayloadV1,
    PaymentRequirements,
    PaymentRequirementsV1,
    SettleResponse,
    VerifyResponse,
    parse_payment_payload,
)

from x402_cashback.logging_utils import get_logger
from x402_cashback.models import FacilitatorRequest
from x402_cashback.networks import to_caip2
from x402_cashback.signers import ConnectedClient, EvmSigner, Signer, SvmSigner, VerifierClient

logger = get_logger(__name__)

AnyPaymentPayload = Union[PaymentPayload, PaymentPayloadV1]
AnyPaymentRequirements = Union[PaymentRequirements, PaymentRequirementsV1]


def parse_payment(body: Any) -> tuple[AnyPaymentPayload, AnyPaymentRequirements]:
    """Validate a ``{paymentPayload, paymentRequirements}`` request body.

    The payload version decides which requirements schema applies.

    Raises:
        pydantic.ValidationError: If either part does not match its schema.
    """
    request = FacilitatorRequest.model_validate(body)
    payload = parse_payment_payload(request.paymentPayload)
    if payload.x402_version == 1:
        requirements = PaymentRequirementsV1.model_validate(request.paymentRequirements)
    else:
        requirements = PaymentRequirements.model_validate(request.paymentRequirements)
    return payload, requirements


class PaymentBackend(Protocol):
    """Verification and settlement capability used by the HTTP routes."""

    async def verify(
        self,
        client: VerifierClient,
        payload: AnyPaymentPayload,
        requirements: AnyPaymentRequirements,
    ) -> VerifyResponse: ...

    async def settle(
        self,
        signer: Signer,
        payload: AnyPaymentPayload,
        requirements: AnyPaymentRequirements,
    ) -> SettleResponse: ...


# Async hook functions for observability
async def before_verify_hook(ctx):
    logger.debug(f"Before verify: {ctx.payment_payload}")


async def after_verify_hook(ctx):
    logger.debug(f"After verify: {ctx.result}")


async def verify_failure_hook(ctx):
    logger.error(f"Verify failure: {ctx.error}")


async def before_settle_hook(ctx):
    logger.info(f"Before settle: {ctx.payment_payload}")


async def after_settle_hook(ctx):
    logger.info(f"After settle: {ctx.result}")


async def settle_failure_hook(ctx):
    logger.error(f"Settle failure: {ctx.error}")


class X402PaymentBackend:
    """Verifies and settles payments with the x402 SDK.

    A new ``x402Facilitator`` is assembled for every call, with only the
    exact scheme of the handle's network registered.
    """

    def _build_facilitator(self, handle: Union[VerifierClient, Signer]) -> x402Facilitator:
        facilitator = (
            x402Facilitator()
            .on_before_verify(before_verify_hook)
            .on_after_verify(after_verify_hook)
            .on_verify_failure(verify_failure_hook)
            .on_before_settle(before_settle_hook)
            .on_after_settle(after_settle_hook)
            .on_settle_failure(settle_failure_hook)
        )
        network = to_caip2(handle.network)

        if isinstance(handle, SvmSigner):
            if handle.rpc_url:
                svm_signer = FacilitatorKeypairSigner(handle.keypair, rpc_url=handle.rpc_url)
            else:
                svm_signer = FacilitatorKeypairSigner(handle.keypair)
            register_exact_svm_facilitator(facilitator, svm_signer, networks=network)
            return facilitator

        if isinstance(handle, EvmSigner):
            private_key = handle.private_key
        elif isinstance(handle, ConnectedClient):
            # Verification only reads and simulates, so the key never signs anything.
            private_key = Account.create().key.hex()
        else:
            raise TypeError(f"Unsupported payment handle: {type(handle).__name__}")

        evm_signer = FacilitatorWeb3Signer(private_key=private_key, rpc_url=handle.rpc_url)
        register_exact_evm_facilitator(facilitator, evm_signer, networks=network)
        return facilitator

    async def verify(
        self,
        client: VerifierClient,
        payload: AnyPaymentPayload,
        requirements: AnyPaymentRequirements,
    ) -> VerifyResponse:
        logger.info(f"Verifying payment on {client.network}")
        facilitator = self._build_facilitator(client)
        return await facilitator.verify(payload, requirements)

    async def settle(
        self,
        signer: Signer,
        payload: AnyPaymentPayload,
        requirements: AnyPaymentRequirements,
    ) -> SettleResponse:
        logger.info(f"Settling payment on {signer.network}")
        facilitator = self._build_facilitator(signer)
        return await facilitator.settle(payload, requirements)


def serialize_verification(response: VerifyResponse) -> dict:
    return response.model_dump(by_alias=True, exclude_none=True)


def serialize_settlement(response: SettleResponse) -> dict:
    return response.model_dump(by_alias=True, exclude_none=True)
