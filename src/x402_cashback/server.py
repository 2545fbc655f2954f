"""x402 Cashback Facilitator.

FastAPI application exposing the x402 facilitator endpoints:
- payment verification
- payment settlement followed by a cashback transfer to the payer
- supported payment kinds
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from x402_cashback.cashback import CashbackDisburser
from x402_cashback.config import Config, validate_config
from x402_cashback.errors import SettlementError
from x402_cashback.logging_utils import (
    CORRELATION_HEADER,
    CorrelationIdContext,
    get_logger,
    setup_logging,
)
from x402_cashback.models import EndpointDoc, SupportedKind
from x402_cashback.networks import DEFAULT_EVM_NETWORK, DEFAULT_SVM_NETWORK, require_family
from x402_cashback.payments import (
    PaymentBackend,
    X402PaymentBackend,
    parse_payment,
    serialize_settlement,
    serialize_verification,
)
from x402_cashback.signers import SignerFactory

logger = get_logger(__name__)


def create_app(
    config: Optional[Config] = None,
    backend: Optional[PaymentBackend] = None,
    signers: Optional[SignerFactory] = None,
    disburser: Optional[CashbackDisburser] = None,
) -> FastAPI:
    """Build the facilitator application.

    Args:
        config: Facilitator configuration. Loaded from the environment if omitted.
        backend: x402 verify/settle capability.
        signers: Client and signer factory.
        disburser: Post-settlement cashback step.

    Returns:
        The configured FastAPI application.

    Raises:
        ConfigurationError: If neither private key is configured.
    """
    config = config or Config()
    validate_config(config)

    app = FastAPI(
        title="x402 Cashback Facilitator",
        description="Verifies and settles x402 payments, then pays cashback to the payer",
    )
    app.state.config = config
    app.state.backend = backend or X402PaymentBackend()
    app.state.signers = signers or SignerFactory(config)
    app.state.disburser = disburser or CashbackDisburser(config)

    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        with CorrelationIdContext(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "ok", "service": "facilitator"}

    @app.get("/verify")
    async def verify_doc() -> dict:
        return EndpointDoc(endpoint="/verify", description="POST to verify x402 payments").model_dump()

    @app.post("/verify")
    async def verify_payment(request: Request):
        """Verify an x402 payment.

        EVM payments are checked with a read-only client, SVM payments with a
        signer because Solana verification simulates the signed transaction.

        Returns:
            Verification verdict with isValid, invalidReason and payer.
        """
        state = request.app.state
        try:
            payload, requirements = parse_payment(await request.json())
            network = requirements.network
            require_family(network)

            client = state.signers.make_verifier_client(network)
            response = await state.backend.verify(client, payload, requirements)
            logger.info(f"Verification on {network}: valid={response.is_valid}")
            return serialize_verification(response)
        except Exception as e:
            logger.error(f"Verify error: {e}", exc_info=True)
            return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.get("/settle")
    async def settle_doc() -> dict:
        return EndpointDoc(endpoint="/settle", description="POST to settle x402 payments").model_dump()

    @app.post("/settle")
    async def settle_payment(request: Request):
        """Settle an x402 payment on-chain, then send cashback to the payer.

        Cashback only runs after a successful settlement. A cashback failure
        is reported in the cashback block and does not fail the request.

        Returns:
            Settlement result and cashback record.
        """
        state = request.app.state
        try:
            payload, requirements = parse_payment(await request.json())
            network = requirements.network
            require_family(network)

            signer = state.signers.make_settlement_signer(network)
            settlement = await state.backend.settle(signer, payload, requirements)
            if not settlement.success:
                raise SettlementError(settlement.error_reason, network)
            logger.info(f"Settlement complete: {settlement.transaction} on {network}")
        except Exception as e:
            logger.error(f"Error in /settle: {e}", exc_info=True)
            return JSONResponse(status_code=400, content={"error": str(e)})

        cashback = await state.disburser.disburse(network, payload)

        return {
            "success": True,
            "settlement": serialize_settlement(settlement),
            "cashback": cashback.to_response(),
        }

    @app.get("/supported")
    async def get_supported(request: Request) -> dict:
        """Get the payment kinds this facilitator can currently operate.

        Returns:
            Supported kinds, gated on which private keys are configured.
        """
        state = request.app.state
        kinds: list[SupportedKind] = []

        if state.config.has_evm_key:
            kinds.append(SupportedKind(network=DEFAULT_EVM_NETWORK))

        if state.config.has_svm_key:
            fee_payer = state.signers.svm_fee_payer(DEFAULT_SVM_NETWORK)
            kinds.append(SupportedKind(network=DEFAULT_SVM_NETWORK, extra={"feePayer": fee_payer}))

        return {"kinds": [kind.model_dump(exclude_none=True) for kind in kinds]}

    return app


def _load_app() -> FastAPI:
    config = Config()
    setup_logging(config.log_level, config.log_format)
    return create_app(config)


# ASGI entry point for external hosts (uvicorn, serverless adapters)
app = _load_app()
