"""Request and response models for the facilitator HTTP API."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FacilitatorRequest(BaseModel):
    """Body of ``POST /verify`` and ``POST /settle``.

    Both parts stay raw dicts here; the x402 SDK schemas validate them.
    """

    paymentPayload: dict  # camelCase from x402 library
    paymentRequirements: dict


class CashbackRecord(BaseModel):
    """Outcome of the post-settlement cashback step."""

    model_config = ConfigDict(populate_by_name=True)

    amount: int = Field(description="Cashback amount in whole token units")
    percent: Union[int, float] = Field(description="Configured cashback percent")
    tx_hash: Optional[str] = Field(default=None, alias="txHash", description="Transfer tx hash")
    error: Optional[str] = Field(default=None, description="Why the transfer failed")

    def to_response(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True)
        if body["error"] is None:
            del body["error"]
        return body


class EndpointDoc(BaseModel):
    """Static description returned by ``GET /verify`` and ``GET /settle``."""

    endpoint: str
    description: str
    body: dict[str, str] = Field(
        default_factory=lambda: {
            "paymentPayload": "PaymentPayload",
            "paymentRequirements": "PaymentRequirements",
        }
    )


class SupportedKind(BaseModel):
    """One ``(scheme, network)`` pair the facilitator can operate."""

    x402Version: int = 1
    scheme: str = "exact"
    network: str
    extra: Optional[dict[str, Any]] = None
