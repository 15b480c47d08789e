"""
HTTP Request/Response Schema Models for the x402 Payment Protocol

This module defines the Pydantic models exchanged between the client and an
x402 server. The flow is:

1. Client calls a resource without payment
2. Server answers 402 with a ``PaymentRequired`` body listing accepted
   ``PaymentRequirement`` entries
3. Client signs a ``TransferAuthorization`` and wraps it in a
   ``SignedPayment`` envelope
4. Client repeats the call with the envelope, base64-encoded, in the
   ``X-PAYMENT`` header

Field names on the wire are camelCase and must match exactly; server-side
verifiers decode the envelope by these names.
"""

import base64
import json
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from .bases import WireModel


# ============================================================================
# Request Headers
# ============================================================================

class ClientRequestHeader(WireModel):
    """HTTP request headers sent by the client.

    Attributes:
        content_type: MIME type of request body (default: application/json).
        accept: Accepted response type (default: application/json).
        x_payment: Base64 ``SignedPayment`` envelope, set on paid retries.
        x_api_key: Pre-purchased access key, set in bypass mode.
    """
    content_type: str = Field(default="application/json", alias="Content-Type")
    accept: str = Field(default="application/json", alias="Accept")
    x_payment: Optional[str] = Field(default=None, alias="X-PAYMENT")
    x_api_key: Optional[str] = Field(default=None, alias="X-API-KEY")


# ============================================================================
# Step 1: Server's 402 Payment Required Response
# ============================================================================

class PaymentRequirement(WireModel):
    """One payment option offered by a server in its 402 body.

    Unknown keys (``resource``, ``description``, ``mimeType`` ...) are kept so
    that nothing the server sent is lost. ``amount``, the v2 spelling, is
    accepted in place of ``maxAmountRequired`` and is always written back as
    ``maxAmountRequired``.

    Attributes:
        scheme: Payment scheme, e.g. ``"exact"``.
        network: Network identifier, e.g. ``"base"`` or ``"eip155:8453"``.
        asset: Token contract address; also the EIP-712 verifying contract.
        pay_to: Address receiving the payment.
        max_amount_required: Atomic amount as a decimal-digit string.
        max_timeout_seconds: Authorization lifetime in seconds.
        extra: Token EIP-712 domain hints (``name``, ``version``).
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    scheme: str = Field(..., description="Payment scheme, e.g. exact")
    network: str = Field(..., description="Network identifier")
    asset: Optional[str] = Field(default=None, description="Token contract address")
    pay_to: str = Field(..., alias="payTo", description="Recipient address")
    max_amount_required: str = Field(
        ...,
        validation_alias=AliasChoices("maxAmountRequired", "max_amount_required", "amount"),
        serialization_alias="maxAmountRequired",
        description="Atomic amount as a decimal-digit string",
    )
    max_timeout_seconds: Optional[int] = Field(
        default=None,
        alias="maxTimeoutSeconds",
        ge=0,
        description="Authorization lifetime in seconds",
    )
    extra: Optional[Dict[str, Any]] = Field(default=None, description="EIP-712 domain hints")

    @field_validator("max_amount_required", mode="before")
    @classmethod
    def _atomic_amount(cls, value: Any) -> str:
        if isinstance(value, bool):
            raise ValueError("maxAmountRequired must be an atomic integer")
        if isinstance(value, int):
            value = str(value)
        if not isinstance(value, str) or not (value.isascii() and value.isdigit()):
            raise ValueError(f"maxAmountRequired must be a non-negative integer string, got {value!r}")
        return value

    @property
    def amount_atomic(self) -> int:
        return int(self.max_amount_required)

    @property
    def domain_name(self) -> Optional[str]:
        return (self.extra or {}).get("name") or None

    @property
    def domain_version(self) -> Optional[str]:
        return (self.extra or {}).get("version") or None


class PaymentRequired(WireModel):
    """Body of a 402 Payment Required response.

    ``accepts`` stays loosely typed here; only the selected entry is
    validated, by ``clients.requirements.parse_payment_requirements``.
    """
    accepts: Optional[List[Any]] = Field(default=None, description="Offered payment requirements")
    x402_version: Optional[Any] = Field(default=None, alias="x402Version")
    error: Optional[Any] = Field(default=None, description="Server-side reason for the 402")


# ============================================================================
# Step 2: Client's signed payment
# ============================================================================

class TransferAuthorization(WireModel):
    """EIP-3009 ``transferWithAuthorization`` message, all fields as strings.

    ``from`` is a Python keyword; the attribute is ``from_`` and maps to
    ``from`` on the wire.
    """
    from_: str = Field(..., alias="from")
    to: str
    value: str
    valid_after: str = Field(..., alias="validAfter")
    valid_before: str = Field(..., alias="validBefore")
    nonce: str

    def to_message(self) -> Dict[str, Any]:
        """Return the message dict with integer fields, ready for EIP-712 encoding."""
        return {
            "from": self.from_,
            "to": self.to,
            "value": int(self.value),
            "validAfter": int(self.valid_after),
            "validBefore": int(self.valid_before),
            "nonce": self.nonce,
        }


class ExactPaymentPayload(WireModel):
    signature: str
    authorization: TransferAuthorization


class SignedPayment(WireModel):
    """The envelope carried, base64-encoded, in the ``X-PAYMENT`` header."""
    x402_version: int = Field(..., alias="x402Version")
    scheme: str
    network: str
    payload: ExactPaymentPayload

    def to_header(self) -> str:
        """Base64 of the UTF-8 JSON envelope."""
        return base64.b64encode(self.to_json().encode("utf-8")).decode("ascii")

    @classmethod
    def from_header(cls, header: str) -> "SignedPayment":
        """Decode an ``X-PAYMENT`` header value back into an envelope."""
        return cls.model_validate(json.loads(base64.b64decode(header).decode("utf-8")))
