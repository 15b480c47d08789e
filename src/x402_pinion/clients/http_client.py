"""
HTTP 402 Payment Flow Client

An ``httpx.AsyncClient`` subclass that runs the x402 handshake: it sends a
request, and when the server answers 402 it parses the challenge, signs an
EIP-3009 authorization, and repeats the request with the ``X-PAYMENT``
header. The response to the repeated request is final; there is no loop.
"""

import time
from typing import Any, Dict, Optional, Tuple

import httpx

from .requirements import parse_payment_requirements
from ..adapters.evm.signatures import EvmSigner
from ..engine.exceptions import (
    BudgetExceededError,
    ConfigError,
    PinionError,
    ProtocolError,
    TransportError,
)
from ..engine.ledger import SpendLedger, format_atomic, to_atomic
from ..engine.states import PaymentFlow, PaymentState
from ..schemas.https import ClientRequestHeader, PaymentRequirement, SignedPayment
from ..schemas.results import SkillResponse
from ..utils import logger


NON_JSON_PLACEHOLDER: Dict[str, str] = {"error": "non-json response"}

# Only these methods carry a JSON body.
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class Http402Client(httpx.AsyncClient):
    """
    Extended httpx.AsyncClient with x402 payment handling.

    ``pay()`` drives one request through the payment state machine:

    1. Send the request as given
    2. Anything but 402 (or any response in API-key mode) is returned as is
    3. On 402: parse the requirement, enforce the per-call ceiling and the
       session ledger, sign
    4. Repeat the request with ``X-PAYMENT`` and return that response

    Fully compatible with httpx.AsyncClient; plain ``get``/``post`` calls are
    left untouched.

    Usage:
        ```python
        async with Http402Client(signer=EvmSigner(key), ledger=SpendLedger()) as client:
            response = await client.pay("GET", "https://api.example.com/data", max_amount="10000")
            print(response.status, response.paid_amount)
        ```
    """

    def __init__(
        self,
        signer: Optional[EvmSigner] = None,
        ledger: Optional[SpendLedger] = None,
        **kwargs
    ):
        """
        Args:
            signer: Key used to sign payments. Required only when a 402 arrives.
            ledger: Session ledger consulted before signing and credited after
                paying. ``None`` disables budgeting.
            **kwargs: All standard httpx.AsyncClient arguments (timeout, transport, ...)
        """
        super().__init__(**kwargs)
        self._signer = signer
        self._ledger = ledger

    @property
    def signer(self) -> Optional[EvmSigner]:
        return self._signer

    @property
    def ledger(self) -> Optional[SpendLedger]:
        return self._ledger

    # =========================================================================
    # Payment flow
    # =========================================================================

    async def pay(
        self,
        method: str,
        url: str,
        *,
        body: Any = None,
        max_amount: Optional[str] = None,
        api_key: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> SkillResponse:
        """
        Execute a request, paying through x402 when challenged.

        Args:
            method: HTTP method; the body is only sent for POST/PUT/PATCH.
            url: Absolute URL.
            body: JSON-serializable request body.
            max_amount: Per-call ceiling in atomic units. A challenge asking
                for more fails before anything is signed.
            api_key: Pre-purchased key. When set the request carries
                ``X-API-KEY`` and no 402 handling happens.
            operation: Name used in logs and error context.

        Returns:
            ``SkillResponse`` of the final call. ``paid_amount`` is the
            challenge's ``maxAmountRequired`` when a payment was sent, else ``"0"``.

        Raises:
            ProtocolError: Malformed 402 body.
            BudgetExceededError: Ceiling or ledger would be exceeded.
            PaymentSignatureError: Signing failed.
            TransportError: Network failure on either call.
            ConfigError: A 402 arrived but no signer is configured.
            ValueError: ``max_amount`` is not an atomic integer; raised before any request.
        """
        ceiling = to_atomic(max_amount) if max_amount is not None else None
        method = method.upper()
        label = operation or f"{method} {url}"
        flow = PaymentFlow(label)
        started = time.monotonic()
        json_body = body if body is not None and method in BODY_METHODS else None
        headers = ClientRequestHeader(x_api_key=api_key).to_wire()

        try:
            flow.advance(PaymentState.REQUESTING)
            response = await self._send(method, url, headers=headers, json=json_body, operation=operation)

            if api_key or response.status_code != 402:
                flow.advance(PaymentState.DIRECT_SUCCESS)
                flow.advance(PaymentState.DONE)
                return self._build_response(response, "0", started, flow)

            flow.advance(PaymentState.CHALLENGED)
            requirement, x402_version = parse_payment_requirements(
                self._read_challenge(response, operation, url)
            )
            self._enforce_ceiling(requirement, ceiling, operation, url)
            self._enforce_ledger(requirement, operation, url)

            flow.advance(PaymentState.SIGNING)
            envelope = self._sign(requirement, x402_version, operation)

            flow.advance(PaymentState.PAYING)
            logger.info(
                f"[{label}] paying {requirement.max_amount_required} atomic "
                f"({format_atomic(requirement.amount_atomic)} USDC) to {requirement.pay_to} on {requirement.network}"
            )
            paid_headers = ClientRequestHeader(x_payment=envelope.to_header()).to_wire()
            paid = await self._send(method, url, headers=paid_headers, json=json_body, operation=operation)

            flow.advance(PaymentState.PAID_SUCCESS)
            if self._ledger is not None and requirement.amount_atomic:
                self._ledger.record_spend(requirement.max_amount_required)
            if paid.status_code == 402:
                logger.warning(f"[{label}] server rejected the signed payment (402 on paid retry)")
            flow.advance(PaymentState.DONE)
            return self._build_response(paid, requirement.max_amount_required, started, flow)
        except PinionError:
            flow.fail()
            raise

    async def fetch(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> Tuple[int, Any]:
        """
        Plain request outside the payment flow.

        Returns:
            ``(status_code, decoded JSON or placeholder)``.
        """
        response = await self._send(
            method.upper(),
            url,
            headers={"Accept": "application/json"},
            params=params,
            operation=operation,
        )
        return response.status_code, self._read_json(response, operation)

    # =========================================================================
    # Steps
    # =========================================================================

    async def _send(
        self,
        method: str,
        url: str,
        *,
        headers: Dict[str, str],
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> httpx.Response:
        try:
            return await self.request(method, url, headers=headers, json=json, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTP request failed: {exc}", operation=operation, target=url) from exc

    def _read_challenge(self, response: httpx.Response, operation: Optional[str], url: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError("402 response body is not JSON", operation=operation, target=url) from exc

    def _enforce_ceiling(
        self,
        requirement: PaymentRequirement,
        ceiling: Optional[int],
        operation: Optional[str],
        url: str,
    ) -> None:
        if ceiling is None:
            return
        if requirement.amount_atomic > ceiling:
            raise BudgetExceededError(
                f"x402 payment exceeds max: required {requirement.max_amount_required} > max {ceiling}",
                required=requirement.amount_atomic,
                allowed=ceiling,
                operation=operation,
                target=url,
            )

    def _enforce_ledger(self, requirement: PaymentRequirement, operation: Optional[str], url: str) -> None:
        if self._ledger is None or self._ledger.can_spend(requirement.max_amount_required):
            return
        status = self._ledger.get_status()
        raise BudgetExceededError(
            f"Spend limit reached: ${status.spent} of ${status.max_budget} spent, "
            f"payment of {requirement.max_amount_required} atomic refused",
            required=requirement.amount_atomic,
            allowed=self._ledger.remaining_atomic,
            operation=operation,
            target=url,
        )

    def _sign(self, requirement: PaymentRequirement, x402_version: int, operation: Optional[str]) -> SignedPayment:
        if self._signer is None:
            raise ConfigError("Payment required but no signing key is configured", operation=operation)
        return self._signer.sign(requirement, x402_version)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _read_json(self, response: httpx.Response, operation: Optional[str] = None) -> Any:
        """Decode a JSON body, degrading to a placeholder payload when it is not JSON."""
        try:
            return response.json()
        except ValueError:
            logger.warning(
                f"[{operation or response.request.url}] non-JSON response body (status {response.status_code})"
            )
            return dict(NON_JSON_PLACEHOLDER)

    def _build_response(
        self,
        response: httpx.Response,
        paid_amount: str,
        started: float,
        flow: PaymentFlow,
    ) -> SkillResponse:
        return SkillResponse(
            status=response.status_code,
            data=self._read_json(response, flow.label),
            paid_amount=paid_amount,
            response_time_ms=int((time.monotonic() - started) * 1000),
            trace=list(flow.history),
        )
