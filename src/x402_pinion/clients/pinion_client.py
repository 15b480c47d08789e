"""
Pinion skill client.

Binds each Pinion skill (balance, price, trade, ...) to its HTTP method, path
and body shape, and runs it through ``Http402Client.pay``. Every skill costs
$0.01 USDC per call except ``unlimited``, which buys an API key that turns
off per-call payments for the rest of the session.
"""

from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

from pydantic import BaseModel, ValidationError
from web3 import Web3

from .http_client import Http402Client
from ..adapters.evm.constants import (
    DEFAULT_NETWORK,
    DEFAULT_PAY_SERVICE_MAX_ATOMIC,
    PINION_API_URL,
    SKILL_PRICE_ATOMIC,
    UNLIMITED_PRICE_ATOMIC,
)
from ..adapters.evm.signatures import EvmSigner
from ..engine.exceptions import BudgetExceededError
from ..engine.ledger import SpendLedger
from ..schemas.results import (
    BalanceResult,
    BroadcastResult,
    ChatResult,
    FundResult,
    PayServiceResult,
    PriceResult,
    SendResult,
    SkillResponse,
    TradeResult,
    TxResult,
    UnlimitedResult,
    UnlimitedVerifyResult,
    WalletResult,
)
from ..utils import logger, mask_secret


SEND_TOKENS = ("ETH", "USDC")


def _require_address(address: str, field: str = "address") -> str:
    if not isinstance(address, str) or not Web3.is_address(address):
        raise ValueError(f"Invalid Ethereum {field}: {address!r}")
    return address


class PinionClient:
    """
    x402 client for the Pinion skill API.

    Usage:
        ```python
        async with PinionClient(private_key, ledger=SpendLedger("1.00")) as client:
            response = await client.balance("0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045")
            print(response.result.balances.usdc, response.paid_amount)
        ```
    """

    def __init__(
        self,
        private_key: str,
        api_url: Optional[str] = None,
        network: Optional[str] = None,
        api_key: Optional[str] = None,
        ledger: Optional[SpendLedger] = None,
        **httpx_kwargs
    ):
        """
        Args:
            private_key: Wallet key used to sign payments.
            api_url: Skill server base URL; trailing slash is dropped.
            network: Network identifier reported by the session.
            api_key: Pre-purchased key; enables bypass mode.
            ledger: Session spend ledger. A fresh unlimited one when omitted.
            **httpx_kwargs: Passed to the underlying ``Http402Client``.

        Raises:
            ConfigError: If ``private_key`` is invalid.
        """
        self._signer = EvmSigner(private_key)
        self.api_url = (api_url or PINION_API_URL).rstrip("/")
        self.network = network or DEFAULT_NETWORK
        self._api_key = api_key or None
        self.ledger = ledger if ledger is not None else SpendLedger()
        self._http = Http402Client(signer=self._signer, ledger=self.ledger, **httpx_kwargs)

    @classmethod
    def from_config(cls, config, ledger: Optional[SpendLedger] = None, **httpx_kwargs) -> "PinionClient":
        """Build a client from a resolved ``PinionConfig``."""
        return cls(
            config.private_key,
            api_url=config.api_url,
            network=config.network,
            api_key=config.api_key,
            ledger=ledger,
            **httpx_kwargs,
        )

    # =========================================================================
    # Session
    # =========================================================================

    @property
    def address(self) -> str:
        return self._signer.address

    @property
    def signer(self) -> EvmSigner:
        return self._signer

    @property
    def http(self) -> Http402Client:
        return self._http

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def set_api_key(self, key: Optional[str]) -> None:
        """Switch bypass mode on (or off with ``None``)."""
        self._api_key = key or None
        if key:
            logger.info(f"API key applied ({mask_secret(key)}); x402 payments bypassed")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "PinionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # =========================================================================
    # Core request
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        operation: Optional[str] = None,
        expected_cost: Optional[str] = None,
        max_amount: Optional[str] = None,
    ) -> SkillResponse:
        """
        Call a skill path on the API, paying through x402 when challenged.

        Args:
            method: HTTP method.
            path: Path below ``api_url``, starting with ``/``.
            body: JSON body for POST requests.
            operation: Name used in logs and error context.
            expected_cost: Known price in atomic units, checked against the
                ledger before the first call.
            max_amount: Per-call ceiling in atomic units.

        Raises:
            BudgetExceededError: ``expected_cost`` does not fit the budget.
        """
        url = f"{self.api_url}{path}"
        if not self.has_api_key and expected_cost is not None and not self.ledger.can_spend(expected_cost):
            status = self.ledger.get_status()
            raise BudgetExceededError(
                f"Spend limit reached: ${status.spent} of ${status.max_budget} budget "
                f"({status.call_count} calls)",
                required=int(expected_cost),
                allowed=self.ledger.remaining_atomic,
                operation=operation,
                target=url,
            )
        return await self._http.pay(
            method,
            url,
            body=body,
            max_amount=max_amount,
            api_key=self._api_key,
            operation=operation,
        )

    async def _skill(
        self,
        operation: str,
        method: str,
        path: str,
        result_model: Type[BaseModel],
        body: Any = None,
        expected_cost: str = SKILL_PRICE_ATOMIC,
    ) -> SkillResponse:
        logger.info(f"[{operation}] {method} {path}")
        response = await self.request(method, path, body, operation=operation, expected_cost=expected_cost)
        return self._typed(response, result_model, operation)

    @staticmethod
    def _typed(response: SkillResponse, result_model: Type[BaseModel], operation: str) -> SkillResponse:
        """Attach a typed view of ``data`` for 2xx responses; leave ``result`` empty otherwise."""
        if not response.ok or not isinstance(response.data, dict):
            return response
        try:
            result = result_model.model_validate(response.data)
        except ValidationError as exc:
            logger.warning(f"[{operation}] unexpected payload shape: {exc.error_count()} validation errors")
            return response
        return response.model_copy(update={"result": result})

    # =========================================================================
    # Skills
    # =========================================================================

    async def balance(self, address: str) -> SkillResponse:
        """ETH and USDC balances of ``address``."""
        _require_address(address)
        return await self._skill("balance", "GET", f"/balance/{address}", BalanceResult)

    async def tx(self, tx_hash: str) -> SkillResponse:
        """Details of a transaction by hash."""
        return await self._skill("tx", "GET", f"/tx/{quote(tx_hash, safe='')}", TxResult)

    async def price(self, token: str) -> SkillResponse:
        """USD price of a token symbol."""
        return await self._skill("price", "GET", f"/price/{quote(token.upper(), safe='')}", PriceResult)

    async def wallet(self) -> SkillResponse:
        """Have the server generate a fresh keypair."""
        return await self._skill("wallet", "GET", "/wallet/generate", WalletResult)

    async def chat(self, message: str, history: Optional[List[Dict[str, str]]] = None) -> SkillResponse:
        messages = list(history or []) + [{"role": "user", "content": message}]
        return await self._skill("chat", "POST", "/chat", ChatResult, body={"messages": messages})

    async def send(self, to: str, amount: str, token: str) -> SkillResponse:
        """Build (not sign) an ETH or USDC transfer."""
        _require_address(to, "recipient")
        token = token.upper()
        if token not in SEND_TOKENS:
            raise ValueError(f"token must be one of {', '.join(SEND_TOKENS)}, got {token!r}")
        body = {"to": to, "amount": str(amount), "token": token}
        return await self._skill("send", "POST", "/send", SendResult, body=body)

    async def trade(self, src: str, dst: str, amount: str, slippage: float = 1) -> SkillResponse:
        """Quote a swap and build the unsigned swap (and approve) transactions."""
        body = {
            "src": src,
            "dst": dst,
            "amount": str(amount),
            "from": self.address,
            "slippage": slippage,
        }
        return await self._skill("trade", "POST", "/trade", TradeResult, body=body)

    async def fund(self, address: Optional[str] = None) -> SkillResponse:
        """Funding instructions for ``address``, the session wallet by default."""
        target = _require_address(address) if address else self.address
        return await self._skill("fund", "GET", f"/fund/{target}", FundResult)

    async def broadcast(self, tx: Dict[str, Any]) -> SkillResponse:
        """
        Have the server sign and broadcast ``tx`` (``to``, optional ``data``,
        ``value``, ``gasLimit``).

        The server signs on the wallet's behalf, so the private key travels in
        the request body.
        """
        if not isinstance(tx, dict) or not tx.get("to"):
            raise ValueError("broadcast requires a transaction with a 'to' address")
        _require_address(tx["to"], "tx.to")
        body = {"tx": tx, "privateKey": self._signer.private_key}
        return await self._skill("broadcast", "POST", "/broadcast", BroadcastResult, body=body)

    async def unlimited(self, apply_key: bool = True) -> SkillResponse:
        """
        Buy unlimited access ($100 USDC). The returned key is applied to this
        client unless ``apply_key`` is false.
        """
        response = await self._skill(
            "unlimited",
            "POST",
            "/unlimited",
            UnlimitedResult,
            expected_cost=UNLIMITED_PRICE_ATOMIC,
        )
        if apply_key and response.ok and isinstance(response.data, dict) and response.data.get("apiKey"):
            self.set_api_key(response.data["apiKey"])
        return response

    async def unlimited_verify(self, key: str) -> SkillResponse:
        """
        Check an unlimited-plan key. Plain GET, never paid.
        """
        logger.info(f"[unlimited_verify] verifying key {mask_secret(key)}")
        status, data = await self._http.fetch(
            "GET",
            f"{self.api_url}/unlimited/verify",
            params={"key": key},
            operation="unlimited_verify",
        )
        try:
            result = UnlimitedVerifyResult.model_validate(data)
        except ValidationError:
            error = data.get("error") if isinstance(data, dict) else None
            result = UnlimitedVerifyResult(valid=False, error=error or "unexpected response")
        return SkillResponse(status=status, data=data, paid_amount="0", result=result)

    async def pay_service(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        max_amount: Optional[str] = DEFAULT_PAY_SERVICE_MAX_ATOMIC,
    ) -> PayServiceResult:
        """
        Call any x402-paywalled URL.

        The session API key is never sent to third-party services, so this
        always goes through the payment flow.
        """
        method = method.upper()
        logger.info(f"[pay_service] calling {method} {url}")
        response = await self._http.pay(method, url, body=body, max_amount=max_amount, operation="pay_service")
        return PayServiceResult(
            status=response.status,
            data=response.data,
            paid_amount=response.paid_amount,
            response_time_ms=response.response_time_ms,
            trace=response.trace,
            url=url,
            method=method,
        )
