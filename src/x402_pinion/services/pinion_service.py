"""
Pinion service facade.

Holds at most one configured ``PinionClient`` and the session's
``SpendLedger``, and exposes read-only session status. The host (an agent
action layer, a CLI ...) talks to this object; it never performs HTTP or
signing itself.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..adapters.evm.constants import DEFAULT_NETWORK
from ..clients.pinion_client import PinionClient
from ..config import load_config
from ..engine.exceptions import ConfigError, PinionError
from ..engine.ledger import SpendLedger
from ..schemas.results import OperationResult, SpendStatus
from ..utils import logger


OPERATIONS = frozenset({
    "balance",
    "tx",
    "price",
    "wallet",
    "chat",
    "send",
    "trade",
    "fund",
    "broadcast",
    "unlimited",
    "unlimited_verify",
    "pay_service",
})


class PinionService:
    """
    Session facade over one client and one ledger.

    Usage:
        ```python
        service = await PinionService.start({"PINION_PRIVATE_KEY": key, "PINION_MAX_BUDGET": "1.00"})
        outcome = await service.invoke("price", token="eth")
        if outcome.success:
            print(outcome.response.result.price_usd)
        await service.stop()
        ```
    """

    service_type = "pinion"

    def __init__(self, ledger: Optional[SpendLedger] = None, **client_kwargs) -> None:
        """
        Args:
            ledger: Session ledger; a fresh unlimited one when omitted.
            **client_kwargs: Extra arguments for every ``PinionClient`` this
                service builds (e.g. ``transport`` or ``timeout``).
        """
        self._client: Optional[PinionClient] = None
        self._retired: List[PinionClient] = []
        self._client_kwargs = client_kwargs
        self.ledger = ledger if ledger is not None else SpendLedger()

    @classmethod
    async def start(
        cls,
        runtime_settings: Optional[Mapping[str, Optional[str]]] = None,
        **client_kwargs
    ) -> "PinionService":
        """
        Build a service from resolved settings.

        A missing or invalid private key leaves the service unconfigured
        (logged); ``configure`` can be called later.

        Raises:
            ConfigError: If ``PINION_MAX_BUDGET`` is malformed.
        """
        logger.info("[PinionService] starting")
        config = load_config(runtime_settings)
        service = cls(**client_kwargs)
        if config.max_budget:
            service.ledger.set_limit(config.max_budget)

        if not config.private_key:
            logger.warning("[PinionService] PINION_PRIVATE_KEY not set; call configure() to set a wallet")
            return service
        try:
            service.configure(
                config.private_key,
                api_url=config.api_url,
                network=config.network,
                api_key=config.api_key,
            )
        except ConfigError:
            logger.warning("[PinionService] invalid PINION_PRIVATE_KEY; wallet not configured")
        return service

    async def stop(self) -> None:
        """Close the active client and any replaced ones."""
        clients = self._retired + ([self._client] if self._client is not None else [])
        self._retired = []
        for client in clients:
            await client.aclose()
        logger.info("[PinionService] stopped")

    # =========================================================================
    # Configuration
    # =========================================================================

    def configure(
        self,
        private_key: str,
        api_url: Optional[str] = None,
        network: Optional[str] = None,
        api_key: Optional[str] = None,
    ) -> PinionClient:
        """
        Replace the active client.

        The new client is fully built before it becomes visible, so readers
        see either the old or the new one. On an invalid key the old client
        stays in place.

        Raises:
            ConfigError: If ``private_key`` is invalid.
        """
        client = PinionClient(
            private_key,
            api_url=api_url,
            network=network,
            api_key=api_key,
            ledger=self.ledger,
            **self._client_kwargs,
        )
        previous, self._client = self._client, client
        if previous is not None:
            self._retired.append(previous)
        logger.info(f"[PinionService] wallet configured: {client.address} on {client.network}")
        return client

    def set_budget(self, amount: Optional[str]) -> SpendStatus:
        """Set the session budget in USDC, or remove it with ``None``."""
        if amount is None:
            self.ledger.clear_limit()
        else:
            self.ledger.set_limit(amount)
        return self.ledger.get_status()

    def reset_spend(self) -> SpendStatus:
        self.ledger.reset()
        return self.ledger.get_status()

    # =========================================================================
    # Read-only status
    # =========================================================================

    @property
    def client(self) -> Optional[PinionClient]:
        return self._client

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    @property
    def wallet_address(self) -> Optional[str]:
        return self._client.address if self._client is not None else None

    @property
    def network(self) -> str:
        return self._client.network if self._client is not None else DEFAULT_NETWORK

    @property
    def has_api_key(self) -> bool:
        return self._client.has_api_key if self._client is not None else False

    def spend_status(self) -> SpendStatus:
        return self.ledger.get_status()

    def status(self) -> Dict[str, Any]:
        """Session summary for display by the host."""
        return {
            "configured": self.is_configured,
            "wallet": self.wallet_address,
            "network": self.network,
            "apiKeyMode": self.has_api_key,
            "spend": self.spend_status().to_wire(),
        }

    # =========================================================================
    # Operations
    # =========================================================================

    async def invoke(self, operation: str, **params) -> OperationResult:
        """
        Run a named client operation and return a structured outcome.

        Errors from the payment flow and bad parameters are logged with the
        operation name and endpoint, then returned as a failed
        ``OperationResult``; they are not raised.
        """
        if operation not in OPERATIONS:
            logger.error(f"[{operation}] unknown operation")
            return self._failure(operation, ValueError(f"Unknown operation: {operation}"))
        client = self._client
        if client is None:
            logger.error(f"[{operation}] Pinion wallet not configured")
            return self._failure(operation, ConfigError("Pinion wallet not configured", operation=operation))
        try:
            response = await getattr(client, operation)(**params)
        except (PinionError, ValueError, TypeError) as exc:
            logger.error(f"[{operation}] failed against {client.api_url}: {exc}")
            return self._failure(operation, exc)
        return OperationResult(success=True, operation=operation, response=response)

    @staticmethod
    def _failure(operation: str, exc: Exception) -> OperationResult:
        return OperationResult(
            success=False,
            operation=operation,
            error=str(exc),
            error_type=type(exc).__name__,
        )
