"""x402 micropayment client for the Pinion skill API."""

from .adapters.evm import EvmSigner, sign_payment, recover_payment_signer, resolve_chain_id
from .clients import Http402Client, PinionClient, parse_payment_requirements
from .config import PinionConfig, load_config, resolve_setting
from .engine import (
    PinionError,
    ConfigError,
    ProtocolError,
    PaymentSignatureError,
    BudgetExceededError,
    TransportError,
    InvalidTransition,
    PaymentState,
    PaymentFlow,
)
from .engine.ledger import SpendLedger
from .schemas import PaymentRequirement, SignedPayment, SkillResponse, SpendStatus, OperationResult
from .services import PinionService
from .utils import logger, setup_logger

__all__ = [
    "EvmSigner",
    "sign_payment",
    "recover_payment_signer",
    "resolve_chain_id",
    "Http402Client",
    "PinionClient",
    "parse_payment_requirements",
    "PinionConfig",
    "load_config",
    "resolve_setting",
    "PinionError",
    "ConfigError",
    "ProtocolError",
    "PaymentSignatureError",
    "BudgetExceededError",
    "TransportError",
    "InvalidTransition",
    "PaymentState",
    "PaymentFlow",
    "SpendLedger",
    "PaymentRequirement",
    "SignedPayment",
    "SkillResponse",
    "SpendStatus",
    "OperationResult",
    "PinionService",
    "logger",
    "setup_logger",
]
