from .exceptions import (
    PinionError,
    ConfigError,
    ProtocolError,
    PaymentSignatureError,
    BudgetExceededError,
    TransportError,
    InvalidTransition,
)
from .states import PaymentState, PaymentFlow

__all__ = [
    "PinionError",
    "ConfigError",
    "ProtocolError",
    "PaymentSignatureError",
    "BudgetExceededError",
    "TransportError",
    "InvalidTransition",
    "PaymentState",
    "PaymentFlow",
]
