"""
Exception and Error Definitions Module

Defines the exception hierarchy raised by the x402 client, the spend ledger
and the service facade. Every exception carries optional context naming the
operation and the target (address or endpoint) it failed on, so a caller can
render a useful message without re-deriving it.

Exception Hierarchy:
    PinionError (root)
    ├── ConfigError
    ├── ProtocolError
    │   └── PaymentSignatureError
    ├── BudgetExceededError
    ├── TransportError
    └── InvalidTransition
"""

from typing import Optional


class PinionError(Exception):
    """
    Root exception class for all project-specific exceptions.

    Attributes:
        message: Human-readable description.
        operation: Name of the operation that failed (e.g. ``"balance"``).
        target: Address, URL or endpoint the operation was aimed at.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        target: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.target = target

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.target:
            context.append(f"target={self.target}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ConfigError(PinionError):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Missing or malformed private key
    - Negative or non-numeric spend limit
    - Operation invoked on an unconfigured service
    """
    pass


class ProtocolError(PinionError):
    """
    Raised when the server does not speak a compatible x402 dialect.

    This includes scenarios such as:
    - 402 body that is not JSON
    - 402 body without a non-empty ``accepts`` list
    - Payment requirement missing mandatory fields
    """
    pass


class PaymentSignatureError(ProtocolError):
    """
    Raised when a payment authorization cannot be signed.

    Typically the requirement carries values that cannot be EIP-712 encoded
    (bad address, non-numeric amount).
    """
    pass


class BudgetExceededError(PinionError):
    """
    Raised when a payment would exceed the per-call ceiling or the session
    budget. Raised before anything is signed.

    Attributes:
        required: Atomic amount the server asked for.
        allowed: Atomic ceiling or remaining budget it was checked against.
    """

    def __init__(
        self,
        message: str,
        *,
        required: Optional[int] = None,
        allowed: Optional[int] = None,
        operation: Optional[str] = None,
        target: Optional[str] = None,
    ) -> None:
        super().__init__(message, operation=operation, target=target)
        self.required = required
        self.allowed = allowed


class TransportError(PinionError):
    """
    Raised when an HTTP round trip fails at the network level.

    Non-JSON response bodies do not raise; they degrade to a placeholder
    payload.
    """
    pass


class InvalidTransition(PinionError):
    """
    Raised when the payment flow is asked to move between two states that
    are not connected.

    Attributes:
        current_state: State the flow was in.
        next_state: State that was requested.
    """

    def __init__(self, current_state, next_state) -> None:
        super().__init__(f"Invalid payment state transition: {current_state.value} -> {next_state.value}")
        self.current_state = current_state
        self.next_state = next_state
