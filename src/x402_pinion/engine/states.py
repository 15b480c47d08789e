"""
Payment flow state machine.

One ``PaymentFlow`` instance follows a single x402 request through its
lifecycle::

    INIT -> REQUESTING -> DIRECT_SUCCESS ---------------------------> DONE
                       \\-> CHALLENGED -> SIGNING -> PAYING -> PAID_SUCCESS -> DONE

``FAILED`` is reachable from every state that is not already terminal.
"""

from enum import Enum
from typing import Dict, FrozenSet, List

from .exceptions import InvalidTransition
from ..utils import logger


class PaymentState(Enum):
    INIT = "init"
    REQUESTING = "requesting"
    DIRECT_SUCCESS = "direct_success"
    CHALLENGED = "challenged"
    SIGNING = "signing"
    PAYING = "paying"
    PAID_SUCCESS = "paid_success"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES: FrozenSet[PaymentState] = frozenset({PaymentState.DONE, PaymentState.FAILED})

_TRANSITIONS: Dict[PaymentState, FrozenSet[PaymentState]] = {
    PaymentState.INIT: frozenset({PaymentState.REQUESTING}),
    PaymentState.REQUESTING: frozenset({PaymentState.DIRECT_SUCCESS, PaymentState.CHALLENGED}),
    PaymentState.DIRECT_SUCCESS: frozenset({PaymentState.DONE}),
    PaymentState.CHALLENGED: frozenset({PaymentState.SIGNING}),
    PaymentState.SIGNING: frozenset({PaymentState.PAYING}),
    PaymentState.PAYING: frozenset({PaymentState.PAID_SUCCESS}),
    PaymentState.PAID_SUCCESS: frozenset({PaymentState.DONE}),
    PaymentState.DONE: frozenset(),
    PaymentState.FAILED: frozenset(),
}


class PaymentFlow:
    """Tracks and validates the state of one payment attempt."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self.history: List[PaymentState] = [PaymentState.INIT]

    @property
    def state(self) -> PaymentState:
        return self.history[-1]

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_advance(self, next_state: PaymentState) -> bool:
        if next_state is PaymentState.FAILED:
            return not self.is_terminal
        return next_state in _TRANSITIONS[self.state]

    def advance(self, next_state: PaymentState) -> PaymentState:
        """
        Move to ``next_state``.

        Raises:
            InvalidTransition: If the move is not allowed from the current state.
        """
        if not self.can_advance(next_state):
            raise InvalidTransition(self.state, next_state)
        logger.debug(f"[{self.label}] {self.state.value} -> {next_state.value}")
        self.history.append(next_state)
        return next_state

    def fail(self) -> None:
        """Mark the flow failed; a no-op when already terminal."""
        if not self.is_terminal:
            self.advance(PaymentState.FAILED)

    @property
    def was_paid(self) -> bool:
        return PaymentState.PAID_SUCCESS in self.history
