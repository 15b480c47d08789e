"""
Test suite for the payment state machine.
"""
import pytest

from x402_pinion.engine.exceptions import InvalidTransition
from x402_pinion.engine.states import PaymentFlow, PaymentState


def _walk(flow, *states):
    for state in states:
        flow.advance(state)


def test_direct_path():
    flow = PaymentFlow("price")
    _walk(flow, PaymentState.REQUESTING, PaymentState.DIRECT_SUCCESS, PaymentState.DONE)
    assert flow.is_terminal
    assert not flow.was_paid
    assert flow.history[0] is PaymentState.INIT


def test_paid_path():
    flow = PaymentFlow("price")
    _walk(
        flow,
        PaymentState.REQUESTING,
        PaymentState.CHALLENGED,
        PaymentState.SIGNING,
        PaymentState.PAYING,
        PaymentState.PAID_SUCCESS,
        PaymentState.DONE,
    )
    assert flow.was_paid
    assert flow.state is PaymentState.DONE


def test_cannot_skip_signing():
    flow = PaymentFlow()
    _walk(flow, PaymentState.REQUESTING, PaymentState.CHALLENGED)
    with pytest.raises(InvalidTransition) as info:
        flow.advance(PaymentState.PAYING)
    assert info.value.current_state is PaymentState.CHALLENGED
    assert info.value.next_state is PaymentState.PAYING
    assert flow.state is PaymentState.CHALLENGED


def test_fail_from_any_open_state():
    flow = PaymentFlow()
    _walk(flow, PaymentState.REQUESTING, PaymentState.CHALLENGED, PaymentState.SIGNING)
    flow.fail()
    assert flow.state is PaymentState.FAILED
    assert flow.is_terminal


def test_terminal_states_are_final():
    flow = PaymentFlow()
    _walk(flow, PaymentState.REQUESTING, PaymentState.DIRECT_SUCCESS, PaymentState.DONE)
    flow.fail()
    assert flow.state is PaymentState.DONE
    with pytest.raises(InvalidTransition):
        flow.advance(PaymentState.REQUESTING)
    with pytest.raises(InvalidTransition):
        flow.advance(PaymentState.FAILED)
