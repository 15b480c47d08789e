"""
Shared fixtures and helpers for the x402-pinion test suite.

Provides deterministic test keys, realistic 402 challenge bodies, and a
``ScriptedServer`` that plays back queued ``httpx.Response`` objects through
``httpx.MockTransport`` while recording every request it receives.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from eth_account import Account

from x402_pinion.config import (
    API_KEY_SETTING,
    API_URL_SETTING,
    MAX_BUDGET_SETTING,
    NETWORK_SETTING,
    PRIVATE_KEY_SETTING,
)


# Test keys (do not use in production!)
MOCK_PRIVATE_KEY = "0x1234567890123456789012345678901234567890123456789012345678901234"
MOCK_OTHER_PRIVATE_KEY = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcdefabcd"
MOCK_ADDRESS = Account.from_key(MOCK_PRIVATE_KEY).address
MOCK_OTHER_ADDRESS = Account.from_key(MOCK_OTHER_PRIVATE_KEY).address

MOCK_PAY_TO = MOCK_OTHER_ADDRESS
MOCK_USDC = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
MOCK_LOOKUP_ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

API_URL = "https://skills.test/skill"


def make_requirement(amount: str = "10000", **overrides) -> Dict[str, Any]:
    requirement = {
        "scheme": "exact",
        "network": "base",
        "asset": MOCK_USDC,
        "payTo": MOCK_PAY_TO,
        "maxAmountRequired": amount,
        "maxTimeoutSeconds": 900,
        "extra": {"name": "USD Coin", "version": "2"},
    }
    requirement.update(overrides)
    return requirement


def make_402_body(amount: str = "10000", version: Optional[int] = 1, **overrides) -> Dict[str, Any]:
    body: Dict[str, Any] = {"accepts": [make_requirement(amount, **overrides)]}
    if version is not None:
        body["x402Version"] = version
    return body


def challenge(amount: str = "10000", **overrides) -> httpx.Response:
    return httpx.Response(402, json=make_402_body(amount, **overrides))


Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class ScriptedServer:
    """Replays queued responses in order and records the requests."""

    def __init__(self, *replies: Reply) -> None:
        self.replies: List[Reply] = list(replies)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            return httpx.Response(500, json={"error": "unexpected call"})
        reply = self.replies.pop(0)
        return reply(request) if callable(reply) else reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def body(self, index: int) -> Any:
        content = self.requests[index].content
        return json.loads(content) if content else None


@pytest.fixture(autouse=True)
def clean_pinion_env(monkeypatch):
    """Keep ambient PINION_* variables out of every test."""
    for name in (
        PRIVATE_KEY_SETTING,
        API_KEY_SETTING,
        API_URL_SETTING,
        NETWORK_SETTING,
        MAX_BUDGET_SETTING,
    ):
        monkeypatch.delenv(name, raising=False)
