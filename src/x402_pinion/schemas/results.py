"""
Result Schema Models

Typed views over the JSON payloads returned by the Pinion skill server, the
generic ``SkillResponse`` envelope every operation returns, and the
``SpendStatus`` snapshot produced by the spend ledger.

Result models allow unknown keys so that a server adding fields never breaks
parsing.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import ConfigDict, Field

from .bases import WireModel
from ..engine.states import PaymentState


class ResultModel(WireModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


ResultT = TypeVar("ResultT")


class SkillResponse(WireModel, Generic[ResultT]):
    """Outcome of one x402 operation.

    Attributes:
        status: HTTP status of the final (authoritative) call.
        data: Decoded JSON body of the final call, or a placeholder error
            payload when the body was not JSON.
        paid_amount: Atomic amount authorized, ``"0"`` when nothing was paid.
        response_time_ms: Wall time across both round trips.
        result: Typed view over ``data``; ``None`` on non-2xx responses or when
            the payload did not match the expected shape.
        trace: States the payment flow went through. Not serialized.
    """
    status: int
    data: Any = None
    paid_amount: str = Field(default="0", alias="paidAmount")
    response_time_ms: int = Field(default=0, alias="responseTimeMs")
    result: Optional[ResultT] = None
    trace: List[PaymentState] = Field(default_factory=list, exclude=True)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def paid(self) -> bool:
        return self.paid_amount != "0"


class TokenBalances(ResultModel):
    eth: str = Field(..., alias="ETH")
    usdc: str = Field(..., alias="USDC")


class BalanceResult(ResultModel):
    address: str
    network: str
    balances: TokenBalances
    timestamp: Optional[str] = None


class TxResult(ResultModel):
    hash: str
    network: str
    from_: str = Field(..., alias="from")
    to: Optional[str] = None
    value: str
    gas_used: Optional[str] = Field(default=None, alias="gasUsed")
    status: str
    block_number: Optional[int] = Field(default=None, alias="blockNumber")
    timestamp: Optional[str] = None


class PriceResult(ResultModel):
    token: str
    network: str
    price_usd: float = Field(..., alias="priceUSD")
    change_24h: Optional[str] = Field(default=None, alias="change24h")
    timestamp: Optional[str] = None


class WalletResult(ResultModel):
    address: str
    private_key: str = Field(..., alias="privateKey")
    network: str
    chain_id: int = Field(..., alias="chainId")
    note: Optional[str] = None
    timestamp: Optional[str] = None


class ChatResult(ResultModel):
    response: str


class UnsignedTx(ResultModel):
    to: str
    value: str
    data: str
    chain_id: int = Field(..., alias="chainId")


class SendResult(ResultModel):
    tx: UnsignedTx
    token: str
    amount: str
    network: str
    note: Optional[str] = None
    timestamp: Optional[str] = None


class TradeResult(ResultModel):
    swap: UnsignedTx
    approve: Optional[UnsignedTx] = None
    src_token: str = Field(..., alias="srcToken")
    dst_token: str = Field(..., alias="dstToken")
    amount: str
    network: str
    router: Optional[str] = None
    note: Optional[str] = None
    timestamp: Optional[str] = None


class FundingInstructions(ResultModel):
    steps: List[str] = Field(default_factory=list)
    minimum_recommended: Optional[Dict[str, str]] = Field(default=None, alias="minimumRecommended")
    bridge_url: Optional[str] = Field(default=None, alias="bridgeUrl")


class FundResult(ResultModel):
    address: str
    network: str
    chain_id: int = Field(..., alias="chainId")
    balances: TokenBalances
    deposit_address: str = Field(..., alias="depositAddress")
    funding: FundingInstructions
    timestamp: Optional[str] = None


class BroadcastResult(ResultModel):
    tx_hash: str = Field(..., alias="txHash")
    from_: str = Field(..., alias="from")
    to: str
    network: str
    chain_id: int = Field(..., alias="chainId")
    explorer: Optional[str] = None
    note: Optional[str] = None
    timestamp: Optional[str] = None


class UnlimitedResult(ResultModel):
    message: Optional[str] = None
    api_key: str = Field(..., alias="apiKey")
    address: str
    plan: str
    price: Optional[str] = None
    note: Optional[str] = None
    timestamp: Optional[str] = None


class UnlimitedVerifyResult(ResultModel):
    valid: bool
    address: Optional[str] = None
    since: Optional[str] = None
    plan: Optional[str] = None
    error: Optional[str] = None


class PayServiceResult(SkillResponse[Any]):
    """``SkillResponse`` for an arbitrary x402 URL, echoing what was called."""
    url: str
    method: str


class SpendStatus(WireModel):
    """Snapshot of a spend ledger, amounts rendered with two decimals.

    ``max_budget`` and ``remaining`` are ``"unlimited"`` when no limit is set.
    """
    max_budget: str = Field(..., alias="maxBudget")
    spent: str
    remaining: str
    call_count: int = Field(..., alias="callCount")
    is_limited: bool = Field(..., alias="isLimited")


class OperationResult(WireModel):
    """Structured outcome of ``PinionService.invoke``; failures never raise."""
    success: bool
    operation: str
    response: Optional[Any] = None
    error: Optional[str] = None
    error_type: Optional[str] = Field(default=None, alias="errorType")
