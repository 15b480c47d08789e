from .bases import WireModel
from .https import (
    ClientRequestHeader,
    PaymentRequirement,
    PaymentRequired,
    TransferAuthorization,
    ExactPaymentPayload,
    SignedPayment,
)
from .results import (
    SkillResponse,
    BalanceResult,
    TxResult,
    PriceResult,
    WalletResult,
    ChatResult,
    UnsignedTx,
    SendResult,
    TradeResult,
    FundResult,
    BroadcastResult,
    UnlimitedResult,
    UnlimitedVerifyResult,
    PayServiceResult,
    SpendStatus,
    OperationResult,
)
from .versions import X402Version, DEFAULT_X402_VERSION

__all__ = [
    "WireModel",
    "ClientRequestHeader",
    "PaymentRequirement",
    "PaymentRequired",
    "TransferAuthorization",
    "ExactPaymentPayload",
    "SignedPayment",
    "SkillResponse",
    "BalanceResult",
    "TxResult",
    "PriceResult",
    "WalletResult",
    "ChatResult",
    "UnsignedTx",
    "SendResult",
    "TradeResult",
    "FundResult",
    "BroadcastResult",
    "UnlimitedResult",
    "UnlimitedVerifyResult",
    "PayServiceResult",
    "SpendStatus",
    "OperationResult",
    "X402Version",
    "DEFAULT_X402_VERSION",
]
