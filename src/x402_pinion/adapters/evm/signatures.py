"""
EVM Off-Chain Signing for x402 Payments

Local EIP-712 signing of EIP-3009 ``transferWithAuthorization`` messages.
All cryptographic operations run in-process through ``eth_account``; no RPC
calls are made.

Exported helpers
----------------
generate_nonce
    Fresh 32-byte random nonce as ``0x``-prefixed hex.

build_authorization
    Fill in the authorization window and nonce for a payment requirement.

sign_transfer_authorization
    Sign an authorization against the requirement's token domain.

sign_payment
    Build, sign and wrap an authorization into the ``X-PAYMENT`` envelope.

recover_payment_signer
    Recover the address that signed an envelope (what a server verifier does).
"""

import os
import time
from typing import Optional

from eth_account import Account
from eth_account.messages import encode_typed_data

from .constants import DEFAULT_MAX_TIMEOUT_SECONDS, VALID_AFTER_SKEW_SECONDS
from .standards import ERC3009TypedData
from ...engine.exceptions import ConfigError, PaymentSignatureError
from ...schemas.https import (
    ExactPaymentPayload,
    PaymentRequirement,
    SignedPayment,
    TransferAuthorization,
)


def generate_nonce() -> str:
    """Return 32 cryptographically random bytes as a ``0x``-prefixed hex string."""
    return "0x" + os.urandom(32).hex()


def build_authorization(
    authorizer: str,
    requirement: PaymentRequirement,
    *,
    nonce: Optional[str] = None,
    now: Optional[int] = None,
) -> TransferAuthorization:
    """
    Build the unsigned authorization for a payment requirement.

    ``validAfter`` is backdated 600 seconds to tolerate clock skew;
    ``validBefore`` is ``now + maxTimeoutSeconds`` (900 when the server gives
    none).

    Args:
        authorizer: Paying address (``from``).
        requirement: Requirement selected from the server's 402 body.
        nonce: bytes32 hex string; random when omitted.
        now: Unix time to anchor the window on; current time when omitted.
    """
    now_sec = int(time.time()) if now is None else int(now)
    timeout = requirement.max_timeout_seconds or DEFAULT_MAX_TIMEOUT_SECONDS
    return TransferAuthorization(
        from_=authorizer,
        to=requirement.pay_to,
        value=requirement.max_amount_required,
        valid_after=str(now_sec - VALID_AFTER_SKEW_SECONDS),
        valid_before=str(now_sec + timeout),
        nonce=nonce if nonce is not None else generate_nonce(),
    )


def sign_transfer_authorization(
    private_key: str,
    authorization: TransferAuthorization,
    requirement: PaymentRequirement,
) -> str:
    """
    Sign ``authorization`` under the EIP-712 domain of ``requirement``'s token.

    ECDSA signing here is deterministic (RFC 6979): the same key, authorization
    and requirement always yield the same signature.

    Returns:
        ``0x``-prefixed 65-byte signature (``r || s || v``).

    Raises:
        PaymentSignatureError: If the typed data cannot be encoded or signed.
    """
    typed_data = ERC3009TypedData.build(authorization, requirement)
    try:
        signed = Account.sign_typed_data(private_key, full_message=typed_data.to_dict())
    except Exception as exc:
        raise PaymentSignatureError(
            f"Could not sign payment authorization: {exc}",
            target=requirement.pay_to,
        ) from exc
    return "0x" + bytes(signed.signature).hex()


def sign_payment(
    private_key: str,
    requirement: PaymentRequirement,
    x402_version: int,
    *,
    nonce: Optional[str] = None,
    now: Optional[int] = None,
) -> SignedPayment:
    """
    Produce the complete ``X-PAYMENT`` envelope for a requirement.

    Example::

        envelope = sign_payment(key, requirement, x402_version=1)
        headers["X-PAYMENT"] = envelope.to_header()
    """
    address = Account.from_key(private_key).address
    authorization = build_authorization(address, requirement, nonce=nonce, now=now)
    signature = sign_transfer_authorization(private_key, authorization, requirement)
    return SignedPayment(
        x402_version=x402_version,
        scheme=requirement.scheme,
        network=requirement.network,
        payload=ExactPaymentPayload(signature=signature, authorization=authorization),
    )


def recover_payment_signer(signed_payment: SignedPayment, requirement: PaymentRequirement) -> str:
    """
    Recover the checksummed address that signed ``signed_payment``.

    Raises:
        PaymentSignatureError: If the signature cannot be recovered.
    """
    typed_data = ERC3009TypedData.build(signed_payment.payload.authorization, requirement)
    try:
        signable = encode_typed_data(full_message=typed_data.to_dict())
        return Account.recover_message(signable, signature=signed_payment.payload.signature)
    except Exception as exc:
        raise PaymentSignatureError(f"Signature recovery failed: {exc}") from exc


class EvmSigner:
    """
    Holds one secp256k1 key and signs x402 payments with it.

    Raises:
        ConfigError: If ``private_key`` is not a valid key.
    """

    def __init__(self, private_key: str) -> None:
        try:
            account = Account.from_key(private_key)
        except Exception as exc:
            raise ConfigError("Invalid private key") from exc
        self._private_key = private_key
        self._address = account.address

    @property
    def address(self) -> str:
        return self._address

    @property
    def private_key(self) -> str:
        return self._private_key

    def sign(
        self,
        requirement: PaymentRequirement,
        x402_version: int,
        *,
        nonce: Optional[str] = None,
        now: Optional[int] = None,
    ) -> SignedPayment:
        return sign_payment(self._private_key, requirement, x402_version, nonce=nonce, now=now)

    def __repr__(self) -> str:
        return f"EvmSigner(address={self._address})"
