"""
Chain adapters for signing x402 payments.

Only EVM is implemented; the Pinion skill server settles USDC on Base.
"""

from .evm import EvmSigner, sign_payment, recover_payment_signer, resolve_chain_id

__all__ = ["EvmSigner", "sign_payment", "recover_payment_signer", "resolve_chain_id"]
