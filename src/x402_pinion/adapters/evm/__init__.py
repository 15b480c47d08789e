from .constants import (
    PINION_API_URL,
    DEFAULT_NETWORK,
    NETWORK_CHAIN_IDS,
    USDC_ADDRESS,
    USDC_NAME,
    USDC_VERSION,
    SKILL_PRICE_ATOMIC,
    UNLIMITED_PRICE_ATOMIC,
    resolve_chain_id,
)
from .standards import EIP712Domain, ERC3009TypedData
from .signatures import (
    EvmSigner,
    generate_nonce,
    build_authorization,
    sign_transfer_authorization,
    sign_payment,
    recover_payment_signer,
)

__all__ = [
    "PINION_API_URL",
    "DEFAULT_NETWORK",
    "NETWORK_CHAIN_IDS",
    "USDC_ADDRESS",
    "USDC_NAME",
    "USDC_VERSION",
    "SKILL_PRICE_ATOMIC",
    "UNLIMITED_PRICE_ATOMIC",
    "resolve_chain_id",
    "EIP712Domain",
    "ERC3009TypedData",
    "EvmSigner",
    "generate_nonce",
    "build_authorization",
    "sign_transfer_authorization",
    "sign_payment",
    "recover_payment_signer",
]
