"""
EVM Network and Token Constants

Chain IDs for the networks the Pinion skill server settles on, and the
USDC defaults used when a payment requirement leaves the EIP-712 domain
hints out.
"""

from typing import Dict


PINION_API_URL = "https://pinionos.com/skill"
DEFAULT_NETWORK = "base"

BASE_CHAIN_ID = 8453
BASE_SEPOLIA_CHAIN_ID = 84532

# Accepts both the short network names and their CAIP-2 form.
NETWORK_CHAIN_IDS: Dict[str, int] = {
    "base": BASE_CHAIN_ID,
    "eip155:8453": BASE_CHAIN_ID,
    "base-sepolia": BASE_SEPOLIA_CHAIN_ID,
    "eip155:84532": BASE_SEPOLIA_CHAIN_ID,
}

# USDC on Base mainnet
USDC_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
USDC_NAME = "USD Coin"
USDC_VERSION = "2"

# Authorization validity window
VALID_AFTER_SKEW_SECONDS = 600
DEFAULT_MAX_TIMEOUT_SECONDS = 900

# Skill prices in atomic USDC
SKILL_PRICE_ATOMIC = "10000"            # $0.01
UNLIMITED_PRICE_ATOMIC = "100000000"    # $100.00
DEFAULT_PAY_SERVICE_MAX_ATOMIC = "1000000"  # $1.00


def resolve_chain_id(network: str) -> int:
    """
    Map a network name to its chain ID.

    Unknown networks resolve to Base mainnet rather than raising.

    Example::

        resolve_chain_id("base-sepolia")   # 84532
        resolve_chain_id("eip155:84532")   # 84532
        resolve_chain_id("somewhere-else") # 8453
    """
    return NETWORK_CHAIN_IDS.get((network or "").strip().lower(), BASE_CHAIN_ID)
