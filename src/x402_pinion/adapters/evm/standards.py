"""
EIP-712 typed-data structures for EIP-3009 ``transferWithAuthorization``.

The domain is derived from a server's payment requirement, falling back to
Base USDC for any hint the server leaves out.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .constants import USDC_ADDRESS, USDC_NAME, USDC_VERSION, resolve_chain_id
from ...schemas.https import PaymentRequirement, TransferAuthorization


EIP712_DOMAIN_FIELDS: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

TRANSFER_WITH_AUTHORIZATION_FIELDS: List[Dict[str, str]] = [
    {"name": "from", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "validAfter", "type": "uint256"},
    {"name": "validBefore", "type": "uint256"},
    {"name": "nonce", "type": "bytes32"},
]


@dataclass
class EIP712Domain:
    """
    EIP-712 domain separator.
    Used to prevent signature replay across tokens and chains.
    """
    name: str
    version: str
    chainId: int
    verifyingContract: str

    @classmethod
    def for_requirement(cls, requirement: PaymentRequirement) -> "EIP712Domain":
        """
        Domain for the token a requirement asks to be paid in.

        ``extra.name`` / ``extra.version`` / ``asset`` are used when present,
        USDC on Base otherwise. The chain ID comes from ``requirement.network``.
        """
        return cls(
            name=requirement.domain_name or USDC_NAME,
            version=requirement.domain_version or USDC_VERSION,
            chainId=resolve_chain_id(requirement.network),
            verifyingContract=requirement.asset or USDC_ADDRESS,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chainId,
            "verifyingContract": self.verifyingContract,
        }


@dataclass
class ERC3009TypedData:
    """
    Full EIP-712 payload for one ``TransferWithAuthorization``.

    ``to_dict()`` produces the ``{types, primaryType, domain, message}``
    layout accepted by ``eth_account.Account.sign_typed_data(full_message=...)``
    and ``eth_signTypedData_v4``.
    """
    domain: EIP712Domain
    authorization: TransferAuthorization

    primary_type: str = "TransferWithAuthorization"

    types: Dict[str, List[Dict[str, str]]] = field(
        default_factory=lambda: {
            "EIP712Domain": EIP712_DOMAIN_FIELDS,
            "TransferWithAuthorization": TRANSFER_WITH_AUTHORIZATION_FIELDS,
        }
    )

    @classmethod
    def build(
        cls,
        authorization: TransferAuthorization,
        requirement: PaymentRequirement,
    ) -> "ERC3009TypedData":
        return cls(domain=EIP712Domain.for_requirement(requirement), authorization=authorization)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "types": self.types,
            "primaryType": self.primary_type,
            "domain": self.domain.to_dict(),
            "message": self.authorization.to_message(),
        }
