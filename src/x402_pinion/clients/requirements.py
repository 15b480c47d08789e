"""
Payment requirement parsing for 402 responses.
"""

from typing import Any, Tuple

from pydantic import ValidationError

from ..engine.exceptions import ProtocolError
from ..schemas.https import PaymentRequired, PaymentRequirement
from ..schemas.versions import X402Version
from ..utils import logger


def parse_payment_requirements(body: Any) -> Tuple[PaymentRequirement, int]:
    """
    Extract the payment requirement and protocol version from a 402 body.

    The first entry of ``accepts`` is always selected; offers further down
    the list are ignored even when they would suit the client better.

    Args:
        body: Decoded JSON body of the 402 response.

    Returns:
        ``(requirement, x402_version)``; the version defaults to 1.

    Raises:
        ProtocolError: If the body has no usable ``accepts`` entry.
    """
    if not isinstance(body, dict):
        raise ProtocolError("402 response body is not a JSON object")

    try:
        challenge = PaymentRequired.model_validate(body)
    except ValidationError as exc:
        raise ProtocolError(f"Malformed 402 response body: {exc}") from exc

    if not challenge.accepts:
        reason = f": {challenge.error}" if isinstance(challenge.error, str) and challenge.error else ""
        raise ProtocolError(f"Could not parse payment requirements from 402 response{reason}")

    try:
        requirement = PaymentRequirement.model_validate(challenge.accepts[0])
    except ValidationError as exc:
        raise ProtocolError(f"Invalid payment requirement in 402 response: {exc}") from exc

    version = X402Version.from_body(challenge.x402_version)
    logger.debug(
        f"Payment required: {requirement.max_amount_required} on {requirement.network} "
        f"to {requirement.pay_to} (x402 v{version}, {len(challenge.accepts)} offered)"
    )
    return requirement, version
