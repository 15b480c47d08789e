"""
Client module for x402 payments.

``Http402Client`` pays any x402-protected URL; ``PinionClient`` binds the
Pinion skill API on top of it.
"""

from .http_client import Http402Client
from .pinion_client import PinionClient
from .requirements import parse_payment_requirements

__all__ = ["Http402Client", "PinionClient", "parse_payment_requirements"]
