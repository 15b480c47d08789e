"""
Configuration resolution.

Settings come from, in order of precedence:

1. Explicit runtime settings passed by the host (e.g. an agent runtime)
2. Process environment, after ``.env`` has been loaded with python-dotenv
3. Built-in defaults

Empty strings count as unset at every level.
"""

import os
from typing import Mapping, Optional

import dotenv
from pydantic import BaseModel, Field

from .adapters.evm.constants import DEFAULT_NETWORK, PINION_API_URL


PRIVATE_KEY_SETTING = "PINION_PRIVATE_KEY"
API_KEY_SETTING = "PINION_API_KEY"
API_URL_SETTING = "PINION_API_URL"
NETWORK_SETTING = "PINION_NETWORK"
MAX_BUDGET_SETTING = "PINION_MAX_BUDGET"


class PinionConfig(BaseModel):
    """Resolved session configuration."""
    private_key: Optional[str] = Field(default=None, repr=False, description="Wallet private key")
    api_key: Optional[str] = Field(default=None, repr=False, description="Unlimited-plan API key")
    api_url: str = Field(default=PINION_API_URL, description="Skill server base URL")
    network: str = Field(default=DEFAULT_NETWORK, description="Network identifier")
    max_budget: Optional[str] = Field(default=None, description="Session budget in USDC, e.g. '1.50'")


def resolve_setting(
    name: str,
    runtime_settings: Optional[Mapping[str, Optional[str]]] = None,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Look up one setting: runtime settings, then environment, then ``default``.

    Example::

        resolve_setting("PINION_NETWORK", {"PINION_NETWORK": "base-sepolia"})  # "base-sepolia"
        resolve_setting("PINION_NETWORK", {}, default="base")                  # env or "base"
    """
    if runtime_settings:
        value = runtime_settings.get(name)
        if value:
            return value
    value = os.environ.get(name)
    if value:
        return value
    return default


def load_config(
    runtime_settings: Optional[Mapping[str, Optional[str]]] = None,
    load_env_file: bool = True,
) -> PinionConfig:
    """
    Resolve every Pinion setting into a ``PinionConfig``.

    Args:
        runtime_settings: Host-supplied settings, highest precedence.
        load_env_file: Load ``.env`` into the environment first (existing
            environment variables are not overridden).
    """
    if load_env_file:
        dotenv.load_dotenv(override=False)
    return PinionConfig(
        private_key=resolve_setting(PRIVATE_KEY_SETTING, runtime_settings),
        api_key=resolve_setting(API_KEY_SETTING, runtime_settings),
        api_url=resolve_setting(API_URL_SETTING, runtime_settings, PINION_API_URL),
        network=resolve_setting(NETWORK_SETTING, runtime_settings, DEFAULT_NETWORK),
        max_budget=resolve_setting(MAX_BUDGET_SETTING, runtime_settings),
    )
