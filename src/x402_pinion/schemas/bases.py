"""
Base Schema Models

Every wire-level model in the package inherits from ``WireModel``. Python
attributes are snake_case; the camelCase names used on the wire are declared
as aliases, and models accept either spelling on input.

Dependencies:
    - pydantic: For data validation and serialization
"""

import json
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    """
    Pydantic base model with compact JSON serialization by alias.

    Example:
        class MyModel(WireModel):
            pay_to: str = Field(..., alias="payTo")

        MyModel(payTo="0xabc").to_json()   # '{"payTo":"0xabc"}'
    """

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        """Dump to plain JSON types using wire (alias) names, dropping ``None``."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """
        Compact JSON string of ``to_wire()``.

        Field order follows declaration order; no whitespace is emitted.
        """
        return json.dumps(self.to_wire(), separators=(",", ":"), ensure_ascii=False)
