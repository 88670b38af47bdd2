"""
Shared base schemas.

Every request and response model speaks the editor's camelCase on the
wire while keeping snake_case attribute names in Python; inputs are
accepted in either form.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LayoutPayload(CamelModel):
    """
    Objects and wires exactly as the scene editor stores them.

    Objects and wires stay open mappings: the engine tolerates unknown
    types, missing fields and dangling wire references.
    """

    objects: List[Dict[str, Any]] = Field(default_factory=list, description="Placed objects")
    wires: List[Dict[str, Any]] = Field(default_factory=list, description="Wire connections")
