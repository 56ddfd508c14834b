from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class RpcRequest(BaseModel):
    """One RPC call as received from the wire.

    Accepts both the wire names (``filePath``, ``functionName``) and the
    Python field names. ``context`` is supplied by the host, never read from
    the wire body.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    namespace: str = Field(alias="filePath")
    function_name: str = Field(alias="functionName")
    args: List[Any] = Field(default_factory=list)

    context: Any = Field(default=None, exclude=True)

    @classmethod
    def from_wire(cls, body: Dict[str, Any], context: Any = None) -> "RpcRequest":
        return cls.model_validate({**body, "context": context})

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}:{self.function_name}"
