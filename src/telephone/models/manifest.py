from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator


class ParamSpec(BaseModel):
    name: str
    type: str = "any"           # declared type text, compiled at load time
    optional: bool = False

    @field_validator("name")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("parameter name must not be empty")
        return value


class NamespaceSpec(BaseModel):
    module: str                 # dotted import path of the module exporting the functions
    functions: Dict[str, List[ParamSpec]] = Field(default_factory=dict)


class RegistryManifest(BaseModel):
    """On-disk output of the export discovery step.

    Example (YAML):

        namespaces:
          src/lib/tele/math.telephone.ts:
            module: myapp.rpc.math
            functions:
              add:
                - {name: a, type: number}
                - {name: b, type: number}
    """

    namespaces: Dict[str, NamespaceSpec] = Field(default_factory=dict)
