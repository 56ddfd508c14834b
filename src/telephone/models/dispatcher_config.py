from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class DispatcherConfig(BaseModel):
    """Runtime behaviour of the dispatcher.

    Defaults reproduce the wire contract: null/undefined arguments are never
    rejected, synchronous functions run inline on the event loop.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_null: bool = True                     # null/undefined bypass type checks
    run_sync_in_thread: bool = False            # offload sync callables via asyncio.to_thread

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DispatcherConfig":
        return cls.model_validate(data)
