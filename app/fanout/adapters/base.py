from __future__ import annotations

from typing import Protocol

from app.fanout.context import CallContext
from app.fanout.outcome import Outcome
from app.fanout.registry import Target, TargetKind


class ProtocolAdapter(Protocol):
    kind: TargetKind

    def invoke(self, *, target: Target, address: str, ctx: CallContext) -> Outcome: ...
