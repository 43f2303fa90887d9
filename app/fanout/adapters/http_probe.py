from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from app.fanout.context import CallContext
from app.fanout.outcome import Outcome
from app.fanout.registry import Target, TargetKind

log = logging.getLogger("fanout.http_probe")


def status_line(resp: httpx.Response) -> str:
    reason = resp.reason_phrase
    return f"{resp.status_code} {reason}" if reason else str(resp.status_code)


@dataclass(frozen=True)
class HttpProbeAdapter:
    """GET the target URL; any response at all counts as reachable."""

    timeout_s: float = 10.0
    transport: httpx.BaseTransport | None = None
    kind: TargetKind = TargetKind.HTTP_PROBE

    def invoke(self, *, target: Target, address: str, ctx: CallContext) -> Outcome:
        call_ctx = ctx.child(self.timeout_s)
        try:
            call_ctx.check()
            timeout = call_ctx.remaining()
            with httpx.Client(timeout=timeout, transport=self.transport) as client:
                # Closing the client aborts an in-flight request.
                call_ctx.add_callback(client.close)
                # Body is discarded; the context manager releases the connection.
                with client.stream("GET", address) as resp:
                    status = status_line(resp)
            call_ctx.check()
        except Exception as e:
            log.warning("probe %s (%s) failed: %s", target.name, address, e)
            return Outcome.failed(target.name, f"{type(e).__name__}: {e}")

        log.info("probe %s -> %s", target.name, status)
        return Outcome.success(target.name, status)
