from __future__ import annotations

import logging
from dataclasses import dataclass

import grpc

from app.fanout.adapters.grpc_unary import describe_rpc_error
from app.fanout.context import CallContext
from app.fanout.outcome import Outcome
from app.fanout.registry import Target, TargetKind
from app.rpc.echo_proto import CountRequest, CountTick, count_request, method_path

log = logging.getLogger("fanout.grpc_stream")


def ordered_range(frm: int, to: int) -> tuple[int, int]:
    return (to, frm) if to < frm else (frm, to)


@dataclass(frozen=True)
class GrpcStreamAdapter:
    """Drain StreamCount(from, to) until the server completes it."""

    service: str = "proto.EchoService"
    frm: int = 3
    to: int = 7
    timeout_s: float = 10.0
    kind: TargetKind = TargetKind.GRPC_STREAM

    def invoke(self, *, target: Target, address: str, ctx: CallContext) -> Outcome:
        call_ctx = ctx.child(self.timeout_s)
        frm, to = ordered_range(self.frm, self.to)
        values: list[int] = []
        try:
            call_ctx.check()
            with grpc.insecure_channel(address) as channel:
                count = channel.unary_stream(
                    method_path(self.service, "StreamCount"),
                    request_serializer=CountRequest.SerializeToString,
                    response_deserializer=CountTick.FromString,
                )
                call = count(count_request(frm, to), timeout=call_ctx.remaining())
                call_ctx.add_callback(call.cancel)
                for tick in call:
                    values.append(tick.value)
        except grpc.RpcError as e:
            detail = describe_rpc_error(e)
            log.warning("stream %s failed after %s values: %s", target.name, len(values), detail)
            return Outcome.failed(
                target.name,
                f"partial count={len(values)}: {detail}",
                data={"count": len(values), "values": values},
            )
        except Exception as e:
            log.warning("stream %s (%s) failed: %s", target.name, address, e)
            return Outcome.failed(
                target.name,
                f"partial count={len(values)}: {type(e).__name__}: {e}",
                data={"count": len(values), "values": values},
            )

        log.info("stream %s completed with %s values", target.name, len(values))
        return Outcome.success(target.name, grpc.StatusCode.OK.name, data={"count": len(values), "values": values})
