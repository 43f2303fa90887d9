from __future__ import annotations

import logging
from dataclasses import dataclass

import grpc

from app.fanout.context import CallContext
from app.fanout.outcome import Outcome
from app.fanout.registry import Target, TargetKind
from app.rpc.echo_proto import SayRequest, SayResponse, method_path

log = logging.getLogger("fanout.grpc_unary")


def describe_rpc_error(e: grpc.RpcError) -> str:
    code = e.code() if hasattr(e, "code") else None
    details = e.details() if hasattr(e, "details") else None
    name = code.name if code is not None else type(e).__name__
    return f"{name}: {details or e}"


@dataclass(frozen=True)
class GrpcUnaryAdapter:
    """One Say() call under a deadline, no retry."""

    service: str = "proto.EchoService"
    message: str = "hello"
    timeout_s: float = 5.0
    kind: TargetKind = TargetKind.GRPC_UNARY

    def invoke(self, *, target: Target, address: str, ctx: CallContext) -> Outcome:
        call_ctx = ctx.child(self.timeout_s)
        try:
            call_ctx.check()
            with grpc.insecure_channel(address) as channel:
                say = channel.unary_unary(
                    method_path(self.service, "Say"),
                    request_serializer=SayRequest.SerializeToString,
                    response_deserializer=SayResponse.FromString,
                )
                fut = say.future(SayRequest(msg=self.message), timeout=call_ctx.remaining())
                call_ctx.add_callback(fut.cancel)
                resp = fut.result()
        except grpc.FutureCancelledError:
            log.warning("unary %s cancelled: %s", target.name, call_ctx.reason)
            return Outcome.failed(target.name, f"CANCELLED: {call_ctx.reason or 'cancelled'}")
        except grpc.RpcError as e:
            detail = describe_rpc_error(e)
            log.warning("unary %s (%s) failed: %s", target.name, address, detail)
            return Outcome.failed(target.name, detail)
        except Exception as e:
            log.warning("unary %s (%s) failed: %s", target.name, address, e)
            return Outcome.failed(target.name, f"{type(e).__name__}: {e}")

        log.info("unary %s -> %s", target.name, resp.msg)
        return Outcome.success(target.name, grpc.StatusCode.OK.name, data={"message": resp.msg})
