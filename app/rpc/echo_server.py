from __future__ import annotations

import logging
import time
from concurrent import futures

import grpc

from app.core.config import settings
from app.rpc.echo_proto import (
    CountRequest,
    CountTick,
    SayRequest,
    SayResponse,
    count_bounds,
)

log = logging.getLogger("rpc.echo_server")


class EchoServicer:
    def __init__(self, *, tick_delay_s: float = 0.15) -> None:
        self.tick_delay_s = tick_delay_s

    def Say(self, request, context):
        return SayResponse(msg="echo: " + request.msg)

    def StreamCount(self, request, context):
        frm, to = count_bounds(request)
        if to < frm:
            frm, to = to, frm
        for i in range(frm, to + 1):
            if not context.is_active():
                return
            yield CountTick(value=i)
            if self.tick_delay_s:
                time.sleep(self.tick_delay_s)


def echo_handler(servicer: EchoServicer, service_name: str) -> grpc.GenericRpcHandler:
    return grpc.method_handlers_generic_handler(
        service_name,
        {
            "Say": grpc.unary_unary_rpc_method_handler(
                servicer.Say,
                request_deserializer=SayRequest.FromString,
                response_serializer=SayResponse.SerializeToString,
            ),
            "StreamCount": grpc.unary_stream_rpc_method_handler(
                servicer.StreamCount,
                request_deserializer=CountRequest.FromString,
                response_serializer=CountTick.SerializeToString,
            ),
        },
    )


def create_server(
    address: str,
    *,
    servicer: EchoServicer | None = None,
    service_name: str | None = None,
    max_workers: int = 8,
) -> tuple[grpc.Server, int]:
    """Build (not start) an insecure echo server. Returns the server and the bound port."""
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers))
    server.add_generic_rpc_handlers((echo_handler(servicer or EchoServicer(), service_name or settings.GRPC_ECHO_SERVICE),))
    port = server.add_insecure_port(address)
    return server, port


def serve(address: str = "0.0.0.0:50051") -> None:
    server, port = create_server(address)
    server.start()
    log.info("echo grpc server listening on port %s", port)
    server.wait_for_termination()


if __name__ == "__main__":
    from app.core.logging import configure_logging

    configure_logging(settings.LOG_LEVEL)
    serve()
