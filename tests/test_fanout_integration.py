from __future__ import annotations

import httpx
from kafka.errors import KafkaTimeoutError

from tests.utils_fakes import RecordingServicer, start_echo_server


def test_unreachable_broker_fails_only_the_queue_target():
    from app.core.config import Settings
    from app.fanout.adapters.grpc_stream import GrpcStreamAdapter
    from app.fanout.adapters.grpc_unary import GrpcUnaryAdapter
    from app.fanout.adapters.http_probe import HttpProbeAdapter
    from app.fanout.adapters.queue_produce import QueueProduceAdapter
    from app.fanout.dispatcher import FanOutDispatcher
    from app.fanout.registry import TargetKind, build_registry

    server, address = start_echo_server(RecordingServicer(tick_delay_s=0))
    try:
        s = Settings(GRPC_SERVER_ADDR=address, KAFKA_BROKERS="127.0.0.1:1", TARGET_ADDRESSES="")

        def no_brokers(brokers, *, timeout_s):
            raise KafkaTimeoutError("bootstrap brokers unreachable")

        def http_handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503 if request.url.host == "jsonplaceholder.typicode.com" else 200)

        adapters = {
            TargetKind.HTTP_PROBE: HttpProbeAdapter(transport=httpx.MockTransport(http_handler)),
            TargetKind.GRPC_UNARY: GrpcUnaryAdapter(),
            TargetKind.GRPC_STREAM: GrpcStreamAdapter(frm=7, to=3),
            TargetKind.QUEUE_PRODUCE: QueueProduceAdapter(producer_factory=no_brokers),
        }
        report = FanOutDispatcher(build_registry(s), adapters).dispatch_all()
    finally:
        server.stop(grace=None)

    assert [(o.service, o.status) for o in report] == [
        ("database-sql", "200 OK"),
        ("kafka-go", "FAILED"),
        ("grpc-unary", "OK"),
        ("grpc-stream", "OK"),
        ("http-rest", "503 Service Unavailable"),
    ]
    assert report.failed == ["kafka-go"]
    assert report[2].data == {"message": "echo: hello"}
    assert report[3].data["values"] == [3, 4, 5, 6, 7]
