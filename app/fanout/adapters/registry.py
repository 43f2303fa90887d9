from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from app.core.config import Settings
from app.core.errors import ConfigurationError
from app.fanout.adapters.base import ProtocolAdapter
from app.fanout.adapters.grpc_stream import GrpcStreamAdapter
from app.fanout.adapters.grpc_unary import GrpcUnaryAdapter
from app.fanout.adapters.http_probe import HttpProbeAdapter
from app.fanout.adapters.queue_produce import QueueProduceAdapter
from app.fanout.registry import TargetKind

AdapterMap = Mapping[TargetKind, ProtocolAdapter]


def build_adapters(s: Settings) -> AdapterMap:
    return MappingProxyType(
        {
            TargetKind.HTTP_PROBE: HttpProbeAdapter(timeout_s=s.HTTP_PROBE_TIMEOUT_S),
            TargetKind.GRPC_UNARY: GrpcUnaryAdapter(
                service=s.GRPC_ECHO_SERVICE, message=s.GRPC_SAY_MESSAGE, timeout_s=s.GRPC_UNARY_TIMEOUT_S
            ),
            TargetKind.GRPC_STREAM: GrpcStreamAdapter(
                service=s.GRPC_ECHO_SERVICE, frm=s.GRPC_STREAM_FROM, to=s.GRPC_STREAM_TO, timeout_s=s.GRPC_STREAM_TIMEOUT_S
            ),
            TargetKind.QUEUE_PRODUCE: QueueProduceAdapter(
                orders_topic=s.TOPIC_A, payments_topic=s.TOPIC_B, timeout_s=s.KAFKA_PRODUCE_TIMEOUT_S
            ),
        }
    )


def get_adapter(adapters: AdapterMap, kind: TargetKind) -> ProtocolAdapter:
    adapter = adapters.get(kind)
    if adapter is None:
        raise ConfigurationError(f"No adapter for kind={kind.value}")
    return adapter
