from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from app.core.config import Settings
from app.core.errors import ConfigurationError


class TargetKind(str, Enum):
    HTTP_PROBE = "http_probe"
    GRPC_UNARY = "grpc_unary"
    GRPC_STREAM = "grpc_stream"
    QUEUE_PRODUCE = "queue_produce"


@dataclass(frozen=True)
class Target:
    name: str
    kind: TargetKind
    address: str  # URL for http_probe, host:port for grpc, bootstrap servers for queue


def parse_overrides(raw: str | None) -> dict[str, str]:
    """Parse "name=address,name2=address2"."""
    out: dict[str, str] = {}
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, address = part.partition("=")
        if not sep or not name.strip() or not address.strip():
            raise ConfigurationError(f"Invalid target override: {part!r} (expected name=address)")
        out[name.strip()] = address.strip()
    return out


class TargetRegistry:
    """Immutable, ordered set of targets with per-name address overrides."""

    def __init__(self, targets: Iterable[Target], overrides: Mapping[str, str] | None = None) -> None:
        targets = tuple(targets)
        by_name: dict[str, Target] = {}
        for t in targets:
            if not t.name:
                raise ConfigurationError("Target name must be non-empty")
            if t.name in by_name:
                raise ConfigurationError(f"Duplicate target name: {t.name}")
            if not t.address:
                raise ConfigurationError(f"Target {t.name} has no address")
            by_name[t.name] = t

        unknown = sorted(set(overrides or {}) - set(by_name))
        if unknown:
            raise ConfigurationError(f"Address override for unknown target(s): {', '.join(unknown)}")

        self._targets = targets
        self._by_name = MappingProxyType(by_name)
        self._overrides = MappingProxyType(dict(overrides or {}))

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def names(self) -> list[str]:
        return [t.name for t in self._targets]

    def get(self, name: str) -> Target:
        t = self._by_name.get(name)
        if t is None:
            raise ConfigurationError(f"Unknown target: {name}")
        return t

    def resolve(self, name: str) -> str:
        t = self.get(name)
        return self._overrides.get(name) or t.address


def default_targets(s: Settings) -> list[Target]:
    brokers = s.kafka_brokers()
    if not brokers:
        raise ConfigurationError("KAFKA_BROKERS is empty")
    return [
        Target("database-sql", TargetKind.HTTP_PROBE, f"http://{s.DB_TRIGGER_HOST}:{s.PORT_DB}/trigger-crud"),
        Target("kafka-go", TargetKind.QUEUE_PRODUCE, ",".join(brokers)),
        Target("grpc-unary", TargetKind.GRPC_UNARY, s.GRPC_SERVER_ADDR),
        Target("grpc-stream", TargetKind.GRPC_STREAM, s.GRPC_SERVER_ADDR),
        Target("http-rest", TargetKind.HTTP_PROBE, s.HTTP_REST_PROBE_URL),
    ]


def build_registry(s: Settings) -> TargetRegistry:
    return TargetRegistry(default_targets(s), overrides=parse_overrides(s.TARGET_ADDRESSES))
