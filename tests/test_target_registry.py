from __future__ import annotations

import pytest


def test_default_targets_follow_declaration_order():
    from app.core.config import Settings
    from app.fanout.registry import TargetKind, build_registry

    reg = build_registry(Settings(PORT_DB=9001, DB_TRIGGER_HOST="db", KAFKA_BROKERS="k1:9092, k2:9092"))

    assert reg.names() == ["database-sql", "kafka-go", "grpc-unary", "grpc-stream", "http-rest"]
    assert reg.get("kafka-go").kind is TargetKind.QUEUE_PRODUCE
    assert reg.resolve("database-sql") == "http://db:9001/trigger-crud"
    assert reg.resolve("kafka-go") == "k1:9092,k2:9092"


def test_env_override_wins_over_default(monkeypatch):
    monkeypatch.setenv("TARGET_ADDRESSES", "grpc-unary=10.0.0.5:6000, http-rest=http://probe.local/x")
    monkeypatch.setenv("GRPC_SERVER_ADDR", "grpc:50051")

    from app.core.config import Settings
    from app.fanout.registry import build_registry

    reg = build_registry(Settings())
    assert reg.resolve("grpc-unary") == "10.0.0.5:6000"
    assert reg.resolve("grpc-stream") == "grpc:50051"
    assert reg.resolve("http-rest") == "http://probe.local/x"


def test_unknown_name_raises_configuration_error():
    from app.core.errors import ConfigurationError
    from app.fanout.registry import Target, TargetKind, TargetRegistry

    reg = TargetRegistry([Target("a", TargetKind.HTTP_PROBE, "http://a")])
    with pytest.raises(ConfigurationError):
        reg.resolve("nope")
    assert "nope" not in reg


def test_duplicate_names_rejected():
    from app.core.errors import ConfigurationError
    from app.fanout.registry import Target, TargetKind, TargetRegistry

    with pytest.raises(ConfigurationError):
        TargetRegistry([Target("a", TargetKind.HTTP_PROBE, "x"), Target("a", TargetKind.GRPC_UNARY, "y")])


def test_malformed_override_rejected():
    from app.core.errors import ConfigurationError
    from app.fanout.registry import parse_overrides

    assert parse_overrides("") == {}
    assert parse_overrides("a=b") == {"a": "b"}
    with pytest.raises(ConfigurationError):
        parse_overrides("just-a-name")


def test_override_for_unknown_target_rejected():
    from app.core.config import Settings
    from app.core.errors import ConfigurationError
    from app.fanout.registry import build_registry

    with pytest.raises(ConfigurationError, match="grpc-unray"):
        build_registry(Settings(TARGET_ADDRESSES="grpc-unray=10.0.0.5:6000"))


def test_empty_kafka_brokers_rejected():
    from app.core.config import Settings
    from app.core.errors import ConfigurationError
    from app.fanout.registry import build_registry

    with pytest.raises(ConfigurationError, match="KAFKA_BROKERS"):
        build_registry(Settings(KAFKA_BROKERS=" , "))


def test_zero_fanout_concurrency_rejected():
    from app.core.config import Settings
    from app.core.errors import ConfigurationError
    from app.fanout.dispatcher import FanOutDispatcher

    with pytest.raises(ConfigurationError, match="FANOUT_MAX_CONCURRENCY"):
        FanOutDispatcher.from_settings(Settings(FANOUT_MAX_CONCURRENCY=0, TARGET_ADDRESSES=""))
