from __future__ import annotations

import json
import random

from app.fanout.registry import Target, TargetKind
from tests.utils_fakes import FakeProducer

TARGET = Target("kafka-go", TargetKind.QUEUE_PRODUCE, "k1:9092,k2:9092")


def _adapter(producer=None, factory=None):
    from app.fanout.adapters.queue_produce import QueueProduceAdapter

    seen = {}

    def default_factory(brokers, *, timeout_s):
        seen["brokers"] = brokers
        return producer

    return QueueProduceAdapter(orders_topic="orders", payments_topic="payments", producer_factory=factory or default_factory), seen


def _invoke(adapter):
    from app.fanout.context import CallContext

    return adapter.invoke(target=TARGET, address=TARGET.address, ctx=CallContext.background())


def test_one_write_per_topic_with_correlated_ids():
    producer = FakeProducer()
    adapter, seen = _adapter(producer)

    o = _invoke(adapter)

    assert o.ok is True
    assert o.status == "ACKED"
    assert seen["brokers"] == ["k1:9092", "k2:9092"]
    assert [m["topic"] for m in producer.sent] == ["orders", "payments"]

    order = json.loads(producer.sent[0]["value"])
    payment = json.loads(producer.sent[1]["value"])
    assert payment["order_id"] == order["order_id"] == o.data["order_id"]
    assert payment["payment_id"] != order["order_id"]
    assert payment["amount"] == order["amount"]
    assert producer.sent[0]["key"] == order["order_id"].encode()
    assert producer.sent[1]["key"] == payment["payment_id"].encode()
    assert all(m["headers"] == [("content-type", b"application/json")] for m in producer.sent)
    assert producer.closed is True


def test_order_write_failure_skips_payment():
    producer = FakeProducer(fail_topics=("orders",))
    adapter, _ = _adapter(producer)

    o = _invoke(adapter)

    assert o.ok is False
    assert o.status == "FAILED"
    assert [m["topic"] for m in producer.sent] == ["orders"]
    assert "order write failed" in o.detail
    assert o.data["produced"] == {}


def test_payment_failure_reports_failure_after_order_was_produced():
    producer = FakeProducer(fail_topics=("payments",))
    adapter, _ = _adapter(producer)

    o = _invoke(adapter)

    assert o.ok is False
    assert "payment write failed" in o.detail
    assert list(o.data["produced"]) == ["orders"]
    assert [m["topic"] for m in producer.sent] == ["orders", "payments"]


def test_unreachable_broker_is_failed_outcome():
    from kafka.errors import KafkaTimeoutError

    def factory(brokers, *, timeout_s):
        raise KafkaTimeoutError("bootstrap brokers unreachable")

    adapter, _ = _adapter(factory=factory)
    o = _invoke(adapter)

    assert o.ok is False
    assert o.status == "FAILED"
    assert "KafkaTimeoutError" in o.detail


def test_amount_is_bounded_and_rounded():
    from app.fanout.events import random_amount

    rng = random.Random(7)
    for _ in range(200):
        a = random_amount(rng)
        assert 100 <= a <= 5100
        assert round(a, 2) == a


def test_cancel_while_waiting_for_payment_ack_is_failed():
    from app.fanout.context import CallContext

    ctx = CallContext.background()

    class CancelOnPayment(FakeProducer):
        def send(self, topic, key=None, value=None, headers=None):
            fut = super().send(topic, key=key, value=value, headers=headers)
            if topic == "payments":
                ctx.cancel("client disconnected")
            return fut

    producer = CancelOnPayment()
    adapter, _ = _adapter(producer)
    o = adapter.invoke(target=TARGET, address=TARGET.address, ctx=ctx)

    assert o.ok is False
    assert o.status == "FAILED"
    assert "payment write failed" in o.detail
    assert "client disconnected" in o.detail
    assert "orders" in o.data["produced"]
    assert producer.closed is True


def test_producer_gets_parent_remaining_deadline():
    from app.fanout.context import CallContext

    seen = {}

    def factory(brokers, *, timeout_s):
        seen["timeout_s"] = timeout_s
        return FakeProducer()

    adapter, _ = _adapter(factory=factory)
    o = adapter.invoke(target=TARGET, address=TARGET.address, ctx=CallContext.with_timeout(0.5))

    assert o.ok is True
    assert 0 < seen["timeout_s"] <= 0.5
