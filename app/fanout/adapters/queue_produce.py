from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from kafka import KafkaProducer
from kafka.errors import KafkaError

from app.core.errors import ProtocolError, SerializationError, TransportError
from app.fanout.context import CallContext
from app.fanout.events import EventPair, encode_event, new_event_pair
from app.fanout.outcome import Outcome
from app.fanout.registry import Target, TargetKind

log = logging.getLogger("fanout.queue_produce")

CONTENT_TYPE_HEADER = ("content-type", b"application/json")

ProducerFactory = Callable[..., Any]


def kafka_producer(brokers: list[str], *, timeout_s: float) -> KafkaProducer:
    timeout_ms = max(1, int(timeout_s * 1000))
    return KafkaProducer(
        bootstrap_servers=brokers,
        acks="all",
        retries=0,
        linger_ms=10,
        request_timeout_ms=timeout_ms,
        max_block_ms=timeout_ms,
    )


def produce_json(producer, *, topic: str, key: str, value: bytes, ctx: CallContext) -> dict:
    """Write one message and block until the broker acknowledges it."""
    ctx.check()
    try:
        fut = producer.send(topic, key=key.encode("utf-8"), value=value, headers=[CONTENT_TYPE_HEADER])
        md = fut.get(timeout=ctx.remaining())
    except KafkaError as e:
        if getattr(e, "retriable", False):
            raise TransportError(f"{type(e).__name__}: {e}") from e
        raise ProtocolError(f"{type(e).__name__}: {e}") from e
    log.info("produced topic=%s key=%s", topic, key)
    return {"partition": getattr(md, "partition", None), "offset": getattr(md, "offset", None)}


@dataclass(frozen=True)
class QueueProduceAdapter:
    """Produce a correlated OrderCreated + PaymentReceived pair to two topics.

    Writes are sequential. A failed payment write does not undo the order write
    already acknowledged; the outcome reports which topics were produced.
    """

    orders_topic: str = "orders"
    payments_topic: str = "payments"
    timeout_s: float = 5.0
    producer_factory: ProducerFactory = kafka_producer
    event_factory: Callable[[], EventPair] = field(default=new_event_pair)
    kind: TargetKind = TargetKind.QUEUE_PRODUCE

    def invoke(self, *, target: Target, address: str, ctx: CallContext) -> Outcome:
        call_ctx = ctx.child(self.timeout_s)
        brokers = [b.strip() for b in address.split(",") if b.strip()]
        events = self.event_factory()
        order, payment = events.order, events.payment
        data: dict = {"order_id": order.order_id, "payment_id": payment.payment_id, "amount": order.amount, "produced": {}}

        producer = None
        try:
            call_ctx.check()
            try:
                producer = self.producer_factory(brokers, timeout_s=call_ctx.remaining())
            except KafkaError as e:
                raise TransportError(f"{type(e).__name__}: {e}") from e

            stage = "order"
            try:
                data["produced"][self.orders_topic] = produce_json(
                    producer, topic=self.orders_topic, key=order.order_id, value=encode_event(order), ctx=call_ctx
                )
                stage = "payment"
                call_ctx.check()
                data["produced"][self.payments_topic] = produce_json(
                    producer, topic=self.payments_topic, key=payment.payment_id, value=encode_event(payment), ctx=call_ctx
                )
                call_ctx.check()
            except (TransportError, ProtocolError, SerializationError) as e:
                raise type(e)(f"{stage} write failed: {e}") from e
        except Exception as e:
            log.warning("produce %s failed (produced=%s): %s", target.name, list(data["produced"]), e)
            return Outcome.failed(target.name, f"{type(e).__name__}: {e}", data=data)
        finally:
            if producer is not None:
                try:
                    producer.close(timeout=1)
                except Exception:
                    log.warning("producer close failed", exc_info=True)

        log.info("produce %s ok order=%s payment=%s", target.name, order.order_id, payment.payment_id)
        return Outcome.success(target.name, "ACKED", data=data)
