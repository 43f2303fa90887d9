from __future__ import annotations

import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel

from app.core.errors import SerializationError


class OrderCreated(BaseModel):
    order_id: str
    amount: float
    time: datetime


class PaymentReceived(BaseModel):
    payment_id: str
    order_id: str  # reference to OrderCreated.order_id
    amount: float
    time: datetime


@dataclass(frozen=True)
class EventPair:
    order: OrderCreated
    payment: PaymentReceived


def random_amount(rng: random.Random | None = None) -> float:
    """Uniform in [100, 5100), rounded to cents."""
    r = (rng or random).random()
    return round(r * 5000 + 100, 2)


def new_event_pair(*, rng: random.Random | None = None) -> EventPair:
    seed = time.time_ns()
    now = datetime.now(timezone.utc)
    amount = random_amount(rng)
    order = OrderCreated(order_id=f"O-{seed}", amount=amount, time=now)
    payment = PaymentReceived(payment_id=f"P-{seed}", order_id=order.order_id, amount=amount, time=now)
    return EventPair(order=order, payment=payment)


def encode_event(evt: BaseModel) -> bytes:
    try:
        return evt.model_dump_json().encode("utf-8")
    except Exception as e:
        raise SerializationError(f"encode {type(evt).__name__}: {e}") from e
