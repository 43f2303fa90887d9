from __future__ import annotations

import time

import pytest


def test_child_inherits_shorter_deadline():
    from app.fanout.context import CallContext

    parent = CallContext.with_timeout(0.5)
    child = parent.child(30)
    assert child.remaining() <= 0.5

    unbounded = CallContext.background().child(None)
    assert unbounded.remaining() is None


def test_cancel_propagates_to_children_and_callbacks():
    from app.core.errors import TransportError
    from app.fanout.context import CallContext

    parent = CallContext.background()
    child = parent.child(5)
    hits = []
    child.add_callback(lambda: hits.append("x"))

    parent.cancel("client disconnected")

    assert child.cancelled
    assert child.reason == "client disconnected"
    assert hits == ["x"]
    with pytest.raises(TransportError):
        child.check()

    # Late registration fires immediately.
    child.add_callback(lambda: hits.append("late"))
    assert hits == ["x", "late"]


def test_expired_deadline_fails_check():
    from app.core.errors import TransportError
    from app.fanout.context import CallContext

    ctx = CallContext.with_timeout(0.01)
    time.sleep(0.02)
    assert ctx.expired()
    with pytest.raises(TransportError, match="deadline"):
        ctx.check()
