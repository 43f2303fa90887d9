from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool

from app.api.deps import get_dispatcher
from app.core.errors import ConfigurationError
from app.fanout.adapters.grpc_stream import GrpcStreamAdapter
from app.fanout.adapters.registry import get_adapter
from app.fanout.context import CallContext
from app.fanout.dispatcher import FanOutDispatcher
from app.fanout.registry import TargetKind

log = logging.getLogger("api.trigger")

router = APIRouter()

T = TypeVar("T")

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1

# Legacy per-service routes -> target name
ROUTE_TARGETS = {
    "db": "database-sql",
    "kafka": "kafka-go",
    "grpcunary": "grpc-unary",
    "grpcstream": "grpc-stream",
}


async def _cancel_on_disconnect(request: Request, ctx: CallContext, poll_s: float = 0.2) -> None:
    while not ctx.cancelled:
        if await request.is_disconnected():
            log.info("client disconnected; cancelling %s", request.url.path)
            ctx.cancel("client disconnected")
            return
        await asyncio.sleep(poll_s)


async def _run(request: Request, fn: Callable[[CallContext], T]) -> T:
    ctx = CallContext.background()
    watcher = asyncio.create_task(_cancel_on_disconnect(request, ctx))
    try:
        return await run_in_threadpool(fn, ctx)
    finally:
        watcher.cancel()


async def _one(request: Request, dispatcher: FanOutDispatcher, name: str, adapter=None) -> dict:
    try:
        dispatcher.registry.get(name)
    except ConfigurationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    outcome = await _run(request, lambda ctx: dispatcher.dispatch_one(name, ctx, adapter=adapter))
    return outcome.to_dict()


def _parse_bound(raw: str | None, default: int, *, name: str) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise HTTPException(status_code=500, detail=f"malformed '{name}': {raw!r}")
    if not INT32_MIN <= value <= INT32_MAX:
        raise HTTPException(status_code=500, detail=f"'{name}' out of int32 range: {value}")
    return value


@router.get("/allservices")
async def trigger_all(request: Request, dispatcher: FanOutDispatcher = Depends(get_dispatcher)) -> list[dict]:
    report = await _run(request, dispatcher.dispatch_all)
    return report.to_list()


@router.get("/grpcstream")
async def trigger_grpc_stream(
    request: Request,
    frm: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    dispatcher: FanOutDispatcher = Depends(get_dispatcher),
) -> dict:
    adapter = None
    if frm is not None or to is not None:
        base = get_adapter(dispatcher.adapters, TargetKind.GRPC_STREAM)
        if not isinstance(base, GrpcStreamAdapter):
            raise HTTPException(status_code=500, detail="stream target does not accept a from/to range")
        adapter = dataclasses.replace(
            base,
            frm=_parse_bound(frm, base.frm, name="from"),
            to=_parse_bound(to, base.to, name="to"),
        )
    return await _one(request, dispatcher, ROUTE_TARGETS["grpcstream"], adapter)


@router.get("/target/{name}")
async def trigger_target(name: str, request: Request, dispatcher: FanOutDispatcher = Depends(get_dispatcher)) -> dict:
    return await _one(request, dispatcher, name)


def _fixed_route(target_name: str):
    async def handler(request: Request, dispatcher: FanOutDispatcher = Depends(get_dispatcher)) -> dict:
        return await _one(request, dispatcher, target_name)

    return handler


for _path, _name in ROUTE_TARGETS.items():
    if _path == "grpcstream":
        continue
    router.add_api_route(f"/{_path}", _fixed_route(_name), methods=["GET"], name=f"trigger_{_path}")
