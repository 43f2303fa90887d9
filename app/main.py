from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_dispatcher
from app.api.routers.books import router as books_router
from app.api.routers.trigger import router as trigger_router
from app.core.config import settings
from app.core.errors import ConfigurationError
from app.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
log = logging.getLogger("app")

app = FastAPI(title=settings.APP_NAME)


@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    log.warning("configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.on_event("startup")
def _startup() -> None:
    dispatcher = get_dispatcher()
    for t in dispatcher.registry:
        log.info("Startup: target %s (%s) -> %s", t.name, t.kind.value, dispatcher.registry.resolve(t.name))


@app.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "app": settings.APP_NAME, "targets": get_dispatcher().registry.names()}


app.include_router(trigger_router, prefix="/trigger", tags=["trigger"])
app.include_router(books_router, prefix="/books", tags=["books"])


def run() -> None:
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT_HTTP)


if __name__ == "__main__":
    run()
