from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from app.core.config import Settings
from app.core.errors import ConfigurationError
from app.fanout.adapters.base import ProtocolAdapter
from app.fanout.adapters.registry import AdapterMap, build_adapters, get_adapter
from app.fanout.context import CallContext
from app.fanout.outcome import AggregateReport, Outcome
from app.fanout.registry import Target, TargetRegistry, build_registry

log = logging.getLogger("fanout.dispatcher")


class FanOutDispatcher:
    """Invoke every configured target and collect one Outcome per target.

    Calls run on a bounded thread pool; the report keeps target declaration
    order whatever the completion order. A failing target never stops the others.
    """

    def __init__(self, registry: TargetRegistry, adapters: AdapterMap, *, max_concurrency: int = 4) -> None:
        if max_concurrency < 1:
            raise ConfigurationError(f"FANOUT_MAX_CONCURRENCY must be >= 1, got {max_concurrency}")
        self.registry = registry
        self.adapters = adapters
        self.max_concurrency = max_concurrency

    @classmethod
    def from_settings(cls, s: Settings) -> FanOutDispatcher:
        return cls(build_registry(s), build_adapters(s), max_concurrency=s.FANOUT_MAX_CONCURRENCY)

    def _invoke(self, target: Target, ctx: CallContext, adapter: ProtocolAdapter | None = None) -> Outcome:
        adapter = adapter or get_adapter(self.adapters, target.kind)
        address = self.registry.resolve(target.name)
        try:
            return adapter.invoke(target=target, address=address, ctx=ctx)
        except Exception as e:
            log.exception("adapter %s crashed for target %s", target.kind.value, target.name)
            return Outcome.failed(target.name, f"{type(e).__name__}: {e}")

    def dispatch_one(self, name: str, ctx: CallContext | None = None, *, adapter: ProtocolAdapter | None = None) -> Outcome:
        target = self.registry.get(name)  # ConfigurationError before any adapter runs
        return self._invoke(target, ctx or CallContext.background(), adapter)

    def dispatch_all(self, ctx: CallContext | None = None) -> AggregateReport:
        ctx = ctx or CallContext.background()
        targets = list(self.registry)
        if not targets:
            return AggregateReport([])

        # Resolve adapters up front so a misconfigured kind fails the request, not one slot.
        plan = [(t, get_adapter(self.adapters, t.kind)) for t in targets]
        slots: list[Outcome | None] = [None] * len(plan)

        workers = min(self.max_concurrency, len(plan))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as pool:
            futures = {pool.submit(self._invoke, t, ctx, a): i for i, (t, a) in enumerate(plan)}
            for fut, i in futures.items():
                slots[i] = fut.result()

        report = AggregateReport(o for o in slots if o is not None)
        log.info("fan-out done: %s targets, failed=%s", len(report), report.failed)
        return report
