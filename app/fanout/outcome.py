from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

FAILED = "FAILED"


def _truncate(s: str, n: int = 500) -> str:
    s = s or ""
    return s if len(s) <= n else s[:n] + "…"


@dataclass(frozen=True)
class Outcome:
    service: str
    status: str  # transport status token ("200 OK", "OK") | FAILED
    ok: bool
    detail: str | None = None  # only set on failure
    data: dict | None = None

    def __post_init__(self) -> None:
        if not self.service:
            raise ValueError("Outcome.service must be non-empty")

    @classmethod
    def success(cls, service: str, status: str, *, data: dict | None = None) -> Outcome:
        return cls(service=service, status=status, ok=True, data=data)

    @classmethod
    def failed(cls, service: str, detail: str, *, data: dict | None = None) -> Outcome:
        return cls(service=service, status=FAILED, ok=False, detail=_truncate(detail), data=data)

    def to_dict(self) -> dict:
        out: dict = {"service": self.service, "status": self.status, "ok": self.ok}
        if self.detail is not None:
            out["detail"] = self.detail
        if self.data is not None:
            out["data"] = self.data
        return out


class AggregateReport:
    """Outcomes of one fan-out, in target declaration order."""

    __slots__ = ("_outcomes",)

    def __init__(self, outcomes: Iterable[Outcome]) -> None:
        self._outcomes: tuple[Outcome, ...] = tuple(outcomes)

    def __iter__(self) -> Iterator[Outcome]:
        return iter(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def __getitem__(self, i: int) -> Outcome:
        return self._outcomes[i]

    def __repr__(self) -> str:
        return f"AggregateReport({list(self._outcomes)!r})"

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        return self._outcomes

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self._outcomes)

    @property
    def failed(self) -> list[str]:
        return [o.service for o in self._outcomes if not o.ok]

    def to_list(self) -> list[dict]:
        return [o.to_dict() for o in self._outcomes]
