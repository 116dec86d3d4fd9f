from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass
class RouteStats:
    requests: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    by_status_class: dict[str, int] = field(default_factory=dict)

    def record(self, status_code: int, duration_ms: float) -> None:
        self.requests += 1
        self.total_ms += duration_ms
        self.max_ms = max(self.max_ms, duration_ms)
        status_class = f"{status_code // 100}xx"
        self.by_status_class[status_class] = self.by_status_class.get(status_class, 0) + 1

    @property
    def errors(self) -> int:
        return sum(count for status_class, count in self.by_status_class.items() if status_class in {"4xx", "5xx"})


class RouteMetrics:
    """Latency and status counts per (method, route template).

    Keys are route templates such as ``/api/deals/{deal_id}/redeem``, so the
    registry size is bounded by the number of declared routes.
    """

    def __init__(self) -> None:
        self._stats: dict[tuple[str, str], RouteStats] = {}
        self._lock = Lock()

    def observe(self, route: str, method: str, status_code: int, duration_ms: float) -> None:
        with self._lock:
            self._stats.setdefault((method, route), RouteStats()).record(status_code, duration_ms)

    def snapshot(self) -> dict[str, dict]:
        with self._lock:
            return {
                f"{method} {route}": {
                    "total_requests": stats.requests,
                    "avg_duration_ms": round(stats.total_ms / stats.requests, 2) if stats.requests else 0.0,
                    "max_duration_ms": round(stats.max_ms, 2),
                    "error_count": stats.errors,
                    "by_status_class": dict(stats.by_status_class),
                }
                for (method, route), stats in sorted(self._stats.items())
            }

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


request_metrics = RouteMetrics()
