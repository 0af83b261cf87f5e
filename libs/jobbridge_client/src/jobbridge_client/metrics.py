from __future__ import annotations

import threading

from common.utils import now_utc_iso
from pydantic import BaseModel


class MetricsSnapshot(BaseModel):
    generated_at: str
    totals: dict[str, int]
    endpoints: dict[str, dict[str, float | int]]


class ClientMetrics:
    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._totals = {"calls": 0, "errors": 0, "transport_errors": 0}
        self._endpoints: dict[str, dict[str, float | int]] = {}

    def _endpoint(self, name: str) -> dict[str, float | int]:
        return self._endpoints.setdefault(
            name,
            {
                "count": 0,
                "2xx": 0,
                "4xx": 0,
                "5xx": 0,
                "transport_errors": 0,
                "latency_ms_sum": 0.0,
                "latency_ms_avg": 0.0,
            },
        )

    def _record_latency(self, endpoint: dict[str, float | int], duration_ms: float) -> None:
        endpoint["count"] = int(endpoint["count"]) + 1
        endpoint["latency_ms_sum"] = float(endpoint["latency_ms_sum"]) + duration_ms
        endpoint["latency_ms_avg"] = float(endpoint["latency_ms_sum"]) / int(endpoint["count"])

    def observe(self, *, endpoint: str, status_code: int, duration_ms: float) -> None:
        bucket = f"{status_code // 100}xx"
        with self._lock:
            self._totals["calls"] += 1
            if status_code != 200:
                self._totals["errors"] += 1
            stats = self._endpoint(endpoint)
            if bucket in ("2xx", "4xx", "5xx"):
                stats[bucket] = int(stats[bucket]) + 1
            self._record_latency(stats, duration_ms)

    def observe_transport_error(self, *, endpoint: str, duration_ms: float) -> None:
        with self._lock:
            self._totals["calls"] += 1
            self._totals["errors"] += 1
            self._totals["transport_errors"] += 1
            stats = self._endpoint(endpoint)
            stats["transport_errors"] = int(stats["transport_errors"]) + 1
            self._record_latency(stats, duration_ms)

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                generated_at=now_utc_iso(),
                totals=dict(self._totals),
                endpoints={key: dict(value) for key, value in self._endpoints.items()},
            )
