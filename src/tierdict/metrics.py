from __future__ import annotations

import threading
from collections import Counter, defaultdict, deque
from dataclasses import dataclass, field
from typing import Deque, Dict


@dataclass
class PathStats:
    latencies_ms: Deque[float]
    total: int = 0
    errors: int = 0
    timeouts: int = 0


@dataclass
class MetricsRegistry:
    """Process-local counters exposed by `/metrics`.

    - パス毎の直近レイテンシ窓（p95 算出用）とエラー/タイムアウト件数
    - 応答解析でどの戦略（whole/fenced/bracket/heuristic）が使われたかの件数
    """

    window: int = 200
    _paths: Dict[str, PathStats] = field(init=False, default_factory=dict)
    _strategies: Counter = field(init=False, default_factory=Counter)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        self._paths = defaultdict(lambda: PathStats(latencies_ms=deque(maxlen=self.window)))

    def record(self, path: str, latency_ms: float, *, is_error: bool = False, is_timeout: bool = False) -> None:
        with self._lock:
            stats = self._paths[path]
            stats.latencies_ms.append(latency_ms)
            stats.total += 1
            stats.errors += int(is_error)
            stats.timeouts += int(is_timeout)

    def record_strategy(self, strategy: str) -> None:
        with self._lock:
            self._strategies[strategy] += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            paths = {
                path: {
                    "p95_ms": round(p95(list(stats.latencies_ms)), 2),
                    "count": stats.total,
                    "errors": stats.errors,
                    "timeouts": stats.timeouts,
                }
                for path, stats in self._paths.items()
            }
            return {"paths": paths, "parse_strategies": dict(self._strategies)}

    def reset(self) -> None:
        with self._lock:
            self._paths.clear()
            self._strategies.clear()


def p95(values: list[float]) -> float:
    """Nearest-rank style p95 over the window; 空なら 0。"""
    if not values:
        return 0.0
    ordered = sorted(values)
    return ordered[int(0.95 * (len(ordered) - 1))]


registry = MetricsRegistry()
