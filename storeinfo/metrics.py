import copy
import threading
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class OperationCounts:
    ok: int = 0
    failed: int = 0


@dataclass
class Totals:
    requests: int = 0
    bytes: int = 0
    transport_errors: int = 0
    request_ms_sum: float = 0.0
    operations: Dict[str, OperationCounts] = field(default_factory=dict)

    @property
    def avg_request_ms(self) -> float:
        return self.request_ms_sum / self.requests if self.requests else 0.0


class Metrics:
    """Request totals and per-operation outcomes, shared by the pool's worker threads."""

    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()

    def record_request(self, ok: bool, bytes_read: int, elapsed_ms: float) -> None:
        with self._lock:
            self._totals.requests += 1
            self._totals.bytes += max(0, bytes_read)
            self._totals.request_ms_sum += elapsed_ms
            if not ok:
                self._totals.transport_errors += 1

    def record_outcome(self, operation: str, ok: bool) -> None:
        with self._lock:
            counts = self._totals.operations.setdefault(operation, OperationCounts())
            if ok:
                counts.ok += 1
            else:
                counts.failed += 1

    def snapshot(self) -> Totals:
        with self._lock:
            return copy.deepcopy(self._totals)
