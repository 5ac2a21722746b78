import threading
import time
from collections import Counter, defaultdict
from typing import Dict, Optional


class MetricsCollector:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._start_time = time.time()
        self._requests_by_endpoint: Counter = Counter()
        self._requests_by_application: Counter = Counter()
        self._latency_sum_by_endpoint: Dict[str, float] = defaultdict(float)
        self._errors_by_status: Counter = Counter()
        self._errors_by_kind: Counter = Counter()

    def record_request(
        self,
        endpoint: str,
        application: Optional[str],
        status_code: int,
        latency_ms: float,
        error_kind: Optional[str] = None,
    ) -> None:
        with self._lock:
            self._requests_by_endpoint[endpoint] += 1
            self._latency_sum_by_endpoint[endpoint] += latency_ms
            if status_code < 400:
                if application:
                    self._requests_by_application[application] += 1
                return
            self._errors_by_status[str(status_code)] += 1
            if error_kind:
                self._errors_by_kind[error_kind] += 1

    def snapshot(self) -> dict:
        with self._lock:
            requests_total = sum(self._requests_by_endpoint.values())
            latency_total = sum(self._latency_sum_by_endpoint.values())
            by_endpoint_avg = {
                endpoint: total / self._requests_by_endpoint[endpoint]
                for endpoint, total in self._latency_sum_by_endpoint.items()
            }
            return {
                "uptimeSeconds": int(time.time() - self._start_time),
                "requests": {
                    "total": requests_total,
                    "byApplication": dict(self._requests_by_application),
                    "byEndpoint": dict(self._requests_by_endpoint),
                },
                "latencyMs": {
                    "avgOverall": latency_total / requests_total if requests_total else 0.0,
                    "byEndpointAvg": by_endpoint_avg,
                },
                "errors": {
                    "total": sum(self._errors_by_status.values()),
                    "byStatus": dict(self._errors_by_status),
                    "byKind": dict(self._errors_by_kind),
                },
            }
