import argparse
import os
import statistics
import time
from concurrent.futures import ThreadPoolExecutor

from fastapi.testclient import TestClient

from schema_registry.core import config
from schema_registry.main import create_app

_DOC = "openapi: 3.0.0\ninfo:\n  title: bench\n  version: '{n}'\npaths: {{}}\n"


def _timed(fn, *args, **kwargs):
    start = time.perf_counter()
    response = fn(*args, **kwargs)
    return response, (time.perf_counter() - start) * 1000


def _upload(client: TestClient, application: str, service: str, n: int):
    return _timed(
        client.post,
        "/api/v1/upload",
        data={"application": application, "service": service},
        files={"file": ("openapi.yaml", _DOC.format(n=n).encode("utf-8"))},
    )


def _report(label: str, latencies) -> float:
    p50 = statistics.median(latencies)
    p95 = statistics.quantiles(latencies, n=100)[94]
    print(f"{label}: p50={p50:.2f}ms p95={p95:.2f}ms")
    return p95


def main() -> None:
    parser = argparse.ArgumentParser(description="Upload/resolve benchmark")
    parser.add_argument("--application", default="bench-app")
    parser.add_argument("--service", default="bench-svc")
    parser.add_argument("--uploads", type=int, default=500)
    parser.add_argument("--queries", type=int, default=500)
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--threshold-ms", type=float, default=100.0)
    args = parser.parse_args()

    if not os.getenv("DB_PATH"):
        os.environ["DB_PATH"] = "./data/benchmark.db"
    if not os.getenv("STORAGE_ROOT"):
        os.environ["STORAGE_ROOT"] = "./data/benchmark-schemas"
    os.environ.setdefault("LOG_LEVEL", "WARNING")

    config.get_settings.cache_clear()
    client = TestClient(create_app())

    with ThreadPoolExecutor(max_workers=args.workers) as pool:
        results = list(
            pool.map(
                lambda n: _upload(client, args.application, args.service, n),
                range(args.uploads),
            )
        )
    versions = []
    for response, _ in results:
        if response.status_code != 201:
            raise SystemExit(f"Unexpected upload status: {response.status_code}")
        versions.append(response.json()["version"])
    versions.sort()
    first = versions[0]
    if versions != list(range(first, first + len(versions))):
        raise SystemExit("Assigned versions are not a gap-free sequence")
    _report("upload", [latency for _, latency in results])

    latencies = []
    for idx in range(args.queries):
        selector = "latest" if idx % 2 else str(versions[idx % len(versions)])
        response, latency = _timed(
            client.get,
            "/api/v1/schema",
            params={
                "application": args.application,
                "service": args.service,
                "version": selector,
            },
        )
        if response.status_code != 200:
            raise SystemExit(f"Unexpected resolve status: {response.status_code}")
        latencies.append(latency)

    p95 = _report("resolve", latencies)
    if p95 > args.threshold_ms:
        raise SystemExit(f"p95 {p95:.2f}ms exceeded threshold {args.threshold_ms}ms")


if __name__ == "__main__":
    main()
