"""Benchmark: fast filter latency on a tree with no matchers installed.

This is the path taken for almost every prompt, so it has to stay close
to the cost of a few failed directory lookups.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import prompt_router_filter

_WARMUP: int = 200
_ITERATIONS: int = 5_000


def bench_filter_latency() -> dict[str, object]:
    """Benchmark find_candidates() when nothing is installed.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    with tempfile.TemporaryDirectory() as tmp:
        project = Path(tmp) / "project"
        home = Path(tmp) / "home"
        # skills dir present but empty, the usual state of a fresh project
        (project / ".claude" / "skills").mkdir(parents=True)
        home.mkdir()

        for _ in range(_WARMUP):
            prompt_router_filter.find_candidates(project, home)

        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            prompt_router_filter.find_candidates(project, home)
            latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "filter_no_matchers_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_filter_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_filter_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "filter_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
