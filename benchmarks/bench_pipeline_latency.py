"""Benchmark: end-to-end pipeline latency with keyword matchers installed.

Each iteration discovers, loads, runs, ranks, and formats every matcher,
the way one hook invocation does.
"""
from __future__ import annotations

import json
import sys
import tempfile
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prompt_router.config import RouterConfig
from prompt_router.pipeline import MatchPipeline

_MATCHERS: int = 20
_WARMUP: int = 5
_ITERATIONS: int = 100

_PAYLOAD = {
    "prompt": "help me write a dockerfile and a compose file",
    "cwd": "/tmp",
    "session_id": "bench",
    "transcript_path": "/tmp/does-not-exist.jsonl",
    "permission_mode": "default",
    "hook_event_name": "UserPromptSubmit",
}

_SOURCE = """
KEYWORDS = ("docker", "compose", "skill-{index}")

def match(context):
    prompt = context.prompt.lower()
    return {{"version": "2.0", "matchCount": sum(1 for k in KEYWORDS if k in prompt)}}
"""


def bench_pipeline_latency() -> dict[str, object]:
    """Benchmark MatchPipeline.run_json() with ``_MATCHERS`` capabilities.

    Returns
    -------
    dict with keys: operation, matchers, iterations, total_seconds,
    ops_per_second, avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    with tempfile.TemporaryDirectory() as tmp:
        project = Path(tmp) / "project"
        home = Path(tmp) / "home"
        home.mkdir()
        for index in range(_MATCHERS):
            matcher_dir = project / ".claude" / "skills" / f"skill-{index}" / "rio"
            matcher_dir.mkdir(parents=True)
            (matcher_dir / "UserPromptSubmit.rio.matcher.py").write_text(
                _SOURCE.format(index=index), encoding="utf-8"
            )

        pipeline = MatchPipeline(RouterConfig(project_dir=project, home_dir=home))
        raw = json.dumps(_PAYLOAD)

        for _ in range(_WARMUP):
            pipeline.run_json(raw)

        latencies_ms: list[float] = []
        for _ in range(_ITERATIONS):
            t0 = time.perf_counter()
            pipeline.run_json(raw)
            latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "pipeline_latency",
        "matchers": _MATCHERS,
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_pipeline_latency] {result['operation']} ({_MATCHERS} matchers): "
        f"p99={result['p99_latency_ms']:.2f}ms  "
        f"mean={result['avg_latency_ms']:.2f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_pipeline_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "pipeline_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
