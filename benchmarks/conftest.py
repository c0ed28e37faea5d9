"""Shared bootstrap for prompt-router benchmarks."""
from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT = Path(__file__).parent.parent
_SRC = _REPO_ROOT / "src"
_BENCHMARKS = _REPO_ROOT / "benchmarks"

for _path in [str(_SRC), str(_BENCHMARKS)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

import prompt_router_filter
from prompt_router.config import RouterConfig
from prompt_router.pipeline import MatchPipeline

__all__ = ["prompt_router_filter", "RouterConfig", "MatchPipeline"]
