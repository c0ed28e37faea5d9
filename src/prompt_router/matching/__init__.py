"""Matching subpackage.

Loads matcher modules, runs them in isolation, validates what they
return, ranks the relevant ones, and renders the host reply.

Public surface
--------------
- load_matcher / Matcher / CallableMatcher  — module loading and adaptation
- PluginLoadError / InvalidExportError      — load-stage failures
- PluginExecutor / PluginOutcome / OutcomeStatus — isolated evaluation
- validate / ValidationResult / FieldError / ErrorCode — result schemas
- LegacyResult / CurrentResult / Priority / Relevance — typed results
- rank / RankedItem / MAX_MATCH_COUNT       — scoring
- format_suggestions / build_reply / HookReply — output
"""
from __future__ import annotations

from prompt_router.matching.executor import OutcomeStatus, PluginExecutor, PluginOutcome
from prompt_router.matching.formatter import (
    HookReply,
    build_reply,
    format_suggestions,
    invocation_hint,
)
from prompt_router.matching.loader import (
    CallableMatcher,
    InvalidExportError,
    Matcher,
    PluginLoadError,
    load_matcher,
)
from prompt_router.matching.ranker import MAX_MATCH_COUNT, RankedItem, rank
from prompt_router.matching.results import (
    CurrentResult,
    LegacyResult,
    PluginResult,
    Priority,
    Relevance,
)
from prompt_router.matching.validator import ErrorCode, FieldError, ValidationResult, validate

__all__ = [
    "CallableMatcher",
    "CurrentResult",
    "ErrorCode",
    "FieldError",
    "HookReply",
    "InvalidExportError",
    "LegacyResult",
    "MAX_MATCH_COUNT",
    "Matcher",
    "OutcomeStatus",
    "PluginExecutor",
    "PluginLoadError",
    "PluginOutcome",
    "PluginResult",
    "Priority",
    "RankedItem",
    "Relevance",
    "ValidationResult",
    "build_reply",
    "format_suggestions",
    "invocation_hint",
    "load_matcher",
    "rank",
    "validate",
]
