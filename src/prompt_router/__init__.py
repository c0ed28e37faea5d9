"""prompt-router — prompt-time matching of skills, agents, and commands.

For every user prompt, discover the matcher modules installed next to the
host's skills, agents, and commands, run each one in isolation against the
prompt, validate and rank what they report, and hand the host a short list
of tools worth invoking.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.  The fast pre-filter lives in the separate
``prompt_router_filter`` module so it can run without importing this one.

Example
-------
>>> import prompt_router
>>> prompt_router.__version__
'0.1.0'
"""
from __future__ import annotations

# Configuration and protocols
from prompt_router.config import ConfigError, RouterConfig, load_config
from prompt_router.errors import PromptRouterError
from prompt_router.protocol import (
    MatcherProtocol,
    SchemaVersion,
    UnsupportedProtocolError,
    get_protocol,
)

# Discovery
from prompt_router.discovery.records import PluginKind, PluginRecord, PluginScope
from prompt_router.discovery.scanner import (
    SearchRoot,
    discover_plugins,
    scan_plugins,
    search_roots,
)

# Invocation context
from prompt_router.context.builder import InvocationContext, build_context
from prompt_router.context.payload import PayloadError, TriggerPayload
from prompt_router.context.transcript import ToolUse, TranscriptAccessor, TranscriptMessage

# Matching
from prompt_router.matching.executor import OutcomeStatus, PluginExecutor, PluginOutcome
from prompt_router.matching.formatter import HookReply, build_reply, format_suggestions
from prompt_router.matching.loader import InvalidExportError, Matcher, PluginLoadError
from prompt_router.matching.ranker import MAX_MATCH_COUNT, RankedItem, rank
from prompt_router.matching.results import (
    CurrentResult,
    LegacyResult,
    PluginResult,
    Priority,
    Relevance,
)
from prompt_router.matching.validator import ValidationResult, validate

# Pipeline
from prompt_router.pipeline import MatchPipeline

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Configuration and protocols
    "ConfigError",
    "MatcherProtocol",
    "PromptRouterError",
    "RouterConfig",
    "SchemaVersion",
    "UnsupportedProtocolError",
    "get_protocol",
    "load_config",
    # Discovery
    "PluginKind",
    "PluginRecord",
    "PluginScope",
    "SearchRoot",
    "discover_plugins",
    "scan_plugins",
    "search_roots",
    # Context
    "InvocationContext",
    "PayloadError",
    "ToolUse",
    "TranscriptAccessor",
    "TranscriptMessage",
    "TriggerPayload",
    "build_context",
    # Matching
    "CurrentResult",
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
    "rank",
    "validate",
    # Pipeline
    "MatchPipeline",
]
