"""Invocation context subpackage.

Validates the trigger payload and assembles the immutable context object
handed to every matcher.

Public surface
--------------
- PayloadError        — fatal, malformed trigger payload
- TriggerPayload      — validated host payload
- InvocationContext   — read-only input to every matcher
- TranscriptAccessor  — lazy, single-flight transcript accessors
- TranscriptMessage   — plain-text conversation message
- ToolUse             — recorded tool invocation
- build_context       — context from a payload
- build_test_context  — synthetic context with an empty transcript
"""
from __future__ import annotations

from prompt_router.context.builder import InvocationContext, build_context, build_test_context
from prompt_router.context.payload import PayloadError, TriggerPayload
from prompt_router.context.transcript import ToolUse, TranscriptAccessor, TranscriptMessage

__all__ = [
    "InvocationContext",
    "PayloadError",
    "ToolUse",
    "TranscriptAccessor",
    "TranscriptMessage",
    "TriggerPayload",
    "build_context",
    "build_test_context",
]
