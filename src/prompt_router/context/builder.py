"""Invocation context construction.

Classes
-------
- InvocationContext — the single read-only object every plugin receives

Functions
---------
- build_context      — context for a validated trigger payload
- build_test_context — synthetic context for checking a matcher by hand
"""
from __future__ import annotations

import os

from pydantic import BaseModel

from prompt_router.context.payload import TriggerPayload
from prompt_router.context.transcript import TranscriptAccessor


class InvocationContext(BaseModel):
    """Everything a matcher may look at for the current prompt.

    Built once per invocation and shared by reference across all plugin
    calls; it is frozen, so no plugin can alter what another one sees.

    Parameters
    ----------
    prompt:
        The user's prompt text.
    working_dir:
        The host's current working directory.
    session_id:
        Host session identifier.
    transcript_path:
        Path of the conversation transcript (JSON Lines).
    permission_mode:
        The host's permission mode, e.g. ``"default"`` or ``"plan"``.
    schema_version:
        Result schema version plugins must declare.
    transcript:
        Cached accessors over the transcript.
    """

    prompt: str
    working_dir: str
    session_id: str
    transcript_path: str
    permission_mode: str
    schema_version: str
    transcript: TranscriptAccessor

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


def build_context(payload: TriggerPayload, schema_version: str) -> InvocationContext:
    """Build the invocation context for *payload*.

    The transcript is not read here; the accessor parses it lazily.
    """
    return InvocationContext(
        prompt=payload.prompt,
        working_dir=payload.cwd,
        session_id=payload.session_id,
        transcript_path=payload.transcript_path,
        permission_mode=payload.permission_mode,
        schema_version=schema_version,
        transcript=TranscriptAccessor(payload.transcript_path),
    )


def build_test_context(
    prompt: str,
    schema_version: str,
    working_dir: str | None = None,
) -> InvocationContext:
    """Build a context with an empty transcript for trying out a matcher."""
    return InvocationContext(
        prompt=prompt,
        working_dir=working_dir or os.getcwd(),
        session_id="test-session-id",
        transcript_path="",
        permission_mode="default",
        schema_version=schema_version,
        transcript=TranscriptAccessor(None),
    )
