"""Lazy, memoized access to the conversation transcript.

The transcript is a JSON Lines file written by the host.  It is read and
decoded at most once per invocation, on the first accessor call, no matter
how many plugins ask for it or how concurrently they do so.  If no plugin
asks, the file is never touched.

Classes
-------
- TranscriptMessage   — a user/assistant message reduced to plain text
- ToolUse             — one tool invocation made by the assistant
- TranscriptAccessor  — the four cached accessors handed to plugins
"""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_CONVERSATION_TYPES: frozenset[str] = frozenset({"user", "assistant"})


class TranscriptMessage(BaseModel):
    """A conversation turn with its text blocks joined.

    Parameters
    ----------
    role:
        ``"user"`` or ``"assistant"``.
    content:
        The text content; non-text blocks are dropped.
    """

    role: str
    content: str

    model_config = {"frozen": True}


class ToolUse(BaseModel):
    """A tool call recorded in an assistant message."""

    tool: str
    input: dict[str, Any] = Field(default_factory=dict)
    timestamp: str = ""

    model_config = {"frozen": True}


def _text_of(content: object) -> str:
    """Flatten message content (string or block list) to plain text."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""
    parts = [
        block["text"]
        for block in content
        if isinstance(block, dict)
        and block.get("type") == "text"
        and isinstance(block.get("text"), str)
    ]
    return "\n".join(parts)


def _message_of(entry: dict[str, Any]) -> dict[str, Any]:
    message = entry.get("message")
    return message if isinstance(message, dict) else {}


class TranscriptAccessor:
    """Cached async accessors over one transcript file.

    The first call to any accessor starts a single parse on a worker
    thread; every other call, concurrent or later, awaits that same
    pending result.

    Parameters
    ----------
    transcript_path:
        Path of the JSON Lines transcript.  ``None`` gives an accessor with
        an empty transcript, used for synthetic test contexts.
    """

    def __init__(self, transcript_path: str | Path | None) -> None:
        self._path: Path | None = Path(transcript_path) if transcript_path else None
        self._pending: asyncio.Future[list[dict[str, Any]]] | None = None
        self._parse_count = 0

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def parse_count(self) -> int:
        """How many times the file has been parsed (0 or 1)."""
        return self._parse_count

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _read(self) -> list[dict[str, Any]]:
        self._parse_count += 1
        if self._path is None or not self._path.is_file():
            return []

        entries: list[dict[str, Any]] = []
        with self._path.open(encoding="utf-8", errors="replace") as handle:
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed transcript line %d in %s", line_number, self._path)
                    continue
                if isinstance(entry, dict):
                    entries.append(entry)
        logger.debug("Parsed %d transcript entries from %s", len(entries), self._path)
        return entries

    async def _entries(self) -> list[dict[str, Any]]:
        # No await between the check and the assignment, so concurrent
        # callers on the loop always share one pending parse.
        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(self._read))
        # A caller timing out must not cancel the parse other callers await.
        return await asyncio.shield(self._pending)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    async def history(self) -> list[TranscriptMessage]:
        """Return user and assistant messages with non-empty text, in order."""
        messages: list[TranscriptMessage] = []
        for entry in await self._entries():
            if entry.get("type") not in _CONVERSATION_TYPES:
                continue
            message = _message_of(entry)
            content = _text_of(message.get("content"))
            if not content.strip():
                continue
            role = message.get("role") if isinstance(message.get("role"), str) else entry["type"]
            messages.append(TranscriptMessage(role=role, content=content))
        return messages

    async def tool_usage(self) -> list[ToolUse]:
        """Return every ``tool_use`` block from assistant messages, in order."""
        uses: list[ToolUse] = []
        for entry in await self._entries():
            if entry.get("type") != "assistant":
                continue
            content = _message_of(entry).get("content")
            if not isinstance(content, list):
                continue
            for block in content:
                if not isinstance(block, dict) or block.get("type") != "tool_use":
                    continue
                tool_input = block.get("input")
                uses.append(
                    ToolUse(
                        tool=str(block.get("name", "")),
                        input=tool_input if isinstance(tool_input, dict) else {},
                        timestamp=str(entry.get("timestamp", "")),
                    )
                )
        return uses

    async def first_message(self) -> str | None:
        """Return the text of the first user message, or ``None``."""
        for message in await self.history():
            if message.role == "user":
                return message.content
        return None

    async def raw_messages(self) -> list[dict[str, Any]]:
        """Return every decoded transcript entry.

        The list is a fresh copy; the entries themselves are shared and
        must be treated as read-only.
        """
        return list(await self._entries())

    def __repr__(self) -> str:
        return f"TranscriptAccessor(path={str(self._path)!r}, parsed={self._parse_count > 0})"
