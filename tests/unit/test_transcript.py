"""Unit tests for prompt_router.context.transcript and the context builder."""
from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from prompt_router.context.builder import build_context, build_test_context
from prompt_router.context.payload import TriggerPayload
from prompt_router.context.transcript import ToolUse, TranscriptAccessor, TranscriptMessage


def _write_transcript(path: Path, entries: list[object]) -> Path:
    lines = [entry if isinstance(entry, str) else json.dumps(entry) for entry in entries]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def transcript_file(tmp_path: Path) -> Path:
    return _write_transcript(
        tmp_path / "transcript.jsonl",
        [
            {"type": "summary", "summary": "Earlier work"},
            {"type": "user", "message": {"role": "user", "content": "set up docker please"}},
            {
                "type": "assistant",
                "timestamp": "2025-01-01T10:00:00Z",
                "message": {
                    "role": "assistant",
                    "content": [
                        {"type": "text", "text": "Looking at the Dockerfile."},
                        {"type": "tool_use", "name": "Read", "input": {"file_path": "Dockerfile"}},
                    ],
                },
            },
            "{not json",
            {
                "type": "assistant",
                "timestamp": "2025-01-01T10:00:05Z",
                "message": {
                    "role": "assistant",
                    "content": [{"type": "tool_use", "name": "Bash", "input": {"command": "ls"}}],
                },
            },
            {"type": "user", "message": {"role": "user", "content": [{"type": "text", "text": "thanks"}]}},
        ],
    )


class TestAccessors:
    @pytest.mark.asyncio
    async def test_history(self, transcript_file: Path) -> None:
        history = await TranscriptAccessor(transcript_file).history()
        assert history == [
            TranscriptMessage(role="user", content="set up docker please"),
            TranscriptMessage(role="assistant", content="Looking at the Dockerfile."),
            TranscriptMessage(role="user", content="thanks"),
        ]

    @pytest.mark.asyncio
    async def test_tool_usage(self, transcript_file: Path) -> None:
        usage = await TranscriptAccessor(transcript_file).tool_usage()
        assert usage == [
            ToolUse(tool="Read", input={"file_path": "Dockerfile"}, timestamp="2025-01-01T10:00:00Z"),
            ToolUse(tool="Bash", input={"command": "ls"}, timestamp="2025-01-01T10:00:05Z"),
        ]

    @pytest.mark.asyncio
    async def test_first_message(self, transcript_file: Path) -> None:
        assert await TranscriptAccessor(transcript_file).first_message() == "set up docker please"

    @pytest.mark.asyncio
    async def test_raw_messages_skips_malformed_lines(self, transcript_file: Path) -> None:
        raw = await TranscriptAccessor(transcript_file).raw_messages()
        assert len(raw) == 5
        assert raw[0]["type"] == "summary"

    @pytest.mark.asyncio
    async def test_raw_messages_returns_fresh_list(self, transcript_file: Path) -> None:
        accessor = TranscriptAccessor(transcript_file)
        first = await accessor.raw_messages()
        first.clear()
        assert len(await accessor.raw_messages()) == 5

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        accessor = TranscriptAccessor(tmp_path / "missing.jsonl")
        assert await accessor.history() == []
        assert await accessor.first_message() is None

    @pytest.mark.asyncio
    async def test_no_path_is_empty(self) -> None:
        accessor = TranscriptAccessor(None)
        assert accessor.path is None
        assert await accessor.tool_usage() == []


class TestSingleParse:
    def test_not_parsed_until_asked(self, transcript_file: Path) -> None:
        accessor = TranscriptAccessor(transcript_file)
        assert accessor.parse_count == 0
        assert "parsed=False" in repr(accessor)

    @pytest.mark.asyncio
    async def test_sequential_calls_parse_once(self, transcript_file: Path) -> None:
        accessor = TranscriptAccessor(transcript_file)
        await accessor.history()
        await accessor.tool_usage()
        await accessor.first_message()
        await accessor.raw_messages()
        assert accessor.parse_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_parse_once(self, transcript_file: Path) -> None:
        accessor = TranscriptAccessor(transcript_file)
        results = await asyncio.gather(*(accessor.history() for _ in range(20)))
        assert accessor.parse_count == 1
        assert all(result == results[0] for result in results)

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_parse(self, transcript_file: Path) -> None:
        accessor = TranscriptAccessor(transcript_file)
        waiter = asyncio.ensure_future(accessor.history())
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert len(await accessor.history()) == 3
        assert accessor.parse_count == 1


class TestBuildContext:
    def test_maps_payload_fields(self, payload_data: dict[str, str]) -> None:
        payload = TriggerPayload.from_mapping(payload_data)
        context = build_context(payload, "2.0")
        assert context.prompt == "docker help"
        assert context.working_dir == payload_data["cwd"]
        assert context.session_id == "session-123"
        assert context.permission_mode == "default"
        assert context.schema_version == "2.0"
        assert context.transcript.path == Path(payload_data["transcript_path"])

    def test_does_not_read_transcript(self, payload_data: dict[str, str]) -> None:
        context = build_context(TriggerPayload.from_mapping(payload_data), "2.0")
        assert context.transcript.parse_count == 0

    def test_context_is_frozen(self, payload_data: dict[str, str]) -> None:
        context = build_context(TriggerPayload.from_mapping(payload_data), "2.0")
        with pytest.raises(Exception):
            context.prompt = "changed"  # type: ignore[misc]

    def test_test_context(self, tmp_path: Path) -> None:
        context = build_test_context("compile the build", "1.0", working_dir=str(tmp_path))
        assert context.session_id == "test-session-id"
        assert context.working_dir == str(tmp_path)
        assert context.schema_version == "1.0"
        assert context.transcript.path is None
