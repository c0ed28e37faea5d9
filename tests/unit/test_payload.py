"""Unit tests for prompt_router.context.payload."""
from __future__ import annotations

import json

import pytest

from prompt_router.context.payload import REQUIRED_FIELDS, PayloadError, TriggerPayload
from prompt_router.errors import PromptRouterError


class TestFromMapping:
    def test_valid_payload(self, payload_data: dict[str, str]) -> None:
        payload = TriggerPayload.from_mapping(payload_data)
        assert payload.prompt == "docker help"
        assert payload.session_id == "session-123"
        assert payload.hook_event_name == "UserPromptSubmit"

    def test_unknown_fields_ignored(self, payload_data: dict[str, str]) -> None:
        payload = TriggerPayload.from_mapping({**payload_data, "extra": 1})
        assert not hasattr(payload, "extra")

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_missing_field(self, payload_data: dict[str, str], field: str) -> None:
        del payload_data[field]
        with pytest.raises(PayloadError, match="is required") as exc_info:
            TriggerPayload.from_mapping(payload_data)
        assert exc_info.value.field == field

    def test_null_field_counts_as_missing(self, payload_data: dict[str, str]) -> None:
        payload_data["cwd"] = None  # type: ignore[assignment]
        with pytest.raises(PayloadError, match="'cwd' is required"):
            TriggerPayload.from_mapping(payload_data)

    def test_non_string_field(self, payload_data: dict[str, str]) -> None:
        payload_data["session_id"] = 42  # type: ignore[assignment]
        with pytest.raises(PayloadError, match="must be a string, got int"):
            TriggerPayload.from_mapping(payload_data)

    def test_blank_prompt(self, payload_data: dict[str, str]) -> None:
        payload_data["prompt"] = "   "
        with pytest.raises(PayloadError, match="must not be empty") as exc_info:
            TriggerPayload.from_mapping(payload_data)
        assert exc_info.value.field == "prompt"

    def test_first_failure_reported(self, payload_data: dict[str, str]) -> None:
        del payload_data["cwd"]
        del payload_data["prompt"]
        with pytest.raises(PayloadError) as exc_info:
            TriggerPayload.from_mapping(payload_data)
        assert exc_info.value.field == "prompt"

    @pytest.mark.parametrize("data", [{}, [], "prompt", None])
    def test_non_object_rejected(self, data: object) -> None:
        with pytest.raises(PayloadError, match="non-empty JSON object"):
            TriggerPayload.from_mapping(data)


class TestFromJson:
    def test_round_trip(self, payload_json: str) -> None:
        assert TriggerPayload.from_json(payload_json).cwd.endswith("project")

    @pytest.mark.parametrize("raw", ["", "  \n"])
    def test_empty_input(self, raw: str) -> None:
        with pytest.raises(PayloadError, match="No payload received on stdin"):
            TriggerPayload.from_json(raw)

    def test_malformed_json(self) -> None:
        with pytest.raises(PayloadError, match="not valid JSON"):
            TriggerPayload.from_json("{prompt: ")

    def test_json_array(self) -> None:
        with pytest.raises(PayloadError):
            TriggerPayload.from_json(json.dumps(["a"]))

    def test_error_hierarchy(self) -> None:
        with pytest.raises(PromptRouterError):
            TriggerPayload.from_json("")
        with pytest.raises(ValueError):
            TriggerPayload.from_json("")
