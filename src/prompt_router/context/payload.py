"""Trigger payload validation.

The host sends one JSON object on stdin per prompt.  Every field listed in
``REQUIRED_FIELDS`` must be a non-empty string; anything else is fatal for
the whole invocation, because no plugin can run meaningfully without it.

Classes
-------
- PayloadError    — raised for any malformed payload
- TriggerPayload  — the validated payload
"""
from __future__ import annotations

import json
from collections.abc import Mapping

from pydantic import BaseModel

from prompt_router.errors import PromptRouterError

REQUIRED_FIELDS: tuple[str, ...] = (
    "prompt",
    "cwd",
    "session_id",
    "transcript_path",
    "permission_mode",
    "hook_event_name",
)


class PayloadError(PromptRouterError, ValueError):
    """Raised when the trigger payload is missing, unreadable, or malformed.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    field:
        The offending payload field, when the problem is field-specific.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class TriggerPayload(BaseModel):
    """The validated ``UserPromptSubmit`` payload.

    Field names mirror the wire format.  Unknown wire fields are ignored.
    """

    prompt: str
    cwd: str
    session_id: str
    transcript_path: str
    permission_mode: str
    hook_event_name: str

    model_config = {"frozen": True, "extra": "ignore"}

    @classmethod
    def from_mapping(cls, data: object) -> TriggerPayload:
        """Validate a decoded payload object.

        Fields are checked in ``REQUIRED_FIELDS`` order and the first
        failure is reported.

        Raises
        ------
        PayloadError
            If *data* is not a non-empty object, or a required field is
            missing, not a string, or blank.
        """
        if not isinstance(data, Mapping) or not data:
            raise PayloadError("Payload must be a non-empty JSON object")

        for field in REQUIRED_FIELDS:
            value = data.get(field)
            if value is None:
                raise PayloadError(f"Payload field {field!r} is required", field=field)
            if not isinstance(value, str):
                raise PayloadError(
                    f"Payload field {field!r} must be a string, got {type(value).__name__}",
                    field=field,
                )
            if not value.strip():
                raise PayloadError(f"Payload field {field!r} must not be empty", field=field)

        return cls.model_validate({field: data[field] for field in REQUIRED_FIELDS})

    @classmethod
    def from_json(cls, raw: str) -> TriggerPayload:
        """Decode and validate a JSON payload string.

        Raises
        ------
        PayloadError
            If *raw* is empty, not valid JSON, or fails ``from_mapping``.
        """
        if not raw or not raw.strip():
            raise PayloadError("No payload received on stdin")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PayloadError(f"Payload is not valid JSON: {exc}") from exc
        return cls.from_mapping(data)
