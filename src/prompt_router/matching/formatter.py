"""Render ranked suggestions for the host.

The current scheme renders one flat, numbered list; the legacy scheme
renders priority tiers with progressively softer wording.  Both map each
item's kind to the host tool that invokes it and end with a call to act
before responding.  An empty list renders as an empty string, and no
reply is produced at all.

Classes
-------
- HookReply  — the JSON document written to stdout
"""
from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from prompt_router.discovery.records import PluginKind
from prompt_router.matching.ranker import RankedItem
from prompt_router.matching.results import Priority
from prompt_router.protocol import get_protocol

HOOK_EVENT_NAME: str = "UserPromptSubmit"

_RULE = "━" * 39


class HookSpecificOutput(BaseModel):
    hook_event_name: str = Field(default=HOOK_EVENT_NAME, alias="hookEventName")
    additional_context: str = Field(alias="additionalContext")

    model_config = {"frozen": True, "populate_by_name": True}


class HookReply(BaseModel):
    """``{"hookSpecificOutput": {"hookEventName": ..., "additionalContext": ...}}``."""

    hook_specific_output: HookSpecificOutput = Field(alias="hookSpecificOutput")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def additional_context(self) -> str:
        return self.hook_specific_output.additional_context

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def invocation_hint(item: RankedItem) -> str:
    """Return the host tool call that invokes *item*."""
    if item.kind is PluginKind.CAPABILITY:
        return f'Skill tool, skill="{item.name}"'
    if item.kind is PluginKind.DELEGATE:
        return f'Task tool, subagent_type="{item.name}"'
    return f'SlashCommand tool, command="/{item.name}"'


def format_ranked_list(items: Sequence[RankedItem]) -> str:
    """Render the current scheme's numbered list."""
    if not items:
        return ""

    lines = [_RULE, "RELEVANT SKILLS/AGENTS/COMMANDS", _RULE, ""]
    for index, item in enumerate(items, start=1):
        lines.append(f"{index}. {item.name}: {invocation_hint(item)}")
    lines.extend(["", _RULE, "ACTION: Consider using the above tools BEFORE responding", _RULE])
    return "\n".join(lines)


def format_tiers(items: Sequence[RankedItem]) -> str:
    """Render the legacy scheme's priority tiers.

    *items* must already be ranked; order within each tier is preserved.
    """
    if not items:
        return ""

    tiers: dict[Priority, list[RankedItem]] = {priority: [] for priority in Priority}
    for item in items:
        tiers[item.priority or Priority.LOW].append(item)

    blocks: list[str] = []
    critical = tiers[Priority.CRITICAL]
    if critical:
        lines = ["BEFORE PROCEEDING WITH THIS REQUEST:", "", "CRITICAL REQUIREMENT - Auto-invoke immediately:"]
        lines.extend(
            f"{index}. {invocation_hint(item)}" for index, item in enumerate(critical, start=1)
        )
        lines.extend(
            [
                "",
                "IMPORTANT:",
                "- These MUST be invoked as your FIRST action",
                "- Wait for each to complete its workflow",
                "- Do NOT proceed with manual tool usage that these handle",
            ]
        )
        blocks.append("\n".join(lines))

    if tiers[Priority.HIGH]:
        lines = [] if critical else ["BEFORE PROCEEDING:", ""]
        lines.append("STRONGLY RECOMMENDED:")
        lines.extend(f"- {item.name}: {invocation_hint(item)}" for item in tiers[Priority.HIGH])
        blocks.append("\n".join(lines))

    if tiers[Priority.MEDIUM]:
        lines = ["SUGGESTED (consider invoking):"]
        lines.extend(f"- {item.name}: {invocation_hint(item)}" for item in tiers[Priority.MEDIUM])
        blocks.append("\n".join(lines))

    if tiers[Priority.LOW]:
        lines = ["OPTIONAL (available if needed):"]
        lines.extend(f"- {item.name}: {invocation_hint(item)}" for item in tiers[Priority.LOW])
        blocks.append("\n".join(lines))

    blocks.append("ACTION: Consider using the above tools BEFORE responding")
    return "\n\n".join(blocks)


def format_suggestions(items: Sequence[RankedItem], version: str) -> str:
    """Render *items* with the layout of protocol *version*."""
    if get_protocol(version).is_legacy:
        return format_tiers(items)
    return format_ranked_list(items)


def build_reply(items: Sequence[RankedItem], version: str) -> HookReply | None:
    """Return the host reply for *items*, or ``None`` when there is nothing to say."""
    text = format_suggestions(items, version)
    if not text:
        return None
    return HookReply(hook_specific_output=HookSpecificOutput(additional_context=text))
