"""Plugin record domain models.

Classes
-------
- PluginKind    — enum: capability, delegate, action
- PluginScope   — enum: project, user
- PluginRecord  — one discovered matcher module
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class PluginKind(str, Enum):
    """What a plugin is, which decides how the host invokes it.

    ``CAPABILITY`` is a skill (Skill tool), ``DELEGATE`` a subagent (Task
    tool) and ``ACTION`` a slash command (SlashCommand tool).
    """

    CAPABILITY = "capability"
    DELEGATE = "delegate"
    ACTION = "action"


class PluginScope(str, Enum):
    """Which search root a plugin was found under.

    Declaration order is precedence order: project entries shadow user
    entries with the same ``(kind, name)``.
    """

    PROJECT = "project"
    USER = "user"


class PluginRecord(BaseModel):
    """A matcher module found on disk.

    Parameters
    ----------
    name:
        Skill directory name, or agent/command file name without suffix.
    path:
        Absolute path of the matcher module.
    kind:
        Plugin kind inferred from the directory the file was found in.
    scope:
        Search root the file came from; ``None`` when the path was outside
        every known root and the kind was inferred from its shape alone.
    """

    name: str
    path: Path
    kind: PluginKind
    scope: PluginScope | None = None

    model_config = {"frozen": True}

    @property
    def identity(self) -> tuple[PluginKind, str]:
        """``(kind, name)`` — the key used for deduplication."""
        return (self.kind, self.name)

    @property
    def label(self) -> str:
        return f"{self.kind.value}:{self.name}"
