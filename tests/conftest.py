"""Shared fixtures: on-disk plugin trees and hook payloads."""
from __future__ import annotations

import json
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

CURRENT_CAPABILITY_FILE = "UserPromptSubmit.rio.matcher.py"
LEGACY_CAPABILITY_FILE = "UserPromptSubmit.matcher.py"


@dataclass
class PluginTree:
    """A project directory and a home directory, each with a ``.claude`` folder."""

    project: Path
    home: Path

    def _write(self, path: Path, source: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    def base(self, scope: str) -> Path:
        return self.project if scope == "project" else self.home

    def capability(
        self,
        name: str,
        source: str,
        scope: str = "project",
        filename: str = CURRENT_CAPABILITY_FILE,
    ) -> Path:
        path = self.base(scope) / ".claude" / "skills" / name / "rio" / filename
        return self._write(path, source)

    def delegate(self, name: str, source: str, scope: str = "project", suffix: str = ".rio.matcher.py") -> Path:
        directory = self.base(scope) / ".claude" / "agents"
        self._write(directory / f"{name}.md", f"# {name}\n")
        return self._write(directory / f"{name}{suffix}", source)

    def action(self, name: str, source: str, scope: str = "project", suffix: str = ".rio.matcher.py") -> Path:
        directory = self.base(scope) / ".claude" / "commands"
        self._write(directory / f"{name}.md", f"# {name}\n")
        return self._write(directory / f"{name}{suffix}", source)


def count_matcher(count: int, kind: str | None = None) -> str:
    """Source of a 2.0 matcher that always reports *count*."""
    kind_entry = f', "kind": "{kind}"' if kind else ""
    return f"""
    def match(context):
        return {{"version": "2.0", "matchCount": {count}{kind_entry}}}
    """


def keyword_matcher(*keywords: str) -> str:
    """Source of a 2.0 matcher counting *keywords* in the prompt."""
    return f"""
    KEYWORDS = {keywords!r}

    def match(context):
        prompt = context.prompt.lower()
        return {{"version": "2.0", "matchCount": sum(1 for k in KEYWORDS if k in prompt)}}
    """


RAISING_MATCHER = """
def match(context):
    raise RuntimeError("matcher exploded")
"""


@pytest.fixture()
def tree(tmp_path: Path) -> PluginTree:
    project = tmp_path / "project"
    home = tmp_path / "home"
    project.mkdir()
    home.mkdir()
    return PluginTree(project=project, home=home)


@pytest.fixture()
def payload_data(tmp_path: Path) -> dict[str, str]:
    return {
        "prompt": "docker help",
        "cwd": str(tmp_path / "project"),
        "session_id": "session-123",
        "transcript_path": str(tmp_path / "transcript.jsonl"),
        "permission_mode": "default",
        "hook_event_name": "UserPromptSubmit",
    }


@pytest.fixture()
def payload_json(payload_data: dict[str, str]) -> str:
    return json.dumps(payload_data)
