"""Example: project-aware matcher (protocol 2.0).

Only suggests the Python test helper inside projects that look like
Python projects, then counts prompt keywords.
"""
from pathlib import Path

MARKERS = ("pyproject.toml", "setup.cfg", "setup.py")
KEYWORDS = ("test", "pytest", "fixture", "coverage", "failing")


def match(context):
    project = Path(context.working_dir)
    if not any((project / marker).exists() for marker in MARKERS):
        return {"version": "2.0", "matchCount": 0, "kind": "capability"}

    prompt = context.prompt.lower()
    return {
        "version": "2.0",
        "matchCount": sum(1 for keyword in KEYWORDS if keyword in prompt),
        "kind": "capability",
    }
