"""Fast pre-filter for the prompt-router hook.

This module runs before anything else on every prompt.  It must stay
standard-library only and must not import :mod:`prompt_router`, so that
the common case (no matchers installed) costs a directory walk and
nothing more.

Contract
--------
- No candidates: exit 0 with no output.
- ``--print``: write the newline-separated candidate paths and exit.
- Otherwise: export ``MATCHER_PATHS`` and replace this process with
  ``python -m prompt_router run``; stdin is inherited unchanged.

Layouts searched (project root first, then the user root)::

    <base>/.claude/skills/<name>/rio/<capability file>
    <base>/.claude/agents/<name><sibling suffix>
    <base>/.claude/commands/<name><sibling suffix>
"""
from __future__ import annotations

import os
import sys
from pathlib import Path

CURRENT_PROTOCOL: str = "2.0"

# version -> (capability file name, sibling suffix, kinds searched)
PROTOCOL_FILES: dict[str, tuple[str, str, tuple[str, ...]]] = {
    "1.0": (
        "UserPromptSubmit.matcher.py",
        ".matcher.py",
        ("capability", "delegate"),
    ),
    "2.0": (
        "UserPromptSubmit.rio.matcher.py",
        ".rio.matcher.py",
        ("capability", "delegate", "action"),
    ),
}

CONFIG_DIR_NAME: str = ".claude"
NAMESPACE: str = "rio"

# kind -> directory name under ``.claude``
KIND_DIRS: dict[str, str] = {
    "capability": "skills",
    "delegate": "agents",
    "action": "commands",
}

PROTOCOL_ENV: str = "PROMPT_ROUTER_PROTOCOL"
PATHS_ENV: str = "MATCHER_PATHS"


def sibling_name(filename: str, suffix: str) -> str | None:
    """Return the plugin name encoded in a sibling matcher file name.

    Names never contain a dot, which keeps the legacy suffix from
    matching current-protocol files.
    """
    if not filename.endswith(suffix):
        return None
    name = filename[: -len(suffix)]
    if not name or "." in name:
        return None
    return name


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError:
        return []


def _capability_candidates(root: Path, filename: str) -> list[str]:
    found: list[str] = []
    for entry in _sorted_entries(root):
        if not entry.is_dir():
            continue
        candidate = Path(entry.path) / NAMESPACE / filename
        if candidate.is_file():
            found.append(str(candidate.absolute()))
    return found


def _sibling_candidates(root: Path, suffix: str) -> list[str]:
    found: list[str] = []
    for entry in _sorted_entries(root):
        if sibling_name(entry.name, suffix) is None:
            continue
        if entry.is_file():
            found.append(str(Path(entry.path).absolute()))
    return found


def candidates_under(base: str | Path, version: str = CURRENT_PROTOCOL) -> list[str]:
    """Return matcher files for *version* below ``<base>/.claude``.

    Raises
    ------
    KeyError
        If *version* is not a known protocol.
    """
    capability_file, suffix, kinds = PROTOCOL_FILES[version]
    config_root = Path(base) / CONFIG_DIR_NAME
    paths: list[str] = []
    for kind in kinds:
        kind_root = config_root / KIND_DIRS[kind]
        if kind == "capability":
            paths.extend(_capability_candidates(kind_root, capability_file))
        else:
            paths.extend(_sibling_candidates(kind_root, suffix))
    return paths


def find_candidates(
    project_dir: str | Path,
    home_dir: str | Path,
    version: str = CURRENT_PROTOCOL,
) -> list[str]:
    """Return absolute paths of every matcher file for *version*.

    The project root is searched before the user root.  Missing or
    unreadable directories are skipped and symlinked skill directories
    are followed.
    """
    paths: list[str] = []
    seen: set[Path] = set()
    for base in (Path(project_dir), Path(home_dir)):
        resolved = base.resolve()
        # project dir == home dir: search once
        if resolved in seen:
            continue
        seen.add(resolved)
        paths.extend(candidates_under(base, version))
    return paths


def default_roots(environ: dict[str, str] | None = None) -> tuple[str, str]:
    """Return ``(project_dir, home_dir)`` from the environment."""
    env = os.environ if environ is None else environ
    project_dir = env.get("CLAUDE_PROJECT_DIR") or os.getcwd()
    home_dir = env.get("HOME") or str(Path.home())
    return project_dir, home_dir


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    version = os.environ.get(PROTOCOL_ENV) or CURRENT_PROTOCOL
    if version not in PROTOCOL_FILES:
        sys.stderr.write(f"prompt-router-filter: unknown protocol {version!r}\n")
        return 1

    project_dir, home_dir = default_roots()
    candidates = find_candidates(project_dir, home_dir, version)
    if not candidates:
        return 0

    if "--print" in args:
        sys.stdout.write("\n".join(candidates) + "\n")
        return 0

    os.environ[PATHS_ENV] = "\n".join(candidates)
    os.execv(sys.executable, [sys.executable, "-m", "prompt_router", "run"])
    return 0  # unreachable


if __name__ == "__main__":
    sys.exit(main())
