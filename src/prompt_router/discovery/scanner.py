"""Turn matcher file paths into typed plugin records.

Discovery is a pure function of its inputs and is called fresh on every
invocation; nothing here caches between runs.

Functions
---------
- search_roots     — the project and user roots for a working tree
- record_for_path  — derive ``(name, kind)`` from one matcher path
- discover_plugins — records for a path list, deduplicated
- scan_plugins     — full scan of the roots, then ``discover_plugins``
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import prompt_router_filter as _filter

from prompt_router.discovery.records import PluginKind, PluginRecord, PluginScope

if TYPE_CHECKING:
    from prompt_router.protocol import MatcherProtocol

logger = logging.getLogger(__name__)

_KIND_ORDER: dict[PluginKind, int] = {kind: index for index, kind in enumerate(PluginKind)}
_SCOPE_ORDER: dict[PluginScope | None, int] = {
    PluginScope.PROJECT: 0,
    PluginScope.USER: 1,
    None: 2,
}
_KIND_BY_DIRNAME: dict[str, PluginKind] = {
    dirname: PluginKind(kind) for kind, dirname in _filter.KIND_DIRS.items()
}


@dataclass(frozen=True)
class SearchRoot:
    """A base directory whose ``.claude`` folder holds plugins."""

    base: Path
    scope: PluginScope

    def kind_dir(self, kind: PluginKind) -> Path:
        """Return ``<base>/.claude/<skills|agents|commands>``."""
        return (
            Path(self.base).absolute()
            / _filter.CONFIG_DIR_NAME
            / _filter.KIND_DIRS[kind.value]
        )


def search_roots(project_dir: str | Path, home_dir: str | Path) -> list[SearchRoot]:
    """Return the project root followed by the user root."""
    return [
        SearchRoot(base=Path(project_dir), scope=PluginScope.PROJECT),
        SearchRoot(base=Path(home_dir), scope=PluginScope.USER),
    ]


def _match_capability(path: Path, protocol: MatcherProtocol) -> str | None:
    if path.name != protocol.capability_filename:
        return None
    if path.parent.name != _filter.NAMESPACE:
        return None
    return path.parent.parent.name or None


def record_for_path(
    path: str | Path,
    roots: Sequence[SearchRoot],
    protocol: MatcherProtocol,
) -> PluginRecord | None:
    """Derive a ``PluginRecord`` from a matcher file path.

    The kind comes from the root directory the path lives in.  Paths
    outside every root fall back to the shape of the path itself.  Returns
    ``None`` for paths that follow no layout of *protocol*.
    """
    matcher_path = Path(path).absolute()
    capability_name = _match_capability(matcher_path, protocol)
    sibling = protocol.sibling_name(matcher_path.name)

    for root in roots:
        for kind in protocol.kinds:
            kind_dir = root.kind_dir(kind)
            if kind is PluginKind.CAPABILITY:
                if capability_name and matcher_path.parent.parent.parent == kind_dir:
                    return PluginRecord(
                        name=capability_name, path=matcher_path, kind=kind, scope=root.scope
                    )
            elif sibling and matcher_path.parent == kind_dir:
                return PluginRecord(name=sibling, path=matcher_path, kind=kind, scope=root.scope)

    if capability_name:
        return PluginRecord(name=capability_name, path=matcher_path, kind=PluginKind.CAPABILITY)
    if sibling:
        kind = _KIND_BY_DIRNAME.get(matcher_path.parent.name)
        if kind is not None and kind in protocol.kinds:
            return PluginRecord(name=sibling, path=matcher_path, kind=kind)
    return None


def discover_plugins(
    paths: Iterable[str | Path],
    roots: Sequence[SearchRoot],
    protocol: MatcherProtocol,
) -> list[PluginRecord]:
    """Build deduplicated plugin records from matcher file paths.

    Paths that do not exist or follow no layout are skipped.  When the same
    ``(kind, name)`` appears under several roots, the project-level entry
    wins over the user-level one.  The result is sorted by kind, then name.
    """
    chosen: dict[tuple[PluginKind, str], PluginRecord] = {}
    for raw_path in paths:
        record = record_for_path(raw_path, roots, protocol)
        if record is None:
            logger.debug("Ignoring %s: not a protocol %s matcher path", raw_path, protocol.version)
            continue
        if not record.path.is_file():
            logger.debug("Ignoring %s: file does not exist", record.path)
            continue
        existing = chosen.get(record.identity)
        if existing is None or _SCOPE_ORDER[record.scope] < _SCOPE_ORDER[existing.scope]:
            if existing is not None:
                logger.debug("%s at %s shadows %s", record.label, record.path, existing.path)
            chosen[record.identity] = record

    return sorted(chosen.values(), key=lambda r: (_KIND_ORDER[r.kind], r.name))


def scan_plugins(roots: Sequence[SearchRoot], protocol: MatcherProtocol) -> list[PluginRecord]:
    """Walk every root for *protocol*'s matcher files and build records."""
    paths: list[str] = []
    seen: set[Path] = set()
    for root in roots:
        resolved = Path(root.base).resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        paths.extend(_filter.candidates_under(root.base, protocol.version))
    return discover_plugins(paths, roots, protocol)


def parse_path_list(value: str | None) -> list[str]:
    """Split a newline-separated path list as produced by the fast filter."""
    if not value:
        return []
    return [line.strip() for line in value.splitlines() if line.strip()]
