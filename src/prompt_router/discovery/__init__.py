"""Plugin discovery subpackage.

Turns the fast filter's flat path list (or a full scan of the search
roots) into typed, deduplicated plugin records.

Public surface
--------------
- PluginKind       — enum: capability, delegate, action
- PluginScope      — enum: project, user
- PluginRecord     — ``{name, path, kind, scope}``
- SearchRoot       — one ``<base>/.claude`` search root
- search_roots     — project root followed by user root
- discover_plugins — records from a path list
- scan_plugins     — records from a full scan
"""
from __future__ import annotations

from prompt_router.discovery.records import PluginKind, PluginRecord, PluginScope
from prompt_router.discovery.scanner import (
    SearchRoot,
    discover_plugins,
    parse_path_list,
    record_for_path,
    scan_plugins,
    search_roots,
)

__all__ = [
    "PluginKind",
    "PluginRecord",
    "PluginScope",
    "SearchRoot",
    "discover_plugins",
    "parse_path_list",
    "record_for_path",
    "scan_plugins",
    "search_roots",
]
