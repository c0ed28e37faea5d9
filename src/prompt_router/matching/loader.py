"""Load matcher modules from disk and adapt their exports.

A matcher module exposes either ``matcher`` or ``match`` at module level
(``matcher`` wins when both exist).  The export is accepted when it is
callable, or when it has a callable ``match`` attribute.  Either way it is
wrapped in ``CallableMatcher`` so the executor only ever sees the
``Matcher`` interface.

Classes
-------
- PluginLoadError     — the module could not be loaded
- InvalidExportError  — the module loaded but exports nothing usable
- Matcher             — protocol: ``evaluate(context) -> result | awaitable``
- CallableMatcher     — adapter around a bare callable
"""
from __future__ import annotations

import hashlib
import importlib.util
import re
import sys
from collections.abc import Callable
from types import ModuleType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from prompt_router.discovery.records import PluginRecord
from prompt_router.errors import PromptRouterError

if TYPE_CHECKING:
    from prompt_router.context.builder import InvocationContext

EXPORT_NAMES: tuple[str, ...] = ("matcher", "match")

_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z_]")


class PluginLoadError(PromptRouterError):
    """Raised when a matcher module cannot be imported.

    Parameters
    ----------
    record:
        The plugin whose module failed.
    reason:
        What went wrong.
    """

    def __init__(self, record: PluginRecord, reason: str) -> None:
        self.record = record
        self.reason = reason
        super().__init__(f"Cannot load matcher {record.label} from {record.path}: {reason}")


class InvalidExportError(PluginLoadError):
    """Raised when a matcher module exports no usable callable."""


@runtime_checkable
class Matcher(Protocol):
    """Anything that can score a prompt."""

    def evaluate(self, context: InvocationContext) -> Any: ...


class CallableMatcher:
    """Adapt a plain callable to the ``Matcher`` interface."""

    def __init__(self, func: Callable[[InvocationContext], Any]) -> None:
        self._func = func

    def evaluate(self, context: InvocationContext) -> Any:
        return self._func(context)

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", type(self._func).__name__)
        return f"CallableMatcher({name})"


def resolve_export(export: object) -> Matcher | None:
    """Return a ``Matcher`` for a module export, or ``None`` if unusable."""
    if callable(export):
        return CallableMatcher(export)
    method = getattr(export, "match", None)
    if callable(method):
        return CallableMatcher(method)
    return None


def module_name_for(record: PluginRecord) -> str:
    """Return a unique, importable module name for *record*."""
    digest = hashlib.sha256(str(record.path).encode("utf-8")).hexdigest()[:12]
    safe_name = _UNSAFE_CHARS.sub("_", record.name)
    return f"_prompt_router_plugin_{record.kind.value}_{safe_name}_{digest}"


def import_module_from_path(record: PluginRecord) -> ModuleType:
    """Execute the matcher file of *record* as a fresh module.

    Raises
    ------
    PluginLoadError
        If the file is missing, cannot be specced, or raises while executing.
    """
    module_name = module_name_for(record)
    spec = importlib.util.spec_from_file_location(module_name, record.path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(record, "not an importable Python file")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise PluginLoadError(record, f"{type(exc).__name__}: {exc}") from exc
    except SystemExit as exc:
        sys.modules.pop(module_name, None)
        raise PluginLoadError(record, f"module called exit({exc.code!r})") from exc
    return module


def load_matcher(record: PluginRecord) -> Matcher:
    """Load *record*'s module and return its adapted export.

    Raises
    ------
    PluginLoadError
        If the module cannot be loaded.
    InvalidExportError
        If neither ``matcher`` nor ``match`` is usable.
    """
    module = import_module_from_path(record)
    for export_name in EXPORT_NAMES:
        if not hasattr(module, export_name):
            continue
        matcher = resolve_export(getattr(module, export_name))
        if matcher is None:
            raise InvalidExportError(
                record,
                f"{export_name!r} must be callable or expose a callable 'match'",
            )
        return matcher
    raise InvalidExportError(record, "module defines neither 'matcher' nor 'match'")
