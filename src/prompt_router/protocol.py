"""Matcher protocol versions.

A protocol ties together the on-disk file naming convention, the result
schema version plugins must declare, and the plugin kinds that version
knows about.  Exactly one protocol is active per invocation; searches and
validation never mix versions.

Classes
-------
MatcherProtocol
    Frozen description of one protocol version.
SchemaVersion
    Static registry of the current and supported versions.
"""
from __future__ import annotations

import prompt_router_filter as _filter
from pydantic import BaseModel

from prompt_router.discovery.records import PluginKind
from prompt_router.errors import PromptRouterError

LEGACY_VERSION: str = "1.0"
CURRENT_VERSION: str = _filter.CURRENT_PROTOCOL
NAMESPACE: str = _filter.NAMESPACE


class UnsupportedProtocolError(PromptRouterError, ValueError):
    """Raised when a protocol version is not one this library implements."""

    def __init__(self, version: str) -> None:
        self.version = version
        supported = ", ".join(sorted(SchemaVersion.SUPPORTED))
        super().__init__(
            f"Unsupported protocol version {version!r}. "
            f"Supported versions: {supported}"
        )


class MatcherProtocol(BaseModel):
    """On-disk and result-schema conventions of one protocol version.

    Parameters
    ----------
    version:
        The literal every plugin result must declare, e.g. ``"2.0"``.
    capability_filename:
        File name of a capability matcher inside ``<skill>/rio/``.
    sibling_suffix:
        Suffix of delegate/action matchers stored next to their ``.md`` file.
    kinds:
        Plugin kinds searched on disk and accepted in a result's ``kind``.
    """

    version: str
    capability_filename: str
    sibling_suffix: str
    kinds: tuple[PluginKind, ...]

    model_config = {"frozen": True}

    @property
    def is_legacy(self) -> bool:
        return self.version == LEGACY_VERSION

    def sibling_name(self, filename: str) -> str | None:
        """Return the plugin name a sibling matcher file belongs to, or None."""
        return _filter.sibling_name(filename, self.sibling_suffix)

    def sibling_filename(self, name: str) -> str:
        """Return the sibling matcher file name for plugin *name*."""
        return f"{name}{self.sibling_suffix}"


def _build(version: str) -> MatcherProtocol:
    capability_file, suffix, kinds = _filter.PROTOCOL_FILES[version]
    return MatcherProtocol(
        version=version,
        capability_filename=capability_file,
        sibling_suffix=suffix,
        kinds=tuple(PluginKind(kind) for kind in kinds),
    )


class SchemaVersion:
    """Protocol version registry.

    Attributes
    ----------
    CURRENT:
        The protocol used when nothing else is configured.
    SUPPORTED:
        Every protocol version this library can run.
    """

    CURRENT: str = CURRENT_VERSION
    SUPPORTED: frozenset[str] = frozenset(_filter.PROTOCOL_FILES)

    @staticmethod
    def is_supported(version: str) -> bool:
        return version in SchemaVersion.SUPPORTED


_PROTOCOLS: dict[str, MatcherProtocol] = {
    version: _build(version) for version in sorted(_filter.PROTOCOL_FILES)
}


def get_protocol(version: str | None = None) -> MatcherProtocol:
    """Return the protocol for *version* (default: the current one).

    Raises
    ------
    UnsupportedProtocolError
        If *version* is unknown.
    """
    key = SchemaVersion.CURRENT if version is None else version
    try:
        return _PROTOCOLS[key]
    except KeyError:
        raise UnsupportedProtocolError(key) from None
