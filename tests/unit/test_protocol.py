"""Unit tests for prompt_router.protocol."""
from __future__ import annotations

import pytest

from prompt_router.discovery.records import PluginKind
from prompt_router.errors import PromptRouterError
from prompt_router.protocol import (
    MatcherProtocol,
    SchemaVersion,
    UnsupportedProtocolError,
    get_protocol,
)


class TestGetProtocol:
    def test_default_is_current(self) -> None:
        assert get_protocol().version == SchemaVersion.CURRENT == "2.0"

    def test_current_layout(self) -> None:
        protocol = get_protocol("2.0")
        assert protocol.capability_filename == "UserPromptSubmit.rio.matcher.py"
        assert protocol.sibling_suffix == ".rio.matcher.py"
        assert protocol.kinds == (PluginKind.CAPABILITY, PluginKind.DELEGATE, PluginKind.ACTION)
        assert not protocol.is_legacy

    def test_legacy_layout(self) -> None:
        protocol = get_protocol("1.0")
        assert protocol.capability_filename == "UserPromptSubmit.matcher.py"
        assert protocol.sibling_suffix == ".matcher.py"
        assert PluginKind.ACTION not in protocol.kinds
        assert protocol.is_legacy

    def test_unknown_version_raises(self) -> None:
        with pytest.raises(UnsupportedProtocolError) as exc_info:
            get_protocol("3.0")
        assert exc_info.value.version == "3.0"
        assert "1.0, 2.0" in str(exc_info.value)

    def test_error_is_library_and_value_error(self) -> None:
        with pytest.raises(PromptRouterError):
            get_protocol("0.9")
        with pytest.raises(ValueError):
            get_protocol("0.9")


class TestMatcherProtocol:
    def test_sibling_round_trip(self) -> None:
        protocol = get_protocol("2.0")
        filename = protocol.sibling_filename("code-reviewer")
        assert filename == "code-reviewer.rio.matcher.py"
        assert protocol.sibling_name(filename) == "code-reviewer"

    def test_is_frozen(self) -> None:
        protocol = get_protocol()
        with pytest.raises(Exception):
            protocol.version = "1.0"  # type: ignore[misc]

    def test_instances_are_shared(self) -> None:
        assert get_protocol("2.0") is get_protocol("2.0")
        assert isinstance(get_protocol(), MatcherProtocol)


class TestSchemaVersion:
    @pytest.mark.parametrize("version", ["1.0", "2.0"])
    def test_supported(self, version: str) -> None:
        assert SchemaVersion.is_supported(version)

    @pytest.mark.parametrize("version", ["", "2", "2.0.0", "v2.0"])
    def test_unsupported(self, version: str) -> None:
        assert not SchemaVersion.is_supported(version)
