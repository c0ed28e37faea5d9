"""End-to-end tests for prompt_router.pipeline.MatchPipeline."""
from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path

import pytest

from conftest import LEGACY_CAPABILITY_FILE, RAISING_MATCHER, PluginTree, count_matcher, keyword_matcher
from prompt_router.config import RouterConfig
from prompt_router.context.payload import PayloadError, TriggerPayload
from prompt_router.discovery.records import PluginKind
from prompt_router.pipeline import MatchPipeline

SUGGESTION_LINE = re.compile(r"^\d+\. (?P<name>[^:]+): ")


def _pipeline(tree: PluginTree, **settings: object) -> MatchPipeline:
    return MatchPipeline(RouterConfig(project_dir=tree.project, home_dir=tree.home, **settings))


def _suggested_names(text: str) -> list[str]:
    return [m.group("name") for line in text.splitlines() if (m := SUGGESTION_LINE.match(line))]


class TestScenarios:
    def test_no_plugins_no_reply(self, tree: PluginTree, payload_json: str) -> None:
        assert _pipeline(tree).run_json(payload_json) is None

    def test_single_capability(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("docker", count_matcher(3, kind="capability"))
        reply = _pipeline(tree).run_json(payload_json)
        lines = [line for line in reply.additional_context.splitlines() if SUGGESTION_LINE.match(line)]
        assert lines == ['1. docker: Skill tool, skill="docker"']

    def test_raising_plugin_is_excluded(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("broken", RAISING_MATCHER)
        tree.capability("docker", count_matcher(1))
        reply = _pipeline(tree).run_json(payload_json)
        assert _suggested_names(reply.additional_context) == ["docker"]

    def test_exiting_async_plugin_is_excluded(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability(
            "quitter",
            """
            import sys

            async def match(context):
                sys.exit(3)
            """,
        )
        tree.capability("docker", count_matcher(1))
        reply = _pipeline(tree).run_json(payload_json)
        assert _suggested_names(reply.additional_context) == ["docker"]

    def test_scores_relative_to_top(self, tree: PluginTree, payload_data: dict[str, str]) -> None:
        tree.capability("first", count_matcher(8))
        tree.capability("second", count_matcher(4))
        pipeline = _pipeline(tree)
        payload = TriggerPayload.from_mapping(payload_data)

        async def _ranked():
            records = pipeline.discover()
            return await pipeline.evaluate(records, pipeline.build_context(payload))

        ranked = asyncio.run(_ranked())
        assert [(item.name, item.score) for item in ranked] == [("first", 1.0), ("second", 0.5)]

    def test_wrong_version_result_excluded(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability(
            "old",
            """
            def match(context):
                return {"version": "1.0", "relevant": True, "priority": "high", "relevance": "high"}
            """,
        )
        tree.capability("docker", count_matcher(2))
        reply = _pipeline(tree).run_json(payload_json)
        assert _suggested_names(reply.additional_context) == ["docker"]

    def test_no_relevant_plugins_no_reply(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("k8s", keyword_matcher("kubernetes", "helm"))
        assert _pipeline(tree).run_json(payload_json) is None


class TestPayloadIsFatal:
    @pytest.mark.parametrize("field", ["prompt", "session_id", "hook_event_name"])
    def test_fails_before_any_plugin_loads(
        self, tree: PluginTree, payload_data: dict[str, str], tmp_path: Path, field: str
    ) -> None:
        marker = tmp_path / "loaded"
        tree.capability(
            "spy",
            f"""
            from pathlib import Path

            Path({str(marker)!r}).write_text("loaded")

            def match(context):
                return {{"version": "2.0", "matchCount": 1}}
            """,
        )
        del payload_data[field]
        with pytest.raises(PayloadError):
            _pipeline(tree).run_json(json.dumps(payload_data))
        assert not marker.exists()


class TestProperties:
    def test_stuffed_count_scores_like_cap(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("stuffed", count_matcher(50))
        tree.capability("honest", count_matcher(10))
        reply = _pipeline(tree).run_json(payload_json)
        # equal scores: discovery order (by name) decides
        assert _suggested_names(reply.additional_context) == ["honest", "stuffed"]

    def test_idempotent(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("docker", count_matcher(3))
        tree.delegate("reviewer", count_matcher(5))
        tree.action("deploy", count_matcher(1))
        pipeline = _pipeline(tree)
        first = pipeline.run_json(payload_json)
        second = pipeline.run_json(payload_json)
        assert first.to_json() == second.to_json()

    def test_every_name_was_discovered(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("docker", count_matcher(3))
        tree.delegate("reviewer", count_matcher(5), scope="user")
        tree.action("deploy", count_matcher(1))
        tree.capability("quiet", count_matcher(0))
        pipeline = _pipeline(tree)
        discovered = {record.name for record in pipeline.discover()}
        names = _suggested_names(pipeline.run_json(payload_json).additional_context)
        assert names == ["reviewer", "docker", "deploy"]
        assert set(names) <= discovered

    def test_hints_follow_kind(self, tree: PluginTree, payload_json: str) -> None:
        tree.delegate("reviewer", count_matcher(2))
        tree.action("deploy", count_matcher(2))
        text = _pipeline(tree).run_json(payload_json).additional_context
        assert '1. reviewer: Task tool, subagent_type="reviewer"' in text
        assert '2. deploy: SlashCommand tool, command="/deploy"' in text


class TestDiscover:
    def test_explicit_paths(self, tree: PluginTree) -> None:
        path = tree.capability("docker", count_matcher(1))
        tree.capability("other", count_matcher(1))
        records = _pipeline(tree).discover([str(path)])
        assert [record.name for record in records] == ["docker"]

    def test_empty_path_list_means_nothing_found(self, tree: PluginTree) -> None:
        tree.capability("docker", count_matcher(1))
        assert _pipeline(tree).discover([]) == []

    def test_none_scans_roots(self, tree: PluginTree) -> None:
        tree.action("deploy", count_matcher(1))
        (record,) = _pipeline(tree).discover(None)
        assert record.kind is PluginKind.ACTION

    def test_explicit_paths_reach_reply(self, tree: PluginTree, payload_json: str) -> None:
        path = tree.capability("docker", count_matcher(1))
        reply = _pipeline(tree).run_json(payload_json, [str(path)])
        assert _suggested_names(reply.additional_context) == ["docker"]


class TestLegacyPipeline:
    def test_tiered_reply(self, tree: PluginTree, payload_json: str) -> None:
        source = """
        def match(context):
            return {"version": "1.0", "relevant": True, "priority": "critical", "relevance": "high"}
        """
        tree.capability("docker", source, filename=LEGACY_CAPABILITY_FILE)
        tree.delegate(
            "reviewer",
            """
            def match(context):
                return {"version": "1.0", "relevant": True, "priority": "medium", "relevance": "low"}
            """,
            suffix=".matcher.py",
        )
        text = _pipeline(tree, protocol_version="1.0").run_json(payload_json).additional_context
        assert text.startswith("BEFORE PROCEEDING WITH THIS REQUEST:")
        assert '1. Skill tool, skill="docker"' in text
        assert '- reviewer: Task tool, subagent_type="reviewer"' in text

    def test_current_files_ignored(self, tree: PluginTree, payload_json: str) -> None:
        tree.capability("docker", count_matcher(3))
        assert _pipeline(tree, protocol_version="1.0").run_json(payload_json) is None
