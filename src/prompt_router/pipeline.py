"""The prompt-time matching pipeline.

Control flow for one prompt::

    paths -> discover -> build context -> (load -> invoke -> validate) per plugin
          -> rank -> format -> reply

Only a malformed trigger payload is fatal.  Every per-plugin problem is
absorbed by the executor, and an empty suggestion list is a normal, silent
outcome.

Classes
-------
- MatchPipeline — runs the pipeline for one invocation
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from prompt_router.config import RouterConfig
from prompt_router.context.builder import InvocationContext, build_context
from prompt_router.context.payload import TriggerPayload
from prompt_router.discovery.records import PluginRecord
from prompt_router.discovery.scanner import discover_plugins, scan_plugins, search_roots
from prompt_router.matching.executor import PluginExecutor
from prompt_router.matching.formatter import HookReply, build_reply
from prompt_router.matching.ranker import RankedItem, rank
from prompt_router.protocol import MatcherProtocol, get_protocol

logger = logging.getLogger(__name__)


class MatchPipeline:
    """Discover, evaluate, rank, and render matchers for one prompt.

    Parameters
    ----------
    config:
        Runtime settings.  Defaults to ``RouterConfig()``.
    executor:
        Custom executor; by default one is built from *config*.
    """

    def __init__(
        self,
        config: RouterConfig | None = None,
        executor: PluginExecutor | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self.protocol: MatcherProtocol = get_protocol(self.config.protocol_version)
        self.executor = executor or PluginExecutor(
            timeout=self.config.plugin_timeout,
            concurrent=self.config.concurrent,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def discover(self, matcher_paths: Sequence[str] | None = None) -> list[PluginRecord]:
        """Return plugin records for *matcher_paths*, or from a full scan.

        ``None`` means the fast filter did not run, so the roots are
        scanned here; an empty sequence means it found nothing.
        """
        roots = search_roots(self.config.project_dir, self.config.home_dir)
        if matcher_paths is None:
            records = scan_plugins(roots, self.protocol)
        else:
            records = discover_plugins(matcher_paths, roots, self.protocol)
        logger.info(
            "Discovered %d matcher(s): %s",
            len(records),
            ", ".join(record.label for record in records) or "-",
        )
        return records

    def build_context(self, payload: TriggerPayload) -> InvocationContext:
        return build_context(payload, self.protocol.version)

    async def evaluate(
        self,
        records: Sequence[PluginRecord],
        context: InvocationContext,
    ) -> list[RankedItem]:
        """Run every matcher and rank the relevant results."""
        if not records:
            return []
        outcomes = await self.executor.run(records, context)
        ranked = rank(outcomes, self.protocol.version)
        logger.info(
            "Evaluated %d matcher(s), %d failed, %d relevant",
            len(outcomes),
            sum(1 for outcome in outcomes if not outcome.ok),
            len(ranked),
        )
        return ranked

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run(
        self,
        payload: TriggerPayload,
        matcher_paths: Sequence[str] | None = None,
    ) -> HookReply | None:
        """Run the whole pipeline for an already validated payload."""
        logger.debug("Payload accepted for session %s", payload.session_id)
        records = self.discover(matcher_paths)
        if not records:
            return None
        context = self.build_context(payload)
        ranked = await self.evaluate(records, context)
        return build_reply(ranked, self.protocol.version)

    def run_json(self, raw_payload: str, matcher_paths: Sequence[str] | None = None) -> HookReply | None:
        """Validate a JSON payload and run the pipeline to completion.

        Raises
        ------
        PayloadError
            If the payload is malformed; raised before any plugin loads.
        """
        payload = TriggerPayload.from_json(raw_payload)
        return asyncio.run(self.run(payload, matcher_paths))
