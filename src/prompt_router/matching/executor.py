"""Run matchers with per-plugin failure isolation.

Every plugin goes through load, invoke, and validate inside its own
boundary.  Whatever goes wrong there (an import error, a bad export, an
exception, a timeout, an invalid result) becomes a ``PluginOutcome`` with
a failure status and a log line; nothing escapes to sibling plugins or to
the caller.

Loading and the synchronous part of the call run on a daemon thread, so a
plugin stuck in a loop can be abandoned at the timeout without keeping the
process alive.  Awaitables returned by a plugin are awaited on the event
loop, where the same timeout applies.

Classes
-------
- OutcomeStatus   — ok, or which stage failed
- PluginOutcome   — the per-plugin verdict
- PluginExecutor  — evaluates a batch of plugins
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from prompt_router.context.builder import InvocationContext
from prompt_router.discovery.records import PluginRecord
from prompt_router.matching.loader import (
    InvalidExportError,
    Matcher,
    PluginLoadError,
    load_matcher,
)
from prompt_router.matching.results import CurrentResult, LegacyResult
from prompt_router.matching.validator import validate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: float = 5.0


class OutcomeStatus(str, Enum):
    OK = "ok"
    LOAD_FAILED = "load_failed"
    INVALID_EXPORT = "invalid_export"
    EXECUTION_FAILED = "execution_failed"
    TIMED_OUT = "timed_out"
    INVALID_RESULT = "invalid_result"


@dataclass(frozen=True)
class PluginOutcome:
    """What happened to one plugin.

    Parameters
    ----------
    record:
        The plugin evaluated.
    status:
        ``OK`` or the stage that failed.
    result:
        The validated result; set only when ``status`` is ``OK``.
    error:
        Failure description; empty on success.
    """

    record: PluginRecord
    status: OutcomeStatus
    result: LegacyResult | CurrentResult | None = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.OK


def _run_detached(func: Callable[[], Any]) -> asyncio.Future[Any]:
    """Run *func* on a daemon thread and return a future for its result."""
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _settle(value: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(value)

    def _target() -> None:
        value: Any = None
        error: BaseException | None = None
        try:
            value = func()
        except Exception as exc:
            error = exc
        except SystemExit as exc:
            error = RuntimeError(f"matcher called exit({exc.code!r})")
        try:
            loop.call_soon_threadsafe(_settle, value, error)
        except RuntimeError:
            # The loop closed after this plugin was abandoned.
            return

    threading.Thread(target=_target, name="prompt-router-matcher", daemon=True).start()
    return future


class PluginExecutor:
    """Load, invoke, and validate matchers.

    Parameters
    ----------
    timeout:
        Seconds allowed per plugin for load plus invocation.
    concurrent:
        Evaluate all plugins at once (default) or one after another.
    loader:
        Callable turning a record into a ``Matcher``; defaults to
        ``load_matcher``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        concurrent: bool = True,
        loader: Callable[[PluginRecord], Matcher] = load_matcher,
    ) -> None:
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout!r}")
        self.timeout = timeout
        self.concurrent = concurrent
        self._loader = loader

    async def _invoke(self, record: PluginRecord, context: InvocationContext) -> Any:
        def _load_and_call() -> Any:
            return self._loader(record).evaluate(context)

        value = await _run_detached(_load_and_call)
        if inspect.isawaitable(value):
            # A SystemExit reaching the task step is re-raised out of the loop.
            try:
                value = await value
            except SystemExit as exc:
                raise RuntimeError(f"matcher called exit({exc.code!r})") from exc
        return value

    def _failed(self, record: PluginRecord, status: OutcomeStatus, error: str) -> PluginOutcome:
        logger.warning(
            "Matcher %s (%s) skipped [%s]: %s", record.label, record.path, status.value, error
        )
        return PluginOutcome(record=record, status=status, error=error)

    async def evaluate(self, record: PluginRecord, context: InvocationContext) -> PluginOutcome:
        """Evaluate one plugin; never raises for plugin-caused failures."""
        try:
            raw = await asyncio.wait_for(self._invoke(record, context), timeout=self.timeout)
        except InvalidExportError as exc:
            return self._failed(record, OutcomeStatus.INVALID_EXPORT, exc.reason)
        except PluginLoadError as exc:
            return self._failed(record, OutcomeStatus.LOAD_FAILED, exc.reason)
        except asyncio.TimeoutError:
            return self._failed(
                record, OutcomeStatus.TIMED_OUT, f"no result within {self.timeout}s"
            )
        except Exception as exc:
            return self._failed(
                record, OutcomeStatus.EXECUTION_FAILED, f"{type(exc).__name__}: {exc}"
            )

        verdict = validate(context.schema_version, raw)
        if not verdict.valid:
            return self._failed(record, OutcomeStatus.INVALID_RESULT, str(verdict.primary_error))

        logger.debug("Matcher %s returned %r", record.label, verdict.result)
        return PluginOutcome(record=record, status=OutcomeStatus.OK, result=verdict.result)

    async def run(
        self,
        records: Sequence[PluginRecord],
        context: InvocationContext,
    ) -> list[PluginOutcome]:
        """Evaluate every plugin; outcomes come back in *records* order."""
        if not self.concurrent:
            return [await self.evaluate(record, context) for record in records]
        return list(await asyncio.gather(*(self.evaluate(record, context) for record in records)))
