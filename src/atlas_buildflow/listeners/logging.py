"""LoggingListener: registra cada transição de unidade monitorada no log."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from atlas_buildflow.core.execution.listener import (
    AssertionToken,
    ExecutionListener,
    JobToken,
    LifecycleToken,
    TargetToken,
    Token,
)
from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Phase, Result, Status

logger = logging.getLogger(__name__)


class LoggingListener(ExecutionListener):
    def __init__(self, logger_: Optional[logging.Logger] = None) -> None:
        self.log = logger_ or logger

    def _finished(self, result: Result) -> None:
        level = logging.WARNING if result.status == Status.FAILED else logging.INFO
        phase = f" phase {result.phase.value}" if result.phase is not None else ""
        self.log.log(
            level,
            "Finished %s '%s'%s with status %s after %d ms",
            result.category.value,
            result.name,
            phase,
            result.status.value.upper(),
            result.duration_ms,
        )
        if result.error is not None:
            self.log.log(level, "  %s: %s", result.error.get("type"), result.error.get("message"))

    def start_lifecycle(self, execution, job: JobInstance, lifecycle: Sequence[Phase], parent: Optional[Token]) -> LifecycleToken:
        self.log.info("Starting lifecycle %s of job '%s'", [p.value for p in lifecycle], job)
        return LifecycleToken()

    def finish_lifecycle(self, execution, token: LifecycleToken, result: Result) -> None:
        self._finished(result)

    def start_job(self, execution, job: JobInstance, phase: Phase, parent: Optional[Token]) -> JobToken:
        self.log.info("Starting phase %s of job '%s'", phase.value, job)
        return JobToken()

    def finish_job(self, execution, token: JobToken, result: Result) -> None:
        self._finished(result)

    def start_target(self, execution, target: Any, phase: Phase, parent: Optional[Token]) -> TargetToken:
        self.log.info("Starting phase %s of target '%s'", phase.value, getattr(target, "name", target))
        return TargetToken()

    def finish_target(self, execution, token: TargetToken, result: Result) -> None:
        self._finished(result)

    def start_assertion(self, execution, assertion: Any, parent: Optional[Token]) -> AssertionToken:
        self.log.info("Running assertion '%s'", getattr(assertion, "name", assertion))
        return AssertionToken()

    def finish_assertion(self, execution, token: AssertionToken, result: Result) -> None:
        self._finished(result)
        for test in result.tests:
            if not test.success:
                self.log.warning("  assertion test failed: %s (%d violations)", test.expression, test.violations)
