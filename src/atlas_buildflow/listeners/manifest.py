"""
ManifestListener — registra unidades monitoradas no Manifest v1.

Cada `start_*` cria uma entrada de unidade (indexada pelo id do token) e
um evento `<categoria>_started`; cada `finish_*` atualiza a entrada e
registra `<categoria>_finished`. Ao término de um lifecycle, o Manifest
é persistido em `path` (quando configurado).
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from atlas_buildflow import __version__
from atlas_buildflow.core.execution.listener import (
    AssertionToken,
    ExecutionListener,
    JobToken,
    LifecycleToken,
    TargetToken,
    Token,
)
from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Category, Phase, Result, utc_now
from atlas_buildflow.core.traceability.manifest import (
    BuildManifest,
    create_manifest,
    save_manifest,
    unit_finished,
    unit_started,
)

logger = logging.getLogger(__name__)


class ManifestListener(ExecutionListener):
    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        *,
        run_id: Optional[str] = None,
        config_hash: str = "",
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.manifest: BuildManifest = create_manifest(
            run_id=run_id or uuid.uuid4().hex,
            started_at=utc_now(),
            version=__version__,
            config_hash=config_hash,
        )

    def _start(self, token: Token, category: Category, name: str, parent: Optional[Token], phase: Optional[Phase] = None) -> Token:
        unit_started(
            self.manifest,
            unit_id=token.id,
            category=category.value,
            name=name,
            ts=utc_now(),
            parent_id=parent.id if parent is not None else None,
            phase=phase.value if phase is not None else None,
        )
        return token

    def _finish(self, token: Token, result: Result) -> None:
        unit_finished(self.manifest, unit_id=token.id, ts=result.end_time, result=result.to_dict())

    def start_lifecycle(self, execution, job: JobInstance, lifecycle: Sequence[Phase], parent: Optional[Token]) -> LifecycleToken:
        return self._start(LifecycleToken(), Category.LIFECYCLE, str(job), parent)

    def finish_lifecycle(self, execution, token: LifecycleToken, result: Result) -> None:
        self._finish(token, result)
        self.save()

    def start_job(self, execution, job: JobInstance, phase: Phase, parent: Optional[Token]) -> JobToken:
        return self._start(JobToken(), Category.JOB, str(job), parent, phase)

    def finish_job(self, execution, token: JobToken, result: Result) -> None:
        self._finish(token, result)

    def start_target(self, execution, target: Any, phase: Phase, parent: Optional[Token]) -> TargetToken:
        return self._start(TargetToken(), Category.TARGET, getattr(target, "name", str(target)), parent, phase)

    def finish_target(self, execution, token: TargetToken, result: Result) -> None:
        self._finish(token, result)

    def start_assertion(self, execution, assertion: Any, parent: Optional[Token]) -> AssertionToken:
        return self._start(AssertionToken(), Category.ASSERTION, getattr(assertion, "name", str(assertion)), parent)

    def finish_assertion(self, execution, token: AssertionToken, result: Result) -> None:
        self._finish(token, result)

    def save(self) -> None:
        if self.path is None:
            return
        save_manifest(self.manifest, self.path)
        logger.info("Manifest written to %s", self.path)
