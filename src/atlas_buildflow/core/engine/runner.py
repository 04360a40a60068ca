# src/atlas_buildflow/core/engine/runner.py
"""
Runner de jobs do Atlas BuildFlow.

O Runner conduz a execução de um job em três níveis monitorados:

    lifecycle → fases (um monitor_job por fase) → targets (monitor_target)

Para cada execução de job:
    - argumentos são validados pelo Job e sobrepostos, junto com o
      environment do job, num escopo filho do contexto do projeto
    - uma RootExecution nova é criada para o escopo e liberada no fim
    - targets são resolvidos no escopo e ordenados pelo planner

Políticas:
    - `engine.fail_fast` (default True): a primeira falha de target
      interrompe os targets restantes da fase
    - uma fase com falha sempre interrompe as fases seguintes
    - fases que um target não suporta resultam em SKIPPED
    - targets sem trabalho pendente (`dirty` falso) resultam em SKIPPED,
      exceto com `force=True`

Falhas de target não escapam do Runner: os listeners já receberam o
resultado FAILED via monitor e o Runner registra o resultado no
lifecycle retornado.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from atlas_buildflow.core.config import config_value
from atlas_buildflow.core.context import Context
from atlas_buildflow.core.errors import exception_to_error
from atlas_buildflow.core.execution.execution import Execution
from atlas_buildflow.core.execution.listener import ExecutionListener
from atlas_buildflow.core.execution.metrics import MetricBoard
from atlas_buildflow.core.execution.root import RootExecution
from atlas_buildflow.core.model.job import Job, JobInstance
from atlas_buildflow.core.model.results import Category, Lifecycle, Phase, Result, Status, utc_now
from atlas_buildflow.core.model.target import Target

from .planner import plan_targets

logger = logging.getLogger(__name__)


class Runner:
    """
    Args:
        context: contexto raiz (com os projetos registrados)
        config: configuração resolvida (default: a do contexto)
        listeners: listeners anexados a toda execução de job
        metrics: quadro de métricas compartilhado entre execuções
    """

    def __init__(
        self,
        context: Context,
        *,
        config: Optional[Dict[str, Any]] = None,
        listeners: Sequence[ExecutionListener] = (),
        metrics: Optional[MetricBoard] = None,
    ) -> None:
        self.context = context
        self.config = config if config is not None else context.config
        self.listeners: List[ExecutionListener] = list(listeners)
        self.metrics = metrics if metrics is not None else MetricBoard()

    def _fail_fast(self) -> bool:
        return bool(config_value(self.config, "engine.fail_fast", True))

    def execute_job(
        self,
        job: Job,
        phases: Sequence[Phase] = Lifecycle.BUILD,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        project: str,
        force: bool = False,
    ) -> Result:
        """
        Executa `job` do projeto `project` nas fases `phases`.

        Returns:
            Result: resultado do lifecycle, com um filho por fase executada.

        Raises:
            ExecutionConfigurationError: argumentos inválidos.
            NoSuchProjectError / NoSuchTargetError: nomes não resolvidos.
        """
        args = job.arguments(arguments)
        instance = job.instance(args, project)
        project_context = self.context.project_context(project)

        environment = dict(job.environment)
        environment.update(args)
        scope = project_context.child(environment)

        root = RootExecution(
            self.context,
            config=self.config,
            metrics=self.metrics,
            scopes={project: scope},
            default_project=project,
        )
        execution = root.with_listeners(self.listeners)
        lifecycle = tuple(Phase(p) for p in phases)

        logger.info("Running job '%s' with lifecycle %s", instance, [p.value for p in lifecycle])
        try:
            return execution.monitor_lifecycle(
                instance,
                args,
                lifecycle,
                lambda ex: self._run_lifecycle(ex, job, instance, args, lifecycle, scope, force),
            )
        finally:
            root.cleanup()

    def _run_lifecycle(
        self,
        execution: Execution,
        job: Job,
        instance: JobInstance,
        args: Mapping[str, Any],
        lifecycle: Sequence[Phase],
        scope: Context,
        force: bool,
    ) -> Result:
        start = utc_now()
        targets = [scope.get_target(name) for name in job.targets]
        children: List[Result] = []
        for phase in lifecycle:
            result = execution.monitor_job(
                instance,
                args,
                phase,
                lambda ex, phase=phase: self._run_phase(ex, instance, targets, phase, force),
            )
            children.append(result)
            if result.status == Status.FAILED:
                logger.warning("Phase %s of job '%s' failed, skipping remaining phases", phase.value, instance)
                break
        return Result.of(Category.LIFECYCLE, job.name, start, children=children)

    def _run_phase(
        self,
        execution: Execution,
        instance: JobInstance,
        targets: Sequence[Target],
        phase: Phase,
        force: bool,
    ) -> Result:
        start = utc_now()
        children: List[Result] = []
        for target in plan_targets(targets, phase):
            result = self._run_target(execution, target, phase, force)
            children.append(result)
            if result.status == Status.FAILED and self._fail_fast():
                logger.warning("Target '%s' failed in phase %s, stopping phase (fail_fast)", target.name, phase.value)
                break
        return Result.of(Category.JOB, instance.job, start, phase=phase, children=children)

    def _run_target(self, execution: Execution, target: Target, phase: Phase, force: bool) -> Result:
        if phase not in target.phases:
            return Result.skipped(Category.TARGET, target.name, phase=phase)

        def run(ex: Execution) -> Result:
            start = utc_now()
            if not force and not target.dirty(ex, phase):
                logger.info("Target '%s' is up to date in phase %s", target.name, phase.value)
                return Result.skipped(Category.TARGET, target.name, phase=phase)
            logger.info("Executing phase %s of target '%s'", phase.value, target.name)
            children = target.execute(ex, phase) or ()
            return Result.of(Category.TARGET, target.name, start, phase=phase, children=children)

        failure_start = utc_now()
        try:
            return execution.monitor_target(target, phase, run)
        except Exception as ex:
            logger.warning("Target '%s' failed in phase %s: %s", target.name, phase.value, ex)
            return Result.failed(Category.TARGET, target.name, failure_start, exception_to_error(ex), phase=phase)
