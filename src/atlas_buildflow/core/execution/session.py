# src/atlas_buildflow/core/execution/session.py
"""
Sessão do Atlas BuildFlow.

A Session amarra as peças de uma execução:
    - configuração resolvida (loader em camadas)
    - contexto raiz e contextos de projeto registrados
    - execução raiz para instanciação ad hoc (`session.execution`)
    - Runner com listeners e quadro de métricas compartilhados

Configuração consumida:
    - engine.log_level          → nível do logger `atlas_buildflow`
    - execution.shutdown_hook   → instala conversão de SIGTERM durante jobs
    - manifest.path             → anexa um ManifestListener persistente
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from atlas_buildflow.core.config import compute_config_hash, config_value, load_config
from atlas_buildflow.core.context import Context
from atlas_buildflow.core.model.job import Job
from atlas_buildflow.core.model.project import Project
from atlas_buildflow.core.model.results import Lifecycle, Phase, Result

from .listener import ExecutionListener
from .metrics import MetricBoard
from .root import RootExecution
from .shutdown import TerminationSignals

if TYPE_CHECKING:
    from atlas_buildflow.core.engine.runner import Runner

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "atlas_buildflow"


class Session:
    """
    Args:
        config: configuração resolvida (default: `load_config()`)
        projects: projetos a registrar
        listeners: listeners anexados a toda execução de job
        environment: bindings globais (contexto raiz)
    """

    def __init__(
        self,
        *,
        config: Optional[Dict[str, Any]] = None,
        projects: Sequence[Project] = (),
        listeners: Sequence[ExecutionListener] = (),
        environment: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.config: Dict[str, Any] = config if config is not None else load_config()
        logging.getLogger(PACKAGE_LOGGER).setLevel(
            str(config_value(self.config, "engine.log_level", "INFO")).upper()
        )

        self.context = Context(environment=environment, config=self.config)
        self.metrics = MetricBoard()
        self.listeners: List[ExecutionListener] = list(listeners)

        manifest_path = config_value(self.config, "manifest.path")
        if manifest_path:
            from atlas_buildflow.listeners.manifest import ManifestListener

            self.listeners.append(ManifestListener(manifest_path, config_hash=compute_config_hash(self.config)))

        self.projects: Dict[str, Project] = {}
        self._execution: Optional[RootExecution] = None
        for project in projects:
            self.add_project(project)

    # -----------------------------
    # Projetos
    # -----------------------------
    def add_project(self, project: Project) -> Context:
        ctx = project.create_context(self.context)
        self.context.register_project(ctx)
        self.projects[project.name] = project
        logger.debug("Registered project '%s'", project.name)
        return ctx

    def project_context(self, name: str) -> Context:
        return self.context.project_context(name)

    # -----------------------------
    # Execução
    # -----------------------------
    @property
    def execution(self) -> RootExecution:
        """Execução raiz da sessão (criada sob demanda, liberada em `close`)."""
        if self._execution is None:
            self._execution = RootExecution(self.context, config=self.config, metrics=self.metrics)
        return self._execution

    @property
    def runner(self) -> "Runner":
        from atlas_buildflow.core.engine.runner import Runner

        return Runner(self.context, config=self.config, listeners=self.listeners, metrics=self.metrics)

    def run_job(
        self,
        project: str,
        job: Union[str, Job],
        phases: Union[Phase, str, Sequence[Phase]] = Lifecycle.BUILD,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        force: bool = False,
    ) -> Result:
        """
        Executa um job de um projeto registrado.

        `phases` aceita uma sequência de fases ou uma única fase (membro ou
        nome); neste caso o lifecycle completo até ela é executado (ex.:
        VERIFY → BUILD inteiro).
        """
        if project not in self.projects:
            self.context.project_context(project)
        definition = job if isinstance(job, Job) else self.projects[project].get_job(job)
        if isinstance(phases, str):
            phases = Phase(phases)
        if isinstance(phases, Phase):
            phases = Lifecycle.of_phase(phases)

        enabled = bool(config_value(self.config, "execution.shutdown_hook", True))
        with TerminationSignals(enabled=enabled):
            return self.runner.execute_job(definition, phases, arguments, project=project, force=force)

    def close(self) -> None:
        if self._execution is not None:
            self._execution.cleanup()
            self._execution = None

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False
