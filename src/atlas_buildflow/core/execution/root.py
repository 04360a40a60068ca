# src/atlas_buildflow/core/execution/root.py
"""
Execução raiz do Atlas BuildFlow.

A RootExecution é dona dos recursos de uma execução:
    - um ProjectExecutor por projeto (criado sob demanda)
    - o catálogo de views temporárias
    - o quadro de métricas

Identificadores qualificados (`projeto/nome`) são roteados para o
executor do projeto correspondente. Identificadores não qualificados só
são aceitos quando há um projeto default.

A raiz não carrega listeners: seus `monitor_*` delegam para um
MonitorExecution sem listeners. Para observar, use `with_listeners`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd

from atlas_buildflow.core.context import Context
from atlas_buildflow.core.exceptions import ExecutionConfigurationError
from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Phase, Result
from atlas_buildflow.core.model.types import Schema

from .execution import Execution, UnitFn
from .metrics import MetricBoard
from .monitor import MonitorExecution
from .project_executor import ProjectExecutor
from .views import ViewCatalog

logger = logging.getLogger(__name__)


class RootExecution(Execution):
    """
    Args:
        context: contexto raiz (com os projetos registrados)
        config: configuração resolvida (default: a do contexto)
        metrics: quadro de métricas (default: um novo quadro)
        scopes: contextos que substituem o contexto de um projeto nesta
            execução (ex.: escopo de job com argumentos)
        default_project: projeto usado para identificadores não qualificados
    """

    def __init__(
        self,
        context: Context,
        *,
        config: Optional[Dict[str, Any]] = None,
        metrics: Optional[MetricBoard] = None,
        scopes: Optional[Mapping[str, Context]] = None,
        default_project: Optional[str] = None,
    ) -> None:
        self.context = context
        self._config = config if config is not None else context.config
        self._metrics = metrics if metrics is not None else MetricBoard()
        self._scopes: Dict[str, Context] = dict(scopes or {})
        self._views = ViewCatalog()
        self._executors: Dict[str, ProjectExecutor] = {}
        self._resolving: List[TableIdentifier] = []
        self.default_project = default_project

    # -----------------------------
    # Executores
    # -----------------------------
    def executor(self, project: Optional[str] = None) -> ProjectExecutor:
        """Executor do projeto (criado sob demanda).

        Raises:
            NoSuchProjectError: projeto não registrado no contexto raiz.
            ExecutionConfigurationError: sem projeto e sem default.
        """
        name = project or self.default_project
        if name is None:
            candidates = list(self._scopes) or self.context.project_names
            if len(candidates) == 1:
                name = candidates[0]
            else:
                raise ExecutionConfigurationError(
                    message="Unqualified table identifier without a default project",
                    hint="Qualify the identifier as 'project/name'",
                )

        if name not in self._executors:
            ctx = self._scopes.get(name) or self.context.project_context(name)
            logger.debug("Creating executor for project '%s'", name)
            self._executors[name] = ProjectExecutor(ctx, self, self._resolving)
        return self._executors[name]

    def _route(self, identifier: Union[str, TableIdentifier]) -> ProjectExecutor:
        return self.executor(TableIdentifier.parse(identifier).project)

    def instantiate(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        ident = TableIdentifier.parse(identifier)
        return self._route(ident).instantiate(TableIdentifier(ident.name))

    def get_table(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        ident = TableIdentifier.parse(identifier)
        return self._route(ident).get_table(TableIdentifier(ident.name))

    def describe(self, identifier: Union[str, TableIdentifier]) -> Schema:
        ident = TableIdentifier.parse(identifier)
        return self._route(ident).describe(TableIdentifier(ident.name))

    def tables(self) -> Dict[TableIdentifier, pd.DataFrame]:
        out: Dict[TableIdentifier, pd.DataFrame] = {}
        for executor in self._executors.values():
            out.update(executor.tables())
        return out

    def cleanup(self) -> None:
        for executor in self._executors.values():
            executor.cleanup()

    # -----------------------------
    # Ambiente
    # -----------------------------
    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def views(self) -> ViewCatalog:
        return self._views

    @property
    def metrics(self) -> MetricBoard:
        return self._metrics

    # -----------------------------
    # Monitoramento
    # -----------------------------
    def _monitor(self) -> MonitorExecution:
        return MonitorExecution(self, [], self._metrics)

    def monitor_lifecycle(
        self,
        job: JobInstance,
        arguments: Mapping[str, Any],
        lifecycle: Sequence[Phase],
        fn: UnitFn,
    ) -> Result:
        return self._monitor().monitor_lifecycle(job, arguments, lifecycle, fn)

    def monitor_job(self, job: JobInstance, arguments: Mapping[str, Any], phase: Phase, fn: UnitFn) -> Result:
        return self._monitor().monitor_job(job, arguments, phase, fn)

    def monitor_target(self, target: Any, phase: Phase, fn: UnitFn) -> Result:
        return self._monitor().monitor_target(target, phase, fn)

    def monitor_assertion(self, assertion: Any, fn: UnitFn) -> Result:
        return self._monitor().monitor_assertion(assertion, fn)
