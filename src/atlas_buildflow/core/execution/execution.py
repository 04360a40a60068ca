# src/atlas_buildflow/core/execution/execution.py
"""
Capacidade de execução compartilhada do Atlas BuildFlow.

`Execution` é a interface comum vista por mappings, targets, assertions
e pelo Runner. Ela expõe:
    - instanciação e consulta de artefatos (delegadas aos ProjectExecutors)
    - configuração, catálogo de views e quadro de métricas
    - monitoramento de unidades (`monitor_*`), que notifica listeners
    - composição: `with_listeners` / `with_metrics` devolvem uma nova
      execução decorada, sem alterar esta

Implementações:
    - RootExecution    → dona dos executores de projeto, views e métricas
    - MonitorExecution → decorator que carrega listeners e métricas
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Phase, Result
from atlas_buildflow.core.model.types import Schema

if TYPE_CHECKING:
    from .listener import ExecutionListener, Token
    from .metrics import MetricBoard
    from .views import ViewCatalog


Identifier = Union[str, TableIdentifier]
UnitFn = Callable[["Execution"], Result]


class Execution(ABC):
    """Interface comum de execução."""

    # -----------------------------
    # Artefatos
    # -----------------------------
    @abstractmethod
    def instantiate(self, identifier: Identifier) -> pd.DataFrame:
        ...

    @abstractmethod
    def get_table(self, identifier: Identifier) -> pd.DataFrame:
        ...

    @abstractmethod
    def tables(self) -> Dict[TableIdentifier, pd.DataFrame]:
        ...

    @abstractmethod
    def describe(self, identifier: Identifier) -> Schema:
        ...

    @abstractmethod
    def cleanup(self) -> None:
        ...

    # -----------------------------
    # Ambiente
    # -----------------------------
    @property
    @abstractmethod
    def config(self) -> Dict[str, Any]:
        ...

    @property
    @abstractmethod
    def views(self) -> "ViewCatalog":
        ...

    @property
    @abstractmethod
    def metrics(self) -> Optional["MetricBoard"]:
        ...

    @property
    def listeners(self) -> List[Tuple["ExecutionListener", Optional["Token"]]]:
        return []

    # -----------------------------
    # Composição
    # -----------------------------
    def with_listeners(self, listeners: Sequence["ExecutionListener"]) -> "Execution":
        """Nova execução com listeners adicionais; esta permanece inalterada."""
        from .monitor import MonitorExecution

        layered = self.listeners + [(listener, None) for listener in listeners]
        return MonitorExecution(self, layered, self.metrics)

    def with_metrics(self, metrics: "MetricBoard") -> "Execution":
        """Nova execução que registra métricas em `metrics`; esta permanece inalterada."""
        from .monitor import MonitorExecution

        return MonitorExecution(self, self.listeners, metrics)

    # -----------------------------
    # Monitoramento
    # -----------------------------
    @abstractmethod
    def monitor_lifecycle(
        self,
        job: JobInstance,
        arguments: Mapping[str, Any],
        lifecycle: Sequence[Phase],
        fn: UnitFn,
    ) -> Result:
        ...

    @abstractmethod
    def monitor_job(self, job: JobInstance, arguments: Mapping[str, Any], phase: Phase, fn: UnitFn) -> Result:
        ...

    @abstractmethod
    def monitor_target(self, target: Any, phase: Phase, fn: UnitFn) -> Result:
        ...

    @abstractmethod
    def monitor_assertion(self, assertion: Any, fn: UnitFn) -> Result:
        ...
