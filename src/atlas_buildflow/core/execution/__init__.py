# src/atlas_buildflow/core/execution/__init__.py
"""
Execução do Atlas BuildFlow.

Componentes principais:
    - execution        → interface comum (`Execution`)
    - project_executor → instanciação dirigida por dependências, com cache
    - root             → execução raiz, dona de executores, views e métricas
    - monitor          → decorator que notifica listeners por unidade
    - listener         → contrato de listener e tokens de correlação
    - shutdown         → hook de término abrupto e sinais
    - session          → ponto de entrada: config, projetos, runner
"""

from .execution import Execution
from .listener import (
    AssertionToken,
    ExecutionListener,
    JobToken,
    LifecycleToken,
    TargetToken,
    Token,
)
from .metrics import Metric, MetricBoard
from .monitor import MonitorExecution
from .project_executor import ProjectExecutor
from .root import RootExecution
from .session import Session
from .shutdown import ShutdownHook, TerminationSignals
from .views import ViewCatalog

__all__ = [
    "AssertionToken",
    "Execution",
    "ExecutionListener",
    "JobToken",
    "LifecycleToken",
    "Metric",
    "MetricBoard",
    "MonitorExecution",
    "ProjectExecutor",
    "RootExecution",
    "Session",
    "ShutdownHook",
    "TargetToken",
    "TerminationSignals",
    "Token",
    "ViewCatalog",
]
