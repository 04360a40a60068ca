# src/atlas_buildflow/core/execution/monitor.py
"""
Decorator de execução monitorada por listeners.

O MonitorExecution envolve uma execução (pai) e garante pares bem
formados de notificações start/finish para quatro tipos de unidade:
lifecycle, job, target e assertion. O contrato é o mesmo para todos:

    1. `start_*` de cada listener antes da unidade. Se um listener
       falhar no start, a falha é logada e ele é descartado para esta
       unidade (não recebe finish). Os demais não são afetados.
    2. A unidade roda com uma execução filha que carrega apenas os pares
       (listener, token) iniciados com sucesso, mais as métricas.
    3. Retorno normal: `finish_*` com o resultado, na ordem original de
       registro. Falhas em finish são logadas e nunca propagadas.
    4. Exceção na unidade: um resultado FAILED é sintetizado com o
       timestamp de início original, entregue a todos os listeners
       iniciados, e a exceção original é relançada.
    5. Término abrupto: um hook de `atexit`, registrado apenas enquanto a
       unidade roda, entrega o mesmo finish FAILED. Cada listener recebe
       exatamente uma notificação terminal.
    6. `with_listeners` / `with_metrics` criam uma nova camada sem
       alterar esta.

Estados por unidade: NOT_STARTED → RUNNING → {SUCCESS, FAILED}.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from atlas_buildflow.core.config import config_value
from atlas_buildflow.core.errors import EXECUTION_INTERRUPTED, BuildErrorPayload, exception_to_error
from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Category, Phase, Result, Status, utc_now
from atlas_buildflow.core.model.types import Schema

from .execution import Execution, UnitFn
from .listener import ExecutionListener, Token
from .metrics import JOB_RUNTIME, TARGET_RUNTIME, MetricBoard
from .shutdown import ShutdownHook
from .views import ViewCatalog

logger = logging.getLogger(__name__)

ListenerPair = Tuple[ExecutionListener, Optional[Token]]


class MonitorExecution(Execution):
    """
    Args:
        parent: execução envolvida (artefatos, config e views são delegados)
        listeners: pares (listener, token do pai); o token é None no nível raiz
        metrics: quadro de métricas ativo (default: o do pai)
    """

    def __init__(
        self,
        parent: Execution,
        listeners: Sequence[ListenerPair] = (),
        metrics: Optional[MetricBoard] = None,
    ) -> None:
        self._parent = parent
        self._listeners: List[ListenerPair] = list(listeners)
        self._metrics = metrics

    # -----------------------------
    # Delegação
    # -----------------------------
    def instantiate(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        return self._parent.instantiate(identifier)

    def get_table(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        return self._parent.get_table(identifier)

    def tables(self) -> Dict[TableIdentifier, pd.DataFrame]:
        return self._parent.tables()

    def describe(self, identifier: Union[str, TableIdentifier]) -> Schema:
        return self._parent.describe(identifier)

    def cleanup(self) -> None:
        self._parent.cleanup()

    @property
    def config(self) -> Dict[str, Any]:
        return self._parent.config

    @property
    def views(self) -> ViewCatalog:
        return self._parent.views

    @property
    def metrics(self) -> Optional[MetricBoard]:
        return self._metrics if self._metrics is not None else self._parent.metrics

    @property
    def listeners(self) -> List[ListenerPair]:
        return list(self._listeners)

    # -----------------------------
    # Unidades monitoradas
    # -----------------------------
    def monitor_lifecycle(
        self,
        job: JobInstance,
        arguments: Mapping[str, Any],
        lifecycle: Sequence[Phase],
        fn: UnitFn,
    ) -> Result:
        phases = tuple(lifecycle)
        return self._monitor(
            unit=f"lifecycle of job '{job}'",
            start=lambda listener, parent: listener.start_lifecycle(self, job, phases, parent),
            finish=lambda listener, token, result: listener.finish_lifecycle(self, token, result),
            failed=lambda start, error: Result.failed(Category.LIFECYCLE, job.job, start, error),
            fn=fn,
        )

    def monitor_job(self, job: JobInstance, arguments: Mapping[str, Any], phase: Phase, fn: UnitFn) -> Result:
        return self._monitor(
            unit=f"job '{job}' in phase {phase.value}",
            start=lambda listener, parent: listener.start_job(self, job, phase, parent),
            finish=lambda listener, token, result: listener.finish_job(self, token, result),
            failed=lambda start, error: Result.failed(Category.JOB, job.job, start, error, phase=phase),
            fn=fn,
            metric=(JOB_RUNTIME, {"job": job.job, "project": job.project or "", "phase": phase.value}),
        )

    def monitor_target(self, target: Any, phase: Phase, fn: UnitFn) -> Result:
        name = getattr(target, "name", str(target))
        return self._monitor(
            unit=f"target '{name}' in phase {phase.value}",
            start=lambda listener, parent: listener.start_target(self, target, phase, parent),
            finish=lambda listener, token, result: listener.finish_target(self, token, result),
            failed=lambda start, error: Result.failed(Category.TARGET, name, start, error, phase=phase),
            fn=fn,
            metric=(TARGET_RUNTIME, {"target": name, "phase": phase.value}),
        )

    def monitor_assertion(self, assertion: Any, fn: UnitFn) -> Result:
        name = getattr(assertion, "name", str(assertion))
        return self._monitor(
            unit=f"assertion '{name}'",
            start=lambda listener, parent: listener.start_assertion(self, assertion, parent),
            finish=lambda listener, token, result: listener.finish_assertion(self, token, result),
            failed=lambda start, error: Result.failed(Category.ASSERTION, name, start, error),
            fn=fn,
        )

    def _monitor(
        self,
        *,
        unit: str,
        start: Callable[[ExecutionListener, Optional[Token]], Token],
        finish: Callable[[ExecutionListener, Token, Result], None],
        failed: Callable[[Any, BuildErrorPayload], Result],
        fn: UnitFn,
        metric: Optional[Tuple[str, Dict[str, str]]] = None,
    ) -> Result:
        start_time = utc_now()
        started: List[Tuple[ExecutionListener, Token]] = []
        for listener, parent_token in self._listeners:
            try:
                token = start(listener, parent_token)
            except Exception:
                logger.warning(
                    "Execution listener %s failed on start of %s, dropping it for this unit",
                    type(listener).__name__,
                    unit,
                    exc_info=True,
                )
                continue
            started.append((listener, token))

        delivered: List[Result] = []

        def notify(result: Result) -> None:
            if delivered:
                return
            delivered.append(result)
            for listener, token in started:
                try:
                    finish(listener, token, result)
                except Exception:
                    logger.warning(
                        "Execution listener %s failed on finish of %s",
                        type(listener).__name__,
                        unit,
                        exc_info=True,
                    )

        def on_shutdown() -> None:
            notify(
                failed(
                    start_time,
                    BuildErrorPayload(
                        type=EXECUTION_INTERRUPTED,
                        message=f"Process terminated while {unit} was running",
                    ),
                )
            )

        child = MonitorExecution(self, started, self.metrics)
        hook_enabled = bool(config_value(self.config, "execution.shutdown_hook", True))
        status = Status.FAILED
        t0 = time.perf_counter()
        try:
            with ShutdownHook(on_shutdown, enabled=hook_enabled):
                try:
                    result = fn(child)
                except BaseException as ex:
                    notify(failed(start_time, exception_to_error(ex)))
                    raise
                status = result.status
                notify(result)
                return result
        finally:
            board = self.metrics
            if metric is not None and board is not None:
                name, labels = metric
                board.record(name, time.perf_counter() - t0, status=status.value, **labels)
