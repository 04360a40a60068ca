# src/atlas_buildflow/core/execution/listener.py
"""
Contrato de listener de execução e tokens de correlação.

Um listener recebe pares de notificações `start_*` / `finish_*` para
quatro tipos de unidade: lifecycle, job, target e assertion. O valor
retornado por `start_*` é um token opaco, devolvido ao mesmo listener no
`finish_*` correspondente e passado como `parent` para as unidades
aninhadas.

Invariantes:
    - cada token corresponde a exatamente um par start/finish
    - tokens nunca são reutilizados (id único por instância)

A classe base implementa todos os hooks como no-op, retornando tokens
novos; listeners concretos sobrescrevem apenas o que observam.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence

from atlas_buildflow.core.model.job import JobInstance
from atlas_buildflow.core.model.results import Phase, Result

if TYPE_CHECKING:
    from .execution import Execution


def _token_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Token:
    id: str = field(default_factory=_token_id)


@dataclass(frozen=True)
class LifecycleToken(Token):
    pass


@dataclass(frozen=True)
class JobToken(Token):
    pass


@dataclass(frozen=True)
class TargetToken(Token):
    pass


@dataclass(frozen=True)
class AssertionToken(Token):
    pass


class ExecutionListener:
    """Observador de unidades monitoradas. Todos os hooks são opcionais."""

    def start_lifecycle(
        self,
        execution: "Execution",
        job: JobInstance,
        lifecycle: Sequence[Phase],
        parent: Optional[Token],
    ) -> LifecycleToken:
        return LifecycleToken()

    def finish_lifecycle(self, execution: "Execution", token: LifecycleToken, result: Result) -> None:
        pass

    def start_job(
        self,
        execution: "Execution",
        job: JobInstance,
        phase: Phase,
        parent: Optional[Token],
    ) -> JobToken:
        return JobToken()

    def finish_job(self, execution: "Execution", token: JobToken, result: Result) -> None:
        pass

    def start_target(
        self,
        execution: "Execution",
        target: Any,
        phase: Phase,
        parent: Optional[Token],
    ) -> TargetToken:
        return TargetToken()

    def finish_target(self, execution: "Execution", token: TargetToken, result: Result) -> None:
        pass

    def start_assertion(
        self,
        execution: "Execution",
        assertion: Any,
        parent: Optional[Token],
    ) -> AssertionToken:
        return AssertionToken()

    def finish_assertion(self, execution: "Execution", token: AssertionToken, result: Result) -> None:
        pass
