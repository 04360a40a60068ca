# src/atlas_buildflow/core/model/results.py
"""
Tipos canônicos de execução do Atlas BuildFlow.

Componentes:
    - Status    → estados finais (SUCCESS, FAILED, SKIPPED); SUCCESS é o
                  estado terminal SUCCEEDED do modelo de dados, serializado
                  como "success"
    - Phase     → fases de build (VALIDATE, CREATE, BUILD, VERIFY, TRUNCATE, DESTROY)
    - Lifecycle → sequências ordenadas de fases executadas por um job
    - Category  → tipo da unidade monitorada (lifecycle, job, target, assertion)
    - Result    → resultado imutável de uma unidade monitorada

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (`to_dict`)
    - Enums possuem valores textuais canônicos
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - Result é imutável
    - Um Result FAILED sintetizado carrega o timestamp de início original
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from atlas_buildflow.core.errors import BuildErrorPayload


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Status(str, Enum):
    """Estado final de uma unidade monitorada."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class Phase(str, Enum):
    """
    Fases de build, na ordem canônica do ciclo de vida.

    TRUNCATE e DESTROY são destrutivas: o planner as executa em ordem
    reversa de dependências.
    """

    VALIDATE = "validate"
    CREATE = "create"
    BUILD = "build"
    VERIFY = "verify"
    TRUNCATE = "truncate"
    DESTROY = "destroy"

    @property
    def destructive(self) -> bool:
        return self in (Phase.TRUNCATE, Phase.DESTROY)


class Lifecycle:
    """Sequências de fases executadas por um job."""

    BUILD: Tuple[Phase, ...] = (Phase.VALIDATE, Phase.CREATE, Phase.BUILD, Phase.VERIFY)
    CLEAN: Tuple[Phase, ...] = (Phase.TRUNCATE,)
    DESTROY: Tuple[Phase, ...] = (Phase.TRUNCATE, Phase.DESTROY)

    @classmethod
    def of_phase(cls, phase: Phase) -> Tuple[Phase, ...]:
        """Lifecycle completo até `phase`, inclusive (ex.: VERIFY → BUILD inteiro)."""
        for lifecycle in (cls.BUILD, cls.CLEAN, cls.DESTROY):
            if phase in lifecycle:
                return lifecycle[: lifecycle.index(phase) + 1]
        return (phase,)


class Category(str, Enum):
    LIFECYCLE = "lifecycle"
    JOB = "job"
    TARGET = "target"
    ASSERTION = "assertion"


@dataclass(frozen=True)
class AssertionTestResult:
    """Resultado de uma expressão individual de uma assertion."""

    expression: str
    success: bool
    violations: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"expression": self.expression, "success": self.success, "violations": self.violations}


@dataclass(frozen=True)
class Result:
    """
    Resultado imutável de uma unidade monitorada.

    Campos:
        - category: lifecycle, job, target ou assertion
        - name: nome da unidade (job, target, assertion)
        - status: estado final
        - start_time / end_time: timestamps UTC
        - phase: fase executada (job, target) quando aplicável
        - children: resultados das unidades aninhadas
        - tests: resultados por expressão (assertions)
        - error: payload de erro serializável quando FAILED
    """

    category: Category
    name: str
    status: Status
    start_time: datetime
    end_time: datetime
    phase: Optional[Phase] = None
    children: Tuple["Result", ...] = ()
    tests: Tuple[AssertionTestResult, ...] = ()
    error: Optional[Dict[str, Any]] = None

    @classmethod
    def of(
        cls,
        category: Category,
        name: str,
        start_time: datetime,
        *,
        phase: Optional[Phase] = None,
        children: Sequence["Result"] = (),
        tests: Sequence[AssertionTestResult] = (),
    ) -> "Result":
        """Resultado com status derivado dos filhos/testes (FAILED se algum falhou)."""
        failed = any(c.status == Status.FAILED for c in children) or any(not t.success for t in tests)
        return cls(
            category=category,
            name=name,
            status=Status.FAILED if failed else Status.SUCCESS,
            start_time=start_time,
            end_time=utc_now(),
            phase=phase,
            children=tuple(children),
            tests=tuple(tests),
        )

    @classmethod
    def failed(
        cls,
        category: Category,
        name: str,
        start_time: datetime,
        error: BuildErrorPayload,
        *,
        phase: Optional[Phase] = None,
    ) -> "Result":
        return cls(
            category=category,
            name=name,
            status=Status.FAILED,
            start_time=start_time,
            end_time=utc_now(),
            phase=phase,
            error=error.to_dict(),
        )

    @classmethod
    def skipped(cls, category: Category, name: str, *, phase: Optional[Phase] = None) -> "Result":
        now = utc_now()
        return cls(category=category, name=name, status=Status.SKIPPED, start_time=now, end_time=now, phase=phase)

    @property
    def success(self) -> bool:
        return self.status != Status.FAILED

    @property
    def duration_ms(self) -> int:
        return max(0, int((self.end_time - self.start_time).total_seconds() * 1000))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "category": self.category.value,
            "name": self.name,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_ms": self.duration_ms,
        }
        if self.phase is not None:
            out["phase"] = self.phase.value
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        if self.tests:
            out["tests"] = [t.to_dict() for t in self.tests]
        if self.error is not None:
            out["error"] = dict(self.error)
        return out
