# src/atlas_buildflow/core/model/job.py
"""
Jobs do Atlas BuildFlow.

Um Job agrupa targets de um projeto e declara parâmetros e bindings de
ambiente. Uma execução concreta de um job com argumentos resolvidos é
identificada por um `JobInstance`, que é o que os listeners recebem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from atlas_buildflow.core.exceptions import ExecutionConfigurationError


@dataclass(frozen=True)
class JobParameter:
    """Parâmetro declarado de um job: nome, tipo lógico e default opcional."""

    name: str
    ptype: str = "string"
    default: Any = None
    description: Optional[str] = None

    def parse(self, value: Any) -> Any:
        ptype = self.ptype.lower()
        try:
            if ptype in {"integer", "int", "long"}:
                return int(value)
            if ptype in {"float", "double"}:
                return float(value)
            if ptype == "boolean":
                if isinstance(value, bool):
                    return value
                return {"true": True, "false": False}[str(value).strip().lower()]
        except (TypeError, ValueError, KeyError) as ex:
            raise ExecutionConfigurationError(
                message=f"Invalid value {value!r} for job parameter '{self.name}'",
                details={"parameter": self.name, "type": self.ptype, "value": str(value)},
            ) from ex
        return value if ptype != "string" else str(value)


@dataclass(frozen=True)
class Job:
    """
    Definição de job.

    Campos:
        - name: nome do job
        - targets: nomes dos targets executados pelo job
        - parameters: parâmetros aceitos (argumentos da execução)
        - environment: bindings adicionais aplicados ao escopo do job
    """

    name: str
    targets: Tuple[str, ...] = field(default_factory=tuple)
    parameters: Tuple[JobParameter, ...] = field(default_factory=tuple)
    environment: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(self.targets))
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "environment", dict(self.environment))

    def arguments(self, args: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """
        Resolve os argumentos de uma execução.

        Raises:
            ExecutionConfigurationError: argumento desconhecido ou parâmetro
                obrigatório (sem default) ausente.
        """
        args = dict(args or {})
        declared = {p.name: p for p in self.parameters}

        unknown = sorted(k for k in args if k not in declared)
        if unknown:
            raise ExecutionConfigurationError(
                message=f"Unknown arguments for job '{self.name}': {', '.join(unknown)}",
                details={"job": self.name, "unknown": unknown},
            )

        resolved: Dict[str, Any] = {}
        for p in self.parameters:
            if p.name in args:
                resolved[p.name] = p.parse(args[p.name])
            elif p.default is not None:
                resolved[p.name] = p.parse(p.default)
            else:
                raise ExecutionConfigurationError(
                    message=f"Missing argument '{p.name}' for job '{self.name}'",
                    details={"job": self.name, "parameter": p.name},
                    hint="Pass the argument explicitly or declare a default",
                )
        return resolved

    def instance(self, args: Optional[Mapping[str, Any]] = None, project: Optional[str] = None) -> "JobInstance":
        return JobInstance(job=self.name, project=project, arguments=tuple(sorted(self.arguments(args).items())))


@dataclass(frozen=True)
class JobInstance:
    """Identidade de uma execução concreta de job (job + projeto + argumentos)."""

    job: str
    project: Optional[str] = None
    arguments: Tuple[Tuple[str, Any], ...] = ()

    @property
    def args(self) -> Dict[str, Any]:
        return dict(self.arguments)

    def __str__(self) -> str:
        name = f"{self.project}/{self.job}" if self.project else self.job
        if not self.arguments:
            return name
        return f"{name}(" + ", ".join(f"{k}={v}" for k, v in self.arguments) + ")"
