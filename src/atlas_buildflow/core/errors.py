# src/atlas_buildflow/core/errors.py
"""
Atlas BuildFlow — Canonical Error Structures (v1)

Este módulo define o payload canônico de erro anexado a resultados FAILED.
Erros fazem parte do contrato operacional e devem ser:

- explícitos
- serializáveis
- rastreáveis

Listeners recebem o payload junto com o resultado sintetizado; a exceção
original continua propagando para o chamador.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional

from .exceptions import BuildException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildErrorPayload:
    """
    Payload canônico de erro do Atlas BuildFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

EXECUTION_ERROR = "EXECUTION_ERROR"
EXECUTION_INTERRUPTED = "EXECUTION_INTERRUPTED"

_CODES = {
    "NoSuchMappingError": "MAPPING_NOT_FOUND",
    "NoSuchRelationError": "RELATION_NOT_FOUND",
    "NoSuchTargetError": "TARGET_NOT_FOUND",
    "NoSuchProjectError": "PROJECT_NOT_FOUND",
    "TableNotFoundError": "TABLE_NOT_FOUND",
    "CyclicDependencyError": "CYCLIC_DEPENDENCY",
    "InvalidPartitionError": "INVALID_PARTITION",
    "SchemaMismatchError": "SCHEMA_MISMATCH",
    "RelationAlreadyExistsError": "RELATION_ALREADY_EXISTS",
    "RelationNotFoundError": "RELATION_MISSING",
    "OutputExistsError": "OUTPUT_EXISTS",
    "VerificationFailedError": "VERIFICATION_FAILED",
    "ExecutionConfigurationError": "EXECUTION_CONFIGURATION_ERROR",
}


def exception_to_error(exc: BaseException) -> BuildErrorPayload:
    """Converte exceções em BuildErrorPayload (serializável, sem stack trace).

    Regras:
    - BuildException: código estável derivado da classe, details/hint preservados.
    - Interrupções (KeyboardInterrupt, SystemExit): EXECUTION_INTERRUPTED.
    - Demais exceções: EXECUTION_ERROR com o nome da classe em details.
    """
    if isinstance(exc, BuildException):
        return BuildErrorPayload(
            type=_CODES.get(exc.__class__.__name__, EXECUTION_ERROR),
            message=exc.message or "Erro de execução",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    if not isinstance(exc, Exception):
        return BuildErrorPayload(
            type=EXECUTION_INTERRUPTED,
            message="Execução interrompida",
            details={"exception_class": exc.__class__.__name__},
        )

    return BuildErrorPayload(
        type=EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a definição do projeto",
    )
