# src/atlas_buildflow/core/exceptions.py
"""
Atlas BuildFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas do núcleo de orquestração.

Objetivo:
- Permitir que executores, relações e targets levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para BuildErrorPayload
- Separar erros fatais de orquestração de erros de listeners (que nunca propagam)

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Toda exceção deste módulo é fatal para a unidade monitorada que a envolve.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(eq=False)
class BuildException(Exception):
    """Base class para exceções internas do Atlas BuildFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    - Não é frozen: context managers atribuem `__traceback__` na propagação
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Resolução de nomes (NotFound)
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class NotFoundError(BuildException):
    """Um nome não pôde ser resolvido no escopo corrente nem nos escopos pais."""


@dataclass(eq=False)
class NoSuchMappingError(NotFoundError):
    """Mapping não declarado no projeto (nem em contextos pais)."""


@dataclass(eq=False)
class NoSuchRelationError(NotFoundError):
    """Relation não declarada no projeto (nem em contextos pais)."""


@dataclass(eq=False)
class NoSuchTargetError(NotFoundError):
    """Target não declarado no projeto (nem em contextos pais)."""


@dataclass(eq=False)
class NoSuchProjectError(NotFoundError):
    """Identificador qualificado aponta para um projeto sem executor registrado."""


@dataclass(eq=False)
class TableNotFoundError(NotFoundError):
    """Artefato solicitado ainda não foi materializado pelo executor."""


# ---------------------------------------------------------------------------
# Grafo de dependências
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class CyclicDependencyError(BuildException):
    """Dependência circular detectada durante instanciação ou planejamento."""


# ---------------------------------------------------------------------------
# Relações / partições / schema
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class InvalidPartitionError(BuildException):
    """Predicado de partição malformado (campo desconhecido, valor não exato)."""


@dataclass(eq=False)
class SchemaMismatchError(BuildException):
    """Os dados lidos não satisfazem o schema solicitado."""


@dataclass(eq=False)
class RelationAlreadyExistsError(BuildException):
    """Conflito de filesystem ao criar uma relação que já existe."""


@dataclass(eq=False)
class RelationNotFoundError(BuildException):
    """Operação exige uma relação fisicamente existente."""


@dataclass(eq=False)
class OutputExistsError(BuildException):
    """Escrita com modo ERROR_IF_EXISTS encontrou dados na partição de destino."""


# ---------------------------------------------------------------------------
# Execução / configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class VerificationFailedError(BuildException):
    """Verificação de um target ou assertion falhou."""


@dataclass(eq=False)
class ExecutionConfigurationError(BuildException):
    """Configuração inválida ou inconsistente para execução."""
