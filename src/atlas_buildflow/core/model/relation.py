# src/atlas_buildflow/core/model/relation.py
"""
Contrato uniforme de Relation do Atlas BuildFlow.

Toda relação (local, tabela, etc.) expõe o mesmo conjunto de operações,
para que executor e targets tratem qualquer tipo de armazenamento da
mesma forma:

    provides / requires / resources
    read / write / truncate
    exists / loaded
    create / migrate / destroy
    describe

Predicados de partição seguem a codificação de `model.partition`:
`campo → valor | conjunto | intervalo`, campo ausente = wildcard.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Optional, Set

import pandas as pd

from atlas_buildflow.core.identifiers import ResourceIdentifier
from .types import Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context


class OutputMode(str, Enum):
    """Semântica de escrita quando o destino já contém dados."""

    OVERWRITE = "overwrite"
    APPEND = "append"
    ERROR_IF_EXISTS = "error_if_exists"
    IGNORE_IF_EXISTS = "ignore_if_exists"


class Relation(ABC):
    """Base de todas as relações."""

    kind = "relation"

    def __init__(self, name: str, context: Optional["Context"] = None, *, description: Optional[str] = None) -> None:
        self.name = name
        self.context = context
        self.description = description

    @abstractmethod
    def provides(self) -> Set[ResourceIdentifier]:
        """Recursos criados/mantidos por esta relação."""

    @abstractmethod
    def requires(self) -> Set[ResourceIdentifier]:
        """Recursos dos quais esta relação depende para existir."""

    @abstractmethod
    def resources(self, partition: Optional[Mapping[str, Any]] = None) -> Set[ResourceIdentifier]:
        """Recursos físicos cobertos por um predicado de partição."""

    @abstractmethod
    def read(self, schema: Optional[Schema] = None, partition: Optional[Mapping[str, Any]] = None) -> pd.DataFrame:
        ...

    @abstractmethod
    def write(
        self,
        df: pd.DataFrame,
        partition: Optional[Mapping[str, Any]] = None,
        mode: OutputMode = OutputMode.OVERWRITE,
    ) -> None:
        ...

    @abstractmethod
    def truncate(self, partition: Optional[Mapping[str, Any]] = None) -> None:
        ...

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def loaded(self, partition: Optional[Mapping[str, Any]] = None) -> bool:
        ...

    @abstractmethod
    def create(self, if_not_exists: bool = False) -> None:
        ...

    @abstractmethod
    def migrate(self) -> None:
        """Evolução de schema. Obrigatório, mas específico de cada tipo de relação."""

    @abstractmethod
    def destroy(self, if_exists: bool = False) -> None:
        ...

    def describe(self) -> Optional[Schema]:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
