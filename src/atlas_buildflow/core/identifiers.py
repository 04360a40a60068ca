# src/atlas_buildflow/core/identifiers.py
"""
Identificadores canônicos do Atlas BuildFlow.

    - TableIdentifier    → nome de mapping/tabela, opcionalmente qualificado por projeto
    - ResourceIdentifier → handle canônico de um recurso físico (diretório, arquivo, partição)

Ambos são imutáveis e hashable, podendo ser usados como chaves de cache
e em conjuntos de `provides`/`requires`.
"""

from __future__ import annotations

import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class TableIdentifier:
    """
    Identifica um mapping (e o artefato que ele produz) dentro de um projeto.

    `project=None` significa "resolver no projeto corrente": nomes não
    qualificados são resolvidos localmente antes de qualquer delegação.
    """

    name: str
    project: Optional[str] = None

    @classmethod
    def parse(cls, value: Union[str, "TableIdentifier"]) -> "TableIdentifier":
        """Aceita `nome` ou `projeto/nome`; instâncias são retornadas intactas."""
        if isinstance(value, TableIdentifier):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValueError("table identifier must be a non-empty string")
        if "/" in value:
            project, name = value.split("/", 1)
            return cls(name=name, project=project or None)
        return cls(name=value)

    def qualified(self, project: Optional[str]) -> "TableIdentifier":
        """Retorna o identificador qualificado pelo projeto, se ainda não for."""
        if self.project is not None:
            return self
        return TableIdentifier(self.name, project)

    def __str__(self) -> str:
        if self.project:
            return f"{self.project}/{self.name}"
        return self.name


def _freeze(partition: Optional[Dict[str, Any]]) -> Tuple[Tuple[str, str], ...]:
    return tuple((str(k), str(v)) for k, v in (partition or {}).items())


@dataclass(frozen=True)
class ResourceIdentifier:
    """
    Handle canônico de um recurso físico.

    Campos:
        - category: tipo do recurso (ex.: "local", "file")
        - name: caminho ou padrão glob do recurso
        - partition: pares (campo, valor) quando o recurso é uma partição

    `contains` implementa a semântica usada pelo planner para ligar
    `requires` de um target ao `provides` de outro.
    """

    category: str
    name: str
    partition: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def of_local(cls, path: Union[str, Path], partition: Optional[Dict[str, Any]] = None) -> "ResourceIdentifier":
        return cls("local", Path(path).as_posix(), _freeze(partition))

    @classmethod
    def of_file(cls, path: Union[str, Path], partition: Optional[Dict[str, Any]] = None) -> "ResourceIdentifier":
        return cls("file", Path(path).as_posix(), _freeze(partition))

    @property
    def partition_map(self) -> Dict[str, str]:
        return dict(self.partition)

    def contains(self, other: "ResourceIdentifier") -> bool:
        """True se `other` está coberto por este recurso.

        Regras:
            - mesma categoria
            - nome igual, glob que casa, ou `other` abaixo deste diretório
            - toda partição fixada aqui está presente com o mesmo valor em `other`
        """
        if self.category != other.category:
            return False

        name_matches = (
            self.name == other.name
            or fnmatch.fnmatchcase(other.name, self.name)
            or other.name.startswith(self.name.rstrip("/") + "/")
        )
        if not name_matches:
            return False

        theirs = other.partition_map
        return all(theirs.get(k) == v for k, v in self.partition)

    def __str__(self) -> str:
        if self.partition:
            spec = ",".join(f"{k}={v}" for k, v in self.partition)
            return f"{self.category}:{self.name}[{spec}]"
        return f"{self.category}:{self.name}"
