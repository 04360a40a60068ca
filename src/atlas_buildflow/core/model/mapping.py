# src/atlas_buildflow/core/model/mapping.py
"""
Contrato canônico de Mapping do Atlas BuildFlow.

Um Mapping é um nó de transformação nomeado. Ele declara:
    - dependências (lista ordenada de TableIdentifier)
    - hints declarativos `cache` e `broadcast`
    - recursos físicos que exige (`requires`), usados pelo planner

A computação propriamente dita (`execute`) recebe a execução corrente e
os artefatos já materializados das dependências, e devolve um novo
artefato (`pandas.DataFrame`).

Limites explícitos:
    - Mappings não fazem cache (responsabilidade do ProjectExecutor)
    - Mappings não resolvem dependências por conta própria
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set, Union

import pandas as pd

from atlas_buildflow.core.identifiers import ResourceIdentifier, TableIdentifier
from .types import Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class Mapping:
    """
    Base de todos os mappings.

    Args:
        name: nome do mapping no projeto
        context: contexto que resolveu este mapping
        inputs: dependências declaradas (`nome` ou `projeto/nome`)
        cache: materializa uma cópia independente do artefato
        broadcast: marca o artefato como candidato a broadcast
    """

    kind = "mapping"

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        inputs: Sequence[Union[str, TableIdentifier]] = (),
        cache: bool = False,
        broadcast: bool = False,
        description: Optional[str] = None,
    ) -> None:
        self.name = name
        self.context = context
        self.inputs = [TableIdentifier.parse(i) for i in inputs]
        self.cache = bool(cache)
        self.broadcast = bool(broadcast)
        self.description = description

    @property
    def project(self) -> Optional[str]:
        return self.context.project if self.context is not None else None

    @property
    def identifier(self) -> TableIdentifier:
        return TableIdentifier(self.name, self.project)

    def dependencies(self) -> List[TableIdentifier]:
        return list(self.inputs)

    def requires(self) -> Set[ResourceIdentifier]:
        """Recursos físicos lidos diretamente por este mapping (sem dependências)."""
        return set()

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        raise NotImplementedError

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        """Schema de saída, quando derivável sem executar. `None` força instanciação."""
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, inputs={[str(i) for i in self.inputs]!r})"


def collect_requirements(mapping: Mapping) -> Set[ResourceIdentifier]:
    """
    Recursos exigidos por `mapping` e, transitivamente, por suas dependências.

    Dependências são resolvidas no contexto do próprio mapping. Cada nome
    é visitado uma única vez, mesmo em grafos com ciclos.
    """
    out: Set[ResourceIdentifier] = set()
    seen: Set[TableIdentifier] = set()
    pending: List[Mapping] = [mapping]

    while pending:
        current = pending.pop()
        key = current.identifier
        if key in seen:
            continue
        seen.add(key)
        out.update(current.requires())
        if current.context is None:
            continue
        for dep in current.dependencies():
            pending.append(current.context.get_mapping(dep))
    return out


def input_frame(inputs: Dict[TableIdentifier, Any], identifier: TableIdentifier) -> pd.DataFrame:
    """Artefato de uma dependência declarada; erro claro se o executor não a forneceu."""
    try:
        return inputs[identifier]
    except KeyError:
        raise KeyError(f"input '{identifier}' was not provided to the mapping") from None
