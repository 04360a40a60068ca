# src/atlas_buildflow/core/model/target.py
"""
Contrato canônico de Target do Atlas BuildFlow.

Um Target é a unidade de build executada por fase. Ele declara:
    - as fases que suporta (`phases`)
    - recursos que fornece e exige por fase (usados pelo planner)
    - dependências explícitas de ordem (`after`)
    - se ainda há trabalho a fazer numa fase (`dirty`)

O Runner executa apenas fases suportadas; as demais resultam em SKIPPED.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Set

from atlas_buildflow.core.identifiers import ResourceIdentifier, TableIdentifier
from .results import Phase, Result

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class Target:
    kind = "target"

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        after: Sequence[str] = (),
        description: Optional[str] = None,
    ) -> None:
        self.name = name
        self.context = context
        self.after: List[str] = list(after)
        self.description = description

    @property
    def project(self) -> Optional[str]:
        return self.context.project if self.context is not None else None

    @property
    def identifier(self) -> TableIdentifier:
        return TableIdentifier(self.name, self.project)

    @property
    def phases(self) -> Set[Phase]:
        return set()

    def provides(self, phase: Phase) -> Set[ResourceIdentifier]:
        return set()

    def requires(self, phase: Phase) -> Set[ResourceIdentifier]:
        return set()

    def dirty(self, execution: "Execution", phase: Phase) -> bool:
        return True

    def execute(self, execution: "Execution", phase: Phase) -> Sequence[Result]:
        """Executa a fase; retorna resultados aninhados (ex.: assertions), se houver."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
