# src/atlas_buildflow/core/model/assertion.py
"""
Contrato de Assertion do Atlas BuildFlow.

Uma assertion lê um ou mais artefatos e produz resultados por teste.
Falhas de teste não levantam exceção: o resultado é FAILED e o target
que a executa decide como reagir.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, List, Optional

import pandas as pd

from atlas_buildflow.core.identifiers import TableIdentifier
from .results import AssertionTestResult, Category, Result, utc_now

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class Assertion:
    kind = "assertion"

    def __init__(self, name: str, context: Optional["Context"] = None, *, description: Optional[str] = None) -> None:
        self.name = name
        self.context = context
        self.description = description

    def inputs(self) -> List[TableIdentifier]:
        return []

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> List[AssertionTestResult]:
        raise NotImplementedError

    def run(self, execution: "Execution") -> Result:
        """Instancia as entradas e executa os testes, produzindo o Result da assertion."""
        start = utc_now()
        frames = {}
        for ident in self.inputs():
            qualified = ident.qualified(self.context.project if self.context is not None else None)
            frames[ident] = execution.instantiate(qualified)
        tests = self.execute(execution, frames)
        return Result.of(Category.ASSERTION, self.name, start, tests=tests)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
