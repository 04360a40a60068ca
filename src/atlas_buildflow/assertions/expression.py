"""ExpressionAssertion: testes linha a linha com expressões do pandas."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.assertion import Assertion
from atlas_buildflow.core.model.results import AssertionTestResult

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class ExpressionAssertion(Assertion):
    """
    Avalia cada expressão sobre o artefato de `mapping`.

    Uma linha viola a expressão quando o resultado é falso ou nulo.
    O teste passa quando não há violações.

    Exemplo:
        ExpressionAssertion("positive", ctx, mapping="sales", expressions=["amount > 0"])
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        mapping: Union[str, TableIdentifier],
        expressions: Sequence[str],
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, **kwargs)
        self.mapping = TableIdentifier.parse(mapping)
        self.expressions: List[str] = list(expressions)

    def inputs(self) -> List[TableIdentifier]:
        return [self.mapping]

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> List[AssertionTestResult]:
        df = inputs[self.mapping]
        results = []
        for expr in self.expressions:
            if df.empty:
                results.append(AssertionTestResult(expr, True, 0))
                continue
            outcome = df.eval(expr, engine="python")
            if not isinstance(outcome, pd.Series):
                outcome = pd.Series([outcome] * len(df), index=df.index)
            violations = int((~outcome.fillna(False).astype(bool)).sum())
            results.append(AssertionTestResult(expr, violations == 0, violations))
        return results
