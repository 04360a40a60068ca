"""FilterMapping: filtra linhas de um input por uma expressão do pandas."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Union

import pandas as pd

from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping, input_frame
from atlas_buildflow.core.model.types import Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class FilterMapping(Mapping):
    """
    Mantém as linhas em que `condition` é verdadeira.

    A condição usa a sintaxe de `DataFrame.eval` (engine python), por
    exemplo `amount > 0 and country == 'BR'`. Variáveis do contexto já
    chegam interpoladas pelo prototype.
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        input: Union[str, TableIdentifier],
        condition: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, inputs=[input], **kwargs)
        self.condition = condition

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        df = input_frame(inputs, self.inputs[0])
        if df.empty:
            return df.copy()
        mask = df.eval(self.condition, engine="python")
        return df[mask.fillna(False).astype(bool)].reset_index(drop=True)

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        return input_schemas.get(self.inputs[0])
