"""SelectMapping: projeção (e renomeação) de colunas de um único input."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Union

import pandas as pd

from atlas_buildflow.core.exceptions import SchemaMismatchError
from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping, input_frame
from atlas_buildflow.core.model.types import Field, Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class SelectMapping(Mapping):
    """
    Args:
        input: mapping de entrada (`nome` ou `projeto/nome`)
        columns: lista de colunas, ou dict `saída → coluna de entrada`
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        input: Union[str, TableIdentifier],
        columns: Union[Sequence[str], Dict[str, str]],
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, inputs=[input], **kwargs)
        if isinstance(columns, dict):
            self.columns: Dict[str, str] = dict(columns)
        else:
            self.columns = {c: c for c in columns}

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        df = input_frame(inputs, self.inputs[0])
        missing = [src for src in self.columns.values() if src not in df.columns]
        if missing:
            raise SchemaMismatchError(
                message=f"Mapping '{self.name}' selects unknown columns: {', '.join(missing)}",
                details={"mapping": self.name, "missing_columns": missing},
            )
        out = df[list(self.columns.values())].copy()
        out.columns = list(self.columns.keys())
        return out

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        upstream = input_schemas.get(self.inputs[0])
        if upstream is None:
            return None
        fields = []
        for out_name, src in self.columns.items():
            f = upstream.get(src)
            if f is None:
                return None
            fields.append(Field(out_name, f.ftype, f.nullable, f.description))
        return Schema(tuple(fields))
