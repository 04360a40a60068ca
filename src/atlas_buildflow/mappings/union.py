"""UnionMapping: concatena os artefatos de vários inputs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Union

import pandas as pd

from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping, input_frame
from atlas_buildflow.core.model.types import Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class UnionMapping(Mapping):
    """
    Concatena os inputs na ordem declarada.

    Colunas são alinhadas por nome; colunas ausentes em algum input
    ficam nulas. Com `distinct=True`, linhas duplicadas são removidas.
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        inputs: Sequence[Union[str, TableIdentifier]],
        distinct: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, inputs=inputs, **kwargs)
        self.distinct = bool(distinct)

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        frames = [input_frame(inputs, ident) for ident in self.inputs]
        if not frames:
            return pd.DataFrame()
        out = pd.concat(frames, ignore_index=True)
        if self.distinct:
            out = out.drop_duplicates().reset_index(drop=True)
        return out

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        schemas = [input_schemas.get(ident) for ident in self.inputs]
        if not schemas or any(s is None for s in schemas):
            return None
        merged = schemas[0]
        for other in schemas[1:]:
            merged = merged.merge(other)
        return merged
