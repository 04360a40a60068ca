"""ReadRelationMapping: materializa o conteúdo de uma relação como artefato."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping as TMapping, Optional, Set

import pandas as pd

from atlas_buildflow.core.identifiers import ResourceIdentifier, TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping
from atlas_buildflow.core.model.types import Field, Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class ReadRelationMapping(Mapping):
    """
    Lê uma relação do projeto, opcionalmente restrita a um predicado de
    partição e projetada num schema.

    Não possui dependências de mapping: o que ele exige são os recursos
    físicos da relação (`requires`), que ligam este mapping ao target
    que escreve a relação.
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        relation: str,
        partition: Optional[TMapping[str, Any]] = None,
        schema: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, **kwargs)
        self.relation = relation
        self.partition: Dict[str, Any] = dict(partition or {})
        if schema is None or isinstance(schema, Schema):
            self.schema = schema
        else:
            self.schema = Schema(tuple(f if isinstance(f, Field) else Field(**f) for f in schema))

    def _relation(self):
        return self.context.get_relation(self.relation)

    def dependencies(self) -> List[TableIdentifier]:
        return []

    def requires(self) -> Set[ResourceIdentifier]:
        return set(self._relation().resources(self.partition))

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        return self._relation().read(self.schema, self.partition)

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        if self.schema is not None:
            return self.schema
        return self._relation().describe()
