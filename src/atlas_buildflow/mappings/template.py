"""
TemplateMapping: reaproveita um mapping do projeto com bindings próprios.

O mapping referenciado é instanciado num escopo filho do contexto deste
mapping, com `environment` como overlay. O mesmo prototype produz assim
uma instância distinta (ex.: um filtro parametrizado por ano), sem
alterar o contexto do projeto.

Exemplo:
    Prototype(TemplateMapping, mapping="sales_of_year", environment={"year": 2021})
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping as TMapping, Optional, Set

import pandas as pd

from atlas_buildflow.core.identifiers import ResourceIdentifier, TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping
from atlas_buildflow.core.model.types import Schema

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class TemplateMapping(Mapping):
    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        mapping: str,
        environment: Optional[TMapping[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, **kwargs)
        self.mapping = mapping
        self.environment: Dict[str, Any] = dict(environment or {})
        self._instance: Optional[Mapping] = None

    @property
    def instance(self) -> Mapping:
        """Instância do mapping referenciado, resolvida no escopo filho."""
        if self._instance is None:
            scope = self.context.child(self.environment)
            self._instance = scope.get_mapping(self.mapping)
        return self._instance

    def dependencies(self) -> List[TableIdentifier]:
        return self.instance.dependencies()

    def requires(self) -> Set[ResourceIdentifier]:
        return self.instance.requires()

    def execute(self, execution: "Execution", inputs: Dict[TableIdentifier, pd.DataFrame]) -> pd.DataFrame:
        return self.instance.execute(execution, inputs)

    def describe(self, execution: "Execution", input_schemas: Dict[TableIdentifier, Schema]) -> Optional[Schema]:
        return self.instance.describe(execution, input_schemas)
