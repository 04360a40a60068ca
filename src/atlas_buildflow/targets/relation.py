"""
RelationTarget: mantém uma relação e, opcionalmente, a popula a partir de um mapping.

Fases:
    - VALIDATE → o mapping (se houver) resolve e o predicado de partição é válido
    - CREATE   → cria a relação se não existir; se existir, migra
    - BUILD    → escreve o artefato do mapping na partição do target
    - VERIFY   → falha se a partição do target não contém dados
    - TRUNCATE → remove os dados da partição do target
    - DESTROY  → remove a relação

`dirty` por fase:
    - CREATE   → relação ainda não existe
    - BUILD    → partição ainda não carregada (`force` ignora)
    - TRUNCATE → partição carregada
    - DESTROY  → relação existe
    - demais   → sempre
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence, Set

from atlas_buildflow.core.exceptions import VerificationFailedError
from atlas_buildflow.core.identifiers import ResourceIdentifier
from atlas_buildflow.core.model.mapping import collect_requirements
from atlas_buildflow.core.model.relation import OutputMode, Relation
from atlas_buildflow.core.model.results import Phase, Result
from atlas_buildflow.core.model.target import Target

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution

logger = logging.getLogger(__name__)


class RelationTarget(Target):
    """
    Args:
        relation: nome da relação mantida
        mapping: nome do mapping que fornece os dados (opcional)
        mode: semântica de escrita (OutputMode)
        partition: partição escrita (todos os campos ligados a um valor)
    """

    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        relation: str,
        mapping: Optional[str] = None,
        mode: Any = OutputMode.OVERWRITE,
        partition: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, **kwargs)
        self.relation_name = relation
        self.mapping = mapping
        self.mode = OutputMode(mode)
        self.partition: Dict[str, Any] = dict(partition or {})

    @property
    def relation(self) -> Relation:
        return self.context.get_relation(self.relation_name)

    @property
    def phases(self) -> Set[Phase]:
        phases = {Phase.VALIDATE, Phase.CREATE, Phase.VERIFY, Phase.TRUNCATE, Phase.DESTROY}
        if self.mapping is not None:
            phases.add(Phase.BUILD)
        return phases

    def _requirements(self) -> Set[ResourceIdentifier]:
        if self.mapping is None:
            return set()
        return collect_requirements(self.context.get_mapping(self.mapping))

    def provides(self, phase: Phase) -> Set[ResourceIdentifier]:
        if phase in (Phase.CREATE, Phase.DESTROY):
            return set(self.relation.provides())
        if phase in (Phase.BUILD, Phase.TRUNCATE):
            return set(self.relation.resources(self.partition))
        return set()

    def requires(self, phase: Phase) -> Set[ResourceIdentifier]:
        if phase in (Phase.CREATE, Phase.DESTROY):
            return set(self.relation.requires())
        if phase in (Phase.BUILD, Phase.TRUNCATE):
            return self._requirements()
        return set()

    def dirty(self, execution: "Execution", phase: Phase) -> bool:
        relation = self.relation
        if phase == Phase.CREATE:
            return not relation.exists()
        if phase == Phase.BUILD:
            return not (relation.exists() and relation.loaded(self.partition))
        if phase == Phase.TRUNCATE:
            return relation.exists() and relation.loaded(self.partition)
        if phase == Phase.DESTROY:
            return relation.exists()
        return True

    def execute(self, execution: "Execution", phase: Phase) -> Sequence[Result]:
        relation = self.relation
        if phase == Phase.VALIDATE:
            self._validate(relation)
        elif phase == Phase.CREATE:
            if relation.exists():
                relation.migrate()
            else:
                relation.create(if_not_exists=True)
        elif phase == Phase.BUILD:
            df = execution.instantiate(self.context.get_mapping(self.mapping).identifier)
            relation.write(df, self.partition, self.mode)
        elif phase == Phase.VERIFY:
            if not (relation.exists() and relation.loaded(self.partition)):
                raise VerificationFailedError(
                    message=f"Relation '{relation.name}' holds no data for target '{self.name}'",
                    details={"target": self.name, "relation": relation.name, "partition": dict(self.partition)},
                )
        elif phase == Phase.TRUNCATE:
            relation.truncate(self.partition or None)
        elif phase == Phase.DESTROY:
            relation.destroy(if_exists=True)
        return []

    def _validate(self, relation: Relation) -> None:
        partitions = getattr(relation, "partitions", None)
        if partitions:
            partitions.spec(self.partition)
        if self.mapping is not None:
            self.context.get_mapping(self.mapping)
        logger.debug("Target '%s' validated", self.name)
