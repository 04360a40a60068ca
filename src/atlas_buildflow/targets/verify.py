"""
VerifyTarget: executa assertions na fase VERIFY.

Cada assertion roda monitorada (`monitor_assertion`), de modo que os
listeners recebem um par start/finish por assertion. O target falha
com VerificationFailedError quando ao menos uma assertion falha, após
executar todas elas.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set

from atlas_buildflow.core.exceptions import VerificationFailedError
from atlas_buildflow.core.model.assertion import Assertion
from atlas_buildflow.core.model.prototype import Prototype
from atlas_buildflow.core.model.results import Phase, Result, Status
from atlas_buildflow.core.model.target import Target

if TYPE_CHECKING:
    from atlas_buildflow.core.context import Context
    from atlas_buildflow.core.execution.execution import Execution


class VerifyTarget(Target):
    def __init__(
        self,
        name: str,
        context: Optional["Context"] = None,
        *,
        assertions: Dict[str, Any],
        phase: Any = Phase.VERIFY,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, context, **kwargs)
        self.assertions: Dict[str, Any] = dict(assertions)
        self.phase = Phase(phase)

    @property
    def phases(self) -> Set[Phase]:
        return {self.phase}

    def _instances(self) -> List[Assertion]:
        out = []
        for name, assertion in self.assertions.items():
            if isinstance(assertion, Prototype):
                out.append(assertion.instantiate(self.context, name))
            else:
                out.append(assertion)
        return out

    def execute(self, execution: "Execution", phase: Phase) -> Sequence[Result]:
        results = [execution.monitor_assertion(a, a.run) for a in self._instances()]
        failed = [r.name for r in results if r.status == Status.FAILED]
        if failed:
            raise VerificationFailedError(
                message=f"Assertions failed in target '{self.name}': {', '.join(failed)}",
                details={"target": self.name, "assertions": failed},
            )
        return results
