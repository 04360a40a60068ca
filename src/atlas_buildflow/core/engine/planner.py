# src/atlas_buildflow/core/engine/planner.py
"""
Planejador de execução de targets por fase.

Este módulo produz, para uma fase, uma ordem determinística dos targets
de um job, respeitando:
    - dependências explícitas (`target.after`)
    - dependências implícitas por recursos: um target que fornece um
      recurso exigido por outro roda antes dele

Princípios fundamentais:
    - O grafo de targets deve formar um DAG válido
    - A ordenação é determinística para a mesma entrada
    - Fases destrutivas (TRUNCATE, DESTROY) rodam na ordem reversa

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos por ordem lexicográfica do nome do target
    - Nomes em `after` que não pertencem ao job são ignorados (só ordenam)
    - Ciclos são falhas fatais (CyclicDependencyError)

Limites explícitos:
    - Não executa targets
    - Não decide políticas de execução (fail-fast, skip)
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from atlas_buildflow.core.exceptions import CyclicDependencyError, ExecutionConfigurationError
from atlas_buildflow.core.model.results import Phase
from atlas_buildflow.core.model.target import Target


def _linked(producer: Target, consumer: Target, phase: Phase) -> bool:
    provided = producer.provides(phase)
    if not provided:
        return False
    for required in consumer.requires(phase):
        for resource in provided:
            if resource.contains(required) or required.contains(resource):
                return True
    return False


def plan_targets(targets: Iterable[Target], phase: Phase) -> List[Target]:
    """
    Ordena os targets de um job para uma fase.

    Args:
        targets: targets do job (nomes únicos).
        phase: fase a planejar.

    Returns:
        List[Target]: targets em ordem de execução.

    Raises:
        ExecutionConfigurationError: nome de target vazio ou duplicado.
        CyclicDependencyError: ciclo entre dependências explícitas/implícitas.
    """
    target_list = list(targets)
    by_name: Dict[str, Target] = {}
    for t in target_list:
        name = getattr(t, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ExecutionConfigurationError(message="target.name must be a non-empty string")
        if name in by_name:
            raise ExecutionConfigurationError(
                message=f"Duplicate target name: {name}",
                details={"target": name},
            )
        by_name[name] = t

    deps: Dict[str, Set[str]] = {name: set() for name in by_name}
    for name, t in by_name.items():
        deps[name].update(a for a in t.after if a in by_name and a != name)
    for producer_name, producer in by_name.items():
        for consumer_name, consumer in by_name.items():
            if producer_name != consumer_name and _linked(producer, consumer, phase):
                deps[consumer_name].add(producer_name)

    # Kahn's algorithm (deterministic)
    incoming_count: Dict[str, int] = {name: len(d) for name, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {name: set() for name in by_name}
    for name, dset in deps.items():
        for dep in dset:
            outgoing[dep].add(name)

    ready: List[str] = sorted(name for name, c in incoming_count.items() if c == 0)
    order: List[str] = []
    while ready:
        name = ready.pop(0)
        order.append(name)
        for child in sorted(outgoing[name]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order) != len(by_name):
        remaining = sorted(set(by_name) - set(order))
        raise CyclicDependencyError(
            message=f"Cycle detected between targets in phase {phase.value}",
            details={"phase": phase.value, "targets": remaining},
        )

    ordered = [by_name[name] for name in order]
    if phase.destructive:
        ordered.reverse()
    return ordered
