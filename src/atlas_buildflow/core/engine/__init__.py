# src/atlas_buildflow/core/engine/__init__.py
"""
Engine do Atlas BuildFlow.

Componentes principais:
    - planner → ordenação determinística de targets por fase
    - runner  → execução de jobs: lifecycle → fases → targets

Princípios fundamentais:
    - Planejamento e execução são responsabilidades separadas
    - A ordem de execução é determinística para o mesmo grafo
    - Políticas de execução são controladas por configuração
"""

from .planner import plan_targets
from .runner import Runner

__all__ = ["Runner", "plan_targets"]
