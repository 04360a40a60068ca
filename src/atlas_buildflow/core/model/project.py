# src/atlas_buildflow/core/model/project.py
"""
Projeto do Atlas BuildFlow: o conjunto nomeado de prototypes e jobs.

O projeto é uma definição em memória (a camada de parsing de
especificações declarativas é externa). `create_context` produz o
contexto de nomes do projeto, filho do contexto raiz da sessão.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from atlas_buildflow.core.context import Context
from atlas_buildflow.core.exceptions import ExecutionConfigurationError
from .job import Job


@dataclass
class Project:
    name: str
    mappings: Dict[str, Any] = field(default_factory=dict)
    relations: Dict[str, Any] = field(default_factory=dict)
    targets: Dict[str, Any] = field(default_factory=dict)
    jobs: Dict[str, Job] = field(default_factory=dict)
    environment: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None

    def create_context(self, parent: Context) -> Context:
        return Context(
            project=self.name,
            environment=self.environment,
            parent=parent,
            mappings=self.mappings,
            relations=self.relations,
            targets=self.targets,
        )

    def get_job(self, name: str) -> Job:
        if name not in self.jobs:
            raise ExecutionConfigurationError(
                message=f"Job '{name}' not found in project '{self.name}'",
                details={"project": self.name, "job": name, "available": sorted(self.jobs)},
            )
        return self.jobs[name]
