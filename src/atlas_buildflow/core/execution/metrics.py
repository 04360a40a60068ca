# src/atlas_buildflow/core/execution/metrics.py
"""
Quadro de métricas de execução.

O MetricBoard acumula medições com rótulos (ex.: tempo de parede de
jobs e targets). Agregação e renderização são externas: o quadro apenas
guarda e filtra.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from atlas_buildflow.core.model.results import utc_now


JOB_RUNTIME = "job_runtime"
TARGET_RUNTIME = "target_runtime"


@dataclass(frozen=True)
class Metric:
    name: str
    value: float
    labels: Dict[str, str] = field(default_factory=dict)
    ts: datetime = field(default_factory=utc_now)


class MetricBoard:
    """Coleção de métricas de uma execução; `labels` são aplicados a toda medição."""

    def __init__(self, labels: Optional[Dict[str, Any]] = None) -> None:
        self.labels: Dict[str, str] = {k: str(v) for k, v in (labels or {}).items()}
        self._metrics: List[Metric] = []

    def record(self, name: str, value: float, **labels: Any) -> Metric:
        merged = dict(self.labels)
        merged.update({k: str(v) for k, v in labels.items()})
        metric = Metric(name=name, value=float(value), labels=merged)
        self._metrics.append(metric)
        return metric

    def get(self, name: str, **labels: Any) -> List[Metric]:
        wanted = {k: str(v) for k, v in labels.items()}
        return [
            m for m in self._metrics
            if m.name == name and all(m.labels.get(k) == v for k, v in wanted.items())
        ]

    @property
    def metrics(self) -> List[Metric]:
        return list(self._metrics)

    def reset(self) -> None:
        self._metrics.clear()

    def __len__(self) -> int:
        return len(self._metrics)
