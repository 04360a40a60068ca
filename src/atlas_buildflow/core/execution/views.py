# src/atlas_buildflow/core/execution/views.py
"""
Catálogo de views temporárias de uma execução.

Cada artefato materializado por um ProjectExecutor é registrado como
view `projeto/nome`, permitindo consulta por nome. O executor remove
suas próprias views no `cleanup`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import pandas as pd

logger = logging.getLogger(__name__)


class ViewCatalog:
    def __init__(self) -> None:
        self._views: Dict[str, pd.DataFrame] = {}

    def register(self, name: str, df: pd.DataFrame) -> None:
        logger.debug("Registering temporary view '%s'", name)
        self._views[name] = df

    def drop(self, name: str) -> bool:
        """Remove a view; retorna False se ela não existia."""
        return self._views.pop(name, None) is not None

    def get(self, name: str) -> Optional[pd.DataFrame]:
        return self._views.get(name)

    def names(self) -> List[str]:
        return sorted(self._views)

    def __contains__(self, name: object) -> bool:
        return name in self._views

    def __len__(self) -> int:
        return len(self._views)
