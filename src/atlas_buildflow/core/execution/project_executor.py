# src/atlas_buildflow/core/execution/project_executor.py
"""
Executor de projeto: instanciação dirigida por dependências, com cache.

O ProjectExecutor é dono exclusivo do cache de artefatos de um projeto
durante uma execução. `instantiate(nome)`:

    1. retorna o artefato do cache, se já materializado
    2. resolve o mapping no contexto do projeto
    3. instancia as dependências em profundidade (síncrono)
    4. chama `mapping.execute(execution, inputs)`
    5. aplica os hints `cache` / `broadcast`
    6. guarda no cache, registra a view `projeto/nome` e retorna

Decisões arquiteturais:
    - nomes qualificados de outro projeto são delegados à execução raiz
    - um marcador "em resolução" detecta ciclos e falha com
      CyclicDependencyError (sem recursão ilimitada)
    - falhas não alteram o cache: nada é armazenado antes do sucesso

Invariantes:
    - cada nome é materializado no máximo uma vez por executor
    - em um grafo em diamante, o ancestral comum é computado uma única vez
    - `cleanup` é idempotente

Limites explícitos:
    - não é seguro para mutação concorrente (uma execução por projeto)
    - não executa targets nem notifica listeners
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Union

import pandas as pd

from atlas_buildflow.core.context import Context
from atlas_buildflow.core.exceptions import (
    CyclicDependencyError,
    ExecutionConfigurationError,
    TableNotFoundError,
)
from atlas_buildflow.core.identifiers import TableIdentifier
from atlas_buildflow.core.model.mapping import Mapping
from atlas_buildflow.core.model.types import Schema

if TYPE_CHECKING:
    from .execution import Execution

logger = logging.getLogger(__name__)


class ProjectExecutor:
    """
    Orquestrador de artefatos de um projeto.

    Args:
        context: contexto de nomes do projeto (ou um escopo filho dele)
        execution: execução raiz, usada para delegação entre projetos e
            repassada aos mappings
        resolving: pilha compartilhada de nomes em resolução (entre projetos)
    """

    def __init__(self, context: Context, execution: "Execution", resolving: List[TableIdentifier]) -> None:
        if context.project is None:
            raise ValueError("ProjectExecutor requires a project context")
        self.context = context
        self.project: str = context.project
        self._execution = execution
        self._resolving = resolving
        self._tables: Dict[str, pd.DataFrame] = {}
        self._views: List[str] = []

    # -----------------------------
    # Instanciação
    # -----------------------------
    def instantiate(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        ident = TableIdentifier.parse(identifier)
        if ident.project is not None and ident.project != self.project:
            return self._execution.instantiate(ident)

        name = ident.name
        if name in self._tables:
            return self._tables[name]

        qualified = TableIdentifier(name, self.project)
        if qualified in self._resolving:
            chain = [str(i) for i in self._resolving] + [str(qualified)]
            raise CyclicDependencyError(
                message=f"Cyclic dependency detected while instantiating '{qualified}'",
                details={"chain": chain},
                hint="Break the cycle in the mapping inputs",
            )

        mapping = self.context.get_mapping(name)

        self._resolving.append(qualified)
        try:
            inputs = {dep: self.instantiate(dep) for dep in mapping.dependencies()}
            logger.info("Instantiating mapping '%s'", qualified)
            df = mapping.execute(self._execution, inputs)
        finally:
            self._resolving.pop()

        if not isinstance(df, pd.DataFrame):
            raise ExecutionConfigurationError(
                message=f"Mapping '{qualified}' did not return a DataFrame",
                details={"mapping": str(qualified), "received": type(df).__name__},
                hint="Mapping.execute must return a pandas.DataFrame",
            )

        df = self._apply_hints(mapping, df)
        self._tables[name] = df
        view = str(qualified)
        self._execution.views.register(view, df)
        self._views.append(view)
        return df

    @staticmethod
    def _apply_hints(mapping: Mapping, df: pd.DataFrame) -> pd.DataFrame:
        if not (mapping.cache or mapping.broadcast):
            return df
        out = df.copy(deep=mapping.cache)
        if mapping.cache:
            out.attrs["cache"] = True
        if mapping.broadcast:
            out.attrs["broadcast"] = True
        return out

    # -----------------------------
    # Introspecção
    # -----------------------------
    def tables(self) -> Dict[TableIdentifier, pd.DataFrame]:
        return {TableIdentifier(name, self.project): df for name, df in self._tables.items()}

    def get_table(self, identifier: Union[str, TableIdentifier]) -> pd.DataFrame:
        ident = TableIdentifier.parse(identifier)
        if ident.project is not None and ident.project != self.project:
            return self._execution.get_table(ident)
        if ident.name not in self._tables:
            raise TableNotFoundError(
                message=f"Table '{self.project}/{ident.name}' has not been instantiated",
                details={"project": self.project, "name": ident.name},
                hint="Call instantiate() first",
            )
        return self._tables[ident.name]

    def describe(self, identifier: Union[str, TableIdentifier]) -> Schema:
        """
        Schema de saída de um mapping.

        Usa `mapping.describe(execution, input_schemas)` quando ele retorna
        um schema; caso contrário, instancia o mapping e deriva o schema
        do artefato.
        """
        ident = TableIdentifier.parse(identifier)
        if ident.project is not None and ident.project != self.project:
            return self._execution.describe(ident)

        qualified = TableIdentifier(ident.name, self.project)
        if qualified in self._resolving:
            raise CyclicDependencyError(
                message=f"Cyclic dependency detected while describing '{qualified}'",
                details={"chain": [str(i) for i in self._resolving] + [str(qualified)]},
            )

        mapping = self.context.get_mapping(ident.name)
        self._resolving.append(qualified)
        try:
            schemas = {dep: self.describe(dep) for dep in mapping.dependencies()}
        finally:
            self._resolving.pop()

        schema = mapping.describe(self._execution, schemas)
        if schema is None:
            schema = Schema.from_frame(self.instantiate(ident.name))
        return schema

    # -----------------------------
    # Liberação
    # -----------------------------
    def cleanup(self) -> None:
        """Libera artefatos e views registradas. Uma segunda chamada é no-op."""
        if not self._tables and not self._views:
            return
        logger.info("Cleaning up %d cached tables of project '%s'", len(self._tables), self.project)
        for view in self._views:
            self._execution.views.drop(view)
        self._views.clear()
        self._tables.clear()
