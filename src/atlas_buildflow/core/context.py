# src/atlas_buildflow/core/context.py
"""
Contexto de execução com escopo (Scoped Execution Context).

Este módulo define o `Context`, responsável por:
    - manter bindings de variáveis (environment) de um escopo
    - interpolar variáveis (`$nome` / `${nome}`) em valores declarativos
    - resolver nomes de mappings, relations e targets do projeto

Um contexto pode ter um pai. A resolução de variáveis e nomes consulta
primeiro o escopo local e, quando não há binding, o pai. O pai é
mantido por referência fraca (`weakref`): o filho nunca é dono do pai.

Contextos filhos (`ScopeContext`) são criados com um overlay de bindings
adicionais, por exemplo para instanciar um mapping template com
parâmetros substituídos, sem mutar o pai.

Invariantes:
    - `evaluate` nunca muta o valor recebido
    - bindings do filho sombreiam os do pai, nunca os alteram
    - cada prototype é instanciado no máximo uma vez por contexto

Limites explícitos:
    - Não executa mappings (isso é responsabilidade do executor)
    - Não faz parsing de especificações declarativas
"""

from __future__ import annotations

import re
import weakref
from typing import Any, Dict, List, Mapping as TMapping, Optional, Tuple, Union

from .exceptions import (
    NoSuchMappingError,
    NoSuchProjectError,
    NoSuchRelationError,
    NoSuchTargetError,
)
from .identifiers import TableIdentifier


_VARIABLE = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*)|(\$))")
_SINGLE_REFERENCE = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)\}$")

_UNBOUND = object()

_NOT_FOUND_ERRORS = {
    "mapping": NoSuchMappingError,
    "relation": NoSuchRelationError,
    "target": NoSuchTargetError,
}


class Context:
    """
    Escopo de nomes e variáveis de um projeto (ou da sessão, na raiz).

    Args:
        project: nome do projeto dono deste escopo (herdado do pai se omitido)
        environment: bindings de variáveis locais
        config: configuração resolvida (herdada do pai se omitida)
        parent: contexto pai (referência fraca)
        mappings / relations / targets: prototypes declarados neste escopo
    """

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        environment: Optional[TMapping[str, Any]] = None,
        config: Optional[Dict[str, Any]] = None,
        parent: Optional["Context"] = None,
        mappings: Optional[TMapping[str, Any]] = None,
        relations: Optional[TMapping[str, Any]] = None,
        targets: Optional[TMapping[str, Any]] = None,
    ) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._project = project
        self._config = config
        self.environment: Dict[str, Any] = dict(environment or {})
        self._prototypes: Dict[str, Dict[str, Any]] = {
            "mapping": dict(mappings or {}),
            "relation": dict(relations or {}),
            "target": dict(targets or {}),
        }
        self._instances: Dict[Tuple[str, str], Any] = {}
        self._projects: Dict[str, "Context"] = {}

    # -----------------------------
    # Escopo
    # -----------------------------
    @property
    def parent(self) -> Optional["Context"]:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def project(self) -> Optional[str]:
        if self._project is not None:
            return self._project
        parent = self.parent
        return parent.project if parent is not None else None

    @property
    def config(self) -> Dict[str, Any]:
        if self._config is not None:
            return self._config
        parent = self.parent
        return parent.config if parent is not None else {}

    @property
    def root(self) -> "Context":
        ctx = self
        while ctx.parent is not None:
            ctx = ctx.parent
        return ctx

    def child(
        self,
        environment: Optional[TMapping[str, Any]] = None,
        *,
        project: Optional[str] = None,
        **prototypes: TMapping[str, Any],
    ) -> "ScopeContext":
        """Cria um escopo filho com bindings adicionais; este contexto não é alterado."""
        return ScopeContext(
            parent=self,
            project=project,
            environment=environment,
            **prototypes,
        )

    def register_project(self, context: "Context") -> None:
        """Registra o contexto de um projeto na raiz, para nomes qualificados."""
        if context.project is None:
            raise ValueError("project context must declare a project name")
        self.root._projects[context.project] = context

    @property
    def project_names(self) -> List[str]:
        return sorted(self.root._projects)

    def project_context(self, name: str) -> "Context":
        root = self.root
        if name not in root._projects:
            raise NoSuchProjectError(
                message=f"Project '{name}' not found",
                details={"project": name},
            )
        return root._projects[name]

    # -----------------------------
    # Variáveis
    # -----------------------------
    def lookup(self, name: str, default: Any = _UNBOUND) -> Any:
        """Resolve uma variável localmente e, se não houver binding, no pai."""
        ctx: Optional[Context] = self
        while ctx is not None:
            if name in ctx.environment:
                return ctx.environment[name]
            ctx = ctx.parent
        if default is _UNBOUND:
            raise KeyError(name)
        return default

    def evaluate(self, value: Any) -> Any:
        """
        Interpola variáveis em `value`.

        Regras:
            - strings: `$nome` e `${nome}` são substituídos; `$$` vira `$`
            - uma string que é exatamente `${nome}` preserva o tipo do binding
            - variáveis sem binding permanecem literais
            - dict, list e tuple são avaliados recursivamente
            - demais valores são retornados sem alteração
        """
        if isinstance(value, str):
            return self._evaluate_string(value)
        if isinstance(value, dict):
            return {k: self.evaluate(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.evaluate(v) for v in value]
        if isinstance(value, tuple):
            return tuple(self.evaluate(v) for v in value)
        return value

    def _evaluate_string(self, text: str) -> Any:
        single = _SINGLE_REFERENCE.match(text)
        if single:
            bound = self.lookup(single.group(1), _UNBOUND)
            if bound is not _UNBOUND:
                return bound
            return text

        def replace(match: "re.Match[str]") -> str:
            if match.group(3):
                return "$"
            name = match.group(1) or match.group(2)
            bound = self.lookup(name, _UNBOUND)
            if bound is _UNBOUND:
                return match.group(0)
            return str(bound)

        return _VARIABLE.sub(replace, text)

    # -----------------------------
    # Resolução de nomes
    # -----------------------------
    def get_mapping(self, identifier: Union[str, TableIdentifier]) -> Any:
        return self._resolve("mapping", identifier)

    def get_relation(self, identifier: Union[str, TableIdentifier]) -> Any:
        return self._resolve("relation", identifier)

    def get_target(self, identifier: Union[str, TableIdentifier]) -> Any:
        return self._resolve("target", identifier)

    def _resolve(self, kind: str, identifier: Union[str, TableIdentifier]) -> Any:
        ident = TableIdentifier.parse(identifier)

        if ident.project is not None and ident.project != self.project:
            try:
                foreign = self.project_context(ident.project)
            except NoSuchProjectError as ex:
                raise _NOT_FOUND_ERRORS[kind](
                    message=f"{kind.capitalize()} '{ident}' not found",
                    details={"name": ident.name, "project": ident.project},
                ) from ex
            return foreign._resolve(kind, TableIdentifier(ident.name))

        key = (kind, ident.name)
        if key in self._instances:
            return self._instances[key]

        prototype = self._find_prototype(kind, ident.name)
        if prototype is None:
            raise _NOT_FOUND_ERRORS[kind](
                message=f"{kind.capitalize()} '{ident.name}' not found in project '{self.project}'",
                details={"name": ident.name, "project": self.project},
            )

        instance = prototype.instantiate(self, ident.name)
        self._instances[key] = instance
        return instance

    def _find_prototype(self, kind: str, name: str) -> Optional[Any]:
        ctx: Optional[Context] = self
        while ctx is not None:
            prototypes = ctx._prototypes[kind]
            if name in prototypes:
                return prototypes[name]
            ctx = ctx.parent
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(project={self.project!r}, environment={self.environment!r})"


class ScopeContext(Context):
    """
    Escopo filho com overlay de bindings.

    Usado, por exemplo, para instanciar um mapping template com parâmetros
    substituídos ou para avaliar argumentos de um job. Herda projeto e
    configuração do pai; o pai permanece inalterado.
    """
