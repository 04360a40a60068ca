# src/atlas_buildflow/core/model/partition.py
"""
Modelo de particionamento do Atlas BuildFlow.

Este módulo define:
    - valores de predicado de partição (SingleValue, ArrayValue, RangeValue)
    - PartitionField  → campo de partição tipado
    - PartitionSchema → lista ordenada de campos, com interpolação de predicados
    - PartitionSpec   → coordenada concreta (campo → valor único)

Um predicado de partição é um mapeamento `campo → valor`, onde o valor é
um valor único, um conjunto explícito ou um intervalo. Campos ausentes
significam "todos os valores" (wildcard) e não aparecem nas coordenadas
produzidas.

Decisões arquiteturais:
    - `interpolate` produz o produto cartesiano na ordem dos campos do schema
    - coordenadas produzidas são distintas entre si (ordem de primeira ocorrência)
    - `spec` exige todos os campos ligados a exatamente um valor

Invariantes:
    - PartitionSpec é imutável e hashable
    - campos desconhecidos no predicado são sempre rejeitados

Limites explícitos:
    - Não resolve caminhos físicos (responsabilidade do FileCollector)
    - Não lê nem escreve dados
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from atlas_buildflow.core.exceptions import InvalidPartitionError


# ---------------------------------------------------------------------------
# Valores de predicado
# ---------------------------------------------------------------------------

class FieldValue:
    """Valor de um campo em um predicado de partição."""

    def values(self) -> List[Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class SingleValue(FieldValue):
    value: Any

    def values(self) -> List[Any]:
        return [self.value]


@dataclass(frozen=True)
class ArrayValue(FieldValue):
    items: Tuple[Any, ...]

    def values(self) -> List[Any]:
        return list(self.items)


@dataclass(frozen=True)
class RangeValue(FieldValue):
    """Intervalo inteiro `[start, end)` com passo `step` (fim exclusivo)."""

    start: Any
    end: Any
    step: int = 1

    def values(self) -> List[Any]:
        try:
            return list(range(int(self.start), int(self.end), int(self.step)))
        except (TypeError, ValueError) as ex:
            raise InvalidPartitionError(
                message="Partition range bounds must be integers",
                details={"start": self.start, "end": self.end, "step": self.step},
            ) from ex


def to_field_value(value: Any) -> FieldValue:
    """Converte valores Python simples em `FieldValue`.

    list/tuple/set/frozenset → ArrayValue, range → RangeValue, demais → SingleValue.
    """
    if isinstance(value, FieldValue):
        return value
    if isinstance(value, range):
        return RangeValue(value.start, value.stop, value.step)
    if isinstance(value, (set, frozenset)):
        return ArrayValue(tuple(sorted(value, key=str)))
    if isinstance(value, (list, tuple)):
        return ArrayValue(tuple(value))
    return SingleValue(value)


# ---------------------------------------------------------------------------
# Campos e coordenadas
# ---------------------------------------------------------------------------

_BOOL_LITERALS = {"true": True, "1": True, "false": False, "0": False}


@dataclass(frozen=True)
class PartitionField:
    """Campo de partição: nome, tipo lógico e descrição opcional."""

    name: str
    ftype: str = "string"
    description: Optional[str] = None

    def coerce(self, value: Any) -> Any:
        """Converte um valor (possivelmente vindo de um caminho) para o tipo do campo."""
        ftype = self.ftype.lower()
        try:
            if ftype in {"integer", "int", "long", "short", "byte"}:
                return int(value)
            if ftype in {"float", "double"}:
                return float(value)
            if ftype == "boolean":
                if isinstance(value, bool):
                    return value
                return _BOOL_LITERALS[str(value).strip().lower()]
        except (TypeError, ValueError, KeyError) as ex:
            raise InvalidPartitionError(
                message=f"Invalid value {value!r} for partition field '{self.name}' of type {self.ftype}",
                details={"field": self.name, "type": self.ftype, "value": str(value)},
            ) from ex
        return str(value)


@dataclass(frozen=True)
class PartitionSpec:
    """Coordenada de partição: pares ordenados (campo, valor)."""

    items_: Tuple[Tuple[str, Any], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, values: Optional[Mapping[str, Any]] = None) -> "PartitionSpec":
        return cls(tuple((k, v) for k, v in (values or {}).items()))

    def keys(self) -> List[str]:
        return [k for k, _ in self.items_]

    def items(self) -> List[Tuple[str, Any]]:
        return list(self.items_)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.items_)

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def path(self) -> str:
        """Caminho estilo Hive: `ano=2020/mes=1`."""
        return "/".join(f"{k}={v}" for k, v in self.items_)

    def __getitem__(self, key: str) -> Any:
        for k, v in self.items_:
            if k == key:
                return v
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.items_)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.items_)

    def __str__(self) -> str:
        return self.path()


@dataclass(frozen=True)
class PartitionSchema:
    """Lista ordenada de campos de partição de uma relação."""

    fields: Tuple[PartitionField, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> PartitionField:
        for f in self.fields:
            if f.name == name:
                return f
        raise InvalidPartitionError(
            message=f"Unknown partition field '{name}'",
            details={"field": name, "partition_fields": self.names},
        )

    def validate(self, predicate: Optional[Mapping[str, Any]]) -> None:
        unknown = [k for k in (predicate or {}) if k not in self.names]
        if unknown:
            raise InvalidPartitionError(
                message=f"Unknown partition fields: {', '.join(sorted(unknown))}",
                details={"unknown": sorted(unknown), "partition_fields": self.names},
            )

    def interpolate(self, predicate: Optional[Mapping[str, Any]] = None) -> List[PartitionSpec]:
        """
        Expande um predicado em coordenadas concretas.

        Produz o produto cartesiano dos valores dos campos ligados, na ordem
        dos campos do schema. Campos não ligados são wildcards e não aparecem
        nas coordenadas. Coordenadas duplicadas são removidas.

        Raises:
            InvalidPartitionError: campo desconhecido ou valor inválido.
        """
        predicate = dict(predicate or {})
        self.validate(predicate)

        bound = [f for f in self.fields if f.name in predicate]
        axes: List[List[Tuple[str, Any]]] = []
        for f in bound:
            values = to_field_value(predicate[f.name]).values()
            axes.append([(f.name, f.coerce(v)) for v in values])

        specs: List[PartitionSpec] = []
        seen = set()
        for combo in itertools.product(*axes):
            spec = PartitionSpec(tuple(combo))
            if spec not in seen:
                seen.add(spec)
                specs.append(spec)
        return specs

    def spec(self, values: Optional[Mapping[str, Any]]) -> PartitionSpec:
        """
        Constrói a coordenada exata exigida por escritas.

        Raises:
            InvalidPartitionError: campo ausente, desconhecido, ou ligado a
                um conjunto/intervalo em vez de um valor único.
        """
        values = dict(values or {})
        self.validate(values)

        missing = [n for n in self.names if n not in values]
        if missing:
            raise InvalidPartitionError(
                message=f"Partition fields must all be bound, missing: {', '.join(missing)}",
                details={"missing": missing},
            )

        items = []
        for f in self.fields:
            value = to_field_value(values[f.name])
            if not isinstance(value, SingleValue):
                raise InvalidPartitionError(
                    message=f"Partition field '{f.name}' must be bound to a single value",
                    details={"field": f.name, "value": repr(values[f.name])},
                    hint="Writes target exactly one partition; use a single value per field",
                )
            items.append((f.name, f.coerce(value.value)))
        return PartitionSpec(tuple(items))

    def __iter__(self) -> Iterable[PartitionField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __bool__(self) -> bool:
        return bool(self.fields)
