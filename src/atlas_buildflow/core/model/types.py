# src/atlas_buildflow/core/model/types.py
"""
Tipos de schema do Atlas BuildFlow.

Um `Schema` é uma lista ordenada de `Field`s. Ele é usado para:
    - projetar e converter o resultado de leituras de relações (`Schema.apply`)
    - descrever a saída de mappings (`describe`)
    - combinar metadados descritivos de duas fontes (`Schema.merge`)

Tipos suportados (v1): string, integer, long, short, byte, float, double,
boolean, date, timestamp. Nomes de colunas são comparados sem distinção
entre maiúsculas e minúsculas; a grafia do schema prevalece na saída.

Política de merge de descrições: a descrição deste lado prevalece e, quando
ausente, a do outro lado é usada.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from atlas_buildflow.core.exceptions import SchemaMismatchError


_INTEGER_TYPES = {"integer": "Int32", "int": "Int32", "long": "Int64", "short": "Int16", "byte": "Int8"}
_FLOAT_TYPES = {"float": np.float32, "double": np.float64}


@dataclass(frozen=True)
class Field:
    """Coluna de um schema: nome, tipo lógico, nulabilidade e descrição opcional."""

    name: str
    ftype: str = "string"
    nullable: bool = True
    description: Optional[str] = None

    def cast(self, series: pd.Series) -> pd.Series:
        """Converte uma série para o tipo lógico deste campo.

        Raises:
            SchemaMismatchError: quando a conversão não é possível ou quando
                um campo não-nulável contém nulos.
        """
        ftype = self.ftype.lower()
        try:
            if ftype in _INTEGER_TYPES:
                out = pd.to_numeric(series, errors="raise").astype(_INTEGER_TYPES[ftype])
            elif ftype in _FLOAT_TYPES:
                out = pd.to_numeric(series, errors="raise").astype(_FLOAT_TYPES[ftype])
            elif ftype == "boolean":
                out = series.map(_to_bool).astype("boolean")
            elif ftype == "date":
                out = pd.to_datetime(series, errors="raise").dt.normalize()
            elif ftype == "timestamp":
                out = pd.to_datetime(series, errors="raise")
            elif ftype == "string":
                out = series.astype("string")
            else:
                raise SchemaMismatchError(
                    message=f"Unsupported field type '{self.ftype}'",
                    details={"field": self.name, "type": self.ftype},
                )
        except SchemaMismatchError:
            raise
        except (ValueError, TypeError) as ex:
            raise SchemaMismatchError(
                message=f"Cannot cast column '{self.name}' to {self.ftype}",
                details={"field": self.name, "type": self.ftype, "error": str(ex)},
            ) from ex

        if not self.nullable and bool(out.isna().any()):
            raise SchemaMismatchError(
                message=f"Column '{self.name}' contains nulls but is declared non-nullable",
                details={"field": self.name},
            )
        return out

    def merge(self, other: "Field") -> "Field":
        return replace(self, description=self.description or other.description)


def _to_bool(value):
    if value is None or (isinstance(value, float) and np.isnan(value)):
        return pd.NA
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    text = str(value).strip().lower()
    if text in {"true", "1", "yes", "t"}:
        return True
    if text in {"false", "0", "no", "f"}:
        return False
    raise ValueError(f"invalid boolean literal: {value!r}")


def _infer_type(dtype) -> str:
    if pd.api.types.is_bool_dtype(dtype):
        return "boolean"
    if pd.api.types.is_integer_dtype(dtype):
        return "long"
    if pd.api.types.is_float_dtype(dtype):
        return "float" if np.dtype(dtype) == np.float32 else "double"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "timestamp"
    return "string"


@dataclass(frozen=True)
class Schema:
    """Lista ordenada e imutável de campos."""

    fields: Tuple[Field, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", tuple(self.fields))

    @classmethod
    def of(cls, *fields: Field) -> "Schema":
        return cls(tuple(fields))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Schema":
        return cls(tuple(Field(str(c), _infer_type(df[c].dtype)) for c in df.columns))

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Optional[Field]:
        key = name.lower()
        for f in self.fields:
            if f.name.lower() == key:
                return f
        return None

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Projeta `df` nas colunas deste schema (na ordem declarada) e converte tipos.

        Raises:
            SchemaMismatchError: se alguma coluna não existir em `df` ou não
                puder ser convertida.
        """
        columns: Dict[str, str] = {str(c).lower(): c for c in df.columns}
        missing = [f.name for f in self.fields if f.name.lower() not in columns]
        if missing:
            raise SchemaMismatchError(
                message=f"Data does not satisfy requested schema, missing columns: {', '.join(missing)}",
                details={"missing_columns": missing, "available_columns": [str(c) for c in df.columns]},
            )

        out = pd.DataFrame(index=df.index)
        for f in self.fields:
            out[f.name] = f.cast(df[columns[f.name.lower()]])
        return out.reset_index(drop=True)

    def merge(self, other: "Schema") -> "Schema":
        """Combina dois schemas: campos deste lado primeiro, extras do outro no final."""
        others = {f.name.lower(): f for f in other.fields}
        mine = {f.name.lower() for f in self.fields}
        merged = [f.merge(others[f.name.lower()]) if f.name.lower() in others else f for f in self.fields]
        merged.extend(f for f in other.fields if f.name.lower() not in mine)
        return Schema(tuple(merged))

    def __iter__(self) -> Iterable[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)
