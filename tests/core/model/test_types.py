# tests/core/model/test_types.py
"""
Testes de Schema e Field.

Os testes asseguram que:
- `Schema.apply` projeta, reordena e converte colunas
- nomes são comparados sem distinção de caixa
- falhas de conversão e nulos indevidos viram SchemaMismatchError
- `merge` preserva a descrição deste lado e usa a do outro como fallback
"""

import pandas as pd
import pytest

from atlas_buildflow.core.exceptions import SchemaMismatchError
from atlas_buildflow.core.model import Field, Schema


def test_apply_projects_and_casts():
    df = pd.DataFrame({"B": ["1", "2"], "a": ["x", "y"], "extra": [0, 0]})
    schema = Schema.of(Field("a"), Field("b", "long"))

    out = schema.apply(df)
    assert list(out.columns) == ["a", "b"]
    assert str(out["b"].dtype) == "Int64"
    assert out["b"].tolist() == [1, 2]


def test_apply_missing_column_raises():
    with pytest.raises(SchemaMismatchError) as exc:
        Schema.of(Field("missing")).apply(pd.DataFrame({"a": [1]}))
    assert exc.value.details["missing_columns"] == ["missing"]


def test_cast_failure_raises_schema_mismatch():
    with pytest.raises(SchemaMismatchError):
        Field("n", "integer").cast(pd.Series(["one"]))


def test_non_nullable_field_rejects_nulls():
    with pytest.raises(SchemaMismatchError):
        Field("n", "double", nullable=False).cast(pd.Series([1.0, None]))


def test_boolean_and_temporal_casts():
    flags = Field("f", "boolean").cast(pd.Series(["true", "0", None]))
    assert flags.tolist()[:2] == [True, False]
    assert flags.isna().tolist() == [False, False, True]

    dates = Field("d", "date").cast(pd.Series(["2020-01-02 10:00:00"]))
    assert dates.iloc[0] == pd.Timestamp("2020-01-02")


def test_from_frame_infers_types():
    df = pd.DataFrame({"i": [1], "f": [1.5], "s": ["x"], "b": [True]})
    schema = Schema.from_frame(df)
    assert [(f.name, f.ftype) for f in schema] == [("i", "long"), ("f", "double"), ("s", "string"), ("b", "boolean")]


def test_merge_description_policy():
    left = Schema.of(Field("a", description="left"), Field("b"))
    right = Schema.of(Field("A", description="right"), Field("b", description="from right"), Field("c"))

    merged = left.merge(right)
    assert merged.names == ["a", "b", "c"]
    assert merged.get("a").description == "left"
    assert merged.get("b").description == "from right"
    assert len(merged) == 3
