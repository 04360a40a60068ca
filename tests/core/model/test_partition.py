# tests/core/model/test_partition.py
"""
Testes do modelo de particionamento.

Os testes asseguram que:
- predicados são expandidos no produto cartesiano, na ordem do schema
- campos não ligados são wildcards e não aparecem nas coordenadas
- campos desconhecidos são sempre rejeitados
- `spec` exige exatamente um valor por campo
"""

import pytest

from atlas_buildflow.core.exceptions import InvalidPartitionError
from atlas_buildflow.core.model import (
    ArrayValue,
    PartitionField,
    PartitionSchema,
    PartitionSpec,
    RangeValue,
    SingleValue,
)
from atlas_buildflow.core.model.partition import to_field_value


@pytest.fixture
def year_month():
    return PartitionSchema((PartitionField("year", "integer"), PartitionField("month", "integer")))


def test_interpolate_cross_product_in_schema_order(year_month):
    """
    Verifica a expansão `{month: [1, 2], year: 2020}`.

    Invariantes:
        - a ordem dos campos segue o schema, não o predicado
        - a ordem dos valores segue o predicado
    """
    specs = year_month.interpolate({"month": [1, 2], "year": 2020})
    assert [s.to_dict() for s in specs] == [{"year": 2020, "month": 1}, {"year": 2020, "month": 2}]
    assert [s.path() for s in specs] == ["year=2020/month=1", "year=2020/month=2"]


def test_interpolate_omits_unbound_fields(year_month):
    specs = year_month.interpolate({"month": 3})
    assert [s.to_dict() for s in specs] == [{"month": 3}]
    assert year_month.interpolate({}) == [PartitionSpec()]


def test_interpolate_ranges_sets_and_dedup(year_month):
    specs = year_month.interpolate({"year": range(2019, 2021), "month": {1, 1}})
    assert [s.to_dict() for s in specs] == [{"year": 2019, "month": 1}, {"year": 2020, "month": 1}]

    dup = year_month.interpolate({"year": [2020, "2020"]})
    assert [s.to_dict() for s in dup] == [{"year": 2020}]


def test_interpolate_rejects_unknown_field(year_month):
    with pytest.raises(InvalidPartitionError) as exc:
        year_month.interpolate({"day": 1})
    assert exc.value.details["unknown"] == ["day"]


def test_interpolate_rejects_uncoercible_value(year_month):
    with pytest.raises(InvalidPartitionError):
        year_month.interpolate({"year": "twenty"})


def test_spec_requires_all_fields_single_valued(year_month):
    assert year_month.spec({"year": "2020", "month": 1}).to_dict() == {"year": 2020, "month": 1}

    with pytest.raises(InvalidPartitionError):
        year_month.spec({"year": 2020})
    with pytest.raises(InvalidPartitionError):
        year_month.spec({"year": 2020, "month": [1, 2]})
    with pytest.raises(InvalidPartitionError):
        year_month.spec({"year": 2020, "month": range(1, 3)})


def test_to_field_value_kinds():
    assert to_field_value(5) == SingleValue(5)
    assert to_field_value([1, 2]) == ArrayValue((1, 2))
    assert to_field_value(range(0, 6, 2)).values() == [0, 2, 4]
    assert RangeValue(1, 4).values() == [1, 2, 3]


def test_partition_spec_mapping_protocol():
    spec = PartitionSpec.of({"year": 2020, "month": 1})
    assert list(spec) == ["year", "month"]
    assert spec["month"] == 1
    assert "year" in spec and "day" not in spec
    assert len(spec) == 2
    assert str(spec) == "year=2020/month=1"
    with pytest.raises(KeyError):
        spec["day"]


def test_boolean_and_string_fields_coerce():
    assert PartitionField("flag", "boolean").coerce("true") is True
    assert PartitionField("flag", "boolean").coerce("0") is False
    assert PartitionField("region").coerce(10) == "10"
    with pytest.raises(InvalidPartitionError):
        PartitionField("flag", "boolean").coerce("maybe")
