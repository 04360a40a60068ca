# tests/relations/test_local_relation.py
"""
Testes da relação particionada local (LocalRelation).

Os testes asseguram que:
- escritas exigem uma única coordenada de partição
- leituras recuperam colunas de partição do caminho, com tipo
- `loaded` / `truncate` refletem o conteúdo por partição
- `exists` / `create` / `destroy` seguem o ciclo de vida do diretório
- os modos de escrita têm a semântica declarada

Decisões arquiteturais:
    - Toda relação é criada sob `tmp_path`
    - Formatos csv e json (parquet depende de engine opcional)
"""

import pandas as pd
import pytest

from atlas_buildflow.core.context import Context
from atlas_buildflow.core.exceptions import (
    InvalidPartitionError,
    OutputExistsError,
    RelationAlreadyExistsError,
    RelationNotFoundError,
)
from atlas_buildflow.core.identifiers import ResourceIdentifier
from atlas_buildflow.core.model import Field, OutputMode, PartitionField, Schema
from atlas_buildflow.relations import LocalRelation


def _sales(tmp_path, **kwargs):
    kwargs.setdefault("partitions", [PartitionField("year", "integer"), PartitionField("month", "integer")])
    return LocalRelation("sales", location=tmp_path / "sales", **kwargs)


def _frame(*amounts):
    return pd.DataFrame({"amount": list(amounts)})


def test_write_then_read_partition(tmp_path):
    """
    Verifica escrita em duas partições e leitura por predicado.

    Invariantes:
        - colunas de partição não são gravadas no arquivo
        - colunas de partição são adicionadas na leitura, com o tipo do campo
        - um predicado com conjunto lê as partições correspondentes
    """
    rel = _sales(tmp_path)
    rel.write(_frame(10, 20), {"year": 2020, "month": 1})
    rel.write(_frame(30), {"year": 2020, "month": 2})

    stored = pd.read_csv(tmp_path / "sales/year=2020/month=1/part-00000.csv")
    assert list(stored.columns) == ["amount"]

    df = rel.read(partition={"year": 2020, "month": [1, 2]})
    assert df["amount"].tolist() == [10, 20, 30]
    assert df["month"].tolist() == [1, 1, 2]
    assert df["year"].tolist() == [2020, 2020, 2020]


def test_read_with_schema_and_unbound_fields(tmp_path):
    rel = _sales(tmp_path, schema=[{"name": "amount", "ftype": "double"}, {"name": "year", "ftype": "integer"}])
    rel.write(_frame(1), {"year": 2020, "month": 1})
    rel.write(_frame(2), {"year": 2021, "month": 1})

    df = rel.read()
    assert list(df.columns) == ["amount", "year"]
    assert df["amount"].tolist() == [1.0, 2.0]
    assert sorted(df["year"].tolist()) == [2020, 2021]


def test_read_without_files_returns_empty_frame(tmp_path):
    rel = _sales(tmp_path, schema=Schema.of(Field("amount", "double")))
    df = rel.read(partition={"year": 1999})
    assert df.empty
    assert list(df.columns) == ["amount"]
    assert _sales(tmp_path).read().empty


def test_write_rejects_set_or_range(tmp_path):
    rel = _sales(tmp_path)
    with pytest.raises(InvalidPartitionError):
        rel.write(_frame(1), {"year": 2020, "month": {1, 2}})
    with pytest.raises(InvalidPartitionError):
        rel.write(_frame(1), {"year": range(2020, 2022), "month": 1})
    with pytest.raises(InvalidPartitionError):
        rel.write(_frame(1), {"year": 2020})
    assert not (tmp_path / "sales").exists()


def test_loaded_and_truncate_cycle(tmp_path):
    rel = _sales(tmp_path)
    rel.create()
    jan = {"year": 2020, "month": 1}
    feb = {"year": 2020, "month": 2}

    assert not rel.loaded(jan)
    rel.write(_frame(1), jan)
    rel.write(_frame(2), feb)
    assert rel.loaded(jan) and rel.loaded(feb)
    assert rel.loaded({"year": 2020})

    rel.truncate(jan)
    assert not rel.loaded(jan)
    assert rel.loaded(feb)

    rel.truncate()
    assert not rel.loaded()
    assert rel.exists()


def test_exists_create_destroy(tmp_path):
    rel = _sales(tmp_path)
    assert not rel.exists()

    rel.create()
    assert rel.exists()
    with pytest.raises(RelationAlreadyExistsError):
        rel.create()
    rel.create(if_not_exists=True)

    rel.destroy()
    assert not rel.exists()
    with pytest.raises(RelationNotFoundError):
        rel.destroy()
    rel.destroy(if_exists=True)


def test_write_modes(tmp_path):
    rel = LocalRelation("plain", location=tmp_path / "plain")
    rel.write(_frame(1))
    rel.write(_frame(2), mode=OutputMode.APPEND)
    assert rel.read()["amount"].tolist() == [1, 2]

    rel.write(_frame(3), mode="ignore_if_exists")
    assert rel.read()["amount"].tolist() == [1, 2]

    with pytest.raises(OutputExistsError):
        rel.write(_frame(4), mode=OutputMode.ERROR_IF_EXISTS)

    rel.write(_frame(5))
    assert rel.read()["amount"].tolist() == [5]
    assert rel.loaded()


def test_json_format_and_custom_pattern(tmp_path):
    rel = LocalRelation(
        "events",
        location=tmp_path / "events",
        format="json",
        pattern="${day}/events.jsonl",
        partitions=["day"],
    )
    rel.write(pd.DataFrame({"id": [1, 2]}), {"day": "2024-01-01"})

    assert (tmp_path / "events/2024-01-01/events.jsonl").is_file()
    df = rel.read(partition={"day": "2024-01-01"})
    assert df["id"].tolist() == [1, 2]
    assert df["day"].tolist() == ["2024-01-01", "2024-01-01"]


def test_default_format_comes_from_config(tmp_path):
    ctx = Context(project="p", config={"relations": {"local": {"format": "json"}}})
    rel = LocalRelation("r", ctx, location=tmp_path / "r")
    assert rel.format == "json"
    assert rel.pattern == "part-00000.json"

    with pytest.raises(ValueError):
        LocalRelation("bad", location=tmp_path / "bad", format="xml")


def test_resources_per_partition(tmp_path):
    """
    Verifica os recursos de uma relação particionada.

    Invariantes:
        - cada coordenada vira o caminho do padrão com os valores substituídos
        - campos não ligados ficam como `*` no caminho
        - a relação sem partições expõe apenas sua localização
    """
    rel = _sales(tmp_path)
    location = (tmp_path / "sales").as_posix()

    assert rel.provides() == {ResourceIdentifier("local", location)}
    assert rel.resources({"year": 2020, "month": [1, 2]}) == {
        ResourceIdentifier.of_local(tmp_path / "sales/year=2020/month=1/part-00000.csv", {"year": 2020, "month": 1}),
        ResourceIdentifier.of_local(tmp_path / "sales/year=2020/month=2/part-00000.csv", {"year": 2020, "month": 2}),
    }
    assert rel.resources({"year": 2021}) == {
        ResourceIdentifier.of_local(tmp_path / "sales/year=2021/month=*/part-00000.csv", {"year": 2021}),
    }
    assert LocalRelation("plain", location=tmp_path / "plain").resources() == {ResourceIdentifier("local", (tmp_path / "plain").as_posix())}


def test_partition_predicate_rejected_on_unpartitioned_relation(tmp_path):
    rel = LocalRelation("plain", location=tmp_path / "plain")
    rel.write(_frame(1))

    with pytest.raises(InvalidPartitionError):
        rel.read(partition={"year": 2020})
    with pytest.raises(InvalidPartitionError):
        rel.loaded({"year": 2020})
    with pytest.raises(InvalidPartitionError):
        rel.resources({"year": 2020})
    with pytest.raises(InvalidPartitionError):
        rel.write(_frame(2), {"year": 2020})
    with pytest.raises(InvalidPartitionError):
        rel.truncate({"year": 1999})

    assert rel.loaded()
    assert rel.read()["amount"].tolist() == [1]


def test_unknown_partition_key_rejected(tmp_path):
    rel = _sales(tmp_path)
    rel.write(_frame(1), {"year": 2020, "month": 1})

    with pytest.raises(InvalidPartitionError):
        rel.read(partition={"day": 1})
    with pytest.raises(InvalidPartitionError):
        rel.loaded({"day": 1})
    with pytest.raises(InvalidPartitionError):
        rel.resources({"day": 1})
    with pytest.raises(InvalidPartitionError):
        rel.truncate({"day": 1})

    assert rel.loaded({"year": 2020, "month": 1})


def test_describe_includes_partition_fields(tmp_path):
    rel = _sales(tmp_path, schema=Schema.of(Field("amount", "double")))
    assert [(f.name, f.ftype) for f in rel.describe()] == [("amount", "double"), ("year", "integer"), ("month", "integer")]
    assert _sales(tmp_path).describe() is None
