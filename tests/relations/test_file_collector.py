# tests/relations/test_file_collector.py
"""
Testes do FileCollector.

Os testes asseguram que:
- variáveis do padrão são substituídas (`*` nos campos não ligados)
- `extract` recupera os valores das variáveis de um caminho
- `delete` remove arquivos e diretórios vazios, nunca a raiz
- `truncate` esvazia a raiz e a preserva
"""

from atlas_buildflow.core.model import PartitionSpec
from atlas_buildflow.relations import FileCollector


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x", encoding="utf-8")
    return path


def test_resolve_substitutes_bound_and_wildcards(tmp_path):
    collector = FileCollector(tmp_path, "year=${year}/month=$month/data.csv", ["year", "month"])

    assert collector.resolve(PartitionSpec.of({"year": 2020, "month": 1})) == tmp_path / "year=2020/month=1/data.csv"
    assert collector.resolve(PartitionSpec.of({"year": 2020})) == tmp_path / "year=2020/month=*/data.csv"


def test_collect_matches_only_files(tmp_path):
    collector = FileCollector(tmp_path, "year=${year}/month=${month}/data.csv", ["year", "month"])
    a = _touch(tmp_path / "year=2020/month=1/data.csv")
    b = _touch(tmp_path / "year=2020/month=2/data.csv")
    _touch(tmp_path / "year=2021/month=1/data.csv")

    assert collector.collect(PartitionSpec.of({"year": 2020})) == [a, b]
    assert collector.collect(PartitionSpec.of({"year": 2020, "month": 2})) == [b]
    assert collector.collect(PartitionSpec.of({"year": 1999})) == []
    assert len(collector.collect()) == 3


def test_collect_on_missing_location_is_empty(tmp_path):
    assert FileCollector(tmp_path / "nope", "part.csv").collect() == []


def test_extract_recovers_variables(tmp_path):
    collector = FileCollector(tmp_path, "${region}/year=${year}/${region}.csv", ["region", "year"])

    assert collector.extract(tmp_path / "br/year=2020/br.csv") == {"region": "br", "year": "2020"}
    assert collector.extract(tmp_path / "br/year=2020/us.csv") == {}
    assert collector.extract("elsewhere.txt") == {}


def test_delete_prunes_empty_directories_but_not_root(tmp_path):
    root = tmp_path / "rel"
    collector = FileCollector(root, "year=${year}/month=${month}/data.csv", ["year", "month"])
    _touch(root / "year=2020/month=1/data.csv")
    keep = _touch(root / "year=2021/month=1/data.csv")

    removed = collector.delete([PartitionSpec.of({"year": 2020, "month": 1})])

    assert removed == 1
    assert not (root / "year=2020").exists()
    assert keep.exists()

    collector.delete([PartitionSpec.of({"year": 2021})])
    assert root.is_dir()
    assert list(root.iterdir()) == []


def test_truncate_keeps_root(tmp_path):
    root = tmp_path / "rel"
    collector = FileCollector(root, "a/${x}.csv", ["x"])
    _touch(root / "a/1.csv")
    _touch(root / "top.csv")

    collector.truncate()
    assert root.is_dir()
    assert list(root.iterdir()) == []

    FileCollector(tmp_path / "missing", "x.csv").truncate()
