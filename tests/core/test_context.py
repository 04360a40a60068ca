# tests/core/test_context.py
"""
Testes do contexto de execução com escopo (Context).

Os testes asseguram que:
- variáveis são interpoladas em strings e estruturas aninhadas
- bindings do filho sombreiam os do pai sem alterá-lo
- nomes são resolvidos localmente, nos pais e em projetos qualificados
- cada prototype é instanciado no máximo uma vez por contexto

Limites explícitos:
    - Não executa mappings (ver tests/core/execution)
"""

import pytest

from atlas_buildflow.core.context import Context, ScopeContext
from atlas_buildflow.core.exceptions import NoSuchMappingError, NoSuchProjectError, NoSuchRelationError
from atlas_buildflow.core.model import Prototype


def test_evaluate_interpolates_both_syntaxes():
    ctx = Context(environment={"year": 2020, "region": "br"})
    assert ctx.evaluate("data/$region/${year}.csv") == "data/br/2020.csv"
    assert ctx.evaluate("cost: $$5") == "cost: $5"


def test_evaluate_preserves_type_of_single_reference():
    ctx = Context(environment={"year": 2020, "months": [1, 2]})
    assert ctx.evaluate("${year}") == 2020
    assert ctx.evaluate("${months}") == [1, 2]


def test_evaluate_leaves_unbound_variables_literal():
    ctx = Context(environment={"a": 1})
    assert ctx.evaluate("${missing}") == "${missing}"
    assert ctx.evaluate("x=$missing") == "x=$missing"


def test_evaluate_recurses_without_mutating_input():
    ctx = Context(environment={"y": 2021})
    value = {"path": "/data/${y}", "parts": ["${y}", ("$y", 3)], "n": 7}
    out = ctx.evaluate(value)

    assert out == {"path": "/data/2021", "parts": [2021, ("2021", 3)], "n": 7}
    assert value["path"] == "/data/${y}"
    assert value["parts"][0] == "${y}"


def test_child_bindings_shadow_parent_without_mutating_it():
    """
    Verifica o isolamento de escopos filhos.

    Invariantes:
        - o filho vê o seu binding e os bindings herdados
        - o pai continua vendo o valor original
    """
    parent = Context(project="p", environment={"year": 2020, "region": "br"})
    child = parent.child({"year": 2021})

    assert isinstance(child, ScopeContext)
    assert child.lookup("year") == 2021
    assert child.lookup("region") == "br"
    assert parent.lookup("year") == 2020
    assert child.project == "p"
    assert "year" in child.environment and parent.environment["year"] == 2020


def test_lookup_missing_raises_key_error():
    ctx = Context()
    with pytest.raises(KeyError):
        ctx.lookup("nope")
    assert ctx.lookup("nope", None) is None


def test_prototype_instantiated_once_per_context(FrameMapping):
    ctx = Context(project="p", mappings={"m": Prototype(FrameMapping)})
    first = ctx.get_mapping("m")
    assert ctx.get_mapping("m") is first
    assert first.name == "m"
    assert first.context is ctx


def test_child_scope_instantiates_prototype_with_overlay(FrameMapping):
    ctx = Context(project="p", environment={"n": 1}, mappings={"m": Prototype(FrameMapping, rows=["${n}"])})
    child = ctx.child({"n": 5})

    assert ctx.get_mapping("m").rows == [1]
    assert child.get_mapping("m").rows == [5]
    assert child.get_mapping("m") is not ctx.get_mapping("m")


def test_missing_names_raise_typed_errors():
    ctx = Context(project="p")
    with pytest.raises(NoSuchMappingError) as exc:
        ctx.get_mapping("ghost")
    assert exc.value.details == {"name": "ghost", "project": "p"}
    with pytest.raises(NoSuchRelationError):
        ctx.get_relation("ghost")


def test_qualified_names_resolve_in_registered_project(FrameMapping):
    root = Context()
    a = Context(project="a", parent=root, mappings={"m": Prototype(FrameMapping)})
    b = Context(project="b", parent=root)
    root.register_project(a)
    root.register_project(b)

    assert root.project_names == ["a", "b"]
    assert b.get_mapping("a/m") is a.get_mapping("m")

    with pytest.raises(NoSuchMappingError):
        b.get_mapping("zzz/m")
    with pytest.raises(NoSuchProjectError):
        b.project_context("zzz")


def test_config_is_inherited_from_root():
    root = Context(config={"engine": {"fail_fast": False}})
    project = Context(project="p", parent=root)
    assert project.config["engine"]["fail_fast"] is False
    assert project.root is root
