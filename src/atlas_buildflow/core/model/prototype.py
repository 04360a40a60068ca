# src/atlas_buildflow/core/model/prototype.py
"""
Prototypes: receitas declarativas instanciadas contra um contexto.

Um prototype guarda a classe de um mapping, relation, target ou assertion
e suas propriedades ainda não avaliadas. A instanciação avalia as
propriedades no contexto que está resolvendo o nome, de modo que o
mesmo prototype produz instâncias diferentes sob overlays diferentes
(ex.: um template com parâmetros substituídos).
"""

from __future__ import annotations

from typing import Any, Dict


class Prototype:
    """
    Receita de instanciação: `cls(name=..., context=..., **propriedades avaliadas)`.

    Exemplo:
        Prototype(LocalRelation, location="/data/${year}", format="csv")
    """

    def __init__(self, cls: type, **properties: Any) -> None:
        self.cls = cls
        self.properties: Dict[str, Any] = dict(properties)

    @classmethod
    def of(cls, instance: Any) -> "Prototype":
        """Embrulha uma instância pronta; o contexto de resolução é ignorado."""
        return _InstancePrototype(instance)

    def instantiate(self, context: Any, name: str) -> Any:
        properties = context.evaluate(self.properties)
        return self.cls(name=name, context=context, **properties)

    def __repr__(self) -> str:
        return f"Prototype({self.cls.__name__}, {self.properties!r})"


class _InstancePrototype(Prototype):
    def __init__(self, instance: Any) -> None:
        super().__init__(type(instance))
        self.instance = instance

    def instantiate(self, context: Any, name: str) -> Any:
        return self.instance
