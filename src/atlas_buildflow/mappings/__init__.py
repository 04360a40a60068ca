"""Mappings prontos para uso."""

from .filter import FilterMapping
from .read import ReadRelationMapping
from .select import SelectMapping
from .template import TemplateMapping
from .union import UnionMapping

__all__ = [
    "FilterMapping",
    "ReadRelationMapping",
    "SelectMapping",
    "TemplateMapping",
    "UnionMapping",
]
