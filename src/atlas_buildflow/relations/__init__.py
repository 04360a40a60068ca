"""Relações concretas do Atlas BuildFlow."""

from .collector import FileCollector
from .local import LocalRelation

__all__ = ["FileCollector", "LocalRelation"]
