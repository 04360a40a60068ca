"""Targets prontos para uso."""

from .relation import RelationTarget
from .verify import VerifyTarget

__all__ = ["RelationTarget", "VerifyTarget"]
