"""Assertions prontas para uso."""

from .expression import ExpressionAssertion

__all__ = ["ExpressionAssertion"]
