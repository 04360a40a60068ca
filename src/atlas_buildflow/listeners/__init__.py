"""Listeners de execução prontos para uso."""

from .logging import LoggingListener
from .manifest import ManifestListener

__all__ = ["LoggingListener", "ManifestListener"]
