# src/atlas_buildflow/core/traceability/__init__.py
"""Rastreabilidade (Manifest v1) do Atlas BuildFlow."""

from .manifest import (
    BuildManifest,
    add_event,
    create_manifest,
    load_manifest,
    save_manifest,
    unit_finished,
    unit_started,
)

__all__ = [
    "BuildManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "save_manifest",
    "unit_finished",
    "unit_started",
]
