# src/atlas_buildflow/core/model/__init__.py
"""Modelo em memória do Atlas BuildFlow: schemas, partições, resultados e contratos."""

from .assertion import Assertion
from .job import Job, JobInstance, JobParameter
from .mapping import Mapping, collect_requirements
from .partition import (
    ArrayValue,
    FieldValue,
    PartitionField,
    PartitionSchema,
    PartitionSpec,
    RangeValue,
    SingleValue,
)
from .project import Project
from .prototype import Prototype
from .relation import OutputMode, Relation
from .results import AssertionTestResult, Category, Lifecycle, Phase, Result, Status
from .target import Target
from .types import Field, Schema

__all__ = [
    "ArrayValue",
    "Assertion",
    "AssertionTestResult",
    "Category",
    "Field",
    "FieldValue",
    "Job",
    "JobInstance",
    "JobParameter",
    "Lifecycle",
    "Mapping",
    "OutputMode",
    "PartitionField",
    "PartitionSchema",
    "PartitionSpec",
    "Phase",
    "Project",
    "Prototype",
    "RangeValue",
    "Relation",
    "Result",
    "Schema",
    "SingleValue",
    "Status",
    "Target",
    "collect_requirements",
]
