"""
modelgraph: declarative data models with validation and association graphs.

Purpose
- Define models through class-level attribute, association and validation
  tables, then construct, validate, serialize and deserialize instances.

Importing the package has no side effects: no config is loaded and logging
is left untouched until ``configure_logging`` is called.
"""

from modelgraph.constants import DEFAULT_DEPTH
from modelgraph.errors import (
    ConfigLoadError,
    ModelDefinitionError,
    ModelErrors,
    ModelgraphError,
    PropertyValidationError,
    ValidationError,
    ValidationIssue,
)
from modelgraph.merge import deep_merge
from modelgraph.model import Model
from modelgraph.options import DeserializeOptions, SerializeOptions, ValidateOptions
from modelgraph.registry import (
    AssociationKind,
    attribute,
    belongs_to_one,
    has_many,
    has_one,
    is_lazy_load,
    lazy,
    many_to_many,
    rule,
)

__version__ = "0.1.0"

__all__ = [
    "AssociationKind",
    "ConfigLoadError",
    "DEFAULT_DEPTH",
    "DeserializeOptions",
    "Model",
    "ModelDefinitionError",
    "ModelErrors",
    "ModelgraphError",
    "PropertyValidationError",
    "SerializeOptions",
    "ValidateOptions",
    "ValidationError",
    "ValidationIssue",
    "__version__",
    "attribute",
    "belongs_to_one",
    "deep_merge",
    "has_many",
    "has_one",
    "is_lazy_load",
    "lazy",
    "many_to_many",
    "rule",
]
