"""Engine-facing resource primitives."""

from .definitions import DataSource, Resource
from .diagnostics import Diagnostic, Diagnostics, Severity
from .resource_data import ResourceData
from .schema import AttributeSpec, ResourceSchema, attribute, validate_resource_config

__all__ = [
    "AttributeSpec",
    "DataSource",
    "Diagnostic",
    "Diagnostics",
    "Resource",
    "ResourceData",
    "ResourceSchema",
    "Severity",
    "attribute",
    "validate_resource_config",
]
