"""Export of existing objects as declarative resource configuration."""

from .export import (
    ExportResult,
    ReferenceResolver,
    apply_remove_if_missing,
    build_labels,
    export_inventory,
    sanitize_label,
    sanitize_zero_values,
)
from .resource_exporter import (
    JsonEncodeRefAttr,
    RefAttrSettings,
    ResourceExporter,
    ResourceIDMetaMap,
    ResourceMeta,
)

__all__ = [
    "ResourceExporter",
    "RefAttrSettings",
    "JsonEncodeRefAttr",
    "ResourceMeta",
    "ResourceIDMetaMap",
    "ExportResult",
    "ReferenceResolver",
    "export_inventory",
    "build_labels",
    "sanitize_label",
    "sanitize_zero_values",
    "apply_remove_if_missing",
]
