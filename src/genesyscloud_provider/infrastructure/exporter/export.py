"""
Export of existing objects.

The inventory of every requested resource type is listed, each object is
read through its resource's read operation, and the resulting state is
turned into exportable attributes: IDs of other exported objects become
references, zero values are dropped, sensitive values become variables.
"""

import copy
import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple

from genesyscloud_provider.domain.resource.diagnostics import Diagnostics
from genesyscloud_provider.infrastructure.exporter.resource_exporter import (
    RefAttrSettings,
    ResourceExporter,
    ResourceIDMetaMap,
)
from genesyscloud_provider.infrastructure.logging.logger import get_logger

if TYPE_CHECKING:
    from genesyscloud_provider.infrastructure.registry.resource_registry import ResourceRegistry

logger = get_logger(__name__)

_UNSAFE_LABEL_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_label(name: str) -> str:
    """Turn an object name into a resource label."""
    label = _UNSAFE_LABEL_CHARS.sub("_", name.strip())
    if not label or not (label[0].isalpha() or label[0] == "_"):
        label = "_" + label
    return label


def build_labels(id_map: ResourceIDMetaMap) -> Dict[str, str]:
    """
    Assign a unique label to every listed object.

    Objects whose sanitized names collide get a suffix derived from their ID
    so labels stay stable between exports.
    """
    by_label: Dict[str, List[str]] = {}
    for object_id, meta in id_map.items():
        by_label.setdefault(sanitize_label(meta.id_prefix + meta.name), []).append(object_id)

    labels: Dict[str, str] = {}
    for label, object_ids in by_label.items():
        if len(object_ids) == 1:
            labels[object_ids[0]] = label
            continue
        for object_id in object_ids:
            digest = hashlib.sha256(object_id.encode()).hexdigest()[:8]
            labels[object_id] = f"{label}_{digest}"
    return labels


def _is_zero(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {} or value is False or (
        isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0
    )


def _map_path(value: Any, parts: List[str], fn: Callable[[Any], Any]) -> Any:
    """Return a copy of value with fn applied to every leaf at the dotted path."""
    if isinstance(value, list):
        if not parts:
            return [fn(item) for item in value]
        if parts[0] == "*":
            return [_map_path(item, parts[1:], fn) for item in value]
        return [_map_path(item, parts, fn) for item in value]
    if not parts:
        return fn(value) if value is not None else None
    if not isinstance(value, dict):
        return value

    head, rest = parts[0], parts[1:]
    result = dict(value)
    if head == "*":
        for key, item in value.items():
            result[key] = _map_path(item, rest, fn)
    elif head in value:
        result[head] = _map_path(value[head], rest, fn)
    return result


def _get_path(value: Any, parts: List[str]) -> Any:
    for part in parts:
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class ReferenceResolver:
    """Replace IDs of exported objects with references to their labels."""

    def __init__(self, labels: Dict[str, Dict[str, str]]):
        """
        Args:
            labels: Resource type -> object ID -> label
        """
        self._labels = labels
        self.unresolved: List[Tuple[str, str]] = []

    def reference(self, ref_type: str, object_id: str) -> Optional[str]:
        label = self._labels.get(ref_type, {}).get(object_id)
        if label is None:
            return None
        return f"${{{ref_type}.{label}.id}}"

    def _resolve_id(self, value: Any, settings: RefAttrSettings) -> Any:
        if not isinstance(value, str) or value in settings.alt_values:
            return value
        reference = self.reference(settings.ref_type, value)
        if reference is None:
            self.unresolved.append((settings.ref_type, value))
            return value
        return reference

    def resolve(self, exporter: ResourceExporter, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Resolve every reference attribute of an object.

        IDs of objects outside the export and alternative values such as
        ``*`` are kept as they are.

        Args:
            exporter: Export settings of the object's resource type
            attributes: Object attributes

        Returns:
            A copy of the attributes with references resolved
        """
        result = copy.deepcopy(attributes)
        for path, settings in exporter.ref_attrs.items():
            result = _map_path(result, path.split("."), lambda v, s=settings: self._resolve_id(v, s))

        for encoded, settings in exporter.encoded_ref_attrs.items():
            parts = encoded.attr.split(".")

            def resolve_nested(raw: Any, nested: str = encoded.nested_attr,
                               s: RefAttrSettings = settings) -> Any:
                if not isinstance(raw, str) or not raw:
                    return raw
                try:
                    document = json.loads(raw)
                except ValueError:
                    return raw
                document = _map_path(document, nested.split("."), lambda v: self._resolve_id(v, s))
                return json.dumps(document, sort_keys=True)

            result = _map_path(result, parts, resolve_nested)
        return result


def sanitize_zero_values(attributes: Dict[str, Any], allow_zero_values: Iterable[str] = (),
                         prefix: str = "") -> Dict[str, Any]:
    """Drop attributes holding zero values, except the allowed attribute paths."""
    allowed = set(allow_zero_values)
    result: Dict[str, Any] = {}
    for key, value in attributes.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            value = sanitize_zero_values(value, allowed, prefix=f"{path}.")
        elif isinstance(value, list):
            value = [
                sanitize_zero_values(item, allowed, prefix=f"{path}.") if isinstance(item, dict) else item
                for item in value
            ]
        if _is_zero(value) and path not in allowed:
            continue
        result[key] = value
    return result


def apply_remove_if_missing(attributes: Dict[str, Any],
                            rules: Dict[str, List[str]]) -> Optional[Dict[str, Any]]:
    """
    Remove objects whose listed inner attributes are all missing.

    Deeper paths are processed first so removals cascade upwards.

    Returns:
        The pruned attributes, None when the resource itself is removed
    """
    result = copy.deepcopy(attributes)
    for path in sorted(rules, key=lambda p: p.count(".") + (1 if p else 0), reverse=True):
        inner = rules[path]
        if not path:
            if all(_is_zero(result.get(name)) for name in inner):
                return None
            continue

        parts = path.split(".")
        parent = _get_path(result, parts[:-1]) if len(parts) > 1 else result
        if not isinstance(parent, dict):
            continue
        target = parent.get(parts[-1])
        if isinstance(target, dict) and all(_is_zero(target.get(name)) for name in inner):
            del parent[parts[-1]]
    return result


def _decode_json_attributes(attributes: Dict[str, Any], paths: Iterable[str]) -> Dict[str, Any]:
    def decode(raw: Any) -> Any:
        if isinstance(raw, str) and raw:
            try:
                return json.loads(raw)
            except ValueError:
                return raw
        return raw

    for path in paths:
        attributes = _map_path(attributes, path.split("."), decode)
    return attributes


@dataclass
class ExportResult:
    """Exported objects keyed by resource type and label."""

    resources: Dict[str, Dict[str, Dict[str, Any]]] = field(default_factory=dict)
    variables: Dict[str, str] = field(default_factory=dict)
    unresolved: List[Tuple[str, str]] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def export_inventory(ctx: Any, registry: "ResourceRegistry", meta: Any,
                     resource_types: Optional[List[str]] = None) -> ExportResult:
    """
    List, read and convert every object of the requested resource types.

    A type whose listing fails contributes nothing; its error is reported in
    the result diagnostics and the other types are still exported.

    Args:
        ctx: Cancellation context
        registry: Frozen resource registry
        meta: Provider meta handed to listings and reads
        resource_types: Types to export, every type with an exporter if None

    Returns:
        ExportResult
    """
    exporters = registry.exporters()
    types = resource_types or sorted(exporters)
    result = ExportResult()

    inventories: Dict[str, Dict[str, str]] = {}
    for type_name in types:
        registry.get_resource(type_name)
        exporter = exporters.get(type_name)
        if exporter is None:
            result.diagnostics.extend(Diagnostics.warning(f"{type_name} does not support export"))
            continue

        id_map, diagnostics = exporter.get_resources_func(ctx, meta)
        result.diagnostics.extend(diagnostics)
        if diagnostics.has_error():
            continue
        inventories[type_name] = build_labels(id_map)
        logger.info("Listed %s objects of %s", len(id_map), type_name)

    resolver = ReferenceResolver(inventories)
    for type_name, labels in inventories.items():
        resource = registry.get_resource(type_name)
        exporter = exporters[type_name]
        sensitive = resource.schema.sensitive_attributes()
        exported: Dict[str, Dict[str, Any]] = {}

        for object_id, label in sorted(labels.items(), key=lambda item: item[1]):
            d = resource.import_state(object_id)
            diagnostics = resource.read(ctx, d, meta)
            result.diagnostics.extend(diagnostics)
            if diagnostics.has_error() or not d.id:
                continue

            attributes = d.state()
            for name in exporter.unresolvable_attributes:
                variable = f"{type_name}_{label}_{name}"
                result.variables[variable] = f"{name} of {type_name}.{label}"
                attributes[name] = f"${{var.{variable}}}"
            for name in sensitive:
                if name not in exporter.unresolvable_attributes:
                    attributes.pop(name, None)

            attributes = resolver.resolve(exporter, attributes)
            attributes = sanitize_zero_values(attributes, exporter.allow_zero_values)
            pruned = apply_remove_if_missing(attributes, exporter.remove_if_missing)
            if pruned is None:
                logger.debug("Skipping %s %s: nothing to export", type_name, object_id)
                continue
            exported[label] = _decode_json_attributes(pruned, exporter.json_encode_attributes)

        result.resources[type_name] = exported

    result.unresolved = sorted(set(resolver.unresolved))
    return result
