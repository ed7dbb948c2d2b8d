"""Per resource type export settings."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from genesyscloud_provider.domain.resource.diagnostics import Diagnostics


@dataclass
class ResourceMeta:
    """What a listing knows about one exported object."""

    name: str
    id_prefix: str = ""


# Object ID -> ResourceMeta
ResourceIDMetaMap = Dict[str, ResourceMeta]

# (ctx, provider_meta) -> (ResourceIDMetaMap, Diagnostics)
GetResourcesFunc = Callable[[Any, Any], Tuple[ResourceIDMetaMap, Diagnostics]]


@dataclass
class RefAttrSettings:
    """An attribute holding the ID of another resource type."""

    ref_type: str
    alt_values: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class JsonEncodeRefAttr:
    """A reference nested inside a JSON string attribute."""

    attr: str
    nested_attr: str


@dataclass
class ResourceExporter:
    """
    Export settings of one resource type.

    Attribute paths are dotted; ``*`` matches every key of a map or every
    element of a list.

    Attributes:
        get_resources_func: Lists every object of the type for export
        ref_attrs: Attribute path -> referenced resource type
        json_encode_attributes: JSON string attributes exported as documents
        encoded_ref_attrs: References nested inside JSON string attributes
        unresolvable_attributes: Attributes the API never returns, exported as variables
        allow_zero_values: Attribute paths whose zero value is meaningful
        remove_if_missing: Attribute path ("" for the resource itself) -> inner
            attributes; when all of them are missing the object is removed
    """

    get_resources_func: GetResourcesFunc
    ref_attrs: Dict[str, RefAttrSettings] = field(default_factory=dict)
    json_encode_attributes: List[str] = field(default_factory=list)
    encoded_ref_attrs: Dict[JsonEncodeRefAttr, RefAttrSettings] = field(default_factory=dict)
    unresolvable_attributes: List[str] = field(default_factory=list)
    allow_zero_values: List[str] = field(default_factory=list)
    remove_if_missing: Dict[str, List[str]] = field(default_factory=dict)

    def referenced_types(self) -> List[str]:
        """Resource types this type refers to."""
        types = {settings.ref_type for settings in self.ref_attrs.values()}
        types.update(settings.ref_type for settings in self.encoded_ref_attrs.values())
        return sorted(types)
