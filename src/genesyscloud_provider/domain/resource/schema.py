"""
Attribute markers for typed resource models.

Every resource is described by a pydantic model. Required fields are those
without a default; optional fields default to None. Extra markers are carried
in the field's json_schema_extra:

    computed:      the server may fill the value when it is not declared
    computed_only: the value is server-generated and cannot be declared
    force_new:     changing the value replaces the resource
    sensitive:     the value is never logged or exported
    json_string:   the value is a JSON document compared semantically
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from genesyscloud_provider.domain.core.exceptions import ResourceValidationError

_MARKERS = ("computed", "computed_only", "force_new", "sensitive", "json_string")


def attribute(default: Any = None, *, description: str = "", computed: bool = False,
              computed_only: bool = False, force_new: bool = False, sensitive: bool = False,
              json_string: bool = False, **kwargs: Any) -> Any:
    """
    Declare a resource attribute.

    Args:
        default: Default value, ``...`` for a required attribute
        description: Attribute description
        computed: Server may supply the value when not declared
        computed_only: Server-generated, never declared
        force_new: Changing the value replaces the resource
        sensitive: Value is write-only and never exported
        json_string: Value is a JSON document
        **kwargs: Further pydantic Field constraints (max_length, ge, ...)

    Returns:
        A pydantic FieldInfo carrying the markers
    """
    markers = {
        "computed": computed or computed_only,
        "computed_only": computed_only,
        "force_new": force_new,
        "sensitive": sensitive,
        "json_string": json_string,
    }
    return Field(default, description=description, json_schema_extra=markers, **kwargs)


@dataclass(frozen=True)
class AttributeSpec:
    """Markers of one attribute."""

    name: str
    required: bool
    computed: bool = False
    computed_only: bool = False
    force_new: bool = False
    sensitive: bool = False
    json_string: bool = False
    description: str = ""

    @property
    def optional(self) -> bool:
        return not self.required and not self.computed_only

    @property
    def settable(self) -> bool:
        """Whether the attribute can be declared in configuration."""
        return not self.computed_only

    def values_equal(self, expected: Any, actual: Any) -> bool:
        """Compare two values, JSON strings compare by their decoded content."""
        if self.json_string:
            return equivalent_json(expected, actual)
        return expected == actual


class ResourceSchema:
    """Attribute markers of a resource model."""

    def __init__(self, model: Type[BaseModel]):
        self.model = model
        self.attributes: Dict[str, AttributeSpec] = {}
        for name, info in model.model_fields.items():
            extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
            self.attributes[name] = AttributeSpec(
                name=name,
                required=info.is_required(),
                description=info.description or "",
                **{marker: bool(extra.get(marker, False)) for marker in _MARKERS},
            )

    @classmethod
    def from_model(cls, model: Type[BaseModel]) -> "ResourceSchema":
        return cls(model)

    def __contains__(self, name: str) -> bool:
        return name in self.attributes

    def __getitem__(self, name: str) -> AttributeSpec:
        return self.attributes[name]

    def settable_attributes(self) -> Dict[str, AttributeSpec]:
        return {name: spec for name, spec in self.attributes.items() if spec.settable}

    def force_new_attributes(self) -> Dict[str, AttributeSpec]:
        return {name: spec for name, spec in self.attributes.items() if spec.force_new}

    def sensitive_attributes(self) -> Dict[str, AttributeSpec]:
        return {name: spec for name, spec in self.attributes.items() if spec.sensitive}


def validate_resource_config(resource_type: str, model: Type[BaseModel],
                             config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Validate declared configuration against a resource model.

    Args:
        resource_type: Resource type name used in error messages
        model: Typed resource model
        config: Raw declared configuration

    Returns:
        Normalized configuration with defaults applied

    Raises:
        ResourceValidationError: If the configuration is invalid
    """
    schema = ResourceSchema.from_model(model)
    config = dict(config or {})
    errors: Dict[str, str] = {}
    for name in config:
        if name not in schema:
            errors[name] = "unsupported attribute"
        elif not schema[name].settable and config[name] is not None:
            errors[name] = "attribute is computed and cannot be set"
    if errors:
        raise ResourceValidationError(resource_type, errors)

    try:
        validated = model.model_validate(config)
    except PydanticValidationError as e:
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "__root__"
            errors[location] = err["msg"]
        raise ResourceValidationError(resource_type, errors)

    return validated.model_dump()


def equivalent_json(left: Any, right: Any) -> bool:
    """Whether two JSON strings decode to the same document."""
    if left == right:
        return True
    if not left or not right:
        return not left and not right
    try:
        return json.loads(left) == json.loads(right)
    except (TypeError, ValueError):
        return False
