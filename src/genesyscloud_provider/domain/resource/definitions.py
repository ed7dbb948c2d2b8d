"""Resource and data source definitions registered with the provider."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel

from genesyscloud_provider.domain.resource.diagnostics import Diagnostics
from genesyscloud_provider.domain.resource.resource_data import ResourceData
from genesyscloud_provider.domain.resource.schema import ResourceSchema, validate_resource_config

# (ctx, resource_data, provider_meta) -> Diagnostics
ResourceOperation = Callable[[Any, ResourceData, Any], Diagnostics]


@dataclass
class Resource:
    """A managed resource type: typed model plus CRUD entry points."""

    type_name: str
    description: str
    model: Type[BaseModel]
    create: ResourceOperation
    read: ResourceOperation
    update: ResourceOperation
    delete: ResourceOperation
    importable: bool = True
    timeouts: Dict[str, float] = field(default_factory=dict)

    @property
    def schema(self) -> ResourceSchema:
        return ResourceSchema.from_model(self.model)

    def new_resource_data(self, config: Optional[Dict[str, Any]] = None,
                          state: Optional[Dict[str, Any]] = None,
                          resource_id: str = "") -> ResourceData:
        """
        Build resource data for an operation.

        Args:
            config: Declared configuration, validated against the model
            state: Prior state recorded by the engine
            resource_id: Unique identifier of an existing instance

        Returns:
            ResourceData for the instance

        Raises:
            ResourceValidationError: If the declared configuration is invalid
        """
        validated = validate_resource_config(self.type_name, self.model, config) if config is not None else None
        return ResourceData(
            self.type_name,
            self.schema,
            config=validated,
            state=state,
            resource_id=resource_id,
            timeouts=self.timeouts,
        )

    def import_state(self, resource_id: str) -> ResourceData:
        """Passthrough import: the identifier alone seeds the state."""
        if not self.importable:
            raise NotImplementedError(f"{self.type_name} does not support import")
        return ResourceData(self.type_name, self.schema, resource_id=resource_id, timeouts=self.timeouts)


@dataclass
class DataSource:
    """A data source: looks an existing object up and sets its identifier."""

    type_name: str
    description: str
    model: Type[BaseModel]
    read: ResourceOperation

    @property
    def schema(self) -> ResourceSchema:
        return ResourceSchema.from_model(self.model)

    def new_resource_data(self, config: Dict[str, Any]) -> ResourceData:
        validated = validate_resource_config(self.type_name, self.model, config)
        return ResourceData(self.type_name, self.schema, config=validated)
