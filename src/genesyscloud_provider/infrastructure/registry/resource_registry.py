"""Resource Registry - one place where every resource type is made known.

Each resource package contributes its resources, data sources and exporters
through a ``set_registrar`` function. Registration happens once at process
setup; the registry is then frozen and every further registration raises.
"""

import threading
from typing import Dict, List, Optional

from genesyscloud_provider.domain.core.exceptions import DomainException, RegistrationError
from genesyscloud_provider.domain.resource import DataSource, Resource
from genesyscloud_provider.infrastructure.exporter.resource_exporter import ResourceExporter
from genesyscloud_provider.infrastructure.logging.logger import get_logger


class UnsupportedResourceError(DomainException):
    """Exception raised when an unregistered resource type is requested."""
    pass


class ResourceRegistry:
    """
    Registry of resource types, data sources and exporters.

    Thread-safe; read-only once frozen.
    """

    def __init__(self):
        self._resources: Dict[str, Resource] = {}
        self._data_sources: Dict[str, DataSource] = {}
        self._exporters: Dict[str, ResourceExporter] = {}
        self._frozen = False
        self._registry_lock = threading.Lock()
        self.logger = get_logger(__name__)

    def _check_open(self, kind: str, type_name: str, registrations: Dict) -> None:
        if self._frozen:
            raise RegistrationError(f"Cannot register {kind} '{type_name}': registry is frozen")
        if type_name in registrations:
            raise RegistrationError(f"{kind.capitalize()} '{type_name}' is already registered")

    def register_resource(self, type_name: str, resource: Resource) -> None:
        """
        Register a managed resource type.

        Raises:
            RegistrationError: If the registry is frozen or the type is already registered
        """
        with self._registry_lock:
            self._check_open("resource", type_name, self._resources)
            self._resources[type_name] = resource
        self.logger.debug(f"Registered resource: {type_name}")

    def register_data_source(self, type_name: str, data_source: DataSource) -> None:
        with self._registry_lock:
            self._check_open("data source", type_name, self._data_sources)
            self._data_sources[type_name] = data_source
        self.logger.debug(f"Registered data source: {type_name}")

    def register_exporter(self, type_name: str, exporter: ResourceExporter) -> None:
        with self._registry_lock:
            self._check_open("exporter", type_name, self._exporters)
            self._exporters[type_name] = exporter
        self.logger.debug(f"Registered exporter: {type_name}")

    def freeze(self) -> None:
        """Make the registry read-only."""
        with self._registry_lock:
            self._frozen = True
        self.logger.info(
            "Registry frozen with %s resources, %s data sources and %s exporters",
            len(self._resources), len(self._data_sources), len(self._exporters),
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get_resource(self, type_name: str) -> Resource:
        try:
            return self._resources[type_name]
        except KeyError:
            raise UnsupportedResourceError(f"Unsupported resource type: {type_name}")

    def get_data_source(self, type_name: str) -> DataSource:
        try:
            return self._data_sources[type_name]
        except KeyError:
            raise UnsupportedResourceError(f"Unsupported data source: {type_name}")

    def get_exporter(self, type_name: str) -> Optional[ResourceExporter]:
        return self._exporters.get(type_name)

    def resources(self) -> Dict[str, Resource]:
        return dict(self._resources)

    def data_sources(self) -> Dict[str, DataSource]:
        return dict(self._data_sources)

    def exporters(self) -> Dict[str, ResourceExporter]:
        return dict(self._exporters)

    def resource_types(self) -> List[str]:
        return sorted(self._resources)
