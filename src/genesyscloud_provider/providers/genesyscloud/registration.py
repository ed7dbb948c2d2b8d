"""Genesys Cloud Provider Registration - register every resource package with the registry."""

from typing import TYPE_CHECKING

from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.providers.genesyscloud.resources import (
    integration,
    integration_action,
    integration_credential,
    media_retention_policy,
)

if TYPE_CHECKING:
    from genesyscloud_provider.infrastructure.registry.resource_registry import ResourceRegistry

logger = get_logger(__name__)

RESOURCE_PACKAGES = (
    integration,
    integration_credential,
    integration_action,
    media_retention_policy,
)


def register_all(registry: "ResourceRegistry") -> "ResourceRegistry":
    """
    Register every resource package and freeze the registry.

    Args:
        registry: Empty, unfrozen registry

    Returns:
        The frozen registry

    Raises:
        RegistrationError: If the registry is frozen or a type is registered twice
    """
    for package in RESOURCE_PACKAGES:
        package.set_registrar(registry)
    registry.freeze()
    logger.debug("Registered resource types: %s", ", ".join(registry.resource_types()))
    return registry
