"""genesyscloud_integration resource."""

from typing import TYPE_CHECKING, Any, Dict, Literal, Optional

from pydantic import BaseModel

from genesyscloud_provider.domain.resource import DataSource, Diagnostics, Resource, ResourceData, attribute
from genesyscloud_provider.infrastructure.exporter import (
    JsonEncodeRefAttr,
    RefAttrSettings,
    ResourceExporter,
    ResourceIDMetaMap,
)
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    ConsistencyCheck,
    OperationContext,
    Outcome,
    non_retryable_error,
    with_retries_for_read,
)
from genesyscloud_provider.providers.genesyscloud.api import IntegrationsAPI
from genesyscloud_provider.providers.genesyscloud.client_pool import (
    ClientSession,
    create_with_pooled_client,
    delete_with_pooled_client,
    get_all_with_pooled_client,
    read_with_pooled_client,
    update_with_pooled_client,
)
from genesyscloud_provider.providers.genesyscloud.conversion import json_decode, json_encode
from genesyscloud_provider.providers.genesyscloud.exceptions import APIError
from genesyscloud_provider.providers.genesyscloud.resources.common import (
    list_all,
    name_lookup_data_source,
    read_failure,
    wait_for_deletion,
)

if TYPE_CHECKING:
    from genesyscloud_provider.infrastructure.registry.resource_registry import ResourceRegistry

logger = get_logger(__name__)

RESOURCE_TYPE = "genesyscloud_integration"


class IntegrationConfig(BaseModel):
    """Integration config. Each integration type has a different config schema."""

    name: Optional[str] = attribute(description="Integration name.", computed=True)
    notes: Optional[str] = attribute(description="Integration notes.")
    properties: Optional[str] = attribute(
        description="Integration config properties (JSON string).", computed=True, json_string=True
    )
    advanced: Optional[str] = attribute(
        description="Integration advanced config (JSON string).", computed=True, json_string=True
    )
    credentials: Optional[Dict[str, str]] = attribute(
        description="Credentials required for the integration, keyed by credential type."
    )


class IntegrationModel(BaseModel):
    intended_state: Literal["ENABLED", "DISABLED", "DELETED"] = attribute(
        "DISABLED", description="Integration state (ENABLED | DISABLED | DELETED)."
    )
    integration_type: str = attribute(..., description="Integration type.")
    config: Optional[IntegrationConfig] = attribute(description="Integration config.", computed=True)


def flatten_integration_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Convert the current integration config document to the config attribute."""
    credentials = {
        key: value["id"]
        for key, value in (config.get("credentials") or {}).items()
        if isinstance(value, dict) and value.get("id")
    }
    return {
        "name": config.get("name"),
        "notes": config.get("notes"),
        "properties": json_encode(config.get("properties")),
        "advanced": json_encode(config.get("advanced")),
        "credentials": credentials or None,
    }


def update_integration_config(d: ResourceData, api: IntegrationsAPI) -> Optional[str]:
    """
    Replace the integration config when it changed.

    The config document is versioned; the current version is read first and
    undeclared parts keep their current value.

    Returns:
        The integration name
    """
    current = api.get_config_current(d.id)
    name = current.get("name")
    if not d.has_change("config"):
        return name

    config = d.get("config") or {}
    name = config.get("name") or name
    body: Dict[str, Any] = {
        "name": name,
        "notes": config.get("notes"),
        "version": current.get("version"),
        "properties": json_decode(config.get("properties")) if config.get("properties") else current.get("properties"),
        "advanced": json_decode(config.get("advanced")) if config.get("advanced") else current.get("advanced"),
        "credentials": {key: {"id": value} for key, value in (config.get("credentials") or {}).items()},
    }
    logger.info("Updating config for integration %s", name)
    api.put_config_current(d.id, body)
    return name


def get_all_integrations(ctx: Optional[OperationContext], session: ClientSession) -> ResourceIDMetaMap:
    return list_all(IntegrationsAPI(session.client))


def create_integration(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = IntegrationsAPI(session.client)

    integration = api.create({"integrationType": {"id": d.get("integration_type")}})
    d.set_id(integration["id"])

    name = update_integration_config(d, api)

    # Intended state can only be set with a patch
    if d.has_change("intended_state"):
        logger.info("Updating additional attributes for integration %s", name)
        api.update(d.id, {"intendedState": d.get("intended_state")})

    logger.info("Created integration %s %s", name, d.id)
    return read_integration(ctx, d, session)


def read_integration(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = IntegrationsAPI(session.client)
    logger.info("Reading integration %s", d.id)

    def read() -> Outcome:
        try:
            current = api.get(d.id)
        except APIError as e:
            return read_failure(e, "integration", d.id)

        cc = ConsistencyCheck(ctx, d)
        d.set("integration_type", (current.get("integrationType") or {}).get("id"))
        d.set("intended_state", current.get("intendedState"))

        try:
            config = api.get_config_current(current["id"])
        except APIError as e:
            return non_retryable_error(f"Failed to read config of integration {d.id}: {e}")
        d.set("config", flatten_integration_config(config))

        logger.info("Read integration %s %s", d.id, current.get("name"))
        return cc.check_state()

    return with_retries_for_read(ctx, d, read, timeout=session.retry.read_timeout,
                                 backoff=session.retry.backoff_seconds)


def update_integration(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = IntegrationsAPI(session.client)

    name = update_integration_config(d, api)

    if d.has_change("intended_state"):
        logger.info("Updating integration %s", name)
        api.update(d.id, {"intendedState": d.get("intended_state")})

    logger.info("Updated integration %s %s", name, d.id)
    return read_integration(ctx, d, session)


def delete_integration(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> None:
    api = IntegrationsAPI(session.client)
    api.delete(d.id)
    wait_for_deletion(ctx, session, api.get, "integration", d.id)


def integration_resource() -> Resource:
    return Resource(
        type_name=RESOURCE_TYPE,
        description="Genesys Cloud Integration",
        model=IntegrationModel,
        create=create_with_pooled_client(create_integration),
        read=read_with_pooled_client(read_integration),
        update=update_with_pooled_client(update_integration),
        delete=delete_with_pooled_client(delete_integration),
    )


def integration_exporter() -> ResourceExporter:
    return ResourceExporter(
        get_resources_func=get_all_with_pooled_client(get_all_integrations, RESOURCE_TYPE),
        ref_attrs={
            "config.credentials.*": RefAttrSettings(ref_type="genesyscloud_integration_credential"),
        },
        json_encode_attributes=["config.properties", "config.advanced"],
        encoded_ref_attrs={
            JsonEncodeRefAttr(attr="config.properties", nested_attr="groups"): RefAttrSettings(ref_type="genesyscloud_group"),
        },
    )


def integration_data_source() -> DataSource:
    return name_lookup_data_source(
        RESOURCE_TYPE,
        "Data source for Genesys Cloud integration. Select an integration by name",
        "integration",
        lambda session: IntegrationsAPI(session.client),
    )


def set_registrar(registry: "ResourceRegistry") -> None:
    registry.register_resource(RESOURCE_TYPE, integration_resource())
    registry.register_data_source(RESOURCE_TYPE, integration_data_source())
    registry.register_exporter(RESOURCE_TYPE, integration_exporter())
