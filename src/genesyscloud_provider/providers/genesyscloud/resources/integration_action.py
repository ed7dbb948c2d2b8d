"""
genesyscloud_integration_action resource.

Actions call out to a third-party service through an integration. The
contracts are JSON schemas and can only change by replacing the action.
"""

from typing import TYPE_CHECKING, Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from genesyscloud_provider.domain.resource import DataSource, Diagnostics, Resource, ResourceData, attribute
from genesyscloud_provider.infrastructure.exporter import RefAttrSettings, ResourceExporter, ResourceIDMetaMap
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    ConsistencyCheck,
    OperationContext,
    Outcome,
    with_retries_for_read,
)
from genesyscloud_provider.providers.genesyscloud.api import IntegrationActionsAPI
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

RESOURCE_TYPE = "genesyscloud_integration_action"

# Built-in actions are listed alongside custom ones but cannot be managed
STATIC_ACTION_PREFIX = "static"


class ActionConfigRequest(BaseModel):
    request_url_template: str = Field(..., description="URL that may include placeholders for input contract values.")
    request_type: Literal["GET", "PUT", "POST", "PATCH", "DELETE"] = Field(..., description="HTTP method to use.")
    request_template: Optional[str] = Field(None, description="Velocity template to define the request body.")
    headers: Optional[Dict[str, str]] = Field(None, description="Headers to include in the outbound request.")


class ActionConfigResponse(BaseModel):
    translation_map: Optional[Dict[str, str]] = Field(None, description="Map of variable names to JSON path expressions.")
    translation_map_defaults: Optional[Dict[str, str]] = Field(None, description="Defaults for translation map values.")
    success_template: Optional[str] = Field(None, description="Velocity template to build the response.")


class IntegrationActionModel(BaseModel):
    name: str = attribute(..., description="Name of the action.", min_length=1, max_length=256)
    category: str = attribute(..., description="Category of action.", min_length=1, max_length=256)
    integration_id: str = attribute(
        ..., description="The ID of the integration this action is associated with.", force_new=True
    )
    secure: bool = attribute(
        False, description="Whether the action is designed to accept sensitive data.", force_new=True
    )
    config_timeout_seconds: Optional[int] = attribute(
        description="Timeout enforced on the execution or test of this action.", ge=1, le=60
    )
    contract_input: str = attribute(
        ..., description="JSON Schema of the request body sent to the /execute path.",
        force_new=True, json_string=True,
    )
    contract_output: str = attribute(
        ..., description="JSON schema of the transformed, successful result.",
        force_new=True, json_string=True,
    )
    config_request: Optional[ActionConfigRequest] = attribute(description="Configuration of outbound request.")
    config_response: Optional[ActionConfigResponse] = attribute(
        description="Configuration of response processing.", computed=True
    )


def build_action_config(d: ResourceData) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    request = d.get("config_request")
    if request:
        config["request"] = {
            "requestUrlTemplate": request.get("request_url_template"),
            "requestType": request.get("request_type"),
            "requestTemplate": request.get("request_template"),
            "headers": request.get("headers") or {},
        }
    response = d.get("config_response")
    if response:
        config["response"] = {
            "translationMap": response.get("translation_map") or {},
            "translationMapDefaults": response.get("translation_map_defaults") or {},
            "successTemplate": response.get("success_template"),
        }
    timeout = d.get("config_timeout_seconds")
    if timeout:
        config["timeoutSeconds"] = timeout
    return config


def flatten_action_config(config: Dict[str, Any]) -> Dict[str, Any]:
    request = config.get("request")
    response = config.get("response")
    return {
        "config_timeout_seconds": config.get("timeoutSeconds"),
        "config_request": {
            "request_url_template": request.get("requestUrlTemplate"),
            "request_type": request.get("requestType"),
            "request_template": request.get("requestTemplate"),
            "headers": request.get("headers") or None,
        } if request else None,
        "config_response": {
            "translation_map": response.get("translationMap") or None,
            "translation_map_defaults": response.get("translationMapDefaults") or None,
            "success_template": response.get("successTemplate"),
        } if response else None,
    }


def get_all_integration_actions(ctx: Optional[OperationContext], session: ClientSession) -> ResourceIDMetaMap:
    return list_all(
        IntegrationActionsAPI(session.client),
        skip=lambda entity: entity["id"].startswith(STATIC_ACTION_PREFIX),
    )


def create_integration_action(ctx: Optional[OperationContext], d: ResourceData,
                              session: ClientSession) -> Diagnostics:
    api = IntegrationActionsAPI(session.client)
    name = d.get("name")

    logger.info("Creating integration action %s", name)
    action = api.create({
        "name": name,
        "category": d.get("category"),
        "integrationId": d.get("integration_id"),
        "secure": d.get("secure"),
        "contract": {
            "input": {"inputSchema": json_decode(d.get("contract_input"))},
            "output": {"successSchema": json_decode(d.get("contract_output"))},
        },
        "config": build_action_config(d),
    })
    d.set_id(action["id"])

    logger.info("Created integration action %s %s", name, d.id)
    return read_integration_action(ctx, d, session)


def read_integration_action(ctx: Optional[OperationContext], d: ResourceData,
                            session: ClientSession) -> Diagnostics:
    api = IntegrationActionsAPI(session.client)
    logger.info("Reading integration action %s", d.id)

    def read() -> Outcome:
        try:
            action = api.get(d.id)
        except APIError as e:
            return read_failure(e, "integration action", d.id)

        cc = ConsistencyCheck(ctx, d)
        d.set("name", action.get("name"))
        d.set("category", action.get("category"))
        d.set("integration_id", action.get("integrationId"))
        d.set("secure", action.get("secure", False))

        contract = action.get("contract") or {}
        d.set("contract_input", json_encode((contract.get("input") or {}).get("inputSchema")))
        d.set("contract_output", json_encode((contract.get("output") or {}).get("successSchema")))

        for key, value in flatten_action_config(action.get("config") or {}).items():
            d.set(key, value)

        logger.info("Read integration action %s %s", d.id, action.get("name"))
        return cc.check_state()

    return with_retries_for_read(ctx, d, read, timeout=session.retry.read_timeout,
                                 backoff=session.retry.backoff_seconds)


def update_integration_action(ctx: Optional[OperationContext], d: ResourceData,
                              session: ClientSession) -> Diagnostics:
    api = IntegrationActionsAPI(session.client)
    name = d.get("name")

    # Updates require the current version
    current = api.get(d.id)
    logger.info("Updating integration action %s", name)
    api.update(d.id, {
        "name": name,
        "category": d.get("category"),
        "config": build_action_config(d),
        "version": current.get("version"),
    })

    logger.info("Updated integration action %s %s", name, d.id)
    return read_integration_action(ctx, d, session)


def delete_integration_action(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> None:
    api = IntegrationActionsAPI(session.client)
    api.delete(d.id)
    wait_for_deletion(ctx, session, api.get, "integration action", d.id)


def integration_action_resource() -> Resource:
    return Resource(
        type_name=RESOURCE_TYPE,
        description="Genesys Cloud Integration Actions",
        model=IntegrationActionModel,
        create=create_with_pooled_client(create_integration_action),
        read=read_with_pooled_client(read_integration_action),
        update=update_with_pooled_client(update_integration_action),
        delete=delete_with_pooled_client(delete_integration_action),
    )


def integration_action_exporter() -> ResourceExporter:
    return ResourceExporter(
        get_resources_func=get_all_with_pooled_client(get_all_integration_actions, RESOURCE_TYPE),
        ref_attrs={
            "integration_id": RefAttrSettings(ref_type="genesyscloud_integration"),
        },
        json_encode_attributes=["contract_input", "contract_output"],
    )


def integration_action_data_source() -> DataSource:
    return name_lookup_data_source(
        RESOURCE_TYPE,
        "Data source for Genesys Cloud integration action. Select an integration action by name",
        "integration action",
        lambda session: IntegrationActionsAPI(session.client),
        server_filter=True,
    )


def set_registrar(registry: "ResourceRegistry") -> None:
    registry.register_resource(RESOURCE_TYPE, integration_action_resource())
    registry.register_data_source(RESOURCE_TYPE, integration_action_data_source())
    registry.register_exporter(RESOURCE_TYPE, integration_action_exporter())
