"""genesyscloud_integration_credential resource."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel

from genesyscloud_provider.domain.resource import DataSource, Diagnostics, Resource, ResourceData, attribute
from genesyscloud_provider.infrastructure.exporter import ResourceExporter, ResourceIDMetaMap
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    ConsistencyCheck,
    OperationContext,
    Outcome,
    with_retries_for_read,
)
from genesyscloud_provider.providers.genesyscloud.api import CredentialsAPI
from genesyscloud_provider.providers.genesyscloud.client_pool import (
    ClientSession,
    create_with_pooled_client,
    delete_with_pooled_client,
    get_all_with_pooled_client,
    read_with_pooled_client,
    update_with_pooled_client,
)
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

RESOURCE_TYPE = "genesyscloud_integration_credential"


class CredentialModel(BaseModel):
    name: Optional[str] = attribute(description="Credential name.")
    credential_type_name: str = attribute(
        ..., description="Credential type name. See GET /api/v2/integrations/credentials/types."
    )
    fields: Optional[Dict[str, str]] = attribute(
        description="Credential fields. Different credential types require different fields.",
        computed=True,
        sensitive=True,
    )


def build_credential(d: ResourceData) -> Dict[str, Any]:
    return {
        "name": d.get("name"),
        "type": {"name": d.get("credential_type_name")},
        "credentialFields": d.get("fields") or {},
    }


def get_all_credentials(ctx: Optional[OperationContext], session: ClientSession) -> ResourceIDMetaMap:
    # Credentials may have no name
    return list_all(CredentialsAPI(session.client), skip=lambda entity: not entity.get("name"))


def create_credential(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = CredentialsAPI(session.client)
    name = d.get("name")

    credential = api.create(build_credential(d))
    d.set_id(credential["id"])

    logger.info("Created credential %s, %s", name, d.id)
    return read_credential(ctx, d, session)


def read_credential(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = CredentialsAPI(session.client)
    logger.info("Reading credential %s", d.id)

    def read() -> Outcome:
        try:
            current = api.get(d.id)
        except APIError as e:
            return read_failure(e, "credential", d.id)

        cc = ConsistencyCheck(ctx, d)
        d.set("name", current.get("name"))
        d.set("credential_type_name", (current.get("type") or {}).get("name"))

        logger.info("Read credential %s %s", d.id, current.get("name"))
        return cc.check_state()

    return with_retries_for_read(ctx, d, read, timeout=session.retry.read_timeout,
                                 backoff=session.retry.backoff_seconds)


def update_credential(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> Diagnostics:
    api = CredentialsAPI(session.client)
    name = d.get("name")

    if d.has_changes("name", "credential_type_name", "fields"):
        logger.info("Updating credential %s", name)
        api.update(d.id, build_credential(d))

    logger.info("Updated credential %s %s", name, d.id)
    return read_credential(ctx, d, session)


def delete_credential(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> None:
    api = CredentialsAPI(session.client)
    api.delete(d.id)
    wait_for_deletion(ctx, session, api.get, "integration credential", d.id)


def credential_resource() -> Resource:
    return Resource(
        type_name=RESOURCE_TYPE,
        description="Genesys Cloud Credential",
        model=CredentialModel,
        create=create_with_pooled_client(create_credential),
        read=read_with_pooled_client(read_credential),
        update=update_with_pooled_client(update_credential),
        delete=delete_with_pooled_client(delete_credential),
    )


def credential_exporter() -> ResourceExporter:
    return ResourceExporter(
        get_resources_func=get_all_with_pooled_client(get_all_credentials, RESOURCE_TYPE),
        unresolvable_attributes=["fields"],
    )


def credential_data_source() -> DataSource:
    return name_lookup_data_source(
        RESOURCE_TYPE,
        "Data source for Genesys Cloud integration credential. Select an integration credential by name",
        "integration credential",
        lambda session: CredentialsAPI(session.client),
    )


def set_registrar(registry: "ResourceRegistry") -> None:
    registry.register_resource(RESOURCE_TYPE, credential_resource())
    registry.register_data_source(RESOURCE_TYPE, credential_data_source())
    registry.register_exporter(RESOURCE_TYPE, credential_exporter())
