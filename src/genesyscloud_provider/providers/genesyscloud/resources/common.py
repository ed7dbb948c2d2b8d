"""Helpers shared by the Genesys Cloud resources."""

from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from genesyscloud_provider.domain.resource import DataSource, ResourceData, attribute
from genesyscloud_provider.domain.base.ports import RemoteObjectAPI
from genesyscloud_provider.infrastructure.exporter import ResourceIDMetaMap, ResourceMeta
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    DONE,
    OperationContext,
    Outcome,
    non_retryable_error,
    retryable_error,
    with_retries,
)
from genesyscloud_provider.infrastructure.utilities.pagination import enumerate_all, find_by_name
from genesyscloud_provider.providers.genesyscloud.client_pool import (
    ClientSession,
    read_with_pooled_client,
)
from genesyscloud_provider.providers.genesyscloud.exceptions import APIError, NotFoundError, is_status_404

logger = get_logger(__name__)


class NameLookupModel(BaseModel):
    """Data source arguments: select an object by name."""

    name: str = attribute(..., description="The name of the object")


def read_failure(error: APIError, label: str, object_id: str) -> Outcome:
    """
    Map a failed GET inside a read to an outcome.

    Not found is retryable since a fresh write may not be readable yet; the
    error keeps its 404 status so a read that times out removes the object.
    """
    if is_status_404(error):
        return retryable_error(NotFoundError(f"Failed to read {label} {object_id}: {error.message}",
                                             status_code=404))
    return non_retryable_error(f"Failed to read {label} {object_id}: {error}")


def wait_for_deletion(ctx: Optional[OperationContext], session: ClientSession,
                      fetch: Callable[[str], Any], label: str, object_id: str) -> None:
    """
    Poll until a deleted object is no longer found.

    Raises:
        RetryError: If the object still exists at the deadline or the check fails
    """
    def check() -> Outcome:
        try:
            fetch(object_id)
        except APIError as e:
            if is_status_404(e):
                logger.info("Deleted %s %s", label, object_id)
                return DONE
            return non_retryable_error(f"Error deleting {label} {object_id}: {e}")
        return retryable_error(f"{label} {object_id} still exists")

    with_retries(ctx, session.retry.delete_timeout, check, backoff=session.retry.backoff_seconds)


def list_all(api: RemoteObjectAPI, skip: Optional[Callable[[Dict[str, Any]], bool]] = None,
             **filters: Any) -> ResourceIDMetaMap:
    """List every object of a collection for export."""
    resources: ResourceIDMetaMap = {}
    for entity in enumerate_all(lambda page_number, page_size: api.list_page(page_number, page_size, **filters)):
        if skip and skip(entity):
            continue
        resources[entity["id"]] = ResourceMeta(name=entity.get("name") or entity["id"])
    return resources


def name_lookup_data_source(type_name: str, description: str, label: str,
                            api_factory: Callable[[ClientSession], RemoteObjectAPI],
                            server_filter: bool = False,
                            first_match: bool = False) -> DataSource:
    """
    Build a data source that selects an object by name.

    Args:
        type_name: Data source type name
        description: Data source description
        label: Object label used in messages
        api_factory: Builds the collection API from a client session
        server_filter: Pass the name to the listing as a filter
        first_match: Take the first listed object instead of an exact name match
    """
    def read(ctx: Optional[OperationContext], d: ResourceData, session: ClientSession) -> None:
        api = api_factory(session)
        name = d.get("name")
        filters = {"name": name} if server_filter else {}
        find_by_name(
            ctx, d,
            lambda page_number, page_size: api.list_page(page_number, page_size, **filters),
            name, label,
            timeout=session.retry.lookup_timeout,
            backoff=session.retry.backoff_seconds,
            match=(lambda entity: True) if first_match else None,
        )

    read.__name__ = f"read_{type_name}_data_source"
    return DataSource(
        type_name=type_name,
        description=description,
        model=NameLookupModel,
        read=read_with_pooled_client(read),
    )
