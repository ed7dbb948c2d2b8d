"""Remote object API adapters for the Genesys Cloud REST endpoints."""

from typing import Any, Dict, Optional

from genesyscloud_provider.domain.base.ports import Page, RemoteObjectAPI
from genesyscloud_provider.providers.genesyscloud.client import GenesysCloudClient


class RestObjectAPI(RemoteObjectAPI):
    """CRUD and paginated listing on one collection path."""

    path: str = ""
    update_method: str = "PUT"

    def __init__(self, client: GenesysCloudClient):
        self.client = client

    def _item_path(self, object_id: str) -> str:
        return f"{self.path}/{object_id}"

    def _get_params(self) -> Optional[Dict[str, Any]]:
        return None

    def create(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post(self.path, data=body)

    def get(self, object_id: str) -> Dict[str, Any]:
        return self.client.get(self._item_path(object_id), params=self._get_params())

    def list_page(self, page_number: int, page_size: int, **filters: Any) -> Optional[Page]:
        params = {"pageNumber": page_number, "pageSize": page_size}
        params.update(filters)
        return Page.from_response(self.client.get(self.path, params=params))

    def update(self, object_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.request(self.update_method, self._item_path(object_id), json_data=body)

    def delete(self, object_id: str) -> None:
        self.client.delete(self._item_path(object_id))


class IntegrationsAPI(RestObjectAPI):
    """Integrations; configuration lives in a separate versioned document."""

    path = "/api/v2/integrations"
    update_method = "PATCH"

    def get_config_current(self, integration_id: str) -> Dict[str, Any]:
        return self.client.get(f"{self._item_path(integration_id)}/config/current")

    def put_config_current(self, integration_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the current configuration, body must carry the current version."""
        return self.client.put(f"{self._item_path(integration_id)}/config/current", data=body)


class CredentialsAPI(RestObjectAPI):
    path = "/api/v2/integrations/credentials"


class IntegrationActionsAPI(RestObjectAPI):
    path = "/api/v2/integrations/actions"
    update_method = "PATCH"

    def _get_params(self) -> Optional[Dict[str, Any]]:
        return {"expand": "contract", "includeConfig": "true"}


class MediaRetentionPolicyAPI(RestObjectAPI):
    path = "/api/v2/recording/mediaretentionpolicies"
