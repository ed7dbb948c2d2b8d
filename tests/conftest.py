import copy
import itertools
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from genesyscloud_provider.config.schemas import AppConfig, ProviderConfig, RetryConfig
from genesyscloud_provider.infrastructure.registry import ResourceRegistry
from genesyscloud_provider.providers.genesyscloud.client import GenesysCloudClient
from genesyscloud_provider.providers.genesyscloud.client_pool import ClientPool, ClientSession, ProviderMeta
from genesyscloud_provider.providers.genesyscloud.registration import register_all


class FakeGenesysCloud:
    """
    In-memory Genesys Cloud API served through httpx.MockTransport.

    Knobs for eventual consistency:
        stale_reads[id]: GETs that still return the object as it was before the last write
        missing_reads[id]: GETs that return 404 although the object exists
        lingering[id]: GETs that still return the object after it was deleted
        failures[(method, path)]: status codes returned instead of handling the request
    """

    COLLECTIONS = {
        "/api/v2/integrations/credentials": "credentials",
        "/api/v2/integrations/actions": "actions",
        "/api/v2/recording/mediaretentionpolicies": "policies",
        "/api/v2/integrations": "integrations",
    }

    def __init__(self):
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in self.COLLECTIONS.values()}
        self.configs: Dict[str, Dict[str, Any]] = {}
        self.credential_fields: Dict[str, Dict[str, str]] = {}
        self.requests: List[Tuple[str, str, Dict[str, str]]] = []
        self.stale_reads: Dict[str, int] = {}
        self.missing_reads: Dict[str, int] = {}
        self.lingering: Dict[str, int] = {}
        self.failures: Dict[Tuple[str, str], List[int]] = {}
        self._previous: Dict[str, Dict[str, Any]] = {}
        self._deleted: Dict[str, Dict[str, Any]] = {}
        self._ids = itertools.count(1)

    # Test helpers

    def add(self, collection: str, body: Dict[str, Any], object_id: Optional[str] = None) -> Dict[str, Any]:
        object_id = object_id or f"{collection}-{next(self._ids)}"
        obj = _with_self_uris({**copy.deepcopy(body), "id": object_id, "version": 1})
        self.objects[collection][object_id] = obj
        if collection == "integrations":
            self.configs[object_id] = {
                "name": obj.get("name"),
                "notes": "",
                "properties": {},
                "advanced": {},
                "credentials": {},
                "version": 1,
            }
        return obj

    def calls(self, method: str, path: Optional[str] = None) -> List[Tuple[str, str, Dict[str, str]]]:
        return [call for call in self.requests if call[0] == method and (path is None or call[1] == path)]

    def list_calls(self, collection_path: str) -> List[Dict[str, str]]:
        return [params for method, path, params in self.requests if method == "GET" and path == collection_path]

    # Transport

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append((method, path, dict(request.url.params)))

        queued = self.failures.get((method, path))
        if queued:
            status = queued.pop(0)
            headers = {"Retry-After": "0"} if status == 429 else {}
            return httpx.Response(status, json={"message": "injected failure", "code": "injected"}, headers=headers)

        if path == "/oauth/token":
            return httpx.Response(200, json={"access_token": "test-token", "expires_in": 3600})

        for prefix, collection in self.COLLECTIONS.items():
            if path == prefix:
                return self._collection(collection, method, request)
            if path.startswith(prefix + "/"):
                rest = path[len(prefix) + 1:]
                if collection == "integrations" and rest.endswith("/config/current"):
                    return self._config(rest.split("/")[0], method, request)
                return self._item(collection, rest, method, request)
        return httpx.Response(404, json={"message": f"no route for {path}", "code": "not.found"})

    def _collection(self, collection: str, method: str, request: httpx.Request) -> httpx.Response:
        if method == "POST":
            body = json.loads(request.content)
            if collection == "integrations":
                body = {
                    "name": f"Integration {len(self.objects['integrations']) + 1}",
                    "integrationType": body["integrationType"],
                    "intendedState": "DISABLED",
                }
            if collection == "credentials":
                fields = body.pop("credentialFields", {})
                obj = self.add(collection, body)
                self.credential_fields[obj["id"]] = fields
                return httpx.Response(200, json=obj)
            return httpx.Response(200, json=self.add(collection, body))

        params = request.url.params
        page_number = int(params.get("pageNumber", 1))
        page_size = int(params.get("pageSize", 25))
        entities = list(self.objects[collection].values())
        if "name" in params:
            entities = [entity for entity in entities if entity.get("name") == params["name"]]
        start = (page_number - 1) * page_size
        return httpx.Response(200, json={
            "entities": entities[start:start + page_size],
            "pageNumber": page_number,
            "pageSize": page_size,
            "total": len(entities),
        })

    def _item(self, collection: str, object_id: str, method: str, request: httpx.Request) -> httpx.Response:
        obj = self.objects[collection].get(object_id)

        if method == "GET":
            if self.missing_reads.get(object_id, 0) > 0:
                self.missing_reads[object_id] -= 1
                return _not_found(object_id)
            if obj is None:
                if self.lingering.get(object_id, 0) > 0:
                    self.lingering[object_id] -= 1
                    return httpx.Response(200, json=self._deleted[object_id])
                return _not_found(object_id)
            if self.stale_reads.get(object_id, 0) > 0 and object_id in self._previous:
                self.stale_reads[object_id] -= 1
                return httpx.Response(200, json=self._previous[object_id])
            return httpx.Response(200, json=obj)

        if obj is None:
            return _not_found(object_id)

        if method == "DELETE":
            self._deleted[object_id] = self.objects[collection].pop(object_id)
            return httpx.Response(204)

        body = json.loads(request.content)
        if collection == "actions" and body.get("version") != obj["version"]:
            return httpx.Response(409, json={"message": "version mismatch", "code": "conflict"})

        self._previous[object_id] = copy.deepcopy(obj)
        if collection == "credentials":
            self.credential_fields[object_id] = body.pop("credentialFields", {})
        if method == "PUT":
            updated = {**body, "id": object_id}
        else:
            updated = {**obj, **body}
        updated["version"] = obj["version"] + 1
        self.objects[collection][object_id] = _with_self_uris(updated)
        return httpx.Response(200, json=self.objects[collection][object_id])

    def _config(self, integration_id: str, method: str, request: httpx.Request) -> httpx.Response:
        config = self.configs.get(integration_id)
        if config is None:
            return _not_found(integration_id)
        if method == "GET":
            return httpx.Response(200, json=config)

        body = json.loads(request.content)
        if body.get("version") != config["version"]:
            return httpx.Response(409, json={"message": "version mismatch", "code": "conflict"})
        credentials = {
            key: {"id": value["id"], "name": f"credential {value['id']}"}
            for key, value in (body.get("credentials") or {}).items()
        }
        self.configs[integration_id] = {**body, "credentials": credentials, "version": config["version"] + 1}
        self.objects["integrations"][integration_id]["name"] = body.get("name")
        return httpx.Response(200, json=self.configs[integration_id])


def _not_found(object_id: str) -> httpx.Response:
    return httpx.Response(
        404,
        json={"message": f"{object_id} not found", "code": "not.found", "contextId": "ctx-404"},
    )


def _with_self_uris(value: Any) -> Any:
    """Entity references come back with a selfUri, as the platform returns them."""
    if isinstance(value, list):
        return [_with_self_uris(item) for item in value]
    if isinstance(value, dict):
        if set(value) == {"id"}:
            return {"id": value["id"], "selfUri": f"/api/v2/objects/{value['id']}"}
        return {key: _with_self_uris(item) for key, item in value.items()}
    return value


@pytest.fixture
def fake_cloud():
    return FakeGenesysCloud()


@pytest.fixture
def app_config():
    """Configuration with short polling intervals and deadlines."""
    return AppConfig(
        provider=ProviderConfig(
            oauthclient_id="client-id",
            oauthclient_secret="client-secret",
            max_retries=2,
            retry_base_delay=0.01,
        ),
        retry=RetryConfig(backoff_seconds=0.01, read_timeout=1.0, lookup_timeout=0.5, delete_timeout=0.5),
        environment="testing",
    )


def make_client(fake_cloud: FakeGenesysCloud, config: AppConfig) -> GenesysCloudClient:
    return GenesysCloudClient(
        config.provider,
        transport=httpx.MockTransport(fake_cloud.handle),
        sleep=lambda seconds: None,
    )


@pytest.fixture
def client(fake_cloud, app_config):
    client = make_client(fake_cloud, app_config)
    yield client
    client.close()


@pytest.fixture
def session(client, app_config):
    return ClientSession(client, app_config.retry)


@pytest.fixture
def provider_meta(fake_cloud, app_config):
    pool = ClientPool(2, lambda: make_client(fake_cloud, app_config))
    yield ProviderMeta(app_config, pool)
    pool.close()


@pytest.fixture
def registry():
    return register_all(ResourceRegistry())
