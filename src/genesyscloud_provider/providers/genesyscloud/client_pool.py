"""
Pool of API clients shared by concurrent resource operations.

Each resource operation borrows a client for its whole duration so that
concurrent operations never share an HTTP session mid-request. The pooled
wrappers adapt raw resource functions to the engine boundary: exceptions
raised by the function become error diagnostics naming the resource.
"""

import queue
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from genesyscloud_provider.config.schemas import AppConfig, RetryConfig
from genesyscloud_provider.domain.resource.diagnostics import Diagnostics
from genesyscloud_provider.domain.resource.resource_data import ResourceData
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience.context import OperationContext
from genesyscloud_provider.providers.genesyscloud.client import GenesysCloudClient

logger = get_logger(__name__)


class PoolExhaustedError(Exception):
    """No client became available before the acquire timeout."""
    pass


class ClientPool:
    """Bounded, thread-safe pool of API clients created on demand."""

    def __init__(self, size: int, factory: Callable[[], GenesysCloudClient],
                 acquire_timeout: Optional[float] = None):
        """
        Initialize the pool.

        Args:
            size: Maximum number of clients
            factory: Creates a new client
            acquire_timeout: Seconds to wait for a free client, None waits forever
        """
        if size < 1:
            raise ValueError("Pool size must be at least 1")
        self.size = size
        self._factory = factory
        self._acquire_timeout = acquire_timeout
        self._available: "queue.LifoQueue[GenesysCloudClient]" = queue.LifoQueue()
        self._created: List[GenesysCloudClient] = []
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ClientPool":
        return cls(config.provider.token_pool_size, lambda: GenesysCloudClient(config.provider))

    def acquire(self) -> GenesysCloudClient:
        try:
            return self._available.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if len(self._created) < self.size:
                client = self._factory()
                self._created.append(client)
                logger.debug("Created pooled client %s of %s", len(self._created), self.size)
                return client

        try:
            return self._available.get(timeout=self._acquire_timeout)
        except queue.Empty:
            raise PoolExhaustedError(f"No API client available after {self._acquire_timeout}s")

    def release(self, client: GenesysCloudClient) -> None:
        self._available.put(client)

    @contextmanager
    def client(self) -> Iterator[GenesysCloudClient]:
        """Borrow a client for the duration of a block."""
        client = self.acquire()
        try:
            yield client
        finally:
            self.release(client)

    def close(self) -> None:
        with self._lock:
            for client in self._created:
                client.close()
            self._created.clear()
        while not self._available.empty():
            self._available.get_nowait()


@dataclass
class ProviderMeta:
    """Provider-wide state handed to every resource operation by the engine."""

    config: AppConfig
    pool: ClientPool

    @classmethod
    def from_config(cls, config: AppConfig) -> "ProviderMeta":
        return cls(config=config, pool=ClientPool.from_config(config))

    @property
    def retry(self) -> RetryConfig:
        return self.config.retry


@dataclass
class ClientSession:
    """What a raw resource function receives: a borrowed client and retry settings."""

    client: GenesysCloudClient
    retry: RetryConfig


# (ctx, resource_data, session) -> Diagnostics or None
RawOperation = Callable[[Optional[OperationContext], ResourceData, ClientSession], Optional[Diagnostics]]
PooledOperation = Callable[[Optional[OperationContext], ResourceData, ProviderMeta], Diagnostics]


def _run_with_pooled_client(action: str, method: RawOperation) -> PooledOperation:
    def run(ctx: Optional[OperationContext], d: ResourceData, meta: ProviderMeta) -> Diagnostics:
        try:
            with meta.pool.client() as client:
                diagnostics = method(ctx, d, ClientSession(client, meta.retry))
        except Exception as e:
            resource_id = d.id or "(new)"
            logger.error("Failed to %s %s %s: %s", action, d.resource_type, resource_id, e)
            return Diagnostics.from_exception(e, f"Failed to {action} {d.resource_type} {resource_id}")
        return Diagnostics(diagnostics or [])

    run.__name__ = f"{action}_{getattr(method, '__name__', 'operation')}"
    run.__doc__ = method.__doc__
    return run


def create_with_pooled_client(method: RawOperation) -> PooledOperation:
    return _run_with_pooled_client("create", method)


def read_with_pooled_client(method: RawOperation) -> PooledOperation:
    return _run_with_pooled_client("read", method)


def update_with_pooled_client(method: RawOperation) -> PooledOperation:
    return _run_with_pooled_client("update", method)


def delete_with_pooled_client(method: RawOperation) -> PooledOperation:
    return _run_with_pooled_client("delete", method)


GetAllOperation = Callable[[Optional[OperationContext], ClientSession], Dict[str, Any]]
PooledGetAll = Callable[[Optional[OperationContext], ProviderMeta], Tuple[Dict[str, Any], Diagnostics]]


def get_all_with_pooled_client(method: GetAllOperation, resource_type: str = "") -> PooledGetAll:
    """Wrap a list-for-export function; failures discard partial results."""
    def get_all(ctx: Optional[OperationContext], meta: ProviderMeta) -> Tuple[Dict[str, Any], Diagnostics]:
        try:
            with meta.pool.client() as client:
                resources = method(ctx, ClientSession(client, meta.retry))
        except Exception as e:
            logger.error("Failed to get all %s: %s", resource_type or "resources", e)
            return {}, Diagnostics.from_exception(e, f"Failed to get all {resource_type or 'resources'}")
        return resources, Diagnostics()

    get_all.__name__ = f"get_all_{getattr(method, '__name__', 'resources')}"
    return get_all
