"""Domain port for the remote object API."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Page:
    """One page of a paginated listing."""

    entities: List[Dict[str, Any]] = field(default_factory=list)
    page_number: int = 1
    page_size: int = 0
    page_count: Optional[int] = None
    total: Optional[int] = None

    @classmethod
    def from_response(cls, response: Optional[Dict[str, Any]]) -> Optional["Page"]:
        """Build a page from an entity listing response, None when absent."""
        if response is None:
            return None
        return cls(
            entities=response.get("entities") or [],
            page_number=response.get("pageNumber", 1),
            page_size=response.get("pageSize", 0),
            page_count=response.get("pageCount"),
            total=response.get("total"),
        )

    def is_empty(self) -> bool:
        return not self.entities


class RemoteObjectAPI(ABC):
    """
    Capability set of the remote object API for one object type.

    Implementations raise NotFoundError when the object does not exist and
    APIError subclasses for every other failure.
    """

    @abstractmethod
    def create(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Create an object and return it."""

    @abstractmethod
    def get(self, object_id: str) -> Dict[str, Any]:
        """Get an object by ID."""

    @abstractmethod
    def list_page(self, page_number: int, page_size: int, **filters: Any) -> Optional[Page]:
        """Get one page of objects, page numbers start at 1."""

    @abstractmethod
    def update(self, object_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Update an object and return it."""

    @abstractmethod
    def delete(self, object_id: str) -> None:
        """Delete an object by ID."""
