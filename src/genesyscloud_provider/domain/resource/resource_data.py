"""Resource data handed to resource operations by the declarative engine."""

import copy
from typing import Any, Dict, Iterable, Optional, Tuple

from genesyscloud_provider.domain.resource.schema import ResourceSchema

DEFAULT_TIMEOUTS: Dict[str, float] = {
    "create": 300.0,
    "read": 300.0,
    "update": 300.0,
    "delete": 300.0,
}


class ResourceData:
    """
    Engine-facing view of one resource instance.

    Holds the declared configuration (the intent snapshot taken before any
    write), the prior state recorded by the engine and the working state that
    operations update with ``set``. Reads fall back to the declared
    configuration for attributes the operation never sets, so values the
    remote API does not return (write-only secrets) keep their declared value.
    """

    def __init__(self, resource_type: str, schema: ResourceSchema,
                 config: Optional[Dict[str, Any]] = None,
                 state: Optional[Dict[str, Any]] = None,
                 resource_id: str = "",
                 timeouts: Optional[Dict[str, float]] = None):
        self.resource_type = resource_type
        self.schema = schema
        self._config: Dict[str, Any] = copy.deepcopy(config or {})
        self._prior: Dict[str, Any] = copy.deepcopy(state or {})
        self._state: Dict[str, Any] = copy.deepcopy(self._prior)
        for key, value in self._config.items():
            if value is not None:
                self._state[key] = copy.deepcopy(value)
        self._id = resource_id or ""
        self._is_new = not self._id
        self._timeouts = dict(DEFAULT_TIMEOUTS)
        if timeouts:
            self._timeouts.update(timeouts)

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        """Set the unique identifier, an empty string removes the resource from state."""
        self._id = resource_id or ""

    def is_new_resource(self) -> bool:
        return self._is_new

    @property
    def config(self) -> Dict[str, Any]:
        """Declared configuration snapshot."""
        return copy.deepcopy(self._config)

    def has_config(self) -> bool:
        return any(value is not None for value in self._config.values())

    def get(self, key: str) -> Any:
        self._check_key(key)
        return copy.deepcopy(self._state.get(key))

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Get a value and whether it is set to a non-zero value."""
        value = self.get(key)
        return value, value not in (None, "", [], {}, 0, False)

    def set(self, key: str, value: Any) -> None:
        self._check_key(key)
        self._state[key] = copy.deepcopy(value)

    def has_change(self, key: str) -> bool:
        """Whether the declared value differs from the prior state."""
        self._check_key(key)
        if key not in self._config:
            return False
        if self._config[key] is None and self.schema[key].computed:
            return False
        return self._config.get(key) != self._prior.get(key)

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(key) for key in keys)

    def state(self) -> Dict[str, Any]:
        """Working state as it would be persisted by the engine."""
        return copy.deepcopy(self._state)

    def timeout(self, operation: str) -> float:
        return self._timeouts.get(operation, DEFAULT_TIMEOUTS["read"])

    def changed_attributes(self) -> Iterable[str]:
        return [key for key in self._config if self.has_change(key)]

    def _check_key(self, key: str) -> None:
        if key not in self.schema:
            raise KeyError(f"{self.resource_type} has no attribute '{key}'")

    def __repr__(self) -> str:
        return f"ResourceData(type={self.resource_type!r}, id={self._id!r})"
