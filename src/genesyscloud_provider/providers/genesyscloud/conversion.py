"""Key conversion between attribute names and API field names."""

import json
import re
from typing import AbstractSet, Any, Optional

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_camel(name: str) -> str:
    """for_queue_ids -> forQueueIds"""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name: str) -> str:
    """forQueueIds -> for_queue_ids"""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def json_encode(value: Any) -> Optional[str]:
    """Encode a decoded JSON document as a canonical string, None stays None."""
    if value is None:
        return None
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def json_decode(value: Optional[str]) -> Any:
    """Decode a JSON string attribute, empty stays None."""
    if not value:
        return None
    return json.loads(value)


def _is_entity_ref(value: Any) -> bool:
    return isinstance(value, dict) and "id" in value and "selfUri" in value


def to_api_document(value: Any, reference_keys: AbstractSet[str] = frozenset()) -> Any:
    """
    Convert a snake_case attribute document to an API request document.

    Keys listed in ``reference_keys`` become entity references: an ``_id``
    key holds one, an ``_ids`` key a list (``for_queue_ids`` -> ``forQueues``).
    Every other key keeps its value, including scalar IDs such as
    ``time_zone_id`` -> ``timeZoneId``.
    """
    if isinstance(value, list):
        return [to_api_document(item, reference_keys) for item in value]
    if not isinstance(value, dict):
        return value

    document = {}
    for key, item in value.items():
        if item is None:
            continue
        if key in reference_keys and key.endswith("_ids") and isinstance(item, list):
            document[to_camel(key[:-4]) + "s"] = [{"id": ref} for ref in item]
        elif key in reference_keys and key.endswith("_id") and isinstance(item, str):
            document[to_camel(key[:-3])] = {"id": item}
        else:
            document[to_camel(key)] = to_api_document(item, reference_keys)
    return document


def from_api_document(value: Any) -> Any:
    """Convert an API response document back to a snake_case attribute document."""
    if isinstance(value, list):
        return [from_api_document(item) for item in value]
    if not isinstance(value, dict):
        return value

    document = {}
    for key, item in value.items():
        if key == "selfUri":
            continue
        name = to_snake(key)
        if _is_entity_ref(item):
            document[f"{name}_id"] = item["id"]
        elif isinstance(item, list) and item and all(_is_entity_ref(ref) for ref in item):
            singular = name[:-1] if name.endswith("s") else name
            document[f"{singular}_ids"] = [ref["id"] for ref in item]
        else:
            document[name] = from_api_document(item)
    return document
