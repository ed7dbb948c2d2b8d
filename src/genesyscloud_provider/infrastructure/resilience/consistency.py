"""
Post-write consistency checks.

After a write, the remote API may keep serving stale reads for a while. A
ConsistencyCheck snapshots the declared configuration before the read sets
observed values, then compares the two: while any declared, settable
attribute differs, the read reports Retryable so the runner reads again.
"""

from typing import Any, Dict, Optional, Tuple

from genesyscloud_provider.domain.resource.resource_data import ResourceData
from genesyscloud_provider.domain.resource.schema import ResourceSchema, equivalent_json
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience.context import OperationContext
from genesyscloud_provider.infrastructure.resilience.outcome import DONE, Outcome, Retryable

logger = get_logger(__name__)

_MASK = "(sensitive value)"


class ConsistencyError(Exception):
    """Observed state does not match the declared configuration yet."""

    def __init__(self, resource_type: str, resource_id: str,
                 mismatches: Dict[str, Tuple[Any, Any]]):
        details = ", ".join(
            f"{name}: expected {expected!r}, got {actual!r}"
            for name, (expected, actual) in sorted(mismatches.items())
        )
        super().__init__(f"{resource_type} {resource_id} is not consistent yet ({details})")
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.mismatches = mismatches


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _values_match(expected: Any, actual: Any, json_string: bool = False) -> bool:
    """Compare a declared value with an observed one, ignoring undeclared nested keys."""
    if expected is None:
        return True
    if isinstance(expected, (dict, list)) and not expected:
        return _is_empty(actual)
    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        return all(_values_match(value, actual.get(key), json_string=True) for key, value in expected.items())
    if isinstance(expected, list):
        if not isinstance(actual, list) or len(expected) != len(actual):
            return False
        return all(_values_match(want, have, json_string=True) for want, have in zip(expected, actual))
    if isinstance(expected, str) and isinstance(actual, str) and json_string:
        return equivalent_json(expected, actual)
    return expected == actual


def check_consistency(expected: Dict[str, Any], actual: Dict[str, Any],
                      schema: ResourceSchema) -> Dict[str, Tuple[Any, Any]]:
    """
    Compare declared attributes with observed ones.

    Only attributes that are settable and declared (not None) in ``expected``
    take part; computed-only attributes and undeclared ones never cause a
    mismatch. Sensitive values are masked in the result.

    Returns:
        Mapping of mismatched attribute name to (expected, actual)
    """
    mismatches: Dict[str, Tuple[Any, Any]] = {}
    for name, spec in schema.settable_attributes().items():
        want = expected.get(name)
        if want is None:
            continue
        have = actual.get(name)
        if spec.json_string:
            equal = equivalent_json(want, have)
        else:
            equal = _values_match(want, have)
        if not equal:
            mismatches[name] = (_MASK, _MASK) if spec.sensitive else (want, have)
    return mismatches


class ConsistencyCheck:
    """Compare a resource's observed state against the intent snapshot taken at construction."""

    def __init__(self, ctx: Optional[OperationContext], d: ResourceData):
        self._ctx = ctx
        self._d = d
        self._expected = d.config

    def check_state(self) -> Outcome:
        """
        Check the current state of the resource data.

        Returns:
            DONE when every declared attribute matches, Retryable otherwise
        """
        if not self._expected:
            return DONE

        mismatches = check_consistency(self._expected, self._d.state(), self._d.schema)
        if not mismatches:
            return DONE

        error = ConsistencyError(self._d.resource_type, self._d.id, mismatches)
        logger.debug("Consistency check failed: %s", error)
        return Retryable(error)
