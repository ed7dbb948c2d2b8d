"""Tests for post-write consistency checks."""

from typing import Dict, Optional

from pydantic import BaseModel

from genesyscloud_provider.domain.resource import ResourceData, ResourceSchema, attribute
from genesyscloud_provider.infrastructure.resilience import (
    ConsistencyCheck,
    ConsistencyError,
    Done,
    Retryable,
    check_consistency,
)


class GadgetModel(BaseModel):
    name: str = attribute(..., description="Gadget name")
    description: Optional[str] = attribute(description="Description")
    settings: Optional[str] = attribute(description="Settings document", json_string=True)
    labels: Optional[Dict[str, str]] = attribute(description="Labels")
    secret: Optional[str] = attribute(description="Secret value", sensitive=True)
    created_by: Optional[str] = attribute(description="Creator", computed_only=True)


SCHEMA = ResourceSchema.from_model(GadgetModel)


def _resource_data(config: Dict) -> ResourceData:
    return ResourceData("test_gadget", SCHEMA, config=config, resource_id="gadget-1")


class TestCheckConsistency:
    """Test the attribute comparison."""

    def test_equal_declared_attributes_match(self):
        expected = {"name": "a", "description": "b"}
        actual = {"name": "a", "description": "b", "created_by": "someone"}

        assert check_consistency(expected, actual, SCHEMA) == {}

    def test_differing_attribute_is_reported(self):
        mismatches = check_consistency({"name": "new"}, {"name": "old"}, SCHEMA)

        assert mismatches == {"name": ("new", "old")}

    def test_undeclared_attributes_are_ignored(self):
        """Attributes absent from the declared intent never cause a mismatch."""
        expected = {"name": "a", "description": None}
        actual = {"name": "a", "description": "set by the server"}

        assert check_consistency(expected, actual, SCHEMA) == {}

    def test_computed_only_attributes_are_ignored(self):
        expected = {"name": "a", "created_by": "me"}
        actual = {"name": "a", "created_by": "someone else"}

        assert check_consistency(expected, actual, SCHEMA) == {}

    def test_json_strings_compare_semantically(self):
        expected = {"name": "a", "settings": '{"b": 1, "a": [1, 2]}'}
        actual = {"name": "a", "settings": '{"a":[1,2],"b":1}'}

        assert check_consistency(expected, actual, SCHEMA) == {}

    def test_json_strings_with_different_content_mismatch(self):
        expected = {"name": "a", "settings": '{"a": 1}'}
        actual = {"name": "a", "settings": '{"a": 2}'}

        assert "settings" in check_consistency(expected, actual, SCHEMA)

    def test_sensitive_values_are_masked(self):
        mismatches = check_consistency({"secret": "new"}, {"secret": "old"}, SCHEMA)

        assert mismatches["secret"] == ("(sensitive value)", "(sensitive value)")

    def test_nested_documents_ignore_undeclared_keys(self):
        expected = {"labels": {"team": "blue"}}
        actual = {"labels": {"team": "blue", "owner": "server"}}

        assert check_consistency(expected, actual, SCHEMA) == {}

    def test_empty_declared_map_matches_missing_value(self):
        assert check_consistency({"labels": {}}, {"labels": None}, SCHEMA) == {}


class TestConsistencyCheck:
    """Test the check against resource data."""

    def test_matching_state_is_done(self):
        d = _resource_data({"name": "a", "description": "b"})
        cc = ConsistencyCheck(None, d)

        d.set("name", "a")
        d.set("description", "b")

        assert isinstance(cc.check_state(), Done)

    def test_stale_state_is_retryable(self):
        """A read that still returns the old value asks for another attempt."""
        d = _resource_data({"name": "new"})
        cc = ConsistencyCheck(None, d)

        d.set("name", "old")
        outcome = cc.check_state()

        assert isinstance(outcome, Retryable)
        assert isinstance(outcome.error, ConsistencyError)
        assert outcome.error.mismatches == {"name": ("new", "old")}
        assert "gadget-1" in str(outcome.error)

    def test_intent_snapshot_is_taken_at_construction(self):
        """Values set after construction do not change the expectation."""
        d = _resource_data({"name": "declared"})
        cc = ConsistencyCheck(None, d)

        d.set("name", "observed")

        assert isinstance(cc.check_state(), Retryable)

    def test_no_declared_configuration_is_done(self):
        """Imported resources have nothing to compare against."""
        d = ResourceData("test_gadget", SCHEMA, resource_id="gadget-1")
        cc = ConsistencyCheck(None, d)

        d.set("name", "anything")

        assert isinstance(cc.check_state(), Done)
