"""Tests for attribute and API document conversion."""

import pytest

from genesyscloud_provider.providers.genesyscloud.conversion import (
    from_api_document,
    json_decode,
    json_encode,
    to_api_document,
    to_camel,
    to_snake,
)
from genesyscloud_provider.providers.genesyscloud.resources.media_retention_policy import POLICY_REFERENCE_KEYS


class TestNames:
    @pytest.mark.parametrize("snake,camel", [
        ("name", "name"),
        ("for_queue_ids", "forQueueIds"),
        ("retain_recording", "retainRecording"),
        ("assign_metered_assignment_by_agent", "assignMeteredAssignmentByAgent"),
    ])
    def test_name_conversion(self, snake, camel):
        assert to_camel(snake) == camel
        assert to_snake(camel) == snake


class TestJson:
    def test_encode_is_canonical(self):
        assert json_encode({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'

    def test_none_stays_none(self):
        assert json_encode(None) is None
        assert json_decode(None) is None
        assert json_decode("") is None

    def test_decode(self):
        assert json_decode('{"a": 1}') == {"a": 1}


class TestDocuments:
    """Test conversion of media policy documents."""

    def test_id_keys_become_entity_references(self):
        document = {
            "for_queue_ids": ["q-1", "q-2"],
            "assign_evaluations": [{"evaluation_form_id": "f-1", "user_id": "u-1"}],
            "retain_recording": True,
            "delete_recording": None,
        }

        assert to_api_document(document, POLICY_REFERENCE_KEYS) == {
            "forQueues": [{"id": "q-1"}, {"id": "q-2"}],
            "assignEvaluations": [{"evaluationForm": {"id": "f-1"}, "user": {"id": "u-1"}}],
            "retainRecording": True,
        }

    def test_scalar_id_keys_stay_scalar(self):
        document = {"time_allowed": {"time_slots": [], "time_zone_id": "Europe/Dublin"}}

        converted = to_api_document(document, POLICY_REFERENCE_KEYS)

        assert converted == {"timeAllowed": {"timeSlots": [], "timeZoneId": "Europe/Dublin"}}
        assert from_api_document(converted) == document

    def test_only_listed_keys_become_references(self):
        assert to_api_document({"user_id": "u-1"}) == {"userId": "u-1"}
        assert to_api_document({"user_id": "u-1"}, {"user_id"}) == {"user": {"id": "u-1"}}

    def test_entity_references_become_id_keys(self):
        document = {
            "forQueues": [
                {"id": "q-1", "selfUri": "/api/v2/routing/queues/q-1"},
                {"id": "q-2", "selfUri": "/api/v2/routing/queues/q-2"},
            ],
            "assignEvaluations": [{"evaluationForm": {"id": "f-1", "selfUri": "/f-1"}}],
            "dateRanges": ["2024-01-01"],
            "selfUri": "/api/v2/recording/mediaretentionpolicies/p-1",
        }

        assert from_api_document(document) == {
            "for_queue_ids": ["q-1", "q-2"],
            "assign_evaluations": [{"evaluation_form_id": "f-1"}],
            "date_ranges": ["2024-01-01"],
        }

    def test_plain_values_pass_through(self):
        assert to_api_document("x") == "x"
        assert from_api_document(None) is None
        assert from_api_document([1, 2]) == [1, 2]

    def test_empty_reference_list_is_kept_as_list(self):
        assert from_api_document({"forUsers": []}) == {"for_users": []}
