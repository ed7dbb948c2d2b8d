"""Tests for the genesyscloud_integration resource."""

import pytest

from genesyscloud_provider.providers.genesyscloud.resources.integration import (
    RESOURCE_TYPE,
    flatten_integration_config,
)

INTEGRATIONS = "/api/v2/integrations"


@pytest.fixture
def resource(registry):
    return registry.get_resource(RESOURCE_TYPE)


@pytest.fixture
def existing(fake_cloud):
    return fake_cloud.add("integrations", {
        "name": "Data Actions",
        "integrationType": {"id": "purecloud-data-actions"},
        "intendedState": "DISABLED",
    })


def _state(integration_id, fake_cloud, intended_state="DISABLED"):
    return {
        "integration_type": "purecloud-data-actions",
        "intended_state": intended_state,
        "config": flatten_integration_config(fake_cloud.configs[integration_id]),
    }


class TestCreateIntegration:
    """Test integration creation."""

    def test_create_with_config(self, resource, fake_cloud, provider_meta):
        d = resource.new_resource_data({
            "integration_type": "purecloud-data-actions",
            "intended_state": "ENABLED",
            "config": {
                "name": "Data Actions",
                "notes": "Managed",
                "properties": '{"url": "https://example.com"}',
                "credentials": {"basicAuth": "cred-1"},
            },
        })

        diagnostics = resource.create(None, d, provider_meta)

        assert diagnostics == []
        assert d.id == "integrations-1"
        remote = fake_cloud.objects["integrations"][d.id]
        assert remote["intendedState"] == "ENABLED"
        assert remote["integrationType"]["id"] == "purecloud-data-actions"

        config = fake_cloud.configs[d.id]
        assert config["name"] == "Data Actions"
        assert config["properties"] == {"url": "https://example.com"}
        assert config["credentials"]["basicAuth"]["id"] == "cred-1"
        assert config["version"] == 2

        assert d.get("intended_state") == "ENABLED"
        assert d.get("config")["credentials"] == {"basicAuth": "cred-1"}
        assert d.get("config")["notes"] == "Managed"

    def test_create_without_config_keeps_server_config(self, resource, fake_cloud, provider_meta):
        d = resource.new_resource_data({"integration_type": "webhook"})

        diagnostics = resource.create(None, d, provider_meta)

        assert diagnostics == []
        assert fake_cloud.calls("PUT") == []
        assert d.get("intended_state") == "DISABLED"
        assert d.get("config")["name"] == "Integration 1"

    def test_create_failure_names_new_resource(self, resource, fake_cloud, provider_meta):
        fake_cloud.failures[("POST", INTEGRATIONS)] = [400]
        d = resource.new_resource_data({"integration_type": "webhook"})

        diagnostics = resource.create(None, d, provider_meta)

        assert diagnostics.has_error()
        assert diagnostics[0].summary == "Failed to create genesyscloud_integration (new)"
        assert "injected failure" in diagnostics[0].detail


class TestReadIntegration:
    """Test integration reads."""

    def test_import_read(self, resource, existing, provider_meta):
        d = resource.import_state(existing["id"])

        diagnostics = resource.read(None, d, provider_meta)

        assert diagnostics == []
        assert d.get("integration_type") == "purecloud-data-actions"
        assert d.get("intended_state") == "DISABLED"
        assert d.get("config")["name"] == "Data Actions"

    @pytest.mark.slow
    def test_deleted_integration_is_removed_from_state(self, resource, provider_meta):
        d = resource.import_state("integrations-404")

        diagnostics = resource.read(None, d, provider_meta)

        assert d.id == ""
        assert not diagnostics.has_error()
        assert "integrations-404" in diagnostics[0].summary

    def test_server_error_is_fatal(self, resource, existing, fake_cloud, provider_meta):
        path = f"{INTEGRATIONS}/{existing['id']}"
        fake_cloud.failures[("GET", path)] = [403]
        d = resource.import_state(existing["id"])

        diagnostics = resource.read(None, d, provider_meta)

        assert diagnostics.has_error()
        assert d.id == existing["id"]
        assert len(fake_cloud.calls("GET", path)) == 1


class TestUpdateIntegration:
    """Test integration updates."""

    def test_stale_reads_are_retried_until_consistent(self, resource, existing, fake_cloud, provider_meta):
        integration_id = existing["id"]
        fake_cloud.stale_reads[integration_id] = 2
        d = resource.new_resource_data(
            {"integration_type": "purecloud-data-actions", "intended_state": "ENABLED"},
            state=_state(integration_id, fake_cloud),
            resource_id=integration_id,
        )

        diagnostics = resource.update(None, d, provider_meta)

        assert diagnostics == []
        assert d.get("intended_state") == "ENABLED"
        assert len(fake_cloud.calls("GET", f"{INTEGRATIONS}/{integration_id}")) == 3
        assert fake_cloud.calls("PUT") == []

    def test_config_update_uses_current_version(self, resource, existing, fake_cloud, provider_meta):
        integration_id = existing["id"]
        fake_cloud.configs[integration_id]["version"] = 7
        d = resource.new_resource_data(
            {
                "integration_type": "purecloud-data-actions",
                "config": {"name": "Renamed", "advanced": '{"timeout": 5}'},
            },
            state=_state(integration_id, fake_cloud),
            resource_id=integration_id,
        )

        diagnostics = resource.update(None, d, provider_meta)

        assert diagnostics == []
        config = fake_cloud.configs[integration_id]
        assert config["version"] == 8
        assert config["name"] == "Renamed"
        assert config["advanced"] == {"timeout": 5}
        assert fake_cloud.calls("PATCH") == []

    def test_update_without_changes_only_reads(self, resource, existing, fake_cloud, provider_meta):
        integration_id = existing["id"]
        d = resource.new_resource_data(
            {"integration_type": "purecloud-data-actions", "intended_state": "DISABLED"},
            state=_state(integration_id, fake_cloud),
            resource_id=integration_id,
        )

        diagnostics = resource.update(None, d, provider_meta)

        assert diagnostics == []
        assert fake_cloud.calls("PUT") == []
        assert fake_cloud.calls("PATCH") == []


class TestDeleteIntegration:
    """Test integration deletion."""

    def test_delete_confirms_on_first_not_found(self, resource, existing, fake_cloud, provider_meta):
        d = resource.import_state(existing["id"])

        diagnostics = resource.delete(None, d, provider_meta)

        assert diagnostics == []
        assert existing["id"] not in fake_cloud.objects["integrations"]
        assert len(fake_cloud.calls("GET", f"{INTEGRATIONS}/{existing['id']}")) == 1

    def test_delete_waits_for_lingering_object(self, resource, existing, fake_cloud, provider_meta):
        fake_cloud.lingering[existing["id"]] = 2
        d = resource.import_state(existing["id"])

        diagnostics = resource.delete(None, d, provider_meta)

        assert diagnostics == []
        assert len(fake_cloud.calls("GET", f"{INTEGRATIONS}/{existing['id']}")) == 3

    @pytest.mark.slow
    def test_delete_times_out_when_object_never_disappears(self, resource, existing, fake_cloud, provider_meta):
        fake_cloud.lingering[existing["id"]] = 10 ** 6
        d = resource.import_state(existing["id"])

        diagnostics = resource.delete(None, d, provider_meta)

        assert diagnostics.has_error()
        assert diagnostics[0].summary == f"Failed to delete genesyscloud_integration {existing['id']}"
        assert "still exists" in diagnostics[0].detail


class TestIntegrationDataSource:
    """Test lookup by name."""

    def test_lookup_by_name(self, registry, existing, fake_cloud, provider_meta):
        fake_cloud.add("integrations", {"name": "Other", "integrationType": {"id": "webhook"}})
        data_source = registry.get_data_source(RESOURCE_TYPE)
        d = data_source.new_resource_data({"name": "Data Actions"})

        diagnostics = data_source.read(None, d, provider_meta)

        assert diagnostics == []
        assert d.id == existing["id"]

    @pytest.mark.slow
    def test_lookup_of_unknown_name_fails_after_deadline(self, registry, existing, provider_meta):
        data_source = registry.get_data_source(RESOURCE_TYPE)
        d = data_source.new_resource_data({"name": "Missing"})

        diagnostics = data_source.read(None, d, provider_meta)

        assert diagnostics.has_error()
        assert "no integration found with name: Missing" in diagnostics[0].detail

    def test_get_all(self, registry, existing, fake_cloud, provider_meta):
        fake_cloud.add("integrations", {"name": "Other", "integrationType": {"id": "webhook"}})
        exporter = registry.get_exporter(RESOURCE_TYPE)

        resources, diagnostics = exporter.get_resources_func(None, provider_meta)

        assert diagnostics == []
        assert {meta.name for meta in resources.values()} == {"Data Actions", "Other"}
