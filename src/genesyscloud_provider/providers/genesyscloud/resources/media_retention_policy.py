"""
genesyscloud_recording_media_retention_policy resource.

Media policies, conditions and actions are free-form documents written in
snake_case and converted to and from the API's camelCase documents.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel

from genesyscloud_provider.domain.resource import DataSource, Diagnostics, Resource, ResourceData, attribute
from genesyscloud_provider.infrastructure.exporter import RefAttrSettings, ResourceExporter, ResourceIDMetaMap
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    ConsistencyCheck,
    OperationContext,
    Outcome,
    with_retries_for_read,
)
from genesyscloud_provider.providers.genesyscloud.api import MediaRetentionPolicyAPI
from genesyscloud_provider.providers.genesyscloud.client_pool import (
    ClientSession,
    create_with_pooled_client,
    delete_with_pooled_client,
    get_all_with_pooled_client,
    read_with_pooled_client,
    update_with_pooled_client,
)
from genesyscloud_provider.providers.genesyscloud.conversion import from_api_document, to_api_document
from genesyscloud_provider.providers.genesyscloud.exceptions import APIError
from genesyscloud_provider.providers.genesyscloud.resources.common import (
    list_all,
    name_lookup_data_source,
    read_failure,
    wait_for_deletion,
)

if TYPE_CHECKING:
    from genesyscloud_provider.infrastructure.registry.resource_registry import ResourceRegistry

logger = get_logger(__name__)

RESOURCE_TYPE = "genesyscloud_recording_media_retention_policy"

MEDIA_POLICY_TYPES = ("call_policy", "chat_policy", "message_policy", "email_policy")

_DOCUMENT_ATTRIBUTES = {
    "media_policies": "mediaPolicies",
    "conditions": "conditions",
    "actions": "actions",
    "policy_errors": "policyErrors",
}


class MediaRetentionPolicyModel(BaseModel):
    name: str = attribute(
        ..., description="The policy name. Changing the name replaces the policy.", force_new=True
    )
    order: Optional[int] = attribute(description="The ordinal number for the policy")
    description: Optional[str] = attribute(description="The description for the policy")
    enabled: Optional[bool] = attribute(description="The policy will be enabled if true, otherwise it will be disabled")
    media_policies: Optional[Dict[str, Any]] = attribute(description="Conditions and actions per media type")
    conditions: Optional[Dict[str, Any]] = attribute(description="Conditions")
    actions: Optional[Dict[str, Any]] = attribute(description="Actions")
    policy_errors: Optional[Dict[str, Any]] = attribute(description="A list of errors in the policy configuration")


def build_policy(d: ResourceData) -> Dict[str, Any]:
    policy: Dict[str, Any] = {
        "name": d.get("name"),
        "order": d.get("order"),
        "description": d.get("description"),
        "enabled": d.get("enabled"),
    }
    for attribute_name, api_name in _DOCUMENT_ATTRIBUTES.items():
        document = d.get(attribute_name)
        if document:
            policy[api_name] = to_api_document(document, POLICY_REFERENCE_KEYS)
    return {key: value for key, value in policy.items() if value is not None}


def get_all_media_retention_policies(ctx: Optional[OperationContext],
                                     session: ClientSession) -> ResourceIDMetaMap:
    return list_all(MediaRetentionPolicyAPI(session.client))


def create_media_retention_policy(ctx: Optional[OperationContext], d: ResourceData,
                                  session: ClientSession) -> Diagnostics:
    api = MediaRetentionPolicyAPI(session.client)
    name = d.get("name")

    logger.info("Creating media retention policy %s", name)
    policy = api.create(build_policy(d))
    d.set_id(policy["id"])

    logger.info("Created media retention policy %s %s", name, d.id)
    return read_media_retention_policy(ctx, d, session)


def read_media_retention_policy(ctx: Optional[OperationContext], d: ResourceData,
                                session: ClientSession) -> Diagnostics:
    api = MediaRetentionPolicyAPI(session.client)
    logger.info("Reading media retention policy %s", d.id)

    def read() -> Outcome:
        try:
            policy = api.get(d.id)
        except APIError as e:
            return read_failure(e, "media retention policy", d.id)

        cc = ConsistencyCheck(ctx, d)
        d.set("name", policy.get("name"))
        d.set("order", policy.get("order"))
        d.set("description", policy.get("description"))
        d.set("enabled", policy.get("enabled"))
        for attribute_name, api_name in _DOCUMENT_ATTRIBUTES.items():
            d.set(attribute_name, from_api_document(policy.get(api_name)))

        logger.info("Read media retention policy %s %s", d.id, policy.get("name"))
        return cc.check_state()

    return with_retries_for_read(ctx, d, read, timeout=session.retry.read_timeout,
                                 backoff=session.retry.backoff_seconds)


def update_media_retention_policy(ctx: Optional[OperationContext], d: ResourceData,
                                  session: ClientSession) -> Diagnostics:
    api = MediaRetentionPolicyAPI(session.client)
    name = d.get("name")

    logger.info("Updating media retention policy %s", name)
    api.update(d.id, build_policy(d))

    logger.info("Updated media retention policy %s %s", name, d.id)
    return read_media_retention_policy(ctx, d, session)


def delete_media_retention_policy(ctx: Optional[OperationContext], d: ResourceData,
                                  session: ClientSession) -> None:
    api = MediaRetentionPolicyAPI(session.client)
    name = d.get("name")

    logger.info("Deleting media retention policy %s", name)
    api.delete(d.id)
    wait_for_deletion(ctx, session, api.get, "media retention policy", d.id)


def _policy_ref_attrs() -> Dict[str, RefAttrSettings]:
    """References inside a policy, repeated for every media type block."""
    users = RefAttrSettings(ref_type="genesyscloud_user", alt_values=["*"])
    queues = RefAttrSettings(ref_type="genesyscloud_routing_queue", alt_values=["*"])
    wrapup_codes = RefAttrSettings(ref_type="genesyscloud_routing_wrapupcode", alt_values=["*"])
    languages = RefAttrSettings(ref_type="genesyscloud_routing_language", alt_values=["*"])
    form = RefAttrSettings(ref_type="genesyscloud_quality_forms_evaluation")
    user = RefAttrSettings(ref_type="genesyscloud_user")
    integration = RefAttrSettings(ref_type="genesyscloud_integration")
    flow = RefAttrSettings(ref_type="genesyscloud_flow")

    evaluation_actions = (
        "assign_evaluations",
        "assign_calibrations",
        "assign_metered_evaluations",
        "assign_metered_assignment_by_agent",
    )

    def policy_refs(prefix: str, media_block: bool) -> Dict[str, RefAttrSettings]:
        refs = {
            f"{prefix}conditions.for_queue_ids": queues,
            f"{prefix}conditions.for_user_ids": users,
            f"{prefix}conditions.wrapup_code_ids": wrapup_codes,
            f"{prefix}actions.assign_calibrations.expert_evaluator_id": user,
            f"{prefix}actions.assign_evaluations.user_id": user,
            f"{prefix}actions.assign_surveys.flow_id": flow,
        }
        for action in evaluation_actions:
            refs[f"{prefix}actions.{action}.evaluation_form_id"] = form
            refs[f"{prefix}actions.{action}.evaluator_ids"] = users
        if media_block:
            refs[f"{prefix}conditions.language_ids"] = languages
            refs[f"{prefix}actions.assign_calibrations.calibrator_id"] = user
            refs[f"{prefix}actions.integration_export.integration_id"] = integration
        return refs

    ref_attrs: Dict[str, RefAttrSettings] = {}
    for media_type in MEDIA_POLICY_TYPES:
        ref_attrs.update(policy_refs(f"media_policies.{media_type}.", media_block=True))
    ref_attrs.update(policy_refs("", media_block=False))
    ref_attrs["actions.media_transcriptions.integration_id"] = integration
    return ref_attrs


# Leaf keys that hold entity references in policy documents
POLICY_REFERENCE_KEYS = frozenset(path.rsplit(".", 1)[-1] for path in _policy_ref_attrs())


def media_retention_policy_resource() -> Resource:
    return Resource(
        type_name=RESOURCE_TYPE,
        description="Genesys Cloud Media Retention Policies",
        model=MediaRetentionPolicyModel,
        create=create_with_pooled_client(create_media_retention_policy),
        read=read_with_pooled_client(read_media_retention_policy),
        update=update_with_pooled_client(update_media_retention_policy),
        delete=delete_with_pooled_client(delete_media_retention_policy),
    )


def media_retention_policy_exporter() -> ResourceExporter:
    remove_if_missing: Dict[str, List[str]] = {
        "": ["conditions", "actions"],
        "media_policies": list(MEDIA_POLICY_TYPES),
    }
    return ResourceExporter(
        get_resources_func=get_all_with_pooled_client(get_all_media_retention_policies, RESOURCE_TYPE),
        ref_attrs=_policy_ref_attrs(),
        allow_zero_values=["order"],
        remove_if_missing=remove_if_missing,
    )


def media_retention_policy_data_source() -> DataSource:
    return name_lookup_data_source(
        RESOURCE_TYPE,
        "Data source for Genesys Cloud media retention policy. Select a policy by name",
        "media retention policy",
        lambda session: MediaRetentionPolicyAPI(session.client),
        server_filter=True,
        first_match=True,
    )


def set_registrar(registry: "ResourceRegistry") -> None:
    registry.register_resource(RESOURCE_TYPE, media_retention_policy_resource())
    registry.register_data_source(RESOURCE_TYPE, media_retention_policy_data_source())
    registry.register_exporter(RESOURCE_TYPE, media_retention_policy_exporter())
