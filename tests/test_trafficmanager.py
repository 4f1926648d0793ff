"""Tests for Traffic Manager profiles and their endpoints."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from armkit import ArmClient
from armkit.errors import (
    BadRequestError,
    CommitError,
    ConflictError,
    IncompleteDefinitionError,
    NotFoundError,
    ValidationError,
)
from armkit.fluent.children import ChildAction
from armkit.trafficmanager import (
    EndpointInner,
    EndpointType,
    MonitorProtocol,
    ProfileWithCreate,
    TrafficManagerEndpoint,
    TrafficManagerProfile,
    TrafficRoutingMethod,
)
from armkit.trafficmanager.endpoint import EndpointImpl
from armkit.trafficmanager.profile import ProfileUpdateImpl, _reconcile_endpoints
from tests.conftest import SUBSCRIPTION_ID, FakeArmService, error_body, profile_path

PUBLIC_IP_ID = (
    f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/rg"
    "/providers/Microsoft.Network/publicIPAddresses/web-ip"
)


def body_of(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


def new_profile(arm_client: ArmClient, name: str = "web") -> ProfileWithCreate:
    return (
        arm_client.traffic_manager_profiles.define(name)
        .with_existing_resource_group("rg")
        .with_leaf_domain_label(f"{name}-tm")
        .with_priority_based_routing()
    )


class TestProfileCreate:
    """Tests for defining and creating profiles."""

    def test_create_without_endpoints(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        profile = new_profile(arm_client).create()

        assert fake_service.methods() == ["PUT"]
        request = fake_service.requests[0]
        assert request.url.path == profile_path("rg", "web")
        assert body_of(request) == {
            "name": "web",
            "location": "global",
            "properties": {
                "profileStatus": "Enabled",
                "trafficRoutingMethod": "Priority",
                "dnsConfig": {"relativeName": "web-tm", "ttl": 300},
                "monitorConfig": {"protocol": "HTTP", "port": 80, "path": "/"},
            },
        }
        assert isinstance(profile, TrafficManagerProfile)
        assert profile.fqdn == "web-tm.trafficmanager.net"
        assert profile.endpoints == {}

    def test_optional_settings(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        profile = (
            arm_client.traffic_manager_profiles.define("web")
            .with_existing_resource_group("rg")
            .with_leaf_domain_label("web-tm")
            .with_weight_based_routing()
            .with_time_to_live(60)
            .with_https_monitoring(8443, "/probe")
            .with_tag("env", "prod")
            .with_profile_status_disabled()
            .create()
        )

        assert profile.traffic_routing_method is TrafficRoutingMethod.WEIGHTED
        assert profile.time_to_live == 60
        assert profile.monitoring_protocol is MonitorProtocol.HTTPS
        assert profile.monitoring_port == 8443
        assert profile.monitoring_path == "/probe"
        assert profile.tags == {"env": "prod"}
        assert profile.is_enabled is False

    def test_create_with_endpoints(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        profile = (
            new_profile(arm_client)
            .define_external_target_endpoint("primary")
            .to_fqdn("primary.example.com")
            .from_region("westus")
            .with_routing_priority(1)
            .attach()
            .define_azure_target_endpoint("secondary")
            .to_resource_id(PUBLIC_IP_ID)
            .with_routing_priority(2)
            .attach()
            .create()
        )

        assert fake_service.methods() == ["PUT", "PUT", "PUT"]
        profile_request, primary_request, secondary_request = fake_service.requests
        assert "endpoints" not in body_of(profile_request)["properties"]
        assert primary_request.url.path == profile_path("rg", "web") + "/externalEndpoints/primary"
        assert body_of(primary_request) == {
            "name": "primary",
            "properties": {
                "target": "primary.example.com",
                "endpointStatus": "Enabled",
                "priority": 1,
                "endpointLocation": "westus",
            },
        }
        assert secondary_request.url.path == profile_path("rg", "web") + "/azureEndpoints/secondary"
        assert body_of(secondary_request)["properties"]["targetResourceId"] == PUBLIC_IP_ID

        assert set(profile.endpoints) == {"primary", "secondary"}
        assert set(profile.external_endpoints) == {"primary"}
        assert set(profile.azure_endpoints) == {"secondary"}
        primary = profile.endpoints["primary"]
        assert primary.fqdn == "primary.example.com"
        assert primary.region == "westus"
        assert primary.routing_priority == 1
        assert primary.parent_name == "web"
        assert profile.endpoints["secondary"].target_resource_id == PUBLIC_IP_ID

    def test_unattached_endpoint_is_not_sent(
        self, arm_client: ArmClient, fake_service: FakeArmService
    ) -> None:
        stage = new_profile(arm_client)
        stage.define_external_target_endpoint("draft").to_fqdn("draft.example.com")

        profile = stage.create()

        assert fake_service.methods() == ["PUT"]
        assert profile.endpoints == {}

    def test_missing_leaf_label(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        stage = (
            arm_client.traffic_manager_profiles.define("web")
            .with_existing_resource_group("rg")
            .with_leaf_domain_label("")
            .with_performance_based_routing()
        )
        with pytest.raises(IncompleteDefinitionError) as exc_info:
            stage.create()
        assert exc_info.value.missing == ["leaf_domain_label"]
        assert fake_service.requests == []

    def test_created_values_round_trip(self, arm_client: ArmClient) -> None:
        created = (
            new_profile(arm_client)
            .with_time_to_live(120)
            .with_tag("env", "test")
            .define_external_target_endpoint("primary")
            .to_fqdn("primary.example.com")
            .from_region("westus")
            .with_routing_priority(1)
            .attach()
            .create()
        )

        fetched = arm_client.traffic_manager_profiles.get_by_resource_group("rg", "web")

        assert fetched.id == created.id
        assert fetched.dns_label == created.dns_label == "web-tm"
        assert fetched.time_to_live == created.time_to_live == 120
        assert fetched.tags == created.tags == {"env": "test"}
        assert fetched.traffic_routing_method is TrafficRoutingMethod.PRIORITY
        assert fetched.endpoints["primary"].fqdn == created.endpoints["primary"].fqdn

    @pytest.mark.asyncio
    async def test_create_async(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        call = (
            new_profile(arm_client)
            .define_external_target_endpoint("primary")
            .to_fqdn("primary.example.com")
            .from_region("westus")
            .attach()
            .create_async()
        )
        assert fake_service.requests == []

        profile = await call

        assert fake_service.count("PUT") == 2
        assert set(profile.endpoints) == {"primary"}

    @pytest.mark.asyncio
    async def test_create_subscribe(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        done = asyncio.Event()
        created: list[TrafficManagerProfile] = []

        def on_success(profile: TrafficManagerProfile) -> None:
            created.append(profile)
            done.set()

        new_profile(arm_client).create_async().subscribe(on_success)
        await asyncio.wait_for(done.wait(), timeout=5)

        assert created[0].name == "web"
        assert fake_service.count() == 1


class TestChildStaging:
    """Tests for attaching endpoints to a pending profile."""

    def test_incomplete_external_endpoint(
        self, arm_client: ArmClient, fake_service: FakeArmService
    ) -> None:
        stage = new_profile(arm_client)
        endpoint = stage.define_external_target_endpoint("primary").to_fqdn("").from_region("westus")

        with pytest.raises(IncompleteDefinitionError) as exc_info:
            endpoint.attach()

        assert exc_info.value.missing == ["fqdn"]
        assert "primary" not in stage._impl.pending
        assert fake_service.requests == []

    def test_incomplete_azure_endpoint(self, arm_client: ArmClient) -> None:
        stage = new_profile(arm_client)
        with pytest.raises(IncompleteDefinitionError) as exc_info:
            stage.define_azure_target_endpoint("a").to_resource_id("").attach()
        assert exc_info.value.missing == ["target_resource_id"]

    def test_empty_name(self, arm_client: ArmClient) -> None:
        with pytest.raises(ValidationError):
            new_profile(arm_client).define_external_target_endpoint("")

    def test_duplicate_name_refused_at_define(self, arm_client: ArmClient) -> None:
        stage = (
            new_profile(arm_client)
            .define_external_target_endpoint("primary")
            .to_fqdn("a.example.com")
            .from_region("westus")
            .attach()
        )
        with pytest.raises(ValidationError):
            stage.define_azure_target_endpoint("primary")

    def test_duplicate_name_refused_at_attach(self, arm_client: ArmClient) -> None:
        stage = new_profile(arm_client)
        first = stage.define_external_target_endpoint("primary").to_fqdn("a.example.com").from_region("westus")
        second = stage.define_external_target_endpoint("primary").to_fqdn("b.example.com").from_region("eastus")

        first.attach()
        with pytest.raises(ValidationError):
            second.attach()

        assert stage._impl.pending.names() == ["primary"]

    def test_attach_adds_one_entry(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        stage = new_profile(arm_client)
        back = stage.define_external_target_endpoint("a").to_fqdn("a.example.com").from_region("westus").attach()

        assert back is stage
        assert stage._impl.pending.names() == ["a"]
        assert fake_service.requests == []


class TestCommitFailures:
    """Tests for partial failures of a create or apply."""

    def _two_endpoints(self, arm_client: ArmClient) -> ProfileWithCreate:
        return (
            new_profile(arm_client)
            .define_external_target_endpoint("a")
            .to_fqdn("a.example.com")
            .from_region("westus")
            .attach()
            .define_external_target_endpoint("b")
            .to_fqdn("b.example.com")
            .from_region("eastus")
            .attach()
        )

    def test_child_failure_keeps_pending(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        stage = self._two_endpoints(arm_client)
        fake_service.fail_next("PUT", "/externalEndpoints/b", 409)

        with pytest.raises(CommitError) as exc_info:
            stage.create()

        error = exc_info.value
        assert error.failed_constituents == ["endpoint 'b'"]
        assert isinstance(error.error_for("endpoint 'b'"), ConflictError)
        assert error.error_for("endpoint 'a'") is None
        assert fake_service.count("PUT") == 3
        assert stage._impl.pending.names() == ["a", "b"]

        profile = stage.create()

        assert fake_service.count("PUT") == 6
        assert set(profile.endpoints) == {"a", "b"}
        assert len(stage._impl.pending) == 0

    def test_every_child_attempted(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        stage = self._two_endpoints(arm_client)
        fake_service.fail_next("PUT", "/externalEndpoints/a", 409)
        fake_service.fail_next("PUT", "/externalEndpoints/b", 400)

        with pytest.raises(CommitError) as exc_info:
            stage.create()

        assert exc_info.value.failed_constituents == ["endpoint 'a'", "endpoint 'b'"]
        assert fake_service.count("PUT") == 3

    def test_parent_failure_skips_children(
        self, arm_client: ArmClient, fake_service: FakeArmService
    ) -> None:
        stage = self._two_endpoints(arm_client)
        fake_service.fail_next(
            "PUT", "/trafficmanagerprofiles/web", 400, error_body("BadRequest", "label taken")
        )

        with pytest.raises(CommitError) as exc_info:
            stage.create()

        assert exc_info.value.failed_constituents == ["profile 'web'"]
        cause = exc_info.value.error_for("profile 'web'")
        assert isinstance(cause, BadRequestError)
        assert cause.service_message == "label taken"
        assert fake_service.count() == 1
        assert len(stage._impl.pending) == 2


class TestProfileUpdate:
    """Tests for updating an existing profile and its endpoints."""

    @pytest.fixture
    def profile(self, arm_client: ArmClient, existing_profile: dict) -> TrafficManagerProfile:
        return arm_client.traffic_manager_profiles.get_by_resource_group("rg", "web")

    def test_read_existing(self, profile: TrafficManagerProfile) -> None:
        assert profile.name == "web"
        assert profile.resource_group == "rg"
        assert profile.subscription_id == SUBSCRIPTION_ID
        assert profile.fqdn == "web-tm.trafficmanager.net"
        assert profile.monitoring_path == "/health"
        assert set(profile.external_endpoints) == {"primary"}
        assert profile.azure_endpoints == {}

    def test_tags_patch(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        updated = profile.update().with_tag("owner", "ops").without_tag("team").apply()

        assert fake_service.methods() == ["GET", "PATCH"]
        body = body_of(fake_service.requests[1])
        assert body["tags"] == {"env": "test", "owner": "ops"}
        assert "location" not in body
        assert "dnsConfig" not in body.get("properties", {})
        assert updated is profile
        assert profile.tags == {"env": "test", "owner": "ops"}
        assert set(profile.endpoints) == {"primary"}

    def test_ttl_patch_keeps_label(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        profile.update().with_time_to_live(30).apply()

        assert body_of(fake_service.requests[1])["properties"]["dnsConfig"] == {"ttl": 30}
        assert profile.time_to_live == 30
        assert profile.dns_label == "web-tm"

    def test_monitoring_patch(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        profile.update().with_https_monitoring().apply()

        assert body_of(fake_service.requests[1])["properties"]["monitorConfig"] == {
            "protocol": "HTTPS",
            "port": 443,
            "path": "/",
        }
        assert profile.monitoring_protocol is MonitorProtocol.HTTPS

    def test_without_monitor_path(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        profile.update().without_monitor_path().apply()

        assert body_of(fake_service.requests[1])["properties"]["monitorConfig"] == {
            "protocol": "HTTP",
            "port": 80,
            "path": "/",
        }
        assert profile.monitoring_path == "/"

    def test_disable_profile(self, profile: TrafficManagerProfile) -> None:
        profile.update().with_profile_status_disabled().apply()
        assert profile.is_enabled is False
        profile.update().with_profile_status_enabled().apply()
        assert profile.is_enabled is True

    def test_update_endpoint(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        (
            profile.update()
            .update_external_endpoint("primary")
            .with_routing_weight(5)
            .attach()
            .apply()
        )

        assert fake_service.methods() == ["GET", "PATCH", "PATCH"]
        request = fake_service.requests[2]
        assert request.url.path == profile_path("rg", "web") + "/externalEndpoints/primary"
        assert body_of(request) == {"name": "primary", "properties": {"weight": 5}}
        primary = profile.endpoints["primary"]
        assert primary.routing_weight == 5
        assert primary.fqdn == "primary.example.com"

    def test_update_endpoint_parent_alias(self, profile: TrafficManagerProfile) -> None:
        profile.update().update_external_endpoint("primary").with_traffic_disabled().parent().apply()
        assert profile.endpoints["primary"].is_enabled is False

    def test_add_endpoint(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        (
            profile.update()
            .define_azure_target_endpoint("azure")
            .to_resource_id(PUBLIC_IP_ID)
            .with_routing_priority(2)
            .attach()
            .apply()
        )

        assert fake_service.methods() == ["GET", "PATCH", "PUT"]
        assert set(profile.azure_endpoints) == {"azure"}
        assert set(profile.external_endpoints) == {"primary"}

    def test_added_endpoint_typed_when_response_omits_type(
        self, profile: TrafficManagerProfile, fake_service: FakeArmService
    ) -> None:
        returned: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = body_of(request)
            body.pop("type", None)
            returned.append(body)
            return httpx.Response(200, json=body)

        fake_service.route("PUT", profile_path("rg", "web") + "/azureEndpoints/azure", handler)
        (
            profile.update()
            .define_azure_target_endpoint("azure")
            .to_resource_id(PUBLIC_IP_ID)
            .attach()
            .apply()
        )

        assert "type" not in returned[0]
        azure = profile.endpoints["azure"]
        assert azure.endpoint_type is EndpointType.AZURE
        assert azure.inner.type == EndpointType.AZURE.resource_type

    def test_reconcile_leaves_child_result_untouched(self, profile: TrafficManagerProfile) -> None:
        update = ProfileUpdateImpl(profile)
        child = EndpointImpl("azure", update, ChildAction.CREATE, EndpointType.AZURE)
        result = EndpointInner(name="azure", properties={"targetResourceId": PUBLIC_IP_ID})

        reconciled = _reconcile_endpoints([], [(child, result)])

        assert result.type is None
        assert reconciled[0].type == EndpointType.AZURE.resource_type
        assert reconciled[0] is not result

    def test_update_shares_profile_client(self, arm_client: ArmClient, profile: TrafficManagerProfile) -> None:
        assert profile.client is arm_client.service_client
        assert ProfileUpdateImpl(profile).client is profile.client

    def test_update_inner_replaces_value(self, profile: TrafficManagerProfile) -> None:
        replacement = profile.inner.model_copy(deep=True)
        replacement.properties.dns_config.ttl = 60

        profile.update_inner(replacement)

        assert profile.inner is replacement
        assert profile.time_to_live == 60
        assert profile.name == "web"

    def test_remove_endpoint(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        profile.update().without_endpoint("primary").apply()

        assert fake_service.methods() == ["GET", "PATCH", "DELETE"]
        assert fake_service.requests[2].url.path.endswith("/externalEndpoints/primary")
        assert profile.endpoints == {}

    def test_remove_pending_definition(
        self, profile: TrafficManagerProfile, fake_service: FakeArmService
    ) -> None:
        (
            profile.update()
            .define_external_target_endpoint("backup")
            .to_fqdn("backup.example.com")
            .from_region("eastus")
            .attach()
            .without_endpoint("backup")
            .apply()
        )

        assert fake_service.methods() == ["GET", "PATCH"]
        assert set(profile.endpoints) == {"primary"}

    def test_remove_replaces_pending_update(
        self, profile: TrafficManagerProfile, fake_service: FakeArmService
    ) -> None:
        (
            profile.update()
            .update_external_endpoint("primary")
            .with_routing_weight(3)
            .attach()
            .without_endpoint("primary")
            .apply()
        )
        assert fake_service.methods() == ["GET", "PATCH", "DELETE"]

    def test_unknown_endpoints_refused(self, profile: TrafficManagerProfile) -> None:
        update = profile.update()
        with pytest.raises(ValidationError):
            update.update_external_endpoint("missing")
        with pytest.raises(ValidationError):
            update.update_azure_endpoint("primary")
        with pytest.raises(ValidationError):
            update.without_endpoint("missing")
        with pytest.raises(ValidationError):
            update.define_external_target_endpoint("primary")

    def test_failed_apply_keeps_value(self, profile: TrafficManagerProfile, fake_service: FakeArmService) -> None:
        update = (
            profile.update()
            .with_tag("owner", "ops")
            .update_external_endpoint("primary")
            .with_routing_weight(9)
            .attach()
        )
        fake_service.fail_next("PATCH", "/externalEndpoints/primary", 409)

        with pytest.raises(CommitError) as exc_info:
            update.apply()

        assert exc_info.value.failed_constituents == ["endpoint 'primary'"]
        assert profile.tags == {"env": "test", "team": "web"}
        assert profile.endpoints["primary"].routing_weight is None

        update.apply()

        assert profile.tags["owner"] == "ops"
        assert profile.endpoints["primary"].routing_weight == 9

    @pytest.mark.asyncio
    async def test_apply_async(self, arm_client: ArmClient, existing_profile: dict) -> None:
        profile = await arm_client.traffic_manager_profiles.get_by_resource_group_async("rg", "web")
        updated = await profile.update().with_time_to_live(45).apply_async()
        assert updated.time_to_live == 45


class TestRefresh:
    """Tests for re-reading wrappers."""

    def test_refresh_picks_up_changes(
        self, arm_client: ArmClient, existing_profile: dict
    ) -> None:
        profile = arm_client.traffic_manager_profiles.get_by_resource_group("rg", "web")
        arm_client.traffic_manager_profiles.endpoints_inner.update(
            "rg", "web", EndpointType.EXTERNAL, "primary", EndpointInner(properties={"weight": 50})
        )

        assert profile.endpoints["primary"].routing_weight is None
        assert profile.refresh() is profile
        assert profile.endpoints["primary"].routing_weight == 50

    def test_refresh_after_delete(
        self, arm_client: ArmClient, fake_service: FakeArmService, existing_profile: dict
    ) -> None:
        profile = arm_client.traffic_manager_profiles.get_by_resource_group("rg", "web")
        arm_client.traffic_manager_profiles.delete_by_resource_group("rg", "web")

        with pytest.raises(NotFoundError):
            profile.refresh()

        assert profile.fqdn == "web-tm.trafficmanager.net"
        assert profile.name == "web"

    def test_endpoint_refresh(self, arm_client: ArmClient, existing_profile: dict) -> None:
        profile = arm_client.traffic_manager_profiles.get_by_resource_group("rg", "web")
        endpoint = profile.endpoints["primary"]
        assert isinstance(endpoint, TrafficManagerEndpoint)
        arm_client.traffic_manager_profiles.endpoints_inner.update(
            "rg", "web", "externalEndpoints", "primary", EndpointInner(properties={"priority": 7})
        )

        endpoint.refresh()

        assert endpoint.routing_priority == 7
        assert endpoint.endpoint_type is EndpointType.EXTERNAL


class TestProfiles:
    """Tests for the Profiles collection."""

    def test_get_missing(self, arm_client: ArmClient) -> None:
        with pytest.raises(NotFoundError):
            arm_client.traffic_manager_profiles.get_by_resource_group("rg", "absent")

    def test_get_by_id(self, arm_client: ArmClient, existing_profile: dict) -> None:
        profile = arm_client.traffic_manager_profiles.get_by_id(profile_path("rg", "web"))
        assert profile.name == "web"
        assert str(profile.id) == profile_path("rg", "web")

    def test_delete(self, arm_client: ArmClient, fake_service: FakeArmService, existing_profile: dict) -> None:
        arm_client.traffic_manager_profiles.delete_by_id(profile_path("rg", "web"))

        assert fake_service.methods() == ["DELETE"]
        assert fake_service.resources == {}

    def test_list_subscription(self, arm_client: ArmClient, fake_service: FakeArmService) -> None:
        fake_service.route(
            "GET",
            f"/subscriptions/{SUBSCRIPTION_ID}/providers/Microsoft.Network/trafficmanagerprofiles",
            lambda request: httpx.Response(
                200,
                json={
                    "value": [
                        {"id": profile_path("rg1", "a"), "name": "a"},
                        {"id": profile_path("rg2", "b"), "name": "b"},
                    ]
                },
            ),
        )

        profiles = arm_client.traffic_manager_profiles.list().result()

        assert [(p.resource_group, p.name) for p in profiles] == [("rg1", "a"), ("rg2", "b")]
