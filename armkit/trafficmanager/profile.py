"""Traffic Manager profiles: wrapper, definition and update.

A profile is a parent resource; its endpoints are children. Defining or
updating endpoints through a profile builder only stages them. ``create()``
and ``apply()`` send the profile first and then each staged endpoint change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from armkit.errors import ValidationError
from armkit.fluent.children import ChildAction, ChildBuilderImpl
from armkit.fluent.commit import ParentBuilderImpl
from armkit.fluent.identity import ResourceId
from armkit.fluent.stages import Appliable, Creatable, Stage
from armkit.fluent.wrapper import ResourceWrapper
from armkit.pipeline.call import ServiceCall
from armkit.trafficmanager.endpoint import (
    AzureEndpointBlank,
    AzureEndpointUpdate,
    EndpointImpl,
    ExternalEndpointBlank,
    ExternalEndpointUpdate,
    TrafficManagerEndpoint,
    definition_stage,
    update_stage,
)
from armkit.trafficmanager.models import (
    PROFILE_TYPE,
    PROVIDER_NAMESPACE,
    DnsConfig,
    EndpointInner,
    EndpointType,
    MonitorConfig,
    MonitorProtocol,
    ProfileInner,
    ProfileProperties,
    ProfileStatus,
    TrafficRoutingMethod,
)
from armkit.trafficmanager.operations import ProfilesOperations

if TYPE_CHECKING:
    from armkit.pipeline.client import ServiceClient

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300
DEFAULT_MONITOR_PATH = "/"


class TrafficManagerProfile(ResourceWrapper[ProfileInner]):
    """A Traffic Manager profile and a read-only view of its endpoints."""

    def __init__(self, resource_id: ResourceId, inner: ProfileInner, client: ServiceClient) -> None:
        super().__init__(resource_id, inner, client)
        self._operations = ProfilesOperations(client)

    @classmethod
    def from_inner(cls, inner: ProfileInner, client: ServiceClient) -> TrafficManagerProfile:
        if not inner.id:
            raise ValidationError.required("id")
        return cls(ResourceId.parse(inner.id), inner, client)

    @property
    def region(self) -> str | None:
        return self.inner.location

    @property
    def tags(self) -> dict[str, str]:
        return dict(self.inner.tags or {})

    @property
    def dns_label(self) -> str | None:
        dns = self.inner.properties.dns_config
        return dns.relative_name if dns else None

    @property
    def fqdn(self) -> str | None:
        dns = self.inner.properties.dns_config
        return dns.fqdn if dns else None

    @property
    def time_to_live(self) -> int | None:
        dns = self.inner.properties.dns_config
        return dns.ttl if dns else None

    @property
    def traffic_routing_method(self) -> TrafficRoutingMethod | None:
        return self.inner.properties.traffic_routing_method

    @property
    def is_enabled(self) -> bool:
        return self.inner.properties.profile_status != ProfileStatus.DISABLED

    @property
    def monitoring_protocol(self) -> MonitorProtocol | None:
        monitor = self.inner.properties.monitor_config
        return monitor.protocol if monitor else None

    @property
    def monitoring_port(self) -> int | None:
        monitor = self.inner.properties.monitor_config
        return monitor.port if monitor else None

    @property
    def monitoring_path(self) -> str | None:
        monitor = self.inner.properties.monitor_config
        return monitor.path if monitor else None

    @property
    def monitor_status(self) -> str | None:
        monitor = self.inner.properties.monitor_config
        return monitor.profile_monitor_status if monitor else None

    @property
    def endpoints(self) -> dict[str, TrafficManagerEndpoint]:
        """All endpoints keyed by name, as of the last read or commit."""
        return {
            inner.name: TrafficManagerEndpoint.from_inner(self.id, inner, self._client)
            for inner in self.inner.properties.endpoints or []
            if inner.name
        }

    @property
    def azure_endpoints(self) -> dict[str, TrafficManagerEndpoint]:
        return {k: e for k, e in self.endpoints.items() if e.endpoint_type is EndpointType.AZURE}

    @property
    def external_endpoints(self) -> dict[str, TrafficManagerEndpoint]:
        return {k: e for k, e in self.endpoints.items() if e.endpoint_type is EndpointType.EXTERNAL}

    def _get_inner_async(self) -> ServiceCall[ProfileInner]:
        return self._operations.get_async(self.resource_group, self.name)

    def update(self) -> ProfileUpdate:
        """Start an update of this profile."""
        return ProfileUpdate(ProfileUpdateImpl(self))


def _reconcile_endpoints(
    endpoints: list[EndpointInner], children: list[tuple[ChildBuilderImpl, Any]]
) -> list[EndpointInner]:
    by_name = {e.name: e for e in endpoints}
    for child, result in children:
        if child.action is ChildAction.DELETE:
            by_name.pop(child.name, None)
            continue
        if result is None:
            continue
        if result.type is None and isinstance(child, EndpointImpl):
            result = result.model_copy(update={"type": child.endpoint_type.resource_type})
        by_name[child.name] = result
    return list(by_name.values())


class ProfileBuilderImpl(ParentBuilderImpl[TrafficManagerProfile]):
    """What profile definitions and updates share: endpoint staging."""

    kind = "profile"

    def __init__(self, name: str, client: ServiceClient) -> None:
        super().__init__(name, client)
        self.resource_group_name: str | None = None
        self.operations = ProfilesOperations(client)

    def _check_not_pending(self, name: str) -> None:
        if name in self.pending:
            raise ValidationError(
                f"Endpoint '{name}' already has a pending change", field="name", value=name
            )

    def define_endpoint(self, name: str, endpoint_type: EndpointType) -> EndpointImpl:
        self._check_not_pending(name)
        return EndpointImpl(name, self, ChildAction.CREATE, endpoint_type)

    def set_monitoring(self, monitor: MonitorConfig, protocol: MonitorProtocol, port: int, path: str) -> None:
        monitor.protocol = protocol
        monitor.port = port
        monitor.path = path


class ProfileDefinitionImpl(ProfileBuilderImpl):
    """A new profile, sent with PUT. Endpoints follow as separate calls."""

    def __init__(self, name: str, client: ServiceClient) -> None:
        super().__init__(name, client)
        self.inner = ProfileInner(
            name=name,
            properties=ProfileProperties(
                profile_status=ProfileStatus.ENABLED,
                dns_config=DnsConfig(ttl=DEFAULT_TTL),
                monitor_config=MonitorConfig(
                    protocol=MonitorProtocol.HTTP, port=80, path=DEFAULT_MONITOR_PATH
                ),
            ),
        )

    @property
    def dns_config(self) -> DnsConfig:
        return self.inner.properties.dns_config  # type: ignore[return-value]

    @property
    def monitor_config(self) -> MonitorConfig:
        return self.inner.properties.monitor_config  # type: ignore[return-value]

    def missing_required(self) -> list[str]:
        missing = []
        if not self.resource_group_name:
            missing.append("resource_group_name")
        if not self.dns_config.relative_name:
            missing.append("leaf_domain_label")
        if self.inner.properties.traffic_routing_method is None:
            missing.append("traffic_routing_method")
        return missing

    def _parent_call(self) -> ServiceCall[ProfileInner]:
        body = self.inner.model_copy(deep=True)
        body.properties.endpoints = None
        return self.operations.create_or_update_async(self.resource_group_name, self.name, body)

    def _resource_id(self, inner: ProfileInner) -> ResourceId:
        if inner.id:
            return ResourceId.parse(inner.id)
        return ResourceId(
            subscription_id=self._client.subscription_id or "",
            resource_group=self.resource_group_name or "",
            provider_namespace=PROVIDER_NAMESPACE,
            resource_type=PROFILE_TYPE,
            name=self.name,
        )

    def _on_committed(
        self, parent_inner: ProfileInner, children: list[tuple[ChildBuilderImpl, Any]]
    ) -> TrafficManagerProfile:
        parent_inner.properties.endpoints = _reconcile_endpoints(
            parent_inner.properties.endpoints or [], children
        )
        return TrafficManagerProfile(self._resource_id(parent_inner), parent_inner, self._client)


class ProfileUpdateImpl(ProfileBuilderImpl):
    """Changes to an existing profile, sent with PATCH.

    Only fields touched by the update are put in the request body.
    """

    def __init__(self, profile: TrafficManagerProfile) -> None:
        super().__init__(profile.name, profile.client)
        self.profile = profile
        self.resource_group_name = profile.resource_group
        self.patch = ProfileInner(location=None)

    @property
    def commit_verb(self) -> str:
        return "update"

    def dns_config(self) -> DnsConfig:
        if self.patch.properties.dns_config is None:
            self.patch.properties.dns_config = DnsConfig()
        return self.patch.properties.dns_config

    def monitor_config(self) -> MonitorConfig:
        if self.patch.properties.monitor_config is None:
            current = self.profile.inner.properties.monitor_config or MonitorConfig()
            self.patch.properties.monitor_config = MonitorConfig(
                protocol=current.protocol, port=current.port, path=current.path
            )
        return self.patch.properties.monitor_config

    def tags(self) -> dict[str, str]:
        if self.patch.tags is None:
            self.patch.tags = self.profile.tags
        return self.patch.tags

    def define_endpoint(self, name: str, endpoint_type: EndpointType) -> EndpointImpl:
        if name in self.profile.endpoints:
            raise ValidationError(
                f"Endpoint '{name}' already exists in profile '{self.name}'",
                field="name",
                value=name,
            )
        return super().define_endpoint(name, endpoint_type)

    def update_endpoint(self, name: str, endpoint_type: EndpointType) -> EndpointImpl:
        existing = self.profile.endpoints.get(name)
        if existing is None or existing.endpoint_type is not endpoint_type:
            raise ValidationError(
                f"Profile '{self.name}' has no {endpoint_type.value} endpoint named '{name}'",
                field="name",
                value=name,
            )
        self._check_not_pending(name)
        return EndpointImpl(name, self, ChildAction.UPDATE, endpoint_type)

    def remove_endpoint(self, name: str) -> None:
        pending = self.pending.get(name)
        if pending is not None and pending.action is ChildAction.CREATE:
            self.pending.discard(name)
            logger.debug(f"Dropped pending creation of endpoint '{name}'")
            return
        existing = self.profile.endpoints.get(name)
        if existing is None:
            raise ValidationError(
                f"Profile '{self.name}' has no endpoint named '{name}'", field="name", value=name
            )
        self.pending.discard(name)
        EndpointImpl(name, self, ChildAction.DELETE, existing.endpoint_type).attach()

    def _parent_call(self) -> ServiceCall[ProfileInner]:
        return self.operations.update_async(self.resource_group_name, self.name, self.patch.model_copy(deep=True))

    def _on_committed(
        self, parent_inner: ProfileInner, children: list[tuple[ChildBuilderImpl, Any]]
    ) -> TrafficManagerProfile:
        endpoints = parent_inner.properties.endpoints
        if endpoints is None:
            endpoints = self.profile.inner.properties.endpoints or []
        parent_inner.properties.endpoints = _reconcile_endpoints(list(endpoints), children)
        self.profile.update_inner(parent_inner)
        self.patch = ProfileInner(location=None)
        return self.profile


class ProfileWithCreate(Creatable):
    """A profile definition that can be created, with optional settings."""

    @property
    def _profile(self) -> ProfileDefinitionImpl:
        return self._impl  # type: ignore[return-value]

    def with_location(self, location: str) -> ProfileWithCreate:
        self._profile.inner.location = location
        return self

    def with_tag(self, key: str, value: str) -> ProfileWithCreate:
        tags = dict(self._profile.inner.tags or {})
        tags[key] = value
        self._profile.inner.tags = tags
        return self

    def with_time_to_live(self, ttl: int) -> ProfileWithCreate:
        """DNS time-to-live, in seconds, of the profile's responses."""
        self._profile.dns_config.ttl = ttl
        return self

    def with_http_monitoring(self, port: int = 80, path: str = DEFAULT_MONITOR_PATH) -> ProfileWithCreate:
        self._profile.set_monitoring(self._profile.monitor_config, MonitorProtocol.HTTP, port, path)
        return self

    def with_https_monitoring(self, port: int = 443, path: str = DEFAULT_MONITOR_PATH) -> ProfileWithCreate:
        self._profile.set_monitoring(self._profile.monitor_config, MonitorProtocol.HTTPS, port, path)
        return self

    def with_profile_status_disabled(self) -> ProfileWithCreate:
        self._profile.inner.properties.profile_status = ProfileStatus.DISABLED
        return self

    def define_azure_target_endpoint(self, name: str) -> AzureEndpointBlank[ProfileWithCreate]:
        """Start defining an endpoint routing to an Azure resource."""
        return definition_stage(self._profile.define_endpoint(name, EndpointType.AZURE), self)

    def define_external_target_endpoint(self, name: str) -> ExternalEndpointBlank[ProfileWithCreate]:
        """Start defining an endpoint routing to an external host name."""
        return definition_stage(self._profile.define_endpoint(name, EndpointType.EXTERNAL), self)

    def create(self) -> TrafficManagerProfile:
        return super().create()

    def create_async(self) -> ServiceCall[TrafficManagerProfile]:
        return super().create_async()


class ProfileWithTrafficRoutingMethod(Stage[ProfileDefinitionImpl]):
    def _routing(self, method: TrafficRoutingMethod) -> ProfileWithCreate:
        self._impl.inner.properties.traffic_routing_method = method
        return self._to(ProfileWithCreate)

    def with_performance_based_routing(self) -> ProfileWithCreate:
        """Route each query to the closest endpoint."""
        return self._routing(TrafficRoutingMethod.PERFORMANCE)

    def with_priority_based_routing(self) -> ProfileWithCreate:
        """Route to the enabled endpoint with the lowest priority value."""
        return self._routing(TrafficRoutingMethod.PRIORITY)

    def with_weight_based_routing(self) -> ProfileWithCreate:
        """Distribute queries across endpoints in proportion to their weights."""
        return self._routing(TrafficRoutingMethod.WEIGHTED)


class ProfileWithLeafDomainLabel(Stage[ProfileDefinitionImpl]):
    def with_leaf_domain_label(self, label: str) -> ProfileWithTrafficRoutingMethod:
        """Relative DNS name; the profile answers at ``<label>.trafficmanager.net``."""
        self._impl.dns_config.relative_name = label
        return self._to(ProfileWithTrafficRoutingMethod)


class ProfileBlank(Stage[ProfileDefinitionImpl]):
    """First stage of a profile definition."""

    def with_existing_resource_group(self, resource_group_name: str) -> ProfileWithLeafDomainLabel:
        self._impl.resource_group_name = resource_group_name
        return self._to(ProfileWithLeafDomainLabel)


class ProfileUpdate(Appliable):
    """Staged changes to a profile and its endpoints."""

    @property
    def _profile(self) -> ProfileUpdateImpl:
        return self._impl  # type: ignore[return-value]

    def with_tag(self, key: str, value: str) -> ProfileUpdate:
        self._profile.tags()[key] = value
        return self

    def without_tag(self, key: str) -> ProfileUpdate:
        self._profile.tags().pop(key, None)
        return self

    def with_time_to_live(self, ttl: int) -> ProfileUpdate:
        self._profile.dns_config().ttl = ttl
        return self

    def with_http_monitoring(self, port: int = 80, path: str = DEFAULT_MONITOR_PATH) -> ProfileUpdate:
        self._profile.set_monitoring(self._profile.monitor_config(), MonitorProtocol.HTTP, port, path)
        return self

    def with_https_monitoring(self, port: int = 443, path: str = DEFAULT_MONITOR_PATH) -> ProfileUpdate:
        self._profile.set_monitoring(self._profile.monitor_config(), MonitorProtocol.HTTPS, port, path)
        return self

    def without_monitor_path(self) -> ProfileUpdate:
        """Probe the endpoint root instead of a specific path."""
        self._profile.monitor_config().path = DEFAULT_MONITOR_PATH
        return self

    def with_profile_status_enabled(self) -> ProfileUpdate:
        self._profile.patch.properties.profile_status = ProfileStatus.ENABLED
        return self

    def with_profile_status_disabled(self) -> ProfileUpdate:
        self._profile.patch.properties.profile_status = ProfileStatus.DISABLED
        return self

    def define_azure_target_endpoint(self, name: str) -> AzureEndpointBlank[ProfileUpdate]:
        return definition_stage(self._profile.define_endpoint(name, EndpointType.AZURE), self)

    def define_external_target_endpoint(self, name: str) -> ExternalEndpointBlank[ProfileUpdate]:
        return definition_stage(self._profile.define_endpoint(name, EndpointType.EXTERNAL), self)

    def update_azure_endpoint(self, name: str) -> AzureEndpointUpdate[ProfileUpdate]:
        """Start changing an existing Azure endpoint.

        Raises:
            ValidationError: the profile has no Azure endpoint with this name.
        """
        return update_stage(self._profile.update_endpoint(name, EndpointType.AZURE), self)

    def update_external_endpoint(self, name: str) -> ExternalEndpointUpdate[ProfileUpdate]:
        return update_stage(self._profile.update_endpoint(name, EndpointType.EXTERNAL), self)

    def without_endpoint(self, name: str) -> ProfileUpdate:
        """Remove an endpoint, or drop one defined earlier in this update."""
        self._profile.remove_endpoint(name)
        return self

    def apply(self) -> TrafficManagerProfile:
        return super().apply()

    def apply_async(self) -> ServiceCall[TrafficManagerProfile]:
        return super().apply_async()
