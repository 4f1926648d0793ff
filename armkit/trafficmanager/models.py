"""Traffic Manager resource values as exchanged with the service."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from armkit.pipeline.codec import ArmModel

PROVIDER_NAMESPACE = "Microsoft.Network"
PROFILE_TYPE = "trafficmanagerprofiles"


class TrafficRoutingMethod(str, Enum):
    PERFORMANCE = "Performance"
    PRIORITY = "Priority"
    WEIGHTED = "Weighted"


class ProfileStatus(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"


class EndpointStatus(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"


class MonitorProtocol(str, Enum):
    HTTP = "HTTP"
    HTTPS = "HTTPS"


class EndpointType(str, Enum):
    """Endpoint kinds; the value is the path segment used in endpoint ids."""

    AZURE = "azureEndpoints"
    EXTERNAL = "externalEndpoints"
    NESTED = "nestedEndpoints"

    @property
    def resource_type(self) -> str:
        return f"{PROVIDER_NAMESPACE}/{PROFILE_TYPE}/{self.value}"

    @classmethod
    def from_resource_type(cls, resource_type: str) -> EndpointType:
        """Resolve ``Microsoft.Network/trafficManagerProfiles/externalEndpoints`` style types."""
        segment = resource_type.rsplit("/", 1)[-1].lower()
        for member in cls:
            if member.value.lower() == segment:
                return member
        raise ValueError(f"Unknown endpoint type: {resource_type}")


class DnsConfig(ArmModel):
    relative_name: str | None = None
    fqdn: str | None = None
    ttl: int | None = None


class MonitorConfig(ArmModel):
    profile_monitor_status: str | None = None
    protocol: MonitorProtocol | None = None
    port: int | None = None
    path: str | None = None


class EndpointProperties(ArmModel):
    target_resource_id: str | None = None
    target: str | None = None
    endpoint_status: EndpointStatus | None = None
    weight: int | None = None
    priority: int | None = None
    endpoint_location: str | None = None
    endpoint_monitor_status: str | None = None
    min_child_endpoints: int | None = None


class EndpointInner(ArmModel):
    """An endpoint of a Traffic Manager profile."""

    id: str | None = None
    name: str | None = None
    type: str | None = None
    properties: EndpointProperties = Field(default_factory=EndpointProperties)


class ProfileProperties(ArmModel):
    profile_status: ProfileStatus | None = None
    traffic_routing_method: TrafficRoutingMethod | None = None
    dns_config: DnsConfig | None = None
    monitor_config: MonitorConfig | None = None
    endpoints: list[EndpointInner] | None = None


class ProfileInner(ArmModel):
    """A Traffic Manager profile.

    ``location`` is always ``global`` for Traffic Manager; it is still a
    regular field because the service requires it in create requests.
    """

    id: str | None = None
    name: str | None = None
    type: str | None = None
    location: str | None = "global"
    tags: dict[str, str] | None = None
    properties: ProfileProperties = Field(default_factory=ProfileProperties)
