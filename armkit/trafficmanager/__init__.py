"""Traffic Manager profiles and their endpoints."""

from armkit.trafficmanager.endpoint import (
    AzureEndpointBlank,
    AzureEndpointUpdate,
    EndpointUpdate,
    EndpointWithAttach,
    ExternalEndpointBlank,
    ExternalEndpointUpdate,
    ExternalEndpointWithRegion,
    TrafficManagerEndpoint,
)
from armkit.trafficmanager.models import (
    DnsConfig,
    EndpointInner,
    EndpointProperties,
    EndpointStatus,
    EndpointType,
    MonitorConfig,
    MonitorProtocol,
    ProfileInner,
    ProfileProperties,
    ProfileStatus,
    TrafficRoutingMethod,
)
from armkit.trafficmanager.operations import EndpointsOperations, ProfilesOperations
from armkit.trafficmanager.profile import (
    ProfileBlank,
    ProfileUpdate,
    ProfileWithCreate,
    ProfileWithLeafDomainLabel,
    ProfileWithTrafficRoutingMethod,
    TrafficManagerProfile,
)
from armkit.trafficmanager.profiles import Profiles

__all__ = [
    "AzureEndpointBlank",
    "AzureEndpointUpdate",
    "DnsConfig",
    "EndpointInner",
    "EndpointProperties",
    "EndpointStatus",
    "EndpointType",
    "EndpointUpdate",
    "EndpointWithAttach",
    "EndpointsOperations",
    "ExternalEndpointBlank",
    "ExternalEndpointUpdate",
    "ExternalEndpointWithRegion",
    "MonitorConfig",
    "MonitorProtocol",
    "ProfileBlank",
    "ProfileInner",
    "ProfileProperties",
    "ProfileStatus",
    "ProfileUpdate",
    "ProfileWithCreate",
    "ProfileWithLeafDomainLabel",
    "ProfileWithTrafficRoutingMethod",
    "Profiles",
    "ProfilesOperations",
    "TrafficManagerEndpoint",
    "TrafficRoutingMethod",
]
