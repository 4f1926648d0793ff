"""Traffic Manager endpoints: wrapper, child builder and its stages."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from armkit.errors import ValidationError
from armkit.fluent.children import ChildAction, ChildBuilderImpl
from armkit.fluent.identity import ResourceId
from armkit.fluent.stages import Attachable, ChildStage
from armkit.fluent.wrapper import ResourceWrapper
from armkit.pipeline.call import ServiceCall
from armkit.trafficmanager.models import (
    EndpointInner,
    EndpointProperties,
    EndpointStatus,
    EndpointType,
)
from armkit.trafficmanager.operations import EndpointsOperations

if TYPE_CHECKING:
    from armkit.pipeline.client import ServiceClient
    from armkit.trafficmanager.profile import ProfileBuilderImpl

logger = logging.getLogger(__name__)

ParentStageT = TypeVar("ParentStageT")


class TrafficManagerEndpoint(ResourceWrapper[EndpointInner]):
    """An endpoint as last read from, or written to, the service."""

    def __init__(self, resource_id: ResourceId, inner: EndpointInner, client: ServiceClient) -> None:
        super().__init__(resource_id, inner, client)
        self._endpoint_type = EndpointType.from_resource_type(resource_id.resource_type)
        self._operations = EndpointsOperations(client)

    @classmethod
    def from_inner(
        cls, profile_id: ResourceId, inner: EndpointInner, client: ServiceClient
    ) -> TrafficManagerEndpoint:
        """Wrap an endpoint value listed under the profile ``profile_id``."""
        if inner.id:
            return cls(ResourceId.parse(inner.id), inner, client)
        if not inner.type or not inner.name:
            raise ValidationError("Endpoint value has neither an id nor a type and name", value=inner)
        endpoint_type = EndpointType.from_resource_type(inner.type)
        return cls(profile_id.child(endpoint_type.value, inner.name), inner, client)

    @property
    def endpoint_type(self) -> EndpointType:
        return self._endpoint_type

    @property
    def target_resource_id(self) -> str | None:
        return self.inner.properties.target_resource_id

    @property
    def fqdn(self) -> str | None:
        return self.inner.properties.target

    @property
    def region(self) -> str | None:
        return self.inner.properties.endpoint_location

    @property
    def routing_weight(self) -> int | None:
        return self.inner.properties.weight

    @property
    def routing_priority(self) -> int | None:
        return self.inner.properties.priority

    @property
    def is_enabled(self) -> bool:
        return self.inner.properties.endpoint_status != EndpointStatus.DISABLED

    @property
    def monitor_status(self) -> str | None:
        return self.inner.properties.endpoint_monitor_status

    def _get_inner_async(self) -> ServiceCall[EndpointInner]:
        return self._operations.get_async(
            self.resource_group, self.parent_name, self._endpoint_type, self.name
        )


class EndpointImpl(ChildBuilderImpl):
    """State of one endpoint being defined, updated or removed with its profile.

    A definition fills a complete endpoint value that is sent with PUT. An
    update only records the properties it changes and sends them with PATCH.
    """

    kind = "endpoint"

    def __init__(
        self,
        name: str,
        parent: ProfileBuilderImpl,
        action: ChildAction,
        endpoint_type: EndpointType,
    ) -> None:
        super().__init__(name, parent, action)
        self.endpoint_type = endpoint_type
        self.properties = EndpointProperties()
        if action is ChildAction.CREATE:
            self.properties.endpoint_status = EndpointStatus.ENABLED

    @property
    def body(self) -> EndpointInner:
        return EndpointInner(name=self.name, properties=self.properties.model_copy())

    def missing_required(self) -> list[str]:
        if self.action is not ChildAction.CREATE:
            return []
        missing = []
        if self.endpoint_type is EndpointType.AZURE and not self.properties.target_resource_id:
            missing.append("target_resource_id")
        if self.endpoint_type is EndpointType.EXTERNAL:
            if not self.properties.target:
                missing.append("fqdn")
            if not self.properties.endpoint_location:
                missing.append("region")
        return missing

    def _operations(self) -> tuple[EndpointsOperations, str | None, str]:
        parent = self._parent
        return EndpointsOperations(parent.client), parent.resource_group_name, parent.name

    def _create_call(self) -> ServiceCall[EndpointInner]:
        operations, resource_group, profile = self._operations()
        return operations.create_or_update_async(
            resource_group, profile, self.endpoint_type, self.name, self.body
        )

    def _update_call(self) -> ServiceCall[EndpointInner]:
        operations, resource_group, profile = self._operations()
        return operations.update_async(resource_group, profile, self.endpoint_type, self.name, self.body)

    def _delete_call(self) -> ServiceCall[None]:
        operations, resource_group, profile = self._operations()
        return operations.delete_async(resource_group, profile, self.endpoint_type, self.name)


class _EndpointStage(ChildStage[ParentStageT]):
    @property
    def _endpoint(self) -> EndpointImpl:
        return self._impl  # type: ignore[return-value]


class EndpointWithAttach(Attachable[ParentStageT], _EndpointStage[ParentStageT]):
    """Optional settings of a new endpoint, then ``attach()``."""

    def with_routing_weight(self, weight: int) -> EndpointWithAttach[ParentStageT]:
        """Weight used by weighted routing, 1 to 1000."""
        self._endpoint.properties.weight = weight
        return self

    def with_routing_priority(self, priority: int) -> EndpointWithAttach[ParentStageT]:
        """Priority used by priority routing; lower values win, each must be unique."""
        self._endpoint.properties.priority = priority
        return self

    def with_traffic_disabled(self) -> EndpointWithAttach[ParentStageT]:
        self._endpoint.properties.endpoint_status = EndpointStatus.DISABLED
        return self


class AzureEndpointBlank(_EndpointStage[ParentStageT]):
    """First stage of an Azure endpoint definition."""

    def to_resource_id(self, resource_id: str) -> EndpointWithAttach[ParentStageT]:
        """Route to the Azure resource (for example a public IP) with this id."""
        self._endpoint.properties.target_resource_id = resource_id
        return self._to(EndpointWithAttach)


class ExternalEndpointWithRegion(_EndpointStage[ParentStageT]):
    def from_region(self, region: str) -> EndpointWithAttach[ParentStageT]:
        """Location of the external endpoint, used by performance routing."""
        self._endpoint.properties.endpoint_location = region
        return self._to(EndpointWithAttach)


class ExternalEndpointBlank(_EndpointStage[ParentStageT]):
    """First stage of an external endpoint definition."""

    def to_fqdn(self, fqdn: str) -> ExternalEndpointWithRegion[ParentStageT]:
        self._endpoint.properties.target = fqdn
        return self._to(ExternalEndpointWithRegion)


class EndpointUpdate(Attachable[ParentStageT], _EndpointStage[ParentStageT]):
    """Changes to an existing endpoint, staged until the profile is applied."""

    def with_routing_weight(self, weight: int) -> EndpointUpdate[ParentStageT]:
        self._endpoint.properties.weight = weight
        return self

    def with_routing_priority(self, priority: int) -> EndpointUpdate[ParentStageT]:
        self._endpoint.properties.priority = priority
        return self

    def with_traffic_enabled(self) -> EndpointUpdate[ParentStageT]:
        self._endpoint.properties.endpoint_status = EndpointStatus.ENABLED
        return self

    def with_traffic_disabled(self) -> EndpointUpdate[ParentStageT]:
        self._endpoint.properties.endpoint_status = EndpointStatus.DISABLED
        return self

    def parent(self) -> ParentStageT:
        """Same as :meth:`attach`."""
        return self.attach()


class AzureEndpointUpdate(EndpointUpdate[ParentStageT]):
    def to_resource_id(self, resource_id: str) -> AzureEndpointUpdate[ParentStageT]:
        self._endpoint.properties.target_resource_id = resource_id
        return self


class ExternalEndpointUpdate(EndpointUpdate[ParentStageT]):
    def to_fqdn(self, fqdn: str) -> ExternalEndpointUpdate[ParentStageT]:
        self._endpoint.properties.target = fqdn
        return self

    def from_region(self, region: str) -> ExternalEndpointUpdate[ParentStageT]:
        self._endpoint.properties.endpoint_location = region
        return self


def definition_stage(impl: EndpointImpl, parent_stage: Any) -> Any:
    """First definition stage for ``impl``'s endpoint type."""
    if impl.endpoint_type is EndpointType.EXTERNAL:
        return ExternalEndpointBlank(impl, parent_stage)
    return AzureEndpointBlank(impl, parent_stage)


def update_stage(impl: EndpointImpl, parent_stage: Any) -> Any:
    if impl.endpoint_type is EndpointType.EXTERNAL:
        return ExternalEndpointUpdate(impl, parent_stage)
    return AzureEndpointUpdate(impl, parent_stage)
