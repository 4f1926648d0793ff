"""Entry point for Traffic Manager profiles."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from armkit.fluent.identity import ResourceId
from armkit.pipeline.call import ServiceCall
from armkit.trafficmanager.models import ProfileInner
from armkit.trafficmanager.operations import EndpointsOperations, ProfilesOperations
from armkit.trafficmanager.profile import ProfileBlank, ProfileDefinitionImpl, TrafficManagerProfile

if TYPE_CHECKING:
    from armkit.pipeline.client import ServiceClient
    from armkit.pipeline.paging import PagedCall

logger = logging.getLogger(__name__)


class Profiles:
    """Create, read, list and delete Traffic Manager profiles.

    Example:
        >>> profiles = client.traffic_manager_profiles
        >>> profile = profiles.get_by_resource_group("rg", "web")
        >>> for p in profiles.list_by_resource_group("rg"):
        ...     print(p.name, p.fqdn)
    """

    def __init__(self, client: ServiceClient) -> None:
        self._client = client
        self._inner = ProfilesOperations(client)
        self._endpoints = EndpointsOperations(client)

    @property
    def inner(self) -> ProfilesOperations:
        """The underlying profile operations, returning plain values."""
        return self._inner

    @property
    def endpoints_inner(self) -> EndpointsOperations:
        return self._endpoints

    def _wrap(self, inner: ProfileInner) -> TrafficManagerProfile:
        return TrafficManagerProfile.from_inner(inner, self._client)

    def define(self, name: str) -> ProfileBlank:
        """Start defining a new profile."""
        return ProfileBlank(ProfileDefinitionImpl(name, self._client))

    def get_by_resource_group_async(
        self, resource_group_name: str, name: str
    ) -> ServiceCall[TrafficManagerProfile]:
        get_call = self._inner.get_async(resource_group_name, name)

        async def _get() -> TrafficManagerProfile:
            return self._wrap(await get_call)

        return ServiceCall(_get, self._client.runner, description=get_call.description)

    def get_by_resource_group(self, resource_group_name: str, name: str) -> TrafficManagerProfile:
        return self.get_by_resource_group_async(resource_group_name, name).result()

    def get_by_id(self, resource_id: str) -> TrafficManagerProfile:
        parsed = ResourceId.parse(resource_id)
        return self.get_by_resource_group(parsed.resource_group, parsed.name)

    def list_by_resource_group(self, resource_group_name: str) -> PagedCall[TrafficManagerProfile]:
        return self._inner.list_by_resource_group(resource_group_name).map(self._wrap)

    def list(self) -> PagedCall[TrafficManagerProfile]:
        """Every profile in the subscription."""
        return self._inner.list_all().map(self._wrap)

    def delete_by_resource_group_async(self, resource_group_name: str, name: str) -> ServiceCall[None]:
        return self._inner.delete_async(resource_group_name, name)

    def delete_by_resource_group(self, resource_group_name: str, name: str) -> None:
        self.delete_by_resource_group_async(resource_group_name, name).result()
        logger.info(f"Deleted Traffic Manager profile {resource_group_name}/{name}")

    def delete_by_id(self, resource_id: str) -> None:
        parsed = ResourceId.parse(resource_id)
        self.delete_by_resource_group(parsed.resource_group, parsed.name)
