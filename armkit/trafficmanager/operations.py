"""Traffic Manager operation groups.

Every operation has a deferred form (``*_async``, returning a
:class:`~armkit.pipeline.call.ServiceCall`) and a blocking form. List
operations return a :class:`~armkit.pipeline.paging.PagedCall`, which is
both an async and a sync iterator.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from armkit.pipeline.operation import Operation
from armkit.trafficmanager.models import EndpointInner, EndpointType, ProfileInner

if TYPE_CHECKING:
    from armkit.pipeline.call import ServiceCall
    from armkit.pipeline.client import ServiceClient
    from armkit.pipeline.paging import PagedCall

API_VERSION = "2015-11-01"

_PROFILE_PATH = (
    "subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
    "/providers/Microsoft.Network/trafficmanagerprofiles/{profileName}"
)
_ENDPOINT_PATH = _PROFILE_PATH + "/{endpointType}/{endpointName}"


def _endpoint_type(endpoint_type: EndpointType | str | None) -> str | None:
    if isinstance(endpoint_type, EndpointType):
        return endpoint_type.value
    return endpoint_type


class ProfilesOperations:
    """Operations on Traffic Manager profiles."""

    GET = Operation(
        name="Profiles.get",
        method="GET",
        path=_PROFILE_PATH,
        api_version=API_VERSION,
        responses={200: ProfileInner},
    )
    CREATE_OR_UPDATE = Operation(
        name="Profiles.createOrUpdate",
        method="PUT",
        path=_PROFILE_PATH,
        api_version=API_VERSION,
        responses={200: ProfileInner, 201: ProfileInner},
        body_required=True,
    )
    UPDATE = Operation(
        name="Profiles.update",
        method="PATCH",
        path=_PROFILE_PATH,
        api_version=API_VERSION,
        responses={200: ProfileInner},
        body_required=True,
    )
    DELETE = Operation(
        name="Profiles.delete",
        method="DELETE",
        path=_PROFILE_PATH,
        api_version=API_VERSION,
        responses={200: None, 204: None},
    )
    LIST_BY_RESOURCE_GROUP = Operation(
        name="Profiles.listByResourceGroup",
        method="GET",
        path=(
            "subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
            "/providers/Microsoft.Network/trafficmanagerprofiles"
        ),
        api_version=API_VERSION,
        responses={200: None},
        item_type=ProfileInner,
    )
    LIST_ALL = Operation(
        name="Profiles.listAll",
        method="GET",
        path="subscriptions/{subscriptionId}/providers/Microsoft.Network/trafficmanagerprofiles",
        api_version=API_VERSION,
        responses={200: None},
        item_type=ProfileInner,
    )

    def __init__(self, client: ServiceClient) -> None:
        self._client = client

    @staticmethod
    def _params(resource_group_name: str | None, profile_name: str | None) -> dict[str, str | None]:
        return {"resourceGroupName": resource_group_name, "profileName": profile_name}

    def get_async(self, resource_group_name: str, profile_name: str) -> ServiceCall[ProfileInner]:
        return self._client.call(self.GET, self._params(resource_group_name, profile_name))

    def get(self, resource_group_name: str, profile_name: str) -> ProfileInner:
        return self.get_async(resource_group_name, profile_name).result()

    def create_or_update_async(
        self, resource_group_name: str, profile_name: str, parameters: ProfileInner
    ) -> ServiceCall[ProfileInner]:
        """Create a profile or replace it wholesale."""
        return self._client.call(
            self.CREATE_OR_UPDATE, self._params(resource_group_name, profile_name), body=parameters
        )

    def create_or_update(
        self, resource_group_name: str, profile_name: str, parameters: ProfileInner
    ) -> ProfileInner:
        return self.create_or_update_async(resource_group_name, profile_name, parameters).result()

    def update_async(
        self, resource_group_name: str, profile_name: str, parameters: ProfileInner
    ) -> ServiceCall[ProfileInner]:
        """Partially update a profile; only fields set in ``parameters`` change."""
        return self._client.call(
            self.UPDATE, self._params(resource_group_name, profile_name), body=parameters
        )

    def update(
        self, resource_group_name: str, profile_name: str, parameters: ProfileInner
    ) -> ProfileInner:
        return self.update_async(resource_group_name, profile_name, parameters).result()

    def delete_async(self, resource_group_name: str, profile_name: str) -> ServiceCall[None]:
        return self._client.call(self.DELETE, self._params(resource_group_name, profile_name))

    def delete(self, resource_group_name: str, profile_name: str) -> None:
        self.delete_async(resource_group_name, profile_name).result()

    def list_by_resource_group(self, resource_group_name: str) -> PagedCall[ProfileInner]:
        return self._client.call_paged(
            self.LIST_BY_RESOURCE_GROUP, {"resourceGroupName": resource_group_name}
        )

    def list_all(self) -> PagedCall[ProfileInner]:
        return self._client.call_paged(self.LIST_ALL, {})


class EndpointsOperations:
    """Operations on the endpoints of a Traffic Manager profile.

    ``endpoint_type`` is the endpoint kind path segment (``azureEndpoints``,
    ``externalEndpoints`` or ``nestedEndpoints``); an :class:`EndpointType`
    may be passed instead.
    """

    GET = Operation(
        name="Endpoints.get",
        method="GET",
        path=_ENDPOINT_PATH,
        api_version=API_VERSION,
        responses={200: EndpointInner},
    )
    CREATE_OR_UPDATE = Operation(
        name="Endpoints.createOrUpdate",
        method="PUT",
        path=_ENDPOINT_PATH,
        api_version=API_VERSION,
        responses={200: EndpointInner, 201: EndpointInner},
        body_required=True,
    )
    UPDATE = Operation(
        name="Endpoints.update",
        method="PATCH",
        path=_ENDPOINT_PATH,
        api_version=API_VERSION,
        responses={200: EndpointInner},
        body_required=True,
    )
    DELETE = Operation(
        name="Endpoints.delete",
        method="DELETE",
        path=_ENDPOINT_PATH,
        api_version=API_VERSION,
        responses={200: None, 204: None},
    )

    def __init__(self, client: ServiceClient) -> None:
        self._client = client

    @staticmethod
    def _params(
        resource_group_name: str | None,
        profile_name: str | None,
        endpoint_type: EndpointType | str | None,
        endpoint_name: str | None,
    ) -> dict[str, str | None]:
        return {
            "resourceGroupName": resource_group_name,
            "profileName": profile_name,
            "endpointType": _endpoint_type(endpoint_type),
            "endpointName": endpoint_name,
        }

    def get_async(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
    ) -> ServiceCall[EndpointInner]:
        return self._client.call(
            self.GET, self._params(resource_group_name, profile_name, endpoint_type, endpoint_name)
        )

    def get(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
    ) -> EndpointInner:
        return self.get_async(resource_group_name, profile_name, endpoint_type, endpoint_name).result()

    def create_or_update_async(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
        parameters: EndpointInner,
    ) -> ServiceCall[EndpointInner]:
        return self._client.call(
            self.CREATE_OR_UPDATE,
            self._params(resource_group_name, profile_name, endpoint_type, endpoint_name),
            body=parameters,
        )

    def create_or_update(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
        parameters: EndpointInner,
    ) -> EndpointInner:
        return self.create_or_update_async(
            resource_group_name, profile_name, endpoint_type, endpoint_name, parameters
        ).result()

    def update_async(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
        parameters: EndpointInner,
    ) -> ServiceCall[EndpointInner]:
        return self._client.call(
            self.UPDATE,
            self._params(resource_group_name, profile_name, endpoint_type, endpoint_name),
            body=parameters,
        )

    def update(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
        parameters: EndpointInner,
    ) -> EndpointInner:
        return self.update_async(
            resource_group_name, profile_name, endpoint_type, endpoint_name, parameters
        ).result()

    def delete_async(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
    ) -> ServiceCall[None]:
        return self._client.call(
            self.DELETE, self._params(resource_group_name, profile_name, endpoint_type, endpoint_name)
        )

    def delete(
        self,
        resource_group_name: str,
        profile_name: str,
        endpoint_type: EndpointType | str,
        endpoint_name: str,
    ) -> None:
        self.delete_async(resource_group_name, profile_name, endpoint_type, endpoint_name).result()
