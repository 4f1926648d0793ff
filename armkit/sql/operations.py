"""Read-only operations on SQL recommended elastic pools.

The list operations answer with a single ``{"value": [...]}`` envelope and no
next link; they still return a :class:`~armkit.pipeline.paging.PagedCall`,
which simply ends after the first page.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from armkit.pipeline.operation import Operation
from armkit.sql.models import DatabaseInner, RecommendedElasticPoolInner, RecommendedElasticPoolMetric

if TYPE_CHECKING:
    from armkit.pipeline.call import ServiceCall
    from armkit.pipeline.client import ServiceClient
    from armkit.pipeline.paging import PagedCall

API_VERSION = "2014-04-01"

_SERVER_PATH = (
    "subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}"
    "/providers/Microsoft.Sql/servers/{serverName}"
)
_POOL_PATH = _SERVER_PATH + "/recommendedElasticPools/{recommendedElasticPoolName}"


class RecommendedElasticPoolsOperations:
    GET = Operation(
        name="RecommendedElasticPools.get",
        method="GET",
        path=_POOL_PATH,
        api_version=API_VERSION,
        responses={200: RecommendedElasticPoolInner},
    )
    GET_DATABASES = Operation(
        name="RecommendedElasticPools.getDatabases",
        method="GET",
        path=_POOL_PATH + "/databases/{databaseName}",
        api_version=API_VERSION,
        responses={200: DatabaseInner},
    )
    LIST = Operation(
        name="RecommendedElasticPools.list",
        method="GET",
        path=_SERVER_PATH + "/recommendedElasticPools",
        api_version=API_VERSION,
        responses={200: None},
        item_type=RecommendedElasticPoolInner,
    )
    LIST_DATABASES = Operation(
        name="RecommendedElasticPools.listDatabases",
        method="GET",
        path=_POOL_PATH + "/databases",
        api_version=API_VERSION,
        responses={200: None},
        item_type=DatabaseInner,
    )
    LIST_METRICS = Operation(
        name="RecommendedElasticPools.listMetrics",
        method="GET",
        path=_POOL_PATH + "/metrics",
        api_version=API_VERSION,
        responses={200: None},
        item_type=RecommendedElasticPoolMetric,
    )

    def __init__(self, client: ServiceClient) -> None:
        self._client = client

    @staticmethod
    def _params(
        resource_group_name: str | None,
        server_name: str | None,
        recommended_elastic_pool_name: str | None = None,
    ) -> dict[str, str | None]:
        params = {"resourceGroupName": resource_group_name, "serverName": server_name}
        if recommended_elastic_pool_name is not None:
            params["recommendedElasticPoolName"] = recommended_elastic_pool_name
        return params

    def get_async(
        self, resource_group_name: str, server_name: str, recommended_elastic_pool_name: str
    ) -> ServiceCall[RecommendedElasticPoolInner]:
        return self._client.call(
            self.GET, self._params(resource_group_name, server_name, recommended_elastic_pool_name)
        )

    def get(
        self, resource_group_name: str, server_name: str, recommended_elastic_pool_name: str
    ) -> RecommendedElasticPoolInner:
        return self.get_async(resource_group_name, server_name, recommended_elastic_pool_name).result()

    def get_databases_async(
        self,
        resource_group_name: str,
        server_name: str,
        recommended_elastic_pool_name: str,
        database_name: str,
    ) -> ServiceCall[DatabaseInner]:
        """One database that the recommendation would place in the pool."""
        params = self._params(resource_group_name, server_name, recommended_elastic_pool_name)
        params["databaseName"] = database_name
        return self._client.call(self.GET_DATABASES, params)

    def get_databases(
        self,
        resource_group_name: str,
        server_name: str,
        recommended_elastic_pool_name: str,
        database_name: str,
    ) -> DatabaseInner:
        return self.get_databases_async(
            resource_group_name, server_name, recommended_elastic_pool_name, database_name
        ).result()

    def list(self, resource_group_name: str, server_name: str) -> PagedCall[RecommendedElasticPoolInner]:
        return self._client.call_paged(self.LIST, self._params(resource_group_name, server_name))

    def list_databases(
        self, resource_group_name: str, server_name: str, recommended_elastic_pool_name: str
    ) -> PagedCall[DatabaseInner]:
        return self._client.call_paged(
            self.LIST_DATABASES,
            self._params(resource_group_name, server_name, recommended_elastic_pool_name),
        )

    def list_metrics(
        self, resource_group_name: str, server_name: str, recommended_elastic_pool_name: str
    ) -> PagedCall[RecommendedElasticPoolMetric]:
        return self._client.call_paged(
            self.LIST_METRICS,
            self._params(resource_group_name, server_name, recommended_elastic_pool_name),
        )
