"""Resource wrappers: a value bound to its remote identity."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

from armkit.fluent.identity import ResourceId
from armkit.pipeline.call import ServiceCall

if TYPE_CHECKING:
    from armkit.pipeline.client import ServiceClient

logger = logging.getLogger(__name__)

InnerT = TypeVar("InnerT")
WrapperT = TypeVar("WrapperT", bound="ResourceWrapper")


class ResourceWrapper(ABC, Generic[InnerT]):
    """Pairs a resource value with the identity it was read from or written to.

    The identity accessors (``name``, ``resource_group``, ``parent_name``,
    ``subscription_id``) are captured at construction and never change.
    ``refresh()`` replaces the value wholesale with a fresh read; if the read
    fails the previous value is kept.
    """

    def __init__(self, resource_id: ResourceId, inner: InnerT, client: ServiceClient) -> None:
        self._id = resource_id
        self._inner = inner
        self._client = client
        self._name = resource_id.name
        self._resource_group = resource_id.resource_group
        self._parent_name = resource_id.parent_name
        self._subscription_id = resource_id.subscription_id

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._id}>"

    @property
    def id(self) -> ResourceId:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def resource_group(self) -> str:
        return self._resource_group

    @property
    def parent_name(self) -> str | None:
        return self._parent_name

    @property
    def subscription_id(self) -> str:
        return self._subscription_id

    @property
    def inner(self) -> InnerT:
        """The current resource value."""
        return self._inner

    @property
    def client(self) -> ServiceClient:
        """The service client this resource was read through."""
        return self._client

    def update_inner(self, inner: InnerT) -> None:
        """Replace the local value with one the service returned.

        Identity accessors are untouched. Used by ``refresh()`` and by update
        builders once a commit succeeds.
        """
        self._inner = inner

    @abstractmethod
    def _get_inner_async(self) -> ServiceCall[InnerT]:
        """The canonical get call for this identity."""

    def refresh_async(self: WrapperT) -> ServiceCall[WrapperT]:
        """Deferred refresh; resolves to this wrapper once the value is replaced."""
        get_call = self._get_inner_async()

        async def _refresh() -> WrapperT:
            inner = await get_call
            self.update_inner(inner)
            logger.debug(f"Refreshed {self._id}")
            return self

        return ServiceCall(_refresh, self._client.runner, description=f"refresh {self._id}")

    def refresh(self: WrapperT) -> WrapperT:
        """Re-read the resource and replace the local value."""
        return self.refresh_async().result()
