"""Resource identities.

A resource id addresses one remote object::

    /subscriptions/{sub}/resourceGroups/{rg}/providers/{namespace}/{type}/{name}[/{childType}/{childName}...]
"""

from __future__ import annotations

from dataclasses import dataclass, field

from armkit.errors import InvalidResourceIdError


@dataclass(frozen=True)
class ResourceId:
    """Immutable (subscription, resource group, parent chain, name) tuple.

    Attributes:
        subscription_id: Subscription the resource lives in.
        resource_group: Resource group name.
        provider_namespace: e.g. ``Microsoft.Network``.
        resource_type: Type segment of the resource itself, e.g. ``externalEndpoints``.
        name: Name of the resource itself.
        parents: ``(type, name)`` pairs from the top-level resource down to
            the direct parent; empty for top-level resources.
    """

    subscription_id: str
    resource_group: str
    provider_namespace: str
    resource_type: str
    name: str
    parents: tuple[tuple[str, str], ...] = field(default=())

    @classmethod
    def parse(cls, resource_id: str) -> ResourceId:
        """Parse a canonical resource id string.

        Raises:
            InvalidResourceIdError: if the string is not a provider resource id.
        """
        if not resource_id:
            raise InvalidResourceIdError("Resource id cannot be empty", field="id", value=resource_id)

        segments = resource_id.strip("/").split("/")
        if (
            len(segments) < 8
            or segments[0].lower() != "subscriptions"
            or segments[2].lower() != "resourcegroups"
            or segments[4].lower() != "providers"
            or any(not s for s in segments)
        ):
            raise InvalidResourceIdError(
                f"Not a provider resource id: {resource_id!r}", field="id", value=resource_id
            )

        chain = segments[6:]
        if len(chain) % 2:
            raise InvalidResourceIdError(
                f"Resource id has a type without a name: {resource_id!r}",
                field="id",
                value=resource_id,
            )
        pairs = tuple((chain[i], chain[i + 1]) for i in range(0, len(chain), 2))
        return cls(
            subscription_id=segments[1],
            resource_group=segments[3],
            provider_namespace=segments[5],
            resource_type=pairs[-1][0],
            name=pairs[-1][1],
            parents=pairs[:-1],
        )

    def __str__(self) -> str:
        chain = "".join(f"/{t}/{n}" for t, n in (*self.parents, (self.resource_type, self.name)))
        return (
            f"/subscriptions/{self.subscription_id}"
            f"/resourceGroups/{self.resource_group}"
            f"/providers/{self.provider_namespace}{chain}"
        )

    @property
    def parent_name(self) -> str | None:
        return self.parents[-1][1] if self.parents else None

    @property
    def parent(self) -> ResourceId | None:
        if not self.parents:
            return None
        parent_type, parent_name = self.parents[-1]
        return ResourceId(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            provider_namespace=self.provider_namespace,
            resource_type=parent_type,
            name=parent_name,
            parents=self.parents[:-1],
        )

    @property
    def full_type(self) -> str:
        types = [t for t, _ in self.parents] + [self.resource_type]
        return "/".join([self.provider_namespace, *types])

    def child(self, resource_type: str, name: str) -> ResourceId:
        """Identity of a child resource under this one."""
        return ResourceId(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            provider_namespace=self.provider_namespace,
            resource_type=resource_type,
            name=name,
            parents=(*self.parents, (self.resource_type, self.name)),
        )
