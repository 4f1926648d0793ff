"""Stage façades for the fluent builders.

A definition or update is driven by a single mutable implementation object.
What the caller holds is a thin stage object over it that exposes only the
methods legal at that point; each method mutates the implementation and
returns the next stage. Optional stages return their own type so they can
be chained repeatedly.

Example:
    >>> profile = (
    ...     client.traffic_manager_profiles.define("web")
    ...     .with_existing_resource_group("rg")
    ...     .with_leaf_domain_label("web-tm")
    ...     .with_priority_based_routing()
    ...     .define_external_target_endpoint("primary")
    ...         .to_fqdn("primary.example.com")
    ...         .from_region("westus")
    ...         .with_routing_priority(1)
    ...         .attach()
    ...     .create()
    ... )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from armkit.fluent.children import ChildBuilderImpl
    from armkit.fluent.commit import ParentBuilderImpl
    from armkit.pipeline.call import ServiceCall

ImplT = TypeVar("ImplT")
StageT = TypeVar("StageT", bound="Stage[Any]")
ParentStageT = TypeVar("ParentStageT")


class Stage(Generic[ImplT]):
    """Base façade: holds the implementation object and nothing else."""

    def __init__(self, impl: ImplT) -> None:
        self._impl = impl

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} over {self._impl!r}>"

    def _to(self, stage: type[StageT]) -> StageT:
        return stage(self._impl)


class ChildStage(Stage["ChildBuilderImpl"], Generic[ParentStageT]):
    """Façade over a child builder that returns control to its parent's stage."""

    def __init__(self, impl: ChildBuilderImpl, parent_stage: ParentStageT) -> None:
        super().__init__(impl)
        self._parent_stage = parent_stage

    def _to(self, stage: type[StageT]) -> StageT:
        return stage(self._impl, self._parent_stage)  # type: ignore[call-arg]


class Attachable(ChildStage[ParentStageT]):
    """Terminal child stage: register with the parent and return to it."""

    def attach(self) -> ParentStageT:
        """Add this child to the parent's pending children.

        Raises:
            IncompleteDefinitionError: a required stage was skipped.
            ValidationError: a child with this name is already pending.
        """
        self._impl.attach()
        return self._parent_stage


class Creatable(Stage["ParentBuilderImpl[Any]"]):
    """Terminal stage of a definition."""

    def create(self) -> Any:
        """Create the resource and its pending children, blocking until done."""
        return self._impl.commit()

    def create_async(self) -> ServiceCall[Any]:
        """Deferred form of :meth:`create`."""
        return self._impl.commit_async()


class Appliable(Stage["ParentBuilderImpl[Any]"]):
    """Terminal stage of an update."""

    def apply(self) -> Any:
        """Send the update and every pending child change, blocking until done."""
        return self._impl.commit()

    def apply_async(self) -> ServiceCall[Any]:
        return self._impl.commit_async()
