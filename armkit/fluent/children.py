"""Child builders and the parent's pending child set.

A parent builder owns a :class:`PendingChildSet`. Defining, updating or
removing a child only records an entry there; the remote calls are issued
when the parent commits.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import TYPE_CHECKING, Any

from armkit.errors import IncompleteDefinitionError, ValidationError
from armkit.pipeline.call import ServiceCall

if TYPE_CHECKING:
    from armkit.fluent.commit import ParentBuilderImpl

logger = logging.getLogger(__name__)


class ChildAction(str, Enum):
    """What the parent's commit does with a pending child."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ChildBuilderImpl(ABC):
    """Mutable state behind a child's definition or update stages.

    Holds a non-owning reference to the parent builder, used only to register
    itself through :meth:`attach`.
    """

    kind = "child"

    def __init__(self, name: str, parent: ParentBuilderImpl, action: ChildAction) -> None:
        if not name:
            raise ValidationError.required("name")
        self.name = name
        self.action = action
        self._parent = parent

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.action.value} {self.name}>"

    @property
    def label(self) -> str:
        """How this child is named in commit errors."""
        return f"{self.kind} '{self.name}'"

    def missing_required(self) -> list[str]:
        """Required fields not yet supplied; empty when the child is complete."""
        return []

    def attach(self) -> None:
        """Validate and register with the parent's pending child set."""
        missing = self.missing_required()
        if missing:
            raise IncompleteDefinitionError(
                f"Cannot attach {self.label}: missing {', '.join(missing)}",
                missing=missing,
                field=missing[0],
            )
        self._parent.pending.add(self)

    def commit_call(self) -> ServiceCall[Any]:
        """The remote call this child contributes to the parent's commit."""
        if self.action is ChildAction.DELETE:
            return self._delete_call()
        if self.action is ChildAction.UPDATE:
            return self._update_call()
        return self._create_call()

    @abstractmethod
    def _create_call(self) -> ServiceCall[Any]: ...

    @abstractmethod
    def _update_call(self) -> ServiceCall[Any]: ...

    @abstractmethod
    def _delete_call(self) -> ServiceCall[Any]: ...


class PendingChildSet:
    """Ordered mapping of child name to a child waiting for the parent's commit."""

    def __init__(self) -> None:
        self._entries: dict[str, ChildBuilderImpl] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[ChildBuilderImpl]:
        return iter(list(self._entries.values()))

    def __repr__(self) -> str:
        entries = ", ".join(f"{c.name}:{c.action.value}" for c in self._entries.values())
        return f"<PendingChildSet [{entries}]>"

    def get(self, name: str) -> ChildBuilderImpl | None:
        return self._entries.get(name)

    def names(self) -> list[str]:
        return list(self._entries)

    def add(self, child: ChildBuilderImpl) -> None:
        """Register ``child``; a name may only be pending once."""
        if child.name in self._entries:
            existing = self._entries[child.name]
            raise ValidationError(
                f"{child.label} already has a pending {existing.action.value}",
                field="name",
                value=child.name,
            )
        self._entries[child.name] = child
        logger.debug(f"Attached {child.label} for {child.action.value}")

    def discard(self, name: str) -> ChildBuilderImpl | None:
        return self._entries.pop(name, None)

    def clear(self) -> None:
        self._entries.clear()
