"""Parent builders and the commit that submits a parent with its children.

Commit order is fixed: the parent's own call first, then each pending child
in the order it was attached, one at a time. When the parent call fails the
children are not attempted. Every child is attempted even if an earlier
child fails, and all failures are reported together in one
:class:`~armkit.errors.CommitError`.

On failure nothing local changes: the pending child set keeps every entry
and the wrapper keeps its value, so the same builder can be committed again.
On success the pending set is cleared and the wrapper takes the values
returned by the service.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from armkit.errors import CommitError, CommitFailure, IncompleteDefinitionError
from armkit.fluent.children import ChildBuilderImpl, PendingChildSet
from armkit.pipeline.call import ServiceCall

if TYPE_CHECKING:
    from armkit.pipeline.client import ServiceClient

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


class ParentBuilderImpl(ABC, Generic[ResultT]):
    """Mutable state behind a parent's definition or update stages."""

    kind = "resource"

    def __init__(self, name: str, client: ServiceClient) -> None:
        self.name = name
        self._client = client
        self.pending = PendingChildSet()

    @property
    def client(self) -> ServiceClient:
        return self._client

    @property
    def label(self) -> str:
        return f"{self.kind} '{self.name}'"

    @property
    def commit_verb(self) -> str:
        return "create"

    def missing_required(self) -> list[str]:
        return []

    @abstractmethod
    def _parent_call(self) -> ServiceCall[Any]:
        """The parent's own create or update call."""

    @abstractmethod
    def _on_committed(self, parent_inner: Any, children: list[tuple[ChildBuilderImpl, Any]]) -> ResultT:
        """Reconcile local state with the values the service returned."""

    def commit_async(self) -> ServiceCall[ResultT]:
        """Deferred commit of the parent and every pending child.

        All calls are built (and their parameters validated) before anything
        is dispatched.
        """
        missing = self.missing_required()
        if missing:
            raise IncompleteDefinitionError(
                f"Cannot {self.commit_verb} {self.label}: missing {', '.join(missing)}",
                missing=missing,
                field=missing[0],
            )

        parent_call = self._parent_call()
        children = list(self.pending)
        child_calls = [(child, child.commit_call()) for child in children]

        async def _commit() -> ResultT:
            logger.info(
                f"Committing {self.label}: {self.commit_verb} with {len(child_calls)} pending children"
            )
            try:
                parent_inner = await parent_call
            except Exception as e:
                logger.error(f"{self.commit_verb} {self.label} failed: {e}")
                raise CommitError(
                    failures=[CommitFailure(self.label, self.commit_verb, e)]
                ) from e

            failures: list[CommitFailure] = []
            results: list[tuple[ChildBuilderImpl, Any]] = []
            for child, call in child_calls:
                try:
                    results.append((child, await call))
                except Exception as e:
                    logger.error(f"{child.action.value} {child.label} failed: {e}")
                    failures.append(CommitFailure(child.label, child.action.value, e))

            if failures:
                raise CommitError(failures=failures)

            result = self._on_committed(parent_inner, results)
            for child in children:
                self.pending.discard(child.name)
            logger.info(f"Committed {self.label}")
            return result

        return ServiceCall(_commit, self._client.runner, description=f"{self.commit_verb} {self.label}")

    def commit(self) -> ResultT:
        return self.commit_async().result()
