"""Fluent resource model: identities, wrappers and staged builders."""

from armkit.fluent.children import ChildAction, ChildBuilderImpl, PendingChildSet
from armkit.fluent.commit import ParentBuilderImpl
from armkit.fluent.identity import ResourceId
from armkit.fluent.stages import Appliable, Attachable, ChildStage, Creatable, Stage
from armkit.fluent.wrapper import ResourceWrapper

__all__ = [
    "Appliable",
    "Attachable",
    "ChildAction",
    "ChildBuilderImpl",
    "ChildStage",
    "Creatable",
    "ParentBuilderImpl",
    "PendingChildSet",
    "ResourceId",
    "ResourceWrapper",
    "Stage",
]
