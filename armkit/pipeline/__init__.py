"""Async request pipeline: operations, codec, pagination and call forms."""

from armkit.pipeline.call import BlockingRunner, ServiceCall
from armkit.pipeline.client import ServiceClient
from armkit.pipeline.codec import ArmModel, Page, WireCodec
from armkit.pipeline.operation import Operation
from armkit.pipeline.paging import PagedCall

__all__ = [
    "ArmModel",
    "BlockingRunner",
    "Operation",
    "Page",
    "PagedCall",
    "ServiceCall",
    "ServiceClient",
    "WireCodec",
]
