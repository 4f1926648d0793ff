"""The request pipeline shared by every operation group.

``ServiceClient`` turns an :class:`~armkit.pipeline.operation.Operation` plus
its parameters into a deferred call:

1. required parameters are validated synchronously; a missing one raises
   :class:`~armkit.errors.ValidationError` and nothing is sent
2. on dispatch, the URL, ``api-version`` query and the ``Authorization``,
   ``accept-language`` and ``User-Agent`` headers are assembled
3. the request goes through the :class:`~armkit.http.HttpTransport`
4. the :class:`~armkit.pipeline.codec.WireCodec` maps the status code to a
   typed result or a :class:`~armkit.errors.RemoteError`
5. list operations follow ``nextLink`` lazily through a
   :class:`~armkit.pipeline.paging.PagedCall`
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from armkit.config import ClientConfig
from armkit.credentials import TokenCredential
from armkit.errors import ValidationError
from armkit.http import HttpTransport
from armkit.pipeline.call import BlockingRunner, ServiceCall
from armkit.pipeline.codec import JSON_CONTENT_TYPE, Page, WireCodec
from armkit.pipeline.operation import Operation
from armkit.pipeline.paging import PagedCall

logger = logging.getLogger(__name__)


class ServiceClient:
    """Executes operations against the resource-management endpoint.

    Args:
        config: Base URL, subscription, user agent and accept-language.
        credential: Supplies the bearer token attached to every request.
        transport: HTTP transport; one is built from ``config`` if omitted.
        codec: Wire codec; the default JSON codec if omitted.
    """

    def __init__(
        self,
        config: ClientConfig,
        credential: TokenCredential,
        transport: HttpTransport | None = None,
        codec: WireCodec | None = None,
    ) -> None:
        self.config = config
        self.credential = credential
        self.transport = transport or HttpTransport(timeout=config.timeout)
        self.codec = codec or WireCodec()
        self.runner = BlockingRunner()

    @property
    def subscription_id(self) -> str | None:
        return self.config.subscription_id

    def call(
        self,
        operation: Operation,
        path_params: Mapping[str, Any],
        body: Any = None,
        query: Mapping[str, Any] | None = None,
    ) -> ServiceCall[Any]:
        """Validate parameters and return the deferred call."""
        params = self._path_params(path_params)
        operation.validate(params, body)
        url = self._url(operation, params)

        async def _execute() -> Any:
            request = self._build_request(operation, url, body=body, query=query)
            response = await self.transport.send(request)
            return self.codec.decode(response, operation.responses, operation=operation.name)

        return ServiceCall(_execute, self.runner, description=operation.name)

    def call_paged(
        self,
        operation: Operation,
        path_params: Mapping[str, Any],
        query: Mapping[str, Any] | None = None,
    ) -> PagedCall[Any]:
        """Validate parameters and return the lazy paged sequence."""
        if not operation.is_list:
            raise ValueError(f"{operation.name} is not a list operation")
        params = self._path_params(path_params)
        operation.validate(params)
        url = self._url(operation, params)

        async def _fetch(next_link: str | None) -> Page[Any]:
            if next_link is None:
                request = self._build_request(operation, url, query=query)
            else:
                request = self._build_next_link_request(operation, next_link)
            response = await self.transport.send(request)
            return self.codec.decode_page(
                response, operation.responses, operation.item_type, operation=operation.name
            )

        return PagedCall(_fetch, self.runner, description=operation.name)

    def _path_params(self, path_params: Mapping[str, Any]) -> dict[str, Any]:
        params = dict(path_params)
        params.setdefault("subscriptionId", self.subscription_id)
        return params

    def _url(self, operation: Operation, params: Mapping[str, Any]) -> str:
        return f"{self.config.base_url}/{operation.expand_path(params)}"

    def _headers(self, operation: Operation, has_body: bool) -> dict[str, str]:
        headers = {
            "Authorization": self.credential.get_token().authorization_header,
            "accept-language": self.config.accept_language,
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
        }
        if has_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        headers.update(operation.headers)
        return headers

    def _build_request(
        self,
        operation: Operation,
        url: str,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
    ) -> httpx.Request:
        params: dict[str, Any] = {"api-version": operation.api_version}
        if query:
            params.update({k: v for k, v in query.items() if v is not None})
        content = self.codec.serialize(body)
        logger.debug(f"Dispatching {operation.name}: {operation.method} {url}")
        return httpx.Request(
            operation.method,
            url,
            params=params,
            content=content,
            headers=self._headers(operation, content is not None),
        )

    def _build_next_link_request(self, operation: Operation, next_link: str) -> httpx.Request:
        if not next_link:
            raise ValidationError.required("nextPageLink", operation=operation.name)
        url = httpx.URL(self.config.base_url + "/").join(next_link)
        logger.debug(f"Following next link for {operation.name}: {url}")
        return httpx.Request("GET", url, headers=self._headers(operation, False))

    def close(self) -> None:
        """Release the transport and the private event loop."""
        self.runner.run(self.transport.aclose())
        self.runner.close()

    async def aclose(self) -> None:
        """Release the running loop's HTTP client, then the blocking forms' loop.

        The private loop cannot run inside this one, so its client is closed
        from a worker thread.
        """
        await self.transport.aclose()
        if self.runner.active:
            await asyncio.to_thread(self.close)
