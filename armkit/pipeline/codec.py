"""Wire codec: request body serialization and status-code demultiplexing.

Every operation declares an explicit response table mapping the status codes
it accepts to the model the body decodes into (``None`` for codes that carry
no body, such as 204). The codec consults the table once per response:

- registered code with a model: the JSON body is validated into that model
- registered code with ``None``, or an empty body: the result is ``None``
- any other code: a :class:`~armkit.errors.RemoteError` is raised with the
  parsed service error body
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import httpx
import pydantic
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from armkit.errors import ErrorContext, RemoteError, ResponseDecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResponseTable = Mapping[int, "type[Any] | None"]

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class ArmModel(BaseModel):
    """Base class for resource values exchanged with the service.

    Field names are snake_case in Python and camelCase on the wire. Fields
    the model does not declare are kept, so a value read from the service
    can be written back without losing anything.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    def to_wire(self, exclude: Any = None) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude=exclude)


@dataclass
class Page(Generic[T]):
    """One page of a list response."""

    items: list[T] = field(default_factory=list)
    next_link: str | None = None

    @property
    def is_last(self) -> bool:
        return not self.next_link


class WireCodec:
    """Serializes request bodies and decodes responses."""

    def serialize(self, body: Any) -> bytes | None:
        if body is None:
            return None
        if isinstance(body, ArmModel):
            payload: Any = body.to_wire()
        elif isinstance(body, BaseModel):
            payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        else:
            payload = body
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")

    def deserialize(self, payload: Any, model_type: type[T]) -> T:
        if isinstance(model_type, type) and issubclass(model_type, BaseModel):
            return model_type.model_validate(payload)  # type: ignore[return-value]
        return pydantic.TypeAdapter(model_type).validate_python(payload)

    def decode(
        self,
        response: httpx.Response,
        responses: ResponseTable,
        operation: str | None = None,
    ) -> Any:
        """Map a response to its declared success value or raise RemoteError."""
        status = response.status_code
        if status not in responses:
            raise RemoteError.from_response(
                status,
                self._error_body(response),
                context=self._context(response, operation),
            )

        model_type = responses[status]
        if model_type is None or not response.content:
            return None

        try:
            return self.deserialize(response.json(), model_type)
        except (ValueError, pydantic.ValidationError) as e:
            raise ResponseDecodeError(
                f"Could not decode {status} response as {getattr(model_type, '__name__', model_type)}",
                status_code=status,
                context=self._context(response, operation),
                cause=e,
            ) from e

    def decode_page(
        self,
        response: httpx.Response,
        responses: ResponseTable,
        item_type: type[T],
        operation: str | None = None,
    ) -> Page[T]:
        """Decode a list response envelope ``{"value": [...], "nextLink": ...}``."""
        status = response.status_code
        if status not in responses:
            raise RemoteError.from_response(
                status,
                self._error_body(response),
                context=self._context(response, operation),
            )
        if not response.content:
            return Page()

        try:
            payload = response.json()
            items = [self.deserialize(item, item_type) for item in payload.get("value") or []]
        except (ValueError, AttributeError, pydantic.ValidationError) as e:
            raise ResponseDecodeError(
                f"Could not decode {status} list response",
                status_code=status,
                context=self._context(response, operation),
                cause=e,
            ) from e
        return Page(items=items, next_link=payload.get("nextLink") or None)

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    @staticmethod
    def _context(response: httpx.Response, operation: str | None) -> ErrorContext:
        request = response.request
        return ErrorContext(
            operation=operation,
            request={"method": request.method, "url": str(request.url)},
            response={"status": response.status_code},
        )
