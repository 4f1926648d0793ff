"""Operation registrations.

Each remote operation is described once, declaratively, by an
:class:`Operation`: HTTP method, path template, api-version, the status codes
it accepts and what their bodies decode into. Operation groups (for example
``EndpointsOperations``) hold a handful of these and hand them to the
:class:`~armkit.pipeline.client.ServiceClient` together with the call's
parameters.
"""

from __future__ import annotations

import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from armkit.errors import ValidationError


@dataclass(frozen=True)
class Operation:
    """Static description of one remote operation.

    Attributes:
        name: Qualified name used in logs and errors, e.g. ``"Endpoints.get"``.
        method: HTTP method.
        path: Path template relative to the base URL, with ``{name}``
            placeholders, e.g. ``"subscriptions/{subscriptionId}/resourceGroups/..."``.
        api_version: Value of the mandatory ``api-version`` query parameter.
        responses: Status code to response model (``None`` for no body).
        body_required: Whether a request body must be supplied.
        item_type: For list operations, the model of each item.
    """

    name: str
    method: str
    path: str
    api_version: str
    responses: Mapping[int, Any]
    body_required: bool = False
    item_type: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_list(self) -> bool:
        return self.item_type is not None

    @property
    def path_parameters(self) -> tuple[str, ...]:
        return tuple(
            name for _, name, _, _ in string.Formatter().parse(self.path) if name is not None
        )

    def validate(self, path_params: Mapping[str, Any], body: Any = None) -> None:
        """Check every required parameter is present.

        Raises:
            ValidationError: naming the first missing parameter.
        """
        for name in self.path_parameters:
            value = path_params.get(name)
            if value is None or value == "":
                raise ValidationError.required(name, operation=self.name)
        if not self.api_version:
            raise ValidationError.required("apiVersion", operation=self.name)
        if self.body_required and body is None:
            raise ValidationError.required("parameters", operation=self.name)

    def expand_path(self, path_params: Mapping[str, Any]) -> str:
        """Fill the path template, percent-encoding each segment."""
        encoded = {
            name: quote(str(path_params[name]), safe="") for name in self.path_parameters
        }
        return self.path.format(**encoded)
