"""Pytest fixtures for armkit tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from armkit.client import ArmClient
from armkit.config import ClientConfig
from armkit.credentials import StaticTokenCredential
from armkit.http import HttpTransport
from armkit.pipeline.client import ServiceClient

SUBSCRIPTION_ID = "00000000-0000-0000-0000-000000000001"
BASE_URL = "https://management.test"
TOKEN = "test-token-abc123"

Handler = Callable[[httpx.Request], httpx.Response]


def _merge(target: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    for key, value in patch.items():
        # tags are replaced as a whole, like the service does
        if key != "tags" and isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value
    return target


def error_body(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


class FakeArmService:
    """In-memory resource-management service behind ``httpx.MockTransport``.

    Stores whatever is PUT, merges PATCH bodies, answers GET with 404 for
    unknown ids, and records every request it receives. Tests can queue
    one-shot failures or take over a path with a custom handler.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.resources: dict[str, dict[str, Any]] = {}
        self._failures: list[tuple[str, str, int, dict[str, Any] | None]] = []
        self._routes: dict[tuple[str, str], Handler] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def count(self, method: str | None = None) -> int:
        return sum(1 for r in self.requests if method is None or r.method == method)

    def methods(self) -> list[str]:
        return [r.method for r in self.requests]

    def fail_next(
        self, method: str, path_suffix: str, status: int = 409, body: dict[str, Any] | None = None
    ) -> None:
        """Answer the next ``method`` request whose path ends with ``path_suffix`` with ``status``."""
        if body is None:
            body = error_body("Conflict", f"Simulated {status}")
        self._failures.append((method, path_suffix.lower(), status, body))

    def route(self, method: str, path: str, handler: Handler) -> None:
        self._routes[(method, path.lower())] = handler

    def put_resource(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        key = path.lower()
        stored = self._decorate(path, json.loads(json.dumps(body)))
        self.resources[key] = stored
        return stored

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        key = path.lower()

        for i, (method, suffix, status, body) in enumerate(self._failures):
            if method == request.method and key.endswith(suffix):
                del self._failures[i]
                return httpx.Response(status, json=body)

        custom = self._routes.get((request.method, key))
        if custom is not None:
            return custom(request)

        if request.method == "GET":
            return self._get(path)
        if request.method == "PUT":
            created = key not in self.resources
            stored = self.put_resource(path, json.loads(request.content))
            return httpx.Response(201 if created else 200, json=stored)
        if request.method == "PATCH":
            if key not in self.resources:
                return self._not_found(path)
            _merge(self.resources[key], json.loads(request.content))
            return httpx.Response(200, json=self._view(key))
        if request.method == "DELETE":
            existed = self.resources.pop(key, None) is not None
            for child in [k for k in self.resources if k.startswith(key + "/")]:
                del self.resources[child]
            return httpx.Response(200 if existed else 204)
        return httpx.Response(405)

    def _get(self, path: str) -> httpx.Response:
        key = path.lower()
        if key in self.resources:
            return httpx.Response(200, json=self._view(key))
        return self._not_found(path)

    @staticmethod
    def _not_found(path: str) -> httpx.Response:
        return httpx.Response(404, json=error_body("ResourceNotFound", f"{path} was not found"))

    def _decorate(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        segments = path.strip("/").split("/")
        chain = segments[6:]
        body["id"] = path
        body["name"] = chain[-1]
        body["type"] = "/".join([segments[5], *chain[0::2]])
        props = body.setdefault("properties", {})
        dns = props.get("dnsConfig")
        if isinstance(dns, dict) and dns.get("relativeName"):
            dns["fqdn"] = f"{dns['relativeName']}.trafficmanager.net"
        return body

    def _view(self, key: str) -> dict[str, Any]:
        body = json.loads(json.dumps(self.resources[key]))
        if body["type"].lower().endswith("trafficmanagerprofiles"):
            body["properties"]["endpoints"] = [
                v for k, v in self.resources.items() if k.startswith(key + "/")
            ]
        return body


def profile_path(resource_group: str, name: str) -> str:
    return (
        f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group}"
        f"/providers/Microsoft.Network/trafficmanagerprofiles/{name}"
    )


@pytest.fixture
def fake_service() -> FakeArmService:
    return FakeArmService()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        base_url=BASE_URL,
        subscription_id=SUBSCRIPTION_ID,
        user_agent="armkit-tests/1.0",
        accept_language="en-GB",
    )


@pytest.fixture
def service_client(
    fake_service: FakeArmService, client_config: ClientConfig
) -> Iterator[ServiceClient]:
    client = ServiceClient(
        client_config,
        StaticTokenCredential(TOKEN),
        transport=HttpTransport(transport=fake_service.transport()),
    )
    yield client
    client.close()


@pytest.fixture
def arm_client(fake_service: FakeArmService) -> Iterator[ArmClient]:
    client = (
        ArmClient.configure()
        .with_base_url(BASE_URL)
        .with_transport(fake_service.transport())
        .authenticate(StaticTokenCredential(TOKEN))
        .with_subscription(SUBSCRIPTION_ID)
    )
    yield client
    client.close()


@pytest.fixture
def existing_profile(fake_service: FakeArmService) -> dict[str, Any]:
    """A priority-routed profile with one external endpoint, stored in the fake service."""
    path = profile_path("rg", "web")
    profile = fake_service.put_resource(
        path,
        {
            "location": "global",
            "tags": {"env": "test", "team": "web"},
            "properties": {
                "profileStatus": "Enabled",
                "trafficRoutingMethod": "Priority",
                "dnsConfig": {"relativeName": "web-tm", "ttl": 300},
                "monitorConfig": {"protocol": "HTTP", "port": 80, "path": "/health"},
            },
        },
    )
    fake_service.put_resource(
        f"{path}/externalEndpoints/primary",
        {
            "properties": {
                "target": "primary.example.com",
                "endpointLocation": "westus",
                "endpointStatus": "Enabled",
                "priority": 1,
            }
        },
    )
    return profile
