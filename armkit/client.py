"""Client entry point.

Example:
    >>> client = (
    ...     ArmClient.configure()
    ...     .with_user_agent("deploy-tool/1.0")
    ...     .with_timeout(30)
    ...     .authenticate(StaticTokenCredential(token))
    ...     .with_subscription("00000000-0000-0000-0000-000000000000")
    ... )
    >>> client.traffic_manager_profiles.get_by_resource_group("rg", "web")

Settings not given explicitly come from ``ARMKIT_*`` environment variables,
an optional YAML file (:meth:`Configurable.with_config_file`) and the
defaults in :class:`~armkit.config.ClientConfig`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

from armkit.config import ClientConfig, load_config
from armkit.credentials import TokenCredential
from armkit.errors import ConfigValidationError
from armkit.http import HttpTransport
from armkit.observability import configure_logging
from armkit.pipeline.client import ServiceClient
from armkit.sql import RecommendedElasticPoolsOperations
from armkit.trafficmanager import Profiles

logger = logging.getLogger(__name__)


class ArmClient:
    """Resource-management client for one subscription.

    Attributes:
        traffic_manager_profiles: Traffic Manager profiles and endpoints.
        sql_recommended_elastic_pools: SQL recommended elastic pools.
    """

    def __init__(self, service_client: ServiceClient) -> None:
        self._service_client = service_client
        self.traffic_manager_profiles = Profiles(service_client)
        self.sql_recommended_elastic_pools = RecommendedElasticPoolsOperations(service_client)

    @staticmethod
    def configure() -> Configurable:
        """Start configuring a client."""
        return Configurable()

    @staticmethod
    def authenticate(credential: TokenCredential) -> Authenticated:
        """Authenticate with default configuration."""
        return Configurable().authenticate(credential)

    @property
    def subscription_id(self) -> str | None:
        return self._service_client.subscription_id

    @property
    def service_client(self) -> ServiceClient:
        return self._service_client

    @property
    def transport(self) -> HttpTransport:
        return self._service_client.transport

    def close(self) -> None:
        self._service_client.close()

    async def aclose(self) -> None:
        await self._service_client.aclose()

    def __enter__(self) -> ArmClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    async def __aenter__(self) -> ArmClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


class Configurable:
    """Collects client settings before authentication."""

    def __init__(self) -> None:
        self._overrides: dict[str, Any] = {}
        self._config_path: Path | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        self._configure_logging = False

    def with_config_file(self, path: str | Path) -> Configurable:
        """Read settings from a YAML file; explicit ``with_*`` calls still win."""
        self._config_path = Path(path)
        return self

    def with_user_agent(self, user_agent: str) -> Configurable:
        self._overrides["user_agent"] = user_agent
        return self

    def with_timeout(self, seconds: float) -> Configurable:
        self._overrides["timeout"] = seconds
        return self

    def with_connect_timeout(self, seconds: float) -> Configurable:
        """Limit connection setup separately from the overall request timeout."""
        self._overrides["connect_timeout"] = seconds
        return self

    def with_proxy(self, url: str) -> Configurable:
        self._overrides["proxy"] = url
        return self

    def with_accept_language(self, language: str) -> Configurable:
        self._overrides["accept_language"] = language
        return self

    def with_base_url(self, base_url: str) -> Configurable:
        """Target another cloud, e.g. a sovereign cloud's management endpoint."""
        self._overrides["base_url"] = base_url
        return self

    def with_log_level(self, level: str) -> Configurable:
        """Configure the ``armkit`` loggers at this level when the client is built."""
        self._overrides["log_level"] = level
        self._configure_logging = True
        return self

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> Configurable:
        """Send requests through ``transport`` (e.g. ``httpx.MockTransport``)."""
        self._transport = transport
        return self

    def build_config(self, **extra: Any) -> ClientConfig:
        return load_config(self._config_path, **{**self._overrides, **extra})

    def authenticate(self, credential: TokenCredential) -> Authenticated:
        if not isinstance(credential, TokenCredential):
            raise ConfigValidationError(
                "credential must provide get_token()", field="credential", value=credential
            )
        return Authenticated(self, credential)


class Authenticated:
    """Authenticated, but not yet bound to a subscription."""

    def __init__(self, configurable: Configurable, credential: TokenCredential) -> None:
        self._configurable = configurable
        self._credential = credential

    def with_subscription(self, subscription_id: str) -> ArmClient:
        if not subscription_id:
            raise ConfigValidationError(
                "Subscription id cannot be empty", field="subscription_id", value=subscription_id
            )
        return self._build(self._configurable.build_config(subscription_id=subscription_id))

    def with_default_subscription(self) -> ArmClient:
        """Use the subscription from the environment or configuration file."""
        config = self._configurable.build_config()
        if not config.subscription_id:
            raise ConfigValidationError(
                "No default subscription configured; set ARMKIT_SUBSCRIPTION_ID",
                field="subscription_id",
            )
        return self._build(config)

    def _build(self, config: ClientConfig) -> ArmClient:
        if self._configurable._configure_logging:
            configure_logging(level=config.log_level, json_format=config.json_logs)
        transport = HttpTransport(
            timeout=config.timeout,
            transport=self._configurable._transport,
            connect_timeout=config.connect_timeout,
            proxy=config.proxy,
        )
        logger.info(f"Client ready for subscription {config.subscription_id} at {config.base_url}")
        return ArmClient(ServiceClient(config, self._credential, transport=transport))
