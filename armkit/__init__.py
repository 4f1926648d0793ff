"""armkit - fluent client for the resource-management REST API.

armkit lets you describe a resource and its nested child resources with a
staged builder, submit the whole topology in one commit, and keep a local
wrapper in sync with what the service returns.

Example:
    >>> from armkit import ArmClient, StaticTokenCredential
    >>>
    >>> client = (
    ...     ArmClient.configure()
    ...     .authenticate(StaticTokenCredential(token))
    ...     .with_subscription(subscription_id)
    ... )
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
    >>> profile.update().without_endpoint("primary").apply()

Every operation comes in three forms on one deferred handle:

    >>> call = client.traffic_manager_profiles.get_by_resource_group_async("rg", "web")
    >>> profile = await call                       # deferred
    >>> call.subscribe(on_success, on_failure)     # callback
    >>> profile = call.result()                    # blocking

Client:
    ArmClient: Entry point bound to one subscription
    ClientConfig: Settings (base URL, user agent, accept-language, timeout)

Credentials:
    StaticTokenCredential, CallbackTokenCredential, AccessToken

Error Handling:
    ArmKitError: Base exception for all armkit errors
    ValidationError: A required parameter is missing, nothing was sent
    TransportError: No response was received
    RemoteError: The service answered with an unexpected status code
    CommitError: One or more calls of a builder commit failed
"""

from armkit.client import ArmClient, Authenticated, Configurable
from armkit.config import ClientConfig, load_config
from armkit.credentials import (
    AccessToken,
    CallbackTokenCredential,
    StaticTokenCredential,
    TokenCredential,
)
from armkit.errors import (
    ArmKitError,
    BadRequestError,
    CommitError,
    CommitFailure,
    ConfigValidationError,
    ConflictError,
    ErrorCode,
    IncompleteDefinitionError,
    InvalidResourceIdError,
    NotFoundError,
    RemoteError,
    ResponseDecodeError,
    TransportError,
    TransportTimeoutError,
    ValidationError,
)
from armkit.fluent import ResourceId
from armkit.observability import configure_logging, log_context
from armkit.pipeline import PagedCall, ServiceCall

__version__ = "0.3.0"

__all__ = [
    "AccessToken",
    "ArmClient",
    "ArmKitError",
    "Authenticated",
    "BadRequestError",
    "CallbackTokenCredential",
    "ClientConfig",
    "CommitError",
    "CommitFailure",
    "ConfigValidationError",
    "Configurable",
    "ConflictError",
    "ErrorCode",
    "IncompleteDefinitionError",
    "InvalidResourceIdError",
    "NotFoundError",
    "PagedCall",
    "RemoteError",
    "ResourceId",
    "ResponseDecodeError",
    "ServiceCall",
    "StaticTokenCredential",
    "TokenCredential",
    "TransportError",
    "TransportTimeoutError",
    "ValidationError",
    "configure_logging",
    "load_config",
    "log_context",
    "__version__",
]
