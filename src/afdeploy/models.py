"""Data models shared by the resource client and the orchestrator."""

from dataclasses import dataclass, field
from enum import Enum


class ResourceKind(str, Enum):
    """Kinds of resources a deployment creates."""

    RESOURCE_GROUP = "resource_group"
    WEB_APP = "web_app"
    PROFILE = "profile"
    ENDPOINT = "endpoint"
    ORIGIN_GROUP = "origin_group"
    ORIGIN = "origin"
    ROUTE = "route"


@dataclass(frozen=True)
class ResourceHandle:
    """Identifier of a created Azure resource.

    Attributes:
        resource_id: Full ARM resource ID
        name: Resource name
        location: Azure region (``Global`` for Front Door resources)
        kind: Resource kind
        scope: Names of the enclosing resources, outermost first. Empty for
            the resource group; every other handle starts with the resource
            group name.
        host_name: Default host name for web apps and endpoints
    """

    resource_id: str
    name: str
    location: str
    kind: ResourceKind
    scope: tuple[str, ...] = ()
    host_name: str | None = None

    @property
    def resource_group(self) -> str:
        return self.scope[0] if self.scope else self.name

    def child_scope(self) -> tuple[str, ...]:
        """Scope for resources created under this one."""
        return (*self.scope, self.name)


@dataclass(frozen=True)
class HealthProbePolicy:
    """Origin group health probe settings."""

    probe_path: str = "/"
    probe_protocol: str = "Http"
    probe_request_type: str = "HEAD"
    probe_interval_in_seconds: int = 100


@dataclass(frozen=True)
class LoadBalancingPolicy:
    """Origin group load balancing settings."""

    sample_size: int = 4
    successful_samples_required: int = 3
    additional_latency_in_milliseconds: int = 50


@dataclass(frozen=True)
class OriginGroupBinding:
    """Probe and balancing policy applied to an origin group."""

    health_probe: HealthProbePolicy = field(default_factory=HealthProbePolicy)
    load_balancing: LoadBalancingPolicy = field(default_factory=LoadBalancingPolicy)


@dataclass(frozen=True)
class OriginSettings:
    """Fixed per-origin routing settings."""

    http_port: int = 80
    https_port: int = 443
    priority: int = 1
    weight: int = 1000
    enabled_state: str = "Enabled"


@dataclass(frozen=True)
class RouteSettings:
    """Fixed settings for the route binding endpoint to origin group."""

    patterns_to_match: tuple[str, ...] = ("/*",)
    supported_protocols: tuple[str, ...] = ("Http", "Https")
    forwarding_protocol: str = "MatchRequest"
    https_redirect: str = "Enabled"
    link_to_default_domain: str = "Enabled"
    enabled_state: str = "Enabled"


__all__ = [
    "HealthProbePolicy",
    "LoadBalancingPolicy",
    "OriginGroupBinding",
    "OriginSettings",
    "ResourceHandle",
    "ResourceKind",
    "RouteSettings",
]
