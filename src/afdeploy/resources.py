"""Azure resource creation through the management SDK.

Wraps the resource, App Service and CDN management clients behind one small
class. Every create or delete is a long-running operation; each method waits
for the poller to reach its terminal state before returning a
``ResourceHandle``.

Create methods take an optional ``timeout`` in seconds. When the operation
has not finished by then, ``ProvisioningError`` is raised instead of a
handle.

Philosophy:
- Uses Azure SDK (azure-mgmt-*) rather than shelling out to the az CLI
- One method per resource kind, no generic dispatch
- Child resources are addressed through their parent's handle, so every
  handle stays inside the resource group's scope

Public API:
    AzureResourceClient: Create and delete deployment resources
"""

from typing import Any

from azure.core.exceptions import ResourceNotFoundError
from azure.core.polling import LROPoller
from azure.mgmt.cdn import CdnManagementClient
from azure.mgmt.cdn.models import (
    AFDEndpoint,
    AFDOrigin,
    AFDOriginGroup,
    HealthProbeParameters,
    LoadBalancingSettingsParameters,
    Profile,
    ResourceReference,
    Route,
    Sku,
)
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources.models import ResourceGroup
from azure.mgmt.web import WebSiteManagementClient
from azure.mgmt.web.models import Site

from afdeploy.auth import AzureCredentials
from afdeploy.exceptions import CleanupError, ProvisioningError
from afdeploy.log_sanitizer import LogSanitizer
from afdeploy.models import (
    OriginGroupBinding,
    OriginSettings,
    ResourceHandle,
    ResourceKind,
    RouteSettings,
)

FRONT_DOOR_LOCATION = "Global"
FRONT_DOOR_SKU = "Premium_AzureFrontDoor"


def wait_for(poller: LROPoller, timeout: float | None, description: str) -> Any:
    """Wait for a long-running operation to reach its terminal state.

    Args:
        poller: Poller returned by a ``begin_*`` call
        timeout: Seconds to wait, or None to wait until done
        description: What is being created, for the error message

    Raises:
        ProvisioningError: If the operation is still running after timeout
    """
    result = poller.result(timeout=timeout)
    if timeout is not None and not poller.done():
        raise ProvisioningError(f"Timed out after {timeout:.1f}s waiting for {description}")
    return result


class AzureResourceClient:
    """Create the Front Door deployment graph in Azure.

    Example:
        >>> client = AzureResourceClient.from_credentials(AzureCredentials.from_environment())
        >>> rg = client.create_resource_group("CdnRG1234", "eastus")
        >>> app = client.create_web_app(rg, "sampletestwebapp42", "westus", timeout=600)
    """

    def __init__(
        self,
        resource_client: ResourceManagementClient,
        web_client: WebSiteManagementClient,
        cdn_client: CdnManagementClient,
    ):
        self.resource_client = resource_client
        self.web_client = web_client
        self.cdn_client = cdn_client

    @classmethod
    def from_credentials(cls, credentials: AzureCredentials) -> "AzureResourceClient":
        """Build SDK clients for the credentials' subscription."""
        credential = credentials.create_credential()
        subscription_id = credentials.subscription_id
        return cls(
            ResourceManagementClient(credential, subscription_id),
            WebSiteManagementClient(credential, subscription_id),
            CdnManagementClient(credential, subscription_id),
        )

    def create_resource_group(self, name: str, location: str) -> ResourceHandle:
        # Not a long-running operation; the request itself returns the group
        group = self.resource_client.resource_groups.create_or_update(
            name, ResourceGroup(location=location)
        )
        return ResourceHandle(
            resource_id=group.id,
            name=group.name,
            location=group.location,
            kind=ResourceKind.RESOURCE_GROUP,
        )

    def create_web_app(
        self,
        resource_group: ResourceHandle,
        name: str,
        location: str,
        timeout: float | None = None,
    ) -> ResourceHandle:
        """Create a web app and return a handle carrying its default host name."""
        site = wait_for(
            self.web_client.web_apps.begin_create_or_update(
                resource_group.name, name, Site(location=location)
            ),
            timeout,
            f"web app {name}",
        )
        return ResourceHandle(
            resource_id=site.id,
            name=site.name,
            location=site.location,
            kind=ResourceKind.WEB_APP,
            scope=resource_group.child_scope(),
            host_name=site.default_host_name,
        )

    def create_profile(
        self, resource_group: ResourceHandle, name: str, timeout: float | None = None
    ) -> ResourceHandle:
        profile = wait_for(
            self.cdn_client.profiles.begin_create(
                resource_group.name,
                name,
                Profile(location=FRONT_DOOR_LOCATION, sku=Sku(name=FRONT_DOOR_SKU)),
            ),
            timeout,
            f"profile {name}",
        )
        return self._handle(profile, ResourceKind.PROFILE, resource_group.child_scope())

    def create_endpoint(
        self, profile: ResourceHandle, name: str, timeout: float | None = None
    ) -> ResourceHandle:
        endpoint = wait_for(
            self.cdn_client.afd_endpoints.begin_create(
                profile.resource_group,
                profile.name,
                name,
                AFDEndpoint(location=FRONT_DOOR_LOCATION, enabled_state="Enabled"),
            ),
            timeout,
            f"endpoint {name}",
        )
        return self._handle(
            endpoint,
            ResourceKind.ENDPOINT,
            profile.child_scope(),
            host_name=endpoint.host_name,
        )

    def create_origin_group(
        self,
        profile: ResourceHandle,
        name: str,
        binding: OriginGroupBinding | None = None,
        timeout: float | None = None,
    ) -> ResourceHandle:
        binding = binding or OriginGroupBinding()
        probe = binding.health_probe
        balancing = binding.load_balancing
        origin_group = wait_for(
            self.cdn_client.afd_origin_groups.begin_create(
                profile.resource_group,
                profile.name,
                name,
                AFDOriginGroup(
                    health_probe_settings=HealthProbeParameters(
                        probe_path=probe.probe_path,
                        probe_protocol=probe.probe_protocol,
                        probe_request_type=probe.probe_request_type,
                        probe_interval_in_seconds=probe.probe_interval_in_seconds,
                    ),
                    load_balancing_settings=LoadBalancingSettingsParameters(
                        sample_size=balancing.sample_size,
                        successful_samples_required=balancing.successful_samples_required,
                        additional_latency_in_milliseconds=(
                            balancing.additional_latency_in_milliseconds
                        ),
                    ),
                ),
            ),
            timeout,
            f"origin group {name}",
        )
        return self._handle(origin_group, ResourceKind.ORIGIN_GROUP, profile.child_scope())

    def create_origin(
        self,
        origin_group: ResourceHandle,
        name: str,
        web_app: ResourceHandle,
        settings: OriginSettings | None = None,
        timeout: float | None = None,
    ) -> ResourceHandle:
        """Create an origin pointing at a web app.

        The web app's default host name is used both as the origin host and
        as the host header sent to it.
        """
        if not web_app.host_name:
            raise ValueError(f"Web app {web_app.name} has no default host name")

        resource_group_name, profile_name = origin_group.scope
        origin = wait_for(
            self.cdn_client.afd_origins.begin_create(
                resource_group_name,
                profile_name,
                origin_group.name,
                name,
                build_origin(web_app.host_name, settings),
            ),
            timeout,
            f"origin {name}",
        )
        return self._handle(
            origin, ResourceKind.ORIGIN, origin_group.child_scope(), host_name=web_app.host_name
        )

    def create_route(
        self,
        endpoint: ResourceHandle,
        origin_group: ResourceHandle,
        name: str,
        settings: RouteSettings | None = None,
        timeout: float | None = None,
    ) -> ResourceHandle:
        settings = settings or RouteSettings()
        resource_group_name, profile_name = endpoint.scope
        route = wait_for(
            self.cdn_client.routes.begin_create(
                resource_group_name,
                profile_name,
                endpoint.name,
                name,
                Route(
                    origin_group=ResourceReference(id=origin_group.resource_id),
                    supported_protocols=list(settings.supported_protocols),
                    patterns_to_match=list(settings.patterns_to_match),
                    forwarding_protocol=settings.forwarding_protocol,
                    link_to_default_domain=settings.link_to_default_domain,
                    https_redirect=settings.https_redirect,
                    enabled_state=settings.enabled_state,
                ),
            ),
            timeout,
            f"route {name}",
        )
        return self._handle(
            route, ResourceKind.ROUTE, endpoint.child_scope(), host_name=endpoint.host_name
        )

    def delete_resource_group(self, resource_group: ResourceHandle) -> None:
        """Delete a resource group and everything inside it.

        Raises:
            CleanupError: If the delete fails or never reaches success
        """
        try:
            self.resource_client.resource_groups.begin_delete(resource_group.name).result()
        except ResourceNotFoundError as e:
            raise CleanupError(f"Resource group not found: {resource_group.name}") from e
        except Exception as e:
            raise CleanupError(
                f"Failed to delete resource group {resource_group.name}: "
                f"{LogSanitizer.sanitize_exception(e)}"
            ) from e

    @staticmethod
    def _handle(
        resource: Any,
        kind: ResourceKind,
        scope: tuple[str, ...],
        host_name: str | None = None,
    ) -> ResourceHandle:
        return ResourceHandle(
            resource_id=resource.id,
            name=resource.name,
            location=getattr(resource, "location", None) or FRONT_DOOR_LOCATION,
            kind=kind,
            scope=scope,
            host_name=host_name,
        )


def build_origin(host_name: str, settings: OriginSettings | None = None) -> AFDOrigin:
    """Build the SDK origin model for a backend host."""
    settings = settings or OriginSettings()
    return AFDOrigin(
        host_name=host_name,
        origin_host_header=host_name,
        http_port=settings.http_port,
        https_port=settings.https_port,
        priority=settings.priority,
        weight=settings.weight,
        enabled_state=settings.enabled_state,
    )


__all__ = [
    "FRONT_DOOR_LOCATION",
    "FRONT_DOOR_SKU",
    "AzureResourceClient",
    "build_origin",
    "wait_for",
]
