"""Front Door deployment orchestration.

Creates the deployment graph in dependency order and always tears it down:

    resource group
      -> one web app per region
      -> Front Door profile -> endpoint -> origin group
      -> one origin per web app
      -> route (endpoint -> origin group)

Every resource lives inside the resource group, so a single resource group
delete cleans up the whole run. Teardown runs on every exit path: normal
completion, a failed step, a deadline, cancellation or KeyboardInterrupt.

Public API:
    FrontDoorOrchestrator: Provision and tear down a deployment
    DeploymentSession: Handles created during one run
    DEFAULT_REGIONS: Regions used when none are given

Example:
    >>> orchestrator = FrontDoorOrchestrator(client, DeployConfig())
    >>> session = orchestrator.run(["eastus", "westus"])
"""

import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from afdeploy.config import DeployConfig
from afdeploy.exceptions import ProvisioningError
from afdeploy.http_check import HttpChecker
from afdeploy.log_sanitizer import LogSanitizer
from afdeploy.models import OriginGroupBinding, ResourceHandle, ResourceKind
from afdeploy.naming import create_random_name
from afdeploy.resources import AzureResourceClient

DEFAULT_REGIONS = (
    # 2 in US
    "eastus",
    "westus",
    # 2 in EU
    "northeurope",
    "westeurope",
    # 2 in Southeast Asia
    "eastasia",
    "southeastasia",
    # 1 in Brazil
    "brazilsouth",
    # 1 in Japan
    "japanwest",
)

NO_CLEANUP_MESSAGE = "Did not create any resources in Azure. No clean up is necessary"


@dataclass
class DeploymentSession:
    """Resources created during one provisioning run.

    Attributes:
        container: The resource group; deleting it removes everything else
        handles: Every created handle in creation order, container included
        torn_down: Whether teardown already ran for this session
        deadline: ``time.monotonic()`` value after which no step may start
            or keep waiting; None for no deadline
    """

    container: ResourceHandle | None = None
    handles: list[ResourceHandle] = field(default_factory=list)
    torn_down: bool = False
    deadline: float | None = None

    def record(self, handle: ResourceHandle) -> ResourceHandle:
        """Add a handle, keeping every resource inside the container's scope."""
        if handle.kind == ResourceKind.RESOURCE_GROUP:
            if self.container is not None:
                raise ProvisioningError("Session already has a resource group")
            self.container = handle
        elif self.container is None or handle.resource_group != self.container.name:
            raise ProvisioningError(
                f"{handle.kind.value} {handle.name} is outside the session's resource group"
            )
        self.handles.append(handle)
        return handle

    def of_kind(self, kind: ResourceKind) -> list[ResourceHandle]:
        return [handle for handle in self.handles if handle.kind == kind]

    def count(self, kind: ResourceKind) -> int:
        return len(self.of_kind(kind))

    def _single(self, kind: ResourceKind) -> ResourceHandle | None:
        matches = self.of_kind(kind)
        return matches[0] if matches else None

    @property
    def web_apps(self) -> list[ResourceHandle]:
        return self.of_kind(ResourceKind.WEB_APP)

    @property
    def origins(self) -> list[ResourceHandle]:
        return self.of_kind(ResourceKind.ORIGIN)

    @property
    def profile(self) -> ResourceHandle | None:
        return self._single(ResourceKind.PROFILE)

    @property
    def endpoint(self) -> ResourceHandle | None:
        return self._single(ResourceKind.ENDPOINT)

    @property
    def origin_group(self) -> ResourceHandle | None:
        return self._single(ResourceKind.ORIGIN_GROUP)

    @property
    def route(self) -> ResourceHandle | None:
        return self._single(ResourceKind.ROUTE)


class FrontDoorOrchestrator:
    """Provision a multi-region Front Door deployment and clean it up.

    Creation is sequential: each call waits for its long-running operation
    to finish before the next begins. Step failures are not retried; they
    abort the chain and trigger teardown.
    """

    WEB_APP_PREFIX = "sampletestwebapp"

    def __init__(
        self,
        client: AzureResourceClient,
        config: DeployConfig,
        http_checker: HttpChecker | None = None,
        binding: OriginGroupBinding | None = None,
        cancel_event: threading.Event | None = None,
        name_factory: Callable[[str], str] = create_random_name,
    ):
        """Initialize orchestrator.

        Args:
            client: Resource client used for every create and delete
            config: Deployment configuration (logger, deadline, locations)
            http_checker: Reachability checker (default: built from config)
            binding: Origin group probe and balancing policy
            cancel_event: Set from another thread to stop before the next step
            name_factory: Generates resource names from a prefix
        """
        self.client = client
        self.config = config
        self.logger = config.logger
        self.http_checker = http_checker or HttpChecker(config)
        self.binding = binding or OriginGroupBinding()
        self.cancel_event = cancel_event
        self.name_factory = name_factory

    def run(self, regions: Sequence[str] = DEFAULT_REGIONS) -> DeploymentSession | None:
        """Provision, logging a terminal failure instead of raising it.

        Returns:
            The session on success, None if provisioning failed
        """
        try:
            return self.provision(regions)
        except ProvisioningError:
            self.logger.exception("Provisioning failed")
            return None

    def provision(self, regions: Sequence[str]) -> DeploymentSession:
        """Create the deployment graph, then delete it.

        Args:
            regions: One web app is created per region, in order

        Returns:
            Session listing every resource that was created

        Raises:
            ProvisioningError: If any step fails, or the deadline passes or
                the cancel event is set before the last step finishes;
                teardown has already run
        """
        regions = list(regions)
        if not regions:
            raise ProvisioningError("At least one region is required")

        session = DeploymentSession()
        if self.config.deadline_seconds is not None:
            session.deadline = time.monotonic() + self.config.deadline_seconds

        try:
            self._provision(session, regions)
        except ProvisioningError:
            raise
        except Exception as e:
            raise ProvisioningError(
                f"Provisioning failed: {LogSanitizer.sanitize_exception(e)}"
            ) from e
        finally:
            self.teardown(session)

        return session

    def _provision(self, session: DeploymentSession, regions: list[str]) -> None:
        self._checkpoint(session, "resource group")
        self.logger.info("Creating a resource group..")
        resource_group = session.record(
            self.client.create_resource_group(
                self.name_factory("CdnRG"), self.config.resource_group_location
            )
        )
        self.logger.info(f"Created a resource group with name: {resource_group.name}")

        for region in regions:
            remaining = self._checkpoint(session, f"web app in {region}")
            self._create_web_app(session, resource_group, region, remaining)

        remaining = self._checkpoint(session, "profile")
        self.logger.info("Creating a CDN Profile")
        profile = session.record(
            self.client.create_profile(
                resource_group, self.name_factory("AFDProfile"), timeout=remaining
            )
        )

        remaining = self._checkpoint(session, "endpoint")
        self.logger.info("Creating a FrontDoor endpoint..")
        endpoint = session.record(
            self.client.create_endpoint(
                profile, self.name_factory("afdtestendpoint"), timeout=remaining
            )
        )

        remaining = self._checkpoint(session, "origin group")
        self.logger.info("Creating an origin group..")
        origin_group = session.record(
            self.client.create_origin_group(
                profile, self.name_factory("AfdOriginGroup"), self.binding, timeout=remaining
            )
        )

        for web_app in session.web_apps:
            remaining = self._checkpoint(session, f"origin for {web_app.name}")
            self.logger.info(f"Creating an origin for {web_app.location}-{web_app.name}")
            session.record(
                self.client.create_origin(
                    origin_group, self.name_factory("AfdOrigin"), web_app, timeout=remaining
                )
            )

        remaining = self._checkpoint(session, "route")
        self.logger.info("Creating a route")
        route = session.record(
            self.client.create_route(
                endpoint, origin_group, self.name_factory("AfdRoute"), timeout=remaining
            )
        )
        self._checkpoint(session, "reporting success")

        self.logger.info("Usually, deploying Azure Front Door takes a few minutes.")
        self.logger.info(
            f"After the AFD deployment is complete, you can browse "
            f"{route.host_name or endpoint.name} to verify."
        )

    def _create_web_app(
        self,
        session: DeploymentSession,
        resource_group: ResourceHandle,
        region: str,
        remaining: float | None,
    ) -> ResourceHandle:
        name = self.name_factory(self.WEB_APP_PREFIX)
        self.logger.info(f"Creating {region} web app: {name}...")
        web_app = session.record(
            self.client.create_web_app(resource_group, name, region, timeout=remaining)
        )

        self.logger.info(f"Created web app {web_app.name}")
        self.logger.info(f"CURLing {web_app.host_name}...")
        remaining = self._checkpoint(session, f"reachability check of {web_app.name}")
        self._diagnose(f"http://{web_app.host_name}", remaining)
        return web_app

    def _diagnose(self, url: str, timeout: float | None) -> None:
        """Log a reachability check; the outcome never affects provisioning."""
        try:
            self.logger.info(self.http_checker.check_address(url, timeout=timeout))
        except Exception as e:
            self.logger.warning(f"Reachability check failed for {url}: {e}")

    @staticmethod
    def _remaining(session: DeploymentSession) -> float | None:
        if session.deadline is None:
            return None
        return session.deadline - time.monotonic()

    def _checkpoint(self, session: DeploymentSession, step: str) -> float | None:
        """Stop before a step if the run was cancelled or ran out of time.

        Returns:
            Seconds left before the deadline, or None without a deadline
        """
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ProvisioningError(f"Provisioning cancelled before {step}")
        remaining = self._remaining(session)
        if remaining is not None and remaining <= 0:
            raise ProvisioningError(
                f"Provisioning deadline of {self.config.deadline_seconds}s exceeded before {step}"
            )
        return remaining

    def teardown(self, session: DeploymentSession) -> None:
        """Delete the session's resource group. Never raises.

        Runs at most once per session; later calls do nothing.
        """
        if session.torn_down:
            return
        session.torn_down = True

        container = session.container
        if container is None:
            self.logger.info(NO_CLEANUP_MESSAGE)
            return

        try:
            self.logger.info(f"Deleting Resource Group: {container.resource_id}")
            self.client.delete_resource_group(container)
            self.logger.info(f"Deleted Resource Group: {container.resource_id}")
        except Exception as e:
            # CleanupError from the client, or anything the SDK let through
            self.logger.debug(f"Cleanup failed: {LogSanitizer.sanitize_exception(e)}")
            self.logger.info(NO_CLEANUP_MESSAGE)

    def summary(self, session: DeploymentSession) -> list[dict[str, Any]]:
        """Rows describing each created resource, for display."""
        return [
            {
                "kind": handle.kind.value,
                "name": handle.name,
                "location": handle.location,
                "host": handle.host_name or "",
            }
            for handle in session.handles
        ]


__all__ = [
    "DEFAULT_REGIONS",
    "NO_CLEANUP_MESSAGE",
    "DeploymentSession",
    "FrontDoorOrchestrator",
]
