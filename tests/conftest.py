"""
Shared test fixtures and configuration for afdeploy tests.

This module provides common fixtures used across all test types:
- Isolated DeployConfig with a capturing logger
- A recording fake of AzureResourceClient
- Service principal environment variables
"""

import logging
import os
from pathlib import Path

import pytest

from afdeploy.config import DeployConfig
from afdeploy.models import ResourceHandle, ResourceKind

SUBSCRIPTION = "/subscriptions/00000000-0000-0000-0000-000000000000"


# ============================================================================
# FAKE AZURE CLIENT
# ============================================================================


class FakeResourceClient:
    """Stand-in for AzureResourceClient that records calls in order.

    ``fail_on`` maps a method name to an exception raised on the call
    selected by ``fail_on_call`` (1-based) for that method.
    """

    def __init__(self, fail_on: dict[str, Exception] | None = None, fail_on_call: int = 1):
        self.fail_on = fail_on or {}
        self.fail_on_call = fail_on_call
        self.calls: list[tuple[str, str]] = []
        self.deleted: list[ResourceHandle] = []
        self.delete_error: Exception | None = None
        self.timeouts: list[tuple[str, float | None]] = []
        self._counts: dict[str, int] = {}

    def _enter(self, method: str, detail: str) -> None:
        self.calls.append((method, detail))
        self._counts[method] = self._counts.get(method, 0) + 1
        if method in self.fail_on and self._counts[method] == self.fail_on_call:
            raise self.fail_on[method]

    def methods_called(self) -> list[str]:
        return [method for method, _ in self.calls]

    def create_resource_group(self, name, location):
        self._enter("create_resource_group", location)
        return ResourceHandle(
            resource_id=f"{SUBSCRIPTION}/resourceGroups/{name}",
            name=name,
            location=location,
            kind=ResourceKind.RESOURCE_GROUP,
        )

    def create_web_app(self, resource_group, name, location, timeout=None):
        self.timeouts.append(("create_web_app", timeout))
        self._enter("create_web_app", location)
        return ResourceHandle(
            resource_id=f"{resource_group.resource_id}/providers/Microsoft.Web/sites/{name}",
            name=name,
            location=location,
            kind=ResourceKind.WEB_APP,
            scope=resource_group.child_scope(),
            host_name=f"{name}.azurewebsites.net",
        )

    def _child(self, method, parent, name, kind, host_name=None, timeout=None):
        self.timeouts.append((method, timeout))
        self._enter(method, name)
        return ResourceHandle(
            resource_id=f"{parent.resource_id}/{kind.value}/{name}",
            name=name,
            location="Global",
            kind=kind,
            scope=parent.child_scope(),
            host_name=host_name,
        )

    def create_profile(self, resource_group, name, timeout=None):
        return self._child(
            "create_profile", resource_group, name, ResourceKind.PROFILE, timeout=timeout
        )

    def create_endpoint(self, profile, name, timeout=None):
        return self._child(
            "create_endpoint",
            profile,
            name,
            ResourceKind.ENDPOINT,
            f"{name}.z01.azurefd.net",
            timeout,
        )

    def create_origin_group(self, profile, name, binding=None, timeout=None):
        self.binding = binding
        return self._child(
            "create_origin_group", profile, name, ResourceKind.ORIGIN_GROUP, timeout=timeout
        )

    def create_origin(self, origin_group, name, web_app, timeout=None):
        return self._child(
            "create_origin", origin_group, name, ResourceKind.ORIGIN, web_app.host_name, timeout
        )

    def create_route(self, endpoint, origin_group, name, timeout=None):
        return self._child(
            "create_route", endpoint, name, ResourceKind.ROUTE, endpoint.host_name, timeout
        )

    def delete_resource_group(self, resource_group):
        self.calls.append(("delete_resource_group", resource_group.name))
        self.deleted.append(resource_group)
        if self.delete_error is not None:
            raise self.delete_error


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def test_logger():
    """Logger isolated from the afdeploy default, captured by caplog."""
    logger = logging.getLogger("afdeploy.tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def deploy_config(tmp_path, test_logger):
    """DeployConfig rooted in tmp_path; tests patch time.sleep for SSH retries."""
    return DeployConfig(
        project_root=tmp_path,
        ssh_retry_delay=30.0,
        logger=test_logger,
    )


@pytest.fixture
def fake_client():
    return FakeResourceClient()


@pytest.fixture
def fake_client_factory():
    """Build FakeResourceClient instances with failure injection."""
    return FakeResourceClient


@pytest.fixture
def offline_http_checker():
    """HTTP checker replacement that never touches the network."""

    class _Checker:
        def __init__(self):
            self.urls: list[str] = []
            self.timeouts: list[float | None] = []

        def check_address(self, url, headers=None, timeout=None):
            self.urls.append(url)
            self.timeouts.append(timeout)
            return f"Ping: {url}: 200 OK"

    return _Checker()


@pytest.fixture
def azure_env(monkeypatch):
    """Service principal environment variables."""
    values = {
        "CLIENT_ID": "11111111-2222-3333-4444-555555555555",
        "CLIENT_SECRET": "super-secret-value",
        "TENANT_ID": "66666666-7777-8888-9999-000000000000",
        "SUBSCRIPTION_ID": "00000000-0000-0000-0000-000000000000",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    return values


@pytest.fixture
def clean_afdeploy_env(monkeypatch):
    """Remove AFDEPLOY_* and credential variables from the environment."""

    for key in list(os.environ):
        if key.startswith("AFDEPLOY_") or key in (
            "CLIENT_ID",
            "CLIENT_SECRET",
            "TENANT_ID",
            "SUBSCRIPTION_ID",
        ):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def asset_dir(tmp_path) -> Path:
    path = tmp_path / "Asset"
    path.mkdir()
    return path
