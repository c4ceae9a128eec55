"""Service principal authentication for afdeploy.

Credentials come from environment variables only and are turned into an
Azure Identity ``ClientSecretCredential``. The secret is never logged.

Environment variables:
    CLIENT_ID: Service principal application (client) ID
    CLIENT_SECRET: Service principal secret
    TENANT_ID: Azure AD tenant ID
    SUBSCRIPTION_ID: Subscription that receives the resources

Public API:
    AzureCredentials: Loaded service principal settings
    read_secondary_service_principal: Parse a client=/key= credentials file
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from azure.identity import ClientSecretCredential

from afdeploy.exceptions import CredentialError
from afdeploy.log_sanitizer import LogSanitizer

logger = logging.getLogger(__name__)

ENV_CLIENT_ID = "CLIENT_ID"
ENV_CLIENT_SECRET = "CLIENT_SECRET"
ENV_TENANT_ID = "TENANT_ID"
ENV_SUBSCRIPTION_ID = "SUBSCRIPTION_ID"


@dataclass(frozen=True)
class AzureCredentials:
    """Service principal settings (CRITICAL: never log client_secret)."""

    client_id: str
    client_secret: str
    tenant_id: str
    subscription_id: str

    def __repr__(self) -> str:
        """Prevent accidental exposure of the secret in logs."""
        return (
            f"AzureCredentials(client_id={self.client_id!r}, client_secret=***REDACTED***, "
            f"tenant_id={self.tenant_id!r}, subscription_id={self.subscription_id!r})"
        )

    __str__ = __repr__

    @classmethod
    def from_environment(cls) -> "AzureCredentials":
        """Load credentials from the environment.

        Raises:
            CredentialError: If any of the four variables is unset or empty
        """
        names = (ENV_CLIENT_ID, ENV_CLIENT_SECRET, ENV_TENANT_ID, ENV_SUBSCRIPTION_ID)
        values = {name: os.getenv(name, "").strip() for name in names}
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise CredentialError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(
            client_id=values[ENV_CLIENT_ID],
            client_secret=values[ENV_CLIENT_SECRET],
            tenant_id=values[ENV_TENANT_ID],
            subscription_id=values[ENV_SUBSCRIPTION_ID],
        )

    def create_credential(self) -> ClientSecretCredential:
        """Create an Azure Identity credential for this service principal.

        Raises:
            CredentialError: If the SDK rejects the configuration
        """
        try:
            return ClientSecretCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
        except Exception as e:
            safe_error = LogSanitizer.redact_values(str(e), [self.client_secret])
            raise CredentialError(
                f"Failed to create service principal credential: {safe_error}"
            ) from e


def read_secondary_service_principal(path: str | Path) -> tuple[str, str]:
    """Read client ID and secret from a service principal file.

    The file holds ``key=value`` lines; ``client`` is the client ID and
    ``key`` the secret. Lines without ``=`` are ignored. Keys that never
    appear come back as empty strings.

    Args:
        path: Path to the credentials file

    Returns:
        Tuple of (client_id, secret)

    Raises:
        CredentialError: If the file cannot be read
    """
    try:
        lines = Path(path).read_text().splitlines()
    except OSError as e:
        raise CredentialError(f"Cannot read service principal file {path}: {e}") from e

    client_id = ""
    secret = ""
    for line in lines:
        key, sep, value = line.strip().partition("=")
        if not sep:
            continue
        if key == "client":
            client_id = value
        elif key == "key":
            secret = value

    logger.debug(f"Loaded secondary service principal from {path}")
    return client_id, secret


__all__ = ["AzureCredentials", "read_secondary_service_principal"]
