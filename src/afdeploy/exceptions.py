"""Custom exceptions for afdeploy."""


class AfdeployError(Exception):
    """Base exception for afdeploy errors."""

    pass


class ConfigError(AfdeployError):
    """Configuration value is missing or invalid."""

    pass


class CredentialError(AfdeployError):
    """Service principal credentials could not be loaded."""

    pass


class ProvisioningError(AfdeployError):
    """A step in the resource dependency chain failed."""

    pass


class CleanupError(AfdeployError):
    """Deleting the resource group failed."""

    pass


class RemoteExecutionError(AfdeployError):
    """Remote command failed after exhausting all attempts.

    Attributes:
        attempts: Number of attempts made
        last_error: Failure raised by the final attempt
    """

    def __init__(self, message: str, attempts: int = 0, last_error: Exception | None = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class TemplateError(AfdeployError):
    """ARM template could not be loaded or patched."""

    pass
