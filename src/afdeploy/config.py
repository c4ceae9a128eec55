"""Runtime configuration for afdeploy.

Settings are read once into a ``DeployConfig`` and passed explicitly into the
orchestrator, the remote executor and the HTTP checker. Nothing here is
process-global, so tests can build isolated configs side by side.

Design Philosophy:
- Sensible defaults: Works out of the box
- Environment-aware: Can be overridden via env vars
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from afdeploy.exceptions import ConfigError
from afdeploy.log_sanitizer import LogSanitizer

DEFAULT_LOGGER_NAME = "afdeploy"


@dataclass
class DeployConfig:
    """afdeploy configuration settings.

    Attributes:
        project_root: Directory holding the ``Asset`` folder with ARM templates
        playback: Skip network side effects (HTTP checks, SSH deprovisioning)
        resource_group_location: Azure region for the resource group
        ssh_max_attempts: Total SSH attempts before giving up
        ssh_retry_delay: Constant delay between SSH attempts, in seconds
        ssh_connect_timeout: Per-attempt SSH connect timeout, in seconds
        http_timeout: Timeout for reachability checks, in seconds
        deadline_seconds: Optional wall-clock budget for a provisioning run
        logger: Logger that receives progress narration
    """

    project_root: Path = field(default_factory=lambda: Path("."))
    playback: bool = False
    resource_group_location: str = "eastus"

    # Remote command execution
    ssh_max_attempts: int = 3
    ssh_retry_delay: float = 30.0
    ssh_connect_timeout: float = 30.0

    # Reachability checks
    http_timeout: float = 300.0

    deadline_seconds: float | None = None
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(DEFAULT_LOGGER_NAME), repr=False
    )

    def __post_init__(self):
        """Validate configuration."""
        self.project_root = Path(self.project_root)
        if self.ssh_max_attempts < 1:
            raise ConfigError("ssh_max_attempts must be at least 1")
        if self.ssh_retry_delay < 0:
            raise ConfigError("ssh_retry_delay cannot be negative")
        if self.ssh_connect_timeout <= 0:
            raise ConfigError("ssh_connect_timeout must be positive")
        if self.http_timeout <= 0:
            raise ConfigError("http_timeout must be positive")
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise ConfigError("deadline_seconds must be positive")

    @classmethod
    def from_environment(cls, **overrides) -> "DeployConfig":
        """Load configuration from environment variables.

        Environment variables (all optional):
            AFDEPLOY_PROJECT_ROOT: Project root (default: .)
            AFDEPLOY_PLAYBACK: Skip network side effects (default: false)
            AFDEPLOY_RESOURCE_GROUP_LOCATION: Resource group region (default: eastus)
            AFDEPLOY_SSH_MAX_ATTEMPTS: SSH attempts (default: 3)
            AFDEPLOY_SSH_RETRY_DELAY: Seconds between SSH attempts (default: 30.0)
            AFDEPLOY_SSH_CONNECT_TIMEOUT: SSH connect timeout (default: 30.0)
            AFDEPLOY_HTTP_TIMEOUT: Reachability check timeout (default: 300.0)
            AFDEPLOY_DEADLINE_SECONDS: Provisioning deadline (default: none)

        Args:
            **overrides: Explicit values that win over the environment

        Returns:
            DeployConfig with values from overrides, environment or defaults

        Raises:
            ConfigError: If a value cannot be parsed or fails validation
        """
        logger = overrides.get("logger") or logging.getLogger(DEFAULT_LOGGER_NAME)
        env = {key: value for key, value in os.environ.items() if key.startswith("AFDEPLOY_")}
        logger.debug(f"Loading configuration from {LogSanitizer.sanitize_env_vars(env)}")

        deadline = os.getenv("AFDEPLOY_DEADLINE_SECONDS")
        values = {
            "project_root": Path(os.getenv("AFDEPLOY_PROJECT_ROOT", ".")),
            "playback": _parse_bool("AFDEPLOY_PLAYBACK", os.getenv("AFDEPLOY_PLAYBACK", "false")),
            "resource_group_location": os.getenv("AFDEPLOY_RESOURCE_GROUP_LOCATION", "eastus"),
            "ssh_max_attempts": _parse_number(
                "AFDEPLOY_SSH_MAX_ATTEMPTS", os.getenv("AFDEPLOY_SSH_MAX_ATTEMPTS", "3"), int
            ),
            "ssh_retry_delay": _parse_number(
                "AFDEPLOY_SSH_RETRY_DELAY", os.getenv("AFDEPLOY_SSH_RETRY_DELAY", "30.0"), float
            ),
            "ssh_connect_timeout": _parse_number(
                "AFDEPLOY_SSH_CONNECT_TIMEOUT",
                os.getenv("AFDEPLOY_SSH_CONNECT_TIMEOUT", "30.0"),
                float,
            ),
            "http_timeout": _parse_number(
                "AFDEPLOY_HTTP_TIMEOUT", os.getenv("AFDEPLOY_HTTP_TIMEOUT", "300.0"), float
            ),
            "deadline_seconds": (
                _parse_number("AFDEPLOY_DEADLINE_SECONDS", deadline, float) if deadline else None
            ),
        }
        values.update(overrides)
        return cls(**values)


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{name} must be a boolean, got: {raw!r}")


def _parse_number(name: str, raw: str, kind: type) -> int | float:
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a {kind.__name__}, got: {raw!r}") from e


__all__ = ["DEFAULT_LOGGER_NAME", "DeployConfig"]
