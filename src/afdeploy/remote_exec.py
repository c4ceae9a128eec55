"""Remote command execution over SSH with bounded retry.

Each attempt opens a fresh paramiko connection with password
authentication, runs a single command and closes the connection, whatever
the outcome. Failed attempts are retried after a constant delay until the
attempt budget is spent; the final failure is surfaced to the caller.

Retry state machine:

    ATTEMPTING --success--> SUCCEEDED
    ATTEMPTING --failure--> RETRY_WAIT --delay--> ATTEMPTING
    ATTEMPTING --failure, no attempts left--> EXHAUSTED
    RETRY_WAIT --cancel event set--> EXHAUSTED

Authentication failures skip straight to EXHAUSTED: wrong credentials do not
get better by waiting.

Security:
- Passwords never appear in logs or exception messages
- Connections are never reused across attempts
"""

import logging
import threading
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from enum import Enum

import paramiko

from afdeploy.config import DeployConfig
from afdeploy.exceptions import RemoteExecutionError
from afdeploy.log_sanitizer import LogSanitizer

DEPROVISION_COMMAND = "sudo waagent -deprovision+user --force"

NON_RETRYABLE_ERRORS: tuple[type[Exception], ...] = (paramiko.AuthenticationException,)


class RetryPhase(Enum):
    """Phases of a remote execution's retry loop."""

    ATTEMPTING = "attempting"
    RETRY_WAIT = "retry_wait"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryState:
    """Mutable retry bookkeeping for one ``execute`` call."""

    remaining: int
    delay: float
    phase: RetryPhase = RetryPhase.ATTEMPTING
    attempts: int = 0
    last_error: Exception | None = None

    def record_success(self) -> None:
        self.attempts += 1
        self.phase = RetryPhase.SUCCEEDED

    def record_failure(self, error: Exception, retryable: bool = True) -> None:
        self.attempts += 1
        self.remaining -= 1
        self.last_error = error
        if retryable and self.remaining > 0:
            self.phase = RetryPhase.RETRY_WAIT
        else:
            self.phase = RetryPhase.EXHAUSTED

    def resume(self) -> None:
        self.phase = RetryPhase.ATTEMPTING

    def cancel(self) -> None:
        self.phase = RetryPhase.EXHAUSTED


class RemoteCommandExecutor:
    """Run a command on a remote host over SSH, retrying whole attempts.

    Example:
        >>> executor = RemoteCommandExecutor(DeployConfig())
        >>> output = executor.execute("10.0.0.4", 22, "azureuser", "s3cret", "uptime")
    """

    def __init__(
        self,
        config: DeployConfig,
        client_factory: Callable[[], paramiko.SSHClient] = paramiko.SSHClient,
        cancel_event: threading.Event | None = None,
    ):
        """Initialize executor.

        Args:
            config: Retry budget, delay, connect timeout and logger
            client_factory: Builds a new SSH client for each attempt
            cancel_event: Set from another thread to stop before the next
                attempt or to cut a retry delay short
        """
        self.config = config
        self.logger: logging.Logger = config.logger
        self.client_factory = client_factory
        self.cancel_event = cancel_event or threading.Event()

    def execute(
        self,
        host: str,
        port: int,
        username: str,
        secret: str,
        command: str | None,
    ) -> str | None:
        """Execute a command on the remote host.

        Args:
            host: Remote host name or IP address
            port: SSH port
            username: Login user
            secret: Login password
            command: Command to run; None only checks that login works

        Returns:
            Captured stdout of the first successful attempt (None when no
            command was given)

        Raises:
            RemoteExecutionError: After the attempt budget is spent, on a
                non-retryable failure, or when the cancel event is set;
                chained to the last attempt's error when there was one
        """
        state = RetryState(
            remaining=self.config.ssh_max_attempts, delay=self.config.ssh_retry_delay
        )

        if self.cancel_event.is_set():
            raise RemoteExecutionError(
                f"Remote command on {host}:{port} cancelled before the first attempt"
            )

        while True:
            try:
                output = self._attempt(host, port, username, secret, command)
            except Exception as e:
                state.record_failure(e, retryable=not isinstance(e, NON_RETRYABLE_ERRORS))
                reason = LogSanitizer.redact_values(
                    LogSanitizer.sanitize_exception(e), [secret]
                )

                if state.phase == RetryPhase.EXHAUSTED:
                    self.logger.error(
                        f"SSH to {username}@{host}:{port} failed after "
                        f"{state.attempts} attempt(s): {reason}"
                    )
                    raise RemoteExecutionError(
                        f"Remote command on {host}:{port} failed after "
                        f"{state.attempts} attempt(s): {reason}",
                        attempts=state.attempts,
                        last_error=e,
                    ) from e

                self.logger.warning(
                    f"SSH attempt {state.attempts}/{self.config.ssh_max_attempts} to "
                    f"{host}:{port} failed, retrying in {state.delay:.0f}s: {reason}"
                )
                if self.cancel_event.wait(state.delay):
                    state.cancel()
                    raise RemoteExecutionError(
                        f"Remote command on {host}:{port} cancelled after "
                        f"{state.attempts} attempt(s): {reason}",
                        attempts=state.attempts,
                        last_error=e,
                    ) from e
                state.resume()
                continue

            state.record_success()
            if state.attempts > 1:
                self.logger.info(f"SSH to {host}:{port} succeeded on attempt {state.attempts}")
            return output

    def _attempt(
        self,
        host: str,
        port: int,
        username: str,
        secret: str,
        command: str | None,
    ) -> str | None:
        """One connect-and-run attempt on a fresh connection."""
        client = self.client_factory()
        try:
            # Azure VMs are ephemeral with fresh host keys on every deploy
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())  # nosec B507
            client.connect(
                hostname=host,
                port=port,
                username=username,
                password=secret,
                timeout=self.config.ssh_connect_timeout,
                allow_agent=False,
                look_for_keys=False,
            )
            if command is None:
                return None

            _, stdout, _ = client.exec_command(command)
            output = stdout.read().decode("utf-8", errors="replace")
            exit_status = stdout.channel.recv_exit_status()
            self.logger.debug(f"Command on {host} exited with status {exit_status}")
            return output
        finally:
            with suppress(Exception):  # release must not mask the attempt's outcome
                client.close()

    def deprovision_agent(self, host: str, port: int, username: str, password: str) -> str | None:
        """Deprovision the Azure Linux agent on a VM.

        Returns:
            Command output, or None in playback mode

        Raises:
            RemoteExecutionError: If every SSH attempt fails
        """
        self.logger.info(f"is mocked:{self.config.playback}")
        if self.config.playback:
            return None

        self.logger.info(f"Trying to de-provision: {host}")
        output = self.execute(host, port, username, password, DEPROVISION_COMMAND)
        self.logger.info(f"ssh connection status: {output}")
        return output


__all__ = [
    "DEPROVISION_COMMAND",
    "RemoteCommandExecutor",
    "RetryPhase",
    "RetryState",
]
