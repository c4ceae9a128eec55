"""HTTP reachability helpers.

Used after each web app is created to log whether its default host name
answers. Results are diagnostic only: failures are logged and a fallback
string is returned instead of raising.
"""

import logging

import requests

from afdeploy.config import DeployConfig
from afdeploy.log_sanitizer import LogSanitizer

PLAYBACK_RESULT = "[Running in PlaybackMode]"


class HttpChecker:
    """GET/POST helpers that never raise on network failures."""

    def __init__(self, config: DeployConfig):
        self.config = config
        self.logger: logging.Logger = config.logger

    def check_address(
        self, url: str, headers: dict[str, str] | None = None, timeout: float | None = None
    ) -> str:
        """GET url and describe the response status.

        Args:
            url: Address to request
            headers: Optional request headers
            timeout: Upper bound in seconds, capped at ``config.http_timeout``

        Returns:
            ``"Ping: <url>: <status>"`` on a response, or the playback
            marker when running in playback mode or the request fails
        """
        if self.config.playback:
            return PLAYBACK_RESULT

        try:
            response = requests.get(url, headers=headers, timeout=self._timeout(timeout))
            return f"Ping: {url}: {_status_text(response)}"
        except requests.RequestException as e:
            self.logger.warning(LogSanitizer.sanitize_exception(e))

        return PLAYBACK_RESULT

    def post_address(
        self,
        url: str,
        body: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> str:
        """POST body to url and describe the response."""
        if self.config.playback:
            return PLAYBACK_RESULT

        try:
            response = requests.post(
                url, data=body, headers=headers, timeout=self._timeout(timeout)
            )
            return f"StatusCode: {response.status_code}, ReasonPhrase: '{response.reason}'"
        except requests.RequestException as e:
            self.logger.warning(LogSanitizer.sanitize_exception(e))

        return PLAYBACK_RESULT

    def _timeout(self, timeout: float | None) -> float:
        if timeout is None:
            return self.config.http_timeout
        return min(self.config.http_timeout, timeout)


def _status_text(response: requests.Response) -> str:
    if response.reason:
        return f"{response.status_code} {response.reason}"
    return str(response.status_code)


__all__ = ["PLAYBACK_RESULT", "HttpChecker"]
