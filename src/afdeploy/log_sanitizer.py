"""Log sanitization for preventing secret leakage.

Redacts service principal secrets and SSH passwords from messages before
they reach logs or exception text. Error strings from the Azure SDK and
paramiko can echo request bodies or connection parameters, so anything
derived from a caught exception goes through here first.

Design Philosophy:
- Security first: err on side of over-redaction
- Pattern-based: not brittle keyword matching
"""

import re
from re import Pattern


class LogSanitizer:
    """Sanitize sensitive data from logs and error messages.

    All methods are class methods and can be called without instantiation.
    """

    REDACTED = "[REDACTED]"

    # Order matters: more specific patterns first
    SECRET_PATTERNS: dict[str, Pattern] = {
        "client_secret_env": re.compile(
            r"((?:AZURE_)?CLIENT_SECRET[\"']?\s*[:=]\s*[\"']?)([^\s\"'&,\)]+)",
            re.IGNORECASE,
        ),
        "client_secret_assignment": re.compile(
            r'(client[_-]?secret["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)',
            re.IGNORECASE,
        ),
        "password": re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)', re.IGNORECASE),
        "authorization_bearer": re.compile(r"(Authorization:\s*Bearer\s+)([^\s]+)", re.IGNORECASE),
        "access_token": re.compile(
            r'(access[_-]?token["\']?\s*[:=]\s*["\']?)([^\s"\'&,\)]+)',
            re.IGNORECASE,
        ),
    }

    # Environment variables whose values are never shown
    SENSITIVE_ENV_KEYS = frozenset(
        {"CLIENT_SECRET", "AZURE_CLIENT_SECRET", "AFDEPLOY_SSH_PASSWORD"}
    )

    @classmethod
    def sanitize(cls, message: str) -> str:
        """Redact all known secret patterns from a message.

        Examples:
            >>> LogSanitizer.sanitize("client_secret=abc123")
            'client_secret=[REDACTED]'
            >>> LogSanitizer.sanitize("login failed password: hunter2")
            'login failed password: [REDACTED]'
        """
        if not isinstance(message, str):
            message = str(message)

        result = message
        for pattern in cls.SECRET_PATTERNS.values():
            result = pattern.sub(r"\1" + cls.REDACTED, result)
        return result

    @classmethod
    def sanitize_exception(cls, exc: BaseException) -> str:
        """Return ``"<ExceptionType>: <sanitized message>"`` for an exception."""
        return f"{type(exc).__name__}: {cls.sanitize(str(exc))}"

    @classmethod
    def redact_values(cls, message: str, secrets: list[str]) -> str:
        """Replace literal secret values (e.g. a known password) in a message."""
        result = cls.sanitize(message)
        for secret in secrets:
            if secret:
                result = result.replace(secret, cls.REDACTED)
        return result

    @classmethod
    def sanitize_env_vars(cls, env_dict: dict[str, str]) -> dict[str, str]:
        """Return a copy of env_dict with sensitive values redacted."""
        return {
            key: cls.REDACTED if key.upper() in cls.SENSITIVE_ENV_KEYS else value
            for key, value in env_dict.items()
        }


__all__ = ["LogSanitizer"]
