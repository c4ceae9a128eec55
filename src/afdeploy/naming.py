"""Name and sample credential generation for ephemeral resources."""

import random

# Azure resource names only need to be unique within a run; collisions are
# possible but acceptable for throwaway resources.
MAX_NAME_SUFFIX = 9999

SAMPLE_USERNAME = "tirekicker"
SAMPLE_PASSWORD = "azure12345QWE!"


def create_random_name(prefix: str) -> str:
    """Return prefix followed by a random integer in [0, 9999).

    Example:
        >>> create_random_name("CdnRG")  # doctest: +SKIP
        'CdnRG4821'
    """
    return f"{prefix}{random.randrange(MAX_NAME_SUFFIX)}"


def create_username() -> str:
    return SAMPLE_USERNAME


def create_password() -> str:
    return SAMPLE_PASSWORD


__all__ = ["create_password", "create_random_name", "create_username"]
