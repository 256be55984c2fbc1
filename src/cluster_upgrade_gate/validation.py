"""Input validation helpers."""

from __future__ import annotations

import re

# RFC 1123 subdomain: lowercase alphanumeric, '-' and '.', starts/ends with alphanumeric
_RESOURCE_NAME_RE = re.compile(r"^[a-z0-9]([a-z0-9.\-]{0,251}[a-z0-9])?$")

_MAX_VERSION_LENGTH = 256


def validate_resource_name(name: str) -> None:
    """Validate a cluster-scoped object name against RFC 1123."""
    if not _RESOURCE_NAME_RE.match(name):
        msg = f"Invalid resource name: {name!r}. Must be a valid RFC 1123 subdomain."
        raise ValueError(msg)


def validate_desired_version(desired_version: str) -> None:
    """Reject requested versions that are empty or unreasonably long.

    Semantic checks belong to the precondition itself, which reports a
    malformed version as a blocking verdict rather than an exception.
    """
    if not desired_version or not desired_version.strip():
        msg = "Invalid desired version: must not be empty."
        raise ValueError(msg)
    if len(desired_version) > _MAX_VERSION_LENGTH:
        msg = f"Invalid desired version: longer than {_MAX_VERSION_LENGTH} characters."
        raise ValueError(msg)
