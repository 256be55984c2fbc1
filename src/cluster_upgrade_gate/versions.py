"""Semantic version parsing and transition classification."""

from __future__ import annotations

import re

import semver

# Optional leading "v", the major and, if present, the minor component.
_LOOSE_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?")


class InvalidVersionError(ValueError):
    """Raised when a string cannot be parsed as a semantic version."""

    def __init__(self, version: str, detail: str) -> None:
        self.version = version
        super().__init__(f"Invalid version {version!r}: {detail}")


def parse(version: str) -> semver.Version:
    """Parse a version string into a semantic version.

    Surrounding whitespace and a single leading lowercase ``v`` are ignored,
    and missing minor or patch components default to zero, so ``"v4.1"``
    parses as ``4.1.0``. An uppercase ``V`` is rejected. Everything else must
    follow semver 2.0.0.

    Raises:
        InvalidVersionError: If the string is empty or not a semantic version.
    """
    if not isinstance(version, str):
        raise InvalidVersionError(str(version), "version must be a string")
    text = version.strip()
    if text.startswith("v"):
        text = text[1:]
    if not text:
        raise InvalidVersionError(version, "version string empty")
    try:
        return semver.Version.parse(text, optional_minor_and_patch=True)
    except ValueError as e:
        raise InvalidVersionError(version, str(e)) from e


def compare(a: semver.Version, b: semver.Version) -> int:
    """Return -1, 0 or 1 by semver precedence. Build metadata is ignored."""
    return a.compare(b)


def is_minor_bump(current: semver.Version, target: semver.Version) -> bool:
    """True when the major matches and the minor differs, in either direction."""
    return current.major == target.major and current.minor != target.minor


def is_patch_only(current: semver.Version, target: semver.Version) -> bool:
    """True when major and minor both match, whatever the patch direction."""
    return current.major == target.major and current.minor == target.minor


def effective_minor(version: str) -> str:
    """Return the minor component of a loosely formatted version string.

    Works on strings ``parse`` rejects, e.g. ``"v4.7.12.3+foo"`` yields ``"7"``.
    Returns an empty string when no minor component can be found.
    """
    match = _LOOSE_VERSION_RE.match(version.strip()) if version else None
    if match is None or match.group(2) is None:
        return ""
    return match.group(2)
