"""Derive the completed version and in-flight transitions from update history."""

from __future__ import annotations

from collections.abc import Sequence

import semver
import structlog

from cluster_upgrade_gate.models import PROGRESSING, HistoryEntry, VersionedStatus
from cluster_upgrade_gate.versions import InvalidVersionError, parse

log = structlog.get_logger()


def current_version(history: Sequence[HistoryEntry]) -> str:
    """Return the cluster's current version from its update history.

    The first ``Completed`` entry, scanning newest first, wins. Without one the
    oldest entry, the originally installed version, is returned. An empty
    history yields ``""``, which only happens before the operator has recorded
    anything; callers treat it as unknown.
    """
    for entry in history:
        if entry.state == "Completed":
            log.debug("cluster_current_version", version=entry.version)
            return entry.version
    if history:
        return history[-1].version
    return ""


def minor_upgrade_in_progress(status: VersionedStatus, current: semver.Version) -> str | None:
    """Return the version a minor level upgrade to ``current`` started from.

    Returns None unless ``Progressing`` is True and the completed version has
    the same major as ``current`` and a strictly lower minor.
    """
    if not status.condition_is(PROGRESSING, "True"):
        return None
    completed = current_version(status.history)
    if not completed:
        return None
    try:
        completed_version = parse(completed)
    except InvalidVersionError:
        return None
    if completed_version.major == current.major and completed_version.minor < current.minor:
        return completed
    return None


def upgrade_in_progress(status: VersionedStatus) -> tuple[str, str] | None:
    """Return ``(completed, live)`` when a transition of any size is in flight.

    ``live`` is the status' desired version. Both must parse and differ by
    semver precedence, and ``Progressing`` must be True.
    """
    if not status.condition_is(PROGRESSING, "True"):
        return None
    completed = current_version(status.history)
    live = status.desired_version
    if not completed or not live:
        return None
    try:
        if parse(completed).compare(parse(live)) == 0:
            return None
    except InvalidVersionError:
        return None
    return completed, live
