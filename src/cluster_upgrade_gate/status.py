"""Load the ClusterVersion object and convert it to an immutable snapshot."""

from __future__ import annotations

from typing import Any, Protocol

import structlog

from cluster_upgrade_gate.models import (
    ComponentOverride,
    Condition,
    HistoryEntry,
    VersionedStatus,
)
from cluster_upgrade_gate.utils import parse_iso_timestamp

log = structlog.get_logger()

_CONDITION_STATUSES = {"True", "False", "Unknown"}


class ClusterVersionLister(Protocol):
    """Lookup-by-key access to raw ClusterVersion objects.

    ``get`` returns None when the object (or its API) does not exist and
    raises for any other failure.
    """

    async def get(self, key: str) -> dict[str, Any] | None: ...


def _condition(raw: dict[str, Any]) -> Condition:
    status = raw.get("status")
    if status not in _CONDITION_STATUSES:
        status = "Unknown"
    return Condition(
        type=str(raw.get("type", "")),
        status=status,
        reason=raw.get("reason") or "",
        message=raw.get("message") or "",
        last_transition_time=parse_iso_timestamp(raw.get("lastTransitionTime")),
    )


def _history_entry(raw: dict[str, Any]) -> HistoryEntry:
    return HistoryEntry(
        version=raw.get("version") or "",
        state=raw.get("state"),
        started_time=parse_iso_timestamp(raw.get("startedTime")),
        completion_time=parse_iso_timestamp(raw.get("completionTime")),
    )


def _override(raw: dict[str, Any]) -> ComponentOverride:
    return ComponentOverride(
        kind=raw.get("kind") or "",
        group=raw.get("group") or "",
        namespace=raw.get("namespace") or "",
        name=raw.get("name") or "",
        unmanaged=bool(raw.get("unmanaged")),
    )


def status_from_object(obj: dict[str, Any]) -> VersionedStatus:
    """Build a VersionedStatus from a raw ClusterVersion object.

    Raises:
        pydantic.ValidationError: If the object violates the snapshot
            invariants, e.g. a Partial history entry that is not the newest.
    """
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    desired = status.get("desired") or {}

    return VersionedStatus(
        desired_version=desired.get("version") or "",
        history=tuple(_history_entry(h) for h in status.get("history") or []),
        conditions=tuple(_condition(c) for c in status.get("conditions") or []),
        overrides=tuple(_override(o) for o in spec.get("overrides") or []),
    )


async def load_status(lister: ClusterVersionLister, key: str) -> VersionedStatus | None:
    """Fetch the ClusterVersion named ``key`` and snapshot it.

    Returns None when the object does not exist. Lookup and conversion
    errors propagate to the caller.
    """
    obj = await lister.get(key)
    if obj is None:
        return None
    snapshot = status_from_object(obj)
    log.debug(
        "cluster_version_loaded",
        key=key,
        desired_version=snapshot.desired_version,
        history_entries=len(snapshot.history),
    )
    return snapshot
