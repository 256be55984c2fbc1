"""Shared test fixtures and builders."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from cluster_upgrade_gate.config import load_fleet
from cluster_upgrade_gate.models import (
    ComponentOverride,
    Condition,
    HistoryEntry,
    VersionedStatus,
)

CLUSTERS_YAML = """\
clusters:
  dev-east:
    environment: dev
    kubeconfig_context: dev-east-admin
  staging-east:
    environment: staging
    kubeconfig_context: staging-east-admin
  prod-east:
    environment: prod
    kubeconfig_context: prod-east-admin
"""


@pytest.fixture(scope="session", autouse=True)
def fleet(tmp_path_factory: pytest.TempPathFactory) -> Iterator[None]:
    """Load a three-cluster configuration for the whole test session."""
    path = tmp_path_factory.mktemp("config") / "clusters.yaml"
    path.write_text(CLUSTERS_YAML)
    load_fleet(path)
    yield


class FakeLister:
    """In-memory ClusterVersionLister keyed by object name."""

    def __init__(self, obj: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self._objects: dict[str, dict[str, Any]] = {}
        if obj is not None:
            self._objects[obj["metadata"]["name"]] = obj
        self._error = error
        self.calls: list[str] = []

    async def get(self, key: str) -> dict[str, Any] | None:
        self.calls.append(key)
        if self._error is not None:
            raise self._error
        return self._objects.get(key)


def make_cluster_version(
    current: str = "",
    partial: str = "",
    desired: str | None = None,
    upgradeable: str | None = None,
    upgradeable_reason: str = "",
    progressing: str | None = None,
    unmanaged_override: bool = False,
) -> dict[str, Any]:
    """Create a raw ClusterVersion object the way the API server returns it.

    ``current`` becomes a Completed history entry and ``partial`` a newer
    Partial one. ``desired`` defaults to the newest version recorded.
    """
    history: list[dict[str, Any]] = []
    if partial:
        history.append({"version": partial, "state": "Partial", "startedTime": "2024-05-02T10:00:00Z"})
    if current:
        history.append(
            {
                "version": current,
                "state": "Completed",
                "startedTime": "2024-05-01T10:00:00Z",
                "completionTime": "2024-05-01T11:00:00Z",
            }
        )

    conditions: list[dict[str, Any]] = []
    if upgradeable is not None:
        conditions.append(
            {
                "type": "Upgradeable",
                "status": upgradeable,
                "reason": upgradeable_reason,
                "message": f"set to {upgradeable}",
                "lastTransitionTime": "2024-05-01T09:00:00Z",
            }
        )
    if progressing is not None:
        conditions.append({"type": "Progressing", "status": progressing, "reason": "", "message": ""})

    overrides = []
    if unmanaged_override:
        overrides.append(
            {"kind": "Deployment", "group": "apps", "namespace": "openshift-monitoring", "name": "cmo", "unmanaged": True}
        )

    return {
        "apiVersion": "config.openshift.io/v1",
        "kind": "ClusterVersion",
        "metadata": {"name": "version"},
        "spec": {"clusterID": "4f0e4b26-9a64-4c6a-b5c4-8e1f3f9b6a11", "overrides": overrides},
        "status": {
            "desired": {"version": desired if desired is not None else (partial or current)},
            "history": history,
            "conditions": conditions,
        },
    }


def make_status(
    desired_version: str = "",
    history: list[tuple[str, str]] | None = None,
    conditions: dict[str, str] | None = None,
    unmanaged: bool = False,
) -> VersionedStatus:
    """Create a VersionedStatus directly; ``history`` is (version, state) pairs, newest first."""
    return VersionedStatus(
        desired_version=desired_version,
        history=tuple(HistoryEntry(version=v, state=s) for v, s in history or []),
        conditions=tuple(Condition(type=t, status=s) for t, s in (conditions or {}).items()),
        overrides=(ComponentOverride(kind="Deployment", name="cmo", unmanaged=True),) if unmanaged else (),
    )
