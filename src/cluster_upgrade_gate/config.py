"""Fleet configuration and ClusterVersion lookup settings."""

from __future__ import annotations

import os
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cluster_upgrade_gate.validation import validate_resource_name

log = structlog.get_logger()

FLEET_FILE_ENV = "CLUSTER_UPGRADE_GATE_CLUSTERS"


@dataclass(frozen=True)
class ClusterConfig:
    """Configuration for a single managed cluster."""

    cluster_id: str
    environment: str
    kubeconfig_context: str


@dataclass(frozen=True)
class GateSettings:
    """Where the ClusterVersion object lives, with environment variable overrides."""

    cluster_version_key: str = field(default_factory=lambda: os.environ.get("CLUSTER_VERSION_KEY", "version"))
    api_group: str = field(default_factory=lambda: os.environ.get("CLUSTER_VERSION_GROUP", "config.openshift.io"))
    api_version: str = field(default_factory=lambda: os.environ.get("CLUSTER_VERSION_API_VERSION", "v1"))
    plural: str = field(default_factory=lambda: os.environ.get("CLUSTER_VERSION_PLURAL", "clusterversions"))


class _FleetDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    environment: str | None = None


class _ClusterEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    environment: str | None = None
    kubeconfig_context: str | None = None


class _FleetFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    defaults: _FleetDefaults = Field(default_factory=_FleetDefaults)
    clusters: dict[str, _ClusterEntry | None] = Field(min_length=1)


@dataclass(frozen=True)
class Fleet:
    """The clusters a fleet check fans out to, in file order."""

    clusters: Mapping[str, ClusterConfig]

    @property
    def cluster_ids(self) -> list[str]:
        return list(self.clusters)

    def resolve(self, cluster_id: str) -> ClusterConfig:
        """Return the configuration for ``cluster_id``.

        Raises:
            ValueError: If the cluster is not part of the fleet.
        """
        config = self.clusters.get(cluster_id)
        if config is None:
            valid = ", ".join(sorted(self.clusters))
            msg = f"Unknown cluster {cluster_id!r}. Valid clusters: {valid}"
            raise ValueError(msg)
        return config


def parse_fleet(text: str, source: str = "<string>") -> Fleet:
    """Build a Fleet from the YAML text of a fleet file.

    A cluster entry may omit ``environment``, taken from the top-level
    ``defaults`` block, and ``kubeconfig_context``, which falls back to the
    cluster ID. An entry with no body at all uses both fallbacks.

    Raises:
        ValueError: If the text is not valid YAML, does not match the fleet
            file schema, or leaves a cluster without an environment.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        msg = f"{source}: not valid YAML: {e}"
        raise ValueError(msg) from e

    try:
        fleet_file = _FleetFile.model_validate(raw)
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors())
        msg = f"{source}: invalid fleet file: {problems}"
        raise ValueError(msg) from e

    clusters: dict[str, ClusterConfig] = {}
    for cluster_id, entry in fleet_file.clusters.items():
        entry = entry or _ClusterEntry()
        environment = entry.environment or fleet_file.defaults.environment
        if not environment:
            msg = f"{source}: cluster {cluster_id!r} has no environment and no default is set."
            raise ValueError(msg)
        clusters[cluster_id] = ClusterConfig(
            cluster_id=cluster_id,
            environment=environment,
            kubeconfig_context=entry.kubeconfig_context or cluster_id,
        )
    return Fleet(clusters=clusters)


_active_fleet: Fleet | None = None


def load_fleet(path: Path | None = None) -> Fleet:
    """Read a fleet file and make it the active fleet.

    ``path`` defaults to ``$CLUSTER_UPGRADE_GATE_CLUSTERS``, then to
    ``clusters.yaml`` in the working directory.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If its content is invalid.
    """
    global _active_fleet
    path = path or Path(os.environ.get(FLEET_FILE_ENV, "clusters.yaml"))
    if not path.is_file():
        msg = f"Fleet file not found: {path}. Set {FLEET_FILE_ENV} to its location."
        raise FileNotFoundError(msg)

    fleet = parse_fleet(path.read_text(), source=str(path))
    log.info("fleet_loaded", path=str(path), clusters=fleet.cluster_ids)
    _active_fleet = fleet
    return fleet


def get_fleet() -> Fleet:
    """Return the active fleet, loading it on first use."""
    if _active_fleet is None:
        return load_fleet()
    return _active_fleet


def resolve_cluster(cluster_id: str) -> ClusterConfig:
    """Resolve a cluster ID against the active fleet."""
    return get_fleet().resolve(cluster_id)


def validate_cluster_config(fleet: Fleet | None = None) -> None:
    """Check the fleet and gate settings at startup.

    Two cluster IDs sharing a kubeconfig context would evaluate the same
    cluster twice. Raises RuntimeError listing every problem found.
    """
    fleet = fleet or get_fleet()
    errors: list[str] = []

    contexts = Counter(c.kubeconfig_context for c in fleet.clusters.values())
    for context, count in sorted(contexts.items()):
        if count > 1:
            shared = sorted(cid for cid, c in fleet.clusters.items() if c.kubeconfig_context == context)
            errors.append(f"kubeconfig context {context!r} is shared by {', '.join(shared)}")

    try:
        validate_resource_name(get_settings().cluster_version_key)
    except ValueError as e:
        errors.append(str(e))

    if errors:
        detail = "; ".join(errors)
        msg = f"Cluster configuration errors: {detail}."
        raise RuntimeError(msg)


def get_settings() -> GateSettings:
    """Return gate settings with environment variable overrides applied."""
    return GateSettings()
