"""Pydantic v2 models for the cluster version snapshot, requests, and results."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Condition types consumed from the ClusterVersion status.
UPGRADEABLE = "Upgradeable"
PROGRESSING = "Progressing"
UPGRADEABLE_OVERRIDES = "UpgradeableClusterVersionOverrides"

ConditionStatus = Literal["True", "False", "Unknown"]
UpdateState = Literal["Completed", "Partial"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Condition(_Frozen):
    """A named tri-state status signal."""

    type: str
    status: ConditionStatus = "Unknown"
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None


class HistoryEntry(_Frozen):
    """One recorded version transition."""

    version: str
    state: UpdateState
    started_time: datetime | None = None
    completion_time: datetime | None = None


class ComponentOverride(_Frozen):
    """An administrator override of a payload resource."""

    kind: str = ""
    group: str = ""
    namespace: str = ""
    name: str = ""
    unmanaged: bool = False


class VersionedStatus(_Frozen):
    """Immutable snapshot of the cluster's version status.

    ``history`` is ordered newest first. Only the entry at index 0 may be
    ``Partial``; a ``Completed`` entry at index 0 means nothing is in flight.
    """

    desired_version: str = ""
    history: tuple[HistoryEntry, ...] = ()
    conditions: tuple[Condition, ...] = ()
    overrides: tuple[ComponentOverride, ...] = ()

    @model_validator(mode="after")
    def _check_history_order(self) -> VersionedStatus:
        for index, entry in enumerate(self.history):
            if entry.state == "Partial" and index != 0:
                msg = (
                    f"History entry {index} ({entry.version!r}) is Partial; "
                    "only the newest entry may be in progress."
                )
                raise ValueError(msg)
        return self

    def condition(self, condition_type: str) -> Condition | None:
        """Return the condition with the given type, or None when absent."""
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return None

    def condition_is(self, condition_type: str, status: ConditionStatus) -> bool:
        """True when the condition is recorded with exactly ``status``."""
        cond = self.condition(condition_type)
        return cond is not None and cond.status == status


class ReleaseContext(_Frozen):
    """The release the orchestrator wants to move to."""

    desired_version: str


class PreconditionResult(BaseModel):
    """Serializable record of one precondition evaluation."""

    cluster: str
    name: str
    verdict: Literal["allow", "warn", "block"]
    desired_version: str
    reason: str | None = None
    message: str | None = None
    non_blocking_warning: bool = False
    timestamp: str
    # Diagnostic detail, e.g. the lookup error behind an UnknownError block.
    errors: list[str] = Field(default_factory=list)
