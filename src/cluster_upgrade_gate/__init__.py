"""Upgradeable precondition gate for cluster version updates."""

from cluster_upgrade_gate.errors import PreconditionError, Verdict, verdict_of
from cluster_upgrade_gate.models import ReleaseContext, VersionedStatus
from cluster_upgrade_gate.precondition import PRECONDITION_NAME, UpgradeablePrecondition

__all__ = [
    "PRECONDITION_NAME",
    "PreconditionError",
    "ReleaseContext",
    "UpgradeablePrecondition",
    "Verdict",
    "VersionedStatus",
    "verdict_of",
]
