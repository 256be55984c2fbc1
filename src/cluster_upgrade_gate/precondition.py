"""Upgradeable precondition: may the cluster start moving to the requested release?"""

from __future__ import annotations

import semver
import structlog

from cluster_upgrade_gate.errors import PreconditionError
from cluster_upgrade_gate.history import current_version, minor_upgrade_in_progress, upgrade_in_progress
from cluster_upgrade_gate.models import (
    UPGRADEABLE,
    UPGRADEABLE_OVERRIDES,
    Condition,
    ReleaseContext,
    VersionedStatus,
)
from cluster_upgrade_gate.status import ClusterVersionLister, load_status
from cluster_upgrade_gate.utils import format_timestamp
from cluster_upgrade_gate.versions import InvalidVersionError, compare, is_minor_bump, is_patch_only, parse

log = structlog.get_logger()

PRECONDITION_NAME = "ClusterVersionUpgradeable"

OVERRIDES_REASON = "ClusterVersionOverridesSet"
OVERRIDES_MESSAGE = (
    "Disabling ownership via cluster version overrides prevents upgrades. "
    "Please remove overrides before continuing."
)
MINOR_IN_PROGRESS_REASON = "MinorVersionClusterUpgradeInProgress"


def cluster_version_overrides_condition(status: VersionedStatus) -> Condition | None:
    """Return an UpgradeableClusterVersionOverrides condition when any override is unmanaged."""
    if any(override.unmanaged for override in status.overrides):
        return Condition(
            type=UPGRADEABLE_OVERRIDES,
            status="False",
            reason=OVERRIDES_REASON,
            message=OVERRIDES_MESSAGE,
        )
    return None


class UpgradeablePrecondition:
    """Blocks forward minor level updates while the cluster reports Upgradeable=False.

    The check is inert until the ClusterVersion object exists. Patch level
    retargets pass unless overrides are set, and a retarget of an in-flight
    minor level upgrade is reported as a non-blocking warning.
    """

    def __init__(self, lister: ClusterVersionLister, key: str = "version") -> None:
        self._lister = lister
        self._key = key

    @property
    def name(self) -> str:
        return PRECONDITION_NAME

    async def run(self, release: ReleaseContext) -> PreconditionError | None:
        """Evaluate the precondition for ``release``; None means the update may proceed."""
        try:
            status = await load_status(self._lister, self._key)
        except Exception as e:
            log.warning("precondition_lookup_failed", precondition=self.name, key=self._key, error=str(e))
            return PreconditionError("UnknownError", str(e), self.name, nested=e)
        if status is None:
            log.info("precondition_passed", precondition=self.name, detail="no ClusterVersion object")
            return None

        try:
            target = parse(release.desired_version)
        except InvalidVersionError as e:
            return PreconditionError("InvalidDesiredVersion", str(e), self.name, nested=e)

        in_flight = self._check_in_flight(status, release.desired_version, target)
        if in_flight is not None:
            return in_flight

        up = status.condition(UPGRADEABLE)
        if up is None:
            log.info("precondition_passed", precondition=self.name, detail="no Upgradeable condition")
            return None
        if up.status != "False":
            log.info(
                "precondition_passed",
                precondition=self.name,
                upgradeable=up.status,
                since=format_timestamp(up.last_transition_time),
                reason=up.reason,
                message=up.message,
            )
            return None

        current_str = status.desired_version or current_version(status.history)
        try:
            current = parse(current_str)
        except InvalidVersionError as e:
            # An update is the only thing that can repair the stored version.
            return PreconditionError(
                "InvalidCurrentVersion",
                str(e),
                self.name,
                non_blocking_warning=True,
                nested=e,
            )

        log.debug(
            "precondition_versions",
            precondition=self.name,
            current=str(current),
            current_raw=current_str,
            target=str(target),
            target_raw=release.desired_version,
        )
        patch_only = not is_minor_bump(current, target) and is_patch_only(current, target)
        if compare(target, current) <= 0 or patch_only:
            # Downgrades belong to the rollback precondition.
            return self._check_retarget(status, current, target, release.desired_version, patch_only)

        return PreconditionError(up.reason, up.message, self.name)

    def _check_retarget(
        self,
        status: VersionedStatus,
        current: semver.Version,
        target: semver.Version,
        target_raw: str,
        patch_only: bool,
    ) -> PreconditionError | None:
        overrides = cluster_version_overrides_condition(status)
        if overrides is not None:
            log.info(
                "precondition_retarget_blocked",
                precondition=self.name,
                current=str(current),
                target=str(target),
                reason=overrides.reason,
            )
            return PreconditionError(overrides.reason, overrides.message, self.name)

        from_version = minor_upgrade_in_progress(status, current)
        if from_version is not None and patch_only:
            return self._retarget_warning(target_raw, from_version, status.desired_version or str(current))

        log.info("precondition_passed", precondition=self.name, target=str(target))
        return None

    def _check_in_flight(
        self,
        status: VersionedStatus,
        target_raw: str,
        target: semver.Version,
    ) -> PreconditionError | None:
        """Judge the request against a transition that is already underway."""
        in_progress = upgrade_in_progress(status)
        if in_progress is None:
            return None
        completed, live = in_progress
        live_version = parse(live)

        if not is_patch_only(live_version, target):
            if target.compare(live_version) > 0:
                return PreconditionError(
                    MINOR_IN_PROGRESS_REASON,
                    f"The minor level upgrade to {target_raw} is not recommended until the existing "
                    f"upgrade from {completed} to {live} completes.",
                    self.name,
                )
            return None

        from_version = minor_upgrade_in_progress(status, live_version)
        if from_version is None:
            return None
        # Overrides only matter once the cluster has declared itself not upgradeable.
        if status.condition_is(UPGRADEABLE, "False"):
            return self._check_retarget(status, live_version, target, target_raw, patch_only=True)
        return self._retarget_warning(target_raw, from_version, live)

    def _retarget_warning(self, target_raw: str, from_version: str, live: str) -> PreconditionError:
        log.info(
            "precondition_retarget_warning",
            precondition=self.name,
            target=target_raw,
            source=from_version,
            in_flight=live,
        )
        return PreconditionError(
            MINOR_IN_PROGRESS_REASON,
            f"The upgrade is retargeted to {target_raw} from the existing minor level upgrade "
            f"from {from_version} to {live}.",
            self.name,
            non_blocking_warning=True,
        )
