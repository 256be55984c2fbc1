"""Run the Upgradeable precondition against configured clusters."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import structlog

from cluster_upgrade_gate.clients.cluster_version import ClusterVersionClient
from cluster_upgrade_gate.config import get_fleet, get_settings, resolve_cluster
from cluster_upgrade_gate.errors import verdict_of
from cluster_upgrade_gate.models import PreconditionResult, ReleaseContext
from cluster_upgrade_gate.precondition import PRECONDITION_NAME, UpgradeablePrecondition
from cluster_upgrade_gate.validation import validate_desired_version

log = structlog.get_logger()


async def check_upgradeable_handler(cluster_id: str, desired_version: str) -> PreconditionResult:
    """Evaluate the Upgradeable precondition for a single cluster.

    A request the precondition could never parse, such as an empty version,
    is rejected as ``InvalidDesiredVersion`` without contacting the cluster.
    """
    config = resolve_cluster(cluster_id)
    try:
        validate_desired_version(desired_version)
    except ValueError as e:
        log.warning("desired_version_rejected", precondition=PRECONDITION_NAME, cluster=cluster_id, error=str(e))
        return PreconditionResult(
            cluster=cluster_id,
            name=PRECONDITION_NAME,
            verdict="block",
            desired_version=desired_version,
            reason="InvalidDesiredVersion",
            message=str(e),
            timestamp=datetime.now(tz=UTC).isoformat(),
        )

    settings = get_settings()
    precondition = UpgradeablePrecondition(ClusterVersionClient(config, settings), key=settings.cluster_version_key)

    with structlog.contextvars.bound_contextvars(cluster=cluster_id):
        error = await precondition.run(ReleaseContext(desired_version=desired_version))

    result = PreconditionResult(
        cluster=cluster_id,
        name=precondition.name,
        verdict=verdict_of(error).value,
        desired_version=desired_version,
        timestamp=datetime.now(tz=UTC).isoformat(),
    )
    if error is not None:
        result.reason = error.reason
        result.message = error.message
        result.non_blocking_warning = error.non_blocking_warning
        if error.nested is not None:
            result.errors.append(str(error.nested))
    return result


async def check_upgradeable_all(desired_version: str) -> list[PreconditionResult]:
    """Fan-out the Upgradeable precondition to every cluster in the fleet concurrently.

    A cluster whose evaluation raises is reported as a blocking UnknownError
    result rather than dropped.
    """
    cluster_ids = get_fleet().cluster_ids
    tasks = [check_upgradeable_handler(cid, desired_version) for cid in cluster_ids]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    outputs: list[PreconditionResult] = []
    for cid, result in zip(cluster_ids, results, strict=True):
        if isinstance(result, BaseException):
            log.error("fan_out_cluster_failed", precondition=PRECONDITION_NAME, cluster=cid, error=str(result))
            outputs.append(
                PreconditionResult(
                    cluster=cid,
                    name=PRECONDITION_NAME,
                    verdict="block",
                    desired_version=desired_version,
                    reason="UnknownError",
                    message=str(result),
                    timestamp=datetime.now(tz=UTC).isoformat(),
                    errors=[type(result).__name__],
                )
            )
        else:
            outputs.append(result)
    return outputs
