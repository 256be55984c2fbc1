"""ClusterVersion custom object reader (config.openshift.io/v1)."""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import structlog
from kubernetes import client as k8s_client
from kubernetes.client.rest import ApiException

from cluster_upgrade_gate.clients import load_k8s_api_client
from cluster_upgrade_gate.config import ClusterConfig, GateSettings, get_settings

log = structlog.get_logger()


class ClusterVersionClient:
    """Read-only lookup of the cluster-scoped ClusterVersion object by name."""

    def __init__(self, cluster_config: ClusterConfig, settings: GateSettings | None = None) -> None:
        self._cluster_config = cluster_config
        self._settings = settings or get_settings()
        self._api: k8s_client.CustomObjectsApi | None = None
        self._lock = threading.Lock()

    def _get_api(self) -> k8s_client.CustomObjectsApi:
        with self._lock:
            if self._api is None:
                api_client = load_k8s_api_client(self._cluster_config.kubeconfig_context)
                self._api = k8s_client.CustomObjectsApi(api_client)
            return self._api

    async def get(self, key: str) -> dict[str, Any] | None:
        """Return the raw ClusterVersion object named ``key``.

        Returns None when the object does not exist or the API group is not
        served by the cluster; both surface as HTTP 404. Any other failure is
        logged and re-raised.
        """
        api = self._get_api()
        try:
            obj = await asyncio.to_thread(
                api.get_cluster_custom_object,
                group=self._settings.api_group,
                version=self._settings.api_version,
                plural=self._settings.plural,
                name=key,
            )
        except ApiException as e:
            if e.status == 404:
                log.info(
                    "cluster_version_not_found",
                    cluster=self._cluster_config.cluster_id,
                    key=key,
                )
                return None
            log.error(
                "failed_to_get_cluster_version",
                cluster=self._cluster_config.cluster_id,
                key=key,
                status=e.status,
            )
            raise
        except Exception:
            log.error("failed_to_get_cluster_version", cluster=self._cluster_config.cluster_id, key=key)
            raise
        return obj
