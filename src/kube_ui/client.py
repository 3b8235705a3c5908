"""
Resource client: thin facade over the Kubernetes API.

Wraps the official kubernetes Python client for the handful of calls
kube-ui needs (list namespaces and namespaced resources, pod events,
create/get/delete a pod) and translates ApiException into ResourceError
so callers only ever handle one exception type.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Optional

import structlog
import yaml
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from .exceptions import ResourceError

if TYPE_CHECKING:
    from kubernetes.client import CoreV1Api

logger = structlog.get_logger()


def translate_api_exception(
    e: ApiException,
    resource: Optional[str] = None,
    namespace: Optional[str] = None,
) -> ResourceError:
    """
    Turn an ApiException into a ResourceError.

    Uses the "message" field of the API server's Status body when present,
    since it carries the admission or validation detail; otherwise the HTTP
    reason phrase.
    """
    message = e.reason or "Kubernetes API error"
    body = getattr(e, "body", None)
    if body:
        try:
            status = json.loads(body)
            if isinstance(status, dict) and status.get("message"):
                message = status["message"]
        except (TypeError, ValueError):
            pass
    return ResourceError(
        message,
        status_code=e.status or None,
        resource=resource,
        namespace=namespace,
    )


class ResourceClient:
    """
    CoreV1 access for one kubeconfig.

    Example:
        rc = ResourceClient("/home/me/.kube/staging")
        for pod in rc.list_pods("default"):
            print(pod.metadata.name)
    """

    def __init__(self, kubeconfig_path: str, core_v1: Optional[CoreV1Api] = None) -> None:
        """
        Build an API client from a kubeconfig file.

        Args:
            kubeconfig_path: Kubeconfig to load (its current context is used).
            core_v1: Pre-built CoreV1Api; skips kubeconfig loading when given.

        Raises:
            ResourceError: The kubeconfig cannot be loaded.
        """
        self.kubeconfig_path = kubeconfig_path
        if core_v1 is not None:
            self._core_v1 = core_v1
            return
        try:
            api_client = config.new_client_from_config(config_file=kubeconfig_path)
        except (ConfigException, OSError, yaml.YAMLError) as e:
            raise ResourceError(f"error building kubeconfig {kubeconfig_path}: {e}") from e
        self._core_v1 = client.CoreV1Api(api_client)
        logger.debug("kubernetes_client_initialized", kubeconfig=kubeconfig_path)

    @property
    def core_v1(self) -> CoreV1Api:
        return self._core_v1

    @contextmanager
    def _api_call(self, resource: str, namespace: Optional[str] = None) -> Iterator[None]:
        """Translate API and transport errors raised inside the block."""
        try:
            yield
        except ApiException as e:
            raise translate_api_exception(e, resource=resource, namespace=namespace) from e
        except HTTPError as e:
            raise ResourceError(
                f"cannot reach API server: {e}", resource=resource, namespace=namespace
            ) from e

    def list_namespaces(self) -> list[Any]:
        with self._api_call("namespaces"):
            return self._core_v1.list_namespace().items

    def list_pods(self, namespace: str) -> list[Any]:
        with self._api_call("pods", namespace):
            return self._core_v1.list_namespaced_pod(namespace).items

    def list_services(self, namespace: str) -> list[Any]:
        with self._api_call("services", namespace):
            return self._core_v1.list_namespaced_service(namespace).items

    def list_persistent_volume_claims(self, namespace: str) -> list[Any]:
        with self._api_call("persistentvolumeclaims", namespace):
            return self._core_v1.list_namespaced_persistent_volume_claim(namespace).items

    def list_config_maps(self, namespace: str) -> list[Any]:
        with self._api_call("configmaps", namespace):
            return self._core_v1.list_namespaced_config_map(namespace).items

    def list_events_for_pod(self, namespace: str, pod_name: str) -> list[Any]:
        """Events whose involved object is the named pod (filtered server-side)."""
        selector = f"involvedObject.name={pod_name},involvedObject.kind=Pod"
        with self._api_call(f"events for pod/{pod_name}", namespace):
            return self._core_v1.list_namespaced_event(namespace, field_selector=selector).items

    def create_pod(self, namespace: str, body: Any) -> Any:
        name = getattr(getattr(body, "metadata", None), "name", None) or "?"
        with self._api_call(f"pod/{name}", namespace):
            pod = self._core_v1.create_namespaced_pod(namespace, body)
        logger.debug("pod_created", pod=pod.metadata.name, namespace=namespace)
        return pod

    def get_pod(self, namespace: str, name: str) -> Any:
        with self._api_call(f"pod/{name}", namespace):
            return self._core_v1.read_namespaced_pod(name, namespace)

    def delete_pod(self, namespace: str, name: str) -> None:
        with self._api_call(f"pod/{name}", namespace):
            self._core_v1.delete_namespaced_pod(name, namespace)
        logger.debug("pod_deleted", pod=name, namespace=namespace)
