"""Tests for the Kubernetes resource client."""

import json
from unittest.mock import MagicMock

import pytest
import yaml
from kubernetes import config
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import MaxRetryError

from kube_ui.client import ResourceClient, translate_api_exception
from kube_ui.exceptions import ResourceError


@pytest.fixture
def core_v1():
    return MagicMock()


@pytest.fixture
def rc(core_v1):
    return ResourceClient("/k/config", core_v1=core_v1)


def api_exception(status, reason, message=None):
    e = ApiException(status=status, reason=reason)
    if message:
        e.body = json.dumps({"kind": "Status", "message": message})
    return e


def test_list_pods_returns_items(rc, core_v1):
    """list_pods returns the items of the namespaced list."""
    core_v1.list_namespaced_pod.return_value.items = ["a", "b"]
    assert rc.list_pods("app") == ["a", "b"]
    core_v1.list_namespaced_pod.assert_called_once_with("app")


def test_list_events_for_pod_uses_field_selector(rc, core_v1):
    """Pod events are filtered server-side by involved object."""
    core_v1.list_namespaced_event.return_value.items = []
    rc.list_events_for_pod("app", "tunnel-pod-abc123")
    core_v1.list_namespaced_event.assert_called_once_with(
        "app",
        field_selector="involvedObject.name=tunnel-pod-abc123,involvedObject.kind=Pod",
    )


def test_get_and_delete_pod(rc, core_v1):
    """get_pod and delete_pod pass name then namespace."""
    rc.get_pod("app", "web-0")
    rc.delete_pod("app", "web-0")
    core_v1.read_namespaced_pod.assert_called_once_with("web-0", "app")
    core_v1.delete_namespaced_pod.assert_called_once_with("web-0", "app")


def test_create_pod_error_is_translated(rc, core_v1):
    """An ApiException on create carries the Status message and location."""
    core_v1.create_namespaced_pod.side_effect = api_exception(
        403, "Forbidden", 'pods is forbidden: exceeded quota: compute-resources'
    )
    body = MagicMock()
    body.metadata.name = "tunnel-pod-abc123"
    with pytest.raises(ResourceError) as excinfo:
        rc.create_pod("app", body)
    err = excinfo.value
    assert err.status_code == 403
    assert "exceeded quota" in err.message
    assert err.resource == "pod/tunnel-pod-abc123"
    assert str(err).endswith("[pod/tunnel-pod-abc123 in app]")


def test_transport_error_is_translated(rc, core_v1):
    """Unreachable API servers surface as ResourceError."""
    core_v1.list_namespace.side_effect = MaxRetryError(None, "/api/v1/namespaces")
    with pytest.raises(ResourceError, match="cannot reach API server"):
        rc.list_namespaces()


def test_translate_without_body_uses_reason():
    """Without a Status body the HTTP reason is used."""
    err = translate_api_exception(api_exception(404, "Not Found"), resource="pod/x")
    assert err.message == "Not Found"
    assert err.status_code == 404


def test_bad_kubeconfig(tmp_path):
    """A missing kubeconfig is reported as a ResourceError."""
    with pytest.raises(ResourceError, match="error building kubeconfig"):
        ResourceClient(str(tmp_path / "missing"))


def test_malformed_kubeconfig(monkeypatch):
    """A kubeconfig that is not valid YAML is reported as a ResourceError."""
    def broken(config_file=None):
        raise yaml.YAMLError("mapping values are not allowed here")

    monkeypatch.setattr(config, "new_client_from_config", broken)
    with pytest.raises(ResourceError, match="mapping values are not allowed"):
        ResourceClient("/k/broken")
