"""Shared fakes for kube-ui tests."""

from types import SimpleNamespace

import pytest
import structlog

from kube_ui.exceptions import ResourceError
from kube_ui.session import Session


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def make_pod(name="tunnel-pod-abc123", phase="Pending", container_statuses=None, containers=None):
    return SimpleNamespace(
        metadata=SimpleNamespace(name=name),
        spec=SimpleNamespace(containers=containers or [SimpleNamespace(name="tunnel")]),
        status=SimpleNamespace(phase=phase, container_statuses=container_statuses or []),
    )


def waiting_status(name="tunnel", reason="ContainerCreating", message=""):
    return SimpleNamespace(
        name=name,
        state=SimpleNamespace(
            waiting=SimpleNamespace(reason=reason, message=message),
            terminated=None,
        ),
    )


def terminated_status(name="tunnel", reason="Error", message="boom", exit_code=1):
    return SimpleNamespace(
        name=name,
        state=SimpleNamespace(
            waiting=None,
            terminated=SimpleNamespace(reason=reason, message=message, exit_code=exit_code),
        ),
    )


def make_event(type_="Normal", reason="Pulling", message="Pulling image"):
    return SimpleNamespace(type=type_, reason=reason, message=message)


class FakeResources:
    """
    In-memory resource client.

    get_pod answers come from `phases`, consumed in order; the last entry is
    repeated. An entry may be a phase string, a pod object, or an exception.
    """

    def __init__(
        self,
        phases=("Running",),
        create_error=None,
        delete_error=None,
        events=(),
        events_error=None,
        pods=(),
    ):
        self.phases = list(phases)
        self.create_error = create_error
        self.delete_error = delete_error
        self.events = list(events)
        self.events_error = events_error
        self.pods = list(pods)
        self.calls = []
        self.created = []

    def _record(self, *call):
        self.calls.append(call)

    def calls_named(self, name):
        return [c for c in self.calls if c[0] == name]

    def list_namespaces(self):
        self._record("list_namespaces")
        return [SimpleNamespace(metadata=SimpleNamespace(name="default"))]

    def list_pods(self, namespace):
        self._record("list_pods", namespace)
        return self.pods

    def create_pod(self, namespace, body):
        self._record("create_pod", namespace, body.metadata.name)
        if self.create_error:
            raise self.create_error
        self.created.append(body)
        return body

    def get_pod(self, namespace, name):
        self._record("get_pod", namespace, name)
        answer = self.phases.pop(0) if len(self.phases) > 1 else self.phases[0]
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, str):
            return make_pod(name=name, phase=answer)
        return answer

    def list_events_for_pod(self, namespace, pod_name):
        self._record("list_events_for_pod", namespace, pod_name)
        if self.events_error:
            raise self.events_error
        return self.events

    def delete_pod(self, namespace, name):
        self._record("delete_pod", namespace, name)
        if self.delete_error:
            raise self.delete_error


class FakeRelay:
    """Records kubectl invocations; optionally raises per call from `errors`."""

    def __init__(self, errors=None):
        self.errors = dict(errors or {})
        self.calls = []

    def __call__(self, args, kubeconfig, namespace):
        self.calls.append((list(args), kubeconfig, namespace))
        error = self.errors.get(len(self.calls) - 1)
        if error:
            raise error


@pytest.fixture
def resources():
    return FakeResources()


@pytest.fixture
def relay():
    return FakeRelay()


@pytest.fixture
def session(resources, relay):
    return Session(
        kubeconfig="/tmp/kubeconfig",
        namespace="app",
        resources=resources,
        relay=relay,
    )


@pytest.fixture
def api_error():
    return ResourceError("pods is forbidden", status_code=403, resource="pod/x", namespace="app")
