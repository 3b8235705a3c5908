"""
Tunnel pods: relay a local port to any address reachable from the cluster.

A tunnel cycle creates a single-container socat pod in the session's
namespace, waits for it to reach the Running phase, runs
`kubectl port-forward` against it until the operator stops it, and then
deletes the pod. Once the pod exists, the delete is issued exactly once
whatever happened in between. A create interrupted in flight is followed
by a delete by name, since the server may have accepted it.

    Idle -> Created -> Polling -> Running -> Forwarding -> Terminating -> Idle
"""

from __future__ import annotations

import enum
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog
from kubernetes import client

from .config import (
    DEFAULT_TUNNEL_IMAGE,
    TUNNEL_ACTIVE_DEADLINE_SECONDS,
    TUNNEL_CONTAINER_NAME,
    TUNNEL_POD_PREFIX,
    TUNNEL_POLL_INTERVAL,
    TUNNEL_SUFFIX_ALPHABET,
    TUNNEL_SUFFIX_LENGTH,
)
from .exceptions import (
    CommandError,
    CommandInterrupted,
    CreateInterrupted,
    ForwardFailed,
    InvalidAddress,
    PodCreateFailed,
    PodDeleteFailed,
    PodFetchFailed,
    ResourceError,
    TunnelError,
    WaitInterrupted,
)

logger = structlog.get_logger()

POD_RUNNING = "Running"


class TunnelState(enum.Enum):
    IDLE = "Idle"
    CREATED = "Created"
    POLLING = "Polling"
    RUNNING = "Running"
    FORWARDING = "Forwarding"
    TERMINATING = "Terminating"


def split_address(address: str) -> tuple[str, str]:
    """
    Split "host:port" into its two parts.

    Raises:
        InvalidAddress: Not exactly two colon-separated parts, or either is empty.
    """
    parts = address.strip().split(":")
    if len(parts) != 2:
        raise InvalidAddress("Invalid format. Please use host:port")
    host, port = parts[0].strip(), parts[1].strip()
    if not host or not port:
        raise InvalidAddress("Invalid format. Host and port are both required")
    return host, port


@dataclass(frozen=True)
class TunnelRequest:
    """Where to relay to, and which local port to expose it on."""

    target_host: str
    target_port: str
    local_port: str

    @classmethod
    def parse(cls, address: str, local_port: str) -> TunnelRequest:
        """
        Build a request from the operator's two answers.

        Args:
            address: "host:port" (exactly one colon).
            local_port: Local port for kubectl port-forward.

        Raises:
            InvalidAddress: Wrong number of colon-separated parts, empty
                host, port or local port.
        """
        host, port = split_address(address)
        local_port = local_port.strip()
        if not local_port:
            raise InvalidAddress("Local port is required")
        return cls(target_host=host, target_port=port, local_port=local_port)

    @property
    def target(self) -> str:
        return f"{self.target_host}:{self.target_port}"


@dataclass(frozen=True)
class TunnelImageConfig:
    """Relay container image and optional pull secret for one cluster profile."""

    image: str = DEFAULT_TUNNEL_IMAGE
    image_pull_secret: Optional[str] = None


@dataclass
class TunnelResult:
    """Outcome of one tunnel cycle."""

    request: TunnelRequest
    pod_name: Optional[str] = None
    states: list[TunnelState] = field(default_factory=lambda: [TunnelState.IDLE])
    error: Optional[TunnelError] = None
    delete_error: Optional[PodDeleteFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def interrupted(self) -> bool:
        if isinstance(self.error, (CreateInterrupted, WaitInterrupted)):
            return True
        return isinstance(self.error, ForwardFailed) and isinstance(
            self.error.__cause__, CommandInterrupted
        )

    def enter(self, state: TunnelState) -> None:
        self.states.append(state)


def random_suffix(length: int = TUNNEL_SUFFIX_LENGTH, rng: Optional[random.Random] = None) -> str:
    """Random lowercase-alphanumeric string for unique pod names."""
    rng = rng or random
    return "".join(rng.choice(TUNNEL_SUFFIX_ALPHABET) for _ in range(length))


def tunnel_pod_name(rng: Optional[random.Random] = None) -> str:
    """Fresh tunnel pod name, e.g. "tunnel-pod-k3x9qa"."""
    return f"{TUNNEL_POD_PREFIX}{random_suffix(rng=rng)}"


def relay_command(target_host: str, target_port: str) -> list[str]:
    """
    socat command that listens on target_port and relays to target_host:target_port.

    fork keeps the listener alive across client disconnects; reuseaddr lets
    it rebind immediately.
    """
    return [
        "socat",
        f"TCP-LISTEN:{target_port},fork,reuseaddr",
        f"TCP:{target_host}:{target_port}",
    ]


def build_tunnel_pod(
    request: TunnelRequest,
    namespace: str,
    image_config: Optional[TunnelImageConfig] = None,
    name: Optional[str] = None,
) -> client.V1Pod:
    """
    Build the tunnel pod manifest.

    Args:
        request: Target and local port.
        namespace: Namespace to create the pod in.
        image_config: Relay image and pull secret; defaults when None.
        name: Pod name; a random "tunnel-pod-xxxxxx" name when None.

    Returns:
        V1Pod ready for create_namespaced_pod.

    Raises:
        InvalidAddress: Target host or port is empty.
    """
    if not request.target_host or not request.target_port:
        raise InvalidAddress("Target host and port are required")
    image_config = image_config or TunnelImageConfig()
    pull_secrets = None
    if image_config.image_pull_secret:
        pull_secrets = [client.V1LocalObjectReference(name=image_config.image_pull_secret)]
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(name=name or tunnel_pod_name(), namespace=namespace),
        spec=client.V1PodSpec(
            image_pull_secrets=pull_secrets,
            containers=[
                client.V1Container(
                    name=TUNNEL_CONTAINER_NAME,
                    image=image_config.image,
                    image_pull_policy="IfNotPresent",
                    command=relay_command(request.target_host, request.target_port),
                )
            ],
            restart_policy="Never",
            active_deadline_seconds=TUNNEL_ACTIVE_DEADLINE_SECONDS,
        ),
    )


def _pod_phase(pod: Any) -> str:
    status = getattr(pod, "status", None)
    return (getattr(status, "phase", None) or "Unknown") if status else "Unknown"


def describe_container_states(pod: Any) -> list[str]:
    """Lines describing waiting or terminated containers in a pod."""
    lines: list[str] = []
    status = getattr(pod, "status", None)
    for cs in (getattr(status, "container_statuses", None) or []):
        state = cs.state
        if state is None:
            continue
        if state.waiting is not None:
            lines.append(
                f"Container {cs.name} is waiting: {state.waiting.reason} - {state.waiting.message}"
            )
        if state.terminated is not None:
            t = state.terminated
            lines.append(
                f"Container {cs.name} terminated: {t.reason} - {t.message} (exit code: {t.exit_code})"
            )
    return lines


class TunnelOrchestrator:
    """
    Runs tunnel cycles for one namespace.

    Args:
        resources: Object with create_pod/get_pod/delete_pod/list_events_for_pod
            (normally a ResourceClient).
        forward: Runs kubectl with the given args, raising CommandError on
            interrupt or failure.
        namespace: Namespace for the tunnel pod.
        sleep: Sleep function used between polls.
        clock: Monotonic clock used for elapsed-time reporting.
        poll_interval: Seconds between readiness polls.
    """

    def __init__(
        self,
        resources: Any,
        forward: Callable[[list[str]], None],
        namespace: str,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = TUNNEL_POLL_INTERVAL,
    ) -> None:
        self.resources = resources
        self.forward = forward
        self.namespace = namespace
        self.sleep = sleep
        self.clock = clock
        self.poll_interval = poll_interval

    def run(self, request: TunnelRequest, image_config: Optional[TunnelImageConfig] = None) -> TunnelResult:
        """
        Run one tunnel cycle from pod creation to pod deletion.

        Never raises TunnelError; the first error that ended the cycle is
        stored on the result and a failed delete on result.delete_error.
        """
        result = TunnelResult(request=request)
        try:
            pod = build_tunnel_pod(request, self.namespace, image_config)
        except InvalidAddress as e:
            print(str(e))
            result.error = e
            return result

        print(f"Creating tunnel pod for {request.target}...")
        try:
            created = self.resources.create_pod(self.namespace, pod)
        except ResourceError as e:
            print(f"Error creating tunnel pod: {e}")
            logger.warning("tunnel_pod_create_failed", pod=pod.metadata.name, error=str(e))
            result.error = PodCreateFailed(str(e))
            result.enter(TunnelState.IDLE)
            return result
        except KeyboardInterrupt as e:
            # The name is chosen client-side; a 404 on delete means it never landed.
            print("\nInterrupted while creating tunnel pod")
            result.pod_name = pod.metadata.name
            error = CreateInterrupted("interrupted while creating tunnel pod")
            error.__cause__ = e
            result.error = error
            self._teardown(result, missing_ok=True)
            return result

        result.pod_name = created.metadata.name if created is not None else pod.metadata.name
        result.enter(TunnelState.CREATED)
        log = logger.bind(pod=result.pod_name, namespace=self.namespace)
        log.info("tunnel_pod_created", target=request.target)
        try:
            self._wait_until_running(result)
            self._forward(result)
        except TunnelError as e:
            result.error = e
        finally:
            self._teardown(result)
        return result

    def _wait_until_running(self, result: TunnelResult) -> None:
        result.enter(TunnelState.POLLING)
        print("Waiting for tunnel pod to be ready...")
        start = self.clock()
        try:
            while True:
                try:
                    pod = self.resources.get_pod(self.namespace, result.pod_name)
                except ResourceError as e:
                    print(f"Error getting pod status: {e}")
                    raise PodFetchFailed(str(e)) from e
                phase = _pod_phase(pod)
                if phase == POD_RUNNING:
                    result.enter(TunnelState.RUNNING)
                    return
                self.sleep(self.poll_interval)
                print(f"Waiting for tunnel pod. Total time cost: {self.clock() - start:.1f}s")
                print(f"Pod status: {phase}")
                for line in describe_container_states(pod):
                    print(line)
                self._print_events(result.pod_name)
        except KeyboardInterrupt as e:
            print("\nInterrupted while waiting for tunnel pod")
            raise WaitInterrupted("interrupted while waiting for tunnel pod") from e

    def _print_events(self, pod_name: str) -> None:
        try:
            events = self.resources.list_events_for_pod(self.namespace, pod_name)
        except ResourceError as e:
            logger.debug("tunnel_pod_events_failed", pod=pod_name, error=str(e))
            return
        for event in events:
            print(f"Event: Type={event.type} Reason={event.reason} Message={event.message}")

    def _forward(self, result: TunnelResult) -> None:
        request = result.request
        result.enter(TunnelState.FORWARDING)
        print(f"Tunneling {request.target} to localhost:{request.local_port}")
        try:
            self.forward(
                [
                    "port-forward",
                    f"pod/{result.pod_name}",
                    f"{request.local_port}:{request.target_port}",
                ]
            )
        except CommandError as e:
            raise ForwardFailed(str(e)) from e

    def _teardown(self, result: TunnelResult, missing_ok: bool = False) -> None:
        result.enter(TunnelState.TERMINATING)
        print("Cleaning up tunnel pod...")
        try:
            self.resources.delete_pod(self.namespace, result.pod_name)
        except ResourceError as e:
            if missing_ok and e.status_code == 404:
                logger.debug("tunnel_pod_never_created", pod=result.pod_name)
                result.enter(TunnelState.IDLE)
                return
            print(f"Error deleting tunnel pod: {e}")
            logger.warning("tunnel_pod_delete_failed", pod=result.pod_name, error=str(e))
            result.delete_error = PodDeleteFailed(str(e))
        else:
            logger.info("tunnel_pod_deleted", pod=result.pod_name)
        result.enter(TunnelState.IDLE)
