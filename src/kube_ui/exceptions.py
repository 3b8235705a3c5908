"""
Exceptions raised by kube-ui.

Cluster API failures surface as ResourceError, kubectl failures as a
CommandError subclass, and every way a tunnel cycle can end early as a
TunnelError subclass. None of them end the interactive session on their own.
"""

from __future__ import annotations

from typing import Optional


class KubeUIError(Exception):
    """Base exception for kube-ui."""


class ProfileError(KubeUIError):
    """The profile file exists but could not be read or parsed."""


class ResourceError(KubeUIError):
    """
    A Kubernetes API call failed.

    Attributes:
        message: Human-readable error message (usually the API reason).
        status_code: HTTP status code from the API server, if any.
        resource: Resource involved, e.g. "pod/tunnel-pod-abc123".
        namespace: Namespace of the resource, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        resource: Optional[str] = None,
        namespace: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource = resource
        self.namespace = namespace

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource:
            loc = f"[{self.resource}"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


class CommandError(KubeUIError):
    """An interactive kubectl invocation did not complete successfully."""


class CommandInterrupted(CommandError):
    """The operator interrupted kubectl (SIGINT or SIGTERM)."""

    def __init__(self, signum: int) -> None:
        super().__init__(f"command interrupted by signal {signum}")
        self.signum = signum


class CommandFailed(CommandError):
    """kubectl exited non-zero or could not be started."""

    def __init__(self, message: str, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class TunnelError(KubeUIError):
    """Base for errors that end a tunnel cycle."""


class InvalidAddress(TunnelError):
    """Target address or local port is malformed. Nothing was created."""


class PodCreateFailed(TunnelError):
    """The API rejected the tunnel pod. Nothing to clean up."""


class CreateInterrupted(TunnelError):
    """The operator interrupted while the create request was in flight."""


class PodFetchFailed(TunnelError):
    """Reading the tunnel pod failed while waiting for it to run."""


class WaitInterrupted(TunnelError):
    """The operator interrupted while the tunnel pod was starting."""


class ForwardFailed(TunnelError):
    """kubectl port-forward was interrupted or exited with failure."""


class PodDeleteFailed(TunnelError):
    """Deleting the tunnel pod failed. Reported, never raised to callers."""
