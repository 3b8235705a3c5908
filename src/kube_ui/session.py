"""
Session state shared by the menus.

One Session is built at startup and passed explicitly to every menu and
to the tunnel orchestrator: the kubeconfig in use, the chosen namespace,
the API client for that kubeconfig, and the tunnel settings resolved from
the profile file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .kubectl import run_interactive
from .profiles import expand_path
from .tunnel import TunnelImageConfig, TunnelOrchestrator


@dataclass
class Session:
    kubeconfig: str
    namespace: str
    resources: Any
    tunnel_settings: dict[str, TunnelImageConfig] = field(default_factory=dict)
    relay: Callable[[list[str], str, str], None] = run_interactive

    def kubectl(self, *args: str) -> None:
        """Run kubectl interactively against this session's kubeconfig and namespace."""
        self.relay(list(args), self.kubeconfig, self.namespace)

    def tunnel_image_config(self) -> TunnelImageConfig:
        """Tunnel settings for the active kubeconfig, or defaults if it has no profile."""
        return self.tunnel_settings.get(expand_path(self.kubeconfig), TunnelImageConfig())

    def tunnel_orchestrator(self, **kwargs: Any) -> TunnelOrchestrator:
        return TunnelOrchestrator(
            self.resources,
            forward=lambda args: self.kubectl(*args),
            namespace=self.namespace,
            **kwargs,
        )
