"""
Interactive kubectl invocation.

Every action that shells out (logs, exec, port-forward, cp, get -o yaml)
goes through run_interactive(): kubectl inherits the terminal's stdin,
stdout and stderr, and the call races process exit against SIGINT/SIGTERM
delivered to kube-ui. An interrupt is forwarded to kubectl as SIGINT,
escalated to a kill when that cannot be delivered or is ignored, and
reported as CommandInterrupted.
"""

from __future__ import annotations

import shlex
import signal
import subprocess
from typing import Optional

import structlog

from .config import INTERRUPT_GRACE_SECONDS, RED, SGR0
from .exceptions import CommandFailed, CommandInterrupted

logger = structlog.get_logger()

# How often the wait loop checks for a pending interrupt.
WAIT_INTERVAL = 0.1

INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_kubectl_command(args: list[str], kubeconfig: str, namespace: str) -> list[str]:
    """
    Prefix args with kubectl and the session's kubeconfig and namespace.

    Args:
        args: kubectl arguments (e.g. ["logs", "-f", "my-pod"]).
        kubeconfig: Kubeconfig path passed with --kubeconfig.
        namespace: Namespace passed with -n.

    Returns:
        Full argv, e.g. ["kubectl", "--kubeconfig", path, "-n", ns, "logs", "my-pod"].
    """
    return ["kubectl", "--kubeconfig", kubeconfig, "-n", namespace] + list(args)


class InterruptWatcher:
    """
    Record SIGINT/SIGTERM while active instead of raising KeyboardInterrupt.

    Used as a context manager; the previous handlers are restored on exit.
    """

    def __init__(self) -> None:
        self.signum: Optional[int] = None
        self._previous: dict[int, object] = {}

    def _handle(self, signum: int, frame: object) -> None:
        if self.signum is None:
            self.signum = signum

    @property
    def triggered(self) -> bool:
        return self.signum is not None

    def __enter__(self) -> InterruptWatcher:
        for sig in INTERRUPT_SIGNALS:
            self._previous[sig] = signal.signal(sig, self._handle)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for sig, handler in self._previous.items():
            signal.signal(sig, handler)
        self._previous.clear()


def stop_process(proc: subprocess.Popen, grace: float = INTERRUPT_GRACE_SECONDS) -> None:
    """
    Ask proc to stop with SIGINT; kill it if that fails or it does not exit.

    Args:
        proc: Running child process.
        grace: Seconds to wait after SIGINT before killing.
    """
    try:
        proc.send_signal(signal.SIGINT)
    except OSError as e:
        print(f"Failed to send interrupt signal: {e}")
        logger.warning("kubectl_interrupt_failed", pid=proc.pid, error=str(e))
        proc.kill()
        proc.wait()
        return
    try:
        proc.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("kubectl_kill_after_grace", pid=proc.pid, grace=grace)
        proc.kill()
        proc.wait()


def run_interactive(args: list[str], kubeconfig: str, namespace: str) -> None:
    """
    Run kubectl attached to the terminal and wait for it.

    Prints the command line before running it. Blocks until kubectl exits
    or kube-ui receives SIGINT/SIGTERM.

    Args:
        args: kubectl arguments without kubeconfig/namespace flags.
        kubeconfig: Kubeconfig path for the session.
        namespace: Namespace for the session.

    Raises:
        CommandInterrupted: A signal arrived before or while kubectl exited.
        CommandFailed: kubectl could not be started or exited non-zero.
    """
    cmd = build_kubectl_command(args, kubeconfig, namespace)
    print(f"exec command: {RED} {shlex.join(cmd)} {SGR0}")
    logger.debug("kubectl_start", argv=cmd)

    with InterruptWatcher() as watcher:
        try:
            proc = subprocess.Popen(cmd)
        except OSError as e:
            raise CommandFailed(f"cannot run kubectl: {e}") from e
        while True:
            try:
                returncode = proc.wait(timeout=WAIT_INTERVAL)
                break
            except subprocess.TimeoutExpired:
                if watcher.triggered:
                    print(f"\nReceived signal: {signal.Signals(watcher.signum).name}")
                    stop_process(proc)
                    logger.info("kubectl_interrupted", signum=watcher.signum)
                    raise CommandInterrupted(watcher.signum)

    # A signal that raced with a normal exit still counts as an interrupt.
    if watcher.triggered:
        logger.info("kubectl_interrupted", signum=watcher.signum, returncode=returncode)
        raise CommandInterrupted(watcher.signum)
    if returncode != 0:
        logger.debug("kubectl_failed", returncode=returncode)
        raise CommandFailed(f"kubectl exited with code {returncode}", returncode=returncode)
