"""
CLI entry point for kube-ui.

Without a subcommand, resolves the kubeconfig (from -f or a profile chosen
from the profile file), builds the session, picks a namespace if none was
given, and runs the interactive menus. Subcommands print the version or
the profile file.
"""

from __future__ import annotations

import json
import sys
from typing import Optional

import click
import structlog

from . import BUILD_TIME, __version__
from .client import ResourceClient
from .exceptions import ProfileError, ResourceError
from .log import configure_logging
from .menu import run_session, select_namespace, select_profile
from .profiles import ProfileFile, default_profile_path, expand_path, load_profiles
from .session import Session

logger = structlog.get_logger()

# Shown at the bottom of kube-ui --help / kube-ui -h
EPILOG = """
Examples:

  kube-ui                          # Choose a profile from ~/.kube-ui, then a namespace
  kube-ui -f ~/.kube/staging       # Use this kubeconfig, choose a namespace
  kube-ui -f ~/.kube/staging -n app
  kube-ui config                   # Show the profile file
  kube-ui version                  # Show version

Profile file: $KUBE_UI_CONFIG or ~/.kube-ui
"""


def start(kubeconfig: Optional[str], namespace: Optional[str]) -> int:
    """
    Resolve kubeconfig and namespace, then run the interactive session.

    Returns:
        Process exit code.
    """
    try:
        profiles = load_profiles()
    except ProfileError as e:
        if not kubeconfig:
            print(f"Error loading kube-ui config: {e}")
            return 1
        # An explicit kubeconfig does not need profiles; only tunnel defaults are lost.
        logger.warning("profile_file_ignored", error=str(e))
        profiles = ProfileFile()

    if not kubeconfig and profiles.configs:
        profile = select_profile(profiles)
        if profile is None:
            print("bye!!!")
            return 0
        kubeconfig = profile.path
        namespace = namespace or profile.namespace or None

    if not kubeconfig:
        print("Kubeconfig file is required")
        return 1
    kubeconfig = expand_path(kubeconfig)

    try:
        resources = ResourceClient(kubeconfig)
    except ResourceError as e:
        print(f"Error creating Kubernetes client: {e}")
        return 1

    session = Session(
        kubeconfig=kubeconfig,
        namespace=namespace or "",
        resources=resources,
        tunnel_settings=profiles.tunnel_settings_by_path(),
    )
    if not session.namespace:
        chosen = select_namespace(session)
        if chosen is None:
            return 1
        session.namespace = chosen

    logger.debug("session_started", kubeconfig=kubeconfig, namespace=session.namespace)
    run_session(session)
    return 0


@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.option(
    "-f",
    "--kubeconfig",
    "kubeconfig",
    metavar="PATH",
    help="Path to the kubeconfig file (skips profile selection)",
)
@click.option(
    "-n",
    "--namespace",
    "namespace",
    metavar="NS",
    help="Kubernetes namespace to use (skips namespace selection)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Log debug detail to stderr",
)
@click.pass_context
def main(
    ctx: click.Context,
    kubeconfig: Optional[str],
    namespace: Optional[str],
    verbose: bool,
) -> None:
    """
    kube-ui: an interactive interface for managing Kubernetes resources.

    Browse pods, services, PVCs and configmaps, run kubectl actions on
    them, and open tunnels to in-cluster addresses.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        ctx.exit(start(kubeconfig, namespace))


@main.command()
def version() -> None:
    """Print the version number."""
    print(f"kube-ui version {__version__}")
    print(f"Build Time: {BUILD_TIME}")


@main.command("config")
def show_config() -> None:
    """Display the kube-ui profile file."""
    path = default_profile_path()
    if not path.exists():
        print(f"No configuration file found at {path}")
        return
    try:
        data = json.loads(path.read_text())
    except OSError as e:
        print(f"Error reading {path}: {e}")
        return
    except json.JSONDecodeError as e:
        print(f"Error formatting JSON: {e}")
        return
    print(f"Configuration file: {path}")
    print()
    print(json.dumps(data, indent=4))


if __name__ == "__main__":
    sys.exit(main())
