"""
Interactive menus: profile and namespace selection, the action menu,
resource list/search loops, per-resource actions and the tunnel prompts.

Every menu takes the Session explicitly. Cluster and kubectl errors are
printed and the menu continues. Typing "exit" leaves a loop, and Ctrl-C or
EOF at a free-text prompt does the same, backing out one level. Only the
numbered choices (profile, namespace, main action) abort the program.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import click
import structlog

from .config import (
    BOLD,
    CONFIGMAP_ACTIONS,
    EXIT,
    FOLLOW_TAIL_LINES,
    MAIN_ACTIONS,
    POD_ACTIONS,
    PVC_ACTIONS,
    RED,
    SGR0,
    SHELLS,
    SVC_ACTIONS,
    YELLOW,
)
from .exceptions import CommandError, CommandFailed, InvalidAddress, ResourceError
from .formatting import (
    print_config_map_table,
    print_container_table,
    print_event_table,
    print_pod_table,
    print_pvc_table,
    print_service_table,
)
from .profiles import Profile, ProfileFile
from .session import Session
from .tunnel import TunnelOrchestrator, TunnelRequest, split_address

logger = structlog.get_logger()

RULE = "===================================="


def ask(message: str) -> str:
    """
    Free-text prompt; an empty answer is allowed and returned as "".

    Ctrl-C or EOF is answered as EXIT so the caller backs out one level.
    """
    try:
        return click.prompt(message, default="", show_default=False).strip()
    except click.Abort:
        print()
        return EXIT


def choose(message: str, options: list[str]) -> int:
    """Print numbered options and return the chosen index."""
    for i, option in enumerate(options):
        print(f"[{RED} {i} {SGR0}] {option}")
    return click.prompt(message, type=click.IntRange(0, len(options) - 1))


def select_profile(profiles: ProfileFile) -> Optional[Profile]:
    """Let the operator pick a cluster profile. None means "exit" was chosen."""
    options = [p.display_name for p in profiles.configs] + [EXIT]
    index = choose("Choose kubernetes config", options)
    if index == len(options) - 1:
        return None
    return profiles.configs[index]


def select_namespace(session: Session) -> Optional[str]:
    """
    Let the operator pick a namespace from the cluster.

    Returns:
        Namespace name, or None if namespaces cannot be listed.
    """
    try:
        namespaces = [ns.metadata.name for ns in session.resources.list_namespaces()]
    except ResourceError as e:
        print(f"Error listing namespaces: {e}")
        print("Failed to get namespace list, please check if you have permission, "
              "you can manually specify the namespace with -n")
        return None
    if not namespaces:
        print("No namespaces found, specify one with -n")
        return None
    return namespaces[choose("choose k8s namespace", namespaces)]


def run_session(session: Session) -> None:
    """Top-level action loop. Returns when the operator chooses exit."""
    handlers: dict[str, Callable[[Session], None]] = {
        "pods": browse_pods,
        "svc": browse_services,
        "pvc": browse_pvcs,
        "configmap": browse_config_maps,
        "tunnel": tunnel_menu,
    }
    while True:
        action = MAIN_ACTIONS[
            choose(f"choose action in namespace {session.namespace}", MAIN_ACTIONS)
        ]
        if action == EXIT:
            print("bye!!!")
            return
        logger.debug("menu_action", action=action, namespace=session.namespace)
        handlers[action](session)


def run_kubectl(session: Session, *args: str) -> bool:
    """Run kubectl for an action; print failures instead of raising. True on success."""
    try:
        session.kubectl(*args)
    except CommandError as e:
        print(f"Command ended: {e}")
        return False
    return True


def parse_port_pairs(text: str) -> list[str]:
    """Split "8080:80 9090:90" into ["8080:80", "9090:90"]."""
    return [pair for pair in text.split() if pair]


def browse(
    session: Session,
    label: str,
    fetch: Callable[[str], list[Any]],
    print_rows: Callable[[list[Any], Optional[str]], None],
    on_select: Callable[[Session, Any], None],
) -> None:
    """
    List resources, then select by number, filter by name, or exit.

    Args:
        session: Active session.
        label: Plural label used in messages (e.g. "Pods").
        fetch: Lists the resources in a namespace.
        print_rows: Prints the table, optionally filtered by name.
        on_select: Action menu for one selected resource.
    """
    try:
        items = fetch(session.namespace)
    except ResourceError as e:
        print(f"Error listing {label.lower()}: {e}")
        print(f"Failed to get the {label} list under namespace {session.namespace}")
        return
    print(f"{label} in namespace {session.namespace}")
    print_rows(items, None)
    while True:
        answer = ask(f"Enter {label.lower()} number or search, {EXIT} to quit")
        if answer.isdigit() and int(answer) < len(items):
            on_select(session, items[int(answer)])
            try:
                items = fetch(session.namespace)
            except ResourceError as e:
                print(f"Error listing {label.lower()}: {e}")
            print_rows(items, None)
        elif answer == EXIT:
            return
        else:
            print_rows(items, answer)


def prompt_action(kind: str, name: str, actions: dict[str, str]) -> str:
    """Show the action menu header for a selected resource and read an action."""
    print(RULE)
    print(f"Selected {kind}: {YELLOW} {name} {SGR0}")
    print(RULE)
    print(f"command action [{', '.join(actions)}]: ")
    for key, text in actions.items():
        print(f"{RED} {key} {SGR0}: {text}")
    return ask("Enter action")


def browse_pods(session: Session) -> None:
    """List and search pods in the session namespace."""
    browse(session, "Pods", session.resources.list_pods, print_pod_table, pod_menu)


def browse_services(session: Session) -> None:
    """List and search services in the session namespace."""
    browse(session, "Services", session.resources.list_services, print_service_table, service_menu)


def browse_pvcs(session: Session) -> None:
    """List and search persistent volume claims in the session namespace."""
    browse(
        session,
        "PVCs",
        session.resources.list_persistent_volume_claims,
        print_pvc_table,
        pvc_menu,
    )


def browse_config_maps(session: Session) -> None:
    """List and search config maps in the session namespace."""
    browse(
        session,
        "ConfigMaps",
        session.resources.list_config_maps,
        print_config_map_table,
        config_map_menu,
    )


def exec_shell(session: Session, pod_name: str, container: Optional[str] = None) -> None:
    """Exec into a container, trying each shell in SHELLS until one starts."""
    target = [pod_name] + (["-c", container] if container else [])
    for shell in SHELLS:
        try:
            session.kubectl("exec", "-it", *target, "--", shell)
            return
        except CommandFailed as e:
            logger.debug("shell_failed", pod=pod_name, shell=shell, error=str(e))
        except CommandError as e:
            print(f"Command ended: {e}")
            return
    print(f"No usable shell found in {pod_name}")


def choose_container_and_exec(session: Session, pod: Any) -> None:
    """Exec into the pod, asking which container first when it has several."""
    containers = pod.spec.containers or []
    if len(containers) <= 1:
        exec_shell(session, pod.metadata.name)
        return
    print_container_table(containers)
    answer = ask("Enter container number to exec into")
    if answer == EXIT:
        return
    if answer.isdigit() and int(answer) < len(containers):
        exec_shell(session, pod.metadata.name, containers[int(answer)].name)
    else:
        print("Invalid container number")


def show_pod_events(session: Session, pod_name: str) -> None:
    """Print the events recorded for a pod."""
    try:
        events = session.resources.list_events_for_pod(session.namespace, pod_name)
    except ResourceError as e:
        print(f"Error getting pod events: {e}")
        return
    print_event_table(events)


def ask_port_pairs(target_word: str) -> list[str]:
    """Read "local:remote" pairs for port-forward. Empty when cancelled or blank."""
    answer = ask(
        f'please enter forward ports, example: "localPort1:{target_word}Port1 '
        f'localPort2:{target_word}Port2", so you can input "8080:80 9090:90"'
    )
    if answer == EXIT:
        return []
    ports = parse_port_pairs(answer)
    if not ports:
        print("At least one port pair is required")
    return ports


def pod_menu(session: Session, pod: Any) -> None:
    """
    Action loop for one pod: print, logs, follow logs, shell, events,
    port-forward, download and upload.

    Every action runs through kubectl; a failed or interrupted command is
    reported and the loop asks for the next action.
    """
    name = pod.metadata.name
    while True:
        action = prompt_action("pod", name, POD_ACTIONS)
        if action == "p":
            run_kubectl(session, "get", "pod", name, "-o", "yaml")
        elif action == "l":
            run_kubectl(session, "logs", name)
        elif action == "lf":
            run_kubectl(session, "logs", "-f", f"--tail={FOLLOW_TAIL_LINES}", name)
        elif action == "s":
            choose_container_and_exec(session, pod)
        elif action == "e":
            show_pod_events(session, name)
        elif action == "fw":
            ports = ask_port_pairs("pod")
            if ports:
                run_kubectl(session, "port-forward", f"pod/{name}", *ports)
        elif action == "cp":
            src = ask("Enter remote file path")
            if src == EXIT:
                continue
            if not src:
                print("Remote file path is required")
                continue
            # Downloads land in the current directory under the remote basename.
            dst = src.rsplit("/", 1)[-1]
            run_kubectl(session, "cp", f"{name}:{src}", dst)
        elif action == "u":
            src = ask("Enter local file path")
            if src == EXIT:
                continue
            dst = ask("Enter remote file path")
            if dst == EXIT:
                continue
            if not src or not dst:
                print("Local and remote file paths are required")
                continue
            run_kubectl(session, "cp", src, f"{name}:{dst}")
        elif action == EXIT:
            return
        else:
            print("Invalid action")


def service_menu(session: Session, svc: Any) -> None:
    """Action loop for one service: print it or port-forward to it."""
    name = svc.metadata.name
    while True:
        action = prompt_action("svc", name, SVC_ACTIONS)
        if action == "p":
            run_kubectl(session, "get", "svc", name, "-o", "yaml")
        elif action == "fw":
            ports = ask_port_pairs("svc")
            if ports:
                run_kubectl(session, "port-forward", f"svc/{name}", *ports)
        elif action == EXIT:
            return
        else:
            print("Invalid action")


def _print_only_menu(kind: str, kubectl_kind: str, actions: dict[str, str]) -> Callable[[Session, Any], None]:
    """Build an action loop for kinds that only support printing as YAML."""

    def menu(session: Session, obj: Any) -> None:
        name = obj.metadata.name
        while True:
            action = prompt_action(kind, name, actions)
            if action == "p":
                run_kubectl(session, "get", kubectl_kind, name, "-o", "yaml")
            elif action == EXIT:
                return
            else:
                print("Invalid action")

    return menu


pvc_menu = _print_only_menu("Pvc", "pvc", PVC_ACTIONS)
config_map_menu = _print_only_menu("ConfigMap", "configmap", CONFIGMAP_ACTIONS)


def prompt_tunnel_request() -> Optional[TunnelRequest]:
    """
    Ask for a target address and local port until both are valid.

    Returns:
        The request, or None when the operator typed exit (or pressed
        Ctrl-C) at either prompt.
    """
    while True:
        address = ask(
            "Enter target address (e.g. 10.0.0.1:8080 or my-svc.ns:8080), "
            f"or '{EXIT}' to quit"
        )
        if address == EXIT:
            return None
        try:
            split_address(address)
        except InvalidAddress as e:
            print(e)
            continue
        local_port = ask("Enter local port to forward to")
        if local_port == EXIT:
            return None
        try:
            return TunnelRequest.parse(address, local_port)
        except InvalidAddress as e:
            print(e)


def tunnel_menu(session: Session, orchestrator: Optional[TunnelOrchestrator] = None) -> None:
    """Run tunnel cycles until the operator types exit at the address prompt."""
    orchestrator = orchestrator or session.tunnel_orchestrator()
    while True:
        request = prompt_tunnel_request()
        if request is None:
            return
        result = orchestrator.run(request, session.tunnel_image_config())
        if result.interrupted:
            print(f"{BOLD}Tunnel to {request.target} interrupted{SGR0}")
        elif not result.ok:
            print(f"{BOLD}Tunnel to {request.target} ended: {result.error}{SGR0}")
        else:
            print(f"{BOLD}Tunnel to {request.target} closed{SGR0}")
