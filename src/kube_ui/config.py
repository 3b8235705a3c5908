"""
Constants for kube-ui.

Defines ANSI codes for output formatting, the top-level action menu,
the per-kind action menus, and the tunnel pod defaults.
"""

# ANSI escape sequences for terminal output
BOLD = "\033[1m"          # Start bold
SGR0 = "\033[0m"          # Reset
RED = "\033[0;31m"        # Action keys and echoed commands
YELLOW = "\033[1;33m"     # Selected resource name

# Typed at any list or address prompt to go back one level.
EXIT = "exit"

# Top-level actions offered once a namespace is chosen.
MAIN_ACTIONS = ["pods", "svc", "pvc", "configmap", "tunnel", EXIT]

# Per-kind action menus: key -> help text, in display order.
POD_ACTIONS = {
    "p": "print pod info",
    "l": "view all logs",
    "lf": "view rolling logs",
    "s": "enter shell",
    "e": "view pod events",
    "fw": "port forward remote port to local",
    "cp": "copy remote file to current path, download file name is remote file name",
    "u": "upload local file to remote pod",
    EXIT: "quit current action",
}

SVC_ACTIONS = {
    "p": "print svc info",
    "fw": "forward svc port",
    EXIT: "quit current action",
}

PVC_ACTIONS = {
    "p": "print pvc info",
    EXIT: "quit current action",
}

CONFIGMAP_ACTIONS = {
    "p": "print configmap info",
    EXIT: "quit current action",
}

# Shells tried in order when exec'ing into a container.
SHELLS = ["/bin/bash", "/bin/sh"]

# Tail length for rolling logs.
FOLLOW_TAIL_LINES = 1000

# Tunnel pod defaults.
DEFAULT_TUNNEL_IMAGE = "alpine/socat"
TUNNEL_POD_PREFIX = "tunnel-pod-"
TUNNEL_CONTAINER_NAME = "tunnel"
TUNNEL_SUFFIX_LENGTH = 6
TUNNEL_SUFFIX_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
TUNNEL_ACTIVE_DEADLINE_SECONDS = 3600
TUNNEL_POLL_INTERVAL = 1.0

# Profile file: $KUBE_UI_CONFIG or ~/.kube-ui
PROFILE_ENV_VAR = "KUBE_UI_CONFIG"
PROFILE_FILE_NAME = ".kube-ui"

# Seconds to wait for kubectl to exit after SIGINT before killing it.
INTERRUPT_GRACE_SECONDS = 5.0
