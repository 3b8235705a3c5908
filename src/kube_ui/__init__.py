"""
kube_ui: Interactive terminal front-end for Kubernetes.

Browses pods, services, PVCs and configmaps in a namespace and dispatches
common actions (logs, shell, port-forward, file copy, events) through
kubectl. Also runs ad-hoc tunnel pods that relay a local port to any
address reachable from inside the cluster.
"""

__version__ = "0.1.0"
BUILD_TIME = "unknown"
