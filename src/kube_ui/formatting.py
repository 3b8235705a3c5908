"""
Plain-text tables for the resource menus.

Each print_*_table() takes the full list from the API plus an optional
name filter. Rows keep their index in the unfiltered list so the number
the operator types always selects the same resource.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def format_table(headers: list[str], rows: list[list[str]], indent: str = "") -> list[str]:
    """
    Render rows as left-aligned columns under a dashed header rule.

    Returns:
        Output lines (header, rule, one per row).
    """
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    fmt = indent + "  ".join(f"{{{i}:<{w}}}" for i, w in enumerate(widths))
    lines = [fmt.format(*headers).rstrip()]
    lines.append(indent + "  ".join("-" * w for w in widths))
    for row in rows:
        lines.append(fmt.format(*row).rstrip())
    return lines


def print_table(headers: list[str], rows: list[list[str]]) -> None:
    """Print an aligned table to stdout."""
    for line in format_table(headers, rows):
        print(line)


def format_age(since: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Age in kubectl style: 45s, 12m, 3h, 5d. "<unknown>" when since is None."""
    if since is None:
        return "<unknown>"
    now = now or datetime.now(timezone.utc)
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    seconds = max(0, int((now - since).total_seconds()))
    if seconds < 120:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 120:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 48:
        return f"{hours}h"
    return f"{hours // 24}d"


def matches(name: str, query: Optional[str]) -> bool:
    """Substring name filter; an empty query matches everything."""
    return not query or query in name


def _indexed(items: list[Any], query: Optional[str]) -> list[tuple[int, Any]]:
    return [(i, item) for i, item in enumerate(items) if matches(item.metadata.name, query)]


def pod_rows(pods: list[Any], query: Optional[str] = None, now: Optional[datetime] = None) -> list[list[str]]:
    """
    Rows for the pod table: number, name, phase, restarts, age.

    The number column keeps each pod's position in the unfiltered list, so
    a number typed after a search still selects the right pod.
    """
    rows = []
    for i, pod in _indexed(pods, query):
        status = pod.status
        restarts = sum(cs.restart_count or 0 for cs in (status.container_statuses or []))
        rows.append([
            str(i),
            pod.metadata.name,
            status.phase or "Unknown",
            str(restarts),
            format_age(status.start_time, now),
        ])
    return rows


def print_pod_table(pods: list[Any], query: Optional[str] = None) -> None:
    """Print pods, optionally filtered by a name substring."""
    print_table(["NUMBER", "NAME", "STATUS", "RESTARTS", "AGE"], pod_rows(pods, query))


def service_rows(services: list[Any], query: Optional[str] = None) -> list[list[str]]:
    """Rows for the service table: type, cluster IP, external IPs and ports."""
    rows = []
    for i, svc in _indexed(services, query):
        spec = svc.spec
        ports = [f"{p.port}/{p.protocol}" for p in (spec.ports or [])]
        rows.append([
            str(i),
            svc.metadata.name,
            spec.type or "",
            spec.cluster_ip or "",
            ",".join(spec.external_i_ps or []),
            ",".join(ports),
        ])
    return rows


def print_service_table(services: list[Any], query: Optional[str] = None) -> None:
    print_table(
        ["NUMBER", "NAME", "TYPE", "CLUSTER-IP", "EXTERNAL-IP", "PORT(S)"],
        service_rows(services, query),
    )


def pvc_rows(pvcs: list[Any], query: Optional[str] = None) -> list[list[str]]:
    """Rows for the PVC table: phase, storage class, capacity and access modes."""
    rows = []
    for i, pvc in _indexed(pvcs, query):
        capacity = (pvc.status.capacity or {}).get("storage", "")
        rows.append([
            str(i),
            pvc.metadata.name,
            pvc.status.phase or "",
            pvc.spec.storage_class_name or "",
            str(capacity),
            ",".join(pvc.spec.access_modes or []),
        ])
    return rows


def print_pvc_table(pvcs: list[Any], query: Optional[str] = None) -> None:
    print_table(
        ["NUMBER", "NAME", "STATUS", "STORAGECLASS", "CAPACITY", "ACCESS MODES"],
        pvc_rows(pvcs, query),
    )


def config_map_rows(config_maps: list[Any], query: Optional[str] = None) -> list[list[str]]:
    """Rows for the config map table: name and number of data keys."""
    return [
        [str(i), cm.metadata.name, str(len(cm.data or {}))]
        for i, cm in _indexed(config_maps, query)
    ]


def print_config_map_table(config_maps: list[Any], query: Optional[str] = None) -> None:
    print_table(["NUMBER", "NAME", "DATA"], config_map_rows(config_maps, query))


def event_rows(events: list[Any], now: Optional[datetime] = None) -> list[list[str]]:
    """Rows for the event table, in the order the API returned them."""
    rows = []
    for ev in events:
        source = ev.source.component if ev.source else ""
        rows.append([
            ev.type or "",
            ev.reason or "",
            format_age(ev.first_timestamp, now),
            source or "",
            ev.message or "",
        ])
    return rows


def print_event_table(events: list[Any]) -> None:
    print_table(["TYPE", "REASON", "AGE", "FROM", "MESSAGE"], event_rows(events))


def print_container_table(containers: list[Any]) -> None:
    """Numbered container list used to pick an exec target."""
    print_table(["NUMBER", "CONTAINER NAME"], [[str(i), c.name] for i, c in enumerate(containers)])
