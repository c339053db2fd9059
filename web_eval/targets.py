"""Target URL helpers: origin derivation and the pre-run target guard."""

from __future__ import annotations

import ipaddress
from typing import Iterable, Optional
from urllib.parse import urlsplit

from .models import RunResult, RunStatus, Report, Step, TaskRecord, now_iso

_DEFAULT_PORTS = {"http": 80, "https": 443}
_PRIVATE_V4_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
)
_PRIVATE_V6_NETWORKS = (
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("fc00::/7"),
)


def url_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for an absolute URL, or "" if unparsable."""
    try:
        parts = urlsplit(str(url or "").strip())
        scheme = parts.scheme.lower()
        host = parts.hostname
        port = parts.port
    except ValueError:
        return ""
    if not scheme or not host:
        return ""
    if ":" in host:
        host = f"[{host}]"
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_same_origin(url: str, origin: str) -> bool:
    if not origin:
        return False
    return url_origin(url) == origin


def is_forbidden_hostname(host: str) -> bool:
    h = str(host or "").strip().lower().lstrip("[").rstrip("]")
    if not h:
        return True
    if h == "localhost" or h.endswith(".local"):
        return True
    try:
        addr = ipaddress.ip_address(h)
    except ValueError:
        return False
    networks = _PRIVATE_V4_NETWORKS if addr.version == 4 else _PRIVATE_V6_NETWORKS
    return any(addr in net for net in networks)


def validate_target_url(url: str, allowed_origins: Optional[Iterable[str]] = None) -> Optional[str]:
    """Return None when ``url`` may be evaluated, else a short rejection reason."""
    try:
        parts = urlsplit(str(url or "").strip())
        port = parts.port
    except ValueError:
        return "invalid_url"
    if not parts.scheme or not parts.netloc:
        return "invalid_url"
    if parts.scheme.lower() not in ("http", "https"):
        return "invalid_scheme"
    if port is not None and port not in (80, 443):
        return "port_not_allowed"
    if is_forbidden_hostname(parts.hostname or ""):
        return "forbidden_host"
    allowed = {str(o).strip().lower() for o in (allowed_origins or []) if str(o).strip()}
    if allowed and url_origin(url) not in allowed:
        return "origin_not_allowed"
    return None


def blocked_result(task: TaskRecord, reason: str) -> RunResult:
    """Failed result for a task rejected before any browser work."""
    ts = now_iso()
    error = f"ssrf_blocked:{reason}"
    report = Report(
        task_id=task.id,
        url=task.url,
        task_description=task.task,
        success=False,
        steps=(Step(action="validateTarget", timestamp=ts),),
        console_logs=(),
        network_requests=(),
        errors=(error,),
        duration_ms=0,
        started_at=ts,
        finished_at=ts,
    )
    return RunResult(report=report, status=RunStatus.FAILED, last_error=error)
