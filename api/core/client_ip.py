"""
Best-guess origin IP for an inbound request.

Resolution order, first non-local candidate wins:
1. first entry of X-Forwarded-For
2. X-Real-IP
3. the client IP computed by the framework
4. the transport peer address (loopback is reported as LOCAL_ACCESS)

Only loopback / unspecified / link-local addresses count as "local".
Private ranges (10.*, 172.*, 192.168.*) are real LAN clients and are kept.
"""

from __future__ import annotations

from typing import Mapping

from fastapi import Request

LOCAL_ACCESS = "local access (localhost)"
UNKNOWN = "unknown"

# Matched as string prefixes.
_LOCAL_PREFIXES = ("127.0.0.1", "::1", "localhost", "0.0.0.0", "::", "fe80::")
_LOOPBACK = {"127.0.0.1", "::1"}


def is_local_ip(ip: str) -> bool:
    return any(ip.startswith(prefix) for prefix in _LOCAL_PREFIXES)


def _header(headers: Mapping[str, str], name: str) -> str:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value or ""


def resolve_client_ip(
    headers: Mapping[str, str],
    *,
    client_ip: str | None = None,
    remote_addr: str | None = None,
) -> str:
    forwarded_for = _header(headers, "X-Forwarded-For")
    if forwarded_for:
        ip = forwarded_for.split(",")[0].strip()
        if ip and not is_local_ip(ip):
            return ip

    real_ip = _header(headers, "X-Real-IP")
    if real_ip and not is_local_ip(real_ip):
        return real_ip

    if client_ip and not is_local_ip(client_ip):
        return client_ip

    if remote_addr:
        if not is_local_ip(remote_addr):
            return remote_addr
        if remote_addr in _LOOPBACK:
            return LOCAL_ACCESS

    return UNKNOWN


def client_ip_from_request(request: Request) -> str:
    # ASGI exposes a single peer address; it serves as both the framework
    # client IP and the transport address.
    peer = request.client.host if request.client else None
    return resolve_client_ip(request.headers, client_ip=peer, remote_addr=peer)
