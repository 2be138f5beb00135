"""
Destination safety checks for outbound fetches.

A URL is only fetched when its scheme is http(s), its port is standard
(unless explicitly allowed) and every address its host resolves to is
public. The check is repeated for each redirect hop by the fetcher.
"""

from __future__ import annotations

import asyncio
import ipaddress
import socket
from typing import Awaitable, Callable
from urllib.parse import urlsplit

from ..errors import BlockedHostError, InvalidUrlError


Resolver = Callable[[str], Awaitable[list[str]]]

ALLOWED_SCHEMES = ("http", "https")
STANDARD_PORTS = (80, 443)

_PRIVATE_V4 = tuple(
    ipaddress.IPv4Network(net)
    for net in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "100.64.0.0/10",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "224.0.0.0/3",
    )
)
_PRIVATE_V6 = tuple(
    ipaddress.IPv6Network(net)
    for net in (
        "::/128",
        "::1/128",
        "fe80::/10",
        "fc00::/7",
        "fec0::/10",
    )
)


def validate_url(url: str, allow_any_port: bool = False) -> str:
    """Check scheme, host and port of ``url`` and return it stripped.

    Raises:
        InvalidUrlError: If the URL is unparsable or not allowed
    """
    try:
        parts = urlsplit(str(url).strip())
        port = parts.port
    except ValueError as exc:
        raise InvalidUrlError("Invalid URL") from exc
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError("Only http/https allowed")
    if not parts.hostname:
        raise InvalidUrlError("Invalid URL")
    if port is not None and not allow_any_port and port not in STANDARD_PORTS:
        raise InvalidUrlError("Blocked non-standard port")
    return str(url).strip()


def is_private_address(address: str) -> bool:
    """Classify an IP literal; anything unparseable counts as private."""
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return True
    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            return _is_private_v4(ip.ipv4_mapped)
        return any(ip in net for net in _PRIVATE_V6)
    return _is_private_v4(ip)


def _is_private_v4(ip: ipaddress.IPv4Address) -> bool:
    return any(ip in net for net in _PRIVATE_V4)


def _ip_literal(host: str) -> str | None:
    candidate = host.strip("[]")
    try:
        ipaddress.ip_address(candidate.split("%", 1)[0])
    except ValueError:
        return None
    return candidate


async def resolve_host(hostname: str) -> list[str]:
    """Resolve ``hostname`` to every address the system resolver returns."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def ensure_public_host(hostname: str, resolver: Resolver | None = None) -> None:
    """Reject loopback, private and unresolvable destinations.

    Raises:
        BlockedHostError: If the host must not be contacted
    """
    host = (hostname or "").lower().rstrip(".")
    if not host or host == "localhost":
        raise BlockedHostError("Blocked host")

    literal = _ip_literal(host)
    if literal is not None:
        if is_private_address(literal):
            family = "IPv6" if ":" in literal else "IPv4"
            raise BlockedHostError(f"Blocked private {family} host")
        return

    resolve = resolver or resolve_host
    try:
        addresses = await resolve(host)
    except (OSError, UnicodeError) as exc:
        raise BlockedHostError("Host resolution failed") from exc
    if not addresses:
        raise BlockedHostError("No DNS results")
    for address in addresses:
        if is_private_address(address):
            family = "IPv6" if ":" in address else "IPv4"
            raise BlockedHostError(f"Blocked private {family} resolution")
