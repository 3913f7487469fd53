"""
Resolution-aware helpers for advertised peer URL lists.

- resolve_tcp_addr(address): "host:port" -> TCPAddr using the system resolver
- resolve_tcp_addrs(*url_lists): rewrites every URL host to its resolved IP:port
- urls_equal(a, b): positional comparison after resolving each side
- url_strings_equal(a, b): same, starting from raw URL strings

Every function that resolves takes a ``resolver`` callable so callers (and
tests) can inject their own lookup instead of hitting DNS.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence
from urllib.parse import urlsplit


logger = logging.getLogger("netutil")


class NetUtilError(Exception):
    """Base error for this package."""


class ResolutionError(NetUtilError):
    """Address is malformed or its host cannot be resolved."""


class PortParseError(ResolutionError):
    """Port segment of an address is not a valid TCP port."""


class ParseError(NetUtilError, ValueError):
    """String is not a usable URL."""


@dataclass
class URL:
    scheme: str
    host: str

    def __str__(self) -> str:
        return f"{self.scheme}://{self.host}"


@dataclass(frozen=True)
class TCPAddr:
    ip: str
    port: int

    def __str__(self) -> str:
        return join_host_port(self.ip, self.port)


Resolver = Callable[[str], TCPAddr]


def split_host_port(address: str) -> tuple[str, str]:
    """Split "host:port" or "[v6]:port" into host and port strings."""
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ResolutionError(f"missing ']' in address {address!r}")
        host = address[1:end]
        rest = address[end + 1 :]
        if not rest.startswith(":"):
            raise ResolutionError(f"missing port in address {address!r}")
        port = rest[1:]
        if ":" in port:
            raise ResolutionError(f"too many colons in address {address!r}")
        return host, port

    host, sep, port = address.rpartition(":")
    if not sep:
        raise ResolutionError(f"missing port in address {address!r}")
    if ":" in host:
        raise ResolutionError(f"too many colons in address {address!r}")
    if "[" in host or "]" in host:
        raise ResolutionError(f"unexpected bracket in address {address!r}")
    return host, port


def join_host_port(host: str, port: int | str) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def split_address(address: str) -> tuple[str, int]:
    """Split and validate "host:port", returning the host and integer port."""
    host, port = split_host_port(address)
    if not (port.isascii() and port.isdigit()):
        raise PortParseError(f"invalid port {port!r} in address {address!r}")
    value = int(port)
    if value > 65535:
        raise PortParseError(f"port out of range in address {address!r}")
    if not host:
        raise ResolutionError(f"missing host in address {address!r}")
    return host, value


def canonical_ip(host: str) -> str | None:
    """Return the canonical text of a literal IP host, or None for hostnames.

    "0:0:0:0:0:0:0:1" and "::1" both give "::1"; a "%zone" suffix is kept.
    """
    addr, sep, zone = host.partition("%")
    try:
        ip = ipaddress.ip_address(addr)
    except ValueError:
        return None
    return f"{ip}{sep}{zone}"


def is_ip_literal(host: str) -> bool:
    return canonical_ip(host) is not None


def resolve_tcp_addr(address: str) -> TCPAddr:
    """Resolve a "host:port" string to a TCPAddr with the system resolver.

    Literal IPs are returned without a lookup, in canonical form. Raises
    ResolutionError (or its PortParseError subclass) on any failure.
    """
    host, port = split_address(address)
    literal = canonical_ip(host)
    if literal is not None:
        return TCPAddr(ip=literal, port=port)

    try:
        infos = socket.getaddrinfo(
            host, port, type=socket.SOCK_STREAM, proto=socket.IPPROTO_TCP
        )
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(f"cannot resolve host {host!r}: {exc}") from exc
    if not infos:
        raise ResolutionError(f"no addresses found for host {host!r}")

    ip = str(infos[0][4][0])
    return TCPAddr(ip=canonical_ip(ip) or ip, port=port)


def resolve_tcp_addrs(
    *url_lists: List[URL], resolver: Resolver = resolve_tcp_addr
) -> None:
    """Rewrite the host of every URL to its resolved "ip:port", in place.

    Stops at the first failure and raises ResolutionError. URLs handled before
    the failure keep their rewritten host.
    """
    for urls in url_lists:
        for u in urls:
            try:
                addr = resolver(u.host)
            except ResolutionError as exc:
                logger.error("could not resolve host %s: %s", u.host, exc)
                raise
            u.host = str(addr)


def _resolved_host(host: str, resolver: Resolver) -> str:
    try:
        return str(resolver(host))
    except ResolutionError as exc:
        logger.debug("comparing %s literally, resolution failed: %s", host, exc)
        return host


def _url_equal(a: URL, b: URL, resolver: Resolver) -> bool:
    if a.scheme != b.scheme:
        return False
    if a.host == b.host:
        return True
    return _resolved_host(a.host, resolver) == _resolved_host(b.host, resolver)


def urls_equal(
    a: Sequence[URL], b: Sequence[URL], resolver: Resolver = resolve_tcp_addr
) -> bool:
    """Check two URL lists denote the same endpoints, index by index.

    Hosts that fail to resolve are compared as literal strings; this never
    raises.
    """
    if len(a) != len(b):
        return False
    return all(_url_equal(ua, ub, resolver) for ua, ub in zip(a, b))


def parse_url(raw: str) -> URL:
    """Parse "scheme://[user@]host:port[/]" into a URL.

    Userinfo is dropped. A path other than "/", a query or a fragment is
    rejected, since an advertised URL only names an endpoint.
    """
    try:
        parsed = urlsplit(raw.strip())
    except ValueError as exc:
        raise ParseError(f"invalid url {raw!r}: {exc}") from exc
    host = parsed.netloc.rpartition("@")[2]
    if not parsed.scheme or not host:
        raise ParseError(f"invalid url {raw!r}: missing scheme or host")
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        raise ParseError(f"invalid url {raw!r}: must not contain a path, query or fragment")
    return URL(scheme=parsed.scheme.lower(), host=host)


def parse_urls(raws: Iterable[str]) -> list[URL]:
    return [parse_url(raw) for raw in raws]


def url_strings_equal(
    a: Sequence[str], b: Sequence[str], resolver: Resolver = resolve_tcp_addr
) -> bool:
    """Like urls_equal, for raw URL strings.

    A string that fails to parse makes its position unequal, unless the other
    side holds the identical string and it fails to parse too.
    """
    if len(a) != len(b):
        return False
    for raw_a, raw_b in zip(a, b):
        try:
            ua = parse_url(raw_a)
        except ParseError as exc:
            logger.debug("%s", exc)
            ua = None
        try:
            ub = parse_url(raw_b)
        except ParseError as exc:
            logger.debug("%s", exc)
            ub = None

        if ua is None or ub is None:
            if ua is None and ub is None and raw_a == raw_b:
                continue
            return False
        if not _url_equal(ua, ub, resolver):
            return False
    return True


__all__ = [
    "NetUtilError",
    "ResolutionError",
    "PortParseError",
    "ParseError",
    "URL",
    "TCPAddr",
    "Resolver",
    "split_host_port",
    "join_host_port",
    "split_address",
    "canonical_ip",
    "is_ip_literal",
    "resolve_tcp_addr",
    "resolve_tcp_addrs",
    "urls_equal",
    "parse_url",
    "parse_urls",
    "url_strings_equal",
]
