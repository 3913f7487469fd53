"""
Resolver implementations usable wherever netutil expects a ``resolver``.

- StaticResolver: fixed host -> IP table, optionally falling back to another
  resolver for hosts it does not know
- DnsResolver: A/AAAA lookups through dnspython with short timeouts

Both are plain callables ``address -> TCPAddr`` and raise ResolutionError on
failure.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import dns.exception
import dns.resolver

from netutil import ResolutionError, Resolver, TCPAddr, canonical_ip, split_address


logger = logging.getLogger("netutil")

DEFAULT_DNS_TIMEOUT = 2.0


class StaticResolver:
    """Resolve hosts from an in-memory table.

    A host mapped to an empty string is treated as having no address.
    """

    def __init__(
        self, hosts: Mapping[str, str], fallback: Optional[Resolver] = None
    ) -> None:
        self.hosts = dict(hosts)
        self.fallback = fallback

    def __call__(self, address: str) -> TCPAddr:
        host, port = split_address(address)
        literal = canonical_ip(host)
        if literal is not None:
            return TCPAddr(ip=literal, port=port)
        if host in self.hosts:
            ip = self.hosts[host]
            if not ip:
                raise ResolutionError(f"cannot resolve host {host!r}")
            return TCPAddr(ip=canonical_ip(ip) or ip, port=port)
        if self.fallback is not None:
            return self.fallback(address)
        raise ResolutionError(f"cannot resolve host {host!r}")


class DnsResolver:
    """Resolve hosts by querying A then AAAA records with dnspython."""

    record_types = ("A", "AAAA")

    def __init__(
        self,
        timeout: float = DEFAULT_DNS_TIMEOUT,
        resolver: Optional[Any] = None,
    ) -> None:
        self.timeout = timeout
        self._resolver = resolver

    @property
    def resolver(self) -> Any:
        if self._resolver is None:
            try:
                resolver = dns.resolver.Resolver()
            except dns.exception.DNSException as exc:
                raise ResolutionError(f"DNS resolver unavailable: {exc}") from exc
            resolver.lifetime = self.timeout
            resolver.timeout = self.timeout
            self._resolver = resolver
        return self._resolver

    def __call__(self, address: str) -> TCPAddr:
        host, port = split_address(address)
        literal = canonical_ip(host)
        if literal is not None:
            return TCPAddr(ip=literal, port=port)

        last_exc: Optional[Exception] = None
        for qtype in self.record_types:
            try:
                answers = self.resolver.resolve(host, qtype)
            except dns.exception.DNSException as exc:
                logger.debug("%s lookup for %s failed: %s", qtype, host, exc)
                last_exc = exc
                continue
            for rdata in answers:
                return TCPAddr(ip=canonical_ip(rdata.to_text()) or rdata.to_text(), port=port)

        raise ResolutionError(f"no addresses found for host {host!r}") from last_exc


__all__ = ["StaticResolver", "DnsResolver", "DEFAULT_DNS_TIMEOUT"]
