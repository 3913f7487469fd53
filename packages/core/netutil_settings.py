"""
Environment-driven settings for picking a resolver.

Variables:
- NETUTIL_RESOLVER: "system" (default), "dns" or "static"
- NETUTIL_DNS_TIMEOUT: seconds for dnspython lookups (default 2.0)
- NETUTIL_HOSTS: "name=ip,name=ip" overrides consulted before the resolver
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from netutil import Resolver, resolve_tcp_addr
from netutil_resolvers import DEFAULT_DNS_TIMEOUT, DnsResolver, StaticResolver


RESOLVER_KINDS = ("system", "dns", "static")


@dataclass
class Settings:
    resolver: str = "system"
    dns_timeout: float = DEFAULT_DNS_TIMEOUT
    hosts: dict = field(default_factory=dict)


def parse_hosts(value: str) -> dict[str, str]:
    """Parse "name=ip,name=ip" into a dict. Blank entries are ignored."""
    hosts: dict[str, str] = {}
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, ip = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"invalid host override {item!r}, expected name=ip")
        hosts[name.strip()] = ip.strip()
    return hosts


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    kind = env.get("NETUTIL_RESOLVER", "system").strip().lower() or "system"
    if kind not in RESOLVER_KINDS:
        raise ValueError(f"Unknown resolver: {kind}")

    raw_timeout = env.get("NETUTIL_DNS_TIMEOUT", "").strip()
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_DNS_TIMEOUT
    except ValueError as exc:
        raise ValueError(f"invalid NETUTIL_DNS_TIMEOUT: {raw_timeout!r}") from exc

    return Settings(
        resolver=kind,
        dns_timeout=timeout,
        hosts=parse_hosts(env.get("NETUTIL_HOSTS", "")),
    )


def build_resolver(settings: Settings) -> Resolver:
    if settings.resolver == "static":
        return StaticResolver(settings.hosts)

    base: Resolver
    if settings.resolver == "dns":
        base = DnsResolver(timeout=settings.dns_timeout)
    else:
        base = resolve_tcp_addr

    if settings.hosts:
        return StaticResolver(settings.hosts, fallback=base)
    return base


__all__ = ["Settings", "RESOLVER_KINDS", "parse_hosts", "load_settings", "build_resolver"]
