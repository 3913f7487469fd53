import argparse
import csv
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO


def _ensure_core_on_path() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    core_path = repo_root / "packages" / "core"
    if str(core_path) not in sys.path:
        sys.path.insert(0, str(core_path))


_ensure_core_on_path()

from netutil import (  # noqa: E402
    NetUtilError,
    Resolver,
    ResolutionError,
    parse_urls,
    resolve_tcp_addrs,
    url_strings_equal,
)
from netutil_settings import RESOLVER_KINDS, build_resolver, load_settings, parse_hosts  # noqa: E402


logger = logging.getLogger("netutil.cli")


def run_resolve(addresses: Sequence[str], resolver: Resolver, stdout: TextIO) -> int:
    writer = csv.writer(stdout)
    writer.writerow(["address", "ip", "port"])
    for address in addresses:
        try:
            addr = resolver(address)
        except ResolutionError as exc:
            logger.error("Error resolving '%s': %s", address, exc)
            continue
        writer.writerow([address, addr.ip, addr.port])
    return 0


def run_normalize(raw_urls: Sequence[str], resolver: Resolver, stdout: TextIO) -> int:
    try:
        urls = parse_urls(raw_urls)
        resolve_tcp_addrs(urls, resolver=resolver)
    except NetUtilError as exc:
        logger.error("Normalization failed: %s", exc)
        return 1
    for u in urls:
        print(u, file=stdout)
    return 0


def run_compare(a: Sequence[str], b: Sequence[str], resolver: Resolver, stdout: TextIO) -> int:
    equal = url_strings_equal(a, b, resolver=resolver)
    logger.debug("compare %s vs %s -> %s", list(a), list(b), equal)
    print("true" if equal else "false", file=stdout)
    return 0 if equal else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="netutil", description="Peer URL resolution utilities")
    parser.add_argument(
        "--debug", action="store_true", help="Enable DEBUG logging to stderr"
    )
    parser.add_argument(
        "--resolver",
        choices=RESOLVER_KINDS,
        help="Resolver to use (default: $NETUTIL_RESOLVER or system)",
    )
    parser.add_argument(
        "--host",
        dest="hosts",
        action="append",
        default=[],
        metavar="NAME=IP",
        help="Static host override, may be repeated",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_resolve = subparsers.add_parser("resolve", help="Resolve host:port addresses to CSV")
    p_resolve.add_argument("addresses", nargs="+", metavar="ADDR")

    p_normalize = subparsers.add_parser("normalize", help="Rewrite URL hosts to resolved ip:port")
    p_normalize.add_argument("urls", nargs="+", metavar="URL")

    p_compare = subparsers.add_parser("compare", help="Compare two ordered URL lists")
    p_compare.add_argument("-a", nargs="+", required=True, metavar="URL")
    p_compare.add_argument("-b", nargs="+", required=True, metavar="URL")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        settings = load_settings()
        if args.resolver:
            settings.resolver = args.resolver
        for item in args.hosts:
            settings.hosts.update(parse_hosts(item))
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    resolver = build_resolver(settings)

    if args.command == "resolve":
        return run_resolve(args.addresses, resolver, sys.stdout)
    if args.command == "normalize":
        return run_normalize(args.urls, resolver, sys.stdout)
    if args.command == "compare":
        return run_compare(args.a, args.b, resolver, sys.stdout)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
