"""CLI entry point for the EventCatalog SDK."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from eventcatalog_sdk.config import CatalogConfig
from eventcatalog_sdk.errors import CatalogError
from eventcatalog_sdk.eventcatalog import EventCatalog
from eventcatalog_sdk.models.resources import VERSIONED_TYPES


def _dump(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return json.dumps(
            [v.model_dump(mode="json", by_alias=True, exclude_none=True) for v in value],
            indent=2,
        )
    return json.dumps(value.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2)


async def _run(args: argparse.Namespace) -> int:
    config = CatalogConfig()
    catalog = EventCatalog(config=config, root=args.root)

    if args.command == "domains":
        if args.service:
            result = await catalog.services.owning_domains(args.id, args.version)
        else:
            result = await catalog.resolve_owning_domains(args.id, args.version)
        print(_dump(result))
        return 0 if result else 1

    collection = catalog.collection(args.type)

    if args.command == "get":
        resource = await collection.get(args.id, args.version)
        print(_dump(resource))
        return 0 if resource is not None else 1
    if args.command == "list":
        print(_dump(await collection.list(latest_only=args.latest)))
        return 0
    if args.command == "version":
        target = await collection.version(args.id)
        print(target)
        return 0
    if args.command == "rm":
        removed = await collection.remove(args.id, args.version, persist_files=args.keep_files)
        for path in removed:
            print(path)
        return 0
    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventcatalog-sdk",
        description="Read and maintain an EventCatalog directory",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Catalog directory (default: $EVENTCATALOG_ROOT or the current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    sub = parser.add_subparsers(dest="command")

    get_parser = sub.add_parser("get", help="Print a resource as JSON")
    get_parser.add_argument("type", choices=VERSIONED_TYPES)
    get_parser.add_argument("id")
    get_parser.add_argument("--version", default=None)

    list_parser = sub.add_parser("list", help="Print every resource of a type")
    list_parser.add_argument("type", choices=VERSIONED_TYPES)
    list_parser.add_argument(
        "--latest",
        action="store_true",
        help="Skip versioned snapshots",
    )

    version_parser = sub.add_parser(
        "version", help="Move the current resource into versioned/<version>"
    )
    version_parser.add_argument("type", choices=VERSIONED_TYPES)
    version_parser.add_argument("id")

    rm_parser = sub.add_parser("rm", help="Remove a resource by id")
    rm_parser.add_argument("type", choices=VERSIONED_TYPES)
    rm_parser.add_argument("id")
    rm_parser.add_argument("--version", default=None)
    rm_parser.add_argument(
        "--keep-files",
        action="store_true",
        help="Only delete the document, keep attachments",
    )

    domains_parser = sub.add_parser("domains", help="Print the domains owning a message")
    domains_parser.add_argument("id")
    domains_parser.add_argument("version")
    domains_parser.add_argument(
        "--service",
        action="store_true",
        help="Treat the id as a service instead of a message",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        code = asyncio.run(_run(args))
    except CatalogError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
