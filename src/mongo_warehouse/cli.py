"""Command line interface for the warehouse connection helpers."""

from __future__ import annotations

import argparse

from loguru import logger

from mongo_warehouse.core.cancellation import install_shutdown_handlers
from mongo_warehouse.core.errors import WarehouseError
from mongo_warehouse.core.logging import configure_logging
from mongo_warehouse.db.metadata import message_type, register_message_type
from mongo_warehouse.db.mongo import drop_database, make_connection, resolve_connection_settings


def _add_connection_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default="", help="Server host (default: warehouse_host or localhost)")
    parser.add_argument("--port", type=int, default=0, help="Server port (default: warehouse_port or 27017)")
    parser.add_argument("--timeout", type=float, default=0.0, help="Seconds to keep retrying")
    parser.add_argument("--database", default="", help="Database used for authentication")
    parser.add_argument("--user", default="")
    parser.add_argument("--password", default="")
    parser.add_argument("--authenticate", action="store_true")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MongoDB warehouse connection tools")
    parser.add_argument("--log-level", default=None, help="Override MONGO_WAREHOUSE_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    ping = subparsers.add_parser("ping", help="Connect and report the resolved settings")
    _add_connection_options(ping)

    drop = subparsers.add_parser("drop-database", help="Drop a database")
    drop.add_argument("name")
    _add_connection_options(drop)

    lookup = subparsers.add_parser("message-type", help="Print the message type stored for a collection")
    lookup.add_argument("database_name")
    lookup.add_argument("collection")
    _add_connection_options(lookup)

    register = subparsers.add_parser("register-type", help="Record the message type of a collection")
    register.add_argument("database_name")
    register.add_argument("collection")
    register.add_argument("type")
    register.add_argument("--md5sum", default="")
    _add_connection_options(register)
    return parser


def _connect(args: argparse.Namespace):
    return make_connection(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        database_name=args.database,
        authenticate=args.authenticate,
        user=args.user,
        password=args.password,
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    install_shutdown_handlers()
    try:
        if args.command == "ping":
            client = _connect(args)
            client.close()
            resolved = resolve_connection_settings(
                host=args.host,
                port=args.port,
                timeout=args.timeout,
                database_name=args.database,
                authenticate=args.authenticate,
                user=args.user,
                password=args.password,
            )
            print(resolved.redacted())
        elif args.command == "drop-database":
            drop_database(args.name, args.host, args.port, args.timeout)
            print({"dropped": args.name})
        elif args.command == "message-type":
            client = _connect(args)
            try:
                print(message_type(client, args.database_name, args.collection))
            finally:
                client.close()
        elif args.command == "register-type":
            client = _connect(args)
            try:
                register_message_type(client, args.database_name, args.collection, args.type, args.md5sum)
            finally:
                client.close()
    except WarehouseError as exc:
        logger.error("{exc}", exc=exc)
        raise SystemExit(1) from exc
