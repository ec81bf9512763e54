"""CLI entry point for docsearch."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from docsearch.clients.base.exceptions import InvalidArgumentError, SearchClientError
from docsearch.clients.base.registry import create_client
from docsearch.config.settings import Settings
from docsearch.observability.logging import setup_logging
from docsearch.query import build_match_query, build_term_query


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.url:
        settings.backend.url = args.url
    if args.backend:
        settings.backend.name = args.backend
    if args.timeout is not None:
        settings.backend.timeout = args.timeout
    if args.log_level:
        settings.observability.log_level = args.log_level
    settings.observability.log_format = "console"

    setup_logging(settings.observability)

    try:
        if args.command == "search":
            query = _query_from_args(parser, args)
            output: Any = asyncio.run(_search(settings, args.index, query))
        elif args.command == "index":
            document = _document_from_args(args)
            asyncio.run(_index(settings, args.index, args.id, document))
            output = {"result": "indexed", "index": args.index, "id": args.id}
        else:
            asyncio.run(_delete(settings, args.index, args.id))
            output = {"result": "deleted", "index": args.index, "id": args.id}
    except (SearchClientError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2, ensure_ascii=False))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsearch",
        description="docsearch — Index, search and delete documents in a search backend",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--url", type=str, default=None, help="Backend URL (overrides config)")
    parser.add_argument(
        "--backend",
        type=str,
        choices=["elasticsearch", "opensearch", "memory"],
        default=None,
        help="Backend type (overrides config)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Per-operation deadline in seconds")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"docsearch {_get_version()}")

    commands = parser.add_subparsers(dest="command", required=True)

    index_cmd = commands.add_parser("index", help="Store or overwrite a document")
    index_cmd.add_argument("index", help="Index name")
    index_cmd.add_argument("id", help="Document id")
    source = index_cmd.add_mutually_exclusive_group()
    source.add_argument("--document", "-d", type=str, default=None, help="Document as a JSON object")
    source.add_argument("--file", "-f", type=str, default=None, help="Path to a JSON document (default: stdin)")

    search_cmd = commands.add_parser("search", help="Search an index")
    search_cmd.add_argument("index", help="Index name")
    query = search_cmd.add_mutually_exclusive_group(required=True)
    query.add_argument("--match", metavar="FIELD=VALUE", help="Full-text match on a field")
    query.add_argument("--term", metavar="FIELD=VALUE", help="Exact-value match on a field")
    query.add_argument("--query", "-q", metavar="JSON", help="Raw query document")

    delete_cmd = commands.add_parser("delete", help="Delete a document")
    delete_cmd.add_argument("index", help="Index name")
    delete_cmd.add_argument("id", help="Document id")

    return parser


def _query_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> dict[str, Any]:
    if args.query:
        return _load_json_object(args.query, "query")

    builder = build_match_query if args.match else build_term_query
    field, sep, value = (args.match or args.term).partition("=")
    if not sep:
        parser.error("expected FIELD=VALUE")
    return builder(field, value)


def _document_from_args(args: argparse.Namespace) -> dict[str, Any]:
    if args.document is not None:
        raw = args.document
    elif args.file is not None:
        raw = Path(args.file).read_text(encoding="utf-8")
    else:
        raw = sys.stdin.read()
    return _load_json_object(raw, "document")


def _load_json_object(raw: str, label: str) -> dict[str, Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(f"{label} is not valid JSON: {e}") from e
    if not isinstance(value, dict):
        raise InvalidArgumentError(f"{label} must be a JSON object")
    return value


async def _search(settings: Settings, index: str, query: dict[str, Any]) -> list[dict[str, Any]]:
    async with create_client(settings) as client:
        return await client.search(index, query)


async def _index(settings: Settings, index: str, doc_id: str, document: dict[str, Any]) -> None:
    async with create_client(settings) as client:
        await client.index(index, doc_id, document)


async def _delete(settings: Settings, index: str, doc_id: str) -> None:
    async with create_client(settings) as client:
        await client.delete(index, doc_id)


def _get_version() -> str:
    """Get the package version."""
    try:
        from docsearch import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
