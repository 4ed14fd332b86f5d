from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, cast

import structlog

from magnetlink_optimizer.application.use_cases.analysis import EndpointKind
from magnetlink_optimizer.domain.entities import SearchResult
from magnetlink_optimizer.domain.entities.settings import SORT_OPTIONS
from magnetlink_optimizer.domain.exceptions import MagnetOptimizerError
from magnetlink_optimizer.infrastructure.config import load_config
from magnetlink_optimizer.infrastructure.logging.setup import (
    configure_logging,
    shutdown_logging,
)
from magnetlink_optimizer.interfaces.composition import Container, build_container

log = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="magnetlink-optimizer")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--state-file",
        default=None,
        help="Override the settings/favorites JSON file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # search
    search = commands.add_parser("search", help="Search all enabled engines.")
    search.add_argument("keyword")
    search.add_argument(
        "--pages", type=int, default=None, help="Pages per engine (default: settings)."
    )
    search.add_argument(
        "--smart-filter",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Apply priority keywords and LLM scoring (default: settings).",
    )
    search.add_argument(
        "--scope",
        choices=["all", "fast", "others"],
        default="all",
        help="'fast' searches clmclm.com only, 'others' everything else.",
    )
    search.add_argument("--json", action="store_true", help="Print results as JSON.")

    # engines
    engines = commands.add_parser("engines", help="Manage search engines.")
    engine_cmds = engines.add_subparsers(dest="action", required=True)
    engine_cmds.add_parser("list")
    engine_add = engine_cmds.add_parser("add")
    engine_add.add_argument("name")
    engine_add.add_argument(
        "url_template", help="URL with {keyword} and {page} or {page-1}."
    )
    for action in ("enable", "disable", "delete"):
        engine_cmds.add_parser(action).add_argument("engine_id")

    # keywords
    keywords = commands.add_parser("keywords", help="Manage priority keywords.")
    keyword_cmds = keywords.add_subparsers(dest="action", required=True)
    keyword_cmds.add_parser("list")
    keyword_cmds.add_parser("add").add_argument("keyword")
    keyword_cmds.add_parser("delete").add_argument("keyword_id")

    # favorites
    favorites = commands.add_parser("favorites", help="Manage favorites.")
    favorite_cmds = favorites.add_subparsers(dest="action", required=True)
    favorite_cmds.add_parser("list")
    favorite_add = favorite_cmds.add_parser("add")
    favorite_add.add_argument("--title", required=True)
    favorite_add.add_argument("--magnet", required=True)
    favorite_add.add_argument("--size", default=None)
    favorite_cmds.add_parser("remove").add_argument("favorite_id")
    favorite_cmds.add_parser("search").add_argument("query")

    # llm
    llm = commands.add_parser("llm", help="Show or change the LLM endpoints.")
    llm_cmds = llm.add_subparsers(dest="action", required=True)
    llm_cmds.add_parser("show")
    llm_set = llm_cmds.add_parser("set")
    llm_set.add_argument("kind", choices=["extraction", "analysis"])
    llm_set.add_argument("--provider", default=None)
    llm_set.add_argument("--api-key", default=None)
    llm_set.add_argument("--api-base", default=None)
    llm_set.add_argument("--model", default=None)
    llm_set.add_argument("--batch-size", type=int, default=None)

    # settings
    settings = commands.add_parser("settings", help="Show or change search settings.")
    settings_cmds = settings.add_subparsers(dest="action", required=True)
    settings_cmds.add_parser("show")
    settings_set = settings_cmds.add_parser("set")
    settings_set.add_argument(
        "--smart-filter", action=argparse.BooleanOptionalAction, default=None
    )
    settings_set.add_argument("--max-pages", type=int, default=None)
    settings_set.add_argument("--sort-by", choices=SORT_OPTIONS, default=None)
    settings_set.add_argument(
        "--title-must-contain-keyword",
        action=argparse.BooleanOptionalAction,
        default=None,
    )

    # test-connection
    test = commands.add_parser("test-connection", help="Check an LLM endpoint.")
    test.add_argument("kind", choices=["extraction", "analysis"])

    return parser.parse_args(argv)


# ----------------------------------------------------------------------
# Output helpers
# ----------------------------------------------------------------------


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _mask_key(key: str) -> str:
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


def _render_results(results: list[SearchResult]) -> None:
    if not results:
        print("No results.")
        return
    for index, result in enumerate(results, start=1):
        score = f"[{result.score:>3}] " if result.score is not None else ""
        print(f"{index:>3}. {score}{result.title}")
        details = [result.file_size or "size unknown"]
        if result.tags:
            details.append(", ".join(result.tags))
        print(f"     {' | '.join(details)}")
        print(f"     {result.magnet_link}")
        if result.source_url:
            print(f"     {result.source_url}")


# ----------------------------------------------------------------------
# Command handlers
# ----------------------------------------------------------------------


async def _run_search(container: Container, args: argparse.Namespace) -> int:
    try:
        if args.scope == "fast":
            results = await container.search.search_fast_provider_first(
                args.keyword, args.pages
            )
        elif args.scope == "others":
            results = await container.search.search_other_engines(
                args.keyword, args.pages
            )
        else:
            results = await container.search.search_multi_page(
                args.keyword, args.pages, smart_filter=args.smart_filter
            )
    finally:
        await container.aclose()

    if args.json:
        _print_json([asdict(r) for r in results])
    else:
        _render_results(results)
    return EXIT_OK


async def _run_test_connection(container: Container, kind: str) -> int:
    try:
        message = await container.analysis.test_connection(cast(EndpointKind, kind))
    finally:
        await container.aclose()
    print(message)
    return EXIT_OK


def _run_engines(container: Container, args: argparse.Namespace) -> int:
    uc = container.settings
    if args.action == "list":
        for engine in uc.list_engines():
            state = "enabled" if engine.is_enabled else "disabled"
            builtin = "" if engine.is_deletable else " (built-in)"
            print(
                f"{engine.id}  {engine.name}{builtin}  [{state}]  "
                f"{engine.url_template}"
            )
    elif args.action == "add":
        engine = uc.add_engine(args.name, args.url_template)
        print(f"Added engine {engine.name} ({engine.id})")
    elif args.action in ("enable", "disable"):
        uc.set_engine_enabled(args.engine_id, args.action == "enable")
        print(f"Engine {args.engine_id} {args.action}d")
    elif args.action == "delete":
        uc.delete_engine(args.engine_id)
        print(f"Deleted engine {args.engine_id}")
    return EXIT_OK


def _run_keywords(container: Container, args: argparse.Namespace) -> int:
    uc = container.settings
    if args.action == "list":
        for keyword in uc.list_priority_keywords():
            print(f"{keyword.id}  {keyword.keyword}")
    elif args.action == "add":
        keyword = uc.add_priority_keyword(args.keyword)
        print(f"Added keyword {keyword.keyword} ({keyword.id})")
    elif args.action == "delete":
        uc.delete_priority_keyword(args.keyword_id)
        print(f"Deleted keyword {args.keyword_id}")
    return EXIT_OK


def _run_favorites(container: Container, args: argparse.Namespace) -> int:
    uc = container.settings
    if args.action in ("list", "search"):
        items = (
            uc.list_favorites()
            if args.action == "list"
            else uc.search_favorites(args.query)
        )
        for item in items:
            size = item.file_size or "-"
            print(f"{item.id}  {item.title}  {size}  {item.created_at}")
            print(f"    {item.magnet_link}")
    elif args.action == "add":
        item = uc.add_favorite(
            SearchResult(title=args.title, magnet_link=args.magnet, file_size=args.size)
        )
        print(f"Added favorite {item.id}")
    elif args.action == "remove":
        uc.remove_favorite(args.favorite_id)
        print(f"Removed favorite {args.favorite_id}")
    return EXIT_OK


def _run_llm(container: Container, args: argparse.Namespace) -> int:
    uc = container.settings
    current = uc.get_llm_config()
    if args.action == "show":
        for label, single in (
            ("extraction", current.extraction),
            ("analysis", current.analysis),
        ):
            data = asdict(single)
            data["api_key"] = _mask_key(single.api_key)
            print(f"{label}: {json.dumps(data, ensure_ascii=False)}")
        return EXIT_OK

    single = current.extraction if args.kind == "extraction" else current.analysis
    changes = {
        field: value
        for field, value in (
            ("provider", args.provider),
            ("api_key", args.api_key),
            ("api_base", args.api_base),
            ("model", args.model),
            ("batch_size", args.batch_size),
        )
        if value is not None
    }
    updated = replace(single, **changes)
    if args.kind == "extraction":
        uc.update_llm_config(replace(current, extraction=updated))
    else:
        uc.update_llm_config(replace(current, analysis=updated))
    print(f"Updated {args.kind} endpoint")
    return EXIT_OK


def _run_settings(container: Container, args: argparse.Namespace) -> int:
    uc = container.settings
    current = uc.get_search_settings()
    if args.action == "show":
        _print_json(asdict(current))
        return EXIT_OK

    changes = {
        field: value
        for field, value in (
            ("use_smart_filter", args.smart_filter),
            ("max_pages", args.max_pages),
            ("sort_by", args.sort_by),
            ("title_must_contain_keyword", args.title_must_contain_keyword),
        )
        if value is not None
    }
    uc.update_search_settings(replace(current, **changes))
    print("Updated search settings")
    return EXIT_OK


def _dispatch(container: Container, args: argparse.Namespace) -> int:
    if args.command == "search":
        return asyncio.run(_run_search(container, args))
    if args.command == "test-connection":
        return asyncio.run(_run_test_connection(container, args.kind))
    if args.command == "engines":
        return _run_engines(container, args)
    if args.command == "keywords":
        return _run_keywords(container, args)
    if args.command == "favorites":
        return _run_favorites(container, args)
    if args.command == "llm":
        return _run_llm(container, args)
    if args.command == "settings":
        return _run_settings(container, args)
    raise ValueError(f"unknown command: {args.command}")


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once, builds the container, runs one command.
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.state_file:
        cli_overrides["state_file"] = args.state_file
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    configure_logging(config)
    try:
        container = build_container(config)
        return _dispatch(container, args)
    except MagnetOptimizerError as exc:
        log.debug("command_failed", command=args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        shutdown_logging()


if __name__ == "__main__":
    raise SystemExit(start())
