from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from rules_mirror.config import ConfigError, YamlConfigLoader
from rules_mirror.config.models import AppConfig, ConfigLoadRequest
from rules_mirror.logging import init_logging
from rules_mirror.service import RulesService, ServiceResult, build_rules_service

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rules-mirror", description="Serve rule files from a Git repository")
    parser.add_argument(
        "--config",
        default="data/config/config.yaml",
        help="Path to config.yaml (default: data/config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured logging level (e.g. DEBUG)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    # Command: serve
    subparsers.add_parser("serve", help="Run the MCP server on stdio")

    # Command: get
    get_parser = subparsers.add_parser("get", help="Print one rule")
    get_parser.add_argument("name", help="Rule name without extension")
    get_parser.add_argument("--refresh", action="store_true", help="Fetch from Git before reading")

    for command, help_text in (
        ("list", "List available rules"),
        ("all", "Print all rules as one document"),
        ("readme", "Print the rules repository README"),
    ):
        command_parser = subparsers.add_parser(command, help=help_text)
        command_parser.add_argument("--refresh", action="store_true", help="Fetch from Git before reading")

    # Command: refresh
    subparsers.add_parser("refresh", help="Force a fetch from Git")

    return parser


async def _load_config(args: argparse.Namespace) -> AppConfig:
    loader = YamlConfigLoader()
    request = ConfigLoadRequest(
        yaml_path=args.config,
    )
    return await loader.load(request)


async def _serve(service: RulesService, config: AppConfig) -> int:
    from rules_mirror.adapters.mcp.server import RulesMcpServer

    logger.info("Starting rules server. repository=%s ref=%s", config.repository.url, config.repository.ref)
    server = RulesMcpServer(service=service, name=config.server.name)
    await server.run_stdio()
    return 0


async def _run_command(args: argparse.Namespace, service: RulesService) -> ServiceResult:
    refresh = getattr(args, "refresh", False)
    if args.command == "get":
        return await service.get_rule(args.name, force_refresh=refresh)
    if args.command == "list":
        return await service.list_rules(force_refresh=refresh)
    if args.command == "all":
        return await service.get_all_rules(force_refresh=refresh)
    if args.command == "readme":
        return await service.get_readme(force_refresh=refresh)
    return await service.refresh()


async def _main_async(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = await _load_config(args)
    except (ConfigError, ValidationError, FileNotFoundError) as e:
        print(f"Failed to load configuration from {args.config}:\n{e}", file=sys.stderr)
        return 1

    try:
        init_logging(config.logging, level_override=args.log_level)
    except ValueError as e:
        print(f"Failed to initialize logging: {e}", file=sys.stderr)
        return 1
    service = build_rules_service(config)

    if args.command == "serve":
        return await _serve(service, config)

    result = await _run_command(args, service)
    stream = sys.stderr if result.is_error else sys.stdout
    print(result.text, file=stream)
    return 1 if result.is_error else 0


def main() -> None:
    try:
        exit_code = asyncio.run(_main_async())
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
