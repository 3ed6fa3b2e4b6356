# src/main.py - v2
"""CLI entry point: run, clear-cache, inspect commands.

Usage:
    convocache run <tenant> [-m module] [--concurrency N]
    convocache clear-cache <tenant> [-m module]
    convocache inspect <tenant> [-m module]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from convocache.core.models import ANALYSIS_MODULES
from convocache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="convocache",
        description=f"convocache v{__version__} - differential conversation analysis cache",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    def add_target(p: argparse.ArgumentParser) -> None:
        p.add_argument("tenant", help="Tenant identifier")
        p.add_argument(
            "-m", "--module", choices=ANALYSIS_MODULES, default="observatory",
            help="Analysis module (default: observatory)",
        )

    # --- run ---
    p_run = subparsers.add_parser("run", help="Run incremental analysis")
    add_target(p_run)
    p_run.add_argument(
        "--concurrency", type=int, default=None,
        help="Conversations analyzed in parallel (default: ANALYSIS_CONCURRENCY)",
    )
    p_run.set_defaults(func=_cmd_run)

    # --- clear-cache ---
    p_clear = subparsers.add_parser("clear-cache", help="Empty the analysis cache")
    add_target(p_clear)
    p_clear.set_defaults(func=_cmd_clear_cache)

    # --- inspect ---
    p_inspect = subparsers.add_parser("inspect", help="Show cache document summary")
    add_target(p_inspect)
    p_inspect.set_defaults(func=_cmd_inspect)

    return parser


def _load_settings(args: argparse.Namespace):
    from convocache.config.settings import load_settings

    overrides: dict[str, object] = {}
    if getattr(args, "concurrency", None) is not None:
        overrides["analysis_concurrency"] = args.concurrency
    return load_settings(**overrides)


async def _cmd_run(args: argparse.Namespace, settings) -> int:
    """Trigger one analysis run and print its stats."""
    from convocache.api.facade import trigger_analysis

    outcome = await trigger_analysis(args.tenant, args.module, settings=settings)

    if outcome.status == "failed":
        print(f"\nAnalysis failed ({outcome.error_type}): {outcome.message}")
        return 1
    if outcome.status == "no_data":
        print(f"\nNothing to analyze for {args.tenant}/{args.module}")
        return 0

    stats = outcome.stats
    print(f"\nAnalysis complete ({outcome.run_id}):")
    print(f"  Conversations:  {stats.total_conversations}")
    print(f"  From cache:     {stats.cached_conversations}")
    print(f"  New:            {stats.new_conversations}")
    print(f"  Modified:       {stats.modified_conversations}")
    print(f"  Savings:        {stats.estimated_savings}%")
    return 0


async def _cmd_clear_cache(args: argparse.Namespace, settings) -> int:
    """Clear the cache document."""
    from convocache.api.facade import clear_cache

    await clear_cache(args.tenant, args.module, settings=settings)
    print(f"Cleared {args.module} analysis cache for {args.tenant}")
    return 0


async def _cmd_inspect(args: argparse.Namespace, settings) -> int:
    """Print a summary of the cache document."""
    from convocache.api.facade import inspect_cache

    summary = await inspect_cache(args.tenant, args.module, settings=settings)
    print(f"\nCache for {summary.tenant_id}/{summary.module}:")
    print(f"  Entries:        {summary.entries}")
    last = summary.last_analysis.isoformat() if summary.last_analysis else "never"
    print(f"  Last analysis:  {last}")
    return 0


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from convocache.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
