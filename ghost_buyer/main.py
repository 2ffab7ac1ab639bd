#!/usr/bin/env python3
"""
GHOST BUYER - Main Entry Point
==============================

Preview or run a stealth buy against the paper venue.

Usage:
    python -m ghost_buyer.main --amount 500 --token SNEK --preview
    python -m ghost_buyer.main --config config/paper.yaml --amount 500 --token SNEK
    python -m ghost_buyer.main --config config/paper.yaml --dry-run

Author: GHOST Development Team
Version: 1.0.0
"""

import argparse
import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import List, Optional

from ghost_buyer.core.config_manager import LOG_LEVELS, ConfigManager
from ghost_buyer.core.event_bus import EventBus
from ghost_buyer.plugins.execution.stealth_executor import StealthExecutor, StealthExecutorConfig
from ghost_buyer.plugins.monitoring.risk_monitor import RiskMonitor, RiskMonitorConfig
from ghost_buyer.plugins.venues.paper_dex import PaperDex
from shared.ghost_core.exceptions import GhostError
from shared.ghost_core.execution_history import ExecutionHistory
from shared.ghost_core.plan_generator import PlanGenerator


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="GHOST BUYER - Stealth chunked buying",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML or JSON)",
    )

    parser.add_argument(
        "-a", "--amount",
        type=float,
        default=None,
        help="Total amount of the base asset to spend",
    )

    parser.add_argument(
        "-t", "--token",
        type=str,
        default=None,
        help="Token to buy (e.g. SNEK)",
    )

    parser.add_argument(
        "-m", "--mode",
        type=str,
        choices=["stealth", "aggressive"],
        default=None,
        help="Chunking mode (overrides config)",
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides config)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible plans and paper fills",
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Print the execution plan and exit",
    )

    parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Skip planned delays (paper runs only)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and exit",
    )

    return parser.parse_args(argv)


async def _no_wait(seconds: float) -> None:
    await asyncio.sleep(0)


async def run(args: argparse.Namespace) -> int:
    """Run the CLI with parsed arguments."""
    config_manager = ConfigManager()
    if args.config:
        if not config_manager.load(Path(args.config)):
            print(f"Configuration file could not be loaded: {args.config}", file=sys.stderr)
            return 1
    else:
        config_manager.load_dict({})
    if args.mode:
        config_manager.set("stealth.mode", args.mode)

    errors = config_manager.validate()
    level = args.log_level or config_manager.monitoring.log_level
    setup_logging(level if str(level).upper() in LOG_LEVELS else "INFO")
    logger = logging.getLogger("GHOST_MAIN")

    if errors:
        for error in errors:
            logger.error(f"Validation error: {error}")
        return 1

    if args.dry_run:
        logger.info("Configuration valid!")
        logger.info(f"Stealth settings: {config_manager.stealth_settings().to_dict()}")
        logger.info(f"Venue: {config_manager.execution.venue}")
        return 0

    if args.amount is None:
        logger.error("--amount is required")
        return 1

    rng = random.Random(args.seed)
    generator = PlanGenerator(rng=rng)
    settings = config_manager.stealth_settings()

    if args.preview:
        try:
            plan = generator.generate_plan(args.amount, settings)
        except GhostError as e:
            logger.error(f"Cannot plan: {e}")
            return 1
        print(json.dumps({"preview": plan.preview(), **plan.to_dict()}, indent=2))
        return 0

    if not args.token:
        logger.error("--token is required to execute")
        return 1

    if not config_manager.is_paper:
        logger.error("Only paper mode is available from the command line")
        return 1

    venue = PaperDex(rng=rng)
    await venue.connect()

    event_bus = EventBus()

    monitor = RiskMonitor(RiskMonitorConfig(
        max_consecutive_failures=config_manager.monitoring.max_consecutive_failures,
    ))
    await monitor.load()
    await monitor.initialize(event_bus)
    await monitor.start()

    executor = StealthExecutor(
        venue,
        config=StealthExecutorConfig(
            token_in=config_manager.execution.token_in,
            venue_id=config_manager.execution.venue,
            address=config_manager.execution.wallet_address,
            check_balance=config_manager.execution.check_balance,
            alert_on_high_risk=config_manager.monitoring.alert_on_high_risk,
            settings=settings,
        ),
        generator=generator,
        history=ExecutionHistory(config_manager.history.capacity),
        sleep=_no_wait if args.no_wait else None,
    )
    await executor.load()
    await executor.initialize(event_bus)
    await executor.start()

    try:
        report = await executor.execute_order({"token_out": args.token, "amount": args.amount})
    except GhostError as e:
        logger.error(f"Stealth buy failed: {e}")
        return 1
    finally:
        await executor.unload()
        health = await monitor.health_check()
        if health.healthy:
            logger.info(f"Risk monitor: {health.metrics}")
        else:
            logger.warning(f"Risk monitor unhealthy: {health.message}")
        await monitor.unload()
        await venue.disconnect()

    report["alerts"] = monitor.get_alerts(report["execution_id"])
    print(json.dumps(report, indent=2, default=str))
    return 0 if report["steps_succeeded"] > 0 else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point."""
    try:
        return asyncio.run(run(parse_args(argv)))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
