"""Command line entry points for contract-deployer."""

import argparse
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from web3 import Web3

from .artifacts import ArtifactResolver
from .automine import AutoMiner
from .chain import AccountList, ChainClient, connect
from .engine import DeploymentEngine
from .exceptions import SettingsError
from .logging_config import configure_logging, get_logger
from .scheduler import BatchScheduler
from .settings import Settings
from .state import ConfigProcessor

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2


def build_scheduler(settings: Settings, w3: Web3) -> BatchScheduler:
    """Wire the deployment pipeline around an explicit Web3 handle."""
    client = ChainClient(w3)
    processor = ConfigProcessor(
        engine=DeploymentEngine(w3, receipt_timeout=settings.receipt_timeout),
        artifacts=ArtifactResolver(settings.layout),
        accounts=AccountList(client),
    )
    return BatchScheduler(
        processor,
        batch_size=settings.batch_size,
        batch_interval=settings.batch_interval,
    )


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-deployer",
        description="Deploy smart contracts declared in JSON configuration files.",
    )
    parser.add_argument("--env-file", type=Path, help="Read settings from this .env file.")
    parser.add_argument("--log-level", help="Logging level (overrides LOG_LEVEL).")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines.")
    parser.add_argument("--rpc", help="Node RPC URL (overrides GETH_HTTP_RPC_ADDR).")

    commands = parser.add_subparsers(dest="command", required=True)

    deploy = commands.add_parser("deploy", help="Deploy every configuration in a directory.")
    deploy.add_argument("config_dir", nargs="?", type=Path, help="Defaults to CONFIG_PATH.")
    deploy.add_argument("--batch-size", type=int, help="Configurations per batch.")
    deploy.add_argument("--batch-interval", type=float, help="Seconds between batch starts.")
    deploy.add_argument("--receipt-timeout", type=float, help="Seconds to wait for a receipt.")

    mine = commands.add_parser("automine", help="Mine whenever the transaction pool is non-empty.")
    mine.add_argument("--interval", type=float, default=60.0, help="Poll interval base in seconds.")
    mine.add_argument("--blocks", type=int, default=3, help="Blocks to mine per round.")
    mine.add_argument("--etherbase", help="Set the mining reward account first.")
    mine.add_argument("--rounds", type=int, help="Stop after this many polls.")

    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.rpc:
        overrides["rpc_url"] = args.rpc
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.json_logs:
        overrides["log_json"] = True
    if getattr(args, "config_dir", None) is not None:
        overrides["config_path"] = args.config_dir
    if getattr(args, "batch_size", None) is not None:
        if args.batch_size < 1:
            raise SettingsError(f"--batch-size must be positive, got {args.batch_size}")
        overrides["batch_size"] = args.batch_size
    if getattr(args, "batch_interval", None) is not None:
        if args.batch_interval < 0:
            raise SettingsError(f"--batch-interval must not be negative, got {args.batch_interval}")
        overrides["batch_interval"] = args.batch_interval
    if getattr(args, "receipt_timeout", None) is not None:
        if args.receipt_timeout < 0:
            raise SettingsError(f"--receipt-timeout must not be negative, got {args.receipt_timeout}")
        overrides["receipt_timeout"] = args.receipt_timeout
    return replace(settings, **overrides)


def run_deploy(settings: Settings) -> int:
    if settings.config_path is None:
        logger.error("config_path_missing", hint="pass CONFIG_DIR or set CONFIG_PATH")
        return EXIT_USAGE

    w3 = connect(settings.rpc_url)
    client = ChainClient(w3)
    if not client.is_connected():
        logger.error("node_unreachable", rpc_url=settings.rpc_url)
        return EXIT_FAILURES
    logger.info("node_connected", rpc_url=settings.rpc_url)

    scheduler = build_scheduler(settings, w3)
    try:
        summary = scheduler.run(settings.config_path)
    except FileNotFoundError as e:
        logger.error("config_dir_missing", error=str(e))
        return EXIT_USAGE

    return EXIT_OK if summary.ok else EXIT_FAILURES


def run_automine(settings: Settings, args: argparse.Namespace) -> int:
    miner = AutoMiner(settings.rpc_url, interval=args.interval, blocks_per_round=args.blocks)
    if args.etherbase:
        miner.set_etherbase(args.etherbase)
    try:
        miner.run(max_rounds=args.rounds)
    except KeyboardInterrupt:
        logger.info("automine_interrupted")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)

    try:
        settings = _apply_overrides(Settings.from_env(dotenv_path=args.env_file), args)
        configure_logging(settings.log_level, format_json=settings.log_json)
    except (SettingsError, ValueError) as e:
        logger.error("invalid_settings", error=str(e))
        return EXIT_USAGE

    if args.command == "deploy":
        return run_deploy(settings)
    return run_automine(settings, args)


if __name__ == "__main__":
    raise SystemExit(main())
