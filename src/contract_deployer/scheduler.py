"""Batch discovery and throttled dispatch for contract-deployer."""

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Sequence, Union

from .constants import DEFAULT_BATCH_INTERVAL, DEFAULT_BATCH_SIZE
from .exceptions import ConfigMalformedError
from .logging_config import get_logger
from .parsers import load_config
from .state import ConfigProcessor
from .types import Batch, DeploymentConfig, RunSummary

logger = get_logger(__name__)


def discover_configs(directory: Union[Path, str]) -> List[Path]:
    """
    List candidate configuration files.

    Every regular, non-hidden file directly inside the directory is a
    candidate, whatever its extension.

    Args:
        directory: Configuration directory

    Returns:
        File paths sorted by name

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Configuration directory not found: {root}")

    return sorted(
        p for p in root.iterdir() if p.is_file() and not p.name.startswith(".")
    )


def plan_batches(
    configs: Sequence[DeploymentConfig],
    batch_size: int = DEFAULT_BATCH_SIZE,
    batch_interval: float = DEFAULT_BATCH_INTERVAL,
) -> List[Batch]:
    """
    Group configurations into fixed-size batches.

    Batch k starts k * batch_interval seconds after scheduling time; the
    last batch holds the remainder.

    Args:
        configs: Loaded configurations, in dispatch order
        batch_size: Maximum configurations per batch
        batch_interval: Seconds between batch start offsets

    Returns:
        List of Batch objects (empty if there are no configurations)
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    if batch_interval < 0:
        raise ValueError(f"batch_interval must not be negative, got {batch_interval}")

    batches = []
    for index, start in enumerate(range(0, len(configs), batch_size)):
        batches.append(
            Batch(
                index=index,
                start_offset=index * batch_interval,
                configs=list(configs[start:start + batch_size]),
            )
        )
    return batches


class BatchScheduler:
    """
    Runs every configuration in a directory through a ConfigProcessor.

    Configurations of one batch run concurrently on a pool of batch_size
    threads. Batch k is dispatched once batch k-1 has drained and at least
    k * batch_interval seconds have passed since the run started.
    """

    def __init__(
        self,
        processor: ConfigProcessor,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_interval: float = DEFAULT_BATCH_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.processor = processor
        self.batch_size = batch_size
        self.batch_interval = batch_interval
        self._sleep = sleep
        self._clock = clock

    def load_configs(self, paths: Sequence[Path], summary: RunSummary) -> List[DeploymentConfig]:
        """Parse configuration files, recording malformed ones as rejected."""
        configs = []
        for path in paths:
            try:
                configs.append(load_config(path))
            except ConfigMalformedError as e:
                logger.error("config_rejected", config=str(path), error=str(e))
                summary.rejected.append(path)
        return configs

    def _wait_until(self, deadline: float) -> None:
        delay = deadline - self._clock()
        if delay > 0:
            self._sleep(delay)

    def dispatch(self, pool: ThreadPoolExecutor, batch: Batch, summary: RunSummary) -> None:
        """Process one batch on the pool and wait for all of it."""
        logger.info("batch_dispatched", batch=batch.index, configs=len(batch))

        futures = [(config, pool.submit(self.processor.process, config)) for config in batch.configs]
        for config, future in futures:
            try:
                summary.reports.append(future.result())
            except Exception:
                logger.error("config_errored", config=str(config.source_path), exc_info=True)
                summary.errored.append(config.source_path)

    def run(self, config_dir: Union[Path, str]) -> RunSummary:
        """
        Deploy every configuration found in a directory.

        Args:
            config_dir: Directory holding the JSON configuration files

        Returns:
            RunSummary with per-file reports and rejected files
        """
        summary = RunSummary()
        configs = self.load_configs(discover_configs(config_dir), summary)
        batches = plan_batches(configs, self.batch_size, self.batch_interval)
        summary.batches = len(batches)

        logger.info(
            "run_scheduled",
            configs=len(configs),
            rejected=len(summary.rejected),
            batches=len(batches),
        )

        started = self._clock()
        with ThreadPoolExecutor(max_workers=self.batch_size, thread_name_prefix="deploy") as pool:
            for batch in batches:
                self._wait_until(started + batch.start_offset)
                self.dispatch(pool, batch, summary)

        logger.info(
            "run_finished",
            deployed=summary.deployed,
            failed=summary.failed,
            errored=len(summary.errored),
        )
        return summary
