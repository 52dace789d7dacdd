"""
Auxiliary mining trigger for private geth networks.

Polls the transaction pool and runs the miner for a few blocks whenever
transactions are waiting, so deployments confirm on a dev chain that does
not mine continuously. Uses geth's txpool_*, miner_* and eth_* JSON-RPC
methods directly.
"""

import time
from typing import Any, Callable, List, Optional, Tuple

import requests

from .constants import DEFAULT_BLOCKS_PER_ROUND, DEFAULT_MINE_INTERVAL, DEFAULT_REQUEST_TIMEOUT
from .exceptions import TransportError
from .logging_config import get_logger

logger = get_logger(__name__)


def _quantity(value: Any) -> int:
    """Decode a JSON-RPC quantity (hex string or plain integer)."""
    if isinstance(value, str):
        return int(value, 16) if value.lower().startswith("0x") else int(value)
    return int(value)


class AutoMiner:
    """Starts and stops the node's miner based on transaction pool contents."""

    def __init__(
        self,
        rpc_url: str,
        interval: float = DEFAULT_MINE_INTERVAL,
        blocks_per_round: int = DEFAULT_BLOCKS_PER_ROUND,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        max_block_polls: int = 600,
    ):
        self.rpc_url = rpc_url
        self.interval = interval
        self.blocks_per_round = blocks_per_round
        self.session = session if session is not None else requests.Session()
        self.request_timeout = request_timeout
        self.max_block_polls = max_block_polls
        self._sleep = sleep
        self._request_id = 0

    def rpc(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Call a JSON-RPC method.

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The `result` member of the response

        Raises:
            TransportError: On network errors, non-200 responses or RPC errors
        """
        self._request_id += 1
        try:
            response = self.session.post(
                self.rpc_url,
                json={
                    "jsonrpc": "2.0",
                    "method": method,
                    "params": params or [],
                    "id": self._request_id,
                },
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Network error during {method}: {e}") from e

        if response.status_code != 200:
            raise TransportError(f"{method} failed with HTTP status {response.status_code}")

        try:
            result = response.json()
        except ValueError as e:
            raise TransportError(f"{method} returned a non-JSON response") from e

        if "error" in result:
            raise TransportError(f"RPC error from {method}: {result['error']}")

        return result.get("result")

    def txpool_status(self) -> Tuple[int, int]:
        """
        Get transaction pool size.

        Returns:
            Tuple of (pending, queued) transaction counts
        """
        status = self.rpc("txpool_status") or {}
        return (_quantity(status.get("pending", 0)), _quantity(status.get("queued", 0)))

    def block_number(self) -> int:
        return _quantity(self.rpc("eth_blockNumber"))

    def set_etherbase(self, address: str) -> None:
        self.rpc("miner_setEtherbase", [address])

    def wait_for_blocks(self, count: int, poll: float = 1.0) -> bool:
        """
        Wait until the chain has grown by `count` blocks.

        Returns:
            True if the blocks arrived, False after max_block_polls polls
        """
        target = self.block_number() + count
        for _ in range(self.max_block_polls):
            if self.block_number() >= target:
                return True
            self._sleep(poll)
        return False

    def tick(self) -> bool:
        """
        Mine a round if the pool holds transactions.

        Returns:
            True if the miner was run this round
        """
        pending, queued = self.txpool_status()
        if pending == 0 and queued == 0:
            return False

        logger.info("mining_started", pending=pending, queued=queued)
        self.rpc("miner_start")
        try:
            if not self.wait_for_blocks(self.blocks_per_round):
                logger.warning("mining_stalled", blocks=self.blocks_per_round)
        finally:
            self.rpc("miner_stop")
        logger.info("mining_stopped")
        return True

    def run(self, max_rounds: Optional[int] = None) -> int:
        """
        Poll the pool until interrupted (or for max_rounds rounds).

        Returns:
            Number of rounds in which the miner ran
        """
        mined = 0
        rounds = 0
        while max_rounds is None or rounds < max_rounds:
            if self.tick():
                mined += 1
            rounds += 1
            self._sleep(self.interval / 10)
        return mined
