"""Contract creation transactions for contract-deployer."""

from typing import Any, Sequence

from web3 import Web3

from .chain import NODE_ERRORS, classify_error
from .constants import DEFAULT_POLL_LATENCY, DEFAULT_RECEIPT_TIMEOUT
from .exceptions import DeploymentError, DeploymentRevertedError
from .logging_config import get_logger
from .types import ContractArtifact, DeploymentOutcome, EffectiveParams

logger = get_logger(__name__)


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        text = bytes(value).hex()
        return text if text.startswith("0x") else "0x" + text
    return str(value)


class DeploymentEngine:
    """
    Submits contract creation transactions through an explicit Web3 handle.

    Transactions are sent with eth_sendTransaction, so the sender must be an
    account the node has unlocked. Each call submits exactly one transaction
    and never retries.
    """

    def __init__(
        self,
        w3: Web3,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_latency: float = DEFAULT_POLL_LATENCY,
    ):
        self.w3 = w3
        self.receipt_timeout = receipt_timeout
        self.poll_latency = poll_latency

    def submit(
        self,
        artifact: ContractArtifact,
        params: EffectiveParams,
        args: Sequence[Any] = (),
    ) -> str:
        """
        Deploy a contract and wait for its receipt.

        Args:
            artifact: ABI and bytecode to deploy
            params: Effective sender, gas and value
            args: Positional constructor arguments; empty selects the
                  no-argument constructor call

        Returns:
            Address of the created contract

        Raises:
            DeploymentRevertedError: If the constructor reverted
            DeploymentTimeoutError: If no receipt arrived in time
            TransportError: If the node could not be reached
        """
        tx = params.as_transaction()

        try:
            factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
            if args:
                constructor = factory.constructor(*args)
            else:
                constructor = factory.constructor()
            tx_hash = constructor.transact(tx)
            logger.debug("deployment_submitted", contract=artifact.name, tx_hash=_hex(tx_hash))

            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout, poll_latency=self.poll_latency
            )
        except NODE_ERRORS as e:
            raise classify_error(e) from e

        if receipt.get("status") == 0:
            raise DeploymentRevertedError(
                f"Deployment transaction {_hex(tx_hash)} of {artifact.name} reverted"
            )

        address = receipt.get("contractAddress")
        if not address:
            raise DeploymentRevertedError(
                f"Receipt of {_hex(tx_hash)} carries no contract address"
            )
        return str(address)

    def deploy(
        self,
        artifact: ContractArtifact,
        params: EffectiveParams,
        args: Sequence[Any] = (),
    ) -> DeploymentOutcome:
        """
        Deploy a contract and report the outcome instead of raising.

        Returns:
            DeploymentOutcome with the address on success, or the condensed
            diagnostic of the DeploymentError on failure
        """
        try:
            address = self.submit(artifact, params, args)
        except DeploymentError as e:
            return DeploymentOutcome.failure(artifact.name, e)
        return DeploymentOutcome.success(artifact.name, address)
