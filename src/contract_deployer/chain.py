"""Chain connection handle for contract-deployer."""

from collections.abc import Sequence
from typing import List, Optional

import requests
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception, Web3ValidationError

from .constants import DEFAULT_REQUEST_TIMEOUT
from .exceptions import (
    ConfigMalformedError,
    DeploymentError,
    DeploymentRevertedError,
    DeploymentTimeoutError,
    TransportError,
    condense_error,
)


def connect(rpc_url: str, request_timeout: float = DEFAULT_REQUEST_TIMEOUT) -> Web3:
    """
    Create a Web3 handle for an HTTP JSON-RPC endpoint.

    No connection is made until the first request.

    Args:
        rpc_url: Node endpoint, e.g. http://127.0.0.1:8545
        request_timeout: Per-request HTTP timeout in seconds

    Returns:
        Web3 instance bound to the endpoint
    """
    provider = Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout})
    return Web3(provider)


def classify_error(error: BaseException) -> DeploymentError:
    """
    Map a web3/transport exception onto the deployment error taxonomy.

    Args:
        error: Exception raised while talking to the node

    Returns:
        DeploymentError subclass instance carrying the condensed message
    """
    if isinstance(error, DeploymentError):
        return error

    message = condense_error(error)
    if isinstance(error, ContractLogicError):
        return DeploymentRevertedError(message)
    if isinstance(error, Web3ValidationError):
        return ConfigMalformedError(message)
    # Only the receipt wait counts as a deployment timeout; HTTP timeouts
    # mean the node is unreachable
    if isinstance(error, TimeExhausted):
        return DeploymentTimeoutError(message)
    return TransportError(message)


# Errors the node or its transport can raise; anything else is a bug
NODE_ERRORS = (Web3Exception, requests.RequestException, OSError, ValueError)


class ChainClient:
    """Read-only account queries against a node."""

    def __init__(self, w3: Web3):
        self.w3 = w3

    def is_connected(self) -> bool:
        try:
            return bool(self.w3.is_connected())
        except NODE_ERRORS:
            return False

    def accounts(self) -> List[str]:
        """
        List the node's accounts.

        Raises:
            TransportError: If the node cannot be queried
        """
        try:
            return list(self.w3.eth.accounts)
        except NODE_ERRORS as e:
            raise classify_error(e) from e


class AccountList(Sequence):
    """
    Node accounts, fetched on first access.

    Passed to the parameter resolver so configurations that name their
    sender never cause an eth_accounts call.
    """

    def __init__(self, client: ChainClient):
        self._client = client
        self._accounts: Optional[List[str]] = None

    def _load(self) -> List[str]:
        if self._accounts is None:
            self._accounts = self._client.accounts()
        return self._accounts

    def __getitem__(self, index):
        return self._load()[index]

    def __len__(self) -> int:
        return len(self._load())
