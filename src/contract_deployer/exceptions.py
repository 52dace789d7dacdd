"""Custom exception classes for contract-deployer."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ArtifactNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a contract's ABI or bytecode file is missing."""

    pass


class ArtifactMalformedError(DeploymentError, ValueError):
    """Raised when an ABI file is not valid JSON or bytecode is unusable."""

    pass


class InvalidAmountError(DeploymentError, ValueError):
    """Raised when a gas or value setting is not a non-negative integer."""

    pass


class ConfigMalformedError(DeploymentError, ValueError):
    """Raised when a configuration file cannot be parsed."""

    pass


class DeploymentRevertedError(DeploymentError):
    """Raised when constructor execution failed on-chain."""

    pass


class DeploymentTimeoutError(DeploymentError, TimeoutError):
    """Raised when no receipt arrived within the wait policy."""

    pass


class TransportError(DeploymentError, ConnectionError):
    """Raised when the node is unreachable or answers with an error."""

    pass


class StateTransitionError(DeploymentError, RuntimeError):
    """Raised when a succeeded contract would be moved to another state."""

    pass


class SettingsError(DeploymentError, ValueError):
    """Raised when an environment setting cannot be interpreted."""

    pass


def condense_error(error: BaseException) -> str:
    """
    Reduce an exception to its first non-empty line.

    Node and contract errors often carry full stack traces or revert
    payloads; only the headline is kept for logs and reports. A `message`
    attribute (set by web3 contract errors) is preferred over str(error).

    Args:
        error: Exception to condense

    Returns:
        First non-empty line of str(error), or the exception class name
    """
    message = getattr(error, "message", None)
    text = message if isinstance(message, str) else str(error)
    for line in text.splitlines():
        line = line.strip()
        if line:
            return line
    return type(error).__name__
