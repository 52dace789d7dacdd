"""
contract-deployer: idempotent, batched smart contract deployment from JSON configuration
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import ArtifactLayout, ArtifactResolver
from .chain import ChainClient, connect
from .engine import DeploymentEngine
from .exceptions import (
    ArtifactMalformedError,
    ArtifactNotFoundError,
    ConfigMalformedError,
    DeploymentError,
    DeploymentRevertedError,
    DeploymentTimeoutError,
    InvalidAmountError,
    SettingsError,
    StateTransitionError,
    TransportError,
)
from .params import resolve_params, resolve_setting
from .parsers import load_config
from .persistence import ConfigWriter, write_config
from .scheduler import BatchScheduler, plan_batches
from .settings import Settings
from .state import ConfigProcessor
from .types import (
    USE_DEFAULT,
    ContractArtifact,
    ContractSpec,
    DeploymentConfig,
    DeploymentOutcome,
    DeploymentStatus,
    EffectiveParams,
)

try:
    __version__ = version("contract-deployer")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "ArtifactLayout",
    "ArtifactResolver",
    "BatchScheduler",
    "ChainClient",
    "ConfigProcessor",
    "ConfigWriter",
    "DeploymentEngine",
    "Settings",
    "connect",
    "load_config",
    "plan_batches",
    "resolve_params",
    "resolve_setting",
    "write_config",
    "USE_DEFAULT",
    "ContractArtifact",
    "ContractSpec",
    "DeploymentConfig",
    "DeploymentOutcome",
    "DeploymentStatus",
    "EffectiveParams",
    "DeploymentError",
    "ArtifactNotFoundError",
    "ArtifactMalformedError",
    "InvalidAmountError",
    "ConfigMalformedError",
    "DeploymentRevertedError",
    "DeploymentTimeoutError",
    "TransportError",
    "StateTransitionError",
    "SettingsError",
]
