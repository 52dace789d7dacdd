"""Data types and dataclasses for contract-deployer."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import condense_error


class DeploymentStatus(Enum):
    """
    Lifecycle of one contract entry.

    Only SUCCEEDED is terminal; NOT_ATTEMPTED and FAILED are both picked up
    by the next run.
    """

    NOT_ATTEMPTED = "not_attempted"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is DeploymentStatus.SUCCEEDED


class UseDefault(Enum):
    """Marker for a setting that inherits the enclosing default."""

    TOKEN = "use-default"

    def __repr__(self) -> str:
        return "USE_DEFAULT"


USE_DEFAULT = UseDefault.TOKEN

Setting = Union[Any, UseDefault]


@dataclass
class ContractSpec:
    """One contract entry of a configuration file."""

    name: str
    home: Setting = USE_DEFAULT
    childhome: Optional[str] = None
    sender: Setting = USE_DEFAULT
    gas: Setting = USE_DEFAULT
    value: Setting = USE_DEFAULT
    payable: bool = False
    # param_Values and values as written; their shape is checked when the
    # contract is deployed so a bad entry fails only that contract
    param_values: Any = None
    values: Any = None
    status: DeploymentStatus = DeploymentStatus.NOT_ATTEMPTED
    address: Optional[str] = None

    # Parsed JSON entry, kept so unknown keys survive write-back
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_pending(self) -> bool:
        return not self.status.is_terminal


@dataclass
class DeploymentConfig:
    """One configuration file: defaults plus an ordered list of contracts."""

    home: Optional[str] = None
    sender: Setting = USE_DEFAULT
    gas: Setting = USE_DEFAULT
    value: Setting = USE_DEFAULT
    contracts: List[ContractSpec] = field(default_factory=list)
    source_path: Optional[Path] = None

    # Parsed JSON document, kept so unknown keys survive write-back
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    def pending(self) -> List[ContractSpec]:
        """Contracts a run would still attempt."""
        return [c for c in self.contracts if c.is_pending]


@dataclass(frozen=True)
class ContractArtifact:
    """ABI and 0x-prefixed bytecode of one compiled contract."""

    name: str
    base_path: Path
    abi: List[Dict[str, Any]]
    bytecode: str


@dataclass(frozen=True)
class EffectiveParams:
    """Sender, gas and value after default inheritance."""

    sender: str
    gas: Optional[int] = None
    value: Optional[int] = None
    payable: bool = False

    def as_transaction(self) -> Dict[str, Any]:
        """
        Build the transaction dict passed to web3.

        Non-payable constructors revert when sent value, so value is only
        included for payable contracts. A missing gas limit is left to the
        node's estimate.
        """
        tx: Dict[str, Any] = {"from": self.sender}
        if self.gas is not None:
            tx["gas"] = self.gas
        if self.payable:
            tx["value"] = self.value if self.value is not None else 0
        return tx


@dataclass(frozen=True)
class DeploymentOutcome:
    """Result of one deployment attempt: an address or an error, never both."""

    contract_name: str
    address: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.address is not None

    @classmethod
    def success(cls, contract_name: str, address: str) -> "DeploymentOutcome":
        return cls(contract_name=contract_name, address=address)

    @classmethod
    def failure(cls, contract_name: str, error: BaseException) -> "DeploymentOutcome":
        return cls(
            contract_name=contract_name,
            error=condense_error(error),
            error_type=type(error).__name__,
        )


@dataclass
class ConfigReport:
    """What happened to one configuration file during a run."""

    source_path: Optional[Path]
    outcomes: List[DeploymentOutcome] = field(default_factory=list)
    skipped: int = 0
    written: bool = False

    @property
    def deployed(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)


@dataclass
class Batch:
    """A group of configuration files dispatched together."""

    index: int
    start_offset: float  # seconds after scheduling time
    configs: List[DeploymentConfig] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.configs)


@dataclass
class RunSummary:
    """Aggregate result of one scheduler run."""

    batches: int = 0
    reports: List[ConfigReport] = field(default_factory=list)
    rejected: List[Path] = field(default_factory=list)  # malformed files
    errored: List[Path] = field(default_factory=list)  # processing raised

    @property
    def deployed(self) -> int:
        return sum(r.deployed for r in self.reports)

    @property
    def failed(self) -> int:
        return sum(r.failed for r in self.reports)

    @property
    def ok(self) -> bool:
        return not (self.rejected or self.errored or self.failed)
