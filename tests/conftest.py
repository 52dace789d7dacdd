"""Shared pytest fixtures for contract-deployer tests."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import pytest

from contract_deployer.artifacts import ArtifactLayout, ArtifactResolver
from contract_deployer.exceptions import DeploymentRevertedError
from contract_deployer.persistence import ConfigWriter
from contract_deployer.state import ConfigProcessor
from contract_deployer.types import ContractArtifact, DeploymentOutcome, EffectiveParams

SENDER = "0x1111111111111111111111111111111111111111"
NODE_ACCOUNT = "0x9999999999999999999999999999999999999999"

SIMPLE_ABI = [{"inputs": [], "stateMutability": "nonpayable", "type": "constructor"}]


class FakeEngine:
    """
    Stand-in for DeploymentEngine.

    Hands out sequential addresses, fails contracts listed in `failing`,
    and (like a real chain) accepts each contract name only once.
    """

    def __init__(self, failing: Sequence[str] = ()):
        self.failing = set(failing)
        self.calls: List[Dict[str, Any]] = []
        self.deployed: Dict[str, str] = {}

    def deploy(
        self, artifact: ContractArtifact, params: EffectiveParams, args: Sequence[Any] = ()
    ) -> DeploymentOutcome:
        self.calls.append(
            {"name": artifact.name, "params": params, "args": list(args), "artifact": artifact}
        )
        if artifact.name in self.failing:
            error = DeploymentRevertedError(
                "execution reverted: forced failure\n    at constructor (Contract.sol:12)"
            )
            return DeploymentOutcome.failure(artifact.name, error)
        if artifact.name in self.deployed:
            error = DeploymentRevertedError(f"{artifact.name} already exists on chain")
            return DeploymentOutcome.failure(artifact.name, error)

        address = "0x" + f"{len(self.deployed) + 1:040x}"
        self.deployed[artifact.name] = address
        return DeploymentOutcome.success(artifact.name, address)

    @property
    def submitted(self) -> List[str]:
        return [c["name"] for c in self.calls]


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample configuration fixture."""
    with open(fixtures_dir / "sample_config.json") as f:
        return json.load(f)


@pytest.fixture
def sample_config_file(tmp_path: Path, sample_config_json: Dict[str, Any]) -> Path:
    """Write the sample configuration to a temporary file."""
    path = tmp_path / "sample_config.json"
    with open(path, "w") as f:
        json.dump(sample_config_json, f, indent=2)
    return path


@pytest.fixture
def project_dir(fixtures_dir: Path) -> Path:
    """Return the fixture contract project (abi/ and bin/ sub-directories)."""
    return fixtures_dir / "project"


@pytest.fixture
def make_artifacts(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating ABI/bytecode files for contract names under a home directory."""

    def _make(*names: str, home: Optional[Path] = None) -> Path:
        home = home if home is not None else tmp_path / "contracts"
        (home / "abi").mkdir(parents=True, exist_ok=True)
        (home / "bin").mkdir(parents=True, exist_ok=True)
        for name in names:
            (home / "abi" / f"{name}.abi").write_text(json.dumps(SIMPLE_ABI))
            (home / "bin" / f"{name}.bin").write_text("6080604052\n")
        return home

    return _make


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a configuration document to a file in a config directory."""

    def _write(document: Dict[str, Any], name: str = "config.json") -> Path:
        config_dir = tmp_path / "configs"
        config_dir.mkdir(parents=True, exist_ok=True)
        path = config_dir / name
        with open(path, "w") as f:
            json.dump(document, f, indent=2)
        return path

    return _write


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def make_processor() -> Callable[..., ConfigProcessor]:
    """Factory building a ConfigProcessor around a FakeEngine."""

    def _make(engine: FakeEngine, accounts: Sequence[str] = (NODE_ACCOUNT,)) -> ConfigProcessor:
        return ConfigProcessor(
            engine=engine,
            artifacts=ArtifactResolver(ArtifactLayout()),
            writer=ConfigWriter(),
            accounts=accounts,
        )

    return _make
