"""Integration tests for the contract-deployer command line."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from contract_deployer import cli

from conftest import NODE_ACCOUNT

DEPLOYED = "0x00000000000000000000000000000000000000aa"


@pytest.fixture(autouse=True)
def clean_environment(tmp_path: Path, monkeypatch):
    """Run every CLI test away from any real .env file or settings."""
    monkeypatch.chdir(tmp_path)
    for name in ("CONFIG_PATH", "BATCH_SIZE", "BATCH_INTERVAL", "GETH_HTTP_RPC_ADDR", "GethHttpRpcAddr"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def w3() -> MagicMock:
    """Web3 double for a reachable node whose deployments succeed."""
    w3 = MagicMock()
    w3.is_connected.return_value = True
    w3.eth.accounts = [NODE_ACCOUNT]
    w3.eth.contract.return_value.constructor.return_value.transact.return_value = b"\x01" * 32
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "contractAddress": DEPLOYED}
    return w3


@pytest.fixture
def deploy_dir(tmp_path: Path, make_artifacts) -> Path:
    """Configuration directory holding one single-contract file."""
    home = make_artifacts("Token")
    directory = tmp_path / "configs"
    directory.mkdir()
    document = {
        "home": str(home),
        "from": "none",
        "contracts": [{"name": "Token", "payable": False, "param_Values": "none", "values": []}],
    }
    (directory / "token.json").write_text(json.dumps(document))
    return directory


class TestDeployCommand:
    """Test the deploy sub-command."""

    def test_deploys_and_writes_back(self, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test a full run against a mocked node."""
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)

        assert cli.main(["deploy", str(deploy_dir)]) == cli.EXIT_OK

        document = json.loads((deploy_dir / "token.json").read_text())
        assert document["contracts"][0]["deployed"] == 1
        assert document["contracts"][0]["address"] == DEPLOYED
        w3.eth.contract.return_value.constructor.return_value.transact.assert_called_once_with(
            {"from": NODE_ACCOUNT}
        )

    def test_config_path_from_environment(self, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that CONFIG_PATH supplies the directory when none is given."""
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)
        monkeypatch.setenv("CONFIG_PATH", str(deploy_dir))

        assert cli.main(["deploy"]) == cli.EXIT_OK

    def test_failed_deployment_exit_code(self, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that a failed contract makes the run exit non-zero."""
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "contractAddress": None}
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)

        assert cli.main(["deploy", str(deploy_dir)]) == cli.EXIT_FAILURES

        document = json.loads((deploy_dir / "token.json").read_text())
        assert document["contracts"][0]["deployed"] == 0

    def test_unreachable_node(self, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that nothing is deployed when the node does not answer."""
        w3.is_connected.return_value = False
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)

        assert cli.main(["deploy", str(deploy_dir)]) == cli.EXIT_FAILURES
        w3.eth.contract.assert_not_called()

    def test_rpc_flag_overrides_environment(self, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that --rpc selects the node endpoint."""
        seen = []

        def _connect(rpc_url):
            seen.append(rpc_url)
            return w3

        monkeypatch.setattr(cli, "connect", _connect)
        monkeypatch.setenv("GETH_HTTP_RPC_ADDR", "http://env:8545")

        cli.main(["--rpc", "http://flag:8545", "deploy", str(deploy_dir)])

        assert seen == ["http://flag:8545"]


class TestUsageErrors:
    """Test exit code 2 for unusable invocations."""

    def test_missing_config_path(self):
        assert cli.main(["deploy"]) == cli.EXIT_USAGE

    def test_missing_config_directory(self, tmp_path: Path, w3: MagicMock, monkeypatch):
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)
        assert cli.main(["deploy", str(tmp_path / "missing")]) == cli.EXIT_USAGE

    def test_invalid_batch_size_flag(self, deploy_dir: Path):
        assert cli.main(["deploy", str(deploy_dir), "--batch-size", "0"]) == cli.EXIT_USAGE

    @pytest.mark.parametrize("flag", ["--batch-interval", "--receipt-timeout"])
    def test_negative_durations_rejected(self, flag, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that negative durations exit with a usage error before any deployment."""
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)

        assert cli.main(["deploy", str(deploy_dir), flag, "-5"]) == cli.EXIT_USAGE
        w3.eth.contract.assert_not_called()

    def test_invalid_batch_size_environment(self, deploy_dir: Path, monkeypatch):
        monkeypatch.setenv("BATCH_SIZE", "many")
        assert cli.main(["deploy", str(deploy_dir)]) == cli.EXIT_USAGE

    def test_env_file(self, tmp_path: Path, deploy_dir: Path, w3: MagicMock, monkeypatch):
        """Test that --env-file supplies settings."""
        env_file = tmp_path / "deploy.env"
        env_file.write_text(f"CONFIG_PATH={deploy_dir}\n")
        monkeypatch.setattr(cli, "connect", lambda rpc_url: w3)

        assert cli.main(["--env-file", str(env_file), "deploy"]) == cli.EXIT_OK


class TestAutomineCommand:
    """Test the automine sub-command wiring."""

    def test_runs_bounded_rounds(self, monkeypatch):
        created = []

        class StubMiner:
            def __init__(self, rpc_url, interval, blocks_per_round):
                self.rpc_url = rpc_url
                self.interval = interval
                self.blocks_per_round = blocks_per_round
                self.etherbase = None
                created.append(self)

            def set_etherbase(self, address):
                self.etherbase = address

            def run(self, max_rounds=None):
                self.max_rounds = max_rounds
                return 0

        monkeypatch.setattr(cli, "AutoMiner", StubMiner)

        code = cli.main(
            ["--rpc", "http://node:8545", "automine", "--interval", "10", "--blocks", "2",
             "--etherbase", NODE_ACCOUNT, "--rounds", "4"]
        )

        assert code == cli.EXIT_OK
        miner = created[0]
        assert miner.rpc_url == "http://node:8545"
        assert miner.interval == 10.0
        assert miner.blocks_per_round == 2
        assert miner.etherbase == NODE_ACCOUNT
        assert miner.max_rounds == 4
