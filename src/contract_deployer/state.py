"""Per-configuration deployment state machine for contract-deployer."""

from pathlib import Path
from typing import Optional, Sequence

from .artifacts import ArtifactResolver
from .engine import DeploymentEngine
from .exceptions import ConfigMalformedError, DeploymentError, StateTransitionError
from .logging_config import get_logger
from .params import constructor_args, resolve_params, resolve_setting
from .persistence import ConfigWriter
from .types import (
    USE_DEFAULT,
    ConfigReport,
    ContractSpec,
    DeploymentConfig,
    DeploymentOutcome,
    DeploymentStatus,
)

logger = get_logger(__name__)


def apply_outcome(spec: ContractSpec, outcome: DeploymentOutcome) -> None:
    """
    Record a deployment outcome on a contract.

    Transitions: NOT_ATTEMPTED or FAILED -> SUCCEEDED or FAILED.

    Raises:
        StateTransitionError: If the contract already succeeded
    """
    if spec.status.is_terminal:
        raise StateTransitionError(
            f"Contract '{spec.name}' already deployed at {spec.address}"
        )

    if outcome.succeeded:
        spec.status = DeploymentStatus.SUCCEEDED
        spec.address = outcome.address
    else:
        spec.status = DeploymentStatus.FAILED
        spec.address = None


def working_directory(config: DeploymentConfig, spec: ContractSpec) -> Path:
    """
    Base path of a contract's artifacts.

    The contract's home overrides the configuration home; childhome is
    appended verbatim, so it carries its own separator.

    Raises:
        ConfigMalformedError: If neither the contract nor the configuration has a home
    """
    home = resolve_setting(spec.home, config.home if config.home is not None else USE_DEFAULT)
    if home is USE_DEFAULT:
        raise ConfigMalformedError(f"No home directory configured for contract '{spec.name}'")

    workplace = str(home)
    if spec.childhome:
        workplace += spec.childhome
    return Path(workplace)


class ConfigProcessor:
    """
    Deploys the pending contracts of one configuration and writes it back.

    Contracts are attempted in order. A failure is recorded on the contract
    and the walk continues with its siblings.
    """

    def __init__(
        self,
        engine: DeploymentEngine,
        artifacts: ArtifactResolver,
        writer: Optional[ConfigWriter] = None,
        accounts: Sequence[str] = (),
    ):
        self.engine = engine
        self.artifacts = artifacts
        self.writer = writer if writer is not None else ConfigWriter()
        self.accounts = accounts

    def deploy_contract(self, config: DeploymentConfig, spec: ContractSpec) -> DeploymentOutcome:
        """
        Attempt one contract without touching its recorded state.

        Returns:
            DeploymentOutcome; resolution and artifact errors become failures
        """
        try:
            base_path = working_directory(config, spec)
            params = resolve_params(config, spec, self.accounts)
            args = constructor_args(spec)
            artifact = self.artifacts.resolve(base_path, spec.name)
        except DeploymentError as e:
            return DeploymentOutcome.failure(spec.name, e)

        return self.engine.deploy(artifact, params, args)

    def process(self, config: DeploymentConfig) -> ConfigReport:
        """
        Walk a configuration's contracts and persist the result.

        The writer runs once after the walk. A configuration whose contracts
        had all succeeded before the run is not rewritten, since its
        content would not change.

        Args:
            config: Configuration loaded from disk

        Returns:
            ConfigReport with one outcome per attempted contract
        """
        source = str(config.source_path) if config.source_path is not None else None
        log = logger.bind(config=source)
        report = ConfigReport(source_path=config.source_path)

        for spec in config.contracts:
            if spec.status.is_terminal:
                log.debug("contract_skipped", contract=spec.name, address=spec.address)
                report.skipped += 1
                continue

            try:
                outcome = self.deploy_contract(config, spec)
            except Exception as e:
                # Unexpected errors still only cost this one contract
                log.error("deployment_crashed", contract=spec.name, exc_info=True)
                outcome = DeploymentOutcome.failure(spec.name, e)

            apply_outcome(spec, outcome)
            report.outcomes.append(outcome)

            if outcome.succeeded:
                log.info("contract_deployed", contract=spec.name, address=outcome.address)
            else:
                log.warning(
                    "deployment_failed",
                    contract=spec.name,
                    error_type=outcome.error_type,
                    error=outcome.error,
                )

        if report.outcomes:
            self.writer.write(config)
            report.written = True

        log.info(
            "config_processed",
            deployed=report.deployed,
            failed=report.failed,
            skipped=report.skipped,
        )
        return report
