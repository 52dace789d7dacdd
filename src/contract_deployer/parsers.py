"""Configuration file parsers for contract-deployer."""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .constants import NONE_SENTINEL
from .exceptions import ConfigMalformedError
from .types import (
    USE_DEFAULT,
    ContractSpec,
    DeploymentConfig,
    DeploymentStatus,
    Setting,
)


def parse_setting(raw: Any) -> Setting:
    """
    Interpret an inheritable setting.

    Args:
        raw: Value from the configuration file (missing keys arrive as None)

    Returns:
        USE_DEFAULT for None or the "none" sentinel, otherwise raw unchanged.
        Zero is a real value and does not inherit.
    """
    if raw is None:
        return USE_DEFAULT
    if isinstance(raw, str) and raw.strip().lower() == NONE_SENTINEL:
        return USE_DEFAULT
    return raw


def parse_status(raw: Any) -> DeploymentStatus:
    """
    Map the on-disk `deployed` marker to a DeploymentStatus.

    Absent (or "none") means the contract was never attempted, 1 means it
    succeeded. Any other recorded value counts as a failed attempt.
    """
    if raw is None or (isinstance(raw, str) and raw.strip().lower() == NONE_SENTINEL):
        return DeploymentStatus.NOT_ATTEMPTED
    if raw is True or raw == 1 or raw == "1":
        return DeploymentStatus.SUCCEEDED
    return DeploymentStatus.FAILED


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw == 1
    if isinstance(raw, str):
        return raw.strip().lower() in ("true", "1")
    return False


def _parse_home(raw: Any) -> Optional[str]:
    setting = parse_setting(raw)
    if setting is USE_DEFAULT:
        return None
    return str(setting)


def parse_contract(entry: Any, index: int = 0) -> ContractSpec:
    """
    Parse one entry of a configuration file's `contracts` list.

    Args:
        entry: JSON object for the contract
        index: Position in the list, used in error messages

    Returns:
        ContractSpec holding typed settings and the original entry

    Raises:
        ConfigMalformedError: If the entry is not an object or has no name
    """
    if not isinstance(entry, dict):
        raise ConfigMalformedError(f"Contract entry #{index} is not an object")

    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigMalformedError(f"Contract entry #{index} has no name")

    address = entry.get("address")

    return ContractSpec(
        name=name,
        home=parse_setting(entry.get("home")),
        childhome=_parse_home(entry.get("childhome")),
        sender=parse_setting(entry.get("from")),
        gas=parse_setting(entry.get("gas")),
        value=parse_setting(entry.get("value")),
        payable=_parse_flag(entry.get("payable")),
        param_values=entry.get("param_Values"),
        values=entry.get("values"),
        status=parse_status(entry.get("deployed")),
        address=address if isinstance(address, str) else None,
        raw=entry,
    )


def parse_config(data: Any, source_path: Optional[Path] = None) -> DeploymentConfig:
    """
    Build a DeploymentConfig from an already-decoded JSON document.

    Args:
        data: Decoded JSON document
        source_path: File the document came from (needed for write-back)

    Returns:
        DeploymentConfig with one ContractSpec per `contracts` entry

    Raises:
        ConfigMalformedError: If the document shape is wrong
    """
    if not isinstance(data, dict):
        raise ConfigMalformedError(f"Configuration {source_path} is not a JSON object")

    contracts = data.get("contracts")
    if not isinstance(contracts, list):
        raise ConfigMalformedError(f"Configuration {source_path} has no 'contracts' list")

    specs = [parse_contract(entry, i) for i, entry in enumerate(contracts)]

    return DeploymentConfig(
        home=_parse_home(data.get("home")),
        sender=parse_setting(data.get("from")),
        gas=parse_setting(data.get("gas")),
        value=parse_setting(data.get("value")),
        contracts=specs,
        source_path=source_path,
        raw=data,
    )


def load_config(file_path: Union[Path, str]) -> DeploymentConfig:
    """
    Parse a configuration file.

    Args:
        file_path: Path to the JSON configuration file

    Returns:
        DeploymentConfig tagged with its source path

    Raises:
        ConfigMalformedError: If the file cannot be read or decoded
    """
    path = Path(file_path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ConfigMalformedError(f"Cannot parse configuration {path}: {e}") from e

    return parse_config(data, source_path=path)


def contract_to_entry(spec: ContractSpec) -> Dict[str, Any]:
    """
    Render a ContractSpec back to its JSON entry.

    Only `deployed` and `address` are touched, and only for contracts that
    were attempted; every other key is copied from the original entry.
    """
    entry = copy.deepcopy(spec.raw) if spec.raw else {"name": spec.name}

    if spec.status is DeploymentStatus.SUCCEEDED:
        entry["deployed"] = 1
        if spec.address is not None:
            entry["address"] = spec.address
    elif spec.status is DeploymentStatus.FAILED:
        entry["deployed"] = 0
        entry.pop("address", None)

    return entry


def config_to_document(config: DeploymentConfig) -> Dict[str, Any]:
    """
    Render a DeploymentConfig back to the JSON document it came from.

    Args:
        config: Configuration, possibly updated by a run

    Returns:
        JSON-serialisable dict with updated `contracts` entries
    """
    document = copy.deepcopy(config.raw) if config.raw else {}
    if not config.raw and config.home is not None:
        document["home"] = config.home
    document["contracts"] = [contract_to_entry(spec) for spec in config.contracts]
    return document
