"""Compiled contract artifact loading for contract-deployer."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from .constants import (
    DEFAULT_ABI_SUB_DIR,
    DEFAULT_ABI_SUFFIX,
    DEFAULT_BIN_SUB_DIR,
    DEFAULT_BIN_SUFFIX,
    HEX_PREFIX,
)
from .exceptions import ArtifactMalformedError, ArtifactNotFoundError
from .types import ContractArtifact


@dataclass(frozen=True)
class ArtifactLayout:
    """Sub-directories and suffixes of ABI and bytecode files under a base path."""

    abi_dir: str = DEFAULT_ABI_SUB_DIR
    abi_suffix: str = DEFAULT_ABI_SUFFIX
    bin_dir: str = DEFAULT_BIN_SUB_DIR
    bin_suffix: str = DEFAULT_BIN_SUFFIX

    def paths(self, base_path: Union[Path, str], contract_name: str) -> Tuple[Path, Path]:
        """
        Get artifact file paths for a contract.

        Args:
            base_path: Contract working directory
            contract_name: Contract name as written in the configuration

        Returns:
            Tuple of (abi_path, bin_path)
        """
        base = Path(base_path)
        abi_path = base / self.abi_dir / f"{contract_name}{self.abi_suffix}"
        bin_path = base / self.bin_dir / f"{contract_name}{self.bin_suffix}"
        return (abi_path, bin_path)


def _read_text(path: Path) -> str:
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError as e:
        raise ArtifactNotFoundError(f"Artifact file not found: {path}") from e
    except IsADirectoryError as e:
        raise ArtifactNotFoundError(f"Artifact path is a directory: {path}") from e
    except UnicodeDecodeError as e:
        raise ArtifactMalformedError(f"Artifact file is not text: {path}") from e


def parse_abi(text: str, path: Path) -> List[Dict[str, Any]]:
    """
    Parse ABI file contents.

    Accepts a bare ABI list, or a compiler artifact object with an `abi` key.

    Raises:
        ArtifactMalformedError: If the text is not JSON or has no ABI list
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ArtifactMalformedError(f"Invalid ABI JSON in {path}: {e}") from e

    if isinstance(data, dict) and "abi" in data:
        data = data["abi"]

    if not isinstance(data, list):
        raise ArtifactMalformedError(f"ABI in {path} is not a list")

    return data


def normalize_bytecode(text: str, path: Path) -> str:
    """
    Strip whitespace and add the 0x prefix to on-disk bytecode.

    Raises:
        ArtifactMalformedError: If no bytecode is left
    """
    code = "".join(text.split())
    if code.lower().startswith(HEX_PREFIX):
        code = code[len(HEX_PREFIX):]
    if not code:
        raise ArtifactMalformedError(f"Bytecode file is empty: {path}")
    return HEX_PREFIX + code


class ArtifactResolver:
    """Loads ABI and bytecode for a contract from a conventional layout."""

    def __init__(self, layout: ArtifactLayout = ArtifactLayout()):
        self.layout = layout

    def resolve(self, base_path: Union[Path, str], contract_name: str) -> ContractArtifact:
        """
        Load a contract's artifact.

        Files are read on every call; artifacts may be recompiled between
        runs.

        Args:
            base_path: Contract working directory
            contract_name: Contract name

        Returns:
            ContractArtifact with parsed ABI and 0x-prefixed bytecode

        Raises:
            ArtifactNotFoundError: If the ABI or bytecode file is missing
            ArtifactMalformedError: If either file is unusable
        """
        abi_path, bin_path = self.layout.paths(base_path, contract_name)

        abi = parse_abi(_read_text(abi_path), abi_path)
        bytecode = normalize_bytecode(_read_text(bin_path), bin_path)

        return ContractArtifact(
            name=contract_name,
            base_path=Path(base_path),
            abi=abi,
            bytecode=bytecode,
        )
