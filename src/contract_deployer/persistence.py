"""Configuration write-back for contract-deployer."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .logging_config import get_logger
from .parsers import config_to_document
from .types import DeploymentConfig

logger = get_logger(__name__)


def write_document(document: Dict[str, Any], file_path: Union[Path, str]) -> None:
    """
    Atomically replace a JSON file.

    The document is written to a temporary file in the target directory and
    moved over the original, so readers see either the old or the new file,
    never a truncated one.

    Args:
        document: JSON-serialisable data
        file_path: Destination file
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ConfigWriter:
    """Flushes a processed DeploymentConfig back to its origin file."""

    def write(self, config: DeploymentConfig, file_path: Optional[Union[Path, str]] = None) -> Path:
        """
        Write the whole configuration, including updated statuses.

        Args:
            config: Configuration to persist
            file_path: Override destination (defaults to config.source_path)

        Returns:
            Path that was written

        Raises:
            ValueError: If neither file_path nor config.source_path is set
        """
        target = file_path if file_path is not None else config.source_path
        if target is None:
            raise ValueError("Configuration has no source path to write back to")

        target = Path(target)
        write_document(config_to_document(config), target)
        logger.debug("config_written", config=str(target))
        return target


def write_config(config: DeploymentConfig, file_path: Optional[Union[Path, str]] = None) -> Path:
    """Write a configuration back to disk with the default writer."""
    return ConfigWriter().write(config, file_path)
