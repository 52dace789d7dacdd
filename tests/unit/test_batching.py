"""Unit tests for configuration discovery and batch planning."""

from pathlib import Path

import pytest

from contract_deployer.scheduler import discover_configs, plan_batches
from contract_deployer.types import DeploymentConfig


def _configs(count: int):
    return [DeploymentConfig(home=f"/srv/{i}") for i in range(count)]


class TestPlanBatches:
    """Test the plan_batches function."""

    def test_forty_five_configs_make_three_batches(self):
        batches = plan_batches(_configs(45), batch_size=20, batch_interval=30)

        assert [len(b) for b in batches] == [20, 20, 5]
        assert [b.index for b in batches] == [0, 1, 2]
        assert [b.start_offset for b in batches] == [0, 30, 60]

    def test_preserves_order(self):
        configs = _configs(5)
        batches = plan_batches(configs, batch_size=2, batch_interval=1)

        flattened = [c for b in batches for c in b.configs]
        assert flattened == configs

    def test_exact_multiple_has_no_empty_batch(self):
        batches = plan_batches(_configs(40), batch_size=20, batch_interval=30)
        assert [len(b) for b in batches] == [20, 20]

    def test_no_configs_no_batches(self):
        assert plan_batches([], batch_size=20, batch_interval=30) == []

    def test_defaults(self):
        batches = plan_batches(_configs(21))
        assert [len(b) for b in batches] == [20, 1]
        assert batches[1].start_offset == 30

    def test_rejects_invalid_batch_size(self):
        with pytest.raises(ValueError):
            plan_batches(_configs(1), batch_size=0)


class TestDiscoverConfigs:
    """Test the discover_configs function."""

    def test_lists_files_sorted(self, tmp_path: Path):
        for name in ["b.json", "a.json", "c.conf"]:
            (tmp_path / name).write_text("{}")

        assert [p.name for p in discover_configs(tmp_path)] == ["a.json", "b.json", "c.conf"]

    def test_skips_hidden_files_and_directories(self, tmp_path: Path):
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / ".a.json.123.tmp").write_text("{}")
        (tmp_path / "nested").mkdir()

        assert [p.name for p in discover_configs(tmp_path)] == ["a.json"]

    def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            discover_configs(tmp_path / "missing")
