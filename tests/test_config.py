"""Tests for RunConfig and load_config.

Tests cover:
- Defaults
- Environment variable overrides
- Range validation
- YAML loading and precedence
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from lockstep import ConfigValidationError, RunConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep LOCKSTEP_* variables and stray .env files out of these tests."""
    import os

    for name in list(os.environ):
        if name.upper().startswith("LOCKSTEP_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


class TestRunConfig:
    def test_defaults(self) -> None:
        config = RunConfig()
        assert config.cases == 256
        assert config.size_range == (1, 20)
        assert config.max_precondition_retries == 16
        assert config.max_unfillable_slots == 3
        assert config.max_generation_attempts == 8
        assert config.max_shrink_iters == 4096
        assert config.max_shrink_time == 0.0
        assert config.verbose is False
        assert config.seed is None

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOCKSTEP_CASES", "12")
        monkeypatch.setenv("LOCKSTEP_VERBOSE", "true")
        config = RunConfig()
        assert config.cases == 12
        assert config.verbose is True

    def test_kwargs_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOCKSTEP_CASES", "12")
        assert RunConfig(cases=3).cases == 3

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("LOCKSTEP_SEED=99\n")
        assert RunConfig().seed == 99

    def test_frozen(self) -> None:
        config = RunConfig()
        with pytest.raises(ValidationError):
            config.cases = 1

    @pytest.mark.parametrize(
        "field,value",
        [
            ("cases", 0),
            ("max_precondition_retries", 0),
            ("max_unfillable_slots", 0),
            ("max_generation_attempts", -1),
            ("min_size", -1),
            ("max_shrink_iters", -5),
            ("max_shrink_time", -0.1),
        ],
    )
    def test_out_of_range(self, field: str, value: object) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            RunConfig(**{field: value})
        assert exc_info.value.field == field
        assert exc_info.value.value == value

    def test_inverted_size_range(self) -> None:
        with pytest.raises(ConfigValidationError, match="max_size"):
            RunConfig(min_size=10, max_size=5)

    def test_unlimited_shrinking_allowed(self) -> None:
        config = RunConfig(max_shrink_iters=0, max_shrink_time=0)
        assert config.max_shrink_iters == 0


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.yaml") == RunConfig()

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text(
            textwrap.dedent(
                """\
                cases: 40
                max_size: 8
                seed: 17
                """
            )
        )
        config = load_config(path)
        assert config.cases == 40
        assert config.size_range == (1, 8)
        assert config.seed == 17

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).cases == 256

    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text("cases: 40\nseed: 17\n")
        monkeypatch.setenv("LOCKSTEP_CASES", "7")
        config = load_config(path)
        assert config.cases == 7
        assert config.seed == 17

    def test_overrides_beat_everything(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text("cases: 40\n")
        monkeypatch.setenv("LOCKSTEP_CASES", "7")
        assert load_config(path, cases=2).cases == 2

    def test_invalid_value_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text("cases: 0\n")
        with pytest.raises(ConfigValidationError):
            load_config(path)

    def test_lowercase_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text("seed: 17\n")
        monkeypatch.setenv("lockstep_seed", "3")
        assert load_config(path).seed == 3

    def test_yaml_must_be_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "lockstep.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigValidationError, match="YAML mapping"):
            load_config(path)
