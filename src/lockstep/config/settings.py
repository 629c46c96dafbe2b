"""Run configuration."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lockstep.errors import ConfigValidationError

ENV_PREFIX = "LOCKSTEP_"


class RunConfig(BaseSettings):
    """Immutable configuration for one state machine run.

    Values come from keyword arguments, ``LOCKSTEP_*`` environment variables
    or a ``.env`` file, in that order of priority. The engine reads the
    config once at the start of a run and never mutates it.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    cases: int = Field(default=256, description="Number of generated test cases per run")
    min_size: int = Field(default=1, description="Minimum number of transitions per case")
    max_size: int = Field(default=20, description="Maximum number of transitions per case")
    max_precondition_retries: int = Field(
        default=16, description="Draws per slot before the slot counts as unfillable"
    )
    max_unfillable_slots: int = Field(
        default=3, description="Consecutive unfillable slots before generation stops early"
    )
    max_generation_attempts: int = Field(
        default=8, description="Whole-candidate retries before GenerationExhausted"
    )
    max_shrink_iters: int = Field(default=4096, description="Shrink iteration budget, 0 = unlimited")
    max_shrink_time: float = Field(default=0.0, description="Shrink time budget in seconds, 0 = unlimited")
    verbose: bool = False
    seed: int | None = Field(default=None, description="Seed for reproducible generation")

    @field_validator("cases", "max_precondition_retries", "max_unfillable_slots", "max_generation_attempts")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ConfigValidationError("must be at least 1", field=info.field_name, value=v)
        return v

    @field_validator("min_size", "max_shrink_iters")
    @classmethod
    def validate_non_negative(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            raise ConfigValidationError("must not be negative", field=info.field_name, value=v)
        return v

    @field_validator("max_shrink_time")
    @classmethod
    def validate_shrink_time(cls, v: float) -> float:
        if v < 0:
            raise ConfigValidationError("must not be negative", field="max_shrink_time", value=v)
        return v

    @model_validator(mode="after")
    def validate_size_range(self) -> RunConfig:
        if self.max_size < self.min_size:
            raise ConfigValidationError(
                f"must be >= min_size ({self.min_size})",
                field="max_size",
                value=self.max_size,
            )
        return self

    @property
    def size_range(self) -> tuple[int, int]:
        """The inclusive (min_size, max_size) range."""
        return self.min_size, self.max_size


def load_config(config_path: str | Path | None = None, **overrides: Any) -> RunConfig:
    """Load configuration from a YAML file and the environment.

    Priority: overrides > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
            if not isinstance(config_data, dict):
                raise ConfigValidationError(
                    "config file must contain a YAML mapping",
                    field=str(config_path),
                    value=type(config_data).__name__,
                )

    # Keyword arguments beat the environment in pydantic-settings, so drop
    # file values the environment is meant to override. Env names match
    # case-insensitively, as they do for RunConfig itself.
    env_names = {key.upper() for key in os.environ}
    for name in RunConfig.model_fields:
        if f"{ENV_PREFIX}{name}".upper() in env_names:
            config_data.pop(name, None)

    config_data.update(overrides)
    return RunConfig(**config_data)
