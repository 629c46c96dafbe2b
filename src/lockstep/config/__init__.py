"""Configuration for lockstep runs."""

from lockstep.config.settings import ENV_PREFIX, RunConfig, load_config

__all__ = ["ENV_PREFIX", "RunConfig", "load_config"]
