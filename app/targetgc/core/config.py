"""Run configuration.

A run is fully described by a frozen :class:`RunConfig` built once at
startup from command-line options, with user defaults filled in from
``~/.config/targetgc/config.toml``.
"""

import logging
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from targetgc.core.paths import get_user_config_path
from targetgc.errors import ConfigError
from targetgc.store.reader import DEFAULT_JOBS

logger = logging.getLogger(__name__)


class UserConfig(BaseModel):
    """User defaults read from the configuration file.

    Attributes:
        jobs: Default number of worker threads.
        profiles: Default profile selectors; empty means every area.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    jobs: int | None = Field(default=None, ge=1)
    profiles: tuple[str, ...] = ()

    @field_validator("profiles")
    @classmethod
    def validate_profiles(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject empty profile selectors."""
        for profile in v:
            if not profile.strip():
                msg = "profile selectors must not be empty"
                raise ValueError(msg)
        return tuple(p.strip() for p in v)


class RunConfig(BaseModel):
    """Options of a single sweep run.

    Attributes:
        workspace_root: Root directory of the workspace.
        target_dir: Target directory to collect.
        profiles: Profile selectors; empty means every area present.
        force: Collect a target directory outside the workspace root.
        dry_run: Report the plan without deleting anything.
        jobs: Number of worker threads for reading, scanning and deleting.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    workspace_root: Path
    target_dir: Path
    profiles: tuple[str, ...] = ()
    force: bool = False
    dry_run: bool = False
    jobs: int = Field(default=DEFAULT_JOBS, ge=1)


def load_user_config(path: Path | None = None) -> UserConfig:
    """Load user defaults.

    A missing file yields the built-in defaults.

    Args:
        path: Configuration file. Defaults to the XDG location.

    Returns:
        Validated UserConfig.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    config_path = path or get_user_config_path()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.debug("No user configuration at %s", config_path)
        return UserConfig()
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        config = UserConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e

    logger.debug("Loaded user configuration from %s", config_path)
    return config
