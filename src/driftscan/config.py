"""Project configuration loaded from driftscan.yaml."""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from driftscan.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE = "driftscan.yaml"
SPEC_DIR = ".driftscan"
FOUNDATION_DIR = "foundation"
BLUEPRINTS_DIR = "blueprints"

DEFAULT_IGNORE_DIRS = [
    "node_modules",
    "dist",
    "build",
    "vendor",
    ".git",
    ".env",
    "bin",
    "obj",
    ".idea",
    ".vscode",
    "target",
]


class Config(BaseModel):
    project_name: str = "My App"
    spec_dir: str = SPEC_DIR  # holds foundation/ and blueprints/
    ignore_dirs: list[str] = list(DEFAULT_IGNORE_DIRS)

    @field_validator("project_name", "spec_dir")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("cannot be empty")
        return value

    @field_validator("spec_dir")
    @classmethod
    def _relative(cls, value: str) -> str:
        if Path(value).is_absolute():
            raise ValueError(f"must be a relative path, got: {value}")
        return value

    @field_validator("ignore_dirs", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    def ignore_set(self) -> frozenset[str]:
        return frozenset(self.ignore_dirs)

    def foundation_path(self, root: Path) -> Path:
        return Path(root) / self.spec_dir / FOUNDATION_DIR

    def blueprints_path(self, root: Path) -> Path:
        return Path(root) / self.spec_dir / BLUEPRINTS_DIR


def load_config(root: Path) -> Config:
    """Load driftscan.yaml from the project root, falling back to defaults."""
    config_path = Path(root) / CONFIG_FILE
    if not config_path.exists():
        logger.debug("No %s in %s, using defaults", CONFIG_FILE, root)
        return Config()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"failed to read {CONFIG_FILE}: {e}") from e

    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILE} must contain a mapping, got {type(data).__name__}")

    try:
        return Config(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid {CONFIG_FILE}: {e}") from e
