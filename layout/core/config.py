"""layout runtime settings and user configuration file."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from layout.core.errors import ConfigError

CONFIG_FILE_NAME = "layout.yaml"
DEFAULT_REPO_PATTERN = "git@github.com:{0}.git"
GIT_MODES = ("auto", "native")


@dataclass
class LayoutSettings:
    """Runtime settings for layout operations.

    Attributes:
        hook_terminate_timeout: Seconds to wait for a cancelled hook to exit before killing it (default: 5)
        git_binary: Git executable used for cloning (default: git)
        shell: Shell used for inline hooks (default: first of sh/bash found on PATH)
    """

    hook_terminate_timeout: float = 5.0
    git_binary: str = "git"
    shell: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LayoutSettings":
        """Create settings from environment variables.

        Environment variables:
            LAYOUT_HOOK_TERMINATE_TIMEOUT: Grace period for cancelled hooks in seconds
            LAYOUT_GIT_BINARY: Git executable
            LAYOUT_SHELL: Shell for inline hooks

        Returns:
            LayoutSettings instance with values from environment or defaults
        """
        return cls(
            hook_terminate_timeout=float(
                os.getenv("LAYOUT_HOOK_TERMINATE_TIMEOUT", cls.hook_terminate_timeout)
            ),
            git_binary=os.getenv("LAYOUT_GIT_BINARY", cls.git_binary),
            shell=os.getenv("LAYOUT_SHELL") or None,
        )


# Global settings instance (can be overridden)
_settings: Optional[LayoutSettings] = None


def get_settings() -> LayoutSettings:
    """Get the global layout settings.

    Returns:
        LayoutSettings instance (creates from environment if not set)
    """
    global _settings
    if _settings is None:
        _settings = LayoutSettings.from_env()
    return _settings


def set_settings(settings: Optional[LayoutSettings]):
    """Set the global layout settings.

    Args:
        settings: LayoutSettings instance to use globally, None to reload from environment
    """
    global _settings
    _settings = settings


@dataclass
class LayoutConfig:
    """User configuration stored in ``<config dir>/layout/layout.yaml``.

    Attributes:
        default: Pattern for sources without abbreviation, may contain {0}
        abbreviations: Alias to pattern mapping (``alias:owner/repo``)
        values: Global default values injected into every run
        git: Git client mode (auto or native)
    """

    default: str = ""
    abbreviations: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, Any] = field(default_factory=dict)
    git: str = "auto"

    @classmethod
    def load(cls, path: Path) -> "LayoutConfig":
        """Load configuration from a YAML file.

        A missing file yields the default configuration.

        Raises:
            ConfigError: If the file is not a valid configuration
        """
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"parse config {path}: {exc}") from exc

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"config {path} must be a mapping")

        git = data.get("git") or "auto"
        if git not in GIT_MODES:
            raise ConfigError(f"unknown git mode {git!r} in {path}")

        abbreviations = data.get("abbreviations") or {}
        values = data.get("values") or {}
        if not isinstance(abbreviations, dict) or not isinstance(values, dict):
            raise ConfigError(f"'abbreviations' and 'values' in {path} must be mappings")

        return cls(
            default=str(data.get("default") or ""),
            abbreviations={str(k): str(v) for k, v in abbreviations.items()},
            values=dict(values),
            git=git,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"git": self.git}
        if self.default:
            data["default"] = self.default
        if self.abbreviations:
            data["abbreviations"] = dict(self.abbreviations)
        if self.values:
            data["values"] = dict(self.values)
        return data

    def save(self, path: Path) -> None:
        """Write configuration to ``path``, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(self.to_dict(), sort_keys=True))
        path.chmod(0o600)


def user_config_dir() -> Path:
    """Return the per-user configuration directory."""
    if xdg := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg)
    if appdata := os.environ.get("APPDATA"):
        return Path(appdata)
    return Path.home() / ".config"


def default_config_file() -> Path:
    """Location of the user configuration file."""
    return user_config_dir() / "layout" / CONFIG_FILE_NAME


def find_config_file(config_path: Optional[str] = None) -> Path:
    """Locate the active configuration file.

    Precedence: explicit path, ``LAYOUT_CONFIG``, default location.
    """
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("LAYOUT_CONFIG"):
        return Path(env_config)

    return default_config_file()
