#region Imports
import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import tomli_w

from snipsync.exceptions import ConfigError
#endregion


#region Constants
CONFIG_ENV_VAR = "SNIPSYNC_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "snipsync" / "config.toml"
DEFAULT_SNIPPET_FILE = "~/.config/snipsync/snippet.toml"
BACKENDS = ("gist", "ghe", "gitlab")
#endregion


#region Helpers
def expand_path(value: str) -> Path:
    """
    Expand `~` and environment variables and make a path absolute.

    Args:
        value: Path as written in the config file

    Returns:
        Absolute path
    """
    return Path(os.path.expandvars(os.path.expanduser(value))).absolute()


def get_config_path() -> Path:
    """Get the settings file path, honouring $SNIPSYNC_CONFIG."""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return expand_path(override)
    return DEFAULT_CONFIG_PATH
#endregion


#region Data Structure
@dataclass
class GeneralSettings:
    snippet_file: str = DEFAULT_SNIPPET_FILE
    snippet_dirs: list[str] = field(default_factory=list)
    sort_by: str = "recency"
    backend: str = "gist"
    snippet_extension: str = ".toml"
    auto_sync: bool = False

    @property
    def snippet_path(self) -> Path:
        return expand_path(self.snippet_file)

    @property
    def snippet_dir_paths(self) -> list[Path]:
        return [expand_path(d) for d in self.snippet_dirs]


@dataclass
class GistSettings:
    file_name: str = "snipsync-snippet.toml"
    gist_id: str = ""
    public: bool = False
    base_url: str = ""  # API base for GitHub Enterprise, e.g. https://ghe.example.com/api/v3


@dataclass
class GitLabSettings:
    file_name: str = "snipsync-snippet.toml"
    snippet_id: str = ""
    url: str = "https://gitlab.com"
    visibility: str = "private"
    skip_ssl: bool = False


@dataclass
class Settings:
    general: GeneralSettings = field(default_factory=GeneralSettings)
    gist: GistSettings = field(default_factory=GistSettings)
    gitlab: GitLabSettings = field(default_factory=GitLabSettings)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Build settings from parsed TOML, filling in defaults.

        Unknown sections and keys are ignored.

        Raises:
            ConfigError: If a section is not a table or the backend is unknown
        """
        sections = {}
        for section in fields(cls):
            raw = data.get(section.name, {})
            if not isinstance(raw, dict):
                raise ConfigError(f"Invalid config: [{section.name}] must be a table")
            section_type = section.default_factory
            known = {f.name for f in fields(section_type)}
            sections[section.name] = section_type(
                **{key: value for key, value in raw.items() if key in known}
            )

        settings = cls(**sections)
        if settings.general.backend not in BACKENDS:
            raise ConfigError(
                f"Invalid config: unknown backend '{settings.general.backend}' "
                f"(expected one of: {', '.join(BACKENDS)})"
            )
        return settings
#endregion


#region File Operations
def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from disk.

    Args:
        path: Settings file (default: $SNIPSYNC_CONFIG or ~/.config/snipsync/config.toml)

    Returns:
        Settings, with defaults if the file does not exist

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    path = path or get_config_path()
    if not path.exists():
        return Settings()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to load config file {path}: {e}") from e

    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """
    Save settings to disk.

    Args:
        settings: Settings to write
        path: Settings file (default: $SNIPSYNC_CONFIG or ~/.config/snipsync/config.toml)

    Returns:
        Path written to
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(settings.to_dict(), f)
    return path
#endregion
