"""
Configuration file support for kicad-delay.

Provides hierarchical configuration loading from:
1. Project config: .kicad-delay.toml or kicad-delay.toml in project root
2. User config: ~/.config/kicad-delay/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import ConfigError

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# Config file names to search for in project directories
CONFIG_FILENAMES = [".kicad-delay.toml", "kicad-delay.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "kicad-delay" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"format", "verbose", "quiet"},
    "timing": {"use_stackup_height", "time_unit", "stackup_preset"},
}

STACKUP_PRESETS = ("generic-2", "jlcpcb-4", "oshpark-4", "generic-6")


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    format: str = "table"
    verbose: bool = False
    quiet: bool = False


@dataclass
class TimingConfig:
    """Delay calculation options.

    Attributes:
        use_stackup_height: Include via barrel height in via delay. When
            disabled, vias without an explicit override contribute zero.
        time_unit: Display unit for delays (fs, ps, ns)
        stackup_preset: Stackup used for via heights when no board is given
    """

    use_stackup_height: bool = True
    time_unit: str = "ps"
    stackup_preset: str = "generic-2"


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML data

    Raises:
        ConfigError: If TOML is invalid or the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", context={"file": str(path)}) from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", context={"file": str(path)}) from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    if "defaults" in data:
        defaults_data = data["defaults"]
        _warn_unknown_keys(defaults_data, KNOWN_KEYS["defaults"], "defaults", source)

        for key in ("format", "verbose", "quiet"):
            if key in defaults_data:
                setattr(config.defaults, key, defaults_data[key])
                sources[f"defaults.{key}"] = source

    if "timing" in data:
        timing_data = data["timing"]
        _warn_unknown_keys(timing_data, KNOWN_KEYS["timing"], "timing", source)

        if "use_stackup_height" in timing_data:
            config.timing.use_stackup_height = bool(timing_data["use_stackup_height"])
            sources["timing.use_stackup_height"] = source
        if "time_unit" in timing_data:
            config.timing.time_unit = timing_data["time_unit"]
            sources["timing.time_unit"] = source
        if "stackup_preset" in timing_data:
            preset = timing_data["stackup_preset"]
            if preset not in STACKUP_PRESETS:
                raise ConfigError(
                    f"Unknown stackup preset '{preset}' in {source}",
                    context={"file": source, "available": ", ".join(STACKUP_PRESETS)},
                )
            config.timing.stackup_preset = preset
            sources["timing.stackup_preset"] = source


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# kicad-delay configuration file
# Place as .kicad-delay.toml in project root or ~/.config/kicad-delay/config.toml for user defaults

[defaults]
# Output format: table, json
# format = "table"

# Enable verbose output by default
# verbose = false

# Enable quiet mode by default
# quiet = false

[timing]
# Include via barrel height when no via override matches
# use_stackup_height = true

# Display unit for delays: fs, ps, ns
# time_unit = "ps"

# Stackup used for via heights: generic-2, jlcpcb-4, oshpark-4, generic-6
# stackup_preset = "generic-2"
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
