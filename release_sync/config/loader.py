"""Loading of release_sync.yml / release_sync.toml.

The file is optional: values may also come from RELEASE_SYNC_* environment
variables and command-line options, which are merged on top of it. Parse
and validation problems surface as ConfigurationError with a fix hint.
"""

import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from release_sync.config.models import SyncConfig
from release_sync.exceptions import ConfigurationError

# tomllib is stdlib from 3.11; older interpreters use the tomli backport
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

SEARCH_PATHS = [
    "config/release_sync.yml",
    "config/release_sync.yaml",
    "release_sync.yml",
    "release_sync.yaml",
    "release_sync.toml",
]


def load_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a dict.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as dictionary

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or drop the --config option to use defaults",
        ) from None
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}",
            details=str(e),
            fix_hint="Fix the YAML syntax near the reported line",
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details=f"Top level must be a mapping, got {type(data).__name__}",
        )
    return data


def load_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file into a dict.

    Args:
        path: Path to the TOML file

    Returns:
        Parsed TOML as dictionary

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
            return data
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or drop the --config option to use defaults",
        ) from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML in {path}",
            details=str(e),
            fix_hint="Fix the TOML syntax near the reported line",
        ) from e


def find_config(project_root: Path) -> Path | None:
    """Return the first config file found in the standard locations."""
    for search_path in SEARCH_PATHS:
        candidate = project_root / search_path
        if candidate.exists():
            return candidate
    return None


def load_config(
    path: Path | None = None,
    project_root: Path | None = None,
) -> SyncConfig:
    """Load release-sync configuration.

    Unlike an explicit path, the standard locations are optional: when
    none of them exists the defaults (plus environment overrides) are used,
    since every required value can also come from the command line.

    Args:
        path: Explicit path to config file
        project_root: Project root directory (defaults to cwd)

    Returns:
        Validated SyncConfig instance

    Raises:
        ConfigurationError: If an explicit file is missing, or a file is invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path: Path | None
    if path:
        config_path = Path(path)
        if not config_path.is_absolute():
            config_path = project_root / config_path
    else:
        config_path = find_config(project_root)

    if config_path is None:
        return _build(SyncConfig, {}, source="defaults")

    if config_path.suffix in (".yml", ".yaml"):
        data = load_yaml(config_path)
    elif config_path.suffix == ".toml":
        data = load_toml(config_path)
    else:
        raise ConfigurationError(
            f"Unsupported config format: {config_path.suffix}",
            fix_hint="Name the file with a .yml, .yaml or .toml suffix",
        )

    return _build(SyncConfig, data, source=str(config_path))


def apply_overrides(
    config: SyncConfig,
    overrides: dict[str, dict[str, Any]],
) -> SyncConfig:
    """Merge command-line values into configuration sections.

    None and empty-string values are ignored so that an omitted option never
    blanks out a value from the config file or environment.

    Args:
        config: Loaded configuration
        overrides: Mapping of section name to field values

    Returns:
        New validated SyncConfig

    Raises:
        ConfigurationError: If a section is unknown or a value is invalid
    """
    data = config.model_dump()
    for section, values in overrides.items():
        if section not in data or not isinstance(data[section], dict):
            raise ConfigurationError(f"Unknown configuration section: {section}")
        for key, value in values.items():
            if value is None or value == "":
                continue
            data[section][key] = value
    return _build(SyncConfig, data, source="command line")


def _build(model: type[SyncConfig], data: dict[str, Any], source: str) -> SyncConfig:
    try:
        return model(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {source}",
            details=str(e),
            fix_hint="Compare the reported fields with the documented settings",
        ) from e
