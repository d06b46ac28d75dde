"""External tool settings (``path.json``) with first-run defaults."""

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from modpacker.config import env
from modpacker.core.errors import SettingsError
from modpacker.core.logger import setup_logger

logger = setup_logger(__name__)

SETTINGS_FILE_NAME = "path.json"


@dataclass(frozen=True)
class ToolPaths:
    """Locations of the four external tools (the config compiler is listed twice)."""

    paa_converter_path: str = "./external_tools/paa/ImageToPAA.exe"
    rvmat_converter_path: str = "./external_tools/config/CfgConvert.exe"
    config_converter_path: str = "./external_tools/config/CfgConvert.exe"
    pbo_packer_path: str = "./external_tools/pbo/pboc.exe"
    pbo_signer_path: str = "./external_tools/signing/dsSignFile.exe"

    @classmethod
    def from_dict(cls, data: Any) -> "ToolPaths":
        if not isinstance(data, dict):
            raise SettingsError(f"Settings must be a JSON object, got {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise SettingsError(f"Unknown setting(s): {', '.join(unknown)}")
        missing = sorted(known - set(data))
        if missing:
            raise SettingsError(f"Missing setting(s): {', '.join(missing)}")

        for key in known:
            if not isinstance(data[key], str) or not data[key]:
                raise SettingsError(f"Setting {key} must be a non-empty string")

        return cls(**data)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def default_settings_path() -> Path:
    """Settings file beside the running program (``CONFIG_DIR``)."""
    return Path(env.CONFIG_DIR) / SETTINGS_FILE_NAME


def read_tool_paths(path: Path) -> ToolPaths:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid JSON in settings file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise SettingsError(f"Settings file {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {path}: {e}") from e

    try:
        return ToolPaths.from_dict(data)
    except SettingsError as e:
        raise SettingsError(f"{path}: {e}") from e


def write_tool_paths(path: Path, paths: ToolPaths) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(paths.to_dict(), f, indent=2)
    logger.info(f"Saved tool settings to {path}")


def load_tool_paths(path: Optional[Path] = None) -> ToolPaths:
    """Load tool settings for a run.

    Args:
        path: Explicit settings file. It must exist; no defaults are written
            for a caller-supplied location.

    Returns:
        ToolPaths: Settings read from ``path``, or from the default location.
            A missing default file is created with the built-in defaults.

    Raises:
        SettingsError: If the file is missing (explicit path), unreadable or malformed
    """
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise SettingsError(f"No {SETTINGS_FILE_NAME} found at: {path}")
        return read_tool_paths(path)

    default_path = default_settings_path()
    if default_path.exists():
        return read_tool_paths(default_path)

    defaults = ToolPaths()
    try:
        write_tool_paths(default_path, defaults)
    except OSError as e:
        raise SettingsError(f"Cannot write default {SETTINGS_FILE_NAME} to {default_path.parent}: {e}") from e
    logger.info(f"No {SETTINGS_FILE_NAME} found, created defaults at {default_path}")
    return defaults
