"""Configuration loading for valuelens.

Reads settings *only* from pyproject.toml under the [tool.valuelens]
section. Simplification defaults live with the language handlers; this
module only carries what a project chose to override:

    [tool.valuelens]
    language = "go"

    [tool.valuelens.options]      # every language
    max_depth = 3

    [tool.valuelens.python]       # one language
    max_string_length = 400

valuelens/src/valuelens/config.py
"""

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional, Union

from valuelens.models import Variant

logger = logging.getLogger(__name__)

LANGUAGE_ENV_VAR = "VALUELENS_LANGUAGE"
DEFAULT_LANGUAGE = "go"

if sys.version_info >= (3, 11):

    import tomllib
else:

    try:

        import tomli as tomllib
    except ImportError as e:

        raise ImportError(
            "valuelens requires Python 3.11+ or the 'tomli' package "
            "to parse pyproject.toml on Python 3.10. "
            "Hint: Try running: pip install tomli"
        ) from e


def walk_up_for_config(start_path: Path) -> Optional[Path]:
    """Return the nearest directory at or above ``start_path`` holding pyproject.toml."""
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent

    while True:
        if (current / "pyproject.toml").is_file():
            return current
        if current.parent == current:
            return None
        current = current.parent


class Config:
    """Holds the valuelens configuration loaded *exclusively* from pyproject.toml.

    Attributes:
    project_root: The detected root of the project containing pyproject.toml.
    Can be None if pyproject.toml is not found.
    settings: A read-only view of the dictionary loaded from the
    [tool.valuelens] section of pyproject.toml. Empty if the
    file or section is missing or invalid.

    """

    def __init__(self, project_root: Optional[Path], config_dict: dict[str, Any]):
        self._project_root = project_root
        self._config_dict = config_dict.copy()

    @property
    def project_root(self) -> Optional[Path]:
        """The detected project root directory, or None if not found."""
        return self._project_root

    @property
    def settings(self) -> Mapping[str, Union[str, bool, int, list, dict]]:
        """Read-only view of the settings loaded from [tool.valuelens]."""
        return self._config_dict

    @property
    def default_language(self) -> str:
        """Language tag used when none is given on the command line.

        ``language`` in [tool.valuelens] wins, then the
        ``VALUELENS_LANGUAGE`` environment variable, then Go.
        """
        configured = self.get("language")
        if isinstance(configured, str) and configured.strip():
            return configured.strip()
        if configured is not None:
            logger.warning(
                "Configuration key 'language' in [tool.valuelens] is not a string. Ignoring it."
            )
        return os.getenv(LANGUAGE_ENV_VAR) or DEFAULT_LANGUAGE

    def options_for(self, variant: Union[Variant, str]) -> dict[str, Any]:
        """Option overrides for one language: shared table, then the language table."""
        tag = variant.value if isinstance(variant, Variant) else str(variant)
        merged: dict[str, Any] = {}
        for section in ("options", tag):
            table = self.get(section, {})
            if not isinstance(table, dict):
                logger.warning(
                    f"[tool.valuelens.{section}] is not a valid table (dictionary). Ignoring it."
                )
                continue
            for key, value in table.items():
                merged[key.replace("-", "_")] = value
        return merged

    def get(
        self, key: str, default: Union[str, bool, int, list, dict, None] = None
    ) -> Union[str, bool, int, list, dict, None]:
        """Gets a value from the loaded settings, returning default if not found."""
        return self._config_dict.get(key, default)

    def __getitem__(self, key: str) -> Union[str, bool, int, list, dict]:
        """Gets a value, raising KeyError if the key is not found."""
        if key not in self._config_dict:
            raise KeyError(
                f"Required configuration key '{key}' not found in "
                f"[tool.valuelens] section of pyproject.toml."
            )
        return self._config_dict[key]

    def __contains__(self, key: str) -> bool:
        return key in self._config_dict

    def is_present(self) -> bool:
        """Checks if a project root was found and some settings were loaded."""
        return self._project_root is not None and bool(self._config_dict)


def load_config(start_path: Path) -> Config:
    """Loads valuelens configuration from the nearest pyproject.toml.

    Args:
    start_path: The directory to start searching upwards for pyproject.toml.

    Returns:
    A Config object; empty when no file, no section, or an unreadable file.

    """
    project_root = walk_up_for_config(start_path)
    loaded_settings: dict[str, Any] = {}

    if not project_root:
        logger.debug(
            f"Could not find project root (pyproject.toml) searching from '{start_path}'. "
            "No configuration will be loaded."
        )
        return Config(project_root=None, config_dict=loaded_settings)

    pyproject_path = project_root / "pyproject.toml"
    logger.debug(f"Attempting to load config from: {pyproject_path}")

    try:
        with open(pyproject_path, "rb") as f:
            full_toml_config = tomllib.load(f)
        logger.debug(f"Parsed {pyproject_path.name}")

        tool_section = full_toml_config.get("tool", {})
        if not isinstance(tool_section, dict):
            logger.warning("pyproject.toml [tool] section is missing or invalid")
            tool_section = {}

        valuelens_config = tool_section.get("valuelens", {})
        if isinstance(valuelens_config, dict):
            loaded_settings = valuelens_config
            if loaded_settings:
                logger.debug(f"Loaded [tool.valuelens] settings from {pyproject_path}")
            else:
                logger.debug(
                    f"Found {pyproject_path}, but the [tool.valuelens] section is empty or missing."
                )
        else:
            logger.warning(
                f"[tool.valuelens] section in {pyproject_path} is not a valid table (dictionary). "
                "Ignoring this section."
            )

    except tomllib.TOMLDecodeError as e:
        logger.error(f"Error parsing {pyproject_path}: {e}. Using empty configuration.")
    except OSError as e:
        logger.error(f"Error reading {pyproject_path}: {e}. Using empty configuration.")

    return Config(project_root=project_root, config_dict=loaded_settings)


__all__ = [
    "Config",
    "load_config",
    "walk_up_for_config",
    "LANGUAGE_ENV_VAR",
    "DEFAULT_LANGUAGE",
]
