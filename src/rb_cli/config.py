import logging
import tomllib
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAMES = (".rblint.toml", "pyproject.toml")


class ConfigError(Exception):
    """The configuration file could not be read or has invalid values."""


class LintConfig:
    """Handles loading and validation of .rblint.toml configuration"""

    def __init__(self, config_path: Path | None = None):
        self.select: list[str] | None = None
        self.ignore: list[str] = []
        self.max_fix_passes: int = 10
        self.source: Path | None = None

        if config_path and config_path.exists():
            self._load_from_file(config_path)

    @classmethod
    def discover(cls, start: Path) -> "LintConfig":
        """Load the first config file found in ``start`` or its parents."""
        start = start.resolve()
        for directory in (start, *start.parents):
            for name in DEFAULT_CONFIG_NAMES:
                candidate = directory / name
                if candidate.is_file() and (name != "pyproject.toml" or _has_section(candidate)):
                    return cls(candidate)
        return cls()

    def _load_from_file(self, path: Path):
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        # .rblint.toml may use a bare table or the same [tool.rblint] table as pyproject.toml
        lint_data = data.get("tool", {}).get("rblint", data)
        self.select = _string_list(lint_data, "select", self.select, path)
        self.ignore = _string_list(lint_data, "ignore", self.ignore, path)

        passes = lint_data.get("max-fix-passes", self.max_fix_passes)
        if not isinstance(passes, int) or isinstance(passes, bool) or passes < 1:
            raise ConfigError(f"{path}: max-fix-passes must be a positive integer")
        self.max_fix_passes = passes
        self.source = path
        logger.debug("Loaded configuration from %s", path)

    def apply_to_registry(self, registry: Any) -> list[Any]:
        """Return list of enabled rules based on this config"""
        return registry.get_enabled_rules(select=self.select, ignore=self.ignore)


def _string_list(data: dict, key: str, default, path: Path):
    value = data.get(key, default)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{path}: {key} must be a list of strings")
    return value


def _has_section(pyproject: Path) -> bool:
    try:
        with open(pyproject, "rb") as f:
            return "rblint" in tomllib.load(f).get("tool", {})
    except (OSError, tomllib.TOMLDecodeError):
        return False
