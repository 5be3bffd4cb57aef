# config_utils.py - YAML Configuration System for Quizsmith
"""
Quizsmith configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Environment variables (QUIZSMITH_FORMAT, QUIZSMITH_SEED, etc.)
2. quizsmith.yaml in the working directory
3. ~/.quizsmith/config.yaml (global defaults)

Usage:
    from quizsmith.config_utils import get_config

    config = get_config()
    print(config.default_format)
    print(config.shuffle_seed)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from quizsmith.errors import ConfigurationError, unsupported_format_error
from quizsmith.models import SourceFormat


log = logging.getLogger(__name__)

CONFIG_FILENAME = "quizsmith.yaml"
TRUE_VALUES = {"1", "true", "yes", "on"}
LOG_LEVELS = {"debug", "info", "warning", "error"}


@dataclass
class QuizsmithConfig:
    """Complete Quizsmith configuration"""
    # Parsing
    default_format: Optional[SourceFormat] = None   # None = detect
    min_options: int = 2
    allow_degenerate: bool = False

    # Delivery
    shuffle_options: bool = False
    shuffle_seed: Optional[int] = None

    # Output
    log_level: str = "info"

    # Paths (resolved at load time)
    working_dir: Optional[Path] = None

    # Extra settings from config file
    extra: Dict[str, Any] = field(default_factory=dict)

    # Track where values came from (for debugging)
    _sources: Dict[str, str] = field(default_factory=dict)


def parse_format(value: Optional[str]) -> Optional[SourceFormat]:
    """Map a format name ("compact", "lms-html", "auto", ...) to SourceFormat"""
    if value is None:
        return None
    name = str(value).strip().lower().replace("-", "_")
    if name in ("", "auto", "detect"):
        return None
    try:
        return SourceFormat(name)
    except ValueError:
        raise unsupported_format_error(str(value), [f.value for f in SourceFormat] + ["auto"])


class ConfigLoader:
    """Load configuration from multiple sources"""

    def __init__(self, working_dir: Optional[Path] = None):
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.config = QuizsmithConfig(working_dir=self.working_dir)

    def load(self) -> QuizsmithConfig:
        """Load configuration from all sources in priority order"""
        # Load in reverse priority (lowest first, higher overwrites)
        self._load_global_config()
        self._load_yaml_config()
        self._load_env_vars()
        return self.config

    def _load_global_config(self):
        """Load ~/.quizsmith/config.yaml if it exists"""
        global_config = Path.home() / ".quizsmith" / "config.yaml"
        if global_config.exists():
            self._load_yaml_file(global_config, "global")

    def _load_yaml_config(self):
        """Load quizsmith.yaml from the working directory"""
        yaml_path = self.working_dir / CONFIG_FILENAME
        if yaml_path.exists():
            self._load_yaml_file(yaml_path, CONFIG_FILENAME)

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                message=f"Invalid YAML in {path.name}",
                suggestion="Check YAML syntax (indentation, quotes, colons)",
                context={"file": str(path)},
                cause=e,
            )

        if not isinstance(data, dict):
            log.warning("Ignoring %s: expected a mapping at the top level", path)
            return

        if "format" in data:
            self.config.default_format = parse_format(data["format"])
            self.config._sources["default_format"] = source_name

        if "min_options" in data:
            self.config.min_options = self._as_int(data["min_options"], "min_options", path)
            self.config._sources["min_options"] = source_name

        if "allow_degenerate" in data:
            self.config.allow_degenerate = bool(data["allow_degenerate"])
            self.config._sources["allow_degenerate"] = source_name

        if "log_level" in data:
            self.config.log_level = self._as_level(data["log_level"], path)
            self.config._sources["log_level"] = source_name

        # Handle nested shuffle settings
        if "shuffle" in data:
            shuffle = data["shuffle"]
            if isinstance(shuffle, dict):
                if "options" in shuffle:
                    self.config.shuffle_options = bool(shuffle["options"])
                    self.config._sources["shuffle_options"] = source_name
                if shuffle.get("seed") is not None:
                    self.config.shuffle_seed = self._as_int(shuffle["seed"], "shuffle.seed", path)
                    self.config._sources["shuffle_seed"] = source_name
            else:
                self.config.shuffle_options = bool(shuffle)
                self.config._sources["shuffle_options"] = source_name

        # Store any extra settings
        known_keys = {"format", "min_options", "allow_degenerate", "log_level", "shuffle"}
        for key, value in data.items():
            if key not in known_keys:
                self.config.extra[key] = value

    def _load_env_vars(self):
        """Load from environment variables (highest priority)"""
        if os.environ.get("QUIZSMITH_FORMAT"):
            self.config.default_format = parse_format(os.environ["QUIZSMITH_FORMAT"])
            self.config._sources["default_format"] = "env:QUIZSMITH_FORMAT"

        if os.environ.get("QUIZSMITH_SEED"):
            self.config.shuffle_seed = self._as_int(os.environ["QUIZSMITH_SEED"], "QUIZSMITH_SEED")
            self.config._sources["shuffle_seed"] = "env:QUIZSMITH_SEED"

        shuffle = os.environ.get("QUIZSMITH_SHUFFLE")
        if shuffle is not None:
            self.config.shuffle_options = shuffle.lower() in TRUE_VALUES
            self.config._sources["shuffle_options"] = "env:QUIZSMITH_SHUFFLE"

        if os.environ.get("QUIZSMITH_LOG_LEVEL"):
            self.config.log_level = self._as_level(os.environ["QUIZSMITH_LOG_LEVEL"])
            self.config._sources["log_level"] = "env:QUIZSMITH_LOG_LEVEL"

    @staticmethod
    def _as_int(value: Any, key: str, path: Optional[Path] = None) -> int:
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                message=f"Setting '{key}' must be a whole number",
                suggestion=f"Change '{key}' to an integer, e.g. {key}: 42",
                context={"value": value, "file": str(path) if path else "environment"},
                cause=e,
            )

    @staticmethod
    def _as_level(value: Any, path: Optional[Path] = None) -> str:
        level = str(value).strip().lower()
        if level not in LOG_LEVELS:
            raise ConfigurationError(
                message=f"Unknown log level: {value}",
                suggestion="Use one of: " + ", ".join(sorted(LOG_LEVELS)),
                context={"file": str(path) if path else "environment"},
            )
        return level


# ============================================================================
# Public API
# ============================================================================

def get_config(working_dir: Optional[Path] = None) -> QuizsmithConfig:
    """
    Get complete Quizsmith configuration.

    Args:
        working_dir: Directory holding quizsmith.yaml (defaults to cwd)

    Returns:
        QuizsmithConfig with all settings resolved
    """
    loader = ConfigLoader(working_dir)
    return loader.load()


def create_config_template(include_comments: bool = True) -> str:
    """
    Generate a quizsmith.yaml template.

    Args:
        include_comments: Whether to include explanatory comments

    Returns:
        YAML string ready to write to file
    """
    if include_comments:
        return '''# Quizsmith Configuration File

# Source format: auto, compact, lms_text, lms_html, generic_html
format: auto

# Questions with fewer options than this are dropped
min_options: 2

# Keep a page with no recognisable questions as one unstructured block
allow_degenerate: false

# Option shuffling for quiz delivery
shuffle:
  options: false       # Shuffle options at quiz start
  seed: null           # Set a number for a reproducible order

# Logging: debug, info, warning, error
log_level: info
'''
    else:
        return '''format: auto
min_options: 2
allow_degenerate: false
shuffle:
  options: false
  seed: null
log_level: info
'''
