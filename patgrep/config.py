"""Config loading for patgrep.

Reads `.patgrep/config.yaml` (or `~/.patgrep/config.yaml`).
Raises SystemExit on parse errors, a missing `version` field, or invalid values.
If no config file is found, returns default values (patgrep runs without config).

Config search order:
  1. `config_path` argument (if provided; the CLI's ``--config`` flag)
  2. PATGREP_CONFIG environment variable (if set)
  3. `.patgrep/config.yaml` (working directory)
  4. `~/.patgrep/config.yaml` (home directory)

Environment variable overrides:
  PATGREP_LOG_LEVEL  : overrides logging.level
  PATGREP_CHUNK_SIZE : overrides scanner.chunk_size
  PATGREP_CONFIG     : sets an explicit config file path to try first
"""

from __future__ import annotations

import codecs
import os
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional

import yaml

from patgrep.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_ENCODING,
    DEFAULT_MAX_MATCH_LENGTH,
    DEFAULT_RE2_MAX_MEM,
)
from patgrep.utils.logger import VALID_LOG_LEVELS, get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Default config search paths (PATGREP_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".patgrep/config.yaml",
    os.path.expanduser("~/.patgrep/config.yaml"),
]


def _fail(msg: str) -> NoReturn:
    print(f"CONFIG ERROR: {msg}", file=sys.stderr)
    raise SystemExit(1)


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ScannerConfig:
    """Scanner subsystem configuration.

    chunk_size:         Characters (or bytes) requested per read().
    max_match_length:   Longest match guaranteed to be reported whole across
                        chunk boundaries.
    re2_max_mem:        Memory budget for the combined re2 program.
    encoding:           Encoding used to decode binary input.
    default_categories: Categories scanned when the command line selects none.
                        Empty means every category.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_match_length: int = DEFAULT_MAX_MATCH_LENGTH
    re2_max_mem: int = DEFAULT_RE2_MAX_MEM
    encoding: str = DEFAULT_ENCODING
    default_categories: list[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    """Log output configuration. Logs always go to stderr."""

    level: str = "WARNING"
    json: bool = False


@dataclass
class Config:
    """Root configuration object populated from .patgrep/config.yaml.

    All fields have working defaults; patgrep runs without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On a non-mapping section or an invalid value.
        """
        # ── Scanner ───────────────────────────────────────────────────────────
        scanner_raw = _section(raw, "scanner")
        categories = scanner_raw.get("default_categories") or []
        if isinstance(categories, str):
            categories = [categories]
        if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
            _fail("scanner.default_categories must be a list of category names.")
        scanner = ScannerConfig(
            chunk_size=_positive_int(scanner_raw, "scanner.chunk_size", DEFAULT_CHUNK_SIZE),
            max_match_length=_positive_int(
                scanner_raw, "scanner.max_match_length", DEFAULT_MAX_MATCH_LENGTH
            ),
            re2_max_mem=_positive_int(scanner_raw, "scanner.re2_max_mem", DEFAULT_RE2_MAX_MEM),
            encoding=_encoding(str(scanner_raw.get("encoding", DEFAULT_ENCODING))),
            default_categories=list(categories),
        )

        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = _section(raw, "logging")
        log_config = LoggingConfig(
            level=_log_level(str(logging_raw.get("level", "WARNING")), "logging.level"),
            json=bool(logging_raw.get("json", False)),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            scanner=scanner,
            logging=log_config,
            path=path,
        )


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        _fail(f"'{name}' must be a mapping, got {type(value).__name__}.")
    return value


def _positive_int(section: dict, key: str, default: int) -> int:
    value: Any = section.get(key.rsplit(".", 1)[-1], default)
    # bool is an int subclass; `chunk_size: yes` is a mistake, not 1.
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        _fail(f"{key} must be a positive integer, got {value!r}.")
    return value


def _encoding(value: str) -> str:
    try:
        codecs.lookup(value)
    except LookupError:
        _fail(f"Unknown scanner.encoding: '{value}'.")
    return value


def _log_level(value: str, source: str) -> str:
    level = value.upper()
    if level not in VALID_LOG_LEVELS:
        _fail(f"Invalid {source}: '{value}'. Supported values: {sorted(VALID_LOG_LEVELS)}.")
    return level


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate patgrep configuration.

    Search order:
      1. ``config_path`` argument (if provided)
      2. ``PATGREP_CONFIG`` environment variable (if set)
      3. ``.patgrep/config.yaml`` (current working directory)
      4. ``~/.patgrep/config.yaml`` (home directory)

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    Environment overrides are applied last, whether or not a file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid values, or invalid environment overrides.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("PATGREP_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.debug("No config file found, using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.debug("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(f"Failed to parse {found_path}: {exc}\nCheck the YAML syntax and try again.")
    except OSError as exc:
        _fail(f"Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"{found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"{found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"{found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    logger.debug(
        "Config loaded",
        path=found_path,
        version=config.version,
        chunk_size=config.scanner.chunk_size,
        default_categories=config.scanner.default_categories,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Handles:
      PATGREP_LOG_LEVEL  : overrides config.logging.level
      PATGREP_CHUNK_SIZE : overrides config.scanner.chunk_size (positive integer)

    Raises:
        SystemExit(1): If an override is set to an invalid value.
    """
    env_level = os.environ.get("PATGREP_LOG_LEVEL")
    if env_level:
        config.logging.level = _log_level(env_level, "PATGREP_LOG_LEVEL")

    env_chunk = os.environ.get("PATGREP_CHUNK_SIZE")
    if env_chunk is not None:
        try:
            chunk_size = int(env_chunk)
        except ValueError:
            chunk_size = 0
        if chunk_size <= 0:
            _fail(
                f"PATGREP_CHUNK_SIZE environment variable is not a valid "
                f"positive integer: '{env_chunk}'"
            )
        config.scanner.chunk_size = chunk_size
