"""Unit tests for patgrep/config.py: config file loading and validation.

Covers:
  - Missing config file → Config.defaults(), no exception
  - Search order: explicit path, PATGREP_CONFIG, .patgrep/config.yaml
  - Missing / unsupported 'version' → SystemExit(1) with a CONFIG ERROR message
  - Invalid YAML and non-mapping YAML → SystemExit(1)
  - scanner.* and logging.* values, with validation
  - PATGREP_LOG_LEVEL and PATGREP_CHUNK_SIZE overrides
"""

from __future__ import annotations

import os
import textwrap
from pathlib import Path

import pytest

import patgrep.config
from patgrep.config import (
    SUPPORTED_VERSIONS,
    Config,
    LoggingConfig,
    ScannerConfig,
    load_config,
)
from patgrep.constants import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_MATCH_LENGTH


def write_config(tmp_path: Path, body: str, name: str = "config.yaml") -> str:
    path = tmp_path / name
    path.write_text(textwrap.dedent(body))
    return str(path)


# ─── Missing config file ──────────────────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self) -> None:
        config = load_config(config_path="/nonexistent/path/to/config.yaml")
        assert isinstance(config, Config)
        assert config.version == 1
        assert config.path is None

    def test_no_path_returns_defaults(self) -> None:
        config = load_config()
        assert config.scanner == ScannerConfig()
        assert config.logging == LoggingConfig()

    def test_defaults(self) -> None:
        config = Config.defaults()
        assert config.scanner.chunk_size == DEFAULT_CHUNK_SIZE
        assert config.scanner.max_match_length == DEFAULT_MAX_MATCH_LENGTH
        assert config.scanner.encoding == "utf-8"
        assert config.scanner.default_categories == []
        assert config.logging.level == "WARNING"
        assert config.logging.json is False


# ─── Search order ─────────────────────────────────────────────────────────────


class TestSearchOrder:
    def test_explicit_path(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "version: 1\nscanner:\n  chunk_size: 1024\n")
        config = load_config(path)
        assert config.scanner.chunk_size == 1024
        assert config.path == path

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path, "version: 1\nscanner:\n  chunk_size: 2048\n")
        monkeypatch.setenv("PATGREP_CONFIG", path)
        assert load_config().scanner.chunk_size == 2048

    def test_explicit_path_beats_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        explicit = write_config(tmp_path, "version: 1\nscanner:\n  chunk_size: 1\n", "a.yaml")
        env = write_config(tmp_path, "version: 1\nscanner:\n  chunk_size: 2\n", "b.yaml")
        monkeypatch.setenv("PATGREP_CONFIG", env)
        assert load_config(explicit).scanner.chunk_size == 1

    def test_working_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".patgrep").mkdir()
        write_config(tmp_path / ".patgrep", "version: 1\nlogging:\n  level: info\n")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(patgrep.config, "DEFAULT_CONFIG_PATHS", [".patgrep/config.yaml"])
        config = load_config()
        assert config.logging.level == "INFO"
        assert config.path == ".patgrep/config.yaml"


# ─── Version validation ───────────────────────────────────────────────────────


class TestVersion:
    def test_supported_versions(self) -> None:
        assert SUPPORTED_VERSIONS == frozenset({1})

    def test_missing_version(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path, "scanner:\n  chunk_size: 10\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "CONFIG ERROR" in err
        assert "version" in err

    def test_unsupported_version(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path, "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "Unsupported config version: 2" in capsys.readouterr().err

    def test_empty_file(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "")
        with pytest.raises(SystemExit):
            load_config(path)


# ─── Malformed files ──────────────────────────────────────────────────────────


class TestMalformed:
    def test_invalid_yaml(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path, "version: 1\nscanner: [unclosed\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "Failed to parse" in capsys.readouterr().err

    def test_scalar_document(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path, "just a string\n")
        with pytest.raises(SystemExit):
            load_config(path)
        assert "not a valid YAML mapping" in capsys.readouterr().err

    def test_section_not_mapping(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "version: 1\nscanner: 5\n")
        with pytest.raises(SystemExit):
            load_config(path)


# ─── Values ───────────────────────────────────────────────────────────────────


class TestValues:
    def test_full_file(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path,
            """\
            version: 1
            scanner:
              chunk_size: 4096
              max_match_length: 512
              re2_max_mem: 1048576
              encoding: latin-1
              default_categories:
                - ipv4-address
                - email-address
            logging:
              level: debug
              json: true
            unknown_key: ignored
            """,
        )
        config = load_config(path)
        assert config.scanner.chunk_size == 4096
        assert config.scanner.max_match_length == 512
        assert config.scanner.re2_max_mem == 1048576
        assert config.scanner.encoding == "latin-1"
        assert config.scanner.default_categories == ["ipv4-address", "email-address"]
        assert config.logging.level == "DEBUG"
        assert config.logging.json is True

    def test_single_default_category_string(self, tmp_path: Path) -> None:
        path = write_config(tmp_path, "version: 1\nscanner:\n  default_categories: url\n")
        assert load_config(path).scanner.default_categories == ["url"]

    @pytest.mark.parametrize(
        "body",
        [
            "scanner:\n  chunk_size: 0\n",
            "scanner:\n  chunk_size: -5\n",
            "scanner:\n  chunk_size: big\n",
            "scanner:\n  chunk_size: true\n",
            "scanner:\n  max_match_length: 0\n",
            "scanner:\n  encoding: no-such-codec\n",
            "scanner:\n  default_categories: {a: 1}\n",
            "logging:\n  level: LOUD\n",
        ],
    )
    def test_invalid_value(self, tmp_path: Path, body: str, capsys: pytest.CaptureFixture[str]) -> None:
        path = write_config(tmp_path, "version: 1\n" + body)
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "CONFIG ERROR" in capsys.readouterr().err


# ─── Environment overrides ────────────────────────────────────────────────────


class TestEnvOverrides:
    def test_log_level_without_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATGREP_LOG_LEVEL", "error")
        assert load_config().logging.level == "ERROR"

    def test_chunk_size_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = write_config(tmp_path, "version: 1\nscanner:\n  chunk_size: 1024\n")
        monkeypatch.setenv("PATGREP_CHUNK_SIZE", "8192")
        assert load_config(path).scanner.chunk_size == 8192

    @pytest.mark.parametrize("value", ["abc", "0", "-1", ""])
    def test_invalid_chunk_size(self, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
        monkeypatch.setenv("PATGREP_CHUNK_SIZE", value)
        with pytest.raises(SystemExit) as exc_info:
            load_config()
        assert exc_info.value.code == 1

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PATGREP_LOG_LEVEL", "chatty")
        with pytest.raises(SystemExit):
            load_config()

    def test_env_untouched_when_unset(self) -> None:
        assert "PATGREP_CHUNK_SIZE" not in os.environ
        assert load_config().scanner.chunk_size == DEFAULT_CHUNK_SIZE
