"""Tests for TOML config file loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tgmark.cli import build_parser, load_config, main, resolve_options
from tgmark.dialects import Dialect


def _options(tmp_path: Path, *extra: str):
    doc = tmp_path / "doc.tgm"
    if not doc.exists():
        doc.write_text("")
    return resolve_options(build_parser().parse_args([str(doc), *extra]))


class TestLoadConfig:
    def test_missing_config_returns_empty(self, tmp_path: Path) -> None:
        assert load_config(None, tmp_path) == {}

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "custom.toml"
        cfg.write_text('[render]\ndialect = "html"\n')
        assert load_config(cfg, tmp_path) == {"render": {"dialect": "html"}}

    def test_auto_discover_tgmark_toml(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text("[parser]\nmax_depth = 10\n")
        assert load_config(None, tmp_path)["parser"] == {"max_depth": 10}


class TestConfigMerge:
    def test_config_dialect(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[render]\ndialect = "html"\n')
        assert _options(tmp_path).dialect is Dialect.HTML

    def test_cli_overrides_config_dialect(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[render]\ndialect = "html"\n')
        assert _options(tmp_path, "-d", "markdownv2").dialect is Dialect.MARKDOWN_V2

    def test_parser_section(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text("[parser]\nmax_depth = 5\nstrict = true\n")
        opts = _options(tmp_path)
        assert opts.max_depth == 5
        assert opts.strict is True

    def test_cli_overrides_max_depth(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text("[parser]\nmax_depth = 5\n")
        assert _options(tmp_path, "--max-depth", "9").max_depth == 9

    def test_detect_merged_without_duplicates(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[formatters]\ndetect = ["date", "time"]\n')
        opts = _options(tmp_path, "--detect", "time", "--detect", "phone")
        assert opts.detect == ["date", "time", "phone"]

    def test_currencies(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text(
            '[[formatters.currency]]\nsymbol = "$"\ncode = "usd"\n\n'
            '[[formatters.currency]]\nsymbol = "€"\ncode = "eur"\n'
        )
        assert _options(tmp_path).currencies == [("$", "usd"), ("€", "eur")]

    def test_currency_needs_code(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[[formatters.currency]]\nsymbol = "$"\n')
        with pytest.raises(ValueError, match="symbol and a code"):
            _options(tmp_path)

    def test_log_level(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[logging]\nlevel = "debug"\n')
        assert _options(tmp_path).log_level == "DEBUG"

    def test_verbose_overrides_log_level(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[logging]\nlevel = "error"\n')
        assert _options(tmp_path, "-v").log_level == "INFO"

    def test_explicit_config_flag(self, tmp_path: Path) -> None:
        cfg = tmp_path / "other.toml"
        cfg.write_text('[render]\ndialect = "html"\n')
        assert _options(tmp_path, "--config", str(cfg)).dialect is Dialect.HTML


class TestConfigErrors:
    def test_unknown_dialect_returns_2(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "tgmark.toml").write_text('[render]\ndialect = "rst"\n')
        doc = tmp_path / "doc.tgm"
        doc.write_text("x")
        assert main([str(doc)]) == 2
        assert "unknown dialect" in capsys.readouterr().err

    def test_unknown_log_level_returns_2(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text('[logging]\nlevel = "loud"\n')
        doc = tmp_path / "doc.tgm"
        doc.write_text("x")
        assert main([str(doc)]) == 2

    def test_malformed_toml_returns_2(self, tmp_path: Path) -> None:
        (tmp_path / "tgmark.toml").write_text("[render\n")
        doc = tmp_path / "doc.tgm"
        doc.write_text("x")
        assert main([str(doc)]) == 2


class TestConfigEndToEnd:
    def test_currency_formatter_registered(self, tmp_path: Path, capsys) -> None:
        (tmp_path / "tgmark.toml").write_text(
            '[formatters]\ndetect = ["usd"]\n\n[[formatters.currency]]\nsymbol = "$"\ncode = "usd"\n'
        )
        doc = tmp_path / "doc.tgm"
        doc.write_text("Total 1,250")
        assert main([str(doc)]) == 0
        assert capsys.readouterr().out == "Total `1250.00 $`"
