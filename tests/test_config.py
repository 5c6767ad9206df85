"""Tests for typeface.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from typeface.config import ConfigError, LoaderConfig, TypefaceConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TypefaceConfig)
    assert config.root == tmp_path.resolve()
    assert config.loader.skip_function_bodies is True
    assert config.loader.suppress_diagnostics is True
    assert config.loader.allow_unresolved_imports is True
    assert config.loader.build_tags == []
    assert config.loader.goos == "linux"
    assert config.loader.goarch == "amd64"


def test_load_config_parses_loader_options(tmp_path: Path) -> None:
    config_file = tmp_path / ".typeface.yml"
    config_file.write_text(
        """
loader:
  skip_function_bodies: false
  suppress_diagnostics: false
  allow_unresolved_imports: false
  cgo_enabled: false
  goos: windows
  goarch: arm64
  build_tags: [integration, e2e]
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert isinstance(config.loader, LoaderConfig)
    assert config.loader.skip_function_bodies is False
    assert config.loader.suppress_diagnostics is False
    assert config.loader.allow_unresolved_imports is False
    assert config.loader.cgo_enabled is False
    assert config.loader.goos == "windows"
    assert config.loader.goarch == "arm64"
    assert config.loader.build_tags == ["integration", "e2e"]


def test_load_config_accepts_directory(tmp_path: Path) -> None:
    (tmp_path / ".typeface.yml").write_text("loader:\n  build_tags: single\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.loader.build_tags == ["single"]


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".typeface.yml").write_text("\n", encoding="utf-8")

    assert load_config(tmp_path).loader == LoaderConfig()


@pytest.mark.parametrize(
    "content, message",
    [
        ("- a\n- b\n", "mapping at the root"),
        ("output: {}\n", "Unknown configuration keys: output"),
        ("loader:\n  ignore_everything: true\n", "Unknown loader options: ignore_everything"),
        ("loader:\n  suppress_diagnostics: maybe\n", "suppress_diagnostics must be true or false"),
        ("loader:\n  build_tags: [1, 2]\n", "build_tags must be a list of strings"),
        ("loader: [1]\n", "'loader' must be a mapping"),
        ("loader: {goos: ''}\n", "goos must be a non-empty string"),
        ("loader:\n  goos: [unclosed\n", "Failed to parse"),
    ],
)
def test_load_config_rejects_invalid_content(tmp_path: Path, content: str, message: str) -> None:
    (tmp_path / ".typeface.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert message in str(excinfo.value)
