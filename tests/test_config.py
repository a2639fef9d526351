"""Unit tests for environment configuration helpers."""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from eportfolio import config

pytestmark = pytest.mark.config


def test_data_dir_prefers_env(monkeypatch, tmp_path):
    """PORTFOLIO_DATA_DIR overrides the working directory."""
    monkeypatch.setenv(config.DATA_DIR_ENV_VAR, str(tmp_path))
    assert config.get_data_dir() == str(tmp_path)


def test_data_dir_defaults_to_cwd(monkeypatch, tmp_path):
    """Without the env var the working directory is used."""
    monkeypatch.delenv(config.DATA_DIR_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    assert config.get_data_dir() == os.path.abspath(os.getcwd())


def test_upload_dir_defaults_under_data_dir(monkeypatch, tmp_path):
    """The upload root defaults to <data dir>/uploads."""
    monkeypatch.delenv(config.UPLOAD_DIR_ENV_VAR, raising=False)
    assert config.get_upload_dir(str(tmp_path)) == os.path.join(str(tmp_path), "uploads")


def test_upload_dir_prefers_env(monkeypatch, tmp_path):
    """PORTFOLIO_UPLOAD_DIR overrides the default upload root."""
    monkeypatch.setenv(config.UPLOAD_DIR_ENV_VAR, str(tmp_path / "files"))
    assert config.get_upload_dir("/ignored") == str(tmp_path / "files")


def test_port_default_and_override(monkeypatch):
    """The port defaults to 3000 and honors PORTFOLIO_PORT."""
    monkeypatch.delenv(config.PORT_ENV_VAR, raising=False)
    assert config.get_port() == 3000

    monkeypatch.setenv(config.PORT_ENV_VAR, "8080")
    assert config.get_port() == 8080


@pytest.mark.parametrize("raw", ["abc", "0", "70000"])
def test_invalid_port_raises(monkeypatch, raw):
    """Invalid ports raise a RuntimeError naming the variable."""
    monkeypatch.setenv(config.PORT_ENV_VAR, raw)
    with pytest.raises(RuntimeError) as exc_info:
        config.get_port()
    assert config.PORT_ENV_VAR in str(exc_info.value)
