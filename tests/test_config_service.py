"""Config directory resolution and schema-validated load/save."""

import json
import sys
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from sample_dna import config_service
from sample_dna.config_service import ConfigService


@pytest.fixture(autouse=True)
def isolated_appdata(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(config_service.platform, "system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return tmp_path / "xdg" / config_service.APP_NAME


def test_appdata_mode_uses_xdg(tmp_path: Path, isolated_appdata: Path):
    service = ConfigService(app_dir=tmp_path / "app")
    assert service.detect_mode() is False
    assert service.get_config_dir() == isolated_appdata


def test_portable_flag_wins(tmp_path: Path):
    app_dir = tmp_path / "app"
    app_dir.mkdir()
    (app_dir / "portable.flag").write_text("", encoding="utf-8")
    service = ConfigService(app_dir=app_dir)
    assert service.is_portable_mode()
    assert service.get_config_dir(cli_portable=False) == app_dir


def test_cli_portable_flag(tmp_path: Path):
    service = ConfigService(app_dir=tmp_path)
    assert service.get_config_path(cli_portable=True) == tmp_path / "config.json"


def test_missing_config_yields_defaults(tmp_path: Path, isolated_appdata: Path):
    cfg = ConfigService(app_dir=tmp_path).load_config()
    assert cfg == {"config_dir": str(isolated_appdata)}


def test_save_then_load(tmp_path: Path):
    service = ConfigService(app_dir=tmp_path)
    service.save_config({"tree_batch_size": 16, "search_limit": 20}, cli_portable=True)

    cfg = ConfigService(app_dir=tmp_path).load_config(cli_portable=True)
    assert cfg["tree_batch_size"] == 16
    assert cfg["search_limit"] == 20
    assert cfg["config_dir"] == str(tmp_path)


def test_save_rejects_invalid_config(tmp_path: Path):
    with pytest.raises(ValueError):
        ConfigService(app_dir=tmp_path).save_config({"flat_batch_size": 0}, cli_portable=True)


def test_invalid_config_falls_back_to_defaults(tmp_path: Path, capsys):
    (tmp_path / "config.json").write_text(json.dumps({"tree_batch_size": "many"}), encoding="utf-8")
    cfg = ConfigService(app_dir=tmp_path).load_config(cli_portable=True)
    assert "tree_batch_size" not in cfg
    assert "Warning" in capsys.readouterr().out


def test_malformed_config_falls_back_to_defaults(tmp_path: Path, capsys):
    (tmp_path / "config.json").write_text("{oops", encoding="utf-8")
    cfg = ConfigService(app_dir=tmp_path).load_config(cli_portable=True)
    assert cfg == {"config_dir": str(tmp_path)}
    assert "Warning" in capsys.readouterr().out
