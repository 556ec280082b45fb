import os
from pathlib import Path

import pytest

from signage_client.config.config_loader import ConfigLoader
from signage_client.config.settings import DEFAULT_BLACKLIST_FILENAME, load_settings

CONFIG = """
library_path: {library}
blacklist_filename: bl.txt
client_version: "3"
log_level: debug
xmds:
  url: http://cms.example/xmds.php?v=5
  server_key: from-yaml
  timeout: 12
  report_blacklist: "no"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("XMDS_URL", "XMDS_SERVER_KEY", "HARDWARE_KEY"):
        monkeypatch.delenv(name, raising=False)


def _write_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG.format(library=tmp_path / "library"), encoding="utf-8")
    return path


def test_loader_dot_notation_and_types(tmp_path):
    loader = ConfigLoader(str(_write_config(tmp_path)))

    assert loader.get("xmds.url") == "http://cms.example/xmds.php?v=5"
    assert loader.get_float("xmds.timeout") == 12.0
    assert loader.get_bool("xmds.report_blacklist", True) is False
    assert loader.get("xmds.missing", "fallback") == "fallback"
    assert loader.get_str("client_version") == "3"


def test_loader_missing_file_uses_defaults(tmp_path):
    loader = ConfigLoader(str(tmp_path / "absent.yaml"))

    assert loader.get("library_path", "library") == "library"


def test_loader_invalid_yaml_falls_back(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("library_path: [unterminated", encoding="utf-8")

    assert ConfigLoader(str(path)).get("library_path", "x") == "x"


def test_loader_reload_picks_up_changes(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("client_version: '1'\n", encoding="utf-8")
    loader = ConfigLoader(str(path))

    path.write_text("client_version: '2'\n", encoding="utf-8")
    loader.reload()

    assert loader.get_str("client_version") == "2"


def test_load_settings_from_yaml(tmp_path):
    settings = load_settings(ConfigLoader(str(_write_config(tmp_path))), env_file=str(tmp_path / "none.env"))

    assert settings.blacklist_path == tmp_path / "library" / "bl.txt"
    assert settings.server_key == "from-yaml"
    assert settings.report_timeout == 12.0
    assert settings.report_enabled is False
    assert settings.client_version == "3"
    assert settings.log_level == "debug"


def test_environment_overrides_yaml(tmp_path, monkeypatch):
    monkeypatch.setenv("XMDS_SERVER_KEY", "from-env")
    monkeypatch.setenv("HARDWARE_KEY", "HW-ENV")

    settings = load_settings(ConfigLoader(str(_write_config(tmp_path))), env_file=str(tmp_path / "none.env"))

    assert settings.server_key == "from-env"
    assert settings.hardware_key == "HW-ENV"


def test_env_file_is_loaded(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("XMDS_URL=http://other.example/xmds.php\n", encoding="utf-8")

    settings = load_settings(ConfigLoader(str(_write_config(tmp_path))), env_file=str(env_file))
    # load_dotenv writes into os.environ; drop it again for later tests
    os.environ.pop("XMDS_URL", None)

    assert settings.xmds_url == "http://other.example/xmds.php"


def test_defaults_without_config(tmp_path):
    settings = load_settings(ConfigLoader(str(tmp_path / "absent.yaml")), env_file=str(tmp_path / "none.env"))

    assert settings.blacklist_filename == DEFAULT_BLACKLIST_FILENAME
    assert settings.library_path == Path("library")
    assert settings.report_enabled is True
