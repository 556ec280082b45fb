from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .config_loader import ConfigLoader

DEFAULT_BLACKLIST_FILENAME = "blacklist.xml"
DEFAULT_LIBRARY_PATH = "library"
DEFAULT_REPORT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ClientSettings:
    library_path: Path
    blacklist_filename: str = DEFAULT_BLACKLIST_FILENAME
    xmds_url: str = ""
    server_key: str = ""
    hardware_key: str = ""
    client_version: str = "1"
    report_timeout: float = DEFAULT_REPORT_TIMEOUT
    report_enabled: bool = True
    log_level: str = "INFO"

    @property
    def blacklist_path(self) -> Path:
        return self.library_path / self.blacklist_filename


def _env(name: str, fallback: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or fallback


def load_settings(loader: Optional[ConfigLoader] = None, env_file: Optional[str] = None) -> ClientSettings:
    """
    Build the client settings from config.yaml plus environment secrets.
    Priority for secrets:
      1. Environment variables (a .env file is loaded first if present)
      2. The matching key in config.yaml
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    loader = loader or ConfigLoader()

    return ClientSettings(
        library_path=Path(loader.get_str("library_path", DEFAULT_LIBRARY_PATH)).expanduser(),
        blacklist_filename=loader.get_str("blacklist_filename", DEFAULT_BLACKLIST_FILENAME),
        xmds_url=_env("XMDS_URL", loader.get_str("xmds.url")),
        server_key=_env("XMDS_SERVER_KEY", loader.get_str("xmds.server_key")),
        hardware_key=_env("HARDWARE_KEY", loader.get_str("hardware_key")),
        client_version=loader.get_str("client_version", "1"),
        report_timeout=loader.get_float("xmds.timeout", DEFAULT_REPORT_TIMEOUT),
        report_enabled=loader.get_bool("xmds.report_blacklist", True),
        log_level=loader.get_str("log_level", "INFO"),
    )
