"""Configuration management for sample-dna.

This module centralises all logic related to finding and loading
configuration files.  It supports both AppData and portable
installation modes, resolves the appropriate configuration directory,
and reads/writes JSON configuration files with JSON schema validation.
Alongside ``config.json`` an optional ``tuning.json`` may override any
constant from :mod:`sample_dna.tuning`.

Portable mode is controlled via a ``portable.flag`` file located in the
application directory or by passing ``--portable`` to the CLI.  The
flag file takes precedence over the command line.

Example usage::

    from sample_dna.config_service import ConfigService

    config_service = ConfigService(app_dir=Path.cwd())
    cfg = config_service.load_config()
    cfg["tree_batch_size"] = 16
    config_service.save_config(cfg)

"""

from __future__ import annotations

import json
import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

APP_NAME = "SampleDNA"
SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


def _get_appdata_root(app_name: str = APP_NAME) -> Path:
    """Return the platform-specific base directory for config files."""
    system = platform.system().lower()
    if system == "windows":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / app_name
        return Path.home() / f"AppData/Roaming/{app_name}"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / app_name
    return Path.home() / ".config" / app_name


def _load_json(path: Path) -> Any:
    if not path.exists():
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _save_json(data: Any, file_path: Path) -> None:
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with file_path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(data, f, indent=2)


def _validate_json(data: Any, schema_path: Path) -> None:
    """Validate JSON against a schema file; raises ``ValueError`` on mismatch."""
    schema = _load_json(schema_path)
    if not schema:
        return
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc.message}") from exc


@dataclass
class ConfigService:
    """Resolve and manage sample-dna configuration."""

    app_dir: Path
    portable_flag_filename: str = "portable.flag"
    config_filename: str = "config.json"
    schema_dir: Path = SCHEMA_DIR
    config_schema_name: str = "config.schema.json"
    _cached_mode: Optional[bool] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.app_dir = Path(self.app_dir)
        self.schema_dir = Path(self.schema_dir)

    def _portable_flag_exists(self) -> bool:
        return (self.app_dir / self.portable_flag_filename).exists()

    def detect_mode(self, cli_portable: bool = False) -> bool:
        """Return ``True`` if portable mode should be used.

        Portable mode is selected if any of the following conditions hold
        (checked in order):

        1. A ``portable.flag`` file exists in the application directory.
        2. ``cli_portable`` is truthy.

        The result is cached for subsequent calls.
        """
        if self._cached_mode is None:
            if self._portable_flag_exists():
                self._cached_mode = True
            else:
                self._cached_mode = bool(cli_portable)
        return self._cached_mode

    def get_config_dir(self, cli_portable: bool = False) -> Path:
        """Return the resolved configuration directory."""
        if self.detect_mode(cli_portable=cli_portable):
            return self.app_dir
        return _get_appdata_root()

    def get_config_path(self, cli_portable: bool = False) -> Path:
        return self.get_config_dir(cli_portable) / self.config_filename

    def get_schema_path(self, schema_name: Optional[str] = None) -> Path:
        return self.schema_dir / (schema_name or self.config_schema_name)

    def load_config(self, cli_portable: bool = False) -> Dict[str, Any]:
        """Load configuration from the resolved path, validating against schema.

        An invalid file prints a warning and yields the defaults.  The
        returned dict always carries ``config_dir`` so the scanner can find
        ``tuning.json`` next to it.
        """
        cfg: Dict[str, Any] = {}
        try:
            data = _load_json(self.get_config_path(cli_portable))
        except ValueError as exc:
            print(f"Warning: unreadable configuration ({exc}). Falling back to defaults.")
            data = None
        if isinstance(data, dict):
            cfg = data
        schema_path = self.get_schema_path()
        if schema_path.exists():
            try:
                _validate_json(cfg, schema_path)
            except ValueError as exc:
                print(f"Warning: {exc}. Falling back to defaults.")
                cfg = {}
        cfg.setdefault("config_dir", str(self.get_config_dir(cli_portable)))
        return cfg

    def save_config(self, config: Dict[str, Any], cli_portable: bool = False) -> None:
        """Write configuration to disk, validating against the schema first."""
        schema_path = self.get_schema_path()
        if schema_path.exists():
            _validate_json(config, schema_path)
        _save_json(config, self.get_config_path(cli_portable))

    def is_portable_mode(self) -> bool:
        """Portable mode is enabled when portable.flag exists in app_dir."""
        return self._portable_flag_exists()
