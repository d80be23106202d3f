"""Load the persisted display configuration, creating it with defaults on first run."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from rich.console import Console

from .errors import ConfigIOError, ConfigParseError

logger = logging.getLogger(__name__)

APP_NAME = "metalfetch"
CONFIG_FILE_NAME = "metalfetch.conf"

DEFAULT_INFO_ORDER = (
    "OS",
    "Architecture",
    "Kernel",
    "Shell",
    "Desktop",
    "Packages",
    "Uptime",
    "WM",
    "Theme",
    "Icons",
    "Terminal",
)


class ColorScheme(BaseModel):
    """Palette names per role. Unrecognized names are resolved at render time."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    label: str = "blue"
    value: str = "white"
    logo: str = "cyan"


class Configuration(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    font: str = "default"
    font_size: int = Field(default=12, ge=0, le=255)
    spacing: int = Field(default=10, ge=0, le=255)
    info_order: Tuple[str, ...] = DEFAULT_INFO_ORDER
    colors: ColorScheme = Field(default_factory=ColorScheme)
    show_logo: bool = True


def default_config_dir(env: Optional[Mapping[str, str]] = None, platform: str = sys.platform) -> Path:
    """Return the per-user configuration directory for this platform."""
    env = os.environ if env is None else env
    if platform.startswith("win"):
        appdata = env.get("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    if platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = env.get("XDG_CONFIG_HOME")
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)
    return Path.home() / ".config"


class ConfigStore:
    """Reads ``<config dir>/metalfetch/metalfetch.conf``; ``config_dir`` overrides the platform default."""

    def __init__(self, config_dir: Optional[Path] = None, console: Optional[Console] = None) -> None:
        base = config_dir if config_dir is not None else default_config_dir()
        self.directory = Path(base) / APP_NAME
        self.path = self.directory / CONFIG_FILE_NAME
        self._console = console

    def load(self) -> Configuration:
        """Return the stored configuration, writing the defaults if none exists yet."""
        try:
            exists = self.path.exists()
        except OSError as exc:
            raise ConfigIOError(f"Could not access {self.path}: {exc}") from exc
        if exists:
            return self._read()
        return self._create_default()

    def _read(self) -> Configuration:
        logger.debug("Reading configuration from %s", self.path)
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigIOError(f"Could not read {self.path}: {exc}") from exc
        try:
            return Configuration.model_validate_json(content)
        except ValidationError as exc:
            raise ConfigParseError(f"Invalid configuration in {self.path}: {exc}") from exc

    def _create_default(self) -> Configuration:
        config = Configuration()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise ConfigIOError(f"Could not write default configuration to {self.path}: {exc}") from exc
        logger.info("Created default config at %s", self.path)
        console = self._console or Console(highlight=False)
        console.print(f"Created default config at: {self.path}", markup=False, soft_wrap=True)
        return config
