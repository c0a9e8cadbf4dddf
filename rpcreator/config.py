"""rpcreator configuration.

Two typed layers, both Pydantic v2 models:

- :class:`AppConfig`: user interface preferences persisted between runs in
  ``rpc.ini``, written with the same key/value format as project files.
- :class:`Config`: tool settings (template root, output directory, caps),
  built from defaults or environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from rpcreator.errors import RpcError
from rpcreator.store.keyvalue import MAX_ENTRIES, KeyValueStore

logger = logging.getLogger(__name__)

APP_CONFIG_FILE = "rpc.ini"

_APP_CONFIG_HEADER = (
    None,
    "raylib project creator initialization configuration options",
    None,
    "NOTE: This file is loaded at application startup,",
    "if file is not found, default values are applied",
    None,
)

# rpc.ini key -> (AppConfig attribute, description)
_APP_CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "SHOW_WINDOW_WELCOME": ("show_welcome", "Show welcome window at initialization"),
    "INIT_WINDOW_MAXIMIZED": ("window_maximized", "Initialize window maximized"),
    "GUI_VISUAL_STYLE": ("visual_style", "UI visual style selected"),
}


class AppConfig(BaseModel):
    """Interface preferences stored in ``rpc.ini``."""

    show_welcome: bool = Field(default=True, description="Show welcome window at startup")
    window_maximized: bool = Field(default=False, description="Start with a maximized window")
    visual_style: int = Field(default=0, ge=0, le=4, description="UI visual style index")

    @classmethod
    def load(cls, path: str | Path) -> "AppConfig":
        """Load preferences from *path*.

        A missing or unreadable file, or out-of-range values, fall back to
        the defaults; this never raises.
        """
        try:
            store = KeyValueStore.load(path)
        except (RpcError, OSError) as exc:
            logger.info("App config not loaded (%s), using defaults", exc)
            return cls()

        values: dict[str, Any] = {}
        for key, (attr, _) in _APP_CONFIG_KEYS.items():
            if key in store:
                values[attr] = store.get_value(key)
        try:
            return cls(**values)
        except ValidationError as exc:
            logger.warning("Invalid values in %s, using defaults: %s", path, exc)
            return cls()

    def save(self, path: str | Path) -> Path:
        """Write preferences to *path*, creating parent directories.

        Returns:
            The path written.
        """
        store = KeyValueStore.empty()
        for line in _APP_CONFIG_HEADER:
            store.set_comment_line(line)
        for key, (attr, description) in _APP_CONFIG_KEYS.items():
            store.set_value(key, int(getattr(self, attr)), description)
        target = store.save(path)
        logger.debug("Saved app config to %s", target)
        return target


class Config(BaseModel):
    """Global rpcreator settings.

    Created once by the CLI (or a UI runtime) and handed to the
    :class:`~rpcreator.session.Session`.
    """

    template_dir: Path | None = Field(
        default=None, description="Template root; the bundled template when unset"
    )
    output_dir: Path = Field(default=Path("."), description="Parent directory for generated projects")
    app_config_path: Path = Field(default=Path(APP_CONFIG_FILE), description="Location of rpc.ini")
    max_source_files: int = Field(
        default=64, ge=1, description="Maximum number of custom source files per project"
    )
    max_entries: int = Field(
        default=MAX_ENTRIES, ge=1, le=MAX_ENTRIES, description="Entry cap when loading .rpc files"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            RPC_TEMPLATE_DIR, RPC_OUTPUT_DIR, RPC_APP_CONFIG,
            RPC_MAX_SOURCE_FILES.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("RPC_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["RPC_TEMPLATE_DIR"])
        if os.environ.get("RPC_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["RPC_OUTPUT_DIR"])
        if os.environ.get("RPC_APP_CONFIG"):
            kwargs["app_config_path"] = Path(os.environ["RPC_APP_CONFIG"])
        if os.environ.get("RPC_MAX_SOURCE_FILES"):
            kwargs["max_source_files"] = int(os.environ["RPC_MAX_SOURCE_FILES"])
        return cls(**kwargs)
