# rawed/utils/utils.py
"""
rawed.utils.utils.py
====================

This module provides the configuration utilities for the RAWED display tool.

Key functionalities include:
- Automatic User Configuration: Manages the creation of user-specific
  configuration files (`config.toml`, `.env`) in `~/.config/rawed`, ensuring a
  seamless first-run experience.
- Robust Configuration Loading: Loads a hardcoded, built-in default
  configuration, then recursively merges it with user-defined settings from
  `~/.config/rawed/config.toml`.
- Helper Utilities: deep-merging dictionaries and reading typed settings.

The application is always runnable, even if user configuration files are
missing or corrupted, by falling back to the embedded defaults.
"""

import copy
import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import toml

logger = logging.getLogger("rawed")

# --- Constants ---
RAWED_VERSION = "0.0.1"
CONFIG_DIR = Path.home() / ".config" / "rawed"

ENV_TEMPLATE = """# Environment overrides for rawed.
# Set RAWED_KEYTRACE=1 to record every decoded key in keytrace.log.
RAWED_KEYTRACE=
"""

# This dictionary is a direct, hardcoded representation of `config.toml`.
# It serves as the ultimate fallback, ensuring the application can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "banner": f"Rawed editor -- version {RAWED_VERSION}",
        "row_marker": "~",
        "read_timeout_ms": 100,
    },
    "keybindings": {
        "quit": "ctrl+q",
        "handle_up": ["up"], "handle_down": ["down"],
        "handle_left": ["left"], "handle_right": ["right"],
        "handle_home": ["home"], "handle_end": ["end"],
        "handle_page_up": ["pageup"], "handle_page_down": ["pagedown"],
    },
    "logging": {
        "file": str(CONFIG_DIR / "rawed.log"),
        "file_level": "DEBUG",
        "console_level": "WARNING",
        # stderr shares the screen with the editor while raw mode is active
        "log_to_console": False,
        "separate_error_log": False,
    },
}


# --- Helper Functions ---

def get_project_root() -> Path:
    """Determines the project's root directory for finding template files."""
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        return Path(sys._MEIPASS)
    else:
        return Path(__file__).resolve().parents[3]


def ensure_user_config_exists(config_dir: Optional[Path] = None) -> None:
    """Checks for user config files in `~/.config/rawed` and creates them if missing."""
    config_dir = config_dir or CONFIG_DIR
    try:
        user_config_path = config_dir / "config.toml"
        user_env_path = config_dir / ".env"

        config_dir.mkdir(parents=True, exist_ok=True)

        if not user_config_path.exists():
            source_config_path = get_project_root() / "config.toml"
            if source_config_path.exists():
                shutil.copy(source_config_path, user_config_path)
                logger.info(f"Created user config template at: {user_config_path}")

        if not user_env_path.exists():
            user_env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
            logger.info(f"Created user .env template at: {user_env_path}")

    except Exception as e:
        logger.critical(f"Could not create user configuration files: {e}", exc_info=True)


def load_config(config_dir: Optional[Path] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.
    """
    config_dir = config_dir or CONFIG_DIR
    final_config = copy.deepcopy(DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    ensure_user_config_exists(config_dir)

    user_config_path = config_dir / "config.toml"
    if user_config_path.is_file():
        try:
            user_config = toml.load(user_config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {user_config_path}")
        except Exception as e:
            logger.error(f"Could not parse user config '{user_config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def read_timeout_deciseconds(config: Dict[str, Any]) -> int:
    """
    Converts `editor.read_timeout_ms` into the termios VTIME unit.

    VTIME counts tenths of a second in a single byte, so the result is
    clamped to 1..255. Invalid values fall back to the 100 ms default.
    """
    raw = config.get("editor", {}).get("read_timeout_ms", 100)
    try:
        millis = int(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid editor.read_timeout_ms {raw!r}; using 100 ms.")
        millis = 100
    return max(1, min(255, round(millis / 100)))
