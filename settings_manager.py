# settings_manager.py
import json
import os
import logging

import config


SETTINGS_FILENAME = "settings.json"

VALID_STRICTNESS = ["broad", "precise"]


def get_default_settings() -> dict:
    return {
        "max_results": config.DEFAULT_MAX_RESULTS,
        "strictness": "broad",  # Possible values: 'broad', 'precise'
        "max_file_size_mb": config.DEFAULT_MAX_FILE_SIZE_MB,
        "fuzzy_fallback_enabled": True,
        "registry_scan_enabled": True,
        "profile_cache_enabled": True,
    }


def get_settings_path() -> str:
    return os.path.join(config.get_app_data_folder(), SETTINGS_FILENAME)


def load_settings(settings_file_path: str | None = None):
    """Load settings merged over the defaults.

    Returns (settings, first_launch). A missing or corrupt file yields the
    defaults and first_launch=True.
    """
    settings_file_path = settings_file_path or get_settings_path()
    defaults = get_default_settings()

    if not os.path.exists(settings_file_path):
        logging.info(f"Settings file '{settings_file_path}' not found, using defaults.")
        return defaults.copy(), True

    try:
        with open(settings_file_path, 'r', encoding='utf-8') as f:
            user_settings = json.load(f)
        if not isinstance(user_settings, dict):
            raise TypeError("settings root is not a JSON object")
        logging.info(f"Settings loaded successfully from '{settings_file_path}'.")
    except (json.JSONDecodeError, TypeError):
        logging.error(f"Failed to read or validate '{settings_file_path}'...", exc_info=True)
        return defaults.copy(), True
    except OSError:
        logging.error(f"Unexpected error reading settings from '{settings_file_path}'.", exc_info=True)
        return defaults.copy(), True

    # User settings override defaults
    settings = defaults.copy()
    settings.update(user_settings)

    # --- VALIDATION STRICTNESS ---
    if settings.get("strictness") not in VALID_STRICTNESS:
        logging.warning(f"Invalid strictness value ('{settings.get('strictness')}'), using default '{defaults['strictness']}'.")
        settings["strictness"] = defaults["strictness"]

    # --- VALIDATION LIMITS (positive integers, bools are not accepted) ---
    for key in ("max_results", "max_file_size_mb"):
        value = settings.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            logging.warning(f"Invalid {key} value ('{value}'), using default {defaults[key]}.")
            settings[key] = defaults[key]

    # --- VALIDATION FLAGS ---
    for key in ("fuzzy_fallback_enabled", "registry_scan_enabled", "profile_cache_enabled"):
        if not isinstance(settings.get(key), bool):
            logging.warning(f"Invalid value for {key} ('{settings.get(key)}'), using default {defaults[key]}.")
            settings[key] = defaults[key]

    return settings, False


def save_settings(settings_dict: dict, settings_file_path: str | None = None) -> bool:
    """Write the whole settings file. Returns bool (success)."""
    settings_file_path = settings_file_path or get_settings_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(settings_file_path)), exist_ok=True)
        with open(settings_file_path, 'w', encoding='utf-8') as f:
            json.dump(settings_dict, f, indent=4)
        logging.info(f"Settings saved to '{settings_file_path}'.")
        return True
    except (OSError, TypeError) as e:
        logging.error(f"Error saving settings to '{settings_file_path}': {e}")
        return False
