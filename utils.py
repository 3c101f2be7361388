# utils.py
import os
import re


def format_file_size(size_bytes):
    """Human readable size: 512 -> "512 B", 2048 -> "2.0 KB"."""
    if size_bytes is None or size_bytes < 0:
        return "?"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{int(size)} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def shorten_path(path, install_dir=None, home_dir=None):
    """
    Shortens a path for display by replacing well-known prefixes.

    Examples:
        "C:\\Program Files\\App\\config\\app.ini" with install_dir "C:\\Program Files\\App"
        -> "install folder\\config\\app.ini"

        "C:\\Users\\Name\\AppData\\Roaming\\Code\\User\\settings.json"
        -> "AppData\\Roaming\\Code\\User\\settings.json"

        "/home/username/.config/Code/User/settings.json"
        -> "~/.config/Code/User/settings.json"

    Registry keys and empty values are returned unchanged.
    """
    if not path or not isinstance(path, str) or path.upper().startswith("HKCU\\"):
        return path

    norm_path = os.path.normpath(path)

    if install_dir:
        norm_install_dir = os.path.normpath(install_dir)
        if norm_path.lower().startswith(norm_install_dir.lower() + os.sep):
            remaining = norm_path[len(norm_install_dir):].lstrip(os.sep)
            return f"install folder{os.sep}{remaining}"

    # Windows user folders
    users_pattern = re.compile(r'^[A-Za-z]:\\Users\\[^\\]+\\', re.IGNORECASE)
    match = users_pattern.match(norm_path)
    if match:
        return norm_path[len(match.group(0)):]

    home_dir = home_dir or os.path.expanduser('~')
    if home_dir and norm_path.startswith(home_dir.rstrip(os.sep) + os.sep):
        return '~' + norm_path[len(home_dir.rstrip(os.sep)):]

    return norm_path
