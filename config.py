# config.py
import os
import logging
import platform
from types import MappingProxyType


# --- Application name (used for the per-user data folder) ---
APP_NAME = "ConfigScout"

PROFILE_CACHE_FILENAME = "settings_profiles.json"


def get_app_data_folder():
    """Return the per-user data folder of the app (%LOCALAPPDATA% on Windows)
       and create it if missing. Falls back to the current directory."""
    system = platform.system()
    base_path = None
    app_folder = None

    try:
        if system == "Windows":
            base_path = os.getenv('LOCALAPPDATA')
        elif system == "Darwin":  # macOS
            base_path = os.path.expanduser('~/Library/Application Support')
        elif system == "Linux":
            # XDG Base Directory Specification
            base_path = os.getenv('XDG_DATA_HOME', os.path.expanduser('~/.local/share'))

        if not base_path:
            logging.error("Unable to determine the standard user data folder. Using the current directory as fallback.")
            app_folder = os.path.abspath(APP_NAME)
        else:
            app_folder = os.path.join(base_path, APP_NAME)

        if not os.path.exists(app_folder):
            try:
                os.makedirs(app_folder, exist_ok=True)
                logging.info(f"Created application data folder: {app_folder}")
            except OSError as e:
                # Callers handle read/write failures on the returned path.
                logging.error(f"Unable to create data folder {app_folder}: {e}.")

    except Exception as e:
        logging.error(f"Unexpected error in get_app_data_folder: {e}. Falling back to CWD.", exc_info=True)
        app_folder = os.path.abspath(APP_NAME)
        try:
            os.makedirs(app_folder, exist_ok=True)
        except OSError:
            pass

    return app_folder


# --- Discovery defaults ---
DEFAULT_MAX_RESULTS = 15
DEFAULT_MAX_FILE_SIZE_MB = 50
WILDCARD_EXPANSION_LIMIT = 5
PROGRESS_INTERVAL = 50          # Emit "processed N/M" every N probed paths
FUZZY_CHUNK_SIZE = 30
FUZZY_CHUNK_PAUSE_SECONDS = 0.005
REGISTRY_VARIANT_LIMIT = 3
REGISTRY_SUBKEY_LIMIT = 5
REGISTRY_BYTES_PER_VALUE = 100


# --- Name variation tables ---

# Boilerplate words removed one at a time to produce cleaned name variants.
NAME_STOP_WORDS = (
    "Microsoft", "Google", "LLC", "Inc", "Corporation", "Corp", "Ltd",
    "Software", "App", "Application", "Studio", "Studios", "Games", "Team",
    "Entertainment", "Interactive", "Digital", "Technologies", "Systems",
    # Launcher and publisher brands
    "Battle.net", "Steam", "Epic", "Origin", "Ubisoft", "EA", "Activision",
    "Blizzard", "Valve", "Bethesda", "2K", "Rockstar",
)

# Legal-form suffixes dropped from publisher names
PUBLISHER_LEGAL_SUFFIXES = (
    "Inc", "LLC", "Ltd", "Limited", "Corporation", "Corp", "Co", "GmbH", "AG",
    "S.A.", "SA", "Srl", "Pty", "KK",
)

# Decorative characters stripped from display names
DECORATIVE_SYMBOLS = "®™©→←↑↓•◆■□▲▼★☆♠♣♥♦"

# Well-known multi-word titles and their customary short form.
COMMON_ABBREVIATIONS = MappingProxyType({
    "final fantasy": "FF",
    "grand theft auto": "GTA",
    "call of duty": "COD",
    "world of warcraft": "WOW",
    "league of legends": "LoL",
    "age of empires": "AOE",
    "counter strike": "CS",
    "counter-strike": "CS",
    "red dead redemption": "RDR",
    "elder scrolls": "ES",
    "the elder scrolls": "TES",
    "mass effect": "ME",
    "assassin's creed": "AC",
    "battlefield": "BF",
    "need for speed": "NFS",
    "dragon age": "DA",
    "star wars": "SW",
    "metal gear solid": "MGS",
    "resident evil": "RE",
    "persona": "P",
    "visual studio code": "VSCode",
    "visual studio": "VS",
})


# --- Fuzzy matching ---

# Words that never count as "significant" when comparing names.
SIGNIFICANT_WORD_STOP_WORDS = frozenset({
    "game", "games", "software", "app", "application", "program", "tool",
    "tools", "studio", "studios", "edition", "version", "the", "and", "or",
    "for", "with", "inc", "llc", "corp", "corporation", "ltd", "limited",
    "co", "company", "of",
})
MIN_SIGNIFICANT_WORD_LENGTH = 4
FUZZY_SIMILARITY_THRESHOLD = 0.75
FUZZY_VARIANTS_TO_COMPARE = 3
# The directory name must be shorter than len(name) / this to be an abbreviation
ABBREVIATION_LENGTH_DIVISOR = 3


# --- Path generation tables ---

# Leaf folders appended to <root>/<name>
STANDARD_LEAF_SUBFOLDERS = (
    "config", "Config", "settings", "Settings", "user", "User",
    "preferences", "data", "Data", "saves", "Save", "SaveGames", "Saved",
)

CONFIG_FILE_EXTENSIONS = (
    ".json", ".xml", ".ini", ".cfg", ".config", ".conf", ".yaml", ".yml",
    ".toml", ".properties", ".plist", ".prefs",
)

# Extensions appended directly to a name variant (<root>/<name><ext>)
NAME_FILE_EXTENSIONS = (".conf", ".config", ".ini", ".json", ".xml", ".cfg", ".yaml", ".yml")

INSTALL_ADJACENT_FOLDERS = ("config", "settings", "data", "user", "Config", "Settings", "Data", "User")

DOCUMENTS_SUBFOLDERS = ("My Games",)

ROAMING_PUBLISHER_LIMIT = 3
DOCUMENTS_PUBLISHER_LIMIT = 2

# Brand -> known aliases used as folder names on disk.
KNOWN_PUBLISHERS = MappingProxyType({
    "SEGA": ("SEGA", "Sega", "SEGA Corporation"),
    "Ubisoft": ("Ubisoft", "Ubisoft Entertainment", "UBISOFT"),
    "Epic Games": ("Epic Games", "EpicGames", "Epic"),
    "Electronic Arts": ("Electronic Arts", "EA", "EA Games", "Origin"),
    "Activision": ("Activision", "Activision Blizzard", "Blizzard"),
    "Bethesda": ("Bethesda", "Bethesda Softworks", "Bethesda Game Studios"),
    "2K": ("2K", "2K Games", "Take-Two Interactive"),
    "Rockstar": ("Rockstar", "Rockstar Games"),
    "Square Enix": ("Square Enix", "SquareEnix", "SQUARE ENIX"),
    "Capcom": ("Capcom", "CAPCOM"),
    "Konami": ("Konami", "KONAMI"),
    "Bandai Namco": ("Bandai Namco", "BANDAI NAMCO", "BandaiNamco", "Namco Bandai"),
    "CD Projekt": ("CD Projekt", "CD Projekt Red", "CDProjektRed"),
    "Paradox": ("Paradox Interactive", "Paradox"),
})

# Distribution platforms: root template -> per-user save-data layout.
# {name} is replaced by each name variant; '*' is a user/account id level.
LAUNCHER_TEMPLATES = (
    ("epic", "%LOCALAPPDATA%/EpicGamesLauncher/Saved/SaveGames/{name}"),
    ("epic", "%LOCALAPPDATA%/{name}/Saved/SaveGames"),
    ("ubisoft", "%PROGRAMFILES(X86)%/Ubisoft/Ubisoft Game Launcher/savegames/*"),
    ("ea", "%USERPROFILE%/Documents/Electronic Arts/{name}"),
    ("ea", "%APPDATA%/Origin/{name}"),
    ("gog", "%LOCALAPPDATA%/GOG.com/Galaxy/Applications/*/Storage"),
    ("gog", "%USERPROFILE%/Saved Games/GOG.com/{name}"),
    ("battlenet", "%APPDATA%/Battle.net/{name}"),
)

# Category heuristics: keywords in name/category -> extra templates.
CATEGORY_KEYWORDS = MappingProxyType({
    "game": ("game", "games", "gaming", "rpg", "shooter", "simulator", "adventure"),
    "browser": ("browser", "chrome", "firefox", "edge", "opera", "brave", "vivaldi"),
    "ide": ("ide", "editor", "visual studio", "code", "jetbrains", "intellij", "pycharm", "developer", "development"),
    "communication": ("chat", "discord", "slack", "teams", "zoom", "skype", "telegram", "communication"),
    "creative": ("adobe", "photoshop", "illustrator", "premiere", "creative", "obs", "vlc", "media", "audio", "video"),
})

CATEGORY_TEMPLATES = MappingProxyType({
    "game": (
        "%USERPROFILE%/Saved Games/{name}",
        "%USERPROFILE%/Documents/My Games/{name}",
        "%LOCALAPPDATA%/{name}/Saved/SaveGames",
        "%USERPROFILE%/AppData/LocalLow/{name}",
    ),
    "browser": (
        "%LOCALAPPDATA%/{name}/User Data/Default",
        "%APPDATA%/{name}/Profiles",
        "%APPDATA%/Mozilla/{name}/Profiles",
    ),
    "ide": (
        "%APPDATA%/{name}/User",
        "%APPDATA%/{name}/User/snippets",
        "%USERPROFILE%/.{name}",
        "%APPDATA%/JetBrains/{name}",
    ),
    "communication": (
        "%APPDATA%/{name}",
        "%APPDATA%/{name}/settings",
        "%LOCALAPPDATA%/{name}/settings",
    ),
    "creative": (
        "%APPDATA%/Adobe/{name}",
        "%APPDATA%/{name}/basic",
        "%APPDATA%/{name}/plugin_config",
    ),
})

# Extensions tried for user-profile dotfiles (%USERPROFILE%/.{name}{ext})
DOTFILE_EXTENSIONS = ("rc", ".conf", ".json", ".yml", ".toml")


# --- Filesystem scanning ---

SCAN_DEFAULT_DEPTH = 2
SCAN_SAVE_CONTEXT_DEPTH = 4
SCAN_RESULT_CAP = 50
SCAN_FILES_PER_DIRECTORY = 20
SCAN_SUBDIRS_PER_DIRECTORY = 10
MIN_FILE_SIZE_BYTES = 5

# Save / user data extensions accepted by the file admission test.
SAVE_DATA_EXTENSIONS = frozenset({
    '.sav', '.save', '.dat', '.slot', '.sl2', '.ess', '.fos', '.lsf', '.lsb',
    '.profile', '.bin', '.vdf', '.db', '.sqlite', '.sqlite3', '.ldb', '.reg',
})

# Known settings file keywords (substring of the lower-cased filename)
SETTINGS_KEYWORDS = (
    "config", "settings", "setting", "preferences", "prefs", "options",
    "profile", "user", "keybindings", "keybinds", "controls", "save",
    "state", "layout", "workspace",
)

# Canonical settings filenames worth the highest bonus.
HIGH_VALUE_FILENAMES = frozenset({
    "settings.json", "config.json", "preferences.json", "user.config",
    "preferences", "prefs.js", "settings.ini", "config.ini", "options.ini",
    "keybindings.json", "user.cfg", "config.cfg", "settings.xml",
    "config.xml", "local state", ".gitconfig",
})

# Folder names worth descending into.
IMPORTANT_FOLDER_KEYWORDS = (
    "config", "settings", "user", "users", "profile", "profiles", "data",
    "save", "saves", "savegames", "saved", "savedata", "remote",
    "preferences", "prefs", "default", "storage", "local",
)
SAVE_CONTEXT_KEYWORDS = ("save", "saved", "savegame", "savedata", "remote")

AVOID_FOLDER_KEYWORDS = (
    "cache", "temp", "tmp", "log", "logs", "crash", "crashes", "dump",
    "backup", "backups", "update", "updates", "installer", "download",
    "downloads", "shadercache", "gpucache",
)

# Precise mode: the only subfolders descended into (each adds a score bonus)
PRECISE_SUBFOLDER_WHITELIST = frozenset({"user", "settings", "config", "preferences", "profiles"})

PRECISE_EXCLUDED_FILENAMES = frozenset({"debug.log", "error.log", "crash.log", "temp.dat", "cache.dat"})
PRECISE_EXCLUDED_EXTENSIONS = frozenset({".tmp", ".temp", ".log", ".bak", ".old"})
PRECISE_EXCLUDED_PATH_FRAGMENTS = (
    "cache", "logs", "temp", "crashdumps", "gpucache", "shadercache",
    "code cache", "crashpad",
)

DATABASE_EXTENSIONS = frozenset({".db", ".sqlite", ".sqlite3", ".ldb"})
CACHE_EXTENSIONS = frozenset({".cache", ".tmp", ".temp"})


# --- Scoring ---

SCORE_HIGH_VALUE_FILENAME = 100
SCORE_CONFIG_EXTENSION = 50
SCORE_SETTINGS_KEYWORD = 30
SCORE_NAME_IN_FILENAME = 20
SCORE_NOISE_EXTENSION = -100
SCORE_EXCLUSION_KEYWORD = -50
SCORE_REASONABLE_SIZE = 10
SCORE_OVERSIZED = -30
SCORE_WHITELISTED_SUBFOLDER = 10
SCORE_REGISTRY_KEY_BASE = 60
SCORE_REGISTRY_PER_VALUE = 2
SCORE_REGISTRY_VALUE_BONUS_CAP = 20

REASONABLE_SIZE_MAX_BYTES = 10 * 1024 * 1024
OVERSIZED_BYTES = 100 * 1024 * 1024

# Never settings: executables, installers, archives, dumps, media.
NOISE_EXTENSIONS = frozenset({
    '.exe', '.dll', '.msi', '.msp', '.sys', '.so', '.dylib', '.zip', '.7z',
    '.rar', '.tar', '.gz', '.iso', '.cab', '.dmp', '.mdmp', '.pdb', '.mp4',
    '.mkv', '.avi', '.mp3', '.wav', '.pak', '.bik',
})
EXCLUSION_KEYWORDS = ("cache", "log", "temp", "tmp", "backup", "crash", "dump")

# Admission thresholds by strictness
MIN_SCORE_BROAD = 50
MIN_SCORE_PRECISE = 60


# --- Profile matching ---

PROFILE_MATCH_THRESHOLD = 50
PROFILE_SCORE_EXACT_NAME = 100
PROFILE_SCORE_ALTERNATE_NAME = 90
PROFILE_SCORE_QUERY_CONTAINS_NAME = 70
PROFILE_SCORE_NAME_CONTAINS_QUERY = 60
PROFILE_SCORE_PUBLISHER = 30
PROFILE_SCORE_KEYWORD = 15
PROFILE_KEYWORD_BONUS_CAP = 45
PROFILE_GENERIC_NAME_PENALTY = -20
GENERIC_SOFTWARE_WORDS = frozenset({"application", "program", "software", "tool", "utility", "launcher"})
INSTALLER_NAME_SUFFIXES = ("Setup", "Installer", "Application", "App")

DEFAULT_EXCLUDE_PATTERNS = (
    "logs/", "cache/", "Cache/", "GPUCache/", "Crashpad/", "*.log", "*.tmp",
    "*.bak", "*.old", "*.dmp",
)
