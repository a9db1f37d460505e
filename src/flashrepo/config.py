# src/flashrepo/config.py
import json
import sys
from pathlib import Path

DEFAULT_EXCLUDED_DIRS = [
    ".git",
    "node_modules",
    "dist",
    "build",
    "hydrated",
    "claude-hydrated",
]

DEFAULT_EXCLUDED_FILES = [
    "package-lock.json",
    "yarn.lock",
]

DEFAULT_INCLUDED_EXTENSIONS = [
    ".ts",
    ".js",
    ".py",
    ".java",
    ".cpp",
    ".h",
    ".jsx",
    ".tsx",
    ".md",
]

# Above this many characters the CLI asks before writing a snapshot
DEFAULT_MAX_CHARACTERS = 100_000

SETTINGS_FILE_NAME = ".flashrepo.json"
HYDRATED_DIR_NAME = "hydrated"
SNAPSHOT_DIR_PREFIX = "snapshot-"
# Layout used for files pulled out of an LLM reply
RESPONSE_HYDRATED_DIR_NAME = "claude-hydrated"
RESPONSE_DIR_PREFIX = "response-"


def _read_list(data: dict, key: str):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return value


def load_settings(root_dir: Path):
    """
    Reads .flashrepo.json from the workspace root.
    Missing keys fall back to the defaults; a broken file is reported and ignored.
    """
    # Imported here, models pulls its defaults from this module
    from flashrepo.models import FilterConfig, Settings

    settings_file = Path(root_dir) / SETTINGS_FILE_NAME
    data = {}

    if settings_file.is_file():
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            filters = FilterConfig.from_lists(
                excluded_dirs=_read_list(data, "excludedDirectories"),
                excluded_files=_read_list(data, "excludedFiles"),
                included_extensions=_read_list(data, "includedExtensions"),
            )
            max_characters = int(data.get("maxCharacters", DEFAULT_MAX_CHARACTERS))
            return Settings(filters=filters, max_characters=max_characters)
        except (OSError, ValueError, TypeError) as e:
            print(f"  > [Warning] Ignoring {settings_file.name} ({e})", file=sys.stderr)

    return Settings(filters=FilterConfig.default(), max_characters=DEFAULT_MAX_CHARACTERS)
