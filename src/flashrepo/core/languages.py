# src/flashrepo/core/languages.py

# Fence info string -> file extension for unnamed code blocks
LANGUAGE_EXTENSIONS = {
    "typescript": ".ts",
    "javascript": ".js",
    "python": ".py",
    "java": ".java",
    "cpp": ".cpp",
    "c++": ".cpp",
    "c": ".c",
    "rust": ".rs",
    "go": ".go",
    "ruby": ".rb",
    "php": ".php",
    "html": ".html",
    "css": ".css",
    "json": ".json",
    "yaml": ".yml",
    "markdown": ".md",
    "shell": ".sh",
    "bash": ".sh",
    "sql": ".sql",
    "ts": ".ts",
    "js": ".js",
    "py": ".py",
    "": ".txt",
}

DEFAULT_EXTENSION = ".txt"


def extension_for_language(lang: str) -> str:
    """Maps a code fence language tag to a file extension, '.txt' when unknown."""
    return LANGUAGE_EXTENSIONS.get(lang.strip().lower(), DEFAULT_EXTENSION)
