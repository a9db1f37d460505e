# src/flashrepo/models.py
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import FrozenSet, Iterable, Optional

from flashrepo.config import (
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_EXCLUDED_FILES,
    DEFAULT_INCLUDED_EXTENSIONS,
)


class Dialect(Enum):
    """Marker grammar of a snapshot document."""
    VERBOSE = "verbose"
    COMPACT = "compact"
    # Code fences in an LLM reply; decode only
    FENCED = "fenced"


@dataclass(frozen=True)
class FileRecord:
    """Immutable data class holding one collected file."""
    path: str
    content: str
    character_count: int
    extension: str

    @classmethod
    def from_text(cls, path: str, content: str) -> "FileRecord":
        # Counts code points, not bytes
        return cls(
            path=path,
            content=content,
            character_count=len(content),
            extension=PurePosixPath(path).suffix,
        )


@dataclass(frozen=True)
class ParsedEntry:
    path: str
    content: str


@dataclass(frozen=True)
class FilterConfig:
    """Name-based inclusion rules for the tree walk."""
    excluded_dirs: FrozenSet[str]
    excluded_files: FrozenSet[str]
    included_extensions: FrozenSet[str]

    @classmethod
    def from_lists(
        cls,
        excluded_dirs: Optional[Iterable[str]] = None,
        excluded_files: Optional[Iterable[str]] = None,
        included_extensions: Optional[Iterable[str]] = None,
    ) -> "FilterConfig":
        return cls(
            excluded_dirs=frozenset(DEFAULT_EXCLUDED_DIRS if excluded_dirs is None else excluded_dirs),
            excluded_files=frozenset(DEFAULT_EXCLUDED_FILES if excluded_files is None else excluded_files),
            included_extensions=frozenset(
                DEFAULT_INCLUDED_EXTENSIONS if included_extensions is None else included_extensions
            ),
        )

    @classmethod
    def default(cls) -> "FilterConfig":
        return cls.from_lists()


@dataclass(frozen=True)
class Settings:
    filters: FilterConfig
    max_characters: int
