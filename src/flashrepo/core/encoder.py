# src/flashrepo/core/encoder.py
from typing import List, Sequence, Tuple

from flashrepo.core.tree import generate_project_tree
from flashrepo.models import Dialect, FileRecord
from flashrepo.utils.text import format_count, format_kilo, normalize_content

# Marker strings are part of the document grammar and must match byte-for-byte
SUMMARY_HEADER = "=== Flash Repo Summary ==="
BODY_SENTINEL = "=== Begin Concatenated Content ==="
FILE_MARKER_TEMPLATE = "=== File: {path} ==="


def summarize(records: Sequence[FileRecord]) -> Tuple[int, int]:
    """Returns (file count, total characters)."""
    return len(records), sum(r.character_count for r in records)


def _encode_verbose(records: Sequence[FileRecord], include_tree: bool) -> str:
    file_count, total_chars = summarize(records)
    parts: List[str] = [
        f"{SUMMARY_HEADER}\n",
        f"Total Files: {file_count}\n",
        f"Total Characters: {format_count(total_chars)} ({format_kilo(total_chars)})\n",
        "\n",
        "Files:\n",
    ]
    for r in records:
        parts.append(f"- {r.path} ({format_count(r.character_count)} chars)\n")
    parts.append("\n")

    if include_tree:
        parts.append("Project Tree:\n")
        parts.append(generate_project_tree([r.path for r in records], "."))
        parts.append("\n")

    parts.append(f"{BODY_SENTINEL}\n\n")

    for r in records:
        parts.append(FILE_MARKER_TEMPLATE.format(path=r.path) + "\n\n")
        parts.append(r.content)
        parts.append("\n\n")

    return "".join(parts)


def _compact_path(path: str) -> str:
    # Compact markers are only recognized as "#/..."
    path = path.replace("\\", "/")
    return path if path.startswith("/") else "/" + path


def _encode_compact(records: Sequence[FileRecord]) -> str:
    file_count, total_chars = summarize(records)
    parts: List[str] = [
        f"Total Files:{file_count}\n",
        f"Total Characters:{total_chars} ({format_kilo(total_chars)})\n",
    ]
    for r in records:
        parts.append(f"${_compact_path(r.path)}|{r.character_count}\n")

    for r in records:
        parts.append(f"#{_compact_path(r.path)}\n")
        parts.append(normalize_content(r.content))

    return "".join(parts)


def encode(records: Sequence[FileRecord], dialect: Dialect = Dialect.COMPACT, include_tree: bool = False) -> str:
    """
    Renders the records into one snapshot document.
    Records are written in the order given; the collector already sorts them by path.
    """
    if dialect is Dialect.FENCED:
        raise ValueError("fenced replies can be decoded, not encoded")
    if dialect is Dialect.VERBOSE:
        return _encode_verbose(records, include_tree)
    return _encode_compact(records)
