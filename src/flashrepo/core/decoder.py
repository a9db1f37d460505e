# src/flashrepo/core/decoder.py
"""
Snapshot decoder.

A snapshot is line-oriented: marker lines are told apart from content lines
only by their prefix and by where they appear. Three marker grammars exist and
none carries a version tag, so the dialect is resolved per document from the
first marker that is seen, and a single rule set is then applied to the whole
document:

* verbose: ``=== File: <path> ===`` opens an entry.
* compact: ``#/<path>`` at the start of a line opens an entry. ``# Heading``
  does not, since a compact path always starts with ``/``, and neither does
  an indented ``#/`` inside a file.
* fenced: an LLM reply. Each fenced code block becomes an entry, named by a
  preceding ``=== File: <path> ===`` line, by a ``// <path>`` comment on the
  fence's first line, or else ``generated/code-block-<n><ext>``.

For the two snapshot dialects, anything before the first file marker
(summary, manifest, listing, body sentinel, or text pasted around the
snapshot) is header and never content. After it, every non-marker line
belongs to the open entry, verbatim.
"""
import re
from enum import Enum
from typing import List, Optional, Tuple

from flashrepo.core.encoder import BODY_SENTINEL, SUMMARY_HEADER
from flashrepo.core.languages import extension_for_language
from flashrepo.errors import UnrecognizedFormatError
from flashrepo.models import Dialect, ParsedEntry

VERBOSE_FILE_RE = re.compile(r"^=== File: (.+) ===$")
MANIFEST_RE = re.compile(r"^\$(.+)\|(\d+)$")
COMPACT_MARKER_PREFIX = "#/"
COMPACT_HEADER_PREFIX = "Total "

FENCE_OPEN_RE = re.compile(r"^```([\w+#.-]*)\s*$")
FENCE_CLOSE_RE = re.compile(r"^```\s*$")
# "// src/app.py" or "# src/app.py"; the name needs a '.' or '/' in it
FENCE_NAME_RE = re.compile(r"^\s*(?://|#)\s*([^\s]*[./][^\s]*)\s*$")
GENERATED_NAME_TEMPLATE = "generated/code-block-{n}{ext}"


class _State(Enum):
    SEEKING_BODY = "seeking_body"
    IN_FILE = "in_file"


def _split_lines(document: str) -> List[str]:
    lines = document.split("\n")
    # A terminating newline ends the last line; it does not add an empty one
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _bare(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def _is_compact_marker_candidate(line: str) -> bool:
    # Header region only: an indented paste still counts as a marker here
    return line.lstrip().startswith(COMPACT_MARKER_PREFIX)


class _VerboseRules:
    dialect = Dialect.VERBOSE

    def file_marker(self, line: str) -> Optional[str]:
        match = VERBOSE_FILE_RE.match(_bare(line))
        return match.group(1) if match else None

    def finish(self, lines: List[str]) -> str:
        # Undo the blank line written after the marker and the one after the content
        if lines and _bare(lines[0]) == "":
            lines = lines[1:]
        if lines and _bare(lines[-1]) == "":
            lines = lines[:-1]
        return "\n".join(lines)


class _CompactRules:
    """
    Markers sit at the paste's indent, measured once from the first marker.
    Content lines lose exactly that prefix and nothing more.
    """
    dialect = Dialect.COMPACT

    def __init__(self, indent: str = ""):
        self.indent = indent

    @classmethod
    def for_lines(cls, lines: List[str]) -> "_CompactRules":
        for line in lines:
            if _is_compact_marker_candidate(line):
                stripped = line.lstrip()
                return cls(line[:len(line) - len(stripped)])
        return cls()

    def _dedent(self, line: str) -> str:
        if self.indent and line.startswith(self.indent):
            return line[len(self.indent):]
        return line

    def file_marker(self, line: str) -> Optional[str]:
        line = _bare(self._dedent(line))
        if line.startswith(COMPACT_MARKER_PREFIX):
            return line[1:].rstrip()
        return None

    def finish(self, lines: List[str]) -> str:
        return "\n".join(self._dedent(line) for line in lines)


def _is_verbose_header(line: str) -> bool:
    return _bare(line) in (SUMMARY_HEADER, BODY_SENTINEL)


def _is_compact_header(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(COMPACT_HEADER_PREFIX + "Files:") or MANIFEST_RE.match(stripped) is not None


def _next_line_opens_fence(lines: List[str], index: int) -> bool:
    for line in lines[index + 1:]:
        if line.strip():
            return FENCE_OPEN_RE.match(_bare(line)) is not None
    return False


def detect_dialect(document: str) -> Optional[Dialect]:
    """
    Returns the dialect of the first decisive marker, or None when there is none.

    The verbose summary and sentinel are decisive. A ``=== File:`` line is
    verbose unless a code fence opens right after it, which makes the document
    a fenced reply, as does a fence before any other marker. A compact summary
    or manifest on its own only counts when nothing decisive follows.
    """
    lines = _split_lines(document)
    saw_compact_header = False
    for i, line in enumerate(lines):
        if _is_verbose_header(line):
            return Dialect.VERBOSE
        if VERBOSE_FILE_RE.match(_bare(line)):
            return Dialect.FENCED if _next_line_opens_fence(lines, i) else Dialect.VERBOSE
        if FENCE_OPEN_RE.match(_bare(line)):
            return Dialect.FENCED
        if _is_compact_marker_candidate(line):
            return Dialect.COMPACT
        if _is_compact_header(line):
            saw_compact_header = True
    return Dialect.COMPACT if saw_compact_header else None


def read_manifest(document: str) -> List[Tuple[str, int]]:
    """
    Returns the compact manifest as (path, declared character count) pairs.
    The counts are informational; nothing checks them against the content.
    """
    manifest: List[Tuple[str, int]] = []
    for line in _split_lines(document):
        if _is_compact_marker_candidate(line):
            break
        match = MANIFEST_RE.match(line.strip())
        if match:
            manifest.append((match.group(1), int(match.group(2))))
    return manifest


def _decode_fenced(lines: List[str]) -> List[ParsedEntry]:
    entries: List[ParsedEntry] = []
    pending_path: Optional[str] = None
    current_path: Optional[str] = None
    buffer: List[str] = []
    in_fence = False

    i = 0
    while i < len(lines):
        line = lines[i]
        bare = _bare(line)

        if in_fence:
            if FENCE_CLOSE_RE.match(bare):
                if buffer:
                    entries.append(ParsedEntry(path=current_path, content="\n".join(buffer)))
                in_fence = False
            else:
                buffer.append(line)
            i += 1
            continue

        marker = VERBOSE_FILE_RE.match(bare)
        opening = FENCE_OPEN_RE.match(bare)
        if marker:
            pending_path = marker.group(1)
        elif opening:
            in_fence = True
            buffer = []
            current_path, pending_path = pending_path, None
            if current_path is None:
                name = FENCE_NAME_RE.match(lines[i + 1]) if i + 1 < len(lines) else None
                if name:
                    current_path = name.group(1)
                    # The naming comment is not part of the file
                    i += 1
                else:
                    current_path = GENERATED_NAME_TEMPLATE.format(
                        n=len(entries) + 1, ext=extension_for_language(opening.group(1))
                    )
        # Prose between blocks is dropped
        i += 1

    # Unterminated final block
    if in_fence and buffer:
        entries.append(ParsedEntry(path=current_path, content="\n".join(buffer)))
    return entries


def decode(document: str) -> List[ParsedEntry]:
    """
    Parses a snapshot document, or a fenced LLM reply, into entries in document order.

    Blank input decodes to an empty list. Non-blank input without any marker
    raises UnrecognizedFormatError. Entries whose marker is followed by no
    line at all are dropped.
    """
    if not document.strip():
        return []

    dialect = detect_dialect(document)
    if dialect is None:
        raise UnrecognizedFormatError()

    lines = _split_lines(document)
    if dialect is Dialect.FENCED:
        return _decode_fenced(lines)
    rules = _CompactRules.for_lines(lines) if dialect is Dialect.COMPACT else _VerboseRules()

    entries: List[ParsedEntry] = []
    state = _State.SEEKING_BODY
    current_path: Optional[str] = None
    buffer: List[str] = []

    def flush():
        if current_path is not None and buffer:
            entries.append(ParsedEntry(path=current_path, content=rules.finish(buffer)))

    for line in lines:
        path = rules.file_marker(line)
        if path is not None:
            flush()
            current_path = path
            buffer = []
            state = _State.IN_FILE
            continue

        if state is _State.SEEKING_BODY:
            # Summary, manifest, file listing, sentinel
            continue

        buffer.append(line)

    flush()
    return entries
