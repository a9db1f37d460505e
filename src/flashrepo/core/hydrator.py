# src/flashrepo/core/hydrator.py
import errno
import re
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import List, Optional, Sequence, Tuple, Union

from flashrepo.config import SNAPSHOT_DIR_PREFIX
from flashrepo.errors import FileSystemError, HydrationError
from flashrepo.models import ParsedEntry
from flashrepo.utils.text import normalize_content

# Dev-container style roots, e.g. /workspaces/<project>/
WORKSPACE_PREFIX_RE = re.compile(r"^/workspaces/[^/]+/")


def snapshot_dir_name(timestamp: Optional[datetime] = None, prefix: str = SNAPSHOT_DIR_PREFIX) -> str:
    """The prefix plus an ISO timestamp with ':' and '.' made path-safe."""
    if timestamp is None:
        timestamp = datetime.now(timezone.utc)
    stamp = timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return prefix + re.sub(r"[:.]", "-", stamp)


def sanitize_path(path: str) -> str:
    """
    Turns a snapshot path into one relative to the snapshot directory.
    Strips a /workspaces/<name>/ root, otherwise a single leading separator.
    """
    path = path.strip().replace("\\", "/")
    stripped = WORKSPACE_PREFIX_RE.sub("", path, count=1)
    if stripped == path and path.startswith("/"):
        stripped = path[1:]
    return stripped


def _target_for(snapshot_dir: Path, entry_path: str) -> Path:
    relative = sanitize_path(entry_path)
    parts = PurePosixPath(relative).parts
    if not parts or any(part in ("..", "/") for part in parts):
        raise OSError(errno.EINVAL, "Path escapes the snapshot directory", entry_path)
    return snapshot_dir.joinpath(*parts)


def hydrate(
    entries: Sequence[ParsedEntry],
    destination_root: Union[str, Path],
    timestamp: Optional[datetime] = None,
    prefix: str = SNAPSHOT_DIR_PREFIX,
) -> Path:
    """
    Writes the entries under a fresh <prefix><timestamp> directory and returns it.

    Entries are written in order, so a repeated path keeps its last content.
    A failed write does not stop the others; all failures are raised together
    as HydrationError once every entry has been attempted.
    """
    snapshot_dir = Path(destination_root) / snapshot_dir_name(timestamp, prefix)
    try:
        snapshot_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError.wrap(e) from e

    failures: List[Tuple[str, OSError]] = []
    for entry in entries:
        try:
            target = _target_for(snapshot_dir, entry.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(normalize_content(entry.content))
        except OSError as e:
            failures.append((entry.path, e))

    if failures:
        raise HydrationError(snapshot_dir, failures)
    return snapshot_dir
