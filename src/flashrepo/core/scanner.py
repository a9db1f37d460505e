# src/flashrepo/core/scanner.py
import os
from pathlib import Path
from typing import List, Union

from flashrepo.core.filter import should_include
from flashrepo.errors import FileSystemError
from flashrepo.models import FileRecord, FilterConfig


class TreeCollector:
    def __init__(self, root_dir: Union[str, Path], config: FilterConfig):
        self.root_dir = Path(root_dir)
        self.config = config

    def _is_binary_file(self, path: Path) -> bool:
        """
        Reads the first 1024 bytes to check for null bytes.
        Returns True if likely binary, False if likely text.
        """
        with path.open("rb") as f:
            chunk = f.read(1024)
            return b"\0" in chunk

    def _record_path(self, file_path: Path) -> str:
        # Workspace-relative with a leading '/', e.g. '/src/a.ts'
        return "/" + file_path.relative_to(self.root_dir).as_posix()

    def _walk(self, directory: Path, records: List[FileRecord]) -> None:
        with os.scandir(directory) as it:
            entries = list(it)

        for entry in entries:
            entry_path = Path(entry.path)

            # Symlinked directories are not followed
            if entry.is_dir(follow_symlinks=False):
                if should_include(entry, True, self.config):
                    self._walk(entry_path, records)
                continue

            if not entry.is_file():
                continue
            if not should_include(entry, False, self.config):
                continue

            if self._is_binary_file(entry_path):
                continue
            try:
                content = entry_path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                # Not null-padded, but still not UTF-8 text
                continue

            records.append(FileRecord.from_text(self._record_path(entry_path), content))

    def collect(self) -> List[FileRecord]:
        """
        Walks the tree depth-first, pruning excluded directories, and returns
        the collected files sorted by path. Any filesystem error aborts the walk.
        """
        records: List[FileRecord] = []
        try:
            self._walk(self.root_dir, records)
        except OSError as e:
            raise FileSystemError.wrap(e) from e

        records.sort(key=lambda r: r.path)
        return records


def collect(root_dir: Union[str, Path], config: FilterConfig) -> List[FileRecord]:
    return TreeCollector(root_dir, config).collect()
