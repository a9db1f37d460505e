# src/flashrepo/core/filter.py
import os
from typing import Union

from flashrepo.models import FilterConfig


def should_include(entry: Union[str, "os.PathLike[str]", os.DirEntry], is_directory: bool, config: FilterConfig) -> bool:
    """
    Decides whether a directory is descended into, or a file is collected.
    Matching is on the base name only: exact for excluded names, suffix for extensions.
    """
    name = entry.name if isinstance(entry, os.DirEntry) else os.path.basename(os.fspath(entry).rstrip("/"))

    if is_directory:
        return name not in config.excluded_dirs

    if name in config.excluded_files:
        return False
    return any(name.endswith(ext) for ext in config.included_extensions)
