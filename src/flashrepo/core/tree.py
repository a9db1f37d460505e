# src/flashrepo/core/tree.py
from typing import Dict, Iterable, List
from pathlib import PurePosixPath


def generate_project_tree(file_paths: Iterable[str], root_name: str) -> str:
    """Generates a string representation of the project tree."""
    tree_dict: Dict = {}
    for path in sorted(file_paths):
        # Snapshot paths carry a leading '/', which is not a tree level
        parts = [p for p in PurePosixPath(path).parts if p != "/"]
        current_level = tree_dict
        for part in parts:
            current_level = current_level.setdefault(part, {})

    lines: List[str] = [f"{root_name}/"]

    def _generate_lines_recursive(subtree: Dict, prefix: str):
        entries = sorted(subtree.items())
        for i, (name, content) in enumerate(entries):
            is_last = (i == len(entries) - 1)
            connector = "└── " if is_last else "├── "
            suffix = "/" if content else ""
            lines.append(f"{prefix}{connector}{name}{suffix}")

            if content:
                new_prefix = prefix + ("    " if is_last else "│   ")
                _generate_lines_recursive(content, new_prefix)

    _generate_lines_recursive(tree_dict, "")
    return "\n".join(lines) + "\n"
