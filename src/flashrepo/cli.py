# src/flashrepo/cli.py
import sys
import argparse
import os
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

# Module imports
from flashrepo.config import (
    HYDRATED_DIR_NAME,
    RESPONSE_DIR_PREFIX,
    RESPONSE_HYDRATED_DIR_NAME,
    SNAPSHOT_DIR_PREFIX,
    load_settings,
)
from flashrepo.core.decoder import decode, detect_dialect, read_manifest
from flashrepo.core.encoder import encode, summarize
from flashrepo.core.hydrator import hydrate
from flashrepo.core.scanner import collect
from flashrepo.errors import EmptyInputError, FileSystemError, FlashRepoError, NoWorkspaceError
from flashrepo.models import Dialect, FileRecord
from flashrepo.utils.text import format_count, format_kilo
from flashrepo.utils.tokenizer import Tokenizer


def _split_csv(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="flashrepo",
        description="Pack a project into one LLM-friendly snapshot, or hydrate a snapshot back into files."
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    # snapshot
    snap = sub.add_parser("snapshot", help="Concatenate the workspace into a single snapshot document.")
    snap.add_argument("root_dir", type=str, nargs="?", default=os.getcwd(), help="Workspace root directory")
    snap.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file, or '-' for stdout (default: {folder_name}_snapshot.txt)"
    )
    snap.add_argument(
        "--dialect",
        choices=[Dialect.COMPACT.value, Dialect.VERBOSE.value],
        default=Dialect.COMPACT.value,
        help="Marker format of the document (default: compact)"
    )
    snap.add_argument("--tree", action="store_true", help="Add a project tree to the verbose summary")
    snap.add_argument("-e", "--extensions", type=str, default=None, help="Comma-separated file extensions, or '*' for all")
    snap.add_argument("--exclude-dir", action="append", default=[], help="Extra directory name to skip (repeatable)")
    snap.add_argument("--exclude-file", action="append", default=[], help="Extra file name to skip (repeatable)")
    snap.add_argument("--max-chars", type=int, default=None, help="Ask for confirmation above this many characters")
    snap.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    # hydrate
    hyd = sub.add_parser("hydrate", help="Re-create the files of a snapshot document in a new directory.")
    hyd.add_argument("snapshot", type=str, help="Snapshot document, or '-' for stdin")
    hyd.add_argument("-w", "--workspace", type=str, default=os.getcwd(), help="Workspace root (default: current directory)")
    hyd.add_argument(
        "-d", "--dest",
        type=str,
        default=None,
        help=f"Directory that receives the new folder (default: <workspace>/{HYDRATED_DIR_NAME} or <workspace>/{RESPONSE_HYDRATED_DIR_NAME})"
    )
    hyd.add_argument(
        "--layout",
        choices=["snapshot", "response"],
        default=None,
        help=f"snapshot-<timestamp> under {HYDRATED_DIR_NAME}/, or response-<timestamp> under {RESPONSE_HYDRATED_DIR_NAME}/ "
             "(default: response for fenced LLM replies, snapshot otherwise)"
    )
    return parser


def get_default_output_name(root_dir: Path) -> str:
    """Generates a dynamic filename based on the directory name."""
    folder_name = root_dir.name

    # Root directory has no name
    if not folder_name:
        folder_name = "project"

    safe_name = folder_name.replace(" ", "_")
    return f"{safe_name}_snapshot.txt"


def resolve_workspace(raw: Optional[str]) -> Path:
    if not raw:
        raise NoWorkspaceError()
    root_dir = Path(raw).resolve()
    if not root_dir.is_dir():
        raise NoWorkspaceError(root_dir)
    return root_dir


def print_report(records: List[FileRecord], out=sys.stdout):
    by_size = sorted(records, key=lambda r: r.character_count, reverse=True)
    file_count, total_chars = summarize(records)
    total_tokens = 0

    print("\n--- Top 10 Largest Files ---", file=out)
    print(f"{'Rank':<5} | {'Chars':<10} | {'Est. Tokens':<11} | {'File Path'}", file=out)
    print("-" * 70, file=out)
    for i, r in enumerate(by_size):
        tokens = Tokenizer.count(r.content)
        total_tokens += tokens
        if i < 10:
            print(f"{i+1:<5} | {r.character_count:<10} | {tokens:<11} | {r.path}", file=out)
    print("-" * 70, file=out)
    print(f"Total files: {file_count}", file=out)
    print(f"Total characters: {format_count(total_chars)} ({format_kilo(total_chars)})", file=out)
    print(f"Total tokens (est.): {total_tokens}", file=out)
    print("-" * 70, file=out)


def confirm_size(total_chars: int, limit: int) -> bool:
    choice = input(
        f"> Snapshot has {format_count(total_chars)} characters (limit {format_count(limit)}). Continue? (y/N): "
    ).strip().lower()
    return choice in ("y", "yes")


def run_snapshot(args) -> None:
    root_dir = resolve_workspace(args.root_dir)
    settings = load_settings(root_dir)

    filters = settings.filters
    if args.extensions is not None:
        raw_exts = args.extensions.strip()
        # Every name ends with ""
        extensions = [""] if raw_exts == "*" else _split_csv(raw_exts)
        filters = replace(filters, included_extensions=frozenset(extensions))
    if args.exclude_dir:
        filters = replace(filters, excluded_dirs=filters.excluded_dirs | set(args.exclude_dir))
    if args.exclude_file:
        filters = replace(filters, excluded_files=filters.excluded_files | set(args.exclude_file))
    max_chars = args.max_chars if args.max_chars is not None else settings.max_characters

    to_stdout = args.output == "-"
    output_file = None
    if not to_stdout:
        output_file = root_dir / (args.output or get_default_output_name(root_dir))
        # Never pack a previous snapshot of ourselves
        filters = replace(filters, excluded_files=filters.excluded_files | {output_file.name})

    # Keep stdout clean when the document itself goes there
    log = sys.stderr if to_stdout else sys.stdout
    dialect = Dialect(args.dialect)

    print("--- flashrepo ---", file=log)
    print(f"Scanning: {root_dir}", file=log)
    print(f"Output:   {'<stdout>' if to_stdout else output_file.name}", file=log)
    print(f"Dialect:  {dialect.value}", file=log)

    records = collect(root_dir, filters)
    if not records:
        raise EmptyInputError("No matching files found.")

    print_report(records, out=log)

    _, total_chars = summarize(records)
    if total_chars > max_chars and not args.yes:
        if not confirm_size(total_chars, max_chars):
            print("Cancelled.", file=log)
            return

    document = encode(records, dialect, include_tree=args.tree)

    if to_stdout:
        sys.stdout.write(document)
        return
    try:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        raise FileSystemError.wrap(e) from e
    print(f"\nSuccess! Snapshot written to: {output_file.name}", file=log)


def run_hydrate(args) -> None:
    workspace = resolve_workspace(args.workspace)

    try:
        if args.snapshot == "-":
            text = sys.stdin.read()
        else:
            with open(args.snapshot, "r", encoding="utf-8") as f:
                text = f.read()
    except OSError as e:
        raise FileSystemError.wrap(e) from e

    entries = decode(text)
    if not entries:
        raise EmptyInputError("No files found to hydrate")

    dialect = detect_dialect(text)
    print(f"Format:   {dialect.value}")
    manifest = read_manifest(text)
    if manifest and len(manifest) != len(entries):
        print(f"  > [Warning] Manifest lists {len(manifest)} files, found {len(entries)}", file=sys.stderr)

    layout = args.layout or ("response" if dialect is Dialect.FENCED else "snapshot")
    if layout == "response":
        default_root, prefix = RESPONSE_HYDRATED_DIR_NAME, RESPONSE_DIR_PREFIX
    else:
        default_root, prefix = HYDRATED_DIR_NAME, SNAPSHOT_DIR_PREFIX
    dest_root = Path(args.dest) if args.dest else workspace / default_root
    hydrated_path = hydrate(entries, dest_root, prefix=prefix)

    try:
        shown = hydrated_path.resolve().relative_to(workspace)
    except ValueError:
        shown = hydrated_path
    print(f"Files hydrated successfully to: {shown.as_posix()}")


def main(argv: Optional[List[str]] = None):
    try:
        parser = create_arg_parser()
        args = parser.parse_args(argv)

        if args.cmd == "snapshot":
            run_snapshot(args)
        elif args.cmd == "hydrate":
            run_hydrate(args)

    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)

    except FlashRepoError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    except Exception as e:
        print(f"An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
