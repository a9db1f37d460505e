# tests/test_cli.py
import io
import sys
import pytest
from pathlib import Path
from unittest.mock import patch

from flashrepo.cli import get_default_output_name, main


@pytest.fixture
def workspace(tmp_path):
    """A workspace with sources, a markdown file full of headings, and dependencies."""
    root = tmp_path / "my project"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "node_modules" / "dep").mkdir(parents=True)

    (root / "src" / "main.py").write_text("def hello():\n    print('hello')\n", encoding="utf-8")
    (root / "src" / "lib" / "util.ts").write_text("export const util = () => {};\n", encoding="utf-8")
    (root / "README.md").write_text("# My Project\n\n## Setup\n$ make\n", encoding="utf-8")
    (root / "node_modules" / "dep" / "index.js").write_text("ignore me", encoding="utf-8")
    return root


def _hydrated_dirs(root: Path):
    return sorted((root / "hydrated").glob("snapshot-*"))


def test_default_output_name():
    assert get_default_output_name(Path("/tmp/my project")) == "my_project_snapshot.txt"
    assert get_default_output_name(Path("/")) == "project_snapshot.txt"


def test_snapshot_then_hydrate(workspace, capsys):
    # Run: flashrepo snapshot <root> -y
    test_args = ["flashrepo", "snapshot", str(workspace), "-y"]
    with patch.object(sys, "argv", test_args):
        main()

    output_file = workspace / "my_project_snapshot.txt"
    assert output_file.exists()
    content = output_file.read_text(encoding="utf-8")

    assert content.startswith("Total Files:3\n")
    assert "#/README.md\n# My Project\n" in content
    assert "#/src/lib/util.ts\n" in content
    assert "node_modules" not in content
    assert "Success! Snapshot written to: my_project_snapshot.txt" in capsys.readouterr().out

    main(["hydrate", str(output_file), "-w", str(workspace)])

    out = capsys.readouterr().out
    assert "Files hydrated successfully to: hydrated/snapshot-" in out

    [snapshot_dir] = _hydrated_dirs(workspace)
    assert (snapshot_dir / "README.md").read_text(encoding="utf-8") == "# My Project\n\n## Setup\n$ make\n"
    assert (snapshot_dir / "src" / "main.py").read_text(encoding="utf-8") == "def hello():\n    print('hello')\n"
    assert (snapshot_dir / "src" / "lib" / "util.ts").exists()


def test_snapshot_verbose_with_tree(workspace):
    main(["snapshot", str(workspace), "-o", "out.txt", "--dialect", "verbose", "--tree", "-y"])

    content = (workspace / "out.txt").read_text(encoding="utf-8")
    assert content.startswith("=== Flash Repo Summary ===\nTotal Files: 3\n")
    assert "Project Tree:" in content
    assert "=== File: /src/main.py ===" in content


def test_snapshot_does_not_pack_hydrated_output(workspace):
    main(["snapshot", str(workspace), "-o", "first.txt", "-y"])
    main(["hydrate", str(workspace / "first.txt"), "-w", str(workspace)])
    main(["snapshot", str(workspace), "-o", "second.txt", "-y"])

    assert (workspace / "second.txt").read_text(encoding="utf-8").startswith("Total Files:3\n")


def test_snapshot_to_stdout(workspace, capsys):
    main(["snapshot", str(workspace), "-o", "-", "-e", ".py"])

    captured = capsys.readouterr()
    assert captured.out.startswith("Total Files:1\n")
    assert "#/src/main.py" in captured.out
    assert "--- flashrepo ---" in captured.err


def test_snapshot_extra_exclusions(workspace, capsys):
    main(["snapshot", str(workspace), "-o", "-", "--exclude-dir", "lib", "--exclude-file", "README.md"])
    out = capsys.readouterr().out
    assert out.startswith("Total Files:1\n")
    assert "util.ts" not in out


def test_snapshot_size_confirmation_declined(workspace, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda _: "n")
    main(["snapshot", str(workspace), "-o", "big.txt", "--max-chars", "10"])

    assert not (workspace / "big.txt").exists()
    assert "Cancelled." in capsys.readouterr().out


def test_snapshot_size_confirmation_accepted(workspace, monkeypatch):
    prompts = []
    monkeypatch.setattr("builtins.input", lambda msg: prompts.append(msg) or "y")
    main(["snapshot", str(workspace), "-o", "big.txt", "--max-chars", "10"])

    assert (workspace / "big.txt").exists()
    assert "Continue? (y/N)" in prompts[0]


def test_snapshot_settings_threshold(workspace, monkeypatch):
    (workspace / ".flashrepo.json").write_text('{"maxCharacters": 1}', encoding="utf-8")

    def fail(_):
        raise AssertionError("no prompt expected with -y")

    monkeypatch.setattr("builtins.input", fail)
    main(["snapshot", str(workspace), "-o", "out.txt", "-y"])
    assert (workspace / "out.txt").exists()


def test_snapshot_invalid_root(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["snapshot", str(tmp_path / "missing")])

    assert exc_info.value.code == 1
    assert "Error: No workspace folder at" in capsys.readouterr().err


def test_snapshot_no_matching_files(tmp_path, capsys):
    (tmp_path / "notes.txt").write_text("nothing to collect", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["snapshot", str(tmp_path), "-y"])

    assert "Error: No matching files found." in capsys.readouterr().err


def test_hydrate_from_stdin(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("#/a.md\n# Header 1\nbody\n#/b.md\ncontent"))
    main(["hydrate", "-", "-w", str(tmp_path), "-d", str(tmp_path / "out")])

    [snapshot_dir] = sorted((tmp_path / "out").glob("snapshot-*"))
    assert (snapshot_dir / "a.md").read_text(encoding="utf-8") == "# Header 1\nbody\n"
    assert (snapshot_dir / "b.md").read_text(encoding="utf-8") == "content\n"
    assert "Format:   compact" in capsys.readouterr().out


def test_hydrate_unrecognized_document(tmp_path, capsys):
    doc = tmp_path / "notes.txt"
    doc.write_text("Just a chat transcript.\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["hydrate", str(doc), "-w", str(tmp_path)])

    assert "Error: Not a Flash Repo snapshot" in capsys.readouterr().err
    assert not (tmp_path / "hydrated").exists()


def test_hydrate_snapshot_without_files(tmp_path, capsys):
    doc = tmp_path / "empty.txt"
    doc.write_text("Total Files:0\nTotal Characters:0 (0K)\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["hydrate", str(doc), "-w", str(tmp_path)])

    assert "Error: No files found to hydrate" in capsys.readouterr().err


def test_hydrate_missing_document(tmp_path, capsys):
    with pytest.raises(SystemExit):
        main(["hydrate", str(tmp_path / "nope.txt"), "-w", str(tmp_path)])

    assert "No such file or directory" in capsys.readouterr().err


def test_hydrate_llm_reply(tmp_path, capsys):
    reply = tmp_path / "reply.md"
    reply.write_text(
        "Sure, here is the fix:\n"
        "```python\n"
        "// src/app.py\n"
        "print('fixed')\n"
        "```\n"
        "You may also want:\n"
        "```bash\n"
        "pip install -e .\n"
        "```\n",
        encoding="utf-8",
    )
    main(["hydrate", str(reply), "-w", str(tmp_path)])

    out = capsys.readouterr().out
    assert "Format:   fenced" in out
    assert "Files hydrated successfully to: claude-hydrated/response-" in out

    [response_dir] = sorted((tmp_path / "claude-hydrated").glob("response-*"))
    assert (response_dir / "src" / "app.py").read_text(encoding="utf-8") == "print('fixed')\n"
    assert (response_dir / "generated" / "code-block-2.sh").read_text(encoding="utf-8") == "pip install -e .\n"
    assert not (tmp_path / "hydrated").exists()


def test_hydrate_layout_override(tmp_path):
    doc = tmp_path / "snap.txt"
    doc.write_text("#/a.ts\nx\n", encoding="utf-8")
    main(["hydrate", str(doc), "-w", str(tmp_path), "--layout", "response"])

    [response_dir] = sorted((tmp_path / "claude-hydrated").glob("response-*"))
    assert (response_dir / "a.ts").read_text(encoding="utf-8") == "x\n"


def test_hydrate_reports_each_failure_once(tmp_path, capsys):
    doc = tmp_path / "snap.txt"
    doc.write_text("#/../escape.ts\nx\n#/ok.ts\ny\n", encoding="utf-8")

    with pytest.raises(SystemExit):
        main(["hydrate", str(doc), "-w", str(tmp_path)])

    err = capsys.readouterr().err
    assert err.startswith("Error: 1 file(s) could not be written")
    assert err.count("escape.ts") == 1
    [snapshot_dir] = _hydrated_dirs(tmp_path)
    assert (snapshot_dir / "ok.ts").read_text(encoding="utf-8") == "y\n"
