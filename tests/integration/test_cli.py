from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from tailsort.cli import main


def _exit_code(argv: list[str]) -> int:
    try:
        main(argv)
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_format_previews_without_writing(project_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    before = (project_dir / "Card.vue").read_bytes()

    assert _exit_code(["format", str(project_dir), "--diff"]) == 0

    out = capsys.readouterr().out
    assert "would sort" in out
    assert "Card.vue" in out
    assert (project_dir / "Card.vue").read_bytes() == before


def test_check_exits_non_zero_until_files_are_written(project_dir: Path) -> None:
    target = project_dir / "Button.tsx"

    assert _exit_code(["check", str(target)]) == 1
    assert _exit_code(["format", str(target), "--mode", "write"]) == 0
    assert _exit_code(["check", str(target)]) == 0


def test_unparseable_file_is_reported_without_failing(project_dir: Path) -> None:
    assert _exit_code(["check", str(project_dir / "sorted.ts")]) == 0
    assert _exit_code(["format", str(project_dir / "Broken.tsx")]) == 0


def test_json_output(project_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _exit_code(["check", str(project_dir), "--output", "json"]) == 1

    document = json.loads(capsys.readouterr().out)
    assert document["mode"] == "verify"
    assert document["summary"]["files_changed"] == 4
    assert document["issues"][0]["rule_id"] == "class-order"


def test_stdin_round_trip(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('cn("p-4 flex");\n'))

    assert _exit_code(["format", "--stdin", "--kind", "ts"]) == 0
    assert capsys.readouterr().out == 'cn("flex p-4");\n'


def test_stdin_check_and_unparseable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('cn("p-4 flex");\n'))
    assert _exit_code(["check", "--stdin", "--kind", "ts"]) == 1

    monkeypatch.setattr("sys.stdin", io.StringIO("const = ("))
    assert _exit_code(["format", "--stdin", "--kind", "ts"]) == 1


def test_extra_functions_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('cx("p-4 flex"); cn("m-2 block");'))

    assert _exit_code(["format", "--stdin", "--kind", "ts", "--functions", "cx"]) == 0
    assert capsys.readouterr().out == 'cx("flex p-4"); cn("block m-2");'


def test_missing_paths_and_bad_config(tmp_path: Path) -> None:
    assert _exit_code(["format"]) == 2

    config = tmp_path / "bad.json"
    config.write_text(json.dumps({"sortOrder": "custom"}), encoding="utf-8")
    assert _exit_code(["format", str(tmp_path), "--config", str(config)]) == 2


def test_config_init_validate_and_show(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / ".tailsort.json"

    assert _exit_code(["config", "init"]) == 0
    assert json.loads(target.read_text(encoding="utf-8"))["sortOrder"] == "official"
    assert _exit_code(["config", "init"]) == 1
    assert _exit_code(["config", "init", "--force"]) == 0

    assert _exit_code(["config", "validate"]) == 0

    target.write_text(json.dumps({"sortOrder": "custom", "customOrder": ["colors"]}), encoding="utf-8")
    assert _exit_code(["config", "validate", str(target)]) == 2

    capsys.readouterr()
    target.write_text(json.dumps({"functionNames": ["cx"]}), encoding="utf-8")
    assert _exit_code(["config", "show"]) == 0
    assert '"cx"' in capsys.readouterr().out
