from __future__ import annotations

from pathlib import Path

from tailsort.services.inventory import discover_files, document_kind, is_ignored


def _touch(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_discovers_selected_extensions_and_skips_ignored_directories(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "App.tsx")
    _touch(tmp_path / "src" / "styles.css")
    _touch(tmp_path / "src" / "ui" / "Card.vue")
    _touch(tmp_path / "node_modules" / "lib" / "index.js")
    _touch(tmp_path / "public" / "index.htm")

    files = discover_files([tmp_path], ["tsx", "vue", "html", "js"], ["node_modules"])
    relative = sorted(path.relative_to(tmp_path).as_posix() for path in files)

    assert relative == ["public/index.htm", "src/App.tsx", "src/ui/Card.vue"]


def test_glob_patterns_and_max_depth(tmp_path: Path) -> None:
    _touch(tmp_path / "App.tsx")
    _touch(tmp_path / "App.test.tsx")
    _touch(tmp_path / "deep" / "Nested.tsx")

    files = discover_files([tmp_path], ["tsx"], ["*.test.tsx"], max_depth=0)
    assert [path.name for path in files] == ["App.tsx"]


def test_explicit_files_missing_paths_and_duplicates(tmp_path: Path) -> None:
    app = _touch(tmp_path / "App.tsx")

    files = discover_files([app, tmp_path, tmp_path / "missing"], ["tsx"])
    assert files == [app]


def test_document_kind_and_ignore_matching(tmp_path: Path) -> None:
    assert document_kind(Path("index.HTM")) == "html"
    assert document_kind(Path("Card.vue")) == "vue"
    assert is_ignored(tmp_path / "dist", tmp_path, ["dist"]) is True
    assert is_ignored(tmp_path / "src" / "a.gen.ts", tmp_path, ["src/*.gen.ts"]) is True
    assert is_ignored(tmp_path / "src", tmp_path, ["dist"]) is False
