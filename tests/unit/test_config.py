from __future__ import annotations

import json
from pathlib import Path

import pytest

from tailsort.config import (
    TailsortSettings,
    build_pipeline_config,
    default_config_payload,
    discover_config_file,
    load_settings,
)
from tailsort.errors import InvalidConfiguration


def test_defaults() -> None:
    settings = TailsortSettings()

    assert settings.sort_order == "official"
    assert "cn" in settings.function_names
    assert "node_modules" in settings.ignore_paths
    assert settings.safety.atomic_writes is True
    assert settings.preserve_duplicates is False


def test_discovery_walks_up_to_the_nearest_config(tmp_path: Path) -> None:
    (tmp_path / ".tailsort.json").write_text(json.dumps({"functionNames": ["cx"]}), encoding="utf-8")
    nested = tmp_path / "src" / "components"
    nested.mkdir(parents=True)

    assert discover_config_file(nested) == tmp_path / ".tailsort.json"
    settings = load_settings(start_dir=nested)
    assert settings.function_names == ["cx"]


def test_explicit_config_path_and_camel_case_keys(tmp_path: Path) -> None:
    path = tmp_path / "custom.json"
    path.write_text(
        json.dumps(
            {
                "sortOrder": "custom",
                "customOrder": ["typography", "padding"],
                "preserveDuplicates": True,
                "safety": {"createBackups": True},
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path=path)

    assert settings.custom_order == ["typography", "padding"]
    assert settings.preserve_duplicates is True
    assert settings.safety.create_backups is True
    assert build_pipeline_config(settings).sort.custom is True


def test_overrides_are_validated(tmp_path: Path) -> None:
    settings = load_settings(start_dir=tmp_path, overrides={"threads": 3, "function_names": ["cx"]})
    assert settings.threads == 3
    assert settings.function_names == ["cx"]

    with pytest.raises(InvalidConfiguration):
        load_settings(start_dir=tmp_path, overrides={"threads": -1})


@pytest.mark.parametrize(
    "payload",
    [
        {"sortOrder": "custom"},
        {"customOrder": ["padding"]},
        {"sortOrder": "alphabetical"},
        {"unknownKey": True},
        {"maxFileSize": 0},
    ],
)
def test_invalid_config_files(tmp_path: Path, payload: dict) -> None:
    path = tmp_path / "tailsort.json"
    path.write_text(json.dumps(payload), encoding="utf-8")

    with pytest.raises(InvalidConfiguration):
        load_settings(config_path=path)


def test_unreadable_config_file(tmp_path: Path) -> None:
    path = tmp_path / "tailsort.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(InvalidConfiguration):
        load_settings(config_path=path)
    with pytest.raises(InvalidConfiguration):
        load_settings(config_path=tmp_path / "missing.json")


def test_custom_order_naming_unknown_categories_fails_on_build() -> None:
    settings = TailsortSettings(sort_order="custom", custom_order=["padding", "colors"])
    with pytest.raises(InvalidConfiguration, match="colors"):
        build_pipeline_config(settings)


def test_default_payload_uses_file_keys() -> None:
    payload = default_config_payload()

    assert payload["sortOrder"] == "official"
    assert payload["safety"]["atomicWrites"] is True
    assert "categoryTable" not in payload
    TailsortSettings.model_validate(payload)
