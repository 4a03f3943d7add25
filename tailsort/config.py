from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import InvalidConfiguration
from .extraction.locator import LocatorOptions
from .pipeline import PipelineConfig
from .settings import (
    CONFIG_FILE_NAMES,
    DEFAULT_ATTRIBUTE_NAMES,
    DEFAULT_CATEGORY_TABLE_PATH,
    DEFAULT_CLASS_PROPERTY_NAMES,
    DEFAULT_FILE_EXTENSIONS,
    DEFAULT_FUNCTION_NAMES,
    DEFAULT_IGNORE_PATHS,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_TAG_NAMES,
    DEFAULT_VARIANT_TABLE_PATH,
)
from .sorting.sorter import build_sort_config
from .sorting.tables import load_category_table, load_variant_table

logger = logging.getLogger(__name__)


class SafetySettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    atomic_writes: bool = Field(default=True, alias="atomicWrites")
    create_backups: bool = Field(default=False, alias="createBackups")
    verify_writes: bool = Field(default=False, alias="verifyWrites")


class TailsortSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    sort_order: Literal["official", "custom"] = Field(default="official", alias="sortOrder")
    custom_order: list[str] = Field(default_factory=list, alias="customOrder")
    function_names: list[str] = Field(default_factory=lambda: list(DEFAULT_FUNCTION_NAMES), alias="functionNames")
    tag_names: list[str] = Field(default_factory=lambda: list(DEFAULT_TAG_NAMES), alias="tagNames")
    attribute_names: list[str] = Field(default_factory=lambda: list(DEFAULT_ATTRIBUTE_NAMES), alias="attributeNames")
    class_property_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CLASS_PROPERTY_NAMES), alias="classPropertyNames"
    )
    preserve_duplicates: bool = Field(default=False, alias="preserveDuplicates")
    unknown_position: Literal["first", "last"] | int = Field(default="last", alias="unknownPosition")
    sort_dynamic_segments: bool = Field(default=False, alias="sortDynamicSegments")
    file_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS), alias="fileExtensions")
    ignore_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE_PATHS), alias="ignorePaths")
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, gt=0, alias="maxFileSize")
    threads: int = Field(default=0, ge=0)
    category_table: str | None = Field(default=None, alias="categoryTable")
    variant_table: str | None = Field(default=None, alias="variantTable")
    safety: SafetySettings = Field(default_factory=SafetySettings)

    @model_validator(mode="after")
    def _check_sort_order(self) -> TailsortSettings:
        if self.sort_order == "custom" and not self.custom_order:
            raise ValueError("customOrder is required when sortOrder is 'custom'")
        if self.sort_order == "official" and self.custom_order:
            raise ValueError("customOrder is only used when sortOrder is 'custom'")
        return self


def discover_config_file(start_dir: str | Path) -> Path | None:
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfiguration(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfiguration(f"Config file {path} must contain a JSON object")
    return payload


def load_settings(
    config_path: str | Path | None = None,
    start_dir: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
    discover: bool = True,
) -> TailsortSettings:
    payload: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise InvalidConfiguration(f"Config file not found: {path}")
        payload = _read_config_file(path)
    elif discover:
        path = discover_config_file(start_dir or Path.cwd())
        if path is not None:
            logger.info("[config] using %s", path)
            payload = _read_config_file(path)

    try:
        settings = TailsortSettings.model_validate(payload)
        if overrides:
            merged = settings.model_dump()
            merged.update({key: value for key, value in overrides.items() if value is not None})
            settings = TailsortSettings.model_validate(merged)
    except ValidationError as exc:
        raise InvalidConfiguration(str(exc)) from exc
    return settings


def build_pipeline_config(settings: TailsortSettings) -> PipelineConfig:
    categories = load_category_table(settings.category_table or DEFAULT_CATEGORY_TABLE_PATH)
    variants = load_variant_table(settings.variant_table or DEFAULT_VARIANT_TABLE_PATH)
    sort_config = build_sort_config(
        categories,
        variants,
        custom_order=settings.custom_order if settings.sort_order == "custom" else None,
        unknown_position=settings.unknown_position,
        remove_duplicates=not settings.preserve_duplicates,
    )
    locator = LocatorOptions(
        function_names=frozenset(settings.function_names),
        tag_names=frozenset(settings.tag_names),
        attribute_names=frozenset(settings.attribute_names),
        property_names=frozenset(settings.class_property_names),
    )
    return PipelineConfig(sort=sort_config, locator=locator, sort_dynamic_segments=settings.sort_dynamic_segments)


def default_config_payload() -> dict[str, Any]:
    return TailsortSettings().model_dump(by_alias=True, exclude={"category_table", "variant_table"})
