from __future__ import annotations

import os
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parent
REPO_ROOT = SRC_DIR.parent

TEMPLATES_DIR = SRC_DIR / "templates"
DEFAULT_CATEGORY_TABLE_PATH = TEMPLATES_DIR / "categories.json"
DEFAULT_VARIANT_TABLE_PATH = TEMPLATES_DIR / "variants.json"

ARTIFACTS_DIR = Path(os.environ.get("TAILSORT_HOME", str(REPO_ROOT / "artifacts")))
EXPORTS_DIR = ARTIFACTS_DIR / "exports"
DB_PATH = ARTIFACTS_DIR / "tailsort.db"

CONFIG_FILE_NAMES = (".tailsort.json", "tailsort.json", ".tailsort.config.json")

DEFAULT_FUNCTION_NAMES = ("cn", "twMerge", "clsx", "classNames", "classList", "cva")
DEFAULT_TAG_NAMES = ("tw",)
DEFAULT_ATTRIBUTE_NAMES = ("class", "className")
DEFAULT_CLASS_PROPERTY_NAMES = ("class", "className")
DEFAULT_FILE_EXTENSIONS = ("tsx", "jsx", "ts", "js", "vue", "svelte", "html")
DEFAULT_IGNORE_PATHS = ("node_modules", "dist", "build", "coverage", ".git", ".next", ".nuxt", "target")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


def ensure_runtime_dirs() -> None:
    for directory in (ARTIFACTS_DIR, EXPORTS_DIR):
        directory.mkdir(parents=True, exist_ok=True)
