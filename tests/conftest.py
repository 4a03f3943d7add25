from __future__ import annotations

import os
from pathlib import Path
import shutil
import tempfile

import pytest

os.environ.setdefault("TAILSORT_HOME", tempfile.mkdtemp(prefix="tailsort-tests-"))

from tailsort.config import TailsortSettings, build_pipeline_config  # noqa: E402
from tailsort.pipeline import PipelineConfig  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return build_pipeline_config(TailsortSettings())


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    target = tmp_path / "project"
    shutil.copytree(FIXTURES_DIR, target)
    return target
