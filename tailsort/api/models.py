from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

SourceKind = Literal["tsx", "ts", "jsx", "js", "html", "vue", "svelte"]


class FormatOptions(BaseModel):
    sort_order: Literal["official", "custom"] | None = None
    custom_order: list[str] | None = None
    function_names: list[str] | None = None
    preserve_duplicates: bool | None = None
    sort_dynamic_segments: bool | None = None

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FormatRequest(BaseModel):
    source: str
    kind: SourceKind = "tsx"
    identifier: str = Field(default="<request>", description="Name reported back in diagnostics.")
    options: FormatOptions = Field(default_factory=FormatOptions)


class RunRequest(BaseModel):
    paths: list[str] = Field(min_length=1)
    mode: Literal["check", "write", "verify"] = "check"
    wait: bool = Field(default=False, description="When true, execute the job before returning.")
    options: FormatOptions = Field(default_factory=FormatOptions)


class ExportRequest(BaseModel):
    job_id: str | None = None
