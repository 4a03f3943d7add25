"""Commands: tailsort format and tailsort check, which sort utility classes in source files."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from ..config import TailsortSettings, build_pipeline_config, load_settings
from ..errors import InvalidConfiguration
from ..pipeline import PipelineConfig, format_source
from ..services.batch_service import BatchReport, process_paths
from ..services.export_service import build_issues, unified_diff
from ..utils import to_payload

console = Console(width=200, highlight=False)
err_console = Console(stderr=True, width=200, highlight=False)

STATUS_STYLE: dict[str, str] = {
    "changed":     "yellow",
    "written":     "green",
    "unchanged":   "dim",
    "unparseable": "magenta",
    "skipped":     "dim",
    "error":       "red",
}


def _split_list(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def _overrides(args: argparse.Namespace, base: TailsortSettings) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "file_extensions": _split_list(args.extensions),
        "threads": args.threads,
    }
    if args.functions:
        overrides["function_names"] = [*base.function_names, *(_split_list(args.functions) or [])]
    if args.exclude:
        overrides["ignore_paths"] = [*base.ignore_paths, *(_split_list(args.exclude) or [])]
    if args.preserve_duplicates:
        overrides["preserve_duplicates"] = True
    if args.sort_dynamic:
        overrides["sort_dynamic_segments"] = True
    return {key: value for key, value in overrides.items() if value is not None}


def _report_document(report: BatchReport) -> dict[str, Any]:
    files = [
        {
            "path": outcome.path,
            "status": outcome.status,
            "error": outcome.error,
            "counts": to_payload(outcome.counts),
            "diffs": to_payload(outcome.diffs),
        }
        for outcome in report.files
    ]
    payload = {"summary": report.summary(), "files": files}
    return {"mode": report.mode, **payload, "issues": build_issues(payload)}


def _render_text(report: BatchReport, show_diff: bool, show_stats: bool) -> None:
    for outcome in report.files:
        if outcome.status in {"unchanged", "skipped"}:
            continue
        label = {
            "changed": "would sort",
            "written": "sorted",
            "unparseable": "unparseable",
            "error": "error",
        }[outcome.status]
        line = Text(f"{label:<12}", style=STATUS_STYLE[outcome.status])
        line.append(outcome.path)
        if outcome.error:
            line.append(f"  ({outcome.error})", style="dim")
        elif outcome.diffs:
            line.append(f"  ({len(outcome.diffs)} class lists)", style="dim")
        console.print(line)

        if show_diff and outcome.original_text is not None and outcome.new_text is not None:
            console.print(Syntax(unified_diff(outcome.path, outcome.original_text, outcome.new_text), "diff"))

    summary = report.summary()
    if show_stats:
        table = Table(box=box.SIMPLE_HEAD, show_header=True, header_style="bold white", expand=False)
        table.add_column("METRIC", no_wrap=True)
        table.add_column("VALUE", justify="right")
        for key, value in summary.items():
            table.add_row(key.replace("_", " "), str(value))
        console.print(table)

    verb = "would be sorted" if report.mode != "write" else "sorted"
    console.print(
        f"  [dim]{summary['files_processed']} files checked, "
        f"{summary['files_changed']} {verb}, {summary['files_failed']} failed[/dim]"
    )


def _exit_code(report: BatchReport) -> int:
    summary = report.summary()
    if summary["files_failed"]:
        return 1
    if report.mode == "verify" and summary["files_changed"]:
        return 1
    return 0


def _run_stdin(args: argparse.Namespace, pipeline_config: PipelineConfig) -> None:
    text = sys.stdin.read()
    result = format_source(text, args.kind, pipeline_config, identifier="<stdin>")
    sys.stdout.write(result.new_text if result.changed else text)
    sys.stdout.flush()

    if result.reason == "unparseable_source":
        err_console.print(f"[magenta]unparseable input:[/magenta] {escape(result.error or '')}")
        raise SystemExit(1)
    if result.reason == "span_consistency_violation":
        err_console.print(f"[red]error:[/red] {escape(result.error or '')}")
        raise SystemExit(1)
    if args.mode == "verify" and result.changed:
        raise SystemExit(1)


def run(args: argparse.Namespace) -> None:
    try:
        base = load_settings(config_path=args.config)
        settings = load_settings(config_path=args.config, overrides=_overrides(args, base))
        pipeline_config = build_pipeline_config(settings)
    except InvalidConfiguration as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise SystemExit(2)

    if args.stdin:
        _run_stdin(args, pipeline_config)
        return

    if not args.paths:
        err_console.print("[red]No paths given.[/red] Pass files or directories, or use --stdin.")
        raise SystemExit(2)

    report = process_paths(
        args.paths,
        args.mode,
        settings,
        max_depth=args.max_depth,
        sequential=args.sequential,
        pipeline_config=pipeline_config,
    )

    if args.output == "json":
        sys.stdout.write(json.dumps(_report_document(report), indent=2, ensure_ascii=False) + "\n")
    else:
        _render_text(report, show_diff=args.diff, show_stats=args.stats)

    code = _exit_code(report)
    if code:
        raise SystemExit(code)


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("paths", nargs="*", metavar="PATH", help="Files or directories to process.")
    p.add_argument("--stdin", action="store_true", help="Read source from stdin and write the result to stdout.")
    p.add_argument(
        "--kind",
        default="tsx",
        choices=["tsx", "ts", "jsx", "js", "html", "vue", "svelte"],
        help="Source kind for --stdin (default: tsx).",
    )
    p.add_argument("--config", metavar="FILE", help="Explicit config file; skips discovery.")
    p.add_argument("--diff", action="store_true", help="Show a unified diff for every changed file.")
    p.add_argument("--stats", action="store_true", help="Print a summary table.")
    p.add_argument("--output", choices=["text", "json"], default="text", help="Report format.")
    p.add_argument("--extensions", metavar="LIST", help="Comma-separated extensions, e.g. tsx,jsx.")
    p.add_argument("--exclude", metavar="LIST", help="Comma-separated names or glob patterns to skip.")
    p.add_argument("--functions", metavar="LIST", help="Extra comma-separated class-merging function names.")
    p.add_argument("--max-depth", type=int, metavar="N", help="Directory levels to descend (0 = top level only).")
    p.add_argument("--threads", type=int, metavar="N", help="Worker threads for batch runs.")
    p.add_argument("--sequential", action="store_true", help="Process files one by one.")
    p.add_argument("--preserve-duplicates", action="store_true", help="Keep repeated class tokens.")
    p.add_argument("--sort-dynamic", action="store_true", help="Also sort static parts of interpolated templates.")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "format",
        help="Sort utility classes in files (preview, write or verify).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Sort utility classes in JSX/TSX, Vue, Svelte and HTML sources.

Examples:
  tailsort format src/ --diff
  tailsort format src/ --mode write
  tailsort format --stdin --kind tsx < Button.tsx
        """,
    )
    p.add_argument(
        "--mode",
        choices=["check", "write", "verify"],
        default="check",
        help="check: preview, write: rewrite files, verify: exit 1 when anything is unsorted.",
    )
    _add_common_arguments(p)
    p.set_defaults(func=run)

    c = subparsers.add_parser(
        "check",
        help="Verify that utility classes are sorted; exit 1 otherwise.",
        description="Equivalent to 'tailsort format --mode verify'.",
    )
    _add_common_arguments(c)
    c.set_defaults(func=run, mode="verify")
