"""Command: tailsort config, which creates, validates and shows configuration files."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..config import build_pipeline_config, default_config_payload, discover_config_file, load_settings
from ..errors import InvalidConfiguration
from ..settings import CONFIG_FILE_NAMES

console = Console(width=200, highlight=False)


def _init(args: argparse.Namespace) -> None:
    target = Path(args.path) if args.path else Path.cwd() / CONFIG_FILE_NAMES[0]
    if target.exists() and not args.force:
        console.print(f"[yellow]{escape(str(target))} already exists.[/yellow] Use --force to overwrite.")
        raise SystemExit(1)
    target.write_text(json.dumps(default_config_payload(), indent=2) + "\n", encoding="utf-8")
    console.print(f"[green]Created[/green] {escape(str(target))}")


def _validate(args: argparse.Namespace) -> None:
    path = Path(args.path) if args.path else discover_config_file(Path.cwd())
    if path is None:
        console.print("[yellow]No configuration file found; defaults apply.[/yellow]")
        return
    try:
        build_pipeline_config(load_settings(config_path=path))
    except InvalidConfiguration as exc:
        console.print(f"[red]Invalid:[/red] {escape(str(path))}\n{escape(str(exc))}")
        raise SystemExit(2)
    console.print(f"[green]Valid:[/green] {escape(str(path))}")


def _show(args: argparse.Namespace) -> None:
    try:
        settings = load_settings(config_path=args.path)
    except InvalidConfiguration as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        raise SystemExit(2)
    console.print_json(data=settings.model_dump(by_alias=True))


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "config",
        help="Create, validate or show the configuration file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Manage .tailsort.json configuration.

Examples:
  tailsort config init
  tailsort config validate
  tailsort config show
        """,
    )
    actions = p.add_subparsers(dest="action", metavar="<action>")
    actions.required = True

    init = actions.add_parser("init", help="Write a configuration file with default values.")
    init.add_argument("--path", metavar="FILE", help=f"Target file (default: ./{CONFIG_FILE_NAMES[0]}).")
    init.add_argument("--force", action="store_true", help="Overwrite an existing file.")
    init.set_defaults(func=_init)

    validate = actions.add_parser("validate", help="Validate a configuration file.")
    validate.add_argument("path", nargs="?", metavar="FILE", help="File to validate (default: discovered file).")
    validate.set_defaults(func=_validate)

    show = actions.add_parser("show", help="Print the effective configuration.")
    show.add_argument("--path", metavar="FILE", help="Explicit configuration file.")
    show.set_defaults(func=_show)
