#!/usr/bin/env python3
import argparse
import difflib
import sys
from typing import List, Optional

import click
import pyperclip
import structlog
from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import DiffLexer
from rich.console import Console
from rich.markup import escape

from contextpatch.config import get_workspace_root, logging_enabled_from_env
from contextpatch.diff import parse_unified_diff
from contextpatch.errors import FileApplyError
from contextpatch.logger import configure_logging, get_logger
from contextpatch.workspace import (
    APPLIED_MESSAGE,
    REJECTED_MESSAGE,
    FileApplyResult,
    apply_diff_to_file,
    tool_response,
    write_file,
)


def read_diff_input(source: Optional[str], use_clipboard: bool) -> str:
    """Reads diff text from the clipboard, stdin ('-' or no argument) or a file."""
    if use_clipboard:
        return pyperclip.paste()
    if source is None or source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8") as f:
        return f.read()


def get_colored_diff(result: FileApplyResult) -> str:
    """Renders the change a patch makes as a highlighted unified diff."""
    name = str(result.path)
    preview = "".join(
        difflib.unified_diff(
            result.original_content.splitlines(keepends=True),
            result.new_content.splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
    )
    return highlight(preview, DiffLexer(), TerminalFormatter())


def _cmd_parse(args: argparse.Namespace, diff_text: str, console: Console) -> int:
    parsed = parse_unified_diff(diff_text)
    if parsed is None:
        console.print("[bold red]Failed to parse diff format[/bold red]")
        console.print(
            "[dim]   A diff needs a '--- path' header and at least one '@@ -a,b +c,d @@' hunk.[/dim]"
        )
        return 1

    console.print(f"[bold]--- {parsed.old_path}[/bold]")
    console.print(f"[bold]+++ {parsed.new_path}[/bold]")
    for i, hunk in enumerate(parsed.hunks, 1):
        console.print(
            f"\n[cyan]Hunk #{i}[/cyan] {hunk.header()} "
            f"[dim]({len(hunk.old_lines())} old / {len(hunk.new_lines())} new lines)[/dim]"
        )
        for line in hunk.lines:
            style = {"+": "green", "-": "red"}.get(line.kind.value, "dim")
            console.print(line.render(), style=style, markup=False, highlight=False)
    return 0


def _cmd_apply(args: argparse.Namespace, diff_text: str, console: Console) -> int:
    log = get_logger()
    workspace_root = get_workspace_root(args.root)

    try:
        result = apply_diff_to_file(diff_text, workspace_root, dry_run=True)
    except FileApplyError as e:
        log.info("cli_apply_failed", error=str(e))
        if args.json:
            print(tool_response(False, str(e)))
        else:
            console.print("❌ [bold red]Failed to apply patch:[/bold red] File left unchanged.")
            console.print(str(e), markup=False, highlight=False)
        return 1

    if not args.json:
        console.print(f"\n[bold]Proposed changes to {result.path}[/bold]\n")
        print(get_colored_diff(result))

    if args.dry_run:
        if args.json:
            print(tool_response(True, f"Diff applies cleanly to {result.path}"))
        else:
            console.print("[yellow]Dry run: no files were written.[/yellow]")
        return 0

    if not args.yes and not click.confirm(f"Apply changes to {result.path}?", default=True):
        log.info("cli_apply_rejected", path=str(result.path))
        if args.json:
            print(tool_response(False, REJECTED_MESSAGE))
        else:
            console.print("✗ Changes rejected")
        return 0

    try:
        write_file(result.path, result.new_content)
    except FileApplyError as e:
        log.info("cli_apply_failed", error=str(e))
        if args.json:
            print(tool_response(False, str(e)))
        else:
            console.print(f"❌ [bold red]{escape(str(e))}[/bold red]")
        return 1

    log.info("cli_apply_written", path=str(result.path))
    if args.json:
        print(tool_response(True, APPLIED_MESSAGE))
    else:
        console.print(f"✅ Patched [green]{result.path}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contextpatch",
        description="Apply unified diffs by context matching instead of line numbers.",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        help="Write JSONL event logs to the XDG state directory.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Include debug events in the log."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply a diff to the file it names.")
    apply_parser.add_argument(
        "diff", nargs="?", help="Diff file to read. Use '-' or omit for stdin."
    )
    apply_parser.add_argument(
        "-c", "--clipboard", action="store_true", help="Read the diff from the clipboard."
    )
    apply_parser.add_argument(
        "-r", "--root", help="Workspace root for relative paths in the diff."
    )
    apply_parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Show the result without writing."
    )
    apply_parser.add_argument(
        "-y", "--yes", action="store_true", help="Apply without asking for confirmation."
    )
    apply_parser.add_argument(
        "--json", action="store_true", help="Print a JSON tool response instead of text."
    )
    apply_parser.set_defaults(handler=_cmd_apply)

    parse_parser = subparsers.add_parser("parse", help="Show how a diff is parsed.")
    parse_parser.add_argument(
        "diff", nargs="?", help="Diff file to read. Use '-' or omit for stdin."
    )
    parse_parser.add_argument(
        "-c", "--clipboard", action="store_true", help="Read the diff from the clipboard."
    )
    parse_parser.set_defaults(handler=_cmd_parse)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    console = Console()
    args = build_parser().parse_args(argv)

    log_stream = None
    if args.log or logging_enabled_from_env():
        log_stream = configure_logging(verbose=args.verbose)

    try:
        try:
            diff_text = read_diff_input(args.diff, args.clipboard)
        except (OSError, UnicodeDecodeError, pyperclip.PyperclipException) as e:
            console.print(f"❌ [bold red]Could not read diff input:[/bold red] {escape(str(e))}")
            return 1
        return args.handler(args, diff_text, console)
    finally:
        if log_stream is not None:
            structlog.reset_defaults()
            log_stream.close()


if __name__ == "__main__":
    sys.exit(main())
