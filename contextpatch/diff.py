import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from contextpatch.errors import DiffParseError
from contextpatch.logger import get_logger

HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


# --- Data Structures for Parsed Diffs ---


class LineKind(Enum):
    CONTEXT = " "
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True)
class Line:
    kind: LineKind
    text: str

    def render(self) -> str:
        return f"{self.kind.value}{self.text}"


@dataclass(frozen=True)
class Hunk:
    """A single 'hunk' of a unified diff. Header numbers are advisory only."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: Tuple[Line, ...] = ()

    def old_lines(self) -> List[str]:
        """Text the hunk expects to find in the file (context + removed)."""
        return [ln.text for ln in self.lines if ln.kind is not LineKind.ADDED]

    def new_lines(self) -> List[str]:
        """Text the hunk leaves behind (context + added)."""
        return [ln.text for ln in self.lines if ln.kind is not LineKind.REMOVED]

    def header(self) -> str:
        return (
            f"@@ -{self.old_start},{self.old_count} "
            f"+{self.new_start},{self.new_count} @@"
        )


@dataclass(frozen=True)
class ParsedDiff:
    old_path: str
    new_path: str
    hunks: Tuple[Hunk, ...]


# --- Line classification ---


class LineClass(Enum):
    OLD_HEADER = "old_header"
    NEW_HEADER = "new_header"
    HUNK_HEADER = "hunk_header"
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"
    BLANK = "blank"
    NOISE = "noise"


class ParserState(Enum):
    HEADER = "header"  # no hunk open yet
    HUNK = "hunk"  # collecting lines into the current hunk


_PREFIX_CLASSES = {
    "+": LineClass.ADDED,
    "-": LineClass.REMOVED,
    " ": LineClass.CONTEXT,
}

_BODY_KINDS = {
    LineClass.ADDED: LineKind.ADDED,
    LineClass.REMOVED: LineKind.REMOVED,
    LineClass.CONTEXT: LineKind.CONTEXT,
}


def classify_line(raw: str, position: int, total: int) -> LineClass:
    """
    Classifies one diff line on its own, without looking at parser state.

    `position` and `total` locate the line within the whole diff text: an
    empty line is blank context only when it is neither the first nor the
    last line.
    """
    if raw.startswith("--- "):
        return LineClass.OLD_HEADER
    if raw.startswith("+++ "):
        return LineClass.NEW_HEADER
    if HUNK_HEADER_RE.match(raw):
        return LineClass.HUNK_HEADER
    if raw == "":
        if 0 < position < total - 1:
            return LineClass.BLANK
        return LineClass.NOISE
    return _PREFIX_CLASSES.get(raw[0], LineClass.NOISE)


def strip_path_prefix(path: str) -> str:
    if path.startswith("a/"):
        path = path[2:]
    if path.startswith("b/"):
        path = path[2:]
    return path


def _parse_hunk_header(raw: str) -> Hunk:
    match = HUNK_HEADER_RE.match(raw)
    return Hunk(
        old_start=int(match.group(1)),
        old_count=int(match.group(2)) if match.group(2) else 1,
        new_start=int(match.group(3)),
        new_count=int(match.group(4)) if match.group(4) else 1,
    )


def parse_unified_diff(diff_text: str) -> Optional[ParsedDiff]:
    """
    Parses unified diff text into a ParsedDiff.

    Returns None when the text has no '--- ' header or no hunks. Malformed
    hunk bodies are not rejected here; they surface later as match failures.
    """
    raw_lines = diff_text.split("\n")
    total = len(raw_lines)
    old_path = ""
    new_path = ""
    hunks: List[Hunk] = []
    current_header: Optional[Hunk] = None
    current_lines: List[Line] = []
    state = ParserState.HEADER

    def close_hunk():
        if current_header is not None:
            hunks.append(replace(current_header, lines=tuple(current_lines)))

    for position, raw in enumerate(raw_lines):
        line_class = classify_line(raw, position, total)

        if line_class is LineClass.OLD_HEADER:
            old_path = strip_path_prefix(raw[4:])
            continue
        if line_class is LineClass.NEW_HEADER:
            new_path = strip_path_prefix(raw[4:])
            continue
        if line_class is LineClass.HUNK_HEADER:
            close_hunk()
            current_header = _parse_hunk_header(raw)
            current_lines = []
            state = ParserState.HUNK
            continue

        if state is not ParserState.HUNK:
            continue

        if line_class in _BODY_KINDS:
            current_lines.append(Line(_BODY_KINDS[line_class], raw[1:]))
        elif line_class is LineClass.BLANK:
            current_lines.append(Line(LineKind.CONTEXT, ""))
        # Everything else ('\ No newline at end of file', 'index ...') is ignored

    close_hunk()

    if not old_path or not hunks:
        get_logger().debug(
            "diff_rejected", has_header=bool(old_path), hunk_count=len(hunks)
        )
        return None

    get_logger().debug("diff_parsed", old_path=old_path, hunk_count=len(hunks))
    return ParsedDiff(old_path=old_path, new_path=new_path or old_path, hunks=tuple(hunks))


def parse_diff(diff_text: str) -> ParsedDiff:
    """Like parse_unified_diff, but raises DiffParseError instead of returning None."""
    parsed = parse_unified_diff(diff_text)
    if parsed is None:
        raise DiffParseError()
    return parsed
