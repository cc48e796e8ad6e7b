from dataclasses import dataclass
from typing import List, Optional

from contextpatch.diff import parse_diff
from contextpatch.errors import PatchError
from contextpatch.logger import get_logger
from contextpatch.planner import Replacement, compute_replacements


@dataclass(frozen=True)
class ApplyPatchResult:
    success: bool
    new_content: str
    error: Optional[str] = None


def apply_replacements(lines: List[str], replacements: List[Replacement]) -> List[str]:
    """
    Applies replacements to a copy of `lines`.

    Replacements are applied bottom-up so that splicing one region never
    shifts the start index of a replacement that is still pending.
    """
    result = lines[:]

    # Equal start indices are processed in diff order, so of two pure
    # additions the later one ends up above the earlier one.
    for replacement in sorted(replacements, key=lambda r: r.start_index, reverse=True):
        start = replacement.start_index
        result[start : start + replacement.delete_count] = replacement.insert_lines

    return result


def split_lines(content: str) -> List[str]:
    """Splits on newline, dropping the empty element left by a trailing terminator."""
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def apply_patch(original_content: str, diff_text: str) -> ApplyPatchResult:
    """
    Applies a unified diff to `original_content` using context matching only.

    Never raises for a bad diff: failures come back as success=False with the
    original content untouched and a diagnostic in `error`. Successful output
    always ends with exactly one newline.
    """
    log = get_logger()

    try:
        parsed = parse_diff(diff_text)
    except PatchError as e:
        log.info("patch_failed", stage="parse", error=str(e))
        return ApplyPatchResult(success=False, new_content=original_content, error=str(e))

    lines = split_lines(original_content)

    try:
        replacements = compute_replacements(lines, parsed.hunks)
    except PatchError as e:
        log.info(
            "patch_failed", stage="plan", path=parsed.old_path, hunks=len(parsed.hunks)
        )
        return ApplyPatchResult(success=False, new_content=original_content, error=str(e))

    new_lines = apply_replacements(lines, replacements)

    log.info(
        "patch_applied",
        path=parsed.old_path,
        hunks=len(parsed.hunks),
        lines_before=len(lines),
        lines_after=len(new_lines),
    )
    return ApplyPatchResult(success=True, new_content="\n".join(new_lines) + "\n")
