from dataclasses import dataclass, field
from typing import List, Sequence

from contextpatch.diff import Hunk
from contextpatch.errors import ContextNotFoundError
from contextpatch.logger import get_logger
from contextpatch.matcher import seek_sequence


@dataclass(frozen=True)
class Replacement:
    start_index: int
    delete_count: int
    insert_lines: List[str] = field(default_factory=list)


def _context_not_found(old_lines: List[str], original_lines: List[str]) -> ContextNotFoundError:
    expected = old_lines[:3]
    file_preview = original_lines[:5]
    message = (
        "Failed to find context in file.\n"
        f"Looking for ({len(old_lines)} lines):\n"
        + "\n".join(expected)
        + ("\n..." if len(old_lines) > 3 else "")
        + "\n\nFile contains (first 5 lines):\n"
        + "\n".join(file_preview)
        + ("\n..." if len(original_lines) > 5 else "")
    )
    return ContextNotFoundError(message, expected=expected, file_preview=file_preview)


def compute_replacements(original_lines: List[str], hunks: Sequence[Hunk]) -> List[Replacement]:
    """
    Resolves each hunk to a concrete Replacement by searching for its old
    lines in `original_lines`. Hunks are matched in diff order and the search
    cursor only moves forward.

    Raises ContextNotFoundError if any hunk cannot be located; no partial
    result is ever returned.
    """
    log = get_logger()
    replacements: List[Replacement] = []
    current_index = 0

    for i, hunk in enumerate(hunks):
        old_lines = hunk.old_lines()
        new_lines = hunk.new_lines()

        # Pure additions carry nothing to anchor on; they go to the end of the file.
        if not old_lines:
            replacements.append(Replacement(len(original_lines), 0, new_lines))
            log.debug("hunk_appended", hunk=i + 1, added=len(new_lines))
            continue

        pattern = old_lines
        found_index = seek_sequence(original_lines, pattern, current_index)

        # A trailing blank context line may stand for the file's final newline,
        # which is not an element of original_lines.
        if found_index == -1 and pattern[-1] == "":
            pattern = pattern[:-1]
            if new_lines and new_lines[-1] == "":
                new_lines = new_lines[:-1]
            found_index = seek_sequence(original_lines, pattern, current_index)
            if found_index != -1:
                log.debug("hunk_matched_after_trim", hunk=i + 1, index=found_index)

        if found_index == -1:
            log.debug("hunk_not_found", hunk=i + 1, cursor=current_index)
            raise _context_not_found(old_lines, original_lines)

        replacements.append(Replacement(found_index, len(pattern), new_lines))
        current_index = found_index + len(pattern)
        log.debug(
            "hunk_matched",
            hunk=i + 1,
            index=found_index,
            removed=len(pattern),
            inserted=len(new_lines),
        )

    return replacements
