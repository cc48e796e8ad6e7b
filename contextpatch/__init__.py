from contextpatch.diff import Hunk, Line, LineKind, ParsedDiff, parse_unified_diff
from contextpatch.errors import (
    ContextNotFoundError,
    DiffParseError,
    FileApplyError,
    PatchError,
)
from contextpatch.patcher import ApplyPatchResult, apply_patch

__all__ = [
    "apply_patch",
    "parse_unified_diff",
    "ApplyPatchResult",
    "ParsedDiff",
    "Hunk",
    "Line",
    "LineKind",
    "PatchError",
    "DiffParseError",
    "ContextNotFoundError",
    "FileApplyError",
]
