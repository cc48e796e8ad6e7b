import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from contextpatch.diff import strip_path_prefix
from contextpatch.errors import FileApplyError
from contextpatch.logger import get_logger
from contextpatch.patcher import apply_patch

APPLIED_MESSAGE = "Changes applied successfully"
REJECTED_MESSAGE = "User rejected the proposed changes"
DEV_NULL = "/dev/null"

_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:[\\/]")


@dataclass(frozen=True)
class FileApplyResult:
    path: Path
    original_content: str
    new_content: str

    @property
    def changed(self) -> bool:
        return self.original_content != self.new_content


def _header_paths(diff_text: str) -> Tuple[str, str]:
    """Paths named by the first '--- ' header and the '+++ ' header after it."""
    old_path: Optional[str] = None
    new_path = ""
    for line in diff_text.split("\n"):
        if old_path is None:
            if line.startswith("--- "):
                old_path = strip_path_prefix(line[4:])
        elif line.startswith("+++ "):
            new_path = strip_path_prefix(line[4:])
            break
        elif line.startswith("--- "):
            break
    return old_path or "", new_path


def is_new_file_diff(diff_text: str) -> bool:
    """True for diffs whose '--- ' header is /dev/null, i.e. that create a file."""
    return _header_paths(diff_text)[0] == DEV_NULL


def extract_target_path(diff_text: str) -> str:
    """
    Returns the path named by the first '--- ' header, without a/ or b/.

    For a diff that creates a file the '--- ' side is /dev/null, so the
    '+++ ' path is used instead.
    """
    old_path, new_path = _header_paths(diff_text)
    path = new_path if old_path == DEV_NULL else old_path
    if not path or path == DEV_NULL:
        raise FileApplyError("Could not determine file path from diff")
    return path


def _is_absolute(path: str) -> bool:
    return path.startswith("/") or bool(_WINDOWS_DRIVE_RE.match(path))


def normalize_target_path(path: str) -> str:
    """
    Restores the leading slash of absolute paths that lost it.

    Models often write '--- a/Users/me/x.py' for '/Users/me/x.py'; stripping
    the a/ prefix then leaves 'Users/me/x.py'.
    """
    if path.startswith(("/", ".")) or _WINDOWS_DRIVE_RE.match(path):
        return path
    if path.startswith(("Users/", "home/")):
        return "/" + path
    return path


def resolve_target_path(path: str, workspace_root: Path) -> Path:
    """Absolute paths are used as is; relative ones are joined to the workspace."""
    if _is_absolute(path):
        return Path(path)
    return Path(workspace_root) / path


def apply_diff_to_file(
    diff_text: str,
    workspace_root: Path,
    dry_run: bool = False,
    target_path: Optional[str] = None,
) -> FileApplyResult:
    """
    Reads the file a diff targets, applies the diff and writes the result back.

    The target is `target_path` when given, otherwise the path named by the
    diff's headers. A diff from /dev/null creates its target, which must not
    exist yet. With dry_run the new content is computed but nothing is
    written. Raises FileApplyError on any failure; the file is only touched
    after the whole diff has applied.
    """
    log = get_logger()
    display_path = normalize_target_path(target_path or extract_target_path(diff_text))
    file_path = resolve_target_path(display_path, workspace_root)
    creates_file = is_new_file_diff(diff_text)

    if creates_file:
        if file_path.exists():
            raise FileApplyError(f"Cannot create {display_path}: file already exists")
        original_content = ""
    else:
        try:
            original_content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileApplyError(f"Failed to read file {display_path}: {e}") from e

    result = apply_patch(original_content, diff_text)
    if not result.success:
        log.info("file_patch_failed", path=str(file_path))
        raise FileApplyError(result.error or "Failed to apply patch")

    if not dry_run:
        write_file(file_path, result.new_content, display_path)
        log.info("file_patched", path=str(file_path), created=creates_file)

    return FileApplyResult(
        path=file_path,
        original_content=original_content,
        new_content=result.new_content,
    )


def write_file(file_path: Path, content: str, display_path: Optional[str] = None):
    """Writes `content`, creating missing parent directories."""
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise FileApplyError(f"Failed to write file {display_path or file_path}: {e}") from e


def tool_response(success: bool, message: str) -> str:
    """JSON payload reported back to the model for an edit_file tool call."""
    return json.dumps({"success": success, "message": message})
