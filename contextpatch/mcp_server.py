import sys
from pathlib import Path
from typing import Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel, Field

from contextpatch.config import get_workspace_root
from contextpatch.errors import FileApplyError
from contextpatch.workspace import APPLIED_MESSAGE, apply_diff_to_file, tool_response

# Initialize FastMCP server
mcp = FastMCP("contextpatch")


class EditFileRequest(BaseModel):
    file_path: str = Field(
        "",
        description="Full path to the file to modify. Defaults to the path in the diff's '---' header.",
    )
    diff: str = Field(
        ...,
        description=(
            "A unified diff with '--- '/'+++ ' headers and '@@' hunks. "
            "Include 1-3 context lines around every change; line numbers are ignored."
        ),
    )
    description: str = Field("", description="A brief explanation of the change.")


def _get_project_root_override() -> Optional[str]:
    """Resolves the project root from CLI args."""
    args = sys.argv[1:]
    for i, arg in enumerate(args):
        if arg == "--project-root" and i + 1 < len(args):
            return args[i + 1]
        if arg.startswith("--project-root="):
            return arg.split("=", 1)[1]
    return None


def _get_project_root() -> Path:
    return get_workspace_root(_get_project_root_override())


@mcp.tool()
def edit_file(request: EditFileRequest) -> str:
    """
    Applies a unified diff to a file using context matching.
    Line numbers in '@@' headers are ignored; every hunk is located by its
    context and removed lines. If ANY hunk cannot be located, the file is
    left unchanged and the error explains what was searched for.

    Args:
        request: The file, diff and a short description of the change.
    """
    try:
        result = apply_diff_to_file(
            request.diff,
            _get_project_root(),
            target_path=request.file_path or None,
        )
    except FileApplyError as e:
        return tool_response(False, str(e))
    return tool_response(True, f"{APPLIED_MESSAGE}: {result.path}")


@mcp.tool()
def check_diff(request: EditFileRequest) -> str:
    """
    Checks whether a diff would apply cleanly, without writing anything.

    Args:
        request: The file and diff to check.
    """
    try:
        result = apply_diff_to_file(
            request.diff,
            _get_project_root(),
            dry_run=True,
            target_path=request.file_path or None,
        )
    except FileApplyError as e:
        return tool_response(False, str(e))
    if not result.changed:
        return tool_response(True, f"Diff applies to {result.path} but changes nothing")
    return tool_response(True, f"Diff applies cleanly to {result.path}")


def main():
    mcp.run()


if __name__ == "__main__":
    main()
