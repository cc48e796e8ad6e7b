import json
from pathlib import Path

import pytest

from contextpatch.errors import FileApplyError
from contextpatch.workspace import (
    APPLIED_MESSAGE,
    REJECTED_MESSAGE,
    apply_diff_to_file,
    extract_target_path,
    is_new_file_diff,
    normalize_target_path,
    resolve_target_path,
    tool_response,
)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.py").write_text("def main():\n    pass\n", encoding="utf-8")
    return tmp_path


MAIN_DIFF = """--- a/src/main.py
+++ b/src/main.py
@@ -10,2 +10,2 @@
 def main():
-    pass
+    print("Hello")
"""


def test_extract_target_path_strips_prefix():
    assert extract_target_path(MAIN_DIFF) == "src/main.py"


def test_extract_target_path_uses_first_header():
    diff = "--- /abs/one.py\n+++ /abs/one.py\n--- two.py\n"
    assert extract_target_path(diff) == "/abs/one.py"


@pytest.mark.parametrize("diff", ["", "@@ -1 +1 @@\n-a\n+b\n", "--- \n+++ x\n"])
def test_extract_target_path_fails_without_header(diff):
    with pytest.raises(FileApplyError, match="Could not determine file path from diff"):
        extract_target_path(diff)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Users/me/project/a.py", "/Users/me/project/a.py"),
        ("home/me/a.py", "/home/me/a.py"),
        ("/already/absolute.py", "/already/absolute.py"),
        ("./relative.py", "./relative.py"),
        ("src/relative.py", "src/relative.py"),
        ("C:/work/a.py", "C:/work/a.py"),
        ("C:\\work\\a.py", "C:\\work\\a.py"),
    ],
)
def test_normalize_target_path(raw, expected):
    assert normalize_target_path(raw) == expected


def test_resolve_relative_path_against_workspace(tmp_path):
    assert resolve_target_path("src/a.py", tmp_path) == tmp_path / "src" / "a.py"


def test_resolve_absolute_path_ignores_workspace(tmp_path):
    absolute = str(tmp_path / "x.py")
    assert resolve_target_path(absolute, Path("/elsewhere")) == Path(absolute)


def test_apply_diff_to_file_writes_result(project):
    result = apply_diff_to_file(MAIN_DIFF, project)

    expected = 'def main():\n    print("Hello")\n'
    assert result.path == project / "src" / "main.py"
    assert result.changed
    assert result.new_content == expected
    assert (project / "src" / "main.py").read_text(encoding="utf-8") == expected


def test_apply_diff_to_file_dry_run_does_not_write(project):
    result = apply_diff_to_file(MAIN_DIFF, project, dry_run=True)

    assert 'print("Hello")' in result.new_content
    assert (project / "src" / "main.py").read_text(encoding="utf-8") == "def main():\n    pass\n"


def test_apply_diff_to_file_with_absolute_header(project):
    target = project / "src" / "main.py"
    diff = MAIN_DIFF.replace("a/src/main.py", str(target)).replace("b/src/main.py", str(target))

    result = apply_diff_to_file(diff, Path("/nonexistent/root"))

    assert result.path == target
    assert 'print("Hello")' in target.read_text(encoding="utf-8")


def test_explicit_target_path_wins_over_header(project):
    (project / "other.py").write_text("def main():\n    pass\n", encoding="utf-8")

    result = apply_diff_to_file(MAIN_DIFF, project, target_path="other.py")

    assert result.path == project / "other.py"
    assert (project / "src" / "main.py").read_text(encoding="utf-8") == "def main():\n    pass\n"


def test_missing_file_reports_read_failure(tmp_path):
    with pytest.raises(FileApplyError, match="Failed to read file src/main.py"):
        apply_diff_to_file(MAIN_DIFF, tmp_path)


def test_context_mismatch_leaves_file_untouched(project):
    diff = MAIN_DIFF.replace(" def main():", " def other():")

    with pytest.raises(FileApplyError, match="Failed to find context in file"):
        apply_diff_to_file(diff, project)

    assert (project / "src" / "main.py").read_text(encoding="utf-8") == "def main():\n    pass\n"


def test_tool_response_payloads():
    assert json.loads(tool_response(True, APPLIED_MESSAGE)) == {
        "success": True,
        "message": "Changes applied successfully",
    }
    assert json.loads(tool_response(False, REJECTED_MESSAGE)) == {
        "success": False,
        "message": "User rejected the proposed changes",
    }


NEW_FILE_DIFF = """--- /dev/null
+++ b/src/util.py
@@ -0,0 +1,2 @@
+def helper():
+    return 42
"""


def test_extract_target_path_for_new_file_uses_new_header():
    assert extract_target_path(NEW_FILE_DIFF) == "src/util.py"
    assert is_new_file_diff(NEW_FILE_DIFF)
    assert not is_new_file_diff(MAIN_DIFF)


def test_extract_target_path_fails_when_both_sides_are_dev_null():
    with pytest.raises(FileApplyError, match="Could not determine file path from diff"):
        extract_target_path("--- /dev/null\n+++ /dev/null\n@@ -0,0 +1 @@\n+x\n")


def test_new_file_diff_creates_file(project):
    result = apply_diff_to_file(NEW_FILE_DIFF, project)

    target = project / "src" / "util.py"
    assert result.path == target
    assert result.original_content == ""
    assert target.read_text(encoding="utf-8") == "def helper():\n    return 42\n"


def test_new_file_diff_creates_parent_directories(tmp_path):
    diff = NEW_FILE_DIFF.replace("src/util.py", "deep/nested/util.py")

    apply_diff_to_file(diff, tmp_path)

    assert (tmp_path / "deep" / "nested" / "util.py").is_file()


def test_new_file_dry_run_does_not_create(project):
    result = apply_diff_to_file(NEW_FILE_DIFF, project, dry_run=True)

    assert result.changed
    assert not (project / "src" / "util.py").exists()


def test_new_file_diff_refuses_to_overwrite(project):
    (project / "src" / "util.py").write_text("keep me\n", encoding="utf-8")

    with pytest.raises(FileApplyError, match="file already exists"):
        apply_diff_to_file(NEW_FILE_DIFF, project)

    assert (project / "src" / "util.py").read_text(encoding="utf-8") == "keep me\n"
