import os
import sys
from pathlib import Path
from typing import Optional

WORKSPACE_ENV = "CONTEXTPATCH_WORKSPACE"
LOG_ENV = "CONTEXTPATCH_LOG"


def get_state_dir() -> Path:
    """Determines the state directory following XDG standards."""
    state_home = os.environ.get("XDG_STATE_HOME")
    if state_home:
        base_dir = Path(state_home)
    else:
        # Mac/Linux default: ~/.local/state
        # Windows default: %LOCALAPPDATA%
        if sys.platform == "win32":
            base_dir = Path(os.environ["LOCALAPPDATA"])
        else:
            base_dir = Path.home() / ".local" / "state"
    return base_dir / "contextpatch"


def get_log_file_path() -> Path:
    log_dir = get_state_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "events.jsonl"


def get_workspace_root(explicit: Optional[str] = None) -> Path:
    """
    Resolves the directory relative diff paths are joined to.

    Resolution order:
    1. Explicit value (the --root flag)
    2. CONTEXTPATCH_WORKSPACE environment variable
    3. Current working directory
    """
    if explicit:
        return Path(explicit).resolve()
    from_env = os.environ.get(WORKSPACE_ENV)
    if from_env:
        return Path(from_env).resolve()
    return Path.cwd()


def logging_enabled_from_env() -> bool:
    return os.environ.get(LOG_ENV, "").lower() in {"1", "true", "yes"}
