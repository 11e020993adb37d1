"""Version-control revision lookup."""

import subprocess
from pathlib import Path
from typing import Optional

from provguard._internal.logging_config import get_logger


logger = get_logger(__name__)

UNKNOWN_COMMIT = "unknown"


def read_git_commit(repo_dir: Optional[Path] = None, timeout: float = 10.0) -> str:
    """
    Current ``HEAD`` commit of the repository containing ``repo_dir``.

    Fails soft: returns ``"unknown"`` when git is not installed, the directory
    is not inside a repository, or the command times out.
    """
    cwd = str(repo_dir) if repo_dir is not None else None
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Could not read git commit in {cwd or Path.cwd()}: {e}")
        return UNKNOWN_COMMIT

    commit = completed.stdout.strip()
    if not commit:
        logger.debug(f"git rev-parse returned no revision in {cwd or Path.cwd()}")
        return UNKNOWN_COMMIT
    return commit
