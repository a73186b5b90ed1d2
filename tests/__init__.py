"""RecoSphere test suite.

Puts the repository root on ``sys.path`` so ``recosphere`` and the shared
doubles under ``tests.recosphere.support`` import without an install step.
"""

from __future__ import annotations

import sys
from pathlib import Path

_REPO_ROOT: Path = Path(__file__).resolve().parent.parent


def _ensure_repo_on_path() -> None:
    repo_root_str = str(_REPO_ROOT)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_on_path()
