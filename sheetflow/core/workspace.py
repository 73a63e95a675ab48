from __future__ import annotations

import os
from pathlib import Path

WORK_DIR_ENV = "SHEETFLOW_HOME"


def _project_root() -> Path:
    # In source layout, this file is under <root>/sheetflow/core
    return Path(__file__).resolve().parents[2]


def _work_dir() -> Path:
    env = os.getenv(WORK_DIR_ENV)
    if env:
        return Path(env)
    return _project_root() / "sheetflow" / "work"
