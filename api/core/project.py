"""
Project directory layout.

The web assets live in `<root>/web`. The root is `PROJECT_ROOT` when set,
otherwise the working directory (or its parent when started from `src/` or
`api/`).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from . import settings

logger = logging.getLogger(__name__)

_NESTED_START_DIRS = {"src", "api"}


@dataclass(frozen=True)
class ProjectConfig:
    root_dir: Path
    web_dir: Path
    docs_dir: Path
    script_dir: Path


def project_root() -> Path:
    override = settings.project_root_override()
    if override:
        return Path(override)

    try:
        cwd = Path(os.getcwd())
    except OSError as exc:
        logger.warning("cwd_unavailable error=%s", exc)
        return Path(".")

    if cwd.name in _NESTED_START_DIRS:
        return cwd.parent
    return cwd


def get_project_config() -> ProjectConfig:
    root = project_root()
    return ProjectConfig(
        root_dir=root,
        web_dir=root / "web",
        docs_dir=root / "docs",
        script_dir=root / "script",
    )


def web_dir() -> Path:
    return get_project_config().web_dir
