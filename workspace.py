#!/usr/bin/env python3
"""
Output directory staging.

The output directory is owned by one run. Preparing it removes every
non-hidden entry (so ``.git`` of a checked-out gh-pages branch survives) and
copies the viewer bundle into ``tool/``.
"""

import logging
import shutil
from pathlib import Path
from typing import Union

from config import PROJECT_ROOT

logger = logging.getLogger(__name__)

TOOL_DIR = "tool"


class Workspace:
    """An explicit output location; nothing here changes the process cwd."""

    def __init__(self,
                 root: Union[str, Path],
                 output: str = "out",
                 viewer_dir: Union[str, Path] = PROJECT_ROOT / "viewer"):
        self.root = Path(root)
        self.path = self.root / output
        self.viewer_dir = Path(viewer_dir)

    def prepare(self) -> Path:
        """Create, clear and seed the output directory."""
        if not self.viewer_dir.is_dir():
            raise FileNotFoundError(f"Viewer bundle not found: {self.viewer_dir}")

        self.path.mkdir(parents=True, exist_ok=True)
        removed = 0
        for entry in self.path.iterdir():
            if entry.name.startswith("."):
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        logger.info(f"🧹 Cleared {removed} stale entries from {self.path}")

        shutil.copytree(self.viewer_dir, self.path / TOOL_DIR)
        return self.path
