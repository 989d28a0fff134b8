#!/usr/bin/env python3
"""
Sources for the previously published build.

Each store implements ``get_prior_build()``: it returns a HistoricalSnapshot,
None when the build does not exist, or raises SnapshotError.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from client import SchemaClient
from utils.errors import FetchError, SnapshotError
from utils.spec_parser import HistoricalSnapshot, load_openapi_spec

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    async def get_prior_build(self) -> Optional[HistoricalSnapshot]:
        ...


class GitSnapshotStore:
    """
    Reads the build from version control, e.g.
    ``git --no-pager show origin/gh-pages:openapi-3.0.0.min.json``.
    """

    def __init__(self, ref: str, cwd: Union[str, Path, None] = None):
        self.ref = ref
        self.cwd = cwd

    async def get_prior_build(self) -> Optional[HistoricalSnapshot]:
        logger.info(f"📜 Reading previous build from git: {self.ref}")
        try:
            proc = await asyncio.create_subprocess_exec(
                "git", "--no-pager", "show", self.ref,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise SnapshotError(f"could not run git: {e}") from e
        stdout, stderr = await proc.communicate()
        if proc.returncode != 0 or stderr.strip():
            raise SnapshotError(
                f"git show {self.ref} failed ({proc.returncode}): "
                f"{stderr.decode(errors='replace').strip()}"
            )
        try:
            text = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SnapshotError(f"git show {self.ref} returned non UTF-8 output: {e}") from e
        return HistoricalSnapshot.from_json(text)


class UrlSnapshotStore:
    """Fetches the published build over HTTP."""

    def __init__(self, client: SchemaClient, url: str):
        self.client = client
        self.url = url

    async def get_prior_build(self) -> Optional[HistoricalSnapshot]:
        logger.info(f"📜 Fetching previous build from {self.url}")
        try:
            text = await self.client.fetch(self.url)
        except FetchError as e:
            raise SnapshotError(str(e)) from e
        return HistoricalSnapshot.from_json(text)


class FileSnapshotStore:
    """Loads the build from a local JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def get_prior_build(self) -> Optional[HistoricalSnapshot]:
        if not self.path.exists():
            return None
        logger.info(f"📜 Loading previous build from {self.path}")
        try:
            return HistoricalSnapshot(load_openapi_spec(str(self.path)))
        except (OSError, ValueError) as e:
            raise SnapshotError(f"could not read {self.path}: {e}") from e
