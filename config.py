#!/usr/bin/env python3
"""
Run configuration, read from the environment (and a .env file if present).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

PROJECT_ROOT = Path(__file__).resolve().parent

DEFAULT_SNAPSHOT_REF = "origin/gh-pages:openapi-3.0.0.min.json"


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Settings(BaseModel):
    """Settings for one pipeline run."""
    base_url: str = "https://developer.riotgames.com/"
    root_dir: Path = Path(".")
    output_dir: str = "out"
    viewer_dir: Path = PROJECT_ROOT / "viewer"
    snapshot_ref: str = DEFAULT_SNAPSHOT_REF
    snapshot_url: Optional[str] = None
    snapshot_file: Optional[Path] = None
    timeout: float = 30.0
    retries: int = 1

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """
        Build settings from RIOT_SCHEMA_* environment variables.

        Keyword overrides that are not None win over the environment.
        """
        load_dotenv()
        values = {
            "base_url": os.getenv("RIOT_SCHEMA_BASE_URL") or cls.model_fields["base_url"].default,
            "root_dir": Path(os.getenv("RIOT_SCHEMA_ROOT") or "."),
            "output_dir": os.getenv("RIOT_SCHEMA_OUTPUT") or "out",
            "viewer_dir": Path(os.getenv("RIOT_SCHEMA_VIEWER_DIR") or PROJECT_ROOT / "viewer"),
            "snapshot_ref": os.getenv("RIOT_SCHEMA_SNAPSHOT_REF") or DEFAULT_SNAPSHOT_REF,
            "snapshot_url": os.getenv("RIOT_SCHEMA_SNAPSHOT_URL") or None,
            "snapshot_file": os.getenv("RIOT_SCHEMA_SNAPSHOT_FILE") or None,
            "timeout": _env_number("RIOT_SCHEMA_TIMEOUT", 30.0, float),
            "retries": _env_number("RIOT_SCHEMA_RETRIES", 1, int),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values["retries"] < 0:
            raise ValueError("RIOT_SCHEMA_RETRIES must not be negative")
        return cls(**values)
