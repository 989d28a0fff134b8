#!/usr/bin/env python3
"""
Reader for previously published OpenAPI 3.0.0 builds.

The reconciler only needs the schema table, keyed by fully qualified DTO
name (``<endpoint>.<Dto>``), so that is what gets indexed.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

from utils.errors import SnapshotError


class HistoricalSnapshot:
    """A prior build's specification, indexed by fully qualified DTO name."""

    def __init__(self, oas: Dict[str, Any]):
        if not isinstance(oas, dict):
            raise SnapshotError("snapshot is not a JSON object")
        components = oas.get("components")
        schemas = components.get("schemas") if isinstance(components, dict) else None
        if not isinstance(schemas, dict):
            raise SnapshotError("snapshot has no components.schemas table")
        self.oas = oas
        self.schemas: Dict[str, Dict[str, Any]] = schemas

    @classmethod
    def from_json(cls, text: str) -> HistoricalSnapshot:
        try:
            return cls(json.loads(text))
        except ValueError as e:
            raise SnapshotError(f"snapshot is not valid JSON: {e}") from e

    @staticmethod
    def full_name(endpoint_name: str, dto_name: str) -> str:
        return f"{endpoint_name}.{dto_name}"

    def get(self, endpoint_name: str, dto_name: str) -> Optional[Dict[str, Any]]:
        """Schema of ``endpoint_name.dto_name`` or None if the build lacks it."""
        return self.schemas.get(self.full_name(endpoint_name, dto_name))

    def names(self) -> Iterable[str]:
        return self.schemas.keys()

    def __len__(self) -> int:
        return len(self.schemas)


def load_openapi_spec(file_path: str) -> Dict[str, Any]:
    """Load OpenAPI specification from JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)
