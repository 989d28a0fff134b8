#!/usr/bin/env python3
"""
Error taxonomy for the schema pipeline.

Fatal errors (FetchError, ParseError) unwind the whole run. SnapshotError is
caught by the reconciler and degrades to unresolved DTOs. WriteError is raised
once every artifact write has settled.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


class SchemaError(Exception):
    """Base class for every pipeline failure."""


class FetchError(SchemaError):
    """Network failure or non-2xx response after the retry policy gave up."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Failed to fetch {url}: {cause}")


class ParseError(SchemaError):
    """A required element, attribute or field is absent or malformed."""

    def __init__(self, message: str, location: str = ""):
        self.location = location
        super().__init__(f"{location}: {message}" if location else message)


class SnapshotError(SchemaError):
    """The previously published build could not be read."""


class WriteError(SchemaError):
    """One or more artifacts failed to persist."""

    def __init__(self, failures: List[Tuple[str, BaseException]]):
        self.failures = failures
        names = ", ".join(path for path, _ in failures)
        super().__init__(f"Failed to write {len(failures)} artifact(s): {names}")


@dataclass
class ReconciliationGap:
    """A DTO that is still unresolved after reconciliation."""
    endpoint: str
    dto_name: str
    reason: str

    @property
    def full_name(self) -> str:
        return f"{self.endpoint}.{self.dto_name}"
