#!/usr/bin/env python3
"""
Spec emission.

One SpecDocument is built per run and handed to every registered dialect.
Each dialect tree is written four ways: pretty and minified JSON, block and
single-line flow YAML. All writes run concurrently; a failed write does not
stop the others, but the emitter raises WriteError once they have settled.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Sequence, Tuple

import aiofiles
import yaml

from dialects import openapi_300, swaggerspec_20
from endpoint import Endpoint
from region import Region
from utils.errors import WriteError

logger = logging.getLogger(__name__)

SPECS = [openapi_300, swaggerspec_20]


class _NoAliasDumper(yaml.SafeDumper):
    """Safe dumper that never emits anchors for repeated objects."""

    def ignore_aliases(self, data):
        return True


class _SingleLineDumper(_NoAliasDumper):
    """Keeps multi-line strings on one line as double-quoted escapes."""


def _represent_str_single_line(dumper, data):
    style = '"' if "\n" in data else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=style)


_SingleLineDumper.add_representer(str, _represent_str_single_line)


def to_json(tree: Any) -> str:
    return json.dumps(tree, indent=2, ensure_ascii=False)


def to_min_json(tree: Any) -> str:
    return json.dumps(tree, separators=(",", ":"), ensure_ascii=False)


def to_yaml(tree: Any) -> str:
    return yaml.dump(tree, Dumper=_NoAliasDumper, default_flow_style=False,
                     indent=2, sort_keys=False, allow_unicode=True)


def to_min_yaml(tree: Any) -> str:
    return yaml.dump(tree, Dumper=_SingleLineDumper, default_flow_style=True,
                     width=float("inf"), sort_keys=False, allow_unicode=True)


# suffix -> renderer, in output order
FORMATS: List[Tuple[str, Callable[[Any], str]]] = [
    (".json", to_json),
    (".min.json", to_min_json),
    (".yml", to_yaml),
    (".min.yml", to_min_yaml),
]


@dataclass
class SpecDocument:
    """Dialect-agnostic aggregate handed to every serializer."""
    endpoints: List[Endpoint]
    regions: List[Region]
    description: str = ""
    version: str = "0"


def artifact_names(specs: Sequence[Any] = SPECS) -> List[str]:
    return [spec.name + suffix for spec in specs for suffix, _ in FORMATS]


def build_description(names: Sequence[str]) -> str:
    """Static markdown shown at the top of every generated spec."""
    files = "\n".join(f"- `{n}` ([download file](../{n}), [view ui](?{n}))" for n in names)
    return f"""OpenAPI/Swagger version of the [Riot API](https://developer.riotgames.com/). Automatically generated daily.
## Download OpenAPI Spec File
The following versions of the Riot API spec file are available:
{files}
## Source Code
Source code on [GitHub](https://github.com/MingweiSamuel/riotapi-schema). Pull requests welcome!
## Automatically Generated
Rebuilt daily.
***
"""


class SpecEmitter:
    """Writes every dialect x format artifact into the output directory."""

    def __init__(self, output_dir: Path, specs: Sequence[Any] = SPECS):
        self.output_dir = Path(output_dir)
        self.specs = list(specs)

    def build_document(self, endpoints: List[Endpoint], regions: List[Region], version: str) -> SpecDocument:
        return SpecDocument(
            endpoints=endpoints,
            regions=regions,
            description=build_description(artifact_names(self.specs)),
            version=version,
        )

    async def _write(self, path: Path, content: str):
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)

    async def emit(self, endpoints: List[Endpoint], regions: List[Region], version: str) -> List[Path]:
        """
        Render and write all artifacts.

        Returns:
            Paths written, in dialect then format order

        Raises:
            WriteError: if any artifact failed to write
        """
        document = self.build_document(endpoints, regions, version)
        jobs: List[Tuple[Path, str]] = []
        for spec in self.specs:
            tree = spec.to_spec(document)
            for suffix, render in FORMATS:
                jobs.append((self.output_dir / (spec.name + suffix), render(tree)))

        logger.info(f"💾 Writing {len(jobs)} spec files to {self.output_dir}")
        results = await asyncio.gather(
            *(self._write(path, content) for path, content in jobs),
            return_exceptions=True,
        )

        written: List[Path] = []
        failures: List[Tuple[str, BaseException]] = []
        for (path, _), result in zip(jobs, results):
            if isinstance(result, BaseException):
                logger.error(f"❌ Failed to write {path.name}: {result}")
                failures.append((str(path), result))
            else:
                logger.info(f"   📄 {path.name}")
                written.append(path)

        if failures:
            raise WriteError(failures)
        return written
