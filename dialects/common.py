#!/usr/bin/env python3
"""
Pieces shared by the dialect serializers.

A dialect only decides where schemas live (``ref_prefix``) and how parameters
and responses are shaped; the walk over endpoints, operations and DTOs is
the same for every dialect so their content cannot diverge.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Tuple

from utils.type_parser import TypeRef, to_schema

logger = logging.getLogger(__name__)

TITLE = "Riot API"
API_KEY_HEADER = "X-Riot-Token"
SECURITY_NAME = "api_key"


def ref_builder(prefix: str, endpoint_name: str) -> Callable[[str], str]:
    """DTO names are scoped to their endpoint: ``<prefix><endpoint>.<Dto>``."""
    return lambda dto_name: f"{prefix}{endpoint_name}.{dto_name}"


def sorted_endpoints(document) -> List[Any]:
    return sorted(document.endpoints, key=lambda e: e.name)


def iter_operations(document) -> Iterator[Tuple[Any, Any]]:
    for endpoint in sorted_endpoints(document):
        for op in endpoint.operations:
            yield endpoint, op


def build_paths(document, build_operation: Callable[[Any, Any], Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """
    Path item table of every operation.

    When two operations share a path and method the first one (endpoints in
    name order) is kept and the other is reported.
    """
    paths: Dict[str, Dict[str, Any]] = {}
    for endpoint, op in iter_operations(document):
        methods = paths.setdefault(op.path, {})
        method = op.method.lower()
        if method in methods:
            logger.warning(f"⚠️ Duplicate operation {op.method} {op.path}: "
                           f"keeping {methods[method]['operationId']}, dropping {op.operation_id}")
            continue
        methods[method] = build_operation(endpoint, op)
    return paths


def tags(document) -> List[Dict[str, str]]:
    return [
        {"name": endpoint.name, "description": endpoint.description}
        for endpoint in sorted_endpoints(document)
    ]


def type_schema(type_ref: TypeRef, ref_for: Callable[[str], str]) -> Dict[str, Any]:
    return to_schema(type_ref, ref_for)


def dto_schema(dto, ref_for: Callable[[str], str]) -> Dict[str, Any]:
    """JSON schema of a parsed DTO."""
    properties = {}
    for prop in dto.properties:
        schema = type_schema(prop.type, ref_for)
        if prop.description and "$ref" not in schema:
            schema["description"] = prop.description
        properties[prop.name] = schema
    schema: Dict[str, Any] = {"type": "object", "title": dto.name}
    if dto.description:
        schema["description"] = dto.description
    schema["properties"] = properties
    return schema


def rewrite_refs(node: Any, old_prefix: str, new_prefix: str) -> Any:
    """Deep copy of ``node`` with ``$ref`` prefixes replaced."""
    if isinstance(node, dict):
        out = {}
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str) and value.startswith(old_prefix):
                out[key] = new_prefix + value[len(old_prefix):]
            else:
                out[key] = rewrite_refs(value, old_prefix, new_prefix)
        return out
    if isinstance(node, list):
        return [rewrite_refs(item, old_prefix, new_prefix) for item in node]
    return node


def operation_base(endpoint, op) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "tags": [endpoint.name],
        "operationId": op.operation_id,
    }
    if op.summary:
        out["summary"] = op.summary
    if op.description:
        out["description"] = op.description
    return out


def error_responses(op) -> Dict[str, Dict[str, str]]:
    return {
        code: {"description": reason or code}
        for code, reason in op.errors.items()
    }
