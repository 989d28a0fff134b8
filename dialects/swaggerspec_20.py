#!/usr/bin/env python3
"""
Swagger 2.0 dialect.

Swagger 2.0 has no server variables, so the default region's host is used.
Repaired DTOs come from the OpenAPI 3 build and have their references moved
from ``#/components/schemas/`` to ``#/definitions/``.
"""

from typing import Any, Dict

from dialects import common
from dialects.openapi_300 import REF_PREFIX as OPENAPI_REF_PREFIX
from region import default_region

name = "swaggerspec-2.0"

REF_PREFIX = "#/definitions/"


def _parameter(param, ref_for) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "name": param.name,
        "in": param.location,
        "required": param.required,
    }
    if param.description:
        out["description"] = param.description
    if param.location == "body":
        out["schema"] = common.type_schema(param.type, ref_for)
        return out
    schema = common.type_schema(param.type, ref_for)
    if "$ref" in schema:
        # Non-body parameters cannot reference a definition.
        schema = {"type": "string"}
    if schema.get("type") == "array":
        out["collectionFormat"] = "multi"
    out.update(schema)
    return out


def _operation(endpoint, op) -> Dict[str, Any]:
    ref_for = common.ref_builder(REF_PREFIX, endpoint.name)
    out = common.operation_base(endpoint, op)
    out["parameters"] = [_parameter(p, ref_for) for p in op.parameters]
    if op.body is not None:
        out["consumes"] = ["application/json"]
    out["produces"] = ["application/json"]

    success: Dict[str, Any] = {"description": "Success"}
    if op.return_type is not None:
        success["schema"] = common.type_schema(op.return_type, ref_for)
    out["responses"] = {"200": success, **common.error_responses(op)}
    return out


def _definitions(document) -> Dict[str, Any]:
    definitions = {}
    for endpoint in common.sorted_endpoints(document):
        ref_for = common.ref_builder(REF_PREFIX, endpoint.name)
        for dto_name in sorted(endpoint.dtos):
            dto = endpoint.dtos[dto_name]
            if dto.repaired:
                definitions[dto.full_name] = common.rewrite_refs(
                    dto.snapshot_schema, OPENAPI_REF_PREFIX, REF_PREFIX)
            else:
                definitions[dto.full_name] = common.dto_schema(dto, ref_for)
    return definitions


def to_spec(document) -> Dict[str, Any]:
    """Build the Swagger 2.0 tree."""
    paths = common.build_paths(document, _operation)

    spec: Dict[str, Any] = {
        "swagger": "2.0",
        "info": {
            "title": common.TITLE,
            "description": document.description,
            "version": document.version,
        },
    }
    region = default_region(document.regions)
    if region is not None:
        spec["host"] = region.host.lower()
    spec["schemes"] = ["https"]
    spec["tags"] = common.tags(document)
    spec["paths"] = paths
    spec["definitions"] = _definitions(document)
    spec["securityDefinitions"] = {
        common.SECURITY_NAME: {
            "type": "apiKey",
            "in": "header",
            "name": common.API_KEY_HEADER,
        },
    }
    spec["security"] = [{common.SECURITY_NAME: []}]
    return spec
