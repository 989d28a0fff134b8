#!/usr/bin/env python3
"""
OpenAPI 3.0.0 dialect.
"""

from typing import Any, Dict

from dialects import common
from region import default_region, server_template

name = "openapi-3.0.0"

REF_PREFIX = "#/components/schemas/"


def _parameter(param, ref_for) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "name": param.name,
        "in": param.location,
        "required": param.required,
        "schema": common.type_schema(param.type, ref_for),
    }
    if param.description:
        out["description"] = param.description
    return out


def _operation(endpoint, op) -> Dict[str, Any]:
    ref_for = common.ref_builder(REF_PREFIX, endpoint.name)
    out = common.operation_base(endpoint, op)
    out["parameters"] = [_parameter(p, ref_for) for p in op.parameters if p.location != "body"]

    body = op.body
    if body is not None:
        out["requestBody"] = {
            "required": body.required,
            "content": {"application/json": {"schema": common.type_schema(body.type, ref_for)}},
        }
        if body.description:
            out["requestBody"]["description"] = body.description

    success: Dict[str, Any] = {"description": "Success"}
    if op.return_type is not None:
        success["content"] = {
            "application/json": {"schema": common.type_schema(op.return_type, ref_for)}
        }
    out["responses"] = {"200": success, **common.error_responses(op)}
    return out


def _schemas(document) -> Dict[str, Any]:
    schemas = {}
    for endpoint in common.sorted_endpoints(document):
        ref_for = common.ref_builder(REF_PREFIX, endpoint.name)
        for dto_name in sorted(endpoint.dtos):
            dto = endpoint.dtos[dto_name]
            if dto.repaired:
                schemas[dto.full_name] = dto.snapshot_schema
            else:
                schemas[dto.full_name] = common.dto_schema(dto, ref_for)
    return schemas


def to_spec(document) -> Dict[str, Any]:
    """Build the OpenAPI 3.0.0 tree."""
    paths = common.build_paths(document, _operation)

    spec: Dict[str, Any] = {
        "openapi": "3.0.0",
        "info": {
            "title": common.TITLE,
            "description": document.description,
            "version": document.version,
        },
    }
    template = server_template(document.regions)
    if template is not None:
        codes = [r.code for r in document.regions]
        spec["servers"] = [{
            "url": template,
            "variables": {
                "platform": {
                    "enum": codes,
                    "default": default_region(document.regions).code,
                },
            },
        }]
    spec["tags"] = common.tags(document)
    spec["paths"] = paths
    spec["components"] = {
        "schemas": _schemas(document),
        "securitySchemes": {
            common.SECURITY_NAME: {
                "type": "apiKey",
                "in": "header",
                "name": common.API_KEY_HEADER,
            },
        },
    }
    spec["security"] = [{common.SECURITY_NAME: []}]
    return spec
