#!/usr/bin/env python3
"""
Endpoint model and detail-page parser.

One Endpoint is built from the embedded HTML of an ``api-details/<name>``
envelope. The page lists operations (``li.operation``) and, inside their
"Response Classes" blocks, the DTO tables those operations return. Nested
DTOs are sometimes referenced without being inlined; those show up in
``Endpoint.list_missing_dtos()`` and are repaired later from the previous
build.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Set

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, Field

from utils.errors import ParseError
from utils.html_parser import body_rows, node_text, require_attr, require_one
from utils.path_handler import PathParameterHandler
from utils.type_parser import TypeRef, parse_type

logger = logging.getLogger(__name__)

PARAMETER_BLOCKS = {
    "path parameters": "path",
    "query parameters": "query",
    "header parameters": "header",
    "body parameters": "body",
}

RETURN_VALUE = re.compile(r"^\s*Return value:\s*(.+?)\s*$", re.IGNORECASE)
VOID_TYPES = {"", "void", "none"}


# =========================
#  Model
# =========================
class DtoField(BaseModel):
    name: str
    type: TypeRef
    description: str = ""


class Dto(BaseModel):
    """
    A named structural type owned by one endpoint.

    Either parsed from the live page (``properties``) or repaired from the
    previous build (``snapshot_schema``, kept verbatim).
    """
    endpoint_name: str
    name: str
    description: str = ""
    properties: List[DtoField] = Field(default_factory=list)
    snapshot_schema: Optional[Dict[str, Any]] = None

    @property
    def full_name(self) -> str:
        return f"{self.endpoint_name}.{self.name}"

    @property
    def repaired(self) -> bool:
        return self.snapshot_schema is not None

    def referenced_dtos(self) -> Set[str]:
        names: Set[str] = set()
        for f in self.properties:
            names |= f.type.dto_names()
        return names


class Parameter(BaseModel):
    name: str
    location: str  # path, query, header, body
    type: TypeRef
    required: bool = False
    description: str = ""


class Operation(BaseModel):
    """One documented HTTP operation of an endpoint."""
    operation_id: str
    method: str
    path: str
    summary: str = ""
    description: str = ""
    parameters: List[Parameter] = Field(default_factory=list)
    return_type: Optional[TypeRef] = None
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def body(self) -> Optional[Parameter]:
        return next((p for p in self.parameters if p.location == "body"), None)

    def referenced_dtos(self) -> Set[str]:
        names: Set[str] = set()
        if self.return_type is not None:
            names |= self.return_type.dto_names()
        for p in self.parameters:
            names |= p.type.dto_names()
        return names


class Endpoint:
    """An API endpoint group: its description, operations and DTOs."""

    def __init__(self,
                 name: str,
                 description: str = "",
                 operations: Optional[List[Operation]] = None,
                 dtos: Optional[List[Dto]] = None):
        self.name = name
        self.description = description
        self.operations: List[Operation] = operations or []
        self.dtos: Dict[str, Dto] = {}
        for dto in dtos or []:
            self.dtos[dto.name] = dto

    def list_missing_dtos(self) -> List[str]:
        """
        DTO names referenced by the parsed page but not defined on it.

        Only operations and parsed DTOs are inspected; references made by
        repaired DTOs are not followed.
        """
        referenced: Set[str] = set()
        for op in self.operations:
            referenced |= op.referenced_dtos()
        for dto in self.dtos.values():
            if not dto.repaired:
                referenced |= dto.referenced_dtos()
        return sorted(referenced - set(self.dtos))

    def add_old_dto(self, dto_name: str, schema: Dict[str, Any]) -> Dto:
        """Inject a DTO definition taken verbatim from the previous build."""
        dto = Dto(
            endpoint_name=self.name,
            name=dto_name,
            description=schema.get("description", "") if isinstance(schema, dict) else "",
            snapshot_schema=schema,
        )
        self.dtos[dto_name] = dto
        return dto

    def __repr__(self) -> str:
        return f"Endpoint({self.name!r}, operations={len(self.operations)}, dtos={len(self.dtos)})"


# =========================
#  Detail page parser
# =========================
class EndpointParser:
    """Parses the embedded HTML of one endpoint detail page."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self.dtos: Dict[str, Dto] = {}

    def parse(self, document: BeautifulSoup) -> Endpoint:
        operations = []
        for element in document.select("li.operation"):
            operations.append(self._parse_operation(element))
        if not operations:
            raise ParseError("no operations found", self.name)
        logger.debug(f"Parsed {self.name}: {len(operations)} operations, {len(self.dtos)} DTOs")
        return Endpoint(self.name, self.description, operations, list(self.dtos.values()))

    def _parse_operation(self, element: Tag) -> Operation:
        op_name = require_attr(element, "id", self.name)
        location = f"{self.name}.{op_name}"
        method = node_text(require_one(element, "span.http_method", "HTTP method", location)).upper()
        path = PathParameterHandler.normalize(node_text(require_one(element, "span.path", "path", location)))
        if not method or not path:
            raise ParseError("empty HTTP method or path", location)

        op = Operation(
            operation_id=location,
            method=method,
            path=path,
            summary=node_text(element.select_one("ul.options a")),
        )
        for block in element.select("div.api_block"):
            title = node_text(block.find("h4")).lower()
            if title == "implementation notes":
                op.description = self._block_text(block)
            elif title == "response classes":
                op.return_type = self._parse_response_classes(block, location)
            elif title == "response errors":
                op.errors = self._parse_errors(block)
            elif title in PARAMETER_BLOCKS:
                op.parameters.extend(self._parse_parameters(block, PARAMETER_BLOCKS[title], location))
            else:
                logger.debug(f"Skipping block '{title}' in {location}")

        bodies = [p.name for p in op.parameters if p.location == "body"]
        if len(bodies) > 1:
            raise ParseError(f"more than one body parameter: {', '.join(bodies)}", location)
        self._add_undocumented_path_parameters(op)
        return op

    @staticmethod
    def _block_text(block: Tag) -> str:
        paragraphs = [node_text(p) for p in block.find_all("p")]
        return "\n\n".join(p for p in paragraphs if p)

    def _parse_response_classes(self, block: Tag, location: str) -> Optional[TypeRef]:
        return_type: Optional[TypeRef] = None
        for h5 in block.find_all("h5"):
            match = RETURN_VALUE.match(node_text(h5))
            if match:
                type_text = match.group(1)
                if type_text.lower() not in VOID_TYPES:
                    return_type = parse_type(type_text)
        for body in block.select("div.response_body"):
            self._parse_dto(body, location)
        return return_type

    def _parse_dto(self, body: Tag, location: str):
        header = node_text(require_one(body, "h5", "DTO header", location))
        name, _, desc = header.partition(" - ")
        name = name.strip()
        if not name:
            raise ParseError("empty DTO name", location)
        if name in self.dtos:
            # Shared DTOs are repeated under every operation that returns them.
            return
        table = require_one(body, "table", f"{name} field table", location)
        fields = []
        for row in body_rows(table):
            cells = row.find_all("td")
            if len(cells) < 2:
                raise ParseError(f"malformed field row in {name}", location)
            fields.append(DtoField(
                name=node_text(cells[0]),
                type=parse_type(node_text(cells[1])),
                description=node_text(cells[2]) if len(cells) > 2 else "",
            ))
        self.dtos[name] = Dto(
            endpoint_name=self.name,
            name=name,
            description=desc.strip(),
            properties=fields,
        )

    @staticmethod
    def _parse_errors(block: Tag) -> Dict[str, str]:
        errors = {}
        table = block.find("table")
        if table is None:
            return errors
        for row in body_rows(table):
            cells = row.find_all("td")
            code = node_text(cells[0]) if cells else ""
            if code:
                errors[code] = node_text(cells[1]) if len(cells) > 1 else ""
        return errors

    def _parse_parameters(self, block: Tag, where: str, location: str) -> List[Parameter]:
        table = require_one(block, "table", f"{where} parameter table", location)
        params = []
        for row in body_rows(table):
            cells = row.find_all("td")
            if len(cells) < 2:
                raise ParseError(f"malformed {where} parameter row", location)
            name_cell = cells[0]
            # Columns are name | [value] | type | description
            if len(cells) >= 3:
                type_cell, desc_cell = cells[-2], cells[-1]
            else:
                type_cell, desc_cell = cells[1], None
            params.append(Parameter(
                name=node_text(name_cell),
                location=where,
                type=parse_type(node_text(type_cell)),
                required=where == "path" or "required" in (name_cell.get("class") or []),
                description=node_text(desc_cell),
            ))
        return params

    @staticmethod
    def _add_undocumented_path_parameters(op: Operation):
        documented = {p.name for p in op.parameters if p.location == "path"}
        for param in PathParameterHandler.extract_parameters(op.path):
            if param.name not in documented:
                logger.debug(f"Path parameter {param.name} of {op.operation_id} not documented, assuming string")
                op.parameters.append(Parameter(
                    name=param.name,
                    location="path",
                    type=TypeRef(name="string"),
                    required=True,
                ))
                documented.add(param.name)


def parse_endpoint(document: BeautifulSoup, name: str, description: str = "") -> Endpoint:
    """Parse one detail page document into an Endpoint."""
    return EndpointParser(name, description).parse(document)
