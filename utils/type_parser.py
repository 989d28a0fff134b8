#!/usr/bin/env python3
"""
Documentation type strings -> JSON schema fragments.

The reference pages describe field and parameter types as strings such as
``long``, ``List[ParticipantDto]`` or ``Map[string, List[int]]``. These are
parsed into a small tree and converted to schema fragments; DTO names are
turned into references by a dialect-supplied callback.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Set, Tuple

from pydantic import BaseModel, Field

from utils.errors import ParseError

# =========================
#  Primitive mapping
# =========================
PRIMITIVES: Dict[str, Dict[str, Any]] = {
    "string": {"type": "string"},
    "int": {"type": "integer", "format": "int32"},
    "integer": {"type": "integer", "format": "int32"},
    "long": {"type": "integer", "format": "int64"},
    "float": {"type": "number", "format": "float"},
    "double": {"type": "number", "format": "double"},
    "boolean": {"type": "boolean"},
    "object": {"type": "object"},
}

CONTAINERS = {"list": 1, "set": 1, "map": 2}

_TOKEN = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_.\-]*|\[|\]|,)")


class TypeRef(BaseModel):
    """A parsed type expression."""
    name: str
    args: List["TypeRef"] = Field(default_factory=list)

    @property
    def kind(self) -> str:
        lowered = self.name.lower()
        if lowered in CONTAINERS:
            return lowered
        if lowered in PRIMITIVES:
            return "primitive"
        return "dto"

    def dto_names(self) -> Set[str]:
        """Every DTO identifier referenced by this type."""
        if self.kind == "dto":
            return {self.name}
        names: Set[str] = set()
        for arg in self.args:
            names |= arg.dto_names()
        return names

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(a) for a in self.args)}]"


TypeRef.model_rebuild()


def _tokenize(text: str) -> List[str]:
    tokens = []
    pos = 0
    text = text.strip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if not match:
            raise ParseError(f"unexpected character {text[pos]!r} in type {text!r}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def parse_type(text: str) -> TypeRef:
    """Parse a documentation type string into a TypeRef."""
    tokens = _tokenize(text or "")
    if not tokens:
        raise ParseError("empty type")

    def parse_at(i: int) -> Tuple[TypeRef, int]:
        if i >= len(tokens):
            raise ParseError(f"unbalanced brackets in {text!r}")
        name = tokens[i]
        if name in {"[", "]", ","}:
            raise ParseError(f"expected type name in {text!r}")
        i += 1
        args: List[TypeRef] = []
        if i < len(tokens) and tokens[i] == "[":
            i += 1
            while True:
                arg, i = parse_at(i)
                args.append(arg)
                if i >= len(tokens):
                    raise ParseError(f"unbalanced brackets in {text!r}")
                if tokens[i] == ",":
                    i += 1
                    continue
                if tokens[i] == "]":
                    i += 1
                    break
                raise ParseError(f"unexpected {tokens[i]!r} in {text!r}")
        arity = CONTAINERS.get(name.lower())
        if arity is not None and len(args) != arity:
            raise ParseError(f"{name} takes {arity} type argument(s) in {text!r}")
        return TypeRef(name=name, args=args), i

    ref, end = parse_at(0)
    if end != len(tokens):
        raise ParseError(f"trailing tokens in type {text!r}")
    return ref


def to_schema(ref: TypeRef, ref_for: Callable[[str], str]) -> Dict[str, Any]:
    """Convert a TypeRef into a JSON schema fragment."""
    kind = ref.kind
    if kind == "primitive":
        return dict(PRIMITIVES[ref.name.lower()])
    if kind == "dto":
        return {"$ref": ref_for(ref.name)}
    if kind in ("list", "set"):
        schema: Dict[str, Any] = {"type": "array", "items": to_schema(ref.args[0], ref_for)}
        if kind == "set":
            schema["uniqueItems"] = True
        return schema
    # map
    key, value = ref.args
    schema = {"type": "object", "additionalProperties": to_schema(value, ref_for)}
    key_schema = PRIMITIVES.get(key.name.lower(), {})
    if key_schema.get("type") == "integer":
        schema["x-key"] = dict(key_schema)
    return schema
