"""Flatten component schemas and turn their properties into model fields.

Handles:
- $ref resolution against components.schemas
- allOf composition (properties overlaid in declaration order, required unioned)
- oneOf unions (member names only; inline members become the "any" type)
- allOf chains that loop back on themselves (ReferenceCycleError)
- default/example literals and pattern decoding for model fields
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .errors import ReferenceCycleError, UnresolvedReferenceError
from .gen_logging import get_logger
from .naming import NameSanitizer
from .type_mapper import TypeMapper, ref_name

logger = get_logger(__name__)

# HTML entities some spec exporters leave in regex patterns
_PATTERN_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&quot;", '"'),
    ("&amp;", "&"),
)


@dataclass
class ObjectSchema:
    """Flat object shape produced by merging an allOf chain."""

    properties: dict[str, Any] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    description: str = ""

    def merge(self, other: ObjectSchema) -> None:
        """Overlay ``other`` onto this schema (last writer wins per property)."""
        self.properties.update(other.properties)
        for name in other.required:
            if name not in self.required:
                self.required.append(name)


@dataclass
class UnionSchema:
    """A oneOf schema: one of several named alternatives."""

    members: list[str] = field(default_factory=list)
    description: str = ""


def node_kind(node: Any) -> str:
    """Classify a raw schema node.

    Returns one of "union", "composition", "reference", "object" or "scalar".
    """
    if not isinstance(node, dict):
        return "scalar"
    if "oneOf" in node:
        return "union"
    if "allOf" in node:
        return "composition"
    if "$ref" in node:
        return "reference"
    if node.get("type") == "object" or "properties" in node:
        return "object"
    return "scalar"


def as_object_schema(node: dict[str, Any]) -> ObjectSchema:
    """Read the object shape of a plain (non-composite) schema node."""
    return ObjectSchema(
        properties=dict(node.get("properties") or {}),
        required=list(dict.fromkeys(node.get("required") or [])),
        description=node.get("description") or "",
    )


class SchemaResolver:
    """Resolve named schemas into ObjectSchema/UnionSchema shapes."""

    def __init__(self, schemas: dict[str, Any], sanitizer: NameSanitizer) -> None:
        self.schemas = schemas
        self.sanitizer = sanitizer

    def resolve(
        self,
        name: str,
        node: Any,
    ) -> ObjectSchema | UnionSchema | Any:
        """Resolve one named schema.

        oneOf wins over allOf; anything that is neither comes back unchanged.
        """
        return self._resolve(node, [name])

    def _resolve(self, node: Any, chain: list[str]) -> ObjectSchema | UnionSchema | Any:
        kind = node_kind(node)
        if kind == "union":
            if "allOf" in node:
                logger.debug("Schema %s declares both oneOf and allOf; using oneOf.", chain[-1])
            logger.debug("Converting oneOf to a union marker...")
            return UnionSchema(
                members=[self._union_member(sub) for sub in node["oneOf"]],
                description=node.get("description") or "",
            )
        if kind == "composition":
            logger.debug("Merging allOf schema...")
            merged = ObjectSchema(description=node.get("description") or "")
            for sub in node["allOf"]:
                merged.merge(self._merge_member(sub, chain))
            return merged
        return node

    def _union_member(self, sub: Any) -> str:
        if isinstance(sub, dict) and sub.get("$ref"):
            return self.sanitizer.sanitize(ref_name(sub["$ref"]))
        return "Any"

    def _merge_member(self, sub: Any, chain: list[str]) -> ObjectSchema:
        """Resolve one allOf member down to an ObjectSchema."""
        if isinstance(sub, dict) and sub.get("$ref"):
            target = ref_name(sub["$ref"])
            if target in chain:
                raise ReferenceCycleError([*chain, target])
            if target not in self.schemas:
                raise UnresolvedReferenceError(sub["$ref"])
            resolved = self._resolve(self.schemas[target], [*chain, target])
        else:
            resolved = self._resolve(sub, chain)

        if isinstance(resolved, ObjectSchema):
            return resolved
        if isinstance(resolved, UnionSchema):
            # a union inside allOf has no properties to contribute
            return ObjectSchema()
        if isinstance(resolved, dict):
            return as_object_schema(resolved)
        return ObjectSchema()


def format_literal(value: Any) -> Any:
    """Render a default/example value as a Python literal where it matters."""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return value


def decode_pattern(pattern: str) -> str:
    """Decode HTML entities in a regex pattern."""
    for entity, char in _PATTERN_ENTITIES:
        pattern = pattern.replace(entity, char)
    return pattern


def pattern_literal(pattern: str) -> str:
    """Wrap a decoded pattern in a raw string literal."""
    decoded = decode_pattern(pattern)
    if decoded.endswith("\\"):
        return repr(decoded)
    if '"' not in decoded:
        return f'r"{decoded}"'
    if "'" not in decoded:
        return f"r'{decoded}'"
    return repr(decoded)


def build_properties(
    properties: dict[str, Any],
    required: list[str],
    type_mapper: TypeMapper,
    sanitizer: NameSanitizer,
) -> dict[str, dict[str, Any]]:
    """Build the per-field context for a model, in source order."""
    required_set = set(required)
    processed: dict[str, dict[str, Any]] = {}

    for prop_name, prop_schema in properties.items():
        if not isinstance(prop_schema, dict):
            prop_schema = {}
        sanitized_name = sanitizer.sanitize(prop_name)
        pattern = prop_schema.get("pattern")

        processed[sanitized_name] = {
            "original_name": prop_name,
            "name": sanitized_name,
            "type": type_mapper.map_schema(prop_schema),
            "default": format_literal(prop_schema.get("default")),
            "example": format_literal(prop_schema.get("example")),
            "regex": pattern_literal(pattern) if isinstance(pattern, str) else None,
            "description": prop_schema.get("description") or "",
            "enum": prop_schema.get("enum"),
            "required": prop_name in required_set,
        }

    return processed
