"""Map OpenAPI (type, format, items, $ref) tuples to target type tokens.

The mapping is table-driven so each target supplies its own tokens:

    $ref "#/components/schemas/Pet"        -> Pet
    string / date-time                     -> datetime.datetime
    array of string                        -> List[str]
    array of array of $ref Pet             -> List[List[Pet]]
    object                                 -> Dict[str, Any]
    (no type)                              -> Any

References are only stringified, never followed, so the recursion is bounded
by the nesting depth of ``items``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .naming import NameSanitizer


def ref_name(ref: str) -> str:
    """Last segment of a $ref pointer ("#/components/schemas/Pet" -> "Pet")."""
    return ref.rsplit("/", 1)[-1]


class TypeMapper:
    """Deduce target type tokens from a type table.

    ``type_table`` keys:
        any, integer, number, boolean, string, object  -> plain tokens
        array                                          -> format string with {item}
        string_formats                                 -> {format: token}
    """

    def __init__(self, type_table: Mapping[str, Any], sanitizer: NameSanitizer) -> None:
        self.type_table = type_table
        self.sanitizer = sanitizer

    @property
    def any_type(self) -> str:
        return self.type_table["any"]

    def map_type(
        self,
        kind: str | None = None,
        fmt: str | None = None,
        items: Mapping[str, Any] | None = None,
        ref: str | None = None,
    ) -> str:
        """Return the type token for one schema tuple."""
        if ref:
            return self.sanitizer.sanitize(ref_name(ref))
        if not kind:
            return self.any_type

        table = self.type_table
        if kind in ("integer", "number", "boolean"):
            # number/float and number/double share one token
            return table[kind]
        if kind == "string":
            return table["string_formats"].get(fmt, table["string"])
        if kind == "array":
            item_type = self.map_schema(items) if items else self.any_type
            return table["array"].format(item=item_type)
        if kind == "object":
            return table["object"]
        return self.any_type

    def map_schema(self, schema: Mapping[str, Any] | None) -> str:
        """Shortcut for ``map_type`` reading the tuple from a raw schema node."""
        if not isinstance(schema, Mapping):
            return self.any_type
        return self.map_type(
            schema.get("type"),
            schema.get("format"),
            schema.get("items"),
            schema.get("$ref"),
        )
