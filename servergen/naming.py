"""Turn schema, property, tag and operation names into target identifiers.

Rules for ``NameSanitizer.sanitize``:
  - every character outside [A-Za-z0-9_] becomes "_"
  - a reserved word gets a trailing "_"      (class  -> class_)
  - a leading digit gets a leading "_"       (2fa    -> _2fa)

Examples:
  "first-name"          -> first_name
  "from"                -> from_
  "123abc"              -> _123abc
  Pet / status          -> Pet_status_Enum   (enum_name)
  GET /pets/{petId}     -> get_pets_pet_id   (build_function_name)
  operationId listPets  -> list_pets         (build_function_name)
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_ILLEGAL_CHARS = re.compile(r"[^A-Za-z0-9_]")


class NameSanitizer:
    """Sanitize names against a fixed set of reserved words."""

    def __init__(self, reserved_words: Iterable[str]) -> None:
        self.reserved_words = frozenset(reserved_words)

    def sanitize(self, name: str) -> str:
        """Return a legal identifier for ``name``. Idempotent."""
        safe_name = _ILLEGAL_CHARS.sub("_", name) or "_"
        if safe_name in self.reserved_words:
            safe_name = f"{safe_name}_"
        if safe_name[0].isdigit():
            safe_name = f"_{safe_name}"
        return safe_name

    def enum_name(self, entity_name: str, prop_name: str) -> str:
        """Name of the enum synthesized for ``entity_name.prop_name``."""
        return self.sanitize(f"{entity_name}_{prop_name}_Enum")

    def module_name(self, name: str) -> str:
        """File/module stem for an entity or tag (lower-cased)."""
        return self.sanitize(name.lower())

    def enum_member_names(self, values: list) -> list[str]:
        """Upper-case member names for enum values, unique within the enum."""
        names: list[str] = []
        seen: dict[str, int] = {}
        for value in values:
            base = self.sanitize(_camel_to_snake(str(value)).upper())
            if base.strip("_") == "":
                base = "VALUE"
            if base in seen:
                seen[base] += 1
                name = f"{base}_{seen[base]}"
            else:
                seen[base] = 1
                name = base
            names.append(name)
        return names


def _camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    return re.sub(r"([a-z\d])([A-Z])", r"\1_\2", s1).lower()


def _sanitize_segment(segment: str) -> str:
    """Sanitize a path segment for use in a snake_case identifier."""
    name = _camel_to_snake(segment.strip("{}"))
    name = re.sub(r"[^a-z0-9_]", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def build_function_name(
    sanitizer: NameSanitizer,
    method: str,
    path: str,
    operation_id: str | None = None,
) -> str:
    """Build a route handler name from the operationId, or method + path."""
    if operation_id:
        return sanitizer.sanitize(_sanitize_segment(operation_id) or operation_id)

    parts = [_sanitize_segment(p) for p in path.split("/") if p]
    parts = [p for p in parts if p]
    if not parts:
        parts = ["root"]
    return sanitizer.sanitize("_".join([method.lower(), *parts]))
