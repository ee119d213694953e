"""Load an OpenAPI description from disk.

Reads JSON or YAML, checks it is minimally well-formed and extracts paths
and component schemas. $refs are left in place; the schema parser resolves
them itself.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidSpecError, UnresolvedReferenceError

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_spec(path: str | Path) -> dict[str, Any]:
    """Load and validate the OpenAPI spec at ``path``."""
    spec_file = Path(path)
    try:
        with open(spec_file, encoding="utf-8") as f:
            if spec_file.suffix.lower() in _YAML_SUFFIXES:
                spec = yaml.safe_load(f)
            else:
                spec = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidSpecError(f"Could not parse {spec_file}: {e}") from e

    validate_spec(spec)
    return spec


def validate_spec(spec: Any) -> None:
    """Reject documents that are not shaped like an API description."""
    if not isinstance(spec, dict):
        raise InvalidSpecError("Invalid OpenAPI specification: top level must be a mapping.")
    if "openapi" not in spec and "swagger" not in spec:
        raise InvalidSpecError("Invalid OpenAPI specification: missing 'openapi' version field.")
    if not isinstance(spec.get("info"), dict):
        raise InvalidSpecError("Invalid OpenAPI specification: missing 'info' section.")
    for key in ("paths", "components"):
        if spec.get(key) is not None and not isinstance(spec[key], dict):
            raise InvalidSpecError(f"Invalid OpenAPI specification: '{key}' must be a mapping.")


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def resolve_ref(spec: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    parts = ref.lstrip("#/").split("/")
    node: Any = spec
    for part in parts:
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise UnresolvedReferenceError(ref)
        node = node[part]
    return node
