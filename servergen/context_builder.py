"""Build Jinja2 template contexts from resolved schemas and paths.

Groups operations into route modules by tag, synthesizes enums for inline
`enum` properties, and works out which imports every generated file needs.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from .loader import resolve_ref
from .naming import NameSanitizer, build_function_name
from .schema_parser import ObjectSchema, UnionSchema, build_properties, format_literal
from .targets import Target
from .type_mapper import TypeMapper

# Tag used for operations that declare none
DEFAULT_TAG = "api"

_HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_JSON_CONTENT_TYPES = ("application/json", "text/json", "*/*")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

def extract_enums(
    entity_name: str,
    properties: dict[str, dict[str, Any]],
    sanitizer: NameSanitizer,
) -> list[dict[str, Any]]:
    """Create one enum per property with an inline `enum` list.

    The property's type is rewritten to the enum name in place.
    """
    created: list[dict[str, Any]] = []
    for prop_key, prop in properties.items():
        values = prop.get("enum")
        if not isinstance(values, list):
            continue
        enum_name = sanitizer.enum_name(entity_name, prop_key)
        created.append({
            "name": enum_name,
            "values": list(values),
            "members": list(zip(sanitizer.enum_member_names(values), values)),
        })
        prop["type"] = enum_name
    return created


def collect_imports(
    properties: dict[str, dict[str, Any]],
    import_markers: Iterable[tuple[str, str]],
) -> list[str]:
    """Import lines needed by the property types, deduplicated and sorted."""
    return imports_for_types((prop.get("type") for prop in properties.values()), import_markers)


def imports_for_types(
    type_tokens: Iterable[Any],
    import_markers: Iterable[tuple[str, str]],
) -> list[str]:
    """Map every marker found in ``type_tokens`` to its import line."""
    markers = list(import_markers)
    imports: set[str] = set()
    for token in type_tokens:
        if not isinstance(token, str):
            continue
        for marker, line in markers:
            if marker in token:
                imports.add(line)
    return sorted(imports)


def collect_model_imports(
    type_tokens: Iterable[str],
    entity_modules: dict[str, str],
    target: Target,
    exclude: str | None = None,
    package: str = ".",
) -> list[str]:
    """Import lines for generated models referenced from ``type_tokens``."""
    names: set[str] = set()
    for token in type_tokens:
        if not isinstance(token, str):
            continue
        for ident in _IDENTIFIER.findall(token):
            if ident in entity_modules and ident != exclude:
                names.add(ident)
    return sorted(
        target.model_import.format(module=f"{package}{entity_modules[name]}", name=name)
        for name in names
    )


def entity_module_map(schemas: dict[str, Any], sanitizer: NameSanitizer) -> dict[str, str]:
    """Map each entity's type token to the module stem it is written to."""
    return {sanitizer.sanitize(name): sanitizer.module_name(name) for name in schemas}


def build_model_context(
    name: str,
    schema: ObjectSchema,
    target: Target,
    type_mapper: TypeMapper,
    sanitizer: NameSanitizer,
    entity_modules: dict[str, str],
) -> dict[str, Any]:
    """Context for the model_class template."""
    properties = build_properties(schema.properties, schema.required, type_mapper, sanitizer)
    enums = extract_enums(name, properties, sanitizer)
    class_name = sanitizer.sanitize(name)
    return {
        "name": name,
        "class_name": class_name,
        "description": schema.description,
        "properties": properties,
        "required": list(schema.required),
        "imports": collect_imports(properties, target.import_markers),
        "model_imports": collect_model_imports(
            (p["type"] for p in properties.values()), entity_modules, target, exclude=class_name,
        ),
        "enums": enums,
        "has_aliases": any(p["name"] != p["original_name"] for p in properties.values()),
    }


def build_empty_model_context(name: str, sanitizer: NameSanitizer, description: str = "") -> dict[str, Any]:
    """Context for a schema that has no properties at all."""
    return {
        "name": name,
        "class_name": sanitizer.sanitize(name),
        "description": description,
        "properties": {},
        "required": [],
        "imports": [],
        "model_imports": [],
        "enums": [],
        "has_aliases": False,
    }


def build_union_context(
    name: str,
    schema: UnionSchema,
    target: Target,
    sanitizer: NameSanitizer,
    entity_modules: dict[str, str],
) -> dict[str, Any]:
    """Context for the one_of_union template."""
    class_name = sanitizer.sanitize(name)
    return {
        "name": name,
        "class_name": class_name,
        "description": schema.description,
        "union_types": list(schema.members),
        "model_imports": collect_model_imports(
            schema.members, entity_modules, target, exclude=class_name,
        ),
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

def group_operations(paths: dict[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """Partition operations by their first tag, keeping path/method order."""
    groups: dict[str, list[dict[str, Any]]] = {}
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if method.lower() not in _HTTP_METHODS or not isinstance(operation, dict):
                continue
            tags = operation.get("tags") or [DEFAULT_TAG]
            tag = str(tags[0])
            groups.setdefault(tag, []).append({
                "path": path,
                "method": method.lower(),
                "operation": operation,
            })
    return groups


def _json_schema(content: Any) -> dict[str, Any] | None:
    """Schema of the JSON entry of a `content` mapping, if any."""
    if not isinstance(content, dict):
        return None
    for content_type in _JSON_CONTENT_TYPES:
        entry = content.get(content_type)
        if isinstance(entry, dict) and isinstance(entry.get("schema"), dict):
            return entry["schema"]
    return None


def _response_schema(spec: dict[str, Any], operation: dict[str, Any]) -> dict[str, Any] | None:
    """Schema of the first 2xx response with JSON content."""
    responses = operation.get("responses") or {}
    # YAML loads bare status codes as ints
    for status, response in sorted(responses.items(), key=lambda item: str(item[0])):
        if not str(status).startswith("2"):
            continue
        if isinstance(response, dict) and "$ref" in response:
            response = resolve_ref(spec, response["$ref"])
        if isinstance(response, dict):
            schema = _json_schema(response.get("content"))
            if schema is not None:
                return schema
    return None


def _parameters(
    spec: dict[str, Any],
    path_item: dict[str, Any],
    operation: dict[str, Any],
    type_mapper: TypeMapper,
    sanitizer: NameSanitizer,
) -> list[dict[str, Any]]:
    """Path and query parameters, path-level ones overridden by the operation."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for param in [*(path_item.get("parameters") or []), *(operation.get("parameters") or [])]:
        if isinstance(param, dict) and "$ref" in param:
            param = resolve_ref(spec, param["$ref"])
        if not isinstance(param, dict) or "name" not in param:
            continue
        merged[(param["name"], param.get("in", "query"))] = param

    params = []
    for (name, location), param in merged.items():
        if location not in ("path", "query", "header"):
            continue
        schema = param.get("schema") or {}
        required = location == "path" or bool(param.get("required", False))
        params.append({
            "original_name": name,
            "name": sanitizer.sanitize(name),
            "location": location,
            "type": type_mapper.map_schema(schema),
            "required": required,
            "default": None if required else format_literal(schema.get("default")),
            "description": param.get("description") or "",
        })
    # required parameters first, declaration order otherwise
    params.sort(key=lambda p: not p["required"])
    return params


def build_operation_context(
    spec: dict[str, Any],
    member: dict[str, Any],
    type_mapper: TypeMapper,
    sanitizer: NameSanitizer,
) -> dict[str, Any]:
    """Context for one route handler."""
    path, method, operation = member["path"], member["method"], member["operation"]
    path_item = (spec.get("paths") or {}).get(path) or {}

    request_body = operation.get("requestBody") or {}
    if "$ref" in request_body:
        request_body = resolve_ref(spec, request_body["$ref"])
    body_schema = _json_schema(request_body.get("content"))
    response_schema = _response_schema(spec, operation)

    return {
        **member,
        "function_name": build_function_name(sanitizer, method, path, operation.get("operationId")),
        "summary": operation.get("summary") or "",
        "description": operation.get("description") or "",
        "parameters": _parameters(spec, path_item, operation, type_mapper, sanitizer),
        "body_type": type_mapper.map_schema(body_schema) if body_schema is not None else None,
        "body_required": bool(request_body.get("required", False)),
        "response_type": type_mapper.map_schema(response_schema) if response_schema is not None else None,
    }


def build_routes_context(
    spec: dict[str, Any],
    tag: str,
    members: list[dict[str, Any]],
    target: Target,
    type_mapper: TypeMapper,
    sanitizer: NameSanitizer,
    entity_modules: dict[str, str],
) -> dict[str, Any]:
    """Context for the api_routes template of one tag."""
    operations = [build_operation_context(spec, m, type_mapper, sanitizer) for m in members]

    type_tokens: list[str] = []
    for op in operations:
        type_tokens.extend(p["type"] for p in op["parameters"])
        type_tokens.extend(t for t in (op["body_type"], op["response_type"]) if t)

    return {
        "tag": tag,
        "module": sanitizer.module_name(tag),
        "operations": operations,
        "imports": imports_for_types(type_tokens, target.import_markers),
        "model_imports": collect_model_imports(type_tokens, entity_modules, target, package="models."),
    }
