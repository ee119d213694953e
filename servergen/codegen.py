"""Render templates and write generated output.

One generation run, in order:
  1. create the output, models/ and apis/ directories
  2. load the target's templates
  3. main / requirements / README (each only if its template exists)
  4. one model file per component schema (model_class or one_of_union)
  5. one route file per operation tag, then the apis aggregator
  6. the models aggregator

A failure on any artifact is logged and aborts the run; files written
before it stay on disk.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import jinja2

from .context_builder import (
    build_empty_model_context,
    build_model_context,
    build_routes_context,
    build_union_context,
    entity_module_map,
    group_operations,
)
from .errors import GeneratorError, RenderError, TemplateLoadError
from .gen_logging import get_logger
from .loader import get_paths, get_schemas
from .naming import NameSanitizer
from .schema_parser import ObjectSchema, SchemaResolver, UnionSchema, as_object_schema, format_literal, node_kind
from .targets import Target, get_target

logger = get_logger(__name__)

Render = Callable[[dict[str, Any]], str]

# Top-level artifacts: template name -> output file name
_TOP_LEVEL_FILES: tuple[tuple[str, str], ...] = (
    ("main", "main.{ext}"),
    ("requirements", "requirements.txt"),
    ("README", "README.md"),
)


def _make_environment(template_dir: Path) -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["py_literal"] = format_literal
    return env


def load_templates(target: Target) -> dict[str, Render]:
    """Compile every ``<name>.<ext>.j2`` in the target's template directory.

    Returns a mapping of template name to render function. A name that is
    missing simply switches that artifact off.
    """
    template_dir = target.template_dir
    if not template_dir.is_dir():
        raise TemplateLoadError(f"Templates for language '{target.name}' not found in {template_dir}")

    env = _make_environment(template_dir)
    templates: dict[str, Render] = {}
    for file in sorted(template_dir.iterdir()):
        if not file.is_file() or file.suffix != ".j2":
            continue
        name = file.name.split(".", 1)[0]
        try:
            templates[name] = env.get_template(file.name).render
        except jinja2.TemplateError as e:
            raise TemplateLoadError(f"Failed to compile template {file.name}: {e}") from e
    return templates


def ensure_directory(path: Path) -> None:
    """Create ``path`` and its parents if needed."""
    path.mkdir(parents=True, exist_ok=True)


def default_file_mode() -> int:
    """Mode a plain ``open(path, "w")`` would create under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_file(path: Path, content: str) -> None:
    """Write ``content`` atomically: a reader sees the old file or the new one."""
    ensure_directory(path.parent)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # mkstemp creates 0600
        os.chmod(tmp_path, default_file_mode())
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class _Emitter:
    """Renders artifacts for one run and records what was written."""

    def __init__(self, output_dir: Path, log: logging.LoggerAdapter) -> None:
        self.output_dir = output_dir
        self.log = log
        self.written: list[Path] = []

    def emit(self, render: Render, context: dict[str, Any], relative: str, artifact: str) -> None:
        path = self.output_dir / relative
        try:
            write_file(path, render(context))
        except Exception as e:
            self.log.error("Error generating %s: %s", artifact, e)
            raise RenderError(artifact, e) from e
        self.written.append(path)


def _model_template(node: Any) -> str:
    """Template a component schema is rendered with."""
    return "one_of_union" if node_kind(node) == "union" else "model_class"


def _route_modules(
    groups: dict[str, list[dict[str, Any]]],
    sanitizer: NameSanitizer,
    log: logging.LoggerAdapter,
) -> dict[str, tuple[str, list[dict[str, Any]]]]:
    """Key tag groups by module stem; tags sharing a stem share one file.

    The first tag seen names the merged group.
    """
    modules: dict[str, tuple[str, list[dict[str, Any]]]] = {}
    for tag, members in groups.items():
        module = sanitizer.module_name(tag)
        if module in modules:
            first_tag, merged = modules[module]
            log.warning("Tags %s and %s both map to apis/%s; merging their routes.", first_tag, tag, module)
            merged.extend(members)
        else:
            modules[module] = (tag, list(members))
    return modules


def generate(
    spec: dict[str, Any],
    output_dir: str | Path,
    target_name: str = "python-fastapi",
) -> list[Path]:
    """Generate a server project for ``target_name`` from a loaded spec.

    Returns the paths written, in write order.
    """
    target = get_target(target_name)
    log = logging.LoggerAdapter(logger, {"target": target.name})
    log.info("Starting generation process...")
    try:
        written = _generate(spec, Path(output_dir), target, log)
    except GeneratorError as e:
        log.error("Generation failed: %s", e)
        raise
    log.info("%s Code Generation complete.", target.display_name)
    return written


def _generate(
    spec: dict[str, Any],
    output_dir: Path,
    target: Target,
    log: logging.LoggerAdapter,
) -> list[Path]:
    models_dir = output_dir / "models"
    apis_dir = output_dir / "apis"
    for directory in (output_dir, models_dir, apis_dir):
        ensure_directory(directory)

    try:
        templates = load_templates(target)
    except TemplateLoadError as e:
        log.error("Failed to load templates: %s", e)
        raise
    log.info("Templates loaded successfully.")
    string_env = _make_environment(target.template_dir)

    sanitizer = target.sanitizer()
    type_mapper = target.type_mapper()
    schemas = get_schemas(spec)
    paths = get_paths(spec)
    entity_modules = entity_module_map(schemas, sanitizer)
    emitter = _Emitter(output_dir, log)

    routes_enabled = bool(paths) and "api_routes" in templates
    route_modules = _route_modules(group_operations(paths), sanitizer, log) if routes_enabled else {}

    # Top-level files
    top_context = {
        **spec,
        "spec": spec,
        "title": (spec.get("info") or {}).get("title") or "API",
        "version": (spec.get("info") or {}).get("version") or "",
        "description": (spec.get("info") or {}).get("description") or "",
        "route_modules": list(route_modules),
        "model_modules": [
            {"module": entity_modules[sanitizer.sanitize(name)], "class_name": sanitizer.sanitize(name)}
            for name, node in schemas.items()
            if _model_template(node) in templates
        ],
    }
    for template_name, filename in _TOP_LEVEL_FILES:
        if template_name not in templates:
            continue
        filename = filename.format(ext=target.extension)
        log.info("Generating %s...", filename)
        emitter.emit(templates[template_name], top_context, filename, filename)

    # Models
    resolver = SchemaResolver(schemas, sanitizer)
    model_modules: list[dict[str, str]] = []
    for schema_name, schema_def in schemas.items():
        log.debug("Processing schema: %s...", schema_name)
        try:
            resolved = resolver.resolve(schema_name, schema_def)
        except GeneratorError as e:
            log.error("Error resolving schema %s: %s", schema_name, e)
            raise

        module = sanitizer.module_name(schema_name)
        relative = f"models/{target.filename(module)}"
        class_name = sanitizer.sanitize(schema_name)

        if isinstance(resolved, UnionSchema):
            log.debug("Detected oneOf union in schema: %s", schema_name)
            if "one_of_union" not in templates:
                continue
            context = build_union_context(schema_name, resolved, target, sanitizer, entity_modules)
            emitter.emit(templates["one_of_union"], context, relative, f"oneOf union model {schema_name}")
            model_modules.append({"module": module, "class_name": class_name})
            continue

        if not isinstance(resolved, ObjectSchema):
            resolved = as_object_schema(resolved if isinstance(resolved, dict) else {})

        if resolved.properties:
            log.debug("Building properties for: %s", schema_name)
            context = build_model_context(schema_name, resolved, target, type_mapper, sanitizer, entity_modules)
            artifact = f"model for {schema_name}"
            if "model_class" in templates:
                log.info("Rendering model_class template for: %s", schema_name)
        else:
            log.warning("Schema %s has no properties; creating empty model.", schema_name)
            context = build_empty_model_context(schema_name, sanitizer, resolved.description)
            artifact = f"empty model for {schema_name}"

        if "model_class" in templates:
            emitter.emit(templates["model_class"], context, relative, artifact)
            model_modules.append({"module": module, "class_name": class_name})

    # Routes
    if routes_enabled:
        log.info("Generating route files...")
        for module, (tag, members) in route_modules.items():
            log.debug("Rendering api_routes for tag: %s", tag)
            context = build_routes_context(spec, tag, members, target, type_mapper, sanitizer, entity_modules)
            relative = f"apis/{target.filename(module)}"
            emitter.emit(templates["api_routes"], context, relative, f"routes for tag {tag}")

        if route_modules:
            log.info("Generating aggregator file for multiple tags...")
            aggregator = string_env.from_string(target.routes_aggregator)
            context = {"modules": list(route_modules)}
            emitter.emit(aggregator.render, context, f"apis/{target.filename('__init__')}", "apis aggregator")
        else:
            log.info("No tagged paths found. Skipping aggregator file.")
    else:
        log.info("No paths or no api_routes template. Skipping routes.")

    if model_modules:
        aggregator = string_env.from_string(target.models_aggregator)
        emitter.emit(
            aggregator.render, {"models": model_modules},
            f"models/{target.filename('__init__')}", "models aggregator",
        )

    return emitter.written
