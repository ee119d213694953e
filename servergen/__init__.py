"""Generate server projects from OpenAPI descriptions."""

from __future__ import annotations

from pathlib import Path

from .codegen import generate
from .errors import (
    GeneratorError,
    InvalidSpecError,
    ReferenceCycleError,
    RenderError,
    TemplateLoadError,
    UnknownTargetError,
    UnresolvedReferenceError,
)
from .loader import load_spec

__version__ = "1.0.4"


def generate_code(spec_path: str | Path, language: str, output_dir: str | Path) -> list[Path]:
    """Load the spec at ``spec_path`` and generate ``language`` code into ``output_dir``."""
    spec = load_spec(spec_path)
    return generate(spec, output_dir, language)


__all__ = [
    "GeneratorError",
    "InvalidSpecError",
    "ReferenceCycleError",
    "RenderError",
    "TemplateLoadError",
    "UnknownTargetError",
    "UnresolvedReferenceError",
    "generate",
    "generate_code",
    "load_spec",
]
