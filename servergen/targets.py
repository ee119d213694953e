"""Registry of generation targets.

A target bundles everything language-specific: reserved words, the type
table, import markers, the output file extension and its template
directory. Adding a language means registering another ``Target``; shared
code never branches on the target name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .errors import UnknownTargetError
from .naming import NameSanitizer
from .type_mapper import TypeMapper

TEMPLATE_ROOT = Path(__file__).parent / "templates"

# Python keywords plus the built-in constants the parser treats as keywords
PYTHON_RESERVED_WORDS = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
})

PYTHON_TYPE_TABLE: Mapping[str, Any] = MappingProxyType({
    "any": "Any",
    "integer": "int",
    "number": "float",
    "boolean": "bool",
    "string": "str",
    "object": "Dict[str, Any]",
    "array": "List[{item}]",
    "string_formats": MappingProxyType({
        "date": "datetime.date",
        "date-time": "datetime.datetime",
        "uuid": "uuid.UUID",
        "email": "EmailStr",
        "uri": "AnyUrl",
        "url": "AnyUrl",
        "byte": "bytes",
        "binary": "bytes",
        "password": "SecretStr",
    }),
})

# Substring found in a type token -> import line the model file needs
PYTHON_IMPORT_MARKERS: tuple[tuple[str, str], ...] = (
    ("List[", "from typing import List"),
    ("Dict[", "from typing import Dict"),
    ("AnyUrl", "from pydantic import AnyUrl"),
    ("EmailStr", "from pydantic import EmailStr"),
    ("SecretStr", "from pydantic import SecretStr"),
    ("datetime.date", "import datetime"),
    ("uuid.UUID", "import uuid"),
)

# apis/__init__.py: one import and one include_router line per tag module
PYTHON_ROUTES_AGGREGATOR = """\
from fastapi import APIRouter

{% for module in modules %}
from .{{ module }} import router as {{ module }}_router
{% endfor %}

router = APIRouter()

{% for module in modules %}
router.include_router({{ module }}_router)
{% endfor %}
"""

# models/__init__.py: re-export every generated model
PYTHON_MODELS_AGGREGATOR = """\
{% for model in models %}
from .{{ model.module }} import {{ model.class_name }}
{% endfor %}

__all__ = [
{% for model in models %}
    "{{ model.class_name }}",
{% endfor %}
]
"""


@dataclass(frozen=True)
class Target:
    """Immutable per-language configuration."""

    name: str
    display_name: str
    extension: str
    reserved_words: frozenset[str]
    type_table: Mapping[str, Any]
    import_markers: tuple[tuple[str, str], ...]
    template_dir: Path
    routes_aggregator: str
    models_aggregator: str
    model_import: str

    def sanitizer(self) -> NameSanitizer:
        return NameSanitizer(self.reserved_words)

    def type_mapper(self) -> TypeMapper:
        return TypeMapper(self.type_table, self.sanitizer())

    def filename(self, stem: str) -> str:
        """``main`` -> ``main.py`` for the python target."""
        return f"{stem}.{self.extension}"


PYTHON_FASTAPI = Target(
    name="python-fastapi",
    display_name="Python FastAPI",
    extension="py",
    reserved_words=PYTHON_RESERVED_WORDS,
    type_table=PYTHON_TYPE_TABLE,
    import_markers=PYTHON_IMPORT_MARKERS,
    template_dir=TEMPLATE_ROOT / "python-fastapi",
    routes_aggregator=PYTHON_ROUTES_AGGREGATOR,
    models_aggregator=PYTHON_MODELS_AGGREGATOR,
    model_import="from {module} import {name}",
)

_REGISTRY: dict[str, Target] = {}


def register_target(target: Target) -> None:
    """Register (or replace) a target under its name."""
    _REGISTRY[target.name] = target


def get_target(name: str) -> Target:
    """Look up a registered target by name."""
    try:
        return _REGISTRY[name]
    except KeyError:
        raise UnknownTargetError(name, available_targets()) from None


def available_targets() -> list[str]:
    return sorted(_REGISTRY)


register_target(PYTHON_FASTAPI)
