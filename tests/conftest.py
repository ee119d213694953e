"""Shared fixtures for servergen tests."""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable

import pytest

from servergen import codegen
from servergen.naming import NameSanitizer
from servergen.targets import PYTHON_FASTAPI
from servergen.type_mapper import TypeMapper


_PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0.0", "description": "A sample pet store."},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "summary": "List all pets",
                "tags": ["pets"],
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 20}},
                ],
                "responses": {
                    "200": {
                        "description": "A list of pets",
                        "content": {
                            "application/json": {
                                "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                            }
                        },
                    }
                },
            },
            "post": {
                "operationId": "createPet",
                "tags": ["pets", "admin"],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/NewPet"}},
                    },
                },
                "responses": {"201": {"description": "Created"}},
            },
        },
        "/pets/{pet-id}": {
            "parameters": [
                {"name": "pet-id", "in": "path", "required": True, "schema": {"type": "string", "format": "uuid"}},
            ],
            "delete": {
                "summary": "Delete a pet",
                "responses": {"204": {"description": "Deleted"}},
            },
        },
        "/users": {
            "get": {
                "operationId": "listUsers",
                "tags": ["users"],
                "responses": {
                    "200": {
                        "description": "Users",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/User"}},
                        },
                    }
                },
            },
        },
    },
    "components": {
        "schemas": {
            "Base": {
                "type": "object",
                "properties": {"id": {"type": "string", "format": "uuid"}},
                "required": ["id"],
            },
            "Pet": {
                "allOf": [
                    {"$ref": "#/components/schemas/Base"},
                    {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string", "default": "Rex"},
                            "status": {"type": "string", "enum": ["available", "sold"]},
                            "tags": {"type": "array", "items": {"type": "string"}},
                            "born": {"type": "string", "format": "date"},
                        },
                        "required": ["name"],
                    },
                ],
            },
            "NewPet": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "pattern": "^[a-z]+$"},
                    "class": {"type": "string"},
                },
            },
            "User": {
                "type": "object",
                "description": "A registered user.",
                "properties": {
                    "email": {"type": "string", "format": "email"},
                    "homepage": {"type": "string", "format": "uri"},
                    "password": {"type": "string", "format": "password"},
                    "pets": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                    "active": {"type": "boolean", "default": True},
                    "meta": {"type": "object"},
                },
                "required": ["email"],
            },
            "Animal": {
                "oneOf": [
                    {"$ref": "#/components/schemas/Pet"},
                    {"$ref": "#/components/schemas/User"},
                ],
            },
            "Empty": {},
        }
    },
}


@pytest.fixture
def petstore_spec() -> dict[str, Any]:
    """A fresh, mutable copy of the petstore spec."""
    return copy.deepcopy(_PETSTORE)


@pytest.fixture
def sanitizer() -> NameSanitizer:
    return PYTHON_FASTAPI.sanitizer()


@pytest.fixture
def type_mapper() -> TypeMapper:
    return PYTHON_FASTAPI.type_mapper()


@pytest.fixture
def fake_templates(monkeypatch) -> Callable[[dict[str, Callable[[dict], str]]], list[dict]]:
    """Replace the template set with plain callables.

    Usage::

        calls = fake_templates({"main": lambda ctx: "# main"})

    Every render call is recorded as ``{"name": ..., "context": ...}``.
    """
    calls: list[dict] = []

    def _install(templates: dict[str, Callable[[dict], str]]) -> list[dict]:
        def _recording(name, render):
            def _render(context):
                calls.append({"name": name, "context": context})
                return render(context)
            return _render

        wrapped = {name: _recording(name, render) for name, render in templates.items()}
        monkeypatch.setattr(codegen, "load_templates", lambda target: wrapped)
        return calls

    return _install


@pytest.fixture(autouse=True)
def _reset_servergen_logger():
    """Undo configure_logging() so handlers don't outlive a CliRunner's streams."""
    logger = logging.getLogger("servergen")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(level)
