"""Tests for the target registry."""

from dataclasses import replace

import pytest

from servergen.errors import UnknownTargetError
from servergen.targets import PYTHON_FASTAPI, available_targets, get_target, register_target


class TestRegistry:
    """Test target lookup and registration."""

    def test_python_fastapi_registered(self):
        assert get_target("python-fastapi") is PYTHON_FASTAPI
        assert "python-fastapi" in available_targets()

    def test_unknown_target(self):
        with pytest.raises(UnknownTargetError) as exc_info:
            get_target("cobol-cics")
        assert exc_info.value.name == "cobol-cics"
        assert 'No generator found for language "cobol-cics"' in str(exc_info.value)

    def test_register_custom_target(self, monkeypatch):
        from servergen import targets

        monkeypatch.setattr(targets, "_REGISTRY", dict(targets._REGISTRY))
        custom = replace(PYTHON_FASTAPI, name="python-custom", reserved_words=frozenset({"model"}))
        register_target(custom)
        assert get_target("python-custom").sanitizer().sanitize("model") == "model_"
        assert get_target("python-fastapi").sanitizer().sanitize("model") == "model"

    def test_targets_do_not_share_state(self):
        other = replace(PYTHON_FASTAPI, type_table={**PYTHON_FASTAPI.type_table, "integer": "i64"})
        assert other.type_mapper().map_type("integer") == "i64"
        assert PYTHON_FASTAPI.type_mapper().map_type("integer") == "int"

    def test_filename(self):
        assert PYTHON_FASTAPI.filename("main") == "main.py"
