"""Tests for the naming module."""

import string

import pytest

from servergen.naming import NameSanitizer, build_function_name
from servergen.targets import PYTHON_RESERVED_WORDS


class TestSanitize:
    """Test identifier sanitizing against Python reserved words."""

    def test_plain_name_unchanged(self, sanitizer):
        assert sanitizer.sanitize("petName") == "petName"

    def test_illegal_characters_replaced(self, sanitizer):
        assert sanitizer.sanitize("first-name") == "first_name"
        assert sanitizer.sanitize("a.b c/d") == "a_b_c_d"

    def test_reserved_word_suffixed(self, sanitizer):
        assert sanitizer.sanitize("class") == "class_"
        assert sanitizer.sanitize("from") == "from_"
        assert sanitizer.sanitize("None") == "None_"

    def test_reserved_words_are_case_sensitive(self, sanitizer):
        assert sanitizer.sanitize("Class") == "Class"

    def test_leading_digit_prefixed(self, sanitizer):
        assert sanitizer.sanitize("123abc") == "_123abc"
        assert sanitizer.sanitize("2fa-code") == "_2fa_code"

    def test_empty_name(self, sanitizer):
        assert sanitizer.sanitize("") == "_"

    def test_non_ascii_replaced(self, sanitizer):
        assert sanitizer.sanitize("café") == "caf_"

    @pytest.mark.parametrize("name", [
        "class", "123", "a-b", "", "_", "None", "x y z", "9class", "class_", "ok",
        string.punctuation, string.printable.strip(),
    ])
    def test_idempotent(self, sanitizer, name):
        once = sanitizer.sanitize(name)
        assert sanitizer.sanitize(once) == once

    @pytest.mark.parametrize("name", sorted(PYTHON_RESERVED_WORDS) + ["1", "42abc", "-x"])
    def test_result_is_identifier(self, sanitizer, name):
        result = sanitizer.sanitize(name)
        assert result.isidentifier()
        assert result not in PYTHON_RESERVED_WORDS
        assert not result[0].isdigit()

    def test_custom_reserved_words(self):
        sanitizer = NameSanitizer({"string"})
        assert sanitizer.sanitize("string") == "string_"
        assert sanitizer.sanitize("class") == "class"


class TestEnumNames:
    """Test names for synthesized enums and their members."""

    def test_enum_name(self, sanitizer):
        assert sanitizer.enum_name("Pet", "status") == "Pet_status_Enum"

    def test_enum_name_sanitized(self, sanitizer):
        assert sanitizer.enum_name("Pet", "sale-state") == "Pet_sale_state_Enum"

    def test_member_names_upper_case(self, sanitizer):
        assert sanitizer.enum_member_names(["available", "inProgress", "on-hold"]) == [
            "AVAILABLE", "IN_PROGRESS", "ON_HOLD",
        ]

    def test_numeric_members(self, sanitizer):
        assert sanitizer.enum_member_names([1, 2]) == ["_1", "_2"]

    def test_duplicate_members_suffixed(self, sanitizer):
        assert sanitizer.enum_member_names(["a", "A", ""]) == ["A", "A_2", "VALUE"]


class TestModuleName:
    """Test module stems for entities and tags."""

    def test_lower_cased(self, sanitizer):
        assert sanitizer.module_name("PetStore") == "petstore"

    def test_spaces_sanitized(self, sanitizer):
        assert sanitizer.module_name("Pet Store") == "pet_store"

    def test_reserved_after_lowering(self, sanitizer):
        assert sanitizer.module_name("Import") == "import_"


class TestBuildFunctionName:
    """Test route handler names from operationId or method + path."""

    def test_operation_id_snake_cased(self, sanitizer):
        assert build_function_name(sanitizer, "get", "/pets", "listPets") == "list_pets"

    def test_path_fallback(self, sanitizer):
        assert build_function_name(sanitizer, "GET", "/pets/{petId}") == "get_pets_pet_id"

    def test_root_path(self, sanitizer):
        assert build_function_name(sanitizer, "get", "/") == "get_root"

    def test_dashed_segments(self, sanitizer):
        assert build_function_name(sanitizer, "delete", "/pets/{pet-id}") == "delete_pets_pet_id"

    def test_reserved_operation_id(self, sanitizer):
        assert build_function_name(sanitizer, "post", "/x", "import") == "import_"

    def test_valid_python_identifier(self, sanitizer):
        name = build_function_name(sanitizer, "get", "/api/v0/files/{base64SubdirectoryName}/2024")
        assert name.isidentifier()
