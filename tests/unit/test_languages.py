"""Tests for explainer.languages."""

from __future__ import annotations

import pytest

from explainer.languages import LANGUAGES, get_language, language_for_path


class TestLanguages:
    def test_catalog_ids(self):
        assert [lang.id for lang in LANGUAGES] == ["javascript", "python", "java", "cpp"]

    def test_get_language(self):
        lang = get_language("python")
        assert lang.extension == ".py"
        assert lang.default_code == 'print("Hello World!")'

    def test_unknown_language_raises(self):
        with pytest.raises(ValueError, match="Unknown language"):
            get_language("cobol")

    @pytest.mark.parametrize(
        "path,expected",
        [("main.js", "javascript"), ("src/Main.java", "java"), ("a.CPP", "cpp")],
    )
    def test_language_for_path(self, path, expected):
        assert language_for_path(path).id == expected

    def test_language_for_unknown_path(self):
        assert language_for_path("README") is None
        assert language_for_path("notes.txt") is None
