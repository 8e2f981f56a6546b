"""
Tests for template_engine.py module.

Tests cover:
- TemplateEngine: rendering, filters, strict and lenient undefined handling
- evaluate: cached default engine
"""

import pytest

from wordtemplate.errors import WordTemplateError
from wordtemplate.template_engine import TemplateEngine, default_engine, evaluate


class TestTemplateEngine:
    """Test TemplateEngine."""

    def test_simple_variable(self):
        """Test that a marker renders the model value."""
        assert TemplateEngine().process_template("${city}", {"city": "Paris"}) == "Paris"

    def test_attribute_and_filter(self):
        """Test nested lookups and Jinja2 filters."""
        engine = TemplateEngine()
        model = {"customer": {"name": "ada lovelace"}}
        assert engine("${ customer.name | title }", model) == "Ada Lovelace"

    def test_non_string_values(self):
        """Test that numbers are rendered as text."""
        assert TemplateEngine().process_template("${total}", {"total": 42}) == "42"

    def test_strict_undefined_raises(self):
        """Test that missing keys raise WordTemplateError with the cause chained."""
        with pytest.raises(WordTemplateError) as excinfo:
            TemplateEngine().process_template("${missing}", {})
        assert excinfo.value.__cause__ is not None

    def test_lenient_undefined_renders_empty(self):
        """Test that a lenient engine renders missing keys as empty text."""
        assert TemplateEngine(strict=False).process_template("${missing}", {}) == ""

    def test_syntax_error_raises(self):
        """Test that a malformed expression raises WordTemplateError."""
        with pytest.raises(WordTemplateError):
            TemplateEngine().create_template("${ name | }")

    def test_none_model(self):
        """Test that a None model behaves like an empty one."""
        assert TemplateEngine(strict=False).process_template("${x}", None) == ""


class TestEvaluate:
    """Test the module-level evaluate function."""

    def test_default_engine(self):
        """Test that evaluate uses the ${...} delimiters."""
        assert evaluate("${a}-${b}", {"a": 1, "b": 2}) == "1-2"

    def test_default_engine_is_strict(self):
        """Test that the default engine rejects missing keys."""
        with pytest.raises(WordTemplateError):
            evaluate("${nope}", {})

    def test_default_engine_is_reused(self):
        """Test that the default engine is built once and shared."""
        assert default_engine() is default_engine()
