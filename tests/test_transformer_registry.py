"""
Unit tests for the transformer registry

Tests:
- to_text: Value rendering shared by every handler
- TransformerRegistry: Named transforms, options per type, failure handling
"""

from datetime import datetime, timezone

import pytest

from gmail_notion.transformer.registry import TransformerRegistry, to_iso, to_text


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def registry():
    return TransformerRegistry()


# ============================================================================
# TEST: to_text
# ============================================================================


class TestToText:
    """Test value rendering"""

    def test_booleans(self):
        """Booleans render as lowercase words"""
        assert to_text(True) == "true"
        assert to_text(False) == "false"

    def test_integral_float(self):
        """Whole floats drop the decimal part"""
        assert to_text(3.0) == "3"
        assert to_text(2.5) == "2.5"

    def test_list_joined(self):
        """Lists join with comma and space"""
        assert to_text(["INBOX", "Work"]) == "INBOX, Work"

    def test_none_is_empty(self):
        assert to_text(None) == ""

    def test_naive_datetime_is_utc(self):
        """Naive datetimes are treated as UTC"""
        assert to_iso(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00+00:00"


# ============================================================================
# TEST: TransformerRegistry
# ============================================================================


class TestTransformerRegistry:
    """Test named transformations"""

    def test_remove_prefixes(self, registry):
        """Stacked Re:/Fwd: prefixes are removed"""
        assert registry.apply("Re: Fwd: Quarterly report", "remove_prefixes") == "Quarterly report"
        assert registry.apply("FW: Invoice", "remove_prefixes") == "Invoice"

    def test_remove_prefixes_keeps_inner_text(self, registry):
        """Only leading prefixes are removed"""
        assert registry.apply("About the re: thread", "remove_prefixes") == "About the re: thread"

    def test_truncate(self, registry):
        """Truncation keeps the limit including the ellipsis"""
        result = registry.apply("x" * 150, "truncate_100")
        assert len(result) == 100
        assert result.endswith("...")
        assert registry.apply("short", "truncate_100") == "short"

    def test_html_to_text(self, registry):
        """HTML is reduced to text, scripts dropped"""
        html = "<p>Hello<br>World</p><script>alert(1)</script>"
        assert registry.apply(html, "html_to_text") == "Hello\nWorld"

    def test_extract_links(self, registry):
        """All http(s) links are extracted"""
        text = "See https://example.com and http://docs.example.org/page for details"
        assert registry.apply(text, "extract_links") == "https://example.com, http://docs.example.org/page"

    def test_extract_links_without_links(self, registry):
        """Text without links is returned unchanged"""
        assert registry.apply("no links here", "extract_links") == "no links here"

    def test_extract_email(self, registry):
        """Address is pulled out of a display form"""
        assert registry.apply("John Doe <john@example.com>", "extract_email") == "john@example.com"

    def test_parse_date(self, registry):
        """Dates are normalized to UTC ISO-8601"""
        assert registry.apply("2024-01-15T10:30:00Z", "parse_date") == "2024-01-15T10:30:00+00:00"

    def test_parse_date_falls_back_to_now(self, registry):
        """Unparseable dates become the current time"""
        result = registry.apply("not a date", "parse_date")
        parsed = datetime.fromisoformat(result)
        assert abs((datetime.now(timezone.utc) - parsed).total_seconds()) < 5

    def test_count_items(self, registry):
        """Lists are counted after joining"""
        assert registry.apply(["a", "b", "c"], "count_items") == 3

    def test_extract_number(self, registry):
        """First number in the text"""
        result = registry.apply("Order 42 has 3 items", "extract_number")
        assert result == 42 and isinstance(result, int)
        assert registry.apply("Total: -12.50 EUR", "extract_number") == -12.5
        assert registry.apply("no digits", "extract_number") is None

    def test_empty_values_pass_through(self, registry):
        """Empty strings are not transformed"""
        assert registry.apply("", "remove_prefixes") == ""
        assert registry.apply(None, "truncate_100") is None

    def test_unknown_transformation_is_identity(self, registry):
        assert registry.apply("value", "does_not_exist") == "value"
        assert registry.get("does_not_exist")("value") == "value"

    def test_failing_transformation_returns_input(self, registry):
        """A transform that raises never propagates"""
        registry.transformers["broken"] = lambda x: 1 / 0
        assert registry.apply("value", "broken") == "value"

    def test_options_for_type(self, registry):
        """Each type has its own transformation options"""
        values = [o["value"] for o in registry.options_for("title")]
        assert values == ["none", "remove_prefixes", "truncate_100"]
        assert registry.options_for("checkbox") == [{"label": "No processing", "value": "none"}]

    def test_is_valid(self, registry):
        assert registry.is_valid("remove_prefixes", "title")
        assert not registry.is_valid("html_to_text", "title")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
