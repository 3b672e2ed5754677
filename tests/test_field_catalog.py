"""
Unit tests for the source side of a mapping

Tests:
- SourceRecord: Building records from decoded messages, derived fields
- TargetField: Parsing Notion property objects
- FieldCatalog: Compatibility tables and recommendations
"""

from datetime import datetime

import pytest

from gmail_notion.mapper.field_catalog import BACK_LINK_FIELD, FieldCatalog
from gmail_notion.schema.models import DatabaseSchema, SourceRecord, TargetField


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def catalog():
    return FieldCatalog()


@pytest.fixture
def message():
    """Decoded Gmail message"""
    return {
        "id": "18c2f0a1b2c3d4e5",
        "threadId": "18c2f0a1b2c3d4e5",
        "subject": "Re: Quarterly report",
        "from": '"Jane Roe" <jane@example.com>',
        "to": "team@example.com",
        "date": "Mon, 15 Jan 2024 10:30:00 +0000",
        "plainBody": "Numbers attached.",
        "labels": "INBOX, IMPORTANT",
        "attachments": [
            {"name": "report.pdf", "size": 1024, "url": "https://files.example.com/report.pdf"},
            {"name": "data.csv", "size": 512, "url": "https://files.example.com/data.csv"},
        ],
    }


# ============================================================================
# TEST: SourceRecord
# ============================================================================


class TestSourceRecord:
    """Test record construction"""

    def test_from_dict_basic_fields(self, message):
        """Message fields are read from catalog keys"""
        record = SourceRecord.from_dict(message)

        assert record.message_id == "18c2f0a1b2c3d4e5"
        assert record.subject == "Re: Quarterly report"
        assert record.to == "team@example.com"
        assert record.date == datetime.fromisoformat("2024-01-15T10:30:00+00:00")

    def test_derived_sender_fields(self, message):
        """fromEmail and fromName are derived from the From header"""
        record = SourceRecord.from_dict(message)

        assert record.get_value("fromEmail") == "jane@example.com"
        assert record.get_value("fromName") == "Jane Roe"

    def test_from_name_without_display_name(self):
        """Bare address falls back to the local part"""
        record = SourceRecord.from_dict({"from": "jane@example.com"})
        assert record.from_name == "jane"

    def test_labels_from_string(self, message):
        """Comma separated labels become a list"""
        record = SourceRecord.from_dict(message)
        assert record.get_value("labels") == ["INBOX", "IMPORTANT"]

    def test_attachment_defaults(self, message):
        """Count and flag are derived from the attachment list"""
        record = SourceRecord.from_dict(message)

        assert record.attachment_count == 2
        assert record.has_attachments is True
        assert record.get_value("attachments")[0]["name"] == "report.pdf"

    def test_string_flags(self):
        """Flags serialized as strings keep their meaning"""
        record = SourceRecord.from_dict({
            "starred": "false",
            "unread": "TRUE",
            "inInbox": "0",
            "hasAttachments": "false",
            "attachments": [{"name": "a.txt", "url": "https://x.example.com/a"}],
        })

        assert record.starred is False
        assert record.unread is True
        assert record.in_inbox is False
        assert record.has_attachments is False

    def test_numeric_flags(self):
        record = SourceRecord.from_dict({"starred": 1, "unread": 0})
        assert record.starred is True
        assert record.unread is False

    def test_gmail_link(self, message):
        record = SourceRecord.from_dict(message)
        assert record.gmail_link_url == "https://mail.google.com/mail/u/0/#inbox/18c2f0a1b2c3d4e5"
        assert SourceRecord().gmail_link_url == ""

    def test_unparseable_date_is_none(self):
        record = SourceRecord.from_dict({"date": "sometime last week-ish"})
        assert record.date is None

    def test_unknown_field(self, message):
        record = SourceRecord.from_dict(message)
        assert record.get_value("notAField") is None

    def test_preview(self):
        """Long text is shortened"""
        record = SourceRecord.from_dict({"snippet": "a" * 300})
        assert len(record.preview(200)) == 200
        assert record.has_content()


# ============================================================================
# TEST: TargetField / DatabaseSchema
# ============================================================================


class TestTargetField:
    """Test parsing of Notion property objects"""

    def test_title_is_required(self):
        prop = TargetField.from_api("Task", {"id": "title", "type": "title", "title": {}})
        assert prop.is_title
        assert prop.required

    def test_select_options(self):
        """Option names are kept for the configuration widgets"""
        raw = {
            "id": "%3AabC",
            "type": "select",
            "select": {"options": [{"id": "1", "name": "High", "color": "red"}]},
        }
        prop = TargetField.from_api("Priority", raw)

        assert prop.options == [{"id": "1", "name": "High", "color": "red"}]
        assert not prop.required

    def test_relation_config(self):
        raw = {
            "id": "rel",
            "type": "relation",
            "relation": {"database_id": "0123456789abcdef0123456789abcdef", "type": "single_property"},
        }
        prop = TargetField.from_api("Customer", raw)

        assert prop.config["database_id"] == "0123456789abcdef0123456789abcdef"
        assert prop.config["dual_property"] is None

    def test_auto_managed(self):
        prop = TargetField.from_api("Created", {"id": "c", "type": "created_time", "created_time": {}})
        assert prop.is_auto_managed

    def test_schema_lookup(self):
        """Properties are found by id or by name"""
        schema = DatabaseSchema(
            id="db",
            properties=[
                TargetField("title", "Name", "title", required=True),
                TargetField("abc", "Link", "url"),
                TargetField("f1", "Score", "formula"),
            ],
        )

        assert schema.get_property("abc").name == "Link"
        assert schema.get_property("Link").id == "abc"
        assert schema.title_property().id == "title"
        assert [p.id for p in schema.url_properties()] == ["abc"]
        assert [p.id for p in schema.mappable_properties()] == ["title", "abc"]


# ============================================================================
# TEST: FieldCatalog
# ============================================================================


class TestFieldCatalog:
    """Test the source field tables"""

    def test_all_fields(self, catalog):
        fields = catalog.all_fields()
        assert len(fields) == 22
        assert fields[0].value == "subject"

    def test_categories_in_order(self, catalog):
        assert list(catalog.categories()) == ["basic", "content", "links", "status", "attachments"]

    def test_fields_for_email(self, catalog):
        values = [f.value for f in catalog.fields_for("email")]
        assert values == ["from", "fromEmail", "to", "cc", "replyTo"]

    def test_back_link_is_never_selectable(self, catalog):
        """The Gmail link is injected by the writer, not chosen by users"""
        values = [f.value for f in catalog.fields_for("url")]
        assert BACK_LINK_FIELD not in values
        assert values == ["messageId", "threadId"]

    def test_recommendations(self, catalog):
        assert catalog.recommend("title").value == "subject"
        assert catalog.recommend("email").value == "fromEmail"
        assert catalog.recommend("date").value == "date"

    def test_url_recommendation_skips_back_link(self, catalog):
        assert catalog.recommend("url").value == "messageId"

    def test_unknown_type_uses_default(self, catalog):
        assert catalog.recommend("people").value == "subject"
        assert catalog.fields_for("people") == []

    def test_compatibility(self, catalog):
        assert catalog.is_compatible("fromEmail", "email")
        assert not catalog.is_compatible("subject", "email")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
