"""
Unit tests for the Page Writer

Tests:
- filter_to_schema: Dropping properties missing from the live schema
- PageWriter: Credentials, Gmail link injection, title guarantee, API errors
"""

from unittest.mock import Mock

import pytest

from config import AppConfig, MappingConfig, NotionApiConfig
from gmail_notion.builder.payload_builder import MappingOrchestrator
from gmail_notion.errors import ConfigError, NotionAPIError
from gmail_notion.handlers.factory import PropertyHandlerFactory
from gmail_notion.schema.models import DatabaseSchema, SourceRecord, TargetField
from gmail_notion.writer.page_writer import PageWriter, filter_to_schema

GMAIL_LINK = "https://mail.google.com/mail/u/0/#inbox/18c2f0a1b2c3d4e5"


# ============================================================================
# FIXTURES
# ============================================================================


def make_config(api_key="secret_abc", database_id="db1"):
    return AppConfig(
        notion_api=NotionApiConfig(api_key=api_key, database_id=database_id),
        mapping=MappingConfig(),
    )


def make_schema(*extra):
    return DatabaseSchema(
        id="db1",
        title="Inbox",
        properties=[
            TargetField("title", "Name", "title", required=True),
            TargetField("n1", "Notes", "rich_text"),
            *extra,
        ],
    )


@pytest.fixture
def client():
    client = Mock()
    client.create_page.return_value = {"id": "page-1", "url": "https://notion.so/page-1", "created_time": None}
    return client


@pytest.fixture
def introspector():
    introspector = Mock()
    introspector.get_schema.return_value = make_schema(TargetField("lnk", "Gmail Link", "url"))
    return introspector


@pytest.fixture
def writer(client, introspector):
    return PageWriter(client, MappingOrchestrator(PropertyHandlerFactory()), introspector, make_config())


@pytest.fixture
def message():
    return {
        "messageId": "18c2f0a1b2c3d4e5",
        "subject": "Invoice #1042",
        "from": "billing@example.com",
        "plainBody": "Your invoice is attached.",
    }


@pytest.fixture
def mappings():
    return {
        "title": {"type": "title", "enabled": True, "sourceField": "subject", "propertyName": "Name"},
        "n1": {"type": "rich_text", "enabled": True, "sourceField": "plainBody", "propertyName": "Notes"},
        "P1": {"type": "rich_text", "enabled": True, "sourceField": "from"},
    }


# ============================================================================
# TEST: filter_to_schema
# ============================================================================


class TestFilterToSchema:
    """Test schema drift filtering"""

    def test_unknown_keys_removed(self):
        kept, removed = filter_to_schema({"Name": 1, "P1": 2, "Notes": 3}, ["Name", "Notes"])

        assert kept == {"Name": 1, "Notes": 3}
        assert removed == ["P1"]


# ============================================================================
# TEST: PageWriter
# ============================================================================


class TestPageWriter:
    """Test page creation"""

    def test_creates_page(self, writer, client, mappings, message):
        result = writer.create_page_from_record(message, mappings)

        assert result.page["id"] == "page-1"
        database_id, properties, children = client.create_page.call_args[0]
        assert database_id == "db1"
        assert children is None
        assert client.create_page.call_args[1] == {"api_key": "secret_abc"}
        assert properties is result.properties

    def test_drifted_property_is_dropped(self, writer, mappings, message):
        """A mapped property missing from the live schema is not sent"""
        result = writer.create_page_from_record(message, mappings)

        assert "P1" not in result.properties
        assert result.removed == ["P1"]
        assert result.properties["Notes"]["rich_text"][0]["text"]["content"] == "Your invoice is attached."

    def test_gmail_link_injected(self, writer, mappings, message):
        result = writer.create_page_from_record(message, mappings)
        assert result.properties["Gmail Link"] == {"url": GMAIL_LINK}

    def test_existing_url_property_is_reused(self, client, introspector, mappings, message):
        """Any url property receives the link when "Gmail Link" does not exist"""
        introspector.get_schema.return_value = make_schema(TargetField("src", "Source", "url"))
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config())

        result = writer.create_page_from_record(message, mappings)

        assert result.properties["Source"] == {"url": GMAIL_LINK}
        client.ensure_url_property.assert_not_called()

    def test_link_property_created(self, client, introspector, mappings, message):
        introspector.get_schema.return_value = make_schema()
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config())

        result = writer.create_page_from_record(message, mappings)

        client.ensure_url_property.assert_called_once_with("db1", "Gmail Link", api_key="secret_abc")
        introspector.invalidate.assert_called_once_with("db1")
        assert result.properties["Gmail Link"] == {"url": GMAIL_LINK}

    def test_dry_run_does_not_change_database(self, client, introspector, mappings, message):
        introspector.get_schema.return_value = make_schema()
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config())

        properties, removed, errors = writer.build_properties(
            SourceRecord.from_dict(message),
            mappings,
            "secret_abc",
            "db1",
            create_link_property=False,
        )

        client.ensure_url_property.assert_not_called()
        assert "Gmail Link" not in properties
        assert removed == ["P1"]
        assert errors == []

    def test_link_name_taken_by_other_type(self, client, introspector, mappings, message):
        introspector.get_schema.return_value = make_schema(TargetField("gl", "Gmail Link", "rich_text"))
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config())

        result = writer.create_page_from_record(message, mappings)

        client.ensure_url_property.assert_not_called()
        assert "Gmail Link" not in result.properties

    def test_title_always_present(self, writer, message):
        """A page gets a title even when no title mapping is enabled"""
        mappings = {"n1": {"type": "rich_text", "enabled": True, "sourceField": "plainBody", "propertyName": "Notes"}}

        result = writer.create_page_from_record(message, mappings)

        assert result.properties["Name"] == {"title": [{"type": "text", "text": {"content": "Invoice #1042"}}]}

    def test_title_without_schema(self, client, message):
        """Without a live schema the title goes to the "title" property id"""
        introspector = Mock()
        introspector.get_schema.side_effect = NotionAPIError("unavailable", status_code=503)
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config())

        result = writer.create_page_from_record(message, {})

        assert result.properties == {"title": {"title": [{"type": "text", "text": {"content": "Invoice #1042"}}]}}
        assert result.removed == []

    def test_missing_api_key(self, client, introspector, mappings, message):
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config(api_key=""))

        with pytest.raises(ConfigError) as exc_info:
            writer.create_page_from_record(message, mappings)

        assert exc_info.value.field == "apiKey"
        introspector.get_schema.assert_not_called()
        client.create_page.assert_not_called()

    def test_missing_database(self, client, introspector, mappings, message):
        writer = PageWriter(client, MappingOrchestrator(), introspector, make_config(database_id=""))

        with pytest.raises(ConfigError) as exc_info:
            writer.create_page_from_record(message, mappings)

        assert exc_info.value.field == "targetCollectionId"

    def test_api_error_propagates(self, writer, client, mappings, message):
        client.create_page.side_effect = NotionAPIError("body failed validation", status_code=400)

        with pytest.raises(NotionAPIError) as exc_info:
            writer.create_page_from_record(message, mappings)

        assert exc_info.value.message == "body failed validation"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
