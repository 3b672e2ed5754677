"""
Unit tests for relation resolution

Tests:
- identify_database_id: Every supported config representation
- FieldCache: TTL expiry and stats
- build_filter: Filters per linked property type
- RelationResolver: Field discovery, placeholder fallback, matching
"""

from unittest.mock import Mock

import pytest

from gmail_notion.mapper.mapping import MappingEntry
from gmail_notion.relation.cache import FieldCache
from gmail_notion.relation.filters import build_filter
from gmail_notion.relation.identify import identify_database_id, normalize_id
from gmail_notion.relation.resolver import PLACEHOLDER_FIELDS, RelatedField, RelationResolver
from gmail_notion.schema.models import SourceRecord
from gmail_notion.transformer.registry import TransformerRegistry

LINKED_DB = "0123456789abcdef0123456789abcdef"
LINKED_UUID = "01234567-89ab-cdef-0123-456789abcdef"


# ============================================================================
# FIXTURES
# ============================================================================


class FakeClock:
    """Monotonic clock advanced by hand"""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client():
    client = Mock()
    client.fetch_schema.return_value = {
        "fields": [
            {"id": "title", "name": "Company", "type": "title"},
            {"id": "mail", "name": "Contact email", "type": "email"},
            {"id": "tier", "name": "Tier", "type": "select"},
            {"id": "docs", "name": "Contracts", "type": "files"},
            {"id": "calc", "name": "Score", "type": "formula"},
            {"id": "edit", "name": "Edited", "type": "last_edited_time"},
        ]
    }
    client.search.return_value = [{"id": "page-1"}]
    return client


@pytest.fixture
def resolver(client, clock):
    return RelationResolver(
        client,
        FieldCache(ttl_seconds=300, clock=clock),
        transformers=TransformerRegistry(),
        clock=clock,
    )


@pytest.fixture
def record():
    return SourceRecord.from_dict({
        "subject": "Re: ACME renewal",
        "from": "Jane Roe <jane@acme.com>",
    })


def relation_entry(**values):
    values.setdefault("relation_config", {"database_id": LINKED_DB})
    return MappingEntry(type="relation", enabled=True, property_name="Customer", **values)


# ============================================================================
# TEST: identify_database_id
# ============================================================================


class TestIdentifyDatabaseId:
    """Test linked database discovery"""

    def test_database_id_with_hyphens(self):
        assert identify_database_id({"database_id": LINKED_UUID}) == LINKED_DB

    def test_database_id_object(self):
        assert identify_database_id({"database_id": {"id": LINKED_DB}}) == LINKED_DB

    def test_data_source_id(self):
        assert identify_database_id({"database_id": None, "data_source_id": LINKED_UUID}) == LINKED_DB

    def test_dual_property(self):
        config = {"type": "dual_property", "dual_property": {"database_id": LINKED_DB}}
        assert identify_database_id(config) == LINKED_DB

    def test_uuid_anywhere_in_config(self):
        config = {"synced": {"note": f"linked to {LINKED_UUID} last week"}}
        assert identify_database_id(config) == LINKED_DB

    def test_bare_hex_anywhere_in_config(self):
        config = {"link": f"https://www.notion.so/{LINKED_DB.upper()}?v=1"}
        assert identify_database_id(config) == LINKED_DB

    def test_unidentifiable(self):
        assert identify_database_id({}) is None
        assert identify_database_id(None) is None
        assert identify_database_id({"database_id": "not-an-id"}) is None

    def test_normalize_id(self):
        assert normalize_id(LINKED_UUID.upper()) == LINKED_DB
        assert normalize_id(42) is None


# ============================================================================
# TEST: FieldCache
# ============================================================================


class TestFieldCache:
    """Test the TTL cache"""

    def test_expiry(self, clock):
        cache = FieldCache(ttl_seconds=300, clock=clock)
        cache.set("db", ["field"])

        clock.advance(299)
        assert cache.get("db") == ["field"]

        clock.advance(2)
        assert cache.get("db") is None

    def test_stats(self, clock):
        cache = FieldCache(clock=clock)
        cache.get("missing")
        cache.set("db", [])
        cache.get("db")

        assert cache.stats() == {"hits": 1, "misses": 1, "size": 1}

    def test_invalidate(self, clock):
        cache = FieldCache(clock=clock)
        cache.set("db", [])

        assert cache.invalidate("db") is True
        assert cache.invalidate("db") is False


# ============================================================================
# TEST: build_filter
# ============================================================================


class TestBuildFilter:
    """Test query filters per property type"""

    def test_text_types_use_contains(self):
        assert build_filter("title", "title", "ACME") == {"property": "title", "title": {"contains": "ACME"}}
        assert build_filter("u", "url", "acme.com") == {"property": "u", "url": {"contains": "acme.com"}}

    def test_exact_types_use_equals(self):
        assert build_filter("m", "email", "a@b.com") == {"property": "m", "email": {"equals": "a@b.com"}}
        assert build_filter("t", "select", "Gold") == {"property": "t", "select": {"equals": "Gold"}}

    def test_checkbox(self):
        assert build_filter("c", "checkbox", "yes") == {"property": "c", "checkbox": {"equals": True}}
        assert build_filter("c", "checkbox", False) == {"property": "c", "checkbox": {"equals": False}}

    def test_number(self):
        assert build_filter("n", "number", "42") == {"property": "n", "number": {"equals": 42.0}}
        assert build_filter("n", "number", "forty") is None

    def test_date_matches_the_day(self):
        assert build_filter("d", "date", "2024-01-15T10:30:00Z") == {
            "property": "d",
            "date": {"equals": "2024-01-15"},
        }

    def test_empty_text(self):
        assert build_filter("title", "title", "  ") is None

    def test_unsupported_type(self):
        assert build_filter("p", "people", "user-1") is None


# ============================================================================
# TEST: RelationResolver
# ============================================================================


class TestRelatedFields:
    """Test linked field discovery"""

    def test_fields_are_filtered(self, resolver):
        """Files and computed properties cannot be matched"""
        fields = resolver.related_fields({"database_id": LINKED_DB})
        assert [f.id for f in fields] == ["title", "mail", "tier"]
        assert not any(f.placeholder for f in fields)

    def test_fetch_receives_time_budget(self, resolver, client):
        resolver.related_fields({"database_id": LINKED_UUID}, api_key="secret_abc")
        client.fetch_schema.assert_called_once_with(LINKED_DB, api_key="secret_abc", timeout=3.0)

    def test_cached_for_ttl(self, resolver, client, clock):
        config = {"database_id": LINKED_DB}

        resolver.related_fields(config)
        resolver.related_fields(config)
        assert client.fetch_schema.call_count == 1

        clock.advance(301)
        resolver.related_fields(config)
        assert client.fetch_schema.call_count == 2

    def test_unidentified_database(self, resolver, client):
        fields = resolver.related_fields({"type": "single_property"})

        assert fields == list(PLACEHOLDER_FIELDS)
        client.fetch_schema.assert_not_called()

    def test_fetch_failure(self, resolver, client):
        client.fetch_schema.side_effect = ConnectionError("unreachable")

        fields = resolver.related_fields({"database_id": LINKED_DB})

        assert [f.name for f in fields] == ["Title", "Description", "Email", "Status", "Date", "URL"]
        assert all(f.placeholder for f in fields)

    def test_slow_fetch_is_not_used(self, resolver, client, clock):
        """A response after the budget is discarded and not cached"""
        def slow_fetch(*args, **kwargs):
            clock.advance(5)
            return {"fields": [{"id": "title", "name": "Company", "type": "title"}]}

        client.fetch_schema.side_effect = slow_fetch

        fields = resolver.related_fields({"database_id": LINKED_DB})

        assert all(f.placeholder for f in fields)
        assert resolver.cache.stats()["size"] == 0

    def test_refresh(self, resolver):
        config = {"database_id": LINKED_DB}
        resolver.related_fields(config)

        assert resolver.refresh(config) is True
        assert resolver.refresh(config) is False

    def test_find_field(self, resolver):
        fields = [RelatedField("abc", "Email", "email"), RelatedField("Email", "Other", "rich_text")]
        assert resolver.find_field(fields, "Email").id == "Email"
        assert resolver.find_field(fields, "abc").name == "Email"
        assert resolver.find_field(fields, "missing") is None


class TestResolve:
    """Test matching emails to linked pages"""

    def test_match_with_transformation(self, resolver, client, record):
        mapping = relation_entry(match_field="title", match_source_field="subject", transformation="remove_prefixes")

        assert resolver.resolve(mapping, record) == ["page-1"]
        client.search.assert_called_once_with(
            LINKED_DB,
            {"property": "title", "title": {"contains": "ACME renewal"}},
            page_size=10,
            api_key=None,
        )

    def test_match_by_email(self, resolver, client, record):
        mapping = relation_entry(match_field="mail", match_source_field="fromEmail")

        resolver.resolve(mapping, record, api_key="secret_abc")

        args = client.search.call_args
        assert args[0][1] == {"property": "mail", "email": {"equals": "jane@acme.com"}}
        assert args[1]["api_key"] == "secret_abc"

    def test_placeholder_matches_by_name(self, resolver, client, record):
        """Placeholder ids are invented, so the filter uses the name"""
        client.fetch_schema.side_effect = RuntimeError("offline")
        mapping = relation_entry(match_field="email", match_source_field="fromEmail")

        resolver.resolve(mapping, record)

        assert client.search.call_args[0][1] == {"property": "Email", "email": {"equals": "jane@acme.com"}}

    def test_no_results(self, resolver, client, record):
        client.search.return_value = []
        mapping = relation_entry(match_field="title", match_source_field="subject")

        assert resolver.resolve(mapping, record) is None

    def test_results_capped_at_page_size(self, client, clock, record):
        client.search.return_value = [{"id": f"page-{i}"} for i in range(5)]
        resolver = RelationResolver(client, FieldCache(clock=clock), page_size=2, clock=clock)
        mapping = relation_entry(match_field="title", match_source_field="subject")

        assert resolver.resolve(mapping, record) == ["page-0", "page-1"]

    def test_empty_source_value(self, resolver, client):
        mapping = relation_entry(match_field="title", match_source_field="subject")

        assert resolver.resolve(mapping, SourceRecord()) is None
        client.search.assert_not_called()

    def test_unknown_match_field(self, resolver, client, record):
        mapping = relation_entry(match_field="gone", match_source_field="subject")

        assert resolver.resolve(mapping, record) is None
        client.search.assert_not_called()

    def test_search_failure(self, resolver, client, record):
        client.search.side_effect = RuntimeError("rate limited")
        mapping = relation_entry(match_field="title", match_source_field="subject")

        assert resolver.resolve(mapping, record) is None

    def test_missing_linked_database(self, resolver, record):
        mapping = relation_entry(match_field="title", match_source_field="subject", relation_config={})
        assert resolver.resolve(mapping, record) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
