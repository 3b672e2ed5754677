"""
Unit tests for the attachment service

Tests:
- Link-only, upload and skip modes
- Size limit and upload failures
- Safe file names
"""

from unittest.mock import Mock

import pytest

from gmail_notion.attachments.service import AttachmentService


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def attachments():
    return [
        {"name": "report.pdf", "size": 2048, "url": "https://files.example.com/report.pdf"},
        {"name": "no-link.txt", "size": 10},
        {"name": "huge.zip", "size": 30 * 1024 * 1024, "url": "https://files.example.com/huge.zip"},
    ]


# ============================================================================
# TEST: AttachmentService
# ============================================================================


class TestAttachmentService:
    """Test attachment processing"""

    def test_link_only(self, attachments):
        """Attachments without a URL and oversized files are left out"""
        result = AttachmentService().process(attachments, "Report", "link_only")
        assert result == [{"name": "report.pdf", "url": "https://files.example.com/report.pdf"}]

    def test_upload(self, attachments):
        uploader = Mock(side_effect=lambda attachment, name: f"https://drive.example.com/{name}")
        result = AttachmentService(uploader=uploader).process(attachments, "Report", "upload")

        assert [r["url"] for r in result] == [
            "https://drive.example.com/report.pdf",
            "https://drive.example.com/no-link.txt",
        ]
        assert uploader.call_count == 2

    def test_legacy_upload_mode(self, attachments):
        uploader = Mock(return_value="https://drive.example.com/x")
        result = AttachmentService(uploader=uploader).process(attachments[:1], "Report", "upload_to_drive")
        assert result == [{"name": "report.pdf", "url": "https://drive.example.com/x"}]

    def test_upload_failure_skips_file(self, attachments):
        uploader = Mock(side_effect=[RuntimeError("quota"), "https://drive.example.com/no-link.txt"])
        result = AttachmentService(uploader=uploader).process(attachments, "Report", "upload")

        assert [r["name"] for r in result] == ["no-link.txt"]

    def test_upload_without_uploader(self, attachments):
        """Falls back to the links in the metadata"""
        result = AttachmentService().process(attachments, "Report", "upload")
        assert [r["name"] for r in result] == ["report.pdf"]

    def test_string_sizes(self):
        """Sizes from JSON strings are compared as numbers; an unreadable size drops only that file"""
        result = AttachmentService(max_file_size=2048).process(
            [
                {"name": "small.pdf", "size": "1024", "url": "https://files.example.com/small.pdf"},
                {"name": "big.pdf", "size": "4096", "url": "https://files.example.com/big.pdf"},
                {"name": "odd.pdf", "size": "about 1 KB", "url": "https://files.example.com/odd.pdf"},
            ],
            "Report",
            "link_only",
        )

        assert [r["name"] for r in result] == ["small.pdf"]

    def test_skip(self, attachments):
        assert AttachmentService().process(attachments, "Report", "skip") == []

    def test_unknown_mode(self, attachments):
        result = AttachmentService().process(attachments, "Report", "email_them")
        assert [r["name"] for r in result] == ["report.pdf"]

    def test_unnamed_attachment(self):
        result = AttachmentService().process([{"url": "https://x.example.com/a"}], "Re: Q1/Report!", "link_only")
        assert result[0]["name"] == "Re_ Q1_Report_1"

    def test_safe_filename_default(self):
        assert AttachmentService.safe_filename("", 2) == "attachment_3"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
