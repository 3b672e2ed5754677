"""Page creation against the live Notion database."""
