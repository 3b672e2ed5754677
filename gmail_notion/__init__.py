"""Gmail → Notion property mapping engine."""

__version__ = "0.1.0"
