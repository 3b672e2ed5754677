"""Application configuration."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, ignoring malformed values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class NotionApiConfig:
    """Notion API settings."""

    base_url: str = "https://api.notion.com/v1"
    api_key: str = ""  # Read from NOTION_API_KEY or prompted by the CLI
    database_id: str = ""
    version: str = "2022-06-28"
    timeout: int = 30

    @classmethod
    def from_env(cls) -> "NotionApiConfig":
        """Load config from environment variables."""
        return cls(
            base_url=os.getenv("NOTION_API_URL", "https://api.notion.com/v1"),
            api_key=os.getenv("NOTION_API_KEY", ""),
            database_id=os.getenv("NOTION_DATABASE_ID", ""),
            version=os.getenv("NOTION_VERSION", "2022-06-28"),
            timeout=_int_env("NOTION_TIMEOUT", 30),
        )


@dataclass
class MappingConfig:
    """Tuning for the mapping engine."""

    relation_timeout_ms: int = 3000
    relation_cache_ttl: int = 300
    relation_page_size: int = 10
    schema_cache_ttl: int = 120
    default_file_handling: str = "link_only"
    link_property_name: str = "Gmail Link"

    @classmethod
    def from_env(cls) -> "MappingConfig":
        """Load config from environment variables."""
        return cls(
            relation_timeout_ms=_int_env("G2N_RELATION_TIMEOUT_MS", 3000),
            relation_cache_ttl=_int_env("G2N_RELATION_CACHE_TTL", 300),
            default_file_handling=os.getenv("G2N_FILE_HANDLING", "link_only"),
        )


@dataclass
class AppConfig:
    """Application configuration."""

    config_dir: str = "./config"
    output_dir: str = "./output"
    mappings_file: str = "mappings.json"
    notion_api: NotionApiConfig = None
    mapping: MappingConfig = None

    def __post_init__(self):
        """Fill in default sections."""
        if self.notion_api is None:
            self.notion_api = NotionApiConfig.from_env()
        if self.mapping is None:
            self.mapping = MappingConfig.from_env()

    @property
    def mappings_path(self) -> Path:
        return Path(self.config_dir) / self.mappings_file

    def get_all(self) -> Dict[str, str]:
        """Credentials the page writer needs."""
        return {
            "apiKey": self.notion_api.api_key,
            "targetCollectionId": self.notion_api.database_id,
        }

    def validate(self) -> List[str]:
        """Return a list of configuration problems (empty when usable)."""
        problems = []
        if not self.notion_api.api_key:
            problems.append("NOTION_API_KEY is not set")
        elif not self.notion_api.api_key.startswith(("secret_", "ntn_")):
            problems.append("NOTION_API_KEY does not look like a Notion integration token")
        if not self.notion_api.database_id:
            problems.append("NOTION_DATABASE_ID is not set")
        if self.mapping.relation_timeout_ms <= 0:
            problems.append("G2N_RELATION_TIMEOUT_MS must be positive")
        return problems

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            config_dir=os.getenv("G2N_CONFIG_DIR", "./config"),
            output_dir=os.getenv("G2N_OUTPUT_DIR", "./output"),
            mappings_file=os.getenv("G2N_MAPPINGS_FILE", "mappings.json"),
            notion_api=NotionApiConfig.from_env(),
            mapping=MappingConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
