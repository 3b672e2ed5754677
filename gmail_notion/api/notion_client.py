"""Notion API client."""
import logging
from typing import Any, Dict, List, Optional

import requests

from config import NotionApiConfig
from gmail_notion.errors import NotionAPIError, NotionConnectionError
from gmail_notion.schema.models import TargetField

logger = logging.getLogger(__name__)


class NotionClient:
    """
    Client for the Notion REST API

    Usage:
    ```python
    client = NotionClient(NotionApiConfig(api_key="secret_...", database_id="..."))
    schema = client.fetch_schema(client.config.database_id)
    page = client.create_page(client.config.database_id, properties)
    ```
    """

    def __init__(self, config: NotionApiConfig, session: Optional[requests.Session] = None):
        """Initialize client."""
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({
            "Notion-Version": config.version,
            "Content-Type": "application/json",
        })

        if config.api_key:
            self.session.headers.update({"Authorization": f"Bearer {config.api_key}"})

    # ========================================================================
    # Transport
    # ========================================================================

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and decode the JSON response

        Args:
            method: HTTP method
            path: Path relative to the API base URL, e.g. "databases/<id>"
            json: Request body
            params: Query string parameters
            api_key: Token overriding the session's default
            timeout: Seconds, defaults to config.timeout

        Returns:
            Decoded response body

        Raises:
            NotionConnectionError: Transport failure
            NotionAPIError: Non-2xx response (Notion's own message is kept)
        """
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=timeout or self.config.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise NotionConnectionError(f"Could not reach Notion: {e}", endpoint=path) from e

        if response.status_code >= 400:
            raise self._error_from_response(response, path)

        try:
            return response.json()
        except ValueError as e:
            raise NotionAPIError(
                f"Invalid JSON from Notion: {e}",
                status_code=response.status_code,
                endpoint=path,
            ) from e

    @staticmethod
    def _error_from_response(response: requests.Response, path: str) -> NotionAPIError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or response.text or f"HTTP {response.status_code}"
        return NotionAPIError(
            message,
            status_code=response.status_code,
            notion_code=body.get("code"),
            endpoint=path,
        )

    # ========================================================================
    # Databases
    # ========================================================================

    def get_database(
        self,
        database_id: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Raw database object."""
        return self._request("GET", f"databases/{database_id}", api_key=api_key, timeout=timeout)

    def fetch_schema(
        self,
        database_id: str,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Property list of a database

        Returns:
            {"fields": [{"id", "name", "type", "config"}]}
        """
        database = self.get_database(database_id, api_key=api_key, timeout=timeout)
        fields = []
        for name, raw in (database.get("properties") or {}).items():
            if not isinstance(raw, dict):
                continue
            parsed = TargetField.from_api(name, raw)
            fields.append({
                "id": parsed.id,
                "name": parsed.name,
                "type": parsed.type,
                "config": parsed.config,
            })
        return {"fields": fields}

    def search(
        self,
        database_id: str,
        query_filter: Dict[str, Any],
        page_size: int = 10,
        api_key: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Query a database

        Returns:
            [{"id": page_id}] for the first page_size matches
        """
        body = {"filter": query_filter, "page_size": page_size}
        result = self._request("POST", f"databases/{database_id}/query", json=body, api_key=api_key)
        return [{"id": page["id"]} for page in result.get("results", []) if page.get("id")]

    def update_database(
        self,
        database_id: str,
        properties: Dict[str, Any],
        api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        return self._request(
            "PATCH",
            f"databases/{database_id}",
            json={"properties": properties},
            api_key=api_key,
        )

    def ensure_url_property(self, database_id: str, name: str, api_key: Optional[str] = None) -> Dict[str, Any]:
        """Add a url property named `name` to the database."""
        logger.info(f"Adding url property '{name}' to database {database_id}")
        return self.update_database(database_id, {name: {"url": {}}}, api_key=api_key)

    # ========================================================================
    # Pages and users
    # ========================================================================

    def create_page(
        self,
        database_id: str,
        properties: Dict[str, Any],
        children: Optional[List[Dict[str, Any]]] = None,
        api_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a page in a database

        Returns:
            {"id", "url", "created_time"}
        """
        body: Dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        if children:
            body["children"] = children

        page = self._request("POST", "pages", json=body, api_key=api_key)
        return {
            "id": page.get("id"),
            "url": page.get("url"),
            "created_time": page.get("created_time"),
        }

    def list_members(self, api_key: Optional[str] = None) -> List[Dict[str, str]]:
        """
        Workspace members that can be assigned to people properties

        Returns:
            [{"id", "name", "email"}] for person users with an email address
        """
        members = []
        params: Dict[str, Any] = {"page_size": 100}

        while True:
            result = self._request("GET", "users", params=params, api_key=api_key)
            for user in result.get("results", []):
                if user.get("type") != "person":
                    continue
                email = (user.get("person") or {}).get("email")
                if not email:
                    continue
                members.append({"id": user["id"], "name": user.get("name") or email, "email": email})

            if not result.get("has_more") or not result.get("next_cursor"):
                break
            params = {"page_size": 100, "start_cursor": result["next_cursor"]}

        logger.info(f"Loaded {len(members)} workspace members")
        return members
