"""
GitLab snippet API client for snippet synchronization.

Uses GitLab REST API v4 personal snippets.
"""

import logging
from typing import Any, Callable, Optional

import requests

from snipsync.exceptions import RemoteError
from snipsync.sync.base import RemoteClient, Snapshot, decode_json, parse_timestamp
from snipsync.sync.gist_client import NEVER


logger = logging.getLogger(__name__)


class GitLabClient(RemoteClient):
    """
    GitLab snippet API client.
    """

    name = "gitlab"
    SNIPPET_TITLE = "snipsync snippets"
    TIMEOUT = 30  # seconds

    def __init__(
        self,
        token: str,
        snippet_id: str = "",
        file_name: str = "snipsync-snippet.toml",
        url: str = "https://gitlab.com",
        visibility: str = "private",
        verify: bool = True,
        on_created: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize GitLab client.

        Args:
            token: GitLab Personal Access Token with 'api' scope
            snippet_id: Existing snippet ID (created on first push if empty)
            file_name: Name of the snippet file
            url: GitLab instance URL
            visibility: private, internal or public
            verify: Verify TLS certificates
            on_created: Called with the new snippet ID after creating a snippet

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("GitLab token is required")

        self.snippet_id = str(snippet_id or "")
        self.file_name = file_name
        self.api_base = f"{url.rstrip('/')}/api/v4"
        self.visibility = visibility
        self.on_created = on_created
        self.session = requests.Session()
        self.session.verify = verify
        self.session.headers.update({
            "PRIVATE-TOKEN": token,
            "User-Agent": "snipsync",
        })

    def fetch_snapshot(self) -> Snapshot:
        """
        Get the snippet content and its update time.

        Raises:
            RemoteError: If the snippet cannot be read
        """
        if not self.snippet_id:
            logger.debug("No GitLab snippet ID configured, reporting an empty remote")
            return Snapshot(content="", updated_at=NEVER)

        url = f"{self.api_base}/snippets/{self.snippet_id}"
        meta = decode_json(self._request("GET", url, phase="fetch"), phase="fetch")
        content = self._request("GET", f"{url}/raw", phase="fetch").text

        try:
            updated_at = parse_timestamp(meta["updated_at"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError(
                f"GitLab snippet {self.snippet_id} has no valid update time: {e}",
                phase="fetch",
            ) from e

        return Snapshot(content=content, updated_at=updated_at)

    def push_snippet(self, content: str) -> None:
        """
        Upload the snippet content, creating the snippet if needed.

        Raises:
            RemoteError: If the API request fails
        """
        if self.snippet_id:
            payload = {
                "files": [
                    {"action": "update", "file_path": self.file_name, "content": content}
                ]
            }
            self._request("PUT", f"{self.api_base}/snippets/{self.snippet_id}", phase="push", json=payload)
            return

        payload = {
            "title": self.SNIPPET_TITLE,
            "visibility": self.visibility,
            "files": [{"file_path": self.file_name, "content": content}],
        }
        response = self._request("POST", f"{self.api_base}/snippets", phase="push", json=payload)
        snippet_id = decode_json(response, phase="push").get("id")
        if not snippet_id:
            raise RemoteError("GitLab snippet was created but the API returned no ID", phase="push")
        self.snippet_id = str(snippet_id)
        logger.info("Created GitLab snippet %s", self.snippet_id)
        if self.on_created is not None:
            self.on_created(self.snippet_id)

    def test_token(self) -> bool:
        """
        Test if token is valid.

        Returns:
            True if token is valid
        """
        try:
            response = self._request("GET", f"{self.api_base}/user", phase="init")
            return response.status_code == 200
        except RemoteError:
            return False

    def _request(self, method: str, url: str, phase: str, **kwargs: Any) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.TIMEOUT, **kwargs)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise RemoteError(f"GitLab API request failed: {e}", phase=phase) from e
