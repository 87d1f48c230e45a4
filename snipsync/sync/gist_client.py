"""
GitHub Gist API client for snippet synchronization.

Uses GitHub REST API v3. Also serves GitHub Enterprise, which exposes the
same API under a different base URL.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import requests

from snipsync.exceptions import RemoteError
from snipsync.sync.base import RemoteClient, Snapshot, decode_json, parse_timestamp


logger = logging.getLogger(__name__)

# Update time reported for a gist that does not exist yet
NEVER = datetime.min.replace(tzinfo=timezone.utc)


class GistClient(RemoteClient):
    """
    GitHub Gist API client.

    Stores the primary snippet file as one file of one gist.
    """

    name = "gist"
    API_BASE = "https://api.github.com"
    GIST_DESCRIPTION = "snipsync snippets"
    TIMEOUT = 30  # seconds

    def __init__(
        self,
        token: str,
        gist_id: str = "",
        file_name: str = "snipsync-snippet.toml",
        public: bool = False,
        api_base: Optional[str] = None,
        on_created: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize Gist client.

        Args:
            token: GitHub Personal Access Token with 'gist' scope
            gist_id: Existing Gist ID (a new Gist is created on first push if empty)
            file_name: Name of the snippet file inside the Gist
            public: Create the Gist as public
            api_base: API base URL (GitHub Enterprise)
            on_created: Called with the new Gist ID after creating a Gist

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.gist_id = gist_id
        self.file_name = file_name
        self.public = public
        self.api_base = (api_base or self.API_BASE).rstrip("/")
        self.on_created = on_created
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "snipsync",
        })

    def fetch_snapshot(self) -> Snapshot:
        """
        Get the snippet file from the Gist.

        A client without a Gist ID reports empty content that was never
        updated, so the next sync uploads the local file.

        Raises:
            RemoteError: If the Gist or the file cannot be read
        """
        if not self.gist_id:
            logger.debug("No Gist ID configured, reporting an empty remote")
            return Snapshot(content="", updated_at=NEVER)

        response = self._request("GET", f"{self.api_base}/gists/{self.gist_id}", phase="fetch")
        gist = decode_json(response, phase="fetch")
        files = gist.get("files")

        if not isinstance(files, dict) or not isinstance(files.get(self.file_name), dict):
            raise RemoteError(
                f"File '{self.file_name}' not found in Gist {self.gist_id}",
                phase="fetch",
            )

        file_data = files[self.file_name]
        content = file_data.get("content")
        if content is None or file_data.get("truncated"):
            # Content not in response (truncated), fetch raw URL
            raw_url = file_data.get("raw_url")
            if raw_url:
                content = self._request("GET", raw_url, phase="fetch").text

        try:
            updated_at = parse_timestamp(gist["updated_at"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteError(f"Gist {self.gist_id} has no valid update time: {e}", phase="fetch") from e

        return Snapshot(content=content or "", updated_at=updated_at)

    def push_snippet(self, content: str) -> None:
        """
        Upload the snippet file, creating the Gist if needed.

        Raises:
            RemoteError: If the API request fails
        """
        files = {self.file_name: {"content": content}}

        if self.gist_id:
            self._request(
                "PATCH",
                f"{self.api_base}/gists/{self.gist_id}",
                phase="push",
                json={"files": files},
            )
            return

        payload = {
            "description": self.GIST_DESCRIPTION,
            "public": self.public,
            "files": files,
        }
        response = self._request("POST", f"{self.api_base}/gists", phase="push", json=payload)
        gist_id = decode_json(response, phase="push").get("id")
        if not gist_id:
            raise RemoteError("Gist was created but the API returned no ID", phase="push")
        self.gist_id = str(gist_id)
        logger.info("Created Gist %s", self.gist_id)
        if self.on_created is not None:
            self.on_created(self.gist_id)

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
        """
        Make one HTTP request.

        Raises:
            RemoteError: If the request fails or returns an error status
        """
        try:
            response = self.session.request(method, url, timeout=self.TIMEOUT, **kwargs)
            response.raise_for_status()
            return response
        except requests.RequestException as e:
            raise RemoteError(f"GitHub API request failed: {e}", phase=phase) from e
