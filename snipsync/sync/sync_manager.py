"""
Synchronization manager for the primary snippet file.

Compares the local file's modification time with the remote copy's update
time and pushes, pulls or does nothing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console

from snipsync.config.settings import Settings, save_settings
from snipsync.exceptions import ConfigError, RemoteError, SnippetIOError, TokenError
from snipsync.snippet.store import SnippetStore
from snipsync.sync.base import RemoteClient
from snipsync.sync.gist_client import GistClient
from snipsync.sync.gitlab_client import GitLabClient
from snipsync.sync.token_manager import TokenManager


logger = logging.getLogger(__name__)

NOOP = "noop"
PULLED = "pulled"
PUSHED = "pushed"
UP_TO_DATE = "up_to_date"


@dataclass
class SyncResult:
    """Outcome of one sync call."""
    action: str
    message: str


def create_client(
    settings: Settings,
    token_manager: Optional[TokenManager] = None,
    settings_path: Optional[Path] = None,
) -> RemoteClient:
    """
    Create the remote client selected by `settings.general.backend`.

    A remote created on first push has its ID written back to the
    settings file.

    Args:
        settings: Loaded settings
        token_manager: Token source (default: keyring/env/file for the backend)
        settings_path: Settings file to update with new remote IDs

    Raises:
        TokenError: If no token is configured for the backend
        ConfigError: If GitHub Enterprise is selected without an API URL
        RemoteError: If the client cannot be initialized
    """
    backend = settings.general.backend
    token_manager = token_manager or TokenManager(backend)
    token = token_manager.get_token()
    if not token:
        raise TokenError(
            f"Access token for '{backend}' not configured. "
            f"Run: snipsync set-token {backend} <token>"
        )

    def persist() -> None:
        try:
            save_settings(settings, settings_path)
        except OSError as e:
            raise SnippetIOError(f"Remote created but its ID could not be saved to settings: {e}") from e

    def remember_gist_id(gist_id: str) -> None:
        settings.gist.gist_id = gist_id
        persist()

    def remember_snippet_id(snippet_id: str) -> None:
        settings.gitlab.snippet_id = snippet_id
        persist()

    try:
        if backend == "gitlab":
            gitlab = settings.gitlab
            return GitLabClient(
                token,
                snippet_id=gitlab.snippet_id,
                file_name=gitlab.file_name,
                url=gitlab.url,
                visibility=gitlab.visibility,
                verify=not gitlab.skip_ssl,
                on_created=remember_snippet_id,
            )

        gist = settings.gist
        api_base: Optional[str] = None
        if backend == "ghe":
            if not gist.base_url:
                raise ConfigError(
                    "GitHub Enterprise backend requires [gist] base_url. "
                    "Run 'snipsync configure --gist-base-url <url>'."
                )
            api_base = gist.base_url
        return GistClient(
            token,
            gist_id=gist.gist_id,
            file_name=gist.file_name,
            public=gist.public,
            api_base=api_base,
            on_created=remember_gist_id,
        )
    except ValueError as e:
        raise RemoteError(f"Failed to initialize {backend} client: {e}", phase="init") from e


class SyncManager:
    """
    Keeps the primary snippet file and its remote copy consistent.

    Snippet directories never take part in sync.
    """

    def __init__(
        self,
        store: SnippetStore,
        client: RemoteClient,
        console: Optional[Console] = None,
    ):
        """
        Initialize sync manager.

        Args:
            store: Store bound to the primary snippet file
            client: Remote backend
            console: Where status lines are printed
        """
        self.store = store
        self.client = client
        self.console = console or Console()

    @property
    def snippet_file(self) -> Path:
        return self.store.snippet_file

    def auto_sync(self) -> SyncResult:
        """
        Push, pull or do nothing depending on which side changed last.

        Returns:
            SyncResult describing what was done

        Raises:
            RemoteError: If fetching or pushing fails
            SnippetIOError: If the local file cannot be inspected or written
            ConfigError, ParseError, SerializationError: From loading the local file
        """
        snapshot = self.client.fetch_snapshot()

        local_mtime = self._local_mtime()
        if local_mtime is None:
            return self._download(snapshot.content, compare=False)

        remote_time = snapshot.updated_at_utc
        logger.debug("Local mtime %s, remote updated_at %s", local_mtime, remote_time)

        if local_mtime > remote_time:
            return self._upload()
        if remote_time > local_mtime:
            return self._download(snapshot.content, compare=True)
        return SyncResult(NOOP, "Already in sync")

    def _local_mtime(self) -> Optional[datetime]:
        """Local modification time in UTC, or None if the file is missing or empty."""
        try:
            stat = self.snippet_file.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SnippetIOError(f"Failed to get file info for {self.snippet_file}: {e}") from e

        if stat.st_size == 0:
            return None
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def _upload(self) -> SyncResult:
        snippets = self.store.load(include_auxiliary=False)
        body = self.store.to_text(snippets)

        self.client.push_snippet(body)

        self.console.print("Upload success")
        return SyncResult(PUSHED, "Upload success")

    def _download(self, content: str, compare: bool) -> SyncResult:
        if compare:
            snippets = self.store.load(include_auxiliary=False)
            if self.store.to_text(snippets) == content:
                self.console.print("Already up-to-date")
                return SyncResult(UP_TO_DATE, "Already up-to-date")

        try:
            self.snippet_file.parent.mkdir(parents=True, exist_ok=True)
            self.snippet_file.write_text(content, encoding="utf-8", newline="")
        except OSError as e:
            raise SnippetIOError(f"Failed to write snippet file {self.snippet_file}: {e}") from e

        self.console.print("Download success")
        return SyncResult(PULLED, "Download success")


def run_sync(
    settings: Settings,
    console: Optional[Console] = None,
    client_factory: Callable[[Settings], RemoteClient] = create_client,
) -> SyncResult:
    """
    Build the store and client from settings and run one auto sync.

    Raises:
        TokenError: If no token is configured
        RemoteError: With phase "init" if the client cannot be created
    """
    store = SnippetStore.from_settings(settings)
    client = client_factory(settings)
    return SyncManager(store, client, console=console).auto_sync()
