"""
Access token storage using the system credential manager.

Uses the keyring library for cross-platform secure storage.
Falls back to a token file if no keyring backend is usable.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import keyring
from keyring.errors import KeyringError


logger = logging.getLogger(__name__)


class TokenManager:
    """
    Manage the access token of one remote backend.

    Priority:
    1. Environment variable (e.g. SNIPSYNC_GITHUB_TOKEN)
    2. System keyring
    3. Token file (fallback)
    """

    SERVICE_NAME = "snipsync"
    ENV_VARS = {
        "gist": "SNIPSYNC_GITHUB_TOKEN",
        "ghe": "SNIPSYNC_GHE_TOKEN",
        "gitlab": "SNIPSYNC_GITLAB_TOKEN",
    }

    def __init__(self, backend: str = "gist", config_dir: Optional[Path] = None):
        """
        Initialize token manager.

        Args:
            backend: Backend name ("gist", "ghe" or "gitlab")
            config_dir: Directory for the fallback token file (default: ~/.config/snipsync)
        """
        if backend not in self.ENV_VARS:
            raise ValueError(f"Unknown backend: {backend}")
        self.backend = backend
        self.env_var = self.ENV_VARS[backend]
        self.username = f"{backend}-token"
        self.config_dir = config_dir or Path.home() / ".config" / "snipsync"
        self.token_file = self.config_dir / f"{backend}_token.txt"

    def get_token(self) -> Optional[str]:
        """
        Get the token from the first source that has one.

        Returns:
            Token or None if not found
        """
        token = os.getenv(self.env_var)
        if token:
            return token

        try:
            token = keyring.get_password(self.SERVICE_NAME, self.username)
            if token:
                return token
        except KeyringError as e:
            logger.debug("Keyring lookup failed, trying token file: %s", e)

        if self.token_file.exists():
            return self.token_file.read_text().strip() or None

        return None

    def set_token(self, token: str) -> str:
        """
        Store the token, preferring the keyring.

        Args:
            token: Access token

        Returns:
            Human-readable storage location

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("Token cannot be empty")

        try:
            keyring.set_password(self.SERVICE_NAME, self.username, token)
            if self.token_file.exists():
                self.token_file.unlink()
            return self.get_storage_location()
        except KeyringError as e:
            logger.warning("Could not store token in keyring (%s), falling back to %s", e, self.token_file)

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(token)
        self.token_file.chmod(0o600)  # rw-------
        return self.get_storage_location()

    def get_storage_location(self) -> str:
        """
        Get description of where the token is stored.

        Returns:
            Human-readable storage location
        """
        if os.getenv(self.env_var):
            return f"Environment variable: {self.env_var}"

        try:
            if keyring.get_password(self.SERVICE_NAME, self.username):
                return f"System keyring ({keyring.get_keyring().__class__.__name__})"
        except KeyringError:
            pass

        if self.token_file.exists():
            return f"Token file: {self.token_file}"

        return "Not configured"
