"""
Local storage for the session token.

The token issued by the hotel backend at login is kept on disk encrypted
with Fernet. The master key is auto-generated on first use and stored next
to the token with owner-only permissions.

Directory structure:
    {data_dir}/
        master.key      # Fernet encryption key (auto-generated)
        session.token   # Encrypted session payload
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

from notifsync.config import get_default_data_dir

logger = logging.getLogger(__name__)

ENV_TOKEN = "NOTIFSYNC_TOKEN"


class TokenStore:
    """
    Encrypted local storage for the bearer token.

    The ``NOTIFSYNC_TOKEN`` environment variable, when set, takes precedence
    over the stored file. Reads always go to the underlying source so that a
    logout performed by another process is observed on the next read.

    Usage:
        >>> store = TokenStore()
        >>> store.set_token("eyJhbGciOi...")
        >>> store.get_token()
        'eyJhbGciOi...'
        >>> store.clear_token()
    """

    MASTER_KEY_FILE = "master.key"
    TOKEN_FILE = "session.token"

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize token store.

        Args:
            base_dir: Storage directory (defaults to the platform data dir)
        """
        self.base_dir = base_dir or get_default_data_dir()
        self._fernet: Optional[Fernet] = None

    def _ensure_directories(self) -> None:
        """Create the storage directory with owner-only permissions."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        os.chmod(self.base_dir, 0o700)

    @property
    def master_key_path(self) -> Path:
        """Path to master key file."""
        return self.base_dir / self.MASTER_KEY_FILE

    @property
    def token_path(self) -> Path:
        """Path to the encrypted token file."""
        return self.base_dir / self.TOKEN_FILE

    def _load_or_create_master_key(self) -> bytes:
        self._ensure_directories()

        if self.master_key_path.exists():
            with open(self.master_key_path, "rb") as f:
                return f.read()

        key = Fernet.generate_key()
        with open(self.master_key_path, "wb") as f:
            f.write(key)
        os.chmod(self.master_key_path, 0o600)
        return key

    def _get_fernet(self) -> Fernet:
        """Get or create Fernet cipher."""
        if self._fernet is None:
            self._fernet = Fernet(self._load_or_create_master_key())
        return self._fernet

    def set_token(self, token: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """
        Store a session token.

        Args:
            token: Bearer token returned by the login endpoint
            metadata: Optional metadata to store alongside the token

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("token is required")

        self._ensure_directories()
        data = {
            "token": token,
            "metadata": metadata or {},
            "stored_at": datetime.now(timezone.utc).isoformat(),
        }
        encrypted = self._get_fernet().encrypt(json.dumps(data).encode("utf-8"))

        with open(self.token_path, "wb") as f:
            f.write(encrypted)
        os.chmod(self.token_path, 0o600)

    def _load_token_data(self) -> Optional[Dict[str, Any]]:
        if not self.token_path.exists():
            return None

        with open(self.token_path, "rb") as f:
            encrypted = f.read()

        try:
            decrypted = self._get_fernet().decrypt(encrypted)
            return json.loads(decrypted.decode("utf-8"))
        except (InvalidToken, ValueError) as e:
            logger.warning(f"Stored session token is unreadable: {e}")
            return None

    def get_token(self) -> Optional[str]:
        """
        Get the current token.

        Returns:
            The raw token string (not validated), or None if none is stored
        """
        env_token = os.environ.get(ENV_TOKEN)
        if env_token is not None:
            return env_token

        data = self._load_token_data()
        return data.get("token") if data else None

    def get_metadata(self) -> Optional[Dict[str, Any]]:
        """Metadata stored alongside the token, if any."""
        data = self._load_token_data()
        return data.get("metadata") if data else None

    def has_token(self) -> bool:
        """Check whether any token is available (env or file)."""
        return os.environ.get(ENV_TOKEN) is not None or self.token_path.exists()

    def clear_token(self) -> bool:
        """
        Remove the stored token.

        Returns:
            True if a token file was deleted, False if none existed
        """
        if self.token_path.exists():
            self.token_path.unlink()
            return True
        return False
