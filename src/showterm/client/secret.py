"""
Shared secret storage for Showterm.

The secret proves ownership of uploaded sessions so they can be deleted
later. It is generated once per user and reused from then on.
"""

import logging
import secrets
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SECRET_BYTES = 16


class SecretStore:
    """
    File-backed per-user shared secret.

    Creation is not locked: if two processes create the file at once the
    last write wins, and both return what they read back.
    """

    def __init__(self, path: Path):
        """
        Initialize the secret store.

        Args:
            path: File holding the secret (e.g. ~/.showterm)
        """
        self.path = Path(path)
        self._secret: Optional[str] = None

    def get_or_create(self) -> str:
        """
        Return the shared secret, creating it on first use.

        Returns:
            The 32 hex character secret as stored on disk, whitespace trimmed
        """
        if self._secret is None:
            if not self.path.exists():
                logger.info(f"Creating shared secret at {self.path}")
                self.path.write_text(secrets.token_hex(SECRET_BYTES))
            self._secret = self.path.read_text().strip()
        return self._secret
