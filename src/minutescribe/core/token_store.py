"""Durable storage for the session token"""

import json
from pathlib import Path
from typing import Optional
from loguru import logger

from .config import get_config_dir


TOKEN_KEY = "token"


def get_token_path() -> Path:
    """Get the session file path (next to config.json)"""
    return get_config_dir() / "session.json"


class TokenStore:
    """
    A single durable key-value slot holding the session token.
    Survives restarts until cleared by logout or an expired session.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path or get_token_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        """Read the persisted token, or None if there is none"""
        if not self._path.exists():
            return None

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read session file: {e}")
            return None

        token = data.get(TOKEN_KEY) if isinstance(data, dict) else None
        return token or None

    def save(self, token: str):
        """Persist the token, replacing any previous one"""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump({TOKEN_KEY: token}, f)
        logger.debug(f"Saved session token to {self._path}")

    def clear(self):
        """Forget the persisted token"""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove session file: {e}")
            return
        logger.debug("Cleared persisted session token")
