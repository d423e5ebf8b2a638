"""
Round-robin rotation over the configured Clash of Clans API keys.
"""

import threading
from typing import List, Sequence

from shared.errors import StartupConfigError
from shared.logging import get_logger, mask_secret


class CredentialRotator:
    """Hands out API keys in configured order, wrapping around."""

    def __init__(self, credentials: Sequence[str], rotate: bool = True):
        if not credentials:
            raise StartupConfigError(
                "No Clash of Clans API key configured",
                details="Set COC_API_KEY or COC_API_KEYS",
            )
        self._credentials: List[str] = list(credentials)
        self._rotate = rotate
        self._index = 0
        self._lock = threading.Lock()
        self.logger = get_logger("coc-proxy.credentials")
        self.logger.info(
            "Credentials loaded",
            count=len(self._credentials),
            rotation=self.rotating,
            keys=[mask_secret(key) for key in self._credentials],
        )

    @property
    def rotating(self) -> bool:
        return self._rotate and len(self._credentials) > 1

    def next(self) -> str:
        """Return the credential for the next upstream call."""
        if not self.rotating:
            return self._credentials[0]
        with self._lock:
            credential = self._credentials[self._index]
            self._index = (self._index + 1) % len(self._credentials)
        return credential

    def __len__(self) -> int:
        return len(self._credentials)
