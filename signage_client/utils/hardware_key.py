import hashlib
import socket
import uuid
from typing import Optional


class HardwareKey:
    """Per-display identifier sent with every XMDS request"""

    def __init__(self, override: Optional[str] = None):
        self._override = (override or "").strip()
        self._key: Optional[str] = None

    @property
    def key(self) -> str:
        if self._key is None:
            self._key = self._override or self._generate()
        return self._key

    @staticmethod
    def _generate() -> str:
        # Host name plus MAC address is stable across restarts on the same display
        seed = f"{socket.gethostname()}{uuid.getnode():012x}"
        return hashlib.md5(seed.encode("utf-8")).hexdigest().upper()

    def __str__(self) -> str:
        return self.key
