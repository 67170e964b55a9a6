"""Time-bounded render cache keyed by a fingerprint of the request."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple, Union

from .options import OutputFormat, RenderOptions
from .render import Artifact

logger = logging.getLogger(__name__)


class RenderCache:
    """Stores artifacts for ``ttl`` seconds and computes each key at most once at a time."""

    def __init__(
        self,
        ttl: float = 3600,
        prefix: str = "barcode_qrcode_",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self.prefix = prefix
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Artifact]] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def fingerprint(
        self,
        kind: str,
        target: str,
        payload: Union[str, bytes],
        fmt: Union[str, OutputFormat],
        options: RenderOptions,
    ) -> str:
        if isinstance(payload, bytes):
            payload_digest = hashlib.sha256(payload).hexdigest()
        else:
            payload_digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
        logo = options.load_logo() if options.has_logo else None
        document = {
            "kind": kind,
            "target": target,
            "payload": payload_digest,
            "format": OutputFormat.parse(fmt).value,
            "options": options.to_dict(),
            "logo": hashlib.sha256(logo).hexdigest() if logo else None,
        }
        encoded = json.dumps(document, sort_keys=True).encode("utf-8")
        return self.prefix + hashlib.sha256(encoded).hexdigest()

    def get(self, key: str) -> Optional[Artifact]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires, artifact = entry
            if expires <= self._clock():
                del self._entries[key]
                return None
            return artifact

    def get_or_create(self, key: str, factory: Callable[[], Artifact]) -> Artifact:
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit %s", key)
            return cached
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        try:
            with key_lock:
                # Another thread may have filled the entry while we waited.
                cached = self.get(key)
                if cached is not None:
                    return cached
                artifact = factory()
                with self._lock:
                    now = self._clock()
                    self._purge_expired(now)
                    self._entries[key] = (now + self.ttl, artifact)
        finally:
            with self._lock:
                self._key_locks.pop(key, None)
        logger.debug("Cache store %s (%d bytes)", key, len(artifact.data))
        return artifact

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires, _) in self._entries.items() if expires <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Cache dropped %d expired entries", len(expired))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for expires, _ in self._entries.values() if expires > now)
