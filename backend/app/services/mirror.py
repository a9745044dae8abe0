from __future__ import annotations

from collections import deque
from datetime import datetime, timezone
from threading import Lock

import httpx

from app.core.logging import get_logger
from app.services.errors import UpstreamMirrorError
from app.services.models import MirrorFailure, UploadResult


_logger = get_logger(__name__)
_API_VERSION = "7"


class MirrorFailureLog:
    """Bounded record of recent mirror failures for operators to poll."""

    def __init__(self, capacity: int = 100) -> None:
        self._entries: deque[MirrorFailure] = deque(maxlen=capacity)
        self._lock = Lock()
        self.total = 0

    def record(self, key: str, error: str) -> MirrorFailure:
        entry = MirrorFailure(key=key, error=error, occurred_at=datetime.now(timezone.utc))
        with self._lock:
            self._entries.append(entry)
            self.total += 1
        return entry

    def recent(self) -> list[MirrorFailure]:
        with self._lock:
            return list(reversed(self._entries))


class BlobMirror:
    """Copies locally stored media to a public blob store."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @staticmethod
    def blob_key(result: UploadResult) -> str:
        return f"media/{result.relative_path}"

    async def promote(self, result: UploadResult, data: bytes) -> UploadResult:
        """
        Upload ``data`` under the result's key and return the result with its
        URL replaced by the public blob URL.
        """
        key = self.blob_key(result)
        headers = {
            "Authorization": f"Bearer {self._token}",
            "x-api-version": _API_VERSION,
            "x-content-type": result.mime_type,
            "x-add-random-suffix": "0",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.put(
                    f"{self._api_url}/{key}", content=data, headers=headers
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamMirrorError(str(exc) or type(exc).__name__) from exc

        url = payload.get("url") if isinstance(payload, dict) else None
        if not url:
            raise UpstreamMirrorError("Blob response did not include a URL")

        _logger.info("Mirrored upload", key=key, size=len(data))
        return result.with_url(url)
