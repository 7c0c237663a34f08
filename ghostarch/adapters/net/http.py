"""
HTTP adapter: reachability checks and downloads over ``urllib.request``.

Action params:
    operation (str): check | fetch | download
    url (str): Target URL.
    dest (str): Destination file for download.
    timeout (int): Timeout in seconds (default: 30).
"""

from __future__ import annotations

import hashlib
import logging
import time
import urllib.error
import urllib.request
from pathlib import Path

from ghostarch import __version__
from ghostarch.adapters.base import Adapter, ExecutionContext
from ghostarch.core.models.action import Receipt

logger = logging.getLogger(__name__)

_USER_AGENT = f"ghostarch/{__version__}"


def sha256_file(path: Path) -> str:
    """Hex SHA-256 digest of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


class HttpAdapter(Adapter):
    """Fetch URLs."""

    @property
    def name(self) -> str:
        return "http"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.param("operation", "")
        if operation not in ("check", "fetch", "download"):
            return False, f"Unknown http operation '{operation}'"
        url = context.param("url", "")
        if not url.startswith(("http://", "https://")):
            return False, f"Unsupported URL: {url!r}"
        if operation == "download" and not context.param("dest"):
            return False, "Missing required param: 'dest' for download"
        return True, ""

    def _request(self, url: str, method: str = "GET") -> urllib.request.Request:
        return urllib.request.Request(url, method=method, headers={"User-Agent": _USER_AGENT})

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.param("operation")
        url = context.param("url")
        timeout = context.param("timeout", 30)
        start = time.monotonic()

        try:
            if operation == "check":
                with urllib.request.urlopen(self._request(url, "HEAD"), timeout=timeout) as resp:
                    status = resp.status
                return Receipt.success(
                    adapter=self.name,
                    action_id=context.action.id,
                    output=f"{url} reachable ({status})",
                    metadata={
                        "url": url,
                        "status": status,
                        "latency_ms": int((time.monotonic() - start) * 1000),
                    },
                )

            with urllib.request.urlopen(self._request(url), timeout=timeout) as resp:
                body = resp.read()

            if operation == "fetch":
                return Receipt.success(
                    adapter=self.name,
                    action_id=context.action.id,
                    output=body.decode("utf-8", errors="replace"),
                    metadata={"url": url, "size": len(body)},
                )

            dest = Path(context.param("dest"))
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(body)
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=f"Downloaded {url} to {dest}",
                metadata={
                    "url": url,
                    "path": str(dest),
                    "size": len(body),
                    "sha256": sha256_file(dest),
                },
            )

        except urllib.error.HTTPError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"HTTP {e.code} for {url}",
                metadata={"url": url, "status": e.code},
            )
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"Cannot reach {url}: {e}",
                metadata={"url": url},
            )
