"""Authenticated HTTP transport for the CLI.

The implementation uses :mod:`urllib` from the Python standard library.  The
transport injects the bearer token, refreshes it when a refresh token is
configured and turns network failures into :class:`TransportError`.  HTTP
error statuses are *not* raised here: they come back as a :class:`Response`
with ``ok`` set to ``False`` so the API layer can decode the error body.
"""

from __future__ import annotations

import json
import socket
import sys
from typing import Any, Dict, Iterator, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .errors import ConfigError, TransportError, normalize_error

TOKEN_URL = "https://api.dropboxapi.com/oauth2/token"
# Seconds before a single call is abandoned
TIMEOUT = 30


class Response:
    """HTTP response with the body read lazily from the underlying stream."""

    def __init__(self, status: int, headers: Any, stream: Any):
        self.status = status
        self.ok = 200 <= status < 300
        self.headers = headers
        self._stream = stream
        self._body: Optional[bytes] = None

    @property
    def content(self) -> bytes:
        if self._body is None:
            try:
                self._body = self._stream.read() if self._stream is not None else b""
            finally:
                self.close()
        return self._body

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        if self.headers is None:
            return default
        return self.headers.get(name, default)

    def api_result(self) -> Dict[str, Any]:
        """Return the decoded ``Dropbox-API-Result`` header of content calls."""
        raw = self.header("Dropbox-API-Result")
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except ValueError:
            return {}

    def iter_chunks(self, size: int = 64 * 1024) -> Iterator[bytes]:
        """Yield the body in chunks of at most *size* bytes."""
        if self._body is not None:
            for i in range(0, len(self._body), size):
                yield self._body[i:i + size]
            return
        try:
            while True:
                try:
                    chunk = self._stream.read(size)
                except (socket.timeout, TimeoutError) as e:
                    raise TransportError(f"Timed out while reading response: {e}") from e
                if not chunk:
                    break
                yield chunk
        finally:
            self._body = b""
            self.close()

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None and hasattr(stream, "close"):
            stream.close()


class Transport:
    """Send requests with Dropbox credentials attached.

    Either an ``access_token`` or a ``refresh_token`` plus ``app_key`` must be
    given.  With refresh credentials the transport fetches an access token on
    first use and refreshes it once when a call comes back with 401.
    """

    def __init__(
        self,
        access_token: str | None = None,
        *,
        refresh_token: str | None = None,
        app_key: str | None = None,
        app_secret: str | None = None,
        verbose: bool = False,
    ):
        if not access_token and not (refresh_token and app_key):
            raise ConfigError(
                "Missing Dropbox credentials. Run: dropbox auth set --token <ACCESS_TOKEN> "
                "or set DROPBOX_ACCESS_TOKEN"
            )
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.app_key = app_key
        self.app_secret = app_secret
        self.verbose = verbose

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token and self.app_key)

    def send(
        self,
        url: str,
        *,
        method: str = "POST",
        headers: Dict[str, str] | None = None,
        body: bytes | None = None,
        timeout: float = TIMEOUT,
        stream: bool = False,
    ) -> Response:
        """Perform a request and return its :class:`Response`."""
        if not self.access_token:
            self.refresh()
        resp = self._send_once(url, method, headers, body, timeout, stream)
        if resp.status == 401 and self.can_refresh:
            resp.close()
            self.refresh()
            resp = self._send_once(url, method, headers, body, timeout, stream)
        return resp

    def refresh(self) -> str:
        """Exchange the refresh token for a new access token."""
        if not self.can_refresh:
            raise ConfigError("Cannot refresh the access token: refresh token and app key are required")
        form = {
            "grant_type": "refresh_token",
            "refresh_token": self.refresh_token,
            "client_id": self.app_key,
        }
        if self.app_secret:
            form["client_secret"] = self.app_secret
        req = Request(
            url=TOKEN_URL,
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data=urlencode(form).encode("utf-8"),
        )
        resp = self._open(req, TIMEOUT, stream=False)
        text = resp.text()
        if not resp.ok:
            raise normalize_error(text, resp.status, "Token refresh failed")
        try:
            token = json.loads(text).get("access_token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            raise normalize_error(text, resp.status, "Token refresh failed")
        self.access_token = token
        return token

    def _send_once(self, url, method, headers, body, timeout, stream) -> Response:
        all_headers = dict(headers or {})
        all_headers["Authorization"] = f"Bearer {self.access_token}"
        req = Request(url=url, method=method.upper(), headers=all_headers, data=body)
        return self._open(req, timeout, stream=stream)

    def _open(self, req: Request, timeout: float, *, stream: bool) -> Response:
        if self.verbose:
            print(f"{req.get_method()} {req.full_url}", file=sys.stderr)
        try:
            raw = urlopen(req, timeout=timeout)
        except HTTPError as e:
            # error statuses still carry a body worth decoding
            resp = Response(e.code, e.headers, e)
        except URLError as e:
            if isinstance(e.reason, (socket.timeout, TimeoutError)):
                raise TransportError(f"Request to {req.full_url} timed out after {timeout:g}s") from e
            raise TransportError(f"Network error: {e.reason}") from e
        except (socket.timeout, TimeoutError) as e:
            raise TransportError(f"Request to {req.full_url} timed out after {timeout:g}s") from e
        else:
            resp = Response(raw.status, raw.headers, raw)
        if not stream:
            try:
                resp.content  # read now so the timeout applies to the body too
            except (socket.timeout, TimeoutError) as e:
                raise TransportError(f"Request to {req.full_url} timed out after {timeout:g}s") from e
        return resp
