"""Dropbox API v2 client.

Three request shapes are used by the API:

* RPC calls: JSON body in, JSON body out (``request``).
* Content downloads: arguments in the ``Dropbox-API-Arg`` header, file bytes
  out (``download_request``).
* Content uploads: arguments in the header, raw bytes in, JSON out
  (``upload_request``).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from .errors import InputError, ParseError, make_api_error, normalize_error, error_message, parse_error_body
from .http import TIMEOUT, Response, Transport

API_URL = "https://api.dropboxapi.com/2"
CONTENT_URL = "https://content.dropboxapi.com/2"

UPDATE_POLICIES = ("overwrite", "update", "prepend")
EXPORT_FORMATS = ("markdown", "html")
IMPORT_FORMATS = ("markdown", "html", "plain_text")


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputError(f"{name} is required")


def _api_arg(arg: Dict[str, Any]) -> str:
    # header values must be ASCII, non-ASCII paths are escaped
    return json.dumps(arg, ensure_ascii=True)


class DropboxClient:
    """One method per API operation used by the CLI."""

    def __init__(self, transport: Transport, *, api_url: str = API_URL, content_url: str = CONTENT_URL):
        self.transport = transport
        self.api_url = api_url.rstrip("/")
        self.content_url = content_url.rstrip("/")
        self.timeout = TIMEOUT

    # --- request shapes -------------------------------------------------

    def request(self, endpoint: str, body: Dict[str, Any] | None) -> Dict[str, Any]:
        """POST an RPC call and return the decoded JSON result."""
        headers: Dict[str, str] = {}
        data = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            data = json.dumps(body).encode("utf-8")
        resp = self.transport.send(
            self.api_url + endpoint, method="POST", headers=headers, body=data, timeout=self.timeout
        )
        text = resp.text()
        if not resp.ok:
            raise normalize_error(text, resp.status, "API request failed")
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError:
            raise ParseError(f"Invalid JSON in response from {endpoint}", resp.status, {"error": text}) from None

    def download_request(self, endpoint: str, api_arg: Dict[str, Any], *, stream: bool = False) -> Response:
        """POST a content download and return the raw :class:`Response`."""
        resp = self.transport.send(
            self.content_url + endpoint,
            method="POST",
            headers={"Dropbox-API-Arg": _api_arg(api_arg)},
            timeout=self.timeout,
            stream=stream,
        )
        if not resp.ok:
            raise normalize_error(resp.text(), resp.status, "Download failed")
        return resp

    def upload_request(self, endpoint: str, api_arg: Dict[str, Any], content: bytes | str) -> Dict[str, Any]:
        """POST raw *content* with header arguments and return the JSON result.

        The body is decoded before the status is checked because upload
        errors use the same envelope as successful results.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        resp = self.transport.send(
            self.api_url + endpoint,
            method="POST",
            headers={
                "Dropbox-API-Arg": _api_arg(api_arg),
                "Content-Type": "application/octet-stream",
            },
            body=content,
            timeout=self.timeout,
        )
        text = resp.text()
        data = parse_error_body(text)
        if not resp.ok:
            raise make_api_error(error_message(data, text, "Upload failed"), resp.status, data)
        return data

    # --- account / files ------------------------------------------------

    def get_current_account(self) -> Dict[str, Any]:
        return self.request("/users/get_current_account", None)

    def list_folder(
        self,
        path: str = "",
        *,
        recursive: bool = False,
        limit: int = 100,
        include_media_info: bool = False,
        include_deleted: bool = False,
    ) -> Dict[str, Any]:
        """List one page of a folder; ``cursor`` in the result continues it."""
        return self.request("/files/list_folder", {
            "path": path or "",
            "recursive": bool(recursive),
            "include_media_info": bool(include_media_info),
            "include_deleted": bool(include_deleted),
            "include_has_explicit_shared_members": False,
            "include_mounted_folders": True,
            "limit": limit or 100,
        })

    def list_folder_continue(self, cursor: str) -> Dict[str, Any]:
        _require(cursor, "Cursor")
        return self.request("/files/list_folder/continue", {"cursor": cursor})

    def search(
        self,
        query: str,
        *,
        max_results: int = 20,
        path: str | None = None,
        file_extensions: List[str] | None = None,
        file_categories: List[str] | None = None,
    ) -> Dict[str, Any]:
        _require(query, "Search query")
        options: Dict[str, Any] = {
            "max_results": max_results or 20,
            "file_status": "active",
        }
        if path:
            options["path"] = path
        if file_extensions:
            options["file_extensions"] = list(file_extensions)
        if file_categories:
            options["file_categories"] = list(file_categories)
        return self.request("/files/search_v2", {"query": query, "options": options})

    def search_continue(self, cursor: str) -> Dict[str, Any]:
        _require(cursor, "Cursor")
        return self.request("/files/search/continue_v2", {"cursor": cursor})

    def get_metadata(self, path: str) -> Dict[str, Any]:
        _require(path, "Path")
        return self.request("/files/get_metadata", {"path": path, "include_media_info": True})

    def download_file(self, path: str, *, stream: bool = False) -> Response:
        """Download a file; the caller reads text or bytes from the response."""
        _require(path, "Path")
        return self.download_request("/files/download", {"path": path}, stream=stream)

    def move(self, from_path: str, to_path: str) -> Dict[str, Any]:
        _require(from_path, "Source path")
        _require(to_path, "Destination path")
        return self.request("/files/move_v2", {
            "from_path": from_path,
            "to_path": to_path,
            "allow_shared_folder": True,
            "autorename": False,
        })

    # --- Paper documents ------------------------------------------------

    def list_paper_docs(self, path: str = "") -> Dict[str, Any]:
        return self.search(".paper", max_results=100, path=path or None, file_extensions=["paper"])

    def search_paper_docs(self, query: str, *, max_results: int = 20, path: str | None = None) -> Dict[str, Any]:
        return self.search(query, max_results=max_results, path=path, file_extensions=["paper"])

    def export_paper_doc(self, path: str, export_format: str = "markdown") -> str:
        """Return the document body converted to *export_format*."""
        _require(path, "Paper doc path")
        resp = self.download_request("/files/export", {
            "path": path,
            "export_format": export_format or "markdown",
        })
        return resp.text()

    def create_paper_doc(self, path: str, content: bytes | str, import_format: str = "markdown") -> Dict[str, Any]:
        _require(path, "Paper doc path")
        return self.upload_request("/files/paper/create", {
            "path": path,
            "import_format": import_format or "markdown",
        }, content)

    def update_paper_doc(
        self,
        path: str,
        content: bytes | str,
        import_format: str = "markdown",
        update_policy: str = "overwrite",
        paper_revision: Optional[int] = None,
    ) -> Dict[str, Any]:
        _require(path, "Paper doc path")
        arg: Dict[str, Any] = {
            "path": path,
            "import_format": import_format or "markdown",
            "doc_update_policy": update_policy or "overwrite",
        }
        if paper_revision is not None:
            arg["paper_revision"] = paper_revision
        return self.upload_request("/files/paper/update", arg, content)

    # --- sharing --------------------------------------------------------

    def list_shared_links(self, path: str) -> Dict[str, Any]:
        _require(path, "Path")
        return self.request("/sharing/list_shared_links", {"path": path, "direct_only": True})

    def create_shared_link(self, path: str) -> Dict[str, Any]:
        _require(path, "Path")
        return self.request("/sharing/create_shared_link_with_settings", {
            "path": path,
            "settings": {"requested_visibility": "public"},
        })
