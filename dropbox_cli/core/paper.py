"""Paper document operations built on top of :class:`DropboxClient`.

``files/paper/create`` refuses to create documents in some shared
locations and answers with ``invalid_file_extension``.  The document is then
created at the root of the user's Dropbox under the same name and moved to
the requested location.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .client import UPDATE_POLICIES, DropboxClient
from .errors import ApiError, InputError

INVALID_FILE_EXTENSION = "invalid_file_extension"


@dataclass
class DocumentResult:
    """Outcome of a create/update call with the final document path."""

    result_path: str
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data["result_path"] = self.result_path
        return data


def root_path_for(path: str) -> str:
    """Return ``/<filename>`` for *path*."""
    name = posixpath.basename(path.rstrip("/"))
    if not name:
        raise InputError(f"Cannot derive a file name from path: {path!r}")
    return "/" + name


def create_document(
    client: DropboxClient,
    path: str,
    content: bytes | str,
    import_format: str = "markdown",
) -> DocumentResult:
    """Create a Paper document at *path*, relocating it when the API insists."""
    try:
        raw = client.create_paper_doc(path, content, import_format)
    except ApiError as e:
        if e.tag != INVALID_FILE_EXTENSION:
            raise
        temp_path = root_path_for(path)
        if temp_path == path:
            raise
        raw = client.create_paper_doc(temp_path, content, import_format)
        moved = client.move(temp_path, path)
        # the create result still names the temporary location
        final_path = (moved.get("metadata") or {}).get("path_display") or path
        raw = dict(raw)
        raw["result_path"] = final_path
        return DocumentResult(final_path, raw)
    return DocumentResult(raw.get("result_path") or path, raw)


def update_document(
    client: DropboxClient,
    path: str,
    content: bytes | str,
    import_format: str = "markdown",
    policy: str = "overwrite",
    revision: Optional[int] = None,
) -> DocumentResult:
    """Overwrite, append to (``update``) or prepend to an existing document.

    ``update`` and ``prepend`` need the current ``paper_revision``.  Without
    one the call is still sent and the API's error is raised unchanged.
    """
    if policy not in UPDATE_POLICIES:
        raise InputError(f"Unknown update policy {policy!r}; expected one of: {', '.join(UPDATE_POLICIES)}")
    raw = client.update_paper_doc(path, content, import_format, policy, revision)
    return DocumentResult(raw.get("result_path") or path, raw)
