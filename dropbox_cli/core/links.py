"""Shared link lookup."""

from __future__ import annotations

from typing import Any, Dict

from .client import DropboxClient
from .errors import RecoverableApiError

SHARED_LINK_ALREADY_EXISTS = "shared_link_already_exists"


def existing_link_metadata(error: RecoverableApiError) -> Dict[str, Any] | None:
    nested = error.data.get("error")
    if not isinstance(nested, dict):
        return None
    exists = nested.get(SHARED_LINK_ALREADY_EXISTS)
    if not isinstance(exists, dict):
        return None
    return exists.get("metadata")


def get_shared_link(client: DropboxClient, path: str) -> Dict[str, Any]:
    """Return the first direct shared link of *path*, creating a public one if none exists."""
    links = client.list_shared_links(path).get("links") or []
    if links:
        return links[0]
    try:
        return client.create_shared_link(path)
    except RecoverableApiError as e:
        if e.tag != SHARED_LINK_ALREADY_EXISTS:
            raise
        # a link was created between the listing and our create call
        metadata = existing_link_metadata(e)
        if not metadata:
            raise
        return metadata
