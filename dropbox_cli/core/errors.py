"""Error types and error-body normalisation for the Dropbox API.

Every failure that reaches the command layer is a :class:`DropboxError`.
API failures keep the HTTP status and the decoded error payload so that both
the ``--summary`` renderer and the JSON renderer can use them as-is.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

# Discriminators the document and link helpers know how to compensate for
RECOVERABLE_TAGS = frozenset({"invalid_file_extension", "shared_link_already_exists"})

DEFAULT_FALLBACK = "API request failed"


class DropboxError(Exception):
    """Base class for all errors raised by the CLI core."""

    def __init__(self, message: str):
        super().__init__(message or "Unknown error")
        self.message = message or "Unknown error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class TransportError(DropboxError):
    """Network failure or timeout before any HTTP response was received."""


class InputError(DropboxError):
    """Missing required argument or unreadable local input."""


class ConfigError(InputError):
    """No usable credentials were configured."""


class ApiError(DropboxError):
    """Non-success response from the API."""

    def __init__(self, message: str, status: Optional[int] = None, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status = status
        self.data = data if data is not None else {}

    @property
    def tag(self) -> Optional[str]:
        return error_tag(self.data)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "status": self.status, "data": self.data}


class RecoverableApiError(ApiError):
    """API error whose discriminator is listed in :data:`RECOVERABLE_TAGS`."""


class ParseError(ApiError):
    """Success status with a body that is not valid JSON."""


def parse_error_body(text: str) -> Dict[str, Any]:
    """Decode *text* as a JSON object, wrapping anything else as ``{"error": text}``."""
    try:
        data = json.loads(text)
    except ValueError:
        return {"error": text}
    if not isinstance(data, dict):
        return {"error": text}
    return data


def error_message(data: Dict[str, Any], text: str, fallback: str = DEFAULT_FALLBACK) -> str:
    """Pick the message for an error payload.

    First non-empty of ``error_summary``, ``error_description``,
    ``error.message``, the raw body text and *fallback*.
    """
    nested = data.get("error")
    candidates = [
        data.get("error_summary"),
        data.get("error_description"),
        nested.get("message") if isinstance(nested, dict) else None,
        text,
    ]
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return fallback


def error_tag(data: Dict[str, Any]) -> Optional[str]:
    """Return the discriminator of an error payload, if any."""
    if not isinstance(data, dict):
        return None
    nested = data.get("error")
    if isinstance(nested, dict) and nested.get(".tag"):
        return nested[".tag"]
    summary = data.get("error_summary")
    if isinstance(summary, str) and summary:
        head = summary.split("/", 1)[0].strip()
        return head or None
    return None


def make_api_error(message: str, status: Optional[int], data: Dict[str, Any]) -> ApiError:
    """Build an :class:`ApiError`, picking the recoverable subclass by tag."""
    if error_tag(data) in RECOVERABLE_TAGS:
        return RecoverableApiError(message, status, data)
    return ApiError(message, status, data)


def normalize_error(text: str, status: Optional[int], fallback: str = DEFAULT_FALLBACK) -> ApiError:
    """Turn a raw error body and HTTP status into an :class:`ApiError`."""
    text = text or ""
    data = parse_error_body(text)
    return make_api_error(error_message(data, text, fallback), status, data)
