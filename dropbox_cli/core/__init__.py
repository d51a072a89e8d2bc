"""Core utilities for dropbox CLI."""

from .errors import (
    DropboxError,
    TransportError,
    InputError,
    ConfigError,
    ApiError,
    RecoverableApiError,
    ParseError,
    normalize_error,
)
from .http import Response, Transport
from .config import CONFIG_PATH, load_config, save_config, get_transport, get_client
from .client import API_URL, CONTENT_URL, EXPORT_FORMATS, IMPORT_FORMATS, UPDATE_POLICIES, DropboxClient
from .paper import DocumentResult, create_document, update_document
from .links import get_shared_link
from .interactive import pick_path, pick_paper_doc, browse_for_file
from .utils import (
    format_size,
    format_date,
    print_json,
    match_metadata,
    print_account_summary,
    print_folder_summary,
    print_search_summary,
    print_paper_docs_summary,
    print_metadata_summary,
    read_content,
    save_response,
)

__all__ = [
    "DropboxError", "TransportError", "InputError", "ConfigError",
    "ApiError", "RecoverableApiError", "ParseError", "normalize_error",
    "Response", "Transport",
    "CONFIG_PATH", "load_config", "save_config", "get_transport", "get_client",
    "API_URL", "CONTENT_URL", "EXPORT_FORMATS", "IMPORT_FORMATS", "UPDATE_POLICIES", "DropboxClient",
    "DocumentResult", "create_document", "update_document",
    "get_shared_link",
    "pick_path", "pick_paper_doc", "browse_for_file",
    "format_size",
    "format_date",
    "print_json",
    "match_metadata",
    "print_account_summary",
    "print_folder_summary",
    "print_search_summary",
    "print_paper_docs_summary",
    "print_metadata_summary",
    "read_content",
    "save_response",
]
