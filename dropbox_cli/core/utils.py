"""Utility functions for dropbox CLI."""

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from tqdm import tqdm

from .errors import InputError
from .http import Response

__all__ = [
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


def format_size(size: Any) -> str:
    """Return *size* in bytes as ``"12 B"``, ``"1.5 KB"`` and so on."""
    if not size:
        return "0 B"
    value = float(size)
    units = ["B", "KB", "MB", "GB"]
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    if i == 0:
        return f"{value:.0f} {units[i]}"
    return f"{value:.1f} {units[i]}"


def format_date(value: Optional[str], *, with_time: bool = False) -> str:
    """Format an API timestamp such as ``2024-03-01T10:00:00Z``."""
    if not value:
        return ""
    try:
        dt = datetime.strptime(value, "%Y-%m-%dT%H:%M:%SZ")
    except ValueError:
        return value
    return dt.strftime("%Y-%m-%d %H:%M:%S" if with_time else "%Y-%m-%d")


def print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def match_metadata(match: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Unwrap the metadata of a ``search_v2`` match."""
    meta = match.get("metadata")
    if isinstance(meta, dict) and isinstance(meta.get("metadata"), dict):
        return meta["metadata"]
    return meta if isinstance(meta, dict) else None


def print_account_summary(result: Dict[str, Any]) -> None:
    print(f"Account: {(result.get('name') or {}).get('display_name') or 'Unknown'}")
    print(f"Email: {result.get('email') or 'Unknown'}")
    print(f"Account ID: {result.get('account_id') or 'Unknown'}")
    print(f"Country: {result.get('country') or 'Unknown'}")
    if result.get("team"):
        print(f"Team: {result['team'].get('name') or 'Unknown'}")


def print_folder_summary(result: Dict[str, Any]) -> None:
    entries = result.get("entries") or []
    if not entries:
        print("Folder is empty.")
        return

    print(f"Found {len(entries)} items:\n")
    folders = [e for e in entries if e.get(".tag") == "folder"]
    files = [e for e in entries if e.get(".tag") != "folder"]
    for f in folders:
        print(f"[DIR]  {f.get('name')}/")
    for f in files:
        size = format_size(f.get("size"))
        print(f"[FILE] {f.get('name')} ({size}) {format_date(f.get('client_modified'))}".rstrip())

    if result.get("has_more"):
        print("\n... more items available")
        print(f"Continue with: dropbox ls --cursor {result.get('cursor')}")


def print_search_summary(result: Dict[str, Any], query: str) -> None:
    matches = result.get("matches") or []
    if not matches:
        print(f'No results found for "{query}".')
        return

    print(f'Found {len(matches)} result(s) for "{query}":\n')
    for match in matches:
        meta = match_metadata(match)
        if not meta:
            continue
        path = meta.get("path_display") or meta.get("name")
        if meta.get(".tag") == "folder":
            print(f"[DIR]  {path}")
        else:
            print(f"[FILE] {path} ({format_size(meta.get('size'))})")

    if result.get("has_more"):
        print("\n... more results available")


def print_paper_docs_summary(result: Dict[str, Any]) -> None:
    matches = result.get("matches") or []
    if not matches:
        print("No Paper documents found.")
        return

    print(f"Found {len(matches)} Paper document(s):\n")
    for match in matches:
        meta = match_metadata(match)
        if not meta:
            continue
        path = meta.get("path_display") or meta.get("name")
        print(f"{path} ({format_date(meta.get('client_modified'))})")


def print_metadata_summary(result: Dict[str, Any]) -> None:
    print(f"Name: {result.get('name')}")
    print(f"Type: {result.get('.tag')}")
    print(f"Path: {result.get('path_display')}")
    if result.get("size") is not None:
        print(f"Size: {format_size(result['size'])}")
    if result.get("client_modified"):
        print(f"Modified: {format_date(result['client_modified'], with_time=True)}")
    if result.get("id"):
        print(f"ID: {result['id']}")


def read_content(content: Optional[str], input_path: Optional[str], stdin=None) -> str:
    """Return document content from ``--content``, ``--input`` or piped stdin.

    ``--input -`` reads stdin explicitly.  Without either option stdin is used
    only when it is not a terminal.
    """
    stdin = stdin if stdin is not None else sys.stdin
    if input_path == "-":
        return stdin.read()
    if input_path:
        try:
            return Path(input_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Cannot read input file {input_path}: {e}") from e
    if content is not None:
        return content
    if not stdin.isatty():
        data = stdin.read()
        if data:
            return data
    raise InputError("Either --content or --input is required (or pipe content on stdin)")


def save_response(resp: Response, output: str, *, total: Optional[int] = None) -> int:
    """Stream *resp* into *output* and return the number of bytes written.

    A file left incomplete by a failed transfer is removed.
    """
    written = 0
    target = Path(output)
    try:
        fh = open(target, "wb")
    except OSError as e:
        resp.close()
        raise InputError(f"Cannot write {output}: {e}") from e
    try:
        with fh, tqdm(total=total, unit="B", unit_scale=True, desc=target.name, file=sys.stderr) as bar:
            for chunk in resp.iter_chunks():
                fh.write(chunk)
                written += len(chunk)
                bar.update(len(chunk))
    except OSError as e:
        target.unlink(missing_ok=True)
        raise InputError(f"Cannot write {output}: {e}") from e
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    finally:
        resp.close()
    return written
