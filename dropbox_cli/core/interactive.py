"""Interactive helpers using InquirerPy.

``read --pick`` and ``download --pick`` use these to choose a path instead
of typing it.  Only one page of each listing is shown.
"""

from __future__ import annotations

import posixpath
import sys
from typing import Any, Dict, List, Optional

from InquirerPy import inquirer

from .client import DropboxClient
from .errors import InputError
from .utils import match_metadata


def _execute(prompt):
    """Execute a prompt and handle ``Ctrl-C`` gracefully."""
    try:
        return prompt.execute()
    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        sys.exit(1)


def pick_paper_doc(client: DropboxClient, folder: str = "") -> str:
    """Let the user fuzzy-search the Paper documents under *folder*."""
    result = client.list_paper_docs(folder)
    choices: List[Dict[str, Any]] = []
    for match in result.get("matches") or []:
        meta = match_metadata(match)
        if not meta:
            continue
        path = meta.get("path_display") or meta.get("name")
        choices.append({"name": path, "value": path})
    if not choices:
        raise InputError("No Paper documents found to pick from")
    choices.sort(key=lambda c: c["name"].lower())

    prompt = inquirer.fuzzy(
        message="Pick a Paper document:",
        choices=choices,
        instruction="type to filter, Enter to select",
        height="90%",
    )
    return _execute(prompt)


def browse_for_file(client: DropboxClient, start: str = "") -> str:
    """Walk folders like a file manager and return the chosen file path."""
    current = start.rstrip("/")
    while True:
        listing = client.list_folder(current)
        entries = listing.get("entries") or []
        folders = sorted(
            (e for e in entries if e.get(".tag") == "folder"),
            key=lambda e: (e.get("name") or "").lower(),
        )
        files = sorted(
            (e for e in entries if e.get(".tag") == "file"),
            key=lambda e: (e.get("name") or "").lower(),
        )

        choices: List[Dict[str, Any]] = []
        if current:
            choices.append({"name": "..", "value": ("up", None)})
        for e in folders:
            choices.append({"name": f"{e.get('name')}/", "value": ("dir", e.get("path_display"))})
        for e in files:
            choices.append({"name": e.get("name"), "value": ("file", e.get("path_display"))})
        if listing.get("has_more"):
            choices.append({"name": "(more items not shown)", "value": ("noop", None)})
        if not choices:
            raise InputError(f"Folder is empty: {current or '/'}")

        prompt = inquirer.select(
            message=current or "/",
            choices=choices,
            instruction="↑/↓, Enter",
            height="90%",
        )
        kind, value = _execute(prompt)
        if kind == "file":
            return value
        if kind == "dir":
            current = value
        elif kind == "up":
            parent = posixpath.dirname(current)
            current = "" if parent == "/" else parent


def pick_path(client: DropboxClient, *, paper: bool, start: Optional[str] = None) -> str:
    if paper:
        return pick_paper_doc(client, start or "")
    return browse_for_file(client, start or "")
