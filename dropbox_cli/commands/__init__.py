"""Command handlers for dropbox CLI."""

from .auth import cmd_auth_set, cmd_account
from .files import cmd_ls, cmd_search, cmd_info, cmd_link, cmd_download
from .paper import (
    cmd_paper,
    cmd_paper_search,
    cmd_read,
    cmd_paper_create,
    cmd_paper_update,
)

__all__ = [
    "cmd_auth_set",
    "cmd_account",
    "cmd_ls",
    "cmd_search",
    "cmd_info",
    "cmd_link",
    "cmd_download",
    "cmd_paper",
    "cmd_paper_search",
    "cmd_read",
    "cmd_paper_create",
    "cmd_paper_update",
]
