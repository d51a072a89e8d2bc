"""Command line entry point for dropbox CLI."""

from __future__ import annotations

import argparse
import json
import sys

from dropbox_cli import __version__
from dropbox_cli.core import EXPORT_FORMATS, IMPORT_FORMATS, UPDATE_POLICIES, DropboxError
from dropbox_cli.commands import (
    cmd_auth_set,
    cmd_account,
    cmd_ls,
    cmd_search,
    cmd_info,
    cmd_link,
    cmd_download,
    cmd_paper,
    cmd_paper_search,
    cmd_read,
    cmd_paper_create,
    cmd_paper_update,
)


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(1)


def _add_output_options(p: argparse.ArgumentParser, default=False) -> None:
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--summary", action="store_true", default=default, help="Human-readable output")
    mode.add_argument("--json", dest="summary", action="store_false", default=default, help="Raw JSON output (default)")
    p.add_argument("-v", "--verbose", action="store_true", default=default, help="Print each request to stderr")


def _output_options() -> argparse.ArgumentParser:
    # accepted after the verb too; suppressed defaults keep the global value
    common = argparse.ArgumentParser(add_help=False)
    _add_output_options(common, default=argparse.SUPPRESS)
    return common


def _content_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("path", nargs="?", help="Paper doc path, e.g. /Notes/New.paper")
    p.add_argument("-c", "--content", help="Document content (inline)")
    p.add_argument("-i", "--input", help="Read content from a local file ('-' for stdin)")
    p.add_argument("-f", "--format", default="markdown", choices=IMPORT_FORMATS, help="Import format")


def build_parser() -> argparse.ArgumentParser:
    common = _output_options()
    parser = _Parser(prog="dropbox", description="Access Dropbox files, folders and Paper documents")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_output_options(parser)
    sub = parser.add_subparsers(dest="cmd", parser_class=_Parser)

    p_help = sub.add_parser("help", help="Show this help")
    p_help.set_defaults(func=None)

    # auth
    p_auth = sub.add_parser("auth", help="Authentication")
    p_auth.set_defaults(help_parser=p_auth)
    sub_auth = p_auth.add_subparsers(dest="auth_cmd", parser_class=_Parser)
    p_auth_set = sub_auth.add_parser("set", help="Save credentials to ~/.dropbox-cli.json")
    p_auth_set.add_argument("--token", help="Access token")
    p_auth_set.add_argument("--refresh-token", help="Refresh token (used with --app-key)")
    p_auth_set.add_argument("--app-key", help="App key for token refresh")
    p_auth_set.add_argument("--app-secret", help="App secret for token refresh")
    p_auth_set.set_defaults(func=cmd_auth_set)

    p_account = sub.add_parser("account", parents=[common], help="Get current account info")
    p_account.set_defaults(func=cmd_account)

    # files
    p_ls = sub.add_parser("ls", parents=[common], help="List folder contents")
    p_ls.add_argument("path", nargs="?", default="", help="Folder path (default: root)")
    p_ls.add_argument("-r", "--recursive", action="store_true", help="List recursively")
    p_ls.add_argument("-n", "--limit", type=int, default=100, help="Maximum results (default: 100)")
    p_ls.add_argument("--cursor", help="Continue a previous listing")
    p_ls.set_defaults(func=cmd_ls)

    p_search = sub.add_parser("search", parents=[common], help="Search files and folders")
    p_search.add_argument("query", nargs="?")
    p_search.add_argument("-n", "--limit", "--max", type=int, default=20, help="Maximum results (default: 20)")
    p_search.add_argument("-p", "--path", help="Limit search to a specific path")
    p_search.add_argument("-e", "--ext", help="Filter by file extensions (comma separated)")
    p_search.add_argument("--category", help="Filter by file categories (comma separated)")
    p_search.add_argument("--cursor", help="Continue a previous search")
    p_search.set_defaults(func=cmd_search)

    p_info = sub.add_parser("info", parents=[common], help="Get file/folder metadata")
    p_info.add_argument("path", nargs="?")
    p_info.set_defaults(func=cmd_info)

    p_link = sub.add_parser("link", parents=[common], help="Get or create shared link")
    p_link.add_argument("path", nargs="?")
    p_link.set_defaults(func=cmd_link)

    p_download = sub.add_parser("download", parents=[common], help="Download a file")
    p_download.add_argument("path", nargs="?")
    p_download.add_argument("-o", "--output", help="Save downloaded file to disk")
    p_download.add_argument("--pick", action="store_true", help="Browse folders to pick the file")
    p_download.set_defaults(func=cmd_download)

    # paper
    p_paper = sub.add_parser("paper", parents=[common], help="List Paper documents")
    p_paper.add_argument("path", nargs="?", default="")
    p_paper.set_defaults(func=cmd_paper)

    p_paper_search = sub.add_parser("paper-search", parents=[common], help="Search Paper documents")
    p_paper_search.add_argument("query", nargs="?")
    p_paper_search.add_argument("-n", "--limit", "--max", type=int, default=20, help="Maximum results (default: 20)")
    p_paper_search.add_argument("-p", "--path", help="Limit search to a specific path")
    p_paper_search.set_defaults(func=cmd_paper_search)

    p_read = sub.add_parser("read", parents=[common], help="Read Paper document content")
    p_read.add_argument("path", nargs="?")
    p_read.add_argument("-f", "--format", default="markdown", choices=EXPORT_FORMATS, help="Export format")
    p_read.add_argument("--pick", action="store_true", help="Pick the document interactively")
    p_read.set_defaults(func=cmd_read)

    p_create = sub.add_parser("paper-create", parents=[common], help="Create a new Paper document")
    _content_options(p_create)
    p_create.set_defaults(func=cmd_paper_create)

    p_update = sub.add_parser("paper-update", parents=[common], help="Update an existing Paper document")
    _content_options(p_update)
    p_update.add_argument("--policy", default="overwrite", choices=UPDATE_POLICIES, help="Update policy")
    p_update.add_argument("--revision", type=int, help="Current paper_revision (needed by update/prepend)")
    p_update.set_defaults(func=cmd_paper_update)

    return parser


def _report_error(err: DropboxError, summary: bool) -> None:
    if summary:
        print(f"Dropbox Error: {err.message}", file=sys.stderr)
    else:
        print(json.dumps(err.to_dict(), ensure_ascii=False, indent=2), file=sys.stderr)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "func", None) is None:
        (getattr(args, "help_parser", None) or parser).print_help()
        return 0

    try:
        args.func(args)
    except DropboxError as e:
        _report_error(e, getattr(args, "summary", False))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
